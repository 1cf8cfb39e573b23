"""Decision policy mapping aggregate confidence to an execution route."""

from typing import Optional

from form_autopilot.config import settings
from form_autopilot.core.models import Route


def decide(confidence: float, match_count: int, threshold: Optional[float] = None) -> Route:
    """
    Choose how a fill should proceed.

    No matches at all escalate straight to interactive selection. Otherwise the
    user confirms the candidate container when at least ``threshold`` of its
    fields matched, and maps fields by hand below that.
    """
    if threshold is None:
        threshold = settings.confirm_threshold
    if match_count <= 0:
        return Route.INSPECT
    if confidence >= threshold:
        return Route.CONFIRM
    return Route.MANUAL_MAP


def route_after_rejection() -> Route:
    """A rejected confirmation re-enters interactive selection with the same template."""
    return Route.INSPECT
