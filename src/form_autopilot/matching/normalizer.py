"""Text normalisation shared by matching and template authoring."""

import re
from typing import Optional, Set

from form_autopilot.config import settings

_NON_ALNUM_SPACE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_KEY_SEPARATORS = re.compile(r"[^a-z0-9]+")


def normalize(text: str) -> str:
    """Lower-case, keep only ASCII alphanumerics and whitespace, collapse whitespace."""
    if not text:
        return ""
    lowered = _NON_ALNUM_SPACE.sub("", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def extract_terms(text: str, min_length: Optional[int] = None) -> Set[str]:
    """Split the normalised text into terms, dropping short noise words like "of" or "id"."""
    if min_length is None:
        min_length = settings.min_term_length
    normalized = normalize(text)
    if not normalized:
        return set()
    return {term for term in normalized.split(" ") if len(term) >= min_length}


def slugify_key(label: str) -> str:
    """Generate a stable field key from a label: "First Name" -> "first_name"."""
    return _KEY_SEPARATORS.sub("_", (label or "").lower()).strip("_")
