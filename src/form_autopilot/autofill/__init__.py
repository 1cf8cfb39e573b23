"""UI-facing autofill flows and template authoring."""

from form_autopilot.autofill.service import (
    AutofillService,
    FillNowResult,
    InspectResolution,
    ManualMapping,
    PendingConfirmation,
    create_autofill_service,
)

__all__ = [
    "AutofillService",
    "FillNowResult",
    "InspectResolution",
    "ManualMapping",
    "PendingConfirmation",
    "create_autofill_service",
]
