"""Error kinds raised or recorded by the autofill core."""

from typing import Optional


class AutofillError(Exception):
    """Base exception for Form Autopilot."""

    kind = "autofill_error"

    def __init__(self, message: str, selector: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.selector = selector


class NoActiveTargetError(AutofillError):
    """No live element resolves from a selector at fill time."""

    kind = "no_active_target"


class OptionNotFoundError(AutofillError):
    """A choice element has no option matching the target value."""

    kind = "option_not_found"


class ZeroFieldsDetectedError(AutofillError):
    """A scan returned no fillable elements."""

    kind = "zero_fields_detected"

    def __init__(self, message: str = "No form fields found", selector: Optional[str] = None):
        super().__init__(message, selector)


class SessionConflictError(AutofillError):
    """An inspect session is already active."""

    kind = "session_conflict"

    def __init__(self, message: str = "An inspect session is already active"):
        super().__init__(message)


class ScanError(AutofillError):
    """The page scanner reported a failure."""

    kind = "scan_error"


class TemplateNotFoundError(AutofillError):
    """The requested template does not exist in the store."""

    kind = "template_not_found"


class TemplateStoreError(AutofillError):
    """The template store rejected or failed an operation."""

    kind = "template_store_error"
