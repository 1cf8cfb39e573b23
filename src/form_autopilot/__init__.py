"""
Form Autopilot: template-driven autofill for previously unseen web forms.

Live form fields are matched against user templates by alias, label and key,
a confidence-tiered policy chooses between confirming, mapping by hand or
interactively re-targeting, and the fill executor writes values in a way
reactive front-ends observe.
"""

__version__ = "0.1.0"
__author__ = "Form Autopilot Team"

from form_autopilot.core.models import FieldDescriptor, FillPlan, Route, Template, TemplateField
from form_autopilot.matching.engine import MatchingEngine
from form_autopilot.matching.policy import decide
from form_autopilot.fill.executor import FillExecutor
from form_autopilot.inspect.controller import InspectController
from form_autopilot.autofill.service import AutofillService

__all__ = [
    "FieldDescriptor",
    "FillPlan",
    "Route",
    "Template",
    "TemplateField",
    "MatchingEngine",
    "decide",
    "FillExecutor",
    "InspectController",
    "AutofillService",
]
