"""Best-effort fill executor: one independent attempt per plan entry."""

from typing import List, Optional

from form_autopilot.core.errors import AutofillError, NoActiveTargetError, OptionNotFoundError
from form_autopilot.core.models import FillPlan, FillPlanEntry, FillReport, FillResult
from form_autopilot.fill.elements import (
    EVENT_SEQUENCES,
    TRUTHY_TOGGLE_VALUES,
    ElementKind,
    ElementResolver,
    LiveElement,
    text_to_rich_markup,
)
from form_autopilot.utils.logging import get_logger, log_fill_plan

logger = get_logger(__name__)


class FillExecutor:
    """
    Mutates live elements according to a fill plan.

    Entries are filled sequentially in plan order. A failure on one entry is
    recorded in its FillResult and never stops the remaining entries.
    """

    def __init__(self, resolver: ElementResolver):
        """
        Initialize the fill executor.

        Args:
            resolver: Host capable of resolving selectors to live elements
        """
        self.resolver = resolver
        self.logger = logger.bind(component="fill_executor")

    async def execute(self, plan: FillPlan, template_name: Optional[str] = None) -> FillReport:
        """
        Execute every entry of a fill plan.

        Args:
            plan: Ordered (selector, value) pairs
            template_name: Optional template name used in the summary

        Returns:
            FillReport with per-field results and the filled/attempted counts
        """
        self.logger.info("Executing fill plan", **log_fill_plan(plan))

        results: List[FillResult] = []
        for entry in plan.entries:
            results.append(await self.fill_entry(entry))

        report = FillReport(
            filled=sum(1 for result in results if result.success),
            attempted=len(results),
            per_field=results,
            template_name=template_name
        )
        self.logger.info(
            "Fill plan executed",
            filled=report.filled,
            attempted=report.attempted,
            failed_selectors=[result.selector for result in report.failures]
        )
        return report

    async def fill_entry(self, entry: FillPlanEntry) -> FillResult:
        """Fill a single entry, converting any failure into a FillResult."""
        try:
            element = await self.resolver.resolve(entry.selector)
            if element is None:
                raise NoActiveTargetError(f"Element not found: {entry.selector}", entry.selector)
            kind = await element.kind()
            await self._apply(element, kind, entry.value)
        except AutofillError as e:
            self.logger.warning(
                "Field fill failed",
                selector=entry.selector,
                error=e.message,
                error_kind=e.kind
            )
            return FillResult(selector=entry.selector, success=False, error=e.message, error_kind=e.kind)
        except Exception as e:
            self.logger.error(
                "Field fill raised",
                selector=entry.selector,
                error=str(e),
                error_type=type(e).__name__
            )
            return FillResult(selector=entry.selector, success=False, error=str(e), error_kind="unexpected")

        self.logger.debug(
            "Field filled",
            selector=entry.selector,
            kind=kind.value,
            value_length=len(entry.value)
        )
        return FillResult(selector=entry.selector, success=True)

    async def _apply(self, element: LiveElement, kind: ElementKind, value: str) -> None:
        if kind == ElementKind.RICH_TEXT:
            await element.set_rich_text(text_to_rich_markup(value))
        elif kind == ElementKind.CHOICE:
            option_value = await self._find_option(element, value)
            if option_value is None:
                raise OptionNotFoundError("Option not found")
            await element.select_value(option_value)
        elif kind == ElementKind.TOGGLE:
            own_value = await element.value_attribute()
            await element.set_checked(value in TRUTHY_TOGGLE_VALUES or value == own_value)
        else:
            await element.set_value(value)

        for event in EVENT_SEQUENCES[kind]:
            await element.dispatch(event)

    async def _find_option(self, element: LiveElement, value: str) -> Optional[str]:
        target = value.lower()
        for option_value, option_text in await element.options():
            if option_value == value or option_text.strip().lower() == target:
                return option_value
        return None


def create_fill_executor(resolver: ElementResolver) -> FillExecutor:
    """Factory function to create a fill executor."""
    return FillExecutor(resolver)
