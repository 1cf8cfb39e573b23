"""Autofill service: wires matching, routing, filling and inspecting together."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from playwright.async_api import Page

from form_autopilot.autofill.authoring import template_from_fields
from form_autopilot.browser.elements import PlaywrightElementResolver
from form_autopilot.browser.highlight import HighlightRenderer
from form_autopilot.browser.inspect_surface import PlaywrightInspectSurface
from form_autopilot.browser.scanner import PageScanner
from form_autopilot.config import settings
from form_autopilot.core.errors import (
    ScanError,
    TemplateNotFoundError,
    ZeroFieldsDetectedError,
)
from form_autopilot.core.models import (
    Decision,
    FieldDescriptor,
    FillPlan,
    FillPlanEntry,
    FillReport,
    InspectMode,
    Route,
    Template,
)
from form_autopilot.fill.executor import FillExecutor
from form_autopilot.inspect.controller import InspectController, InspectOutcome, InspectToken
from form_autopilot.matching.engine import MatchingEngine, MatchReport
from form_autopilot.matching.policy import decide, route_after_rejection
from form_autopilot.store.templates import FileTemplateStore
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PendingConfirmation:
    """A highlighted candidate container awaiting the user's accept or reject."""
    template: Template
    form_selector: str
    match_count: int
    total_fields: int
    decision: Decision

    @property
    def prompt(self) -> str:
        return f'Fill with "{self.template.name}"?'


@dataclass
class ManualMapping:
    """Live fields with a by-hand assignment of template field keys, empty by default."""
    template: Template
    fields: List[FieldDescriptor]
    container_selector: Optional[str] = None
    assignments: Dict[str, str] = field(default_factory=dict)

    def assign(self, selector: str, template_key: Optional[str]) -> None:
        """Assign a template field to a live field; a falsy key clears the assignment."""
        if not template_key:
            self.unassign(selector)
            return
        if not any(descriptor.selector == selector for descriptor in self.fields):
            raise KeyError(f"Unknown field selector: {selector}")
        if self.template.field_by_key(template_key) is None:
            raise KeyError(f"Unknown template field: {template_key}")
        self.assignments[selector] = template_key

    def unassign(self, selector: str) -> None:
        self.assignments.pop(selector, None)

    def to_plan(self) -> FillPlan:
        """Forced plan in live field order; assignments to empty values are skipped."""
        entries = []
        for descriptor in self.fields:
            key = self.assignments.get(descriptor.selector)
            if key is None:
                continue
            template_field = self.template.field_by_key(key)
            if template_field is None or not template_field.value:
                continue
            entries.append(FillPlanEntry(selector=descriptor.selector, value=template_field.value))
        return FillPlan(entries=entries)


@dataclass
class FillNowResult:
    """What a fill-now request led to."""
    route: Route
    decision: Decision
    form_selector: Optional[str] = None
    confirmation: Optional[PendingConfirmation] = None
    mapping: Optional[ManualMapping] = None
    inspect_token: Optional[InspectToken] = None


@dataclass
class InspectResolution:
    """Result of acting on a committed or cancelled inspect session."""
    outcome: InspectOutcome
    template: Optional[Template] = None
    report: Optional[FillReport] = None

    @property
    def cancelled(self) -> bool:
        return self.outcome.cancelled


class AutofillService:
    """
    UI-facing entry points of the autofill core.

    The service never issues two fills concurrently on its own; callers are
    expected to wait for one operation before starting the next.
    """

    def __init__(
        self,
        store: FileTemplateStore,
        scanner: PageScanner,
        executor: FillExecutor,
        highlighter: HighlightRenderer,
        inspector: InspectController,
        engine: Optional[MatchingEngine] = None,
        threshold: Optional[float] = None
    ):
        self.store = store
        self.scanner = scanner
        self.executor = executor
        self.highlighter = highlighter
        self.inspector = inspector
        self.engine = engine or MatchingEngine()
        self.threshold = settings.confirm_threshold if threshold is None else threshold
        self.logger = logger.bind(component="autofill_service")

    async def load_template(self, template_id: str) -> Template:
        outcome = await self.store.get_template(template_id)
        if not outcome.ok or outcome.template is None:
            raise TemplateNotFoundError(outcome.error or f"Template not found: {template_id}")
        return outcome.template

    def decide_report(self, report: MatchReport) -> Decision:
        """Pick the execution route for an already matched container."""
        return Decision(
            route=decide(report.confidence, report.match_count, self.threshold),
            candidates=report.candidates,
            confidence=report.confidence,
            match_count=report.match_count,
            total_fields=report.total_fields
        )

    def match_and_decide(self, fields: Sequence[FieldDescriptor], template: Template) -> Decision:
        """Match one container's fields and pick the execution route."""
        return self.decide_report(self.engine.match_fields(fields, template))

    async def execute_fill(self, plan: FillPlan, template_name: Optional[str] = None) -> FillReport:
        return await self.executor.execute(plan, template_name)

    async def fill_now(self, template: Union[str, Template]) -> FillNowResult:
        """
        Scan the page, choose the best form and act on the decided route.

        Args:
            template: Template or template id

        Returns:
            FillNowResult describing the pending confirmation, the manual
            mapping to complete, or the inspect session that was started
        """
        if isinstance(template, str):
            template = await self.load_template(template)

        scan = await self.scanner.scan_whole_forms()
        if not scan.ok:
            raise ScanError(scan.error or "Form scan failed")
        if not scan.forms:
            raise ZeroFieldsDetectedError()

        best = self.engine.select_best_form(scan.forms, template)
        decision = self.decide_report(best.report)
        route = decision.route
        self.logger.info(
            "Fill route decided",
            template=template.name,
            form_selector=best.form.selector,
            route=route.value,
            match_count=decision.match_count,
            total_fields=decision.total_fields
        )

        result = FillNowResult(route=route, decision=decision, form_selector=best.form.selector)
        if route == Route.CONFIRM:
            confirmation = PendingConfirmation(
                template=template,
                form_selector=best.form.selector,
                match_count=decision.match_count,
                total_fields=decision.total_fields,
                decision=decision
            )
            try:
                await self.highlighter.show_preview(confirmation.form_selector, confirmation.prompt)
            except Exception as e:
                self.logger.warning("Failed to highlight form", error=str(e))
            result.confirmation = confirmation
        elif route == Route.MANUAL_MAP:
            result.mapping = ManualMapping(
                template=template,
                fields=list(best.form.fields),
                container_selector=best.form.selector
            )
        else:
            result.inspect_token = await self.start_inspect(InspectMode.FILL, template)
        return result

    async def confirm_fill(self, confirmation: PendingConfirmation) -> FillReport:
        """Accept a confirmation: re-scan the container and fill it."""
        try:
            scan = await self.scanner.scan_container(confirmation.form_selector)
            if not scan.ok:
                raise ScanError(scan.error or "Could not get form fields", confirmation.form_selector)
            if not scan.fields:
                raise ZeroFieldsDetectedError(selector=confirmation.form_selector)
            return await self.fill_container(confirmation.template, scan.fields)
        finally:
            await self.highlighter.remove_preview()

    async def reject_fill(self, confirmation: PendingConfirmation) -> InspectToken:
        """Reject a confirmation and let the user pick another container for the same template."""
        await self.highlighter.remove_preview()
        route = route_after_rejection()
        self.logger.info("Confirmation rejected", route=route.value, template=confirmation.template.name)
        return await self.start_inspect(InspectMode.FILL, confirmation.template)

    async def cancel_confirmation(self, confirmation: PendingConfirmation) -> None:
        await self.highlighter.remove_preview()

    async def execute_manual_mapping(self, mapping: ManualMapping) -> FillReport:
        return await self.execute_fill(mapping.to_plan(), mapping.template.name)

    async def fill_container(self, template: Template, fields: Sequence[FieldDescriptor]) -> FillReport:
        """Match and fill a user-targeted container, bypassing the decision policy."""
        report = self.engine.match_fields(fields, template)
        plan = FillPlan.from_candidates(report.candidates)
        return await self.execute_fill(plan, template.name)

    async def start_inspect(self, mode: InspectMode, pending_template: Optional[Template] = None) -> InspectToken:
        return await self.inspector.start(mode, pending_template)

    async def stop_inspect(self) -> None:
        await self.inspector.stop()

    async def resolve_inspect(self, outcome: InspectOutcome) -> InspectResolution:
        """
        Act on a finished inspect session.

        Import mode yields an unsaved template seeded from the selected
        container; fill mode fills it with the pending template.
        """
        if not outcome.committed:
            return InspectResolution(outcome=outcome)

        scan = await self.scanner.scan_container(outcome.selector)
        if not scan.ok:
            raise ScanError(scan.error or "Could not get form fields", outcome.selector)
        if not scan.fields:
            raise ZeroFieldsDetectedError("No form fields found in the selected element.", outcome.selector)

        if outcome.token.mode == InspectMode.IMPORT:
            template = template_from_fields(scan.fields, scan.title, scan.page_url)
            self.logger.info("Template imported from page", fields=len(template.fields))
            return InspectResolution(outcome=outcome, template=template)

        if outcome.pending_template is None:
            return InspectResolution(outcome=outcome)
        report = await self.fill_container(outcome.pending_template, scan.fields)
        return InspectResolution(outcome=outcome, report=report)

    async def wait_for_inspect(self, token: InspectToken) -> InspectResolution:
        """Wait for a session to finish and act on it."""
        outcome = await self.inspector.wait(token)
        return await self.resolve_inspect(outcome)


def create_autofill_service(page: Page, store: Optional[FileTemplateStore] = None) -> AutofillService:
    """Wire every component against one Playwright page."""
    highlighter = HighlightRenderer(page)
    surface = PlaywrightInspectSurface(page, highlighter)
    inspector = InspectController(surface)
    surface.bind(inspector.handle_event)
    return AutofillService(
        store=store or FileTemplateStore(),
        scanner=PageScanner(page),
        executor=FillExecutor(PlaywrightElementResolver(page)),
        highlighter=highlighter,
        inspector=inspector
    )
