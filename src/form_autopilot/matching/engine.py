"""Field matching engine: pairs live form fields with template fields."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from form_autopilot.config import settings
from form_autopilot.core.models import (
    FieldDescriptor,
    FormContainer,
    MatchCandidate,
    Template,
    TemplateField,
)
from form_autopilot.matching.normalizer import extract_terms, normalize
from form_autopilot.utils.logging import get_logger, log_match_report

logger = get_logger(__name__)


def _contains_either_way(left: str, right: str) -> bool:
    # Empty strings never match.
    if not left or not right:
        return False
    return left in right or right in left


def _terms_overlap(alias_terms: Set[str], probe_terms: Set[str]) -> bool:
    for alias_term in alias_terms:
        for probe_term in probe_terms:
            if alias_term in probe_term or probe_term in alias_term:
                return True
    return False


@dataclass
class MatchReport:
    """Candidates for one container plus its aggregate confidence."""
    candidates: List[MatchCandidate]
    match_count: int
    total_fields: int
    selector: Optional[str] = None

    @property
    def confidence(self) -> float:
        if self.total_fields == 0:
            return 0.0
        return self.match_count / self.total_fields

    @property
    def fillable(self) -> List[MatchCandidate]:
        return [candidate for candidate in self.candidates if candidate.fillable]


@dataclass
class BestForm:
    """The container with the highest raw match count on a page."""
    form: FormContainer
    report: MatchReport
    evaluated: List[MatchReport] = field(default_factory=list)


class MatchingEngine:
    """
    Boolean alias/label/key matcher.

    A live field matches the first template field, in template order, for
    which any of the containment rules holds. There is no numeric score:
    ties are broken purely by template field order.
    """

    def __init__(self, min_term_length: Optional[int] = None):
        self.min_term_length = settings.min_term_length if min_term_length is None else min_term_length
        self.logger = logger.bind(component="matching_engine")

    def field_matches(self, descriptor: FieldDescriptor, template_field: TemplateField) -> bool:
        """Evaluate the matching predicate for one (live field, template field) pair."""
        probe = descriptor.probe
        probe_norm = normalize(probe)
        if not probe_norm:
            return False
        probe_terms = extract_terms(probe, self.min_term_length)
        return self._predicate(probe_norm, probe_terms, template_field)

    def _predicate(self, probe_norm: str, probe_terms: Set[str], template_field: TemplateField) -> bool:
        for alias in template_field.aliases:
            if _contains_either_way(probe_norm, normalize(alias)):
                return True
            if _terms_overlap(extract_terms(alias, self.min_term_length), probe_terms):
                return True
        if _contains_either_way(probe_norm, normalize(template_field.label)):
            return True
        return _contains_either_way(probe_norm, normalize(template_field.key))

    def find_match(self, descriptor: FieldDescriptor, template: Template) -> Optional[TemplateField]:
        """Return the first template field satisfying the predicate, if any."""
        probe = descriptor.probe
        probe_norm = normalize(probe)
        if not probe_norm:
            return None
        probe_terms = extract_terms(probe, self.min_term_length)
        for template_field in template.fields:
            if self._predicate(probe_norm, probe_terms, template_field):
                return template_field
        return None

    def match_fields(
        self,
        fields: Sequence[FieldDescriptor],
        template: Template,
        selector: Optional[str] = None
    ) -> MatchReport:
        """
        Match every live field of one container against a template.

        Args:
            fields: Field descriptors of the container being evaluated
            template: Template supplying aliases and values
            selector: Optional container selector, carried into the report

        Returns:
            MatchReport with exactly one candidate per field
        """
        candidates = []
        for descriptor in fields:
            template_field = self.find_match(descriptor, template)
            candidates.append(MatchCandidate(
                field=descriptor,
                template_field=template_field,
                matched=template_field is not None
            ))

        report = MatchReport(
            candidates=candidates,
            match_count=sum(1 for candidate in candidates if candidate.matched),
            total_fields=len(candidates),
            selector=selector
        )
        self.logger.debug(
            "Matched container fields",
            selector=selector,
            template=template.name,
            **log_match_report(report)
        )
        return report

    def select_best_form(self, forms: Sequence[FormContainer], template: Template) -> Optional[BestForm]:
        """
        Evaluate each container independently and keep the one with the most matches.

        Raw match count decides, not confidence; ties keep the first container.
        """
        if not forms:
            return None

        evaluated = [self.match_fields(form.fields, template, form.selector) for form in forms]
        best_index = 0
        for index, report in enumerate(evaluated):
            if report.match_count > evaluated[best_index].match_count:
                best_index = index

        best = BestForm(form=forms[best_index], report=evaluated[best_index], evaluated=evaluated)
        self.logger.info(
            "Selected best form",
            selector=best.form.selector,
            forms_evaluated=len(forms),
            **log_match_report(best.report)
        )
        return best


def create_matching_engine(min_term_length: Optional[int] = None) -> MatchingEngine:
    """Factory function to create a matching engine."""
    return MatchingEngine(min_term_length=min_term_length)
