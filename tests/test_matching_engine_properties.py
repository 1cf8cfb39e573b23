"""Tests and property-based tests for the field matching engine."""

import pytest
from hypothesis import given, settings, strategies as st

from form_autopilot.core.models import FieldDescriptor, FormContainer, Route, Template, TemplateField
from form_autopilot.matching.engine import MatchingEngine, create_matching_engine
from form_autopilot.matching.policy import decide


# Test data strategies
words = st.sampled_from([
    "email", "mail", "name", "first", "last", "phone", "city", "zip", "code",
    "address", "company", "title", "x1", "id", "of", "user", "your", "e-mail",
])


@st.composite
def descriptor_strategy(draw):
    """Generate field descriptors built from form-like vocabulary."""
    text = lambda: " ".join(draw(st.lists(words, min_size=0, max_size=3)))
    return FieldDescriptor(
        name=text().replace(" ", "_"),
        label=text(),
        placeholder=text(),
        selector=f"#field-{draw(st.integers(min_value=0, max_value=10_000))}"
    )


@st.composite
def template_strategy(draw):
    """Generate templates with vocabulary-based labels and aliases."""
    fields = []
    for _ in range(draw(st.integers(min_value=0, max_value=5))):
        label = " ".join(draw(st.lists(words, min_size=1, max_size=2)))
        aliases = draw(st.lists(words, min_size=0, max_size=3))
        fields.append(TemplateField(
            label=label,
            value=draw(st.sampled_from(["", "value"])),
            aliases=aliases
        ))
    return Template(name="Generated", fields=fields)


class TestMatchingScenarios:
    """Concrete matching scenarios."""

    @pytest.fixture
    def engine(self):
        return MatchingEngine()

    def test_alias_substring_match_routes_to_confirm(self, engine, email_template):
        """Probe "user_email Your email" contains alias "email"."""
        fields = [FieldDescriptor(name="user_email", label="", placeholder="Your email", selector="#e")]

        report = engine.match_fields(fields, email_template)

        assert report.match_count == 1
        assert report.total_fields == 1
        assert report.confidence == 1.0
        assert report.candidates[0].template_field.key == "email"
        assert decide(report.confidence, report.match_count) == Route.CONFIRM

    def test_no_overlap_routes_to_inspect(self, engine, email_template):
        fields = [FieldDescriptor(name="x1", label="Phone", selector="#p")]

        report = engine.match_fields(fields, email_template)

        assert report.match_count == 0
        assert report.confidence == 0.0
        assert report.candidates[0].matched is False
        assert report.candidates[0].template_field is None
        assert decide(report.confidence, report.match_count) == Route.INSPECT

    def test_term_overlap_match(self, engine):
        """An alias term found inside a probe term matches even without full containment."""
        template = Template(name="T", fields=[
            TemplateField(label="Zip", value="12345", aliases=["postal code number"])
        ])
        fields = [FieldDescriptor(name="postalcode", selector="#zip")]

        assert engine.find_match(fields[0], template) is template.fields[0]

    def test_label_and_key_matches(self, engine):
        template = Template(name="T", fields=[
            TemplateField(key="company_name", label="Employer", value="ACME", aliases=["zzz"])
        ])

        by_label = FieldDescriptor(label="Current employer", selector="#a")
        by_key = FieldDescriptor(name="company_name", selector="#b")

        assert engine.find_match(by_label, template) is template.fields[0]
        assert engine.find_match(by_key, template) is template.fields[0]

    def test_first_template_field_wins(self, engine):
        """Ties are broken by template field order, not by closeness."""
        template = Template(name="T", fields=[
            TemplateField(label="Name", value="Ada Lovelace", aliases=["name"]),
            TemplateField(label="First Name", value="Ada", aliases=["first name"]),
        ])
        field = FieldDescriptor(name="first_name", label="First name", selector="#f")

        assert engine.find_match(field, template).key == "name"

    def test_empty_probe_never_matches(self, engine, profile_template):
        field = FieldDescriptor(name="", label="", placeholder="", selector="#blank")

        report = engine.match_fields([field], profile_template)

        assert report.match_count == 0

    def test_empty_value_matches_but_is_not_fillable(self, engine, profile_template):
        field = FieldDescriptor(name="mobile", label="Mobile number", selector="#m")

        report = engine.match_fields([field], profile_template)

        assert report.match_count == 1
        assert report.candidates[0].matched is True
        assert report.candidates[0].fillable is False
        assert report.fillable == []

    def test_empty_container_confidence_is_zero(self, engine, profile_template):
        report = engine.match_fields([], profile_template)

        assert report.total_fields == 0
        assert report.confidence == 0.0

    def test_select_best_form_by_raw_count(self, engine, profile_template, signup_form, search_form):
        best = engine.select_best_form([search_form, signup_form], profile_template)

        assert best.form.selector == "#signup"
        assert best.report.match_count == 3
        assert best.report.total_fields == 4
        assert len(best.evaluated) == 2

    def test_select_best_form_prefers_count_over_confidence(self, engine, email_template):
        """A one-field form at 100% loses to a larger form with more matches."""
        small = FormContainer(selector="#small", fields=[
            FieldDescriptor(name="email", selector="#s1"),
        ])
        large = FormContainer(selector="#large", fields=[
            FieldDescriptor(name="email", selector="#l1"),
            FieldDescriptor(name="email_confirm", selector="#l2"),
            FieldDescriptor(name="notes", selector="#l3"),
            FieldDescriptor(name="other", selector="#l4"),
            FieldDescriptor(name="misc", selector="#l5"),
        ])

        best = engine.select_best_form([small, large], email_template)

        assert best.form.selector == "#large"
        assert best.report.confidence == pytest.approx(0.4)

    def test_select_best_form_ties_keep_first(self, engine, email_template):
        first = FormContainer(selector="#first", fields=[FieldDescriptor(name="email", selector="#a")])
        second = FormContainer(selector="#second", fields=[FieldDescriptor(name="email", selector="#b")])

        assert engine.select_best_form([first, second], email_template).form.selector == "#first"

    def test_select_best_form_without_forms(self, engine, email_template):
        assert engine.select_best_form([], email_template) is None

    def test_factory(self):
        engine = create_matching_engine(min_term_length=4)
        assert engine.min_term_length == 4

    def test_zero_minimum_term_length_is_kept(self):
        template = Template(name="Post", fields=[
            TemplateField(label="Postal code", value="N1 9GU", aliases=["pc box"])
        ])
        descriptor = FieldDescriptor(name="pc number", selector="#pc")

        assert MatchingEngine(min_term_length=0).min_term_length == 0
        assert MatchingEngine(min_term_length=0).field_matches(descriptor, template.fields[0])
        assert not MatchingEngine().field_matches(descriptor, template.fields[0])


class TestMatchingProperties:
    """Property-based tests for the matching engine."""

    @given(st.lists(descriptor_strategy(), max_size=8), template_strategy())
    @settings(max_examples=100, deadline=5000)
    def test_determinism(self, fields, template):
        """Repeated calls over the same inputs give identical candidates and confidence."""
        engine = MatchingEngine()

        first = engine.match_fields(fields, template)
        second = engine.match_fields(fields, template)

        assert first.confidence == second.confidence
        assert [c.model_dump() for c in first.candidates] == [c.model_dump() for c in second.candidates]

    @given(st.lists(descriptor_strategy(), max_size=8), template_strategy())
    @settings(max_examples=100, deadline=5000)
    def test_at_most_one_match_per_field(self, fields, template):
        """Exactly one candidate per field, each matched field satisfying the predicate."""
        engine = MatchingEngine()

        report = engine.match_fields(fields, template)

        assert len(report.candidates) == len(fields)
        for candidate, descriptor in zip(report.candidates, fields):
            assert candidate.field == descriptor
            assert candidate.matched == (candidate.template_field is not None)
            if candidate.matched:
                assert engine.field_matches(descriptor, candidate.template_field)
                # No earlier template field satisfies the predicate.
                earlier = template.fields[:template.fields.index(candidate.template_field)]
                assert not any(engine.field_matches(descriptor, tf) for tf in earlier)
            else:
                assert not any(engine.field_matches(descriptor, tf) for tf in template.fields)

    @given(st.lists(descriptor_strategy(), max_size=8), template_strategy())
    @settings(max_examples=100, deadline=5000)
    def test_confidence_bounds(self, fields, template):
        report = MatchingEngine().match_fields(fields, template)

        assert 0.0 <= report.confidence <= 1.0
        if fields:
            assert report.confidence == report.match_count / len(fields)
        else:
            assert report.confidence == 0.0
