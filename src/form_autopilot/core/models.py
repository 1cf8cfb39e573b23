"""Core data models for Form Autopilot."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from form_autopilot.matching.normalizer import slugify_key


class Route(str, Enum):
    """Execution routes chosen by the decision policy."""
    CONFIRM = "confirm"
    MANUAL_MAP = "manual_map"
    INSPECT = "inspect"


class InspectMode(str, Enum):
    """What a committed inspect selection is used for."""
    IMPORT = "import"
    FILL = "fill"


class TemplateField(BaseModel):
    """One labelled value of a template, with the aliases it matches on."""

    key: str = Field("", description="Stable key generated from the label")
    label: str = Field(..., description="Human readable label")
    value: str = Field("", description="Value filled into matching fields")
    aliases: List[str] = Field(default_factory=list, description="Lower-cased matching tokens")

    @field_validator("aliases", mode="before")
    @classmethod
    def split_aliases(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        aliases: List[str] = []
        for raw in value:
            for part in str(raw).split(","):
                alias = part.strip().lower()
                if alias and alias not in aliases:
                    aliases.append(alias)
        return aliases

    @model_validator(mode="after")
    def ensure_key_alias(self) -> "TemplateField":
        if not self.key:
            self.key = slugify_key(self.label)
        if self.key and self.key not in self.aliases:
            self.aliases.insert(0, self.key)
        return self


class Template(BaseModel):
    """A user-authored set of labelled values used as the source of truth for autofill."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Template identifier (empty until saved)")
    name: str = Field(..., description="Template name")
    description: Optional[str] = Field(None, description="Optional description")
    is_default: bool = Field(False, alias="isDefault", description="Default template flag")
    fields: List[TemplateField] = Field(default_factory=list, description="Template fields")
    created_at: Optional[str] = Field(None, alias="createdAt", description="ISO creation time")
    updated_at: Optional[str] = Field(None, alias="updatedAt", description="ISO update time")

    def field_by_key(self, key: str) -> Optional[TemplateField]:
        """Return the first field with the given key."""
        for template_field in self.fields:
            if template_field.key == key:
                return template_field
        return None


class TemplateSummary(BaseModel):
    """Listing entry for a stored template."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    is_default: bool = Field(False, alias="isDefault")
    field_count: int = Field(0, alias="fieldCount")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class FieldDescriptor(BaseModel):
    """Canonical description of one fillable element on a page."""

    name: str = Field("", description="name attribute, falling back to id")
    type: str = Field("text", description="Input type or tag name")
    label: str = Field("", description="Associated label text")
    placeholder: str = Field("", description="Placeholder text")
    required: bool = Field(False, description="Whether the element is required")
    selector: str = Field(..., description="Selector resolving to exactly one live element")
    value: Optional[str] = Field(None, description="Current live value")

    @field_validator("name", "type", "label", "placeholder", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @property
    def probe(self) -> str:
        """name + label + placeholder, space-joined, empty parts omitted."""
        return " ".join(part for part in (self.name, self.label, self.placeholder) if part)


class FormContainer(BaseModel):
    """One detected top-level form on a page."""

    selector: str
    fields: List[FieldDescriptor] = Field(default_factory=list)
    id: Optional[str] = None
    action: Optional[str] = None
    method: Optional[str] = None


class MatchCandidate(BaseModel):
    """Matching outcome for one live field."""

    field: FieldDescriptor
    template_field: Optional[TemplateField] = None
    matched: bool = False

    @property
    def fillable(self) -> bool:
        """Matched and carrying a non-empty value."""
        return self.matched and self.template_field is not None and self.template_field.value != ""


class FillPlanEntry(BaseModel):
    """A single resolved (selector, value) pair."""

    selector: str
    value: str


class FillPlan(BaseModel):
    """Ordered list of entries, the sole input to the fill executor."""

    entries: List[FillPlanEntry] = Field(default_factory=list)

    @classmethod
    def from_candidates(cls, candidates: List[MatchCandidate]) -> "FillPlan":
        """Build a plan from the fillable candidates, preserving field order."""
        return cls(entries=[
            FillPlanEntry(selector=candidate.field.selector, value=candidate.template_field.value)
            for candidate in candidates
            if candidate.fillable
        ])


class FillResult(BaseModel):
    """Outcome of one attempted plan entry."""

    selector: str
    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None


class FillReport(BaseModel):
    """Aggregate outcome of executing a fill plan."""

    filled: int = 0
    attempted: int = 0
    per_field: List[FillResult] = Field(default_factory=list)
    template_name: Optional[str] = None

    @property
    def summary(self) -> str:
        message = f"Filled {self.filled}/{self.attempted} fields"
        if self.template_name:
            message += f' from "{self.template_name}"'
        return message

    @property
    def failures(self) -> List[FillResult]:
        return [result for result in self.per_field if not result.success]


class Decision(BaseModel):
    """Output of match-and-decide."""

    route: Route
    candidates: List[MatchCandidate] = Field(default_factory=list)
    confidence: float = 0.0
    match_count: int = 0
    total_fields: int = 0


class ScanOutcome(BaseModel):
    """Discriminated success/failure shape returned by the page scanner."""

    ok: bool
    fields: List[FieldDescriptor] = Field(default_factory=list)
    forms: List[FormContainer] = Field(default_factory=list)
    title: Optional[str] = None
    page_url: Optional[str] = None
    error: Optional[str] = None


class StoreOutcome(BaseModel):
    """Discriminated success/failure shape returned by the template store."""

    ok: bool
    template: Optional[Template] = None
    templates: List[TemplateSummary] = Field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(by_alias=True, exclude_none=True)
