"""Helpers for building templates by hand or from a scanned page."""

from typing import Iterable, List, Optional
from urllib.parse import urlparse

from form_autopilot.core.models import FieldDescriptor, Template, TemplateField
from form_autopilot.matching.normalizer import slugify_key

DEFAULT_IMPORT_NAME = "Imported Template"
UNKNOWN_LABEL = "Unknown"


def generate_field_key(label: str) -> str:
    """Stable key for a label: lower-case with runs of other characters collapsed to "_"."""
    return slugify_key(label)


def parse_aliases(text: str) -> List[str]:
    """Split a comma-separated alias list into trimmed, lower-cased, non-empty tokens."""
    aliases: List[str] = []
    for part in (text or "").split(","):
        alias = part.strip().lower()
        if alias and alias not in aliases:
            aliases.append(alias)
    return aliases


def make_template_field(label: str, value: str = "", aliases_text: str = "") -> TemplateField:
    """Build a field from user input; the key always leads the alias list."""
    label = label.strip()
    key = generate_field_key(label)
    aliases = parse_aliases(aliases_text)
    if key not in aliases:
        aliases.insert(0, key)
    return TemplateField(key=key, label=label, value=value.strip(), aliases=aliases)


def field_from_descriptor(descriptor: FieldDescriptor) -> TemplateField:
    """Seed a template field from a scanned live field."""
    label = descriptor.label or descriptor.name or descriptor.placeholder or UNKNOWN_LABEL
    key = generate_field_key(label)
    aliases: List[str] = []
    for candidate in (descriptor.name, descriptor.label, descriptor.placeholder, key):
        alias = (candidate or "").lower()
        if alias and alias not in aliases:
            aliases.append(alias)
    return TemplateField(key=key, label=label, value=descriptor.value or "", aliases=aliases)


def template_from_fields(
    fields: Iterable[FieldDescriptor],
    title: Optional[str] = None,
    page_url: Optional[str] = None
) -> Template:
    """Build an unsaved template from the fields of an inspected container."""
    host = urlparse(page_url).hostname if page_url else None
    return Template(
        name=title or DEFAULT_IMPORT_NAME,
        description=f"Imported from {host}" if host else None,
        is_default=False,
        fields=[field_from_descriptor(descriptor) for descriptor in fields]
    )


def update_template_field(
    template_field: TemplateField,
    label: Optional[str] = None,
    value: Optional[str] = None,
    aliases_text: Optional[str] = None
) -> TemplateField:
    """
    Edit a field in place of the template editor.

    The key never changes, even when the label does; an aliases text
    replaces the whole alias list, and the key is put back in front of it.
    """
    aliases = template_field.aliases if aliases_text is None else parse_aliases(aliases_text)
    if template_field.key not in aliases:
        aliases = [template_field.key] + aliases
    return TemplateField(
        key=template_field.key,
        label=template_field.label if label is None else label.strip(),
        value=template_field.value if value is None else value,
        aliases=aliases
    )


def replace_template_field(template: Template, key: str, updated: TemplateField) -> bool:
    """Swap the field with ``key`` for ``updated``; False when no field has that key."""
    for index, template_field in enumerate(template.fields):
        if template_field.key == key:
            template.fields[index] = updated
            return True
    return False


def remove_template_field(template: Template, key: str) -> bool:
    """Drop the field with ``key``; False when no field has that key."""
    remaining = [template_field for template_field in template.fields if template_field.key != key]
    removed = len(remaining) != len(template.fields)
    template.fields = remaining
    return removed
