"""File-backed template store: one JSON file per template plus an index."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from form_autopilot.config import settings
from form_autopilot.core.models import StoreOutcome, Template, TemplateSummary
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)

INDEX_FILE = "index.json"


def generate_template_id(name: str) -> str:
    """"My Profile!" -> "my-profile"."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _valid_id(template_id: Optional[str]) -> bool:
    return bool(template_id) and "/" not in template_id and "\\" not in template_id and ".." not in template_id


class FileTemplateStore:
    """
    Persistent template CRUD.

    Every method returns a StoreOutcome; failures are reported through
    ``ok=False`` and ``error`` rather than raised.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or settings.templates_dir)
        self.logger = logger.bind(component="template_store")

    def _ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _template_path(self, template_id: str) -> Path:
        return self.base_dir / f"{template_id}.json"

    def _read_index(self) -> Dict[str, List[Dict[str, str]]]:
        try:
            return json.loads((self.base_dir / INDEX_FILE).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {"templates": []}

    def _write_index(self, index: Dict[str, Any]) -> None:
        self._ensure_dir()
        (self.base_dir / INDEX_FILE).write_text(json.dumps(index, indent=2), encoding="utf-8")

    def _read_template(self, template_id: str) -> Template:
        raw = json.loads(self._template_path(template_id).read_text(encoding="utf-8"))
        return Template.model_validate(raw)

    def _write_template(self, template: Template) -> None:
        self._ensure_dir()
        self._template_path(template.id).write_text(
            json.dumps(template.model_dump(by_alias=True), indent=2),
            encoding="utf-8"
        )

    async def list_templates(self) -> StoreOutcome:
        """List summaries of every readable template; unreadable entries are skipped."""
        summaries = []
        for entry in self._read_index().get("templates", []):
            try:
                template = self._read_template(entry["id"])
            except (OSError, ValueError, KeyError, ValidationError) as e:
                self.logger.warning("Skipping unreadable template", entry=entry, error=str(e))
                continue
            summaries.append(TemplateSummary(
                id=template.id,
                name=template.name,
                description=template.description or "",
                is_default=template.is_default,
                field_count=len(template.fields),
                created_at=template.created_at,
                updated_at=template.updated_at
            ))
        return StoreOutcome(ok=True, templates=summaries)

    async def get_template(self, template_id: str) -> StoreOutcome:
        """Load one template by id."""
        if not template_id:
            return StoreOutcome(ok=False, error="Missing templateId")
        if not _valid_id(template_id):
            return StoreOutcome(ok=False, error="Invalid templateId")
        try:
            return StoreOutcome(ok=True, template=self._read_template(template_id))
        except (OSError, ValueError, ValidationError) as e:
            return StoreOutcome(ok=False, error=f"Failed to get template: {e}")

    async def save_template(self, template: Template) -> StoreOutcome:
        """
        Create or update a template.

        A template without an id gets one generated from its name. Marking a
        template as default clears the flag on every other template.
        """
        if template is None or not template.name:
            return StoreOutcome(ok=False, error="Missing template or template.name")

        template = template.model_copy(deep=True)
        now = _now()
        if not template.id:
            template.id = generate_template_id(template.name)
            template.created_at = now
        if not _valid_id(template.id):
            return StoreOutcome(ok=False, error="Invalid templateId")
        if not template.created_at:
            template.created_at = now
        template.updated_at = now

        try:
            index = self._read_index()
            if template.is_default:
                self._clear_other_defaults(index, template.id)

            self._write_template(template)

            entries = index.setdefault("templates", [])
            if not any(entry.get("id") == template.id for entry in entries):
                entries.append({"id": template.id})
            self._write_index(index)
        except OSError as e:
            self.logger.error("Failed to save template", template_id=template.id, error=str(e))
            return StoreOutcome(ok=False, error=f"Failed to save template: {e}")

        self.logger.info("Template saved", template_id=template.id, fields=len(template.fields))
        return StoreOutcome(ok=True, template=template)

    def _clear_other_defaults(self, index: Dict[str, Any], keep_id: str) -> None:
        for entry in index.get("templates", []):
            other_id = entry.get("id")
            if not other_id or other_id == keep_id:
                continue
            try:
                other = self._read_template(other_id)
            except (OSError, ValueError, ValidationError):
                continue
            if other.is_default:
                other.is_default = False
                self._write_template(other)

    async def delete_template(self, template_id: str) -> StoreOutcome:
        """Delete a template file and drop it from the index."""
        if not template_id:
            return StoreOutcome(ok=False, error="Missing templateId")
        if not _valid_id(template_id):
            return StoreOutcome(ok=False, error="Invalid templateId")
        try:
            self._template_path(template_id).unlink()
            index = self._read_index()
            index["templates"] = [
                entry for entry in index.get("templates", []) if entry.get("id") != template_id
            ]
            self._write_index(index)
        except OSError as e:
            return StoreOutcome(ok=False, error=f"Failed to delete template: {e}")

        self.logger.info("Template deleted", template_id=template_id)
        return StoreOutcome(ok=True)


def create_template_store(base_dir: Optional[Path] = None) -> FileTemplateStore:
    """Factory function to create a template store."""
    return FileTemplateStore(base_dir)
