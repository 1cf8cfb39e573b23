"""Tests for the command-line interface."""

import asyncio

import pytest
from typer.testing import CliRunner

from form_autopilot import __version__, cli
from form_autopilot.autofill.authoring import template_from_fields
from form_autopilot.core.models import FieldDescriptor
from form_autopilot.matching.engine import MatchingEngine
from form_autopilot.store.templates import FileTemplateStore


runner = CliRunner()


@pytest.fixture
def store(tmp_path, monkeypatch):
    store = FileTemplateStore(tmp_path / "forms")
    monkeypatch.setattr(cli, "_store", lambda: store)
    return store


class TestTemplateCommands:
    """Test cases for template management commands."""

    def test_create_and_list(self, store):
        created = runner.invoke(cli.app, ["templates", "create", "Home Profile", "--default"])
        listed = runner.invoke(cli.app, ["templates", "list"])

        assert created.exit_code == 0
        assert "home-profile" in created.stdout
        assert listed.exit_code == 0
        assert "Home Profile" in listed.stdout

    def test_add_field_and_show(self, store):
        runner.invoke(cli.app, ["templates", "create", "Home"])

        added = runner.invoke(
            cli.app, ["templates", "add-field", "home", "Email", "ada@example.com", "--aliases", "mail, e-mail"]
        )
        shown = runner.invoke(cli.app, ["templates", "show", "home"])

        assert added.exit_code == 0
        assert shown.exit_code == 0
        assert "ada@example.com" in shown.stdout
        template = asyncio.run(store.get_template("home")).template
        assert template.fields[0].aliases == ["email", "mail", "e-mail"]

    def test_show_missing_template(self, store):
        result = runner.invoke(cli.app, ["templates", "show", "ghost"])

        assert result.exit_code == 1
        assert "Failed to get template" in result.stdout

    def test_delete_requires_confirmation(self, store):
        runner.invoke(cli.app, ["templates", "create", "Home"])

        aborted = runner.invoke(cli.app, ["templates", "delete", "home"], input="n\n")
        deleted = runner.invoke(cli.app, ["templates", "delete", "home"], input="y\n")

        assert aborted.exit_code != 0
        assert deleted.exit_code == 0
        assert asyncio.run(store.list_templates()).templates == []


class TestFieldEditingCommands:
    """Test cases for editing fields of a stored template."""

    @pytest.fixture
    def imported(self, store):
        template = template_from_fields(
            [FieldDescriptor(name="email", label="Email", selector="#email"),
             FieldDescriptor(name="phone", label="Phone", selector="#phone")],
            "Sign up",
            "https://shop.example.com/register"
        )
        return asyncio.run(store.save_template(template)).template

    def test_set_field_value_makes_imported_template_fillable(self, store, imported):
        result = runner.invoke(cli.app, ["templates", "set-field", imported.id, "email", "--value", "a@b.com"])

        assert result.exit_code == 0
        template = asyncio.run(store.get_template(imported.id)).template
        assert [(f.key, f.value) for f in template.fields] == [("email", "a@b.com"), ("phone", "")]
        report = MatchingEngine().match_fields([FieldDescriptor(name="email", selector="#email")], template)
        assert [c.field.selector for c in report.fillable] == ["#email"]

    def test_set_field_label_and_aliases(self, store, imported):
        result = runner.invoke(
            cli.app, ["templates", "set-field", imported.id, "phone", "--label", "Mobile", "--aliases", "cell, mobile"]
        )

        assert result.exit_code == 0
        template_field = asyncio.run(store.get_template(imported.id)).template.field_by_key("phone")
        assert template_field.label == "Mobile"
        assert template_field.aliases == ["phone", "cell", "mobile"]

    def test_set_field_needs_a_change(self, store, imported):
        result = runner.invoke(cli.app, ["templates", "set-field", imported.id, "email"])

        assert result.exit_code == 1
        assert "Nothing to change" in result.stdout

    def test_set_unknown_field(self, store, imported):
        result = runner.invoke(cli.app, ["templates", "set-field", imported.id, "fax", "--value", "1"])

        assert result.exit_code == 1
        assert "Field not found: fax" in result.stdout

    def test_add_field_rejects_existing_key(self, store, imported):
        result = runner.invoke(cli.app, ["templates", "add-field", imported.id, "Email", "a@b.com"])

        assert result.exit_code == 1
        assert "already exists" in result.stdout
        template = asyncio.run(store.get_template(imported.id)).template
        assert [f.key for f in template.fields] == ["email", "phone"]

    def test_remove_field(self, store, imported):
        removed = runner.invoke(cli.app, ["templates", "remove-field", imported.id, "phone"])
        missing = runner.invoke(cli.app, ["templates", "remove-field", imported.id, "phone"])

        assert removed.exit_code == 0
        assert missing.exit_code == 1
        template = asyncio.run(store.get_template(imported.id)).template
        assert [f.key for f in template.fields] == ["email"]

    def test_set_default_is_exclusive_and_clearable(self, store, imported):
        runner.invoke(cli.app, ["templates", "create", "Home", "--default"])

        made_default = runner.invoke(cli.app, ["templates", "set-default", imported.id])
        home = asyncio.run(store.get_template("home")).template
        cleared = runner.invoke(cli.app, ["templates", "set-default", imported.id, "--clear"])

        assert made_default.exit_code == 0
        assert cleared.exit_code == 0
        assert home.is_default is False
        assert asyncio.run(store.get_template(imported.id)).template.is_default is False

    def test_import_prompts_for_values(self, monkeypatch, imported):
        answers = iter(["ada@example.com", ""])
        monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: next(answers) or kwargs["default"])

        cli._prompt_field_values(imported)

        assert [(f.key, f.value) for f in imported.fields] == [("email", "ada@example.com"), ("phone", "")]


class TestInfoCommands:
    """Test cases for config and version commands."""

    def test_version(self):
        result = runner.invoke(cli.app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_config(self):
        result = runner.invoke(cli.app, ["config"])

        assert result.exit_code == 0
        assert "Confirm Threshold" in result.stdout
