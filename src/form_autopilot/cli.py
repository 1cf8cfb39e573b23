"""Command-line interface for Form Autopilot."""

import asyncio
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from form_autopilot.config import settings
from form_autopilot.core.errors import AutofillError
from form_autopilot.core.models import FillReport, InspectMode, Route, Template
from form_autopilot.utils.logging import configure_logging

app = typer.Typer(
    name="autopilot",
    help="Form Autopilot - fill unseen web forms from your templates",
    add_completion=False,
)
templates_app = typer.Typer(help="Manage form templates")
app.add_typer(templates_app, name="templates")
console = Console()


def _store():
    from form_autopilot.store.templates import FileTemplateStore
    return FileTemplateStore()


def _print_template(template: Template) -> None:
    table = Table(title=f"{template.name} ({template.id or 'unsaved'})")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Value", style="green")
    table.add_column("Aliases", style="dim")
    for template_field in template.fields:
        table.add_row(template_field.key, template_field.label, template_field.value, ", ".join(template_field.aliases))
    console.print(table)


def _print_report(report: FillReport) -> None:
    style = "green" if report.filled else "yellow"
    console.print(f"[{style}]{report.summary}[/{style}]")
    if report.failures:
        table = Table(title="Failed fields")
        table.add_column("Selector", style="cyan")
        table.add_column("Error", style="red")
        for result in report.failures:
            table.add_row(result.selector, result.error or "")
        console.print(table)


@templates_app.command("list")
def list_templates() -> None:
    """List stored templates."""
    outcome = asyncio.run(_store().list_templates())
    if not outcome.ok:
        console.print(f"❌ {outcome.error}")
        raise typer.Exit(1)

    table = Table(title="Form Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Fields", justify="right")
    table.add_column("Default")
    for summary in outcome.templates:
        table.add_row(summary.id, summary.name, str(summary.field_count), "✓" if summary.is_default else "")
    console.print(table)


@templates_app.command("show")
def show_template(template_id: str) -> None:
    """Show a template's fields."""
    outcome = asyncio.run(_store().get_template(template_id))
    if not outcome.ok:
        console.print(f"❌ {outcome.error}")
        raise typer.Exit(1)
    _print_template(outcome.template)


@templates_app.command("create")
def create_template(
    name: str,
    description: str = typer.Option("", help="Template description"),
    default: bool = typer.Option(False, "--default", help="Make this the default template"),
) -> None:
    """Create an empty template."""
    template = Template(name=name, description=description or None, is_default=default)
    outcome = asyncio.run(_store().save_template(template))
    if not outcome.ok:
        console.print(f"❌ {outcome.error}")
        raise typer.Exit(1)
    console.print(f"✅ Created template [cyan]{outcome.template.id}[/cyan]")


def _fail(message: str) -> None:
    console.print(f"❌ {message}")
    raise typer.Exit(1)


def _edit_template(template_id: str, edit: Callable[[Template], None]) -> None:
    """Load a template, apply ``edit`` to it and save it back."""

    async def run() -> None:
        store = _store()
        outcome = await store.get_template(template_id)
        if not outcome.ok:
            _fail(outcome.error)
        template = outcome.template
        edit(template)
        saved = await store.save_template(template)
        if not saved.ok:
            _fail(saved.error)
        _print_template(saved.template)

    asyncio.run(run())


@templates_app.command("add-field")
def add_field(
    template_id: str,
    label: str,
    value: str,
    aliases: str = typer.Option("", help="Comma-separated aliases, e.g. 'name, fullname'"),
) -> None:
    """Add a field to a template."""
    from form_autopilot.autofill.authoring import make_template_field

    def edit(template: Template) -> None:
        template_field = make_template_field(label, value, aliases)
        if template.field_by_key(template_field.key) is not None:
            _fail(f"Field '{template_field.key}' already exists; use set-field to change it")
        template.fields.append(template_field)

    _edit_template(template_id, edit)


@templates_app.command("set-field")
def set_field(
    template_id: str,
    key: str,
    value: Optional[str] = typer.Option(None, help="New value"),
    label: Optional[str] = typer.Option(None, help="New label (the key is kept)"),
    aliases: Optional[str] = typer.Option(None, help="Comma-separated aliases replacing the current ones"),
) -> None:
    """Change the value, label or aliases of a template field."""
    from form_autopilot.autofill.authoring import replace_template_field, update_template_field

    if value is None and label is None and aliases is None:
        _fail("Nothing to change: pass --value, --label or --aliases")

    def edit(template: Template) -> None:
        template_field = template.field_by_key(key)
        if template_field is None:
            _fail(f"Field not found: {key}")
        replace_template_field(template, key, update_template_field(template_field, label, value, aliases))

    _edit_template(template_id, edit)


@templates_app.command("remove-field")
def remove_field(template_id: str, key: str) -> None:
    """Remove a field from a template."""
    from form_autopilot.autofill.authoring import remove_template_field

    def edit(template: Template) -> None:
        if not remove_template_field(template, key):
            _fail(f"Field not found: {key}")

    _edit_template(template_id, edit)


@templates_app.command("set-default")
def set_default(
    template_id: str,
    clear: bool = typer.Option(False, "--clear", help="Clear the default flag instead"),
) -> None:
    """Make a template the default one, or clear its default flag."""

    def edit(template: Template) -> None:
        template.is_default = not clear

    _edit_template(template_id, edit)


@templates_app.command("delete")
def delete_template(template_id: str) -> None:
    """Delete a template."""
    if not typer.confirm(f"Delete template '{template_id}'? This cannot be undone."):
        raise typer.Abort()
    outcome = asyncio.run(_store().delete_template(template_id))
    if not outcome.ok:
        console.print(f"❌ {outcome.error}")
        raise typer.Exit(1)
    console.print("🗑️  Template deleted")


async def _run_fill(url: str, template_id: str) -> None:
    from form_autopilot.autofill.service import create_autofill_service
    from form_autopilot.browser.session import BrowserSession

    async with BrowserSession() as session:
        if not await session.navigate_to(url):
            console.print(f"❌ Could not open {url}")
            raise typer.Exit(1)
        service = create_autofill_service(session.page, _store())
        result = await service.fill_now(template_id)
        decision = result.decision
        console.print(
            f"Best form [cyan]{result.form_selector}[/cyan]: "
            f"{decision.match_count}/{decision.total_fields} fields matched "
            f"({decision.confidence:.0%}) → [bold]{result.route.value}[/bold]"
        )

        if result.route == Route.CONFIRM:
            confirmation = result.confirmation
            choice = Prompt.ask(
                f"{confirmation.prompt} [fill / other form / cancel]",
                choices=["fill", "other", "cancel"],
                default="fill",
            )
            if choice == "fill":
                _print_report(await service.confirm_fill(confirmation))
                return
            if choice == "cancel":
                await service.cancel_confirmation(confirmation)
                return
            token = await service.reject_fill(confirmation)
        elif result.route == Route.MANUAL_MAP:
            mapping = result.mapping
            keys = [template_field.key for template_field in mapping.template.fields]
            console.print(f"Template fields: {', '.join(keys)} (leave blank to skip)")
            for descriptor in mapping.fields:
                answer = Prompt.ask(
                    f"{descriptor.label or descriptor.name or descriptor.selector}",
                    choices=keys + [""],
                    default="",
                    show_choices=False,
                )
                mapping.assign(descriptor.selector, answer or None)
            _print_report(await service.execute_manual_mapping(mapping))
            return
        else:
            token = result.inspect_token

        console.print("🎯 Click the form to fill in the browser window (Esc to cancel)")
        resolution = await service.wait_for_inspect(token)
        if resolution.cancelled:
            console.print("Inspect cancelled")
        elif resolution.report is not None:
            _print_report(resolution.report)


@app.command()
def fill(
    url: str,
    template: str = typer.Option(..., "--template", "-t", help="Template id to fill with"),
) -> None:
    """Open a page and fill its best matching form from a template."""
    configure_logging()
    try:
        asyncio.run(_run_fill(url, template))
    except AutofillError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(1)


def _prompt_field_values(template: Template) -> None:
    """Ask for each imported field's value; Enter keeps the value read from the page."""
    from form_autopilot.autofill.authoring import replace_template_field, update_template_field

    console.print("Enter a value for each field (Enter keeps the current one)")
    for template_field in list(template.fields):
        value = Prompt.ask(f"{template_field.label} [dim]({template_field.key})[/dim]", default=template_field.value)
        if value != template_field.value:
            replace_template_field(template, template_field.key, update_template_field(template_field, value=value))


async def _run_import(url: str, save: bool, edit_values: bool) -> None:
    from form_autopilot.autofill.service import create_autofill_service
    from form_autopilot.browser.session import BrowserSession

    async with BrowserSession() as session:
        if not await session.navigate_to(url):
            console.print(f"❌ Could not open {url}")
            raise typer.Exit(1)
        store = _store()
        service = create_autofill_service(session.page, store)
        token = await service.start_inspect(InspectMode.IMPORT)
        console.print("🎯 Click the form to import in the browser window (Esc to cancel)")
        resolution = await service.wait_for_inspect(token)
        if resolution.cancelled or resolution.template is None:
            console.print("Import cancelled")
            return
        if edit_values:
            _prompt_field_values(resolution.template)
        _print_template(resolution.template)
        if save:
            outcome = await store.save_template(resolution.template)
            if not outcome.ok:
                console.print(f"❌ {outcome.error}")
                raise typer.Exit(1)
            console.print(f"✅ Saved template [cyan]{outcome.template.id}[/cyan]")


@app.command("import")
def import_template(
    url: str,
    save: bool = typer.Option(True, help="Save the imported template"),
    edit_values: bool = typer.Option(
        True, "--edit-values/--no-edit-values", help="Prompt for field values before saving"
    ),
) -> None:
    """Create a template from a form picked on a page."""
    configure_logging()
    try:
        asyncio.run(_run_import(url, save, edit_values))
    except AutofillError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Form Autopilot Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Confirm Threshold", str(settings.confirm_threshold))
    table.add_row("Min Term Length", str(settings.min_term_length))
    table.add_row("Templates Dir", str(settings.templates_dir))
    table.add_row("Browser Headless", str(settings.browser_headless))
    table.add_row("Browser Timeout", f"{settings.browser_timeout}s")
    table.add_row("Inspect Cancel Key", settings.inspect_cancel_key)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from form_autopilot import __version__
    console.print(f"Form Autopilot v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
