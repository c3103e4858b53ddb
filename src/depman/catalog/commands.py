"""CLI commands for the dependency catalog (categories, deps, guides)."""

from __future__ import annotations

import json as json_module
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from depman.catalog import service
from depman.core.errors import DepmanError
from depman.core.models import CategoryEntry, DependencyEntry, GuideEntry
from depman.core.schema import DEPENDENCY_SCHEMA, KNOWN_PLATFORMS

console = Console()


def _fail(error: DepmanError) -> NoReturn:
    console.print(f"[red]{error.message}[/red]")
    raise SystemExit(1) from error


def _dry_run(ctx: Any) -> bool:
    return bool(ctx.dry_run) if ctx else False


# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------


@click.group(name="categories")
def categories() -> None:
    """Manage catalog categories."""
    pass


@categories.command(name="list")
@click.option("-q", "--query", help="Search in name/description")
@click.option("-p", "--platform", help="Filter by platform ('all' for no filter)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_categories(query: str | None, platform: str | None, as_json: bool) -> None:
    """List categories with their dependency counts."""
    store = service.open_catalog()
    results = service.list_categories(store, query=query, platform=platform)

    if as_json:
        click.echo(json_module.dumps(results, indent=2, ensure_ascii=False))
        return

    if not results:
        console.print("[yellow]No categories found matching criteria[/yellow]")
        return

    counts = service.dependency_counts(store)

    table = Table(title=f"Categories ({len(results)} found)")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Platforms", style="blue")
    table.add_column("Deps", style="green", justify="right")

    for record in results:
        entry = CategoryEntry(record)
        name = f"{entry.icon} {entry.name}" if entry.icon else entry.name
        table.add_row(entry.id, name, ", ".join(entry.platform), str(counts.get(entry.id, 0)))

    console.print(table)


@categories.command()
@click.argument("category_id")
def show(category_id: str) -> None:
    """Show a category with its dependencies and guide."""
    store = service.open_catalog()
    found = service.list_categories(store, category_id=category_id)

    if not found:
        console.print(f"[red]Category not found: {category_id}[/red]")
        console.print("[dim]Use 'depman categories list' to see available categories[/dim]")
        raise SystemExit(1)

    entry = CategoryEntry(found[0])
    console.print(Panel(
        f"[bold]{entry.name}[/bold]\n"
        f"{entry.description}\n\n"
        f"[dim]Platforms:[/dim] {', '.join(entry.platform) or '-'}",
        title=entry.id,
    ))

    dependencies = service.list_dependencies(store, category_id=category_id)
    if dependencies:
        _print_dependencies(dependencies, title="Dependencies")
    else:
        console.print("[dim]No dependencies in this category[/dim]")

    guides = service.list_guides(store, category_id=category_id)
    if guides:
        guide = GuideEntry(guides[0])
        console.print(f"\n[dim]Guide: {guide.title} (depman guides show {guide.id})[/dim]")


@categories.command(name="add")
@click.argument("name")
@click.option("-d", "--description", default=None, help="Short description")
@click.option("--icon", default=None, help="Display glyph")
@click.option("--color", default=None, help="Display color token")
@click.option("-p", "--platform", "platforms", multiple=True, help="Platform (repeatable)")
@click.pass_obj
def add_category(
    ctx,
    name: str,
    description: str | None,
    icon: str | None,
    color: str | None,
    platforms: tuple[str, ...],
) -> None:
    """Add a category (its id is the slug of NAME)."""
    payload: dict[str, Any] = {"name": name}
    if description is not None:
        payload["description"] = description
    if icon is not None:
        payload["icon"] = icon
    if color is not None:
        payload["color"] = color
    if platforms:
        payload["platform"] = list(platforms)

    if _dry_run(ctx):
        console.print(f"[yellow]Would add category:[/yellow] {json_module.dumps(payload)}")
        return

    try:
        record = service.create_category(service.open_catalog(), payload)
    except DepmanError as e:
        _fail(e)
    console.print(f"[green]Saved category[/green] [cyan]{record['id']}[/cyan]")


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def _print_dependencies(records: list[dict[str, Any]], title: str) -> None:
    table = Table(title=title)
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Version", style="green")
    table.add_column("Platform", style="blue")
    table.add_column("Coordinate", style="dim")
    table.add_column("Req")

    for record in records:
        entry = DependencyEntry(record)
        table.add_row(
            entry.id,
            entry.name,
            entry.version or "-",
            entry.platform,
            entry.coordinate or "-",
            "yes" if entry.required else "",
        )

    console.print(table)


@click.group(name="deps")
def deps() -> None:
    """Manage catalog dependencies."""
    pass


@deps.command(name="list")
@click.option("-c", "--category", "category_id", help="Only dependencies of this category")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_deps(category_id: str | None, as_json: bool) -> None:
    """List dependencies in catalog order."""
    results = service.list_dependencies(service.open_catalog(), category_id=category_id)

    if as_json:
        click.echo(json_module.dumps(results, indent=2, ensure_ascii=False))
        return

    if not results:
        console.print("[yellow]No dependencies found[/yellow]")
        return

    _print_dependencies(results, title=f"Dependencies ({len(results)} found)")


@deps.command(name="add")
@click.argument("name")
@click.option("-c", "--category", "category_id", required=True, help="Owning category id")
@click.option("--version", "version", default=None, help="Version string")
@click.option("-m", "--module", "module", default=None, help="Package coordinate (group:artifact)")
@click.option(
    "-p", "--platform",
    type=click.Choice(KNOWN_PLATFORMS),
    default=None,
    help="Target platform (default: common)",
)
@click.option("--required", is_flag=True, help="Mark as required for the category")
@click.pass_obj
def add_dep(
    ctx,
    name: str,
    category_id: str,
    version: str | None,
    module: str | None,
    platform: str | None,
    required: bool,
) -> None:
    """Add a dependency (its id is the slug of NAME)."""
    payload: dict[str, Any] = {"name": name, "categoryId": category_id}
    if version is not None:
        payload["version"] = version
    if module is not None:
        payload["module"] = module
    if platform is not None:
        payload["platform"] = platform
    if required:
        payload["required"] = True

    if _dry_run(ctx):
        console.print(f"[yellow]Would add dependency:[/yellow] {json_module.dumps(payload)}")
        return

    try:
        record = service.create_dependency(service.open_catalog(), payload)
    except DepmanError as e:
        _fail(e)
    console.print(f"[green]Saved dependency[/green] [cyan]{record['id']}[/cyan]")


@deps.command(name="fields")
def deps_fields() -> None:
    """List dependency fields and their types."""
    table = Table(title="Dependency Fields")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Description")

    for name, fdef in DEPENDENCY_SCHEMA.items():
        table.add_row(name, fdef.field_type.value, fdef.description)

    console.print(table)


@deps.command(name="set")
@click.argument("dep_id")
@click.argument("field")
@click.argument("value")
@click.pass_obj
def set_dep(ctx, dep_id: str, field: str, value: str) -> None:
    """Set one field of a dependency.

    \b
    Examples:
        depman deps set ktor-client version 2.3.8
        depman deps set ktor-client required true
    """
    from depman.core.schema import coerce_value, validate_field

    field_def = DEPENDENCY_SCHEMA.get(field)
    if field_def is None or field == "id":
        console.print(f"[red]Unknown field: {field!r}[/red]")
        console.print("[dim]Run 'depman deps fields' to see valid fields.[/dim]")
        raise SystemExit(1)

    try:
        coerced = coerce_value(value, field_def)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    errors = validate_field(field, coerced, DEPENDENCY_SCHEMA)
    if errors:
        for err in errors:
            console.print(f"[red]{err}[/red]")
        raise SystemExit(1)

    console.print(f"[cyan]{dep_id}[/cyan]: {field}")
    console.print(f"  new: {coerced}")

    if _dry_run(ctx):
        console.print("[yellow]Dry run - no changes saved.[/yellow]")
        return

    try:
        service.update_dependency(service.open_catalog(), {"id": dep_id, field: coerced})
    except DepmanError as e:
        _fail(e)
    console.print("[green]Saved to catalog_db.json[/green]")


# -----------------------------------------------------------------------------
# Guides
# -----------------------------------------------------------------------------


@click.group(name="guides")
def guides() -> None:
    """Manage category setup guides."""
    pass


@guides.command(name="list")
@click.option("-c", "--category", "category_id", help="Only the guide of this category")
def list_guides(category_id: str | None) -> None:
    """List guides."""
    results = service.list_guides(service.open_catalog(), category_id=category_id)

    if not results:
        console.print("[yellow]No guides found[/yellow]")
        return

    table = Table(title=f"Guides ({len(results)} found)")
    table.add_column("Id", style="cyan")
    table.add_column("Category", style="blue")
    table.add_column("Title")
    table.add_column("Steps", style="green", justify="right")

    for record in results:
        entry = GuideEntry(record)
        table.add_row(entry.id, entry.category_id or "-", entry.title, str(len(entry.steps)))

    console.print(table)


@guides.command(name="show")
@click.argument("guide_id")
def show_guide(guide_id: str) -> None:
    """Show a guide's steps with code blocks highlighted."""
    from depman.core.fences import print_fenced

    found = [g for g in service.list_guides(service.open_catalog()) if g.get("id") == guide_id]
    if not found:
        console.print(f"[red]Guide not found: {guide_id}[/red]")
        raise SystemExit(1)

    entry = GuideEntry(found[0])
    console.print(f"[bold]{entry.title}[/bold] [dim]({entry.category_id or 'no category'})[/dim]")

    for number, step in enumerate(entry.steps, start=1):
        console.print()
        console.print(f"[bold cyan]{number}. {step.title}[/bold cyan]")
        print_fenced(console, step.content)


@guides.command(name="add-step")
@click.argument("guide_id")
@click.argument("title")
@click.argument("content")
@click.option("-c", "--category", "category_id", default=None, help="Category id (creates the guide)")
@click.option("--guide-title", default=None, help="Guide title when creating the guide")
@click.pass_obj
def add_step(
    ctx,
    guide_id: str,
    title: str,
    content: str,
    category_id: str | None,
    guide_title: str | None,
) -> None:
    """Append a step to a guide.

    A guide that doesn't exist yet is created when --category is given.
    """
    store = service.open_catalog()

    if _dry_run(ctx):
        console.print(f"[yellow]Would append step '{title}' to guide {guide_id}[/yellow]")
        return

    try:
        guide = service.append_guide_step(
            store,
            guide_id,
            {"title": title, "content": content},
            category_id=category_id,
            title=guide_title,
        )
    except DepmanError as e:
        _fail(e)
    console.print(f"[green]Guide {guide_id} now has {len(guide['steps'])} step(s)[/green]")
