"""CLI commands for document integrity checking."""

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.group(name="integrity")
def integrity() -> None:
    """Document integrity checking.

    Reports duplicate or missing ids, dangling category references and post
    bodies that point at missing uploads.
    """
    pass


@integrity.command(name="check")
@click.option(
    "--db", "db_name",
    type=click.Choice(["catalog_db", "blog_db"]),
    default=None,
    help="Check one document only",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def integrity_check(db_name: str | None, as_json: bool) -> None:
    """Run integrity checks on the documents.

    Exits with status 1 when any error-level issue is found.

    \b
    Examples:
        depman integrity check                 # Full check
        depman integrity check --db blog_db    # Check one document
        depman integrity check --json          # JSON output
    """
    from depman.blog.service import open_blog
    from depman.catalog.service import open_catalog
    from depman.core.config import get_paths
    from depman.core.integrity import IntegrityChecker

    paths = get_paths()
    checker = IntegrityChecker(open_catalog(paths), open_blog(paths), paths.uploads)
    result = checker.check_database(db_name) if db_name else checker.check_all()

    if as_json:
        click.echo(result.to_json())
        if result.has_errors:
            raise SystemExit(1)
        return

    table = Table(title="Integrity Check Results", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    for collection, count in result.checked.items():
        table.add_row(f"{collection} checked:", str(count))
    table.add_row("", "")
    table.add_row("Total issues:", str(len(result.issues)))

    by_sev = result.by_severity()
    if by_sev.get("error"):
        table.add_row("Errors:", f"[red]{by_sev['error']}[/red]")
    if by_sev.get("warning"):
        table.add_row("Warnings:", f"[yellow]{by_sev['warning']}[/yellow]")

    console.print()
    console.print(table)

    if not result.issues:
        console.print()
        console.print("[green]All integrity checks passed![/green]")
        return

    for label, color, issues in (("Errors", "red", result.errors()), ("Warnings", "yellow", result.warnings())):
        if not issues:
            continue
        console.print()
        console.print(f"[{color}]{label} ({len(issues)}):[/{color}]")
        for issue in issues:
            console.print(f"  [bold]• {issue.database}/{issue.collection}: {issue.entry_id}[/bold]")
            console.print(f"    {issue.message}")

    if result.has_errors:
        raise SystemExit(1)
