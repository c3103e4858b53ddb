"""
Backup management CLI commands.

Every document save leaves a timestamped copy of the previous version under
.depman/backups/<db>/. These commands list, prune and restore them.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from depman.config.commands import get_setting
from depman.core.backup import BackupInfo, list_backups, rollback_database
from depman.core.config import get_paths

console = Console()

ALL_DBS = ["catalog_db", "blog_db"]


def _documents() -> dict[str, tuple[Path, Path]]:
    """Map each document name to (document path, backup directory)."""
    paths = get_paths()
    return {
        "catalog_db": (paths.catalog_db, paths.catalog_backups),
        "blog_db": (paths.blog_db, paths.blog_backups),
    }


def _selected(db: str) -> dict[str, tuple[Path, Path]]:
    documents = _documents()
    if db == "all":
        return documents
    return {db: documents[db]}


def _format_age(days: float) -> str:
    if days < 1:
        hours = days * 24
        if hours < 1:
            return f"{int(hours * 60)}m ago"
        return f"{int(hours)}h ago"
    if days < 30:
        return f"{int(days)}d ago"
    return f"{int(days / 30)}mo ago"


@click.group()
def backup():
    """Manage document backups.

    Backups of catalog_db and blog_db are created automatically whenever a
    document is saved.
    """
    pass


@backup.command(name="list")
@click.option(
    "-d", "--db",
    type=click.Choice(ALL_DBS + ["all"]),
    default="all",
    help="Which document's backups to list",
)
@click.option("-n", "--limit", type=int, default=10, help="Maximum backups shown per document")
def list_cmd(db: str, limit: int):
    """List available backups, newest first."""
    total = 0

    for db_name, (_db_path, backup_dir) in _selected(db).items():
        backups = list_backups(backup_dir, db_name)
        if not backups:
            console.print(f"[dim]No backups found for {db_name}[/dim]")
            continue

        total += len(backups)

        table = Table(
            title=f"[bold]{db_name}[/bold] ({len(backups)} backups)",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("#", style="dim", width=4)
        table.add_column("Date", style="green")
        table.add_column("Age", style="yellow", justify="right")
        table.add_column("Size", style="blue", justify="right")

        for i, info in enumerate(backups[:limit]):
            table.add_row(
                str(i),
                info.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                _format_age(info.age_days),
                info.size_human,
            )

        console.print(table)
        if len(backups) > limit:
            console.print(f"  [dim]... and {len(backups) - limit} older backups[/dim]")

    if total:
        console.print(f"[dim]Total: {total} backups[/dim]")


@backup.command(name="clean")
@click.option(
    "-d", "--db",
    type=click.Choice(ALL_DBS + ["all"]),
    default="all",
    help="Which document's backups to clean",
)
@click.option("--days", type=int, default=None, help="Remove backups older than this (default: backup.keep_days)")
@click.option("--keep", type=int, default=None, help="Always keep this many (default: backup.keep_count)")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def clean_cmd(ctx, db: str, days: int | None, keep: int | None, force: bool):
    """Delete old backups.

    The newest --keep backups of each document always survive; older ones
    are deleted once they are more than --days old.
    """
    config_file = get_paths().config_file
    if days is None:
        days = int(get_setting("backup.keep_days", config_file))
    if keep is None:
        keep = int(get_setting("backup.keep_count", config_file))

    to_delete: list[BackupInfo] = []
    for db_name, (_db_path, backup_dir) in _selected(db).items():
        backups = list_backups(backup_dir, db_name)
        to_delete.extend(info for info in backups[keep:] if info.age_days > days)

    if not to_delete:
        console.print("[green]No old backups to clean up.[/green]")
        return

    console.print(f"[bold]Found {len(to_delete)} backup(s) to delete:[/bold]")
    for info in to_delete:
        console.print(f"  [red]x[/red] {info.path.name} [dim]({_format_age(info.age_days)})[/dim]")

    dry_run = ctx.dry_run if ctx else False
    if dry_run:
        console.print("\n[yellow]DRY RUN - no files deleted[/yellow]")
        return

    if not force and not click.confirm("\nProceed with deletion?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    deleted = 0
    for info in to_delete:
        try:
            info.path.unlink(missing_ok=True)
            deleted += 1
        except OSError as e:
            console.print(f"[red]Failed to delete {info.path.name}: {e}[/red]")

    console.print(f"\n[green]Deleted {deleted} backup(s)[/green]")


@backup.command(name="rollback")
@click.argument("database", type=click.Choice(ALL_DBS))
@click.option("-i", "--index", type=int, default=0, help="Backup to restore (0 = most recent)")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def rollback_cmd(ctx, database: str, index: int, force: bool):
    """Restore a document from a backup.

    The current document is backed up before it is replaced.
    """
    db_path, backup_dir = _documents()[database]
    backups = list_backups(backup_dir, database)

    if not backups:
        console.print(f"[red]No backups found for {database}[/red]")
        raise SystemExit(1)
    if index >= len(backups):
        console.print(f"[red]Backup index {index} out of range (only {len(backups)} backups)[/red]")
        raise SystemExit(1)

    chosen = backups[index]
    console.print(Panel(
        f"[bold]Document:[/bold] {db_path.name}\n"
        f"[bold]Restore from:[/bold] {chosen.path.name}\n"
        f"[bold]Backup age:[/bold] {_format_age(chosen.age_days)}",
        title="Rollback Preview",
    ))

    dry_run = ctx.dry_run if ctx else False
    if dry_run:
        console.print("\n[yellow]DRY RUN - no changes made[/yellow]")
        return

    if not force and not click.confirm("Proceed with rollback?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    try:
        rollback_database(db_path, backup_dir, index)
    except OSError as e:
        console.print(f"[red]Rollback failed: {e}[/red]")
        raise click.Abort() from e

    console.print(f"\n[green]Restored {database} from {chosen.path.name}[/green]")
