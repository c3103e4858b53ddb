"""
Main CLI dispatcher for depman.

Usage:
    depman init                          # Initialize .depman/ directory
    depman serve                         # Run the JSON API
    depman categories [list|show|add]
    depman deps [list|add|set]
    depman guides [list|show|add-step]
    depman posts [list|show|create|update]
    depman upload FILE
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from depman import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console


pass_context = click.make_pass_decorator(Context, ensure=True)


def _enable_debug_logging() -> None:
    """Send depman debug logs to stderr through rich."""
    logger = logging.getLogger("depman")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@click.group()
@click.version_option(version=__version__, prog_name="depman")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without making changes")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Dependency catalog and blog management tools.

    Manage categories, dependencies, setup guides and blog posts stored as
    JSON documents under .depman/.
    """
    ctx.ensure_object(dict)
    ctx.obj = Context(verbose=verbose, dry_run=dry_run)
    if verbose:
        _enable_debug_logging()

    if dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")


@main.command()
@click.option("--force", "-f", is_flag=True, help="Reset existing documents to empty")
@pass_context
def init(ctx: Context, force: bool) -> None:
    """Initialize .depman/ directory structure.

    Creates the .depman/ directory, backup directories, the public uploads
    directory and empty catalog and blog documents.
    """
    from depman.core.config import DATA_DIR_NAME, get_paths, get_site_root
    from depman.core.store import BLOG_COLLECTIONS, CATALOG_COLLECTIONS, Document, DocumentStore

    try:
        site_root = get_site_root()
    except FileNotFoundError:
        # For init, use cwd as the data root since .depman/ doesn't exist yet
        site_root = Path.cwd()

    paths = get_paths(site_root)

    if paths.data_dir.exists() and not force:
        console.print(f"[yellow]{DATA_DIR_NAME}/ directory already exists at {paths.data_dir}[/yellow]")
        console.print("[dim]Use --force to reset the documents.[/dim]")
        return

    console.print(f"[cyan]Initializing {DATA_DIR_NAME}/ directory at {site_root}[/cyan]")

    for dir_path in [paths.data_dir, paths.catalog_backups, paths.blog_backups, paths.uploads]:
        if not ctx.dry_run:
            dir_path.mkdir(parents=True, exist_ok=True)
        console.print(f"  [green]Created[/green] {dir_path.relative_to(site_root)}")

    documents = [
        (paths.catalog_db, CATALOG_COLLECTIONS, paths.catalog_backups),
        (paths.blog_db, BLOG_COLLECTIONS, paths.blog_backups),
    ]
    for db_path, collections, backup_dir in documents:
        if db_path.exists() and not force:
            continue
        if not ctx.dry_run:
            store = DocumentStore(db_path, collections, backup_dir=backup_dir)
            store.save(Document.empty(collections))
        console.print(f"  [green]Wrote[/green] {db_path.relative_to(site_root)}")

    console.print()
    if ctx.dry_run:
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
    else:
        console.print(f"[green]Done![/green] {DATA_DIR_NAME}/ directory initialized.")


@main.command()
@click.option("--host", default=None, help="Bind address (default: server.host setting)")
@click.option("--port", type=int, default=None, help="Port (default: server.port setting)")
@click.option("--debug", is_flag=True, help="Run Flask in debug mode")
def serve(host: str | None, port: int | None, debug: bool) -> None:
    """Run the JSON API server."""
    from depman.config.commands import get_setting
    from depman.core.config import get_paths
    from depman.web import create_app

    paths = get_paths()
    if host is None:
        host = str(get_setting("server.host", paths.config_file))
    if port is None:
        port = int(get_setting("server.port", paths.config_file))

    app = create_app(paths)
    console.print(f"[cyan]Serving {paths.root} on http://{host}:{port}[/cyan]")
    app.run(host=host, port=port, debug=debug)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
def upload(ctx: Context, file: Path) -> None:
    """Copy FILE into public/uploads and print its public URL."""
    from depman.core.config import get_paths
    from depman.core.errors import UploadError
    from depman.uploads import save_upload, upload_name

    if ctx.dry_run:
        console.print(f"[yellow]Would upload as {upload_name(file.name)}[/yellow]")
        return

    try:
        result = save_upload(file.name, file.read_bytes(), get_paths().uploads)
    except UploadError as e:
        console.print(f"[red]{e.message}[/red]")
        raise SystemExit(1) from e

    console.print(f"[green]Uploaded[/green] {result.url}")


# Import and register command groups (imports after main definition intentional)
from depman.backup.commands import backup  # noqa: E402
from depman.blog.commands import posts  # noqa: E402
from depman.catalog.commands import categories, deps, guides  # noqa: E402
from depman.config.commands import config  # noqa: E402
from depman.core.integrity_commands import integrity  # noqa: E402

main.add_command(categories)
main.add_command(deps)
main.add_command(guides)
main.add_command(posts)
main.add_command(backup)
main.add_command(config)
main.add_command(integrity)


if __name__ == "__main__":
    main()
