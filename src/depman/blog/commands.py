"""CLI commands for blog posts."""

from __future__ import annotations

import json as json_module
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from depman.blog import service
from depman.core.errors import DepmanError
from depman.core.models import MarkdownBody, PdfBody, PostEntry

console = Console()


def _fail(error: DepmanError) -> NoReturn:
    console.print(f"[red]{error.message}[/red]")
    raise SystemExit(1) from error


def _read_content(content: str | None, content_file: Path | None) -> str | None:
    if content_file is not None:
        return content_file.read_text(encoding="utf-8")
    return content


@click.group(name="posts")
def posts() -> None:
    """Manage blog posts."""
    pass


@posts.command(name="list")
@click.option("-q", "--query", help="Search in title/excerpt")
@click.option("-t", "--tag", help="Only posts with this tag")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_posts(query: str | None, tag: str | None, as_json: bool) -> None:
    """List posts in storage order."""
    results = service.list_posts(service.open_blog(), query=query, tag=tag)

    if as_json:
        click.echo(json_module.dumps(results, indent=2, ensure_ascii=False))
        return

    if not results:
        console.print("[yellow]No posts found matching criteria[/yellow]")
        return

    table = Table(title=f"Posts ({len(results)} found)")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Date", style="green")
    table.add_column("Tags", style="blue")
    table.add_column("Body", style="dim")

    for record in results:
        entry = PostEntry(record)
        body = entry.body
        kind = "pdf" if isinstance(body, PdfBody) else "md" if isinstance(body, MarkdownBody) else "-"
        table.add_row(
            entry.id,
            entry.title[:40] + "..." if len(entry.title) > 40 else entry.title,
            (entry.date or "")[:10],
            ", ".join(entry.tags),
            kind,
        )

    console.print(table)


@posts.command()
@click.argument("post_id")
def show(post_id: str) -> None:
    """Show a post; Markdown bodies are printed with code highlighted."""
    from depman.core.fences import print_fenced

    try:
        entry = PostEntry(service.get_post(service.open_blog(), post_id))
    except DepmanError as e:
        _fail(e)

    header = f"[bold]{entry.title}[/bold]"
    if entry.author:
        header += f"\n[dim]by {entry.author}[/dim]"
    if entry.date:
        header += f"\n[dim]{entry.date}[/dim]"
    if entry.tags:
        header += f"\n[blue]{', '.join(entry.tags)}[/blue]"
    if entry.excerpt:
        header += f"\n\n{entry.excerpt}"
    console.print(Panel(header, title=entry.id))

    body = entry.body
    if isinstance(body, PdfBody):
        console.print(f"PDF: [cyan]{body.url}[/cyan]")
    elif isinstance(body, MarkdownBody):
        print_fenced(console, body.text)
    else:
        console.print("[dim]No content[/dim]")


@posts.command(name="create")
@click.argument("title")
@click.option("-a", "--author", default=None, help="Author name")
@click.option("-e", "--excerpt", default=None, help="Summary shown in listings")
@click.option("-c", "--content", default=None, help="Markdown body")
@click.option(
    "-f", "--content-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the Markdown body from a file",
)
@click.option("--pdf-url", default=None, help="Public path of an uploaded PDF (/uploads/...)")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.pass_obj
def create(
    ctx,
    title: str,
    author: str | None,
    excerpt: str | None,
    content: str | None,
    content_file: Path | None,
    pdf_url: str | None,
    tags: tuple[str, ...],
) -> None:
    """Create a post (its id is the slug of TITLE)."""
    payload: dict[str, Any] = {"title": title}
    if author is not None:
        payload["author"] = author
    if excerpt is not None:
        payload["excerpt"] = excerpt
    body_text = _read_content(content, content_file)
    if body_text is not None:
        payload["content"] = body_text
    if pdf_url is not None:
        payload["pdfUrl"] = pdf_url
    payload["tags"] = list(tags)

    dry_run = ctx.dry_run if ctx else False
    if dry_run:
        console.print(f"[yellow]Would create post:[/yellow] {title}")
        return

    try:
        record = service.create_post(service.open_blog(), payload)
    except DepmanError as e:
        _fail(e)
    console.print(f"[green]Saved post[/green] [cyan]{record['id']}[/cyan] ({record['date']})")


@posts.command(name="update")
@click.argument("post_id")
@click.option("--title", default=None, help="New title (the id stays the same)")
@click.option("-a", "--author", default=None, help="Author name")
@click.option("-e", "--excerpt", default=None, help="Summary shown in listings")
@click.option("-c", "--content", default=None, help="Replace the body with Markdown")
@click.option(
    "-f", "--content-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replace the body with the contents of a file",
)
@click.option("--pdf-url", default=None, help="Replace the body with an uploaded PDF")
@click.option("-t", "--tag", "tags", multiple=True, help="Replace the tags (repeatable)")
@click.pass_obj
def update(
    ctx,
    post_id: str,
    title: str | None,
    author: str | None,
    excerpt: str | None,
    content: str | None,
    content_file: Path | None,
    pdf_url: str | None,
    tags: tuple[str, ...],
) -> None:
    """Update fields of an existing post."""
    payload: dict[str, Any] = {"id": post_id}
    for key, value in (("title", title), ("author", author), ("excerpt", excerpt), ("pdfUrl", pdf_url)):
        if value is not None:
            payload[key] = value
    body_text = _read_content(content, content_file)
    if body_text is not None:
        payload["content"] = body_text
    if tags:
        payload["tags"] = list(tags)

    if len(payload) == 1:
        console.print("[yellow]Nothing to update[/yellow]")
        return

    dry_run = ctx.dry_run if ctx else False
    if dry_run:
        changed = ", ".join(key for key in payload if key != "id")
        console.print(f"[yellow]Would update {post_id}:[/yellow] {changed}")
        return

    try:
        service.update_post(service.open_blog(), payload)
    except DepmanError as e:
        _fail(e)
    console.print(f"[green]Updated post[/green] [cyan]{post_id}[/cyan]")
