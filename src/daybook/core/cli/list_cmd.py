"""daybook list / tags / stats / size: read-only views."""

from __future__ import annotations

import click

from .common import date_option, handle_errors, mood_choice, open_journal


def _preview(text: str, width: int = 40) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


@click.command("list")
@click.option("--query", "-q", default="", help="Text to search in title, content and tags.")
@click.option("--date", "date_", default=None, callback=date_option, help="Only entries on this day (YYYY-MM-DD).")
@click.option("--mood", "-m", type=mood_choice(), default=None)
@click.option("--tag", "-t", "tags", multiple=True, help="Required tag; repeat to require several.")
@click.option("--page", "-p", type=click.IntRange(min=1), default=1, show_default=True, help="Pages to show.")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Entries per page.")
@click.pass_context
@handle_errors
def list_entries(
    ctx: click.Context,
    query: str,
    date_: str | None,
    mood: str | None,
    tags: tuple[str, ...],
    page: int,
    page_size: int | None,
) -> None:
    """List entries, newest first."""
    from rich.console import Console
    from rich.table import Table

    journal = open_journal(ctx)
    if page_size:
        journal.view.page_size = page_size
    journal.set_criteria(query=query, date=date_, mood=mood, tags=tags)
    for _ in range(page - 1):
        journal.load_more()

    records = journal.visible()
    if not records:
        click.echo("No entries match.")
        return

    table = Table(show_lines=False)
    table.add_column("Date", no_wrap=True)
    table.add_column("Title")
    table.add_column("Mood")
    table.add_column("Tags")
    table.add_column("Preview")
    table.add_column("ID", style="dim", no_wrap=True)
    for r in records:
        table.add_row(r.date.isoformat(), r.title or "(untitled)", r.mood.value, ", ".join(r.tags), _preview(r.content), r.id)

    console = Console()
    console.print(table)
    total = len(journal.filtered())
    footer = f"{len(records)} of {total} entries"
    if journal.has_more():
        footer += f" (use --page {page + 1} to see more)"
    console.print(footer)


@click.command()
@click.pass_context
@handle_errors
def tags(ctx: click.Context) -> None:
    """List every tag in use."""
    vocabulary = open_journal(ctx).tag_vocabulary()
    if not vocabulary:
        click.echo("No tags yet.")
        return
    for tag in vocabulary:
        click.echo(tag)


@click.command()
@click.option("--days", type=click.IntRange(min=1), default=30, show_default=True, help="Activity window.")
@click.pass_context
@handle_errors
def stats(ctx: click.Context, days: int) -> None:
    """Mood distribution and recent activity."""
    summary = open_journal(ctx).stats(days=days)
    moods = ", ".join(f"{mood.value}: {count}" for mood, count in summary.moods.items())
    click.echo(f"Total {summary.total} entries; {moods}")
    click.echo(f"Entries in the last {days} days: {summary.window_total}")


@click.command()
@click.pass_context
@handle_errors
def size(ctx: click.Context) -> None:
    """Show how much storage the journal uses."""
    journal = open_journal(ctx)
    estimate = journal.estimate_size()
    quota = journal.store.gateway.storage.quota_bytes
    limit = f" of {quota / (1024 * 1024):.2f} MB" if quota else ""
    click.echo(f"Journal uses about {estimate}{limit} ({estimate.bytes} bytes).")
