"""daybook add / show / edit / rm: single-entry commands."""

from __future__ import annotations

from datetime import date

import click

from .common import date_option, handle_errors, mood_choice, open_journal


def _print_record(record) -> None:  # type: ignore[no-untyped-def]
    click.echo(f"id:      {record.id}")
    click.echo(f"date:    {record.date.isoformat()}")
    click.echo(f"title:   {record.title}")
    click.echo(f"mood:    {record.mood.value}")
    click.echo(f"tags:    {', '.join(record.tags) or '-'}")
    click.echo(f"images:  {len(record.attachments)}")
    if record.content:
        click.echo("")
        click.echo(record.content)


@click.command()
@click.argument("title")
@click.option("--date", "date_", default=None, callback=date_option, help="Entry date (YYYY-MM-DD). Defaults to today.")
@click.option("--content", "-c", default="", help="Body text.")
@click.option("--mood", "-m", type=mood_choice(), default="neutral", show_default=True)
@click.option("--tag", "-t", "tags", multiple=True, help="Tag; repeat for several.")
@click.pass_context
@handle_errors
def add(ctx: click.Context, title: str, date_: str | None, content: str, mood: str, tags: tuple[str, ...]) -> None:
    """Add a journal entry."""
    journal = open_journal(ctx)
    record = journal.submit(
        {
            "date": date_ or date.today().isoformat(),
            "title": title,
            "content": content,
            "mood": mood,
            "tags": list(tags),
        }
    )
    click.echo(f"Added {record.id} ({record.date.isoformat()})")


@click.command()
@click.argument("record_id")
@click.pass_context
@handle_errors
def show(ctx: click.Context, record_id: str) -> None:
    """Show one entry."""
    record = open_journal(ctx).find(record_id)
    if record is None:
        raise click.ClickException(f"Record not found: {record_id}")
    _print_record(record)


@click.command()
@click.argument("record_id")
@click.option("--title", default=None)
@click.option("--date", "date_", default=None, callback=date_option, help="YYYY-MM-DD")
@click.option("--content", "-c", default=None)
@click.option("--mood", "-m", type=mood_choice(), default=None)
@click.option("--tag", "-t", "tags", multiple=True, help="Replaces all tags; repeat for several.")
@click.pass_context
@handle_errors
def edit(
    ctx: click.Context,
    record_id: str,
    title: str | None,
    date_: str | None,
    content: str | None,
    mood: str | None,
    tags: tuple[str, ...],
) -> None:
    """Change fields of an existing entry."""
    journal = open_journal(ctx)
    current = journal.find(record_id)
    if current is None:
        raise click.ClickException(f"Record not found: {record_id}")

    fields = current.to_dict()
    changes = {"title": title, "date": date_, "content": content, "mood": mood, "tags": list(tags) or None}
    fields.update({k: v for k, v in changes.items() if v is not None})
    record = journal.submit(fields)
    click.echo(f"Updated {record.id}")


@click.command()
@click.argument("record_id")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation.")
@click.pass_context
@handle_errors
def rm(ctx: click.Context, record_id: str, yes: bool) -> None:
    """Delete an entry."""
    journal = open_journal(ctx)
    if not yes:
        click.confirm(f"Delete {record_id}?", abort=True)
    removed = journal.remove(record_id)
    click.echo(f"Deleted {removed.id} ({removed.title or 'untitled'})")
