"""daybook import / export."""

from __future__ import annotations

from pathlib import Path

import click

from .common import handle_errors, open_journal


@click.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@handle_errors
def import_(ctx: click.Context, path: Path) -> None:
    """Merge entries from a JSON export."""
    report = open_journal(ctx).import_records(path.read_bytes())
    click.echo(str(report))


@click.command()
@click.option("--format", "-f", "fmt", type=click.Choice(["json", "csv"]), default="json", show_default=True)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="File to write.")
@click.pass_context
@handle_errors
def export(ctx: click.Context, fmt: str, output: Path | None) -> None:
    """Export all entries as JSON or CSV."""
    text = open_journal(ctx).export_records(fmt)
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Wrote {output}")
