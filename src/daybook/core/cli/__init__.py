"""Daybook CLI entry point."""

import click

from daybook import __version__


@click.group()
@click.version_option(version=__version__, package_name="daybook")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None, help="YAML or JSON config file.")
@click.option("--data-dir", type=click.Path(file_okay=False), default=None, help="Where journal data lives.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, data_dir: str | None) -> None:
    """Daybook, a local journal of dated entries."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["data_dir"] = data_dir


# Register subcommands (lazy imports keep startup fast)
from .entry_cmd import add, edit, rm, show
from .list_cmd import list_entries, size, stats, tags
from .transfer_cmd import export, import_

for _command in (add, show, edit, rm, list_entries, tags, stats, size, import_, export):
    main.add_command(_command)
