"""Shared setup logic for CLI commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from daybook.core.exceptions import DaybookError

DAYBOOK_DIR = Path.home() / ".daybook"
CONFIG_PATH = DAYBOOK_DIR / "config.yaml"


def load_config(ctx: click.Context):  # type: ignore[no-untyped-def]
    """Load config from --config, falling back to ~/.daybook/config.yaml."""
    from daybook.core.config import Config

    options = ctx.find_root().obj or {}
    config_file = options.get("config_file") or (str(CONFIG_PATH) if CONFIG_PATH.exists() else None)
    return Config(config_file=config_file, data_dir=options.get("data_dir"))


def open_journal(ctx: click.Context):  # type: ignore[no-untyped-def]
    """Configure logging and open the journal described by the config."""
    from daybook.core.utils.logging import setup_logging_from_config
    from daybook.journal import Journal

    config = load_config(ctx)
    journal = Journal.from_config(config)
    setup_logging_from_config(config)
    return journal


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn daybook errors into clean CLI failures instead of tracebacks."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DaybookError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def mood_choice() -> click.Choice:
    from daybook.journal.models import Mood

    return click.Choice([m.value for m in Mood], case_sensitive=False)


def date_option(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    """Click callback rejecting dates that aren't YYYY-MM-DD."""
    from daybook.journal.normalize import parse_date

    if value and parse_date(value) is None:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")
    return value
