"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
parsed entry rows, and populated records.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Iterable, NoReturn

import typer

from .errors import CommandStageError, ConfigError, DuplicateKeyError
from .parsing import ParsedLine


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    elif isinstance(exc, ConfigError):
        typer.secho(
            f"{command_name} failed ({type(exc).__name__}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        if isinstance(exc, DuplicateKeyError):
            typer.secho(
                f"Hint: remove one of the assignments on lines {exc.first_line} and {exc.line}.",
                fg=typer.colors.YELLOW,
                err=True,
            )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_entries(entries: Iterable[tuple[int, ParsedLine]]) -> int:
    """Print `line<TAB>key<TAB>value` rows and return the row count."""

    count = 0
    for line_number, entry in entries:
        typer.echo(f"{line_number}\t{entry.key}\t{entry.value}")
        count += 1
    return count


def echo_record(record: object) -> None:
    """Print a populated dataclass record as sorted, indented JSON."""

    payload = dataclasses.asdict(record)
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
