"""Command-line interface for linecfg.

Responsibilities:
- Expose commands for validating config files against a dataclass schema.
- Print normalized entries so quoting and comment handling can be inspected.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import dataclasses
import importlib
import os
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from .cli_rendering import echo_entries, echo_record, exit_with_command_error
from .errors import CommandStageError, ConfigResourceError
from .loader import load
from .options import LoadOptions, OptionsLoader
from .parsing import iter_entries
from .telemetry.logger import LoadLogger

app = typer.Typer(
    name="linecfg",
    no_args_is_help=True,
    help="Validate and inspect line-oriented key=value config files.",
)


@app.callback()
def configure_logging() -> None:
    """Drop loguru's default stderr handler; commands add their own."""

    logger.remove()


def _resolve_options(list_mode: str | None, encoding: str | None) -> LoadOptions:
    """Resolve loader options from CLI flags and `LINECFG_*` variables."""

    try:
        return OptionsLoader.resolve(
            list_mode=list_mode,
            encoding=encoding,
            env=os.environ,
        )
    except ValueError as exc:
        raise CommandStageError(
            stage="options",
            detail=str(exc),
            hint="Use `--list-mode append|replace` and a valid codec for `--encoding`.",
        ) from exc


def _instantiate_schema(schema: str) -> object:
    """Import `module:Class` and build an instance with its defaults."""

    module_name, separator, class_name = schema.partition(":")
    if not separator or not module_name or not class_name:
        raise CommandStageError(
            stage="schema",
            detail=f"Invalid schema reference `{schema}`.",
            hint="Use the form `package.module:ClassName`.",
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CommandStageError(
            stage="schema",
            detail=f"Cannot import module `{module_name}`: {exc}",
            hint="Make sure the module is importable from the current environment.",
        ) from exc

    schema_type = getattr(module, class_name, None)
    if not isinstance(schema_type, type) or not dataclasses.is_dataclass(schema_type):
        raise CommandStageError(
            stage="schema",
            detail=f"`{schema}` is not a dataclass.",
            hint="Point `--schema` at a `@dataclass` class.",
        )

    try:
        return schema_type()
    except TypeError as exc:
        raise CommandStageError(
            stage="schema",
            detail=f"Cannot instantiate `{schema}` with defaults: {exc}",
            hint="Give every field of the schema a default value.",
        ) from exc


@app.command("check")
def check_command(
    config_file: Annotated[Path, typer.Argument(help="Path to the config file.")],
    schema: Annotated[
        str,
        typer.Option("--schema", help="Dataclass to populate, as `package.module:ClassName`."),
    ],
    list_mode: Annotated[
        str | None,
        typer.Option(
            "--list-mode",
            help="List merge policy: `append` (default) or `replace`.",
        ),
    ] = None,
    encoding: Annotated[
        str | None,
        typer.Option("--encoding", help="Source text encoding (default `utf-8`)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log every bound key."),
    ] = False,
) -> None:
    """Load a config file into a schema dataclass and print the result."""

    try:
        options = _resolve_options(list_mode, encoding)
        record = _instantiate_schema(schema)
        run_logger = LoadLogger(level="DEBUG" if verbose else "INFO")
        try:
            load(config_file, record, options, run_logger=run_logger)
        finally:
            run_logger.close()
    except Exception as exc:
        exit_with_command_error("check", exc)

    echo_record(record)


@app.command("entries")
def entries_command(
    config_file: Annotated[Path, typer.Argument(help="Path to the config file.")],
    encoding: Annotated[
        str | None,
        typer.Option("--encoding", help="Source text encoding (default `utf-8`)."),
    ] = None,
) -> None:
    """Print normalized `line<TAB>key<TAB>value` rows without binding."""

    try:
        options = _resolve_options(None, encoding)
        try:
            with config_file.open(encoding=options.encoding) as handle:
                echo_entries(iter_entries(handle, str(config_file)))
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigResourceError(
                f"cannot read config source: {exc}", source=str(config_file)
            ) from exc
    except Exception as exc:
        exit_with_command_error("entries", exc)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
