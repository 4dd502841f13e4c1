"""Load orchestration: read lines, classify, normalize, and bind.

The orchestrator is strictly sequential. The first error at any stage stops
processing and propagates with its source label and line number attached.
Fields bound on earlier lines stay mutated; there is no rollback.

Loading the same destination from several threads at once is undefined
behavior. Callers must serialize access to a shared destination.
"""

from __future__ import annotations

from contextlib import contextmanager
import os
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from .errors import ConfigError, ConfigResourceError, ConfigSchemaError, DuplicateKeyError
from .fields import FieldDescriptor, bind_value, describe_destination
from .options import LoadOptions
from .parsing import ParsedLine, iter_entries
from .telemetry.logger import LoadLogger


_LOAD_STAGE = "load"


class _LoadRun:
    """State of one load call, including its first-seen table."""

    def __init__(
        self,
        destination: object,
        options: LoadOptions,
        source_label: str,
        run_logger: LoadLogger | None,
    ) -> None:
        self._destination = destination
        self._options = options
        self._source_label = source_label
        self._run_logger = run_logger
        self._descriptors: Mapping[str, FieldDescriptor] = {}
        self._first_seen: dict[str, int] = {}

    def prepare(self) -> None:
        """Validate the destination before any line is read."""

        try:
            self._descriptors = describe_destination(self._destination)
        except ConfigError as exc:
            exc.locate(source=self._source_label)
            raise

    def feed(self, lines: Iterable[str]) -> None:
        """Bind every entry of `lines` in order.

        Read failures raised by `lines` become a `ConfigResourceError`.
        """

        try:
            for line_number, entry in iter_entries(lines, self._source_label):
                try:
                    self._bind(line_number, entry)
                except ConfigError as exc:
                    exc.locate(source=self._source_label, line=line_number)
                    raise
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigResourceError(
                f"cannot read config source: {exc}", source=self._source_label
            ) from exc

    def _bind(self, line_number: int, entry: ParsedLine) -> None:
        descriptor = self._descriptors.get(entry.key)
        if descriptor is None:
            raise ConfigSchemaError(f"config key is not valid: {entry.key}")

        first_line = self._first_seen.get(entry.key)
        if first_line is not None and not descriptor.is_list:
            raise DuplicateKeyError(
                f"key `{entry.key}` is already set on line {first_line}",
                first_line=first_line,
            )

        bind_value(
            self._destination,
            descriptor,
            entry.value,
            first_occurrence=first_line is None,
            list_mode=self._options.list_mode,
        )
        self._first_seen.setdefault(entry.key, line_number)
        if self._run_logger is not None:
            self._run_logger.log_bind(entry.key, line_number)

    @contextmanager
    def logged(self) -> Iterator[None]:
        """Wrap the run in start/complete/failure log events."""

        run_logger = self._run_logger
        if run_logger is None:
            yield
            return

        run_logger.log_stage_start(_LOAD_STAGE, source=self._source_label)
        try:
            yield
        except ConfigError as exc:
            run_logger.log_stage_failure(
                _LOAD_STAGE,
                type(exc).__name__,
                source=self._source_label,
                line=exc.line if exc.line is not None else "none",
            )
            raise
        run_logger.log_stage_complete(
            _LOAD_STAGE, source=self._source_label, keys=len(self._first_seen)
        )


def load_lines(
    lines: Iterable[str],
    destination: object,
    options: LoadOptions | None = None,
    *,
    source_label: str = "<lines>",
    run_logger: LoadLogger | None = None,
) -> None:
    """Populate `destination` from an iterable of config lines.

    Args:
        lines: Text lines in source order, with or without newlines.
        destination: Mutable dataclass instance whose fields are the keys.
        options: Loader options; defaults to `LoadOptions()`.
        source_label: Identifier used in error locations.
        run_logger: Optional structured logger for load events.

    Raises:
        ConfigResourceError: If iterating `lines` fails with a read error.
        ConfigError: The first schema, syntax, value, or duplicate-key error.
    """

    resolved_options = options if options is not None else LoadOptions()
    resolved_options.validate()

    run = _LoadRun(destination, resolved_options, source_label, run_logger)
    with run.logged():
        run.prepare()
        run.feed(lines)


def load(
    source: str | os.PathLike[str],
    destination: object,
    options: LoadOptions | None = None,
    *,
    run_logger: LoadLogger | None = None,
) -> None:
    """Populate `destination` from the config file at `source`.

    The destination is validated before the file is opened, and the file is
    closed on every exit path.

    Raises:
        ConfigResourceError: If the file cannot be opened or read.
        ConfigError: Any other load failure, located at its line.
    """

    resolved_options = options if options is not None else LoadOptions()
    resolved_options.validate()

    path = Path(source)
    run = _LoadRun(destination, resolved_options, str(path), run_logger)
    with run.logged():
        run.prepare()
        try:
            with path.open(encoding=resolved_options.encoding) as handle:
                run.feed(handle)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigResourceError(
                f"cannot read config source: {exc}", source=str(path)
            ) from exc
