"""Structured load logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level logs for config loads.
- Route every line through `loguru` with a plain `{message}` format.
"""

from __future__ import annotations

import itertools
import sys
from typing import TextIO

from loguru import logger as _loguru_logger

_HANDLER_TOKENS = itertools.count(1)


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class LoadLogger:
    """Emit deterministic phase logs for config load activity.

    Values are never logged, only keys and line numbers, so secrets kept in
    config files do not leak into logs.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Add a loguru handler that only receives this logger's events.

        Handlers already registered by the host application are left alone.
        """

        self._sink = sink or sys.stderr
        token = next(_HANDLER_TOKENS)
        self._logger = _loguru_logger.bind(linecfg_logger=token)
        self._handler_id: int | None = _loguru_logger.add(
            self._sink,
            format="{message}",
            level=level,
            colorize=False,
            filter=lambda record: record["extra"].get("linecfg_logger") == token,
        )

    def close(self) -> None:
        """Remove the handler added by this logger."""

        if self._handler_id is not None:
            _loguru_logger.remove(self._handler_id)
            self._handler_id = None

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured load log line."""

        line = f"[config] level={level} stage={stage} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a stage-failure event without the offending value."""

        self._emit("ERROR", "failure", stage, error_type=error_type, **context)

    def log_bind(self, key: str, line: int) -> None:
        """Emit a debug event for one bound key."""

        self._emit("DEBUG", "bind", "load", key=key, line=line)
