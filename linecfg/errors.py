"""Domain exceptions for config loading and CLI diagnostics.

Every load failure is reported as exactly one `ConfigError` subclass. Errors
raised by the parser and binder start without a location; the load
orchestrator attaches the source label and 1-based line number before
re-raising the same object.
"""

from __future__ import annotations


class ConfigError(RuntimeError):
    """Base class for all errors raised while loading a config source."""

    def __init__(
        self,
        reason: str,
        *,
        source: str | None = None,
        line: int | None = None,
    ) -> None:
        """Initialize an error with an optional source location."""

        super().__init__(reason)
        self.reason = reason
        self.source = source
        self.line = line

    def locate(self, *, source: str, line: int | None = None) -> None:
        """Attach location context unless the error already carries one."""

        if self.source is None:
            self.source = source
        if self.line is None:
            self.line = line

    def __str__(self) -> str:
        if self.source is None:
            return self.reason
        if self.line is None:
            return f"{self.source}: {self.reason}"
        return f"{self.source}:{self.line}: {self.reason}"


class ConfigSchemaError(ConfigError):
    """Destination record or a key does not describe a bindable field."""


class ConfigSyntaxError(ConfigError):
    """A line cannot be split into a valid key and value."""


class ConfigValueError(ConfigError):
    """A value cannot be converted into the field's declared kind."""


class DuplicateKeyError(ConfigError):
    """A scalar key is assigned on more than one line."""

    def __init__(
        self,
        reason: str,
        *,
        first_line: int,
        source: str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(reason, source=source, line=line)
        self.first_line = first_line


class ConfigResourceError(ConfigError):
    """The source cannot be opened or read."""


class CommandStageError(RuntimeError):
    """Raised when a specific CLI command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
