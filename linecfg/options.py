"""Loader options and their environment-based construction.

Responsibilities:
- Define loader behavior switches as a typed, immutable dataclass.
- Provide deterministic precedence resolution: explicit value > env > default.

Key types:
- `LoadOptions`: list merge policy and source text encoding.
- `OptionsLoader`: static construction helpers for `LoadOptions`.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
import os
from typing import Mapping

from .fields import ListMode
from .parsing import normalize_optional_string


_DEFAULT_ENCODING = "utf-8"
_ENV_LIST_MODE = "LINECFG_LIST_MODE"
_ENV_ENCODING = "LINECFG_ENCODING"


@dataclass(frozen=True, slots=True)
class LoadOptions:
    """Behavior switches for one load call.

    Attributes:
        list_mode: Whether list fields append to or replace caller defaults.
        encoding: Text encoding used when opening a source path.
    """

    list_mode: ListMode = ListMode.APPEND
    encoding: str = _DEFAULT_ENCODING

    def validate(self) -> None:
        """Validate option values before a load starts."""

        if not isinstance(self.list_mode, ListMode):
            raise ValueError(f"`list_mode` must be a ListMode, got {self.list_mode!r}.")
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise ValueError(f"`encoding` names an unknown codec: {self.encoding!r}.") from exc


def parse_list_mode(value: str, field_name: str) -> ListMode:
    """Parse a list merge policy token case-insensitively."""

    token = value.strip().lower()
    for mode in ListMode:
        if mode.value == token:
            return mode
    choices = "/".join(mode.value for mode in ListMode)
    raise ValueError(f"`{field_name}` must be one of {choices}, got {value!r}.")


class OptionsLoader:
    """Factory methods for creating `LoadOptions` from external sources."""

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> LoadOptions:
        """Create validated options from `LINECFG_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        return OptionsLoader.resolve(env=env_map)

    @staticmethod
    def resolve(
        *,
        list_mode: str | None = None,
        encoding: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> LoadOptions:
        """Resolve options with precedence explicit > env > default.

        Blank explicit or environment values are treated as absent.
        """

        env_map: Mapping[str, str] = env if env is not None else {}

        resolved_mode = normalize_optional_string(list_mode)
        mode_field = "list_mode"
        if resolved_mode is None:
            resolved_mode = normalize_optional_string(env_map.get(_ENV_LIST_MODE))
            mode_field = _ENV_LIST_MODE

        resolved_encoding = (
            normalize_optional_string(encoding)
            or normalize_optional_string(env_map.get(_ENV_ENCODING))
            or _DEFAULT_ENCODING
        )

        options = LoadOptions(
            list_mode=(
                parse_list_mode(resolved_mode, mode_field)
                if resolved_mode is not None
                else ListMode.APPEND
            ),
            encoding=resolved_encoding,
        )
        options.validate()
        return options
