"""Line classification and value normalization for `key = value` sources.

Responsibilities:
- Classify one raw line as skippable (blank or comment-only) or split it into
  raw key and value text on the first unquoted `=`.
- Normalize keys (trimmed, non-empty, quote-free) and values (comment tail
  dropped, trimmed, quotes removed, `\\"` unescaped).
- Provide the shared textual helpers used by option and CLI parsing.

Quote handling is a single-pass scan with two states (inside/outside a
double-quoted span) plus an escape check for `\\"`, which never toggles the
span state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import ConfigError, ConfigSyntaxError


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "f", "false", "n", "no", "off"})

_QUOTE = '"'
_ESCAPED_QUOTE = '\\"'
_COMMENT = "#"
_ASSIGN = "="


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """One normalized `key = value` entry.

    Attributes:
        key: Trimmed key text, matched verbatim against field names.
        value: Value text after comment, whitespace, and quote processing.
        quoted: Whether the value contained at least one quoted span.
    """

    key: str
    value: str
    quoted: bool = False


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def _find_unquoted(text: str, targets: str) -> int:
    """Return the index of the first `targets` character outside quotes, or -1."""

    in_quotes = False
    index = 0
    while index < len(text):
        if text.startswith(_ESCAPED_QUOTE, index):
            index += len(_ESCAPED_QUOTE)
            continue
        character = text[index]
        if character == _QUOTE:
            in_quotes = not in_quotes
        elif not in_quotes and character in targets:
            return index
        index += 1
    return -1


def _unquote(text: str) -> tuple[str, bool]:
    """Drop quote characters, collapsing `\\"` into a literal quote."""

    parts: list[str] = []
    quoted = False
    index = 0
    while index < len(text):
        if text.startswith(_ESCAPED_QUOTE, index):
            parts.append(_QUOTE)
            index += len(_ESCAPED_QUOTE)
            continue
        character = text[index]
        if character == _QUOTE:
            quoted = True
        else:
            parts.append(character)
        index += 1
    return "".join(parts), quoted


def split_line(line: str) -> tuple[str, str] | None:
    """Split a raw line into raw key and value text.

    Args:
        line: One line of source text, with or without its newline.

    Returns:
        `None` for blank and comment-only lines, otherwise the text before and
        after the first unquoted `=`. The value part still carries any
        trailing comment.

    Raises:
        ConfigSyntaxError: If a non-blank line has no unquoted `=` before its
            comment, or a quote opens before the `=`.
    """

    stripped = line.strip()
    if not stripped or stripped.startswith(_COMMENT):
        return None

    index = _find_unquoted(line, _ASSIGN + _COMMENT)
    if index == -1 or line[index] == _COMMENT:
        head = line if index == -1 else line[:index]
        if _QUOTE in head:
            raise ConfigSyntaxError(f"quotes are not allowed in key: {stripped}")
        raise ConfigSyntaxError(f"line must contain '=': {stripped}")
    return line[:index], line[index + 1 :]


def normalize_key(raw_key: str) -> str:
    """Trim a raw key and reject empty or quoted keys."""

    key = raw_key.strip()
    if not key:
        raise ConfigSyntaxError("key cannot be empty")
    if _QUOTE in key:
        raise ConfigSyntaxError(f"quotes are not allowed in key: {key}")
    return key


def normalize_value(raw_value: str, key: str) -> tuple[str, bool]:
    """Normalize raw value text.

    The comment tail is located with a quote-aware scan and dropped before the
    trailing whitespace is trimmed, so whitespace inside quotes survives.

    Returns:
        The normalized value and whether any quoted span was present.

    Raises:
        ConfigSyntaxError: If the value is empty and was never quoted.
    """

    text = raw_value.strip()
    comment_index = _find_unquoted(text, _COMMENT)
    if comment_index != -1:
        text = text[:comment_index].rstrip()

    value, quoted = _unquote(text)
    if not value and not quoted:
        raise ConfigSyntaxError(f"value of key `{key}` cannot be empty")
    return value, quoted


def parse_line(line: str) -> ParsedLine | None:
    """Classify and normalize one line; `None` means the line is skipped."""

    split = split_line(line)
    if split is None:
        return None
    raw_key, raw_value = split
    key = normalize_key(raw_key)
    value, quoted = normalize_value(raw_value, key)
    return ParsedLine(key=key, value=value, quoted=quoted)


def iter_entries(
    lines: Iterable[str], source_label: str = "<lines>"
) -> Iterator[tuple[int, ParsedLine]]:
    """Yield `(line_number, entry)` for every non-skipped line, in order.

    Line numbers are 1-based. Syntax errors are located at the offending
    line before propagating.
    """

    for line_number, line in enumerate(lines, start=1):
        try:
            entry = parse_line(line)
        except ConfigError as exc:
            exc.locate(source=source_label, line=line_number)
            raise
        if entry is not None:
            yield line_number, entry
