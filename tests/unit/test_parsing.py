"""Unit tests for line classification and value normalization."""

import pytest

from linecfg.errors import ConfigSyntaxError
from linecfg.parsing import (
    ParsedLine,
    iter_entries,
    normalize_key,
    normalize_optional_string,
    normalize_value,
    parse_line,
    parse_permissive_boolean,
    split_line,
)


@pytest.mark.parametrize("line", ["", "   ", "\n", "# comment", "   # indented comment\n"])
def test_parse_line_skips_blank_and_comment_lines(line: str) -> None:
    """Blank and comment-only lines should produce no entry."""

    assert parse_line(line) is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ('Foo = "#something"', ParsedLine("Foo", "#something", quoted=True)),
        ("Foo = bar # comment", ParsedLine("Foo", "bar")),
        ('Foo = "ba\\"r"', ParsedLine("Foo", 'ba"r', quoted=True)),
        ('Foo = "qu"ote', ParsedLine("Foo", "quote", quoted=True)),
        ('Foo = ""test""', ParsedLine("Foo", "test", quoted=True)),
        ('Foo = "  padded  "   # note', ParsedLine("Foo", "  padded  ", quoted=True)),
        ('Foo = ""', ParsedLine("Foo", "", quoted=True)),
        ("Foo=1", ParsedLine("Foo", "1")),
        ("   Foo   =    spaced out   \n", ParsedLine("Foo", "spaced out")),
        ("Foo = a=b", ParsedLine("Foo", "a=b")),
        ("Foo = hel\\\"lo", ParsedLine("Foo", 'hel"lo')),
        ("Foo = C:\\path\\to", ParsedLine("Foo", "C:\\path\\to")),
    ],
)
def test_parse_line_normalizes_values(line: str, expected: ParsedLine) -> None:
    """Values should be comment-stripped, trimmed, and unquoted."""

    assert parse_line(line) == expected


def test_hash_after_unbalanced_quote_stays_literal() -> None:
    """Quote balance, not position, should decide whether `#` starts a comment."""

    entry = parse_line('Foo = "abc # not a comment')

    assert entry == ParsedLine("Foo", "abc # not a comment", quoted=True)


def test_split_line_keeps_comment_in_raw_value() -> None:
    """The splitter should only cut at `=` and leave comment removal to the normalizer."""

    assert split_line("Key = value # tail") == ("Key ", " value # tail")


@pytest.mark.parametrize(
    ("line", "message"),
    [
        ("Foo", r"line must contain '='"),
        ("Foo # = bar", r"line must contain '='"),
        ('"Foo = bar', r"quotes are not allowed in key"),
        ('"Foo" = bar', r"quotes are not allowed in key"),
        ("= value", r"key cannot be empty"),
        ("   = value", r"key cannot be empty"),
        ("Foo =", r"value of key `Foo` cannot be empty"),
        ("Foo =   # only a comment", r"value of key `Foo` cannot be empty"),
    ],
)
def test_parse_line_rejects_malformed_lines(line: str, message: str) -> None:
    """Malformed lines should raise a syntax error with an actionable reason."""

    with pytest.raises(ConfigSyntaxError, match=message):
        parse_line(line)


def test_normalize_key_and_value_helpers() -> None:
    """Key and value helpers should be usable on already-split text."""

    assert normalize_key("  Port ") == "Port"
    assert normalize_value(' "x" # c', "Key") == ("x", True)
    assert normalize_value(" plain ", "Key") == ("plain", False)


def test_iter_entries_numbers_lines_and_locates_errors() -> None:
    """Entries should carry 1-based line numbers and errors should carry location."""

    lines = ["# header\n", "A = 1\n", "\n", "B = two\n"]

    assert list(iter_entries(lines, "app.cfg")) == [
        (2, ParsedLine("A", "1")),
        (4, ParsedLine("B", "two")),
    ]

    with pytest.raises(ConfigSyntaxError) as exc_info:
        list(iter_entries(["A = 1\n", "broken\n"], "app.cfg"))

    assert exc_info.value.line == 2
    assert exc_info.value.source == "app.cfg"
    assert str(exc_info.value) == "app.cfg:2: line must contain '=': broken"


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string("  value  ") == "value"


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("TrUe", True),
        ("  ON ", True),
        ("YeS", True),
        ("t", True),
        ("1", True),
        ("FALSE", False),
        (" oFf ", False),
        ("nO", False),
        ("F", False),
        ("0", False),
    ],
)
def test_parse_permissive_boolean_accepts_mixed_case_tokens(
    token: str, expected: bool
) -> None:
    """Permissive parsing should accept valid tokens case-insensitively."""

    assert parse_permissive_boolean(token) is expected


@pytest.mark.parametrize("value", ["", "   ", "maybe", "2", object()])
def test_parse_permissive_boolean_returns_none_for_invalid_tokens(value: object) -> None:
    """Permissive parsing should return `None` for invalid or blank inputs."""

    assert parse_permissive_boolean(value) is None
