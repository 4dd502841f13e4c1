"""Typed field descriptors and value binding for destination dataclasses.

Responsibilities:
- Derive read-only `FieldDescriptor` views from a dataclass instance.
- Convert normalized value text into the field's declared scalar kind.
- Assign scalars and append list elements without partial mutation.

Key types:
- `ScalarKind`: a scalar type tag with an optional bit width.
- `FieldDescriptor`: name, kind, list flag, and writability of one field.
- `ListMode`: whether list fields extend or replace caller defaults.

Width-specific integer and float fields are declared with the `Annotated`
aliases exported here, for example `retries: UInt8 = 3`.
"""

from __future__ import annotations

import dataclasses
import math
import re
import struct
import types
from collections.abc import MutableSequence
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, List, Mapping, Union, get_args, get_origin, get_type_hints

from .errors import ConfigSchemaError, ConfigValueError
from .parsing import parse_permissive_boolean


_SIGNED_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT_PATTERN = re.compile(r"\+?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_PATTERN = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)


class ListMode(str, Enum):
    """Policy for list fields that already hold caller defaults."""

    APPEND = "append"
    REPLACE = "replace"


@dataclass(frozen=True, slots=True)
class ScalarKind:
    """Scalar type tag used to convert value text.

    Attributes:
        name: Human-readable kind name used in diagnostics.
        base: Python type of converted values.
        bits: Declared width for numeric kinds.
        signed: Whether an integer kind accepts negative values.
    """

    name: str
    base: type
    bits: int | None = None
    signed: bool = True

    def convert(self, text: str) -> Any:
        """Convert normalized value text or raise `ConfigValueError`."""

        if self.base is str:
            return text
        if self.base is bool:
            return _convert_bool(text)
        if self.base is int:
            return _convert_int(text, self)
        return _convert_float(text, self)


STRING = ScalarKind("str", str)
BOOL = ScalarKind("bool", bool)
INT = ScalarKind("int", int, bits=64)
INT8 = ScalarKind("int8", int, bits=8)
INT16 = ScalarKind("int16", int, bits=16)
INT32 = ScalarKind("int32", int, bits=32)
INT64 = ScalarKind("int64", int, bits=64)
UINT = ScalarKind("uint", int, bits=64, signed=False)
UINT8 = ScalarKind("uint8", int, bits=8, signed=False)
UINT16 = ScalarKind("uint16", int, bits=16, signed=False)
UINT32 = ScalarKind("uint32", int, bits=32, signed=False)
UINT64 = ScalarKind("uint64", int, bits=64, signed=False)
FLOAT32 = ScalarKind("float32", float, bits=32)
FLOAT64 = ScalarKind("float64", float, bits=64)

Int8 = Annotated[int, INT8]
Int16 = Annotated[int, INT16]
Int32 = Annotated[int, INT32]
Int64 = Annotated[int, INT64]
UInt = Annotated[int, UINT]
UInt8 = Annotated[int, UINT8]
UInt16 = Annotated[int, UINT16]
UInt32 = Annotated[int, UINT32]
UInt64 = Annotated[int, UINT64]
Float32 = Annotated[float, FLOAT32]
Float64 = Annotated[float, FLOAT64]

_BARE_KINDS: dict[type, ScalarKind] = {
    str: STRING,
    bool: BOOL,
    int: INT,
    float: FLOAT64,
}


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Read-only view of one destination field.

    Attributes:
        name: Field name, matched case-sensitively against keys.
        kind: Scalar (or list element) kind, `None` when unsupported.
        is_list: Whether the field is an ordered list of `kind`.
        writable: Whether the field may be set from a source.
        type_label: Declared type as text, for diagnostics.
    """

    name: str
    kind: ScalarKind | None
    is_list: bool
    writable: bool
    type_label: str


def _convert_bool(text: str) -> bool:
    parsed = parse_permissive_boolean(text)
    if parsed is None:
        raise ConfigValueError(
            f"invalid bool {text!r} (expected true/false, t/f, 1/0, yes/no, y/n, on/off)"
        )
    return parsed


def _convert_int(text: str, kind: ScalarKind) -> int:
    label = "int" if kind.signed else "uint"
    pattern = _SIGNED_INT_PATTERN if kind.signed else _UNSIGNED_INT_PATTERN
    if pattern.fullmatch(text) is None:
        raise ConfigValueError(f"invalid {label} {text!r}: not a base-10 integer")

    try:
        parsed = int(text)
    except ValueError as exc:
        raise ConfigValueError(
            f"invalid {label} {text!r}: out of range for {kind.name}"
        ) from exc
    bits = kind.bits or 64
    if kind.signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    if not lower <= parsed <= upper:
        raise ConfigValueError(
            f"invalid {label} {text!r}: out of range for {kind.name} [{lower}, {upper}]"
        )
    return parsed


def _convert_float(text: str, kind: ScalarKind) -> float:
    special = _FLOAT_SPECIAL_PATTERN.fullmatch(text) is not None
    if not special and _FLOAT_PATTERN.fullmatch(text) is None:
        raise ConfigValueError(f"invalid float {text!r}: not a decimal number")

    parsed = float(text)
    if special:
        return parsed
    if math.isinf(parsed):
        raise ConfigValueError(f"invalid float {text!r}: out of range for {kind.name}")
    if kind.bits == 32:
        try:
            packed = struct.pack("<f", parsed)
        except OverflowError as exc:
            raise ConfigValueError(
                f"invalid float {text!r}: out of range for {kind.name}"
            ) from exc
        return struct.unpack("<f", packed)[0]
    return parsed


def _type_label(hint: Any) -> str:
    if get_origin(hint) is None and isinstance(hint, type):
        return hint.__name__
    return repr(hint).replace("typing.", "")


def _unwrap_optional(hint: Any) -> Any:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return hint


def _scalar_kind(hint: Any) -> ScalarKind | None:
    if get_origin(hint) is Annotated:
        for marker in hint.__metadata__:
            if isinstance(marker, ScalarKind):
                return marker
        hint = get_args(hint)[0]
    if get_origin(hint) is None and isinstance(hint, type):
        return _BARE_KINDS.get(hint)
    return None


def describe_field(name: str, hint: Any) -> FieldDescriptor:
    """Build the descriptor for one field from its resolved type hint."""

    label = _type_label(hint)
    writable = not name.startswith("_")
    resolved = _unwrap_optional(hint)

    if get_origin(resolved) in (list, List):
        element_args = get_args(resolved)
        kind = _scalar_kind(element_args[0]) if element_args else None
        return FieldDescriptor(name, kind, True, writable, label)
    return FieldDescriptor(name, _scalar_kind(resolved), False, writable, label)


def describe_destination(destination: object) -> Mapping[str, FieldDescriptor]:
    """Return descriptors for every field of a mutable dataclass instance.

    Raises:
        ConfigSchemaError: If `destination` is not a dataclass instance, is
            frozen, or its type hints cannot be resolved.
    """

    if isinstance(destination, type):
        raise ConfigSchemaError(
            f"destination must be a dataclass instance, got the class {destination.__name__}"
        )
    if not dataclasses.is_dataclass(destination):
        raise ConfigSchemaError(
            f"destination must be a dataclass instance, got {type(destination).__name__}"
        )
    destination_type = type(destination)
    if destination_type.__dataclass_params__.frozen:
        raise ConfigSchemaError(
            f"destination {destination_type.__name__} is frozen and cannot be populated"
        )

    try:
        hints = get_type_hints(destination_type, include_extras=True)
    except (NameError, TypeError) as exc:
        raise ConfigSchemaError(
            f"cannot resolve field types of {destination_type.__name__}: {exc}"
        ) from exc

    return {
        field.name: describe_field(field.name, hints.get(field.name, field.type))
        for field in dataclasses.fields(destination)
    }


def bind_value(
    destination: object,
    descriptor: FieldDescriptor,
    value: str,
    *,
    first_occurrence: bool = True,
    list_mode: ListMode = ListMode.APPEND,
) -> Any:
    """Convert `value` and store it in the described field.

    Args:
        destination: Dataclass instance that owns the field.
        descriptor: Descriptor of the target field.
        value: Normalized value text.
        first_occurrence: Whether this is the first line naming the key in
            the current load; only consulted by `ListMode.REPLACE`.
        list_mode: Merge policy for list fields holding defaults.

    Returns:
        The converted value that was assigned or appended.

    Raises:
        ConfigSchemaError: If the field is private or of an unsupported kind.
        ConfigValueError: If `value` does not convert. The field is untouched.
    """

    if not descriptor.writable:
        raise ConfigSchemaError(f"config key `{descriptor.name}` names a private field")
    if descriptor.kind is None:
        raise ConfigSchemaError(
            f"unsupported type {descriptor.type_label} for key `{descriptor.name}`"
        )

    converted = descriptor.kind.convert(value)

    if not descriptor.is_list:
        setattr(destination, descriptor.name, converted)
        return converted

    current = getattr(destination, descriptor.name, None)
    if current is None or (first_occurrence and list_mode is ListMode.REPLACE):
        setattr(destination, descriptor.name, [converted])
    elif isinstance(current, MutableSequence):
        current.append(converted)
    else:
        setattr(destination, descriptor.name, [*current, converted])
    return converted
