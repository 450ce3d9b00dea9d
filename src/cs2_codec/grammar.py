# -*- coding: utf-8 -*-
"""Token-level rules shared by the encoder and the decoder.

A cs2 document is line oriented::

    [lokomotive]            <- root container header, does not indent
    version                 <- field at depth 0 hosting a nested record
     .minor=3               <- field at depth 1
    lokomotive
     .name=01 133 DB
     .funktionen            <- first element of a sequence
     ..nr=0
     .funktionen            <- second element, same tag and depth
     ..nr=1

Scalars: booleans are ``1``/``0``, integers are plain decimals, hex integers
carry a ``0x`` prefix, strings run to the end of the line and tuples put
their elements on one line separated by single blanks.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Annotated, Any, Optional

from pydantic import Field

from .errors import EncodeError, SchemaError, UnrepresentableValueError, UnsupportedValueKindError

DEPTH_MARKER = "."
FIELD_SEPARATOR = "="
TUPLE_SEPARATOR = " "
NEWLINE = "\n"

BOOLEAN_TOKENS = {"1": True, "0": False}

SIGNED_RE = re.compile(r"-?[0-9]+")
UNSIGNED_RE = re.compile(r"[0-9]+")
HEX_RE = re.compile(r"0[xX]([0-9A-Fa-f]+)")
BYTES_RE = re.compile(r"(?:0[xX])?([0-9A-Fa-f]*)")

_WIDTHS = (8, 16, 32, 64)


class ScalarKind(str, enum.Enum):
    BOOLEAN = "bool"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    HEX = "hex"
    STRING = "string"
    BYTES = "bytes"


# ============================================================
# Annotation markers
# ============================================================
def _check_width(width: int) -> None:
    if width not in _WIDTHS:
        raise SchemaError(f"unsupported integer width {width}, use one of {_WIDTHS}")


@dataclass(frozen=True)
class Signed:
    width: int = 64

    def __post_init__(self):
        _check_width(self.width)


@dataclass(frozen=True)
class Unsigned:
    width: int = 64

    def __post_init__(self):
        _check_width(self.width)


@dataclass(frozen=True)
class Hex:
    """Unsigned integer written as ``0x`` + hex digits.

    Strict hex is zero padded to the full width (``0x4001`` for a 16 bit
    value), compact hex drops leading zeros (``0x5``).
    """

    width: int = 64
    compact: bool = False

    def __post_init__(self):
        _check_width(self.width)


I8 = Annotated[int, Field(ge=-(1 << 7), le=(1 << 7) - 1), Signed(8)]
I16 = Annotated[int, Field(ge=-(1 << 15), le=(1 << 15) - 1), Signed(16)]
I32 = Annotated[int, Field(ge=-(1 << 31), le=(1 << 31) - 1), Signed(32)]
I64 = Annotated[int, Field(ge=-(1 << 63), le=(1 << 63) - 1), Signed(64)]

U8 = Annotated[int, Field(ge=0, le=(1 << 8) - 1), Unsigned(8)]
U16 = Annotated[int, Field(ge=0, le=(1 << 16) - 1), Unsigned(16)]
U32 = Annotated[int, Field(ge=0, le=(1 << 32) - 1), Unsigned(32)]
U64 = Annotated[int, Field(ge=0, le=(1 << 64) - 1), Unsigned(64)]

Hex8 = Annotated[int, Field(ge=0, le=(1 << 8) - 1), Hex(8)]
Hex16 = Annotated[int, Field(ge=0, le=(1 << 16) - 1), Hex(16)]
Hex32 = Annotated[int, Field(ge=0, le=(1 << 32) - 1), Hex(32)]
Hex64 = Annotated[int, Field(ge=0, le=(1 << 64) - 1), Hex(64)]

CompactHex8 = Annotated[int, Field(ge=0, le=(1 << 8) - 1), Hex(8, compact=True)]
CompactHex16 = Annotated[int, Field(ge=0, le=(1 << 16) - 1), Hex(16, compact=True)]
CompactHex32 = Annotated[int, Field(ge=0, le=(1 << 32) - 1), Hex(32, compact=True)]
CompactHex64 = Annotated[int, Field(ge=0, le=(1 << 64) - 1), Hex(64, compact=True)]


# ============================================================
# Scalar spec
# ============================================================
@dataclass(frozen=True)
class ScalarSpec:
    kind: ScalarKind
    width: Optional[int] = None
    compact: bool = False

    @property
    def min_value(self) -> int:
        if self.kind == ScalarKind.SIGNED:
            return -(1 << (self.width - 1))
        return 0

    @property
    def max_value(self) -> int:
        if self.kind == ScalarKind.SIGNED:
            return (1 << (self.width - 1)) - 1
        return (1 << self.width) - 1

    def describe(self) -> str:
        if self.kind == ScalarKind.SIGNED:
            return f"i{self.width}"
        if self.kind == ScalarKind.UNSIGNED:
            return f"u{self.width}"
        if self.kind == ScalarKind.HEX:
            return f"hex{self.width}"
        return self.kind.value


BOOLEAN = ScalarSpec(ScalarKind.BOOLEAN)
STRING = ScalarSpec(ScalarKind.STRING)
BYTES = ScalarSpec(ScalarKind.BYTES)
DEFAULT_INT = ScalarSpec(ScalarKind.SIGNED, 64)


def spec_from_marker(marker: Any) -> ScalarSpec:
    if isinstance(marker, Signed):
        return ScalarSpec(ScalarKind.SIGNED, marker.width)
    if isinstance(marker, Unsigned):
        return ScalarSpec(ScalarKind.UNSIGNED, marker.width)
    if isinstance(marker, Hex):
        return ScalarSpec(ScalarKind.HEX, marker.width, marker.compact)
    raise SchemaError(f"not an integer marker: {marker!r}")


def is_int_marker(obj: Any) -> bool:
    return isinstance(obj, (Signed, Unsigned, Hex))


# ============================================================
# Formatting
# ============================================================
def format_scalar(spec: ScalarSpec, value: Any, *, in_tuple: bool = False, where: str = "") -> str:
    """Render one scalar value in its cs2 lexical form."""
    if isinstance(value, float):
        raise UnsupportedValueKindError("float", where)

    if spec.kind == ScalarKind.BOOLEAN:
        if not isinstance(value, bool):
            raise EncodeError(f"{where}: expected bool, got {type(value).__name__}")
        return "1" if value else "0"

    if spec.kind in (ScalarKind.SIGNED, ScalarKind.UNSIGNED, ScalarKind.HEX):
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{where}: expected int, got {type(value).__name__}")
        if not spec.min_value <= value <= spec.max_value:
            raise EncodeError(f"{where}: {value} is out of range for {spec.describe()}")
        if spec.kind != ScalarKind.HEX:
            return str(value)
        if spec.compact:
            return f"0x{value:x}"
        return f"0x{value:0{spec.width // 4}x}"

    if spec.kind == ScalarKind.STRING:
        if not isinstance(value, str):
            raise EncodeError(f"{where}: expected str, got {type(value).__name__}")
        if NEWLINE in value or "\r" in value:
            raise UnrepresentableValueError(f"{where}: strings cannot contain line breaks")
        if in_tuple and (value == "" or TUPLE_SEPARATOR in value):
            raise UnrepresentableValueError(f"{where}: tuple strings must be non-empty and blank free")
        return value

    if spec.kind == ScalarKind.BYTES:
        if not isinstance(value, (bytes, bytearray)):
            raise EncodeError(f"{where}: expected bytes, got {type(value).__name__}")
        return "0x" + bytes(value).hex()

    raise UnsupportedValueKindError(str(spec.kind), where)


def format_tuple(specs, values, *, where: str = "") -> str:
    if len(values) != len(specs):
        raise EncodeError(f"{where}: expected a tuple of {len(specs)} items, got {len(values)}")
    return TUPLE_SEPARATOR.join(
        format_scalar(spec, v, in_tuple=True, where=f"{where}[{i}]")
        for i, (spec, v) in enumerate(zip(specs, values))
    )


# ============================================================
# Structure
# ============================================================
def is_root_tag(tag: str) -> bool:
    return len(tag) > 2 and tag.startswith("[") and tag.endswith("]")


def field_prefix(depth: int) -> str:
    # fields of a root container sit at depth 0 and carry no prefix at all
    if depth <= 0:
        return ""
    return " " + DEPTH_MARKER * depth


def count_depth(line: str) -> int:
    stripped = line.lstrip(" \t")
    return len(stripped) - len(stripped.lstrip(DEPTH_MARKER))


def split_key(content: str) -> str:
    """Key part of a line whose indentation and depth dots are already gone."""
    return content.split(FIELD_SEPARATOR, 1)[0].rstrip()
