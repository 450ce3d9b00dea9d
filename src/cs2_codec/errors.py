# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional


# ============================================================
# Base
# ============================================================
class Cs2Error(ValueError):
    pass


class SchemaError(Cs2Error):
    """A model class cannot be mapped onto the cs2 format."""
    pass


# ============================================================
# Encoding
# ============================================================
class EncodeError(Cs2Error):
    pass


class UnsupportedValueKindError(EncodeError):
    """float, char, unit and enum values have no cs2 representation."""

    def __init__(self, kind: str, where: str = ""):
        self.kind = kind
        self.where = where
        msg = f"{kind} cannot be serialized into cs2"
        if where:
            msg = f"{where}: {msg}"
        super().__init__(msg)


class UnrepresentableValueError(EncodeError):
    pass


# ============================================================
# Decoding
# ============================================================
class DecodeError(Cs2Error):
    """Base for every parse failure.

    ``line`` and ``column`` are 1-based and point at the character where the
    decoder gave up (None when the error is not tied to a position).
    """

    default_message = "invalid cs2 input"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.line = line
        self.column = column
        self.detail = message or self.default_message
        if line is not None:
            text = f"{self.detail} (line {line}, column {column})"
        else:
            text = self.detail
        super().__init__(text)


class UnexpectedEndOfInputError(DecodeError):
    default_message = "unexpected end of input"


class ExpectedBooleanError(DecodeError):
    default_message = "expected bool (1 or 0)"


class ExpectedIntegerError(DecodeError):
    default_message = "expected integer"


class ExpectedStringError(DecodeError):
    default_message = "expected string"


class ExpectedBytesError(DecodeError):
    default_message = "expected hexadecimal byte string"


class ExpectedFieldSeparatorError(DecodeError):
    default_message = "expected value separator (=)"


class ExpectedTupleSeparatorError(DecodeError):
    default_message = "expected array separator (blank)"


class ExpectedNewlineError(DecodeError):
    default_message = "expected newline"


class TagMismatchError(DecodeError):
    default_message = "expected struct name"


class InconsistentIndentationDepthError(DecodeError):
    default_message = "wrong indentation level"


class UnknownFieldError(DecodeError):
    default_message = "unknown field"


class DuplicateFieldError(DecodeError):
    default_message = "duplicate field"


class TrailingInputError(DecodeError):
    default_message = "trailing input after the outermost record"
