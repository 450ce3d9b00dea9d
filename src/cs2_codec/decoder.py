# -*- coding: utf-8 -*-
"""Indentation-aware cs2 reader.

The decoder keeps the input text, a cursor into it and the stack of open
record tags. The depth a record's fields must carry is the number of open
records, minus one when the outermost record is a root container. Nothing in
the text delimits a sequence: blocks belong to the same sequence while they
keep the same tag at the same depth, so ``next_sequence_element`` peeks the
next block before anything is consumed.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from .config import DEFAULT_DECODE_OPTIONS, DecodeOptions, safe_raw_preview
from .errors import (
    DecodeError,
    DuplicateFieldError,
    ExpectedBooleanError,
    ExpectedBytesError,
    ExpectedFieldSeparatorError,
    ExpectedIntegerError,
    ExpectedNewlineError,
    ExpectedStringError,
    ExpectedTupleSeparatorError,
    InconsistentIndentationDepthError,
    TagMismatchError,
    TrailingInputError,
    UnexpectedEndOfInputError,
    UnknownFieldError,
)
from .grammar import (
    BOOLEAN_TOKENS,
    BYTES_RE,
    FIELD_SEPARATOR,
    HEX_RE,
    NEWLINE,
    SIGNED_RE,
    TUPLE_SEPARATOR,
    UNSIGNED_RE,
    ScalarKind,
    ScalarSpec,
    count_depth,
    is_root_tag,
    split_key,
)
from .schema import FieldKind, FieldSpec, RecordSchema, compile_record

logger = logging.getLogger(__name__)

_BLANKS = " \t"
_MAX_DECIMAL_DIGITS = 20


class DecoderState(str, enum.Enum):
    AT_RECORD_START = "at_record_start"
    AT_FIELD_KEY = "at_field_key"
    AT_FIELD_VALUE = "at_field_value"
    AT_SEQUENCE_BOUNDARY = "at_sequence_boundary"
    AT_TUPLE_ELEMENT = "at_tuple_element"
    DONE = "done"


class Decoder:
    def __init__(self, text: str, options: Optional[DecodeOptions] = None, *, validate: bool = True):
        self.options = options or DEFAULT_DECODE_OPTIONS
        self.validate = validate
        self.state = DecoderState.AT_RECORD_START
        self._text = (text or "").replace("\r\n", NEWLINE)
        self._pos = 0
        self._stack: List[str] = []
        # key the cursor currently sits on, set by next_field/next_sequence_element
        self._key: Optional[str] = None

    # ---------------- Introspection ----------------
    @property
    def depth(self) -> int:
        """Depth markers carried by the fields of the innermost open record."""
        if self._stack and is_root_tag(self._stack[0]):
            return len(self._stack) - 1
        return len(self._stack)

    @property
    def open_tags(self) -> Tuple[str, ...]:
        return tuple(self._stack)

    @property
    def remaining(self) -> str:
        return self._text[self._pos:]

    # ---------------- Record structure ----------------
    def open_record(self, tag: str) -> None:
        text = self._text
        if not self._stack:
            line = self._peek_content_line()
            if line is None:
                raise self._error(UnexpectedEndOfInputError, f"expected record {tag!r}", len(text))
            start, content, _ = line
            if count_depth(text[content:]) > 0:
                raise self._error(
                    InconsistentIndentationDepthError, "the outermost record header carries depth markers", content
                )
            self._check_indent(start, content, 0)
            self._pos = content
        elif self._key is None:
            raise self._error(DecodeError, f"nested record {tag!r} must be opened on its key line", self._pos)

        found = split_key(text[self._pos:self._line_end(self._pos)])
        if found != tag:
            raise self._error(TagMismatchError, f"expected struct name {tag!r}, found {found!r}", self._pos)
        self._pos += len(tag)
        rest = text[self._pos:self._line_end(self._pos)]
        if rest.strip(_BLANKS):
            raise self._error(ExpectedNewlineError, f"expected newline after struct name {tag!r}", self._pos)

        self._stack.append(tag)
        self._key = None
        self.state = DecoderState.AT_RECORD_START

    def close_record(self) -> None:
        if not self._stack:
            raise self._error(DecodeError, "close_record() without an open record", self._pos)
        self._stack.pop()
        self._key = None
        self.state = DecoderState.AT_SEQUENCE_BOUNDARY

    def next_field(self) -> Optional[str]:
        """Return the key of the next field of the innermost record.

        Returns None, consuming nothing, when the next line is shallower than
        the current depth or the input is exhausted.
        """
        if self._key is not None:
            raise self._error(DecodeError, "next_field() called before the previous field was read", self._pos)
        self._require_line_end()
        line = self._peek_content_line()
        if line is None:
            return None
        start, content, end = line
        depth = count_depth(self._text[content:end])
        if depth < self.depth:
            return None
        if depth > self.depth:
            raise self._error(
                InconsistentIndentationDepthError, f"expected depth {self.depth}, found {depth}", content
            )
        self._check_indent(start, content, depth)

        key_pos = content + depth
        key = split_key(self._text[key_pos:end])
        if not key:
            raise self._error(ExpectedStringError, "expected field key", key_pos)
        self._pos = key_pos
        self._key = key
        self.state = DecoderState.AT_FIELD_KEY
        return key

    def field_has_value(self) -> bool:
        if self._key is None:
            return False
        p = self._pos + len(self._key)
        return self._text.startswith(FIELD_SEPARATOR, p)

    def begin_value(self) -> None:
        if self._key is None:
            raise self._error(DecodeError, "begin_value() must follow next_field()", self._pos)
        p = self._pos + len(self._key)
        if not self._text.startswith(FIELD_SEPARATOR, p):
            raise self._error(ExpectedFieldSeparatorError, f"expected '=' after key {self._key!r}", p)
        self._pos = p + 1
        self._key = None
        self.state = DecoderState.AT_FIELD_VALUE

    def skip_field(self) -> None:
        """Drop the field under the cursor together with everything nested below it."""
        self._pos = self._line_end(self._pos)
        self._key = None
        while True:
            line = self._peek_content_line()
            if line is None:
                break
            _, content, end = line
            if count_depth(self._text[content:end]) <= self.depth:
                break
            self._pos = end

    def next_sequence_element(self, tag: str) -> bool:
        """Whether the next block continues the sequence of ``tag`` records.

        Must be called after the previous element was closed. The next block
        belongs to the sequence iff it sits at the current depth and carries
        the same tag; on any mismatch the input is left untouched for the
        enclosing record.
        """
        self._require_line_end()
        line = self._peek_content_line()
        if line is None:
            self.state = DecoderState.AT_SEQUENCE_BOUNDARY
            return False
        _, content, end = line
        depth = count_depth(self._text[content:end])
        key_pos = content + depth
        if depth != self.depth or split_key(self._text[key_pos:end]) != tag:
            self.state = DecoderState.AT_SEQUENCE_BOUNDARY
            return False
        self._pos = key_pos
        self._key = tag
        self.state = DecoderState.AT_RECORD_START
        return True

    def finish(self) -> None:
        self._require_line_end()
        line = self._peek_content_line()
        if line is not None:
            raise self._error(TrailingInputError, None, line[1])
        if self._stack:
            raise self._error(UnexpectedEndOfInputError, f"record {self._stack[-1]!r} is still open", self._pos)
        self.state = DecoderState.DONE

    # ---------------- Scalars ----------------
    def read_scalar(self, spec: ScalarSpec, *, in_tuple: bool = False) -> Any:
        text = self._text
        p = self._pos
        end = self._line_end(p)
        if in_tuple:
            blank = text.find(TUPLE_SEPARATOR, p, end)
            if blank >= 0:
                end = blank

        kind = spec.kind
        if kind == ScalarKind.BOOLEAN:
            token = text[p:p + 1]
            if token in BOOLEAN_TOKENS and p < end:
                self._pos = p + 1
                return BOOLEAN_TOKENS[token]
            raise self._missing(ExpectedBooleanError, p)

        if kind in (ScalarKind.SIGNED, ScalarKind.UNSIGNED):
            regex = SIGNED_RE if kind == ScalarKind.SIGNED else UNSIGNED_RE
            m = regex.match(text, p, end)
            if m is None:
                raise self._missing(ExpectedIntegerError, p)
            token = m.group(0)
            # no 64 bit value needs more than 20 digits
            if len(token.lstrip("-").lstrip("0")) > _MAX_DECIMAL_DIGITS:
                raise self._error(
                    ExpectedIntegerError, f"{len(token)} digit integer is out of range for {spec.describe()}", p
                )
            value = int(token)
            self._check_range(spec, value, p)
            self._pos = m.end()
            return value

        if kind == ScalarKind.HEX:
            m = HEX_RE.match(text, p, end)
            if m is None:
                raise self._missing(ExpectedIntegerError, p, "expected 0x-prefixed hex integer")
            digits = m.group(1)
            if self.options.strict_hex_width and not spec.compact and len(digits) != spec.width // 4:
                raise self._error(
                    ExpectedIntegerError, f"expected {spec.width // 4} hex digits for {spec.describe()}", p
                )
            value = int(digits, 16)
            self._check_range(spec, value, p)
            self._pos = m.end()
            return value

        if kind == ScalarKind.STRING:
            value = text[p:end]
            if in_tuple and not value:
                raise self._missing(ExpectedStringError, p)
            self._pos = end
            return value

        if kind == ScalarKind.BYTES:
            token = text[p:end].rstrip(_BLANKS)
            m = BYTES_RE.fullmatch(token)
            if m is None or len(m.group(1)) % 2:
                raise self._missing(ExpectedBytesError, p)
            self._pos = p + len(token)
            return bytes.fromhex(m.group(1))

        raise self._error(DecodeError, f"unsupported scalar kind {kind!r}", p)

    def read_tuple(self, specs: Sequence[ScalarSpec]) -> Tuple[Any, ...]:
        """Read exactly ``len(specs)`` blank separated scalars from the current line."""
        self.state = DecoderState.AT_TUPLE_ELEMENT
        text = self._text
        values: List[Any] = []
        for i, spec in enumerate(specs):
            p = self._pos
            if i == 0:
                if text.startswith(TUPLE_SEPARATOR, p):
                    raise self._error(ExpectedTupleSeparatorError, "unexpected blank before the first element", p)
            elif not text.startswith(TUPLE_SEPARATOR, p):
                if p >= self._line_end(p):
                    message = f"expected {len(specs)} tuple elements, found {i}"
                else:
                    message = None
                raise self._error(ExpectedTupleSeparatorError, message, p)
            else:
                self._pos = p + 1
            values.append(self.read_scalar(spec, in_tuple=True))

        p = self._pos
        if text[p:self._line_end(p)].strip(_BLANKS):
            raise self._error(ExpectedNewlineError, f"more than {len(specs)} tuple elements", p)
        self.state = DecoderState.AT_FIELD_VALUE
        return tuple(values)

    # ---------------- Schema driven ----------------
    def read_record(self, schema: RecordSchema) -> Any:
        self.open_record(schema.tag)
        values: Dict[str, Any] = {}
        while True:
            key = self.next_field()
            if key is None:
                break
            spec = schema.field_for_key(key)
            if spec is None:
                if self.options.strict_schema:
                    raise self._error(UnknownFieldError, f"{schema.tag!r} has no field {key!r}", self._pos)
                logger.debug("skipping unknown cs2 field %r in %r", key, schema.tag)
                self.skip_field()
                continue
            if key in values:
                raise self._error(DuplicateFieldError, f"field {key!r} of {schema.tag!r} given twice", self._pos)
            values[key] = self._read_value(spec)
        self.close_record()
        if self.validate:
            return schema.model.model_validate(values)
        return values

    def _read_value(self, spec: FieldSpec) -> Any:
        if spec.kind == FieldKind.SCALAR:
            self.begin_value()
            return self.read_scalar(spec.scalar)
        if spec.kind == FieldKind.TUPLE:
            self.begin_value()
            return self.read_tuple(spec.items)
        if spec.kind == FieldKind.RECORD:
            return self.read_record(spec.record)

        items = [self.read_record(spec.record)]
        while self.next_sequence_element(spec.record.tag):
            items.append(self.read_record(spec.record))
        return items

    # ---------------- Cursor helpers ----------------
    def _line_end(self, pos: int) -> int:
        end = self._text.find(NEWLINE, pos)
        return len(self._text) if end < 0 else end

    def _peek_content_line(self) -> Optional[Tuple[int, int, int]]:
        """Locate the next non-blank line without consuming it.

        Returns ``(line_start, content_start, line_end)``. The line the cursor
        is on counts only before anything was consumed.
        """
        text = self._text
        if self._pos == 0:
            start = 0
        else:
            nl = text.find(NEWLINE, self._pos)
            if nl < 0:
                return None
            start = nl + 1
        while start <= len(text):
            end = self._line_end(start)
            line = text[start:end]
            stripped = line.lstrip(_BLANKS)
            if stripped:
                return start, start + len(line) - len(stripped), end
            if end >= len(text):
                return None
            start = end + 1
        return None

    def _require_line_end(self) -> None:
        if self._pos == 0 or self._key is not None:
            return
        rest = self._text[self._pos:self._line_end(self._pos)]
        stripped = rest.lstrip(_BLANKS)
        if stripped:
            raise self._error(ExpectedNewlineError, None, self._pos + len(rest) - len(stripped))

    def _check_indent(self, start: int, content: int, depth: int) -> None:
        if self.options.allow_indented_lines:
            return
        expected = " " if depth > 0 else ""
        if self._text[start:content] != expected:
            raise self._error(
                InconsistentIndentationDepthError, "unexpected indentation in front of the line", start
            )

    def _check_range(self, spec: ScalarSpec, value: int, pos: int) -> None:
        if not spec.min_value <= value <= spec.max_value:
            raise self._error(ExpectedIntegerError, f"{value} is out of range for {spec.describe()}", pos)

    def _missing(self, cls: Type[DecodeError], pos: int, message: Optional[str] = None) -> DecodeError:
        if pos >= len(self._text):
            return self._error(UnexpectedEndOfInputError, None, pos)
        return self._error(cls, message, pos)

    def _error(self, cls: Type[DecodeError], message: Optional[str], pos: int) -> DecodeError:
        line = self._text.count(NEWLINE, 0, pos) + 1
        column = pos - (self._text.rfind(NEWLINE, 0, pos) + 1) + 1
        return cls(message, line=line, column=column)


def decode(text: str, model: Type[BaseModel], options: Optional[DecodeOptions] = None) -> BaseModel:
    """Parse cs2 text into an instance of ``model``.

    Raises:
        DecodeError: the text does not follow the format or the model's shape.
        pydantic.ValidationError: a required field is missing or a value is
            rejected by the model.
    """
    schema = compile_record(model)
    return _run(Decoder(text, options), schema, text)


def decode_dict(text: str, model: Type[BaseModel], options: Optional[DecodeOptions] = None) -> Dict[str, Any]:
    """Like ``decode`` but stop before pydantic validation.

    Records come back as dicts keyed by their textual keys, omitted fields are
    simply missing.
    """
    schema = compile_record(model)
    return _run(Decoder(text, options, validate=False), schema, text)


def _run(decoder: Decoder, schema: RecordSchema, text: str) -> Any:
    try:
        value = decoder.read_record(schema)
        decoder.finish()
    except DecodeError as e:
        logger.debug("cs2 decode of %r failed: %s (input: %s)", schema.tag, e, safe_raw_preview(text))
        raise
    return value


from_str = decode
