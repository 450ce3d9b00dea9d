# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel

from .config import DEFAULT_ENCODE_OPTIONS, EncodeOptions
from .errors import EncodeError, UnrepresentableValueError, UnsupportedValueKindError
from .grammar import FIELD_SEPARATOR, NEWLINE, field_prefix, format_scalar, format_tuple, is_root_tag
from .schema import FieldKind, FieldSpec, RecordSchema, compile_record

logger = logging.getLogger(__name__)


class Encoder:
    """Depth-first cs2 writer.

    The writer is driven field by field::

        enc = Encoder()
        enc.begin_record("lokomotive")
        enc.field("name", "Lok")
        enc.nested_field("funktionen")   # key line doubles as the header
        enc.begin_record("funktionen")
        enc.field("nr", "1")
        enc.end_record()
        enc.end_record()
        enc.getvalue()

    Each open record pushes its depth, ``end_record`` pops it. A root
    container (``[tag]``) keeps its fields at depth 0.
    """

    def __init__(self, options: Optional[EncodeOptions] = None):
        self.options = options or DEFAULT_ENCODE_OPTIONS
        self._lines: List[str] = []
        self._depths: List[int] = []
        self._pending_key: Optional[str] = None

    @property
    def depth(self) -> int:
        return self._depths[-1] if self._depths else 0

    # ---------------- Protocol ----------------
    def begin_record(self, tag: str) -> None:
        if self._pending_key is not None:
            # tag elision: the key line written by nested_field() is the header
            if tag != self._pending_key:
                raise EncodeError(f"nested record {tag!r} announced under key {self._pending_key!r}")
            self._pending_key = None
            self._depths.append(self.depth + 1)
            return

        if self._depths:
            raise EncodeError(f"nested record {tag!r} must be announced with nested_field()")
        if self._lines:
            raise EncodeError("a document holds exactly one top-level record")
        self._lines.append(tag)
        self._depths.append(0 if is_root_tag(tag) else 1)

    def field(self, key: str, value_text: str) -> None:
        self._require_open(key)
        if NEWLINE in value_text or "\r" in value_text:
            raise UnrepresentableValueError(f"{key}: values cannot contain line breaks")
        self._lines.append(f"{field_prefix(self.depth)}{key}{FIELD_SEPARATOR}{value_text}")

    def nested_field(self, key: str) -> None:
        self._require_open(key)
        self._lines.append(f"{field_prefix(self.depth)}{key}")
        self._pending_key = key

    def end_record(self) -> None:
        if self._pending_key is not None:
            raise EncodeError(f"key {self._pending_key!r} was never followed by its record")
        if not self._depths:
            raise EncodeError("end_record() without a matching begin_record()")
        self._depths.pop()

    def getvalue(self) -> str:
        if self._depths or self._pending_key is not None:
            raise EncodeError("document ended inside an open record")
        text = NEWLINE.join(self._lines)
        if self._lines and self.options.trailing_newline:
            text += NEWLINE
        return text

    def _require_open(self, key: str) -> None:
        if not self._depths:
            raise EncodeError(f"field {key!r} written outside of a record")
        if self._pending_key is not None:
            raise EncodeError(f"key {self._pending_key!r} was never followed by its record")
        if not key or FIELD_SEPARATOR in key or NEWLINE in key or "\r" in key:
            raise EncodeError(f"{key!r} is not a valid field key")

    # ---------------- Schema driven ----------------
    def write_record(self, value: BaseModel, schema: RecordSchema) -> None:
        self.begin_record(schema.tag)
        for spec in schema.fields:
            self._write_field(spec, getattr(value, spec.name), f"{schema.tag}.{spec.key}")
        self.end_record()

    def _write_field(self, spec: FieldSpec, value: Any, where: str) -> None:
        # absent optionals leave no trace in the output
        if value is None:
            return

        if spec.kind == FieldKind.SCALAR:
            self.field(spec.key, format_scalar(spec.scalar, value, where=where))
        elif spec.kind == FieldKind.TUPLE:
            if not isinstance(value, (tuple, list)):
                raise EncodeError(f"{where}: expected a tuple, got {type(value).__name__}")
            self.field(spec.key, format_tuple(spec.items, tuple(value), where=where))
        elif spec.kind == FieldKind.RECORD:
            self._write_nested(spec, value, where)
        else:
            for i, item in enumerate(value):
                self._write_nested(spec, item, f"{where}[{i}]")

    def _write_nested(self, spec: FieldSpec, value: Any, where: str) -> None:
        if not isinstance(value, spec.record.model):
            raise EncodeError(f"{where}: expected {spec.record.model.__name__}, got {type(value).__name__}")
        self.nested_field(spec.key)
        self.write_record(value, spec.record)


def encode(value: BaseModel, options: Optional[EncodeOptions] = None) -> str:
    """Serialize a model instance into cs2 text."""
    if not isinstance(value, BaseModel):
        raise UnsupportedValueKindError(type(value).__name__, "top level")
    schema = compile_record(type(value))
    encoder = Encoder(options)
    encoder.write_record(value, schema)
    text = encoder.getvalue()
    logger.debug("encoded cs2 record %r (%d chars)", schema.tag, len(text))
    return text


to_string = encode
