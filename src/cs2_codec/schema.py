# -*- coding: utf-8 -*-
"""Compile pydantic models into the explicit record schema used by the codec.

The cs2 format is not self-describing, so both directions work from a
``RecordSchema``: the record tag, and per field its textual key, its kind and
(for nested records and sequences) the schema of the nested record. Tag
elision is checked here, once per model class: a field hosting a nested
record must use the nested record's tag as its key.
"""

from __future__ import annotations

import enum
import inspect
import logging
import threading
import types
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel

from .errors import SchemaError, UnsupportedValueKindError
from .grammar import (
    BOOLEAN,
    BYTES,
    DEFAULT_INT,
    DEPTH_MARKER,
    FIELD_SEPARATOR,
    STRING,
    ScalarSpec,
    is_int_marker,
    is_root_tag,
    spec_from_marker,
)

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)


class FieldKind(str, enum.Enum):
    SCALAR = "scalar"
    RECORD = "record"
    SEQUENCE = "sequence"
    TUPLE = "tuple"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    key: str
    kind: FieldKind
    optional: bool = False
    scalar: Optional[ScalarSpec] = None
    items: Tuple[ScalarSpec, ...] = ()
    record: Optional["RecordSchema"] = None

    @property
    def is_nested(self) -> bool:
        return self.kind in (FieldKind.RECORD, FieldKind.SEQUENCE)


class RecordSchema:
    """Shape of one record: its tag plus its fields in declaration order."""

    def __init__(self, model: Type[BaseModel], tag: str):
        self.model = model
        self.tag = tag
        self.fields: Tuple[FieldSpec, ...] = ()
        self._by_key: Dict[str, FieldSpec] = {}

    @property
    def is_root(self) -> bool:
        return is_root_tag(self.tag)

    def field_for_key(self, key: str) -> Optional[FieldSpec]:
        return self._by_key.get(key)

    def _set_fields(self, fields: List[FieldSpec]) -> None:
        self.fields = tuple(fields)
        self._by_key = {f.key: f for f in fields}

    def __repr__(self) -> str:
        return f"RecordSchema({self.tag!r}, fields={[f.key for f in self.fields]})"


_CACHE: Dict[type, RecordSchema] = {}
_LOCK = threading.RLock()


def record_tag(model: Type[BaseModel]) -> str:
    title = model.model_config.get("title")
    return title if title else model.__name__


def compile_record(model: Type[BaseModel]) -> RecordSchema:
    """Return the (cached) schema for ``model``.

    Raises:
        SchemaError: the model violates a structural rule of the format.
        UnsupportedValueKindError: a field uses a type the format cannot carry.
    """
    if not (inspect.isclass(model) and issubclass(model, BaseModel)):
        raise SchemaError(f"expected a pydantic BaseModel subclass, got {model!r}")
    schema = _CACHE.get(model)
    if schema is not None:
        return schema
    with _LOCK:
        schema = _CACHE.get(model)
        if schema is None:
            pending: Dict[type, RecordSchema] = {}
            schema = _compile(model, pending)
            # publish only complete schemas
            _CACHE.update(pending)
    return schema


def clear_cache() -> None:
    with _LOCK:
        _CACHE.clear()


# ============================================================
# Compilation
# ============================================================
def _compile(model: Type[BaseModel], pending: Dict[type, RecordSchema]) -> RecordSchema:
    if model in _CACHE:
        return _CACHE[model]
    if model in pending:
        return pending[model]

    tag = record_tag(model)
    _check_name(tag, what="record tag", where=model.__name__)
    schema = RecordSchema(model, tag)
    pending[model] = schema

    fields: List[FieldSpec] = []
    seen: Dict[str, str] = {}
    for name, info in model.model_fields.items():
        key = info.alias or name
        where = f"{tag}.{key}"
        _check_name(key, what="field key", where=where)
        if key in seen:
            raise SchemaError(f"{where}: key already used by field '{seen[key]}'")
        seen[key] = name
        fields.append(_compile_field(name, key, info.annotation, list(info.metadata), pending, where))

    schema._set_fields(fields)
    logger.debug("compiled cs2 record %r (%d fields)", tag, len(fields))
    return schema


def _compile_field(
    name: str,
    key: str,
    annotation: Any,
    metadata: List[Any],
    pending: Dict[type, RecordSchema],
    where: str,
) -> FieldSpec:
    tp, metadata = _unwrap_annotated(annotation, metadata)
    tp, optional = _unwrap_optional(tp, where)
    tp, metadata = _unwrap_annotated(tp, metadata)

    if inspect.isclass(tp) and issubclass(tp, BaseModel):
        nested = _compile_nested(tp, key, pending, where)
        return FieldSpec(name, key, FieldKind.RECORD, optional, record=nested)

    origin = get_origin(tp)
    if origin in (list, List):
        args = get_args(tp)
        item = args[0] if args else Any
        item, _ = _unwrap_annotated(item, [])
        if not (inspect.isclass(item) and issubclass(item, BaseModel)):
            raise UnsupportedValueKindError("sequence of scalars", where)
        nested = _compile_nested(item, key, pending, where)
        return FieldSpec(name, key, FieldKind.SEQUENCE, optional, record=nested)

    if origin in (tuple, Tuple):
        args = get_args(tp)
        if not args or args == ((),):
            raise SchemaError(f"{where}: empty tuples cannot be represented")
        if len(args) == 2 and args[1] is Ellipsis:
            raise SchemaError(f"{where}: tuple length must be fixed by the schema")
        items = tuple(_scalar_spec(arg, [], f"{where}[{i}]") for i, arg in enumerate(args))
        return FieldSpec(name, key, FieldKind.TUPLE, optional, items=items)

    return FieldSpec(name, key, FieldKind.SCALAR, optional, scalar=_scalar_spec(tp, metadata, where))


def _compile_nested(model: Type[BaseModel], key: str, pending: Dict[type, RecordSchema], where: str) -> RecordSchema:
    nested = _compile(model, pending)
    if nested.is_root:
        raise SchemaError(f"{where}: root container {nested.tag!r} can only be used at the top level")
    if nested.tag != key:
        raise SchemaError(
            f"{where}: a field hosting a nested record must be keyed by the record tag {nested.tag!r}"
        )
    return nested


def _scalar_spec(tp: Any, metadata: List[Any], where: str) -> ScalarSpec:
    tp, metadata = _unwrap_annotated(tp, metadata)
    if tp is bool:
        return BOOLEAN
    if tp is int:
        markers = [m for m in metadata if is_int_marker(m)]
        if len(markers) > 1:
            raise SchemaError(f"{where}: more than one integer format given")
        return spec_from_marker(markers[0]) if markers else DEFAULT_INT
    if tp is str:
        return STRING
    if tp is bytes:
        return BYTES
    raise UnsupportedValueKindError(_kind_name(tp), where)


def _kind_name(tp: Any) -> str:
    if tp is float or tp is complex or tp is Decimal:
        return "float"
    if tp is _NONE_TYPE or tp is None:
        return "unit"
    if inspect.isclass(tp) and issubclass(tp, enum.Enum):
        return "enum"
    if get_origin(tp) is Literal:
        return "enum"
    if inspect.isclass(tp) and issubclass(tp, BaseModel):
        return "record inside a tuple"
    origin = get_origin(tp)
    if origin in (dict, Dict):
        return "map"
    if origin is not None:
        return getattr(origin, "__name__", str(origin))
    return getattr(tp, "__name__", repr(tp))


def _unwrap_annotated(tp: Any, metadata: List[Any]) -> Tuple[Any, List[Any]]:
    while get_origin(tp) is Annotated:
        args = get_args(tp)
        tp = args[0]
        metadata = list(metadata) + list(args[1:])
    return tp, metadata


def _unwrap_optional(tp: Any, where: str) -> Tuple[Any, bool]:
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not _NONE_TYPE]
        if len(args) != 1:
            raise UnsupportedValueKindError("union", where)
        return args[0], True
    return tp, False


def _check_name(name: str, *, what: str, where: str) -> None:
    if not name or name != name.strip() or any(c.isspace() for c in name):
        raise SchemaError(f"{where}: {what} {name!r} must be non-empty and free of whitespace")
    if FIELD_SEPARATOR in name or name.startswith(DEPTH_MARKER):
        raise SchemaError(f"{where}: {what} {name!r} must not contain '=' or start with '.'")
