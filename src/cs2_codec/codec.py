# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from .config import DEFAULT_DECODE_OPTIONS, DEFAULT_ENCODE_OPTIONS, DecodeOptions, EncodeOptions
from .decoder import decode, decode_dict
from .encoder import encode
from .errors import EncodeError
from .schema import RecordSchema, compile_record


class Cs2Codec:
    """cs2 codec bound to one record model.

    The schema is compiled once, so a broken model fails at construction
    instead of at the first encode/decode call.
    """

    def __init__(
        self,
        model: Type[BaseModel],
        encode_options: Optional[EncodeOptions] = None,
        decode_options: Optional[DecodeOptions] = None,
    ):
        self.model = model
        self.encode_options = encode_options or DEFAULT_ENCODE_OPTIONS
        self.decode_options = decode_options or DEFAULT_DECODE_OPTIONS
        self.schema: RecordSchema = compile_record(model)

    @property
    def tag(self) -> str:
        return self.schema.tag

    def encode(self, value: BaseModel) -> str:
        if not isinstance(value, self.model):
            raise EncodeError(f"expected {self.model.__name__}, got {type(value).__name__}")
        return encode(value, self.encode_options)

    def decode(self, text: str) -> BaseModel:
        return decode(text, self.model, self.decode_options)

    def decode_dict(self, text: str) -> Dict[str, Any]:
        """Decode without pydantic validation (fields keyed by their cs2 key)."""
        return decode_dict(text, self.model, self.decode_options)
