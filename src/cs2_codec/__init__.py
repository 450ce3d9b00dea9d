"""
cs2-codec - reader and writer for the line-oriented cs2 configuration format

cs2 files describe hierarchical records (locomotives, their function slots,
device parameter blocks). Nesting is expressed by leading dots, repeated
blocks with the same tag form a list.

Usage:
    from typing import Optional
    from pydantic import BaseModel, ConfigDict

    import cs2_codec
    from cs2_codec import U8, CompactHex16

    class Lokomotive(BaseModel):
        model_config = ConfigDict(title="lokomotive")

        name: str
        adresse: CompactHex16
        velocity: Optional[U8] = None

    text = cs2_codec.encode(Lokomotive(name="Lok", adresse=5))
    # 'lokomotive\\n .name=Lok\\n .adresse=0x5\\n'
    lok = cs2_codec.decode(text, Lokomotive)
"""

__version__ = "0.2.0"

from .codec import Cs2Codec
from .config import DecodeOptions, EncodeOptions, RawLogPolicy
from .decoder import Decoder, DecoderState, decode, decode_dict, from_str
from .encoder import Encoder, encode, to_string
from .errors import (
    Cs2Error,
    DecodeError,
    DuplicateFieldError,
    EncodeError,
    ExpectedBooleanError,
    ExpectedBytesError,
    ExpectedFieldSeparatorError,
    ExpectedIntegerError,
    ExpectedNewlineError,
    ExpectedStringError,
    ExpectedTupleSeparatorError,
    InconsistentIndentationDepthError,
    SchemaError,
    TagMismatchError,
    TrailingInputError,
    UnexpectedEndOfInputError,
    UnknownFieldError,
    UnrepresentableValueError,
    UnsupportedValueKindError,
)
from .grammar import (
    I8,
    I16,
    I32,
    I64,
    U8,
    U16,
    U32,
    U64,
    CompactHex8,
    CompactHex16,
    CompactHex32,
    CompactHex64,
    Hex,
    Hex8,
    Hex16,
    Hex32,
    Hex64,
    ScalarKind,
    ScalarSpec,
    Signed,
    Unsigned,
)
from .schema import FieldKind, FieldSpec, RecordSchema, compile_record

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "decode",
    "decode_dict",
    "to_string",
    "from_str",
    "Cs2Codec",
    "Encoder",
    "Decoder",
    "DecoderState",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    "RawLogPolicy",
    # Schema
    "compile_record",
    "RecordSchema",
    "FieldSpec",
    "FieldKind",
    "ScalarKind",
    "ScalarSpec",
    # Field types
    "Signed",
    "Unsigned",
    "Hex",
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "Hex8",
    "Hex16",
    "Hex32",
    "Hex64",
    "CompactHex8",
    "CompactHex16",
    "CompactHex32",
    "CompactHex64",
    # Errors
    "Cs2Error",
    "SchemaError",
    "EncodeError",
    "UnsupportedValueKindError",
    "UnrepresentableValueError",
    "DecodeError",
    "UnexpectedEndOfInputError",
    "ExpectedBooleanError",
    "ExpectedIntegerError",
    "ExpectedStringError",
    "ExpectedBytesError",
    "ExpectedFieldSeparatorError",
    "ExpectedTupleSeparatorError",
    "ExpectedNewlineError",
    "TagMismatchError",
    "InconsistentIndentationDepthError",
    "UnknownFieldError",
    "DuplicateFieldError",
    "TrailingInputError",
]
