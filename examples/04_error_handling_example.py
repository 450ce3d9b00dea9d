from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, ValidationError

import cs2_codec
from cs2_codec import U8, CompactHex16

logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


class Lokomotive(BaseModel):
    model_config = ConfigDict(title="lokomotive")

    name: str
    adresse: CompactHex16
    velocity: U8 = 0


broken_documents = {
    "wrong tag": "lok\n .name=Lok\n .adresse=0x5\n",
    "not hex": "lokomotive\n .name=Lok\n .adresse=5\n",
    "too deep": "lokomotive\n .name=Lok\n ..adresse=0x5\n",
    "out of range": "lokomotive\n .name=Lok\n .adresse=0x5\n .velocity=300\n",
    "missing field": "lokomotive\n .name=Lok\n",
}

# CS2_CODEC_LOG_RAW=true puts a preview of the failing text into the debug log
for label, text in broken_documents.items():
    try:
        cs2_codec.decode(text, Lokomotive)
    except cs2_codec.DecodeError as e:
        print(f"[{label}] {type(e).__name__} at {e.line}:{e.column}: {e.detail}")
    except ValidationError as e:
        print(f"[{label}] ValidationError: {e.error_count()} error(s)")
