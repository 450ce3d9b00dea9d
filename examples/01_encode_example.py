from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

import cs2_codec
from cs2_codec import I8, U8, U16, CompactHex16, Hex16, Hex32


class Funktion(BaseModel):
    model_config = ConfigDict(title="funktionen")

    nr: U8
    typ: U16
    dauer: I8 = 0
    wert: U8 = 0


class Lokomotive(BaseModel):
    model_config = ConfigDict(title="lokomotive")

    name: str
    uid: Hex16
    mfxuid: Optional[Hex32] = None
    adresse: CompactHex16
    funktionen: List[Funktion] = Field(default_factory=list)
    blocks: Optional[Tuple[U8, U8, U8, U8]] = None


lok = Lokomotive(
    name="BR 86 001",
    uid=0x4001,
    adresse=0x5,
    funktionen=[Funktion(nr=0, typ=1), Funktion(nr=1, typ=2, dauer=-1)],
    blocks=(0, 0, 1, 0),
)

print(cs2_codec.encode(lok))
