from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cs2_codec import U8, U16, Cs2Codec, DecodeOptions


class FunktionStatus(BaseModel):
    model_config = ConfigDict(title="funktionen")

    nr: U8
    wert: Optional[U8] = None


class Lokstat(BaseModel):
    model_config = ConfigDict(title="lokomotive")

    name: str
    speed: U16 = Field(0, alias="velocity")
    direction: U8 = Field(0, alias="richtung")
    funktionen: List[FunktionStatus] = Field(default_factory=list)


# lokomotive.cs2 as written by the central station, with a key this model does not know
cs2_text = '''
lokomotive
 .name=01 133 DB
 .velocity=255
 .richtung=1
 .vmax=120
 .funktionen
 ..nr=0
 ..wert=1
 .funktionen
 ..nr=1
'''.strip()

codec = Cs2Codec(Lokstat, decode_options=DecodeOptions(strict_schema=False))
lok = codec.decode(cs2_text)

print(lok)
print(f"{lok.name}: speed={lok.speed} direction={lok.direction}")
for f in lok.funktionen:
    print(f"  f{f.nr} -> {f.wert}")
