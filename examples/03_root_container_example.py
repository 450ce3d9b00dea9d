from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cs2_codec import U8, U16, Cs2Codec


class Version(BaseModel):
    model_config = ConfigDict(title="version")

    major: Optional[U8] = None
    minor: U8 = 3


class Lokstat(BaseModel):
    model_config = ConfigDict(title="lokomotive")

    name: str
    speed: U16 = Field(0, alias="velocity")


class LokstatFile(BaseModel):
    """lokomotive.sr2: a ``[lokomotive]`` container whose fields sit at depth 0."""

    model_config = ConfigDict(title="[lokomotive]")

    version: Version = Field(default_factory=Version)
    lokomotive: List[Lokstat] = Field(default_factory=list)


codec = Cs2Codec(LokstatFile)

text = codec.encode(
    LokstatFile(lokomotive=[Lokstat(name="01 133 DB", velocity=255), Lokstat(name="BR 89", velocity=12)])
)
print(text)

restored = codec.decode(text)
assert restored.lokomotive[1].speed == 12
print(restored.model_dump(by_alias=True))
