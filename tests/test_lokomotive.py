from __future__ import annotations

from typing import List, Optional, Tuple

import pytest
from pydantic import BaseModel, ConfigDict, Field, ValidationError

import cs2_codec
from cs2_codec import I8, U8, U16, CompactHex16, Hex16, Hex32

Blocks = Tuple[(U8,) * 16]


class Funktionen(BaseModel):
    model_config = ConfigDict(title="funktionen")

    nr: U8
    typ: U16
    dauer: I8
    wert: U8


class Funktionen2(BaseModel):
    model_config = ConfigDict(title="funktionen_2")

    nr: U8
    typ: Optional[U16] = None
    dauer: I8
    wert: U8


class Lokomotive(BaseModel):
    model_config = ConfigDict(title="lokomotive")

    name: str
    vorname: Optional[str] = None
    uid: Hex16
    mfxuid: Optional[Hex32] = None
    adresse: CompactHex16
    funktionen: List[Funktionen] = Field(default_factory=list)
    funktionen_2: List[Funktionen2] = Field(default_factory=list)
    blocks: Optional[Blocks] = None


SIMPLE = Lokomotive(name="Lok", uid=0x4001, adresse=5)

FULL_TEXT = """lokomotive
 .name=Lok
 .uid=0x4001
 .adresse=0x5
 .funktionen
 ..nr=1
 ..typ=1
 ..dauer=-1
 ..wert=0
 .funktionen
 ..nr=2
 ..typ=2
 ..dauer=0
 ..wert=0
 .funktionen_2
 ..nr=16
 ..typ=16
 ..dauer=0
 ..wert=0
 .funktionen_2
 ..nr=17
 ..typ=17
 ..dauer=0
 ..wert=0
 .blocks=0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0
"""


def _full(mfxuid=None) -> Lokomotive:
    return Lokomotive(
        name="Lok",
        uid=0x4001,
        mfxuid=mfxuid,
        adresse=5,
        funktionen=[
            Funktionen(nr=1, typ=1, dauer=-1, wert=0),
            Funktionen(nr=2, typ=2, dauer=0, wert=0),
        ],
        funktionen_2=[
            Funktionen2(nr=16, typ=16, dauer=0, wert=0),
            Funktionen2(nr=17, typ=17, dauer=0, wert=0),
        ],
        blocks=(0,) * 16,
    )


def test_serialize_simple():
    assert cs2_codec.encode(SIMPLE) == "lokomotive\n .name=Lok\n .uid=0x4001\n .adresse=0x5\n"


def test_serialize_full():
    assert cs2_codec.encode(_full()) == FULL_TEXT


def test_sequence_blocks_share_tag_and_depth():
    lines = cs2_codec.encode(_full()).splitlines()
    starts = [i for i, ln in enumerate(lines) if ln == " .funktionen"]
    assert starts == [4, 9]
    # two consecutive 4-line blocks, nothing in between
    assert all(ln.startswith(" ..") for ln in lines[5:9] + lines[10:14])


@pytest.mark.parametrize(
    "text",
    [
        "lokomotive\n     .name=Lok\n     .uid=0x4001\n     .adresse=0x5",
        "\n    lokomotive\n     .name=Lok\n     .uid=0x4001\n     .adresse=0x5",
        "\n    lokomotive\n     .name=Lok\n     .uid=0x4001\n     .adresse=0x5\n    ",
    ],
)
def test_deserialize_simple(text):
    assert cs2_codec.decode(text, Lokomotive) == SIMPLE


def test_deserialize_full_indented():
    text = """
        lokomotive
         .name=Lok
         .uid=0x4001
         .mfxuid=0xffcd995d
         .adresse=0x5
         .funktionen
         ..nr=1
         ..typ=1
         ..dauer=-1
         ..wert=0
         .funktionen
         ..nr=2
         ..typ=2
         ..dauer=0
         ..wert=0
         .funktionen_2
         ..nr=16
         ..typ=16
         ..dauer=0
         ..wert=0
         .funktionen_2
         ..nr=17
         ..typ=17
         ..dauer=0
         ..wert=0
         .blocks=0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0
        """
    expected = _full(mfxuid=0xFFCD995D)
    assert cs2_codec.decode(text, Lokomotive) == expected


def test_round_trip():
    value = _full(mfxuid=0xFFCD995D)
    assert cs2_codec.decode(cs2_codec.encode(value), Lokomotive) == value


def test_absent_optionals_fall_back_to_defaults():
    lok = cs2_codec.decode(FULL_TEXT, Lokomotive)
    assert lok.vorname is None
    assert lok.mfxuid is None
    assert "vorname" not in FULL_TEXT and "mfxuid" not in FULL_TEXT


def test_missing_required_field_is_a_validation_error():
    with pytest.raises(ValidationError):
        cs2_codec.decode("lokomotive\n .name=Lok\n", Lokomotive)


def test_sixteen_tuple_does_not_fit_fifteen_slots():
    class Short(BaseModel):
        model_config = ConfigDict(title="lokomotive")

        blocks: Tuple[(U8,) * 15]

    line = "lokomotive\n .blocks=" + " ".join(["0"] * 16) + "\n"
    with pytest.raises(cs2_codec.ExpectedNewlineError):
        cs2_codec.decode(line, Short)
