from typing import List, Optional, Tuple

import pytest
from pydantic import BaseModel, ConfigDict

from cs2_codec import (
    U8,
    EncodeError,
    Encoder,
    EncodeOptions,
    UnrepresentableValueError,
    UnsupportedValueKindError,
    encode,
    to_string,
)


class Wert(BaseModel):
    model_config = ConfigDict(title="wert")

    low: U8
    high: Optional[U8] = None


class Parameter(BaseModel):
    model_config = ConfigDict(title="parameter")

    id: U8
    wert: Wert


class Geraet(BaseModel):
    model_config = ConfigDict(title="geraet")

    name: str
    aktiv: bool = False
    kennung: Optional[bytes] = None
    pins: Optional[Tuple[U8, bool, str]] = None
    parameter: List[Parameter] = []


def test_nesting_depth_is_dot_count():
    value = Geraet(name="GFP", parameter=[Parameter(id=1, wert=Wert(low=2, high=3))])
    assert encode(value) == (
        "geraet\n"
        " .name=GFP\n"
        " .aktiv=0\n"
        " .parameter\n"
        " ..id=1\n"
        " ..wert\n"
        " ...low=2\n"
        " ...high=3\n"
    )


def test_absent_optional_leaves_no_line():
    text = encode(Geraet(name="GFP", parameter=[Parameter(id=1, wert=Wert(low=2))]))
    assert "high" not in text
    assert "kennung" not in text
    assert "pins" not in text


def test_empty_sequence_leaves_no_line():
    assert encode(Geraet(name="GFP", aktiv=True)) == "geraet\n .name=GFP\n .aktiv=1\n"


def test_tuple_and_bytes_fields():
    text = encode(Geraet(name="GFP", kennung=b"\xca\xfe", pins=(7, True, "A1")))
    assert " .kennung=0xcafe\n" in text
    assert " .pins=7 1 A1\n" in text


def test_trailing_newline_can_be_turned_off():
    assert encode(Wert(low=1), EncodeOptions(trailing_newline=False)) == "wert\n .low=1"


def test_to_string_alias():
    assert to_string(Wert(low=1)) == encode(Wert(low=1))


def test_line_break_in_string_is_unrepresentable():
    with pytest.raises(UnrepresentableValueError):
        encode(Geraet(name="two\nlines"))


def test_blank_in_tuple_string_is_unrepresentable():
    with pytest.raises(UnrepresentableValueError):
        encode(Geraet(name="GFP", pins=(1, False, "A 1")))


def test_out_of_range_value_bypassing_validation():
    with pytest.raises(EncodeError, match="out of range"):
        encode(Wert.model_construct(low=300))


def test_float_field_is_unsupported():
    class Messung(BaseModel):
        model_config = ConfigDict(title="messung")

        wert: float

    with pytest.raises(UnsupportedValueKindError):
        encode(Messung(wert=1.5))


def test_non_model_value_is_unsupported():
    with pytest.raises(UnsupportedValueKindError):
        encode({"name": "Lok"})


# ============================================================
# Low level protocol
# ============================================================
def test_encoder_protocol():
    enc = Encoder()
    enc.begin_record("lokomotive")
    enc.field("name", "Lok")
    enc.nested_field("funktionen")
    enc.begin_record("funktionen")
    assert enc.depth == 2
    enc.field("nr", "1")
    enc.end_record()
    enc.field("adresse", "0x5")
    enc.end_record()
    assert enc.getvalue() == "lokomotive\n .name=Lok\n .funktionen\n ..nr=1\n .adresse=0x5\n"


def test_encoder_root_container_protocol():
    enc = Encoder()
    enc.begin_record("[lokomotive]")
    assert enc.depth == 0
    enc.nested_field("version")
    enc.begin_record("version")
    enc.field("minor", "3")
    enc.end_record()
    enc.end_record()
    assert enc.getvalue() == "[lokomotive]\nversion\n .minor=3\n"


def test_field_outside_record():
    with pytest.raises(EncodeError):
        Encoder().field("name", "Lok")


def test_nested_tag_must_match_key():
    enc = Encoder()
    enc.begin_record("lokomotive")
    enc.nested_field("funktionen")
    with pytest.raises(EncodeError):
        enc.begin_record("funktion")


def test_nested_record_needs_key_line():
    enc = Encoder()
    enc.begin_record("lokomotive")
    with pytest.raises(EncodeError):
        enc.begin_record("funktionen")


def test_unbalanced_end_record():
    with pytest.raises(EncodeError):
        Encoder().end_record()


def test_getvalue_with_open_record():
    enc = Encoder()
    enc.begin_record("lokomotive")
    with pytest.raises(EncodeError):
        enc.getvalue()


def test_single_top_level_record():
    enc = Encoder()
    enc.begin_record("lokomotive")
    enc.end_record()
    with pytest.raises(EncodeError):
        enc.begin_record("lokomotive")


@pytest.mark.parametrize("value_text", ["a\nb", "a\rb"])
def test_field_value_with_line_break(value_text):
    enc = Encoder()
    enc.begin_record("lokomotive")
    with pytest.raises(UnrepresentableValueError):
        enc.field("name", value_text)


@pytest.mark.parametrize("key", ["na=me", "", "na\nme"])
def test_invalid_field_key(key):
    enc = Encoder()
    enc.begin_record("lokomotive")
    with pytest.raises(EncodeError):
        enc.field(key, "Lok")
    with pytest.raises(EncodeError):
        enc.nested_field(key)
