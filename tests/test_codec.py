from __future__ import annotations

import pytest

from dygma_focus.color import RGB, RGBW
from dygma_focus.protocol.codec import (
    check_unsigned,
    decode_colors,
    decode_numbers,
    encode_bool,
    encode_colors,
    encode_numbers,
    parse_bool,
    parse_unsigned,
    split_lines,
)
from dygma_focus.utils.exceptions import (
    EmptyResponseError,
    InvalidValueError,
    ParseBoolError,
    ParseNumericalError,
    PartCountError,
    ValueAboveLimitError,
)


@pytest.mark.parametrize("bits, values", [
    (8, [0, 1, 127, 255]),
    (16, [0, 41, 30, 31, 65535]),
    (32, [0, 70000, 4294967295]),
])
def test_number_vectors_survive_encoding(bits: int, values: list) -> None:
    assert decode_numbers(encode_numbers(values, bits), bits) == values


def test_decode_numbers_tolerates_extra_whitespace() -> None:
    assert decode_numbers("  41  30\n31\r\n") == [41, 30, 31]
    assert decode_numbers("") == []


@pytest.mark.parametrize("text", ["256", "-1", "abc", "1.5", "", "٣"])
def test_parse_unsigned_rejects_invalid_u8(text: str) -> None:
    with pytest.raises(ParseNumericalError):
        parse_unsigned(text, 8)


def test_parse_unsigned_accepts_plus_sign() -> None:
    assert parse_unsigned("+42") == 42


def test_encode_numbers_rejects_values_too_wide() -> None:
    with pytest.raises(ValueAboveLimitError):
        encode_numbers([1, 256], bits=8)

    with pytest.raises(InvalidValueError):
        encode_numbers([-1])


def test_check_unsigned_limits() -> None:
    assert check_unsigned("overlap", 80, bits=8, maximum=80) == 80

    with pytest.raises(ValueAboveLimitError) as exc_info:
        check_unsigned("overlap", 81, bits=8, maximum=80)
    assert exc_info.value.max == 80
    assert exc_info.value.provided == 81
    assert "overlap beyond upper limit" in str(exc_info.value)

    with pytest.raises(InvalidValueError):
        check_unsigned("layer", True)
    with pytest.raises(InvalidValueError):
        check_unsigned("layer", "3")


@pytest.mark.parametrize("text, expected", [
    ("0", False),
    ("1", True),
    ("false", False),
    ("true", True),
])
def test_parse_bool(text: str, expected: bool) -> None:
    assert parse_bool(text) is expected


def test_parse_bool_errors() -> None:
    with pytest.raises(EmptyResponseError):
        parse_bool("")
    with pytest.raises(ParseBoolError):
        parse_bool("2")


def test_encode_bool() -> None:
    assert encode_bool(True) == "1"
    assert encode_bool(False) == "0"


def test_colors_decode_in_chunks() -> None:
    assert decode_colors("255 0 0 0 255 0", RGB) == [RGB(r=255, g=0, b=0), RGB(r=0, g=255, b=0)]
    assert decode_colors("1 2 3 4", RGBW) == [RGBW(r=1, g=2, b=3, w=4)]
    assert decode_colors("", RGB) == []


def test_colors_encode_as_flat_channels() -> None:
    colors = [RGBW(r=1, g=2, b=3, w=4), RGBW(r=5, g=6, b=7, w=8)]
    assert encode_colors(colors) == "1 2 3 4 5 6 7 8"


@pytest.mark.parametrize("text, color_cls", [
    ("1 2 3 4", RGB),
    ("1 2 3 4 5", RGB),
    ("1 2 3", RGBW),
    ("1 2 3 4 5 6", RGBW),
])
def test_colors_reject_partial_chunks(text: str, color_cls) -> None:
    with pytest.raises(PartCountError):
        decode_colors(text, color_cls)


def test_color_channel_must_fit_in_a_byte() -> None:
    with pytest.raises(ParseNumericalError):
        RGB.parse("256 0 0")


def test_split_lines() -> None:
    assert split_lines("version\r\nhelp\nled.mode") == ["version", "help", "led.mode"]
    assert split_lines("") == []
