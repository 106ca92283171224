"""
Value codecs for the Focus protocol.

Focus payloads are plain ASCII: scalars are base-10 numbers, booleans are
``0``/``1`` (``false``/``true`` accepted on input), vectors are
whitespace-separated tokens and colors are flat runs of 3 (RGB) or 4
(RGBW) channels.
"""

from typing import List, Optional, Sequence

from dygma_focus.utils.exceptions import (
    EmptyResponseError,
    InvalidValueError,
    ParseBoolError,
    ParseNumericalError,
    PartCountError,
    ValueAboveLimitError,
)


def parse_unsigned(text: str, bits: int = 16) -> int:
    """
    Parse a base-10 unsigned integer that must fit in ``bits`` bits.

    Args:
        text: Decimal token (e.g., "41").
        bits: Integer width (8, 16 or 32).

    Returns:
        Parsed value.

    Raises:
        ParseNumericalError: If text is not a number or does not fit.

    Example:
        >>> parse_unsigned("255", 8)
        255
    """
    digits = text[1:] if text.startswith("+") else text
    if not (digits.isascii() and digits.isdigit()):
        raise ParseNumericalError(text)

    value = int(digits)
    if value >= 1 << bits:
        raise ParseNumericalError(text)

    return value


def check_unsigned(label: str, value: int, bits: int = 16, maximum: Optional[int] = None) -> int:
    """
    Validate an outgoing number before it is written to the device.

    Args:
        label: Name reported in the error (e.g., "layer").
        value: Number to send.
        bits: Integer width of the firmware field.
        maximum: Tighter upper limit than the field width allows.

    Returns:
        The value, unchanged.

    Raises:
        InvalidValueError: If value is not a non-negative integer.
        ValueAboveLimitError: If value exceeds the limit.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValueError(f"{label} must be an integer, got: {value!r}")
    if value < 0:
        raise InvalidValueError(f"{label} must not be negative, got: {value}")

    limit = (1 << bits) - 1 if maximum is None else maximum
    if value > limit:
        raise ValueAboveLimitError(label=label, max=limit, provided=value)

    return value


def parse_bool(text: str) -> bool:
    """
    Parse a boolean response.

    Raises:
        EmptyResponseError: If the response is empty.
        ParseBoolError: For anything but 0, 1, false, true.
    """
    if not text:
        raise EmptyResponseError()
    if text in ("0", "false"):
        return False
    if text in ("1", "true"):
        return True
    raise ParseBoolError(text)


def encode_bool(state: bool) -> str:
    return "1" if state else "0"


def decode_numbers(text: str, bits: int = 16) -> List[int]:
    """
    Decode a whitespace-separated vector of unsigned integers.

    Example:
        >>> decode_numbers("41 30 31")
        [41, 30, 31]
    """
    return [parse_unsigned(token, bits) for token in text.split()]


def encode_numbers(values: Sequence[int], bits: int = 16, label: str = "value") -> str:
    """
    Encode a vector of unsigned integers as space-separated decimal tokens.

    Raises:
        InvalidValueError: If an element is negative or too wide.
    """
    return " ".join(str(check_unsigned(label, value, bits)) for value in values)


def decode_colors(text: str, color_cls) -> list:
    """
    Decode a flat run of color channels into color values.

    Args:
        text: Whitespace-separated channels.
        color_cls: RGB or RGBW; its ARITY sets the chunk size.

    Raises:
        PartCountError: If the token count is not a multiple of the arity.
        ParseNumericalError: If a channel is not an 8-bit number.
    """
    tokens = text.split()
    arity = color_cls.ARITY
    colors = []
    for start in range(0, len(tokens), arity):
        chunk = tokens[start:start + arity]
        if len(chunk) != arity:
            raise PartCountError(expected=arity, actual=len(chunk))
        colors.append(color_cls.from_parts(chunk))
    return colors


def encode_colors(colors: Sequence) -> str:
    return " ".join(color.to_wire() for color in colors)


def split_lines(text: str) -> List[str]:
    """Split a multi-line response, dropping carriage returns."""
    return [line.replace("\r", "") for line in text.split("\n")] if text else []
