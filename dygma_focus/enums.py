"""
Enumerated firmware settings and their wire codes.

Every member's value is the decimal code the firmware uses on the wire.
Decoding an unknown code is an error, never a silent default.
"""

from enum import IntEnum

from dygma_focus.protocol.codec import parse_unsigned
from dygma_focus.utils.exceptions import InvalidEnumValueError


class WireEnum(IntEnum):
    """IntEnum whose members round-trip through their decimal wire code."""

    @classmethod
    def from_wire(cls, text: str):
        """
        Decode a wire code.

        Raises:
            ParseNumericalError: If the text is not a decimal number.
            InvalidEnumValueError: If the number is not a known code.
        """
        code = parse_unsigned(text, 8)
        try:
            return cls(code)
        except ValueError:
            raise InvalidEnumValueError(cls.__name__, text) from None

    def to_wire(self) -> str:
        return str(int(self))


class LedMode(WireEnum):
    """The LED mode states."""

    STATIC = 0      # Color of the layer you are on
    RAINBOW = 1
    CYCLE = 2
    STALKER = 3     # Off until pressed, fades back to off
    RED = 4
    GREEN = 5
    BLUE = 6
    WHITE = 7
    OFF = 8
    DEBUG = 9       # Inner three LEDs on both sides green
    BLUETOOTH = 10  # Emulates the bluetooth connect sequence


class WirelessPowerMode(WireEnum):
    """RF power level; higher trades battery life for range."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


class Side(WireEnum):
    """Keyboard half."""

    RIGHT = 0
    LEFT = 1
