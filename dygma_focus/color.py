"""
LED color value types.

Colors travel on the wire as whitespace-separated decimal channels,
e.g. ``"255 196 0"`` for RGB or ``"255 196 0 0"`` for RGBW.
"""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from dygma_focus.protocol.codec import parse_unsigned
from dygma_focus.utils.exceptions import PartCountError


class RGB(BaseModel):
    """The LED RGB color."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red component")
    g: int = Field(ge=0, le=255, description="Green component")
    b: int = Field(ge=0, le=255, description="Blue component")

    ARITY: ClassVar[int] = 3

    @classmethod
    def from_parts(cls, parts) -> "RGB":
        """Build from exactly three decimal tokens."""
        if len(parts) != cls.ARITY:
            raise PartCountError(expected=cls.ARITY, actual=len(parts))
        r, g, b = (parse_unsigned(part, 8) for part in parts)
        return cls(r=r, g=g, b=b)

    @classmethod
    def parse(cls, text: str) -> "RGB":
        return cls.from_parts(text.split())

    def to_wire(self) -> str:
        return f"{self.r} {self.g} {self.b}"


class RGBW(BaseModel):
    """The LED RGBW color."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red component")
    g: int = Field(ge=0, le=255, description="Green component")
    b: int = Field(ge=0, le=255, description="Blue component")
    w: int = Field(ge=0, le=255, description="White component")

    ARITY: ClassVar[int] = 4

    @classmethod
    def from_parts(cls, parts) -> "RGBW":
        """Build from exactly four decimal tokens."""
        if len(parts) != cls.ARITY:
            raise PartCountError(expected=cls.ARITY, actual=len(parts))
        r, g, b, w = (parse_unsigned(part, 8) for part in parts)
        return cls(r=r, g=g, b=b, w=w)

    @classmethod
    def parse(cls, text: str) -> "RGBW":
        return cls.from_parts(text.split())

    def to_wire(self) -> str:
        return f"{self.r} {self.g} {self.b} {self.w}"
