"""
Static catalog of supported Dygma keyboards, keyed by USB vendor/product id.

The ANSI and ISO variants of the Raise and Raise 2 enumerate with the same
USB ids in application mode, so each pair has exactly one entry here.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple


class DeviceFamily(Enum):
    """Keyboard family (connection type or physical layout)."""
    WIRED = "wired"
    WIRELESS = "wireless"
    ANSI = "ansi"
    ISO = "iso"


@dataclass(frozen=True)
class Grid:
    """LED/key matrix dimensions."""

    rows: int
    columns: int

    @property
    def size(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True)
class HardwareDescriptor:
    """Capabilities of one supported keyboard model/mode."""

    vendor_id: int
    product_id: int
    display_name: str
    product: str
    family: DeviceFamily
    keyboard: Optional[Grid]
    keyboard_underglow: Optional[Grid]
    rgbw_mode: bool
    bootloader: bool
    wireless: bool
    homepage_url: str
    update_instructions: str

    @property
    def usb_id(self) -> Tuple[int, int]:
        return (self.vendor_id, self.product_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "vendor_id": f"0x{self.vendor_id:04x}",
            "product_id": f"0x{self.product_id:04x}",
            "display_name": self.display_name,
            "family": self.family.value,
            "bootloader": self.bootloader,
            "wireless": self.wireless,
            "rgbw_mode": self.rgbw_mode,
        }


DYGMA_VID = 0x35EF
RAISE_VID = 0x1209

_DEFY_URL = "https://www.dygma.com/defy/"
_RAISE_URL = "https://www.dygma.com/raise/"
_RAISE_2_URL = "https://www.dygma.com/raise2/"

_ESCAPE_RESET_INSTRUCTIONS = (
    "To update the firmware, the keyboard needs a special reset. When the countdown "
    "starts, press and hold the Escape key. Soon after the countdown finished, the "
    "Neuron's light should start a blue pulsing pattern, and the flashing will proceed. "
    "At this point, you should release the Escape key."
)
_BUTTON_RESET_INSTRUCTIONS = (
    "To update the firmware, press the button at the bottom. You must not hold any key "
    "on the keyboard while the countdown is in progress, nor afterwards, until the "
    "flashing is finished. When the countdown reaches zero, the Neuron's light should "
    "start a blue pulsing pattern, and flashing will then proceed."
)

_KEYS = Grid(rows=5, columns=16)


DEVICES: Tuple[HardwareDescriptor, ...] = (
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0010,
        display_name="Dygma Defy Wired", product="Defy", family=DeviceFamily.WIRED,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=2, columns=89),
        rgbw_mode=True, bootloader=False, wireless=False,
        homepage_url=_DEFY_URL, update_instructions=_ESCAPE_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0011,
        display_name="Dygma Defy Wired (Bootloader)", product="Defy", family=DeviceFamily.WIRED,
        keyboard=None, keyboard_underglow=None,
        rgbw_mode=True, bootloader=True, wireless=True,
        homepage_url=_DEFY_URL, update_instructions=_BUTTON_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0012,
        display_name="Dygma Defy Wireless", product="Defy", family=DeviceFamily.WIRELESS,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=2, columns=89),
        rgbw_mode=True, bootloader=False, wireless=True,
        homepage_url=_DEFY_URL, update_instructions=_ESCAPE_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0013,
        display_name="Dygma Defy Wireless (Bootloader)", product="Defy", family=DeviceFamily.WIRELESS,
        keyboard=None, keyboard_underglow=None,
        rgbw_mode=True, bootloader=True, wireless=True,
        homepage_url=_DEFY_URL, update_instructions=_BUTTON_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=RAISE_VID, product_id=0x2201,
        display_name="Dygma Raise", product="Raise", family=DeviceFamily.ANSI,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=6, columns=22),
        rgbw_mode=False, bootloader=False, wireless=False,
        homepage_url=_RAISE_URL, update_instructions=_ESCAPE_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=RAISE_VID, product_id=0x2200,
        display_name="Dygma Raise (Bootloader)", product="Raise", family=DeviceFamily.ANSI,
        keyboard=None, keyboard_underglow=None,
        rgbw_mode=False, bootloader=True, wireless=False,
        homepage_url=_RAISE_URL, update_instructions=_BUTTON_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0021,
        display_name="Dygma Raise 2", product="Raise 2", family=DeviceFamily.ANSI,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=4, columns=44),
        rgbw_mode=True, bootloader=False, wireless=True,
        homepage_url=_RAISE_2_URL, update_instructions=_ESCAPE_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0020,
        display_name="Dygma Raise 2 ANSI (Bootloader)", product="Raise 2", family=DeviceFamily.ANSI,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=4, columns=44),
        rgbw_mode=True, bootloader=True, wireless=True,
        homepage_url=_RAISE_2_URL, update_instructions=_BUTTON_RESET_INSTRUCTIONS,
    ),
    HardwareDescriptor(
        vendor_id=DYGMA_VID, product_id=0x0022,
        display_name="Dygma Raise 2 ISO (Bootloader)", product="Raise 2", family=DeviceFamily.ISO,
        keyboard=_KEYS, keyboard_underglow=Grid(rows=4, columns=44),
        rgbw_mode=True, bootloader=True, wireless=True,
        homepage_url=_RAISE_2_URL, update_instructions=_BUTTON_RESET_INSTRUCTIONS,
    ),
)


def build_catalog(
    descriptors: Iterable[HardwareDescriptor],
) -> Mapping[Tuple[int, int], HardwareDescriptor]:
    """
    Index descriptors by (vendor id, product id).

    Args:
        descriptors: Hardware descriptors to index.

    Returns:
        Read-only mapping from USB id pair to descriptor.

    Raises:
        ValueError: If two descriptors share a USB id pair.
    """
    index = {}
    for descriptor in descriptors:
        key = descriptor.usb_id
        if key in index:
            raise ValueError(
                f"Duplicate USB id {key[0]:04x}:{key[1]:04x}: "
                f"{index[key].display_name!r} and {descriptor.display_name!r}"
            )
        index[key] = descriptor
    return MappingProxyType(index)


CATALOG = build_catalog(DEVICES)


def lookup(
    vendor_id: int,
    product_id: int,
    catalog: Mapping[Tuple[int, int], HardwareDescriptor] = CATALOG,
) -> Optional[HardwareDescriptor]:
    """Return the descriptor for a USB id pair, or None if unsupported."""
    return catalog.get((vendor_id, product_id))
