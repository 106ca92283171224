"""
Serial port enumeration and Dygma keyboard discovery.

Devices are recognized by their USB vendor/product id against the hardware
catalog; nothing is written to a port while scanning.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

import serial.tools.list_ports

from dygma_focus.hardware.catalog import CATALOG, HardwareDescriptor, lookup
from dygma_focus.utils.exceptions import NoDevicesDetectedError, SerialPortEnumerationError


logger = logging.getLogger(__name__)


@dataclass
class PortInfo:
    """Information about an available serial port."""

    name: str
    description: str
    hardware_id: str
    vendor_id: Optional[int] = None
    product_id: Optional[int] = None

    @property
    def is_usb(self) -> bool:
        return self.vendor_id is not None and self.product_id is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "hardware_id": self.hardware_id,
            "vendor_id": self.vendor_id,
            "product_id": self.product_id,
        }


@dataclass
class Device:
    """A supported keyboard found on a serial port."""

    hardware: HardwareDescriptor
    port: str
    serial_number: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "port": self.port,
            "serial_number": self.serial_number,
            **self.hardware.to_dict(),
        }


def _comports() -> list:
    try:
        return list(serial.tools.list_ports.comports())
    except OSError as e:
        raise SerialPortEnumerationError(f"error enumerating serial ports: {e}") from e


def list_available_ports() -> List[PortInfo]:
    """
    List all serial ports on the system, in OS enumeration order.

    Raises:
        SerialPortEnumerationError: If the OS cannot list ports.
    """
    ports = [
        PortInfo(
            name=port.device,
            description=port.description or "Unknown",
            hardware_id=port.hwid or "",
            vendor_id=port.vid,
            product_id=port.pid,
        )
        for port in _comports()
    ]

    logger.debug(f"Found {len(ports)} serial ports")
    return ports


def find_all_devices(
    catalog: Mapping[Tuple[int, int], HardwareDescriptor] = CATALOG,
) -> List[Device]:
    """
    Find every supported keyboard among the serial ports.

    Args:
        catalog: Hardware catalog to match against.

    Returns:
        Discovered devices, preserving OS enumeration order. Ports that are
        not USB or not in the catalog are skipped.

    Raises:
        SerialPortEnumerationError: If the OS cannot list ports.
    """
    devices = []

    for port in _comports():
        if port.vid is None or port.pid is None:
            logger.debug(f"Skipping {port.device}: not a USB port")
            continue

        hardware = lookup(port.vid, port.pid, catalog)
        if hardware is None:
            logger.debug(f"Skipping {port.device}: unsupported USB id {port.vid:04x}:{port.pid:04x}")
            continue

        logger.info(f"Found {hardware.display_name} on {port.device}")
        devices.append(
            Device(hardware=hardware, port=port.device, serial_number=port.serial_number)
        )

    return devices


def find_first_device(
    catalog: Mapping[Tuple[int, int], HardwareDescriptor] = CATALOG,
) -> Device:
    """
    Find the first supported keyboard.

    Raises:
        NoDevicesDetectedError: If no supported keyboard is connected.
        SerialPortEnumerationError: If the OS cannot list ports.
    """
    devices = find_all_devices(catalog)

    if not devices:
        logger.warning("No supported keyboard found on any serial port")
        raise NoDevicesDetectedError()

    if len(devices) > 1:
        logger.warning(f"Multiple keyboards found, using first one: {devices[0].port}")

    return devices[0]
