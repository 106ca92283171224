"""
Protocol package for Focus serial communication.
"""

from dygma_focus.protocol.interface import Transport
from dygma_focus.protocol.serial_transport import SerialTransport, open_serial_transport
from dygma_focus.protocol.session import SENTINEL, TransportSession
from dygma_focus.protocol.port_scanner import (
    PortInfo,
    Device,
    list_available_ports,
    find_all_devices,
    find_first_device,
)
from dygma_focus.protocol.logger import get_protocol_logger

__all__ = [
    "Transport",
    "SerialTransport",
    "open_serial_transport",
    "SENTINEL",
    "TransportSession",
    "PortInfo",
    "Device",
    "list_available_ports",
    "find_all_devices",
    "find_first_device",
    "get_protocol_logger",
]
