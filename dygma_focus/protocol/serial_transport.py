"""
Serial port transport for Dygma keyboards.

Implements Transport using pyserial. Line settings are fixed by the
firmware: 115200 baud, 8-N-1, no flow control, DTR asserted.
"""

import logging
import os
from typing import Optional

import serial
from serial import SerialException

from dygma_focus.config.models import SerialConfig
from dygma_focus.protocol.interface import Transport
from dygma_focus.utils.exceptions import (
    SerialPortConfigurationError,
    SerialPortOpenError,
)


logger = logging.getLogger(__name__)


class SerialTransport(Transport):
    """
    Transport over an open pyserial port.

    A read that receives nothing within the configured timeout raises
    ``serial.SerialTimeoutException``: bytes of the pending response may
    still arrive later, so the session cannot be trusted afterwards.
    """

    # Serial port settings (fixed by the Focus firmware)
    BAUD_RATE = 115200
    DATA_BITS = serial.EIGHTBITS
    PARITY = serial.PARITY_NONE
    STOP_BITS = serial.STOPBITS_ONE

    def __init__(self, port: serial.Serial):
        self._port = port

    @property
    def name(self) -> str:
        return self._port.port

    def write_all(self, data: bytes) -> None:
        # pyserial loops internally until every byte is written
        self._port.write(data)

    def flush(self) -> None:
        self._port.flush()

    def read_into(self, buffer: memoryview) -> int:
        # Take whatever is waiting (at least one byte) so a short response
        # does not sit in the driver until the whole chunk fills up
        wanted = min(len(buffer), max(1, self._port.in_waiting))
        data = self._port.read(wanted)
        if not data:
            raise serial.SerialTimeoutException(
                f"No response from {self.name} within {self._port.timeout}s"
            )
        buffer[:len(data)] = data
        return len(data)

    def close(self) -> None:
        if self._port.is_open:
            self._port.close()
            logger.info(f"Serial port {self.name} closed")


def open_serial_transport(port_name: str, config: Optional[SerialConfig] = None) -> SerialTransport:
    """
    Open and configure a serial port for the Focus protocol.

    Args:
        port_name: OS port name (e.g., "COM5", "/dev/ttyACM0").
        config: Serial configuration (timeout). Defaults are used if None.

    Returns:
        Open SerialTransport.

    Raises:
        SerialPortConfigurationError: If a line setting is rejected.
        SerialPortOpenError: If the port cannot be opened.
    """
    config = config or SerialConfig()
    timeout = config.timeout_seconds

    logger.info(f"Opening serial port {port_name}")

    try:
        port = serial.Serial(
            port=None,
            baudrate=SerialTransport.BAUD_RATE,
            bytesize=SerialTransport.DATA_BITS,
            parity=SerialTransport.PARITY,
            stopbits=SerialTransport.STOP_BITS,
            timeout=timeout,
            write_timeout=timeout,
            xonxoff=False,
            rtscts=False,
            dsrdtr=False,
            # exclusive is only supported on POSIX
            exclusive=False if os.name == "posix" else None,
        )
        port.port = port_name
    except ValueError as e:
        raise SerialPortConfigurationError(f"Invalid settings for {port_name}: {e}") from e

    try:
        port.open()
    except SerialException as e:
        raise SerialPortOpenError(f"Failed to open {port_name}: {e}") from e

    try:
        port.dtr = True
    except (SerialException, ValueError) as e:
        port.close()
        raise SerialPortConfigurationError(f"Failed to assert DTR on {port_name}: {e}") from e

    return SerialTransport(port)
