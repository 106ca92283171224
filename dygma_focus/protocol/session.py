"""
Transport session: one open transport plus the response framing algorithm.

The Focus protocol has no length prefix and no correlation id. A response
ends when the byte stream ends with the sentinel ``CR LF '.' CR LF``, and
commands are strictly half-duplex: write, drain the whole response, then
write the next command.
"""

import logging
import threading
from typing import Optional

from dygma_focus.protocol.interface import Transport
from dygma_focus.protocol.logger import get_protocol_logger
from dygma_focus.utils.exceptions import (
    NotConnectedError,
    SerialPortFlushError,
    SerialPortReadError,
    SerialPortWriteError,
    Utf8ConversionError,
)


logger = logging.getLogger(__name__)


SENTINEL = b"\r\n.\r\n"
READ_CHUNK_SIZE = 1024


class TransportSession:
    """
    Exclusive owner of one transport and one reusable response buffer.

    ``lock`` must be held across a write and the read that drains its
    response; the engine does this for every command.
    """

    def __init__(self, transport: Transport):
        """
        Initialize session.

        Args:
            transport: Open transport (serial port or simulator).
        """
        self._transport = transport
        self._buffer = bytearray()
        self._zero_chunk = bytes(READ_CHUNK_SIZE)
        self._closed = False
        self.lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._transport.name

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the underlying transport. Safe to call twice."""
        with self.lock:
            if self._closed:
                return
            self._closed = True
            self._transport.close()

    def __enter__(self) -> "TransportSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise NotConnectedError(f"Session on {self.name} is closed")

    def _describe(self, command: Optional[str]) -> str:
        if command:
            return f"{self.name} (command: {command})"
        return self.name

    def write_bytes(self, data: bytes, command: Optional[str] = None) -> None:
        """
        Write ``data`` fully, then flush. Never retried.

        Args:
            data: Encoded command, terminator included.
            command: Command in flight, named in error messages.

        Raises:
            NotConnectedError: If the session is closed.
            SerialPortWriteError: If writing fails.
            SerialPortFlushError: If flushing fails.
        """
        self._ensure_open()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"TX bytes: {data.hex(' ').upper()}")

        try:
            self._transport.write_all(data)
        except OSError as e:
            get_protocol_logger().log_error(f"Write failed: {e}", data)
            raise SerialPortWriteError(
                f"error writing to serial port {self._describe(command)}: {e}"
            ) from e

        try:
            self._transport.flush()
        except OSError as e:
            get_protocol_logger().log_error(f"Flush failed: {e}")
            raise SerialPortFlushError(
                f"error flushing serial port {self._describe(command)}: {e}"
            ) from e

    def _read_chunk(self, command: Optional[str]) -> int:
        """Grow the buffer by one zero-filled chunk and read into it."""
        buffer = self._buffer
        start = len(buffer)
        buffer.extend(self._zero_chunk)

        while True:
            try:
                with memoryview(buffer) as view, view[start:] as region:
                    received = self._transport.read_into(region)
            except InterruptedError:
                continue
            except OSError as e:
                del buffer[start:]
                get_protocol_logger().log_error(f"Read failed: {e}", bytes(buffer))
                raise SerialPortReadError(
                    f"error reading from serial port {self._describe(command)}: {e}"
                ) from e

            del buffer[start + received:]
            return received

    def read_response(self, command: Optional[str] = None) -> str:
        """
        Read one complete response and return its trimmed payload.

        Args:
            command: Command in flight, named in error messages.

        Returns:
            Decoded payload; an empty string acknowledges a command that has
            nothing to report.

        Raises:
            NotConnectedError: If the session is closed.
            SerialPortReadError: On I/O failure or timeout. The session is
                desynchronized afterwards and should be discarded.
            Utf8ConversionError: If the payload is not valid UTF-8.
        """
        self._ensure_open()

        buffer = self._buffer
        buffer.clear()

        while True:
            received = self._read_chunk(command)
            if received == 0:
                continue

            if 0 in buffer:
                buffer[:] = buffer.replace(b"\x00", b"")

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"RX {received} bytes ({len(buffer)} buffered): {bytes(buffer[-32:])!r}")

            if buffer.endswith(SENTINEL):
                break

        # Some replies carry the sentinel mid-stream as well, drop every copy
        position = buffer.find(SENTINEL)
        while position != -1:
            del buffer[position:position + len(SENTINEL)]
            position = buffer.find(SENTINEL)

        payload = bytes(buffer).strip()

        try:
            response = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            get_protocol_logger().log_error(f"Invalid UTF-8: {e}", payload)
            raise Utf8ConversionError(str(e), command) from e

        get_protocol_logger().log_rx(response)
        if response:
            logger.debug(f"Command RX: {response}")
        else:
            logger.debug("Command RX: [Ack]")

        return response
