"""
Custom exception classes for the Dygma Focus client.
"""

from typing import Optional


class FocusError(Exception):
    """Base exception for all Focus client errors."""
    pass


class SerialPortEnumerationError(FocusError):
    """The operating system could not list serial ports."""
    pass


class SerialPortOpenError(FocusError):
    """Serial port could not be opened (missing, busy, no permission)."""
    pass


class SerialPortConfigurationError(FocusError):
    """Serial port rejected a line setting (baud, DTR, exclusivity)."""
    pass


class SerialPortReadError(FocusError):
    """I/O failure (or timeout) while reading a response."""
    pass


class SerialPortWriteError(FocusError):
    """I/O failure while writing a command."""
    pass


class SerialPortFlushError(FocusError):
    """I/O failure while flushing a written command."""
    pass


class NotConnectedError(FocusError):
    """Raised when the session has already been closed."""
    pass


class DecodeError(FocusError):
    """
    A response could not be decoded into the requested type.

    The engine attaches the command that produced the response, so the
    message is enough to diagnose the failure without traffic tracing.
    """

    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.command = command

    def __str__(self) -> str:
        if self.command:
            return f"{self.message} (command: {self.command})"
        return self.message


class EmptyResponseError(DecodeError):
    """Response is empty where a value was expected."""

    def __init__(self, command: Optional[str] = None):
        super().__init__("response is empty", command)


class Utf8ConversionError(DecodeError):
    """Response bytes are not valid UTF-8."""

    def __init__(self, reason: str, command: Optional[str] = None):
        super().__init__(f"failed to convert response to UTF-8 string: {reason}", command)


class ParseBoolError(DecodeError):
    """Response is not one of 0, 1, false, true."""

    def __init__(self, string: str, command: Optional[str] = None):
        super().__init__(f"string cannot be parsed to bool: {string!r}", command)
        self.string = string


class ParseNumericalError(DecodeError):
    """Response is not a base-10 unsigned integer of the expected width."""

    def __init__(self, string: str, command: Optional[str] = None):
        super().__init__(f"failed to parse to numerical value: {string!r}", command)
        self.string = string


class PartCountError(DecodeError):
    """A fixed-arity chunk (color) does not contain the expected number of parts."""

    def __init__(self, expected: int, actual: int, command: Optional[str] = None):
        super().__init__(
            f"response does not contain exactly {expected} parts (got {actual})", command
        )
        self.expected = expected
        self.actual = actual


class InvalidEnumValueError(DecodeError):
    """Wire code does not map to any member of the enumeration."""

    def __init__(self, enum_name: str, string: str, command: Optional[str] = None):
        super().__init__(f"{string!r} is not a valid {enum_name} code", command)
        self.enum_name = enum_name
        self.string = string


class InvalidValueError(FocusError):
    """Invalid parameter value, rejected before anything is sent."""
    pass


class ValueAboveLimitError(InvalidValueError):
    """Parameter exceeds a client-enforced upper limit."""

    def __init__(self, label: str, max: int, provided: int):
        super().__init__(f"{label} beyond upper limit (max: {max}, provided: {provided})")
        self.label = label
        self.max = max
        self.provided = provided


class NoDevicesDetectedError(FocusError):
    """No supported keyboard was found on any serial port."""

    def __init__(self):
        super().__init__("no devices were detected")


class DeviceNotReadyError(FocusError):
    """Keyscanner is not ready to be upgraded."""

    def __init__(self):
        super().__init__(
            "device not ready for upgrade, disconnect all sides, "
            "or if sides are connected press the top left key"
        )


class SideDisconnectedError(FocusError):
    """A keyboard half did not answer during the upgrade handshake."""

    def __init__(self, side):
        super().__init__(f"side disconnected: {side.name.lower()}")
        self.side = side


class ConfigurationError(FocusError):
    """Configuration (or settings backup) file is missing or invalid."""
    pass
