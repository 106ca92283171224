"""
Abstract byte-level transport used by the Focus session.

This interface allows transparent substitution between a real serial port
and the in-memory simulator.
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """Abstract base class for a byte stream to a keyboard."""

    @abstractmethod
    def write_all(self, data: bytes) -> None:
        """
        Write every byte of ``data``.

        Raises:
            OSError: On I/O failure.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """
        Block until written bytes have been handed to the device.

        Raises:
            OSError: On I/O failure.
        """
        pass

    @abstractmethod
    def read_into(self, buffer: memoryview) -> int:
        """
        Read available bytes into ``buffer``.

        Args:
            buffer: Writable region to fill.

        Returns:
            Number of bytes stored. 0 means nothing arrived yet, not EOF.

        Raises:
            InterruptedError: If interrupted by a signal (caller retries).
            OSError: On I/O failure, including a read timeout.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying handle."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable endpoint name (e.g., /dev/ttyACM0)."""
        pass
