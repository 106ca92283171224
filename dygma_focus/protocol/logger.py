"""
Protocol message logger for debugging serial communication.

Captures TX/RX messages with timestamps for debugging purposes.
"""

import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import List, Optional


@dataclass
class ProtocolMessage:
    """A single protocol message (TX, RX or ERR)."""
    timestamp: str
    direction: str  # "TX", "RX" or "ERR"
    text: str
    size: int
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class ProtocolLogger:
    """
    Thread-safe logger for protocol messages.

    Maintains a circular buffer of messages with configurable max size.
    Long payloads (keymaps, palettes) are clipped to ``preview_chars``.
    """

    DEFAULT_MAX_MESSAGES = 500
    DEFAULT_PREVIEW_CHARS = 120

    def __init__(
        self,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ):
        """
        Initialize protocol logger.

        Args:
            max_messages: Maximum number of messages to keep in buffer.
            preview_chars: Maximum characters stored per message.
        """
        self._messages: deque = deque(maxlen=max_messages)
        self._lock = threading.Lock()
        self._enabled = True
        self._preview_chars = preview_chars
        self._tx_count = 0
        self._rx_count = 0
        self._error_count = 0

    @property
    def enabled(self) -> bool:
        """Check if logging is enabled."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        """Enable or disable logging."""
        self._enabled = value

    def _preview(self, text: str) -> str:
        if len(text) <= self._preview_chars:
            return text
        return text[:self._preview_chars] + "..."

    def _append(self, direction: str, text: str, error: Optional[str] = None) -> None:
        self._messages.append(
            ProtocolMessage(
                timestamp=datetime.now().isoformat(timespec='milliseconds'),
                direction=direction,
                text=self._preview(text),
                size=len(text),
                error=error,
            )
        )

    def log_tx(self, command: str) -> None:
        """
        Log a transmitted command.

        Args:
            command: Command text without its terminator.
        """
        if not self._enabled:
            return

        with self._lock:
            self._tx_count += 1
            self._append("TX", command)

    def log_rx(self, response: str) -> None:
        """
        Log a received (already framed and trimmed) response.

        Args:
            response: Decoded payload; empty for an acknowledgement.
        """
        if not self._enabled:
            return

        with self._lock:
            self._rx_count += 1
            self._append("RX", response)

    def log_error(self, error_msg: str, data: bytes = b"") -> None:
        """
        Log an error message.

        Args:
            error_msg: Error description.
            data: Optional raw bytes associated with error.
        """
        if not self._enabled:
            return

        with self._lock:
            self._error_count += 1
            self._append("ERR", data.hex(" ").upper() if data else "", error=error_msg)

    def get_messages(self, limit: int = 100) -> List[dict]:
        """
        Get recent messages.

        Args:
            limit: Maximum number of messages to return.

        Returns:
            List of message dictionaries, oldest first (chronological order).
        """
        with self._lock:
            messages = list(self._messages)
            if len(messages) > limit:
                messages = messages[-limit:]
            return [m.to_dict() for m in messages]

    def get_stats(self) -> dict:
        """Get logging statistics."""
        with self._lock:
            return {
                "total_messages": len(self._messages),
                "tx_count": self._tx_count,
                "rx_count": self._rx_count,
                "error_count": self._error_count,
                "max_messages": self._messages.maxlen,
                "enabled": self._enabled,
            }

    def clear(self) -> None:
        """Clear all logged messages."""
        with self._lock:
            self._messages.clear()
            self._tx_count = 0
            self._rx_count = 0
            self._error_count = 0


# Global instance
_logger: Optional[ProtocolLogger] = None


def get_protocol_logger() -> ProtocolLogger:
    """Get or create the global protocol logger."""
    global _logger
    if _logger is None:
        _logger = ProtocolLogger()
    return _logger
