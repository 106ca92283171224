from __future__ import annotations

import logging
from typing import List, Union

import pytest

from dygma_focus.focus import Focus
from dygma_focus.protocol.interface import Transport
from dygma_focus.protocol.session import SENTINEL


class ScriptedTransport(Transport):
    """Transport replaying scripted read results and recording writes."""

    def __init__(self) -> None:
        self.written = bytearray()
        self.reads: List[Union[bytes, BaseException]] = []
        self.flushes = 0
        self.closed = False

    @property
    def name(self) -> str:
        return "scripted"

    def feed(self, *items: Union[bytes, BaseException]) -> None:
        self.reads.extend(items)

    def respond(self, *payloads: str) -> None:
        for payload in payloads:
            self.reads.append(payload.encode("utf-8") + SENTINEL)

    @property
    def commands(self) -> List[str]:
        return [line for line in self.written.decode("utf-8").split("\n") if line]

    def write_all(self, data: bytes) -> None:
        self.written.extend(data)

    def flush(self) -> None:
        self.flushes += 1

    def read_into(self, buffer: memoryview) -> int:
        if not self.reads:
            raise TimeoutError("no scripted response left")
        item = self.reads.pop(0)
        if isinstance(item, BaseException):
            raise item
        count = min(len(buffer), len(item))
        buffer[:count] = item[:count]
        if count < len(item):
            self.reads.insert(0, item[count:])
        return count

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def focus(transport: ScriptedTransport) -> Focus:
    return Focus(transport)


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
