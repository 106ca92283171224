from __future__ import annotations

from types import SimpleNamespace

import pytest
import serial.tools.list_ports

from dygma_focus.hardware.catalog import DYGMA_VID, RAISE_VID
from dygma_focus.protocol.port_scanner import (
    find_all_devices,
    find_first_device,
    list_available_ports,
)
from dygma_focus.utils.exceptions import NoDevicesDetectedError, SerialPortEnumerationError


def _port(device: str, vid=None, pid=None, serial_number=None) -> SimpleNamespace:
    return SimpleNamespace(
        device=device,
        description=f"{device} description",
        hwid=f"USB VID:PID={vid}:{pid}" if vid is not None else "n/a",
        vid=vid,
        pid=pid,
        serial_number=serial_number,
    )


@pytest.fixture
def ports(monkeypatch: pytest.MonkeyPatch) -> list:
    listed = [
        _port("/dev/ttyS0"),
        _port("/dev/ttyACM0", vid=0x2341, pid=0x0043),
        _port("/dev/ttyACM1", vid=RAISE_VID, pid=0x2201, serial_number="R1"),
        _port("/dev/ttyACM2", vid=DYGMA_VID, pid=0x0010, serial_number="D1"),
    ]
    monkeypatch.setattr(serial.tools.list_ports, "comports", lambda: listed)
    return listed


def test_find_all_devices_filters_and_keeps_order(ports: list) -> None:
    devices = find_all_devices()

    assert [device.port for device in devices] == ["/dev/ttyACM1", "/dev/ttyACM2"]
    assert devices[0].hardware.display_name == "Dygma Raise"
    assert devices[0].serial_number == "R1"
    assert devices[1].hardware.display_name == "Dygma Defy Wired"


def test_find_first_device(ports: list) -> None:
    assert find_first_device().port == "/dev/ttyACM1"


def test_find_first_device_raises_when_nothing_matches(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serial.tools.list_ports, "comports", lambda: [_port("/dev/ttyS0")])

    with pytest.raises(NoDevicesDetectedError):
        find_first_device()


def test_enumeration_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken():
        raise OSError("udev unavailable")

    monkeypatch.setattr(serial.tools.list_ports, "comports", broken)

    with pytest.raises(SerialPortEnumerationError):
        find_all_devices()


def test_list_available_ports_includes_everything(ports: list) -> None:
    listed = list_available_ports()

    assert [port.name for port in listed] == [port.device for port in ports]
    assert not listed[0].is_usb
    assert listed[3].is_usb
    assert listed[3].to_dict()["vendor_id"] == DYGMA_VID


def test_device_to_dict(ports: list) -> None:
    data = find_all_devices()[1].to_dict()
    assert data["port"] == "/dev/ttyACM2"
    assert data["vendor_id"] == "0x35ef"
    assert data["product_id"] == "0x0010"
