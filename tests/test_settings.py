from __future__ import annotations

import json

import pytest

from dygma_focus.config.models import SimulatorConfig
from dygma_focus.enums import LedMode, WirelessPowerMode
from dygma_focus.focus import Focus
from dygma_focus.settings.controller import (
    SETTING_FIELDS,
    SettingsController,
    load_snapshot,
    save_snapshot,
)
from dygma_focus.settings.models import SettingsSnapshot
from dygma_focus.simulator.mock_serial import MockKeyboard
from dygma_focus.utils.exceptions import ConfigurationError, SerialPortReadError


def _controller(**simulator) -> SettingsController:
    return SettingsController(Focus(MockKeyboard(SimulatorConfig(**simulator))))


def test_fields_follow_snapshot_model() -> None:
    assert [field.name for field in SETTING_FIELDS] == list(SettingsSnapshot.model_fields)
    assert len(SETTING_FIELDS) == 37


def test_read_all_wireless_keyboard() -> None:
    snapshot = _controller(wireless=True).read_all()

    assert snapshot.keymap_custom[:3] == [4, 5, 6]
    assert snapshot.settings_default_layer == 0
    assert snapshot.led_mode is LedMode.STATIC
    assert snapshot.led_brightness_keys_wireless == 160
    assert snapshot.wireless_rf_power_level is WirelessPowerMode.MEDIUM
    assert snapshot.wireless_rf_channel_hop is True
    assert len(snapshot.palette_rgbw) == 16
    # An RGBW palette does not split into RGB triples
    assert snapshot.palette_rgb is None


def test_read_all_wired_keyboard_leaves_wireless_fields_empty() -> None:
    snapshot = _controller(wireless=False).read_all()

    assert snapshot.led_brightness_keys_wireless is None
    assert snapshot.led_brightness_underglow_wireless is None
    assert snapshot.led_idle_time_limit_wireless is None
    assert snapshot.wireless_battery_saving_mode is None
    assert snapshot.wireless_rf_power_level is None
    assert snapshot.wireless_rf_channel_hop is None
    assert snapshot.led_brightness_underglow_wired == 255


def test_read_all_optional_io_error_becomes_none() -> None:
    snapshot = _controller(wireless=True, failing_commands=["led.brightnessUG"]).read_all()

    empty = {name for name, value in snapshot.model_dump().items() if value is None}
    # palette_rgb is empty because the simulated palette is RGBW
    assert empty == {"led_brightness_underglow_wired", "palette_rgb"}
    assert snapshot.led_brightness_underglow_wireless == 160
    assert snapshot.led_fade is not None


def test_read_all_mandatory_error_propagates() -> None:
    with pytest.raises(SerialPortReadError):
        _controller(failing_commands=["mouse.speed"]).read_all()


def test_write_all_skips_empty_optional_fields() -> None:
    snapshot = _controller(wireless=False).read_all()
    target = MockKeyboard(SimulatorConfig(wireless=False))

    SettingsController(Focus(target)).write_all(snapshot)

    names = [command.split(" ")[0] for command in target.commands]
    assert "wireless.rf.power" not in names
    assert "led.brightness.wireless" not in names
    assert names.count("palette") == 1
    assert names[:4] == ["keymap.custom", "keymap.default", "keymap.onlyCustom", "settings.defaultLayer"]
    assert names[-1] == "mouse.speedLimit"


def test_write_all_then_read_all_matches() -> None:
    source = _controller(wireless=True).read_all()
    changed = source.model_copy(update={"mouse_speed": 42, "superkeys_overlap": 80})
    target = _controller(wireless=True)

    target.write_all(changed)

    assert target.read_all() == changed


def test_write_all_stops_at_first_failure() -> None:
    snapshot = _controller().read_all()
    target = MockKeyboard(SimulatorConfig(failing_commands=["superkeys.map"]))

    with pytest.raises(SerialPortReadError):
        SettingsController(Focus(target)).write_all(snapshot)
    assert target.commands[-1].startswith("superkeys.map ")


def test_snapshot_file_round_trip(tmp_path) -> None:
    snapshot = _controller(wireless=True).read_all()
    path = tmp_path / "backup.json"

    save_snapshot(snapshot, str(path))

    assert json.loads(path.read_text(encoding="utf-8"))["led_mode"] == 0
    assert load_snapshot(str(path)) == snapshot


def test_load_snapshot_errors(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_snapshot(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_snapshot(str(broken))

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"mouse_speed": 500}), encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mouse_speed"):
        load_snapshot(str(invalid))
