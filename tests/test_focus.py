from __future__ import annotations

import pytest

from dygma_focus.color import RGB, RGBW
from dygma_focus.enums import LedMode, Side, WirelessPowerMode
from dygma_focus.focus import MAX_LAYERS, Focus
from dygma_focus.utils.exceptions import (
    DeviceNotReadyError,
    EmptyResponseError,
    InvalidEnumValueError,
    InvalidValueError,
    ParseNumericalError,
    SerialPortReadError,
    SideDisconnectedError,
    Utf8ConversionError,
    ValueAboveLimitError,
)


def test_version(transport, focus: Focus) -> None:
    transport.respond("1.2.3")
    assert focus.version() == "1.2.3"
    assert bytes(transport.written) == b"version\n"


def test_keymap_round_trip(transport, focus: Focus) -> None:
    transport.respond("41 30 31", "")

    keymap = focus.keymap_custom_get()
    assert keymap == [41, 30, 31]

    focus.keymap_custom_set(keymap)
    assert transport.commands == ["keymap.custom", "keymap.custom 41 30 31"]


def test_help_lines(transport, focus: Focus) -> None:
    transport.respond("version\r\nhelp\r\nled.mode")
    assert focus.help() == ["version", "help", "led.mode"]


def test_setter_waits_for_acknowledgement(transport, focus: Focus) -> None:
    transport.respond("")
    focus.led_mode_set(LedMode.RAINBOW)

    assert transport.commands == ["led.mode 1"]
    assert transport.reads == []


def test_decode_error_names_the_command(transport, focus: Focus) -> None:
    transport.respond("loud")

    with pytest.raises(ParseNumericalError) as exc_info:
        focus.mouse_speed_get()
    assert exc_info.value.command == "mouse.speed"
    assert "(command: mouse.speed)" in str(exc_info.value)


def test_invalid_utf8_names_the_command(transport, focus: Focus) -> None:
    transport.feed(b"\xff\r\n.\r\n", b"\xfe1.2\r\n.\r\n")

    with pytest.raises(Utf8ConversionError) as exc_info:
        focus.query_numeric("led.fade")
    assert exc_info.value.command == "led.fade"
    assert "(command: led.fade)" in str(exc_info.value)

    with pytest.raises(Utf8ConversionError) as exc_info:
        focus.version()
    assert exc_info.value.command == "version"


def test_io_errors_name_the_command(transport, focus: Focus) -> None:
    transport.feed(OSError("unplugged"))

    with pytest.raises(SerialPortReadError, match=r"\(command: mouse\.speed\)"):
        focus.mouse_speed_get()


def test_numeric_width(transport, focus: Focus) -> None:
    transport.respond("300")
    with pytest.raises(ParseNumericalError):
        focus.led_brightness_keys_wired_get()


def test_default_layer_above_limit_sends_nothing(transport, focus: Focus) -> None:
    with pytest.raises(ValueAboveLimitError):
        focus.settings_default_layer_set(MAX_LAYERS + 1)
    assert transport.written == bytearray()


def test_default_layer_unchanged_is_not_written(transport, focus: Focus) -> None:
    transport.respond("3")
    focus.settings_default_layer_set(3)
    assert transport.commands == ["settings.defaultLayer"]


def test_default_layer_changed_is_written(transport, focus: Focus) -> None:
    transport.respond("0", "")
    focus.settings_default_layer_set(MAX_LAYERS)
    assert transport.commands == ["settings.defaultLayer", "settings.defaultLayer 9"]


def test_superkeys_overlap_limit(transport, focus: Focus) -> None:
    with pytest.raises(ValueAboveLimitError):
        focus.superkeys_overlap_set(81)
    assert transport.written == bytearray()

    transport.respond("")
    focus.superkeys_overlap_set(80)
    assert transport.commands == ["superkeys.overlap 80"]


@pytest.mark.parametrize("operation, value", [
    ("led_idle_true_sleep_time_set", 65001),
    ("led_idle_time_limit_wired_set", 65001),
    ("led_idle_time_limit_wireless_set", 65001),
    ("mouse_speed_set", 128),
    ("superkeys_wait_for_set", 65536),
    ("led_brightness_keys_wired_set", 256),
    ("layer_activate", MAX_LAYERS + 1),
])
def test_limits_are_checked_before_sending(transport, focus: Focus, operation: str, value: int) -> None:
    with pytest.raises(ValueAboveLimitError):
        getattr(focus, operation)(value)
    assert transport.written == bytearray()


def test_negative_value_is_rejected(transport, focus: Focus) -> None:
    with pytest.raises(InvalidValueError):
        focus.mouse_delay_set(-1)
    assert transport.written == bytearray()


def test_multiline_text_is_rejected(transport, focus: Focus) -> None:
    with pytest.raises(InvalidValueError):
        focus.hardware_version_set("Defy\nled.mode 1")
    assert transport.written == bytearray()


def test_led_at(transport, focus: Focus) -> None:
    transport.respond("255 128 0", "")

    assert focus.led_at_get(5) == RGB(r=255, g=128, b=0)
    focus.led_at_set(5, RGB(r=1, g=2, b=3))
    assert transport.commands == ["led.at 5", "led.at 5 1 2 3"]


def test_led_at_empty_response(transport, focus: Focus) -> None:
    transport.respond("")
    with pytest.raises(EmptyResponseError) as exc_info:
        focus.led_at_get(200)
    assert exc_info.value.command == "led.at 200"


def test_palettes(transport, focus: Focus) -> None:
    transport.respond("1 2 3 4 5 6 7 8", "")

    palette = focus.palette_rgbw_get()
    assert palette == [RGBW(r=1, g=2, b=3, w=4), RGBW(r=5, g=6, b=7, w=8)]

    focus.palette_rgb_set([RGB(r=9, g=8, b=7)])
    assert transport.commands[-1] == "palette 9 8 7"


def test_enum_values(transport, focus: Focus) -> None:
    transport.respond("2", "12")

    assert focus.wireless_rf_power_level_get() is WirelessPowerMode.HIGH
    with pytest.raises(InvalidEnumValueError):
        focus.led_mode_get()


def test_bool_values(transport, focus: Focus) -> None:
    transport.respond("true", "")

    assert focus.keymap_only_custom_get() is True
    focus.wireless_rf_channel_hop_set(False)
    assert transport.commands[-1] == "wireless.rf.channelHop 0"


def test_layer_commands(transport, focus: Focus) -> None:
    transport.respond("", "", "", "1", "1 0 0 1")

    focus.layer_activate(2)
    focus.layer_deactivate()
    focus.layer_deactivate(2)
    assert focus.layer_is_active(0) is True
    assert focus.layer_state() == [True, False, False, True]

    assert transport.commands == [
        "layer.activate 2",
        "layer.deactivate",
        "layer.deactivate 2",
        "layer.isActive 0",
        "layer.state",
    ]


def test_commands_without_response(transport, focus: Focus) -> None:
    focus.upgrade_start()
    focus.upgrade_neuron()
    focus.upgrade_end()
    focus.wireless_battery_force_read()
    focus.upgrade_keyscanner_send_write()

    assert bytes(transport.written) == (
        b"upgrade.start\nupgrade.neuron\nupgrade.end\n"
        b"wireless.battery.forceRead\nupgrade.keyscanner.sendWrite "
    )


def test_keyscanner_begin_maps_disconnected_side(transport, focus: Focus) -> None:
    transport.respond("true", "")

    assert focus.upgrade_keyscanner_begin(Side.LEFT) is True
    with pytest.raises(SideDisconnectedError, match="left"):
        focus.upgrade_keyscanner_begin(Side.LEFT)
    assert transport.commands == ["upgrade.keyscanner.begin 1"] * 2


def test_keyscanner_is_ready_maps_not_ready(transport, focus: Focus) -> None:
    transport.respond("garbage")
    with pytest.raises(DeviceNotReadyError):
        focus.upgrade_keyscanner_is_ready()


def test_io_errors_are_not_remapped(transport, focus: Focus) -> None:
    transport.feed(OSError("unplugged"))
    with pytest.raises(SerialPortReadError):
        focus.upgrade_keyscanner_begin(Side.RIGHT)


def test_context_manager_closes_transport(transport) -> None:
    with Focus(transport) as focus:
        assert focus.port_name == "scripted"
    assert transport.closed


def test_open_first_available(monkeypatch: pytest.MonkeyPatch, transport) -> None:
    from dygma_focus import focus as focus_module
    from dygma_focus.hardware import DEVICES
    from dygma_focus.protocol.port_scanner import Device

    opened = []

    def fake_open(port_name, config=None):
        opened.append(port_name)
        return transport

    monkeypatch.setattr(focus_module, "find_first_device", lambda: Device(DEVICES[0], "/dev/ttyACM0"))
    monkeypatch.setattr(focus_module, "open_serial_transport", fake_open)

    with Focus.open_first_available() as focus:
        assert focus.port_name == "scripted"
    assert opened == ["/dev/ttyACM0"]
