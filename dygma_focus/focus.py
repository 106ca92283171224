"""
Focus protocol engine.

Builds text commands, writes them through a TransportSession and decodes
the framed responses into typed values. Every public operation maps to one
Focus command (``<namespace>.<verb>[ <args>]``).

Command reference: https://github.com/Dygmalab/Bazecor/blob/development/FOCUS_API.md
"""

import logging
from typing import Callable, List, Optional, Sequence

from dygma_focus.color import RGB, RGBW
from dygma_focus.config.models import SerialConfig
from dygma_focus.enums import LedMode, Side, WirelessPowerMode
from dygma_focus.protocol.codec import (
    check_unsigned,
    decode_colors,
    decode_numbers,
    encode_bool,
    encode_colors,
    encode_numbers,
    parse_bool,
    parse_unsigned,
    split_lines,
)
from dygma_focus.protocol.interface import Transport
from dygma_focus.protocol.logger import get_protocol_logger
from dygma_focus.protocol.port_scanner import Device, find_first_device
from dygma_focus.protocol.serial_transport import open_serial_transport
from dygma_focus.protocol.session import TransportSession
from dygma_focus.utils.exceptions import (
    DecodeError,
    DeviceNotReadyError,
    EmptyResponseError,
    InvalidValueError,
    SideDisconnectedError,
)


logger = logging.getLogger(__name__)


# Ten layers, numbered from zero (Bazecor shows them one higher)
MAX_LAYERS = 10 - 1
MAX_OVERLAP_PERCENTAGE = 80
MAX_IDLE_SECONDS = 65_000
MAX_MOUSE_SPEED = 127


def _decode_rgb(text: str) -> RGB:
    if not text:
        raise EmptyResponseError()
    return RGB.parse(text)


def _decode_layer_state(text: str) -> List[bool]:
    return [part == "1" for part in text.split()]


def _check_text(label: str, value: str) -> str:
    # A line break would end the command early and desynchronize the session
    if "\n" in value or "\r" in value:
        raise InvalidValueError(f"{label} must be a single line, got: {value!r}")
    return value


class Focus:
    """
    Client for the Focus protocol of one keyboard.

    Commands are strictly half-duplex: each exchange writes one command and
    drains its whole response before the next command is written. The
    session lock is held for the whole exchange, so a Focus instance may be
    shared between threads.

    Example:
        >>> with Focus.open_first_available() as focus:
        ...     focus.version()
        '1.2.3'
    """

    def __init__(self, transport: Transport):
        """
        Initialize the engine on an open transport.

        Args:
            transport: Open transport (serial port or simulator).
        """
        self._session = TransportSession(transport)

    @classmethod
    def open(cls, port_name: str, config: Optional[SerialConfig] = None) -> "Focus":
        """
        Open the keyboard on a named serial port.

        Raises:
            SerialPortOpenError: If the port cannot be opened.
            SerialPortConfigurationError: If a line setting is rejected.
        """
        return cls(open_serial_transport(port_name, config))

    @classmethod
    def open_device(cls, device: Device, config: Optional[SerialConfig] = None) -> "Focus":
        """Open a keyboard returned by discovery."""
        logger.info(f"Connecting to {device.hardware.display_name} on {device.port}")
        return cls.open(device.port, config)

    @classmethod
    def open_first_available(cls, config: Optional[SerialConfig] = None) -> "Focus":
        """
        Discover the first supported keyboard and open it.

        Raises:
            NoDevicesDetectedError: If no supported keyboard is connected.
        """
        return cls.open_device(find_first_device(), config)

    @property
    def port_name(self) -> str:
        return self._session.name

    def close(self) -> None:
        """Close the connection."""
        self._session.close()

    def __enter__(self) -> "Focus":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Command primitives
    # ------------------------------------------------------------------

    def send(self, command: str, terminator: str = "\n", expect_response: bool = False) -> None:
        """
        Write a command followed by a single terminator character.

        Args:
            command: Command text (e.g., "led.mode 2").
            terminator: "\\n" for regular commands, " " for streaming ones.
            expect_response: Drain (and discard) one response before
                returning, so the next command starts on a clean line.

        Raises:
            SerialPortWriteError: If writing fails.
            SerialPortReadError: If draining the response fails.
        """
        with self._session.lock:
            logger.debug(f"Command TX: {command}")
            get_protocol_logger().log_tx(command)
            self._session.write_bytes(f"{command}{terminator}".encode("utf-8"), command)

            if expect_response:
                self._session.read_response(command)

    def query_string(self, command: str) -> str:
        """Send a command and return its trimmed response."""
        with self._session.lock:
            self.send(command)
            return self._session.read_response(command)

    def _query(self, command: str, decode: Callable, *args):
        try:
            return decode(self.query_string(command), *args)
        except DecodeError as e:
            e.command = command
            raise

    def query_numeric(self, command: str, bits: int = 16) -> int:
        """
        Send a command and decode a base-10 unsigned integer.

        Raises:
            ParseNumericalError: If the response is not a number of ``bits`` width.
        """
        return self._query(command, parse_unsigned, bits)

    def query_bool(self, command: str) -> bool:
        """
        Send a command and decode a boolean.

        Raises:
            EmptyResponseError: If the response is empty.
            ParseBoolError: If the response is not 0, 1, false or true.
        """
        return self._query(command, parse_bool)

    def query_lines(self, command: str) -> List[str]:
        """Send a command and split the response into lines."""
        return self._query(command, split_lines)

    def query_numbers(self, command: str, bits: int = 16) -> List[int]:
        return self._query(command, decode_numbers, bits)

    def query_colors(self, command: str, color_cls) -> list:
        return self._query(command, decode_colors, color_cls)

    def query_enum(self, command: str, enum_cls):
        return self._query(command, enum_cls.from_wire)

    def _set(self, command: str, *args) -> None:
        """Send a setter and wait for its acknowledgement."""
        self.send(" ".join([command, *(str(arg) for arg in args)]), expect_response=True)

    def _check_layer(self, layer: int) -> int:
        return check_unsigned("layer", layer, bits=8, maximum=MAX_LAYERS)

    # ------------------------------------------------------------------
    # Version, help
    # ------------------------------------------------------------------

    def version(self) -> str:
        """Get the version of the firmware."""
        return self.query_string("version")

    def help(self) -> List[str]:
        """Get all the commands available in the current firmware."""
        return self.query_lines("help")

    # ------------------------------------------------------------------
    # Keymap
    # ------------------------------------------------------------------

    def keymap_custom_get(self) -> List[int]:
        """
        Get the whole custom keymap stored in the keyboard.

        Layers 0 and above, one key code per key.
        """
        return self.query_numbers("keymap.custom", 16)

    def keymap_custom_set(self, data: Sequence[int]) -> None:
        """Set the whole custom keymap stored in the keyboard."""
        self._set("keymap.custom", encode_numbers(data, 16, "key code"))

    def keymap_default_get(self) -> List[int]:
        """Get the default keymap (the two backup layers)."""
        return self.query_numbers("keymap.default", 16)

    def keymap_default_set(self, data: Sequence[int]) -> None:
        self._set("keymap.default", encode_numbers(data, 16, "key code"))

    def keymap_only_custom_get(self) -> bool:
        """
        Get the user setting of hiding the default layers.

        Hiding them does not add layers; the default ones only serve as a
        backup store for two layers.
        """
        return self.query_bool("keymap.onlyCustom")

    def keymap_only_custom_set(self, state: bool) -> None:
        self._set("keymap.onlyCustom", encode_bool(state))

    # ------------------------------------------------------------------
    # Settings, EEPROM
    # ------------------------------------------------------------------

    def settings_default_layer_get(self) -> int:
        """Get the layer the keyboard boots with."""
        return self.query_numeric("settings.defaultLayer", 8)

    def settings_default_layer_set(self, layer: int) -> None:
        """
        Set the layer the keyboard boots with.

        The current value is read first; nothing is written if the keyboard
        already boots with ``layer``.

        Raises:
            ValueAboveLimitError: If layer > MAX_LAYERS (nothing is sent).
        """
        self._check_layer(layer)
        if self.settings_default_layer_get() == layer:
            logger.debug(f"Default layer already {layer}, skipping write")
            return
        self._set("settings.defaultLayer", layer)

    def settings_valid(self) -> bool:
        """True if the stored settings passed every firmware check."""
        return self.query_bool("settings.valid?")

    def settings_version_get(self) -> str:
        return self.query_string("settings.version")

    def settings_version_set(self, version: str) -> None:
        self._set("settings.version", _check_text("version", version))

    def settings_crc(self) -> str:
        """Get the CRC checksum of the layout."""
        return self.query_string("settings.crc")

    def eeprom_contents_get(self) -> str:
        return self.query_string("eeprom.contents")

    def eeprom_contents_set(self, data: str) -> None:
        self._set("eeprom.contents", _check_text("data", data))

    def eeprom_free(self) -> str:
        """Get the number of free EEPROM bytes."""
        return self.query_string("eeprom.free")

    # ------------------------------------------------------------------
    # Firmware upgrade handshake
    # ------------------------------------------------------------------

    def upgrade_start(self) -> None:
        self.send("upgrade.start")

    def upgrade_is_ready(self) -> bool:
        return self.query_bool("upgrade.isReady")

    def upgrade_neuron(self) -> None:
        self.send("upgrade.neuron")

    def upgrade_end(self) -> None:
        self.send("upgrade.end")

    def upgrade_keyscanner_is_connected(self, side: Side) -> bool:
        return self.query_bool(f"upgrade.keyscanner.isConnected {side.to_wire()}")

    def upgrade_keyscanner_is_bootloader(self, side: Side) -> bool:
        return self.query_bool(f"upgrade.keyscanner.isBootloader {side.to_wire()}")

    def upgrade_keyscanner_begin(self, side: Side) -> bool:
        """
        Start flashing one keyboard half.

        Raises:
            SideDisconnectedError: If the half gives no usable answer.
        """
        try:
            return self.query_bool(f"upgrade.keyscanner.begin {side.to_wire()}")
        except DecodeError as e:
            raise SideDisconnectedError(side) from e

    def upgrade_keyscanner_is_ready(self) -> bool:
        """
        Raises:
            DeviceNotReadyError: If the keyscanner gives no usable answer.
        """
        try:
            return self.query_bool("upgrade.keyscanner.isReady")
        except DecodeError as e:
            raise DeviceNotReadyError() from e

    def upgrade_keyscanner_get_info(self) -> str:
        return self.query_string("upgrade.keyscanner.getInfo")

    def upgrade_keyscanner_send_write(self) -> None:
        # Streaming command: the payload follows the space, no response
        self.send("upgrade.keyscanner.sendWrite", terminator=" ")

    def upgrade_keyscanner_finish(self) -> str:
        return self.query_string("upgrade.keyscanner.finish")

    # ------------------------------------------------------------------
    # Superkeys
    # ------------------------------------------------------------------

    def superkeys_map_get(self) -> List[int]:
        """Get the Superkeys map (one key code per action)."""
        return self.query_numbers("superkeys.map", 16)

    def superkeys_map_set(self, data: Sequence[int]) -> None:
        self._set("superkeys.map", encode_numbers(data, 16, "key code"))

    def superkeys_wait_for_get(self) -> int:
        """
        Get the Superkeys wait-for duration in milliseconds.

        This is the delay between the first and the following repeats of a
        held HOLD action, so a single press can be released before the
        "machinegun" starts.
        """
        return self.query_numeric("superkeys.waitfor", 16)

    def superkeys_wait_for_set(self, milliseconds: int) -> None:
        self._set("superkeys.waitfor", check_unsigned("milliseconds", milliseconds, 16))

    def superkeys_timeout_get(self) -> int:
        """Get how long (ms) Superkeys waits for the next tap."""
        return self.query_numeric("superkeys.timeout", 16)

    def superkeys_timeout_set(self, milliseconds: int) -> None:
        self._set("superkeys.timeout", check_unsigned("milliseconds", milliseconds, 16))

    def superkeys_repeat_get(self) -> int:
        """Get the Superkeys repeat interval in milliseconds."""
        return self.query_numeric("superkeys.repeat", 16)

    def superkeys_repeat_set(self, milliseconds: int) -> None:
        self._set("superkeys.repeat", check_unsigned("milliseconds", milliseconds, 16))

    def superkeys_hold_start_get(self) -> int:
        """Get the minimum time (ms) before a press counts as a hold."""
        return self.query_numeric("superkeys.holdstart", 16)

    def superkeys_hold_start_set(self, milliseconds: int) -> None:
        self._set("superkeys.holdstart", check_unsigned("milliseconds", milliseconds, 16))

    def superkeys_overlap_get(self) -> int:
        """Get the Superkeys overlap percentage."""
        return self.query_numeric("superkeys.overlap", 8)

    def superkeys_overlap_set(self, percentage: int) -> None:
        """
        Set the overlap percentage allowed when fast typing before the
        overlapped key triggers a hold.

        Raises:
            ValueAboveLimitError: If percentage > 80.
        """
        check_unsigned("percentage", percentage, bits=8, maximum=MAX_OVERLAP_PERCENTAGE)
        self._set("superkeys.overlap", percentage)

    # ------------------------------------------------------------------
    # LEDs
    # ------------------------------------------------------------------

    def led_at_get(self, led: int) -> RGB:
        """Get the color of a specific LED."""
        return self._query(f"led.at {check_unsigned('led', led, 8)}", _decode_rgb)

    def led_at_set(self, led: int, color: RGB) -> None:
        self._set("led.at", check_unsigned("led", led, 8), color.to_wire())

    def led_all(self, color: RGB) -> None:
        """Set the color of every LED."""
        self._set("led.setAll", color.to_wire())

    def led_mode_get(self) -> LedMode:
        return self.query_enum("led.mode", LedMode)

    def led_mode_set(self, mode: LedMode) -> None:
        self._set("led.mode", LedMode(mode).to_wire())

    def led_brightness_keys_wired_get(self) -> int:
        """Get the key LED brightness (wired)."""
        return self.query_numeric("led.brightness", 8)

    def led_brightness_keys_wired_set(self, brightness: int) -> None:
        self._set("led.brightness", check_unsigned("brightness", brightness, 8))

    def led_brightness_underglow_wired_get(self) -> int:
        """Get the underglow LED brightness (wired)."""
        return self.query_numeric("led.brightnessUG", 8)

    def led_brightness_underglow_wired_set(self, brightness: int) -> None:
        self._set("led.brightnessUG", check_unsigned("brightness", brightness, 8))

    def led_brightness_keys_wireless_get(self) -> int:
        """Get the key LED brightness (wireless)."""
        return self.query_numeric("led.brightness.wireless", 8)

    def led_brightness_keys_wireless_set(self, brightness: int) -> None:
        self._set("led.brightness.wireless", check_unsigned("brightness", brightness, 8))

    def led_brightness_underglow_wireless_get(self) -> int:
        """Get the underglow LED brightness (wireless)."""
        return self.query_numeric("led.brightnessUG.wireless", 8)

    def led_brightness_underglow_wireless_set(self, brightness: int) -> None:
        self._set("led.brightnessUG.wireless", check_unsigned("brightness", brightness, 8))

    def led_fade_get(self) -> int:
        return self.query_numeric("led.fade", 16)

    def led_fade_set(self, fade: int) -> None:
        self._set("led.fade", check_unsigned("fade", fade, 16))

    def led_theme_get(self) -> List[RGB]:
        return self.query_colors("led.theme", RGB)

    def led_theme_set(self, data: Sequence[RGB]) -> None:
        self._set("led.theme", encode_colors(data))

    def palette_rgb_get(self) -> List[RGB]:
        """
        Get the palette as RGB.

        The color map refers to palette entries by index.
        """
        return self.query_colors("palette", RGB)

    def palette_rgb_set(self, data: Sequence[RGB]) -> None:
        self._set("palette", encode_colors(data))

    def palette_rgbw_get(self) -> List[RGBW]:
        """Get the palette as RGBW (keyboards with white LEDs)."""
        return self.query_colors("palette", RGBW)

    def palette_rgbw_set(self, data: Sequence[RGBW]) -> None:
        self._set("palette", encode_colors(data))

    def color_map_get(self) -> List[int]:
        """Get the palette index of every LED, layer by layer."""
        return self.query_numbers("colormap.map", 8)

    def color_map_set(self, data: Sequence[int]) -> None:
        self._set("colormap.map", encode_numbers(data, 8, "palette index"))

    # ------------------------------------------------------------------
    # Idle LEDs
    # ------------------------------------------------------------------

    def led_idle_true_sleep_get(self) -> bool:
        return self.query_bool("idleleds.true_sleep")

    def led_idle_true_sleep_set(self, state: bool) -> None:
        self._set("idleleds.true_sleep", encode_bool(state))

    def led_idle_true_sleep_time_get(self) -> int:
        """Get the true sleep delay in seconds."""
        return self.query_numeric("idleleds.true_sleep_time", 16)

    def led_idle_true_sleep_time_set(self, seconds: int) -> None:
        """
        Raises:
            ValueAboveLimitError: If seconds > 65,000.
        """
        check_unsigned("seconds", seconds, maximum=MAX_IDLE_SECONDS)
        self._set("idleleds.true_sleep_time", seconds)

    def led_idle_time_limit_wired_get(self) -> int:
        """Get the idle LED time limit in seconds (wired)."""
        return self.query_numeric("idleleds.time_limit", 16)

    def led_idle_time_limit_wired_set(self, seconds: int) -> None:
        check_unsigned("seconds", seconds, maximum=MAX_IDLE_SECONDS)
        self._set("idleleds.time_limit", seconds)

    def led_idle_time_limit_wireless_get(self) -> int:
        """Get the idle LED time limit in seconds (wireless)."""
        return self.query_numeric("idleleds.wireless", 16)

    def led_idle_time_limit_wireless_set(self, seconds: int) -> None:
        check_unsigned("seconds", seconds, maximum=MAX_IDLE_SECONDS)
        self._set("idleleds.wireless", seconds)

    # ------------------------------------------------------------------
    # Hardware
    # ------------------------------------------------------------------

    def hardware_version_get(self) -> str:
        """Get the keyboard model name."""
        return self.query_string("hardware.version")

    def hardware_version_set(self, data: str) -> None:
        self._set("hardware.version", _check_text("model name", data))

    # ------------------------------------------------------------------
    # Qukeys, macros
    # ------------------------------------------------------------------

    def qukeys_hold_timeout_get(self) -> int:
        """Get the Qukeys hold timeout in milliseconds."""
        return self.query_numeric("qukeys.holdTimeout", 16)

    def qukeys_hold_timeout_set(self, milliseconds: int) -> None:
        self._set("qukeys.holdTimeout", check_unsigned("milliseconds", milliseconds, 16))

    def qukeys_overlap_threshold_get(self) -> int:
        """Get the Qukeys overlap threshold in milliseconds."""
        return self.query_numeric("qukeys.overlapThreshold", 16)

    def qukeys_overlap_threshold_set(self, milliseconds: int) -> None:
        self._set("qukeys.overlapThreshold", check_unsigned("milliseconds", milliseconds, 16))

    def macros_map_get(self) -> List[int]:
        return self.query_numbers("macros.map", 8)

    def macros_map_set(self, data: Sequence[int]) -> None:
        self._set("macros.map", encode_numbers(data, 8, "macro byte"))

    def macros_trigger(self, macro_id: int) -> None:
        """Run a stored macro."""
        self._set("macros.trigger", check_unsigned("macro", macro_id, 8))

    def macros_memory(self) -> int:
        """Get the macro memory size in bytes."""
        return self.query_numeric("macros.memory", 16)

    # ------------------------------------------------------------------
    # Virtual mouse
    # ------------------------------------------------------------------

    def mouse_speed_get(self) -> int:
        return self.query_numeric("mouse.speed", 8)

    def mouse_speed_set(self, speed: int) -> None:
        """
        Raises:
            ValueAboveLimitError: If speed > 127.
        """
        check_unsigned("speed", speed, bits=8, maximum=MAX_MOUSE_SPEED)
        self._set("mouse.speed", speed)

    def mouse_delay_get(self) -> int:
        """Get the virtual mouse delay in milliseconds."""
        return self.query_numeric("mouse.speedDelay", 16)

    def mouse_delay_set(self, milliseconds: int) -> None:
        self._set("mouse.speedDelay", check_unsigned("milliseconds", milliseconds, 16))

    def mouse_acceleration_speed_get(self) -> int:
        return self.query_numeric("mouse.accelSpeed", 8)

    def mouse_acceleration_speed_set(self, speed: int) -> None:
        self._set("mouse.accelSpeed", check_unsigned("speed", speed, 8))

    def mouse_acceleration_delay_get(self) -> int:
        """Get the virtual mouse acceleration delay in milliseconds."""
        return self.query_numeric("mouse.accelDelay", 16)

    def mouse_acceleration_delay_set(self, milliseconds: int) -> None:
        self._set("mouse.accelDelay", check_unsigned("milliseconds", milliseconds, 16))

    def mouse_wheel_speed_get(self) -> int:
        return self.query_numeric("mouse.wheelSpeed", 8)

    def mouse_wheel_speed_set(self, speed: int) -> None:
        self._set("mouse.wheelSpeed", check_unsigned("speed", speed, 8))

    def mouse_wheel_delay_get(self) -> int:
        """Get the virtual mouse wheel delay in milliseconds."""
        return self.query_numeric("mouse.wheelDelay", 16)

    def mouse_wheel_delay_set(self, milliseconds: int) -> None:
        self._set("mouse.wheelDelay", check_unsigned("milliseconds", milliseconds, 16))

    def mouse_speed_limit_get(self) -> int:
        return self.query_numeric("mouse.speedLimit", 8)

    def mouse_speed_limit_set(self, limit: int) -> None:
        self._set("mouse.speedLimit", check_unsigned("limit", limit, 8))

    # ------------------------------------------------------------------
    # Layers (zero based, RAM only)
    # ------------------------------------------------------------------

    def layer_activate(self, layer: int) -> None:
        """Activate a layer on top of the layer history."""
        self._set("layer.activate", self._check_layer(layer))

    def layer_deactivate(self, layer: Optional[int] = None) -> None:
        """
        Deactivate a layer, or the most recently activated one if ``layer``
        is None (this is how a shift-to-layer key releases).
        """
        if layer is None:
            self._set("layer.deactivate")
        else:
            self._set("layer.deactivate", self._check_layer(layer))

    def layer_is_active(self, layer: int) -> bool:
        return self.query_bool(f"layer.isActive {self._check_layer(layer)}")

    def layer_move_to(self, layer: int) -> None:
        """
        Switch to a layer, clearing the layer history (unlike
        ``layer_activate``, which adds to it).
        """
        self._set("layer.moveTo", self._check_layer(layer))

    def layer_state(self) -> List[bool]:
        """Get the active flag of up to 32 layers, indexed by layer."""
        return self._query("layer.state", _decode_layer_state)

    # ------------------------------------------------------------------
    # Wireless
    # ------------------------------------------------------------------

    def wireless_battery_level_left_get(self) -> int:
        """Get the left half battery level as a percentage."""
        return self.query_numeric("wireless.battery.left.level", 8)

    def wireless_battery_level_right_get(self) -> int:
        """Get the right half battery level as a percentage."""
        return self.query_numeric("wireless.battery.right.level", 8)

    def wireless_battery_status_left_get(self) -> int:
        return self.query_numeric("wireless.battery.left.status", 8)

    def wireless_battery_status_right_get(self) -> int:
        return self.query_numeric("wireless.battery.right.status", 8)

    def wireless_battery_saving_mode_get(self) -> bool:
        """
        Get the battery saving mode state.

        The firmware enables it automatically on low charge.
        """
        return self.query_bool("wireless.battery.savingMode")

    def wireless_battery_saving_mode_set(self, state: bool) -> None:
        self._set("wireless.battery.savingMode", encode_bool(state))

    def wireless_battery_force_read(self) -> None:
        """
        Ask the Neuron to refresh the battery levels.

        New values take a second or two to show up in the level commands.
        """
        self.send("wireless.battery.forceRead")

    def wireless_rf_power_level_get(self) -> WirelessPowerMode:
        return self.query_enum("wireless.rf.power", WirelessPowerMode)

    def wireless_rf_power_level_set(self, mode: WirelessPowerMode) -> None:
        self._set("wireless.rf.power", WirelessPowerMode(mode).to_wire())

    def wireless_rf_channel_hop_get(self) -> bool:
        return self.query_bool("wireless.rf.channelHop")

    def wireless_rf_channel_hop_set(self, state: bool) -> None:
        self._set("wireless.rf.channelHop", encode_bool(state))

    def wireless_rf_sync_pairing(self) -> bool:
        return self.query_bool("wireless.rf.syncPairing")
