"""
Mock keyboard for the hardware simulator.

Simulates a Dygma keyboard speaking the Focus protocol, so the client can be
exercised without a physical device.
"""

import logging
import threading
import time
from typing import Dict, List, Optional

from dygma_focus.config.models import SimulatorConfig
from dygma_focus.protocol.interface import Transport
from dygma_focus.protocol.session import SENTINEL


logger = logging.getLogger(__name__)


LAYERS = 10
KEYS_PER_LAYER = 80
LEDS_PER_LAYER = 177
PALETTE_SIZE = 16

# Commands that carry no response
SILENT_COMMANDS = {
    "upgrade.start",
    "upgrade.neuron",
    "upgrade.end",
    "wireless.battery.forceRead",
}

# Commands terminated by a space; binary payload follows on the real device
STREAMING_COMMANDS = {"upgrade.keyscanner.sendWrite"}


def _numbers(values) -> str:
    return " ".join(str(value) for value in values)


def _is_wireless(name: str) -> bool:
    return name.startswith("wireless.") or name.endswith(".wireless")


class MockKeyboard(Transport):
    """
    In-memory keyboard implementing the Transport interface.

    Setters store their arguments and answer with an empty payload; getters
    answer with the stored value. Every command written is recorded in
    ``commands``.
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        """
        Initialize simulator.

        Args:
            config: Simulator configuration.
        """
        self.config = config or SimulatorConfig()
        self.commands: List[str] = []
        self._lock = threading.Lock()
        self._closed = False

        self._input = bytearray()
        self._output = bytearray()
        self._failure: Optional[str] = None

        # Virtual keyboard state
        self._layers = [False] * LAYERS
        self._layers[0] = True
        self._leds = ["0 0 0"] * LEDS_PER_LAYER
        self._state: Dict[str, str] = self._default_state()

        logger.info(
            f"MockKeyboard initialized ({self.config.hardware_version}, "
            f"firmware {self.config.firmware_version})"
        )

    def _default_state(self) -> Dict[str, str]:
        channels = 4 if self.config.rgbw_mode else 3
        palette = [index * 16 for index in range(PALETTE_SIZE)]

        return {
            "version": self.config.firmware_version,
            "hardware.version": self.config.hardware_version,
            "keymap.custom": _numbers(
                (4 + key) % 256 for _ in range(LAYERS) for key in range(KEYS_PER_LAYER)
            ),
            "keymap.default": _numbers((4 + key) % 256 for _ in range(2) for key in range(KEYS_PER_LAYER)),
            "keymap.onlyCustom": "1",
            "settings.defaultLayer": "0",
            "settings.version": "1",
            "settings.crc": "c3f1",
            "eeprom.contents": "",
            "eeprom.free": "2048",
            "superkeys.map": _numbers([65535] * 128),
            "superkeys.waitfor": "500",
            "superkeys.timeout": "250",
            "superkeys.repeat": "20",
            "superkeys.holdstart": "200",
            "superkeys.overlap": "20",
            "led.mode": "0",
            "led.brightness": "255",
            "led.brightnessUG": "255",
            "led.brightness.wireless": "160",
            "led.brightnessUG.wireless": "160",
            "led.fade": "0",
            "led.theme": _numbers([0, 0, 0] * 4),
            "palette": _numbers(value for value in palette for _ in range(channels)),
            "colormap.map": _numbers(layer % PALETTE_SIZE for layer in range(LAYERS) for _ in range(LEDS_PER_LAYER)),
            "idleleds.true_sleep": "0",
            "idleleds.true_sleep_time": "600",
            "idleleds.time_limit": "600",
            "idleleds.wireless": "300",
            "qukeys.holdTimeout": "250",
            "qukeys.overlapThreshold": "80",
            "macros.map": _numbers([255] * 256),
            "macros.memory": "2048",
            "mouse.speed": "1",
            "mouse.speedDelay": "1",
            "mouse.accelSpeed": "1",
            "mouse.accelDelay": "64",
            "mouse.wheelSpeed": "1",
            "mouse.wheelDelay": "100",
            "mouse.speedLimit": "127",
            "wireless.battery.left.level": "87",
            "wireless.battery.right.level": "91",
            "wireless.battery.left.status": "0",
            "wireless.battery.right.status": "0",
            "wireless.battery.savingMode": "0",
            "wireless.rf.power": "1",
            "wireless.rf.channelHop": "1",
        }

    @property
    def name(self) -> str:
        return "simulator"

    # ------------------------------------------------------------------
    # Transport interface
    # ------------------------------------------------------------------

    def write_all(self, data: bytes) -> None:
        if self._closed:
            raise OSError("Simulator closed")

        with self._lock:
            self._input.extend(data)
            self._process_input()

    def flush(self) -> None:
        if self._closed:
            raise OSError("Simulator closed")

    def read_into(self, buffer: memoryview) -> int:
        if self._closed:
            raise OSError("Simulator closed")

        with self._lock:
            if self._failure is not None:
                command, self._failure = self._failure, None
                logger.warning(f"[SIMULATOR] Injected read error for {command}")
                raise OSError(f"Simulated I/O error reading response to {command}")

            if not self._output:
                raise TimeoutError("No response pending")

            count = min(len(buffer), self.config.chunk_size, len(self._output))
            buffer[:count] = self._output[:count]
            del self._output[:count]
            return count

    def close(self) -> None:
        self._closed = True
        logger.info("Simulator closed")

    # ------------------------------------------------------------------
    # Command handling
    # ------------------------------------------------------------------

    def _process_input(self) -> None:
        while True:
            newline = self._input.find(b"\n")
            if newline < 0:
                pending = self._input.decode("utf-8", errors="replace")
                if pending.rstrip(" ") in STREAMING_COMMANDS and pending.endswith(" "):
                    self._input.clear()
                    self._record(pending.rstrip(" "))
                return

            line = self._input[:newline].decode("utf-8", errors="replace").strip()
            del self._input[:newline + 1]
            if line:
                self._handle_line(line)

    def _record(self, command: str) -> None:
        logger.debug(f"[SIMULATOR] RX: {command}")
        self.commands.append(command)

    def _handle_line(self, line: str) -> None:
        self._record(line)

        name, _, args = line.partition(" ")
        if name in SILENT_COMMANDS:
            return

        if self.config.response_latency_ms > 0:
            time.sleep(self.config.response_latency_ms / 1000.0)

        if name in self.config.failing_commands:
            self._failure = line
            return

        if _is_wireless(name) and not self.config.wireless:
            response = ""
        else:
            response = self._respond(name, args.split())

        self._output.extend(response.encode("utf-8") + SENTINEL)

    def _respond(self, name: str, args: List[str]) -> str:
        if name == "help":
            return "\n".join(sorted(self._state) + ["help", "led.at", "layer.state"])
        if name == "settings.valid?":
            return "true"
        if name == "led.at":
            return self._handle_led_at(args)
        if name == "led.setAll":
            self._leds = [" ".join(args)] * LEDS_PER_LAYER
            return ""
        if name.startswith("layer."):
            return self._handle_layer(name, args)
        if name.startswith("upgrade."):
            return self._handle_upgrade(name)
        if name == "macros.trigger":
            return ""

        if name not in self._state:
            logger.debug(f"[SIMULATOR] Unknown command: {name}")
            return ""
        if args:
            self._state[name] = " ".join(args)
            return ""
        return self._state[name]

    def _handle_led_at(self, args: List[str]) -> str:
        if not args or not args[0].isdigit() or int(args[0]) >= LEDS_PER_LAYER:
            return ""
        led = int(args[0])
        if len(args) > 1:
            self._leds[led] = " ".join(args[1:])
            return ""
        return self._leds[led]

    def _handle_layer(self, name: str, args: List[str]) -> str:
        layer = int(args[0]) if args and args[0].isdigit() else None

        if name == "layer.state":
            return " ".join("1" if active else "0" for active in self._layers)
        if layer is not None and layer >= LAYERS:
            return ""

        if name == "layer.isActive":
            return "1" if layer is not None and self._layers[layer] else "0"
        if name == "layer.activate" and layer is not None:
            self._layers[layer] = True
        elif name == "layer.deactivate":
            if layer is None:
                active = [index for index, state in enumerate(self._layers) if state]
                layer = active[-1] if len(active) > 1 else None
            if layer is not None:
                self._layers[layer] = False
        elif name == "layer.moveTo" and layer is not None:
            self._layers = [index == layer for index in range(LAYERS)]
        return ""

    def _handle_upgrade(self, name: str) -> str:
        if name == "upgrade.keyscanner.getInfo":
            return f"{self.config.hardware_version} keyscanner {self.config.firmware_version}"
        if name == "upgrade.keyscanner.finish":
            return ""
        # isReady, isConnected, isBootloader, begin
        return "true"
