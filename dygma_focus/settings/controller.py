"""
Settings controller.

Reads and writes every persistent keyboard setting in one fixed order, and
stores snapshots as JSON files for backup and restore.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple

from pydantic import ValidationError

from dygma_focus.config.loader import format_validation_error
from dygma_focus.focus import Focus
from dygma_focus.settings.models import SettingsSnapshot
from dygma_focus.utils.exceptions import ConfigurationError, FocusError


logger = logging.getLogger(__name__)


class SettingField(NamedTuple):
    """One snapshot field and the Focus operations that move it."""

    name: str
    getter: Callable
    setter: Callable
    optional: bool = False


def _field(name: str, optional: bool = False) -> SettingField:
    return SettingField(
        name=name,
        getter=getattr(Focus, f"{name}_get"),
        setter=getattr(Focus, f"{name}_set"),
        optional=optional,
    )


SETTING_FIELDS: List[SettingField] = [
    _field("keymap_custom"),
    _field("keymap_default"),
    _field("keymap_only_custom"),
    _field("settings_default_layer"),
    _field("superkeys_map"),
    _field("superkeys_wait_for"),
    _field("superkeys_timeout"),
    _field("superkeys_repeat"),
    _field("superkeys_hold_start"),
    _field("superkeys_overlap"),
    _field("led_mode"),
    _field("led_brightness_keys_wired"),
    _field("led_brightness_underglow_wired", optional=True),
    _field("led_brightness_keys_wireless", optional=True),
    _field("led_brightness_underglow_wireless", optional=True),
    _field("led_fade", optional=True),
    _field("led_theme"),
    _field("palette_rgb", optional=True),
    _field("palette_rgbw", optional=True),
    _field("color_map"),
    _field("led_idle_true_sleep", optional=True),
    _field("led_idle_true_sleep_time", optional=True),
    _field("led_idle_time_limit_wired"),
    _field("led_idle_time_limit_wireless", optional=True),
    _field("qukeys_hold_timeout"),
    _field("qukeys_overlap_threshold"),
    _field("macros_map"),
    _field("mouse_speed"),
    _field("mouse_delay"),
    _field("mouse_acceleration_speed"),
    _field("mouse_acceleration_delay"),
    _field("mouse_wheel_speed"),
    _field("mouse_wheel_delay"),
    _field("mouse_speed_limit"),
    _field("wireless_battery_saving_mode", optional=True),
    _field("wireless_rf_power_level", optional=True),
    _field("wireless_rf_channel_hop", optional=True),
]


class SettingsController:
    """
    Aggregate read and write of the keyboard settings.
    """

    def __init__(self, focus: Focus):
        """
        Initialize settings controller.

        Args:
            focus: Open Focus engine.
        """
        self.focus = focus

    def read_all(self) -> SettingsSnapshot:
        """
        Read every setting, in order.

        Optional fields that fail to read (unsupported by this model or
        firmware) are recorded as None.

        Returns:
            Snapshot of all settings.

        Raises:
            FocusError: If a mandatory field cannot be read.
        """
        values: Dict[str, object] = {}

        for field in SETTING_FIELDS:
            if not field.optional:
                values[field.name] = field.getter(self.focus)
                continue

            try:
                values[field.name] = field.getter(self.focus)
            except FocusError as e:
                logger.debug(f"Optional setting {field.name} unavailable: {e}")
                values[field.name] = None

        logger.info(f"Read {len(values)} settings from {self.focus.port_name}")
        return SettingsSnapshot(**values)

    def write_all(self, snapshot: SettingsSnapshot) -> None:
        """
        Write every setting, in order.

        Optional fields holding None are skipped. The first failure aborts
        the remaining writes; settings already written stay applied.

        Raises:
            FocusError: If any write fails.
        """
        written = 0
        for field in SETTING_FIELDS:
            value = getattr(snapshot, field.name)
            if value is None and field.optional:
                continue
            field.setter(self.focus, value)
            written += 1

        logger.info(f"Wrote {written} settings to {self.focus.port_name}")


def save_snapshot(snapshot: SettingsSnapshot, path: str) -> None:
    """
    Save a settings snapshot to a JSON file.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    snapshot_path = Path(path)

    try:
        with open(snapshot_path, "w", encoding="utf-8") as f:
            json.dump(snapshot.model_dump(mode="json"), f, indent=2)
    except IOError as e:
        raise ConfigurationError(f"Failed to write {snapshot_path}: {e}") from e

    logger.info(f"Settings saved to {snapshot_path}")


def load_snapshot(path: str) -> SettingsSnapshot:
    """
    Load and validate a settings snapshot from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    snapshot_path = Path(path)

    try:
        with open(snapshot_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {snapshot_path}: {e}") from e
    except IOError as e:
        raise ConfigurationError(f"Failed to read {snapshot_path}: {e}") from e

    try:
        snapshot = SettingsSnapshot.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "Settings validation failed:\n" + format_validation_error(e)
        ) from e

    logger.info(f"Settings loaded from {snapshot_path}")
    return snapshot
