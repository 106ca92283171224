"""
Settings snapshot model.

A snapshot holds every persistent keyboard setting read in one pass, and is
also the unit of backup and restore.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from dygma_focus.color import RGB, RGBW
from dygma_focus.enums import LedMode, WirelessPowerMode


class SettingsSnapshot(BaseModel):
    """
    All persistent settings of one keyboard.

    Fields typed ``Optional`` are not supported by every model or firmware
    and hold ``None`` when the keyboard did not answer them.
    """

    keymap_custom: List[int] = Field(description="Custom keymap, all layers")
    keymap_default: List[int] = Field(description="Default keymap layers")
    keymap_only_custom: bool = Field(description="Hide the default layers")
    settings_default_layer: int = Field(ge=0, le=255, description="Layer used at boot")

    superkeys_map: List[int]
    superkeys_wait_for: int = Field(ge=0, le=65535, description="Milliseconds")
    superkeys_timeout: int = Field(ge=0, le=65535, description="Milliseconds")
    superkeys_repeat: int = Field(ge=0, le=65535, description="Milliseconds")
    superkeys_hold_start: int = Field(ge=0, le=65535, description="Milliseconds")
    superkeys_overlap: int = Field(ge=0, le=255, description="Percentage")

    led_mode: LedMode
    led_brightness_keys_wired: int = Field(ge=0, le=255)
    led_brightness_underglow_wired: Optional[int] = Field(default=None, ge=0, le=255)
    led_brightness_keys_wireless: Optional[int] = Field(default=None, ge=0, le=255)
    led_brightness_underglow_wireless: Optional[int] = Field(default=None, ge=0, le=255)
    led_fade: Optional[int] = Field(default=None, ge=0, le=65535)
    led_theme: List[RGB]
    palette_rgb: Optional[List[RGB]] = None
    palette_rgbw: Optional[List[RGBW]] = None
    color_map: List[int]

    led_idle_true_sleep: Optional[bool] = None
    led_idle_true_sleep_time: Optional[int] = Field(default=None, ge=0, le=65535, description="Seconds")
    led_idle_time_limit_wired: int = Field(ge=0, le=65535, description="Seconds")
    led_idle_time_limit_wireless: Optional[int] = Field(default=None, ge=0, le=65535, description="Seconds")

    qukeys_hold_timeout: int = Field(ge=0, le=65535, description="Milliseconds")
    qukeys_overlap_threshold: int = Field(ge=0, le=65535, description="Milliseconds")
    macros_map: List[int]

    mouse_speed: int = Field(ge=0, le=255)
    mouse_delay: int = Field(ge=0, le=65535, description="Milliseconds")
    mouse_acceleration_speed: int = Field(ge=0, le=255)
    mouse_acceleration_delay: int = Field(ge=0, le=65535, description="Milliseconds")
    mouse_wheel_speed: int = Field(ge=0, le=255)
    mouse_wheel_delay: int = Field(ge=0, le=65535, description="Milliseconds")
    mouse_speed_limit: int = Field(ge=0, le=255)

    wireless_battery_saving_mode: Optional[bool] = None
    wireless_rf_power_level: Optional[WirelessPowerMode] = None
    wireless_rf_channel_hop: Optional[bool] = None
