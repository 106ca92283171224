"""
Configuration models using Pydantic for validation.

Configuration is loaded from an optional JSON file and validated at startup.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SerialConfig(BaseModel):
    """Serial port configuration. The line settings are fixed by the firmware."""

    model_config = ConfigDict(extra="forbid")

    port: str = Field(default="", description="Serial port name (e.g., /dev/ttyACM0). Empty for auto-discover.")
    timeout_seconds: float = Field(
        default=5.0, ge=0.04, le=5.0, description="Read timeout in seconds"
    )
    auto_discover: bool = Field(
        default=True, description="Automatically look for a supported keyboard"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="WARNING",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path (None for console only)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SimulatorConfig(BaseModel):
    """In-memory keyboard simulator configuration."""

    enabled: bool = Field(default=False, description="Use simulator instead of real hardware")
    firmware_version: str = Field(default="1.2.3", description="Reported firmware version")
    hardware_version: str = Field(default="Dygma Defy Wired", description="Reported model name")
    wireless: bool = Field(default=False, description="Answer wireless.* and *.wireless commands")
    rgbw_mode: bool = Field(default=True, description="Palette entries carry a white channel")
    response_latency_ms: int = Field(
        default=0, ge=0, le=5000, description="Artificial response delay (ms)"
    )
    chunk_size: int = Field(
        default=64, ge=1, le=4096, description="Maximum bytes delivered per read"
    )
    failing_commands: List[str] = Field(
        default_factory=list, description="Commands whose response read fails with an I/O error"
    )


class AppConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    serial: SerialConfig = Field(default_factory=SerialConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
