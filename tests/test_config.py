from __future__ import annotations

import json

import pytest

from dygma_focus.config.loader import load_config, save_config
from dygma_focus.config.models import AppConfig, LoggingConfig, SerialConfig
from dygma_focus.utils.exceptions import ConfigurationError


def test_defaults_without_file() -> None:
    config = load_config(None)

    assert config.serial.port == ""
    assert config.serial.timeout_seconds == 5.0
    assert config.serial.auto_discover is True
    assert config.simulator.enabled is False


def test_missing_file_is_created_with_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"

    config = load_config(str(path))

    assert config == AppConfig()
    assert json.loads(path.read_text(encoding="utf-8"))["serial"]["timeout_seconds"] == 5.0


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "config.json"
    config = AppConfig(serial=SerialConfig(port="/dev/ttyACM0", timeout_seconds=0.5))

    save_config(config, str(path))

    assert load_config(str(path)) == config


def test_invalid_json(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_config(str(path))


@pytest.mark.parametrize("data, field", [
    ({"serial": {"timeout_seconds": 10}}, "timeout_seconds"),
    ({"serial": {"timeout_seconds": 0.01}}, "timeout_seconds"),
    ({"logging": {"level": "LOUD"}}, "level"),
    ({"simulator": {"chunk_size": 0}}, "chunk_size"),
    ({"server": {}}, "server"),
    ({"serial": {"baud": 9600}}, "baud"),
])
def test_validation_errors_name_the_field(tmp_path, data: dict, field: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    with pytest.raises(ConfigurationError, match=field):
        load_config(str(path))


def test_log_level_is_normalized() -> None:
    assert LoggingConfig(level="debug").level == "DEBUG"
