"""
Command line entry point for the Dygma Focus client.

Usage:
    python -m dygma_focus [--config CONFIG_PATH] [--port PORT] [--simulator] COMMAND
"""

import argparse
import json
import logging
import sys
from typing import Optional

from dygma_focus import __version__
from dygma_focus.config.loader import load_config
from dygma_focus.config.models import AppConfig
from dygma_focus.focus import Focus
from dygma_focus.protocol.port_scanner import find_all_devices
from dygma_focus.settings.controller import SettingsController, load_snapshot, save_snapshot
from dygma_focus.simulator.mock_serial import MockKeyboard
from dygma_focus.utils.exceptions import ConfigurationError, FocusError
from dygma_focus.utils.logging_setup import setup_logging


logger = logging.getLogger(__name__)


# CLI name -> Focus operation prefix
SETTINGS_COMMANDS = {
    "default-layer": "settings_default_layer",
    "version": "settings_version",
}

SETTINGS_QUERIES = {
    "valid": "settings_valid",
    "crc": "settings_crc",
    "eeprom-free": "eeprom_free",
}

SUPERKEYS_COMMANDS = {
    "wait-for": "superkeys_wait_for",
    "timeout": "superkeys_timeout",
    "repeat": "superkeys_repeat",
    "hold-start": "superkeys_hold_start",
    "overlap": "superkeys_overlap",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dygma-focus", description=f"Dygma Focus client v{__version__}"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: built-in defaults)"
    )
    parser.add_argument("--port", type=str, default=None, help="Serial port of the keyboard")
    parser.add_argument(
        "--simulator", action="store_true", help="Talk to the in-memory simulator"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("devices", help="List connected keyboards")
    commands.add_parser("version", help="Show the firmware version")
    commands.add_parser("help", help="List the commands the firmware supports")

    settings = commands.add_parser("settings", help="Get or set general settings")
    settings.add_argument("name", choices=sorted(SETTINGS_COMMANDS) + sorted(SETTINGS_QUERIES))
    settings.add_argument("value", nargs="?", default=None)

    superkeys = commands.add_parser("superkeys", help="Get or set Superkeys timings")
    superkeys.add_argument("name", choices=sorted(SUPERKEYS_COMMANDS))
    superkeys.add_argument("value", nargs="?", type=int, default=None)

    backup = commands.add_parser("backup", help="Save all settings to a JSON file")
    backup.add_argument("file")

    restore = commands.add_parser("restore", help="Write all settings from a JSON file")
    restore.add_argument("file")

    return parser


def open_focus(config: AppConfig, port: Optional[str] = None, use_simulator: bool = False) -> Focus:
    """
    Open the keyboard chosen by command line and configuration.

    Priority: simulator, explicit port, configured port, auto-discovery.

    Raises:
        FocusError: If no keyboard can be opened.
    """
    if use_simulator or config.simulator.enabled:
        logger.info("Using SIMULATOR mode")
        return Focus(MockKeyboard(config.simulator))

    port_to_use = port or config.serial.port
    if port_to_use:
        logger.info(f"Using manually specified port: {port_to_use}")
        return Focus.open(port_to_use, config.serial)

    if not config.serial.auto_discover:
        raise ConfigurationError(
            "No serial port specified and auto-discover is disabled. "
            "Use --port or set 'serial.port' in the config file."
        )

    logger.info("Auto-discovering keyboard...")
    return Focus.open_first_available(config.serial)


def _get_or_set(focus: Focus, operation: str, value) -> None:
    if value is None:
        print(getattr(focus, f"{operation}_get")())
    else:
        getattr(focus, f"{operation}_set")(value)


def run_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Run one parsed command."""
    if args.command == "devices":
        for device in find_all_devices():
            print(json.dumps(device.to_dict()))
        return

    with open_focus(config, args.port, args.simulator) as focus:
        if args.command == "version":
            print(focus.version())
        elif args.command == "help":
            print("\n".join(focus.help()))
        elif args.command == "settings":
            if args.name in SETTINGS_QUERIES:
                print(getattr(focus, SETTINGS_QUERIES[args.name])())
            elif args.name == "default-layer" and args.value is not None:
                focus.settings_default_layer_set(int(args.value))
            else:
                _get_or_set(focus, SETTINGS_COMMANDS[args.name], args.value)
        elif args.command == "superkeys":
            _get_or_set(focus, SUPERKEYS_COMMANDS[args.name], args.value)
        elif args.command == "backup":
            save_snapshot(SettingsController(focus).read_all(), args.file)
        elif args.command == "restore":
            SettingsController(focus).write_all(load_snapshot(args.file))


def main(argv=None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)

    try:
        run_command(args, config)
    except ValueError as e:
        print(f"Invalid value: {e}", file=sys.stderr)
        return 1
    except FocusError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
