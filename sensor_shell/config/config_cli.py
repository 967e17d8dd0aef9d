"""Handlers for the configuration options of ``main.py``.

Each handler prints to stdout/stderr and returns a process exit code.
"""

import sys
import json
from pathlib import Path
from typing import Optional

import yaml

from sensor_shell.config.config_manager import ConfigManager
from sensor_shell.config.config_schema import ConfigSchema
from sensor_shell.config.defaults import get_default_config


_SECTION_TITLES = {
    "device": "Device Settings",
    "query": "Query Settings",
    "logging": "Logging Settings",
}

_GENERATED_HEADER = """\
# Sensor Shell configuration
# Every key is optional; missing keys keep their default.
# Environment variables SENSOR_SHELL_<SECTION>_<KEY> override this file.

"""


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def _display(key: str, value) -> str:
    if key == "vendor_id" and isinstance(value, int):
        return f"0x{value:04X}"
    return str(value)


def show_config_command() -> int:
    """Print the active configuration, one line per key with its source."""
    try:
        shown = ConfigManager.instance().show_config()
    except RuntimeError as e:
        print(f"Error showing configuration: {e}", file=sys.stderr)
        return 1

    _banner("Current Configuration")
    for section, title in _SECTION_TITLES.items():
        print(f"\n{title}:")
        for key, entry in shown.get(section, {}).items():
            print(f"  {key}: {_display(key, entry['value'])} (source: {entry['source']})")
    print()
    return 0


def validate_config_command(config_path: Optional[str] = None) -> int:
    """Strictly validate ``config_path``, or the loaded configuration when None.

    Returns:
        0 when valid, 1 otherwise
    """
    try:
        if config_path:
            raw = yaml.safe_load(Path(config_path).read_text(encoding='utf-8')) or {}
        else:
            raw = ConfigManager.instance().get_config().to_dict()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1
    except (OSError, yaml.YAMLError, RuntimeError) as e:
        print(f"Error validating configuration: {e}", file=sys.stderr)
        return 1

    is_valid, errors = ConfigSchema.validate_config(raw)

    _banner("Configuration Validation")
    if is_valid:
        print("\n[OK] Configuration is valid\n")
        return 0

    print(f"\n[ERROR] Configuration has {len(errors)} error(s):\n")
    print("\n".join(f"{number}. {error}" for number, error in enumerate(errors, 1)))
    print()
    return 1


def generate_config_command(output_path: str = "./config.yaml", force: bool = False) -> int:
    """Write the defaults as YAML to ``output_path``.

    An existing file is only replaced when ``force`` is set.
    """
    target = Path(output_path)
    if target.exists() and not force:
        print(f"Error: File already exists: {output_path} (use --force to overwrite)",
              file=sys.stderr)
        return 1

    body = yaml.safe_dump(get_default_config().to_dict(), default_flow_style=False, sort_keys=False)
    try:
        target.write_text(_GENERATED_HEADER + body, encoding='utf-8')
    except OSError as e:
        print(f"Error generating configuration: {e}", file=sys.stderr)
        return 1

    print(f"\n[OK] Default configuration generated: {target}")
    print(f"Check it with: python main.py --validate-config {target}\n")
    return 0


def config_schema_command() -> int:
    print(json.dumps(ConfigSchema.get_schema(), indent=2))
    return 0
