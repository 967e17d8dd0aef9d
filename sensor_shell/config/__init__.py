"""Layered configuration: defaults, config.yaml and SENSOR_SHELL_* variables."""

from sensor_shell.config.config_manager import ConfigManager
from sensor_shell.config.config_models import (
    ARDUINO_VENDOR_ID,
    Config,
    DeviceConfig,
    QueryConfig,
    LoggingConfig,
    LogLevel
)

__all__ = [
    'ARDUINO_VENDOR_ID',
    'ConfigManager',
    'Config',
    'DeviceConfig',
    'QueryConfig',
    'LoggingConfig',
    'LogLevel',
]
