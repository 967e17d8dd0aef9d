"""Frozen configuration sections for Sensor Shell.

Line settings (9600 8N1) are not configurable and live in
``sensor_shell.core.link_config``.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


ARDUINO_VENDOR_ID = 0x2341


class LogLevel(Enum):
    """Ordered from most to least verbose."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class DeviceConfig:
    """Which USB device counts as the shell board."""
    vendor_id: int = ARDUINO_VENDOR_ID


@dataclass(frozen=True)
class QueryConfig:
    timeout: float = 2.0  # seconds
    poll_interval: float = 0.005  # seconds
    history_size: int = 1000


@dataclass(frozen=True)
class LoggingConfig:
    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Root object handed out by ConfigManager."""
    device: DeviceConfig = field(default_factory=DeviceConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain dict, suitable for YAML dumping and schema validation.

        Enum members are replaced by their values.
        """
        return asdict(self, dict_factory=lambda items: {
            key: value.value if isinstance(value, Enum) else value
            for key, value in items
        })
