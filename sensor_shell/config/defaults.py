"""Built-in configuration, used when no file or environment says otherwise."""

from sensor_shell.config.config_models import (
    ARDUINO_VENDOR_ID,
    Config,
    DeviceConfig,
    QueryConfig,
    LoggingConfig,
    LogLevel
)


def get_default_config() -> Config:
    """Arduino vendor id, 2 s query deadline polled every 5 ms, logging off.

    When logging is switched on without a path, ``main.py`` picks
    ``~/.sensor-shell/logs/comm_<timestamp>.log``.
    """
    return Config(
        device=DeviceConfig(vendor_id=ARDUINO_VENDOR_ID),
        query=QueryConfig(
            timeout=2.0,  # a reply takes a few ms at 9600 baud
            poll_interval=0.005,
            history_size=1000
        ),
        logging=LoggingConfig(
            enabled=False,
            level=LogLevel.INFO,
            log_to_file=False,
            log_to_console=True,
            log_file_path=None,
            max_file_size_mb=10,
            backup_count=5
        )
    )
