"""Sensor Shell - host-side client for a microcontroller sensor shell.

This package provides:
- Detection of the shell board among attached serial devices
- Serial link lifecycle with fixed 9600 8N1 settings
- Serialized query/response cycles with deadlines and typed errors
- Decoding of analog and two-byte I2C readings
"""

from sensor_shell.core import (
    SensorShell,
    PortCatalog,
    PortDescriptor,
    DeviceDetector,
    ConnectionManager,
    Transport,
    ProtocolCodec,
    QueryCoordinator,
    ReadingRecord,
    ReadingStatus,
    ABSENT_SENTINEL,
    SensorShellError,
    NoDeviceFoundError,
    SerialPortError,
    QueryError,
    WriteFailedError,
    ReadTimeoutError,
    ParseError,
)

__version__ = "0.1.0"

__all__ = [
    "SensorShell",
    "PortCatalog",
    "PortDescriptor",
    "DeviceDetector",
    "ConnectionManager",
    "Transport",
    "ProtocolCodec",
    "QueryCoordinator",
    "ReadingRecord",
    "ReadingStatus",
    "ABSENT_SENTINEL",
    "SensorShellError",
    "NoDeviceFoundError",
    "SerialPortError",
    "QueryError",
    "WriteFailedError",
    "ReadTimeoutError",
    "ParseError",
]
