"""Core detection, connection and query engine.

This package provides the serial I/O layer and the sensor shell protocol:
port enumeration, device detection, link lifecycle, raw transport, reply
decoding and serialized querying.
"""

from sensor_shell.core.exceptions import (
    SensorShellError,
    NoDeviceFoundError,
    SerialPortError,
    PortOpenFailedError,
    SerialPortBusyError,
    PortAlreadyOpenError,
    PortCloseFailedError,
    QueryError,
    WriteFailedError,
    ReadTimeoutError,
    QueryCancelledError,
    ParseError
)
from sensor_shell.core.port_catalog import PortCatalog, PortDescriptor
from sensor_shell.core.device_detector import DeviceDetector
from sensor_shell.core.link_config import LinkConfig, SHELL_LINK_CONFIG
from sensor_shell.core.connection_manager import ConnectionManager
from sensor_shell.core.transport import Transport
from sensor_shell.core.protocol import ProtocolCodec, ChannelKind, ABSENT_SENTINEL
from sensor_shell.core.reading import ReadingRecord, ReadingStatus
from sensor_shell.core.query_coordinator import QueryCoordinator
from sensor_shell.core.sensor_shell import SensorShell

__all__ = [
    'PortCatalog',
    'PortDescriptor',
    'DeviceDetector',
    'LinkConfig',
    'SHELL_LINK_CONFIG',
    'ConnectionManager',
    'Transport',
    'ProtocolCodec',
    'ChannelKind',
    'ABSENT_SENTINEL',
    'ReadingRecord',
    'ReadingStatus',
    'QueryCoordinator',
    'SensorShell',
    'SensorShellError',
    'NoDeviceFoundError',
    'SerialPortError',
    'PortOpenFailedError',
    'SerialPortBusyError',
    'PortAlreadyOpenError',
    'PortCloseFailedError',
    'QueryError',
    'WriteFailedError',
    'ReadTimeoutError',
    'QueryCancelledError',
    'ParseError',
]
