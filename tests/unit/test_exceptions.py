"""Unit tests for custom exception hierarchy.

Tests all custom exceptions including:
- Inheritance hierarchy
- Custom attributes
- String formatting
"""

import pytest
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


class TestSensorShellError:
    """Test base exception class."""

    def test_is_exception(self):
        assert issubclass(SensorShellError, Exception)

    def test_message(self):
        """Test error message is preserved."""
        assert str(SensorShellError("Custom message")) == "Custom message"


class TestNoDeviceFoundError:
    """Test NoDeviceFoundError."""

    def test_attributes(self):
        error = NoDeviceFoundError(0x2341, ports_scanned=3)

        assert error.vendor_id == 0x2341
        assert error.ports_scanned == 3

    def test_str(self):
        error = NoDeviceFoundError(0x2341, ports_scanned=2)

        assert str(error) == "No device with vendor id 0x2341 found (2 port(s) scanned)"

    def test_not_a_port_error(self):
        """Absence is a detection outcome, not a link failure."""
        assert not issubclass(NoDeviceFoundError, SerialPortError)
        assert issubclass(NoDeviceFoundError, SensorShellError)


class TestSerialPortError:
    """Test SerialPortError and its subclasses."""

    def test_hierarchy(self):
        assert issubclass(SerialPortError, SensorShellError)
        assert issubclass(PortOpenFailedError, SerialPortError)
        assert issubclass(SerialPortBusyError, PortOpenFailedError)
        assert issubclass(PortAlreadyOpenError, SerialPortError)
        assert issubclass(PortCloseFailedError, SerialPortError)

    def test_str_without_os_error(self):
        error = SerialPortError("Connection failed", port="/dev/ttyACM0")

        assert error.os_error is None
        assert str(error) == "Connection failed (port: /dev/ttyACM0)"

    def test_str_with_os_error(self):
        os_error = PermissionError("Access denied")
        error = PortOpenFailedError("Cannot open port", port="COM3", os_error=os_error)

        assert error.os_error is os_error
        assert str(error) == "Cannot open port (port: COM3, cause: Access denied)"

    def test_catch_busy_as_open_failure(self):
        with pytest.raises(PortOpenFailedError):
            raise SerialPortBusyError("Port busy", port="/dev/ttyACM0")


class TestQueryErrors:
    """Test QueryError and its subclasses."""

    def test_hierarchy(self):
        for cls in (WriteFailedError, ReadTimeoutError, QueryCancelledError, ParseError):
            assert issubclass(cls, QueryError)
        assert issubclass(QueryError, SensorShellError)

    def test_query_error_str(self):
        assert str(QueryError("Something broke", "A0")) == "Something broke (channel: A0)"

    def test_write_failed(self):
        cause = OSError("I/O error")
        error = WriteFailedError("Write failed", "i72", port="COM3", os_error=cause)

        assert error.channel == "i72"
        assert error.port == "COM3"
        assert error.os_error is cause

    def test_read_timeout(self):
        error = ReadTimeoutError("No reply", "A0", timeout=2.0, partial=b"VAL")

        assert error.timeout == 2.0
        assert error.partial == b"VAL"
        assert str(error) == "No reply (channel: A0)"

    def test_read_timeout_default_partial(self):
        assert ReadTimeoutError("No reply", "A0", timeout=1.0).partial == b""

    def test_parse_error_str(self):
        error = ParseError("Bad reply", "A0", "VALUE=x\r\n")

        assert error.raw_line == "VALUE=x\r\n"
        assert str(error) == "Bad reply (channel: A0) (reply: 'VALUE=x\\r\\n')"
