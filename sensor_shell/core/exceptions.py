"""Custom exception hierarchy for Sensor Shell.

This module defines all custom exceptions raised by the detection,
connection and query engine, providing structured error handling with
relevant context for debugging.
"""

from typing import Optional


class SensorShellError(Exception):
    """Base exception for all sensor shell errors.

    All custom exceptions inherit from this base class to allow
    catching all tool-specific errors with a single except clause.
    """
    pass


class NoDeviceFoundError(SensorShellError):
    """No attached serial device carries the expected vendor id.

    This is a normal negative detection result: callers should report
    the absence and retry on their own schedule.

    Attributes:
        vendor_id: Vendor identifier that was searched for
        ports_scanned: Number of ports inspected during detection
    """

    def __init__(self, vendor_id: int, ports_scanned: int = 0):
        """Initialize NoDeviceFoundError.

        Args:
            vendor_id: Vendor identifier that was searched for
            ports_scanned: Number of ports inspected
        """
        super().__init__(f"No device with vendor id 0x{vendor_id:04X} found")
        self.vendor_id = vendor_id
        self.ports_scanned = ports_scanned

    def __str__(self) -> str:
        """Format error message with scan context."""
        base_msg = super().__str__()
        return f"{base_msg} ({self.ports_scanned} port(s) scanned)"


class SerialPortError(SensorShellError):
    """Serial link lifecycle error.

    Raised when opening or closing the serial link does not reach the
    expected state. Captures port identifier and underlying OS error.

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyACM0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: Optional[str], os_error: Optional[Exception] = None):
        """Initialize SerialPortError.

        Args:
            message: Human-readable error description
            port: Serial port identifier
            os_error: Original exception from pyserial/OS
        """
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        """Format error message with port context."""
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class PortOpenFailedError(SerialPortError):
    """Link could not be opened or did not report itself open."""
    pass


class SerialPortBusyError(PortOpenFailedError):
    """Port is already in use by another process."""
    pass


class PortAlreadyOpenError(SerialPortError):
    """A link is already open; close it before opening another."""
    pass


class PortCloseFailedError(SerialPortError):
    """Link still reports itself open after a close request."""
    pass


class QueryError(SensorShellError):
    """Sensor query error.

    Base class for everything that can go wrong between issuing a
    command and decoding its reply.

    Attributes:
        channel: Channel token that was queried
    """

    def __init__(self, message: str, channel: str):
        """Initialize QueryError.

        Args:
            message: Human-readable error description
            channel: Channel token that was queried
        """
        super().__init__(message)
        self.channel = channel

    def __str__(self) -> str:
        """Format error message with channel context."""
        return f"{super().__str__()} (channel: {self.channel})"


class WriteFailedError(QueryError):
    """Command could not be written to the link.

    Raised when writing while the link is not open, or when the
    underlying write fails.

    Attributes:
        port: Serial port identifier (None if no link was open)
        os_error: Original exception from pyserial (if available)
    """

    def __init__(self, message: str, channel: str, port: Optional[str] = None,
                 os_error: Optional[Exception] = None):
        super().__init__(message, channel)
        self.port = port
        self.os_error = os_error


class ReadTimeoutError(QueryError):
    """No terminated line was observed before the query deadline.

    Attributes:
        timeout: Deadline that elapsed, in seconds
        partial: Bytes accumulated before the deadline
    """

    def __init__(self, message: str, channel: str, timeout: float, partial: bytes = b""):
        super().__init__(message, channel)
        self.timeout = timeout
        self.partial = partial


class QueryCancelledError(QueryError):
    """Read loop was stopped through the cancellation event."""
    pass


class ParseError(QueryError):
    """Reply line does not match the expected shape for the channel.

    Attributes:
        raw_line: Reply text that failed to decode
    """

    def __init__(self, message: str, channel: str, raw_line: str):
        super().__init__(message, channel)
        self.raw_line = raw_line

    def __str__(self) -> str:
        """Format error message with the offending reply."""
        return f"{super().__str__()} (reply: {self.raw_line!r})"
