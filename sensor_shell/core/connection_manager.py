"""Serial link lifecycle management.

This module owns the single serial link to the shell: it configures it
with the fixed line settings, opens it against a detected port and
verifies open/closed state transitions.
"""

from typing import Optional, TYPE_CHECKING
import threading
import time

import serial

from sensor_shell.core.exceptions import (
    PortOpenFailedError,
    SerialPortBusyError,
    PortAlreadyOpenError,
    PortCloseFailedError
)
from sensor_shell.core.link_config import LinkConfig, SHELL_LINK_CONFIG
from sensor_shell.core.port_catalog import PortDescriptor

if TYPE_CHECKING:
    from sensor_shell.logging.communication_logger import CommunicationLogger


class ConnectionManager:
    """Owns the open/closed state of at most one serial link.

    Example:
        >>> manager = ConnectionManager()
        >>> link = manager.open(descriptor)
        >>> manager.is_open
        True
        >>> manager.close()
        >>> manager.close()  # idempotent
    """

    def __init__(self,
                 link_config: LinkConfig = SHELL_LINK_CONFIG,
                 logger: Optional['CommunicationLogger'] = None):
        """Initialize manager.

        Args:
            link_config: Serial line settings (default: the shell's 9600 8N1)
            logger: Optional CommunicationLogger for port events
        """
        self.link_config = link_config
        self.logger = logger
        self._link: Optional[serial.Serial] = None
        self._port_name: Optional[str] = None
        self._lock = threading.Lock()
        self._open_time: Optional[float] = None

    @property
    def link(self) -> Optional[serial.Serial]:
        """The owned link, or None when nothing has been opened."""
        return self._link

    @property
    def port_name(self) -> Optional[str]:
        """Name of the port the current link is bound to."""
        return self._port_name

    @property
    def is_open(self) -> bool:
        """True if a link is held and reports itself open."""
        link = self._link
        return link is not None and link.is_open

    def open(self, descriptor: PortDescriptor) -> serial.Serial:
        """Configure and open a link bound to ``descriptor.name``.

        Args:
            descriptor: Port chosen by the DeviceDetector

        Returns:
            The open serial link

        Raises:
            PortAlreadyOpenError: A link is already open
            SerialPortBusyError: Port in use by another process
            PortOpenFailedError: Open failed or link does not report itself open
        """
        with self._lock:
            if self._link is not None and self._link.is_open:
                raise PortAlreadyOpenError(
                    f"A link is already open on {self._port_name}; close it first",
                    descriptor.name
                )

            try:
                link = serial.Serial(port=descriptor.name, **self.link_config.serial_kwargs())
            except serial.SerialException as e:
                self._log_error(f"Failed to open port: {e}", descriptor.name, e)
                error_msg = str(e).lower()
                if 'busy' in error_msg or 'in use' in error_msg:
                    raise SerialPortBusyError(
                        f"Port {descriptor.name} is already in use",
                        descriptor.name,
                        e
                    ) from e
                if 'permission denied' in error_msg or 'access denied' in error_msg:
                    raise PortOpenFailedError(
                        f"Permission denied accessing port {descriptor.name}",
                        descriptor.name,
                        e
                    ) from e
                raise PortOpenFailedError(
                    f"Failed to open port {descriptor.name}",
                    descriptor.name,
                    e
                ) from e
            except (OSError, ValueError) as e:
                self._log_error(f"Unexpected error opening port: {e}", descriptor.name, e)
                raise PortOpenFailedError(
                    f"Unexpected error opening port {descriptor.name}",
                    descriptor.name,
                    e
                ) from e

            if not link.is_open:
                self._log_error("Link did not report itself open", descriptor.name)
                raise PortOpenFailedError(
                    f"Port {descriptor.name} did not report itself open",
                    descriptor.name
                )

            self._link = link
            self._port_name = descriptor.name
            self._open_time = time.time()

            if self.logger:
                self.logger.log_port_event(
                    event="Port opened",
                    port=descriptor.name,
                    details={"baud_rate": self.link_config.baud_rate,
                             "vendor_id": descriptor.vendor_id}
                )

            return link

    def close(self) -> None:
        """Close the link and verify it reports itself closed.

        Succeeds trivially when no link is open.

        Raises:
            PortCloseFailedError: Close raised or the link still reports open
        """
        with self._lock:
            link = self._link
            if link is None:
                return

            port = self._port_name
            if link.is_open:
                try:
                    link.close()
                except (serial.SerialException, OSError) as e:
                    self._log_error(f"Error closing port: {e}", port, e)
                    raise PortCloseFailedError(f"Failed to close port {port}", port, e) from e

                if link.is_open:
                    self._log_error("Link still reports itself open after close", port)
                    raise PortCloseFailedError(f"Port {port} did not report itself closed", port)

            if self.logger:
                session_duration = None
                if self._open_time:
                    session_duration = time.time() - self._open_time
                self.logger.log_port_event(
                    event="Port closed",
                    port=port,
                    details={"session_duration_seconds": session_duration}
                    if session_duration is not None else None
                )

            self._link = None
            self._port_name = None
            self._open_time = None

    def _log_error(self, message: str, port: Optional[str],
                   error: Optional[Exception] = None) -> None:
        if self.logger:
            details = {"port": port}
            if error is not None:
                details["error_type"] = type(error).__name__
            self.logger.log_error(source="ConnectionManager", error=message, details=details)

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"ConnectionManager(port={self._port_name!r}, status={status})"
