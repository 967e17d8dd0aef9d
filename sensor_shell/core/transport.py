"""Raw read/write surface over an open serial link."""

from typing import Optional, TYPE_CHECKING

import serial

from sensor_shell.core.exceptions import WriteFailedError

if TYPE_CHECKING:
    from sensor_shell.logging.communication_logger import CommunicationLogger


class Transport:
    """Writes raw bytes and accumulates inbound bytes into a growable buffer.

    The inbound buffer is append-only between calls to clear_buffer(); it
    must be cleared before each new command so that bytes left over from a
    previous reply never leak into the next one.
    """

    def __init__(self, logger: Optional['CommunicationLogger'] = None):
        self.logger = logger
        self._buffer = bytearray()
        self._read_failure_reported = False

    @property
    def buffer(self) -> bytes:
        """Current buffer content."""
        return bytes(self._buffer)

    def clear_buffer(self) -> None:
        """Empty the inbound buffer."""
        self._buffer.clear()
        self._read_failure_reported = False

    def discard_input(self, link: Optional[serial.Serial]) -> None:
        """Drop bytes waiting in the link's input queue.

        Covers late replies to an abandoned query that arrived after the
        read loop gave up on them.
        """
        if link is None or not link.is_open:
            return
        try:
            link.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            self._log_read_failure(f"Input flush failed: {e}", link)

    def write_raw(self, link: Optional[serial.Serial], data: bytes, channel: str = "") -> int:
        """Write bytes to the link in a single attempt.

        Args:
            link: Serial link (may be None when nothing is open)
            data: Bytes to send
            channel: Channel the bytes belong to, for error context

        Returns:
            Number of bytes written

        Raises:
            WriteFailedError: Link not open or the write failed
        """
        port = getattr(link, "port", None)
        if link is None or not link.is_open:
            raise WriteFailedError("Cannot write: link is not open", channel, port)

        try:
            written = link.write(data)
            link.flush()
        except (serial.SerialException, OSError) as e:
            raise WriteFailedError(f"Failed to write to port {port}: {e}", channel, port, e) from e

        return len(data) if written is None else written

    def read_available(self, link: Optional[serial.Serial]) -> bytes:
        """Append whatever bytes are waiting on the link and return the buffer.

        A read on a closed or failing link is logged and otherwise
        ignored: the unchanged buffer is returned.
        """
        if link is None or not link.is_open:
            self._log_read_failure("Read failed: link is not open", link)
            return bytes(self._buffer)

        try:
            waiting = link.in_waiting
            if waiting:
                self._buffer += link.read(waiting)
        except (serial.SerialException, OSError) as e:
            self._log_read_failure(f"Read failed: {e}", link)

        return bytes(self._buffer)

    def _log_read_failure(self, message: str, link: Optional[serial.Serial]) -> None:
        # once per command cycle; the read loop polls every few milliseconds
        if self._read_failure_reported:
            return
        self._read_failure_reported = True
        if self.logger:
            self.logger.log_port_event(
                event=message,
                port=getattr(link, "port", None),
                level="WARNING",
                source="Transport"
            )

    def __repr__(self) -> str:
        return f"Transport(buffered={len(self._buffer)} bytes)"
