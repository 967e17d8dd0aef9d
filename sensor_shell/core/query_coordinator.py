"""Sensor query orchestration layer.

This module runs the end-to-end query cycle against the shell (clear the
inbound buffer, write the command, read until the line terminator, decode)
and serializes concurrent callers through a single-slot admission gate.
"""

from collections import deque
from typing import Deque, List, Optional, Tuple, TYPE_CHECKING
import threading
import time

from sensor_shell.core.connection_manager import ConnectionManager
from sensor_shell.core.exceptions import (
    QueryError,
    ReadTimeoutError,
    QueryCancelledError
)
from sensor_shell.core.protocol import ProtocolCodec, ABSENT_SENTINEL, ChannelKind
from sensor_shell.core.reading import ReadingRecord, ReadingStatus
from sensor_shell.core.transport import Transport

if TYPE_CHECKING:
    from sensor_shell.logging.communication_logger import CommunicationLogger


class QueryCoordinator:
    """Runs one query at a time over the shared serial link.

    Only one caller at a time may be between the command write and the
    decode of its reply; all others block on the admission gate. No retry
    is attempted: failures are raised to the caller once the gate is
    released.

    Example:
        >>> coordinator = QueryCoordinator(manager, timeout=2.0)
        >>> coordinator.query("A0")
        512
        >>> coordinator.query("i72")
        -1
    """

    def __init__(self,
                 connection: ConnectionManager,
                 transport: Optional[Transport] = None,
                 codec: Optional[ProtocolCodec] = None,
                 timeout: float = 2.0,
                 poll_interval: float = 0.005,
                 history_size: int = 1000,
                 gate: Optional['threading.Lock'] = None,
                 logger: Optional['CommunicationLogger'] = None):
        """Initialize coordinator.

        Args:
            connection: ConnectionManager owning the link
            transport: Transport owning the inbound buffer (default: new one)
            codec: ProtocolCodec (default: "VALUE=" preamble)
            timeout: Default per-query deadline in seconds (default 2.0)
            poll_interval: Pause between buffer polls in seconds (default 0.005)
            history_size: Number of ReadingRecords kept (default 1000)
            gate: Admission gate; share it to serialize open/close with queries
            logger: Optional CommunicationLogger for commands and readings
        """
        self.connection = connection
        self.logger = logger
        self.transport = transport if transport is not None else Transport(logger=logger)
        self.codec = codec if codec is not None else ProtocolCodec()
        self.default_timeout = timeout
        self.poll_interval = poll_interval
        self.gate = gate if gate is not None else threading.Lock()
        self._history: Deque[ReadingRecord] = deque(maxlen=history_size)
        self._history_lock = threading.Lock()

    def query(self,
              channel: str,
              timeout: Optional[float] = None,
              cancel_event: Optional[threading.Event] = None) -> int:
        """Query one channel and return its reading.

        Args:
            channel: Channel token (e.g., "A0" analog, "i72" I2C)
            timeout: Override default deadline in seconds
            cancel_event: Setting this event stops the read loop

        Returns:
            Decoded reading; -1 when no I2C device answered

        Raises:
            ValueError: Channel is empty or not ASCII
            WriteFailedError: Link not open or write failed
            ReadTimeoutError: No terminated line before the deadline
            QueryCancelledError: cancel_event was set during the read loop
            ParseError: Reply does not fit the channel's grammar
        """
        record, error = self._execute(channel, timeout, cancel_event)
        if error is not None:
            raise error
        return record.value

    def query_batch(self,
                    channels: List[str],
                    timeout: Optional[float] = None) -> List[ReadingRecord]:
        """Query several channels in sequence.

        Continues past failed queries, including malformed channel tokens;
        check each record's status.

        Args:
            channels: Channel tokens
            timeout: Deadline per query (uses default if not specified)

        Returns:
            One ReadingRecord per channel, in order
        """
        records = []
        for channel in channels:
            try:
                records.append(self._execute(channel, timeout, None)[0])
            except ValueError as e:
                record = ReadingRecord(
                    channel=channel,
                    value=None,
                    status=ReadingStatus.ERROR,
                    execution_time=0.0,
                    error_message=str(e)
                )
                self._record(record)
                records.append(record)
        return records

    def get_history(self) -> List[ReadingRecord]:
        """Get the records of the most recent queries, oldest first."""
        with self._history_lock:
            return list(self._history)

    def clear_history(self) -> None:
        """Remove all stored ReadingRecords."""
        with self._history_lock:
            self._history.clear()

    def _execute(self,
                 channel: str,
                 timeout: Optional[float],
                 cancel_event: Optional[threading.Event]
                 ) -> Tuple[ReadingRecord, Optional[QueryError]]:
        command = self.codec.encode_command(channel)
        timeout = timeout if timeout is not None else self.default_timeout

        with self.gate:
            start_time = time.monotonic()
            try:
                value, raw_line = self._exchange(channel, command, timeout, cancel_event)
            except QueryError as e:
                record = ReadingRecord(
                    channel=channel,
                    value=None,
                    status=ReadingStatus.TIMEOUT if isinstance(e, ReadTimeoutError)
                    else ReadingStatus.ERROR,
                    execution_time=time.monotonic() - start_time,
                    raw_line=self._received_text(e),
                    error_message=str(e)
                )
                self._record(record)
                return record, e

            absent = (value == ABSENT_SENTINEL
                      and self.codec.channel_kind(channel) is ChannelKind.I2C)
            record = ReadingRecord(
                channel=channel,
                value=value,
                status=ReadingStatus.ABSENT if absent else ReadingStatus.SUCCESS,
                execution_time=time.monotonic() - start_time,
                raw_line=raw_line
            )
            self._record(record)
            return record, None

    def _exchange(self,
                  channel: str,
                  command: bytes,
                  timeout: float,
                  cancel_event: Optional[threading.Event]) -> Tuple[int, str]:
        """Write the command and read one complete line. Caller holds the gate."""
        link = self.connection.link
        self.transport.clear_buffer()
        self.transport.discard_input(link)

        if self.logger:
            self.logger.log_command(port=self.connection.port_name, channel=channel)

        self.transport.write_raw(link, command, channel)

        deadline = time.monotonic() + timeout
        while True:
            buffer = self.transport.read_available(link)
            if self.codec.is_line_complete(buffer):
                break

            if cancel_event is not None and cancel_event.is_set():
                raise QueryCancelledError("Query cancelled while waiting for reply", channel)
            if time.monotonic() >= deadline:
                raise ReadTimeoutError(
                    f"No complete reply within {timeout:.3f}s", channel, timeout, buffer
                )

            if cancel_event is not None:
                cancel_event.wait(self.poll_interval)
            elif self.poll_interval > 0:
                time.sleep(self.poll_interval)

        raw_line = buffer.decode("ascii", errors="replace")
        return self.codec.decode(channel, buffer), raw_line

    @staticmethod
    def _received_text(error: QueryError) -> Optional[str]:
        if isinstance(error, ReadTimeoutError):
            return error.partial.decode("ascii", errors="replace") if error.partial else None
        return getattr(error, "raw_line", None)

    def _record(self, record: ReadingRecord) -> None:
        with self._history_lock:
            self._history.append(record)

        if self.logger:
            self.logger.log_reading(
                port=self.connection.port_name,
                channel=record.channel,
                value=record.value,
                status=record.status.name,
                execution_time=record.execution_time,
                reply=record.raw_line,
                error=record.error_message
            )

    def __repr__(self) -> str:
        return (f"QueryCoordinator(port={self.connection.port_name!r}, "
                f"timeout={self.default_timeout}s, "
                f"history={len(self._history)} readings)")
