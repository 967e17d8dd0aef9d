"""Communication logger for sensor shell traffic.

Every core component accepts an optional CommunicationLogger. Entries go to
up to three sinks: a rotating file, stderr, and a bounded in-memory ring
that a UI can poll with get_entries().
"""

from datetime import datetime
from collections import deque
from threading import Lock
from typing import Optional, List, Dict, Any, Deque, Union
import sys

from sensor_shell.logging.log_models import LogEntry
from sensor_shell.logging.file_handler import FileHandler
from sensor_shell.config.config_models import LogLevel


_LEVEL_ORDER = [level.value for level in LogLevel]

_READING_LEVELS = {
    "SUCCESS": "INFO",
    "ABSENT": "INFO",
    "TIMEOUT": "WARNING",
}


class CommunicationLogger:
    """Level-filtered fan-out of LogEntry records.

    Attributes:
        log_level: Minimum level that is recorded, as a string
        enable_file: File sink requested
        enable_console: Entries are printed to stderr
        log_file_path: File sink path, if any

    Example:
        >>> with CommunicationLogger(log_level=LogLevel.DEBUG, enable_console=True) as logger:
        ...     logger.log_command(port="/dev/ttyACM0", channel="A0")
        ...     logger.log_reading(port="/dev/ttyACM0", channel="A0", value=512,
        ...                        status="SUCCESS", execution_time=0.02)
    """

    def __init__(
        self,
        log_level: Union[LogLevel, str] = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: float = 10,
        backup_count: int = 5,
        buffer_size: int = 1000
    ):
        """Set up the sinks.

        Args:
            log_level: Minimum level recorded (default: INFO)
            enable_file: Write entries to ``log_file_path``
            enable_console: Print entries to stderr
            log_file_path: File sink path; mandatory with enable_file
            max_file_size_mb: Rotation threshold of the file sink
            backup_count: Rotated files kept by the file sink
            buffer_size: Capacity of the in-memory ring

        Raises:
            ValueError: enable_file without log_file_path
        """
        if enable_file and not log_file_path:
            raise ValueError("log_file_path required when enable_file=True")

        self.log_level = self._level_name(log_level)
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.log_file_path = log_file_path

        self._lock = Lock()
        self._buffer: Deque[LogEntry] = deque(maxlen=buffer_size)
        self._file_handler: Optional[FileHandler] = None

        if enable_file:
            try:
                self._file_handler = FileHandler(log_file_path, max_file_size_mb, backup_count)
            except OSError as e:
                print(f"WARNING: File logging disabled, {log_file_path}: {e}", file=sys.stderr)

    @staticmethod
    def _level_name(level: Union[LogLevel, str]) -> str:
        return level.value if isinstance(level, LogLevel) else level

    def _enabled_for(self, level: str) -> bool:
        rank = _LEVEL_ORDER.index(level) if level in _LEVEL_ORDER else 0
        threshold = _LEVEL_ORDER.index(self.log_level) if self.log_level in _LEVEL_ORDER else 0
        return rank >= threshold

    def log(self, entry: LogEntry) -> None:
        """Record an entry in every sink, unless its level is filtered out."""
        if not self._enabled_for(entry.level):
            return

        with self._lock:
            self._buffer.append(entry)
            if self._file_handler is not None:
                self._file_handler.write(entry)
            if self.enable_console:
                try:
                    print(entry.to_string(), file=sys.stderr)
                except (OSError, ValueError):
                    # stderr closed or detached
                    pass

    def _emit(self, level: str, source: str, message: str, **fields: Any) -> None:
        self.log(LogEntry(timestamp=datetime.now(), level=level, source=source,
                          message=message, **fields))

    def log_command(self, port: Optional[str], channel: str) -> None:
        """Record a channel command about to be written (DEBUG)."""
        self._emit("DEBUG", "QueryCoordinator", "Sending command", port=port, channel=channel)

    def log_reading(
        self,
        port: Optional[str],
        channel: str,
        value: Optional[int],
        status: str,
        execution_time: float,
        reply: Optional[str] = None,
        error: Optional[str] = None
    ) -> None:
        """Record the outcome of one query.

        SUCCESS and ABSENT are logged at INFO, TIMEOUT at WARNING and every
        other status at ERROR.
        """
        self._emit(
            _READING_LEVELS.get(status, "ERROR"),
            "QueryCoordinator",
            "Reading decoded" if error is None else "Query failed",
            port=port,
            channel=channel,
            reply=reply,
            value=value,
            status=status,
            execution_time=execution_time,
            error=error
        )

    def log_port_event(
        self,
        event: str,
        port: Optional[str],
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO",
        source: str = "ConnectionManager"
    ) -> None:
        """Record a detection or link event such as "Port opened".

        Args:
            event: Short event description, used as the message
            port: Port concerned, if any
            details: Extra structured data
            level: Entry level (default: INFO)
            source: Emitting component (default: ConnectionManager)
        """
        self._emit(level, source, event, port=port, details=details)

    def log_error(
        self,
        source: str,
        error: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record a failure raised inside ``source`` (ERROR)."""
        self._emit("ERROR", source, "Error occurred", error=error, details=details)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Change the minimum recorded level."""
        self.log_level = self._level_name(level)

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Entries held in memory, oldest first; the newest ``limit`` if given."""
        with self._lock:
            entries = list(self._buffer)
        return entries[-limit:] if limit else entries

    def clear_buffer(self) -> None:
        """Empty the in-memory ring; files are not touched."""
        with self._lock:
            self._buffer.clear()

    def flush(self) -> None:
        if self._file_handler is not None:
            self._file_handler.flush()

    def close(self) -> None:
        """Close the file sink. The logger keeps buffering afterwards."""
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
