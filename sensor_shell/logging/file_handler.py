"""Rotating file output for communication logs."""

from pathlib import Path
from threading import Lock
from typing import Optional, TextIO
import os
import sys

from sensor_shell.logging.log_models import LogEntry


class FileHandler:
    """Appends formatted LogEntry lines to a file, rotating by size.

    Rotation happens before a write once the file has reached
    ``max_size_mb``: ``comm.log`` becomes ``comm.log.1``, ``comm.log.1``
    becomes ``comm.log.2`` and so on; the backup past ``backup_count`` is
    dropped. With ``backup_count=0`` the full file is simply truncated.

    Example:
        >>> with FileHandler("~/.sensor-shell/logs/comm.log", max_size_mb=1) as handler:
        ...     handler.write(entry)
        True
    """

    def __init__(self, log_file_path: str, max_size_mb: float = 10, backup_count: int = 5):
        """Open (and create if needed) the log file in append mode.

        Args:
            log_file_path: Target file; ``~`` is expanded
            max_size_mb: Size that triggers rotation, in MiB (default: 10)
            backup_count: Rotated files kept next to the live one (default: 5)

        Raises:
            OSError: The parent directory cannot be created
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.backup_count = backup_count
        self._lock = Lock()
        self._stream: Optional[TextIO] = None
        self._size = 0
        self._closed = False

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._reopen()

    def _backup_path(self, index: int) -> Path:
        return self.log_file_path.with_name(f"{self.log_file_path.name}.{index}")

    def _reopen(self) -> None:
        try:
            self._stream = open(self.log_file_path, mode='a', encoding='utf-8')
            self._size = self._stream.tell()
        except OSError as e:
            print(f"ERROR: Cannot open log file {self.log_file_path}: {e}", file=sys.stderr)
            self._stream = None
            self._size = 0

    def _rotate(self) -> None:
        # Caller holds self._lock.
        self._stream.close()
        self._stream = None
        try:
            if self.backup_count > 0:
                self._backup_path(self.backup_count).unlink(missing_ok=True)
                for index in range(self.backup_count - 1, 0, -1):
                    backup = self._backup_path(index)
                    if backup.exists():
                        backup.replace(self._backup_path(index + 1))
                self.log_file_path.replace(self._backup_path(1))
            else:
                self.log_file_path.unlink(missing_ok=True)
        except OSError as e:
            print(f"WARNING: Log rotation of {self.log_file_path} failed: {e}", file=sys.stderr)
        self._reopen()

    def write(self, entry: LogEntry) -> bool:
        """Write one entry as a line.

        Returns:
            False if the handler is closed or the write failed
        """
        line = entry.to_string() + '\n'
        with self._lock:
            if self._closed or self._stream is None:
                return False
            try:
                if self._size >= self.max_size_bytes:
                    self._rotate()
                    if self._stream is None:
                        return False
                self._stream.write(line)
                self._stream.flush()
            except OSError as e:
                print(f"ERROR: Log write to {self.log_file_path} failed: {e}", file=sys.stderr)
                return False
            self._size += len(line.encode('utf-8'))
            return True

    def flush(self) -> None:
        """Push written lines to disk."""
        with self._lock:
            if self._stream is None:
                return
            try:
                self._stream.flush()
                os.fsync(self._stream.fileno())
            except OSError as e:
                print(f"ERROR: Log flush of {self.log_file_path} failed: {e}", file=sys.stderr)

    def close(self) -> None:
        """Close the file; later calls do nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            stream, self._stream = self._stream, None
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    print(f"ERROR: Log close of {self.log_file_path} failed: {e}", file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
