"""Shared fixtures: an in-memory stand-in for the shell's serial link."""

from typing import Callable, List, Optional
import threading

import pytest


def echo_responder(command: str) -> bytes:
    """Answer every command with a fixed analog reading derived from its digits."""
    digits = "".join(ch for ch in command if ch.isdigit()) or "0"
    return f"VALUE={int(digits)}\r\n".encode("ascii")


class FakeShellLink:
    """Behaves like an open serial.Serial wired to the sensor shell firmware.

    Each write is answered by ``responder``; the reply is handed out at most
    ``chunk_size`` bytes per ``in_waiting`` poll so that readers see it
    arrive in fragments. Overlapping commands are recorded in ``overlaps``.
    """

    def __init__(self,
                 responder: Callable[[str], bytes] = echo_responder,
                 chunk_size: int = 4,
                 port: str = "/dev/ttyACM0"):
        self.responder = responder
        self.chunk_size = chunk_size
        self.port = port
        self.is_open = True
        self.writes: List[bytes] = []
        self.overlaps: List[str] = []
        self.reset_count = 0
        self._pending = bytearray()
        self._outstanding: Optional[str] = None
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        command = bytes(data).decode("ascii")
        with self._lock:
            if self._outstanding is not None:
                self.overlaps.append(f"{command} while {self._outstanding}")
            self.writes.append(bytes(data))
            reply = self.responder(command)
            if reply:
                self._outstanding = command
                self._pending += reply
        return len(data)

    def flush(self) -> None:
        pass

    def reset_input_buffer(self) -> None:
        with self._lock:
            self.reset_count += 1
            self._pending.clear()
            self._outstanding = None

    def inject(self, data: bytes) -> None:
        """Queue unsolicited bytes, as if the shell sent them late."""
        with self._lock:
            self._pending += data

    @property
    def in_waiting(self) -> int:
        with self._lock:
            return min(len(self._pending), self.chunk_size)

    def read(self, size: int = 1) -> bytes:
        with self._lock:
            data = bytes(self._pending[:size])
            del self._pending[:size]
            if not self._pending:
                self._outstanding = None
            return data

    def close(self) -> None:
        self.is_open = False


@pytest.fixture
def fake_link():
    """Open fake link answering with echo_responder."""
    return FakeShellLink()


@pytest.fixture
def link_factory():
    """Build fake links with a custom responder or chunk size."""
    return FakeShellLink
