"""Sensor reading record model.

This module defines the immutable ReadingRecord dataclass and ReadingStatus
enum, the structured trace of one query kept in the coordinator history.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time


class ReadingStatus(Enum):
    """Outcome of a sensor query.

    - SUCCESS: Reply decoded into a reading
    - ABSENT: I2C channel answered with the no-device sentinel
    - ERROR: Write failed, reply malformed, or query cancelled
    - TIMEOUT: No terminated line before the deadline
    """
    SUCCESS = "success"
    ABSENT = "absent"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ReadingRecord:
    """Immutable record of one query.

    Attributes:
        channel: Channel token queried (e.g., "A0", "i72")
        value: Decoded reading, -1 for an absent I2C device, None on failure
        status: Query outcome
        execution_time: Seconds from command write to decode
        raw_line: Reply line as received; for a timeout, the bytes that did arrive
        error_message: Human-readable error description (if applicable)
        timestamp: Unix timestamp when the record was created
    """

    channel: str
    value: Optional[int]
    status: ReadingStatus
    execution_time: float
    raw_line: Optional[str] = None
    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def is_successful(self) -> bool:
        """True if the query produced a value (sentinel included)."""
        return self.status in (ReadingStatus.SUCCESS, ReadingStatus.ABSENT)

    def __str__(self) -> str:
        if self.status == ReadingStatus.SUCCESS:
            return f"[{self.status.value}] {self.channel} = {self.value} ({self.execution_time:.3f}s)"
        elif self.status == ReadingStatus.ABSENT:
            return f"[{self.status.value}] {self.channel}: no device ({self.execution_time:.3f}s)"
        return f"[{self.status.value}] {self.channel}: {self.error_message} ({self.execution_time:.3f}s)"
