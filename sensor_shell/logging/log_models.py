"""Structured log records for sensor shell traffic."""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Any, Optional
import json


# (field, label, format) in the order they are appended to a log line.
_LINE_SUFFIXES = (
    ('port', 'PORT', '{}'),
    ('channel', 'CH', '{}'),
    ('value', 'VALUE', '{}'),
    ('status', 'STATUS', '{}'),
    ('execution_time', 'TIME', '{:.3f}s'),
    ('reply', 'REPLY', '{!r}'),
    ('error', 'ERROR', '{}'),
)

# Zero is a real reading and an empty reply is still a reply.
_KEEP_FALSY = {'value', 'execution_time', 'reply'}


@dataclass(frozen=True)
class LogEntry:
    """One logged event: a command, a reading, a port event or an error.

    Only ``timestamp``, ``level``, ``source`` and ``message`` are required.
    The optional fields carry whatever the emitting component knows, for
    instance the raw ``reply`` line and the decoded ``value`` of a query.

    Example:
        >>> LogEntry(datetime.now(), "INFO", "QueryCoordinator", "Reading decoded",
        ...          port="/dev/ttyACM0", channel="A0", value=123).to_string()
        '2026-01-12 10:30:15.234 | INFO    | QueryCoordinator  | Reading decoded | PORT: ...'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    channel: Optional[str] = None
    reply: Optional[str] = None
    value: Optional[int] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Every field by name; the timestamp in ISO 8601."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Single line ``time | level | source | message`` plus set fields."""
        parts = [
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            f"{self.level:7}",
            f"{self.source:17}",
            self.message,
        ]
        for name, label, fmt in _LINE_SUFFIXES:
            field_value = getattr(self, name)
            present = field_value is not None if name in _KEEP_FALSY else bool(field_value)
            if present:
                parts.append(f"{label}: " + fmt.format(field_value))
        return " | ".join(parts)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Inverse of ``to_dict``. Missing optional fields become None.

        The timestamp may be an ISO 8601 string or already a datetime.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if isinstance(kwargs.get('timestamp'), str):
            kwargs['timestamp'] = datetime.fromisoformat(kwargs['timestamp'])
        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
