"""Unit tests for LogEntry dataclass."""

import pytest
from datetime import datetime
import json

from sensor_shell.logging.log_models import LogEntry


class TestLogEntry:
    """Test suite for LogEntry dataclass."""

    def test_log_entry_creation(self):
        """Test basic LogEntry creation."""
        timestamp = datetime.now()
        entry = LogEntry(
            timestamp=timestamp,
            level="INFO",
            source="TestSource",
            message="Test message"
        )

        assert entry.timestamp == timestamp
        assert entry.level == "INFO"
        assert entry.details is None
        assert entry.port is None
        assert entry.channel is None
        assert entry.value is None

    def test_log_entry_immutable(self):
        entry = LogEntry(timestamp=datetime.now(), level="INFO", source="Test", message="Test")

        with pytest.raises(AttributeError):
            entry.level = "DEBUG"

    def test_to_dict(self):
        entry = LogEntry(
            timestamp=datetime(2026, 3, 2, 9, 0, 0),
            level="INFO",
            source="QueryCoordinator",
            message="Reading decoded",
            port="/dev/ttyACM0",
            channel="A0",
            reply="VALUE=512\r\n",
            value=512
        )

        result = entry.to_dict()

        assert result["timestamp"] == "2026-03-02T09:00:00"
        assert result["channel"] == "A0"
        assert result["reply"] == "VALUE=512\r\n"
        assert result["value"] == 512
        assert result["error"] is None

    def test_to_string_reading(self):
        """Test LogEntry.to_string() formatting of a decoded reading."""
        entry = LogEntry(
            timestamp=datetime(2026, 1, 12, 10, 30, 15, 123000),
            level="INFO",
            source="QueryCoordinator",
            message="Reading decoded",
            port="/dev/ttyACM0",
            channel="i72",
            reply="VALUE=3,232\r\n",
            value=1000,
            status="SUCCESS",
            execution_time=0.0213
        )

        result = entry.to_string()

        assert result.startswith("2026-01-12 10:30:15.123 | INFO    | QueryCoordinator  | Reading decoded")
        assert "PORT: /dev/ttyACM0" in result
        assert "CH: i72" in result
        assert "VALUE: 1000" in result
        assert "STATUS: SUCCESS" in result
        assert "TIME: 0.021s" in result
        assert "REPLY: 'VALUE=3,232\\r\\n'" in result

    def test_to_string_zero_and_absent_values(self):
        """Zero and the -1 sentinel are printed, not treated as missing."""
        zero = LogEntry(timestamp=datetime.now(), level="INFO", source="Q", message="m", value=0)
        absent = LogEntry(timestamp=datetime.now(), level="INFO", source="Q", message="m", value=-1)

        assert "VALUE: 0" in zero.to_string()
        assert "VALUE: -1" in absent.to_string()

    def test_to_string_error(self):
        entry = LogEntry(
            timestamp=datetime.now(),
            level="ERROR",
            source="ConnectionManager",
            message="Error occurred",
            error="Failed to open port"
        )

        assert entry.to_string().endswith("| ERROR: Failed to open port")

    def test_to_json(self):
        entry = LogEntry(
            timestamp=datetime.now(),
            level="WARNING",
            source="Transport",
            message="Read failed: link is not open",
            details={"attempt": 1}
        )

        parsed = json.loads(entry.to_json())

        assert parsed["level"] == "WARNING"
        assert parsed["source"] == "Transport"
        assert parsed["details"] == {"attempt": 1}

    def test_from_dict(self):
        data = {
            "timestamp": "2026-01-12T10:30:15.123000",
            "level": "WARNING",
            "source": "QueryCoordinator",
            "message": "Query failed",
            "port": "COM3",
            "channel": "A2",
            "status": "TIMEOUT",
            "execution_time": 2.0,
            "error": "No complete reply within 2.000s"
        }

        entry = LogEntry.from_dict(data)

        assert entry.timestamp == datetime(2026, 1, 12, 10, 30, 15, 123000)
        assert entry.channel == "A2"
        assert entry.status == "TIMEOUT"
        assert entry.execution_time == 2.0
        assert entry.reply is None

    def test_from_dict_accepts_datetime(self):
        timestamp = datetime.now()

        entry = LogEntry.from_dict({"timestamp": timestamp, "level": "INFO",
                                    "source": "S", "message": "m"})

        assert entry.timestamp == timestamp

    def test_from_json(self):
        original = LogEntry(
            timestamp=datetime(2026, 1, 12, 10, 30, 15),
            level="DEBUG",
            source="QueryCoordinator",
            message="Sending command",
            port="COM3",
            channel="A0"
        )

        assert LogEntry.from_json(original.to_json()) == original
