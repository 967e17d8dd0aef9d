"""Unit tests for ReadingRecord and ReadingStatus."""

import time

import pytest

from sensor_shell.core.reading import ReadingRecord, ReadingStatus


class TestReadingRecord:
    """Test ReadingRecord dataclass."""

    def test_success(self):
        record = ReadingRecord("A0", 512, ReadingStatus.SUCCESS, 0.012, raw_line="VALUE=512\r\n")

        assert record.is_successful() is True
        assert str(record) == "[success] A0 = 512 (0.012s)"

    def test_absent(self):
        record = ReadingRecord("i72", -1, ReadingStatus.ABSENT, 0.02)

        assert record.is_successful() is True
        assert str(record) == "[absent] i72: no device (0.020s)"

    @pytest.mark.parametrize("status", [ReadingStatus.ERROR, ReadingStatus.TIMEOUT])
    def test_failures(self, status):
        record = ReadingRecord("A0", None, status, 2.0, error_message="boom")

        assert record.is_successful() is False
        assert str(record) == f"[{status.value}] A0: boom (2.000s)"

    def test_timestamp_default(self):
        before = time.time()
        record = ReadingRecord("A0", 1, ReadingStatus.SUCCESS, 0.0)

        assert before <= record.timestamp <= time.time()

    def test_immutable(self):
        record = ReadingRecord("A0", 1, ReadingStatus.SUCCESS, 0.0)

        with pytest.raises(AttributeError):
            record.value = 2
