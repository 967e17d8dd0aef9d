"""Unit tests for the SensorShell facade."""

import threading
import time

import pytest
import serial
from unittest.mock import Mock, patch

from sensor_shell.core.sensor_shell import SensorShell
from sensor_shell.core.port_catalog import PortDescriptor
from sensor_shell.core.reading import ReadingStatus
from sensor_shell.core.exceptions import (
    NoDeviceFoundError,
    PortAlreadyOpenError,
    PortOpenFailedError,
    WriteFailedError
)
from sensor_shell.config.config_models import Config, DeviceConfig, QueryConfig


SHELL_PORT = PortDescriptor("/dev/ttyACM0", 0x2341, 0x0043, "Arduino Uno")
OTHER_PORT = PortDescriptor("/dev/ttyUSB0", 0x0403, 0x6001, "FT232R")


def catalog_of(*ports):
    catalog = Mock()
    catalog.scan.return_value = list(ports)
    return catalog


class TestDetectAndOpen:
    """Test SensorShell.detect_and_open()."""

    def test_opens_matching_port(self, fake_link):
        shell = SensorShell(catalog=catalog_of(OTHER_PORT, SHELL_PORT))

        with patch('serial.Serial', return_value=fake_link) as mock_serial_class:
            descriptor = shell.detect_and_open()

        assert descriptor == SHELL_PORT
        assert mock_serial_class.call_args.kwargs["port"] == "/dev/ttyACM0"
        assert mock_serial_class.call_args.kwargs["baudrate"] == 9600
        assert shell.is_connected() is True
        assert shell.port_name == "/dev/ttyACM0"

    def test_no_device(self):
        shell = SensorShell(catalog=catalog_of(OTHER_PORT))

        with patch('serial.Serial') as mock_serial_class:
            with pytest.raises(NoDeviceFoundError) as exc_info:
                shell.detect_and_open()

        assert exc_info.value.ports_scanned == 1
        mock_serial_class.assert_not_called()
        assert shell.is_connected() is False

    def test_vendor_id_from_config(self, fake_link):
        config = Config(device=DeviceConfig(vendor_id=0x0403))
        shell = SensorShell(config=config, catalog=catalog_of(SHELL_PORT, OTHER_PORT))

        with patch('serial.Serial', return_value=fake_link):
            assert shell.detect_and_open() == OTHER_PORT

    def test_open_failure_propagates(self):
        shell = SensorShell(catalog=catalog_of(SHELL_PORT))

        with patch('serial.Serial', side_effect=serial.SerialException("could not open port")):
            with pytest.raises(PortOpenFailedError):
                shell.detect_and_open()

    def test_open_twice(self, fake_link):
        shell = SensorShell(catalog=catalog_of(SHELL_PORT))

        with patch('serial.Serial', return_value=fake_link):
            shell.detect_and_open()
            with pytest.raises(PortAlreadyOpenError):
                shell.detect_and_open()


class TestWaitForDevice:
    """Test SensorShell.wait_for_device()."""

    def test_device_appears(self, fake_link):
        catalog = Mock()
        catalog.scan.side_effect = [[], [OTHER_PORT], [SHELL_PORT]]
        shell = SensorShell(catalog=catalog)

        with patch('serial.Serial', return_value=fake_link):
            assert shell.wait_for_device(timeout=5, poll_interval=0.001) == SHELL_PORT

        assert catalog.scan.call_count == 3

    def test_deadline(self):
        shell = SensorShell(catalog=catalog_of())

        start = time.monotonic()
        with pytest.raises(NoDeviceFoundError):
            shell.wait_for_device(timeout=0.05, poll_interval=0.01)

        assert time.monotonic() - start < 1.0


class TestQueries:
    """Test querying through the facade."""

    def test_query_sensor(self, fake_link):
        shell = SensorShell(catalog=catalog_of(SHELL_PORT))
        with patch('serial.Serial', return_value=fake_link):
            shell.detect_and_open()

        assert shell.query_sensor("A3") == 3
        assert shell.get_history()[-1].status == ReadingStatus.SUCCESS

    def test_query_without_open(self):
        shell = SensorShell(catalog=catalog_of())

        with pytest.raises(WriteFailedError):
            shell.query_sensor("A0")

    def test_query_after_close(self, fake_link):
        shell = SensorShell(catalog=catalog_of(SHELL_PORT))
        with patch('serial.Serial', return_value=fake_link):
            shell.detect_and_open()
        shell.close()

        with pytest.raises(WriteFailedError):
            shell.query_sensor("A0")

    def test_query_batch(self, fake_link):
        shell = SensorShell(catalog=catalog_of(SHELL_PORT))
        with patch('serial.Serial', return_value=fake_link):
            shell.detect_and_open()

        records = shell.query_batch(["A1", "A2"])

        assert [r.value for r in records] == [1, 2]

    def test_query_timing_from_config(self):
        config = Config(query=QueryConfig(timeout=0.5, poll_interval=0.01, history_size=7))
        shell = SensorShell(config=config, catalog=catalog_of())

        assert shell.coordinator.default_timeout == 0.5
        assert shell.coordinator.poll_interval == 0.01

    def test_close_waits_for_inflight_query(self, link_factory):
        """close() takes the same gate as queries."""
        release = threading.Event()

        def slow_responder(command):
            release.wait(2)
            return b"VALUE=1\r\n"

        link = link_factory(responder=slow_responder)
        shell = SensorShell(config=Config(query=QueryConfig(timeout=5.0, poll_interval=0.001)),
                            catalog=catalog_of(SHELL_PORT))
        with patch('serial.Serial', return_value=link):
            shell.detect_and_open()

        results = []
        query_thread = threading.Thread(target=lambda: results.append(shell.query_sensor("A1")))
        query_thread.start()
        time.sleep(0.05)
        close_thread = threading.Thread(target=shell.close)
        close_thread.start()
        time.sleep(0.05)

        assert link.is_open is True
        release.set()
        query_thread.join(timeout=5)
        close_thread.join(timeout=5)

        assert results == [1]
        assert link.is_open is False


class TestLifecycle:
    """Test close(), context manager and helpers."""

    def test_close_without_open(self):
        shell = SensorShell(catalog=catalog_of())

        shell.close()
        shell.close()

    def test_context_manager(self, fake_link):
        with patch('serial.Serial', return_value=fake_link):
            with SensorShell(catalog=catalog_of(SHELL_PORT)) as shell:
                assert shell.is_connected() is True

        assert fake_link.is_open is False

    def test_list_and_matching_ports(self):
        shell = SensorShell(catalog=catalog_of(OTHER_PORT, SHELL_PORT))

        assert shell.list_ports() == [OTHER_PORT, SHELL_PORT]
        assert shell.matching_ports() == [SHELL_PORT]

    def test_repr(self):
        shell = SensorShell(catalog=catalog_of())

        assert repr(shell) == "SensorShell(vendor_id=0x2341, closed)"

    def test_shared_logger(self, fake_link):
        mock_logger = Mock()
        shell = SensorShell(logger=mock_logger, catalog=catalog_of(SHELL_PORT))

        with patch('serial.Serial', return_value=fake_link):
            shell.detect_and_open()
        shell.query_sensor("A0")
        shell.close()

        events = [c.kwargs["event"] for c in mock_logger.log_port_event.call_args_list]
        assert events == ["Device detected", "Port opened", "Port closed"]
        mock_logger.log_reading.assert_called_once()
