"""Public entry point for presentation layers.

SensorShell wires detection, connection and querying together and exposes
the three operations a UI or CLI needs: detect_and_open(), close() and
query_sensor(). Connection changes and queries share one admission gate,
so a close never interleaves with an in-flight query.
"""

from typing import List, Optional, TYPE_CHECKING
import threading
import time

from sensor_shell.config.config_models import Config
from sensor_shell.core.connection_manager import ConnectionManager
from sensor_shell.core.device_detector import DeviceDetector
from sensor_shell.core.exceptions import NoDeviceFoundError
from sensor_shell.core.port_catalog import PortCatalog, PortDescriptor
from sensor_shell.core.query_coordinator import QueryCoordinator
from sensor_shell.core.reading import ReadingRecord

if TYPE_CHECKING:
    from sensor_shell.logging.communication_logger import CommunicationLogger


class SensorShell:
    """Host-side client for the sensor shell.

    Example:
        >>> with SensorShell() as shell:
        ...     print(shell.query_sensor("A0"))
        ...     print(shell.query_sensor("i72"))
        512
        -1
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 logger: Optional['CommunicationLogger'] = None,
                 catalog: Optional[PortCatalog] = None):
        """Initialize client.

        Args:
            config: Application configuration (default: built-in defaults)
            logger: Optional CommunicationLogger shared by all components
            catalog: Port enumeration source (default: pyserial list_ports)
        """
        self.config = config if config is not None else Config()
        self.logger = logger
        self.catalog = catalog if catalog is not None else PortCatalog()
        self.detector = DeviceDetector(vendor_id=self.config.device.vendor_id, logger=logger)
        self.connection = ConnectionManager(logger=logger)
        self._gate = threading.Lock()
        self.coordinator = QueryCoordinator(
            self.connection,
            timeout=self.config.query.timeout,
            poll_interval=self.config.query.poll_interval,
            history_size=self.config.query.history_size,
            gate=self._gate,
            logger=logger
        )

    @property
    def port_name(self) -> Optional[str]:
        """Port of the open link, or None."""
        return self.connection.port_name

    def is_connected(self) -> bool:
        """True if a link to the shell is open."""
        return self.connection.is_open

    def list_ports(self) -> List[PortDescriptor]:
        """Current snapshot of all visible serial ports."""
        return self.catalog.scan()

    def matching_ports(self) -> List[PortDescriptor]:
        """Visible ports carrying the device signature, in enumeration order."""
        return self.detector.find_all(self.catalog.scan())

    def detect_and_open(self) -> PortDescriptor:
        """Find the shell among attached serial devices and open a link to it.

        Returns:
            Descriptor of the opened port

        Raises:
            NoDeviceFoundError: No port carries the vendor id
            PortAlreadyOpenError: A link is already open
            PortOpenFailedError: The port could not be opened
        """
        descriptors = self.catalog.scan()
        descriptor = self.detector.detect(descriptors)
        if descriptor is None:
            raise NoDeviceFoundError(self.detector.vendor_id, len(descriptors))

        with self._gate:
            self.connection.open(descriptor)
        return descriptor

    def wait_for_device(self, timeout: float, poll_interval: float = 1.0) -> PortDescriptor:
        """Poll detect_and_open() until the shell appears or the deadline passes.

        Args:
            timeout: Seconds to keep polling
            poll_interval: Seconds between detection attempts (default 1.0)

        Returns:
            Descriptor of the opened port

        Raises:
            NoDeviceFoundError: Still absent at the deadline
            PortOpenFailedError: Detected but could not be opened
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                return self.detect_and_open()
            except NoDeviceFoundError:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise
                time.sleep(min(poll_interval, remaining))

    def close(self) -> None:
        """Close the link; does nothing if no link is open.

        Raises:
            PortCloseFailedError: The link still reports itself open
        """
        with self._gate:
            self.connection.close()

    def query_sensor(self,
                     channel: str,
                     timeout: Optional[float] = None,
                     cancel_event: Optional[threading.Event] = None) -> int:
        """Query one channel; see QueryCoordinator.query()."""
        return self.coordinator.query(channel, timeout=timeout, cancel_event=cancel_event)

    def query_batch(self, channels: List[str], timeout: Optional[float] = None) -> List[ReadingRecord]:
        """Query several channels in sequence; see QueryCoordinator.query_batch()."""
        return self.coordinator.query_batch(channels, timeout=timeout)

    def get_history(self) -> List[ReadingRecord]:
        """Records of the most recent queries, oldest first."""
        return self.coordinator.get_history()

    def __enter__(self):
        self.detect_and_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = f"open on {self.port_name}" if self.is_connected() else "closed"
        return f"SensorShell(vendor_id=0x{self.detector.vendor_id:04X}, {status})"
