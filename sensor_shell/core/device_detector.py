"""Target device selection among enumerated serial ports."""

from typing import Iterable, List, Optional, TYPE_CHECKING

from sensor_shell.config.config_models import ARDUINO_VENDOR_ID
from sensor_shell.core.port_catalog import PortDescriptor

if TYPE_CHECKING:
    from sensor_shell.logging.communication_logger import CommunicationLogger


class DeviceDetector:
    """Selects the port hosting the sensor shell by USB vendor id.

    The first descriptor carrying the signature wins. Several matching
    boards are not told apart: plug in only one shell at a time.

    Example:
        >>> detector = DeviceDetector()
        >>> descriptor = detector.detect(PortCatalog().scan())
        >>> if descriptor is None:
        ...     print("No shell attached")
    """

    def __init__(self,
                 vendor_id: int = ARDUINO_VENDOR_ID,
                 logger: Optional['CommunicationLogger'] = None):
        """Initialize detector.

        Args:
            vendor_id: USB vendor id identifying the shell hardware (default 0x2341)
            logger: Optional CommunicationLogger for detection events
        """
        self.vendor_id = vendor_id
        self.logger = logger

    def matches(self, descriptor: PortDescriptor) -> bool:
        """Check whether a descriptor carries the device signature."""
        return descriptor.vendor_id is not None and descriptor.vendor_id == self.vendor_id

    def detect(self, descriptors: Iterable[PortDescriptor]) -> Optional[PortDescriptor]:
        """Return the first descriptor whose vendor id matches, or None.

        Absence is a normal outcome and is logged as a warning, not raised.

        Args:
            descriptors: Port snapshot, typically from PortCatalog.scan()

        Returns:
            Matching PortDescriptor, or None if no port matches
        """
        scanned = 0
        for descriptor in descriptors:
            scanned += 1
            if self.matches(descriptor):
                if self.logger:
                    self.logger.log_port_event(
                        event="Device detected",
                        port=descriptor.name,
                        details={"vendor_id": f"0x{self.vendor_id:04X}",
                                 "description": descriptor.description},
                        source="DeviceDetector"
                    )
                return descriptor

        if self.logger:
            self.logger.log_port_event(
                event="No device detected",
                port=None,
                details={"vendor_id": f"0x{self.vendor_id:04X}", "ports_scanned": scanned},
                level="WARNING",
                source="DeviceDetector"
            )
        return None

    def find_all(self, descriptors: Iterable[PortDescriptor]) -> List[PortDescriptor]:
        """Return every descriptor carrying the signature, in enumeration order."""
        return [descriptor for descriptor in descriptors if self.matches(descriptor)]

    def __repr__(self) -> str:
        return f"DeviceDetector(vendor_id=0x{self.vendor_id:04X})"
