"""Serial port enumeration.

Wraps pyserial's port listing into immutable PortDescriptor snapshots.
"""

from dataclasses import dataclass
from typing import List, Optional

from serial.tools import list_ports


@dataclass(frozen=True)
class PortDescriptor:
    """Serial port information from discovery.

    Attributes:
        name: Port device path (e.g., '/dev/ttyACM0', 'COM3')
        vendor_id: USB vendor id, or None for ports without USB identity
        product_id: USB product id, or None
        description: Human-readable port description
        hwid: Hardware identifier string
        serial_number: USB serial number, or None
    """
    name: str
    vendor_id: Optional[int]
    product_id: Optional[int] = None
    description: str = "Unknown"
    hwid: str = "Unknown"
    serial_number: Optional[str] = None

    def __str__(self) -> str:
        if self.vendor_id is None:
            return f"{self.name} ({self.description})"
        product = f"{self.product_id:04X}" if self.product_id is not None else "????"
        return f"{self.name} ({self.description}, VID:PID={self.vendor_id:04X}:{product})"


class PortCatalog:
    """Snapshot enumeration of the serial ports currently visible to the OS.

    Order is whatever the platform enumeration returns and may change
    between scans.

    Example:
        >>> for port in PortCatalog().scan():
        ...     print(port)
        /dev/ttyACM0 (Arduino Mega 2560, VID:PID=2341:0042)
    """

    def scan(self) -> List[PortDescriptor]:
        """Enumerate available serial ports.

        Returns:
            List of PortDescriptor objects, one per visible port
        """
        return [
            PortDescriptor(
                name=port_info.device,
                vendor_id=port_info.vid,
                product_id=port_info.pid,
                description=port_info.description or "Unknown",
                hwid=port_info.hwid or "Unknown",
                serial_number=port_info.serial_number
            )
            for port_info in list_ports.comports()
        ]
