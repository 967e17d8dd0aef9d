"""Fixed serial line settings for the sensor shell."""

from dataclasses import dataclass
from typing import Any, Dict

import serial


@dataclass(frozen=True)
class LinkConfig:
    """Serial line settings shared by every link to the shell.

    The shell firmware runs at 9600 8N1 without flow control. These values
    are not user configuration: every opened link uses the same instance.

    Attributes:
        baud_rate: Line speed in baud
        parity: pyserial parity constant
        stop_bits: pyserial stop bits constant
        data_bits: pyserial byte size constant
        xonxoff: Software flow control
        rtscts: RTS/CTS hardware flow control
        dsrdtr: DSR/DTR hardware flow control
        write_timeout: Seconds a write may block before failing
    """
    baud_rate: int = 9600
    parity: str = serial.PARITY_NONE
    stop_bits: float = serial.STOPBITS_ONE
    data_bits: int = serial.EIGHTBITS
    xonxoff: bool = False
    rtscts: bool = False
    dsrdtr: bool = False
    write_timeout: float = 1.0

    def serial_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for serial.Serial.

        Reads use a zero timeout so that a read returns immediately with
        whatever bytes are already waiting.
        """
        return {
            "baudrate": self.baud_rate,
            "parity": self.parity,
            "stopbits": self.stop_bits,
            "bytesize": self.data_bits,
            "xonxoff": self.xonxoff,
            "rtscts": self.rtscts,
            "dsrdtr": self.dsrdtr,
            "timeout": 0,
            "write_timeout": self.write_timeout,
        }


SHELL_LINK_CONFIG = LinkConfig()
