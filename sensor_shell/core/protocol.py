"""Sensor shell wire protocol.

Outbound, a command is the bare channel token (``"A0"``, ``"i72"``); no
framing is added. Inbound, the shell answers with exactly one line::

    VALUE=<payload>\\r\\n

The line is complete once the buffer ends with a line feed; there is no
length prefix. The payload grammar depends on the channel:

- analog channels (any token not starting with ``i``): a base-10 integer;
- I2C channels (token starts with ``i``): either ``-`` when no device
  answered at that address, or ``high,low`` with two base-10 bytes, read
  as ``high * 256 + low``.
"""

from enum import Enum
import re
from typing import Union

from sensor_shell.core.exceptions import ParseError


PREAMBLE = "VALUE="
LINE_SUFFIX = "\r\n"
LINE_TERMINATOR = b"\n"
I2C_PREFIX = "i"
ABSENT_MARKER = "-"
ABSENT_SENTINEL = -1

_ANALOG_PAYLOAD = re.compile(r"[0-9]+")
_I2C_PAYLOAD = re.compile(r"(?P<high>[0-9]{1,3}),(?P<low>[0-9]{1,3})")


class ChannelKind(Enum):
    """Decode path selected by the first character of a channel token."""
    ANALOG = "analog"
    I2C = "i2c"


class ProtocolCodec:
    """Builds commands and decodes reply lines.

    Example:
        >>> codec = ProtocolCodec()
        >>> codec.encode_command("A0")
        b'A0'
        >>> codec.decode("A0", "VALUE=123\\r\\n")
        123
        >>> codec.decode("i1", "VALUE=3,232\\r\\n")
        1000
        >>> codec.decode("i1", "VALUE=-\\r\\n")
        -1
    """

    def __init__(self, preamble: str = PREAMBLE):
        """Initialize codec.

        Args:
            preamble: Literal that opens every reply line (default "VALUE=")
        """
        self.preamble = preamble
        self._line = re.compile(re.escape(preamble) + r"(?P<payload>[^\r\n]*)" + re.escape(LINE_SUFFIX))

    @staticmethod
    def encode_command(channel: str) -> bytes:
        """Return the wire bytes for a channel query.

        Raises:
            ValueError: Channel is empty or not ASCII
        """
        if not channel:
            raise ValueError("Channel must be a non-empty string")
        try:
            return channel.encode("ascii")
        except UnicodeEncodeError:
            raise ValueError(f"Channel must be ASCII, got {channel!r}") from None

    @staticmethod
    def channel_kind(channel: str) -> ChannelKind:
        """Select the decode path for a channel token."""
        return ChannelKind.I2C if channel.startswith(I2C_PREFIX) else ChannelKind.ANALOG

    @staticmethod
    def is_line_complete(buffer: Union[bytes, bytearray, str]) -> bool:
        """True iff the accumulated buffer ends with the line feed terminator."""
        if isinstance(buffer, str):
            return buffer.endswith("\n")
        return bytes(buffer).endswith(LINE_TERMINATOR)

    def extract_payload(self, channel: str, raw_line: Union[bytes, str]) -> str:
        """Strip preamble and suffix from a reply line.

        Raises:
            ParseError: Line is not ASCII or does not follow the line grammar
        """
        if isinstance(raw_line, (bytes, bytearray)):
            try:
                raw_line = bytes(raw_line).decode("ascii")
            except UnicodeDecodeError:
                raise ParseError("Reply is not ASCII text", channel,
                                 bytes(raw_line).decode("ascii", errors="replace")) from None

        match = self._line.fullmatch(raw_line)
        if match is None:
            raise ParseError(
                f"Reply does not match '{self.preamble}<payload>\\r\\n'", channel, raw_line
            )
        return match.group("payload")

    def decode(self, channel: str, raw_line: Union[bytes, str]) -> int:
        """Decode one reply line into a sensor reading.

        Args:
            channel: Channel token that was queried
            raw_line: Complete reply line, terminator included

        Returns:
            The reading; ABSENT_SENTINEL (-1) when no I2C device answered

        Raises:
            ParseError: Payload does not fit the channel's grammar
        """
        payload = self.extract_payload(channel, raw_line)
        line_text = raw_line if isinstance(raw_line, str) else bytes(raw_line).decode("ascii")

        if self.channel_kind(channel) is ChannelKind.ANALOG:
            if not _ANALOG_PAYLOAD.fullmatch(payload):
                raise ParseError("Analog payload is not a decimal integer", channel, line_text)
            return int(payload)

        # Only the first character is significant: "-", "-1" and "--" all mean absent.
        if payload.startswith(ABSENT_MARKER):
            return ABSENT_SENTINEL

        match = _I2C_PAYLOAD.fullmatch(payload)
        if match is None:
            raise ParseError("I2C payload is neither '-' nor 'high,low'", channel, line_text)

        high = int(match.group("high"))
        low = int(match.group("low"))
        if high > 0xFF or low > 0xFF:
            raise ParseError("I2C byte out of range 0-255", channel, line_text)

        return high * 256 + low
