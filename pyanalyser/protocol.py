"""
Line protocol client for the analyser.

Sends command strings verbatim and assembles newline-terminated response
lines one byte at a time from a SerialTransport.

A line is at most ``max_line_length`` bytes including its ``\\n``.
Running out of room before the terminator is a LineOverflowError: the
stream has lost sync and the caller must give up. A byte timeout before
the terminator is a ReadTimeoutError and the partial line is discarded.
"""

import logging
from typing import Optional, Union

from .commands import MAX_LINE_LENGTH
from .exceptions import LineOverflowError, ReadTimeoutError
from .transport import SerialTransport

logger = logging.getLogger(__name__)

NEWLINE = 0x0A


class LineProtocolClient:
    """
    ASCII line protocol over a serial transport.

    Args:
        transport: Open transport; the client does not own it
        max_line_length: Default limit for receive_line()
    """

    def __init__(self, transport: SerialTransport,
                 max_line_length: int = MAX_LINE_LENGTH):
        if max_line_length <= 0:
            raise ValueError(f"max_line_length must be positive, got {max_line_length}")
        self.transport = transport
        self.max_line_length = max_line_length

    def send(self, command: Union[str, bytes]) -> None:
        """
        Transmit *command* exactly as given; no terminator is added.

        Raises:
            ShortWriteError, LinkError: if the bytes could not all be written
        """
        if isinstance(command, str):
            data = command.encode("ascii")
        else:
            data = bytes(command)
        self.transport.write_bytes(data)

    def receive_line(self, max_length: Optional[int] = None) -> bytes:
        """
        Read one line, terminator included.

        Raises:
            ReadTimeoutError: if a byte read timed out before the newline
            LineOverflowError: if max_length bytes arrived without a newline
        """
        limit = self.max_line_length if max_length is None else max_length
        if limit <= 0:
            raise ValueError(f"max_length must be positive, got {limit}")

        buffer = bytearray()
        while len(buffer) < limit:
            byte = self.transport.read_byte()
            if byte is None:
                if buffer:
                    logger.debug("Timeout, discarding partial line %r", bytes(buffer))
                raise ReadTimeoutError(bytes(buffer))
            buffer.append(byte)
            if byte == NEWLINE:
                line = bytes(buffer)
                logger.debug("RX %r", line)
                return line

        raise LineOverflowError(limit)
