"""
Exceptions raised by the analyser driver.

The hierarchy mirrors the layers of the driver:

    AnalyserError
    ├── TransportError        port could not be opened or configured
    ├── LinkError             byte/line I/O failed on an open port
    ├── ProtocolError         a session step failed (carries a FailureStep)
    └── MalformedLineError    a data line did not have the expected shape
"""

from enum import IntEnum
from typing import Optional


class FailureStep(IntEnum):
    """
    Session step that failed.

    The value of each member is the process exit status reported by the
    command line front end for that failure.
    """
    HANDSHAKE_SEND = 1
    HANDSHAKE_READ = 2
    START_FREQUENCY_SEND = 3
    STOP_FREQUENCY_SEND = 4
    STEPS_SEND = 5
    SETTLE_SEND = 6
    ACQUIRE_START_SEND = 7
    ACQUIRE_READ = 8
    LINE_OVERFLOW = 99


# Exit status when the port cannot be opened at all
EXIT_OPEN_FAILED = 255


class AnalyserError(Exception):
    """Base class for all driver errors."""


# =============================================================================
# Transport
# =============================================================================

class TransportError(AnalyserError):
    """The serial port could not be opened or configured."""

    def __init__(self, port: str, message: str):
        super().__init__(f"{port}: {message}")
        self.port = port


class PortOpenError(TransportError):
    """Device missing or open() refused."""


class PortConfigError(TransportError):
    """Device opened but the requested line settings could not be applied."""


class PortClosedError(TransportError):
    """I/O attempted on a transport that is not open."""


# =============================================================================
# Link I/O
# =============================================================================

class LinkError(AnalyserError):
    """Byte or line level I/O failure on an open port."""


class ShortWriteError(LinkError):
    """Fewer bytes were written than requested."""

    def __init__(self, requested: int, written: int):
        super().__init__(f"short write: {written} of {requested} bytes")
        self.requested = requested
        self.written = written


class ReadTimeoutError(LinkError):
    """No newline arrived before a byte read timed out.

    The partial line, if any, has been discarded.
    """

    def __init__(self, discarded: bytes = b""):
        super().__init__(f"read timed out ({len(discarded)} bytes discarded)")
        self.discarded = discarded


class LineOverflowError(LinkError):
    """The line buffer filled up without a terminator.

    The stream is desynchronised; callers must not retry.
    """

    def __init__(self, max_length: int):
        super().__init__(f"no line terminator within {max_length} bytes")
        self.max_length = max_length


# =============================================================================
# Protocol
# =============================================================================

class ProtocolError(AnalyserError):
    """A handshake, configure or acquire step failed."""

    def __init__(self, step: FailureStep, message: str,
                 cause: Optional[Exception] = None):
        super().__init__(message)
        self.step = step
        self.cause = cause

    @property
    def exit_code(self) -> int:
        return int(self.step)


class HandshakeError(ProtocolError):
    pass


class ConfigureError(ProtocolError):
    pass


class AcquisitionError(ProtocolError):
    pass


class MalformedLineError(AnalyserError):
    """A data line could not be decomposed into a record."""

    def __init__(self, line: bytes, reason: str):
        super().__init__(f"malformed line {line!r}: {reason}")
        self.line = line
        self.reason = reason
