"""
PyAnalyser - K6BEZ Antenna Analyser Driver
==========================================

A Python library for driving a K6BEZ-style antenna analyser over its
serial line protocol and collecting VSWR scans or detector voltages.

Example:
    >>> from pyanalyser import PortConfig, ScanConfig, ScanSession, ListRecorder
    >>>
    >>> recorder = ListRecorder()
    >>> session = ScanSession(PortConfig('/dev/ttyACM0'),
    ...                       ScanConfig(start_hz=14000000, stop_hz=14350000))
    >>> result = session.run(recorder)
    >>> for record in recorder.records:
    ...     print(record.freq_mhz, record.vswr)
"""

__version__ = "1.0.0"

from .cancellation import CancellationToken
from .commands import (
    Command,
    DEFAULT_BAUDRATE,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_S,
    MAX_LINE_LENGTH,
)
from .config import OscilloscopeConfig, PortConfig, ScanConfig
from .data_types import (
    AcquisitionState,
    Detector,
    OscilloscopeRecord,
    Outcome,
    ScanRecord,
    SessionResult,
)
from .exceptions import (
    AcquisitionError,
    AnalyserError,
    ConfigureError,
    FailureStep,
    HandshakeError,
    LineOverflowError,
    LinkError,
    MalformedLineError,
    PortConfigError,
    PortOpenError,
    ProtocolError,
    ReadTimeoutError,
    ShortWriteError,
    TransportError,
)
from .protocol import LineProtocolClient
from .recorder import FileRecorder, ListRecorder, Recorder, TextRecorder
from .session import AcquisitionSession, OscilloscopeSession, ScanSession
from .transport import SerialTransport

__all__ = [
    "CancellationToken",
    "Command",
    "DEFAULT_BAUDRATE",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_S",
    "MAX_LINE_LENGTH",
    "PortConfig",
    "ScanConfig",
    "OscilloscopeConfig",
    "AcquisitionState",
    "Detector",
    "Outcome",
    "ScanRecord",
    "OscilloscopeRecord",
    "SessionResult",
    "AnalyserError",
    "TransportError",
    "PortOpenError",
    "PortConfigError",
    "LinkError",
    "ShortWriteError",
    "ReadTimeoutError",
    "LineOverflowError",
    "ProtocolError",
    "HandshakeError",
    "ConfigureError",
    "AcquisitionError",
    "MalformedLineError",
    "FailureStep",
    "SerialTransport",
    "LineProtocolClient",
    "Recorder",
    "ListRecorder",
    "TextRecorder",
    "FileRecorder",
    "AcquisitionSession",
    "ScanSession",
    "OscilloscopeSession",
]
