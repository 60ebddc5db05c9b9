"""
Configuration for the Antenna Analyser Driver
=============================================

Plain dataclasses consumed by the transport and the sessions. Values are
validated on construction; invalid values raise ValueError.

Example
-------
>>> port = PortConfig(port="/dev/ttyACM0")
>>> scan = ScanConfig(start_hz=7_000_000, stop_hz=7_300_000, steps=50)
"""

from dataclasses import dataclass
from typing import Optional

from .commands import (
    DEFAULT_BAUDRATE,
    DEFAULT_PORT,
    DEFAULT_SETTLE_MS,
    DEFAULT_STEPS,
    DEFAULT_TIMEOUT_S,
)
from .data_types import Detector


@dataclass
class PortConfig:
    """
    Serial line settings.

    Attributes
    ----------
    port : str
        Device path
    baudrate : int
        Line speed (the analyser firmware uses 57600)
    timeout : float
        Per-byte read timeout in seconds
    rtscts : bool
        Hardware RTS/CTS flow control
    bytesize : int
        Data bits
    parity : str
        Parity, 'N' for none
    stopbits : int
        Stop bits
    """
    port: str = DEFAULT_PORT
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float = DEFAULT_TIMEOUT_S
    rtscts: bool = True
    bytesize: int = 8
    parity: str = "N"
    stopbits: int = 1

    def __post_init__(self) -> None:
        if not self.port:
            raise ValueError("port must not be empty")
        if self.baudrate <= 0:
            raise ValueError(f"baudrate must be positive, got {self.baudrate}")
        if self.timeout is None or self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def timeout_deciseconds(self) -> int:
        """Read timeout in tenths of a second, as termios counts it."""
        return max(1, int(round(self.timeout * 10)))


@dataclass
class ScanConfig:
    """
    Frequency scan parameters.

    start_hz <= stop_hz is not checked; the analyser decides what to do
    with a reversed range.
    """
    start_hz: int
    stop_hz: int
    steps: int = DEFAULT_STEPS
    settle_ms: int = DEFAULT_SETTLE_MS

    def __post_init__(self) -> None:
        if self.start_hz < 0 or self.stop_hz < 0:
            raise ValueError("frequencies must not be negative")
        if self.steps <= 0:
            raise ValueError(f"steps must be positive, got {self.steps}")
        if self.settle_ms < 0:
            raise ValueError(f"settle_ms must not be negative, got {self.settle_ms}")


@dataclass
class OscilloscopeConfig:
    """
    Detector voltage capture parameters.

    Attributes
    ----------
    frequency_hz : int
        Frequency to tune before measuring; 0 leaves the DDS reset
    settle_ms : int
        Settle delay in milliseconds
    detector : Detector or None
        Detector to select; None sends no select command
    """
    frequency_hz: int = 0
    settle_ms: int = DEFAULT_SETTLE_MS
    detector: Optional[Detector] = Detector.FORWARD

    def __post_init__(self) -> None:
        if self.frequency_hz < 0:
            raise ValueError("frequency_hz must not be negative")
        if self.settle_ms < 0:
            raise ValueError(f"settle_ms must not be negative, got {self.settle_ms}")
