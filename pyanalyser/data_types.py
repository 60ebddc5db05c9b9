"""
Data Types for the Antenna Analyser
===================================

This module contains the records produced by an acquisition and the small
enums describing a session. These are pure Python dataclasses.

The analyser emits line-based output:
    <hz>.00,0,<vswr>,<fwd>.00,<rev>.00   (scan)
    <sample> <voltage>                   (oscilloscope)
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from .exceptions import MalformedLineError


# The ".00" suffixes are fixed text emitted by the firmware, not fractions.
_SCAN_LINE = re.compile(rb"^(-?\d+)\.00,0,(-?\d+),(-?\d+)\.00,(-?\d+)\.00$")
_OSCILLOSCOPE_LINE = re.compile(rb"^\s*(-?\d+)\s+(-?\d+)\s*$")


class Detector(Enum):
    """Detector selectable in oscilloscope mode; value is the command."""
    FORWARD = "F"
    REVERSE = "E"


class AcquisitionState(Enum):
    """Session life cycle."""
    INIT = "init"
    HANDSHAKING = "handshaking"
    CONFIGURING = "configuring"
    ACQUIRING = "acquiring"
    DRAINING = "draining"
    CLOSED = "closed"


class Outcome(Enum):
    """How a session reached CLOSED without raising."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _strip_terminator(line: bytes) -> bytes:
    return line.rstrip(b"\r\n")


@dataclass(frozen=True)
class ScanRecord:
    """
    One scan measurement.

    Format: <hz>.00,0,<vswr>,<fwd>.00,<rev>.00

    Units:
        - freq_mhz: MHz (raw Hz / 1e6)
        - vswr: ratio (raw / 1000)
        - forward, reverse: raw detector counts, observed only
    """
    freq_mhz: float
    vswr: float
    forward: int = 0
    reverse: int = 0

    @classmethod
    def from_line(cls, line: bytes) -> 'ScanRecord':
        """
        Parse a scan data line.

        Raises:
            MalformedLineError: if the line does not have five fields of
                the expected shape
        """
        match = _SCAN_LINE.match(_strip_terminator(line))
        if match is None:
            raise MalformedLineError(line, "expected <hz>.00,0,<vswr>,<fwd>.00,<rev>.00")
        freq_hz, vswr_raw, fwd, rev = (int(g) for g in match.groups())
        return cls(
            freq_mhz=freq_hz / 1000000.0,
            vswr=vswr_raw / 1000.0,
            forward=fwd,
            reverse=rev,
        )

    def to_line(self) -> str:
        """Text persisted for plotting: "<MHz> <VSWR>"."""
        return "%f %f\n" % (self.freq_mhz, self.vswr)


@dataclass(frozen=True)
class OscilloscopeRecord:
    """
    One detector voltage sample.

    Format: <sample> <voltage>
    """
    sample_index: int
    voltage_raw: int

    @classmethod
    def from_line(cls, line: bytes) -> 'OscilloscopeRecord':
        """
        Parse an oscilloscope data line.

        Raises:
            MalformedLineError: if the line is not two integers
        """
        match = _OSCILLOSCOPE_LINE.match(_strip_terminator(line))
        if match is None:
            raise MalformedLineError(line, "expected <sample> <voltage>")
        sample, voltage = (int(g) for g in match.groups())
        return cls(sample_index=sample, voltage_raw=voltage)

    def to_line(self) -> str:
        return "%d %d\n" % (self.sample_index, self.voltage_raw)


Record = Union[ScanRecord, OscilloscopeRecord]


@dataclass
class SessionResult:
    """Summary returned by a finished session."""
    outcome: Outcome
    records: int = 0
    skipped: int = 0
    identification: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def cancelled(self) -> bool:
        return self.outcome is Outcome.CANCELLED
