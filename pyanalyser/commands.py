"""
Command Protocol for the K6BEZ Antenna Analyser
===============================================

This module defines the line-based protocol used to communicate
with the analyser via serial.

Protocol Overview
-----------------
Commands are short ASCII strings sent verbatim. The driver never appends a
terminator; the analyser firmware acts on the trailing command letter.

Input (Host → Device):
    q              - Query identity (two free-text lines follow)
    <hz>A          - Set start frequency (Hz)
    <hz>B          - Set stop frequency (Hz)
    <n>N           - Set number of steps
    <ms>D          - Set settle delay (ms)
    s              - Start scan
    o              - Start oscilloscope
    F / E          - Select forward / reverse detector
    z              - Abort

Output (Device → Host), newline terminated:
    <hz>.00,0,<vswr>,<fwd>.00,<rev>.00  - Scan data line
    <sample> <voltage>                  - Oscilloscope data line
    End                                 - End of data stream
"""

import sys


class Command:
    """Fixed commands sent from host to device."""
    QUERY = "q"                 # Identity query
    START_SCAN = "s"            # Begin frequency scan
    START_OSCILLOSCOPE = "o"    # Begin detector voltage capture
    FORWARD_DETECTOR = "F"      # Select forward detector
    REVERSE_DETECTOR = "E"      # Select reverse detector
    ABORT = "z"                 # Abort running acquisition


class Suffix:
    """Trailing letters of the parameterised commands."""
    START_FREQUENCY = "A"
    STOP_FREQUENCY = "B"
    STEPS = "N"
    SETTLE_DELAY = "D"


# Prefix of the line marking the end of a data stream
END_SENTINEL = b"End"

# Serial defaults observed on the instrument
DEFAULT_BAUDRATE = 57600
DEFAULT_TIMEOUT_S = 2.0

# Line buffer limit; reaching it without a newline is a protocol error
MAX_LINE_LENGTH = 256

# Scan defaults
DEFAULT_STEPS = 100
DEFAULT_SETTLE_MS = 10

if sys.platform == "darwin":
    DEFAULT_PORT = "/dev/tty.usbmodemmfd111"
else:
    DEFAULT_PORT = "/dev/ttyACM0"


def set_start_frequency(hz: int) -> str:
    return f"{int(hz)}{Suffix.START_FREQUENCY}"


def set_stop_frequency(hz: int) -> str:
    return f"{int(hz)}{Suffix.STOP_FREQUENCY}"


def set_steps(steps: int) -> str:
    return f"{int(steps)}{Suffix.STEPS}"


def set_settle_delay(ms: int) -> str:
    return f"{int(ms)}{Suffix.SETTLE_DELAY}"


def is_end_line(line: bytes) -> bool:
    """True if *line* is the sentinel closing a data stream."""
    return line[:len(END_SENTINEL)] == END_SENTINEL
