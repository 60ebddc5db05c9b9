"""
Shared fixtures for the PyAnalyser test suite.

MockSerial stands in for serial.Serial so that the transport, protocol
client and sessions can be exercised without an analyser attached.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
import serial

from pyanalyser.config import PortConfig
from pyanalyser.transport import SerialTransport


# termios.tcgetattr() shaped value: iflag, oflag, cflag, lflag, ispeed, ospeed, cc
ORIGINAL_ATTRIBUTES = [0o2400, 0o5, 0o277, 0o105073, 13, 13, [b'\x00'] * 32]


class MockSerial:
    """
    Mock serial port for testing without hardware.

    Replies can be scripted per command: when a write equals a key of
    ``responses``, the associated bytes become readable. ``on_empty`` is
    called whenever a read finds nothing buffered, which is where a real
    port would block until its timeout.
    """

    def __init__(self, responses=None):
        self.written = []
        self.responses = dict(responses or {})
        self.read_buffer = bytearray()
        self.is_open = True
        self.timeout = 2.0
        self.short_writes = set()
        self.failing_writes = set()
        self.on_empty = None
        self.close_calls = 0
        self.read_error = None

    def write(self, data: bytes) -> int:
        data = bytes(data)
        if data in self.failing_writes:
            raise serial.SerialException("write failed")
        self.written.append(data)
        if data in self.short_writes:
            return len(data) - 1
        reply = self.responses.get(data)
        if reply:
            self.inject(reply)
        return len(data)

    def read(self, size: int = 1) -> bytes:
        if self.read_error is not None:
            raise self.read_error
        if not self.read_buffer and self.on_empty is not None:
            self.on_empty(self)
        chunk = bytes(self.read_buffer[:size])
        del self.read_buffer[:size]
        return chunk

    def inject(self, data: bytes) -> None:
        """Make *data* readable."""
        self.read_buffer.extend(data)

    def fileno(self) -> int:
        return 42

    def close(self) -> None:
        self.is_open = False
        self.close_calls += 1

    def get_all_commands(self) -> list:
        """Get all commands sent, decoded."""
        return [w.decode() for w in self.written]


def analyser_responses(*data_lines: bytes, identity=(b"K6BEZ analyser\n", b"v1.0\n"),
                       start=b"s") -> dict:
    """Replies of a well-behaved analyser: identity after q, data after *start*."""
    return {
        b"q": b"".join(identity),
        start: b"".join(data_lines),
    }


@pytest.fixture
def mock_serial():
    """Create a mock serial port."""
    return MockSerial()


@pytest.fixture
def port_config():
    return PortConfig(port="/dev/test")


@pytest.fixture
def patched_port(mock_serial):
    """
    Patch serial.Serial and the termios helpers of the transport.

    Yields a namespace with the mock port, the patched Serial class and
    the restore_attributes mock.
    """
    with patch('serial.Serial') as serial_class, \
            patch('pyanalyser.transport.port_attributes') as attributes, \
            patch('pyanalyser.transport.restore_attributes') as restore:
        serial_class.return_value = mock_serial
        attributes.return_value.__enter__.return_value = ORIGINAL_ATTRIBUTES
        yield SimpleNamespace(
            serial=mock_serial,
            serial_class=serial_class,
            attributes=attributes,
            restore=restore,
        )


@pytest.fixture
def transport(patched_port, port_config):
    """Open transport on the mock port."""
    port = SerialTransport(port_config)
    port.open()
    yield port
    port.close()
