"""
Serial Transport
================

Owns the serial port of one analyser: opens it in raw mode (8N1, RTS/CTS,
no canonical processing, no echo), reads single bytes with a timeout,
writes complete byte strings, drains pending input, and restores the
port's original termios attributes when it is closed.

Example:
    >>> from pyanalyser.config import PortConfig
    >>> with SerialTransport(PortConfig("/dev/ttyACM0")) as port:
    ...     port.write_bytes(b"q")
    ...     first = port.read_byte()
"""

import logging
import os
import termios
from contextlib import contextmanager
from typing import Iterator, List, Optional

import serial

from .config import PortConfig
from .exceptions import (
    LinkError,
    PortClosedError,
    PortConfigError,
    PortOpenError,
    ShortWriteError,
)

logger = logging.getLogger(__name__)

# Chunk size used when draining input
_DRAIN_CHUNK = 256


@contextmanager
def port_attributes(path: str) -> Iterator[List]:
    """
    Yield the current termios attributes of *path*.

    The device stays open until the block exits, so an open performed
    inside the block is never preceded by a last close (which would drop
    DTR and reset the instrument).
    """
    fd = os.open(path, os.O_RDWR | os.O_NOCTTY | os.O_NONBLOCK)
    try:
        yield termios.tcgetattr(fd)
    finally:
        os.close(fd)


def restore_attributes(fd: int, attributes: List) -> None:
    termios.tcsetattr(fd, termios.TCSANOW, attributes)


class SerialTransport:
    """
    Exclusive owner of one serial port.

    Attributes:
        config: Line settings used by open()
    """

    def __init__(self, config: PortConfig):
        self.config = config
        self._ser: Optional[serial.Serial] = None
        self._original_attributes: Optional[List] = None
        self._pending: Optional[int] = None

    def __enter__(self) -> 'SerialTransport':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._ser is not None and self._ser.is_open

    @property
    def original_attributes(self) -> Optional[List]:
        """termios attributes captured before the port was reconfigured."""
        return self._original_attributes

    # =========================================================================
    # Connection Management
    # =========================================================================

    def open(self) -> None:
        """
        Open and configure the port.

        Raises:
            PortOpenError: if the device does not exist or cannot be opened
            PortConfigError: if it is not a terminal or rejects the settings
        """
        if self.is_open:
            return

        path = self.config.port
        try:
            with port_attributes(path) as original:
                self._ser = serial.Serial(
                    port=path,
                    baudrate=self.config.baudrate,
                    bytesize=self.config.bytesize,
                    parity=self.config.parity,
                    stopbits=self.config.stopbits,
                    timeout=self.config.timeout,
                    rtscts=self.config.rtscts,
                    xonxoff=False,
                )
        except FileNotFoundError as e:
            raise PortOpenError(path, "no such device") from e
        except termios.error as e:
            raise PortConfigError(path, f"cannot read line settings: {e}") from e
        except ValueError as e:
            raise PortConfigError(path, str(e)) from e
        except serial.SerialException as e:
            if "configure" in str(e):
                raise PortConfigError(path, str(e)) from e
            raise PortOpenError(path, str(e)) from e
        except OSError as e:
            raise PortOpenError(path, e.strerror or str(e)) from e

        self._original_attributes = original
        self._pending = None
        logger.info(
            "Opened %s at %d baud (timeout %d ds, rtscts=%s)",
            path, self.config.baudrate, self.config.timeout_deciseconds,
            self.config.rtscts,
        )

    def close(self) -> None:
        """
        Restore the original line settings and release the port.

        Safe to call more than once; later calls do nothing.
        """
        ser, self._ser = self._ser, None
        if ser is None:
            return
        original, self._original_attributes = self._original_attributes, None
        self._pending = None

        try:
            if original is not None:
                try:
                    restore_attributes(ser.fileno(), original)
                except (termios.error, OSError, serial.SerialException) as e:
                    logger.warning("Could not restore settings of %s: %s",
                                   self.config.port, e)
        finally:
            try:
                ser.close()
            except (OSError, serial.SerialException) as e:
                logger.warning("Error closing %s: %s", self.config.port, e)
        logger.info("Closed %s", self.config.port)

    def _require_open(self) -> serial.Serial:
        if self._ser is None:
            raise PortClosedError(self.config.port, "port is not open")
        return self._ser

    # =========================================================================
    # Byte I/O
    # =========================================================================

    def read_byte(self) -> Optional[int]:
        """
        Read one byte, waiting up to the configured timeout.

        A byte cached by probe() is returned first. Signal interruptions
        are retried by pyserial and never surface here.

        Returns:
            The byte value, or None if nothing arrived in time
        """
        ser = self._require_open()
        if self._pending is not None:
            byte, self._pending = self._pending, None
            return byte

        try:
            data = ser.read(1)
        except (OSError, serial.SerialException) as e:
            raise LinkError(f"read failed on {self.config.port}: {e}") from e
        if not data:
            return None
        return data[0]

    def write_bytes(self, data: bytes) -> int:
        """
        Write all of *data*.

        Returns:
            Number of bytes written (always len(data))

        Raises:
            ShortWriteError: if the port accepted fewer bytes
            LinkError: if the write failed outright
        """
        ser = self._require_open()
        try:
            written = ser.write(data)
        except serial.SerialTimeoutException as e:
            raise ShortWriteError(len(data), 0) from e
        except (OSError, serial.SerialException) as e:
            raise LinkError(f"write failed on {self.config.port}: {e}") from e

        if written is None or written != len(data):
            raise ShortWriteError(len(data), written or 0)
        logger.debug("TX %r", data)
        return written

    def flush_input(self) -> int:
        """
        Discard all input currently buffered, without waiting.

        Returns:
            Number of bytes discarded
        """
        ser = self._require_open()
        dropped = 0 if self._pending is None else 1
        self._pending = None

        saved = ser.timeout
        ser.timeout = 0
        try:
            while True:
                chunk = ser.read(_DRAIN_CHUNK)
                if not chunk:
                    break
                dropped += len(chunk)
        except (OSError, serial.SerialException) as e:
            raise LinkError(f"flush failed on {self.config.port}: {e}") from e
        finally:
            ser.timeout = saved

        logger.debug("Flushed %d bytes", dropped)
        return dropped

    def probe(self) -> bool:
        """
        Check for pending input without blocking.

        A byte found this way is kept and returned by the next read_byte().
        """
        ser = self._require_open()
        if self._pending is not None:
            return True

        saved = ser.timeout
        ser.timeout = 0
        try:
            data = ser.read(1)
        except (OSError, serial.SerialException) as e:
            raise LinkError(f"probe failed on {self.config.port}: {e}") from e
        finally:
            ser.timeout = saved

        if data:
            self._pending = data[0]
            return True
        return False
