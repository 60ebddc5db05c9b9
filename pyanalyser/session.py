"""
Acquisition Sessions
====================

A session owns one serial transport for its whole life and walks it
through the analyser's protocol:

    INIT → HANDSHAKING → CONFIGURING → ACQUIRING → (DRAINING) → CLOSED

Handshake sends ``q`` and reads two identification lines. Configure sends
the mode's parameter commands without waiting for acknowledgements.
Acquire sends the start command and parses lines until one starting with
``End``. Every failure is fatal and raised as a ProtocolError naming the
step; cancellation is not an error and ends the session with an abort
(``z``) and an input flush.

Usage
-----
>>> from pyanalyser import PortConfig, ScanConfig, ScanSession, ListRecorder
>>>
>>> recorder = ListRecorder()
>>> session = ScanSession(PortConfig("/dev/ttyACM0"),
...                       ScanConfig(start_hz=7_000_000, stop_hz=7_300_000))
>>> result = session.run(recorder)
>>> print(result.records, "points")

Data lines that do not match the mode's format are skipped with a warning
and counted in SessionResult.skipped.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import closing
from typing import Callable, Iterator, List, Optional, Tuple, Type

from .cancellation import CancellationToken
from .commands import (
    MAX_LINE_LENGTH,
    Command,
    is_end_line,
    set_settle_delay,
    set_start_frequency,
    set_steps,
    set_stop_frequency,
)
from .config import OscilloscopeConfig, PortConfig, ScanConfig
from .data_types import (
    AcquisitionState,
    Detector,
    OscilloscopeRecord,
    Outcome,
    Record,
    ScanRecord,
    SessionResult,
)
from .exceptions import (
    AcquisitionError,
    ConfigureError,
    FailureStep,
    HandshakeError,
    LineOverflowError,
    LinkError,
    MalformedLineError,
    ProtocolError,
    ReadTimeoutError,
    TransportError,
)
from .protocol import LineProtocolClient
from .recorder import Recorder
from .transport import SerialTransport

logger = logging.getLogger(__name__)

# (command, step reported on failure, message)
ConfigureStep = Tuple[str, FailureStep, str]


class AcquisitionSession(ABC):
    """
    Handshake/configure/acquire state machine shared by both modes.

    Subclasses provide the configure commands, the start command and the
    data line parser.

    Args:
        port_config: Serial line settings
        cancel_token: Token polled once per received line
        transport: Transport to use instead of a new SerialTransport
        max_line_length: Longest acceptable response line
    """

    mode = "acquisition"
    start_command = ""
    start_failure = "Could not start acquisition"

    def __init__(
        self,
        port_config: PortConfig,
        cancel_token: Optional[CancellationToken] = None,
        transport: Optional[SerialTransport] = None,
        max_line_length: int = MAX_LINE_LENGTH,
    ):
        self.port_config = port_config
        self.cancel_token = cancel_token if cancel_token is not None else CancellationToken()
        self.transport = transport if transport is not None else SerialTransport(port_config)
        self.client = LineProtocolClient(self.transport, max_line_length)

        self._state = AcquisitionState.INIT
        self.identification: Tuple[str, ...] = ()
        self.outcome: Optional[Outcome] = None
        self.records_emitted = 0
        self.skipped = 0

    @property
    def state(self) -> AcquisitionState:
        return self._state

    def _transition(self, state: AcquisitionState) -> None:
        logger.debug("%s session: %s -> %s", self.mode, self._state.value, state.value)
        self._state = state

    def __enter__(self) -> 'AcquisitionSession':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Life Cycle
    # =========================================================================

    def open(self) -> None:
        """Open the transport. TransportError propagates unchanged."""
        if self._state is AcquisitionState.CLOSED:
            raise RuntimeError(f"{self.mode} session is closed")
        try:
            self.transport.open()
        except TransportError:
            self.close()
            raise

    def close(self) -> None:
        """Release the transport and enter CLOSED. Idempotent."""
        if self._state is AcquisitionState.CLOSED:
            return
        try:
            self.transport.close()
        finally:
            self._transition(AcquisitionState.CLOSED)

    def result(self) -> SessionResult:
        if self.outcome is None:
            raise RuntimeError(f"{self.mode} session has not finished")
        return SessionResult(
            outcome=self.outcome,
            records=self.records_emitted,
            skipped=self.skipped,
            identification=self.identification,
        )

    def run(
        self,
        recorder: Recorder,
        progress: Optional[Callable[[Record], None]] = None
    ) -> SessionResult:
        """
        Open, handshake, configure and acquire, writing every record to
        *recorder*. The transport is closed on every exit path.
        """
        with self:
            self.handshake()
            self.configure()
            with closing(self.records()) as records:
                for record in records:
                    recorder.write(record)
                    if progress is not None:
                        progress(record)
        return self.result()

    # =========================================================================
    # Protocol Steps
    # =========================================================================

    def handshake(self) -> Tuple[str, ...]:
        """
        Send the identity query and read the two identification lines.

        Raises:
            HandshakeError: with step HANDSHAKE_SEND, HANDSHAKE_READ or
                LINE_OVERFLOW
        """
        self._transition(AcquisitionState.HANDSHAKING)
        self._send(Command.QUERY, HandshakeError, FailureStep.HANDSHAKE_SEND,
                   "Could not send a q query to the analyser")

        lines = []
        for ordinal in ("first", "second"):
            line = self._receive(
                HandshakeError, FailureStep.HANDSHAKE_READ,
                f"Did not read the {ordinal} line of query data from the analyser",
            )
            text = line.decode("ascii", errors="replace").strip()
            logger.info("Query from analyser: %s", text)
            lines.append(text)

        self.identification = tuple(lines)
        return self.identification

    def configure(self) -> None:
        """
        Send the mode's parameter commands. No replies are read.

        Raises:
            ConfigureError: naming the command that could not be sent
        """
        self._transition(AcquisitionState.CONFIGURING)
        for command, step, message in self.configure_commands():
            self._send(command, ConfigureError, step, message)

    def records(self) -> Iterator[Record]:
        """
        Start the acquisition and yield one record per data line.

        Stops after the ``End`` line, or when the cancel token is seen
        set at the top of the loop (or after a read timeout). Closing the
        generator before ``End`` aborts the acquisition like a cancellation.

        Raises:
            AcquisitionError: on start failure (ACQUIRE_START_SEND), a
                read failure or timeout (ACQUIRE_READ) or a line overflow
                (LINE_OVERFLOW)
        """
        self._transition(AcquisitionState.ACQUIRING)
        self._send(self.start_command, AcquisitionError,
                   FailureStep.ACQUIRE_START_SEND, self.start_failure)
        logger.info("Starting %s", self.mode)

        while True:
            if self.cancel_token.is_cancelled:
                self._abort()
                return

            try:
                line = self.client.receive_line()
            except ReadTimeoutError as e:
                if self.cancel_token.is_cancelled:
                    self._abort()
                    return
                raise AcquisitionError(
                    FailureStep.ACQUIRE_READ,
                    f"Did not read the {self.mode} response: {e}", e,
                ) from e
            except LineOverflowError as e:
                raise AcquisitionError(
                    FailureStep.LINE_OVERFLOW, f"Buffer overflow detected: {e}", e,
                ) from e
            except LinkError as e:
                raise AcquisitionError(
                    FailureStep.ACQUIRE_READ,
                    f"Did not read the {self.mode} response: {e}", e,
                ) from e

            if is_end_line(line):
                self.outcome = Outcome.COMPLETED
                logger.info("%s complete: %d records, %d skipped",
                            self.mode.capitalize(), self.records_emitted, self.skipped)
                return

            try:
                record = self.parse_record(line)
            except MalformedLineError as e:
                self.skipped += 1
                logger.warning("Skipping %s line: %s", self.mode, e)
                continue

            self.records_emitted += 1
            logger.debug("%s record: %s", self.mode.capitalize(), record)
            try:
                yield record
            except GeneratorExit:
                # Consumer stopped before End
                if self.transport.is_open:
                    self._abort()
                raise

    def _abort(self) -> None:
        """Best-effort stop of the instrument after cancellation."""
        self._transition(AcquisitionState.DRAINING)
        logger.info("Terminating %s...", self.mode)
        try:
            self.client.send(Command.ABORT)
        except LinkError as e:
            logger.warning("Could not send abort: %s", e)
        try:
            self.transport.flush_input()
        except LinkError as e:
            logger.warning("Could not flush input: %s", e)
        self.outcome = Outcome.CANCELLED

    def _send(self, command: str, error: Type[ProtocolError],
              step: FailureStep, message: str) -> None:
        try:
            self.client.send(command)
        except LinkError as e:
            raise error(step, f"{message}: {e}", e) from e

    def _receive(self, error: Type[ProtocolError],
                 step: FailureStep, message: str) -> bytes:
        try:
            return self.client.receive_line()
        except LineOverflowError as e:
            raise error(FailureStep.LINE_OVERFLOW,
                        f"Buffer overflow detected: {e}", e) from e
        except LinkError as e:
            raise error(step, f"{message}: {e}", e) from e

    # =========================================================================
    # Mode Specifics
    # =========================================================================

    @abstractmethod
    def configure_commands(self) -> List[ConfigureStep]:
        """Commands sent during CONFIGURING, in order."""

    @abstractmethod
    def parse_record(self, line: bytes) -> Record:
        """Decode one data line; raise MalformedLineError if it does not fit."""


class ScanSession(AcquisitionSession):
    """VSWR scan between two frequencies."""

    mode = "scan"
    start_command = Command.START_SCAN
    start_failure = "Could not start scan"

    def __init__(self, port_config: PortConfig, scan_config: ScanConfig, **kwargs):
        super().__init__(port_config, **kwargs)
        self.scan_config = scan_config

    def configure_commands(self) -> List[ConfigureStep]:
        cfg = self.scan_config
        logger.info("start freq: %d Hz, end freq: %d Hz, steps: %d, settle: %d ms",
                    cfg.start_hz, cfg.stop_hz, cfg.steps, cfg.settle_ms)
        return [
            (set_start_frequency(cfg.start_hz), FailureStep.START_FREQUENCY_SEND,
             "Could not set start frequency"),
            (set_stop_frequency(cfg.stop_hz), FailureStep.STOP_FREQUENCY_SEND,
             "Could not set stop frequency"),
            (set_steps(cfg.steps), FailureStep.STEPS_SEND,
             "Could not set number of steps"),
            (set_settle_delay(cfg.settle_ms), FailureStep.SETTLE_SEND,
             "Could not set settle delay"),
        ]

    def parse_record(self, line: bytes) -> ScanRecord:
        return ScanRecord.from_line(line)


class OscilloscopeSession(AcquisitionSession):
    """Detector voltage capture at a fixed frequency."""

    mode = "oscilloscope"
    start_command = Command.START_OSCILLOSCOPE
    start_failure = "Could not start oscilloscope"

    def __init__(self, port_config: PortConfig,
                 oscilloscope_config: OscilloscopeConfig, **kwargs):
        super().__init__(port_config, **kwargs)
        self.oscilloscope_config = oscilloscope_config

    def configure_commands(self) -> List[ConfigureStep]:
        cfg = self.oscilloscope_config
        logger.info("Start freq: %d Hz, settle: %d ms, detector: %s",
                    cfg.frequency_hz, cfg.settle_ms,
                    cfg.detector.name.lower() if cfg.detector else "unchanged")
        commands = []
        if cfg.frequency_hz != 0:
            commands.append((set_start_frequency(cfg.frequency_hz),
                             FailureStep.START_FREQUENCY_SEND,
                             "Could not set start frequency"))
        commands.append((set_settle_delay(cfg.settle_ms), FailureStep.SETTLE_SEND,
                         "Could not set settle delay"))
        if cfg.detector is Detector.FORWARD:
            commands.append((Command.FORWARD_DETECTOR, FailureStep.ACQUIRE_START_SEND,
                             "Could not request forward measurement"))
        elif cfg.detector is Detector.REVERSE:
            commands.append((Command.REVERSE_DETECTOR, FailureStep.ACQUIRE_START_SEND,
                             "Could not request reverse measurement"))
        return commands

    def parse_record(self, line: bytes) -> OscilloscopeRecord:
        return OscilloscopeRecord.from_line(line)
