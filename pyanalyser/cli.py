"""
Command line front end.

Entry point for the `pyanalyser` command:

    pyanalyser -a14000000 -b14350000 -n100 -f 20m.dat      # VSWR scan
    pyanalyser -c -df -a7100000 -f fwd.dat                 # detector voltages

Records go to stdout unless -f names a file. Ctrl+C stops a running
acquisition cleanly. The exit status identifies the step that failed.
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

from . import __version__
from .cancellation import CancellationToken
from .commands import DEFAULT_BAUDRATE, DEFAULT_PORT, DEFAULT_SETTLE_MS, DEFAULT_STEPS, DEFAULT_TIMEOUT_S
from .config import OscilloscopeConfig, PortConfig, ScanConfig
from .data_types import Detector, Record
from .exceptions import EXIT_OPEN_FAILED, ProtocolError, TransportError
from .recorder import FileRecorder, TextRecorder
from .session import AcquisitionSession, OscilloscopeSession, ScanSession

logger = logging.getLogger(__name__)

DETECTORS = {"f": Detector.FORWARD, "r": Detector.REVERSE}


class Spinner:
    """Progress indicator drawn on one terminal line, one step per record."""

    CHARS = "\\-/|"

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stderr
        self._index = 0

    def __call__(self, record: Record) -> None:
        self.stream.write(f"{self.CHARS[self._index]}  \r")
        self.stream.flush()
        self._index = (self._index + 1) % len(self.CHARS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyanalyser",
        description="K6BEZ antenna analyser driver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
    Scan:          give -a and -b to scan a frequency range for VSWR.
    Oscilloscope:  give -c to capture detector voltages, optionally
                   tuning to -a first and choosing a detector with -d.

Output lines:
    scan           "<MHz> <VSWR>"
    oscilloscope   "<sample> <voltage>"
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--port', '-p', default=DEFAULT_PORT,
                        help=f'Analyser serial port (default: {DEFAULT_PORT})')
    parser.add_argument('--baudrate', type=int, default=DEFAULT_BAUDRATE,
                        help=f'Baudrate (default: {DEFAULT_BAUDRATE})')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT_S,
                        help=f'Per-byte read timeout in seconds (default: {DEFAULT_TIMEOUT_S})')
    parser.add_argument('--start', '-a', type=int, default=None, metavar='HZ',
                        help='Start frequency in Hz (scan), or frequency to tune (oscilloscope)')
    parser.add_argument('--stop', '-b', type=int, default=None, metavar='HZ',
                        help='Stop frequency in Hz')
    parser.add_argument('--steps', '-n', type=int, default=DEFAULT_STEPS,
                        help=f'Number of steps between start and stop (default: {DEFAULT_STEPS})')
    parser.add_argument('--settle', '-s', type=int, default=DEFAULT_SETTLE_MS, metavar='MS',
                        help=f'Settle delay in milliseconds (default: {DEFAULT_SETTLE_MS})')
    parser.add_argument('--oscilloscope', '-c', action='store_true',
                        help='Capture detector voltages instead of scanning')
    parser.add_argument('--detector', '-d', choices=sorted(DETECTORS), default='f',
                        help='Detector for oscilloscope mode: f=forward, r=reverse (default: f)')
    parser.add_argument('--file', '-f', default=None,
                        help='Write records to this file instead of stdout')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log protocol traffic to stderr')
    return parser


def build_session(args: argparse.Namespace, token: CancellationToken) -> AcquisitionSession:
    """Create the session selected by *args*. Raises ValueError on bad values."""
    port_config = PortConfig(port=args.port, baudrate=args.baudrate, timeout=args.timeout)
    if args.oscilloscope:
        config = OscilloscopeConfig(
            frequency_hz=args.start or 0,
            settle_ms=args.settle,
            detector=DETECTORS[args.detector],
        )
        return OscilloscopeSession(port_config, config, cancel_token=token)

    config = ScanConfig(
        start_hz=args.start,
        stop_hz=args.stop,
        steps=args.steps,
        settle_ms=args.settle,
    )
    return ScanSession(port_config, config, cancel_token=token)


@contextmanager
def open_recorder(path: Optional[str]) -> Iterator[TextRecorder]:
    if path is None or path == '-':
        yield TextRecorder(sys.stdout)
        return
    with FileRecorder(path) as recorder:
        yield recorder


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.oscilloscope and not (args.start and args.stop):
        parser.error("give non-zero -a and -b to run a scan, or -c for the oscilloscope")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    token = CancellationToken()
    try:
        session = build_session(args, token)
    except ValueError as e:
        parser.error(str(e))

    progress = None if args.verbose else Spinner()
    try:
        # Open the port before truncating the output file
        session.open()
        with open_recorder(args.file) as recorder, token.handle_signals():
            result = session.run(recorder, progress=progress)
    except TransportError as e:
        print(f"port {args.port} open failed: {e}", file=sys.stderr)
        return EXIT_OPEN_FAILED
    except ProtocolError as e:
        print(e, file=sys.stderr)
        return e.exit_code
    except OSError as e:
        print(f"Cannot write records to '{args.file or 'stdout'}': {e.strerror or e}",
              file=sys.stderr)
        return EXIT_OPEN_FAILED
    finally:
        session.close()

    if result.cancelled:
        print(f"Terminated {session.mode} after {result.records} records", file=sys.stderr)
    logger.info("Finished: %s, %d records, %d skipped",
                result.outcome.value, result.records, result.skipped)
    return 0


if __name__ == '__main__':
    sys.exit(main())
