"""
Record sinks.

A session hands every parsed record to a Recorder. The text recorders
write the two-column format read by plotting tools:

    scan:          "<MHz> <VSWR>\\n"            e.g. "14.000000 1.500000"
    oscilloscope:  "<sample> <voltage>\\n"
"""

from pathlib import Path
from typing import List, Optional, Protocol, TextIO, Union

from .data_types import Record


class Recorder(Protocol):
    """Anything that accepts records."""

    def write(self, record: Record) -> None:  # pragma: no cover - protocol signature
        ...


class ListRecorder:
    """Keeps records in memory."""

    def __init__(self):
        self.records: List[Record] = []

    def write(self, record: Record) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)


class TextRecorder:
    """
    Writes one line per record to a text stream, flushing each time so a
    plot of a running scan sees every point.
    """

    def __init__(self, stream: Optional[TextIO]):
        self.stream = stream
        self.count = 0

    def write(self, record: Record) -> None:
        if self.stream is None:
            raise ValueError("recorder is not open")
        self.stream.write(record.to_line())
        self.stream.flush()
        self.count += 1


class FileRecorder(TextRecorder):
    """
    TextRecorder owning its output file.

    Example:
        >>> with FileRecorder("dipole.dat") as recorder:
        ...     session.run(recorder)
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__(stream=None)
        self.path = Path(path)

    def open(self) -> None:
        if self.stream is None:
            self.stream = open(self.path, "w+", encoding="ascii")

    def close(self) -> None:
        stream, self.stream = self.stream, None
        if stream is not None:
            stream.close()

    def __enter__(self) -> 'FileRecorder':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
