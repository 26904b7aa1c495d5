from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING
from typing import Iterable

from .inventorymodel import FileRecord

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Protocol
    from typing import TextIO

    class _ErrorSink(Protocol):
        def log(self, message: str) -> None:
            ...

    class _Formatter(Protocol):
        def format_line(self, record: FileRecord) -> str:
            ...


class ReportWriter:
    """Write the inventory report, one line per FileRecord."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str, sink: _ErrorSink) -> None:
        """
        Prepare a writer for the given report file.

        The report is truncated when opened. Use the `with` statement so the
        file is always closed:

            with ReportWriter("report.txt", sink) as writer:
                writer.write(records, formatter)

        Args:
            filepath: The path of the report file.
            sink: Receives a diagnostic for every line that fails to write.
        """
        self.filepath = filepath
        self._sink = sink
        self._stream: TextIO | None = None
        self._lock = threading.Lock()
        self.lines_written = 0

    def __enter__(self) -> ReportWriter:
        """Open the report file, truncating any previous run."""
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the report file."""
        self.close()

    def open(self) -> None:
        """
        Open the report file for writing.

        Raises:
            OSError
        """
        # Undecodable file names keep their original bytes
        self._stream = open(
            self.filepath, "w", encoding="utf-8", errors="surrogateescape"
        )
        self.logger.debug("Opened report file %s", self.filepath)

    def close(self) -> None:
        """Close the report file if open."""
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def write(self, records: Iterable[FileRecord], formatter: _Formatter) -> bool:
        """
        Write each record in the order given.

        A line that fails to write is reported and skipped; the remaining
        records are still written.

        Returns:
            True if every line was written.
        """
        success = True

        for record in records:
            if not self.write_record(record, formatter):
                success = False

        return success

    def write_record(self, record: FileRecord, formatter: _Formatter) -> bool:
        """Format and write a single record. Returns False on failure."""
        with self._lock:
            try:
                if self._stream is None:
                    raise ValueError("report file is not open")

                self._stream.write(formatter.format_line(record))
                self.lines_written += 1
                return True

            except (OSError, ValueError, OverflowError) as error:
                message = f"Error writing line: {record.absolute_path} - {error}"
                self.logger.error("%s", message)
                self._sink.log(message)
                return False
