from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType
    from typing import TextIO


class ErrorSink:
    """Append-only log of diagnostics for paths that were skipped or failed."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str) -> None:
        """
        Prepare a sink writing to the given file.

        The file is truncated when the sink is opened. Use the `with`
        statement so the file is always closed:

            with ErrorSink("errors.txt") as sink:
                sink.log("Access denied (skipped): /root")

        Args:
            filepath: The path of the diagnostic file.
        """
        self.filepath = filepath
        self._stream: TextIO | None = None
        self._lock = threading.Lock()
        self._count = 0

    def __enter__(self) -> ErrorSink:
        """Open the diagnostic file, truncating any previous run."""
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the diagnostic file."""
        self.close()

    @property
    def count(self) -> int:
        """Number of diagnostics successfully recorded."""
        return self._count

    def open(self) -> None:
        """
        Open the diagnostic file for writing.

        Raises:
            OSError
        """
        # Undecodable file names keep their original bytes
        self._stream = open(
            self.filepath, "w", encoding="utf-8", errors="surrogateescape"
        )
        self.logger.debug("Opened diagnostic file %s", self.filepath)

    def close(self) -> None:
        """Close the diagnostic file if open."""
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def log(self, message: str) -> None:
        """
        Record a single diagnostic line and flush it to disk.

        Never raises. A failure to write is reported on stderr only.
        """
        with self._lock:
            try:
                if self._stream is None:
                    raise ValueError("diagnostic file is not open")

                self._stream.write(message + "\n")
                self._stream.flush()
                self._count += 1

            except (OSError, ValueError) as error:
                self.logger.error("Failed to write error: %s", error)
