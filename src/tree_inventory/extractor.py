from __future__ import annotations

import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import as_completed
from datetime import datetime
from datetime import timezone
from typing import TYPE_CHECKING
from typing import Sequence

from .inventorymodel import DiscoveredEntry
from .inventorymodel import FileRecord

if TYPE_CHECKING:
    from typing import Protocol

    class _ErrorSink(Protocol):
        def log(self, message: str) -> None:
            ...


DEFAULT_TIMESTAMP_FORMAT = "%x %H:%M"


class Extractor:
    """Read file attributes for discovered entries on a bounded worker pool."""

    logger = logging.getLogger(__name__)

    def __init__(self, sink: _ErrorSink, *, max_workers: int | None = None) -> None:
        """
        Initialize a new Extractor.

        Args:
            sink: Receives a diagnostic for every file whose attributes fail.

        Keyword Args:
            max_workers: Size of the worker pool. Defaults to the number of
                CPUs available.
        """
        self._sink = sink
        self._max_workers = max_workers or os.cpu_count() or 1

    def extract(self, entries: Sequence[DiscoveredEntry]) -> list[FileRecord]:
        """
        Build a FileRecord for every regular file in entries.

        Directories, symbolic links and special files are dropped. Files whose
        attributes cannot be read are reported and dropped. The returned
        records are in the same order as entries, whatever order the workers
        finish in.
        """
        results: list[FileRecord | None] = [None] * len(entries)

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = {
                executor.submit(self.read_record, entry): index
                for index, entry in enumerate(entries)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        records = [record for record in results if record is not None]
        self.logger.debug("Extracted %s records from %s entries", len(records), len(entries))

        return records

    def read_record(self, entry: DiscoveredEntry) -> FileRecord | None:
        """Return the record for a regular file, or None if skipped or unreadable."""
        try:
            file_stat = os.lstat(entry.path)

        except OSError as error:
            message = f"Error accessing file attributes: {entry.path} - {error}"
            self.logger.error("%s", message)
            self._sink.log(message)
            return None

        if not stat.S_ISREG(file_stat.st_mode):
            return None

        # Filesystems without a birth time report the modification time
        creation_time = getattr(file_stat, "st_birthtime", None)
        if creation_time is None:
            creation_time = file_stat.st_mtime

        return FileRecord(
            file_name=entry.name,
            absolute_path=os.path.abspath(entry.path),
            creation_time=creation_time,
            modified_time=file_stat.st_mtime,
            size_bytes=file_stat.st_size,
        )


class ReportFormatter:
    """Render FileRecords as pipe-delimited report lines."""

    def __init__(
        self,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        *,
        use_utc: bool = False,
    ) -> None:
        """
        Initialize a new ReportFormatter.

        Args:
            timestamp_format: A strftime format for both timestamps.

        Keyword Args:
            use_utc: Render timestamps in UTC instead of the local time zone.
        """
        self.timestamp_format = timestamp_format
        self.use_utc = use_utc

    def format_timestamp(self, timestamp: float) -> str:
        """Format POSIX seconds, resolving the local zone at call time."""
        if self.use_utc:
            moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        else:
            moment = datetime.fromtimestamp(timestamp)

        return moment.strftime(self.timestamp_format)

    def format_line(self, record: FileRecord) -> str:
        """Return `name|path|created|modified|size` with a trailing newline."""
        return (
            f"{record.file_name}|{record.absolute_path}"
            f"|{self.format_timestamp(record.creation_time)}"
            f"|{self.format_timestamp(record.modified_time)}"
            f"|{record.size_bytes}\n"
        )
