from __future__ import annotations

import logging
import os
import time

from .errorsink import ErrorSink
from .extractor import Extractor
from .extractor import ReportFormatter
from .inventoryconfig import InventoryConfig
from .inventorymodel import InventorySummary
from .reportwriter import ReportWriter
from .treewalker import TreeWalker

DEFAULT_BASE_NAME = "output"


class InventoryError(ValueError):
    """An inventory run could not start or could not open its output files."""


def base_folder_name(root: str) -> str:
    """Return the last component of root, or "output" for a filesystem root."""
    return os.path.basename(os.path.normpath(root)) or DEFAULT_BASE_NAME


def report_filename(base_name: str) -> str:
    """Return the report file name for a base folder name."""
    return base_name if base_name.endswith(".txt") else f"{base_name}.txt"


def error_filename(base_name: str) -> str:
    """Return the diagnostic file name for a base folder name."""
    return f"errors_parsing_{base_name}.txt"


class Inventory:
    """List every accessible file under a directory into a text report."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        root: str,
        output_directory: str | None = None,
        *,
        max_workers: int | None = None,
        formatter: ReportFormatter | None = None,
    ) -> None:
        """
        Initialize a new Inventory.

        Args:
            root: The directory to scan.
            output_directory: Where the report and error files are written.
                Defaults to the current working directory.

        Keyword Args:
            max_workers: Size of the attribute reading pool. Defaults to one
                worker per CPU.
            formatter: Renders records as report lines. Defaults to the local
                time zone and the default timestamp format.
        """
        self.root = os.path.abspath(root)
        self.output_directory = os.path.abspath(output_directory or os.getcwd())
        self._max_workers = max_workers
        self._formatter = formatter or ReportFormatter()

        base_name = base_folder_name(self.root)
        self.report_path = os.path.join(self.output_directory, report_filename(base_name))
        self.error_path = os.path.join(self.output_directory, error_filename(base_name))

    @classmethod
    def from_config(
        cls,
        root: str,
        config: InventoryConfig,
        *,
        output_directory: str | None = None,
        max_workers: int | None = None,
        use_utc: bool = False,
    ) -> Inventory:
        """
        Build an Inventory from the given configuration.

        Keyword Args:
            output_directory: Overrides the configured output directory.
            max_workers: Overrides the configured worker count.
            use_utc: Pins timestamps to UTC even if the config does not.
        """
        return cls(
            root,
            output_directory or config.output_directory,
            max_workers=max_workers or config.max_workers,
            formatter=ReportFormatter(
                config.timestamp_format,
                use_utc=use_utc or config.use_utc,
            ),
        )

    def run(self) -> InventorySummary:
        """
        Scan the root directory and write the report and error files.

        Problems with individual paths are recorded in the error file and
        never stop the run.

        Raises:
            InventoryError: The root is not a directory, the output directory
                cannot be created, or the output files cannot be opened.
        """
        if not os.path.isdir(self.root):
            raise InventoryError(
                f"Base path does not exist or is not a directory: {self.root}"
            )

        self._prepare_output_directory()

        self.logger.info("Writing directory contents to: %s", self.report_path)
        self.logger.info("Writing error logs to: %s", self.error_path)
        tic = time.perf_counter()

        try:
            with ErrorSink(self.error_path) as sink:
                with ReportWriter(self.report_path, sink) as writer:
                    entries = TreeWalker(sink).walk(self.root)
                    extractor = Extractor(sink, max_workers=self._max_workers)
                    records = extractor.extract(entries)
                    success = writer.write(records, self._formatter)

        except OSError as error:
            raise InventoryError(f"Error while writing to files: {error}") from error

        toc = time.perf_counter()
        self.logger.info("Inventory finished in %s seconds", toc - tic)
        self.logger.info("Wrote %s of %s discovered paths", writer.lines_written, len(entries))

        if success:
            self.logger.info("Operation completed successfully.")
        else:
            self.logger.warning("Operation completed with write errors, see %s", self.error_path)

        return InventorySummary(
            report_path=self.report_path,
            error_path=self.error_path,
            discovered_count=len(entries),
            record_count=writer.lines_written,
            diagnostic_count=sink.count,
            success=success,
        )

    def _prepare_output_directory(self) -> None:
        """Create the output directory if it does not exist."""
        if os.path.isdir(self.output_directory):
            return

        try:
            os.makedirs(self.output_directory, exist_ok=True)

        except OSError as error:
            raise InventoryError(
                f"Unable to create output directory: {self.output_directory}"
            ) from error

        self.logger.debug("Created output directory %s", self.output_directory)
