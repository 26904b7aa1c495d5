from __future__ import annotations

import logging
import os
from configparser import ConfigParser

from .extractor import DEFAULT_TIMESTAMP_FORMAT

NEW_CONFIG = """\
[inventory]
# Number of worker threads reading file attributes. 0 uses one per CPU.
max_workers = 0

# strftime format used for the creation and modified columns.
timestamp_format = {timestamp_format}

# Render timestamps in UTC instead of the local time zone of the machine.
use_utc = false

[output]
# Directory for the report and error files. Empty uses the working directory.
output_directory =

    """


class InventoryConfig:
    """Configuration for an inventory run. All values have defaults."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str | None = None) -> None:
        """Load the configuration from the given file, or use defaults if None."""
        self._config = ConfigParser(interpolation=None)

        if filepath is None:
            return

        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def max_workers(self) -> int | None:
        """Return the worker pool size, or None to use one per CPU."""
        value = self._config.getint("inventory", "max_workers", fallback=0)
        if value < 0:
            raise ValueError(f"max_workers cannot be negative: {value}")
        return value or None

    @property
    def timestamp_format(self) -> str:
        """Return the strftime format for timestamps."""
        return self._config.get(
            "inventory",
            "timestamp_format",
            fallback=DEFAULT_TIMESTAMP_FORMAT,
        )

    @property
    def use_utc(self) -> bool:
        """Return whether timestamps are pinned to UTC."""
        return self._config.getboolean("inventory", "use_utc", fallback=False)

    @property
    def output_directory(self) -> str | None:
        """Return the configured output directory, or None if not set."""
        return self._config.get("output", "output_directory", fallback="") or None


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    config = NEW_CONFIG.format(timestamp_format=DEFAULT_TIMESTAMP_FORMAT)

    with open(filename, "w") as config_file:
        config_file.write(config)
