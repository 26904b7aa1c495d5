from __future__ import annotations

import os
import tempfile

import pytest

from tree_inventory.extractor import DEFAULT_TIMESTAMP_FORMAT
from tree_inventory.inventoryconfig import NEW_CONFIG
from tree_inventory.inventoryconfig import InventoryConfig
from tree_inventory.inventoryconfig import write_new_config

CONFIG_PATH = "tests/test_config.ini"
BAD_CONFIG_PATH = "tests/bad_config.ini"


def test_inventoryconfig_raises_on_invalid_config_path() -> None:
    with pytest.raises(ValueError):
        InventoryConfig("foo/bar")


def test_inventoryconfig_loads_test_fixture_completely() -> None:
    config = InventoryConfig(CONFIG_PATH)

    assert config.max_workers == 3
    assert config.timestamp_format == "%Y-%m-%d %H:%M:%S"
    assert config.use_utc is True
    assert config.output_directory == "tests/output"


def test_inventoryconfig_defaults_without_file() -> None:
    config = InventoryConfig()

    assert config.max_workers is None
    assert config.timestamp_format == DEFAULT_TIMESTAMP_FORMAT
    assert config.use_utc is False
    assert config.output_directory is None


def test_inventoryconfig_rejects_negative_workers() -> None:
    config = InventoryConfig(BAD_CONFIG_PATH)

    with pytest.raises(ValueError):
        config.max_workers


def test_write_new_config() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)
        os.remove(filename)
        expected = NEW_CONFIG.format(timestamp_format=DEFAULT_TIMESTAMP_FORMAT)

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == expected

        # The written file loads back to the defaults
        config = InventoryConfig(filename)
        assert config.max_workers is None
        assert config.timestamp_format == DEFAULT_TIMESTAMP_FORMAT
        assert config.output_directory is None

    finally:
        os.remove(filename)


def test_write_new_config_early_exit_when_exists() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == ""

    finally:
        os.remove(filename)
