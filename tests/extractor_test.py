from __future__ import annotations

import os
import sys
import time
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest
from pytest import LogCaptureFixture

from tree_inventory.extractor import Extractor
from tree_inventory.extractor import ReportFormatter
from tree_inventory.inventorymodel import DiscoveredEntry
from tree_inventory.inventorymodel import FileRecord

REAL_LSTAT = os.lstat


def _entry(path: Path) -> DiscoveredEntry:
    return DiscoveredEntry(str(path), path.name)


@pytest.fixture
def sink() -> MagicMock:
    return MagicMock()


@pytest.fixture
def files(tmp_path: Path) -> list[Path]:
    paths = []
    for index in range(8):
        path = tmp_path / f"file{index:02}.txt"
        path.write_bytes(b"x" * index)
        paths.append(path)
    return paths


def test_extract_reads_size_and_times(tmp_path: Path, sink: MagicMock) -> None:
    path = tmp_path / "a.txt"
    path.write_bytes(b"x" * 10)
    os.utime(path, (1_600_000_000, 1_600_000_000))

    records = Extractor(sink, max_workers=1).extract([_entry(path)])

    assert len(records) == 1
    assert records[0].file_name == "a.txt"
    assert records[0].absolute_path == str(path.absolute())
    assert records[0].size_bytes == 10
    assert records[0].modified_time == 1_600_000_000
    assert records[0].creation_time > 0


def test_extract_keeps_only_regular_files(
    tmp_path: Path,
    files: list[Path],
    sink: MagicMock,
) -> None:
    entries = [DiscoveredEntry(str(tmp_path), tmp_path.name)]
    entries.extend(_entry(path) for path in files)

    records = Extractor(sink).extract(entries)

    assert [record.file_name for record in records] == [path.name for path in files]
    sink.log.assert_not_called()


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_extract_drops_symlinks(tmp_path: Path, sink: MagicMock) -> None:
    target = tmp_path / "target.txt"
    target.write_text("hello")
    link = tmp_path / "link.txt"
    link.symlink_to(target)

    records = Extractor(sink).extract([_entry(link), _entry(target)])

    assert [record.file_name for record in records] == ["target.txt"]


def test_extract_preserves_discovery_order(files: list[Path], sink: MagicMock) -> None:
    # The first files finish last
    delays = {str(path): 0.05 * (len(files) - index) for index, path in enumerate(files)}

    def slow_lstat(path: str) -> os.stat_result:
        time.sleep(delays.get(path, 0))
        return REAL_LSTAT(path)

    with patch("tree_inventory.extractor.os.lstat", side_effect=slow_lstat):
        records = Extractor(sink, max_workers=4).extract([_entry(path) for path in files])

    assert [record.file_name for record in records] == [path.name for path in files]


def test_extract_reports_failed_file_and_continues(
    files: list[Path],
    sink: MagicMock,
    caplog: LogCaptureFixture,
) -> None:
    entries = [_entry(path) for path in files]
    files[3].unlink()

    records = Extractor(sink, max_workers=2).extract(entries)

    assert len(records) == len(files) - 1
    assert files[3].name not in [record.file_name for record in records]

    sink.log.assert_called_once()
    message = sink.log.call_args.args[0]
    assert message.startswith(f"Error accessing file attributes: {files[3]} - ")
    assert message in caplog.text


def test_extract_nothing(sink: MagicMock) -> None:
    assert Extractor(sink).extract([]) == []


def test_format_line() -> None:
    record = FileRecord("a.txt", "/root/a.txt", 0, 86400, 10)
    formatter = ReportFormatter("%Y-%m-%d %H:%M:%S", use_utc=True)

    result = formatter.format_line(record)

    assert result == "a.txt|/root/a.txt|1970-01-01 00:00:00|1970-01-02 00:00:00|10\n"


def test_format_timestamp_uses_local_zone_by_default() -> None:
    formatter = ReportFormatter("%Y-%m-%d %H:%M")
    expected = datetime.fromtimestamp(1_234_567_890).strftime("%Y-%m-%d %H:%M")

    assert formatter.format_timestamp(1_234_567_890) == expected


@pytest.mark.skipif(sys.platform == "win32", reason="tzset is not available")
def test_format_timestamp_resolves_zone_at_call_time(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    formatter = ReportFormatter("%H:%M")

    try:
        monkeypatch.setenv("TZ", "UTC")
        time.tzset()
        in_utc = formatter.format_timestamp(0)

        monkeypatch.setenv("TZ", "EST+05EDT,M3.2.0,M11.1.0")
        time.tzset()
        in_est = formatter.format_timestamp(0)

    finally:
        monkeypatch.undo()
        time.tzset()

    assert in_utc == "00:00"
    assert in_est == "19:00"
