from __future__ import annotations

import dataclasses
import enum


class VisitOutcome(enum.Enum):
    """How the walker treated a single path."""

    VISITED = "visited"
    SKIPPED_SUBTREE = "skipped_subtree"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class VisitResult:
    """The tagged result of visiting one path during a walk."""

    path: str
    outcome: VisitOutcome
    reason: str = ""

    @property
    def visited(self) -> bool:
        return self.outcome is VisitOutcome.VISITED


@dataclasses.dataclass(frozen=True)
class DiscoveredEntry:
    """A path found by the walker, file or directory."""

    path: str
    name: str


@dataclasses.dataclass(frozen=True)
class FileRecord:
    """A single regular file of the inventory. Timestamps are POSIX seconds."""

    file_name: str
    absolute_path: str
    creation_time: float
    modified_time: float
    size_bytes: int


@dataclasses.dataclass(frozen=True)
class InventorySummary:
    """The outcome of a complete inventory run."""

    report_path: str
    error_path: str
    discovered_count: int
    record_count: int
    diagnostic_count: int
    success: bool
