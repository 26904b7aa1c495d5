from __future__ import annotations

import logging
import os
import stat
from typing import TYPE_CHECKING
from typing import Iterator

from .inventorymodel import DiscoveredEntry
from .inventorymodel import VisitOutcome
from .inventorymodel import VisitResult

if TYPE_CHECKING:
    from typing import Protocol

    class _ErrorSink(Protocol):
        def log(self, message: str) -> None:
            ...


class TreeWalker:
    """Walk a directory tree, skipping what cannot be read instead of failing."""

    logger = logging.getLogger(__name__)

    def __init__(self, sink: _ErrorSink) -> None:
        """
        Initialize a new TreeWalker.

        Args:
            sink: Receives one diagnostic line for every skipped or failed path.
        """
        self._sink = sink

    def walk(self, root: str) -> list[DiscoveredEntry]:
        """
        Walk the tree under root and return every visited path in order.

        Both files and directories are returned, root included. Paths that
        were skipped or failed are reported to the sink instead. Never raises
        on filesystem errors; on an unexpected failure the entries collected
        so far are returned.
        """
        entries: list[DiscoveredEntry] = []
        skipped = 0

        try:
            for result in self.visit(root):
                if result.visited:
                    name = os.path.basename(result.path) or result.path
                    entries.append(DiscoveredEntry(result.path, name))
                else:
                    skipped += 1
                    self._sink.log(result.reason)

        except OSError as error:
            self.logger.debug("Walk of %s aborted: %s", root, error)
            self._sink.log(f"Error walking file tree: {error}")

        self.logger.debug("Visited %s paths, skipped %s", len(entries), skipped)

        return entries

    def visit(self, root: str) -> Iterator[VisitResult]:
        """
        Yield a tagged result for every path reached from root.

        Directories are yielded before their children (depth-first, pre-order)
        and siblings are visited in name order. Symbolic links are never
        followed. Unreadable or access-denied directories are yielded as
        SKIPPED_SUBTREE and nothing below them is listed.
        """
        stack = [root]

        while stack:
            path = stack.pop()
            result, children = self._visit_path(path, follow_links=path == root)
            yield result

            # Reversed so the first name in order is popped next
            stack.extend(os.path.join(path, name) for name in reversed(children))

    def _visit_path(
        self,
        path: str,
        *,
        follow_links: bool = False,
    ) -> tuple[VisitResult, list[str]]:
        """Visit a single path, returning its result and any child names."""
        try:
            mode = os.stat(path).st_mode if follow_links else os.lstat(path).st_mode

        except PermissionError:
            return self._access_denied(path), []

        except OSError as error:
            return self._failed(path, error), []

        if not stat.S_ISDIR(mode):
            return VisitResult(path, VisitOutcome.VISITED), []

        if not os.access(path, os.R_OK):
            return (
                VisitResult(
                    path,
                    VisitOutcome.SKIPPED_SUBTREE,
                    f"Skipping unreadable directory: {path}",
                ),
                [],
            )

        try:
            children = sorted(os.listdir(path))

        except PermissionError:
            return self._access_denied(path), []

        except OSError as error:
            return self._failed(path, error), []

        return VisitResult(path, VisitOutcome.VISITED), children

    @staticmethod
    def _access_denied(path: str) -> VisitResult:
        return VisitResult(
            path,
            VisitOutcome.SKIPPED_SUBTREE,
            f"Access denied (skipped): {path}",
        )

    @staticmethod
    def _failed(path: str, error: OSError) -> VisitResult:
        return VisitResult(
            path,
            VisitOutcome.FAILED,
            f"Error visiting: {path} - {error}",
        )
