"""Snapshot comparison logic for sync operations."""

import logging
from dataclasses import dataclass
from typing import Optional

from .modes import ChangeSource, ChangeType
from .scanner import Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileChange:
    """Represents a change observed for one file on one side."""

    file: str
    """Relative path of the file"""

    source: ChangeSource
    """Side the change was observed on"""

    type: ChangeType
    """Kind of change"""

    content: Optional[str] = None
    """New full content (None for deletions)"""


class FileComparator:
    """Computes change lists between snapshots.

    All methods are pure: they never touch the filesystem or the game and
    never keep state between calls.
    """

    def initial_changes(self, local: Snapshot, remote: Snapshot) -> list[FileChange]:
        """Compare the first local and remote snapshots after a connect.

        Files missing on one side are reported as added from the side that has
        them. Files present on both sides with different content are reported
        twice, as an update from each side; the mismatch policy decides which
        one survives.

        Args:
            local: Local snapshot
            remote: Remote snapshot

        Returns:
            List of FileChange objects (local changes first)
        """
        changes: list[FileChange] = []
        changes.extend(self._one_sided_initial(ChangeSource.LOCAL, local, remote))
        changes.extend(self._one_sided_initial(ChangeSource.REMOTE, remote, local))
        logger.debug(f"Initial comparison found {len(changes)} change(s)")
        return changes

    def _one_sided_initial(
        self, source: ChangeSource, own: Snapshot, other: Snapshot
    ) -> list[FileChange]:
        changes = []
        for file, content in own.items():
            if file not in other:
                changes.append(FileChange(file, source, ChangeType.ADDED, content))
            elif other[file] != content:
                changes.append(FileChange(file, source, ChangeType.UPDATED, content))
        return changes

    def incremental_changes(
        self, source: ChangeSource, previous: Snapshot, current: Snapshot
    ) -> list[FileChange]:
        """Compare two consecutive snapshots of the same side.

        Args:
            source: Side both snapshots were taken from
            previous: Snapshot from the previous cycle
            current: Snapshot from this cycle

        Returns:
            Added and updated changes, followed by deletions
        """
        changes: list[FileChange] = []

        for file, content in current.items():
            if file not in previous:
                changes.append(FileChange(file, source, ChangeType.ADDED, content))
            elif previous[file] != content:
                changes.append(FileChange(file, source, ChangeType.UPDATED, content))

        for file in previous:
            if file not in current:
                changes.append(FileChange(file, source, ChangeType.DELETED))

        return changes

    @staticmethod
    def drop_converged(
        changes: list[FileChange], other_side: Snapshot
    ) -> list[FileChange]:
        """Remove changes the other side already reflects.

        A change whose resulting content equals the other side's current
        content for the same path needs no transfer. For deletions this means
        the file is already absent on the other side. Only used for
        incremental cycles.

        Args:
            changes: Changes observed on one side
            other_side: Current snapshot of the opposite side

        Returns:
            Changes that still have to be propagated
        """
        remaining = [c for c in changes if c.content != other_side.get(c.file)]
        dropped = len(changes) - len(remaining)
        if dropped:
            logger.debug(f"Dropped {dropped} already converged change(s)")
        return remaining

    @staticmethod
    def drop_echoes(
        changes: list[FileChange], written: dict[str, Optional[str]]
    ) -> list[FileChange]:
        """Remove changes that only observe the bridge's own writes.

        After the bridge uploads, downloads or deletes a file, the next
        snapshot of the target side shows that write as a change. It
        originated from the opposite side and must not travel back.

        Args:
            changes: Changes observed on one side
            written: Path to content the bridge wrote to that side in the
                previous cycle (None for deletions)

        Returns:
            Changes that did not originate from the bridge
        """
        remaining = [
            c
            for c in changes
            if c.file not in written or written[c.file] != c.content
        ]
        dropped = len(changes) - len(remaining)
        if dropped:
            logger.debug(f"Dropped {dropped} echo(es) of previous writes")
        return remaining

    @staticmethod
    def resolve_conflicts(
        changes: list[FileChange], winner: ChangeSource
    ) -> list[FileChange]:
        """Keep one side's changes for paths that changed on both sides.

        Applying both would swap the two versions between the sides. Paths
        changed on only one side are not affected. Only used for incremental
        cycles; initial mismatches are left to the mismatch policy.

        Args:
            changes: Filtered changes of both sides
            winner: Side whose change is kept for a conflicting path

        Returns:
            Changes with at most one source per path
        """
        sources: dict[str, set[ChangeSource]] = {}
        for change in changes:
            sources.setdefault(change.file, set()).add(change.source)

        remaining = [
            c for c in changes if len(sources[c.file]) == 1 or c.source is winner
        ]
        for change in changes:
            if change not in remaining:
                logger.warning(
                    f"{change.file} changed on both sides, keeping the "
                    f"{winner.value} version"
                )
        return remaining
