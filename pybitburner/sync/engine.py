"""Reconciliation of change lists into file operations."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from ..exceptions import BitburnerError, BitburnerMismatchError
from .comparator import FileChange
from .events import SyncEventTracker
from .modes import ChangeSource, ChangeType, FileAction, MismatchPolicy
from .operations import SyncOperations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileActionResult:
    """An operation that was applied successfully."""

    path: str
    action: FileAction
    content: Optional[str] = None
    """Content the target side now holds (None after a deletion)"""

    @property
    def target(self) -> ChangeSource:
        """Side that was modified by this operation."""
        if self.action in (FileAction.UPLOADED, FileAction.REMOTELY_DELETED):
            return ChangeSource.REMOTE
        return ChangeSource.LOCAL


class SyncEngine:
    """Turns change lists into uploads, downloads and deletions.

    A change is only ever applied to the side it did not come from: local
    changes go to the game, remote changes go to the local directory.
    """

    def __init__(
        self,
        operations: SyncOperations,
        tracker: Optional[SyncEventTracker] = None,
    ):
        """Initialize sync engine.

        Args:
            operations: File operations used to apply changes
            tracker: Receives a file_action_taken or error event per change
        """
        self.operations = operations
        self.tracker = tracker or SyncEventTracker()

    @staticmethod
    def check_mismatches(
        changes: list[FileChange], is_initial: bool, policy: MismatchPolicy
    ) -> None:
        """Refuse an initial sync with mismatched files under the FAIL policy.

        Raises:
            BitburnerMismatchError: Listing every path that differs
        """
        if not is_initial or policy is not MismatchPolicy.FAIL:
            return

        mismatched = sorted({c.file for c in changes if c.type is ChangeType.UPDATED})
        if mismatched:
            raise BitburnerMismatchError(mismatched)

    @staticmethod
    def drop_non_authoritative(
        changes: list[FileChange], is_initial: bool, policy: MismatchPolicy
    ) -> list[FileChange]:
        """Keep one side's copy of each file that differs at initial sync.

        The initial comparison reports a mismatched file as an update from
        both sides. UPLOAD keeps the local update, DOWNLOAD keeps the remote
        one. Added and deleted changes always pass.

        Args:
            changes: Changes to filter
            is_initial: Whether this is the first cycle after a connect
            policy: Mismatch policy

        Returns:
            Changes to apply
        """
        winner = policy.authoritative_source
        if not is_initial or winner is None:
            return list(changes)

        return [
            c for c in changes if c.type is not ChangeType.UPDATED or c.source is winner
        ]

    async def reconcile(
        self,
        changes: list[FileChange],
        is_initial: bool,
        policy: MismatchPolicy,
    ) -> list[FileActionResult]:
        """Apply a change list.

        Different paths are processed concurrently, changes to the same path
        in order. A failing change is reported and does not stop the others.

        Args:
            changes: Changes from this cycle
            is_initial: Whether this is the first cycle after a connect
            policy: Mismatch policy for initial cycles

        Returns:
            Operations that succeeded

        Raises:
            BitburnerMismatchError: On an initial mismatch under FAIL policy
                (nothing is applied)
        """
        self.check_mismatches(changes, is_initial, policy)
        selected = self.drop_non_authoritative(changes, is_initial, policy)
        if not selected:
            return []

        by_path: dict[str, list[FileChange]] = {}
        for change in selected:
            by_path.setdefault(change.file, []).append(change)

        start = time.time()
        per_path = await asyncio.gather(
            *(self._apply_path(path, path_changes) for path, path_changes in by_path.items())
        )
        results = [result for path_results in per_path for result in path_results]
        logger.debug(
            "Applied %d of %d change(s) in %.2fs",
            len(results),
            len(selected),
            time.time() - start,
        )
        return results

    async def _apply_path(
        self, path: str, changes: list[FileChange]
    ) -> list[FileActionResult]:
        results = []
        for change in changes:
            try:
                action = await self._apply_change(change)
            except BitburnerError as e:
                logger.error(f"Failed to sync {path}: {e}")
                self.tracker.error(e, path=path)
                continue
            results.append(FileActionResult(path, action, change.content))
            self.tracker.file_action_taken(path, action)
        return results

    async def _apply_change(self, change: FileChange) -> FileAction:
        """Dispatch a change by type and source."""
        if change.type is ChangeType.DELETED:
            if change.source is ChangeSource.LOCAL:
                await self.operations.delete_remote(change.file)
                return FileAction.REMOTELY_DELETED
            await self.operations.delete_local(change.file)
            return FileAction.LOCALLY_DELETED

        content = change.content if change.content is not None else ""
        if change.source is ChangeSource.LOCAL:
            logger.debug(f"Uploading {change.file}...")
            await self.operations.upload_file(change.file, content)
            return FileAction.UPLOADED

        logger.debug(f"Downloading {change.file}...")
        await self.operations.download_file(change.file, content)
        return FileAction.DOWNLOADED
