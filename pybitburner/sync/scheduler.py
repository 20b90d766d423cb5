"""Periodic collect, compare and reconcile cycle.

The scheduler is the only owner of the previous-cycle snapshots. Everything
it calls (scanner, comparator, engine) is stateless with respect to sync
history, so resetting the scheduler is enough to start over cleanly.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from ..exceptions import (
    BitburnerAPIError,
    BitburnerLocalIOError,
    BitburnerNotConnectedError,
    BitburnerProtocolError,
)
from .comparator import FileChange, FileComparator
from .engine import SyncEngine
from .events import SyncEventTracker
from .modes import ChangeSource, MismatchPolicy
from .scanner import DirectoryScanner, Snapshot

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    """No game connected"""

    SYNCING = "syncing"
    """Game connected, cycles running"""


class SyncScheduler:
    """Runs sync cycles at a fixed delay while the game is connected.

    The scheduler does not sleep by itself. Its owner asks
    :meth:`seconds_until_next_cycle` how long to wait, waits for that long
    (or for a connection event), and then calls :meth:`run_cycle`. The timer
    is re-armed only after a cycle completes, so cycles never overlap.
    """

    def __init__(
        self,
        scanner: DirectoryScanner,
        engine: SyncEngine,
        policy: MismatchPolicy,
        poll_delay_ms: int,
        comparator: Optional[FileComparator] = None,
        tracker: Optional[SyncEventTracker] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the scheduler in the idle state.

        Args:
            scanner: Collects local and remote snapshots
            engine: Applies change lists
            policy: Mismatch policy for the first cycle after each connect;
                its side also wins later same-cycle edits on both sides
                (local under FAIL)
            poll_delay_ms: Delay between the end of a cycle and the next one
            comparator: Computes change lists (default: FileComparator())
            tracker: Receives file_changes and error events
            clock: Monotonic time source in seconds
        """
        self.scanner = scanner
        self.engine = engine
        self.policy = policy
        self.poll_delay = poll_delay_ms / 1000
        self.comparator = comparator or FileComparator()
        self.tracker = tracker or SyncEventTracker()
        self._clock = clock

        self.state = SchedulerState.IDLE
        self._epoch = 0
        self._next_cycle_at: Optional[float] = None
        self._initialized = False
        self._local_files: Snapshot = {}
        self._remote_files: Snapshot = {}
        self._written: dict[ChangeSource, dict[str, Optional[str]]] = {}

    @property
    def is_initial(self) -> bool:
        """Whether the next cycle compares both sides without history."""
        return not self._initialized

    @property
    def local_files(self) -> Snapshot:
        """Local snapshot stored by the last completed cycle."""
        return dict(self._local_files)

    @property
    def remote_files(self) -> Snapshot:
        """Remote snapshot stored by the last completed cycle."""
        return dict(self._remote_files)

    def _reset(self) -> None:
        self._initialized = False
        self._local_files = {}
        self._remote_files = {}
        self._written = {}

    def connect(self) -> None:
        """Enter the syncing state; the first cycle is due immediately.

        Raises:
            BitburnerProtocolError: If a game is already connected
        """
        if self.state is SchedulerState.SYNCING:
            raise BitburnerProtocolError(
                "Already connected to Bitburner. Multiple connections are not possible."
            )
        self.state = SchedulerState.SYNCING
        self._reset()
        self._next_cycle_at = self._clock()
        logger.debug("Scheduler syncing, initial cycle due")

    def disconnect(self) -> None:
        """Return to idle, cancel the timer and forget all history."""
        self.state = SchedulerState.IDLE
        self._epoch += 1
        self._next_cycle_at = None
        self._reset()
        logger.debug("Scheduler idle, sync history cleared")

    def seconds_until_next_cycle(self) -> Optional[float]:
        """Time until the next cycle is due, or None if none is scheduled."""
        if self.state is SchedulerState.IDLE or self._next_cycle_at is None:
            return None
        return max(0.0, self._next_cycle_at - self._clock())

    async def run_cycle(self) -> list[FileChange]:
        """Collect, compare, reconcile and store this cycle's snapshots.

        A failed collection leaves the stored snapshots untouched; the next
        cycle retries from them.

        Returns:
            Changes found in this cycle (empty if nothing ran)

        Raises:
            BitburnerMismatchError: On an initial mismatch under FAIL policy
        """
        if self.state is SchedulerState.IDLE:
            return []

        epoch = self._epoch
        self._next_cycle_at = None
        try:
            return await self._sync_once(epoch)
        finally:
            if epoch == self._epoch and self.state is SchedulerState.SYNCING:
                self._next_cycle_at = self._clock() + self.poll_delay

    async def _sync_once(self, epoch: int) -> list[FileChange]:
        try:
            local_files = await self.scanner.scan_local()
            remote_files = await self.scanner.scan_remote()
        except BitburnerNotConnectedError as e:
            logger.debug(f"Skipping cycle, game not connected: {e}")
            return []
        except (BitburnerAPIError, BitburnerLocalIOError) as e:
            logger.warning(f"Collecting files failed, retrying next cycle: {e}")
            self.tracker.error(e)
            return []

        is_initial = self.is_initial
        if is_initial:
            changes = self.comparator.initial_changes(local_files, remote_files)
        else:
            changes = self._incremental_changes(local_files, remote_files)

        self.tracker.file_changes(changes, is_initial)
        results = await self.engine.reconcile(changes, is_initial, self.policy)

        if epoch != self._epoch:
            logger.debug("Disconnected during cycle, discarding its snapshots")
            return changes

        # Store what was observed, not what was written
        self._local_files = local_files
        self._remote_files = remote_files
        self._initialized = True

        written: dict[ChangeSource, dict[str, Optional[str]]] = {}
        for result in results:
            written.setdefault(result.target, {})[result.path] = result.content
        self._written = written
        return changes

    def _incremental_changes(
        self, local_files: Snapshot, remote_files: Snapshot
    ) -> list[FileChange]:
        current = {ChangeSource.LOCAL: local_files, ChangeSource.REMOTE: remote_files}
        previous = {
            ChangeSource.LOCAL: self._local_files,
            ChangeSource.REMOTE: self._remote_files,
        }

        changes: list[FileChange] = []
        for source in (ChangeSource.LOCAL, ChangeSource.REMOTE):
            side_changes = self.comparator.incremental_changes(
                source, previous[source], current[source]
            )
            side_changes = self.comparator.drop_echoes(
                side_changes, self._written.get(source, {})
            )
            side_changes = self.comparator.drop_converged(
                side_changes, current[source.other]
            )
            changes.extend(side_changes)

        winner = self.policy.authoritative_source or ChangeSource.LOCAL
        return self.comparator.resolve_conflicts(changes, winner)
