"""Sync engine for pybitburner - snapshot, compare and reconcile both sides."""

from .comparator import FileChange, FileComparator
from .engine import FileActionResult, SyncEngine
from .events import SyncEvent, SyncEventInfo, SyncEventTracker
from .modes import ChangeSource, ChangeType, FileAction, MismatchPolicy
from .operations import SyncOperations
from .scanner import DirectoryScanner, Snapshot
from .scheduler import SchedulerState, SyncScheduler

__all__ = [
    "SyncEngine",
    "SyncScheduler",
    "SchedulerState",
    "SyncOperations",
    "DirectoryScanner",
    "Snapshot",
    "FileComparator",
    "FileChange",
    "FileActionResult",
    "ChangeSource",
    "ChangeType",
    "FileAction",
    "MismatchPolicy",
    "SyncEvent",
    "SyncEventInfo",
    "SyncEventTracker",
]
