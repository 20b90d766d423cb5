"""Observable events produced while bridging files.

The sync components report what they do through a SyncEventTracker. The
tracker turns each report into a SyncEventInfo and hands it to a single
callback, typically a console display.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from .modes import FileAction

if TYPE_CHECKING:
    from .comparator import FileChange

logger = logging.getLogger(__name__)


class SyncEvent(str, Enum):
    """Kinds of events emitted by the bridge."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    FILE_CHANGES = "file_changes"
    FILE_ACTION_TAKEN = "file_action_taken"
    DEFINITIONS_WRITTEN = "definitions_written"


@dataclass
class SyncEventInfo:
    """Payload of a single emitted event."""

    event: SyncEvent
    changes: list["FileChange"] = field(default_factory=list)
    is_initial: bool = False
    path: Optional[str] = None
    action: Optional[FileAction] = None
    error: Optional[Exception] = None


class SyncEventTracker:
    """Funnels bridge events into one callback."""

    def __init__(self, callback: Optional[Callable[[SyncEventInfo], None]] = None):
        self.callback = callback

    def _emit(self, info: SyncEventInfo) -> None:
        if self.callback is None:
            return
        try:
            self.callback(info)
        except Exception:
            # Callback errors are logged, never raised
            logger.exception(f"Event callback failed for {info.event.value}")

    def connected(self) -> None:
        self._emit(SyncEventInfo(SyncEvent.CONNECTED))

    def disconnected(self) -> None:
        self._emit(SyncEventInfo(SyncEvent.DISCONNECTED))

    def error(self, error: Exception, path: Optional[str] = None) -> None:
        self._emit(SyncEventInfo(SyncEvent.ERROR, error=error, path=path))

    def file_changes(self, changes: list["FileChange"], is_initial: bool) -> None:
        self._emit(
            SyncEventInfo(
                SyncEvent.FILE_CHANGES, changes=list(changes), is_initial=is_initial
            )
        )

    def file_action_taken(self, path: str, action: FileAction) -> None:
        self._emit(SyncEventInfo(SyncEvent.FILE_ACTION_TAKEN, path=path, action=action))

    def definitions_written(self, path: str) -> None:
        self._emit(SyncEventInfo(SyncEvent.DEFINITIONS_WRITTEN, path=path))
