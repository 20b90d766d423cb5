"""CLI display for bridge events.

This module renders the SyncEventInfo records produced by the bridge's
SyncEventTracker as one console line per event.
"""

from rich.markup import escape

from .output import OutputFormatter
from .sync import FileAction, SyncEvent, SyncEventInfo, SyncEventTracker

# (arrow, arrow style, label) per file action
_ACTION_STYLES: dict[FileAction, tuple[str, str, str]] = {
    FileAction.UPLOADED: ("↑", "green", "upload"),
    FileAction.DOWNLOADED: ("↓", "green", "download"),
    FileAction.LOCALLY_DELETED: ("✗", "red", "delete local"),
    FileAction.REMOTELY_DELETED: ("✗", "red", "delete remote"),
}


def _format_line(arrow: str, arrow_style: str, label: str, path: str) -> str:
    return (
        f"[{arrow_style}]{arrow}[/{arrow_style}]  "
        f"[bright_black]{label:<14}[/bright_black]"
        f"[blue underline]{escape(path)}[/blue underline]"
    )


class SyncEventDisplay:
    """Rich-based console display for bridge events."""

    def __init__(self, out: OutputFormatter):
        """Initialize the display.

        Args:
            out: Output formatter to write to
        """
        self.out = out

    def create_tracker(self) -> SyncEventTracker:
        """Create a SyncEventTracker that updates this display."""
        return SyncEventTracker(callback=self.handle_event)

    def waiting(self) -> None:
        self.out.info("Waiting for Bitburner to connect...")

    def handle_event(self, info: SyncEventInfo) -> None:
        """Render a single event."""
        if info.event is SyncEvent.CONNECTED:
            self.out.success("Bitburner connected.")

        elif info.event is SyncEvent.DISCONNECTED:
            self.out.print("[bright_red]Bitburner disconnected.[/bright_red]")
            self.waiting()

        elif info.event is SyncEvent.ERROR:
            message = str(info.error)
            if info.path:
                message = f"{info.path}: {message}"
            self.out.error(message)

        elif info.event is SyncEvent.FILE_CHANGES:
            if info.is_initial:
                self.out.info(
                    f"Initial sync: {len(info.changes)} file(s) differ."
                    if info.changes
                    else "Initial sync: everything is in sync."
                )

        elif info.event is SyncEvent.FILE_ACTION_TAKEN and info.action and info.path:
            arrow, style, label = _ACTION_STYLES[info.action]
            self.out.print(_format_line(arrow, style, label, info.path))

        elif info.event is SyncEvent.DEFINITIONS_WRITTEN and info.path:
            self.out.print(_format_line("←", "green", "definitions", info.path))
