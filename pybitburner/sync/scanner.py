"""Snapshot collection for the local directory and the game."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..exceptions import BitburnerLocalIOError
from ..utils import DEFAULT_SERVER, is_ignored_path

if TYPE_CHECKING:
    from ..api import RemoteFileService

logger = logging.getLogger(__name__)

Snapshot = dict[str, str]
"""Mapping of forward-slash relative path to full file content."""


def _read_text(path: Path) -> str:
    # newline="" keeps line endings exactly as stored
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


class DirectoryScanner:
    """Collects snapshots of both sides, applying the same ignore rules.

    Examples:
        >>> scanner = DirectoryScanner(Path("./src"), server, ignore=["tmp/"])
        >>> local = await scanner.scan_local()
        >>> remote = await scanner.scan_remote()
    """

    def __init__(
        self,
        base_dir: Path,
        remote: RemoteFileService,
        ignore: Optional[list[str]] = None,
        remote_server: str = DEFAULT_SERVER,
    ):
        """Initialize directory scanner.

        Args:
            base_dir: Local directory to synchronize
            remote: Remote file service to list game files from
            ignore: Path prefixes excluded on both sides (e.g. ["tmp/"])
            remote_server: Game host whose files are synchronized
        """
        self.base_dir = Path(base_dir)
        self.remote = remote
        self.ignore = list(ignore or [])
        self.remote_server = remote_server

    def should_ignore(self, relative_path: str) -> bool:
        """Check if a relative path is excluded from snapshots."""
        return is_ignored_path(relative_path, self.ignore)

    def _walk(self, directory: Path) -> list[Path]:
        files: list[Path] = []
        for item in directory.iterdir():
            if item.is_dir():
                files.extend(self._walk(item))
            elif item.is_file():
                files.append(item)
        return files

    def _list_local(self) -> list[tuple[Path, str]]:
        # The first download needs somewhere to land
        self.base_dir.mkdir(parents=True, exist_ok=True)

        entries = []
        for item in self._walk(self.base_dir):
            # Use as_posix() to ensure forward slashes on all platforms
            relative_path = item.relative_to(self.base_dir).as_posix()
            if self.should_ignore(relative_path):
                logger.debug(f"Ignoring local file: {relative_path}")
                continue
            entries.append((item, relative_path))
        return entries

    async def scan_local(self) -> Snapshot:
        """Read every synchronizable file below the base directory.

        Returns:
            Snapshot of the local side

        Raises:
            BitburnerLocalIOError: If the directory or a file cannot be read
        """
        try:
            entries = await asyncio.to_thread(self._list_local)
        except OSError as e:
            raise BitburnerLocalIOError(
                f"Cannot list local directory {self.base_dir}: {e}",
                path=str(self.base_dir),
            ) from e

        contents = await asyncio.gather(
            *(self._read_local(path, rel) for path, rel in entries)
        )
        snapshot = {rel: content for (_, rel), content in zip(entries, contents)}
        logger.debug(f"Local snapshot holds {len(snapshot)} file(s)")
        return snapshot

    async def _read_local(self, path: Path, relative_path: str) -> str:
        try:
            return await asyncio.to_thread(_read_text, path)
        except (OSError, UnicodeDecodeError) as e:
            raise BitburnerLocalIOError(
                f"Cannot read {relative_path}: {e}", path=relative_path
            ) from e

    async def scan_remote(self) -> Snapshot:
        """Fetch every synchronizable file from the game in one request.

        Returns:
            Snapshot of the remote side

        Raises:
            BitburnerAPIError: If the request fails or no game is connected
        """
        entries = await self.remote.get_all_files(self.remote_server)

        snapshot: Snapshot = {}
        for entry in entries:
            filename = entry["filename"]
            if self.should_ignore(filename):
                continue
            snapshot[filename] = entry["content"]

        logger.debug(
            "Remote snapshot holds %d of %d file(s)", len(snapshot), len(entries)
        )
        return snapshot
