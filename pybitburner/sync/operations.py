"""File operations applied while reconciling changes."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import BitburnerLocalIOError
from ..utils import DEFAULT_SERVER, resolve_within, write_text_file

if TYPE_CHECKING:
    from ..api import RemoteFileService


class SyncOperations:
    """Uniform upload/download/delete operations for both sides."""

    def __init__(
        self,
        remote: RemoteFileService,
        base_dir: Path,
        remote_server: str = DEFAULT_SERVER,
    ):
        """Initialize sync operations.

        Args:
            remote: Remote file service to push to and delete from
            base_dir: Local directory files are written to and deleted from
            remote_server: Game host whose files are synchronized
        """
        self.remote = remote
        self.base_dir = Path(base_dir)
        self.remote_server = remote_server

    def local_path(self, relative_path: str) -> Path:
        """Map a relative path to its file below base_dir.

        Raises:
            BitburnerLocalIOError: If the path would leave base_dir
        """
        try:
            return resolve_within(self.base_dir, relative_path)
        except ValueError as e:
            raise BitburnerLocalIOError(str(e), path=relative_path) from e

    async def upload_file(self, relative_path: str, content: str) -> None:
        """Push a file's content to the game."""
        await self.remote.push_file(self.remote_server, relative_path, content)

    async def download_file(self, relative_path: str, content: str) -> Path:
        """Write content received from the game to the local directory.

        Parent directories are created as needed.

        Returns:
            Path of the written file
        """
        local_path = self.local_path(relative_path)
        try:
            await asyncio.to_thread(write_text_file, local_path, content)
        except OSError as e:
            raise BitburnerLocalIOError(
                f"Cannot write {relative_path}: {e}", path=relative_path
            ) from e
        return local_path

    async def delete_remote(self, relative_path: str) -> None:
        """Delete a file in the game."""
        await self.remote.delete_file(self.remote_server, relative_path)

    async def delete_local(self, relative_path: str) -> None:
        """Delete a local file."""
        local_path = self.local_path(relative_path)
        try:
            await asyncio.to_thread(local_path.unlink)
        except OSError as e:
            raise BitburnerLocalIOError(
                f"Cannot delete {relative_path}: {e}", path=relative_path
            ) from e
