"""Shared fixtures for pybitburner tests."""

import tempfile
from pathlib import Path
from typing import Optional

import pytest

from pybitburner.exceptions import BitburnerNotConnectedError, BitburnerRemoteError


class FakeRemote:
    """In-memory stand-in for the game's remote file service."""

    def __init__(self, files: Optional[dict[str, str]] = None):
        self.files: dict[str, str] = dict(files or {})
        self.connected = True
        self.calls: list[tuple[str, ...]] = []
        self.fail_push: set[str] = set()
        self.definitions = "declare const ns: NS;\n"

    def _check(self) -> None:
        if not self.connected:
            raise BitburnerNotConnectedError("Not connected to Bitburner")

    async def get_all_files(self, server: str) -> list[dict[str, str]]:
        self._check()
        self.calls.append(("getAllFiles", server))
        return [{"filename": f, "content": c} for f, c in self.files.items()]

    async def get_file_names(self, server: str) -> list[str]:
        self._check()
        self.calls.append(("getFileNames", server))
        return list(self.files)

    async def get_file(self, server: str, filename: str) -> str:
        self._check()
        self.calls.append(("getFile", server, filename))
        if filename not in self.files:
            raise BitburnerRemoteError(f"File {filename} not found", method="getFile")
        return self.files[filename]

    async def push_file(self, server: str, filename: str, content: str) -> None:
        self._check()
        self.calls.append(("pushFile", server, filename))
        if filename in self.fail_push:
            raise BitburnerRemoteError("Invalid filename", method="pushFile")
        self.files[filename] = content

    async def delete_file(self, server: str, filename: str) -> None:
        self._check()
        self.calls.append(("deleteFile", server, filename))
        if filename not in self.files:
            raise BitburnerRemoteError(
                f"File {filename} not found", method="deleteFile"
            )
        del self.files[filename]

    async def get_definition_file(self) -> str:
        self._check()
        self.calls.append(("getDefinitionFile",))
        return self.definitions

    def mutating_calls(self) -> list[tuple[str, ...]]:
        """Calls that changed remote files."""
        return [c for c in self.calls if c[0] in ("pushFile", "deleteFile")]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def remote():
    """Create an empty fake remote file service."""
    return FakeRemote()
