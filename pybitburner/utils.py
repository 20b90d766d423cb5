"""Utility functions and constants for the Bitburner bridge."""

import os
from pathlib import Path

# =============================================================================
# Defaults
# =============================================================================

# Port the bridge listens on for the game's Remote API connection
DEFAULT_PORT: int = 12525

# Remote host whose files are synchronized
DEFAULT_SERVER: str = "home"

DEFAULT_BASE_DIR: str = "./src"
DEFAULT_DEF_FILE: str = "./types/NetscriptDefinitions.d.ts"
DEFAULT_POLL_DELAY_MS: int = 500
DEFAULT_IGNORE: tuple[str, ...] = ("tmp/",)

# Seconds to wait for a JSON-RPC response before giving up
DEFAULT_REQUEST_TIMEOUT: float = 30.0

# Value of def_file that disables writing the definitions artifact
SKIP_DEF_FILE: str = "skip"

# Only these file types are synchronized
SOURCE_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".txt")


# =============================================================================
# Path helpers
# =============================================================================


def has_source_extension(path: str) -> bool:
    """Check whether a path names a synchronizable source file."""
    return path.endswith(SOURCE_EXTENSIONS)


def is_ignored_path(path: str, ignore: list[str]) -> bool:
    """Check whether a relative or remote path should be left out of snapshots.

    A path is ignored when it is not a recognized source file or when it starts
    with any of the ignore prefixes. Matching is case-sensitive.

    Args:
        path: Forward-slash relative path (local) or remote filename
        ignore: Path prefixes to ignore

    Returns:
        True if the path must not be synchronized
    """
    if not has_source_extension(path):
        return True
    return any(path.startswith(prefix) for prefix in ignore)


def resolve_within(base_dir: Path, relative_path: str) -> Path:
    """Resolve a relative path under base_dir.

    Args:
        base_dir: Directory the path must stay inside
        relative_path: Forward-slash path relative to base_dir

    Returns:
        Absolute path

    Raises:
        ValueError: If the path points outside base_dir
    """
    base = base_dir.resolve()
    target = (base / relative_path.lstrip("/")).resolve()
    if target != base and base not in target.parents:
        raise ValueError(f"Path escapes base directory: {relative_path}")
    return target


def display_path(path: Path) -> str:
    """Return path relative to the working directory when possible."""
    try:
        return Path(os.path.relpath(path)).as_posix()
    except ValueError:
        # Different drive on Windows
        return str(path)


def write_text_file(path: Path, content: str) -> None:
    """Write text as UTF-8 without newline translation, creating parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
