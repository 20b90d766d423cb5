"""Enumerations shared by the sync components."""

from enum import Enum


class MismatchPolicy(str, Enum):
    """How to resolve files that differ on both sides at initial sync.

    Applied only to the first reconciliation after each connect.
    """

    UPLOAD = "upload"
    """Local copy wins; overwrite the file in the game"""

    DOWNLOAD = "download"
    """Game copy wins; overwrite the local file"""

    FAIL = "fail"
    """Refuse to continue and list the mismatched files"""

    @classmethod
    def from_string(cls, value: str) -> "MismatchPolicy":
        """Parse a policy name (case-insensitive).

        Args:
            value: One of "upload", "download" or "fail"

        Returns:
            MismatchPolicy

        Raises:
            ValueError: If the name is not a known policy
        """
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Invalid mismatch policy '{value}'. Valid values: {valid}"
            ) from None

    @property
    def authoritative_source(self) -> "ChangeSource | None":
        """Side whose copy wins a same-path mismatch, or None for FAIL."""
        if self is MismatchPolicy.UPLOAD:
            return ChangeSource.LOCAL
        if self is MismatchPolicy.DOWNLOAD:
            return ChangeSource.REMOTE
        return None


class ChangeSource(str, Enum):
    """Side a change was observed on."""

    LOCAL = "local"
    REMOTE = "remote"

    @property
    def other(self) -> "ChangeSource":
        return ChangeSource.REMOTE if self is ChangeSource.LOCAL else ChangeSource.LOCAL


class ChangeType(str, Enum):
    """Kind of transition observed for a file."""

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


class FileAction(str, Enum):
    """Effect applied while reconciling a change."""

    UPLOADED = "uploaded"
    """File content pushed to the game"""

    DOWNLOADED = "downloaded"
    """File content written to the local directory"""

    LOCALLY_DELETED = "locally_deleted"
    """Local file removed because it was deleted in the game"""

    REMOTELY_DELETED = "remotely_deleted"
    """Game file removed because it was deleted locally"""
