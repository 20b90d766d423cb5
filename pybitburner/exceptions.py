"""Exceptions raised by the Bitburner bridge."""

from typing import Optional


class BitburnerError(Exception):
    """Base class for all bridge errors."""


class BitburnerConfigError(BitburnerError):
    """Configuration file is unreadable or holds invalid values."""


class BitburnerAPIError(BitburnerError):
    """A request to the remote file service failed."""

    def __init__(self, message: str, method: Optional[str] = None):
        super().__init__(message)
        self.method = method


class BitburnerNotConnectedError(BitburnerAPIError):
    """No game connection is active (or it closed mid-request)."""


class BitburnerRemoteError(BitburnerAPIError):
    """The game answered a request with an explicit error."""


class BitburnerTimeoutError(BitburnerAPIError):
    """The game did not answer a request in time."""


class BitburnerProtocolError(BitburnerError):
    """The peer broke the connection protocol (e.g. a second connection)."""


class BitburnerLocalIOError(BitburnerError):
    """Reading, writing or deleting a local file failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class BitburnerMismatchError(BitburnerError):
    """Initial sync found files that differ on both sides under the 'fail' policy."""

    def __init__(self, paths: list[str]):
        self.paths = list(paths)
        super().__init__(
            "The --on-mismatch option is set to 'fail', and there are file "
            "mismatches between local and Bitburner.\n"
            "The following files are not the same locally and in Bitburner:\n"
            + "\n".join(self.paths)
            + "\nTo continue, either:\n"
            "  1. Delete one of the edited files and let pybitburner "
            "download/upload the other automatically.\n"
            "  2. Change the --on-mismatch option to 'upload' to overwrite the "
            "files in Bitburner for all mismatches.\n"
            "  3. Change the --on-mismatch option to 'download' to overwrite "
            "the local files for all mismatches."
        )
