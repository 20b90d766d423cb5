"""pybitburner - Synchronize a local source directory with the Bitburner game."""

from .api import BitburnerServer, ConnectionEvent, ConnectionEventType
from .bridge import BitburnerBridge
from .config import BridgeConfig, load_config, save_config
from .exceptions import (
    BitburnerAPIError,
    BitburnerConfigError,
    BitburnerError,
    BitburnerLocalIOError,
    BitburnerMismatchError,
    BitburnerNotConnectedError,
    BitburnerProtocolError,
    BitburnerRemoteError,
    BitburnerTimeoutError,
)

__all__ = [
    "BitburnerBridge",
    "BitburnerServer",
    "BridgeConfig",
    "ConnectionEvent",
    "ConnectionEventType",
    "load_config",
    "save_config",
    "BitburnerError",
    "BitburnerAPIError",
    "BitburnerConfigError",
    "BitburnerLocalIOError",
    "BitburnerMismatchError",
    "BitburnerNotConnectedError",
    "BitburnerProtocolError",
    "BitburnerRemoteError",
    "BitburnerTimeoutError",
]
