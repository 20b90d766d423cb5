"""Configuration file handling for pybitburner.

Settings are stored as JSON in ``pybitburner.json`` in the working directory.
Values missing from the file (or empty) fall back to the defaults.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import BitburnerConfigError
from .sync.modes import MismatchPolicy
from .utils import (
    DEFAULT_BASE_DIR,
    DEFAULT_DEF_FILE,
    DEFAULT_IGNORE,
    DEFAULT_POLL_DELAY_MS,
    DEFAULT_PORT,
    SKIP_DEF_FILE,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "pybitburner.json"


@dataclass
class BridgeConfig:
    """Settings for a bridge run."""

    port: int = DEFAULT_PORT
    """Port to listen for Bitburner on"""

    base_dir: str = DEFAULT_BASE_DIR
    """Local directory to synchronize"""

    def_file: str = DEFAULT_DEF_FILE
    """Where to write the type definitions, or "skip" """

    poll_delay_ms: int = DEFAULT_POLL_DELAY_MS
    """Delay between sync cycles in milliseconds"""

    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    """Path prefixes that are never synchronized"""

    on_mismatch: MismatchPolicy = MismatchPolicy.FAIL
    """What to do when files differ on first connection"""

    @property
    def skip_definitions(self) -> bool:
        return self.def_file.lower() == SKIP_DEF_FILE

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            BitburnerConfigError: If a value is out of range
        """
        if not 0 < self.port < 65536:
            raise BitburnerConfigError(f"Invalid port: {self.port}")
        if self.poll_delay_ms <= 0:
            raise BitburnerConfigError(
                f"Poll delay must be positive, got {self.poll_delay_ms}"
            )
        if not self.base_dir:
            raise BitburnerConfigError("Base directory must not be empty")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = asdict(self)
        data["on_mismatch"] = self.on_mismatch.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BridgeConfig":
        """Create a config from a dictionary, using defaults for falsy values.

        Raises:
            BitburnerConfigError: If on_mismatch is not a known policy, a
                number is not numeric, or ignore is not a list of strings
        """
        defaults = cls()
        on_mismatch = data.get("on_mismatch") or defaults.on_mismatch
        try:
            policy = MismatchPolicy.from_string(
                on_mismatch.value
                if isinstance(on_mismatch, MismatchPolicy)
                else str(on_mismatch)
            )
        except ValueError as e:
            raise BitburnerConfigError(str(e)) from e

        ignore = data.get("ignore") or defaults.ignore
        if not isinstance(ignore, list) or not all(
            isinstance(prefix, str) for prefix in ignore
        ):
            raise BitburnerConfigError(
                f"ignore must be a list of path prefixes, got {ignore!r}"
            )

        return cls(
            port=_to_int("port", data.get("port") or defaults.port),
            base_dir=data.get("base_dir") or defaults.base_dir,
            def_file=data.get("def_file") or defaults.def_file,
            poll_delay_ms=_to_int(
                "poll_delay_ms", data.get("poll_delay_ms") or defaults.poll_delay_ms
            ),
            ignore=list(ignore),
            on_mismatch=policy,
        )


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise BitburnerConfigError(f"{name} must be a number, got {value!r}") from e


def get_config_path() -> Path:
    """Path of the configuration file in the working directory."""
    return Path.cwd() / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    """Load settings, falling back to defaults if the file does not exist.

    Args:
        path: Config file (defaults to ./pybitburner.json)

    Returns:
        BridgeConfig

    Raises:
        BitburnerConfigError: If the file cannot be read or parsed
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return BridgeConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise BitburnerConfigError(f"Cannot read {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise BitburnerConfigError(f"{config_path} must contain a JSON object")

    logger.debug(f"Loaded config from {config_path}")
    return BridgeConfig.from_dict(data)


def save_config(config: BridgeConfig, path: Optional[Path] = None) -> Path:
    """Write settings to the configuration file.

    Args:
        config: Settings to save
        path: Config file (defaults to ./pybitburner.json)

    Returns:
        Path the settings were written to
    """
    config_path = path or get_config_path()
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise BitburnerConfigError(f"Cannot write {config_path}: {e}") from e

    logger.debug(f"Saved config to {config_path}")
    return config_path
