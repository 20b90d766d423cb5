"""CLI interface for the Bitburner bridge."""

import asyncio
import logging
from typing import Any, Optional

import click

from .bridge import BitburnerBridge
from .cli_display import SyncEventDisplay
from .config import BridgeConfig, get_config_path, load_config, save_config
from .exceptions import BitburnerConfigError, BitburnerError
from .output import OutputFormatter
from .sync import MismatchPolicy


def build_config(overrides: dict[str, Any]) -> BridgeConfig:
    """Merge command line options over the config file and defaults.

    Args:
        overrides: Option values; None (or empty tuples) mean "not given"

    Returns:
        Validated BridgeConfig

    Raises:
        BitburnerConfigError: If the merged settings are invalid
    """
    data = load_config().to_dict()
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        data[key] = list(value) if isinstance(value, tuple) else value

    config = BridgeConfig.from_dict(data)
    config.validate()
    return config


@click.group()
@click.option("--port", type=int, default=None, help="Port to listen for Bitburner on.")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="The local directory to synchronize files from.",
)
@click.option(
    "--def-file",
    default=None,
    help="The definition file to write to. Set to 'skip' to skip writing the file.",
)
@click.option(
    "--poll-delay-ms",
    type=int,
    default=None,
    help="The delay in milliseconds between polling for file changes.",
)
@click.option(
    "--ignore",
    multiple=True,
    help="Local and remote files or directories that start with this will not "
    "be synced. Can be given multiple times.",
)
@click.option(
    "--on-mismatch",
    type=click.Choice([p.value for p in MismatchPolicy], case_sensitive=False),
    default=None,
    help="Action to take on file mismatch on first connection.",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pybitburner")
@click.pass_context
def main(
    ctx: Any,
    port: Optional[int],
    base_dir: Optional[str],
    def_file: Optional[str],
    poll_delay_ms: Optional[int],
    ignore: tuple[str, ...],
    on_mismatch: Optional[str],
    quiet: bool,
    verbose: bool,
) -> None:
    """pybitburner - Synchronize files with the Bitburner game.

    Options not given on the command line are read from pybitburner.json
    in the current directory, then from built-in defaults.
    """
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)
    ctx.obj["overrides"] = {
        "port": port,
        "base_dir": base_dir,
        "def_file": def_file,
        "poll_delay_ms": poll_delay_ms,
        "ignore": ignore,
        "on_mismatch": on_mismatch,
    }

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pybitburner").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.pass_context
def run(ctx: Any) -> None:
    """Run the bridge server and begin synchronizing files."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        config = build_config(ctx.obj["overrides"])
    except BitburnerConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    display = SyncEventDisplay(out)
    bridge = BitburnerBridge(config, tracker=display.create_tracker())

    out.success("Press Ctrl+C to exit.")
    out.print("")
    display.waiting()

    try:
        asyncio.run(bridge.run())
    except KeyboardInterrupt:
        out.info("Stopped.")
    except BitburnerError as e:
        out.error(str(e))
        ctx.exit(1)
    except OSError as e:
        out.error(f"Cannot listen on port {config.port}: {e}")
        ctx.exit(1)


@main.command("save-config")
@click.pass_context
def save_config_command(ctx: Any) -> None:
    """Write the combined defaults and given options to pybitburner.json.

    These will be used as defaults for future runs.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        config = build_config(ctx.obj["overrides"])
        path = save_config(config, get_config_path())
    except BitburnerConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    out.success(f"Configuration saved to {path}")


if __name__ == "__main__":
    main()
