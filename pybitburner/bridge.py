"""Bridge between a local source directory and the Bitburner game."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .api import BitburnerServer, ConnectionEvent, ConnectionEventType
from .config import BridgeConfig
from .exceptions import BitburnerAPIError, BitburnerLocalIOError, BitburnerProtocolError
from .sync import (
    DirectoryScanner,
    SyncEngine,
    SyncEventTracker,
    SyncOperations,
    SyncScheduler,
)
from .utils import display_path, write_text_file

logger = logging.getLogger(__name__)


class BitburnerBridge:
    """Keeps a local directory and the game's home server in sync.

    A single loop handles both connection events and sync cycles:
    it waits for the next connection event, but no longer than the
    scheduler's next cycle is due.

    Examples:
        >>> bridge = BitburnerBridge(load_config(), tracker=SyncEventTracker(print))
        >>> asyncio.run(bridge.run())
    """

    def __init__(
        self,
        config: BridgeConfig,
        server: Optional[BitburnerServer] = None,
        tracker: Optional[SyncEventTracker] = None,
    ):
        """Initialize the bridge.

        Args:
            config: Bridge settings
            server: Remote API server (created from config.port if omitted)
            tracker: Receives all bridge events
        """
        self.config = config
        self.server = server or BitburnerServer(port=config.port)
        self.tracker = tracker or SyncEventTracker()

        base_dir = Path(config.base_dir).resolve()
        self.scanner = DirectoryScanner(base_dir, self.server, ignore=config.ignore)
        self.engine = SyncEngine(SyncOperations(self.server, base_dir), self.tracker)
        self.scheduler = SyncScheduler(
            self.scanner,
            self.engine,
            policy=config.on_mismatch,
            poll_delay_ms=config.poll_delay_ms,
            tracker=self.tracker,
        )

    async def run(self) -> None:
        """Serve until cancelled or a fatal error occurs.

        Raises:
            BitburnerMismatchError: Initial sync found mismatches under FAIL
            BitburnerProtocolError: A second game tried to connect
        """
        async with self.server:
            while True:
                await self.step()

    async def step(self) -> None:
        """Handle the next connection event, or run a cycle when one is due."""
        timeout = self.scheduler.seconds_until_next_cycle()
        try:
            event = await asyncio.wait_for(self.server.next_event(), timeout)
        except asyncio.TimeoutError:
            await self.scheduler.run_cycle()
            return
        await self.handle_connection_event(event)

    async def handle_connection_event(self, event: ConnectionEvent) -> None:
        """Drive the scheduler from a connection lifecycle event."""
        if event.type is ConnectionEventType.CONNECTED:
            self.scheduler.connect()
            self.tracker.connected()
            if not self.config.skip_definitions:
                await self.write_definitions()
            await self.scheduler.run_cycle()

        elif event.type is ConnectionEventType.DISCONNECTED:
            self.scheduler.disconnect()
            self.tracker.disconnected()

        elif event.type is ConnectionEventType.REJECTED:
            raise event.error or BitburnerProtocolError(
                "Multiple connections are not possible."
            )

    async def write_definitions(self) -> Optional[Path]:
        """Fetch the Netscript type definitions and write them to def_file.

        Failures are reported as error events and do not stop the bridge.

        Returns:
            Path written, or None on failure
        """
        file_path = Path(self.config.def_file).resolve()
        try:
            definitions = await self.server.get_definition_file()
            await asyncio.to_thread(write_text_file, file_path, definitions)
        except BitburnerAPIError as e:
            logger.warning(f"Fetching definitions failed: {e}")
            self.tracker.error(e)
            return None
        except OSError as e:
            error = BitburnerLocalIOError(
                f"Cannot write definitions to {file_path}: {e}", path=str(file_path)
            )
            logger.warning(str(error))
            self.tracker.error(error)
            return None

        self.tracker.definitions_written(display_path(file_path))
        return file_path
