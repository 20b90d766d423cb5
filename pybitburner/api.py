"""Remote API server for the Bitburner game.

The game connects to the bridge as a WebSocket client. The bridge then acts as
the JSON-RPC 2.0 *caller*: it sends requests over the game's connection and
correlates the responses by id.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, TypedDict

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from .exceptions import (
    BitburnerNotConnectedError,
    BitburnerProtocolError,
    BitburnerRemoteError,
    BitburnerTimeoutError,
)
from .utils import DEFAULT_PORT, DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

# Close code sent to a second game connection
POLICY_VIOLATION = 1008


class RemoteFileEntry(TypedDict):
    filename: str
    content: str


class RemoteFileService(Protocol):
    """File operations the sync core needs from the game."""

    async def get_file_names(self, server: str) -> list[str]: ...

    async def get_file(self, server: str, filename: str) -> str: ...

    async def push_file(self, server: str, filename: str, content: str) -> None: ...

    async def delete_file(self, server: str, filename: str) -> None: ...

    async def get_all_files(self, server: str) -> list[RemoteFileEntry]: ...


class ConnectionEventType(str, Enum):
    """Connection lifecycle notifications produced by the server."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    REJECTED = "rejected"
    """A second game tried to connect while one is attached"""


@dataclass
class ConnectionEvent:
    """A queued connection lifecycle notification."""

    type: ConnectionEventType
    error: Optional[Exception] = None


class BitburnerServer:
    """WebSocket server that exposes the game's files as async methods.

    Only one game connection is allowed at a time. Connection changes are
    queued and read with :meth:`next_event`.

    Examples:
        >>> async with BitburnerServer(port=12525) as server:
        ...     event = await server.next_event()
        ...     names = await server.get_file_names("home")
    """

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        host: Optional[str] = "localhost",
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """Initialize the server (does not start listening).

        Args:
            port: Port to listen on
            host: Interface to bind, None for all interfaces
            request_timeout: Seconds to wait for each response
        """
        self.port = port
        self.host = host
        self.request_timeout = request_timeout

        self._server: Optional[Server] = None
        self._websocket: Optional[ServerConnection] = None
        self._last_message_id = 0
        self._pending: dict[int, tuple[str, asyncio.Future]] = {}
        self._events: asyncio.Queue[ConnectionEvent] = asyncio.Queue()

    @property
    def is_connected(self) -> bool:
        return self._websocket is not None

    async def start(self) -> None:
        """Start listening for the game."""
        self._server = await serve(self._handle_connection, self.host, self.port)
        logger.info(f"Listening for Bitburner on {self.host or '*'}:{self.port}")

    async def stop(self) -> None:
        """Close the listening socket and any game connection."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def __aenter__(self) -> "BitburnerServer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def next_event(self) -> ConnectionEvent:
        """Wait for the next connection lifecycle event."""
        return await self._events.get()

    # ------------------------------------------------------------------
    # Remote file operations
    # ------------------------------------------------------------------

    async def push_file(self, server: str, filename: str, content: str) -> None:
        await self._jsonrpc(
            "pushFile", {"server": server, "filename": filename, "content": content}
        )

    async def get_file(self, server: str, filename: str) -> str:
        return await self._jsonrpc("getFile", {"server": server, "filename": filename})

    async def delete_file(self, server: str, filename: str) -> None:
        await self._jsonrpc("deleteFile", {"server": server, "filename": filename})

    async def get_file_names(self, server: str) -> list[str]:
        return await self._jsonrpc("getFileNames", {"server": server})

    async def get_all_files(self, server: str) -> list[RemoteFileEntry]:
        return await self._jsonrpc("getAllFiles", {"server": server})

    async def calculate_ram(self, server: str, filename: str) -> float:
        """Ask the game for the RAM cost of a script."""
        return await self._jsonrpc(
            "calculateRam", {"server": server, "filename": filename}
        )

    async def get_definition_file(self) -> str:
        """Fetch the NetscriptDefinitions.d.ts type definitions."""
        return await self._jsonrpc("getDefinitionFile", {})

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        if self._websocket is not None:
            error = BitburnerProtocolError(
                "Already connected to Bitburner. Multiple connections are not possible."
            )
            logger.error(str(error))
            await websocket.close(code=POLICY_VIOLATION, reason="Already connected")
            self._events.put_nowait(
                ConnectionEvent(ConnectionEventType.REJECTED, error=error)
            )
            return

        self._websocket = websocket
        logger.debug(f"Bitburner connected from {websocket.remote_address}")
        self._events.put_nowait(ConnectionEvent(ConnectionEventType.CONNECTED))

        try:
            async for message in websocket:
                self._handle_message(message)
        except ConnectionClosed as e:
            logger.debug(f"Connection closed with error: {e}")
        finally:
            self._websocket = None
            self._fail_pending(
                BitburnerNotConnectedError("Connection to Bitburner closed")
            )
            self._events.put_nowait(ConnectionEvent(ConnectionEventType.DISCONNECTED))

    def _handle_message(self, message: str | bytes) -> None:
        """Resolve the pending request a response belongs to."""
        try:
            response = json.loads(message)
        except ValueError:
            logger.warning(f"Ignoring invalid JSON message: {message!r}")
            return

        if not isinstance(response, dict):
            logger.warning(f"Ignoring unexpected message: {response!r}")
            return

        response_id = response.get("id")
        pending = None
        if isinstance(response_id, int):
            pending = self._pending.get(response_id)
        if pending is None:
            logger.debug(f"Ignoring response with unknown id: {response_id!r}")
            return

        method, future = pending
        if future.done():
            return

        error = response.get("error")
        if error:
            if isinstance(error, dict):
                error = error.get("message") or json.dumps(error)
            future.set_exception(BitburnerRemoteError(str(error), method=method))
        else:
            future.set_result(response.get("result"))

    def _fail_pending(self, error: Exception) -> None:
        for method, future in self._pending.values():
            if not future.done():
                future.set_exception(
                    BitburnerNotConnectedError(str(error), method=method)
                )
        self._pending.clear()

    async def _jsonrpc(self, method: str, params: dict[str, Any]) -> Any:
        """Send a JSON-RPC request and wait for its response.

        Args:
            method: Remote method name
            params: Method parameters

        Returns:
            The response's result field

        Raises:
            BitburnerNotConnectedError: If no game is connected or it disconnects
            BitburnerRemoteError: If the game reports an error
            BitburnerTimeoutError: If no response arrives in time
        """
        websocket = self._websocket
        if websocket is None:
            raise BitburnerNotConnectedError("Not connected to Bitburner", method=method)

        request_id = self._last_message_id
        self._last_message_id += 1

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = (method, future)
        logger.debug("Request #%d: %s", request_id, method)

        try:
            await websocket.send(
                json.dumps(
                    {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
                )
            )
            return await asyncio.wait_for(future, self.request_timeout)
        except ConnectionClosed as e:
            raise BitburnerNotConnectedError(
                "Connection to Bitburner closed", method=method
            ) from e
        except asyncio.TimeoutError as e:
            raise BitburnerTimeoutError(
                f"No response to {method} within {self.request_timeout}s",
                method=method,
            ) from e
        finally:
            self._pending.pop(request_id, None)
