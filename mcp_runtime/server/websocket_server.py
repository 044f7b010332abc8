"""
WebSocket Server - Serve a Dispatcher over WebSocket (aiohttp)

Module: server.websocket_server
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - aiohttp application with /ws upgrade route and / banner
  - One RequestContext per frame (peer address + bearer token)
  - Dispatch in the default executor, reply on the same socket
  - Expired handshake tokens closed with 1008 "Token expired"

ARCHITECTURE:
WebSocketServer is the server half of WebSocketTransport:
- HTTP server that upgrades to WebSocket on config.path
- One JSON-RPC message per text frame
- Dispatcher.handle() is synchronous and runs in the loop's executor,
  so slow handlers never block other connections
- Frames of one connection are handled in arrival order

SECURITY NOTES:
- Tokens are checked per request by the dispatcher's gate
- A token that is already expired at upgrade time closes the socket with
  policy violation (1008) so clients can refresh it
- No TLS, bind to localhost unless fronted by a proxy
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from aiohttp import WSCloseCode, WSMsgType, web

from ..core.constants import (
    DEFAULT_WS_HOST,
    DEFAULT_WS_PATH,
    DEFAULT_WS_PORT,
    MAX_MESSAGE_SIZE,
    TOKEN_EXPIRED_MARKER,
    WS_CLOSE_POLICY_VIOLATION,
)
from ..core.errors import AuthorizationError, TransportError
from ..security.client_context import RequestContext
from .dispatcher import Dispatcher


@dataclass
class WebSocketServerConfig:
    """WebSocket server configuration"""
    host: str = DEFAULT_WS_HOST
    port: int = DEFAULT_WS_PORT
    path: str = DEFAULT_WS_PATH
    read_timeout: Optional[float] = None
    write_timeout: float = 10.0
    max_message_size: int = MAX_MESSAGE_SIZE


class WebSocketServer:
    """
    Serves one Dispatcher to any number of WebSocket clients

    Typical usage:
        server = WebSocketServer(dispatcher, WebSocketServerConfig(port=0))
        await server.start()
        print(server.port)
        ...
        await server.stop()
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        config: Optional[WebSocketServerConfig] = None,
    ):
        self.dispatcher = dispatcher
        self.config = config or WebSocketServerConfig()
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.clients: Dict[str, web.WebSocketResponse] = {}
        self.logger = logging.getLogger("server.websocket")
        self.is_running = False

    @property
    def port(self) -> Optional[int]:
        """Bound TCP port (resolves port 0 after start)"""
        if self.runner is None or not self.runner.addresses:
            return None
        return self.runner.addresses[0][1]

    @property
    def url(self) -> Optional[str]:
        if self.port is None:
            return None
        return f"ws://{self.config.host}:{self.port}{self.config.path}"

    async def start(self) -> None:
        """
        Start listening

        Raises:
            TransportError: If the socket cannot be bound
        """
        if self.is_running:
            return

        self.app = web.Application()
        self.app.router.add_get(self.config.path, self._ws_handler)
        self.app.router.add_get("/", self._http_handler)

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.config.host, self.config.port)
        try:
            await site.start()
        except OSError as e:
            await self.runner.cleanup()
            self.runner = None
            self.logger.error(f"Server startup failed: {e}")
            raise TransportError(f"Cannot listen on {self.config.host}:{self.config.port}: {e}") from e

        self.is_running = True
        self.logger.info(f"WebSocket server started on {self.url}")

    async def stop(self) -> None:
        """Close all client connections and stop listening"""
        for ws in list(self.clients.values()):
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        self.clients.clear()

        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None

        self.is_running = False
        self.logger.info("WebSocket server stopped")

    def get_client_count(self) -> int:
        return len(self.clients)

    async def _http_handler(self, request: web.Request) -> web.Response:
        return web.Response(
            text=f"MCP WebSocket Server - Connect to {self.config.path}\n",
            status=200,
        )

    async def _ws_handler(self, request: web.Request) -> web.WebSocketResponse:
        """Handle one WebSocket connection until it closes"""
        client_id = str(uuid.uuid4())
        ws = web.WebSocketResponse(
            max_msg_size=self.config.max_message_size,
            receive_timeout=self.config.read_timeout,
        )
        await ws.prepare(request)

        peer = request.remote or "unknown"
        headers = dict(request.headers)
        self.logger.info(f"WebSocket client connected: {client_id} from {peer}")

        reason = self._handshake_rejection(RequestContext.from_headers(peer, headers))
        if reason is not None:
            self.logger.warning(f"Closing {client_id}: {reason}")
            await ws.close(code=WS_CLOSE_POLICY_VIOLATION, message=reason.encode("utf-8"))
            return ws

        self.clients[client_id] = ws
        loop = asyncio.get_running_loop()
        try:
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    context = RequestContext.from_headers(peer, headers)
                    context.metadata["client_id"] = client_id
                    reply = await loop.run_in_executor(
                        None, self.dispatcher.handle, msg.data, context
                    )
                    if reply is not None and not await self._send_reply(ws, client_id, reply):
                        break
                elif msg.type == WSMsgType.ERROR:
                    self.logger.error(f"WebSocket error on {client_id}: {ws.exception()}")
                else:
                    self.logger.warning(f"Unexpected message type from {client_id}: {msg.type}")
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Read timeout on {client_id}: no frame for {self.config.read_timeout}s"
            )
        finally:
            self.clients.pop(client_id, None)
            if not ws.closed:
                await ws.close()
            self.logger.info(f"WebSocket client disconnected: {client_id}")

        return ws

    async def _send_reply(self, ws: web.WebSocketResponse, client_id: str, reply: str) -> bool:
        try:
            await asyncio.wait_for(ws.send_str(reply), timeout=self.config.write_timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"Write timeout on {client_id}")
            return False
        return True

    def _handshake_rejection(self, context: RequestContext) -> Optional[str]:
        """Close reason for an upgrade carrying an expired token, else None"""
        gate = self.dispatcher.gate
        if gate is None or not context.auth_token:
            return None
        try:
            gate.verifier.check(context.auth_token)
        except AuthorizationError as e:
            if TOKEN_EXPIRED_MARKER in e.message.lower():
                return e.message
        return None
