"""
WebSocket Transport - Persistent duplex client transport

Module: transport.websocket_transport
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - aiohttp ClientSession.ws_connect on a private event loop thread
  - Blocking connect() bounded by connect_timeout
  - Blocking send() for requests, correlated by id
  - auth.refresh event on token expiry when auto_refresh is enabled
  - set_auth_token() with reconnect

ARCHITECTURE:
The transport owns one background thread running an asyncio loop.
All socket I/O happens on that loop:
  - connect() submits _open() and waits for it
  - the reader task routes every text frame through _handle_frame()
  - send() submits the write; for a Request it then blocks the calling
    thread on the PendingRequest until the reader resolves it

Handlers run on the loop thread. A handler may send notifications and
responses (the write is scheduled, not awaited) but may not send a
request, which would block the loop that has to deliver the reply.

auth.refresh handlers run on a short-lived helper thread so they can call
set_auth_token() / connect() themselves.
connect() and set_auth_token() raise TransportError on the loop thread.

SECURITY NOTES:
- The bearer token only travels in the Authorization header
- Message size bounded by max_message_size
- Disconnect leaves pending requests to time out
"""

import asyncio
import concurrent.futures
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import WSMsgType

from ..core.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SHUTDOWN_TIMEOUT,
    DEFAULT_WS_HOST,
    DEFAULT_WS_PATH,
    DEFAULT_WS_PORT,
    EVENT_AUTH_REFRESH,
    EVENT_CLOSE,
    EVENT_ERROR,
    EVENT_OPEN,
    MAX_MESSAGE_SIZE,
    TOKEN_EXPIRED_MARKER,
    WS_CLOSE_POLICY_VIOLATION,
)
from ..core.errors import (
    ConnectionTimeoutError,
    NotConnectedError,
    TransportError,
)
from ..protocol import json_rpc
from .base_transport import BaseTransport

AUTHORIZATION_HEADER = "Authorization"
NORMAL_CLOSE_CODES = (None, 1000, 1001)


@dataclass
class WebSocketConfig:
    """WebSocket client transport configuration"""
    url: str = f"ws://{DEFAULT_WS_HOST}:{DEFAULT_WS_PORT}{DEFAULT_WS_PATH}"
    headers: Dict[str, str] = field(default_factory=dict)
    auth_token: Optional[str] = None
    auto_refresh: bool = False
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_message_size: int = MAX_MESSAGE_SIZE

    def __post_init__(self):
        if self.auth_token:
            self.headers[AUTHORIZATION_HEADER] = f"Bearer {self.auth_token}"


class WebSocketTransport(BaseTransport):
    """
    WebSocket client transport for MCP

    Keeps one long-lived connection to an MCP server and exchanges
    JSON-RPC 2.0 messages as text frames.
    """

    def __init__(self, config: Optional[WebSocketConfig] = None):
        """
        Initialize WebSocket transport

        Args:
            config: WebSocketConfig instance (uses defaults if None)
        """
        self.config = config or WebSocketConfig()
        super().__init__("websocket", request_timeout=self.config.request_timeout)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._closing = False
        self._lifecycle_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed and not self._closing

    def connect(self) -> "WebSocketTransport":
        """
        Open the WebSocket connection

        Blocks until the handshake completes.

        Returns:
            self

        Raises:
            ConnectionTimeoutError: If not open within connect_timeout
            TransportError: If the handshake fails, or when called from
                the I/O thread
        """
        if self._in_loop_thread():
            raise TransportError("Cannot connect from the WebSocket I/O thread")
        with self._lifecycle_lock:
            if self.is_connected:
                return self

            loop = self._ensure_loop()
            future = asyncio.run_coroutine_threadsafe(self._open(), loop)
            try:
                future.result(timeout=self.config.connect_timeout)
            except concurrent.futures.TimeoutError as e:
                future.cancel()
                self._stop_loop()
                raise ConnectionTimeoutError(
                    f"WebSocket not open after {self.config.connect_timeout}s: "
                    f"{self.config.url}"
                ) from e
            except (aiohttp.ClientError, OSError) as e:
                self._stop_loop()
                raise TransportError(f"WebSocket handshake failed: {e}") from e

        self.logger.info(f"WebSocket connected: {self.config.url}")
        return self

    def disconnect(self) -> None:
        """Close the connection and stop the I/O thread"""
        with self._lifecycle_lock:
            if self._loop is None:
                return
            if self._in_loop_thread():
                # Cannot join our own thread: close now, stop on next disconnect
                self._closing = True
                self._loop.create_task(self._close())
                return
            self._closing = True
            try:
                self._stop_loop()
            finally:
                self._closing = False
        self.logger.info("WebSocket disconnected")

    def reconnect(self) -> "WebSocketTransport":
        self.disconnect()
        return self.connect()

    def set_auth_token(self, token: Optional[str]) -> None:
        """
        Replace the bearer token

        Reconnects when a session is open, or was dropped by the server,
        so the new header is used.

        Args:
            token: New token, or None to drop the header

        Raises:
            TransportError: When called from the I/O thread
        """
        if self._in_loop_thread():
            raise TransportError("Cannot replace the token from the WebSocket I/O thread")

        self.config.auth_token = token
        if token:
            self.config.headers[AUTHORIZATION_HEADER] = f"Bearer {token}"
        else:
            self.config.headers.pop(AUTHORIZATION_HEADER, None)
        self.logger.info("Auth token updated")

        if self.is_connected or self._loop is not None:
            self.reconnect()

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send(self, message: Any) -> Any:
        """
        Send one message

        Args:
            message: json_rpc message object or raw dict

        Returns:
            The result for a Request, None otherwise

        Raises:
            NotConnectedError: If not connected
            RemoteError: If the peer answered with an error
            RequestTimeoutError: If no reply arrived in time
            TransportError: If the write fails
        """
        if not self.is_connected:
            raise NotConnectedError("WebSocket not connected")

        data = json_rpc.encode(message)

        if not json_rpc.is_request(message):
            self._submit(self._send_str(data))
            return None

        if self._in_loop_thread():
            raise TransportError("Cannot wait for a response on the WebSocket I/O thread")

        request = message if isinstance(message, dict) else message.to_dict()
        pending = self._register_pending(request["id"])
        try:
            self._submit(self._send_str(data))
        except TransportError as e:
            pending.reject(e)
            raise
        return pending.wait()

    def _submit(self, coro) -> None:
        if self._in_loop_thread():
            self._loop.create_task(coro)
            return
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            future.result(timeout=self.config.connect_timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise TransportError("WebSocket write timed out") from e
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            raise TransportError(f"WebSocket write failed: {e}") from e

    async def _send_str(self, data: str) -> None:
        if self._ws is None or self._ws.closed:
            raise ConnectionError("socket closed")
        await self._ws.send_str(data)
        self.logger.debug(f"Sent {len(data)} chars")

    # ------------------------------------------------------------------
    # I/O loop
    # ------------------------------------------------------------------

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None and self._thread is not None and self._thread.is_alive():
            return self._loop

        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=self._run_loop,
            args=(loop,),
            name="mcp-websocket-io",
            daemon=True,
        )
        self._loop, self._thread = loop, thread
        thread.start()
        return loop

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    def _stop_loop(self) -> None:
        loop, thread = self._loop, self._thread
        if loop is None:
            return

        if loop.is_running():
            future = asyncio.run_coroutine_threadsafe(self._close(), loop)
            try:
                future.result(timeout=DEFAULT_SHUTDOWN_TIMEOUT)
            except concurrent.futures.TimeoutError:
                self.logger.warning("WebSocket close timed out")
            except (aiohttp.ClientError, OSError) as e:
                self.logger.warning(f"WebSocket close error: {e}")
            loop.call_soon_threadsafe(loop.stop)

        if thread is not None:
            thread.join(timeout=DEFAULT_SHUTDOWN_TIMEOUT)
        if not loop.is_running():
            loop.close()
        self._loop = None
        self._thread = None

    def _in_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    async def _open(self) -> None:
        self._closing = False
        self._session = aiohttp.ClientSession()
        try:
            self._ws = await self._session.ws_connect(
                self.config.url,
                headers=dict(self.config.headers),
                max_msg_size=self.config.max_message_size,
            )
        except BaseException:
            await self._close_session()
            raise

        self._reader_task = asyncio.get_running_loop().create_task(self._read_loop(self._ws))
        self.emit(EVENT_OPEN, {"transport": self.name, "url": self.config.url})

    async def _close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        task = self._reader_task
        if task is not None and task is not asyncio.current_task():
            await task
        await self._close_session()

    async def _close_session(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            await session.close()

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """
        Reader task: route frames until the socket closes
        """
        code, reason = None, ""
        while True:
            msg = await ws.receive()
            if msg.type == WSMsgType.TEXT:
                self._handle_frame(msg.data)
            elif msg.type == WSMsgType.BINARY:
                self._handle_frame(msg.data)
            elif msg.type == WSMsgType.CLOSE:
                code, reason = msg.data, msg.extra or ""
                break
            elif msg.type in (WSMsgType.CLOSING, WSMsgType.CLOSED):
                break
            elif msg.type == WSMsgType.ERROR:
                self.logger.error(f"WebSocket error: {ws.exception()}")
                self.emit(EVENT_ERROR, TransportError(f"WebSocket error: {ws.exception()}"))
                break

        if code is None:
            code = ws.close_code
        self._reader_task = None
        await self._close_session()
        self._on_closed(code, reason)

    # ------------------------------------------------------------------
    # Close handling
    # ------------------------------------------------------------------

    @staticmethod
    def is_auth_failure(code: Optional[int], reason: str) -> bool:
        """
        True for a close that signals an expired credential
        """
        return code == WS_CLOSE_POLICY_VIOLATION and TOKEN_EXPIRED_MARKER in (reason or "").lower()

    def _on_closed(self, code: Optional[int], reason: str) -> None:
        info = {"code": code, "reason": reason}
        self.logger.info(f"WebSocket closed: code={code} reason={reason!r}")
        self.emit(EVENT_CLOSE, info)

        if self._closing:
            return
        if self.config.auto_refresh and self.is_auth_failure(code, reason):
            self._request_refresh(info)
        elif code not in NORMAL_CLOSE_CODES:
            self.emit(EVENT_ERROR, TransportError(f"Connection closed: {code} {reason}".strip()))

    def _on_error_response(self, error: Any) -> None:
        message = error.get("message", "") if isinstance(error, dict) else str(error)
        if self.config.auto_refresh and TOKEN_EXPIRED_MARKER in str(message).lower():
            self._request_refresh({"code": None, "reason": message})

    def _request_refresh(self, info: Dict[str, Any]) -> None:
        if not self.has_handlers(EVENT_AUTH_REFRESH):
            self.logger.warning("Token expired and no auth.refresh handler registered")
            self.emit(EVENT_ERROR, TransportError("Authentication expired", data=info))
            return
        self.logger.info("Token expired, invoking auth.refresh handlers")
        threading.Thread(
            target=self.emit,
            args=(EVENT_AUTH_REFRESH, info),
            name="mcp-websocket-refresh",
            daemon=True,
        ).start()
