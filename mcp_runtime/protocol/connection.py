"""
Connection - Client session over one transport

Module: protocol.connection
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - DISCONNECTED -> CONNECTED -> INITIALIZED state machine
  - initialize handshake followed by notifications/initialized
  - send_request() blocking on the transport's correlation mechanism
  - on_method() handlers answering peer notifications and requests

ARCHITECTURE:
Connection owns a transport and adds session semantics on top of it:

    connect()                 -> CONNECTED
    initialize_connection()   -> INITIALIZED (at most one handshake)
    disconnect() / peer close -> DISCONNECTED

The WebSocket transport blocks inside send() and returns the result; the
stdio transport returns a PendingRequest which the connection waits on.
Either way send_request() returns the result or raises RemoteError.

Concurrent initialize_connection() calls are serialized: the first one
sends initialize, the others get the stored result.

Peer-initiated requests arrive through the transport's "request" event
and are answered with the on_method() handler registered for the method.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional

from ..core.config import ConnectionConfig
from ..core.constants import (
    EVENT_CLOSE,
    EVENT_OPEN,
    EVENT_REQUEST,
    INTERNAL_ERROR,
    METHOD_INITIALIZE,
    METHOD_INITIALIZED,
    METHOD_NOT_FOUND,
    METHOD_PING,
)
from ..core.errors import NotConnectedError
from . import json_rpc
from .pending_request import PendingRequest


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    INITIALIZED = "initialized"


class Connection:
    """
    MCP client session

    Attributes:
        transport: Underlying BaseTransport
        config: ConnectionConfig
        server_info: serverInfo from the initialize result
        capabilities: Server capabilities from the initialize result
        protocol_version: Protocol version agreed by the server
    """

    def __init__(self, transport, config: Optional[ConnectionConfig] = None):
        """
        Initialize connection

        Args:
            transport: BaseTransport instance (connected or not)
            config: ConnectionConfig (uses defaults if None)
        """
        self.transport = transport
        self.config = config or ConnectionConfig()
        self.logger = logging.getLogger("protocol.connection")

        self.server_info: Optional[Dict[str, Any]] = None
        self.capabilities: Dict[str, Any] = {}
        self.protocol_version: Optional[str] = None
        self._init_result: Optional[Dict[str, Any]] = None

        self._state = ConnectionState.CONNECTED if transport.is_connected else ConnectionState.DISCONNECTED
        self._state_lock = threading.Lock()
        self._handshake_lock = threading.Lock()
        self._method_handlers: Dict[str, Callable[[Any], Any]] = {}

        transport.on(EVENT_OPEN, self._on_transport_open)
        transport.on(EVENT_CLOSE, self._on_transport_close)
        transport.on(EVENT_REQUEST, self._on_peer_request)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ConnectionState) -> None:
        with self._state_lock:
            previous, self._state = self._state, state
        if previous is not state:
            self.logger.info(f"Connection state: {previous.value} -> {state.value}")

    @property
    def is_initialized(self) -> bool:
        return self.state is ConnectionState.INITIALIZED

    def _on_transport_open(self, info: Any) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.CONNECTED)

    def _on_transport_close(self, info: Any) -> None:
        self._init_result = None
        self._set_state(ConnectionState.DISCONNECTED)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> "Connection":
        """
        Connect the transport

        Raises:
            TransportError: If the transport cannot be opened
        """
        if not self.transport.is_connected:
            self.transport.connect()
        self._set_state(ConnectionState.CONNECTED)
        return self

    def disconnect(self) -> None:
        self.transport.disconnect()
        self._init_result = None
        self._set_state(ConnectionState.DISCONNECTED)

    def initialize_connection(self, client_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Perform the initialize handshake

        Args:
            client_info: {"name", "version"} (default: config.client_info)

        Returns:
            dict: The initialize result (stored result when already initialized)

        Raises:
            NotConnectedError: If the transport is not connected
            RemoteError: If the server rejects the handshake
        """
        with self._handshake_lock:
            return self._initialize_locked(client_info)

    def _initialize_locked(self, client_info: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if self.is_initialized and self._init_result is not None:
            return self._init_result
        if self.state is ConnectionState.DISCONNECTED:
            raise NotConnectedError("Connection is not connected")

        params = {
            "clientInfo": client_info or self.config.client_info,
            "protocolVersion": self.config.protocol_version,
            "capabilities": self.config.capabilities,
        }
        result = self.send_request(METHOD_INITIALIZE, params) or {}

        self.server_info = result.get("serverInfo")
        self.capabilities = result.get("capabilities") or {}
        self.protocol_version = result.get("protocolVersion", self.config.protocol_version)
        self._init_result = result

        self.send_notification(METHOD_INITIALIZED)
        self._set_state(ConnectionState.INITIALIZED)

        server_name = (self.server_info or {}).get("name", "unknown")
        self.logger.info(f"Initialized with {server_name} (protocol {self.protocol_version})")
        return result

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def send_request(self, method: str, params: Any = None) -> Any:
        """
        Send a request and wait for its result

        Args:
            method: Method name
            params: Optional parameters

        Returns:
            The response result

        Raises:
            NotConnectedError: If the transport is not connected
            RemoteError: If the peer answered with an error
            RequestTimeoutError: If no reply arrived in time
        """
        request = json_rpc.build_request(method, params)
        self.logger.debug(f"Request {request.id}: {method}")
        outcome = self.transport.send(request)
        if isinstance(outcome, PendingRequest):
            return outcome.wait(self.config.request_timeout)
        return outcome

    def send_notification(self, method: str, params: Any = None) -> None:
        self.logger.debug(f"Notification: {method}")
        self.transport.send(json_rpc.build_notification(method, params))

    def ping(self) -> Any:
        return self.send_request(METHOD_PING)

    def on_method(self, method: str, handler: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """
        Register a handler for a peer notification or request

        The handler receives the params. For a request its return value
        becomes the result.

        Args:
            method: Method name
            handler: Callable(params) -> result

        Returns:
            The handler
        """
        previous = self._method_handlers.get(method)
        if previous is not None:
            self.transport.off(method, previous)
        self._method_handlers[method] = handler
        self.transport.on(method, handler)
        return handler

    def _on_peer_request(self, request: Dict[str, Any]) -> None:
        method = request.get("method")
        request_id = request.get("id")
        handler = self._method_handlers.get(method)

        if handler is None:
            self.logger.warning(f"No handler for peer request: {method}")
            response = json_rpc.build_error(
                request_id, METHOD_NOT_FOUND, f"Method not found: {method}"
            )
        else:
            try:
                response = json_rpc.build_success(request_id, handler(request.get("params")))
            except Exception as e:
                self.logger.error(f"Handler for {method} failed: {type(e).__name__}: {e}")
                response = json_rpc.build_error(request_id, INTERNAL_ERROR, str(e))

        self.transport.send(response)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"Connection({self.transport.name}, {self.state.value})"
