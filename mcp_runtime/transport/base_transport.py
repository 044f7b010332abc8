"""
Base Transport Class - Abstract interface for all transport implementations

Module: transport.base_transport
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Abstract BaseTransport with connect/disconnect/send/is_connected
  - Named event handlers (several per event) with on()/off()
  - Lock-guarded pending request table
  - Frame routing: responses, notifications, peer requests

ARCHITECTURE:
BaseTransport is the abstract base class for the WebSocket and stdio
transports. Each implementation owns one background execution unit
(a reader thread, or a thread running a private asyncio loop) which
calls _handle_frame() for every inbound frame.

_handle_frame() only looks at the keys needed for routing:
  - id + result/error, no method -> resolve/reject the PendingRequest
  - method, no id                -> handlers registered for that method
  - method + id                  -> "request" event handlers

Handlers are called with a single argument:
  open          -> {"transport": name}
  close         -> {"code", "reason"}
  error         -> the exception
  request       -> the raw request dict
  auth.refresh  -> {"code", "reason"}
  <method name> -> the notification params

SECURITY NOTES:
- A handler exception is logged and never reaches the I/O loop
- Responses to unknown or expired ids are dropped
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

from ..core.constants import DEFAULT_REQUEST_TIMEOUT, EVENT_REQUEST
from ..core.errors import ParseError, RemoteError, TransportError
from ..protocol import json_rpc
from ..protocol.pending_request import PendingRequest

Handler = Callable[[Any], Any]


class BaseTransport(ABC):
    """
    Abstract base class for all transport implementations

    The transport layer is responsible for:
    1. Physical message transmission/reception
    2. Connection management
    3. Correlating responses with pending requests

    Not responsible for:
    1. Handshake and session state (Connection)
    2. Message validation beyond routing keys
    3. Dispatching requests to capabilities (Dispatcher)
    """

    def __init__(self, name: str, request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        """
        Initialize transport

        Args:
            name: Name of this transport instance
            request_timeout: Seconds a request may stay pending
        """
        self.name = name
        self.request_timeout = request_timeout
        self.logger = logging.getLogger(f"transport.{name}")

        self._handlers: Dict[str, List[Handler]] = {}
        self._handlers_lock = threading.Lock()

        self._pending: Dict[Any, PendingRequest] = {}
        self._pending_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True while frames can be exchanged"""

    @abstractmethod
    def connect(self) -> "BaseTransport":
        """
        Open the transport

        Returns:
            self

        Raises:
            TransportError: If the transport cannot be opened
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Close the transport (pending requests are left to time out)"""

    @abstractmethod
    def send(self, message: Any) -> Any:
        """
        Send one message

        Args:
            message: json_rpc message object or raw dict

        Raises:
            NotConnectedError: If not connected
        """

    @property
    def status(self) -> str:
        return "connected" if self.is_connected else "disconnected"

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on(self, event: str, handler: Handler) -> Handler:
        """
        Register a handler for an event or notification method

        Args:
            event: Event name or notification method name
            handler: Callable receiving one argument

        Returns:
            The handler (so it can be passed to off() later)
        """
        with self._handlers_lock:
            self._handlers.setdefault(event, []).append(handler)
        self.logger.debug(f"Handler registered for '{event}'")
        return handler

    def off(self, event: str, handler: Optional[Handler] = None) -> None:
        """
        Remove one handler, or every handler of the event when omitted
        """
        with self._handlers_lock:
            if handler is None:
                self._handlers.pop(event, None)
                return
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                self._handlers.pop(event, None)

    def has_handlers(self, event: str) -> bool:
        with self._handlers_lock:
            return bool(self._handlers.get(event))

    def emit(self, event: str, data: Any = None) -> int:
        """
        Call every handler of an event

        Args:
            event: Event name
            data: Single argument passed to each handler

        Returns:
            int: Number of handlers called
        """
        with self._handlers_lock:
            handlers = list(self._handlers.get(event, []))

        for handler in handlers:
            try:
                handler(data)
            except Exception as e:
                self.logger.error(f"Error in '{event}' handler: {type(e).__name__}: {e}")
        return len(handlers)

    # ------------------------------------------------------------------
    # Pending requests
    # ------------------------------------------------------------------

    def _register_pending(
        self,
        request_id: Union[str, int],
        timeout: Optional[float] = None,
    ) -> PendingRequest:
        """
        Create and store a PendingRequest for an outgoing request

        Raises:
            TransportError: If the id is already pending
        """
        pending = PendingRequest(
            request_id,
            timeout if timeout is not None else self.request_timeout,
            on_settle=self._discard_pending,
        )
        with self._pending_lock:
            if request_id in self._pending:
                raise TransportError(
                    f"Request id already pending: {request_id}",
                    data={"id": request_id},
                )
            self._pending[request_id] = pending
        return pending

    def _discard_pending(self, pending: PendingRequest) -> None:
        with self._pending_lock:
            if self._pending.get(pending.request_id) is pending:
                del self._pending[pending.request_id]

    def get_pending(self, request_id: Any) -> Optional[PendingRequest]:
        with self._pending_lock:
            return self._pending.get(request_id)

    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    # ------------------------------------------------------------------
    # Inbound frames
    # ------------------------------------------------------------------

    def _handle_frame(self, raw: Union[str, bytes]) -> None:
        """
        Route one inbound frame

        Malformed frames are logged and skipped.
        """
        try:
            value = json_rpc.decode(raw)
        except ParseError as e:
            self.logger.warning(f"Dropping malformed frame: {e.data['detail']}")
            return
        self._handle_message(value)

    def _handle_message(self, value: Any) -> None:
        if not isinstance(value, dict):
            self.logger.warning(f"Dropping non-object frame: {type(value).__name__}")
            return

        if "method" in value:
            if "id" in value:
                if not self.emit(EVENT_REQUEST, value):
                    self.logger.debug(f"No request handler, dropped: {value.get('method')}")
                return
            method = value.get("method")
            if not self.emit(method, value.get("params")):
                self.logger.debug(f"No handler for notification, dropped: {method}")
            return

        if "id" in value:
            self._resolve_response(value)
            return

        self.logger.warning("Dropping frame with neither method nor id")

    def _resolve_response(self, value: Dict[str, Any]) -> None:
        request_id = value.get("id")
        pending = self.get_pending(request_id)
        if pending is None:
            self.logger.debug(f"Response for unknown or expired id dropped: {request_id}")
            return

        if "error" in value:
            self._on_error_response(value["error"])
            pending.reject(RemoteError.from_error_object(value["error"]))
        else:
            pending.resolve(value.get("result"))

    def _on_error_response(self, error: Any) -> None:
        """Hook for subclasses inspecting error replies"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}, {self.status})"
