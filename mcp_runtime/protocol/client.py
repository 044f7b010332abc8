"""
MCP Client - Typed calls over a Connection

Module: protocol.client
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - connect() = transport connect + initialize handshake
  - list_tools / call_tool / list_resources / read_resource /
    list_prompts / get_prompt / list_roots / ping
  - Tool results flagged isError raised as ToolExecutionError
  - Optional RetryPolicy around every call

ARCHITECTURE:
Client wraps one Connection and unpacks the result shapes:

    list_tools()          -> result["tools"]
    call_tool(name, args) -> result["content"]
    read_resource(uri)    -> result["contents"]
    get_prompt(name, args)-> result (description, messages)

Every call first checks the session is initialized and raises
NotConnectedError otherwise. With a RetryPolicy, transport failures are
retried; error replies from the server are not.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.config import ConnectionConfig
from ..core.constants import (
    METHOD_PING,
    METHOD_PROMPTS_GET,
    METHOD_PROMPTS_LIST,
    METHOD_RESOURCES_LIST,
    METHOD_RESOURCES_READ,
    METHOD_ROOTS_LIST,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
)
from ..core.errors import NotConnectedError, ToolExecutionError
from .connection import Connection
from .retry import RetryPolicy

UNKNOWN_TOOL_ERROR = "Unknown error"


def tool_error_message(content: Any) -> str:
    """
    Text of the first text item of a tool result

    Args:
        content: The result's content list

    Returns:
        str: The text, or "Unknown error"
    """
    for item in content or []:
        if isinstance(item, dict) and item.get("type") == "text":
            return item.get("text") or UNKNOWN_TOOL_ERROR
    return UNKNOWN_TOOL_ERROR


class Client:
    """
    MCP client

    Attributes:
        connection: Underlying Connection
        retry_policy: Optional RetryPolicy applied to each call
    """

    def __init__(
        self,
        transport,
        config: Optional[ConnectionConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.connection = Connection(transport, config)
        self.retry_policy = retry_policy
        self.logger = logging.getLogger("protocol.client")

    @property
    def transport(self):
        return self.connection.transport

    @property
    def server_info(self) -> Optional[Dict[str, Any]]:
        return self.connection.server_info

    @property
    def is_connected(self) -> bool:
        return self.connection.is_initialized and self.transport.is_connected

    def connect(self, client_info: Optional[Dict[str, Any]] = None) -> "Client":
        """
        Connect the transport and run the handshake

        Args:
            client_info: Overrides config.client_info

        Returns:
            self
        """
        if self.is_connected:
            return self
        self.logger.info(f"Connecting over {self.transport.name}")
        self._call(self.connection.connect)
        self._call(self.connection.initialize_connection, client_info)
        return self

    def disconnect(self) -> None:
        self.logger.info("Disconnecting")
        self.connection.disconnect()

    def ensure_connected(self) -> None:
        """
        Raises:
            NotConnectedError: Unless connected and initialized
        """
        if not self.is_connected:
            raise NotConnectedError("Client is not connected")

    def _call(self, operation, *args) -> Any:
        if self.retry_policy is None:
            return operation(*args)
        return self.retry_policy.call(operation, *args)

    def request(self, method: str, params: Any = None) -> Any:
        """
        Send a request on the initialized session

        Raises:
            NotConnectedError: If not connected
            RemoteError: If the server answered with an error
            TransportError: If retries ran out
        """
        self.ensure_connected()
        return self._call(self.connection.send_request, method, params)

    # ------------------------------------------------------------------
    # Typed calls
    # ------------------------------------------------------------------

    def ping(self) -> Any:
        return self.request(METHOD_PING)

    def list_tools(self) -> List[Dict[str, Any]]:
        return (self.request(METHOD_TOOLS_LIST) or {}).get("tools", [])

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Call a tool

        Args:
            name: Tool name
            arguments: Tool arguments (default: {})

        Returns:
            list: The result's content items

        Raises:
            ToolExecutionError: If the result is flagged isError
            RemoteError: If the server answered with an error
        """
        result = self.request(
            METHOD_TOOLS_CALL, {"name": name, "arguments": arguments or {}}
        ) or {}
        content = result.get("content", [])
        if result.get("isError"):
            message = tool_error_message(content)
            self.logger.warning(f"Tool {name} reported an error: {message}")
            raise ToolExecutionError(f"Tool error: {message}", data={"tool": name})
        return content

    def list_resources(self) -> List[Dict[str, Any]]:
        return (self.request(METHOD_RESOURCES_LIST) or {}).get("resources", [])

    def read_resource(self, uri: str) -> List[Dict[str, Any]]:
        """Contents of a resource: [{uri, mimeType, text}]"""
        return (self.request(METHOD_RESOURCES_READ, {"uri": uri}) or {}).get("contents", [])

    def list_prompts(self) -> List[Dict[str, Any]]:
        return (self.request(METHOD_PROMPTS_LIST) or {}).get("prompts", [])

    def get_prompt(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Rendered prompt: {description, messages}"""
        return self.request(
            METHOD_PROMPTS_GET, {"name": name, "arguments": arguments or {}}
        ) or {}

    def list_roots(self) -> List[Dict[str, Any]]:
        return (self.request(METHOD_ROOTS_LIST) or {}).get("roots", [])

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "Client":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"Client({self.transport.name}, connected={self.is_connected})"
