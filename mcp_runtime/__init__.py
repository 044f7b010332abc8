"""
MCP Runtime (Model Context Protocol)

JSON-RPC 2.0 runtime for MCP clients and servers: message model, stdio and
WebSocket transports, client connections, and a dispatcher serving tools,
resources, prompts and filesystem roots.

CHANGELOG:
[2026-10-17 v0.1.0] Initial release
  - Protocol, transport, capability and server layers
  - JWT authorization gate and per-identity rate limiting

ARCHITECTURE:
- Layer 1 : Transport (Stdio, WebSocket)
- Layer 2 : Protocol (JSON-RPC model, PendingRequest, Connection)
- Layer 3 : Capabilities (Tools, Resources, Prompts, Roots)
- Layer 4 : Server (Dispatcher, RateLimiter, AuthorizationGate, serving loops)

SECURITY NOTES:
- Per-entry authorizers fail closed
- Root paths confined to their base directory
- Handler faults never leak tracebacks to the wire
"""

__version__ = "0.1.0"
__license__ = "See LICENSE file"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

from .core.config import ConnectionConfig, ServerConfig, configure_logging
from .core.errors import MCPError
from .protocol import Connection, connect
from .server.dispatcher import Dispatcher
from .security.client_context import RequestContext
from .transport.stdio_transport import StdioTransport
from .transport.websocket_transport import WebSocketConfig, WebSocketTransport

__all__ = [
    "Connection",
    "ConnectionConfig",
    "Dispatcher",
    "MCPError",
    "RequestContext",
    "ServerConfig",
    "StdioTransport",
    "WebSocketConfig",
    "WebSocketTransport",
    "configure_logging",
    "connect",
]
