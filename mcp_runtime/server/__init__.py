"""
Server module - Dispatch of inbound JSON-RPC frames

Provides:
- Dispatcher: routing table over the capability managers
- RateLimiter: per identity requests per minute
- AuthorizationGate: token and scope check per request
- StdioServer / WebSocketServer: serving loops
"""

from .auth_gate import AuthorizationGate
from .dispatcher import Dispatcher
from .rate_limiter import RateLimiter
from .stdio_server import StdioServer
from .websocket_server import WebSocketServer, WebSocketServerConfig

__all__ = [
    "AuthorizationGate",
    "Dispatcher",
    "RateLimiter",
    "StdioServer",
    "WebSocketServer",
    "WebSocketServerConfig",
]
