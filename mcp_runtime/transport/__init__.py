"""
Transport module - Duplex message channels

Provides:
- BaseTransport: event handlers, pending request table, frame routing
- StdioTransport: newline delimited JSON over a pipe pair or a subprocess
- WebSocketTransport: persistent aiohttp WebSocket client
"""

from .base_transport import BaseTransport
from .stdio_transport import StdioTransport
from .websocket_transport import WebSocketConfig, WebSocketTransport

__all__ = [
    "BaseTransport",
    "StdioTransport",
    "WebSocketConfig",
    "WebSocketTransport",
]
