"""
MCP Protocol Layer - JSON-RPC message model and client sessions
"""

from typing import Any, Dict, Optional

from ..core.config import ConnectionConfig
from .client import Client
from .connection import Connection, ConnectionState
from .pending_request import PendingRequest, PendingState
from .retry import RetryPolicy


def connect(
    transport,
    config: Optional[ConnectionConfig] = None,
    client_info: Optional[Dict[str, Any]] = None,
) -> Connection:
    """
    Build, connect and initialize a Connection

    Args:
        transport: BaseTransport instance
        config: ConnectionConfig
        client_info: Overrides config.client_info for the handshake

    Returns:
        Connection in the INITIALIZED state
    """
    connection = Connection(transport, config)
    connection.connect()
    connection.initialize_connection(client_info)
    return connection


__all__ = [
    "Client",
    "Connection",
    "ConnectionState",
    "PendingRequest",
    "PendingState",
    "RetryPolicy",
    "connect",
]
