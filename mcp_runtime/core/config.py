"""
Configuration objects

Module: core.config
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - ServerConfig for the dispatcher
  - ConnectionConfig for client sessions
  - configure_logging() routing records to stderr

ARCHITECTURE:
Configuration is explicit: each object is built by the caller and passed
to the constructor that needs it. There is no process-wide singleton.
Transport specific settings live next to their transport
(WebSocketConfig, WebSocketServerConfig).
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TextIO

from .constants import (
    CLIENT_NAME,
    CLIENT_VERSION,
    DEFAULT_RATE_LIMIT_PER_MINUTE,
    DEFAULT_REQUEST_TIMEOUT,
    MCP_PROTOCOL_VERSION,
    SERVER_NAME,
    SERVER_VERSION,
)
from .errors import ConfigurationError


@dataclass
class ServerConfig:
    """Dispatcher configuration"""
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    protocol_version: str = MCP_PROTOCOL_VERSION
    rate_limit_per_minute: int = DEFAULT_RATE_LIMIT_PER_MINUTE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if self.rate_limit_per_minute < 0:
            raise ConfigurationError("rate_limit_per_minute must be >= 0")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

    @property
    def server_info(self) -> Dict[str, str]:
        return {"name": self.server_name, "version": self.server_version}


@dataclass
class ConnectionConfig:
    """Client session configuration"""
    client_info: Dict[str, Any] = field(
        default_factory=lambda: {"name": CLIENT_NAME, "version": CLIENT_VERSION}
    )
    protocol_version: str = MCP_PROTOCOL_VERSION
    capabilities: Dict[str, Any] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")


def configure_logging(
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure root logging

    Records go to stderr by default: stdout is reserved for JSON-RPC frames
    when the stdio transport is in use.

    Args:
        level: Logging level
        stream: Output stream (default: sys.stderr)
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream or sys.stderr,
        force=True,
    )
