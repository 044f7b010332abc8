"""
Constants for the MCP runtime

Module: core.constants
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial constants definition
  - Protocol and JSON-RPC versions
  - Method names for the dispatcher routing table
  - JSON-RPC error codes
  - Transport and rate limiting defaults

SECURITY NOTES:
- Timeouts are bounded so a silent peer cannot hang a caller forever
- Message sizes limited on the WebSocket paths
"""

from typing import Final

# ============================================================================
# Protocol Constants
# ============================================================================

MCP_PROTOCOL_VERSION: Final[str] = "2025-03-26"

JSONRPC_VERSION: Final[str] = "2.0"

# Method names starting with this prefix are reserved by JSON-RPC 2.0
RESERVED_METHOD_PREFIX: Final[str] = "rpc."

# ============================================================================
# Identity
# ============================================================================

SERVER_NAME: Final[str] = "mcp-runtime"
SERVER_VERSION: Final[str] = "0.1.0"
CLIENT_NAME: Final[str] = "mcp-runtime-client"
CLIENT_VERSION: Final[str] = "0.1.0"

# ============================================================================
# Timeouts and Limits
# ============================================================================

# Seconds
DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0
DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0
DEFAULT_SHUTDOWN_TIMEOUT: Final[float] = 2.0

MAX_MESSAGE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# Requests per minute and per identity, 0 disables the limiter
DEFAULT_RATE_LIMIT_PER_MINUTE: Final[int] = 60

STDIO_ENCODING: Final[str] = "utf-8"

# ============================================================================
# WebSocket
# ============================================================================

DEFAULT_WS_HOST: Final[str] = "127.0.0.1"
DEFAULT_WS_PORT: Final[int] = 9001
DEFAULT_WS_PATH: Final[str] = "/ws"

# RFC 6455 close code used by servers to reject a credential
WS_CLOSE_POLICY_VIOLATION: Final[int] = 1008
TOKEN_EXPIRED_MARKER: Final[str] = "token expired"

# Event names emitted by transports (besides notification method names)
EVENT_OPEN: Final[str] = "open"
EVENT_CLOSE: Final[str] = "close"
EVENT_ERROR: Final[str] = "error"
EVENT_REQUEST: Final[str] = "request"
EVENT_AUTH_REFRESH: Final[str] = "auth.refresh"

# ============================================================================
# MCP Messages - JSON-RPC Method Names
# ============================================================================

# Lifecycle methods
METHOD_INITIALIZE: Final[str] = "initialize"
METHOD_INITIALIZED: Final[str] = "notifications/initialized"
METHOD_PING: Final[str] = "ping"

# Tool methods
METHOD_TOOLS_LIST: Final[str] = "tools/list"
METHOD_TOOLS_CALL: Final[str] = "tools/call"

# Resource methods
METHOD_RESOURCES_LIST: Final[str] = "resources/list"
METHOD_RESOURCES_TEMPLATES_LIST: Final[str] = "resources/templates/list"
METHOD_RESOURCES_READ: Final[str] = "resources/read"

# Prompt methods
METHOD_PROMPTS_LIST: Final[str] = "prompts/list"
METHOD_PROMPTS_GET: Final[str] = "prompts/get"

# Root methods
METHOD_ROOTS_LIST: Final[str] = "roots/list"
METHOD_ROOTS_READ: Final[str] = "roots/read"
METHOD_ROOTS_WRITE: Final[str] = "roots/write"

# ============================================================================
# Error Codes (JSON-RPC Standard)
# ============================================================================

PARSE_ERROR: Final[int] = -32700
INVALID_REQUEST: Final[int] = -32600
METHOD_NOT_FOUND: Final[int] = -32601
INVALID_PARAMS: Final[int] = -32602
INTERNAL_ERROR: Final[int] = -32603
SERVER_ERROR_START: Final[int] = -32099
SERVER_ERROR_END: Final[int] = -32000

ERROR_MESSAGES = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
}

# ============================================================================
# Content
# ============================================================================

DEFAULT_RESOURCE_MIME_TYPE: Final[str] = "application/json"

MIME_TYPES_BY_SUFFIX = {
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".json": "application/json",
    ".md": "text/markdown",
    ".csv": "text/csv",
}
FALLBACK_MIME_TYPE: Final[str] = "application/octet-stream"
