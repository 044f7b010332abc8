"""
Core module - Constants, errors, configuration and the shared registry

Provides:
- MCPError hierarchy mapped to JSON-RPC error codes
- ServerConfig / ConnectionConfig and configure_logging()
- CapabilityRegistry used by every capability manager
- InputSchema and jsonschema based argument validation
"""

from .config import ConnectionConfig, ServerConfig, configure_logging
from .errors import (
    AlreadyRegisteredError,
    AuthorizationError,
    ConfigurationError,
    ConnectionTimeoutError,
    InternalError,
    InvalidParamsError,
    InvalidPathError,
    InvalidRequestError,
    MCPError,
    MethodNotFoundError,
    NotConnectedError,
    NotFoundError,
    ParseError,
    PromptRenderError,
    RateLimitError,
    ReadOnlyRootError,
    RemoteError,
    RequestTimeoutError,
    ResourceReadError,
    RootError,
    ToolExecutionError,
    TransportError,
    ValidationError,
)
from .registry import CapabilityRegistry, call_handler
from .schema import InputSchema, validate_arguments

__all__ = [
    "AlreadyRegisteredError",
    "AuthorizationError",
    "CapabilityRegistry",
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionTimeoutError",
    "InputSchema",
    "InternalError",
    "InvalidParamsError",
    "InvalidPathError",
    "InvalidRequestError",
    "MCPError",
    "MethodNotFoundError",
    "NotConnectedError",
    "NotFoundError",
    "ParseError",
    "PromptRenderError",
    "RateLimitError",
    "ReadOnlyRootError",
    "RemoteError",
    "RequestTimeoutError",
    "ResourceReadError",
    "RootError",
    "ServerConfig",
    "ToolExecutionError",
    "TransportError",
    "ValidationError",
    "call_handler",
    "configure_logging",
    "validate_arguments",
]
