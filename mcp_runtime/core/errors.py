"""
Error taxonomy for the MCP runtime

Module: core.errors
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - MCPError base class carrying a JSON-RPC code and optional data
  - Protocol errors (parse, invalid request, method not found, ...)
  - Domain errors raised by registries and handlers
  - Transport errors raised to callers of connect/send

ARCHITECTURE:
Every exception raised on purpose by the runtime derives from MCPError.
The dispatcher catches MCPError at its boundary and serializes it with
to_error_object(); anything else becomes a generic internal error.

SECURITY NOTES:
- error data carries the exception class name and the capability key only
- stack traces never leave the process
"""

from typing import Any, Dict, Optional

from .constants import (
    ERROR_MESSAGES,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)


class MCPError(Exception):
    """
    Base class for all runtime errors

    Attributes:
        code: JSON-RPC error code used on the wire
        message: Human readable message
        data: Optional context merged into error.data
    """

    default_code: int = INTERNAL_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.code = code if code is not None else self.default_code
        self.message = message or ERROR_MESSAGES.get(self.code, "Error")
        self.data = data
        super().__init__(self.message)

    def to_error_object(self) -> Dict[str, Any]:
        """
        Convert to a JSON-RPC error object

        Returns:
            dict: {"code", "message", "data"} with the error class name in data
        """
        data = {"error_type": type(self).__name__}
        if self.data:
            data.update(self.data)
        return {
            "code": self.code,
            "message": self.message,
            "data": data,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"


# ============================================================================
# Protocol Errors
# ============================================================================

class ParseError(MCPError):
    """Malformed JSON"""
    default_code = PARSE_ERROR


class InvalidRequestError(MCPError):
    """Envelope does not conform to JSON-RPC 2.0"""
    default_code = INVALID_REQUEST


class MethodNotFoundError(MCPError):
    """No handler for the requested method"""
    default_code = METHOD_NOT_FOUND


class InvalidParamsError(MCPError):
    """Method parameters are missing or malformed"""
    default_code = INVALID_PARAMS


class InternalError(MCPError):
    """Uncaught fault inside the server"""
    default_code = INTERNAL_ERROR


# ============================================================================
# Domain Errors
# ============================================================================

class NotFoundError(MCPError):
    """Tool, resource, prompt or root not registered"""
    default_code = INTERNAL_ERROR


class AlreadyRegisteredError(MCPError):
    """Registration under a key that is already taken"""
    default_code = INTERNAL_ERROR


class AuthorizationError(MCPError):
    """Caller is not allowed to use a capability or method"""
    default_code = INVALID_REQUEST


class ValidationError(MCPError):
    """Arguments rejected by a capability schema"""
    default_code = INVALID_PARAMS


class ToolExecutionError(MCPError):
    """Tool handler failed"""
    default_code = INTERNAL_ERROR


class ResourceReadError(MCPError):
    """Resource handler failed"""
    default_code = INTERNAL_ERROR


class PromptRenderError(MCPError):
    """Prompt handler failed"""
    default_code = INTERNAL_ERROR


class RootError(MCPError):
    """Root file operation failed"""
    default_code = INTERNAL_ERROR


class InvalidPathError(RootError):
    """Path resolves outside the root base directory"""


class ReadOnlyRootError(RootError):
    """Write attempted on a read-only root"""


class RateLimitError(MCPError):
    """Too many requests from one identity"""
    default_code = INTERNAL_ERROR


class ConfigurationError(MCPError):
    """Invalid or missing configuration"""
    default_code = INTERNAL_ERROR


# ============================================================================
# Transport Errors
# ============================================================================

class TransportError(MCPError):
    """Transport level failure"""
    default_code = INTERNAL_ERROR


class NotConnectedError(TransportError):
    """Send attempted while disconnected"""


class ConnectionTimeoutError(TransportError):
    """Transport did not open within the connect timeout"""


class RequestTimeoutError(TransportError):
    """No response arrived before the request deadline"""


class RemoteError(MCPError):
    """
    Error object received from the peer

    Raised on the client side when a request is answered with an
    ErrorResponse. Keeps the peer's code, message and data untouched.
    """

    @classmethod
    def from_error_object(cls, error: Any) -> "RemoteError":
        """
        Build from a wire error object

        Args:
            error: {"code", "message", "data"} dict (anything else is wrapped)

        Returns:
            RemoteError
        """
        if not isinstance(error, dict):
            return cls(str(error), code=INTERNAL_ERROR)
        code = error.get("code")
        return cls(
            str(error.get("message", "")),
            code=code if isinstance(code, int) else INTERNAL_ERROR,
            data=error.get("data"),
        )

    def to_error_object(self) -> Dict[str, Any]:
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error
