"""
JSON-RPC 2.0 Message Model

Module: protocol.json_rpc
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Immutable Request, Notification, Response, ErrorResponse
  - Factory functions with generated request ids
  - decode/validate/parse pipeline with typed failures
  - Classification predicates for objects and raw dicts

ARCHITECTURE:
Wire frames flow through three steps:
  1. decode(raw)     -> any JSON value, or ParseError (-32700)
  2. validate(value) -> None, or the InvalidRequestError (-32600) it found
  3. from_dict(dict) -> typed message
parse() chains the three and raises the failure.

Classification rules (presence of keys only):
  method + id            -> Request
  method, no id          -> Notification
  id + result, no method -> Response
  id + error, no method  -> ErrorResponse

SECURITY NOTES:
- Method names starting with "rpc." are reserved and rejected
- Request ids must be strings or integers, never null or booleans
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..core.constants import JSONRPC_VERSION, RESERVED_METHOD_PREFIX
from ..core.errors import InvalidRequestError, MCPError, ParseError


# ============================================================================
# Message Types
# ============================================================================

@dataclass(frozen=True)
class Request:
    """Call expecting a response correlated by id"""
    method: str
    id: Union[str, int]
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> Dict[str, Any]:
        msg = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            msg["params"] = self.params
        msg["id"] = self.id
        return msg


@dataclass(frozen=True)
class Notification:
    """Call without id: never answered"""
    method: str
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> Dict[str, Any]:
        msg = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            msg["params"] = self.params
        return msg


@dataclass(frozen=True)
class Response:
    """Successful reply"""
    id: Union[str, int]
    result: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {"jsonrpc": self.jsonrpc, "result": self.result, "id": self.id}


@dataclass(frozen=True)
class ErrorResponse:
    """
    Failed reply

    Attributes:
        id: Echoed request id, or None when it could not be determined
        error: {"code": int, "message": str, "data"?: any}
    """
    id: Optional[Union[str, int]]
    error: Dict[str, Any]
    jsonrpc: str = JSONRPC_VERSION

    @property
    def code(self) -> int:
        return self.error.get("code")

    @property
    def message(self) -> str:
        return self.error.get("message", "")

    @property
    def data(self) -> Any:
        return self.error.get("data")

    def to_dict(self) -> Dict[str, Any]:
        return {"jsonrpc": self.jsonrpc, "error": self.error, "id": self.id}


Message = Union[Request, Notification, Response, ErrorResponse]


# ============================================================================
# Factories
# ============================================================================

def generate_id() -> str:
    """Fresh random request id"""
    return str(uuid.uuid4())


def build_request(method: str, params: Any = None, id: Any = None) -> Request:
    """
    Build a Request

    Args:
        method: Method name
        params: Optional structured parameters
        id: Request id (a uuid4 string is generated when omitted)

    Returns:
        Request
    """
    return Request(method=method, id=id if id is not None else generate_id(), params=params)


def build_notification(method: str, params: Any = None) -> Notification:
    return Notification(method=method, params=params)


def build_success(id: Any, result: Any) -> Response:
    return Response(id=id, result=result)


def build_error(id: Any, code: int, message: str, data: Any = None) -> ErrorResponse:
    """
    Build an ErrorResponse

    Args:
        id: Echoed request id or None
        code: JSON-RPC error code
        message: Human readable message
        data: Optional extra data (omitted from the wire when None)

    Returns:
        ErrorResponse
    """
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return ErrorResponse(id=id, error=error)


def build_error_from(id: Any, error: MCPError) -> ErrorResponse:
    """Build an ErrorResponse from a runtime exception"""
    return ErrorResponse(id=id, error=error.to_error_object())


# ============================================================================
# Decoding and Validation
# ============================================================================

def decode(raw: Union[str, bytes, bytearray]) -> Any:
    """
    Decode one wire frame

    Args:
        raw: JSON text (str or UTF-8 bytes)

    Returns:
        The decoded JSON value

    Raises:
        ParseError: On malformed JSON or undecodable bytes
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except (ValueError, TypeError) as e:
        raise ParseError("Parse error", data={"detail": str(e)}) from e


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_valid_id(value: Any) -> bool:
    # Strings and integers only, 1.5 and true are refused
    return isinstance(value, str) or _is_integer(value)


def usable_id(value: Any) -> Optional[Union[str, int]]:
    """
    Id to echo in an error reply for a rejected value

    Returns:
        The value's id if it is a valid id, else None
    """
    if isinstance(value, dict) and _is_valid_id(value.get("id")):
        return value["id"]
    return None


def _invalid(message: str = "Invalid Request") -> InvalidRequestError:
    return InvalidRequestError(message)


def validate(value: Any) -> Optional[InvalidRequestError]:
    """
    Check a decoded value against the JSON-RPC 2.0 envelope rules

    Args:
        value: Output of decode()

    Returns:
        None when valid, otherwise the InvalidRequestError describing
        the first violation (not raised)
    """
    if not isinstance(value, dict):
        return _invalid()

    if value.get("jsonrpc") != JSONRPC_VERSION:
        return _invalid()

    has_result = "result" in value
    has_error = "error" in value

    if "method" in value:
        method = value["method"]
        if not isinstance(method, str) or not method:
            return _invalid()
        if method.startswith(RESERVED_METHOD_PREFIX):
            return _invalid('Method names starting with "rpc." are reserved')
        if has_result or has_error:
            return _invalid("Message is both a request and a response")
        if "id" in value and not _is_valid_id(value["id"]):
            return _invalid()
        params = value.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            return _invalid()
        return None

    if "id" not in value:
        return _invalid()
    if has_result == has_error:
        return _invalid("Response must carry exactly one of result or error")

    if has_result:
        if not _is_valid_id(value["id"]):
            return _invalid()
        return None

    error = value["error"]
    if (
        not isinstance(error, dict)
        or not _is_integer(error.get("code"))
        or not isinstance(error.get("message"), str)
    ):
        return _invalid()
    if value["id"] is not None and not _is_valid_id(value["id"]):
        return _invalid()
    return None


def from_dict(value: Dict[str, Any]) -> Message:
    """
    Build a typed message from a decoded dict

    Raises:
        InvalidRequestError: When validation fails
    """
    failure = validate(value)
    if failure is not None:
        raise failure

    if "method" in value:
        if "id" in value:
            return Request(method=value["method"], id=value["id"], params=value.get("params"))
        return Notification(method=value["method"], params=value.get("params"))
    if "result" in value:
        return Response(id=value["id"], result=value["result"])
    return ErrorResponse(id=value["id"], error=dict(value["error"]))


def parse(raw: Union[str, bytes, bytearray]) -> Message:
    """
    Decode, validate and build a typed message

    Raises:
        ParseError: Malformed JSON (-32700)
        InvalidRequestError: Envelope violation (-32600)
    """
    return from_dict(decode(raw))


def encode(message: Union[Message, Dict[str, Any]]) -> str:
    """Serialize to compact JSON"""
    if not isinstance(message, dict):
        message = message.to_dict()
    return json.dumps(message, separators=(",", ":"))


# ============================================================================
# Classification
# ============================================================================

def _as_dict(message: Any) -> Dict[str, Any]:
    if isinstance(message, dict):
        return message
    if hasattr(message, "to_dict"):
        return message.to_dict()
    return {}


def is_request(message: Any) -> bool:
    msg = _as_dict(message)
    return "method" in msg and "id" in msg


def is_notification(message: Any) -> bool:
    msg = _as_dict(message)
    return "method" in msg and "id" not in msg


def is_response(message: Any) -> bool:
    msg = _as_dict(message)
    return "method" not in msg and "id" in msg and "result" in msg and "error" not in msg


def is_error(message: Any) -> bool:
    msg = _as_dict(message)
    return "method" not in msg and "id" in msg and "error" in msg and "result" not in msg
