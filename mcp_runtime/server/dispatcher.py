"""
Dispatcher - Server side JSON-RPC request handling

Module: server.dispatcher
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - handle(raw, context) -> encoded response or None
  - Rate limiting per context identity
  - Optional authorization gate (token + scopes)
  - Routing table for initialize, ping, tools, resources, prompts, roots
  - Domain errors mapped to their wire codes, other faults hidden

ARCHITECTURE:
Dispatcher owns the four capability managers and turns one inbound frame
into at most one outbound frame:

  decode -> rate limit -> validate -> (response? drop) -> gate -> route

Method handlers share the signature handler(context, params) -> result.
Serving loops (StdioServer, WebSocketServer) build the RequestContext
and write whatever handle() returns.

SECURITY NOTES:
- handle() never raises
- Non MCPError exceptions reach the wire as "Internal error" only; the
  message and traceback stay in the server log
- List methods only show entries the caller is authorized to see
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from ..core.config import ServerConfig
from ..core.constants import (
    INTERNAL_ERROR,
    METHOD_INITIALIZE,
    METHOD_INITIALIZED,
    METHOD_PING,
    METHOD_PROMPTS_GET,
    METHOD_PROMPTS_LIST,
    METHOD_RESOURCES_LIST,
    METHOD_RESOURCES_READ,
    METHOD_RESOURCES_TEMPLATES_LIST,
    METHOD_ROOTS_LIST,
    METHOD_ROOTS_READ,
    METHOD_ROOTS_WRITE,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    PARSE_ERROR,
)
from ..core.errors import (
    AuthorizationError,
    InvalidParamsError,
    MCPError,
    MethodNotFoundError,
    NotFoundError,
    ParseError,
)
from ..prompts.prompt_manager import PromptManager
from ..protocol import json_rpc
from ..resources.resource_manager import ResourceManager
from ..roots.root_manager import RootManager
from ..security.client_context import RequestContext
from ..tools.tool_manager import ToolManager
from .auth_gate import AuthorizationGate
from .rate_limiter import RateLimiter

MethodHandler = Callable[[RequestContext, Dict[str, Any]], Any]


class Dispatcher:
    """
    Routes JSON-RPC frames to capability managers

    Typical usage:
        dispatcher = Dispatcher(ServerConfig(server_name="demo"))

        @dispatcher.tool(description="Echo the input")
        def echo(context, arguments):
            return arguments

        reply = dispatcher.handle(line, RequestContext(identity="local"))
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        gate: Optional[AuthorizationGate] = None,
    ):
        """
        Initialize dispatcher

        Args:
            config: ServerConfig (defaults if None)
            rate_limiter: RateLimiter (built from config if None)
            gate: AuthorizationGate (no token check if None)
        """
        self.logger = logging.getLogger("server.dispatcher")
        self.config = config or ServerConfig()
        self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_limit_per_minute)
        self.gate = gate

        self.tools = ToolManager()
        self.resources = ResourceManager()
        self.prompts = PromptManager()
        self.roots = RootManager()

        self._methods: Dict[str, MethodHandler] = {
            METHOD_INITIALIZE: self._handle_initialize,
            METHOD_INITIALIZED: self._handle_initialized,
            METHOD_PING: self._handle_ping,
            METHOD_TOOLS_LIST: self._handle_tools_list,
            METHOD_TOOLS_CALL: self._handle_tools_call,
            METHOD_RESOURCES_LIST: self._handle_resources_list,
            METHOD_RESOURCES_TEMPLATES_LIST: self._handle_resource_templates_list,
            METHOD_RESOURCES_READ: self._handle_resources_read,
            METHOD_PROMPTS_LIST: self._handle_prompts_list,
            METHOD_PROMPTS_GET: self._handle_prompts_get,
            METHOD_ROOTS_LIST: self._handle_roots_list,
            METHOD_ROOTS_READ: self._handle_roots_read,
            METHOD_ROOTS_WRITE: self._handle_roots_write,
        }

        self.logger.info(
            f"Dispatcher initialized: {self.config.server_name} v{self.config.server_version}"
        )

    # ========================================================================
    # Public API
    # ========================================================================

    @property
    def server_info(self) -> Dict[str, str]:
        return self.config.server_info

    @property
    def capabilities(self) -> Dict[str, Any]:
        """Capabilities advertised in the initialize result"""
        capabilities: Dict[str, Any] = {}
        if self.tools.count():
            capabilities["tools"] = {}
        if self.resources.count():
            capabilities["resources"] = {"subscribe": False}
        if self.prompts.count():
            capabilities["prompts"] = {}
        if self.roots.count():
            capabilities["roots"] = {}
        return capabilities

    @property
    def methods(self) -> List[str]:
        return list(self._methods)

    def handle(
        self,
        raw: Union[str, bytes, bytearray],
        context: Optional[RequestContext] = None,
    ) -> Optional[str]:
        """
        Process one inbound frame

        Args:
            raw: JSON text of one message
            context: RequestContext of the caller (anonymous if None)

        Returns:
            str: Encoded response, or None when nothing must be sent
        """
        if context is None:
            context = RequestContext()

        try:
            value = json_rpc.decode(raw)
        except ParseError as e:
            self.logger.warning(f"Parse error from {context.identity}: {e.message}")
            return self._encode_error(None, PARSE_ERROR, e.message)

        if not self.rate_limiter.allow(context.identity):
            return self._encode_error(None, INTERNAL_ERROR, "Rate limit exceeded")

        invalid = json_rpc.validate(value)
        if invalid is not None:
            request_id = json_rpc.usable_id(value)
            self.logger.warning(f"Invalid request from {context.identity}: {invalid.message}")
            return json_rpc.encode(json_rpc.build_error_from(request_id, invalid))

        message = json_rpc.from_dict(value)
        if not isinstance(message, (json_rpc.Request, json_rpc.Notification)):
            self.logger.debug(f"Ignoring response from {context.identity}: id={message.id}")
            return None

        request_id = getattr(message, "id", None)
        expects_reply = isinstance(message, json_rpc.Request)

        try:
            result = self._dispatch(message.method, message.params, context, expects_reply)
        except MCPError as e:
            self.logger.warning(f"{message.method} failed for {context.identity}: {e.message}")
            if not expects_reply:
                return None
            return json_rpc.encode(json_rpc.build_error_from(request_id, e))
        except Exception as e:
            self.logger.error(f"Internal error in {message.method}: {e}", exc_info=True)
            if not expects_reply:
                return None
            return self._encode_error(request_id, INTERNAL_ERROR, "Internal error")

        if not expects_reply:
            return None
        try:
            return json_rpc.encode(json_rpc.build_success(request_id, result))
        except (TypeError, ValueError) as e:
            self.logger.error(f"Unserializable result from {message.method}: {e}")
            return self._encode_error(request_id, INTERNAL_ERROR, "Internal error")

    def register_method(self, method: str, handler: MethodHandler) -> None:
        """
        Register or replace a method handler

        Args:
            method: Method name
            handler: Callable(context, params) -> result
        """
        self._methods[method] = handler
        self.logger.debug(f"Method registered: {method}")

    def tool(self, name: Optional[str] = None, description: str = "", **kwargs):
        """Decorator registering a tool (see ToolManager.tool)"""
        return self.tools.tool(name=name, description=description, **kwargs)

    def resource(self, uri: str, **kwargs):
        """Decorator registering a resource (see ResourceManager.resource)"""
        return self.resources.resource(uri, **kwargs)

    def prompt(self, name: Optional[str] = None, description: str = "", **kwargs):
        """Decorator registering a prompt (see PromptManager.prompt)"""
        return self.prompts.prompt(name=name, description=description, **kwargs)

    # ========================================================================
    # Routing
    # ========================================================================

    def _dispatch(
        self,
        method: str,
        params: Any,
        context: RequestContext,
        expects_reply: bool,
    ) -> Any:
        if self.gate is not None:
            self.gate.check(context, method)

        handler = self._methods.get(method)
        if handler is None:
            if expects_reply:
                self.logger.warning(f"Method not found: {method}")
                raise MethodNotFoundError(f"Method not found: {method}", data={"method": method})
            self.logger.debug(f"Ignoring unknown notification: {method}")
            return None

        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise InvalidParamsError(
                f"Params of {method} must be an object",
                data={"method": method},
            )

        self.logger.debug(f"Dispatching {method} for {context.identity}")
        return handler(context, params)

    def _encode_error(self, request_id: Any, code: int, message: str) -> str:
        return json_rpc.encode(json_rpc.build_error(request_id, code, message))

    # ========================================================================
    # Method Handlers
    # ========================================================================

    def _handle_initialize(self, context: RequestContext, params: dict) -> dict:
        client_info = params.get("clientInfo") or {}
        self.logger.info(
            f"Client connected: {client_info.get('name', 'unknown')} "
            f"{client_info.get('version', '')} "
            f"(protocol {params.get('protocolVersion', 'unspecified')})"
        )
        return {
            "serverInfo": self.server_info,
            "protocolVersion": self.config.protocol_version,
            "capabilities": self.capabilities,
        }

    def _handle_initialized(self, context: RequestContext, params: dict) -> None:
        self.logger.info(f"Client initialized: {context.identity}")

    def _handle_ping(self, context: RequestContext, params: dict) -> dict:
        return {"pong": True}

    def _handle_tools_list(self, context: RequestContext, params: dict) -> dict:
        return {"tools": [tool.to_schema() for tool in self.tools.list_for(context)]}

    def _handle_tools_call(self, context: RequestContext, params: dict) -> dict:
        """
        Handle tools/call request

        Args:
            context: RequestContext
            params: {"name": "tool_name", "arguments": {...}}

        Returns:
            dict: {"content": [{"type": "text", "text": ...}], "isError": False}
        """
        name = _require(params, "name")
        tool = self.tools.get(name)
        if tool is None:
            raise NotFoundError(f"Tool not found: {name}", data={"tool": name})
        if not tool.is_authorized(context):
            raise AuthorizationError(
                f"Not authorized to call tool: {name}",
                data={"tool": name},
            )

        self.logger.info(f"Client {context.identity} calling tool: {name}")
        result = self.tools.execute(name, params.get("arguments") or {}, context)
        return {
            "content": [{"type": "text", "text": _tool_text(result)}],
            "isError": False,
        }

    def _handle_resources_list(self, context: RequestContext, params: dict) -> dict:
        return {
            "resources": [
                resource.to_schema() for resource in self.resources.list_for(context)
            ]
        }

    def _handle_resource_templates_list(self, context: RequestContext, params: dict) -> dict:
        return {
            "resourceTemplates": [
                resource.to_template_schema()
                for resource in self.resources.list_templates(context)
            ]
        }

    def _handle_resources_read(self, context: RequestContext, params: dict) -> dict:
        uri = _require(params, "uri")
        match = self.resources.find(uri)
        if match is None:
            raise NotFoundError(f"Resource not found: {uri}", data={"uri": uri})
        if not match.resource.is_authorized(context):
            raise AuthorizationError(
                f"Not authorized to read resource: {uri}",
                data={"uri": uri},
            )
        return self.resources.invoke(match, context)

    def _handle_prompts_list(self, context: RequestContext, params: dict) -> dict:
        return {"prompts": [prompt.to_schema() for prompt in self.prompts.list_for(context)]}

    def _handle_prompts_get(self, context: RequestContext, params: dict) -> dict:
        name = _require(params, "name")
        prompt = self.prompts.get(name)
        if prompt is None:
            raise NotFoundError(f"Prompt not found: {name}", data={"prompt": name})
        if not prompt.is_authorized(context):
            raise AuthorizationError(
                f"Not authorized to get prompt: {name}",
                data={"prompt": name},
            )
        messages = self.prompts.render(name, params.get("arguments") or {}, context)
        return {"description": prompt.description, "messages": messages}

    def _handle_roots_list(self, context: RequestContext, params: dict) -> dict:
        return {"roots": [root.to_schema() for root in self.roots.list_for(context)]}

    def _handle_roots_read(self, context: RequestContext, params: dict) -> dict:
        name = _require(params, "root")
        path = _require(params, "path")
        self._require_root(name, context, "read")
        return self.roots.read_contents(name, path)

    def _handle_roots_write(self, context: RequestContext, params: dict) -> dict:
        name = _require(params, "root")
        path = _require(params, "path")
        content = params.get("content")
        if content is None:
            raise InvalidParamsError(
                "Missing required parameter: content",
                data={"param": "content"},
            )
        self._require_root(name, context, "write")
        self.roots.write_file(name, path, content)
        self.logger.info(f"Client {context.identity} wrote {path} in root {name}")
        return {"success": True}

    def _require_root(self, name: str, context: RequestContext, action: str) -> None:
        root = self.roots.require(name)
        if not root.is_authorized(context):
            raise AuthorizationError(
                f"Not authorized to {action} root: {name}",
                data={"root": name},
            )


def _require(params: Dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None or value == "":
        raise InvalidParamsError(
            f"Missing required parameter: {key}",
            data={"param": key},
        )
    return value


def _tool_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, separators=(",", ":"), default=str)
