"""
Tool Manager - Central registry for tools

Module: tools.tool_manager
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Registration on top of CapabilityRegistry
  - execute() with schema validation and error wrapping
  - Handler-reported errors raised as ToolExecutionError
  - Decorator support via tool()

ARCHITECTURE:
ToolManager is the central registry for all tools.
Responsibilities:
  - Store registered tools
  - Provide access to tools by name
  - List tools visible to a request context
  - Validate and execute tool calls

ToolManager is owned by the Dispatcher.

SECURITY NOTES:
- Handler exceptions reach the wire as the tool name and message only
- Tracebacks are logged server side
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import MCPError, NotFoundError, ToolExecutionError, ValidationError
from ..core.registry import CapabilityRegistry
from .tool import Tool


class ToolManager:
    """
    Central registry and manager for MCP tools
    """

    def __init__(self):
        """Initialize tool manager"""
        self.logger = logging.getLogger("tools.manager")
        self._registry: CapabilityRegistry[Tool] = CapabilityRegistry("tool")

    def register(self, tool: Tool, key: Optional[str] = None) -> Tool:
        """
        Register a tool

        Args:
            tool: Tool instance to register
            key: Registry key (default: tool.name)

        Raises:
            AlreadyRegisteredError: If the key is already taken
        """
        return self._registry.register(tool, key)

    def unregister(self, name: str) -> Optional[Tool]:
        return self._registry.unregister(name)

    def get(self, name: str) -> Optional[Tool]:
        return self._registry.get(name)

    def exists(self, name: str) -> bool:
        return self._registry.exists(name)

    def list(self) -> List[Tool]:
        return self._registry.list()

    def count(self) -> int:
        return self._registry.count()

    def list_for(self, context: Any = None) -> List[Tool]:
        """
        Tools the context is authorized to see

        Args:
            context: RequestContext

        Returns:
            list: Authorized tools in registration order
        """
        return [tool for tool in self.list() if tool.is_authorized(context)]

    def execute(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        context: Any = None,
    ) -> Any:
        """
        Validate arguments and run a tool

        Args:
            name: Tool name
            arguments: Tool arguments (default: {})
            context: RequestContext passed to the handler

        Returns:
            The handler's result

        Raises:
            NotFoundError: If no such tool
            ValidationError: If arguments do not match the schema
            ToolExecutionError: If the handler raises or reports an error
        """
        tool = self.get(name)
        if tool is None:
            raise NotFoundError(f"Tool not found: {name}", data={"tool": name})

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ValidationError(
                f"Tool '{name}' arguments must be an object",
                data={"tool": name},
            )
        tool.validate_arguments(arguments)

        try:
            result = tool.call(arguments, context)
        except MCPError:
            raise
        except Exception as e:
            self.logger.error(f"Tool '{name}' execution failed: {e}", exc_info=True)
            raise ToolExecutionError(
                f"Tool execution failed: {e}",
                data={"tool": name},
            ) from e

        if isinstance(result, dict) and "error" in result:
            raise ToolExecutionError(
                _reported_message(result["error"]),
                data={"tool": name},
            )

        self.logger.debug(f"Tool executed: {name}")
        return result

    def tool(
        self,
        name: Optional[str] = None,
        description: str = "",
        input_schema: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        """
        Decorator to register a tool

        Usage:
            @tool_manager.tool(
                name="add",
                description="Add two numbers",
                input_schema={"a": {"type": "number"}, "b": {"type": "number"}},
            )
            def add(context, arguments):
                return {"sum": arguments["a"] + arguments["b"]}

        Args:
            name: Tool name (default: function name)
            description: Tool description (default: function docstring)
            input_schema: Input JSON schema
            tags: Tags
            metadata: Metadata
            authorize: Authorizer or predicate

        Returns:
            decorator: Function decorator
        """

        def decorator(func: Callable):
            self.register(
                Tool(
                    name=name or func.__name__,
                    handler=func,
                    description=description or (func.__doc__ or "").strip(),
                    input_schema=input_schema,
                    tags=tags,
                    metadata=metadata,
                    authorize=authorize,
                )
            )
            return func

        return decorator


def _reported_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message", "Tool reported an error"))
    return str(error)
