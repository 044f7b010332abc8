"""
Tool Module - Callable capability exposed to MCP clients

Module: tools.tool
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Tool entry wrapping a handler function
  - InputSchema validation with jsonschema
  - Per-tool Authorizer
  - to_schema() for tools/list

ARCHITECTURE:
A Tool has a unique name, a description, an input schema and a handler:

    handler(context, arguments) -> result

The handler may be a plain function or a coroutine function. Results are
serialized by the dispatcher into a text content block. A handler can
report a failure without raising by returning {"error": {"message": ...}}.

Tools are exposed to clients via the tools/list RPC method.
Clients call tools via the tools/call RPC method.

SECURITY NOTES:
- Arguments validated against the schema before the handler runs
- Authorization checked by the dispatcher before execution
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.registry import call_handler
from ..core.schema import InputSchema, validate_arguments
from ..security.authorization import AuthorizedEntry, as_authorizer


class Tool(AuthorizedEntry):
    """
    Executable MCP tool

    Attributes:
        name: Unique identifier for the tool
        description: Human-readable description for clients
        input_schema: InputSchema describing accepted arguments
        tags: Optional tags for grouping
        metadata: Optional free-form metadata exposed in tools/list
        authorizer: Authorizer consulted before listing or calling
    """

    def __init__(
        self,
        name: str,
        handler: Callable,
        description: str = "",
        input_schema: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        """
        Initialize tool

        Args:
            name: Tool name
            handler: Callable(context, arguments) -> result
            description: Tool description
            input_schema: Full JSON Schema or {name: property schema}
            tags: Tags
            metadata: Metadata
            authorize: Authorizer, predicate callable, or None (allow all)

        Raises:
            ValueError: If name is empty or handler is not callable
        """
        if not name:
            raise ValueError("Tool must have a 'name'")
        if not callable(handler):
            raise ValueError(f"Tool '{name}' handler is not callable")

        self.name = name
        self.description = description
        self.handler = handler
        self.input_schema = InputSchema.create(input_schema)
        self.tags = list(tags or [])
        self.metadata = dict(metadata or {})
        self.authorizer = as_authorizer(authorize)
        self.logger = logging.getLogger(f"tools.{name}")

    @property
    def natural_key(self) -> str:
        return self.name

    def validate_arguments(self, arguments: Any) -> None:
        """
        Raises:
            ValidationError: If arguments do not match input_schema
        """
        validate_arguments(self.input_schema, arguments, "tool", self.name)

    def call(self, arguments: Dict[str, Any], context: Any = None) -> Any:
        """Run the handler (no validation, no error wrapping)"""
        return call_handler(self.handler, context, arguments)

    def to_schema(self) -> Dict[str, Any]:
        """
        Get tool information for MCP exposure

        Returns:
            dict: {name, description, inputSchema, tags?, metadata?}
        """
        schema = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_dict(),
        }
        if self.tags:
            schema["tags"] = list(self.tags)
        if self.metadata:
            schema["metadata"] = dict(self.metadata)
        return schema

    def __repr__(self) -> str:
        return f"Tool({self.name})"
