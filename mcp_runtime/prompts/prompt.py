"""
Prompt Module - Templated message sequences exposed to MCP clients

Module: prompts.prompt
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Prompt entry wrapping a render handler
  - Argument schema validated with jsonschema
  - Message normalization to {role, content: {type, text}}

ARCHITECTURE:
    handler(context, arguments) -> str | [str | message dict]

Plain strings become user text messages so simple prompts can return a
formatted string.
"""

from typing import Any, Callable, Dict, List, Optional

from ..core.registry import call_handler
from ..core.schema import InputSchema, validate_arguments
from ..security.authorization import AuthorizedEntry, as_authorizer

DEFAULT_ROLE = "user"


def normalize_message(message: Any) -> Dict[str, Any]:
    """
    Normalize one rendered message

    Args:
        message: str, or {"role", "content"} with str or dict content

    Returns:
        dict: {"role": ..., "content": {"type": "text", "text": ...}}
    """
    if isinstance(message, str):
        return {"role": DEFAULT_ROLE, "content": {"type": "text", "text": message}}
    if isinstance(message, dict):
        role = message.get("role", DEFAULT_ROLE)
        content = message.get("content", "")
        if isinstance(content, dict):
            return {"role": role, "content": content}
        return {"role": role, "content": {"type": "text", "text": str(content)}}
    return {"role": DEFAULT_ROLE, "content": {"type": "text", "text": str(message)}}


def normalize_messages(rendered: Any) -> List[Dict[str, Any]]:
    if rendered is None:
        return []
    if isinstance(rendered, (str, dict)):
        rendered = [rendered]
    return [normalize_message(message) for message in rendered]


class Prompt(AuthorizedEntry):
    """
    MCP prompt

    Attributes:
        name: Unique prompt name
        description: Description for clients
        arguments: InputSchema of accepted arguments
    """

    def __init__(
        self,
        name: str,
        handler: Callable,
        description: str = "",
        arguments: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        if not name:
            raise ValueError("Prompt must have a 'name'")
        if not callable(handler):
            raise ValueError(f"Prompt '{name}' handler is not callable")

        self.name = name
        self.handler = handler
        self.description = description
        self.arguments = InputSchema.create(arguments)
        self.tags = list(tags or [])
        self.metadata = dict(metadata or {})
        self.authorizer = as_authorizer(authorize)

    @property
    def natural_key(self) -> str:
        return self.name

    def validate_arguments(self, arguments: Any) -> None:
        validate_arguments(self.arguments, arguments, "prompt", self.name)

    def render(self, arguments: Dict[str, Any], context: Any = None) -> List[Dict[str, Any]]:
        """Run the handler and normalize its messages (no error wrapping)"""
        return normalize_messages(call_handler(self.handler, context, arguments))

    def to_schema(self) -> Dict[str, Any]:
        """
        Get prompt information for prompts/list

        Returns:
            dict: {name, description, arguments: [{name, description?, required}]}
        """
        required = set(self.arguments.required)
        arguments = []
        for arg_name, spec in self.arguments.properties.items():
            entry = {"name": arg_name, "required": arg_name in required}
            if isinstance(spec, dict) and spec.get("description"):
                entry["description"] = spec["description"]
            arguments.append(entry)

        schema = {"name": self.name, "description": self.description, "arguments": arguments}
        if self.tags:
            schema["tags"] = list(self.tags)
        if self.metadata:
            schema["metadata"] = dict(self.metadata)
        return schema

    def __repr__(self) -> str:
        return f"Prompt({self.name})"
