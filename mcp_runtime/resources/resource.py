"""
Resource Module - Readable data source exposed to MCP clients

Module: resources.resource
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Static and templated resources ({param} placeholders)
  - Content serialization (text as-is, structures as JSON)
  - Per-resource Authorizer
  - to_schema() / to_template_schema() for listings

ARCHITECTURE:
A Resource is identified by its URI. When the URI contains placeholders
the resource is a template and its handler receives the values captured
from the requested URI:

    handler(context, params) -> content

Static resources receive an empty params dict.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.constants import DEFAULT_RESOURCE_MIME_TYPE
from ..core.registry import call_handler
from ..security.authorization import AuthorizedEntry, as_authorizer
from .uri_template import UriTemplate


class Resource(AuthorizedEntry):
    """
    MCP resource

    Attributes:
        uri: Resource URI or URI template
        name: Optional human-readable name
        description: Description for clients
        mime_type: MIME type of the serialized content
        tags: Optional tags
        metadata: Optional metadata
    """

    def __init__(
        self,
        uri: str,
        handler: Callable,
        name: Optional[str] = None,
        description: str = "",
        mime_type: str = DEFAULT_RESOURCE_MIME_TYPE,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        if not uri:
            raise ValueError("Resource must have a 'uri'")
        if not callable(handler):
            raise ValueError(f"Resource '{uri}' handler is not callable")

        self.uri = str(uri)
        self.handler = handler
        self.name = name
        self.description = description
        self.mime_type = mime_type
        self.tags = list(tags or [])
        self.metadata = dict(metadata or {})
        self.authorizer = as_authorizer(authorize)
        self.template = UriTemplate(self.uri)
        self.logger = logging.getLogger("resources.resource")

    @property
    def natural_key(self) -> str:
        return self.uri

    @property
    def is_template(self) -> bool:
        return self.template.is_template

    @property
    def template_params(self) -> List[str]:
        return list(self.template.params)

    def match(self, uri: str) -> Optional[Dict[str, str]]:
        """Placeholder values for a concrete URI, or None"""
        if not self.is_template:
            return {} if uri == self.uri else None
        return self.template.match(uri)

    def resolve_uri(self, params: Dict[str, Any]) -> str:
        return self.template.expand(params) if self.is_template else self.uri

    def missing_params(self, params: Dict[str, Any]) -> List[str]:
        return [name for name in self.template_params if name not in params]

    def fetch(self, params: Dict[str, Any], context: Any = None) -> Any:
        """Run the handler (no error wrapping)"""
        return call_handler(self.handler, context, params)

    @staticmethod
    def serialize_content(content: Any) -> str:
        """
        Serialize handler content to text

        Strings pass through, dicts and lists become indented JSON.
        """
        if isinstance(content, str):
            return content
        if isinstance(content, (bytes, bytearray)):
            return content.decode("utf-8", errors="replace")
        if isinstance(content, (dict, list)):
            return json.dumps(content, indent=2)
        return str(content)

    def to_schema(self) -> Dict[str, Any]:
        """
        Get resource information for resources/list

        Returns:
            dict: {uri, mimeType, name?, description?, tags?, metadata?}
        """
        schema = {"uri": self.uri, "mimeType": self.mime_type}
        if self.name:
            schema["name"] = self.name
        if self.description:
            schema["description"] = self.description
        if self.tags:
            schema["tags"] = list(self.tags)
        if self.metadata:
            schema["metadata"] = dict(self.metadata)
        return schema

    def to_template_schema(self) -> Dict[str, Any]:
        """Entry for resources/templates/list"""
        schema = {"uriTemplate": self.uri, "mimeType": self.mime_type}
        if self.name:
            schema["name"] = self.name
        if self.description:
            schema["description"] = self.description
        return schema

    def __repr__(self) -> str:
        kind = "template" if self.is_template else "static"
        return f"Resource({self.uri}, {kind})"


@dataclass
class ResourceMatch:
    """
    Result of resolving a requested URI

    Attributes:
        resource: The matched Resource
        uri: The URI that was requested
        params: Values captured from template placeholders
    """
    resource: Resource
    uri: str
    params: Dict[str, str] = field(default_factory=dict)
