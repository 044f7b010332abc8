"""
Resource Manager - Registry and URI resolution for resources

Module: resources.resource_manager
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Registration on top of CapabilityRegistry
  - find(): exact URI first, then templates in registration order
  - read()/invoke() producing {contents: [{uri, mimeType, text}]}
  - Decorator support via resource()

ARCHITECTURE:
Resolution order for a requested URI:
  1. exact key match
  2. templated resources in registration order, first match wins

Overlapping templates ("a/{x}" and "a/{y}") therefore resolve to the one
registered first.

SECURITY NOTES:
- Handler failures reach the wire as the resource URI and message only
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.constants import DEFAULT_RESOURCE_MIME_TYPE
from ..core.errors import MCPError, NotFoundError, ResourceReadError, ValidationError
from ..core.registry import CapabilityRegistry
from .resource import Resource, ResourceMatch


class ResourceManager:
    """
    Central registry and manager for MCP resources
    """

    def __init__(self):
        self.logger = logging.getLogger("resources.manager")
        self._registry: CapabilityRegistry[Resource] = CapabilityRegistry("resource")

    def register(self, resource: Resource, key: Optional[str] = None) -> Resource:
        """
        Register a resource

        Raises:
            AlreadyRegisteredError: If the URI is already registered
        """
        return self._registry.register(resource, key)

    def unregister(self, uri: str) -> Optional[Resource]:
        return self._registry.unregister(uri)

    def get(self, uri: str) -> Optional[Resource]:
        return self._registry.get(uri)

    def exists(self, uri: str) -> bool:
        return self._registry.exists(uri)

    def list(self) -> List[Resource]:
        return self._registry.list()

    def count(self) -> int:
        return self._registry.count()

    def list_for(self, context: Any = None) -> List[Resource]:
        return [resource for resource in self.list() if resource.is_authorized(context)]

    def list_templates(self, context: Any = None) -> List[Resource]:
        """Authorized templated resources"""
        return [resource for resource in self.list_for(context) if resource.is_template]

    def find(self, uri: str) -> Optional[ResourceMatch]:
        """
        Resolve a requested URI

        Args:
            uri: Concrete URI

        Returns:
            ResourceMatch, or None when nothing matches
        """
        exact = self.get(uri)
        if exact is not None:
            return ResourceMatch(exact, uri, {})

        for resource in self.list():
            if not resource.is_template:
                continue
            params = resource.match(uri)
            if params is not None:
                self.logger.debug(f"URI {uri} matched template {resource.uri}")
                return ResourceMatch(resource, uri, params)
        return None

    def read(self, uri: str, context: Any = None) -> Dict[str, Any]:
        """
        Find and read a resource

        Raises:
            NotFoundError: If no resource matches
            ResourceReadError: If the handler fails
        """
        match = self.find(uri)
        if match is None:
            raise NotFoundError(f"Resource not found: {uri}", data={"uri": uri})
        return self.invoke(match, context)

    def invoke(self, match: ResourceMatch, context: Any = None) -> Dict[str, Any]:
        """
        Fetch a matched resource's content

        Args:
            match: Output of find()
            context: RequestContext passed to the handler

        Returns:
            dict: {"contents": [{"uri", "mimeType", "text"}]}

        Raises:
            ValidationError: If template parameters are missing
            ResourceReadError: If the handler raises or reports an error
        """
        resource = match.resource
        missing = resource.missing_params(match.params)
        if missing:
            raise ValidationError(
                f"Resource '{resource.uri}' missing required parameters: {', '.join(missing)}",
                data={"uri": resource.uri},
            )

        try:
            content = resource.fetch(match.params, context)
        except MCPError:
            raise
        except Exception as e:
            self.logger.error(f"Resource '{resource.uri}' read failed: {e}", exc_info=True)
            raise ResourceReadError(
                f"Resource read failed: {e}",
                data={"uri": resource.uri},
            ) from e

        if _is_reported_error(content):
            raise ResourceReadError(
                str(content["error"].get("message", "Resource reported an error")),
                data={"uri": resource.uri},
            )

        return {
            "contents": [
                {
                    "uri": resource.resolve_uri(match.params),
                    "mimeType": resource.mime_type,
                    "text": resource.serialize_content(content),
                }
            ]
        }

    def resource(
        self,
        uri: str,
        name: Optional[str] = None,
        description: str = "",
        mime_type: str = DEFAULT_RESOURCE_MIME_TYPE,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        """
        Decorator to register a resource

        Usage:
            @resource_manager.resource("users/{id}", description="One user")
            def user(context, params):
                return {"id": params["id"]}

        Returns:
            decorator: Function decorator
        """

        def decorator(func: Callable):
            self.register(
                Resource(
                    uri=uri,
                    handler=func,
                    name=name,
                    description=description or (func.__doc__ or "").strip(),
                    mime_type=mime_type,
                    tags=tags,
                    metadata=metadata,
                    authorize=authorize,
                )
            )
            return func

        return decorator


def _is_reported_error(content: Any) -> bool:
    return (
        isinstance(content, dict)
        and len(content) == 1
        and isinstance(content.get("error"), dict)
        and "message" in content["error"]
    )
