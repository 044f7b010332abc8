"""
Root Manager - Central registry for filesystem roots

Module: roots.root_manager
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Registration on top of CapabilityRegistry
  - list/read_file/write_file scoped to a named root
  - OS failures wrapped into RootError with the root name

ARCHITECTURE:
list() without a root name returns the registered roots, like every other
manager. With a root name it lists a directory inside that root.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.errors import NotFoundError, RootError
from ..core.registry import CapabilityRegistry
from .root import Root


class RootManager:
    """
    Central registry and manager for MCP roots
    """

    def __init__(self):
        self.logger = logging.getLogger("roots.manager")
        self._registry: CapabilityRegistry[Root] = CapabilityRegistry("root")

    def register(self, root: Root, key: Optional[str] = None) -> Root:
        """
        Register a root

        Raises:
            AlreadyRegisteredError: If the key is already taken
        """
        return self._registry.register(root, key)

    def unregister(self, name: str) -> Optional[Root]:
        return self._registry.unregister(name)

    def get(self, name: str) -> Optional[Root]:
        return self._registry.get(name)

    def exists(self, name: str) -> bool:
        return self._registry.exists(name)

    def count(self) -> int:
        return self._registry.count()

    def list_for(self, context: Any = None) -> List[Root]:
        return [root for root in self._registry.list() if root.is_authorized(context)]

    def create_root(
        self,
        name: str,
        path: str,
        description: str = "",
        allow_writes: bool = False,
        authorize: Any = None,
    ) -> Root:
        """Create and register a root"""
        return self.register(
            Root(name, path, description=description, allow_writes=allow_writes, authorize=authorize)
        )

    def require(self, name: str) -> Root:
        """
        Raises:
            NotFoundError: If no such root
        """
        root = self.get(name)
        if root is None:
            raise NotFoundError(f"Root not found: {name}", data={"root": name})
        return root

    def list(self, name: Optional[str] = None, path: str = "") -> List[Any]:
        """
        List roots, or a directory inside one root

        Args:
            name: Root name (omit to list the registered roots)
            path: Directory relative to the root

        Returns:
            list: Root entries, or directory entries

        Raises:
            NotFoundError: If the root does not exist
            InvalidPathError: If path escapes the root
            RootError: If the directory cannot be listed
        """
        if name is None:
            return self._registry.list()
        root = self.require(name)
        try:
            return root.list(path)
        except OSError as e:
            self.logger.error(f"Error listing root '{name}': {e}")
            raise RootError(f"Error listing root '{name}': {e}", data={"root": name}) from e

    def read_file(self, name: str, path: str) -> str:
        """
        Raises:
            NotFoundError, InvalidPathError, RootError
        """
        root = self.require(name)
        try:
            return root.read_file(path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Error reading from root '{name}': {e}")
            raise RootError(f"Error reading from root '{name}': {e}", data={"root": name}) from e

    def write_file(self, name: str, path: str, content: str) -> bool:
        """
        Raises:
            NotFoundError, ReadOnlyRootError, InvalidPathError, RootError
        """
        root = self.require(name)
        if not isinstance(content, str):
            raise RootError(f"Content for root '{name}' must be text", data={"root": name})
        try:
            return root.write_file(path, content)
        except OSError as e:
            self.logger.error(f"Error writing to root '{name}': {e}")
            raise RootError(f"Error writing to root '{name}': {e}", data={"root": name}) from e

    def read_contents(self, name: str, path: str) -> Dict[str, Any]:
        """
        roots/read result for one file

        Returns:
            dict: {"contents": [{"uri", "mimeType", "text"}]}
        """
        text = self.read_file(name, path)
        root = self.require(name)
        return {
            "contents": [
                {
                    "uri": root.uri_for(path),
                    "mimeType": Root.mime_type_for(path),
                    "text": text,
                }
            ]
        }
