"""
Method Permissions - Token scopes required per JSON-RPC method

Module: security.permissions
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Method -> accepted scopes table
  - Default table for the dispatcher's methods
  - check_permission(payload, method)

ARCHITECTURE:
A method with no entry needs no scope. A method with an entry needs a
payload granting at least one of its scopes.

SECURITY NOTES:
- Missing payload or empty scopes deny any method that has an entry
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from ..core.constants import (
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
)

DEFAULT_METHOD_SCOPES: Dict[str, List[str]] = {
    METHOD_TOOLS_LIST: ["tools:read"],
    METHOD_TOOLS_CALL: ["tools:call", "tools:write"],
    METHOD_RESOURCES_LIST: ["resources:read"],
    METHOD_RESOURCES_TEMPLATES_LIST: ["resources:read"],
    METHOD_RESOURCES_READ: ["resources:read"],
    METHOD_PROMPTS_LIST: ["prompts:read"],
    METHOD_PROMPTS_GET: ["prompts:read"],
    METHOD_ROOTS_LIST: ["roots:read"],
    METHOD_ROOTS_READ: ["roots:read"],
    METHOD_ROOTS_WRITE: ["roots:write"],
}


def token_scopes(payload: Optional[Dict[str, Any]]) -> List[str]:
    """Scopes granted by a payload ("scopes" list or space separated "scope")"""
    if not payload:
        return []
    scopes = payload.get("scopes", payload.get("scope"))
    if not scopes:
        return []
    if isinstance(scopes, str):
        return scopes.split()
    return list(scopes)


class MethodPermissions:
    """Scopes required per method"""

    def __init__(self, method_scopes: Optional[Dict[str, Iterable[str]]] = None):
        self.logger = logging.getLogger("security.permissions")
        self._method_scopes: Dict[str, List[str]] = {}
        self._lock = threading.Lock()
        if method_scopes:
            self.add_methods(method_scopes)

    @classmethod
    def create_default(cls) -> "MethodPermissions":
        return cls(DEFAULT_METHOD_SCOPES)

    def add_method(self, method: str, scopes: Iterable[str]) -> None:
        with self._lock:
            self._method_scopes[method] = list(scopes)

    def add_methods(self, method_scopes: Dict[str, Iterable[str]]) -> None:
        for method, scopes in method_scopes.items():
            self.add_method(method, scopes)

    def required_scopes(self, method: str) -> Optional[List[str]]:
        with self._lock:
            scopes = self._method_scopes.get(method)
        return list(scopes) if scopes is not None else None

    def check_permission(self, payload: Optional[Dict[str, Any]], method: str) -> bool:
        """
        Check if a token payload may call a method

        Args:
            payload: Verified token payload
            method: JSON-RPC method name

        Returns:
            bool: True if allowed
        """
        required = self.required_scopes(method)
        if required is None:
            return True
        granted = token_scopes(payload)
        if not granted:
            return False
        return any(scope in granted for scope in required)
