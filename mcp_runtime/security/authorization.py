"""
Per-capability authorization

Module: security.authorization
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Authorizer interface with a single authorize(context) method
  - AllowAll default and CallableAuthorizer adapter
  - ScopeAuthorizer requiring token scopes
  - AuthorizedEntry mixin with fail-closed is_authorized()

ARCHITECTURE:
Every tool, resource, prompt and root carries an Authorizer. The dispatcher
asks entry.is_authorized(context) before listing or invoking the entry.

SECURITY NOTES:
- Fail closed: an authorizer that raises denies access
- The exception is logged, never propagated
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger("security.authorization")


class Authorizer(ABC):
    """Decides whether a request context may use a capability"""

    @abstractmethod
    def authorize(self, context: Any) -> bool:
        """
        Args:
            context: RequestContext of the caller (may be None)

        Returns:
            bool: True to allow
        """


class AllowAll(Authorizer):
    """Default authorizer: everything is allowed"""

    def authorize(self, context: Any) -> bool:
        return True


class CallableAuthorizer(Authorizer):
    """Adapts a plain predicate function"""

    def __init__(self, predicate: Callable[[Any], bool]):
        self._predicate = predicate

    def authorize(self, context: Any) -> bool:
        return bool(self._predicate(context))


class ScopeAuthorizer(Authorizer):
    """Allows contexts whose verified token grants any of the scopes"""

    def __init__(self, scopes: Iterable[str]):
        self.scopes = set(scopes)

    def authorize(self, context: Any) -> bool:
        granted = set(getattr(context, "scopes", None) or [])
        return bool(self.scopes & granted)


ALLOW_ALL = AllowAll()


def as_authorizer(value: Any) -> Authorizer:
    """
    Normalize an authorize argument

    Args:
        value: None, an Authorizer, or a predicate callable

    Returns:
        Authorizer

    Raises:
        TypeError: For anything else
    """
    if value is None:
        return ALLOW_ALL
    if isinstance(value, Authorizer):
        return value
    if callable(value):
        return CallableAuthorizer(value)
    raise TypeError(f"Not an authorizer: {value!r}")


class AuthorizedEntry:
    """
    Mixin for capability entries

    Subclasses set self.authorizer and define natural_key.
    """

    authorizer: Authorizer = ALLOW_ALL

    @property
    def natural_key(self) -> str:
        raise NotImplementedError

    def is_authorized(self, context: Optional[Any] = None) -> bool:
        """
        Check the entry's authorizer, failing closed

        Args:
            context: RequestContext of the caller

        Returns:
            bool: False when the authorizer denies or raises
        """
        try:
            return bool(self.authorizer.authorize(context))
        except Exception as e:
            logger.warning(
                f"Authorization check failed for '{self.natural_key}': "
                f"{type(e).__name__}: {e}"
            )
            return False
