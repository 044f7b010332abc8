"""
Capability Registry - Thread-safe keyed store shared by all managers

Module: core.registry
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - register/unregister/get/exists/list/count
  - Duplicate keys rejected with AlreadyRegisteredError
  - All access under a single lock, list() returns a snapshot

ARCHITECTURE:
ToolManager, ResourceManager, PromptManager and RootManager each own one
CapabilityRegistry. Entries expose a natural_key (tool name, resource URI,
prompt name, root name) used when no explicit key is given.
Insertion order is preserved; ResourceManager relies on it for template
matching.
"""

import asyncio
import inspect
import logging
import threading
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .errors import AlreadyRegisteredError

T = TypeVar("T")


def call_handler(func: Callable, *args: Any) -> Any:
    """
    Call a capability handler, plain or async

    Coroutine results are run to completion on a fresh event loop; the
    dispatcher always calls handlers from worker threads.

    Args:
        func: Handler function
        *args: Positional arguments

    Returns:
        The handler's result
    """
    result = func(*args)
    if inspect.isawaitable(result):
        return asyncio.run(_await(result))
    return result


async def _await(awaitable: Any) -> Any:
    return await awaitable


class CapabilityRegistry(Generic[T]):
    """
    Keyed registry of capability entries

    Attributes:
        kind: Entry kind used in log messages ("tool", "resource", ...)
    """

    def __init__(self, kind: str):
        self.kind = kind
        self.logger = logging.getLogger(f"registry.{kind}")
        self._entries: Dict[str, T] = {}
        self._lock = threading.Lock()

    def register(self, entry: T, key: Optional[str] = None) -> T:
        """
        Register an entry

        Args:
            entry: Entry to store
            key: Registry key (default: entry.natural_key)

        Returns:
            The registered entry

        Raises:
            AlreadyRegisteredError: If the key is already taken
        """
        key = key if key is not None else entry.natural_key
        with self._lock:
            if key in self._entries:
                raise AlreadyRegisteredError(
                    f"{self.kind.capitalize()} already registered: {key}",
                    data={"key": key},
                )
            self._entries[key] = entry
        self.logger.info(f"{self.kind.capitalize()} registered: {key}")
        return entry

    def unregister(self, key: str) -> Optional[T]:
        """
        Remove an entry

        Args:
            key: Registry key

        Returns:
            The removed entry, or None if absent
        """
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is not None:
            self.logger.info(f"{self.kind.capitalize()} unregistered: {key}")
        return entry

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._entries.get(key)

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def list(self) -> List[T]:
        """
        Snapshot of all entries in registration order

        Returns:
            list: Copy safe to iterate while other threads register
        """
        with self._lock:
            return list(self._entries.values())

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Any) -> bool:
        return self.exists(key)

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"CapabilityRegistry({self.kind}, {self.count()} entries)"
