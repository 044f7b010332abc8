"""
Root Module - Filesystem directory exposed to MCP clients

Module: roots.root
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Path resolution confined to the base directory
  - list/read_file/write_file
  - Read-only roots by default

ARCHITECTURE:
Every client supplied path is resolved relative to the root's base
directory. Resolution happens in two steps:
  1. lexical normalization ("a/../../etc" escapes and is rejected)
  2. symlink resolution (a link pointing outside is rejected)
Both happen before the file is opened.

SECURITY NOTES:
- Writes are refused on read-only roots before the path is even resolved
- Leading "/" in client paths is treated as relative to the root
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.constants import FALLBACK_MIME_TYPE, MIME_TYPES_BY_SUFFIX
from ..core.errors import InvalidPathError, ReadOnlyRootError
from ..security.authorization import AuthorizedEntry, as_authorizer

ROOT_URI_SCHEME = "root"


class Root(AuthorizedEntry):
    """
    Directory root

    Attributes:
        name: Unique root name
        base: Absolute base directory
        description: Description for clients
        allow_writes: False for read-only roots
    """

    def __init__(
        self,
        name: str,
        path: str,
        description: str = "",
        allow_writes: bool = False,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        if not name:
            raise ValueError("Root must have a 'name'")
        self.name = name
        self.base = Path(os.path.abspath(os.path.expanduser(path)))
        self.description = description
        self.allow_writes = allow_writes
        self.tags = list(tags or [])
        self.metadata = dict(metadata or {})
        self.authorizer = as_authorizer(authorize)

    @property
    def natural_key(self) -> str:
        return self.name

    @property
    def read_only(self) -> bool:
        return not self.allow_writes

    def uri_for(self, path: str = "") -> str:
        return f"{ROOT_URI_SCHEME}://{self.name}/{str(path).lstrip('/')}"

    def resolve(self, path: str = "") -> Path:
        """
        Resolve a client path inside the base directory

        Args:
            path: Path relative to the root

        Returns:
            Path: Absolute path inside the base directory

        Raises:
            InvalidPathError: If the path escapes the base directory
        """
        relative = str(path or "").lstrip("/")
        candidate = Path(os.path.normpath(os.path.join(str(self.base), relative)))
        if not _is_within(candidate, self.base):
            raise InvalidPathError(
                f"Path is outside the root directory: {path}",
                data={"root": self.name},
            )

        real = Path(os.path.realpath(str(candidate)))
        if not _is_within(real, Path(os.path.realpath(str(self.base)))):
            raise InvalidPathError(
                f"Path is outside the root directory: {path}",
                data={"root": self.name},
            )
        return candidate

    def list(self, path: str = "") -> List[Dict[str, Any]]:
        """
        List a directory

        Returns:
            list: [{name, path, type, size, modified_at}] sorted by name
        """
        directory = self.resolve(path)
        entries = []
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            stat = child.stat()
            entries.append({
                "name": child.name,
                "path": "/" + child.relative_to(self.base).as_posix(),
                "type": "directory" if child.is_dir() else "file",
                "size": stat.st_size,
                "modified_at": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
            })
        return entries

    def read_file(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> bool:
        """
        Write a text file, creating parent directories

        Raises:
            ReadOnlyRootError: If the root does not allow writes
            InvalidPathError: If the path escapes the base directory
        """
        if not self.allow_writes:
            raise ReadOnlyRootError(
                f"Writes are not allowed to root '{self.name}'",
                data={"root": self.name},
            )
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return True

    @staticmethod
    def mime_type_for(path: str) -> str:
        return MIME_TYPES_BY_SUFFIX.get(Path(path).suffix.lower(), FALLBACK_MIME_TYPE)

    def to_schema(self) -> Dict[str, Any]:
        """
        Get root information for roots/list

        Returns:
            dict: {name, uri, description, allowWrites}
        """
        schema = {
            "name": self.name,
            "uri": self.uri_for(),
            "description": self.description,
            "allowWrites": self.allow_writes,
        }
        if self.tags:
            schema["tags"] = list(self.tags)
        if self.metadata:
            schema["metadata"] = dict(self.metadata)
        return schema

    def __repr__(self) -> str:
        mode = "rw" if self.allow_writes else "ro"
        return f"Root({self.name}, {self.base}, {mode})"


def _is_within(path: Path, base: Path) -> bool:
    try:
        path.relative_to(base)
    except ValueError:
        return False
    return True
