"""
URI Templates - {name} placeholders matched against concrete URIs

Module: resources.uri_template
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Placeholder extraction in template order
  - Template -> anchored regex, one path segment per placeholder
  - expand() filling placeholders back in

ARCHITECTURE:
"users/{id}/posts/{post}" compiles to ^users/([^/]+)/posts/([^/]+)$
with the literal parts escaped. match() zips the captured groups onto the
placeholder names, so "users/42/posts/7" gives {"id": "42", "post": "7"}.
"""

import re
from typing import Dict, List, Optional

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
SEGMENT_PATTERN = "([^/]+)"


class UriTemplate:
    """Compiled URI template"""

    def __init__(self, template: str):
        self.template = template
        self.params: List[str] = PLACEHOLDER.findall(template)
        self._regex = self._compile(template)

    @staticmethod
    def _compile(template: str) -> "re.Pattern":
        parts = []
        position = 0
        for placeholder in PLACEHOLDER.finditer(template):
            parts.append(re.escape(template[position:placeholder.start()]))
            parts.append(SEGMENT_PATTERN)
            position = placeholder.end()
        parts.append(re.escape(template[position:]))
        return re.compile("".join(parts))

    @property
    def is_template(self) -> bool:
        return bool(self.params)

    def match(self, uri: str) -> Optional[Dict[str, str]]:
        """
        Match a concrete URI

        Returns:
            dict: Placeholder values, or None when the URI does not match
        """
        found = self._regex.fullmatch(uri)
        if found is None:
            return None
        return dict(zip(self.params, found.groups()))

    def expand(self, values: Dict[str, str]) -> str:
        """Substitute placeholder values, leaving unknown ones untouched"""

        def substitute(placeholder: "re.Match") -> str:
            name = placeholder.group(1)
            return str(values[name]) if name in values else placeholder.group(0)

        return PLACEHOLDER.sub(substitute, self.template)

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"


def is_template(uri: str) -> bool:
    return bool(PLACEHOLDER.search(uri))
