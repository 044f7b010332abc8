"""
Resources module - URI addressed content, static or templated
"""

from .resource import Resource, ResourceMatch
from .resource_manager import ResourceManager
from .uri_template import UriTemplate, is_template

__all__ = [
    "Resource",
    "ResourceManager",
    "ResourceMatch",
    "UriTemplate",
    "is_template",
]
