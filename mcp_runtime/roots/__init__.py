"""
Roots module - Named filesystem directories exposed to clients
"""

from .root import Root
from .root_manager import RootManager

__all__ = ["Root", "RootManager"]
