"""
Tools module - Callable capabilities with JSON schema inputs
"""

from .tool import Tool
from .tool_manager import ToolManager

__all__ = ["Tool", "ToolManager"]
