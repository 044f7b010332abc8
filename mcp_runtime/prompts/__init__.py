"""
Prompts module - Named message templates
"""

from .prompt import Prompt, normalize_message, normalize_messages
from .prompt_manager import PromptManager

__all__ = ["Prompt", "PromptManager", "normalize_message", "normalize_messages"]
