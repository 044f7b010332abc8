"""
Prompt Manager - Central registry for prompts

Module: prompts.prompt_manager
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Registration on top of CapabilityRegistry
  - render() with argument validation and error wrapping
  - Decorator support via prompt()
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import MCPError, NotFoundError, PromptRenderError, ValidationError
from ..core.registry import CapabilityRegistry
from .prompt import Prompt


class PromptManager:
    """
    Central registry and manager for MCP prompts
    """

    def __init__(self):
        self.logger = logging.getLogger("prompts.manager")
        self._registry: CapabilityRegistry[Prompt] = CapabilityRegistry("prompt")

    def register(self, prompt: Prompt, key: Optional[str] = None) -> Prompt:
        """
        Register a prompt

        Raises:
            AlreadyRegisteredError: If the key is already taken
        """
        return self._registry.register(prompt, key)

    def unregister(self, name: str) -> Optional[Prompt]:
        return self._registry.unregister(name)

    def get(self, name: str) -> Optional[Prompt]:
        return self._registry.get(name)

    def exists(self, name: str) -> bool:
        return self._registry.exists(name)

    def list(self) -> List[Prompt]:
        return self._registry.list()

    def count(self) -> int:
        return self._registry.count()

    def list_for(self, context: Any = None) -> List[Prompt]:
        return [prompt for prompt in self.list() if prompt.is_authorized(context)]

    def render(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        context: Any = None,
    ) -> List[Dict[str, Any]]:
        """
        Render a prompt to messages

        Args:
            name: Prompt name
            arguments: Prompt arguments (default: {})
            context: RequestContext passed to the handler

        Returns:
            list: Normalized messages

        Raises:
            NotFoundError: If no such prompt
            ValidationError: If arguments do not match the schema
            PromptRenderError: If the handler raises
        """
        prompt = self.get(name)
        if prompt is None:
            raise NotFoundError(f"Prompt not found: {name}", data={"prompt": name})

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ValidationError(
                f"Prompt '{name}' arguments must be an object",
                data={"prompt": name},
            )
        prompt.validate_arguments(arguments)

        try:
            return prompt.render(arguments, context)
        except MCPError:
            raise
        except Exception as e:
            self.logger.error(f"Error rendering prompt '{name}': {e}", exc_info=True)
            raise PromptRenderError(
                f"Error rendering prompt '{name}': {e}",
                data={"prompt": name},
            ) from e

    def prompt(
        self,
        name: Optional[str] = None,
        description: str = "",
        arguments: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        authorize: Any = None,
    ):
        """
        Decorator to register a prompt

        Usage:
            @prompt_manager.prompt(arguments={"topic": {"type": "string"}})
            def summarize(context, arguments):
                return f"Summarize {arguments['topic']}"
        """

        def decorator(func: Callable):
            self.register(
                Prompt(
                    name=name or func.__name__,
                    handler=func,
                    description=description or (func.__doc__ or "").strip(),
                    arguments=arguments,
                    tags=tags,
                    metadata=metadata,
                    authorize=authorize,
                )
            )
            return func

        return decorator
