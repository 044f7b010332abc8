"""
Unit Tests - Prompts

Module: tests.test_prompts
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
Prompt rendering, message normalization and argument validation.
"""

import logging
import unittest

from mcp_runtime.core.errors import NotFoundError, PromptRenderError, ValidationError
from mcp_runtime.prompts.prompt import Prompt, normalize_messages
from mcp_runtime.prompts.prompt_manager import PromptManager

logging.basicConfig(level=logging.WARNING)


class TestNormalizeMessages(unittest.TestCase):
    """Test handler output normalization"""

    def test_string(self):
        """Test a plain string becomes one user message"""
        self.assertEqual(
            normalize_messages("Hi"),
            [{"role": "user", "content": {"type": "text", "text": "Hi"}}],
        )

    def test_mixed_list(self):
        """Test strings and dicts together"""
        messages = normalize_messages([
            {"role": "assistant", "content": "Sure"},
            {"role": "user", "content": {"type": "text", "text": "Go"}},
            "Thanks",
        ])
        self.assertEqual([m["role"] for m in messages], ["assistant", "user", "user"])
        self.assertEqual(messages[0]["content"], {"type": "text", "text": "Sure"})

    def test_none(self):
        """Test no messages"""
        self.assertEqual(normalize_messages(None), [])


class TestPromptManager(unittest.TestCase):
    """Test registration and render()"""

    def setUp(self):
        self.manager = PromptManager()

        @self.manager.prompt(
            arguments={
                "type": "object",
                "properties": {"topic": {"type": "string", "description": "Subject"}},
                "required": ["topic"],
            },
        )
        def summarize(context, arguments):
            """Summarize a topic"""
            return [
                {"role": "assistant", "content": "You write short summaries."},
                f"Summarize {arguments['topic']}",
            ]

    def test_to_schema(self):
        """Test prompts/list descriptor"""
        self.assertEqual(self.manager.get("summarize").to_schema(), {
            "name": "summarize",
            "description": "Summarize a topic",
            "arguments": [{"name": "topic", "required": True, "description": "Subject"}],
        })

    def test_render(self):
        """Test messages"""
        messages = self.manager.render("summarize", {"topic": "MCP"})
        self.assertEqual(messages[1], {"role": "user", "content": {"type": "text", "text": "Summarize MCP"}})

    def test_missing_argument(self):
        """Test ValidationError for a required argument"""
        with self.assertRaises(ValidationError) as ctx:
            self.manager.render("summarize", {})
        self.assertEqual(ctx.exception.data, {"prompt": "summarize"})

    def test_not_found(self):
        """Test unknown prompt"""
        with self.assertRaises(NotFoundError):
            self.manager.render("missing")

    def test_handler_failure(self):
        """Test PromptRenderError"""
        self.manager.register(Prompt("broken", lambda c, a: a["nope"]))
        with self.assertRaises(PromptRenderError) as ctx:
            self.manager.render("broken")
        self.assertIn("broken", ctx.exception.message)

    def test_list_for(self):
        """Test authorization filter"""
        self.manager.register(Prompt("private", lambda c, a: "x", authorize=lambda c: False))
        self.assertEqual([p.name for p in self.manager.list_for(None)], ["summarize"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
