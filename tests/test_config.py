"""
Unit Tests - Configuration, errors and StdioServer

Module: tests.test_config
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
- ServerConfig / ConnectionConfig validation
- MCPError wire conversion
- StdioServer over in-memory streams
- Command line parsing of the entry point
"""

import io
import json
import logging
import unittest

from mcp_runtime.__main__ import parse_args
from mcp_runtime.core.config import ConnectionConfig, ServerConfig, configure_logging
from mcp_runtime.core.constants import MCP_PROTOCOL_VERSION
from mcp_runtime.core.errors import (
    AuthorizationError,
    ConfigurationError,
    MCPError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from mcp_runtime.security.client_context import RequestContext
from mcp_runtime.server.dispatcher import Dispatcher
from mcp_runtime.server.stdio_server import StdioServer

logging.basicConfig(level=logging.WARNING)


class TestConfig(unittest.TestCase):
    """Test configuration objects"""

    def test_server_defaults(self):
        """Test defaults"""
        config = ServerConfig()
        self.assertEqual(config.protocol_version, MCP_PROTOCOL_VERSION)
        self.assertEqual(config.rate_limit_per_minute, 60)
        self.assertEqual(config.server_info, {"name": "mcp-runtime", "version": "0.1.0"})

    def test_server_validation(self):
        """Test invalid values rejected"""
        with self.assertRaises(ConfigurationError):
            ServerConfig(rate_limit_per_minute=-1)
        with self.assertRaises(ConfigurationError):
            ServerConfig(request_timeout=0)

    def test_connection_defaults(self):
        """Test client info default"""
        config = ConnectionConfig()
        self.assertIn("name", config.client_info)
        with self.assertRaises(ConfigurationError):
            ConnectionConfig(request_timeout=-1)

    def test_configure_logging_stream(self):
        """Test records routed to the given stream"""
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)
        try:
            logging.getLogger("test.config").info("hello log")
            self.assertIn("test.config - INFO - hello log", stream.getvalue())
        finally:
            logging.basicConfig(level=logging.WARNING, force=True)


class TestErrors(unittest.TestCase):
    """Test error objects"""

    def test_codes(self):
        """Test default wire codes"""
        self.assertEqual(NotFoundError().code, -32603)
        self.assertEqual(AuthorizationError().code, -32600)
        self.assertEqual(ValidationError().code, -32602)

    def test_default_message(self):
        """Test message derived from the code"""
        self.assertEqual(ValidationError().message, "Invalid params")

    def test_error_object(self):
        """Test error_type merged into data"""
        error = NotFoundError("Tool not found: x", data={"tool": "x"})
        self.assertEqual(error.to_error_object(), {
            "code": -32603,
            "message": "Tool not found: x",
            "data": {"error_type": "NotFoundError", "tool": "x"},
        })

    def test_remote_error_round_trip(self):
        """Test peer error kept untouched"""
        remote = RemoteError.from_error_object({"code": -32601, "message": "nope"})
        self.assertEqual(remote.to_error_object(), {"code": -32601, "message": "nope"})
        self.assertIsInstance(remote, MCPError)

    def test_remote_error_from_junk(self):
        """Test non dict errors"""
        remote = RemoteError.from_error_object("oops")
        self.assertEqual(remote.code, -32603)
        self.assertEqual(remote.message, "oops")


class TestStdioServer(unittest.TestCase):
    """Test StdioServer with in-memory streams"""

    def serve(self, lines, dispatcher=None, context=None):
        dispatcher = dispatcher or Dispatcher()
        output = io.StringIO()
        server = StdioServer(dispatcher, io.StringIO("\n".join(lines) + "\n"), output, context)
        handled = server.serve_forever()
        replies = [json.loads(line) for line in output.getvalue().splitlines()]
        return handled, replies

    def test_one_reply_per_request(self):
        """Test requests answered, notifications and blanks silent"""
        handled, replies = self.serve([
            '{"jsonrpc":"2.0","method":"ping","id":1}',
            "",
            '{"jsonrpc":"2.0","method":"notifications/initialized"}',
            '{"jsonrpc":"2.0","method":"ping","id":2}',
        ])
        self.assertEqual(handled, 3)
        self.assertEqual([reply["id"] for reply in replies], [1, 2])

    def test_parse_error_keeps_serving(self):
        """Test garbage line answered with -32700"""
        handled, replies = self.serve(["{bad", '{"jsonrpc":"2.0","method":"ping","id":"after"}'])
        self.assertEqual(replies[0]["error"]["code"], -32700)
        self.assertEqual(replies[1]["result"], {"pong": True})

    def test_context_template(self):
        """Test identity and token copied to each request"""
        dispatcher = Dispatcher()
        seen = []

        @dispatcher.tool()
        def whoami(context, arguments):
            seen.append(context)
            return context.identity

        self.serve(
            [
                '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"whoami"},"id":1}',
                '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"whoami"},"id":2}',
            ],
            dispatcher=dispatcher,
            context=RequestContext(identity="cli", auth_token="t"),
        )
        self.assertEqual([c.identity for c in seen], ["cli", "cli"])
        self.assertEqual(seen[0].auth_token, "t")
        self.assertIsNot(seen[0], seen[1])

    def test_binary_streams(self):
        """Test bytes in and bytes out"""
        output = io.BytesIO()
        server = StdioServer(
            Dispatcher(),
            io.BytesIO(b'{"jsonrpc":"2.0","method":"ping","id":7}\n'),
            output,
        )
        server.serve_forever()
        self.assertEqual(
            json.loads(output.getvalue().decode("utf-8")),
            {"jsonrpc": "2.0", "result": {"pong": True}, "id": 7},
        )


class TestEntryPoint(unittest.TestCase):
    """Test command line parsing"""

    def test_defaults(self):
        """Test stdio by default"""
        args = parse_args([])
        self.assertFalse(args.websocket)
        self.assertEqual(args.port, 9001)
        self.assertEqual(args.rate_limit, 60)

    def test_websocket_options(self):
        """Test --websocket --port --rate-limit"""
        args = parse_args(["--websocket", "--port", "0", "--rate-limit", "5", "--debug"])
        self.assertTrue(args.websocket)
        self.assertEqual(args.port, 0)
        self.assertEqual(args.rate_limit, 5)
        self.assertTrue(args.debug)


if __name__ == "__main__":
    unittest.main(verbosity=2)
