"""
Unit Tests - Dispatcher

Module: tests.test_dispatcher
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
handle(raw, context) for every routed method plus the error paths:
parse errors, invalid envelopes, rate limiting, authorization, unknown
methods, notifications, domain and internal errors.
"""

import json
import logging
import os
import shutil
import tempfile
import time
import unittest

import jwt

from mcp_runtime.core.config import ServerConfig
from mcp_runtime.security.client_context import RequestContext
from mcp_runtime.security.jwt_verifier import JWTVerifier
from mcp_runtime.server.auth_gate import AuthorizationGate
from mcp_runtime.server.dispatcher import Dispatcher
from mcp_runtime.server.rate_limiter import RateLimiter

logging.basicConfig(level=logging.WARNING)

SECRET = "dispatcher-test-secret-at-least-32-chars"


class DispatcherTestCase(unittest.TestCase):
    """Dispatcher with one capability of each kind"""

    def setUp(self):
        self.dispatcher = Dispatcher(ServerConfig(server_name="test-server", server_version="9.9"))
        self.context = RequestContext(identity="tester")

        @self.dispatcher.tool(description="Echo the arguments")
        def echo(context, arguments):
            return arguments

        @self.dispatcher.tool(
            input_schema={
                "type": "object",
                "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                "required": ["a", "b"],
            },
        )
        def add(context, arguments):
            """Add two numbers"""
            return arguments["a"] + arguments["b"]

        @self.dispatcher.tool()
        def explode(context, arguments):
            raise RuntimeError("secret internals")

        @self.dispatcher.tool()
        def refuse(context, arguments):
            return {"error": {"message": "quota exhausted"}}

        @self.dispatcher.tool(authorize=lambda context: context.identity == "admin")
        def admin_only(context, arguments):
            return "ok"

        @self.dispatcher.resource("config://app", description="App config")
        def app_config(context, params):
            return {"debug": False}

        @self.dispatcher.resource("users/{id}", mime_type="application/json")
        def user(context, params):
            return {"id": params["id"]}

        @self.dispatcher.prompt(
            description="Greet someone",
            arguments={"name": {"type": "string", "description": "Who"}},
        )
        def greet(context, arguments):
            return f"Hello {arguments.get('name', 'you')}"

    def call(self, method, params=None, id="1", context=None):
        request = {"jsonrpc": "2.0", "method": method, "id": id}
        if params is not None:
            request["params"] = params
        reply = self.dispatcher.handle(json.dumps(request), context or self.context)
        return json.loads(reply)


class TestDispatcherEnvelope(DispatcherTestCase):
    """Test envelope level behavior"""

    def test_tool_call_echo_exact_bytes(self):
        """Test the canonical echo exchange"""
        raw = (
            '{"jsonrpc":"2.0","method":"tools/call",'
            '"params":{"name":"echo","arguments":{"x":1}},"id":"r1"}'
        )
        self.assertEqual(
            self.dispatcher.handle(raw, self.context),
            '{"jsonrpc":"2.0","result":{"content":[{"type":"text","text":"{\\"x\\":1}"}],'
            '"isError":false},"id":"r1"}',
        )

    def test_unknown_method(self):
        """Test -32601 with the request id"""
        reply = json.loads(self.dispatcher.handle('{"jsonrpc":"2.0","method":"bogus","id":"r2"}'))
        self.assertEqual(reply["id"], "r2")
        self.assertEqual(reply["error"]["code"], -32601)
        self.assertEqual(reply["error"]["message"], "Method not found: bogus")

    def test_unknown_notification_is_silent(self):
        """Test no reply at all"""
        self.assertIsNone(self.dispatcher.handle('{"jsonrpc":"2.0","method":"bogus"}'))

    def test_known_notification_is_silent(self):
        """Test notifications/initialized produces nothing"""
        self.assertIsNone(
            self.dispatcher.handle('{"jsonrpc":"2.0","method":"notifications/initialized"}')
        )

    def test_failing_notification_is_silent(self):
        """Test errors of notifications are not answered"""
        raw = '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"explode"}}'
        self.assertIsNone(self.dispatcher.handle(raw))

    def test_parse_error(self):
        """Test -32700 with id null"""
        reply = json.loads(self.dispatcher.handle("{oops"))
        self.assertIsNone(reply["id"])
        self.assertEqual(reply["error"]["code"], -32700)

    def test_invalid_request_echoes_id(self):
        """Test -32600 keeps a usable id"""
        reply = json.loads(self.dispatcher.handle('{"jsonrpc":"1.0","method":"ping","id":"r3"}'))
        self.assertEqual(reply["id"], "r3")
        self.assertEqual(reply["error"]["code"], -32600)

    def test_batch_is_invalid(self):
        """Test arrays are rejected with id null"""
        reply = json.loads(self.dispatcher.handle('[{"jsonrpc":"2.0","method":"ping","id":1}]'))
        self.assertIsNone(reply["id"])
        self.assertEqual(reply["error"]["code"], -32600)

    def test_inbound_response_is_ignored(self):
        """Test responses produce nothing"""
        self.assertIsNone(self.dispatcher.handle('{"jsonrpc":"2.0","result":1,"id":"x"}'))
        self.assertIsNone(
            self.dispatcher.handle('{"jsonrpc":"2.0","error":{"code":1,"message":"m"},"id":"x"}')
        )

    def test_positional_params_rejected(self):
        """Test -32602 for array params"""
        reply = self.call("tools/list", params=[1, 2])
        self.assertEqual(reply["error"]["code"], -32602)

    def test_integer_id_echoed(self):
        """Test numeric ids"""
        self.assertEqual(self.call("ping", id=42)["id"], 42)


class TestDispatcherMethods(DispatcherTestCase):
    """Test the routing table"""

    def test_initialize(self):
        """Test serverInfo, protocolVersion and capabilities"""
        result = self.call(
            "initialize",
            {"clientInfo": {"name": "c", "version": "1"}, "protocolVersion": "2025-03-26"},
        )["result"]
        self.assertEqual(result["serverInfo"], {"name": "test-server", "version": "9.9"})
        self.assertEqual(result["protocolVersion"], self.dispatcher.config.protocol_version)
        self.assertEqual(result["capabilities"]["tools"], {})
        self.assertIn("resources", result["capabilities"])
        self.assertIn("prompts", result["capabilities"])
        self.assertNotIn("roots", result["capabilities"])

    def test_empty_dispatcher_capabilities(self):
        """Test no capability advertised without entries"""
        self.assertEqual(Dispatcher().capabilities, {})

    def test_ping(self):
        """Test ping result"""
        self.assertEqual(self.call("ping")["result"], {"pong": True})

    def test_tools_list_filters_unauthorized(self):
        """Test tools/list hides denied tools"""
        names = [tool["name"] for tool in self.call("tools/list")["result"]["tools"]]
        self.assertEqual(names, ["echo", "add", "explode", "refuse"])

        admin = RequestContext(identity="admin")
        names = [tool["name"] for tool in self.call("tools/list", context=admin)["result"]["tools"]]
        self.assertIn("admin_only", names)

    def test_tools_list_schema(self):
        """Test tool descriptors"""
        tools = {tool["name"]: tool for tool in self.call("tools/list")["result"]["tools"]}
        self.assertEqual(tools["add"]["description"], "Add two numbers")
        self.assertEqual(tools["add"]["inputSchema"]["required"], ["a", "b"])

    def test_tool_call_number_result(self):
        """Test non-string results become compact JSON"""
        result = self.call("tools/call", {"name": "add", "arguments": {"a": 2, "b": 3}})["result"]
        self.assertEqual(result["content"], [{"type": "text", "text": "5"}])
        self.assertFalse(result["isError"])

    def test_tool_call_validation_error(self):
        """Test -32602 with the tool name in data"""
        error = self.call("tools/call", {"name": "add", "arguments": {"a": "two"}})["error"]
        self.assertEqual(error["code"], -32602)
        self.assertEqual(error["data"]["error_type"], "ValidationError")
        self.assertEqual(error["data"]["tool"], "add")

    def test_tool_call_not_found(self):
        """Test missing tool"""
        error = self.call("tools/call", {"name": "nope"})["error"]
        self.assertEqual(error["code"], -32603)
        self.assertEqual(error["message"], "Tool not found: nope")
        self.assertEqual(error["data"], {"error_type": "NotFoundError", "tool": "nope"})

    def test_tool_call_missing_name(self):
        """Test -32602 without a tool name"""
        self.assertEqual(self.call("tools/call", {})["error"]["code"], -32602)

    def test_tool_call_handler_fault(self):
        """Test handler exceptions become ToolExecutionError"""
        error = self.call("tools/call", {"name": "explode"})["error"]
        self.assertEqual(error["code"], -32603)
        self.assertEqual(error["data"]["error_type"], "ToolExecutionError")
        self.assertIn("secret internals", error["message"])

    def test_tool_call_reported_error(self):
        """Test {"error": {...}} results"""
        error = self.call("tools/call", {"name": "refuse"})["error"]
        self.assertEqual(error["message"], "quota exhausted")
        self.assertEqual(error["data"]["error_type"], "ToolExecutionError")

    def test_tool_call_unauthorized(self):
        """Test -32600 for a denied tool"""
        error = self.call("tools/call", {"name": "admin_only"})["error"]
        self.assertEqual(error["code"], -32600)
        self.assertEqual(error["data"]["error_type"], "AuthorizationError")

    def test_resources_list_and_templates(self):
        """Test both listings"""
        resources = self.call("resources/list")["result"]["resources"]
        self.assertEqual([r["uri"] for r in resources], ["config://app", "users/{id}"])
        templates = self.call("resources/templates/list")["result"]["resourceTemplates"]
        self.assertEqual([t["uriTemplate"] for t in templates], ["users/{id}"])

    def test_resources_read_template(self):
        """Test users/{id} captures the id"""
        result = self.call("resources/read", {"uri": "users/42"})["result"]
        content = result["contents"][0]
        self.assertEqual(content["uri"], "users/42")
        self.assertEqual(content["mimeType"], "application/json")
        self.assertEqual(json.loads(content["text"]), {"id": "42"})

    def test_resources_read_not_found(self):
        """Test segment mismatch is not found"""
        error = self.call("resources/read", {"uri": "users"})["error"]
        self.assertEqual(error["data"], {"error_type": "NotFoundError", "uri": "users"})

    def test_prompts(self):
        """Test prompts/list and prompts/get"""
        prompts = self.call("prompts/list")["result"]["prompts"]
        self.assertEqual(prompts[0]["name"], "greet")
        self.assertEqual(prompts[0]["arguments"], [{"name": "name", "required": False, "description": "Who"}])

        result = self.call("prompts/get", {"name": "greet", "arguments": {"name": "Ada"}})["result"]
        self.assertEqual(result["description"], "Greet someone")
        self.assertEqual(
            result["messages"],
            [{"role": "user", "content": {"type": "text", "text": "Hello Ada"}}],
        )

    def test_prompt_not_found(self):
        """Test missing prompt"""
        self.assertEqual(
            self.call("prompts/get", {"name": "nope"})["error"]["data"]["error_type"],
            "NotFoundError",
        )

    def test_internal_error_is_hidden(self):
        """Test non MCPError exceptions"""

        def broken(context, params):
            raise KeyError("database password")

        self.dispatcher.register_method("custom/broken", broken)
        error = self.call("custom/broken")["error"]
        self.assertEqual(error, {"code": -32603, "message": "Internal error"})


class TestDispatcherRoots(DispatcherTestCase):
    """Test roots/* methods against a temporary directory"""

    def setUp(self):
        super().setUp()
        self.base = tempfile.mkdtemp()
        with open(os.path.join(self.base, "notes.md"), "w", encoding="utf-8") as f:
            f.write("# Notes")
        self.dispatcher.roots.create_root("docs", self.base, description="Docs")
        self.dispatcher.roots.create_root("scratch", self.base, allow_writes=True)

    def tearDown(self):
        shutil.rmtree(self.base, ignore_errors=True)

    def test_roots_list(self):
        """Test roots/list"""
        roots = self.call("roots/list")["result"]["roots"]
        self.assertEqual(roots[0], {
            "name": "docs",
            "uri": "root://docs/",
            "description": "Docs",
            "allowWrites": False,
        })

    def test_roots_read(self):
        """Test roots/read"""
        content = self.call("roots/read", {"root": "docs", "path": "notes.md"})["result"]["contents"][0]
        self.assertEqual(content["uri"], "root://docs/notes.md")
        self.assertEqual(content["mimeType"], "text/markdown")
        self.assertEqual(content["text"], "# Notes")

    def test_roots_write(self):
        """Test roots/write on a writable root"""
        reply = self.call("roots/write", {"root": "scratch", "path": "out/a.txt", "content": "hi"})
        self.assertEqual(reply["result"], {"success": True})
        with open(os.path.join(self.base, "out", "a.txt"), encoding="utf-8") as f:
            self.assertEqual(f.read(), "hi")

    def test_roots_write_read_only(self):
        """Test ReadOnlyRootError"""
        error = self.call("roots/write", {"root": "docs", "path": "x.txt", "content": "x"})["error"]
        self.assertEqual(error["data"]["error_type"], "ReadOnlyRootError")
        self.assertFalse(os.path.exists(os.path.join(self.base, "x.txt")))

    def test_roots_read_escape(self):
        """Test traversal outside the base"""
        error = self.call("roots/read", {"root": "docs", "path": "../../etc/passwd"})["error"]
        self.assertEqual(error["data"]["error_type"], "InvalidPathError")


class TestDispatcherRateLimit(unittest.TestCase):
    """Test rate limiting inside handle()"""

    def test_third_request_rejected(self):
        """Test 2 per minute"""
        now = [600.0]
        dispatcher = Dispatcher(rate_limiter=RateLimiter(2, clock=lambda: now[0]))
        context = RequestContext(identity="X")
        raw = '{"jsonrpc":"2.0","method":"ping","id":1}'

        self.assertIn("result", json.loads(dispatcher.handle(raw, context)))
        self.assertIn("result", json.loads(dispatcher.handle(raw, context)))
        rejected = json.loads(dispatcher.handle(raw, context))
        self.assertEqual(rejected, {
            "jsonrpc": "2.0",
            "error": {"code": -32603, "message": "Rate limit exceeded"},
            "id": None,
        })
        self.assertIn("result", json.loads(dispatcher.handle(raw, RequestContext(identity="Y"))))

        now[0] += 60
        self.assertIn("result", json.loads(dispatcher.handle(raw, context)))


class TestDispatcherGate(unittest.TestCase):
    """Test the authorization gate inside handle()"""

    def setUp(self):
        self.dispatcher = Dispatcher(gate=AuthorizationGate(JWTVerifier(SECRET)))

        @self.dispatcher.tool()
        def echo(context, arguments):
            return context.auth_payload["sub"]

    def token(self, scopes, expires_in=3600):
        now = int(time.time())
        return jwt.encode(
            {"sub": "alice", "scopes": scopes, "exp": now + expires_in},
            SECRET,
            algorithm="HS256",
        )

    def handle(self, method, params=None, token=None):
        request = {"jsonrpc": "2.0", "method": method, "id": 1, "params": params or {}}
        context = RequestContext(identity="gate", auth_token=token)
        return json.loads(self.dispatcher.handle(json.dumps(request), context))

    def test_no_token(self):
        """Test every method needs a token"""
        error = self.handle("ping")["error"]
        self.assertEqual(error["code"], -32600)
        self.assertEqual(error["message"], "Unauthorized")

    def test_expired_token(self):
        """Test expired message"""
        error = self.handle("ping", token=self.token([], expires_in=-30))["error"]
        self.assertEqual(error["message"], "Token expired")

    def test_scope_allows_call(self):
        """Test payload reaches handlers"""
        result = self.handle("tools/call", {"name": "echo"}, token=self.token(["tools:call"]))["result"]
        self.assertEqual(result["content"][0]["text"], "alice")

    def test_scope_missing(self):
        """Test Forbidden"""
        error = self.handle("tools/call", {"name": "echo"}, token=self.token(["tools:read"]))["error"]
        self.assertEqual(error["message"], "Forbidden")


if __name__ == "__main__":
    unittest.main(verbosity=2)
