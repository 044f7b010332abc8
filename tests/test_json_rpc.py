"""
Unit Tests - JSON-RPC message model

Module: tests.test_json_rpc
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
Message construction, serialization, validation and classification.
"""

import json
import logging
import unittest

from mcp_runtime.core.errors import InvalidRequestError, NotFoundError, ParseError
from mcp_runtime.protocol import json_rpc

logging.basicConfig(level=logging.WARNING)


class TestBuilders(unittest.TestCase):
    """Test message factories"""

    def test_build_request_generates_distinct_ids(self):
        """Test 100 requests without ids get 100 ids"""
        ids = {json_rpc.build_request("ping").id for _ in range(100)}
        self.assertEqual(len(ids), 100)

    def test_build_request_keeps_explicit_id(self):
        """Test explicit id is kept, including 0"""
        self.assertEqual(json_rpc.build_request("ping", id="r1").id, "r1")
        self.assertEqual(json_rpc.build_request("ping", id=0).id, 0)

    def test_request_field_order(self):
        """Test serialized key order"""
        request = json_rpc.build_request("tools/call", {"name": "echo"}, id="r1")
        self.assertEqual(
            json_rpc.encode(request),
            '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"echo"},"id":"r1"}',
        )

    def test_request_without_params_omits_key(self):
        """Test params omitted when None"""
        self.assertNotIn("params", json_rpc.build_request("ping", id=1).to_dict())

    def test_build_error_omits_missing_data(self):
        """Test error without data"""
        error = json_rpc.build_error("r2", -32601, "Method not found: bogus")
        self.assertEqual(
            error.to_dict(),
            {
                "jsonrpc": "2.0",
                "error": {"code": -32601, "message": "Method not found: bogus"},
                "id": "r2",
            },
        )
        self.assertEqual(error.code, -32601)
        self.assertIsNone(error.data)

    def test_build_error_from_exception(self):
        """Test domain errors carry their class name in data"""
        error = json_rpc.build_error_from(
            7, NotFoundError("Tool not found: x", data={"tool": "x"})
        )
        self.assertEqual(error.code, -32603)
        self.assertEqual(error.data, {"error_type": "NotFoundError", "tool": "x"})


class TestRoundTrip(unittest.TestCase):
    """Test parse(encode(message)) == message"""

    def test_round_trip_each_kind(self):
        """Test one message of each kind"""
        messages = [
            json_rpc.build_request("tools/list", {"cursor": None}, id="a"),
            json_rpc.build_request("ping", id=3),
            json_rpc.build_notification("notifications/initialized"),
            json_rpc.build_notification("log", ["x", 1]),
            json_rpc.build_success("a", {"tools": []}),
            json_rpc.build_success(4, None),
            json_rpc.build_error("a", -32602, "Invalid params", {"tool": "t"}),
            json_rpc.build_error(None, -32700, "Parse error"),
        ]
        for message in messages:
            with self.subTest(message=message):
                self.assertEqual(json_rpc.parse(json_rpc.encode(message)), message)

    def test_parse_bytes(self):
        """Test UTF-8 bytes are accepted"""
        message = json_rpc.parse(b'{"jsonrpc":"2.0","method":"ping","id":1}')
        self.assertIsInstance(message, json_rpc.Request)


class TestValidation(unittest.TestCase):
    """Test envelope rules"""

    def test_decode_malformed_raises_parse_error(self):
        """Test malformed JSON"""
        with self.assertRaises(ParseError) as ctx:
            json_rpc.decode("{not json")
        self.assertEqual(ctx.exception.code, -32700)

    def test_invalid_envelopes(self):
        """Test values rejected by validate()"""
        invalid = [
            [],
            "text",
            {"method": "ping", "id": 1},
            {"jsonrpc": "1.0", "method": "ping", "id": 1},
            {"jsonrpc": "2.0", "method": "", "id": 1},
            {"jsonrpc": "2.0", "method": 5, "id": 1},
            {"jsonrpc": "2.0", "method": "ping", "id": None},
            {"jsonrpc": "2.0", "method": "ping", "id": True},
            {"jsonrpc": "2.0", "method": "ping", "id": 1.5},
            {"jsonrpc": "2.0", "method": "ping", "params": "x", "id": 1},
            {"jsonrpc": "2.0", "method": "ping", "result": 1, "id": 1},
            {"jsonrpc": "2.0", "result": 1},
            {"jsonrpc": "2.0", "result": 1, "error": {"code": 1, "message": "m"}, "id": 1},
            {"jsonrpc": "2.0", "error": {"code": "x", "message": "m"}, "id": 1},
            {"jsonrpc": "2.0", "error": {"code": True, "message": "m"}, "id": 1},
            {"jsonrpc": "2.0", "method": "ping", "id": 2.0},
            {"jsonrpc": "2.0", "error": "boom", "id": 1},
        ]
        for value in invalid:
            with self.subTest(value=value):
                self.assertIsInstance(json_rpc.validate(value), InvalidRequestError)

    def test_reserved_method_prefix(self):
        """Test rpc.* methods are rejected"""
        error = json_rpc.validate({"jsonrpc": "2.0", "method": "rpc.discover", "id": 1})
        self.assertIn("reserved", error.message)

    def test_error_response_may_have_null_id(self):
        """Test ErrorResponse with id null is valid"""
        value = {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}
        self.assertIsNone(json_rpc.validate(value))

    def test_parse_raises_on_invalid(self):
        """Test parse raises where validate returns"""
        with self.assertRaises(InvalidRequestError):
            json_rpc.parse('{"jsonrpc":"2.0"}')

    def test_usable_id(self):
        """Test id echoed for rejected values"""
        self.assertEqual(json_rpc.usable_id({"id": "r9", "jsonrpc": "1.0"}), "r9")
        self.assertIsNone(json_rpc.usable_id({"id": [1]}))
        self.assertIsNone(json_rpc.usable_id([1, 2]))


class TestClassification(unittest.TestCase):
    """Test exactly one predicate holds per message"""

    def test_classification_is_total(self):
        """Test each parsed message kind"""
        raw = [
            '{"jsonrpc":"2.0","method":"a","id":1}',
            '{"jsonrpc":"2.0","method":"a"}',
            '{"jsonrpc":"2.0","result":{},"id":1}',
            '{"jsonrpc":"2.0","error":{"code":-32600,"message":"x"},"id":null}',
        ]
        predicates = [
            json_rpc.is_request,
            json_rpc.is_notification,
            json_rpc.is_response,
            json_rpc.is_error,
        ]
        for index, frame in enumerate(raw):
            message = json_rpc.parse(frame)
            results = [predicate(message) for predicate in predicates]
            self.assertEqual(results.count(True), 1, frame)
            self.assertTrue(results[index], frame)

    def test_predicates_accept_dicts(self):
        """Test dict input"""
        self.assertTrue(json_rpc.is_request(json.loads('{"method":"a","id":1}')))
        self.assertTrue(json_rpc.is_notification({"method": "a"}))


if __name__ == "__main__":
    unittest.main(verbosity=2)
