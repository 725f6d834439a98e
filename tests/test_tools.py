"""Tests for tools/list and tools/call handling."""

import json

from access_mcp_server.audit import AuditLogger
from access_mcp_server.plugins import ToolDispatcher, default_plugins
from access_mcp_server.protocol.tools import ToolsHandler


def make_handler(context, audit=None) -> ToolsHandler:
    dispatcher = ToolDispatcher()
    for plugin in default_plugins(context):
        dispatcher.register_plugin(plugin)
    return ToolsHandler(dispatcher, audit)


class TestToolsList:
    """Tests for tools/list."""

    def test_lists_every_tool_with_schema(self, context):
        """Should describe each tool with an object input schema."""
        tools = make_handler(context).handle_list()["tools"]

        assert tools
        for tool in tools:
            assert set(tool) == {"name", "description", "inputSchema"}
            assert tool["inputSchema"]["type"] == "object"

    def test_is_stable(self, context):
        """Should return the same list on every call."""
        handler = make_handler(context)

        assert handler.handle_list() == handler.handle_list()


class TestToolsCall:
    """Tests for tools/call."""

    def test_unknown_tool_is_a_failed_outcome(self, context):
        """Should wrap unknown tools instead of raising."""
        outcome = make_handler(context).handle_call("no_such_tool", {})

        assert outcome.is_error
        assert outcome.payload == {"success": False, "error": "Unknown tool: no_such_tool"}

    def test_successful_call(self, context):
        """Should return the plugin outcome."""
        outcome = make_handler(context).handle_call("is_connected", {})

        assert outcome.payload == {"success": True, "connected": True}


class TestAuditTrail:
    """Tests for audit records written around each call."""

    def test_records_request_and_response(self, context, tmp_path):
        """Should write a request and a response record with the same id."""
        log_path = tmp_path / "logs" / "audit.jsonl"
        with AuditLogger(log_path) as audit:
            make_handler(context, audit).handle_call(
                "connect_access", {"database_path": "nowhere.accdb", "password": "hunter2"}
            )

        records = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert [r["type"] for r in records] == ["request", "response"]
        assert records[0]["request_id"] == records[1]["request_id"]
        assert records[0]["arguments"]["password"] == "[REDACTED]"
        assert records[1]["result_status"] == "error"
        assert records[1]["error"] == "Database file not found: nowhere.accdb"
        assert records[1]["execution_time_ms"] >= 0
        assert "hunter2" not in log_path.read_text()

    def test_success_has_no_error_field(self, context, tmp_path):
        """Should omit error for successful calls."""
        log_path = tmp_path / "audit.jsonl"
        with AuditLogger(log_path) as audit:
            make_handler(context, audit).handle_call("get_tables", {})

        response = json.loads(log_path.read_text().splitlines()[1])
        assert response["result_status"] == "success"
        assert "error" not in response
