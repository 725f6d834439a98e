"""Tests for the plugin base, the dispatcher and the tool groups."""

import json
from typing import Any

import pytest

from access_mcp_server.backend.base import BackendError
from access_mcp_server.plugins import (
    BackendPlugin,
    ConnectionPlugin,
    DuplicateToolError,
    FormsPlugin,
    InvalidToolSchemaError,
    SchemaPlugin,
    SqlPlugin,
    ToolDefinition,
    ToolDispatcher,
    ToolExecutionError,
    ToolNotFoundError,
    ToolOutcome,
    VbaPlugin,
    default_plugins,
)
from access_mcp_server.plugins.base import PluginBase, object_schema
from access_mcp_server.protocol.binder import ArgumentError, require_string


class EchoPlugin(BackendPlugin):
    """Minimal plugin for exercising BackendPlugin."""

    aliases = {"shout": "echo"}

    @property
    def name(self) -> str:
        return "echo"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition("echo", "Echo text back", object_schema({}, ["text"])),
            ToolDefinition("explode", "Always fails", object_schema()),
        ]

    def _handlers(self):
        return {"echo": self._echo, "explode": self._explode}

    def _echo(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"text": require_string(arguments, "text")}

    def _explode(self, arguments: dict[str, Any]) -> dict[str, Any]:
        raise BackendError("Class not registered")


class BrokenPlugin(PluginBase):
    """Plugin whose execute raises instead of returning an outcome."""

    @property
    def name(self) -> str:
        return "broken"

    @property
    def version(self) -> str:
        return "0.0.1"

    def get_tools(self) -> list[ToolDefinition]:
        return [ToolDefinition("broken_tool", "Raises", object_schema())]

    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        raise RuntimeError("kaboom")


class BadSchemaPlugin(BrokenPlugin):
    """Plugin advertising a schema with an unknown type."""

    def get_tools(self) -> list[ToolDefinition]:
        return [ToolDefinition("bad_tool", "Bad schema", {"type": "objekt"})]


class TestToolOutcome:
    """Tests for the tool result envelope."""

    def test_success_envelope(self):
        """Should mirror the payload in text and structured content."""
        result = ToolOutcome.ok(connected=False).to_dict()

        assert result["structuredContent"] == {"success": True, "connected": False}
        assert json.loads(result["content"][0]["text"]) == result["structuredContent"]
        assert result["content"][0]["type"] == "text"
        assert result["isError"] is False

    def test_failure_envelope(self):
        """Should flag explicit failures."""
        result = ToolOutcome.failure("nope").to_dict()

        assert result["isError"] is True
        assert result["structuredContent"] == {"success": False, "error": "nope"}

    def test_missing_success_is_not_an_error(self):
        """Only an explicit success false marks the result as an error."""
        assert ToolOutcome({"value": 1}).is_error is False


class TestBackendPlugin:
    """Tests for the shared tool wrapper."""

    def test_lists_aliases_after_canonical_tools(self, context):
        """Should advertise aliases with the canonical schema."""
        tools = EchoPlugin(context).get_tools()

        assert [t.name for t in tools] == ["echo", "explode", "shout"]
        assert tools[2].description.startswith("Alias of echo.")
        assert tools[2].input_schema == tools[0].input_schema

    def test_success_defaults_to_true(self, context):
        """Should add success true to handler fields."""
        outcome = EchoPlugin(context).execute("echo", {"text": "hi"})

        assert outcome.payload == {"success": True, "text": "hi"}

    def test_alias_runs_canonical_handler(self, context):
        """Should route aliases to the same handler."""
        outcome = EchoPlugin(context).execute("shout", {"text": "hi"})

        assert outcome.payload["text"] == "hi"

    def test_argument_error_has_no_preflight(self, context):
        """Should report binder errors without diagnostics."""
        outcome = EchoPlugin(context).execute("echo", {})

        assert outcome.payload == {"success": False, "error": "text is required"}

    def test_backend_error_carries_preflight(self, context):
        """Should classify backend failures and attach preflight data."""
        outcome = EchoPlugin(context).execute("explode", {})

        assert outcome.is_error
        assert "Original error: Class not registered" in outcome.payload["error"]
        assert outcome.payload["preflight"]["ace_oledb_issue_detected"] is True
        assert outcome.payload["preflight"]["process_bitness"] == "64-bit"

    def test_notifies_before_and_on_failure(self, context, sent_lines):
        """Should send a debug frame per call and an error frame per failure."""
        EchoPlugin(context).execute("explode", {})

        frames = [json.loads(line)["params"] for line in sent_lines]
        assert [f["level"] for f in frames] == ["debug", "error"]
        assert frames[0]["logger"] == "echo"
        assert frames[0]["data"] == {"tool": "explode", "message": "Calling explode"}
        assert frames[1]["data"]["tool"] == "explode"

    def test_unknown_tool(self, context):
        """Should fail without raising."""
        outcome = EchoPlugin(context).execute("nothing", {})

        assert outcome.payload == {"success": False, "error": "Unknown tool: nothing"}


class TestToolDispatcher:
    """Tests for routing tool calls."""

    def test_routes_to_plugin(self, context):
        """Should call the plugin that owns the tool."""
        dispatcher = ToolDispatcher()
        dispatcher.register_plugin(EchoPlugin(context))

        assert "shout" in [tool["name"] for tool in dispatcher.list_tools()]
        assert dispatcher.call_tool("echo", {"text": "x"}).payload["text"] == "x"

    def test_unknown_tool_raises(self):
        """Should raise ToolNotFoundError."""
        with pytest.raises(ToolNotFoundError, match="Unknown tool: missing"):
            ToolDispatcher().call_tool("missing", {})

    def test_wraps_plugin_exceptions(self):
        """Should wrap exceptions escaping a plugin."""
        dispatcher = ToolDispatcher()
        dispatcher.register_plugin(BrokenPlugin())

        with pytest.raises(ToolExecutionError, match="Tool 'broken_tool' execution failed: kaboom"):
            dispatcher.call_tool("broken_tool", {})

    def test_rejects_duplicate_names(self, context):
        """Should refuse a plugin that repeats a registered tool name."""
        dispatcher = ToolDispatcher()
        dispatcher.register_plugin(EchoPlugin(context))

        with pytest.raises(DuplicateToolError, match="Duplicate tool name: echo"):
            dispatcher.register_plugin(EchoPlugin(context))
        assert len(dispatcher.list_tools()) == 3

    def test_rejects_invalid_schemas(self):
        """Should refuse tools whose input schema is not valid JSON Schema."""
        dispatcher = ToolDispatcher()

        with pytest.raises(InvalidToolSchemaError, match="Invalid schema for tool bad_tool"):
            dispatcher.register_plugin(BadSchemaPlugin())
        assert dispatcher.list_tools() == []

    def test_default_plugins_have_unique_names(self, context):
        """Should register every standard tool group without clashes."""
        dispatcher = ToolDispatcher()
        for plugin in default_plugins(context):
            dispatcher.register_plugin(plugin)

        names = [tool["name"] for tool in dispatcher.list_tools()]
        assert len(names) == len(set(names))
        assert names[0] == "connect_access"
        for name in ("execute_sql", "execute_query", "list_tables", "get_table_schema"):
            assert name in names


class TestConnectionPlugin:
    """Tests for connection tools."""

    def test_connect_and_disconnect(self, context, database_path):
        """Should report the connected path and then disconnect."""
        plugin = ConnectionPlugin(context)

        result = plugin.execute("connect_access", {"database_path": str(database_path)})
        assert result.payload["connected"] is True
        assert result.payload["database_path"] == str(database_path.resolve())

        result = plugin.execute("disconnect_access", {})
        assert result.payload == {
            "success": True,
            "message": "Disconnected from database",
            "connected": False,
        }
        assert plugin.execute("is_connected", {}).payload == {"success": True, "connected": False}

    def test_connect_missing_file(self, context, tmp_path):
        """Should fail without a preflight block."""
        missing = tmp_path / "missing.accdb"

        plugin = ConnectionPlugin(context)
        result = plugin.execute("connect_access", {"database_path": str(missing)})

        assert result.payload == {"success": False, "error": f"Database file not found: {missing}"}

    def test_connection_info(self, context):
        """Should include transaction state."""
        result = ConnectionPlugin(context).execute("get_connection_info", {})

        assert result.payload["connected"] is True
        assert result.payload["transaction"]["active"] is False

    def test_launch_access_is_unavailable(self, context):
        """Should fail with diagnostics on the SQLite backend."""
        result = ConnectionPlugin(context).execute("launch_access", {})

        assert result.is_error
        assert "automation backend" in result.payload["error"]
        assert "preflight" in result.payload

    def test_backup_defaults_to_connected_database(self, context, tmp_path):
        """Should copy the connected database when no source is given."""
        destination = tmp_path / "backup" / "Sales.bak"

        result = ConnectionPlugin(context).execute(
            "backup_database", {"destination_database_path": str(destination)}
        )

        assert result.payload["success"] is True
        assert result.payload["operated_on_connected_database"] is True
        assert destination.is_file()


class TestSchemaPlugin:
    """Tests for schema tools."""

    def test_list_tables_alias(self, context):
        """Should list user tables through the alias."""
        result = SchemaPlugin(context).execute("list_tables", {})

        assert [t["name"] for t in result.payload["tables"]] == ["Customers", "Orders"]

    def test_describe_table_accepts_table_alias(self, context):
        """Should accept the legacy table argument."""
        result = SchemaPlugin(context).execute("get_table_schema", {"table": "Orders"})

        assert result.payload["table"]["primary_key_columns"] == ["OrderID"]

    def test_create_table_validates_fields(self, context):
        """Should name the bad entry."""
        result = SchemaPlugin(context).execute(
            "create_table", {"table_name": "T", "fields": [{"name": "A", "type": "TEXT"}, {}]}
        )

        assert result.payload["success"] is False
        assert result.payload["error"].startswith("fields[1]:")

    def test_create_table_and_index(self, context):
        """Should create a table and then an index on it."""
        plugin = SchemaPlugin(context)
        fields = [{"name": "ID", "type": "COUNTER"}, {"name": "Code", "type": "TEXT", "size": 10}]

        created = plugin.execute("create_table", {"table_name": "Items", "fields": fields})
        assert created.payload["success"] is True

        result = plugin.execute(
            "create_index",
            {
                "table_name": "Items",
                "index_name": "idx_code",
                "columns": ["Code", "code"],
                "unique": True,
            },
        )

        assert result.payload["columns"] == ["Code"]
        indexes = plugin.execute("get_indexes", {"table_name": "Items"}).payload["indexes"]
        assert {"idx_code"} <= {index["name"] for index in indexes}

    def test_missing_table_is_reported(self, context):
        """Should fail with the backend message."""
        result = SchemaPlugin(context).execute("describe_table", {"table_name": "Nope"})

        assert result.payload["error"] == "Table not found: Nope"


class TestSqlPlugin:
    """Tests for SQL tools."""

    def test_execute_sql_select(self, context):
        """Should return columns and rows."""
        result = SqlPlugin(context).execute(
            "execute_sql",
            {
                "sql": "SELECT Name FROM Customers WHERE City = ? ORDER BY Name",
                "parameters": ["Leeds"],
            },
        )

        assert result.payload["columns"] == ["Name"]
        assert result.payload["rows"] == [{"Name": "Alice"}, {"Name": "Carol"}]
        assert result.payload["row_count"] == 2
        assert result.payload["truncated"] is False
        assert result.payload["max_rows"] == 200

    def test_execute_sql_truncates(self, context):
        """Should cap rows and flag truncation."""
        result = SqlPlugin(context).execute(
            "execute_query", {"sql": "SELECT * FROM Customers", "max_rows": 2}
        )

        assert result.payload["row_count"] == 2
        assert result.payload["truncated"] is True

    def test_execute_sql_rejects_zero_rows(self, context):
        """Should reject non-positive limits as an argument error."""
        result = SqlPlugin(context).execute("execute_sql", {"sql": "SELECT 1", "max_rows": 0})

        assert result.payload == {"success": False, "error": "max_rows must be greater than 0"}

    def test_action_statement(self, context):
        """Should report rows affected."""
        result = SqlPlugin(context).execute(
            "execute_sql", {"sql": "UPDATE Customers SET City = 'Hull' WHERE City = 'Leeds'"}
        )

        assert result.payload == {"success": True, "is_query": False, "rows_affected": 2}

    def test_markdown(self, context):
        """Should render a markdown table."""
        result = SqlPlugin(context).execute(
            "run_sql_markdown", {"sql": "SELECT Name FROM Customers ORDER BY Name LIMIT 1"}
        )

        assert result.payload["markdown"] == "| Name |\n| --- |\n| Alice |"

    def test_transaction_round_trip(self, context):
        """Should begin, report and roll back a transaction."""
        plugin = SqlPlugin(context)

        begun = plugin.execute("begin_transaction", {"isolation_level": "Serializable"})
        assert begun.payload["active"] is True
        assert begun.payload["isolation_level"] == "EXCLUSIVE"

        plugin.execute("execute_sql", {"sql": "DELETE FROM Orders"})
        rolled = plugin.execute("rollback_transaction", {})
        assert rolled.payload["message"] == "Transaction rolled back"
        assert rolled.payload["active"] is False

        count = plugin.execute("execute_sql", {"sql": "SELECT COUNT(*) AS n FROM Orders"})
        assert count.payload["rows"] == [{"n": 3}]

    def test_commit_without_transaction(self, context):
        """Should fail with the backend message."""
        result = SqlPlugin(context).execute("commit_transaction", {})

        assert result.payload["error"] == "No active transaction to commit."


class TestFormsPlugin:
    """Tests for form and report tools."""

    def test_import_export_delete_form(self, context):
        """Should store, return and remove a form definition."""
        plugin = FormsPlugin(context)
        definition = 'Begin Form\n    Name = "frmOrders"\nEnd'

        imported = plugin.execute("import_form_from_text", {"form_data": definition})
        assert imported.payload["form_name"] == "frmOrders"

        assert plugin.execute("form_exists", {"form_name": "frmOrders"}).payload["exists"] is True
        exported = plugin.execute("export_form_to_text", {"form_name": "frmOrders"})
        assert exported.payload["form_data"] == definition

        assert plugin.execute("delete_form", {"form_name": "frmOrders"}).payload["success"]
        assert plugin.execute("get_forms", {}).payload["forms"] == []

    def test_definition_text_round_trips_unchanged(self, context):
        """Should keep indentation and trailing newlines of imported text."""
        plugin = FormsPlugin(context)
        definition = '  Begin Report\n    Name = "rptSales"\n  End\n\n'

        plugin.execute("import_report_from_text", {"report_data": definition})
        exported = plugin.execute("export_report_to_text", {"report_name": "rptSales"})

        assert exported.payload["report_data"] == definition

    def test_open_form_requires_automation(self, context):
        """Should fail on the SQLite backend."""
        result = FormsPlugin(context).execute("open_form", {"form_name": "frmOrders"})

        assert result.is_error
        assert "automation backend" in result.payload["error"]

    def test_set_control_property_requires_value(self, context):
        """Should reject a missing value before touching the backend."""
        result = FormsPlugin(context).execute(
            "set_control_property",
            {"form_name": "f", "control_name": "c", "property_name": "Caption"},
        )

        assert result.payload == {"success": False, "error": "value is required"}


class TestVbaPlugin:
    """Tests for VBA and macro tools."""

    def test_code_round_trip_with_default_project(self, context):
        """Should default the project to the open database."""
        plugin = VbaPlugin(context)

        plugin.execute("set_vba_code", {"module_name": "Module1", "code": "Option Explicit"})
        plugin.execute(
            "add_vba_procedure",
            {"module_name": "Module1", "procedure_name": "Hello", "code": "MsgBox 1"},
        )
        code = plugin.execute("get_vba_code", {"module_name": "Module1"}).payload["code"]

        assert code == "Option Explicit\n\nPublic Sub Hello()\nMsgBox 1\nEnd Sub\n"

    def test_set_code_keeps_whitespace(self, context):
        """Should return module code exactly as it was set."""
        plugin = VbaPlugin(context)
        code = "    Option Explicit\n\nSub X()\nEnd Sub\n"

        plugin.execute("set_vba_code", {"module_name": "Module1", "code": code})
        result = plugin.execute("get_vba_code", {"module_name": "Module1"})

        assert result.payload["code"] == code

    def test_wrong_project(self, context):
        """Should report unknown projects."""
        result = VbaPlugin(context).execute(
            "get_vba_code", {"project_name": "Other", "module_name": "Module1"}
        )

        assert result.payload["error"] == "VBA project not found: Other"

    def test_duplicate_procedure(self, context):
        """Should refuse to add a procedure twice."""
        plugin = VbaPlugin(context)
        arguments = {"module_name": "Module1", "procedure_name": "Hello", "code": "MsgBox 1"}

        plugin.execute("add_vba_procedure", arguments)
        result = plugin.execute("add_vba_procedure", arguments)

        assert result.payload["error"] == "Procedure already exists: Hello"

    def test_macros(self, context):
        """Should import and list macros."""
        plugin = VbaPlugin(context)

        imported = plugin.execute(
            "import_macro_from_text", {"macro_name": "AutoExec", "macro_data": "Version =196611"}
        )
        macros = plugin.execute("get_macros", {}).payload["macros"]

        assert imported.payload["macro_name"] == "AutoExec"
        assert [m["name"] for m in macros] == ["AutoExec"]
        assert macros[0]["type"] == "Macro"

    def test_argument_error_type(self):
        """ArgumentError is a ValueError."""
        assert issubclass(ArgumentError, ValueError)
