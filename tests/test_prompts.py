"""Tests for prompts/list and prompts/get."""

import json

import pytest

from access_mcp_server.backend.sqlite import SqliteBackend
from access_mcp_server.protocol.jsonrpc import INVALID_PARAMS, RESOURCE_NOT_FOUND, ProtocolFailure
from access_mcp_server.protocol.prompts import PROMPTS, PromptCatalog
from access_mcp_server.protocol.resources import ResourceResolver


@pytest.fixture
def catalog(backend) -> PromptCatalog:
    return PromptCatalog(ResourceResolver(backend))


class TestListPrompts:
    """Tests for prompts/list."""

    def test_lists_prompts_with_arguments(self, catalog):
        """Should describe each prompt and its arguments."""
        prompts = catalog.list_prompts()["prompts"]

        assert [p["name"] for p in prompts] == [p.name for p in PROMPTS]
        explore = next(p for p in prompts if p["name"] == "explore_table")
        assert explore["arguments"] == [
            {"name": "table_name", "description": "Table to explore", "required": True}
        ]


class TestGetPrompt:
    """Tests for prompts/get."""

    def test_analyze_database_embeds_snapshots(self, catalog):
        """Should follow the instructions with embedded catalogs."""
        result = catalog.get_prompt({"name": "analyze_database"})

        messages = result["messages"]
        assert all(m["role"] == "user" for m in messages)
        assert messages[0]["content"]["type"] == "text"
        uris = [m["content"]["resource"]["uri"] for m in messages[1:]]
        assert uris == ["access://tables", "access://relationships", "access://queries"]

    def test_explore_table(self, catalog):
        """Should embed the table schema."""
        result = catalog.get_prompt(
            {"name": "explore_table", "arguments": {"table_name": "Orders"}}
        )

        resource = result["messages"][1]["content"]["resource"]
        assert resource["uri"] == "access://table/Orders"
        assert json.loads(resource["text"])["table_name"] == "Orders"
        assert "'Orders'" in result["messages"][0]["content"]["text"]

    def test_write_query_without_table_uses_catalog(self, catalog):
        """Should fall back to the table catalog."""
        result = catalog.get_prompt({"name": "write_query", "arguments": {"goal": "top customers"}})

        messages = result["messages"]
        assert "top customers" in messages[0]["content"]["text"]
        assert messages[1]["content"]["resource"]["uri"] == "access://tables"
        assert messages[2]["content"]["type"] == "text"

    def test_table_names_are_escaped(self, backend, catalog):
        """Should percent-encode names inside template URIs."""
        backend.execute_sql('CREATE TABLE "Order Lines" (ID INTEGER)')

        result = catalog.get_prompt(
            {"name": "explore_table", "arguments": {"table_name": "Order Lines"}}
        )

        assert result["messages"][1]["content"]["resource"]["uri"] == "access://table/Order%20Lines"

    @pytest.mark.parametrize(
        "params,message",
        [
            ({}, "Missing required prompts/get parameter: name"),
            ({"name": "  "}, "Missing required prompts/get parameter: name"),
            ({"name": "nope"}, "Unknown prompt: nope"),
            ({"name": "explore_table"}, "Missing required argument: table_name"),
            (
                {"name": "explore_table", "arguments": {"table_name": " "}},
                "Missing required argument: table_name",
            ),
        ],
    )
    def test_invalid_params(self, catalog, params, message):
        """Should reject bad requests with -32602."""
        assert catalog.get_prompt(params) == ProtocolFailure(INVALID_PARAMS, message)

    def test_missing_object_fails(self, catalog):
        """Should surface the resource failure."""
        result = catalog.get_prompt(
            {"name": "review_vba_module", "arguments": {"module_name": "Nope"}}
        )

        assert result == ProtocolFailure(
            RESOURCE_NOT_FOUND, "Resource not found: access://module/Nope"
        )

    def test_disconnected_prompt_fails(self):
        """Should fail while no database is open."""
        catalog = PromptCatalog(ResourceResolver(SqliteBackend()))

        result = catalog.get_prompt({"name": "analyze_database"})

        assert result.code == RESOURCE_NOT_FOUND
