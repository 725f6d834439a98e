"""SQL execution and transaction tools."""

from __future__ import annotations

from typing import Any

from access_mcp_server.plugins.base import (
    BackendPlugin,
    Handler,
    ToolDefinition,
    integer_property,
    object_schema,
    string_property,
)
from access_mcp_server.protocol.binder import (
    ArgumentError,
    optional_int,
    optional_primitive_array,
    optional_string,
    require_string,
)

_PARAMETERS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {"type": ["string", "number", "integer", "boolean", "null"]},
    "description": "Positional values bound to ? placeholders.",
}


def _statement_schema(default_rows: int) -> dict[str, Any]:
    return object_schema(
        {
            "sql": string_property("SQL statement to execute."),
            "max_rows": integer_property(f"Maximum rows to return (default {default_rows})."),
            "parameters": _PARAMETERS_SCHEMA,
        },
        ["sql"],
    )


def _read_max_rows(arguments: dict[str, Any], default: int) -> int:
    max_rows = optional_int(arguments, "max_rows")
    if max_rows is None:
        return default
    if max_rows <= 0:
        raise ArgumentError("max_rows must be greater than 0")
    return max_rows


class SqlPlugin(BackendPlugin):
    """Runs SQL statements and controls explicit transactions."""

    aliases = {
        "execute_query": "execute_sql",
        "run_sql_markdown": "execute_query_md",
    }

    @property
    def name(self) -> str:
        return "sql"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="execute_sql",
                description=(
                    "Execute a SQL statement against the connected Access database. "
                    "For SELECT queries, returns columns and rows. "
                    "For action queries, returns rows_affected."
                ),
                input_schema=_statement_schema(self.config.default_max_rows),
            ),
            ToolDefinition(
                name="execute_query_md",
                description=(
                    "Execute a SQL statement and return result as a markdown table "
                    "(or action-query summary)."
                ),
                input_schema=_statement_schema(self.config.markdown_max_rows),
            ),
            ToolDefinition(
                name="begin_transaction",
                description="Begin an explicit transaction on the connected database",
                input_schema=object_schema(
                    {
                        "isolation_level": string_property(
                            "DEFERRED (default), IMMEDIATE or EXCLUSIVE."
                        )
                    }
                ),
            ),
            ToolDefinition(
                name="commit_transaction",
                description="Commit the active transaction",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="rollback_transaction",
                description="Roll back the active transaction",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_transaction_status",
                description="Report whether a transaction is active",
                input_schema=object_schema(),
            ),
        ]

    def _handlers(self) -> dict[str, Handler]:
        return {
            "execute_sql": self._execute_sql,
            "execute_query_md": self._execute_query_md,
            "begin_transaction": self._begin_transaction,
            "commit_transaction": self._commit_transaction,
            "rollback_transaction": self._rollback_transaction,
            "get_transaction_status": self._get_transaction_status,
        }

    def _execute_sql(self, arguments: dict[str, Any]) -> dict[str, Any]:
        sql = require_string(arguments, "sql")
        max_rows = _read_max_rows(arguments, self.config.default_max_rows)
        parameters = optional_primitive_array(arguments, "parameters")

        result = self.backend.execute_sql(sql, max_rows, parameters)
        if not result.is_query:
            return {"is_query": False, "rows_affected": result.rows_affected}

        return {
            "is_query": True,
            "columns": result.columns,
            "rows": result.rows,
            "row_count": result.row_count,
            "truncated": result.truncated,
            "max_rows": max_rows,
        }

    def _execute_query_md(self, arguments: dict[str, Any]) -> dict[str, Any]:
        sql = require_string(arguments, "sql")
        max_rows = _read_max_rows(arguments, self.config.markdown_max_rows)
        parameters = optional_primitive_array(arguments, "parameters")
        return {"markdown": self.backend.execute_query_markdown(sql, max_rows, parameters)}

    def _begin_transaction(self, arguments: dict[str, Any]) -> dict[str, Any]:
        isolation_level = optional_string(arguments, "isolation_level")
        status = self.backend.begin_transaction(isolation_level)
        return {"message": "Transaction started", **status}

    def _commit_transaction(self, arguments: dict[str, Any]) -> dict[str, Any]:
        status = self.backend.commit_transaction()
        return {"message": "Transaction committed", **status}

    def _rollback_transaction(self, arguments: dict[str, Any]) -> dict[str, Any]:
        status = self.backend.rollback_transaction()
        return {"message": "Transaction rolled back", **status}

    def _get_transaction_status(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return self.backend.get_transaction_status()
