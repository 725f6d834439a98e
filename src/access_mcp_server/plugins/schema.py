"""Schema tools: tables, fields, indexes, relationships and saved queries."""

from __future__ import annotations

from typing import Any

from access_mcp_server.backend.base import FieldSpec
from access_mcp_server.plugins.base import (
    BackendPlugin,
    Handler,
    ToolDefinition,
    boolean_property,
    integer_property,
    object_schema,
    string_array_property,
    string_property,
)
from access_mcp_server.protocol.binder import (
    ArgumentError,
    bool_or_default,
    optional_int,
    require_string,
    require_string_alias,
    require_string_array,
)

# =============================================================================
# Tool Schema Definitions
# =============================================================================

_TABLE_NAME = string_property("Name of the table.")
_QUERY_NAME = string_property("Name of the saved query.")
_FIELD_TYPE_DESCRIPTION = (
    "Access field type: TEXT, MEMO, LONG, INTEGER, BYTE, COUNTER, DOUBLE, SINGLE, "
    "CURRENCY, DECIMAL, DATETIME, YESNO, OLEOBJECT, GUID or HYPERLINK."
)

_FIELD_OBJECT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": string_property("Field name."),
        "type": string_property(_FIELD_TYPE_DESCRIPTION),
        "size": integer_property("Maximum length for TEXT fields."),
        "required": boolean_property("Disallow nulls."),
        "allow_zero_length": boolean_property("Allow empty strings in text fields."),
    },
    "required": ["name", "type"],
}

_TABLE_ONLY = object_schema({"table_name": _TABLE_NAME}, ["table_name"])
_QUERY_DEFINITION = object_schema(
    {"query_name": _QUERY_NAME, "sql": string_property("SELECT statement of the query.")},
    ["query_name", "sql"],
)


def _read_table_name(arguments: dict[str, Any]) -> str:
    return require_string_alias(arguments, "table_name", "table")


def _field_from_mapping(data: dict[str, Any]) -> FieldSpec:
    size = optional_int(data, "size")
    return FieldSpec(
        name=require_string(data, "name"),
        type=require_string_alias(data, "type", "data_type"),
        size=size or 0,
        required=bool_or_default(data, "required", False),
        allow_zero_length=bool_or_default(data, "allow_zero_length", True),
    )


def read_field_specs(arguments: dict[str, Any], name: str = "fields") -> list[FieldSpec]:
    """Read an array of field definitions.

    Raises:
        ArgumentError: If the value is not a non-empty array of objects or
            one of the objects is invalid (its index is cited).
    """
    value = arguments.get(name)
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ArgumentError(f"{name} must be an array of objects")
    if not value:
        raise ArgumentError(f"{name} must contain at least one field")

    fields = []
    for index, item in enumerate(value):
        try:
            fields.append(_field_from_mapping(item))
        except ArgumentError as e:
            raise ArgumentError(f"{name}[{index}]: {e}") from e
    return fields


class SchemaPlugin(BackendPlugin):
    """Tools that inspect and change the database schema."""

    aliases = {
        "list_tables": "get_tables",
        "get_table_schema": "describe_table",
    }

    @property
    def name(self) -> str:
        return "schema"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="get_tables",
                description="Get list of all tables in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="describe_table",
                description=(
                    "Describe a table schema including columns, nullability, defaults, "
                    "and primary key columns."
                ),
                input_schema=_TABLE_ONLY,
            ),
            ToolDefinition(
                name="create_table",
                description="Create a new table in the database",
                input_schema=object_schema(
                    {
                        "table_name": _TABLE_NAME,
                        "fields": {
                            "type": "array",
                            "items": _FIELD_OBJECT_SCHEMA,
                            "description": "Field definitions, in column order.",
                        },
                    },
                    ["table_name", "fields"],
                ),
            ),
            ToolDefinition(
                name="delete_table",
                description="Delete a table from the database",
                input_schema=_TABLE_ONLY,
            ),
            ToolDefinition(
                name="rename_table",
                description="Rename a table",
                input_schema=object_schema(
                    {"table_name": _TABLE_NAME, "new_table_name": string_property("New name.")},
                    ["table_name", "new_table_name"],
                ),
            ),
            ToolDefinition(
                name="add_field",
                description="Add a field to an existing table",
                input_schema=object_schema(
                    {
                        "table_name": _TABLE_NAME,
                        "field_name": string_property("Name of the new field."),
                        "field_type": string_property(_FIELD_TYPE_DESCRIPTION),
                        "size": integer_property("Maximum length for TEXT fields."),
                        "required": boolean_property("Disallow nulls."),
                        "allow_zero_length": boolean_property(
                            "Allow empty strings in text fields."
                        ),
                    },
                    ["table_name", "field_name", "field_type"],
                ),
            ),
            ToolDefinition(
                name="drop_field",
                description="Remove a field from a table",
                input_schema=object_schema(
                    {"table_name": _TABLE_NAME, "field_name": string_property("Field to drop.")},
                    ["table_name", "field_name"],
                ),
            ),
            ToolDefinition(
                name="rename_field",
                description="Rename a field of a table",
                input_schema=object_schema(
                    {
                        "table_name": _TABLE_NAME,
                        "field_name": string_property("Current field name."),
                        "new_field_name": string_property("New field name."),
                    },
                    ["table_name", "field_name", "new_field_name"],
                ),
            ),
            ToolDefinition(
                name="get_indexes",
                description="Get the indexes of a table",
                input_schema=_TABLE_ONLY,
            ),
            ToolDefinition(
                name="create_index",
                description="Create an index on one or more fields of a table",
                input_schema=object_schema(
                    {
                        "table_name": _TABLE_NAME,
                        "index_name": string_property("Name of the index."),
                        "columns": string_array_property("Indexed fields, in order."),
                        "unique": boolean_property("Create a unique index (default false)."),
                    },
                    ["table_name", "index_name", "columns"],
                ),
            ),
            ToolDefinition(
                name="delete_index",
                description="Delete an index from a table",
                input_schema=object_schema(
                    {"table_name": _TABLE_NAME, "index_name": string_property("Index to drop.")},
                    ["table_name", "index_name"],
                ),
            ),
            ToolDefinition(
                name="get_relationships",
                description="Get list of all relationships in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_queries",
                description="Get list of all queries in the database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="create_query",
                description="Save a new query",
                input_schema=_QUERY_DEFINITION,
            ),
            ToolDefinition(
                name="update_query",
                description="Replace the SQL of a saved query",
                input_schema=_QUERY_DEFINITION,
            ),
            ToolDefinition(
                name="delete_query",
                description="Delete a saved query",
                input_schema=object_schema({"query_name": _QUERY_NAME}, ["query_name"]),
            ),
            ToolDefinition(
                name="get_system_tables",
                description="Get list of system tables",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_object_metadata",
                description="Get metadata for database objects",
                input_schema=object_schema(),
            ),
        ]

    def _handlers(self) -> dict[str, Handler]:
        return {
            "get_tables": self._get_tables,
            "describe_table": self._describe_table,
            "create_table": self._create_table,
            "delete_table": self._delete_table,
            "rename_table": self._rename_table,
            "add_field": self._add_field,
            "drop_field": self._drop_field,
            "rename_field": self._rename_field,
            "get_indexes": self._get_indexes,
            "create_index": self._create_index,
            "delete_index": self._delete_index,
            "get_relationships": self._get_relationships,
            "get_queries": self._get_queries,
            "create_query": self._create_query,
            "update_query": self._update_query,
            "delete_query": self._delete_query,
            "get_system_tables": self._get_system_tables,
            "get_object_metadata": self._get_object_metadata,
        }

    # -- tables ------------------------------------------------------------

    def _get_tables(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"tables": self.backend.get_tables()}

    def _describe_table(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        return {"table": self.backend.describe_table(table_name)}

    def _create_table(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        fields = read_field_specs(arguments)
        self.backend.create_table(table_name, fields)
        return {
            "message": f"Created table {table_name}",
            "fields": [f.to_dict() for f in fields],
        }

    def _delete_table(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        self.backend.delete_table(table_name)
        return {"message": f"Deleted table {table_name}"}

    def _rename_table(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        new_table_name = require_string(arguments, "new_table_name")
        self.backend.rename_table(table_name, new_table_name)
        return {"message": f"Renamed table {table_name} to {new_table_name}"}

    # -- fields ------------------------------------------------------------

    def _add_field(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        field = FieldSpec(
            name=require_string(arguments, "field_name"),
            type=require_string_alias(arguments, "field_type", "data_type"),
            size=optional_int(arguments, "size") or 0,
            required=bool_or_default(arguments, "required", False),
            allow_zero_length=bool_or_default(arguments, "allow_zero_length", True),
        )
        self.backend.add_field(table_name, field)
        return {"message": f"Added field {field.name} to {table_name}", "field": field.to_dict()}

    def _drop_field(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        field_name = require_string(arguments, "field_name")
        self.backend.drop_field(table_name, field_name)
        return {"message": f"Dropped field {field_name} from {table_name}"}

    def _rename_field(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        field_name = require_string(arguments, "field_name")
        new_field_name = require_string(arguments, "new_field_name")
        self.backend.rename_field(table_name, field_name, new_field_name)
        return {"message": f"Renamed field {table_name}.{field_name} to {new_field_name}"}

    # -- indexes and relationships -----------------------------------------

    def _get_indexes(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        return {"indexes": self.backend.get_indexes(table_name)}

    def _create_index(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        index_name = require_string(arguments, "index_name")
        columns = require_string_array(arguments, "columns")
        unique = bool_or_default(arguments, "unique", False)
        self.backend.create_index(table_name, index_name, columns, unique)
        return {
            "message": f"Created index {index_name} on {table_name}",
            "columns": columns,
            "unique": unique,
        }

    def _delete_index(self, arguments: dict[str, Any]) -> dict[str, Any]:
        table_name = _read_table_name(arguments)
        index_name = require_string(arguments, "index_name")
        self.backend.delete_index(table_name, index_name)
        return {"message": f"Deleted index {index_name} from {table_name}"}

    def _get_relationships(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"relationships": self.backend.get_relationships()}

    # -- queries -----------------------------------------------------------

    def _get_queries(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"queries": self.backend.get_queries()}

    def _create_query(self, arguments: dict[str, Any]) -> dict[str, Any]:
        query_name = require_string(arguments, "query_name")
        sql = require_string(arguments, "sql")
        self.backend.create_query(query_name, sql)
        return {"message": f"Created query {query_name}"}

    def _update_query(self, arguments: dict[str, Any]) -> dict[str, Any]:
        query_name = require_string(arguments, "query_name")
        sql = require_string(arguments, "sql")
        self.backend.update_query(query_name, sql)
        return {"message": f"Updated query {query_name}"}

    def _delete_query(self, arguments: dict[str, Any]) -> dict[str, Any]:
        query_name = require_string(arguments, "query_name")
        self.backend.delete_query(query_name)
        return {"message": f"Deleted query {query_name}"}

    # -- metadata ----------------------------------------------------------

    def _get_system_tables(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"system_tables": self.backend.get_system_tables()}

    def _get_object_metadata(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"metadata": self.backend.get_object_metadata()}
