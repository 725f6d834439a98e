"""Connection and database file tools."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from access_mcp_server.backend.discovery import resolve_database_path
from access_mcp_server.plugins.base import (
    BackendPlugin,
    Handler,
    ToolDefinition,
    boolean_property,
    object_schema,
    string_property,
)
from access_mcp_server.protocol.binder import bool_or_default, optional_string, require_string

NO_DATABASE_MESSAGE = (
    "No database path was provided or discoverable. "
    "Set ACCESS_DATABASE_PATH or place a .accdb/.mdb file in Documents."
)

_OVERWRITE = boolean_property("Replace the destination file if it exists (default false).")


class ConnectionPlugin(BackendPlugin):
    """Opens and closes databases and manages database files."""

    @property
    def name(self) -> str:
        return "connection"

    def _definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="connect_access",
                description=(
                    "Connect to an Access database. Uses database_path argument, "
                    "ACCESS_DATABASE_PATH env var, or first database found in Documents."
                ),
                input_schema=object_schema(
                    {
                        "database_path": string_property("Path to the database file."),
                        "password": string_property("Database password, if any."),
                    }
                ),
            ),
            ToolDefinition(
                name="disconnect_access",
                description="Disconnect from the current Access database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="is_connected",
                description="Check if connected to an Access database",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="get_connection_info",
                description="Report connection state, database path and transaction status",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="launch_access",
                description="Launch Microsoft Access application",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="close_access",
                description="Close Microsoft Access application",
                input_schema=object_schema(),
            ),
            ToolDefinition(
                name="create_database",
                description="Create a new, empty database file",
                input_schema=object_schema(
                    {
                        "database_path": string_property("Path of the file to create."),
                        "overwrite": _OVERWRITE,
                    },
                    ["database_path"],
                ),
            ),
            ToolDefinition(
                name="backup_database",
                description=(
                    "Copy a database file. Defaults to the connected database as the source."
                ),
                input_schema=object_schema(
                    {
                        "source_database_path": string_property("Database to copy."),
                        "destination_database_path": string_property("Path of the backup file."),
                        "overwrite": _OVERWRITE,
                    },
                    ["destination_database_path"],
                ),
            ),
            ToolDefinition(
                name="compact_repair_database",
                description=(
                    "Compact and repair a database, in place or into a new file. "
                    "Defaults to the connected database as the source."
                ),
                input_schema=object_schema(
                    {
                        "source_database_path": string_property("Database to compact."),
                        "destination_database_path": string_property(
                            "Write the compacted copy here instead of in place."
                        ),
                        "overwrite": _OVERWRITE,
                    }
                ),
            ),
        ]

    def _handlers(self) -> dict[str, Handler]:
        return {
            "connect_access": self._connect_access,
            "disconnect_access": self._disconnect_access,
            "is_connected": self._is_connected,
            "get_connection_info": self._get_connection_info,
            "launch_access": self._launch_access,
            "close_access": self._close_access,
            "create_database": self._create_database,
            "backup_database": self._backup_database,
            "compact_repair_database": self._compact_repair_database,
        }

    def _connect_access(self, arguments: dict[str, Any]) -> dict[str, Any]:
        database_path = optional_string(arguments, "database_path")
        password = optional_string(arguments, "password")

        if database_path is None:
            database_path = resolve_database_path(
                self.config.database_path,
                self.config.search_folders,
                self.config.database_extensions,
            )
        if database_path is None:
            return {"success": False, "error": NO_DATABASE_MESSAGE}

        if not Path(database_path).expanduser().is_file():
            return {"success": False, "error": f"Database file not found: {database_path}"}

        self.backend.connect(database_path, password)
        if not self.backend.is_connected:
            return {"success": False, "error": "Failed to establish database connection"}

        return {
            "message": f"Connected to {database_path}",
            "connected": True,
            "database_path": self.backend.current_database_path,
        }

    def _disconnect_access(self, arguments: dict[str, Any]) -> dict[str, Any]:
        self.backend.disconnect()
        return {"message": "Disconnected from database", "connected": False}

    def _is_connected(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {"connected": self.backend.is_connected}

    def _get_connection_info(self, arguments: dict[str, Any]) -> dict[str, Any]:
        connected = self.backend.is_connected
        return {
            "connected": connected,
            "database_path": self.backend.current_database_path if connected else None,
            "transaction": self.backend.get_transaction_status(),
        }

    def _launch_access(self, arguments: dict[str, Any]) -> dict[str, Any]:
        self.backend.launch_access()
        return {"message": "Access launched successfully"}

    def _close_access(self, arguments: dict[str, Any]) -> dict[str, Any]:
        self.backend.close_access()
        return {"message": "Access closed successfully"}

    def _create_database(self, arguments: dict[str, Any]) -> dict[str, Any]:
        database_path = require_string(arguments, "database_path")
        overwrite = bool_or_default(arguments, "overwrite", False)
        details = self.backend.create_database(database_path, overwrite)
        return {"message": f"Created database {database_path}", **details}

    def _source_path(self, arguments: dict[str, Any]) -> str:
        source = optional_string(arguments, "source_database_path", "database_path")
        if source is not None:
            return source
        current = self.backend.current_database_path
        if current is None:
            return require_string(arguments, "source_database_path")
        return current

    def _backup_database(self, arguments: dict[str, Any]) -> dict[str, Any]:
        destination = require_string(arguments, "destination_database_path")
        source = self._source_path(arguments)
        overwrite = bool_or_default(arguments, "overwrite", False)
        details = self.backend.backup_database(source, destination, overwrite)
        return {"message": f"Backed up {source} to {destination}", **details}

    def _compact_repair_database(self, arguments: dict[str, Any]) -> dict[str, Any]:
        source = self._source_path(arguments)
        destination = optional_string(arguments, "destination_database_path")
        overwrite = bool_or_default(arguments, "overwrite", False)
        details = self.backend.compact_repair_database(source, destination, overwrite)
        return {"message": f"Compacted {source}", **details}
