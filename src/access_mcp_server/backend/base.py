"""Database backend interface.

Defines the operations the tool plugins, resources and prompts call on the
connected database. Backends raise exceptions for every failure; the
plugin layer converts them into failed tool results with diagnostics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

ObjectKind = Literal["form", "report", "macro", "module"]
OBJECT_KINDS: tuple[ObjectKind, ...] = ("form", "report", "macro", "module")


class BackendError(Exception):
    """Raised when a database operation fails."""

    pass


class NotConnectedError(BackendError):
    """Raised when an operation needs an open database."""

    def __init__(self, message: str = "Not connected to database") -> None:
        super().__init__(message)


class ObjectNotFoundError(BackendError):
    """Raised when a named database object does not exist."""

    pass


class AutomationUnavailableError(BackendError):
    """Raised for operations that need the Access desktop application."""

    pass


@dataclass
class FieldSpec:
    """Column definition used when creating or altering tables."""

    name: str
    type: str
    size: int = 0
    required: bool = False
    allow_zero_length: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "required": self.required,
            "allow_zero_length": self.allow_zero_length,
        }


@dataclass
class SqlResult:
    """Outcome of executing one SQL statement."""

    is_query: bool
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    truncated: bool = False
    rows_affected: int = 0

    @property
    def row_count(self) -> int:
        """Number of rows returned (after truncation)."""
        return len(self.rows)


def escape_markdown_cell(value: Any) -> str:
    """Render a value for a markdown table cell."""
    if value is None:
        return ""
    text = str(value)
    return (
        text.replace("\\", "\\\\")
        .replace("|", "\\|")
        .replace("\r", " ")
        .replace("\n", "<br/>")
    )


def render_markdown(result: SqlResult, max_rows: int) -> str:
    """Render a SQL result as a markdown table or an action summary.

    Args:
        result: Executed statement result.
        max_rows: Row limit used for the query, cited when truncated.

    Returns:
        Markdown text.
    """
    if not result.is_query:
        return f"Statement executed successfully. Rows affected: {result.rows_affected}."

    if not result.columns:
        return "No columns returned."

    lines = [
        "| " + " | ".join(escape_markdown_cell(c) for c in result.columns) + " |",
        "| " + " | ".join("---" for _ in result.columns) + " |",
    ]
    for row in result.rows:
        cells = (escape_markdown_cell(row.get(column)) for column in result.columns)
        lines.append("| " + " | ".join(cells) + " |")

    if result.truncated:
        lines.append("")
        lines.append(f"_Results truncated to {max_rows} rows._")

    return "\n".join(lines)


class AccessBackend(ABC):
    """Abstract interface to a connected Access-style database.

    Implementations own their connection state. All methods raise on
    failure; ``NotConnectedError`` signals a missing connection.
    """

    # -- connection --------------------------------------------------------

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Return True when a database is open."""
        pass

    @property
    @abstractmethod
    def current_database_path(self) -> str | None:
        """Return the path of the open database, if any."""
        pass

    @abstractmethod
    def connect(self, database_path: str, password: str | None = None) -> None:
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @abstractmethod
    def launch_access(self) -> None:
        pass

    @abstractmethod
    def close_access(self) -> None:
        pass

    @abstractmethod
    def create_database(self, database_path: str, overwrite: bool = False) -> dict[str, Any]:
        pass

    @abstractmethod
    def backup_database(
        self, source_path: str, destination_path: str, overwrite: bool = False
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def compact_repair_database(
        self,
        source_path: str,
        destination_path: str | None = None,
        overwrite: bool = False,
    ) -> dict[str, Any]:
        pass

    # -- schema ------------------------------------------------------------

    @abstractmethod
    def get_tables(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def describe_table(self, table_name: str) -> dict[str, Any]:
        pass

    @abstractmethod
    def create_table(self, table_name: str, fields: list[FieldSpec]) -> None:
        pass

    @abstractmethod
    def delete_table(self, table_name: str) -> None:
        pass

    @abstractmethod
    def rename_table(self, table_name: str, new_table_name: str) -> None:
        pass

    @abstractmethod
    def add_field(self, table_name: str, field: FieldSpec) -> None:
        pass

    @abstractmethod
    def drop_field(self, table_name: str, field_name: str) -> None:
        pass

    @abstractmethod
    def rename_field(self, table_name: str, field_name: str, new_field_name: str) -> None:
        pass

    @abstractmethod
    def get_indexes(self, table_name: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def create_index(
        self, table_name: str, index_name: str, columns: list[str], unique: bool = False
    ) -> None:
        pass

    @abstractmethod
    def delete_index(self, table_name: str, index_name: str) -> None:
        pass

    @abstractmethod
    def get_relationships(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_queries(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def create_query(self, query_name: str, sql: str) -> None:
        pass

    @abstractmethod
    def update_query(self, query_name: str, sql: str) -> None:
        pass

    @abstractmethod
    def delete_query(self, query_name: str) -> None:
        pass

    @abstractmethod
    def get_system_tables(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_object_metadata(self) -> list[dict[str, Any]]:
        pass

    # -- sql ---------------------------------------------------------------

    @abstractmethod
    def execute_sql(
        self, sql: str, max_rows: int = 200, parameters: list[Any] | None = None
    ) -> SqlResult:
        pass

    def execute_query_markdown(
        self, sql: str, max_rows: int = 100, parameters: list[Any] | None = None
    ) -> str:
        """Execute a statement and render the result as markdown."""
        return render_markdown(self.execute_sql(sql, max_rows, parameters), max_rows)

    @abstractmethod
    def begin_transaction(self, isolation_level: str | None = None) -> dict[str, Any]:
        pass

    @abstractmethod
    def commit_transaction(self) -> dict[str, Any]:
        pass

    @abstractmethod
    def rollback_transaction(self) -> dict[str, Any]:
        pass

    @abstractmethod
    def get_transaction_status(self) -> dict[str, Any]:
        pass

    # -- forms, reports, macros, modules -----------------------------------

    @abstractmethod
    def get_objects(self, kind: ObjectKind) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def object_exists(self, kind: ObjectKind, name: str) -> bool:
        pass

    @abstractmethod
    def export_object(self, kind: ObjectKind, name: str) -> str:
        pass

    @abstractmethod
    def import_object(self, kind: ObjectKind, data: str, name: str | None = None) -> str:
        """Create or replace an object from its text definition.

        Returns:
            The name the object was stored under.
        """
        pass

    @abstractmethod
    def delete_object(self, kind: ObjectKind, name: str) -> None:
        pass

    @abstractmethod
    def open_object(self, kind: ObjectKind, name: str) -> None:
        pass

    @abstractmethod
    def close_object(self, kind: ObjectKind, name: str) -> None:
        pass

    @abstractmethod
    def get_controls(self, kind: ObjectKind, name: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_control_properties(
        self, kind: ObjectKind, name: str, control_name: str
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def set_control_property(
        self, kind: ObjectKind, name: str, control_name: str, property_name: str, value: Any
    ) -> None:
        pass

    @abstractmethod
    def run_macro(self, macro_name: str) -> None:
        pass

    # -- vba ---------------------------------------------------------------

    @abstractmethod
    def get_vba_projects(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_vba_code(self, project_name: str, module_name: str) -> str:
        pass

    @abstractmethod
    def set_vba_code(self, project_name: str, module_name: str, code: str) -> None:
        pass

    @abstractmethod
    def add_vba_procedure(
        self, project_name: str, module_name: str, procedure_name: str, code: str
    ) -> None:
        pass

    @abstractmethod
    def compile_vba(self) -> None:
        pass

    def close(self) -> None:
        """Release resources held by the backend."""
        if self.is_connected:
            self.disconnect()
