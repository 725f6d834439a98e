"""SQLite implementation of the database backend.

Provides the data side of an Access database (tables, fields, indexes,
relationships, saved queries, SQL and transactions) on a local SQLite file.
Forms, reports, macros and modules are kept as text definitions in the
MSysMcpObjects table. Operations that need the Access desktop application
raise AutomationUnavailableError.
"""

from __future__ import annotations

import base64
import re
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from access_mcp_server.backend.base import (
    AccessBackend,
    AutomationUnavailableError,
    BackendError,
    FieldSpec,
    NotConnectedError,
    ObjectKind,
    ObjectNotFoundError,
    SqlResult,
)

OBJECTS_TABLE = "MSysMcpObjects"

# Access field type names -> SQLite column types
FIELD_TYPES = {
    "TEXT": "TEXT",
    "SHORTTEXT": "TEXT",
    "VARCHAR": "TEXT",
    "CHAR": "TEXT",
    "MEMO": "TEXT",
    "LONGTEXT": "TEXT",
    "HYPERLINK": "TEXT",
    "GUID": "TEXT",
    "BYTE": "INTEGER",
    "SHORT": "INTEGER",
    "INTEGER": "INTEGER",
    "LONG": "INTEGER",
    "LONGINTEGER": "INTEGER",
    "SINGLE": "REAL",
    "DOUBLE": "REAL",
    "FLOAT": "REAL",
    "CURRENCY": "NUMERIC",
    "DECIMAL": "NUMERIC",
    "NUMERIC": "NUMERIC",
    "DATE": "DATETIME",
    "DATETIME": "DATETIME",
    "YESNO": "BOOLEAN",
    "BIT": "BOOLEAN",
    "BOOLEAN": "BOOLEAN",
    "OLEOBJECT": "BLOB",
    "BINARY": "BLOB",
    "LONGBINARY": "BLOB",
}
SIZED_TEXT_TYPES = {"TEXT", "SHORTTEXT", "VARCHAR", "CHAR"}
TEXT_TYPES = SIZED_TEXT_TYPES | {"MEMO", "LONGTEXT", "HYPERLINK", "GUID"}
AUTONUMBER_TYPES = {"COUNTER", "AUTONUMBER", "AUTOINCREMENT"}

# Access isolation level names are accepted as aliases
ISOLATION_LEVELS = {
    "DEFERRED": "DEFERRED",
    "IMMEDIATE": "IMMEDIATE",
    "EXCLUSIVE": "EXCLUSIVE",
    "READCOMMITTED": "DEFERRED",
    "REPEATABLEREAD": "IMMEDIATE",
    "SERIALIZABLE": "EXCLUSIVE",
}

DECLARED_NAME = re.compile(
    r'^\s*(?:Attribute\s+VB_Name|Name)\s*=\s*"([^"]+)"', re.IGNORECASE | re.MULTILINE
)

_IDENTIFIER = r'(?:"(?:[^"]|"")*"|\[[^\]]*\]|`(?:[^`]|``)*`|[^\s.(]+)'
VIEW_HEADER = re.compile(
    rf"^\s*CREATE\s+(?:TEMP(?:ORARY)?\s+)?VIEW\s+(?:IF\s+NOT\s+EXISTS\s+)?"
    rf"(?:{_IDENTIFIER}\s*\.\s*)?{_IDENTIFIER}\s*(?:\([^)]*\)\s*)?AS\b\s*(.*)$",
    re.IGNORECASE | re.DOTALL,
)


def quote_identifier(name: str) -> str:
    """Quote a table, column or index name for SQLite."""
    return '"' + name.replace('"', '""') + '"'


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _normalize_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


def make_unique_columns(names: list[str]) -> list[str]:
    """Disambiguate duplicate column names as name, name_2, name_3...

    Comparison is case-insensitive; blank names become "column".
    """
    result: list[str] = []
    seen: dict[str, int] = {}
    for raw in names:
        base = raw if raw and raw.strip() else "column"
        key = base.casefold()
        if key not in seen:
            seen[key] = 1
            result.append(base)
            continue
        seen[key] += 1
        result.append(f"{base}_{seen[key]}")
    return result


def column_definition(field: FieldSpec) -> str:
    """Build the SQLite column clause for an Access-style field definition.

    Raises:
        BackendError: If the field type is not supported.
    """
    key = field.type.strip().upper().replace(" ", "")
    name = quote_identifier(field.name)
    if key in AUTONUMBER_TYPES:
        return f"{name} INTEGER PRIMARY KEY AUTOINCREMENT"

    sql_type = FIELD_TYPES.get(key)
    if sql_type is None:
        raise BackendError(f"Unsupported field type: {field.type}")
    if key in SIZED_TEXT_TYPES and field.size > 0:
        sql_type = f"VARCHAR({field.size})"

    parts = [name, sql_type]
    if field.required:
        parts.append("NOT NULL")
    if key in TEXT_TYPES and not field.allow_zero_length:
        parts.append(f"CHECK ({name} <> '')")
    return " ".join(parts)


def declared_object_name(definition: str) -> str | None:
    """Find the object name declared inside an exported text definition."""
    match = DECLARED_NAME.search(definition)
    return match.group(1).strip() if match else None


class SqliteBackend(AccessBackend):
    """Database backend over a SQLite file."""

    def __init__(self) -> None:
        """Initialize a disconnected backend."""
        self._connection: sqlite3.Connection | None = None
        self._database_path: str | None = None
        self._transaction_level: str | None = None
        self._transaction_started: str | None = None

    # -- connection --------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def current_database_path(self) -> str | None:
        return self._database_path

    def connect(self, database_path: str, password: str | None = None) -> None:
        if password:
            raise BackendError("Database passwords are not supported by the SQLite backend")

        path = Path(database_path).expanduser()
        if not path.is_file():
            raise BackendError(f"Database file not found: {database_path}")

        if self._connection is not None:
            self.disconnect()

        connection = sqlite3.connect(str(path), isolation_level=None)
        try:
            connection.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
            connection.execute("PRAGMA foreign_keys = ON")
        except sqlite3.DatabaseError as e:
            connection.close()
            raise BackendError(f"Cannot open database {database_path}: {e}") from e

        self._connection = connection
        self._database_path = str(path.resolve())

    def disconnect(self) -> None:
        if self._connection is None:
            return
        try:
            if self._connection.in_transaction:
                self._connection.execute("ROLLBACK")
        finally:
            self._connection.close()
            self._connection = None
            self._database_path = None
            self._reset_transaction()

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise NotConnectedError()
        return self._connection

    def _is_current(self, path: Path) -> bool:
        return self._database_path is not None and str(path.resolve()) == self._database_path

    @contextmanager
    def _open_path(self, database_path: str) -> Iterator[sqlite3.Connection]:
        path = Path(database_path).expanduser()
        if self._is_current(path):
            yield self._require_connection()
            return
        if not path.is_file():
            raise BackendError(f"Database file not found: {database_path}")
        connection = sqlite3.connect(str(path), isolation_level=None)
        try:
            yield connection
        finally:
            connection.close()

    def launch_access(self) -> None:
        raise AutomationUnavailableError(
            "Launching Microsoft Access requires the Windows automation backend"
        )

    def close_access(self) -> None:
        raise AutomationUnavailableError(
            "Closing Microsoft Access requires the Windows automation backend"
        )

    def create_database(self, database_path: str, overwrite: bool = False) -> dict[str, Any]:
        path = Path(database_path).expanduser()
        existed = path.exists()
        if existed:
            if not overwrite:
                raise BackendError(f"Database already exists: {database_path}")
            if self._is_current(path):
                raise BackendError("Cannot overwrite the connected database")
            path.unlink()

        path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(path), isolation_level=None)
        try:
            self._create_objects_table(connection)
        finally:
            connection.close()

        stat = path.stat()
        return {
            "database_path": str(path.resolve()),
            "existed_before": existed,
            "size_bytes": stat.st_size,
            "last_write_time_utc": datetime.fromtimestamp(stat.st_mtime, UTC).isoformat(),
        }

    def backup_database(
        self, source_path: str, destination_path: str, overwrite: bool = False
    ) -> dict[str, Any]:
        source = Path(source_path).expanduser()
        destination = Path(destination_path).expanduser()
        if destination.exists():
            if not overwrite:
                raise BackendError(f"Destination already exists: {destination_path}")
            if self._is_current(destination):
                raise BackendError("Cannot overwrite the connected database")
            destination.unlink()

        destination.parent.mkdir(parents=True, exist_ok=True)
        with self._open_path(source_path) as connection:
            target = sqlite3.connect(str(destination))
            try:
                connection.backup(target)
            finally:
                target.close()

        return {
            "source_database_path": str(source.resolve()),
            "destination_database_path": str(destination.resolve()),
            "bytes_copied": destination.stat().st_size,
            "operated_on_connected_database": self._is_current(source),
        }

    def compact_repair_database(
        self,
        source_path: str,
        destination_path: str | None = None,
        overwrite: bool = False,
    ) -> dict[str, Any]:
        source = Path(source_path).expanduser()
        if not source.is_file():
            raise BackendError(f"Database file not found: {source_path}")
        source_size = source.stat().st_size
        on_connected = self._is_current(source)
        if on_connected and self._require_connection().in_transaction:
            raise BackendError("Cannot compact while a transaction is active")

        destination = Path(destination_path).expanduser() if destination_path else None
        if destination is not None and destination.exists():
            if not overwrite:
                raise BackendError(f"Destination already exists: {destination_path}")
            destination.unlink()

        with self._open_path(source_path) as connection:
            if destination is None:
                connection.execute("VACUUM")
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                connection.execute("VACUUM INTO ?", (str(destination),))

        result_path = destination or source
        return {
            "source_database_path": str(source.resolve()),
            "destination_database_path": str(result_path.resolve()),
            "in_place": destination is None,
            "source_size_bytes": source_size,
            "destination_size_bytes": result_path.stat().st_size,
            "operated_on_connected_database": on_connected,
        }

    # -- schema ------------------------------------------------------------

    def _user_table_names(self) -> list[str]:
        rows = self._require_connection().execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' AND name NOT LIKE 'MSys%' "
            "ORDER BY name COLLATE NOCASE"
        )
        return [row[0] for row in rows]

    def _table_info(self, table_name: str) -> list[tuple[Any, ...]]:
        rows = self._require_connection().execute(
            f"PRAGMA table_info({quote_identifier(table_name)})"
        ).fetchall()
        if not rows:
            raise ObjectNotFoundError(f"Table not found: {table_name}")
        return rows

    def _parent_key(self, table_name: str) -> list[str]:
        rows = self._require_connection().execute(
            f"PRAGMA table_info({quote_identifier(table_name)})"
        ).fetchall()
        return _primary_key(rows) or ["rowid"]

    def _record_count(self, table_name: str) -> int:
        row = self._require_connection().execute(
            f"SELECT COUNT(*) FROM {quote_identifier(table_name)}"
        ).fetchone()
        return int(row[0])

    def get_tables(self) -> list[dict[str, Any]]:
        tables = []
        for name in self._user_table_names():
            fields = [
                {"name": row[1], "type": row[2], "required": bool(row[3])}
                for row in self._table_info(name)
            ]
            tables.append(
                {"name": name, "fields": fields, "record_count": self._record_count(name)}
            )
        return tables

    def describe_table(self, table_name: str) -> dict[str, Any]:
        rows = self._table_info(table_name)
        columns = [
            {
                "name": row[1],
                "data_type": row[2],
                "ordinal_position": row[0] + 1,
                "is_nullable": not row[3] and not row[5],
                "is_primary_key": bool(row[5]),
                "has_default": row[4] is not None,
                "default_value": row[4],
            }
            for row in rows
        ]
        primary_key = _primary_key(rows)
        return {
            "table_name": table_name,
            "columns": columns,
            "primary_key_columns": primary_key,
            "record_count": self._record_count(table_name),
        }

    def create_table(self, table_name: str, fields: list[FieldSpec]) -> None:
        if not fields:
            raise BackendError("At least one field is required")
        columns = ", ".join(column_definition(f) for f in fields)
        self._require_connection().execute(
            f"CREATE TABLE {quote_identifier(table_name)} ({columns})"
        )

    def delete_table(self, table_name: str) -> None:
        self._table_info(table_name)
        self._require_connection().execute(f"DROP TABLE {quote_identifier(table_name)}")

    def rename_table(self, table_name: str, new_table_name: str) -> None:
        self._table_info(table_name)
        self._require_connection().execute(
            f"ALTER TABLE {quote_identifier(table_name)} "
            f"RENAME TO {quote_identifier(new_table_name)}"
        )

    def add_field(self, table_name: str, field: FieldSpec) -> None:
        self._table_info(table_name)
        self._require_connection().execute(
            f"ALTER TABLE {quote_identifier(table_name)} ADD COLUMN {column_definition(field)}"
        )

    def drop_field(self, table_name: str, field_name: str) -> None:
        self._require_column(table_name, field_name)
        self._require_connection().execute(
            f"ALTER TABLE {quote_identifier(table_name)} DROP COLUMN {quote_identifier(field_name)}"
        )

    def rename_field(self, table_name: str, field_name: str, new_field_name: str) -> None:
        self._require_column(table_name, field_name)
        self._require_connection().execute(
            f"ALTER TABLE {quote_identifier(table_name)} "
            f"RENAME COLUMN {quote_identifier(field_name)} TO {quote_identifier(new_field_name)}"
        )

    def _require_column(self, table_name: str, field_name: str) -> None:
        names = {row[1].casefold() for row in self._table_info(table_name)}
        if field_name.casefold() not in names:
            raise ObjectNotFoundError(f"Field not found: {table_name}.{field_name}")

    def get_indexes(self, table_name: str) -> list[dict[str, Any]]:
        self._table_info(table_name)
        connection = self._require_connection()
        indexes = []
        for row in connection.execute(f"PRAGMA index_list({quote_identifier(table_name)})"):
            name, unique, origin = row[1], row[2], row[3]
            columns = [
                info[2]
                for info in connection.execute(f"PRAGMA index_info({quote_identifier(name)})")
            ]
            indexes.append(
                {
                    "name": name,
                    "table": table_name,
                    "is_unique": bool(unique),
                    "is_primary_key": origin == "pk",
                    "columns": columns,
                }
            )
        return indexes

    def create_index(
        self, table_name: str, index_name: str, columns: list[str], unique: bool = False
    ) -> None:
        self._table_info(table_name)
        column_list = ", ".join(quote_identifier(c) for c in columns)
        kind = "UNIQUE INDEX" if unique else "INDEX"
        self._require_connection().execute(
            f"CREATE {kind} {quote_identifier(index_name)} "
            f"ON {quote_identifier(table_name)} ({column_list})"
        )

    def delete_index(self, table_name: str, index_name: str) -> None:
        names = {index["name"].casefold() for index in self.get_indexes(table_name)}
        if index_name.casefold() not in names:
            raise ObjectNotFoundError(f"Index not found: {table_name}.{index_name}")
        self._require_connection().execute(f"DROP INDEX {quote_identifier(index_name)}")

    def get_relationships(self) -> list[dict[str, Any]]:
        connection = self._require_connection()
        relationships = []
        for table in self._user_table_names():
            grouped: dict[int, list[tuple[Any, ...]]] = {}
            for row in connection.execute(f"PRAGMA foreign_key_list({quote_identifier(table)})"):
                grouped.setdefault(row[0], []).append(row)
            for key_id, rows in sorted(grouped.items()):
                rows.sort(key=lambda r: r[1])
                first = rows[0]
                parent_fields = [r[4] for r in rows]
                if None in parent_fields:
                    # REFERENCES without a column list targets the parent's primary key
                    parent_fields = self._parent_key(first[2])
                relationships.append(
                    {
                        "name": f"fk_{table}_{key_id}",
                        "table": first[2],
                        "field": ", ".join(parent_fields),
                        "foreign_table": table,
                        "foreign_field": ", ".join(r[3] for r in rows),
                        "enforce_integrity": True,
                        "cascade_update": first[5] == "CASCADE",
                        "cascade_delete": first[6] == "CASCADE",
                    }
                )
        return relationships

    def _view_sql(self, query_name: str) -> str | None:
        row = self._require_connection().execute(
            "SELECT sql FROM sqlite_master WHERE type = 'view' AND name = ? COLLATE NOCASE",
            (query_name,),
        ).fetchone()
        return None if row is None else row[0]

    def get_queries(self) -> list[dict[str, Any]]:
        rows = self._require_connection().execute(
            "SELECT name, sql FROM sqlite_master WHERE type = 'view' ORDER BY name COLLATE NOCASE"
        )
        return [{"name": name, "sql": _view_body(sql), "type": "Select"} for name, sql in rows]

    def create_query(self, query_name: str, sql: str) -> None:
        if self._view_sql(query_name) is not None:
            raise BackendError(f"Query already exists: {query_name}")
        self._require_connection().execute(f"CREATE VIEW {quote_identifier(query_name)} AS {sql}")

    def update_query(self, query_name: str, sql: str) -> None:
        if self._view_sql(query_name) is None:
            raise ObjectNotFoundError(f"Query not found: {query_name}")
        connection = self._require_connection()
        connection.execute("SAVEPOINT update_query")
        try:
            connection.execute(f"DROP VIEW {quote_identifier(query_name)}")
            connection.execute(f"CREATE VIEW {quote_identifier(query_name)} AS {sql}")
        except sqlite3.Error:
            connection.execute("ROLLBACK TO update_query")
            connection.execute("RELEASE update_query")
            raise
        connection.execute("RELEASE update_query")

    def delete_query(self, query_name: str) -> None:
        if self._view_sql(query_name) is None:
            raise ObjectNotFoundError(f"Query not found: {query_name}")
        self._require_connection().execute(f"DROP VIEW {quote_identifier(query_name)}")

    def get_query_sql(self, query_name: str) -> str:
        """Return the SELECT statement behind a saved query."""
        sql = self._view_sql(query_name)
        if sql is None:
            raise ObjectNotFoundError(f"Query not found: {query_name}")
        return _view_body(sql)

    def get_system_tables(self) -> list[dict[str, Any]]:
        connection = self._require_connection()
        names = ["sqlite_master"] + [
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' "
                "AND (name LIKE 'sqlite\\_%' ESCAPE '\\' OR name LIKE 'MSys%') ORDER BY name"
            )
        ]
        return [{"name": name, "record_count": self._record_count(name)} for name in names]

    def get_object_metadata(self) -> list[dict[str, Any]]:
        connection = self._require_connection()
        metadata = [
            {
                "name": name,
                "type": kind.title(),
                "parent": parent,
                "date_created": None,
                "date_modified": None,
            }
            for kind, name, parent in connection.execute(
                "SELECT type, name, tbl_name FROM sqlite_master "
                "WHERE name NOT LIKE 'sqlite\\_%' ESCAPE '\\' ORDER BY type, name"
            )
        ]
        if self._objects_table_exists():
            for kind, name, created, modified in connection.execute(
                f"SELECT kind, name, date_created, date_modified FROM {OBJECTS_TABLE} "
                "ORDER BY kind, name"
            ):
                metadata.append(
                    {
                        "name": name,
                        "type": kind.title(),
                        "parent": None,
                        "date_created": created,
                        "date_modified": modified,
                    }
                )
        return metadata

    # -- sql ---------------------------------------------------------------

    def execute_sql(
        self, sql: str, max_rows: int = 200, parameters: list[Any] | None = None
    ) -> SqlResult:
        if not sql or not sql.strip():
            raise BackendError("SQL is required")
        if max_rows <= 0:
            raise BackendError("max_rows must be greater than 0")

        cursor = self._require_connection().execute(sql, parameters or [])
        try:
            if cursor.description is None:
                return SqlResult(is_query=False, rows_affected=max(cursor.rowcount, 0))

            columns = make_unique_columns([d[0] for d in cursor.description])
            fetched = cursor.fetchmany(max_rows + 1)
        finally:
            cursor.close()

        truncated = len(fetched) > max_rows
        rows = [
            {column: _normalize_value(value) for column, value in zip(columns, row, strict=True)}
            for row in fetched[:max_rows]
        ]
        return SqlResult(is_query=True, columns=columns, rows=rows, truncated=truncated)

    def begin_transaction(self, isolation_level: str | None = None) -> dict[str, Any]:
        connection = self._require_connection()
        if connection.in_transaction:
            raise BackendError(
                "A transaction is already active. Commit or rollback it before starting a new one."
            )

        key = (isolation_level or "DEFERRED").strip().upper().replace(" ", "").replace("_", "")
        mode = ISOLATION_LEVELS.get(key)
        if mode is None:
            raise BackendError(f"Unsupported isolation level: {isolation_level}")

        connection.execute(f"BEGIN {mode}")
        self._transaction_level = mode
        self._transaction_started = _timestamp()
        return self.get_transaction_status()

    def commit_transaction(self) -> dict[str, Any]:
        return self._finish_transaction("COMMIT", "commit")

    def rollback_transaction(self) -> dict[str, Any]:
        return self._finish_transaction("ROLLBACK", "rollback")

    def _finish_transaction(self, statement: str, verb: str) -> dict[str, Any]:
        connection = self._require_connection()
        if not connection.in_transaction:
            self._reset_transaction()
            raise BackendError(f"No active transaction to {verb}.")
        try:
            connection.execute(statement)
        finally:
            self._reset_transaction()
        return self.get_transaction_status()

    def _reset_transaction(self) -> None:
        self._transaction_level = None
        self._transaction_started = None

    def get_transaction_status(self) -> dict[str, Any]:
        active = self._connection is not None and self._connection.in_transaction
        return {
            "active": active,
            "isolation_level": self._transaction_level if active else None,
            "started_at_utc": self._transaction_started if active else None,
        }

    # -- forms, reports, macros, modules -----------------------------------

    def _objects_table_exists(self) -> bool:
        row = self._require_connection().execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (OBJECTS_TABLE,)
        ).fetchone()
        return row is not None

    @staticmethod
    def _create_objects_table(connection: sqlite3.Connection) -> None:
        connection.execute(
            f"CREATE TABLE IF NOT EXISTS {OBJECTS_TABLE} ("
            "kind TEXT NOT NULL, "
            "name TEXT NOT NULL COLLATE NOCASE, "
            "definition TEXT NOT NULL, "
            "date_created TEXT NOT NULL, "
            "date_modified TEXT NOT NULL, "
            "PRIMARY KEY (kind, name))"
        )

    def _definition(self, kind: ObjectKind, name: str) -> str | None:
        if not self._objects_table_exists():
            return None
        row = self._require_connection().execute(
            f"SELECT definition FROM {OBJECTS_TABLE} WHERE kind = ? AND name = ?", (kind, name)
        ).fetchone()
        return None if row is None else row[0]

    def get_objects(self, kind: ObjectKind) -> list[dict[str, Any]]:
        if not self._objects_table_exists():
            return []
        rows = self._require_connection().execute(
            f"SELECT name, date_created, date_modified FROM {OBJECTS_TABLE} "
            "WHERE kind = ? ORDER BY name",
            (kind,),
        )
        return [
            {"name": name, "type": kind.title(), "date_created": created, "date_modified": modified}
            for name, created, modified in rows
        ]

    def object_exists(self, kind: ObjectKind, name: str) -> bool:
        return self._definition(kind, name) is not None

    def export_object(self, kind: ObjectKind, name: str) -> str:
        definition = self._definition(kind, name)
        if definition is None:
            raise ObjectNotFoundError(f"{kind.title()} not found: {name}")
        return definition

    def import_object(self, kind: ObjectKind, data: str, name: str | None = None) -> str:
        connection = self._require_connection()
        name = name or declared_object_name(data)
        if not name:
            raise BackendError(
                f"A {kind} name is required when the definition does not declare one"
            )

        self._create_objects_table(connection)
        now = _timestamp()
        connection.execute(
            f"INSERT INTO {OBJECTS_TABLE} (kind, name, definition, date_created, date_modified) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT (kind, name) DO UPDATE SET "
            "definition = excluded.definition, date_modified = excluded.date_modified",
            (kind, name, data, now, now),
        )
        return name

    def delete_object(self, kind: ObjectKind, name: str) -> None:
        if not self.object_exists(kind, name):
            raise ObjectNotFoundError(f"{kind.title()} not found: {name}")
        self._require_connection().execute(
            f"DELETE FROM {OBJECTS_TABLE} WHERE kind = ? AND name = ?", (kind, name)
        )

    def _automation_only(self, action: str) -> AutomationUnavailableError:
        self._require_connection()
        return AutomationUnavailableError(
            f"{action} requires the Microsoft Access automation backend"
        )

    def open_object(self, kind: ObjectKind, name: str) -> None:
        raise self._automation_only(f"Opening {kind} '{name}'")

    def close_object(self, kind: ObjectKind, name: str) -> None:
        raise self._automation_only(f"Closing {kind} '{name}'")

    def get_controls(self, kind: ObjectKind, name: str) -> list[dict[str, Any]]:
        raise self._automation_only(f"Reading controls of {kind} '{name}'")

    def get_control_properties(
        self, kind: ObjectKind, name: str, control_name: str
    ) -> dict[str, Any]:
        raise self._automation_only(f"Reading properties of control '{control_name}'")

    def set_control_property(
        self, kind: ObjectKind, name: str, control_name: str, property_name: str, value: Any
    ) -> None:
        raise self._automation_only(f"Setting property '{property_name}'")

    def run_macro(self, macro_name: str) -> None:
        raise self._automation_only(f"Running macro '{macro_name}'")

    # -- vba ---------------------------------------------------------------

    def _project_name(self) -> str:
        self._require_connection()
        return Path(self._database_path or "").stem

    def _require_project(self, project_name: str) -> None:
        if project_name.casefold() != self._project_name().casefold():
            raise ObjectNotFoundError(f"VBA project not found: {project_name}")

    def get_vba_projects(self) -> list[dict[str, Any]]:
        modules = []
        for module in self.get_objects("module"):
            code = self._definition("module", module["name"]) or ""
            modules.append(
                {"name": module["name"], "type": "Standard", "has_code": bool(code.strip())}
            )
        return [{"name": self._project_name(), "description": "", "modules": modules}]

    def get_vba_code(self, project_name: str, module_name: str) -> str:
        self._require_project(project_name)
        return self.export_object("module", module_name)

    def set_vba_code(self, project_name: str, module_name: str, code: str) -> None:
        self._require_project(project_name)
        self.import_object("module", code, module_name)

    def add_vba_procedure(
        self, project_name: str, module_name: str, procedure_name: str, code: str
    ) -> None:
        self._require_project(project_name)
        existing = self._definition("module", module_name) or ""
        declaration = re.compile(
            rf"^\s*(?:(?:Public|Private|Friend)\s+)?(?:Static\s+)?"
            rf"(?:Sub|Function|Property\s+(?:Get|Let|Set))\s+{re.escape(procedure_name)}\b",
            re.IGNORECASE | re.MULTILINE,
        )
        if declaration.search(existing):
            raise BackendError(f"Procedure already exists: {procedure_name}")

        body = code.strip()
        if not declaration.search(body):
            body = f"Public Sub {procedure_name}()\n{body}\nEnd Sub"

        combined = f"{existing.rstrip()}\n\n{body}\n" if existing.strip() else f"{body}\n"
        self.import_object("module", combined, module_name)

    def compile_vba(self) -> None:
        raise self._automation_only("Compiling VBA")


def _primary_key(table_info: list[tuple[Any, ...]]) -> list[str]:
    return [row[1] for row in sorted(table_info, key=lambda r: r[5]) if row[5]]


def _view_body(sql: str) -> str:
    match = VIEW_HEADER.match(sql)
    return match.group(1).strip() if match else sql
