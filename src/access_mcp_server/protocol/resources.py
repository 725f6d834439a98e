"""MCP resources: read-only snapshots of the connected database.

Static resources cover catalogs (tables, queries, ...); templates address
a single object by name, e.g. ``access://table/Customers``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any
from urllib.parse import unquote

from access_mcp_server.backend.base import AccessBackend, ObjectNotFoundError
from access_mcp_server.protocol.jsonrpc import INTERNAL_ERROR, RESOURCE_NOT_FOUND, ProtocolFailure

SCHEME = "access://"
JSON_MIME = "application/json"
TEXT_MIME = "text/plain"


@dataclass(frozen=True)
class ResourceDescriptor:
    """A fixed resource listed by resources/list."""

    uri: str
    name: str
    description: str
    mime_type: str = JSON_MIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass(frozen=True)
class ResourceTemplate:
    """A parameterized resource listed by resources/templates/list.

    The URI template ends with a single ``{parameter}`` placeholder.
    """

    uri_template: str
    name: str
    description: str
    mime_type: str = JSON_MIME

    @property
    def prefix(self) -> str:
        """Path before the placeholder, without the scheme."""
        return self.uri_template[len(SCHEME) : self.uri_template.index("{")]

    def to_dict(self) -> dict[str, Any]:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


STATIC_RESOURCES = (
    ResourceDescriptor(
        "access://connection", "connection", "Connection state and active database path"
    ),
    ResourceDescriptor("access://tables", "tables", "Tables with fields and record counts"),
    ResourceDescriptor("access://queries", "queries", "Saved queries and their SQL"),
    ResourceDescriptor("access://relationships", "relationships", "Table relationships"),
    ResourceDescriptor("access://forms", "forms", "Forms in the database"),
    ResourceDescriptor("access://reports", "reports", "Reports in the database"),
    ResourceDescriptor("access://macros", "macros", "Macros in the database"),
    ResourceDescriptor("access://modules", "modules", "VBA modules in the database"),
)

RESOURCE_TEMPLATES = (
    ResourceTemplate(
        "access://table/{table_name}", "table", "Schema of one table (columns, primary key)"
    ),
    ResourceTemplate("access://query/{query_name}", "query", "Definition of one saved query"),
    ResourceTemplate(
        "access://form/{form_name}", "form", "Text export of one form", TEXT_MIME
    ),
    ResourceTemplate(
        "access://report/{report_name}", "report", "Text export of one report", TEXT_MIME
    ),
    ResourceTemplate(
        "access://module/{module_name}", "module", "VBA source of one module", TEXT_MIME
    ),
)


class ResourceResolver:
    """Lists and reads ``access://`` resources through the backend."""

    def __init__(self, backend: AccessBackend) -> None:
        self._backend = backend
        self._static: dict[str, Callable[[], Any]] = {
            "connection": self._connection,
            "tables": backend.get_tables,
            "queries": backend.get_queries,
            "relationships": backend.get_relationships,
            "forms": lambda: backend.get_objects("form"),
            "reports": lambda: backend.get_objects("report"),
            "macros": lambda: backend.get_objects("macro"),
            "modules": lambda: backend.get_objects("module"),
        }
        self._templates: dict[str, Callable[[str], Any]] = {
            "table": backend.describe_table,
            "query": self._query,
            "form": lambda name: backend.export_object("form", name),
            "report": lambda name: backend.export_object("report", name),
            "module": lambda name: backend.export_object("module", name),
        }

    def list_resources(self) -> dict[str, Any]:
        return {"resources": [r.to_dict() for r in STATIC_RESOURCES]}

    def list_templates(self) -> dict[str, Any]:
        return {"resourceTemplates": [t.to_dict() for t in RESOURCE_TEMPLATES]}

    def read(self, uri: str) -> dict[str, Any] | ProtocolFailure:
        """Read one resource.

        Args:
            uri: Resource URI, static or matching a template.

        Returns:
            ``{"contents": [{uri, mimeType, text}]}``, or a ProtocolFailure:
            -32002 when the URI does not resolve (including while
            disconnected, or when the named object is missing), -32603 when
            the backend fails.
        """
        not_found = ProtocolFailure(RESOURCE_NOT_FOUND, f"Resource not found: {uri}")
        if not uri.startswith(SCHEME):
            return not_found
        path = uri[len(SCHEME) :]

        reader: Callable[[], Any] | None = None
        mime_type = JSON_MIME
        if path in self._static:
            reader = self._static[path]
        else:
            for template in RESOURCE_TEMPLATES:
                if not path.startswith(template.prefix):
                    continue
                value = unquote(path[len(template.prefix) :]).strip()
                if not value:
                    return not_found
                reader = partial(self._templates[template.name], value)
                mime_type = template.mime_type
                break

        if reader is None:
            return not_found
        if path != "connection" and not self._backend.is_connected:
            return not_found

        try:
            payload = reader()
        except ObjectNotFoundError:
            return not_found
        except Exception as e:
            return ProtocolFailure(INTERNAL_ERROR, f"Failed to read resource {uri}: {e}")

        text = payload if mime_type == TEXT_MIME else json.dumps(payload, indent=2, default=str)
        return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}

    def _connection(self) -> dict[str, Any]:
        connected = self._backend.is_connected
        return {
            "connected": connected,
            "database_path": self._backend.current_database_path if connected else None,
            "transaction": self._backend.get_transaction_status(),
        }

    def _query(self, query_name: str) -> dict[str, Any]:
        for query in self._backend.get_queries():
            if str(query.get("name", "")).casefold() == query_name.casefold():
                return query
        raise ObjectNotFoundError(f"Query not found: {query_name}")
