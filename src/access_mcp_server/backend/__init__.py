"""Database backends behind the tool handlers."""

from access_mcp_server.backend.base import (
    OBJECT_KINDS,
    AccessBackend,
    AutomationUnavailableError,
    BackendError,
    FieldSpec,
    NotConnectedError,
    ObjectKind,
    ObjectNotFoundError,
    SqlResult,
)
from access_mcp_server.backend.sqlite import SqliteBackend

__all__ = [
    "OBJECT_KINDS",
    "AccessBackend",
    "AutomationUnavailableError",
    "BackendError",
    "FieldSpec",
    "NotConnectedError",
    "ObjectKind",
    "ObjectNotFoundError",
    "SqlResult",
    "SqliteBackend",
]
