"""Tool groups exposed through tools/list and tools/call."""

from access_mcp_server.plugins.base import (
    BackendPlugin,
    PluginBase,
    PluginContext,
    ToolDefinition,
    ToolOutcome,
)
from access_mcp_server.plugins.connection import ConnectionPlugin
from access_mcp_server.plugins.dispatcher import (
    DuplicateToolError,
    InvalidToolSchemaError,
    ToolDispatcher,
    ToolExecutionError,
    ToolNotFoundError,
)
from access_mcp_server.plugins.forms import FormsPlugin
from access_mcp_server.plugins.schema import SchemaPlugin
from access_mcp_server.plugins.sql import SqlPlugin
from access_mcp_server.plugins.vba import VbaPlugin


def default_plugins(context: PluginContext) -> list[PluginBase]:
    """Build the standard tool groups, in tools/list order."""
    return [
        ConnectionPlugin(context),
        SchemaPlugin(context),
        SqlPlugin(context),
        FormsPlugin(context),
        VbaPlugin(context),
    ]


__all__ = [
    "BackendPlugin",
    "ConnectionPlugin",
    "DuplicateToolError",
    "FormsPlugin",
    "InvalidToolSchemaError",
    "PluginBase",
    "PluginContext",
    "SchemaPlugin",
    "SqlPlugin",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolOutcome",
    "VbaPlugin",
    "default_plugins",
]
