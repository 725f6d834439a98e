"""MCP Protocol layer for JSON-RPC communication."""

from access_mcp_server.protocol.jsonrpc import (
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    ProtocolFailure,
    format_error,
    format_notification,
    format_response,
    parse_message,
)
from access_mcp_server.protocol.lifecycle import MCP_PROTOCOL_VERSION, LifecycleManager
from access_mcp_server.protocol.notifications import LOG_LEVELS, LoggingSession, Notifier
from access_mcp_server.protocol.transport import StdioTransport

__all__ = [
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "LOG_LEVELS",
    "LifecycleManager",
    "LoggingSession",
    "MCP_PROTOCOL_VERSION",
    "Notifier",
    "ProtocolFailure",
    "StdioTransport",
    "format_error",
    "format_notification",
    "format_response",
    "parse_message",
]
