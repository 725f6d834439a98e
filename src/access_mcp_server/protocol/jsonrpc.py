"""JSON-RPC 2.0 message parsing and formatting.

Classifies incoming frames as requests or notifications and formats
responses, errors and server-to-client notifications for MCP communication.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# MCP resource-not-found error code
RESOURCE_NOT_FOUND = -32002

# Methods under this prefix never receive a response
NOTIFICATION_PREFIX = "notifications/"


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


@dataclass(frozen=True)
class ProtocolFailure:
    """A protocol-level failure returned by a method handler.

    The router serializes it as a JSON-RPC ``error`` object instead of a
    ``result``. Tool-level failures never use this type.
    """

    code: int
    message: str


@dataclass
class JsonRpcRequest:
    """Represents a JSON-RPC request (has id, which may be null)."""

    id: Any
    method: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class JsonRpcNotification:
    """Represents a JSON-RPC notification (no id, or a notifications/ method)."""

    method: str
    params: dict[str, Any] = field(default_factory=dict)


def parse_message(raw: str) -> JsonRpcRequest | JsonRpcNotification:
    """Parse a JSON-RPC message from a string.

    Args:
        raw: Raw JSON string.

    Returns:
        Parsed request or notification.

    Raises:
        JsonRpcError: If the message cannot be used as a frame.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise JsonRpcError(PARSE_ERROR, f"JSON parsing error: {e}") from e

    if isinstance(data, list):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: batch messages are not supported")

    if not isinstance(data, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: message must be an object")

    method = data.get("method")
    if not isinstance(method, str) or not method:
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: method must be a non-empty string")

    params = data.get("params")
    if not isinstance(params, dict):
        params = {}

    if method.startswith(NOTIFICATION_PREFIX) or "id" not in data:
        return JsonRpcNotification(method=method, params=params)

    return JsonRpcRequest(id=data["id"], method=method, params=params)


def format_response(msg_id: Any, result: Any) -> str:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back.
        result: Result payload.

    Returns:
        JSON string.
    """
    response = {
        "jsonrpc": "2.0",
        "id": msg_id,
        "result": result,
    }
    return json.dumps(response, default=str)


def format_error(
    msg_id: Any,
    code: int,
    message: str,
    data: Any | None = None,
) -> str:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID to echo back.
        code: Error code.
        message: Error message.
        data: Optional error data.

    Returns:
        JSON string.
    """
    error_obj: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if data is not None:
        error_obj["data"] = data

    response = {
        "jsonrpc": "2.0",
        "id": msg_id,
        "error": error_obj,
    }
    return json.dumps(response, default=str)


def format_notification(method: str, params: dict[str, Any] | None = None) -> str:
    """Format a JSON-RPC notification (server to client).

    Args:
        method: Notification method name.
        params: Optional parameters.

    Returns:
        JSON string.
    """
    notification: dict[str, Any] = {
        "jsonrpc": "2.0",
        "method": method,
    }
    if params is not None:
        notification["params"] = params

    return json.dumps(notification, default=str)
