"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, routing them through the plugin dispatcher.
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Any

from access_mcp_server.plugins.base import ToolOutcome
from access_mcp_server.plugins.dispatcher import (
    ToolDispatcher,
    ToolExecutionError,
    ToolNotFoundError,
)

if TYPE_CHECKING:
    from access_mcp_server.audit import AuditLogger


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests.

    Routes requests through the plugin dispatcher and wraps every outcome,
    including unknown tools, in the tool result envelope.
    """

    def __init__(self, dispatcher: ToolDispatcher, audit: AuditLogger | None = None) -> None:
        """Initialize the handler.

        Args:
            dispatcher: Tool dispatcher for routing calls.
            audit: Optional audit logger recording every call.
        """
        self._dispatcher = dispatcher
        self._audit = audit

    def handle_list(self) -> dict[str, Any]:
        """Handle tools/list request.

        Returns:
            MCP tools/list result.
        """
        return {"tools": self._dispatcher.list_tools()}

    def handle_call(self, name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Handle tools/call request.

        Args:
            name: Name of the tool to call.
            arguments: Tool arguments.

        Returns:
            ToolOutcome with the execution result.
        """
        request_id = str(uuid.uuid4())
        if self._audit:
            self._audit.log_request(request_id, name, arguments)

        start = time.perf_counter()
        try:
            outcome = self._dispatcher.call_tool(name, arguments)
        except ToolNotFoundError as e:
            outcome = ToolOutcome.failure(str(e))
        except ToolExecutionError as e:
            outcome = ToolOutcome.failure(str(e))
        duration_ms = (time.perf_counter() - start) * 1000

        if self._audit:
            error = outcome.payload.get("error") if outcome.is_error else None
            self._audit.log_response(
                request_id,
                name,
                "error" if outcome.is_error else "success",
                duration_ms,
                error=error,
            )
        return outcome
