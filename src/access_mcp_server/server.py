"""MCP Server - method routing and the serve loop.

Integrates transport, tools, resources, prompts, completion and logging
into a complete MCP server.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from access_mcp_server.audit import AuditLogger
from access_mcp_server.backend.base import AccessBackend
from access_mcp_server.backend.sqlite import SqliteBackend
from access_mcp_server.config import ServerConfig
from access_mcp_server.diagnostics import EnvironmentFacts, probe_environment
from access_mcp_server.plugins import PluginBase, PluginContext, ToolDispatcher, default_plugins
from access_mcp_server.protocol.completion import CompletionEngine
from access_mcp_server.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    ProtocolFailure,
    format_error,
    format_response,
    parse_message,
)
from access_mcp_server.protocol.lifecycle import LifecycleManager
from access_mcp_server.protocol.notifications import LoggingSession, Notifier
from access_mcp_server.protocol.prompts import PromptCatalog
from access_mcp_server.protocol.resources import ResourceResolver
from access_mcp_server.protocol.tools import ToolsHandler
from access_mcp_server.protocol.transport import StdioTransport

MethodHandler = Callable[[dict[str, Any]], Any]


class MCPServer:
    """MCP Server implementation.

    Provides a complete MCP server that handles:
    - initialize (no gating: every method is available immediately)
    - Tool listing and execution
    - Resources, resource templates, prompts and completion
    - Client log level selection and notifications/message
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        backend: AccessBackend | None = None,
        transport: StdioTransport | None = None,
        facts: EnvironmentFacts | None = None,
        plugins: list[PluginBase] | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration (defaults apply when omitted).
            backend: Database backend, a SqliteBackend by default.
            transport: Stdio transport for frames and the stderr log.
            facts: Environment facts for diagnostics, probed when omitted.
            plugins: Tool groups to register instead of the standard set.

        Raises:
            DuplicateToolError: If two plugins declare the same tool name.
        """
        self._config = config or ServerConfig()
        self._backend = backend or SqliteBackend()
        self._transport = transport or StdioTransport()

        self._session = LoggingSession(self._config.initial_log_level)
        self._notifier = Notifier(
            self._session, self._transport.write_message, self._config.logger_name
        )
        self._lifecycle = LifecycleManager(
            server_info={"name": self._config.server_name, "version": self._config.server_version}
        )

        self._audit = (
            AuditLogger(Path(self._config.audit_log_file)) if self._config.audit_log_file else None
        )
        self._dispatcher = ToolDispatcher()
        self._tools_handler = ToolsHandler(self._dispatcher, self._audit)

        context = PluginContext(
            backend=self._backend,
            notifier=self._notifier,
            facts=facts or probe_environment(),
            config=self._config,
        )
        if plugins is None:
            plugins = default_plugins(context)
        for plugin in plugins:
            self.register_plugin(plugin)

        self._resources = ResourceResolver(self._backend)
        self._prompts = PromptCatalog(self._resources)
        self._completion = CompletionEngine(self._backend, self._transport.log)

        self._methods: dict[str, MethodHandler] = {
            "initialize": self._lifecycle.handle_initialize,
            "tools/list": lambda params: self._tools_handler.handle_list(),
            "tools/call": self._tools_call,
            "resources/list": lambda params: self._resources.list_resources(),
            "resources/read": self._resources_read,
            "resources/templates/list": lambda params: self._resources.list_templates(),
            "prompts/list": lambda params: self._prompts.list_prompts(),
            "prompts/get": self._prompts.get_prompt,
            "completion/complete": self._completion.complete,
            "logging/setLevel": self._logging_set_level,
        }

    @property
    def backend(self) -> AccessBackend:
        return self._backend

    @property
    def session(self) -> LoggingSession:
        return self._session

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def register_plugin(self, plugin: PluginBase) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin to register.
        """
        self._dispatcher.register_plugin(plugin)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools.

        Returns:
            List of tool definitions.
        """
        return self._dispatcher.list_tools()

    def handle_message(self, raw_message: str) -> str | None:
        """Handle an incoming JSON-RPC message.

        Malformed frames and notifications are logged to stderr and dropped.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Response string, or None when nothing must be sent.
        """
        try:
            message = parse_message(raw_message)
        except JsonRpcError as e:
            self._transport.log(f"Dropping unusable frame: {e}")
            return None

        if isinstance(message, JsonRpcNotification):
            self._transport.log(f"Ignoring notification: {message.method}")
            return None

        return self._handle_request(message)

    def _handle_request(self, request: JsonRpcRequest) -> str:
        """Route a request and serialize its result or error.

        Args:
            request: The request to handle.

        Returns:
            JSON-RPC response string carrying the request id.
        """
        handler = self._methods.get(request.method)
        if handler is None:
            return format_error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        try:
            result = handler(request.params)
        except Exception as e:
            self._transport.log(f"Error handling {request.method}: {e}")
            return format_error(request.id, INTERNAL_ERROR, f"Internal error: {e}")

        if isinstance(result, ProtocolFailure):
            return format_error(request.id, result.code, result.message)
        return format_response(request.id, result)

    def _tools_call(self, params: dict[str, Any]) -> dict[str, Any] | ProtocolFailure:
        name = params.get("name")
        if not isinstance(name, str) or not name.strip():
            return ProtocolFailure(INVALID_PARAMS, "Missing required tools/call parameter: name")

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}
        return self._tools_handler.handle_call(name, arguments).to_dict()

    def _resources_read(self, params: dict[str, Any]) -> dict[str, Any] | ProtocolFailure:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri.strip():
            return ProtocolFailure(INVALID_PARAMS, "Missing required resources/read parameter: uri")
        return self._resources.read(uri.strip())

    def _logging_set_level(self, params: dict[str, Any]) -> dict[str, Any]:
        level = params.get("level")
        if not self._session.set_level(level):
            self._transport.log(f"Ignoring unknown log level: {level!r}")
        return {}

    def serve(self) -> int:
        """Run the message loop until EOF.

        One line is read, processed and answered before the next is read.
        A failure while processing a line is logged and the loop goes on;
        a failure while reading ends it.

        Returns:
            Exit code: 0 on EOF, 1 when reading input fails.
        """
        while True:
            try:
                message = self._transport.read_message()
            except Exception as e:
                self._transport.log(f"Fatal error reading input: {e}")
                return 1

            if message is None:
                self._transport.log("EOF received, shutting down")
                return 0

            try:
                response = self.handle_message(message)
            except Exception as e:
                self._transport.log(f"Error processing message: {e}")
                continue

            if response is not None:
                self._transport.write_message(response)

    def close(self) -> None:
        """Release plugins, the database connection and the audit log."""
        self._dispatcher.cleanup()
        self._backend.close()
        if self._audit:
            self._audit.close()

    def __enter__(self) -> MCPServer:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
