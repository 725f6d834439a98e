"""Tool dispatcher - routes tool calls to the appropriate plugin."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from access_mcp_server.plugins.base import PluginBase, ToolDefinition, ToolOutcome


class ToolNotFoundError(Exception):
    """Raised when a tool is not found."""

    pass


class ToolExecutionError(Exception):
    """Raised when a tool fails to execute."""

    pass


class DuplicateToolError(Exception):
    """Raised when two tools are registered under the same name."""

    pass


class InvalidToolSchemaError(Exception):
    """Raised when a tool declares an input schema that is not valid JSON Schema."""

    pass


class ToolDispatcher:
    """Routes tool calls to registered plugins.

    Maintains a registry of plugins and their tools, dispatching
    calls to the appropriate handler. Tool definitions are captured once
    at registration so tools/list is stable.
    """

    def __init__(self) -> None:
        """Initialize the dispatcher."""
        self._plugins: list[PluginBase] = []
        self._tool_map: dict[str, PluginBase] = {}
        self._definitions: list[ToolDefinition] = []

    def register_plugin(self, plugin: PluginBase) -> None:
        """Register a plugin and index its tools.

        Args:
            plugin: Plugin instance to register.

        Raises:
            DuplicateToolError: If a tool name is already registered.
            InvalidToolSchemaError: If a tool's input schema is not valid
                JSON Schema. The plugin is not registered in either case.
        """
        tools = plugin.get_tools()
        names: set[str] = set()
        for tool in tools:
            if tool.name in self._tool_map or tool.name in names:
                raise DuplicateToolError(f"Duplicate tool name: {tool.name}")
            try:
                Draft202012Validator.check_schema(tool.input_schema)
            except SchemaError as e:
                raise InvalidToolSchemaError(
                    f"Invalid schema for tool {tool.name}: {e.message}"
                ) from e
            names.add(tool.name)

        self._plugins.append(plugin)
        for tool in tools:
            self._tool_map[tool.name] = plugin
            self._definitions.append(tool)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all available tools in MCP format.

        Returns:
            List of tool definitions in MCP format.
        """
        return [tool.to_dict() for tool in self._definitions]

    def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Call a tool by name.

        Args:
            tool_name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            ToolOutcome from the tool execution.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolExecutionError: If the tool fails to execute.
        """
        plugin = self._tool_map.get(tool_name)
        if plugin is None:
            raise ToolNotFoundError(f"Unknown tool: {tool_name}")

        try:
            return plugin.execute(tool_name, arguments)
        except Exception as e:
            raise ToolExecutionError(f"Tool '{tool_name}' execution failed: {e}") from e

    def cleanup(self) -> None:
        """Clean up all registered plugins.

        Calls cleanup() on each plugin to release resources.
        Called by MCPServer.close() during shutdown.
        """
        for plugin in self._plugins:
            plugin.cleanup()
