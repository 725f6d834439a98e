"""Plugin base class and data structures.

Defines the interface every tool group implements, the tool result
envelope, and BackendPlugin, the shared wrapper that turns handler
exceptions into failed tool outcomes.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from access_mcp_server.backend.base import AccessBackend
from access_mcp_server.config import ServerConfig
from access_mcp_server.diagnostics import EnvironmentFacts, diagnose_failure, probe_environment
from access_mcp_server.protocol.binder import ArgumentError
from access_mcp_server.protocol.notifications import Notifier

Handler = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass
class ToolDefinition:
    """Definition of a tool provided by a plugin."""

    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolOutcome:
    """Domain payload of a tool call, wrapped as an MCP tools/call result.

    The payload is a JSON object, normally carrying a ``success`` flag.
    """

    payload: dict[str, Any]

    @classmethod
    def ok(cls, **fields: Any) -> ToolOutcome:
        """Build a successful outcome."""
        return cls({"success": True, **fields})

    @classmethod
    def failure(cls, error: str, **fields: Any) -> ToolOutcome:
        """Build a failed outcome with an error message."""
        return cls({"success": False, "error": error, **fields})

    @property
    def is_error(self) -> bool:
        """True only when the payload explicitly reports ``success: false``."""
        return self.payload.get("success") is False

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {
            "content": [{"type": "text", "text": json.dumps(self.payload, default=str)}],
            "structuredContent": self.payload,
            "isError": self.is_error,
        }


# Schema helpers

def string_property(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def integer_property(description: str) -> dict[str, Any]:
    return {"type": "integer", "description": description}


def boolean_property(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


def string_array_property(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def object_schema(
    properties: dict[str, Any] | None = None, required: list[str] | None = None
) -> dict[str, Any]:
    """Build an object input schema."""
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }


class PluginBase(ABC):
    """Abstract base class for all plugins.

    Plugins must implement this interface to provide tools
    to the MCP server.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plugin identifier."""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the plugin version."""
        pass

    @abstractmethod
    def get_tools(self) -> list[ToolDefinition]:
        """Return tool definitions provided by this plugin.

        Returns:
            List of ToolDefinition objects.
        """
        pass

    @abstractmethod
    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments.

        Returns:
            ToolOutcome with the domain payload.
        """
        pass

    def cleanup(self) -> None:
        """Release plugin resources. Called on server shutdown."""
        pass


@dataclass
class PluginContext:
    """Collaborators shared by every tool group."""

    backend: AccessBackend
    notifier: Notifier
    facts: EnvironmentFacts = field(default_factory=probe_environment)
    config: ServerConfig = field(default_factory=ServerConfig)


class BackendPlugin(PluginBase):
    """Base for tool groups that call the database backend.

    Subclasses declare their tools in ``_definitions`` and map canonical
    names to handlers in ``_handlers``. A handler reads its arguments with
    the binder helpers and returns the payload fields of a successful call;
    ``success`` defaults to true. Aliases are advertised as tools of their
    own and run the canonical handler.
    """

    aliases: ClassVar[dict[str, str]] = {}

    def __init__(self, context: PluginContext) -> None:
        """Initialize the plugin.

        Args:
            context: Backend, notifier and environment facts.
        """
        self._context = context

    @property
    def backend(self) -> AccessBackend:
        return self._context.backend

    @property
    def config(self) -> ServerConfig:
        return self._context.config

    @property
    def version(self) -> str:
        return "1.0.0"

    @abstractmethod
    def _definitions(self) -> list[ToolDefinition]:
        """Return the canonical tool definitions."""
        pass

    @abstractmethod
    def _handlers(self) -> dict[str, Handler]:
        """Return mapping of canonical tool names to handler methods."""
        pass

    def get_tools(self) -> list[ToolDefinition]:
        definitions = list(self._definitions())
        by_name = {d.name: d for d in definitions}
        for alias, canonical in self.aliases.items():
            target = by_name[canonical]
            definitions.append(
                ToolDefinition(
                    name=alias,
                    description=f"Alias of {canonical}. {target.description}",
                    input_schema=target.input_schema,
                )
            )
        return definitions

    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Run a tool and convert every failure into a failed outcome.

        Argument errors produce ``{success: false, error}``. Any other
        exception is classified by the diagnostics module and carries a
        ``preflight`` block.
        """
        canonical = self.aliases.get(tool_name, tool_name)
        handler = self._handlers().get(canonical)
        if handler is None:
            return ToolOutcome.failure(f"Unknown tool: {tool_name}")

        notifier = self._context.notifier
        notifier.debug({"tool": tool_name, "message": f"Calling {canonical}"}, logger=self.name)

        try:
            fields = handler(arguments)
        except ArgumentError as e:
            return ToolOutcome.failure(str(e))
        except Exception as e:
            diagnosis = diagnose_failure(e, self._context.facts)
            notifier.error({"tool": tool_name, "error": diagnosis.message}, logger=self.name)
            return ToolOutcome.failure(diagnosis.message, preflight=diagnosis.preflight)

        return ToolOutcome({"success": True, **fields})
