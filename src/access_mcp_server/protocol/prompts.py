"""MCP prompts: reusable instructions with live database snapshots.

Each prompt combines instructional text with embedded ``access://``
resources read at request time, so the client model sees current schema.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from access_mcp_server.protocol.jsonrpc import INVALID_PARAMS, ProtocolFailure
from access_mcp_server.protocol.resources import ResourceResolver


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "required": self.required}


@dataclass(frozen=True)
class PromptDescriptor:
    """A prompt listed by prompts/list."""

    name: str
    description: str
    arguments: tuple[PromptArgument, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [a.to_dict() for a in self.arguments],
        }


@dataclass
class PromptMessage:
    """One user-role message holding a single content part."""

    content: dict[str, Any]
    role: str = "user"

    @classmethod
    def text(cls, text: str) -> PromptMessage:
        return cls({"type": "text", "text": text})

    @classmethod
    def resource(cls, contents: dict[str, Any]) -> PromptMessage:
        return cls({"type": "resource", "resource": contents})

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class _PromptBuilder:
    """Accumulates messages; stops at the first resource that fails to read."""

    resolver: ResourceResolver
    messages: list[PromptMessage] = field(default_factory=list)
    failure: ProtocolFailure | None = None

    def text(self, text: str) -> None:
        if self.failure is None:
            self.messages.append(PromptMessage.text(text))

    def resource(self, uri: str) -> None:
        if self.failure is not None:
            return
        result = self.resolver.read(uri)
        if isinstance(result, ProtocolFailure):
            self.failure = result
            return
        for contents in result["contents"]:
            self.messages.append(PromptMessage.resource(contents))


PROMPTS = (
    PromptDescriptor(
        "analyze_database",
        "Review the connected database's tables, relationships and queries",
    ),
    PromptDescriptor(
        "explore_table",
        "Explore one table: columns, sample queries and data quality checks",
        (PromptArgument("table_name", "Table to explore", required=True),),
    ),
    PromptDescriptor(
        "write_query",
        "Draft an Access SQL query for a goal",
        (
            PromptArgument("goal", "What the query should return or change", required=True),
            PromptArgument("table_name", "Table the query is mainly about"),
        ),
    ),
    PromptDescriptor(
        "review_vba_module",
        "Review the source of one VBA module",
        (PromptArgument("module_name", "Module to review", required=True),),
    ),
)


def _template_uri(kind: str, name: str) -> str:
    return f"access://{kind}/{quote(name, safe='')}"


class PromptCatalog:
    """Lists prompts and assembles their messages."""

    def __init__(self, resolver: ResourceResolver) -> None:
        self._resolver = resolver
        self._prompts = {p.name: p for p in PROMPTS}
        self._builders: dict[str, Callable[[_PromptBuilder, dict[str, str]], None]] = {
            "analyze_database": self._analyze_database,
            "explore_table": self._explore_table,
            "write_query": self._write_query,
            "review_vba_module": self._review_vba_module,
        }

    def list_prompts(self) -> dict[str, Any]:
        return {"prompts": [p.to_dict() for p in PROMPTS]}

    def get_prompt(self, params: dict[str, Any]) -> dict[str, Any] | ProtocolFailure:
        """Handle prompts/get.

        Args:
            params: Request params with ``name`` and optional ``arguments``.

        Returns:
            ``{description, messages}``, or a ProtocolFailure for a missing or
            unknown name, a missing required argument, or a resource that
            could not be read.
        """
        name = params.get("name")
        if not isinstance(name, str) or not name.strip():
            return ProtocolFailure(INVALID_PARAMS, "Missing required prompts/get parameter: name")

        descriptor = self._prompts.get(name)
        if descriptor is None:
            return ProtocolFailure(INVALID_PARAMS, f"Unknown prompt: {name}")

        raw_arguments = params.get("arguments")
        if not isinstance(raw_arguments, dict):
            raw_arguments = {}

        arguments: dict[str, str] = {}
        for argument in descriptor.arguments:
            value = raw_arguments.get(argument.name)
            if isinstance(value, str) and value.strip():
                arguments[argument.name] = value.strip()
            elif argument.required:
                return ProtocolFailure(
                    INVALID_PARAMS, f"Missing required argument: {argument.name}"
                )

        builder = _PromptBuilder(self._resolver)
        self._builders[name](builder, arguments)
        if builder.failure is not None:
            return builder.failure

        return {
            "description": descriptor.description,
            "messages": [m.to_dict() for m in builder.messages],
        }

    def _analyze_database(self, builder: _PromptBuilder, arguments: dict[str, str]) -> None:
        builder.text(
            "Analyze the structure of the connected Access database. Summarize what each "
            "table stores and how the tables relate, then point out missing primary keys, "
            "unindexed foreign keys and normalization problems."
        )
        builder.resource("access://tables")
        builder.resource("access://relationships")
        builder.resource("access://queries")

    def _explore_table(self, builder: _PromptBuilder, arguments: dict[str, str]) -> None:
        table_name = arguments["table_name"]
        builder.text(
            f"Explore the table '{table_name}'. Describe each column, suggest a few "
            "SELECT statements that show typical data, and list data quality checks "
            "worth running with execute_sql."
        )
        builder.resource(_template_uri("table", table_name))

    def _write_query(self, builder: _PromptBuilder, arguments: dict[str, str]) -> None:
        builder.text(f"Write an Access SQL query that does the following: {arguments['goal']}")
        table_name = arguments.get("table_name")
        if table_name:
            builder.resource(_template_uri("table", table_name))
        else:
            builder.resource("access://tables")
        builder.text(
            "Use only the tables and columns shown. Return the SQL first, then run it "
            "with execute_query_md to check the result."
        )

    def _review_vba_module(self, builder: _PromptBuilder, arguments: dict[str, str]) -> None:
        module_name = arguments["module_name"]
        builder.text(
            f"Review the VBA module '{module_name}'. Look for missing Option Explicit, "
            "unhandled errors, SQL built by string concatenation and dead code, and "
            "propose corrected procedures."
        )
        builder.resource(_template_uri("module", module_name))
