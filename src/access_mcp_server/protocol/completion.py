"""MCP completion/complete: argument value suggestions from the database."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from access_mcp_server.backend.base import AccessBackend
from access_mcp_server.protocol.prompts import PROMPTS
from access_mcp_server.protocol.resources import RESOURCE_TEMPLATES

MAX_COMPLETION_VALUES = 100


def _names(items: list[dict[str, Any]]) -> list[str]:
    return [str(item["name"]) for item in items if item.get("name")]


# Argument name -> candidate source
CANDIDATE_SOURCES: dict[str, Callable[[AccessBackend], list[str]]] = {
    "table_name": lambda backend: _names(backend.get_tables()),
    "query_name": lambda backend: _names(backend.get_queries()),
    "form_name": lambda backend: _names(backend.get_objects("form")),
    "report_name": lambda backend: _names(backend.get_objects("report")),
    "module_name": lambda backend: _names(backend.get_objects("module")),
}


def empty_completion() -> dict[str, Any]:
    return {"completion": {"values": [], "total": 0, "hasMore": False}}


class CompletionEngine:
    """Suggests values for resource template parameters and prompt arguments."""

    def __init__(
        self, backend: AccessBackend, log: Callable[[str], None] | None = None
    ) -> None:
        """Initialize the engine.

        Args:
            backend: Database backend supplying candidate names.
            log: Side-channel logger for swallowed failures.
        """
        self._backend = backend
        self._log = log
        self._template_uris = {t.uri_template for t in RESOURCE_TEMPLATES}
        self._prompt_names = {p.name for p in PROMPTS}

    def complete(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle completion/complete.

        Never fails: an unknown reference, an unknown argument, a
        disconnected backend or a backend error all give an empty result.
        """
        try:
            return self._complete(params)
        except Exception as e:
            if self._log:
                self._log(f"Completion failed: {e}")
            return empty_completion()

    def _complete(self, params: dict[str, Any]) -> dict[str, Any]:
        ref = params.get("ref")
        argument = params.get("argument")
        if not isinstance(ref, dict) or not isinstance(argument, dict):
            return empty_completion()
        if not self._is_known_reference(ref):
            return empty_completion()

        source = CANDIDATE_SOURCES.get(argument.get("name"))
        if source is None or not self._backend.is_connected:
            return empty_completion()

        value = argument.get("value")
        prefix = value.casefold() if isinstance(value, str) else ""
        matches = [name for name in source(self._backend) if name.casefold().startswith(prefix)]

        return {
            "completion": {
                "values": matches[:MAX_COMPLETION_VALUES],
                "total": len(matches),
                "hasMore": len(matches) > MAX_COMPLETION_VALUES,
            }
        }

    def _is_known_reference(self, ref: dict[str, Any]) -> bool:
        if ref.get("type") == "ref/resource":
            return ref.get("uri") in self._template_uris
        if ref.get("type") == "ref/prompt":
            return ref.get("name") in self._prompt_names
        return False
