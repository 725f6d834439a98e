"""MCP initialize handshake.

Builds the static protocol, capability and server metadata returned by
``initialize``. The server does not gate other methods on the handshake.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Supported MCP protocol versions (newest first)
SUPPORTED_PROTOCOL_VERSIONS = ["2025-06-18", "2025-03-26", "2024-11-05"]
# Default version to advertise
MCP_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]


def _default_capabilities() -> dict[str, Any]:
    return {
        "tools": {"listChanged": False},
        "resources": {"subscribe": False, "listChanged": False},
        "prompts": {"listChanged": False},
        "completions": {},
        "logging": {},
    }


@dataclass(frozen=True)
class LifecycleManager:
    """Answers ``initialize`` with fixed server metadata."""

    server_info: dict[str, str] = field(
        default_factory=lambda: {"name": "access-mcp-server", "version": "1.0.0"}
    )
    capabilities: dict[str, Any] = field(default_factory=_default_capabilities)
    instructions: str = (
        "Call connect_access first (or rely on ACCESS_DATABASE_PATH), then use the "
        "schema, sql, form and vba tools. Read access:// resources for snapshots."
    )

    def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle initialize request.

        Args:
            params: Initialize request parameters.

        Returns:
            Initialize response result. The client's protocol version is
            echoed when supported, otherwise the newest supported one.
        """
        requested_version = params.get("protocolVersion")
        if requested_version in SUPPORTED_PROTOCOL_VERSIONS:
            negotiated_version = requested_version
        else:
            negotiated_version = MCP_PROTOCOL_VERSION

        return {
            "protocolVersion": negotiated_version,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info,
            "instructions": self.instructions,
        }
