#!/usr/bin/env python3
"""Access MCP Server - Main entry point.

Serves a Microsoft Access style database to MCP clients over stdio.
stdout carries protocol frames only; diagnostics go to stderr.

Usage:

    python main.py                      # config/server.yaml if present
    python main.py -c my.yaml -d C:\\Data\\Sales.accdb

Set ACCESS_DATABASE_PATH, or database.path in the config file, to pick the
database opened by connect_access when the client gives no path.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from access_mcp_server import __version__
from access_mcp_server.backend.base import BackendError
from access_mcp_server.config import DEFAULT_CONFIG_PATH, ConfigLoadError, ServerConfig, load_config
from access_mcp_server.protocol.transport import StdioTransport
from access_mcp_server.server import MCPServer


def _load(config_path: Path | None) -> ServerConfig:
    if config_path is not None:
        return load_config(config_path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return ServerConfig()


def main() -> int:
    """Run the MCP server.

    Returns:
        Exit code (0 on EOF, 1 for errors, 130 when interrupted).
    """
    parser = argparse.ArgumentParser(
        description="Access MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help=f"Path to server config YAML file (default: {DEFAULT_CONFIG_PATH} if present)",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Database file to open at startup",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"access-mcp-server {__version__}",
    )

    args = parser.parse_args()

    try:
        config = _load(args.config)
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Frames are UTF-8 regardless of the console code page. Undecodable
    # input bytes become U+FFFD so one bad line cannot end the session.
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")

    transport = StdioTransport()
    try:
        server = MCPServer(config=config, transport=transport)
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1

    transport.log(f"Access MCP Server {__version__} started")
    if args.config:
        transport.log(f"Config loaded from: {args.config}")

    if args.database:
        try:
            server.backend.connect(args.database)
            transport.log(f"Connected to {args.database}")
        except BackendError as e:
            transport.log(f"Could not open {args.database}: {e}")

    try:
        return server.serve()
    except KeyboardInterrupt:
        transport.log("Interrupted, shutting down")
        return 130  # Standard exit code for SIGINT
    finally:
        server.close()


if __name__ == "__main__":
    sys.exit(main())
