"""MCP server exposing a Microsoft Access style database over stdio."""

__version__ = "1.0.0"
