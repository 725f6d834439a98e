"""STDIO transport layer for MCP communication.

Handles reading/writing newline-delimited JSON-RPC messages over
stdin/stdout per MCP spec.
"""

from __future__ import annotations

import sys
from typing import TextIO

# Byte-order mark and the forms it takes when decoded with the wrong codec.
# Longest first so a mis-decoded BOM is removed as a whole.
BOM_SEQUENCES = (
    "\u00ef\u00bb\u00bf",  # UTF-8 BOM decoded as Latin-1 / cp1252
    "\ufffd\ufffd\ufffd",  # UTF-8 BOM decoded with errors="replace"
    "\ufeff",
    "\ufffd",
)


def strip_bom(line: str) -> str:
    """Remove a leading byte-order mark, including mis-decoded variants.

    Args:
        line: Raw input line.

    Returns:
        Line without the leading BOM sequence.
    """
    for sequence in BOM_SEQUENCES:
        if line.startswith(sequence):
            return line[len(sequence) :]
    return line


def is_candidate_frame(line: str) -> bool:
    """Check whether a line can hold a JSON-RPC frame.

    Args:
        line: Line with the BOM already removed.

    Returns:
        True if the line starts with an object or array opener.
    """
    return line.lstrip().startswith(("{", "["))


class StdioTransport:
    """STDIO transport for MCP communication.

    Reads JSON-RPC messages from stdin and writes responses to stdout.
    Logging goes to stderr to avoid corrupting the protocol stream.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Input stream (defaults to sys.stdin).
            stdout: Output stream (defaults to sys.stdout).
            stderr: Log stream (defaults to sys.stderr).
        """
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def read_message(self) -> str | None:
        """Read the next candidate frame from stdin.

        Skips blank lines and lines that cannot be JSON-RPC frames.
        Errors raised by the underlying stream propagate to the caller.

        Returns:
            Message string (stripped), or None on EOF.
        """
        while True:
            line = self._stdin.readline()
            if not line:  # EOF
                return None

            line = strip_bom(line).strip()
            if not line:
                continue

            if not is_candidate_frame(line):
                self.log(f"Ignoring non-protocol input: {line[:80]}")
                continue

            return line

    def write_message(self, message: str) -> None:
        """Write a message to stdout.

        Args:
            message: JSON string to write.
        """
        self._stdout.write(message + "\n")
        self._stdout.flush()

    def log(self, message: str) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
        """
        self._stderr.write(f"[MCP] {message}\n")
        self._stderr.flush()
