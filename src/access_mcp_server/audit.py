"""Audit trail of tool calls.

Appends one JSON Lines record when a tools/call starts and one when it
finishes. Argument values under sensitive-looking keys are redacted.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Patterns for sensitive argument keys
SENSITIVE_PATTERNS = [
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"pwd", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"credential", re.IGNORECASE),
    re.compile(r"connection[_-]?string", re.IGNORECASE),
]

REDACTED = "[REDACTED]"


def _is_sensitive_key(key: str) -> bool:
    """Check if a key name indicates sensitive data."""
    return any(pattern.search(key) for pattern in SENSITIVE_PATTERNS)


def _sanitize(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_arguments(value)
    if isinstance(value, list):
        return [_sanitize(item) for item in value]
    return value


def sanitize_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the arguments with sensitive values redacted.

    Nested objects, including objects inside arrays, are sanitized too.
    """
    return {
        key: REDACTED if _is_sensitive_key(str(key)) else _sanitize(value)
        for key, value in arguments.items()
    }


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class AuditLogger:
    """Append-only audit logger with JSON Lines format.

    The log file is flushed after each write.
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize the audit logger.

        Args:
            log_path: Path to the audit log file; parent folders are created.
        """
        self._log_path = log_path
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115

    @property
    def log_path(self) -> Path:
        return self._log_path

    def _write_line(self, data: dict[str, Any]) -> None:
        self._file.write(json.dumps(data, default=str) + "\n")
        self._file.flush()

    def log_request(self, request_id: str, tool_name: str, arguments: dict[str, Any]) -> None:
        """Log an incoming tool call.

        Args:
            request_id: Identifier correlating request and response records.
            tool_name: Name of the tool being invoked.
            arguments: Tool arguments (will be sanitized).
        """
        self._write_line(
            {
                "type": "request",
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "tool_name": tool_name,
                "arguments": sanitize_arguments(arguments),
            }
        )

    def log_response(
        self,
        request_id: str,
        tool_name: str,
        status: str,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        """Log the outcome of a tool call.

        Args:
            request_id: Request identifier to correlate with.
            tool_name: Name of the tool that ran.
            status: "success" or "error".
            duration_ms: Execution time in milliseconds.
            error: Error message of a failed call.
        """
        event: dict[str, Any] = {
            "type": "response",
            "timestamp": _get_timestamp(),
            "request_id": request_id,
            "tool_name": tool_name,
            "result_status": status,
            "execution_time_ms": round(duration_ms, 3),
        }
        if error is not None:
            event["error"] = error
        self._write_line(event)

    def close(self) -> None:
        """Close the log file."""
        if self._file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> AuditLogger:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
