"""MCP logging: severity gating and notifications/message frames.

The client picks a minimum severity with logging/setLevel; the server
drops any notification below it and writes the rest straight to the
transport, ahead of the response for the request being processed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from access_mcp_server.protocol.jsonrpc import format_notification

# Ascending severity, per the MCP logging capability (RFC 5424 names)
LOG_LEVELS = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)

LOG_MESSAGE_METHOD = "notifications/message"


def level_rank(level: str) -> int:
    """Return the position of a level in LOG_LEVELS.

    Raises:
        ValueError: If the level is unknown.
    """
    return LOG_LEVELS.index(level.lower())


def is_known_level(level: Any) -> bool:
    """Check whether a value names a supported log level."""
    return isinstance(level, str) and level.lower() in LOG_LEVELS


@dataclass
class LoggingSession:
    """Per-process logging state: the minimum severity the client wants."""

    minimum_level: str = LOG_LEVELS[0]

    def set_level(self, level: Any) -> bool:
        """Update the minimum level.

        Args:
            level: Requested level name.

        Returns:
            True if the level was applied, False if it was unknown and ignored.
        """
        if not is_known_level(level):
            return False
        self.minimum_level = level.lower()
        return True

    def allows(self, level: str) -> bool:
        """Check whether an event at the given level should be sent."""
        return level_rank(level) >= level_rank(self.minimum_level)


class Notifier:
    """Emits notifications/message frames gated by a LoggingSession."""

    def __init__(
        self,
        session: LoggingSession,
        write: Callable[[str], None],
        logger_name: str = "access-mcp",
    ) -> None:
        """Initialize the notifier.

        Args:
            session: Logging session holding the minimum level.
            write: Callable writing one line to the client.
            logger_name: Default value of the ``logger`` field.
        """
        self._session = session
        self._write = write
        self._logger_name = logger_name

    @property
    def session(self) -> LoggingSession:
        """Logging session used for gating."""
        return self._session

    def log(self, level: str, data: Any, logger: str | None = None) -> bool:
        """Send a log notification if the level passes the session minimum.

        Args:
            level: Event severity (one of LOG_LEVELS).
            data: JSON-serializable payload.
            logger: Logger name, defaults to the notifier's name.

        Returns:
            True if a frame was written.
        """
        if not self._session.allows(level):
            return False

        params = {
            "level": level.lower(),
            "logger": logger or self._logger_name,
            "data": data,
        }
        self._write(format_notification(LOG_MESSAGE_METHOD, params))
        return True

    def debug(self, data: Any, logger: str | None = None) -> bool:
        return self.log("debug", data, logger)

    def info(self, data: Any, logger: str | None = None) -> bool:
        return self.log("info", data, logger)

    def warning(self, data: Any, logger: str | None = None) -> bool:
        return self.log("warning", data, logger)

    def error(self, data: Any, logger: str | None = None) -> bool:
        return self.log("error", data, logger)
