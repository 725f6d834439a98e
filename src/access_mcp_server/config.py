"""Server configuration loader.

Loads ``config/server.yaml`` into a ServerConfig. Every key is optional
except ``version``; missing sections fall back to the defaults below.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from access_mcp_server.protocol.notifications import LOG_LEVELS, is_known_level

DEFAULT_CONFIG_PATH = Path("config/server.yaml")

DEFAULT_EXTENSIONS = [".accdb", ".mdb", ".sqlite", ".db"]


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if var_name in ("HOME", "USERPROFILE"):
            return os.path.expanduser("~")
        return match.group(0)

    return pattern.sub(replacer, value)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"Config section '{name}' must be a mapping")
    return value


def _string_list(section: dict[str, Any], path: str, default: list[str]) -> list[str]:
    key = path.rsplit(".", 1)[-1]
    value = section.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list):
        raise ConfigLoadError(f"{path} must be a list")
    return [str(item) for item in value]


@dataclass
class ServerConfig:
    """Server configuration.

    Loaded from server.yaml; the defaults describe a server with no
    preselected database, debug-level client logging and no audit file.
    """

    version: str = "1.0"

    # Server identity reported by initialize
    server_name: str = "access-mcp-server"
    server_version: str = "1.0.0"

    # Database discovery
    database_path: str = ""
    database_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    search_folders: list[str] = field(default_factory=list)

    # Tool defaults
    default_max_rows: int = 200
    markdown_max_rows: int = 100

    # Client logging
    initial_log_level: str = LOG_LEVELS[0]
    logger_name: str = "access-mcp"

    # Audit settings
    audit_log_file: str = ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig instance with all settings populated.

        Raises:
            ConfigLoadError: If a section or value is malformed.
        """
        server = _section(config, "server")
        database = _section(config, "database")
        tools = _section(config, "tools")
        logging = _section(config, "logging")
        audit = _section(config, "audit")

        initial_level = str(logging.get("initial_level", LOG_LEVELS[0]))
        if not is_known_level(initial_level):
            raise ConfigLoadError(
                f"Unknown logging.initial_level '{initial_level}'; "
                f"expected one of: {', '.join(LOG_LEVELS)}"
            )

        default_max_rows = tools.get("default_max_rows", 200)
        markdown_max_rows = tools.get("markdown_max_rows", 100)
        for key, value in (
            ("default_max_rows", default_max_rows),
            ("markdown_max_rows", markdown_max_rows),
        ):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigLoadError(f"tools.{key} must be a positive integer")

        extensions = [
            ext if ext.startswith(".") else f".{ext}"
            for ext in (
                e.lower() for e in _string_list(database, "database.extensions", DEFAULT_EXTENSIONS)
            )
        ]

        return cls(
            version=str(config.get("version", "")),
            server_name=str(server.get("name", "access-mcp-server")),
            server_version=str(server.get("version", "1.0.0")),
            database_path=expand_env_vars(str(database.get("path") or "")),
            database_extensions=extensions,
            search_folders=[
                expand_env_vars(p) for p in _string_list(database, "database.search_folders", [])
            ],
            default_max_rows=default_max_rows,
            markdown_max_rows=markdown_max_rows,
            initial_log_level=initial_level.lower(),
            logger_name=str(logging.get("logger_name", "access-mcp")),
            audit_log_file=expand_env_vars(str(audit.get("log_file") or "")),
        )


def load_config(config_path: Path) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        config_path: Path to the server.yaml file.

    Returns:
        Loaded ServerConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be loaded or is invalid.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Config file must contain a YAML mapping")

    if "version" not in config:
        raise ConfigLoadError("Config file must specify a version")

    return ServerConfig.from_dict(config)
