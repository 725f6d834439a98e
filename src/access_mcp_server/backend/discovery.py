"""Default database discovery for connect_access without a path."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from access_mcp_server.config import DEFAULT_EXTENSIONS

DATABASE_PATH_ENV = "ACCESS_DATABASE_PATH"
DEFAULT_DATABASE_NAME = "Database1.accdb"


def default_search_folders(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the user's Documents folders in lookup order."""
    environ = os.environ if environ is None else environ
    folders = [str(Path.home() / "Documents")]
    for variable in ("USERPROFILE", "OneDrive"):
        root = environ.get(variable, "").strip()
        if root:
            folders.append(os.path.join(root, "Documents"))
    return folders


def _existing_folders(folders: Iterable[str]) -> list[Path]:
    result: list[Path] = []
    seen: set[str] = set()
    for folder in folders:
        if not folder or not folder.strip():
            continue
        key = folder.strip().casefold()
        if key in seen:
            continue
        path = Path(folder.strip()).expanduser()
        if path.is_dir():
            seen.add(key)
            result.append(path)
    return result


def resolve_database_path(
    configured_path: str = "",
    search_folders: Iterable[str] | None = None,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Find the database to open when the caller gave no path.

    Order: the configured path, ACCESS_DATABASE_PATH, then the search
    folders. Within the folders Database1.accdb wins, then the first file
    (sorted by name) with one of the extensions, checked in extension order.

    Args:
        configured_path: ``database.path`` from the server config.
        search_folders: Folders to scan; defaults to the Documents folders.
        extensions: File extensions recognised as databases.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        The path to try, or None when nothing was found. The returned path
        is not checked for existence when it came from config or the
        environment.
    """
    environ = os.environ if environ is None else environ
    if configured_path and configured_path.strip():
        return configured_path.strip()

    from_env = environ.get(DATABASE_PATH_ENV, "")
    if from_env.strip():
        return from_env.strip()

    folders = list(search_folders) if search_folders else default_search_folders(environ)
    candidates = _existing_folders(folders)

    for folder in candidates:
        default = folder / DEFAULT_DATABASE_NAME
        if default.is_file():
            return str(default)

    suffixes = [ext.lower() for ext in extensions]
    for folder in candidates:
        files = sorted(p for p in folder.iterdir() if p.is_file())
        for suffix in suffixes:
            for path in files:
                if path.suffix.lower() == suffix:
                    return str(path)

    return None
