"""Tests for default database discovery."""

from access_mcp_server.backend.discovery import (
    DATABASE_PATH_ENV,
    default_search_folders,
    resolve_database_path,
)


class TestResolveDatabasePath:
    """Tests for resolve_database_path."""

    def test_configured_path_wins(self, tmp_path):
        """Should prefer the configured path over everything else."""
        environ = {DATABASE_PATH_ENV: "C:/env.accdb"}

        result = resolve_database_path(" C:/config.accdb ", [str(tmp_path)], environ=environ)

        assert result == "C:/config.accdb"

    def test_environment_variable(self, tmp_path):
        """Should use ACCESS_DATABASE_PATH without checking the file."""
        environ = {DATABASE_PATH_ENV: "C:/env.accdb"}

        assert resolve_database_path("", [str(tmp_path)], environ=environ) == "C:/env.accdb"

    def test_default_name_wins_in_folders(self, tmp_path):
        """Should prefer Database1.accdb in any folder."""
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "Alpha.accdb").touch()
        (second / "Database1.accdb").touch()

        result = resolve_database_path("", [str(first), str(second)], environ={})

        assert result == str(second / "Database1.accdb")

    def test_first_file_by_extension_order(self, tmp_path):
        """Should try extensions in order, then names alphabetically."""
        (tmp_path / "a.mdb").touch()
        (tmp_path / "z.accdb").touch()
        (tmp_path / "b.accdb").touch()
        (tmp_path / "notes.txt").touch()

        result = resolve_database_path("", [str(tmp_path)], environ={})

        assert result == str(tmp_path / "b.accdb")

    def test_custom_extensions(self, tmp_path):
        """Should honor configured extensions."""
        (tmp_path / "b.accdb").touch()
        (tmp_path / "a.sqlite").touch()

        result = resolve_database_path("", [str(tmp_path)], [".sqlite"], environ={})

        assert result == str(tmp_path / "a.sqlite")

    def test_missing_folders_are_skipped(self, tmp_path):
        """Should ignore folders that do not exist and blank entries."""
        (tmp_path / "Sales.accdb").touch()

        result = resolve_database_path(
            "", ["", str(tmp_path / "missing"), str(tmp_path)], environ={}
        )

        assert result == str(tmp_path / "Sales.accdb")

    def test_nothing_found(self, tmp_path):
        """Should return None when no database exists."""
        assert resolve_database_path("", [str(tmp_path)], environ={}) is None


class TestDefaultSearchFolders:
    """Tests for the Documents folder list."""

    def test_includes_profile_and_onedrive(self, tmp_path):
        """Should add USERPROFILE and OneDrive Documents folders."""
        environ = {"USERPROFILE": str(tmp_path / "me"), "OneDrive": str(tmp_path / "cloud")}

        folders = default_search_folders(environ)

        assert folders[1:] == [
            str(tmp_path / "me" / "Documents"),
            str(tmp_path / "cloud" / "Documents"),
        ]

    def test_ignores_unset_variables(self):
        """Should only return the home Documents folder."""
        assert len(default_search_folders({})) == 1
