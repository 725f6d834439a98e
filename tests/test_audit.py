"""Tests for the audit logger."""

import json

from access_mcp_server.audit import REDACTED, AuditLogger, sanitize_arguments


class TestSanitizeArguments:
    """Tests for redaction of sensitive arguments."""

    def test_redacts_sensitive_keys(self):
        """Should redact passwords, tokens and connection strings."""
        arguments = {
            "database_path": "C:/Data/Sales.accdb",
            "password": "hunter2",
            "DbPwd": "x",
            "api_key": "k",
            "connectionString": "Provider=...",
        }

        result = sanitize_arguments(arguments)

        assert result["database_path"] == "C:/Data/Sales.accdb"
        for key in ("password", "DbPwd", "api_key", "connectionString"):
            assert result[key] == REDACTED

    def test_recurses_into_objects_and_arrays(self):
        """Should redact nested values."""
        arguments = {"options": {"secret": "s"}, "items": [{"token": "t", "name": "n"}]}

        result = sanitize_arguments(arguments)

        assert result == {
            "options": {"secret": REDACTED},
            "items": [{"token": REDACTED, "name": "n"}],
        }

    def test_does_not_mutate_input(self):
        """Should return a copy."""
        arguments = {"password": "hunter2"}

        sanitize_arguments(arguments)

        assert arguments == {"password": "hunter2"}


class TestAuditLogger:
    """Tests for the JSON Lines file."""

    def test_creates_parent_folders(self, tmp_path):
        """Should create missing folders."""
        log_path = tmp_path / "a" / "b" / "audit.jsonl"

        with AuditLogger(log_path) as audit:
            assert audit.log_path == log_path

        assert log_path.exists()

    def test_appends_records(self, tmp_path):
        """Should append one line per event across instances."""
        log_path = tmp_path / "audit.jsonl"

        with AuditLogger(log_path) as audit:
            audit.log_request("r1", "execute_sql", {"sql": "SELECT 1"})
        with AuditLogger(log_path) as audit:
            audit.log_response("r1", "execute_sql", "success", 1.23456)

        lines = log_path.read_text().splitlines()
        assert len(lines) == 2
        request = json.loads(lines[0])
        response = json.loads(lines[1])
        assert request["arguments"] == {"sql": "SELECT 1"}
        assert request["timestamp"].endswith("Z")
        assert response["execution_time_ms"] == 1.235

    def test_close_is_idempotent(self, tmp_path):
        """Should allow closing twice."""
        audit = AuditLogger(tmp_path / "audit.jsonl")

        audit.close()
        audit.close()
