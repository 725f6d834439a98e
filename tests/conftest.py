"""Pytest configuration and shared fixtures."""

import io
import json
import sqlite3
from pathlib import Path

import pytest

from access_mcp_server.backend.sqlite import SqliteBackend
from access_mcp_server.config import ServerConfig
from access_mcp_server.diagnostics import EnvironmentFacts
from access_mcp_server.plugins.base import PluginContext
from access_mcp_server.protocol.notifications import LoggingSession, Notifier
from access_mcp_server.protocol.transport import StdioTransport
from access_mcp_server.server import MCPServer

SAMPLE_SCHEMA = """
CREATE TABLE Customers (
    CustomerID INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL,
    City TEXT
);
CREATE TABLE Orders (
    OrderID INTEGER PRIMARY KEY,
    CustomerID INTEGER REFERENCES Customers(CustomerID) ON DELETE CASCADE,
    Total REAL DEFAULT 0
);
CREATE INDEX idx_orders_customer ON Orders (CustomerID);
CREATE VIEW BigOrders AS SELECT * FROM Orders WHERE Total > 100;
INSERT INTO Customers (Name, City) VALUES ('Alice', 'Leeds'), ('Bob', 'York'), ('Carol', 'Leeds');
INSERT INTO Orders (OrderID, CustomerID, Total) VALUES (1, 1, 50.0), (2, 1, 150.0), (3, 2, 250.0);
"""


@pytest.fixture
def facts() -> EnvironmentFacts:
    """Fixed environment facts so diagnostics do not probe the host."""
    return EnvironmentFacts(process_bitness="64-bit", ace_oledb_provider_registered=False)


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Create a small sample database."""
    path = tmp_path / "Sales.sqlite"
    connection = sqlite3.connect(path)
    connection.executescript(SAMPLE_SCHEMA)
    connection.commit()
    connection.close()
    return path


@pytest.fixture
def backend(database_path: Path):
    """Backend connected to the sample database."""
    backend = SqliteBackend()
    backend.connect(str(database_path))
    yield backend
    backend.close()


@pytest.fixture
def sent_lines() -> list[str]:
    """Lines written through a Notifier."""
    return []


@pytest.fixture
def notifier(sent_lines: list[str]) -> Notifier:
    return Notifier(LoggingSession(), sent_lines.append)


@pytest.fixture
def context(backend, notifier, facts) -> PluginContext:
    return PluginContext(backend=backend, notifier=notifier, facts=facts, config=ServerConfig())


def request(method: str, params: dict | None = None, msg_id=1) -> str:
    """Build a request line."""
    message = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


def call_tool(server: MCPServer, name: str, arguments: dict | None = None, msg_id=1) -> dict:
    """Run tools/call through handle_message and return the parsed response."""
    params = {"name": name, "arguments": arguments or {}}
    response = server.handle_message(request("tools/call", params, msg_id))
    assert response is not None
    return json.loads(response)


class ServerHarness:
    """MCPServer wired to in-memory streams."""

    def __init__(self, backend=None, config=None, facts=None, stdin_text: str = ""):
        self.stdin = io.StringIO(stdin_text)
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.transport = StdioTransport(self.stdin, self.stdout, self.stderr)
        self.server = MCPServer(
            config=config,
            backend=backend or SqliteBackend(),
            transport=self.transport,
            facts=facts,
        )

    def output_lines(self) -> list[dict]:
        return [json.loads(line) for line in self.stdout.getvalue().splitlines()]


@pytest.fixture
def harness(facts) -> ServerHarness:
    """Server with a disconnected SQLite backend."""
    harness = ServerHarness(facts=facts)
    yield harness
    harness.server.close()


@pytest.fixture
def connected_harness(backend, facts) -> ServerHarness:
    """Server whose backend is connected to the sample database."""
    harness = ServerHarness(backend=backend, facts=facts)
    yield harness
    harness.server.close()
