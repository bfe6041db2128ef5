"""Pytest configuration and shared fixtures.

Most tests run against in-memory test doubles:

- ``FakeConnection`` stands in for ``DatabaseConnection`` and records every
  session it opens (and every attempt, including failed ones).
- ``FakeHandle`` stands in for ``ConnectionHandle``. It answers the catalog
  and sampling statements issued by the core from a small in-memory catalog
  and records each statement verbatim.

Integration tests against a real MySQL server read ``MYSQL_TEST_*``
variables and skip when they are absent.
"""

import os
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Optional

import pytest
from dotenv import load_dotenv

from mysql_schema_mcp.core import QueryGate, SchemaReporter
from mysql_schema_mcp.errors import DatabaseConnectionError, QueryError
from mysql_schema_mcp.models import ConnectionConfig
from mysql_schema_mcp.server import SchemaMCPServer

# Load environment variables
load_dotenv()

DATABASE = "shop"

USERS_DDL = (
    "CREATE TABLE `users` (\n"
    "  `id` int NOT NULL,\n"
    "  `name` varchar(255) NOT NULL,\n"
    "  `email` varchar(255) DEFAULT NULL,\n"
    "  PRIMARY KEY (`id`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
)

ORDERS_DDL = (
    "CREATE TABLE `orders` (\n"
    "  `id` int NOT NULL AUTO_INCREMENT,\n"
    "  `user_id` int NOT NULL,\n"
    "  `total` decimal(10,2) NOT NULL,\n"
    "  `status` varchar(20) NOT NULL DEFAULT 'pending',\n"
    "  PRIMARY KEY (`id`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
)

AUDIT_DDL = (
    "CREATE TABLE `audit_log` (\n"
    "  `id` bigint NOT NULL,\n"
    "  `message` text,\n"
    "  PRIMARY KEY (`id`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
)


def _column(
    name: str,
    type_: str,
    nullable: bool,
    key: str = "",
    default: Optional[str] = None,
) -> dict[str, Any]:
    """An information_schema.COLUMNS row as aliased by the inspector."""
    return {
        "name": name,
        "type": type_,
        "is_nullable": "YES" if nullable else "NO",
        "column_default": default,
        "column_key": key,
    }


@dataclass
class FakeTable:
    ddl: str
    columns: list[dict[str, Any]]
    rows: list[dict[str, Any]] = field(default_factory=list)
    is_view: bool = False


def build_catalog() -> dict[str, FakeTable]:
    """users (7 rows), orders (2 rows), empty audit_log and one view."""
    return {
        "users": FakeTable(
            ddl=USERS_DDL,
            columns=[
                _column("id", "int", nullable=False, key="PRI"),
                _column("name", "varchar(255)", nullable=False),
                _column("email", "varchar(255)", nullable=True),
            ],
            rows=[
                {"id": i, "name": f"user{i}", "email": f"user{i}@example.com"}
                for i in range(1, 8)
            ],
        ),
        "orders": FakeTable(
            ddl=ORDERS_DDL,
            columns=[
                _column("id", "int", nullable=False, key="PRI"),
                _column("user_id", "int", nullable=False, key="MUL"),
                _column("total", "decimal(10,2)", nullable=False),
                _column("status", "varchar(20)", nullable=False, default="pending"),
            ],
            rows=[
                {"id": 1, "user_id": 1, "total": "19.99", "status": "paid"},
                {"id": 2, "user_id": 3, "total": "5.00", "status": "pending"},
            ],
        ),
        "audit_log": FakeTable(
            ddl=AUDIT_DDL,
            columns=[
                _column("id", "bigint", nullable=False, key="PRI"),
                _column("message", "text", nullable=True),
            ],
        ),
        "active_users": FakeTable(
            ddl="CREATE VIEW `active_users` AS select `users`.`id` from `users`",
            columns=[_column("id", "int", nullable=False)],
            is_view=True,
        ),
    }


class FakeHandle:
    """In-memory ConnectionHandle double that records statements verbatim."""

    def __init__(
        self,
        catalog: dict[str, FakeTable],
        failures: dict[str, str],
        query_results: dict[str, list[dict[str, Any]]],
    ):
        self.catalog = catalog
        self.failures = failures
        self.query_results = query_results
        self.statements: list[tuple[str, Optional[dict[str, Any]]]] = []
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        if self.closed:
            raise RuntimeError("ConnectionHandle is closed")
        self.statements.append((statement, params))

        for needle, message in self.failures.items():
            if needle in statement:
                raise QueryError(message)

        flat = " ".join(statement.split())

        if "information_schema.TABLES" in flat and "BASE TABLE" in flat:
            assert params is not None and params["schema"] == DATABASE
            return [
                {"name": name}
                for name, table in self.catalog.items()
                if not table.is_view
            ]

        if "information_schema.TABLES" in flat:
            assert params is not None and params["schema"] == DATABASE
            name = params["table"]
            return [{"name": name}] if name in self.catalog else []

        if "information_schema.COLUMNS" in flat:
            assert params is not None and params["schema"] == DATABASE
            table = self.catalog.get(params["table"])
            return [dict(col) for col in table.columns] if table else []

        match = re.fullmatch(r"SHOW CREATE TABLE `(.+)`", flat)
        if match:
            name = match.group(1).replace("``", "`")
            table = self._require(name)
            key = "Create View" if table.is_view else "Create Table"
            return [{"Table": name, key: table.ddl}]

        match = re.fullmatch(r"SELECT COUNT\(\*\) AS count FROM `(.+)`", flat)
        if match:
            table = self._require(match.group(1).replace("``", "`"))
            return [{"count": len(table.rows)}]

        match = re.fullmatch(r"SELECT \* FROM `(.+)` LIMIT (\d+)", flat)
        if match:
            table = self._require(match.group(1).replace("``", "`"))
            return [dict(row) for row in table.rows[: int(match.group(2))]]

        return self.query_results.get(statement, [])

    async def close(self) -> None:
        self.close_calls += 1

    def _require(self, name: str) -> FakeTable:
        table = self.catalog.get(name)
        if table is None:
            raise QueryError(f"Table '{DATABASE}.{name}' doesn't exist")
        return table


class FakeConnection:
    """DatabaseConnection double: one FakeHandle per ``open()``."""

    def __init__(self, catalog: dict[str, FakeTable], database: str = DATABASE):
        self.catalog = catalog
        self.database = database
        self.open_attempts = 0
        self.handles: list[FakeHandle] = []
        self.connect_error: Optional[Exception] = None
        self.failures: dict[str, str] = {}
        self.query_results: dict[str, list[dict[str, Any]]] = {}
        self.disposed = False

    @asynccontextmanager
    async def open(self) -> AsyncGenerator[FakeHandle, None]:
        self.open_attempts += 1
        if self.connect_error is not None:
            raise self.connect_error

        handle = FakeHandle(self.catalog, self.failures, self.query_results)
        self.handles.append(handle)
        try:
            yield handle
        finally:
            await handle.close()

    async def dispose(self) -> None:
        self.disposed = True

    @property
    def last_handle(self) -> FakeHandle:
        return self.handles[-1]


# ==================== Configuration Fixtures ====================


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(
        host="localhost", user="reporter", password="secret", database=DATABASE
    )


@pytest.fixture
def catalog() -> dict[str, FakeTable]:
    return build_catalog()


# ==================== Test Double Fixtures ====================


@pytest.fixture
def fake_connection(catalog: dict[str, FakeTable]) -> FakeConnection:
    return FakeConnection(catalog)


@pytest.fixture
def fake_handle(catalog: dict[str, FakeTable]) -> FakeHandle:
    return FakeHandle(catalog, failures={}, query_results={})


@pytest.fixture
def unreachable_connection(fake_connection: FakeConnection) -> FakeConnection:
    """A connection factory whose every open() fails."""
    fake_connection.connect_error = DatabaseConnectionError(
        "Can't connect to MySQL server on 'localhost'"
    )
    return fake_connection


@pytest.fixture
def reporter(fake_connection: FakeConnection) -> SchemaReporter:
    return SchemaReporter(fake_connection)  # type: ignore[arg-type]


@pytest.fixture
def gate(fake_connection: FakeConnection) -> QueryGate:
    return QueryGate(fake_connection)  # type: ignore[arg-type]


@pytest.fixture
def mcp_server(
    config: ConnectionConfig, fake_connection: FakeConnection
) -> SchemaMCPServer:
    return SchemaMCPServer(config, connection=fake_connection)  # type: ignore[arg-type]


# ==================== MySQL Fixtures ====================


@pytest.fixture(scope="session")
def mysql_test_env() -> Optional[dict[str, str]]:
    """MYSQL_TEST_* variables mapped onto the DB_* names from_env() reads."""
    if not os.getenv("MYSQL_TEST_HOST"):
        return None
    return {
        "DB_HOST": os.getenv("MYSQL_TEST_HOST", ""),
        "DB_PORT": os.getenv("MYSQL_TEST_PORT", "3306"),
        "DB_USER": os.getenv("MYSQL_TEST_USER", "root"),
        "DB_PASSWORD": os.getenv("MYSQL_TEST_PASSWORD", ""),
        "DB_NAME": os.getenv("MYSQL_TEST_DATABASE", "test"),
    }


@pytest.fixture
def mysql_config(mysql_test_env: Optional[dict[str, str]]) -> ConnectionConfig:
    """MySQL connection configuration"""
    if not mysql_test_env:
        pytest.skip("MYSQL_TEST_HOST not set in environment")
    return ConnectionConfig.from_env(mysql_test_env)


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "mysql: MySQL-specific tests")
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )

