"""Per-request MySQL sessions over a pool-less SQLAlchemy async engine."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from mysql_schema_mcp.errors import DatabaseConnectionError, QueryError
from mysql_schema_mcp.models.config import ConnectionConfig
from mysql_schema_mcp.utils import convert_rows_to_json_safe

logger = logging.getLogger(__name__)


def driver_message(exc: BaseException) -> str:
    """
    Extract the database's own error message from a wrapped driver error.

    PyMySQL errors carry ``(errno, message)`` as their args; SQLAlchemy keeps
    the original exception on ``.orig``.
    """
    orig = getattr(exc, "orig", None) or exc
    args = getattr(orig, "args", ())
    if len(args) >= 2 and isinstance(args[1], str):
        return args[1]
    return str(orig)


class ConnectionHandle:
    """One open database session, owned by a single request."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """
        Run a statement and return its rows as dictionaries.

        With ``params`` the statement is bound through ``text()`` named
        parameters. Without, it is handed to the driver exactly as given.

        Args:
            statement: SQL statement
            params: Named bind parameters

        Returns:
            Result rows (empty for statements that return none)

        Raises:
            QueryError: If the database rejects the statement
            RuntimeError: If the handle is already closed
        """
        if self._closed:
            raise RuntimeError("ConnectionHandle is closed")

        try:
            if params is None:
                result = await self._conn.exec_driver_sql(
                    statement, execution_options={"no_parameters": True}
                )
            else:
                result = await self._conn.execute(text(statement), params)
        except DBAPIError as e:
            raise QueryError(driver_message(e)) from e

        if not result.returns_rows:
            return []
        rows = [dict(row) for row in result.mappings().all()]
        return convert_rows_to_json_safe(rows)

    async def close(self) -> None:
        """Release the session."""
        if self._closed:
            return
        self._closed = True
        await self._conn.close()


class DatabaseConnection:
    """Opens one fresh session per request; nothing is pooled or shared."""

    def __init__(self, config: ConnectionConfig):
        """
        Initialize the connection factory.

        Args:
            config: Connection configuration
        """
        self.config = config
        self.engine: Optional[AsyncEngine] = None

    def initialize(self) -> None:
        """Create the engine. No connection is made until ``open()``."""
        if self.engine is not None:
            return

        self.engine = create_async_engine(
            self.config.url,
            poolclass=NullPool,
            echo=self.config.echo_sql,
            connect_args={"connect_timeout": self.config.connect_timeout},
        )

    async def dispose(self) -> None:
        """Dispose of the engine."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None

    @asynccontextmanager
    async def open(self) -> AsyncGenerator[ConnectionHandle, None]:
        """
        Open a session for the duration of one request.

        The handle is closed on every exit path, including errors raised by
        the caller inside the ``async with`` block.

        Yields:
            ConnectionHandle for executing statements

        Raises:
            DatabaseConnectionError: If the session cannot be established
        """
        self.initialize()
        assert self.engine is not None

        try:
            conn = await self.engine.connect()
        except (DBAPIError, OSError) as e:
            logger.warning(f"Connection to {self.config.host} failed: {e}")
            raise DatabaseConnectionError(driver_message(e)) from e

        handle = ConnectionHandle(conn)
        logger.debug(f"Opened session to {self.config.host}/{self.config.database}")
        try:
            if self.config.read_only:
                await handle.execute("SET SESSION TRANSACTION READ ONLY")

            if self.config.statement_timeout:
                timeout_ms = self.config.statement_timeout * 1000
                await handle.execute(f"SET SESSION max_execution_time = {timeout_ms}")

            yield handle
        finally:
            await handle.close()
            logger.debug("Closed session")

    @property
    def database(self) -> str:
        return self.config.database

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.dispose()
