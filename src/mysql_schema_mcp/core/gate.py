"""SELECT-prefix filter in front of arbitrary statement execution.

This is a textual prefix check, not an SQL parser and not an SQL-injection
defense. It blocks the common single-statement non-SELECT case (INSERT,
UPDATE, DELETE, DROP, ALTER, CREATE, empty input). A statement that starts
with ``select`` is forwarded to the database unchanged, whatever follows.
"""

import logging

from mysql_schema_mcp.core.connection import DatabaseConnection
from mysql_schema_mcp.errors import ExecutionError, QueryError
from mysql_schema_mcp.models.reports import (
    GuardedQueryOutcome,
    QueryRejected,
    QueryResult,
)

logger = logging.getLogger(__name__)

ALLOWED_PREFIX = "select"
REJECTION_REASON = "Only SELECT queries are allowed."


def is_select_statement(statement: str) -> bool:
    """True if the trimmed, lower-cased statement starts with ``select``."""
    return statement.strip().lower().startswith(ALLOWED_PREFIX)


class QueryGate:
    """Runs caller-supplied statements that pass the SELECT-prefix filter."""

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize query gate.

        Args:
            connection: Per-request session factory
        """
        self.connection = connection

    async def run_guarded(self, statement: str) -> GuardedQueryOutcome:
        """
        Execute a statement if it passes the SELECT-prefix filter.

        Rejected statements never open a connection. Admitted statements are
        executed byte-for-byte as submitted; the normalized text is only
        used for the check.

        Args:
            statement: SQL statement as received

        Returns:
            QueryResult with the driver's rows, or QueryRejected

        Raises:
            DatabaseConnectionError: If the session cannot be established
            ExecutionError: If the database rejects the statement
        """
        if not is_select_statement(statement):
            logger.warning(f"Rejected non-SELECT statement: {statement[:80]!r}")
            return QueryRejected(query=statement, reason=REJECTION_REASON)

        async with self.connection.open() as handle:
            try:
                rows = await handle.execute(statement)
            except QueryError as e:
                raise ExecutionError(e.message) from e

        return QueryResult(query=statement, rows=rows)
