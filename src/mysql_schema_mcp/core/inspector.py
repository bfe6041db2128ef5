"""Catalog introspection over an open session."""

import logging
from typing import Any, Optional

from mysql_schema_mcp.core.connection import ConnectionHandle
from mysql_schema_mcp.errors import CatalogQueryError, QueryError
from mysql_schema_mcp.models.schema import ColumnDefinition, ColumnReport, TableDefinition

logger = logging.getLogger(__name__)

BASE_TABLES_QUERY = """
    SELECT TABLE_NAME AS name
    FROM information_schema.TABLES
    WHERE table_schema = :schema AND table_type = 'BASE TABLE'
"""

TABLE_EXISTS_QUERY = """
    SELECT TABLE_NAME AS name
    FROM information_schema.TABLES
    WHERE table_schema = :schema AND table_name = :table
"""

COLUMNS_QUERY = """
    SELECT
        COLUMN_NAME AS name,
        COLUMN_TYPE AS type,
        IS_NULLABLE AS is_nullable,
        COLUMN_DEFAULT AS column_default,
        COLUMN_KEY AS column_key
    FROM information_schema.COLUMNS
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ORDINAL_POSITION
"""


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


class SchemaInspector:
    """Reads table and column metadata from information_schema.

    Every call goes to the catalog; nothing is cached between calls.
    """

    def __init__(self, handle: ConnectionHandle, database: str):
        """
        Initialize schema inspector.

        Args:
            handle: Open session owned by the current request
            database: Database (schema) whose tables are inspected
        """
        self.handle = handle
        self.database = database

    async def list_tables(self) -> list[TableDefinition]:
        """
        List base tables (views excluded) with their creation statements.

        Returns:
            Table definitions in catalog enumeration order
        """
        rows = await self._catalog(BASE_TABLES_QUERY, {"schema": self.database})

        tables = []
        for row in rows:
            name = row["name"]
            tables.append(
                TableDefinition(name=name, sql=await self.get_create_statement(name))
            )
        return tables

    async def describe_columns(
        self, table_name: str, include_definition: bool = False
    ) -> ColumnReport:
        """
        Describe the columns of a table.

        A table with no catalog rows yields an empty column list rather than
        an error; existence is checked by the reporting layer.

        Args:
            table_name: Table name
            include_definition: Also attach the CREATE TABLE statement

        Returns:
            Column report in catalog column order
        """
        rows = await self._catalog(
            COLUMNS_QUERY, {"schema": self.database, "table": table_name}
        )
        columns = [ColumnDefinition.from_catalog_row(row) for row in rows]

        definition = None
        if include_definition:
            definition = await self.get_create_statement(table_name)

        return ColumnReport(
            table_name=table_name, columns=columns, definition=definition
        )

    async def table_exists(self, table_name: str) -> bool:
        """Check the catalog for a table (or view) in the configured database."""
        rows = await self._catalog(
            TABLE_EXISTS_QUERY, {"schema": self.database, "table": table_name}
        )
        return len(rows) > 0

    async def get_create_statement(self, table_name: str) -> str:
        """Return the catalog's CREATE TABLE statement for a table."""
        rows = await self._catalog(f"SHOW CREATE TABLE {quote_identifier(table_name)}")
        if not rows:
            raise CatalogQueryError(f"No creation statement for table {table_name}")
        # Views report "Create View" instead
        row = rows[0]
        return row["Create Table"] if "Create Table" in row else row["Create View"]

    async def _catalog(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        try:
            return await self.handle.execute(statement, params)
        except QueryError as e:
            logger.warning(f"Catalog query failed: {e.message}")
            raise CatalogQueryError(e.message) from e
