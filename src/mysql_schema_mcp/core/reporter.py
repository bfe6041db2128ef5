"""Schema reports composed from catalog introspection."""

import logging

from mysql_schema_mcp.core.connection import DatabaseConnection
from mysql_schema_mcp.core.inspector import SchemaInspector, quote_identifier
from mysql_schema_mcp.models.reports import (
    SAMPLE_ROW_LIMIT,
    DetailedSchemaOverviewEntry,
    SchemaOverview,
    SchemaOverviewEntry,
    SchemaResource,
    SchemaResourceMetadata,
    TableInfoReport,
    TableNotFound,
    TableReport,
)

logger = logging.getLogger(__name__)


class SchemaReporter:
    """Builds overview, resource and per-table reports.

    Each public method opens its own session, runs its catalog and data
    queries sequentially on it, and closes it before returning.
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize schema reporter.

        Args:
            connection: Per-request session factory
        """
        self.connection = connection

    async def schema_overview(self, detailed: bool = False) -> SchemaOverview:
        """
        List every base table.

        Args:
            detailed: Replace each table's DDL string with its column report
                (which itself carries the DDL under ``definition``)

        Returns:
            One entry per table, in catalog enumeration order
        """
        async with self.connection.open() as handle:
            inspector = SchemaInspector(handle, self.connection.database)
            tables = await inspector.list_tables()

            if not detailed:
                return [
                    SchemaOverviewEntry(name=table.name, definition=table.sql)
                    for table in tables
                ]

            entries = []
            for table in tables:
                columns = await inspector.describe_columns(
                    table.name, include_definition=True
                )
                entries.append(
                    DetailedSchemaOverviewEntry(name=table.name, definition=columns)
                )
            return entries

    async def schema_resource(self) -> SchemaResource:
        """All table DDL joined by blank lines, with table count and names."""
        async with self.connection.open() as handle:
            tables = await SchemaInspector(handle, self.connection.database).list_tables()

        return SchemaResource(
            text="\n\n".join(table.sql for table in tables),
            metadata=SchemaResourceMetadata(
                table_count=len(tables),
                table_names=[table.name for table in tables],
            ),
        )

    async def table_report(self, table_name: str) -> TableReport:
        """
        Report columns, row count and a sample of one table.

        Existence is probed first so that a missing table costs a single
        catalog query.

        Args:
            table_name: Table name

        Returns:
            TableInfoReport, or TableNotFound if the catalog has no such table
        """
        async with self.connection.open() as handle:
            inspector = SchemaInspector(handle, self.connection.database)

            if not await inspector.table_exists(table_name):
                logger.info(f"Table not found: {table_name}")
                return TableNotFound(table_name=table_name)

            table_ref = quote_identifier(table_name)
            # No ORDER BY: sample order is whatever the storage engine returns
            sample_rows = await handle.execute(
                f"SELECT * FROM {table_ref} LIMIT {SAMPLE_ROW_LIMIT}"
            )
            count_rows = await handle.execute(
                f"SELECT COUNT(*) AS count FROM {table_ref}"
            )
            columns = await inspector.describe_columns(table_name)

        return TableInfoReport(
            table_name=table_name,
            columns=columns,
            row_count=int(count_rows[0]["count"]),
            sample_data=sample_rows,
        )
