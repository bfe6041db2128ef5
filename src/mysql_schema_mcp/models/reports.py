"""Report and result shapes returned by the reporting and query layers.

Each outcome has its own model so callers dispatch on type rather than probing a
loosely shaped dictionary:

- ``SchemaOverviewEntry`` / ``DetailedSchemaOverviewEntry`` for the schema listing
- ``TableInfoReport`` / ``TableNotFound`` for a table report
- ``QueryResult`` / ``QueryRejected`` for a guarded query
- ``SchemaResource`` for the read-only schema resource
"""

from typing import Any, Union

from pydantic import Field

from mysql_schema_mcp.models.schema import CatalogModel, ColumnReport

SAMPLE_ROW_LIMIT = 5


class SchemaOverviewEntry(CatalogModel):
    """Summary entry: the table's raw DDL under ``definition``."""

    name: str
    definition: str


class DetailedSchemaOverviewEntry(CatalogModel):
    """Detailed entry: column-level detail nested under ``definition``."""

    name: str
    definition: ColumnReport


SchemaOverview = Union[list[SchemaOverviewEntry], list[DetailedSchemaOverviewEntry]]


class TableInfoReport(CatalogModel):
    """Columns, row count and a small unordered sample of one table."""

    table_name: str
    columns: ColumnReport
    row_count: int = Field(..., ge=0)
    sample_data: list[dict[str, Any]] = Field(
        default_factory=list, max_length=SAMPLE_ROW_LIMIT
    )


class TableNotFound(CatalogModel):
    """The requested table is absent from the catalog."""

    table_name: str

    @property
    def message(self) -> str:
        return f'Table "{self.table_name}" does not exist.'


TableReport = Union[TableInfoReport, TableNotFound]


class QueryResult(CatalogModel):
    """Rows returned by an admitted statement, verbatim from the driver."""

    query: str = Field(..., description="Statement as submitted and executed")
    rows: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


class QueryRejected(CatalogModel):
    """A statement refused by the SELECT-prefix filter."""

    query: str
    reason: str


GuardedQueryOutcome = Union[QueryResult, QueryRejected]


class SchemaResourceMetadata(CatalogModel):
    title: str = "Database Schema"
    description: str = "Schema definition for all tables in the database"
    table_count: int
    table_names: list[str]


class SchemaResource(CatalogModel):
    """All table DDL joined by blank lines, plus listing metadata."""

    text: str
    metadata: SchemaResourceMetadata
