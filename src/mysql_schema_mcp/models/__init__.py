"""Pydantic models for configuration, catalog metadata and results."""

from .config import ConnectionConfig
from .envelope import ToolResponse
from .reports import (
    DetailedSchemaOverviewEntry,
    GuardedQueryOutcome,
    QueryRejected,
    QueryResult,
    SchemaOverview,
    SchemaOverviewEntry,
    SchemaResource,
    SchemaResourceMetadata,
    TableInfoReport,
    TableNotFound,
    TableReport,
)
from .schema import ColumnDefinition, ColumnReport, TableDefinition

__all__ = [
    "ConnectionConfig",
    "ToolResponse",
    "TableDefinition",
    "ColumnDefinition",
    "ColumnReport",
    "SchemaOverview",
    "SchemaOverviewEntry",
    "DetailedSchemaOverviewEntry",
    "SchemaResource",
    "SchemaResourceMetadata",
    "TableInfoReport",
    "TableNotFound",
    "TableReport",
    "QueryResult",
    "QueryRejected",
    "GuardedQueryOutcome",
]
