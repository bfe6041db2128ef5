"""
mysql_schema_mcp - MySQL schema introspection MCP server

A Model Context Protocol (MCP) server that exposes a MySQL database's schema
metadata and a SELECT-only query tool.
"""

__version__ = "0.1.0"

from mysql_schema_mcp.models.config import ConnectionConfig
from mysql_schema_mcp.models.reports import (
    DetailedSchemaOverviewEntry,
    QueryRejected,
    QueryResult,
    SchemaOverviewEntry,
    SchemaResource,
    TableInfoReport,
    TableNotFound,
)
from mysql_schema_mcp.models.schema import ColumnDefinition, ColumnReport, TableDefinition

__all__ = [
    "ConnectionConfig",
    "TableDefinition",
    "ColumnDefinition",
    "ColumnReport",
    "SchemaOverviewEntry",
    "DetailedSchemaOverviewEntry",
    "SchemaResource",
    "TableInfoReport",
    "TableNotFound",
    "QueryResult",
    "QueryRejected",
]
