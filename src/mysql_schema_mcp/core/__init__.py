"""Core database operations layer."""

from .connection import ConnectionHandle, DatabaseConnection
from .gate import QueryGate, is_select_statement
from .inspector import SchemaInspector
from .reporter import SchemaReporter

__all__ = [
    "ConnectionHandle",
    "DatabaseConnection",
    "SchemaInspector",
    "SchemaReporter",
    "QueryGate",
    "is_select_statement",
]
