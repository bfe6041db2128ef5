"""Exception hierarchy for schema introspection and guarded queries."""


class SchemaMCPError(Exception):
    """Base class for errors surfaced to MCP clients as error-flagged results."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DatabaseConnectionError(SchemaMCPError):
    """A database session could not be established.

    Raised for bad credentials, an unreachable host/port or an unknown database.
    Never retried.
    """


class QueryError(SchemaMCPError):
    """A statement failed at the database. Carries the driver's message."""


class CatalogQueryError(QueryError):
    """A metadata (catalog) query failed."""


class ExecutionError(QueryError):
    """An admitted SELECT statement failed at the database."""
