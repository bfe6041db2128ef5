"""MySQL Schema MCP Server

A Model Context Protocol (MCP) server exposing a MySQL database's schema
metadata, per-table reports and a SELECT-only query tool.
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Resource, Tool
from pydantic import AnyUrl

from mysql_schema_mcp import __version__
from mysql_schema_mcp.core import DatabaseConnection, QueryGate, SchemaReporter
from mysql_schema_mcp.errors import SchemaMCPError
from mysql_schema_mcp.models import (
    ConnectionConfig,
    QueryRejected,
    SchemaResource,
    TableNotFound,
    ToolResponse,
)
from mysql_schema_mcp.utils import dumps

# Configure logging (stderr; stdout carries the stdio transport)
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_NAME = "mysql-schema-mcp"
SCHEMA_RESOURCE_URI = "schema://main"


def _error_message(exc: Exception) -> str:
    if isinstance(exc, SchemaMCPError):
        return exc.message
    return str(exc)


class SchemaMCPServer:
    """MCP server for MySQL schema introspection and guarded queries."""

    def __init__(
        self,
        config: ConnectionConfig,
        connection: Optional[DatabaseConnection] = None,
    ):
        """
        Initialize schema MCP server.

        Args:
            config: Connection configuration
            connection: Session factory (defaults to one built from ``config``)
        """
        self.config = config
        self.connection = connection or DatabaseConnection(config)
        self.reporter = SchemaReporter(self.connection)
        self.gate = QueryGate(self.connection)
        self.server: Server = Server(SERVER_NAME, version=__version__)
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register MCP tool and resource handlers on the low-level server."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tool_definitions()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
            response = await self.dispatch(name, arguments)
            return response.to_call_tool_result()

        @self.server.list_resources()
        async def list_resources() -> list[Resource]:
            return [self._create_schema_resource()]

        @self.server.read_resource()
        async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            if str(uri).rstrip("/") != SCHEMA_RESOURCE_URI:
                raise ValueError(f"Unknown resource URI: {uri}")
            resource = await self.read_schema_resource()
            return [
                ReadResourceContents(
                    content=resource.text,
                    mime_type="text/plain",
                    meta=resource.metadata.to_payload(),
                )
            ]

    # Tool and resource declarations
    def _create_get_schema_tool(self) -> Tool:
        """Create getSchema tool."""
        return Tool(
            name="getSchema",
            description=(
                "List every table in the database with its CREATE TABLE statement, "
                "or with per-column detail when detailed is true"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "detailed": {
                        "type": "boolean",
                        "description": "Return column-level detail (default: false)",
                        "default": False,
                    },
                },
                "required": [],
            },
        )

    def _create_query_tool(self) -> Tool:
        """Create query tool."""
        return Tool(
            name="query",
            description="Execute a read-only SQL query (statements must start with SELECT)",
            inputSchema={
                "type": "object",
                "properties": {
                    "sql": {"type": "string", "description": "SQL SELECT statement"},
                },
                "required": ["sql"],
            },
        )

    def _create_table_info_tool(self) -> Tool:
        """Create tableInfo tool."""
        return Tool(
            name="tableInfo",
            description="Get a table's columns, row count and up to 5 sample rows",
            inputSchema={
                "type": "object",
                "properties": {
                    "tableName": {"type": "string", "description": "Table name"},
                },
                "required": ["tableName"],
            },
        )

    def _create_schema_resource(self) -> Resource:
        return Resource(
            uri=AnyUrl(SCHEMA_RESOURCE_URI),
            name="schema",
            title="Database Schema",
            description="Schema definition for all tables in the database",
            mimeType="text/plain",
        )

    def list_tool_definitions(self) -> list[Tool]:
        return [
            self._create_get_schema_tool(),
            self._create_query_tool(),
            self._create_table_info_tool(),
        ]

    # Tool handlers
    async def dispatch(
        self, name: str, arguments: Optional[dict[str, Any]]
    ) -> ToolResponse:
        """Route a tool call to its handler."""
        handlers = {
            "getSchema": self.handle_get_schema,
            "query": self.handle_query,
            "tableInfo": self.handle_table_info,
        }

        handler = handlers.get(name)
        if handler is None:
            return ToolResponse.error(f"Error: Unknown tool: {name}")

        return await handler(arguments or {})

    async def handle_get_schema(self, arguments: dict[str, Any]) -> ToolResponse:
        """Handle getSchema request."""
        detailed = arguments.get("detailed") is True

        try:
            overview = await self.reporter.schema_overview(detailed)
        except Exception as e:
            self._log_failure("getSchema", e)
            return ToolResponse.error(f"Error fetching schema: {_error_message(e)}")

        return ToolResponse.text(dumps([entry.to_payload() for entry in overview]))

    async def handle_query(self, arguments: dict[str, Any]) -> ToolResponse:
        """Handle query request."""
        sql = arguments.get("sql", "")

        try:
            outcome = await self.gate.run_guarded(sql)
        except Exception as e:
            self._log_failure("query", e)
            return ToolResponse.error(f"Error: {_error_message(e)}")

        if isinstance(outcome, QueryRejected):
            return ToolResponse.error(f"Error: {outcome.reason}")

        return ToolResponse.text(dumps(outcome.rows))

    async def handle_table_info(self, arguments: dict[str, Any]) -> ToolResponse:
        """Handle tableInfo request."""
        try:
            report = await self.reporter.table_report(arguments["tableName"])
        except Exception as e:
            self._log_failure("tableInfo", e)
            return ToolResponse.error(f"Error: {_error_message(e)}")

        if isinstance(report, TableNotFound):
            return ToolResponse.error(f"Error: {report.message}")

        return ToolResponse.text(dumps(report.to_payload()))

    async def read_schema_resource(self) -> SchemaResource:
        """
        Read the schema resource.

        Resource reads carry no error flag, so failures are raised to the
        MCP layer as ValueError.
        """
        try:
            return await self.reporter.schema_resource()
        except SchemaMCPError as e:
            self._log_failure("schema resource", e)
            raise ValueError(f"Error reading schema: {e.message}") from e

    def _log_failure(self, operation: str, exc: Exception) -> None:
        if isinstance(exc, SchemaMCPError):
            logger.warning(f"{operation} failed: {exc.message}")
        else:
            logger.error(f"{operation} failed: {exc}", exc_info=True)

    async def run_stdio(self) -> None:
        """Serve over stdio until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"MCP server started for database {self.config.database}")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def cleanup(self) -> None:
        """Cleanup resources."""
        await self.connection.dispose()
        logger.info("Schema MCP server cleaned up")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server for MySQL schema introspection and read-only queries",
    )
    parser.add_argument(
        "--envpath",
        help="Path to a .env file with DB_HOST, DB_USER, DB_PASSWORD and DB_NAME",
    )
    return parser.parse_args(argv)


def load_environment(envpath: Optional[str] = None) -> None:
    """Load a .env file: the given path, or the default lookup."""
    if envpath:
        path = Path(envpath).resolve()
        if not path.exists():
            logger.warning(f"Env file not found: {path}")
        load_dotenv(dotenv_path=path)
    else:
        load_dotenv()


async def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the MCP server."""
    args = parse_args(argv)
    load_environment(args.envpath)

    config = ConnectionConfig.from_env()
    mcp_server = SchemaMCPServer(config)

    try:
        await mcp_server.run_stdio()
    finally:
        await mcp_server.cleanup()


def cli_entry() -> None:
    """
    Synchronous entry point for console script.

    This function is called by the 'mysql-schema-mcp' console script.
    """
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    cli_entry()
