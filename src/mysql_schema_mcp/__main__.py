"""Entry point for running mysql_schema_mcp as a module."""

from mysql_schema_mcp.server import cli_entry

if __name__ == "__main__":
    cli_entry()
