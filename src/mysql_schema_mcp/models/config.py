"""Connection configuration model."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine.url import URL

# Environment variables read by ConnectionConfig.from_env()
REQUIRED_ENV_VARS = {
    "host": "DB_HOST",
    "user": "DB_USER",
    "password": "DB_PASSWORD",
    "database": "DB_NAME",
}
OPTIONAL_ENV_VARS = {
    "port": "DB_PORT",
    "connect_timeout": "DB_CONNECT_TIMEOUT",
    "statement_timeout": "DB_STATEMENT_TIMEOUT",
    "read_only": "DB_READ_ONLY",
    "echo_sql": "DB_ECHO_SQL",
}


class ConnectionConfig(BaseModel):
    """Immutable MySQL connection settings, built once at process start."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "host": "localhost",
                    "user": "reporter",
                    "password": "secret",
                    "database": "customers",
                    "port": 3306,
                }
            ]
        },
    )

    host: str = Field(..., min_length=1, description="Database server host")
    user: str = Field(..., min_length=1, description="Database user")
    password: str = Field(
        ..., repr=False, description="Database password (may be empty)"
    )
    database: str = Field(..., min_length=1, description="Database (schema) name")
    port: int = Field(default=3306, ge=1, le=65535, description="Server port")
    connect_timeout: int = Field(
        default=10,
        ge=1,
        le=300,
        description="Connection establishment timeout in seconds",
    )
    statement_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        le=3600,
        description="Statement execution timeout in seconds (None keeps the server default)",
    )
    read_only: bool = Field(
        default=False,
        description="Mark every session read-only at the server",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through the sqlalchemy.engine logger",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConnectionConfig":
        """
        Build configuration from DB_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Connection configuration

        Raises:
            ValueError: If a required variable is missing
        """
        env = os.environ if environ is None else environ

        missing = [var for var in REQUIRED_ENV_VARS.values() if var not in env]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        values: dict[str, object] = {
            field: env[var] for field, var in REQUIRED_ENV_VARS.items()
        }
        for field, var in OPTIONAL_ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            if field in ("read_only", "echo_sql"):
                values[field] = raw.strip().lower() in ("1", "true", "yes", "on")
            else:
                values[field] = raw

        return cls.model_validate(values)

    @property
    def url(self) -> URL:
        """SQLAlchemy URL for the aiomysql driver."""
        return URL.create(
            drivername="mysql+aiomysql",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query={"charset": "utf8mb4"},
        )
