"""Catalog-derived table and column models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base for models serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump using the wire (camelCase) field names."""
        return self.model_dump(by_alias=True)


class TableDefinition(CatalogModel):
    """A base table and its creation statement as reported by the catalog."""

    name: str = Field(..., description="Catalog table name")
    sql: str = Field(..., description="Full CREATE TABLE statement")


class ColumnDefinition(CatalogModel):
    """One column of a table, in catalog order."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(
        ..., alias="type", description="Raw catalog type, e.g. varchar(255)"
    )
    not_null: bool = Field(..., description="Column rejects NULL")
    default_value: Optional[str] = Field(None, description="Column default, if any")
    is_primary_key: bool = Field(..., description="Column is part of the primary key")

    @classmethod
    def from_catalog_row(cls, row: dict[str, Any]) -> "ColumnDefinition":
        """Build from an information_schema.COLUMNS row."""
        default = row["column_default"]
        return cls(
            name=row["name"],
            data_type=row["type"],
            not_null=row["is_nullable"] == "NO",
            default_value=None if default is None else str(default),
            is_primary_key=row["column_key"] == "PRI",
        )


class ColumnReport(CatalogModel):
    """Columns of one table, optionally with its creation statement."""

    table_name: str = Field(..., description="Table name")
    columns: list[ColumnDefinition] = Field(default_factory=list)
    definition: Optional[str] = Field(
        None, description="CREATE TABLE statement, only in detailed mode"
    )

    @model_serializer(mode="wrap")
    def _omit_missing_definition(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if self.definition is None:
            data.pop("definition", None)
        return data
