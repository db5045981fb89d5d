"""Models for the JSON produced by ``bq ls`` / ``bq show``.

``bq`` renders 64-bit integers as strings. Pydantic's lax mode turns them into
ints on input and :data:`Int64` writes them back as strings.
"""

from typing import Annotated

from pydantic import Field, PlainSerializer

from bqs.models.base import BqsBaseModel


Int64 = Annotated[int, PlainSerializer(str, return_type=str, when_used="json")]


class TableReference(BqsBaseModel):
    """Fully qualified table reference."""

    project_id: str = ""
    dataset_id: str = ""
    table_id: str = ""


class TableInfo(BqsBaseModel):
    """One entry of a dataset's table list."""

    table_reference: TableReference = Field(default_factory=TableReference)
    type: str = ""
    creation_time: Int64 = 0
    last_modified_time: Int64 = 0
    num_rows: Int64 = 0
    num_bytes: Int64 = 0
    location: str = ""
    friendly_name: str = ""
    description: str = ""

    @property
    def table_id(self) -> str:
        """``bq`` only reports the id inside ``tableReference``."""
        return self.table_reference.table_id

    @property
    def name(self) -> str:
        return self.table_id


class SchemaField(BqsBaseModel):
    """A column, possibly with nested fields (RECORD/STRUCT)."""

    name: str
    type: str = ""
    mode: str = ""
    description: str = ""
    fields: list["SchemaField"] = Field(default_factory=list)

    @property
    def is_required(self) -> bool:
        return self.mode.upper() == "REQUIRED"

    @property
    def is_repeated(self) -> bool:
        return self.mode.upper() == "REPEATED"


class Schema(BqsBaseModel):
    """Table schema."""

    fields: list[SchemaField] = Field(default_factory=list)


class TableMetadata(TableInfo):
    """Complete table metadata as returned by ``bq show``."""

    table_schema: Schema | None = Field(default=None, alias="schema")


__all__ = ["Schema", "SchemaField", "TableInfo", "TableMetadata", "TableReference"]
