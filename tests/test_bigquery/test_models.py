"""Tests for the bq JSON models."""

import json

from pydantic import TypeAdapter

from bqs.bigquery.models import Schema, SchemaField, TableInfo, TableMetadata
from tests.bq_samples import SCHEMA_FIELDS, TABLE_LIST, TABLE_METADATA


class TestTableInfo:
    def test_table_id_filled_from_reference(self):
        tables = TypeAdapter(list[TableInfo]).validate_json(json.dumps(TABLE_LIST))

        assert [t.table_id for t in tables] == ["events", "active_users"]
        assert [t.name for t in tables] == ["events", "active_users"]
        assert tables[0].creation_time == 1700000000000
        assert tables[1].type == "VIEW"

    def test_listing_dumps_back_unchanged(self):
        tables = TypeAdapter(list[TableInfo]).validate_python(TABLE_LIST)

        assert [t.to_dict() for t in tables] == TABLE_LIST
        assert "tableId" not in tables[0].to_dict()

    def test_missing_reference(self):
        info = TableInfo.model_validate({"type": "TABLE"})

        assert info.table_id == ""
        assert info.to_dict() == {"type": "TABLE"}

    def test_unknown_keys_survive(self):
        info = TableInfo.model_validate(TABLE_LIST[0])

        assert info.to_dict()["kind"] == "bigquery#table"


class TestTableMetadata:
    def test_parse_show_output(self):
        metadata = TableMetadata.model_validate_json(json.dumps(TABLE_METADATA))

        assert metadata.table_id == "events"
        assert metadata.num_rows == 1234
        assert metadata.num_bytes == 2048
        assert metadata.last_modified_time == 1700000500000
        assert metadata.location == "EU"
        assert metadata.table_schema is not None
        assert [f.name for f in metadata.table_schema.fields] == [
            "event_id",
            "tags",
            "payload",
        ]

    def test_serializes_with_bigquery_keys(self):
        metadata = TableMetadata.model_validate(TABLE_METADATA)

        data = metadata.to_dict()

        assert data["numRows"] == "1234"
        assert data["lastModifiedTime"] == "1700000500000"
        assert data["tableReference"]["tableId"] == "events"
        assert "schema" in data
        assert "tableSchema" not in data
        assert data["etag"] == "abc123"

    def test_show_output_dumps_back_unchanged(self):
        metadata = TableMetadata.model_validate_json(json.dumps(TABLE_METADATA))

        assert metadata.to_dict() == TABLE_METADATA

    def test_view_without_counts_gains_no_defaults(self):
        view = {
            "kind": "bigquery#table",
            "tableReference": {"projectId": "p", "datasetId": "d", "tableId": "v"},
            "type": "VIEW",
            "view": {"query": "SELECT 1"},
        }

        assert TableMetadata.model_validate(view).to_dict() == view

    def test_missing_schema(self):
        metadata = TableMetadata.model_validate({"tableId": "t", "type": "VIEW"})

        assert metadata.table_schema is None
        assert "schema" not in metadata.to_dict()


class TestSchema:
    def test_nested_fields(self):
        schema = Schema(
            fields=TypeAdapter(list[SchemaField]).validate_python(SCHEMA_FIELDS)
        )

        payload = schema.fields[2]
        assert payload.type == "RECORD"
        assert [f.name for f in payload.fields] == ["kind", "device"]
        assert payload.fields[1].fields[0].name == "os"

    def test_fields_dump_back_unchanged(self):
        fields = TypeAdapter(list[SchemaField]).validate_python(SCHEMA_FIELDS)

        assert [f.to_dict() for f in fields] == SCHEMA_FIELDS
        assert "description" not in fields[0].to_dict()

    def test_mode_helpers(self):
        required = SchemaField(name="a", type="STRING", mode="REQUIRED")
        repeated = SchemaField(name="b", type="STRING", mode="repeated")
        nullable = SchemaField(name="c", type="STRING")

        assert required.is_required and not required.is_repeated
        assert repeated.is_repeated
        assert not nullable.is_required and not nullable.is_repeated
