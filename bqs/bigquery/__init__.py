"""BigQuery metadata access through the bq command line tool."""

from bqs.bigquery.client import BigQueryClient
from bqs.bigquery.models import (
    Schema,
    SchemaField,
    TableInfo,
    TableMetadata,
    TableReference,
)
from bqs.bigquery.runner import BqRunner


__all__ = [
    "BigQueryClient",
    "BqRunner",
    "Schema",
    "SchemaField",
    "TableInfo",
    "TableMetadata",
    "TableReference",
]
