"""Namespaced cache key helpers.

The formats are shared with caches written by earlier bqs releases and must
not change.
"""

TABLE_LIST_NAMESPACE = "tables"
SCHEMA_NAMESPACE = "schema"
METADATA_NAMESPACE = "metadata"


def table_list_key(project: str, dataset: str) -> str:
    return f"{TABLE_LIST_NAMESPACE}:{project}.{dataset}"


def schema_key(project: str, dataset: str, table: str) -> str:
    return f"{SCHEMA_NAMESPACE}:{project}.{dataset}.{table}"


def metadata_key(project: str, dataset: str, table: str) -> str:
    return f"{METADATA_NAMESPACE}:{project}.{dataset}.{table}"
