"""Terminal UI for browsing BigQuery datasets."""

from bqs.tui.app import BrowserApp
from bqs.tui.schema_tree import SchemaNode, flatten_schema


__all__ = ["BrowserApp", "SchemaNode", "flatten_schema"]
