"""Utility helpers."""

from bqs.utils.format import format_bytes, format_time, table_type_icon
from bqs.utils.xdg import get_cache_dir


__all__ = ["format_bytes", "format_time", "get_cache_dir", "table_type_icon"]
