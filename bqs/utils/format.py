"""Display formatting helpers."""

from datetime import datetime


_TABLE_TYPE_ICONS = {
    "TABLE": "📋",
    "VIEW": "👁️",
    "MATERIALIZED_VIEW": "💎",
}


def format_bytes(size_bytes: int) -> str:
    """Format a byte count with 1024-based units ("512 B", "1.5 KB")."""
    unit = 1024
    if size_bytes < unit:
        return f"{size_bytes} B"
    value = float(size_bytes)
    for suffix in "KMGTPE":
        value /= unit
        if value < unit or suffix == "E":
            return f"{value:.1f} {suffix}B"
    return f"{value:.1f} EB"


def format_time(unix_millis: int) -> str:
    """Format an epoch-milliseconds timestamp as "Jan 2 15:04"."""
    if not unix_millis:
        return "N/A"
    moment = datetime.fromtimestamp(unix_millis / 1000)
    return f"{moment:%b} {moment.day} {moment:%H:%M}"


def table_type_icon(table_type: str) -> str:
    return _TABLE_TYPE_ICONS.get(table_type.upper(), "❓")
