"""Schema tree flattening and rendering."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from rich.text import Text
from textual.widgets.tree import TreeNode

from bqs.bigquery.models import SchemaField


EXPANDED_ICON = "▼ "
COLLAPSED_ICON = "▶ "
LEAF_ICON = "  "


@dataclass(frozen=True)
class SchemaNode:
    """One visible row of a schema tree."""

    field: SchemaField
    path: str
    level: int
    has_children: bool


def flatten_schema(
    fields: Iterable[SchemaField],
    expanded: Collection[str] = (),
    parent_path: str = "",
    level: int = 0,
) -> list[SchemaNode]:
    """Flatten nested fields into display order.

    Children are only included below a node whose dotted path is in
    ``expanded``.
    """
    nodes: list[SchemaNode] = []
    for field in fields:
        path = f"{parent_path}.{field.name}" if parent_path else field.name
        has_children = bool(field.fields)
        nodes.append(
            SchemaNode(field=field, path=path, level=level, has_children=has_children)
        )
        if has_children and path in expanded:
            nodes.extend(flatten_schema(field.fields, expanded, path, level + 1))
    return nodes


def field_label(field: SchemaField) -> Text:
    """``name TYPE [REQUIRED|REPEATED]`` with styling."""
    label = Text(field.name)
    label.append(" ")
    label.append(field.type, style="blue")
    if field.is_required:
        label.append(" REQUIRED", style="red")
    elif field.is_repeated:
        label.append(" REPEATED", style="yellow")
    return label


def render_node_line(node: SchemaNode, expanded: Collection[str] = ()) -> Text:
    """Render a flattened node as an indented line with an expansion marker."""
    if node.has_children:
        icon = EXPANDED_ICON if node.path in expanded else COLLAPSED_ICON
    else:
        icon = LEAF_ICON
    line = Text("  " * node.level + "├─" + icon)
    line.append_text(field_label(node.field))
    return line


def expandable_paths(fields: Iterable[SchemaField], parent_path: str = "") -> set[str]:
    """Dotted paths of every field that has nested fields."""
    paths: set[str] = set()
    for field in fields:
        if field.fields:
            path = f"{parent_path}.{field.name}" if parent_path else field.name
            paths.add(path)
            paths |= expandable_paths(field.fields, path)
    return paths


def populate_tree(root: TreeNode[SchemaField], fields: Iterable[SchemaField]) -> int:
    """Add fields under a textual tree node; returns the number of nodes added."""
    count = 0
    for field in fields:
        count += 1
        if field.fields:
            branch = root.add(field_label(field), data=field)
            count += populate_tree(branch, field.fields)
        else:
            root.add_leaf(field_label(field), data=field)
    return count
