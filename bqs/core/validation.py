"""Validation of BigQuery identifiers given on the command line."""

import re
from dataclasses import dataclass

from bqs.core.errors import validation_error


PROJECT_PATTERN = re.compile(r"[a-z][a-z0-9\-]*[a-z0-9]")
DATASET_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
TABLE_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

MAX_IDENTIFIER_LENGTH = 1024


@dataclass(frozen=True)
class TableRef:
    """A parsed ``project.dataset[.table]`` identifier."""

    project: str
    dataset: str
    table: str | None = None

    def __str__(self) -> str:
        if self.table:
            return f"{self.project}.{self.dataset}.{self.table}"
        return f"{self.project}.{self.dataset}"

    def require_table(self) -> str:
        """Return the table part, rejecting dataset-only references."""
        if not self.table:
            raise validation_error("expected project.dataset.table", str(self))
        return self.table


def validate_project(project: str) -> None:
    """Validate a BigQuery project ID.

    Raises:
        ClassifiedError: With kind VALIDATION when the ID is malformed
    """
    if not project:
        raise validation_error("project cannot be empty", project)
    if not 6 <= len(project) <= 30:
        raise validation_error(
            f"project length must be 6-30 characters, got {len(project)}", project
        )
    if not PROJECT_PATTERN.fullmatch(project):
        raise validation_error(
            "project must start with lowercase letter, contain only lowercase "
            "letters, numbers, and hyphens, and end with letter or number",
            project,
        )


def _validate_name(value: str, what: str, pattern: re.Pattern[str]) -> None:
    if not value:
        raise validation_error(f"{what} cannot be empty", value)
    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise validation_error(
            f"{what} length cannot exceed {MAX_IDENTIFIER_LENGTH} characters, got {len(value)}",
            value,
        )
    if not pattern.fullmatch(value):
        raise validation_error(
            f"{what} must start with letter or underscore, contain only letters, "
            "numbers, and underscores",
            value,
        )


def validate_dataset(dataset: str) -> None:
    """Validate a BigQuery dataset ID."""
    _validate_name(dataset, "dataset", DATASET_PATTERN)


def validate_table(table: str) -> None:
    """Validate a BigQuery table ID."""
    _validate_name(table, "table", TABLE_PATTERN)


def parse_table_reference(
    text: str,
    require_table: bool = False,
    project_override: str | None = None,
) -> TableRef:
    """Parse and validate ``project.dataset[.table]``.

    With ``project_override`` the input may also be ``dataset.table``; the
    override replaces whatever project the input names.

    Args:
        text: Identifier as typed by the user
        require_table: Reject identifiers without a table part
        project_override: Project to use instead of the one in ``text``

    Returns:
        The parsed reference

    Raises:
        ClassifiedError: With kind VALIDATION on malformed input
    """
    parts = text.strip().split(".")

    if project_override and len(parts) == (2 if require_table else 1):
        parts = [project_override, *parts]

    if len(parts) < 2:
        raise validation_error(
            "expected project.dataset or project.dataset.table", text
        )
    if len(parts) > 3:
        raise validation_error("too many parts", text)
    if require_table and len(parts) < 3:
        raise validation_error("expected project.dataset.table", text)

    project = project_override or parts[0]
    validate_project(project)
    validate_dataset(parts[1])
    table = parts[2] if len(parts) == 3 else None
    if table is not None:
        validate_table(table)

    return TableRef(project=project, dataset=parts[1], table=table)
