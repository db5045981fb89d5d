"""Invocation of the external ``bq`` command line tool."""

import logging
import shutil
import subprocess
from collections.abc import Sequence


logger = logging.getLogger(__name__)


class BqRunner:
    """Runs ``bq`` subcommands and returns their JSON output.

    Failures surface as the raw ``subprocess`` exceptions
    (``CalledProcessError``, ``TimeoutExpired``, ``FileNotFoundError``); the
    caller classifies them.
    """

    def __init__(
        self,
        bq_path: str = "bq",
        max_results: int = 1000,
        timeout: float | None = None,
    ) -> None:
        self.bq_path = bq_path
        self.max_results = max_results
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check whether the bq executable can be found."""
        found = shutil.which(self.bq_path) is not None
        if not found:
            logger.warning("bq executable not found in PATH: %s", self.bq_path)
        return found

    def _run(self, args: Sequence[str]) -> str:
        cmd = [self.bq_path, *args]
        logger.debug("Running: %s", " ".join(cmd))
        result = subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
        return result.stdout

    def list_tables(self, project: str, dataset: str) -> str:
        """``bq ls`` a dataset as JSON."""
        return self._run(
            [
                "ls",
                f"--project_id={project}",
                "--format=json",
                f"--max_results={self.max_results}",
                dataset,
            ]
        )

    def show_table(self, project: str, dataset: str, table: str) -> str:
        """``bq show`` a table as JSON."""
        return self._run(
            ["show", f"--project_id={project}", "--format=json", f"{dataset}.{table}"]
        )

    def show_schema(self, project: str, dataset: str, table: str) -> str:
        """``bq show --schema`` a table as JSON (a list of fields)."""
        return self._run(
            [
                "show",
                f"--project_id={project}",
                "--schema",
                "--format=json",
                f"{dataset}.{table}",
            ]
        )

    def passthrough(self, args: Sequence[str]) -> int:
        """Run ``bq`` with inherited stdout/stderr and return its exit code."""
        cmd = [self.bq_path, *args]
        logger.debug("Running (passthrough): %s", " ".join(cmd))
        return subprocess.run(cmd, check=False, timeout=self.timeout).returncode


def build_show_args(
    project: str,
    dataset: str,
    table: str,
    output_format: str,
    schema: bool = False,
    view: bool = False,
    materialized_view: bool = False,
    quiet: bool = False,
) -> list[str]:
    """Assemble the arguments of a passthrough ``bq show`` call."""
    args = ["show", f"--project_id={project}"]
    if schema:
        args.append("--schema")
    if view:
        args.append("--view")
    if materialized_view:
        args.append("--materialized_view")
    args.append(f"--format={output_format}")
    if quiet:
        args.append("--quiet")
    args.append(f"{dataset}.{table}")
    return args
