"""Command line interface for bqs."""

from bqs.cli.app import app, main


__all__ = ["app", "main"]
