"""Configuration for bqs."""

from typing import Any

from .models import BqsSettings, CacheTTLConfig


def create_settings(**overrides: Any) -> BqsSettings:
    """Build settings from the environment plus explicit overrides."""
    return BqsSettings(**overrides)


__all__ = ["BqsSettings", "CacheTTLConfig", "create_settings"]
