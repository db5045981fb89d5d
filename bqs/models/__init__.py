"""Shared model base classes."""

from bqs.models.base import BqsBaseModel


__all__ = ["BqsBaseModel"]
