"""Base model for all bqs Pydantic models.

BigQuery's JSON uses camelCase keys, so models declare snake_case fields with
camelCase aliases and serialize by alias.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BqsBaseModel(BaseModel):
    """Base model class for bqs Pydantic models.

    Serialization is by alias and only includes fields that were present in
    the input, so a payload read from ``bq`` dumps back to the same document:
    - Fields are populated from camelCase keys or by field name
    - Unknown keys returned by ``bq`` are kept so nothing is lost when a
      payload goes through the cache
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to a JSON-compatible dict keyed like BigQuery's output."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
