"""Base model for log entry records.

Every persisted record inherits from :class:`LogbookBaseModel` which
provides:

* ``alias_generator=to_camel`` so snake_case fields serialize to the
  camelCase keys used in the log files (``max_speed`` -> ``maxSpeed``).
* ``populate_by_name`` so either spelling validates.
* :meth:`LogbookBaseModel.to_record`, the JSON-ready dict written to disk.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LogbookBaseModel(BaseModel):
    """Base for log entry records."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys, ``None`` fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
