"""Wire conventions shared by every response model.

* Field names are snake_case in Python and camelCase on the wire.
* Image buffers stay ``bytes`` in memory and in the cache; only JSON
  encoding turns them into an array of integers (``[137, 80, 78, …]``), the
  format the mobile client decodes.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def bytes_to_int_list(value: bytes) -> list[int]:
    return list(value)


ImageBytes = Annotated[
    bytes,
    PlainSerializer(bytes_to_int_list, return_type=list[int], when_used="json"),
]


class WireModel(BaseModel):
    """Base for response structures."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


def to_cache(model: BaseModel) -> dict[str, Any]:
    """Python-mode dump (bytes kept as bytes) keyed by wire names."""
    return model.model_dump(by_alias=True)
