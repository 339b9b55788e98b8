"""Shared pydantic configuration for workflow artifacts."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON form uses camelCase keys.

    Artifacts are written with ``by_alias=True`` so they stay compatible
    with the JSON files the rest of the ALT text workflow exchanges, while
    Python code uses snake_case attribute names. Either spelling is
    accepted on input.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
