"""
Base schemas shared by the public API.

The browser client speaks camelCase JSON, so every API model serializes by
alias; `populate_by_name` keeps snake_case construction working server-side.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StandardizedModel(BaseModel):
    """Base model with camelCase JSON encoding."""

    model_config = ConfigDict(
        use_enum_values=True,
        populate_by_name=True,
        alias_generator=to_camel,
        serialize_by_alias=True,
    )
