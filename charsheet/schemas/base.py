"""
Schema Base
Every API body uses camelCase keys on the wire; snake_case is accepted on input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model for request and response bodies."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
