"""
Shared schema base.

API payloads use camelCase field names while models stay snake_case.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MessageResponse(CamelModel):
    """Plain informational response."""
    message: str


class DeleteResponse(CamelModel):
    """Result of a delete operation."""
    deleted_count: int
