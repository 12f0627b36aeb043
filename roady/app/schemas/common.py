"""
Shared schema building blocks.

The mobile client speaks camelCase JSON; Python code uses snake_case names.
"""

from datetime import datetime
from typing import Annotated
from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel

from roady.app.core.clock import as_utc

# Naive values are taken as UTC, aware values are converted to UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
