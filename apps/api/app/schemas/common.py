"""Common Pydantic schemas used across the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class SubscribeResponse(BaseSchema):
    """Reply to every signup submission, success or not."""

    success: bool
    message: str


class HealthResponse(BaseSchema):
    """Liveness probe response schema."""

    status: str
    timestamp: datetime
    is_dry_run: bool
