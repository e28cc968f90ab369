"""Shared Pydantic base for camelCase wire schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema: snake_case attributes, camelCase JSON.

    Accepts either spelling on input and reads ORM objects directly.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Acknowledgement for mutations that return no entity."""

    success: bool = True
    message: str | None = None


# Slugs are URL path segments: lowercase letters, digits and hyphens
SLUG_PATTERN = r"^[a-z0-9-]+$"
