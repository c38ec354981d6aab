"""Standardized error response schema."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorResponse(BaseModel):
    """Standard error body for domain exceptions."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")
    protected_fields: list[str] | None = Field(
        None, description="Fields rejected by the post-approval protection"
    )
