"""Error payload schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    code: str
    message: str
    field: str | None = None
    resource: str | None = None
    resource_id: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = False


class ErrorResponse(BaseModel):
    """Envelope returned for every business error."""

    error: ErrorBody
