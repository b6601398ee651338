"""Error response models."""

from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request.

    Attributes:
        error: Human-readable summary of what happened
        code: Stable machine-readable error code
        details: Optional context (field errors, environment-gated detail)
    """

    error: str
    code: str
    details: Optional[Any] = None


class ValidationIssue(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str
    code: str
