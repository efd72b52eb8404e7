"""API error response schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ValidationErrorDetails(BaseModel):
    fields: dict[str, str]


class ValidationErrorResponse(BaseModel):
    code: str = "VALIDATION_ERROR"
    message: str
    details: ValidationErrorDetails | None = None
