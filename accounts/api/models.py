"""
API request and response models.

Pydantic models for FastAPI request parsing and OpenAPI schema generation.
Field rules (email shape, password length) are enforced by the domain's
make_new_user(), not here, so every field error is reported together.
"""

from uuid import UUID

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    """Request model for registration and login."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Response model for successful login."""

    user_id: UUID


class MessageResponse(BaseModel):
    """Response model for operations without a payload."""

    message: str


class FieldErrorModel(BaseModel):
    """A single validation failure for one field."""

    code: str
    message: str


class NewUserErrorsModel(BaseModel):
    """Per-field validation failures for registration."""

    email: list[FieldErrorModel] = []
    password: list[FieldErrorModel] = []


class ValidationErrorResponse(BaseModel):
    """Registration validation error response."""

    detail: NewUserErrorsModel


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
