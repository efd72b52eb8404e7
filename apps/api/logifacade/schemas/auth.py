"""Authentication schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"
    AUDITOR = "AUDITOR"
    CLIENT = "CLIENT"


class AuthPrincipal(BaseModel):
    """Normalized authenticated principal used by business services."""

    user_id: int = Field(gt=0)
    username: str = Field(min_length=1)
    roles: frozenset[Role] = Field(min_length=1)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    id: int
    username: str
    email: str
    display_name: str
    roles: list[Role]
    expires_at: datetime


class ValidateTokenRequest(BaseModel):
    token: str | None = None


class ValidateTokenResponse(BaseModel):
    valid: bool
    subject: str
    expires_at: datetime


class PrincipalProfile(BaseModel):
    id: int
    username: str
    email: str
    display_name: str
    roles: list[Role]
    enabled: bool
    last_access_at: datetime | None = None
