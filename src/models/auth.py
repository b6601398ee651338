"""Auth request and response models with validation."""

import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_password_strength(v: str) -> str:
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one digit")
    # bcrypt only looks at the first 72 bytes
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password cannot exceed 72 bytes")
    return v


def _check_email(v: str) -> str:
    v = v.strip()
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(BaseModel):
    """New account registration.

    Attributes:
        username: 3-50 chars, letters, digits and underscores
        email: Unique email address (max 100 chars)
        password: Min 8 chars with upper, lower and digit
        name: Optional first name
        surname: Optional surname
        is_admin: Request admin status (only honored for the first admin)
    """

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=100)
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(
        default=None, max_length=50, validation_alias=AliasChoices("name", "nombre")
    )
    surname: Optional[str] = Field(
        default=None, max_length=50, validation_alias=AliasChoices("surname", "apellido")
    )
    is_admin: bool = Field(
        default=False, validation_alias=AliasChoices("is_admin", "es_admin")
    )

    @field_validator("username")
    @classmethod
    def username_valid_chars(cls, v: str) -> str:
        """Ensure username contains only letters, digits or underscores."""
        v = v.strip()
        if not _USERNAME_RE.match(v):
            raise ValueError(
                "Username must contain only letters, digits or underscores"
            )
        return v

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_strong(cls, v: str) -> str:
        return _check_password_strength(v)

    @field_validator("name", "surname")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class LoginRequest(BaseModel):
    """Login credentials; the identifier may be an email or a username."""

    username_or_email: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("username_or_email", "usernameOrEmail"),
    )
    password: str = Field(..., min_length=1)


class TokenRequest(BaseModel):
    """Body of /refresh and /logout.

    ``token`` is optional at the schema level so a missing token surfaces
    as TOKEN_REQUIRED rather than a generic validation error.
    """

    token: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("token", "refresh_token")
    )


class UserPublic(BaseModel):
    """Public user fields; never includes the password hash."""

    id: UUID
    username: str
    email: str
    name: Optional[str] = None
    surname: Optional[str] = None
    is_admin: bool
    is_active: bool
    last_login: Optional[datetime] = None


class RegisterResponse(BaseModel):
    """Registration result with a hint to continue at the login page."""

    message: str = "User registered successfully. Log in to continue."
    notify: bool = True
    redirect: str = "/login"
    user: UserPublic
    access_token: str
    refresh_token: str


class LoginResponse(BaseModel):
    """Successful authentication response with token pair.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Long-lived JWT for obtaining new access tokens
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
        user: Public fields of the authenticated user
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")
    user: UserPublic


class RefreshResponse(BaseModel):
    """New access token issued from a refresh token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")


class UpdateUserRequest(BaseModel):
    """Admin update of an existing user. Only provided fields change."""

    name: Optional[str] = Field(default=None, max_length=50)
    surname: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=100)
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_email(v)
