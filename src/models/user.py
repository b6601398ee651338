"""User, refresh-token and identity models."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

Role = Literal["admin", "user"]


def role_for(is_admin: bool) -> Role:
    """Role claim for a user's admin flag."""
    return "admin" if is_admin else "user"


class User(BaseModel):
    """A registered account of the catalog."""

    id: UUID
    username: str
    email: str
    name: Optional[str] = None
    surname: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @property
    def role(self) -> Role:
        return role_for(self.is_admin)


class RefreshTokenRecord(BaseModel):
    """A persisted refresh token row."""

    user_id: UUID
    token: str
    expires_at: datetime
    created_at: datetime
    is_revoked: bool = False


class TokenClaims(BaseModel):
    """Identity payload embedded in a signed token."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: str


class AuthenticatedIdentity(BaseModel):
    """Request-scoped identity produced by the authorization gate.

    ``is_admin`` comes from a live lookup, never from the token's role claim.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: str
    is_admin: bool
