"""Login token models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel

AuthToken = NewType("AuthToken", str)


class TokenClaims(BaseModel):
    """Identity carried by a verified login token."""

    subject_id: UUID
    username: str
    issued_at: datetime
    expires_at: datetime


class LoginResult(BaseModel):
    """Token handed to the client after a successful login."""

    token: AuthToken
    username: str
    expires_at: datetime
