"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import EmailStr, Field

from src.app.use_cases.shared import CamelModel
from src.domain.entities import User, UserRole


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(CamelModel):
    """
    Registration intent, validated at the edge.

    bcrypt only reads the first 72 bytes, so longer passwords are refused.
    """

    username: str = Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginCommand(CamelModel):
    """username may also be the account's email address"""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(CamelModel):
    id: UUID
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    notification_preferences: Dict[str, Any]
    created_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserInfo":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            notification_preferences=user.notification_preferences or {},
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserInfo
