"""
User Entity

Represents an authenticated person who reports and works events/incidents.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import UserRole


class User(SQLModel, table=True):
    """
    User entity.

    Business Rules:
    - Username and email are unique
    - Password stored as bcrypt hash (cost factor 12)
    - role is compared hierarchically (system > admin > supervisor > user)
    - notification_preferences["email"] is either a bool for every class or a
      per-class map, e.g. {"incident": true, "event": false}
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=64)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)

    role: UserRole = Field(default=UserRole.user)
    active: bool = Field(default=True)

    notification_preferences: dict = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime)
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime)
    )
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_role_active", "role", "active"),)
