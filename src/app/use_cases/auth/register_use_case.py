"""
Register Use Case

Creates a regular user account.
"""

from typing import Callable

import bcrypt

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import User, UserRole
from src.libs.result import Error, Result, Return

from .dtos import RegisterCommand, UserInfo


class RegisterUseCase:
    """
    Business Rules:
    - Username and email are unique (USERNAME_TAKEN / EMAIL_ALREADY_EXISTS)
    - Password stored as bcrypt hash, cost factor 12
    - Self-registered accounts always get role=user; elevated roles are
      granted out of band
    """

    def __init__(self, uow: UnitOfWork, clock: Callable = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, command: RegisterCommand) -> Result[UserInfo]:
        async with self.uow:
            if await self.uow.users.get_by_username(command.username):
                return Return.err(Error("USERNAME_TAKEN", "Username already taken"))
            if await self.uow.users.get_by_email(command.email):
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "Email already registered")
                )

            password_hash = bcrypt.hashpw(
                command.password.encode("utf-8"), bcrypt.gensalt(12)
            )
            now = self.clock()
            user = User(
                username=command.username,
                email=command.email,
                password_hash=password_hash.decode("utf-8"),
                first_name=command.first_name,
                last_name=command.last_name,
                role=UserRole.user,
                notification_preferences={"email": False},
                created_at=now,
                updated_at=now,
            )
            user = await self.uow.users.create(user)
            await self.uow.commit()

            return Return.ok(UserInfo.from_entity(user))
