"""
Login Use Case

Authenticates a user and issues a JWT carrying {user_id, role}.
"""

from typing import Callable

import bcrypt

from src.api.utils.jwt import generate_jwt
from src.app.services.rate_limiter import AuthRateLimiter
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return

from .dtos import LoginCommand, LoginResponse, UserInfo

# Checked when the user does not exist so both paths cost one bcrypt round
_DUMMY_HASH = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(12))


class LoginUseCase:
    """
    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - Failed attempts are counted per client address + username; past the
      threshold the pair is blocked (RATE_LIMITED with retry_after)
    - Disabled users cannot log in (USER_DISABLED)
    - Successful login clears the failure counter and updates last_login_at
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rate_limiter: AuthRateLimiter,
        jwt_secret: str,
        jwt_expire_minutes: int,
        clock: Callable = utcnow,
    ):
        self.uow = uow
        self.rate_limiter = rate_limiter
        self.jwt_secret = jwt_secret
        self.jwt_expire_minutes = jwt_expire_minutes
        self.clock = clock

    async def execute(self, command: LoginCommand, client_ip: str) -> Result[LoginResponse]:
        key = f"{client_ip}:{command.username.lower()}"
        retry_after = await self.rate_limiter.check(key)
        if retry_after is not None:
            return Return.err(
                Error(
                    "RATE_LIMITED",
                    "Too many failed login attempts, try again later",
                    details={"retry_after": retry_after},
                )
            )

        async with self.uow:
            if "@" in command.username:
                user = await self.uow.users.get_by_email(command.username)
            else:
                user = await self.uow.users.get_by_username(command.username)

            if user is None:
                bcrypt.checkpw(command.password.encode(), _DUMMY_HASH)
                await self.rate_limiter.record_failure(key)
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid username or password")
                )

            if not bcrypt.checkpw(command.password.encode(), user.password_hash.encode()):
                await self.rate_limiter.record_failure(key)
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid username or password")
                )

            if not user.active:
                return Return.err(Error("USER_DISABLED", "User account is disabled"))

            await self.rate_limiter.reset(key)
            user.last_login_at = self.clock()
            user = await self.uow.users.update(user)
            await self.uow.commit()

            access_token = generate_jwt(
                user.id, user.role.value, self.jwt_secret, self.jwt_expire_minutes
            )
            return Return.ok(
                LoginResponse(
                    access_token=access_token,
                    expires_in=self.jwt_expire_minutes * 60,
                    user=UserInfo.from_entity(user),
                )
            )
