from typing import Callable

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.domain.base import utcnow
from src.domain.errors import not_found
from src.libs.result import Result, Return

from .dtos import PreferencesResponse, UpdatePreferencesCommand


class UpdateNotificationPreferencesUseCase:
    """Stores the caller's email preferences read by the notification fan-out"""

    def __init__(self, uow: UnitOfWork, clock: Callable = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, actor: Actor, command: UpdatePreferencesCommand
    ) -> Result[PreferencesResponse]:
        email = command.email
        if isinstance(email, dict):
            email = {kind.value: enabled for kind, enabled in email.items()}

        async with self.uow:
            user = await self.uow.users.get_by_id(actor.id)
            if user is None:
                return Return.err(not_found("user"))
            # JSON columns only track reassignment, not in-place mutation
            user.notification_preferences = {
                **(user.notification_preferences or {}),
                "email": email,
            }
            user.updated_at = self.clock()
            await self.uow.users.update(user)
            await self.uow.commit()
            return Return.ok(PreferencesResponse(email=email))
