from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.libs.result import Result, Return

from ._access import load_owned
from .dtos import NotificationResponse


class GetNotificationUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor: Actor, notification_id: UUID
    ) -> Result[NotificationResponse]:
        async with self.uow:
            result = await load_owned(self.uow, actor, notification_id)
            if result.is_err():
                return result
            return Return.ok(NotificationResponse.from_entity(result.value))
