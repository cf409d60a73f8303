from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.domain.entities import NotificationStatus
from src.libs.result import Result, Return

from .dtos import UnreadCountResponse


class CountUnreadNotificationsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, actor: Actor) -> Result[UnreadCountResponse]:
        async with self.uow:
            count = await self.uow.notifications.count(actor.id, NotificationStatus.unread)
            return Return.ok(UnreadCountResponse(count=count))
