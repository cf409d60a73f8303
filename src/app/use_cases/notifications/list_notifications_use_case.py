from src.app.repositories.notification_repository import NotificationQuery
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.libs.result import Result, Return

from .dtos import NotificationListResponse, NotificationResponse


class ListNotificationsUseCase:
    """The caller's own notifications, newest first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor: Actor, query: NotificationQuery
    ) -> Result[NotificationListResponse]:
        scoped = query.model_copy(update={"user_id": actor.id})
        async with self.uow:
            notifications, total = await self.uow.notifications.find(scoped)
            return Return.ok(
                NotificationListResponse(
                    items=[NotificationResponse.from_entity(n) for n in notifications],
                    total=total,
                    skip=query.skip,
                    limit=query.limit,
                )
            )
