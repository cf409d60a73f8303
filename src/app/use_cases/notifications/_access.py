from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor, can_access_notification
from src.domain.entities import Notification
from src.domain.errors import forbidden, not_found
from src.libs.result import Result, Return


async def load_owned(
    uow: UnitOfWork, actor: Actor, notification_id: UUID
) -> Result[Notification]:
    """Existence then ownership check shared by the notification use cases"""
    notification: Optional[Notification] = await uow.notifications.get_by_id(
        notification_id
    )
    if notification is None:
        return Return.err(not_found("notification"))
    if not can_access_notification(notification, actor):
        return Return.err(forbidden("Not allowed to access this notification"))
    return Return.ok(notification)
