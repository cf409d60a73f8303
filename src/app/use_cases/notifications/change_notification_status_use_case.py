"""
Notification Status Use Cases

Mark read and archive. Status only moves forward:
unread -> read -> archived, or unread -> archived.
"""

from typing import Callable
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.domain.base import utcnow
from src.domain.entities import NotificationStatus
from src.domain.state_machine import plan_notification_transition
from src.libs.result import Result, Return

from ._access import load_owned
from .dtos import NotificationResponse


class ChangeNotificationStatusUseCase:
    target: NotificationStatus

    def __init__(self, uow: UnitOfWork, clock: Callable = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, actor: Actor, notification_id: UUID
    ) -> Result[NotificationResponse]:
        async with self.uow:
            result = await load_owned(self.uow, actor, notification_id)
            if result.is_err():
                return result
            notification = result.value

            plan = plan_notification_transition(notification, self.target, self.clock())
            if plan.is_err():
                return Return.err(plan.error)
            for field, value in plan.value.items():
                setattr(notification, field, value)

            notification = await self.uow.notifications.update(notification)
            await self.uow.commit()
            return Return.ok(NotificationResponse.from_entity(notification))


class MarkNotificationReadUseCase(ChangeNotificationStatusUseCase):
    target = NotificationStatus.read


class ArchiveNotificationUseCase(ChangeNotificationStatusUseCase):
    target = NotificationStatus.archived
