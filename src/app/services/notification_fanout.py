"""
Notification Fan-out

Bus consumer turning domain events into per-user notifications. For each
message it resolves the recipients, persists one Notification per recipient
in its own unit of work, then pushes it to the recipient's live websocket
connections and emails it when the recipient's preferences allow.

Persistence is the source of truth: websocket and email failures are logged
as UPSTREAM_UNAVAILABLE and never undo or block a stored notification.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional
from uuid import UUID

from src.app.services.email_service import IEmailService
from src.app.services.event_bus import IEventBus
from src.app.services.realtime_gateway import RealtimeGateway
from src.app.services.unit_of_work import UnitOfWork, UnitOfWorkScope
from src.app.use_cases.notifications.dtos import NotificationResponse
from src.domain import topics
from src.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationType,
    User,
    UserRole,
)
from src.domain.entities.notification import MAX_MESSAGE_LENGTH
from src.domain.validation import validate_notification

logger = logging.getLogger(__name__)

SUBSCRIBER_ID = "notification-fanout"

HANDLED_TOPICS = (
    topics.EVENT_CREATED,
    topics.INCIDENT_CREATED,
    topics.INCIDENT_ASSIGNED,
    topics.INCIDENT_ESCALATED,
)


class NotificationContent(NamedTuple):
    type: NotificationType
    title: str
    message: str
    template: str


def wants_email(preferences: Optional[Mapping[str, Any]], kind: NotificationType) -> bool:
    """preferences["email"] is a single switch or a per-class map"""
    email = (preferences or {}).get("email", False)
    if isinstance(email, Mapping):
        return bool(email.get(NotificationType(kind).value, False))
    return bool(email)


def inherit_priority(data: Mapping[str, Any]) -> NotificationPriority:
    value = str(data.get("priority") or "").lower()
    try:
        return NotificationPriority(value)
    except ValueError:
        return NotificationPriority.medium


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def build_content(topic: str, data: Mapping[str, Any]) -> NotificationContent:
    if topic == topics.EVENT_CREATED:
        return NotificationContent(
            NotificationType.event,
            "New Event Created",
            f'Event "{data.get("name")}" has been created',
            "event-created",
        )
    title = data.get("title")
    if topic == topics.INCIDENT_CREATED:
        return NotificationContent(
            NotificationType.incident,
            "New Incident Reported",
            f'Incident "{title}" has been reported',
            "incident-created",
        )
    if topic == topics.INCIDENT_ASSIGNED:
        return NotificationContent(
            NotificationType.incident,
            "Incident Assigned",
            f'Incident "{title}" has been assigned to you',
            "incident-assigned",
        )
    if topic == topics.INCIDENT_ESCALATED:
        reason = (data.get("entry") or {}).get("reason")
        message = f'Incident "{title}" has been escalated'
        if reason:
            message = f"{message}: {reason}"
        return NotificationContent(
            NotificationType.incident, "Incident Escalated", message, "incident-escalated"
        )
    raise ValueError(f"No notification content for topic {topic}")


class NotificationFanout:
    def __init__(
        self,
        bus: IEventBus,
        uow_scope: UnitOfWorkScope,
        gateway: RealtimeGateway,
        email_service: IEmailService,
    ):
        self.bus = bus
        self.uow_scope = uow_scope
        self.gateway = gateway
        self.email_service = email_service

    async def start(self) -> None:
        for topic in HANDLED_TOPICS:
            await self.bus.subscribe(topic, SUBSCRIBER_ID, self.handle)

    async def stop(self) -> None:
        await self.bus.unsubscribe_all(SUBSCRIBER_ID)

    async def handle(self, topic: str, data: Dict[str, Any]) -> List[Notification]:
        """Process one bus message; returns the notifications that were stored"""
        content = build_content(topic, data)
        priority = inherit_priority(data)
        recipients = await self.resolve_recipients(topic, data)

        created = []
        for user in recipients:
            notification = await self._persist(user, content, priority, data)
            if notification is None:
                continue
            created.append(notification)
            await self._push(notification)
            await self._email(user, notification, content)
        logger.info(
            "Fan-out %s: %d of %d recipients notified", topic, len(created), len(recipients)
        )
        return created

    async def resolve_recipients(self, topic: str, data: Mapping[str, Any]) -> List[User]:
        """Active users to notify, each at most once"""
        async with self.uow_scope() as uow:
            async with uow:
                if topic == topics.EVENT_CREATED:
                    users = await uow.users.list_by_roles(
                        [UserRole.admin, UserRole.supervisor]
                    )
                elif topic == topics.INCIDENT_CREATED:
                    users = await self._users(uow, [data.get("assignedTo")])
                    users += await uow.users.list_by_roles([UserRole.admin])
                elif topic == topics.INCIDENT_ASSIGNED:
                    users = await self._users(uow, [data.get("assignedTo")])
                elif topic == topics.INCIDENT_ESCALATED:
                    users = await self._users(uow, [data.get("escalatedTo")])
                    users += await uow.users.list_by_roles([UserRole.admin])
                else:
                    users = []
        return _distinct(users)

    async def _users(self, uow: UnitOfWork, raw_ids: Iterable[Any]) -> List[User]:
        users = []
        for raw_id in raw_ids:
            if not raw_id:
                continue
            try:
                user_id = UUID(str(raw_id))
            except ValueError:
                logger.warning("Ignoring malformed recipient id %r", raw_id)
                continue
            user = await uow.users.get_by_id(user_id)
            if user is not None and user.active:
                users.append(user)
        return users

    async def _persist(
        self,
        user: User,
        content: NotificationContent,
        priority: NotificationPriority,
        data: Dict[str, Any],
    ) -> Optional[Notification]:
        fields = {
            "type": content.type,
            "title": content.title,
            "message": _clip(content.message, MAX_MESSAGE_LENGTH),
        }
        errors = validate_notification(fields)
        if errors:
            logger.error("Dropping invalid notification for %s: %s", user.id, errors)
            return None

        notification = Notification(user_id=user.id, priority=priority, data=data, **fields)
        try:
            async with self.uow_scope() as uow:
                async with uow:
                    notification = await uow.notifications.create(notification)
                    await uow.commit()
        except Exception:
            logger.exception("Failed to store notification for user %s", user.id)
            return None
        return notification

    async def _push(self, notification: Notification) -> None:
        payload = NotificationResponse.from_entity(notification).model_dump(
            mode="json", by_alias=True
        )
        try:
            await self.gateway.send_to_user(notification.user_id, "notification", payload)
        except Exception:
            logger.warning(
                "UPSTREAM_UNAVAILABLE: realtime push of %s failed",
                notification.id,
                exc_info=True,
            )

    async def _email(
        self, user: User, notification: Notification, content: NotificationContent
    ) -> None:
        if not user.email or not wants_email(user.notification_preferences, content.type):
            return
        model = {
            "first_name": user.first_name or user.username,
            "title": notification.title,
            "message": notification.message,
            "priority": NotificationPriority(notification.priority).value,
            "notification_id": str(notification.id),
        }
        try:
            await self.email_service.send(user.email, content.template, model)
        except Exception:
            logger.warning(
                "UPSTREAM_UNAVAILABLE: email to %s failed", user.email, exc_info=True
            )


def _distinct(users: Iterable[User]) -> List[User]:
    seen = set()
    result = []
    for user in users:
        if user.id not in seen:
            seen.add(user.id)
            result.append(user)
    return result
