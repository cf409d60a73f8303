from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.services.notification_fanout import (
    NotificationFanout,
    build_content,
    inherit_priority,
    wants_email,
)
from src.domain import topics
from src.domain.entities import NotificationPriority, NotificationType, User, UserRole


def make_user(role=UserRole.user, active=True, email_pref=False):
    return User(
        id=uuid4(),
        username=f"user_{uuid4().hex[:8]}",
        email=f"{uuid4().hex[:8]}@example.com",
        password_hash="x",
        role=role,
        active=active,
        notification_preferences={"email": email_pref},
    )


@pytest.fixture
def gateway():
    gateway = MagicMock()
    gateway.send_to_user = AsyncMock(return_value=1)
    return gateway


@pytest.fixture
def email_service():
    service = MagicMock()
    service.send = AsyncMock()
    return service


@pytest.fixture
def fanout(mock_uow, mock_bus, gateway, email_service):
    @asynccontextmanager
    async def scope():
        yield mock_uow

    return NotificationFanout(mock_bus, scope, gateway, email_service)


def users_by_id(mock_uow, *users):
    index = {u.id: u for u in users}
    mock_uow.users.get_by_id.side_effect = lambda user_id: index.get(user_id)


# ============================================================================
# Content and preferences
# ============================================================================


def test_wants_email_single_switch_and_per_class_map():
    assert wants_email({"email": True}, NotificationType.incident)
    assert not wants_email({"email": False}, NotificationType.incident)
    assert not wants_email({}, NotificationType.event)
    assert not wants_email(None, NotificationType.event)

    per_class = {"email": {"incident": True, "event": False}}
    assert wants_email(per_class, NotificationType.incident)
    assert not wants_email(per_class, NotificationType.event)
    assert not wants_email(per_class, NotificationType.system)


def test_inherit_priority_lowercases_or_defaults():
    assert inherit_priority({"priority": "CRITICAL"}) == NotificationPriority.critical
    assert inherit_priority({"priority": "bogus"}) == NotificationPriority.medium
    assert inherit_priority({}) == NotificationPriority.medium


def test_escalation_content_includes_reason():
    content = build_content(
        topics.INCIDENT_ESCALATED,
        {"title": "Gas leak", "entry": {"reason": "Needs fire service"}},
    )

    assert content.title == "Incident Escalated"
    assert content.message == 'Incident "Gas leak" has been escalated: Needs fire service'
    assert content.template == "incident-escalated"


def test_unhandled_topic_has_no_content():
    with pytest.raises(ValueError):
        build_content(topics.EVENT_UPDATED, {})


# ============================================================================
# Fan-out
# ============================================================================


async def test_start_subscribes_handled_topics(fanout, mock_bus):
    await fanout.start()

    subscribed = [c.args[0] for c in mock_bus.subscribe.call_args_list]
    assert subscribed == [
        topics.EVENT_CREATED,
        topics.INCIDENT_CREATED,
        topics.INCIDENT_ASSIGNED,
        topics.INCIDENT_ESCALATED,
    ]


async def test_event_created_notifies_admins_and_supervisors(
    fanout, mock_uow, gateway, email_service
):
    admin = make_user(UserRole.admin, email_pref=True)
    supervisor = make_user(UserRole.supervisor)
    mock_uow.users.list_by_roles.return_value = [admin, supervisor]

    created = await fanout.handle(
        topics.EVENT_CREATED, {"name": "Harbour Festival", "priority": "HIGH"}
    )

    mock_uow.users.list_by_roles.assert_called_once_with(
        [UserRole.admin, UserRole.supervisor]
    )
    assert {n.user_id for n in created} == {admin.id, supervisor.id}
    assert all(n.priority == NotificationPriority.high for n in created)
    assert created[0].message == 'Event "Harbour Festival" has been created'
    assert gateway.send_to_user.call_count == 2
    # only the admin opted in to email
    email_service.send.assert_called_once()
    assert email_service.send.call_args.args[0] == admin.email
    assert email_service.send.call_args.args[1] == "event-created"


async def test_escalation_target_who_is_admin_is_notified_once(fanout, mock_uow):
    admin_target = make_user(UserRole.admin)
    other_admin = make_user(UserRole.admin)
    users_by_id(mock_uow, admin_target)
    mock_uow.users.list_by_roles.return_value = [admin_target, other_admin]

    created = await fanout.handle(
        topics.INCIDENT_ESCALATED,
        {
            "title": "Gas leak",
            "escalatedTo": str(admin_target.id),
            "entry": {"reason": "Out of hours"},
        },
    )

    assert [n.user_id for n in created] == [admin_target.id, other_admin.id]


async def test_assignment_notifies_only_the_assignee(fanout, mock_uow):
    assignee = make_user()
    users_by_id(mock_uow, assignee)

    created = await fanout.handle(
        topics.INCIDENT_ASSIGNED, {"title": "Lost child", "assignedTo": str(assignee.id)}
    )

    assert [n.user_id for n in created] == [assignee.id]
    assert created[0].title == "Incident Assigned"
    mock_uow.users.list_by_roles.assert_not_called()


async def test_inactive_assignee_is_skipped(fanout, mock_uow):
    assignee = make_user(active=False)
    users_by_id(mock_uow, assignee)

    created = await fanout.handle(
        topics.INCIDENT_ASSIGNED, {"title": "Lost child", "assignedTo": str(assignee.id)}
    )

    assert created == []
    mock_uow.notifications.create.assert_not_called()


async def test_incident_created_without_assignee_goes_to_admins(fanout, mock_uow):
    admin = make_user(UserRole.admin)
    mock_uow.users.list_by_roles.return_value = [admin]

    created = await fanout.handle(
        topics.INCIDENT_CREATED, {"title": "Fence down", "assignedTo": None}
    )

    assert [n.user_id for n in created] == [admin.id]
    mock_uow.users.get_by_id.assert_not_called()


async def test_persist_failure_does_not_stop_other_recipients(fanout, mock_uow, gateway):
    first, second = make_user(UserRole.admin), make_user(UserRole.supervisor)
    mock_uow.users.list_by_roles.return_value = [first, second]
    calls = []

    async def create(notification):
        calls.append(notification)
        if len(calls) == 1:
            raise RuntimeError("database is locked")
        return notification

    mock_uow.notifications.create.side_effect = create

    created = await fanout.handle(topics.EVENT_CREATED, {"name": "Marathon"})

    assert [n.user_id for n in created] == [second.id]
    gateway.send_to_user.assert_called_once()


async def test_delivery_failures_never_undo_persistence(
    fanout, mock_uow, gateway, email_service
):
    admin = make_user(UserRole.admin, email_pref=True)
    mock_uow.users.list_by_roles.return_value = [admin]
    gateway.send_to_user.side_effect = ConnectionError("gone")
    email_service.send.side_effect = OSError("smtp down")

    created = await fanout.handle(topics.EVENT_CREATED, {"name": "Marathon"})

    assert len(created) == 1
    mock_uow.commit.assert_called_once()
