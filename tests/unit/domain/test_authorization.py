from uuid import uuid4

import pytest

from src.domain.authorization import (
    Actor,
    can_access_notification,
    can_edit_entity,
    can_work_incident,
    has_role,
    is_admin_or_system,
)
from src.domain.entities import Incident, Notification, NotificationType, UserRole


def actor(role=UserRole.user):
    return Actor(id=uuid4(), role=role)


@pytest.mark.parametrize(
    "role,required,expected",
    [
        (UserRole.system, UserRole.admin, True),
        (UserRole.admin, UserRole.supervisor, True),
        (UserRole.supervisor, UserRole.supervisor, True),
        (UserRole.user, UserRole.supervisor, False),
        (UserRole.supervisor, UserRole.admin, False),
    ],
)
def test_has_role_is_hierarchical(role, required, expected):
    assert has_role(actor(role), required) is expected


def test_has_role_unknown_role_never_matches():
    assert not has_role(actor(UserRole.admin), "owner")


def test_is_admin_or_system():
    assert is_admin_or_system(actor(UserRole.admin))
    assert is_admin_or_system(actor(UserRole.system))
    assert not is_admin_or_system(actor(UserRole.supervisor))


def test_creator_and_admin_can_edit():
    creator = actor()
    incident = Incident(title="Power outage", created_by=creator.id)

    assert can_edit_entity(incident, creator)
    assert can_edit_entity(incident, actor(UserRole.admin))
    assert not can_edit_entity(incident, actor())
    assert not can_edit_entity(incident, actor(UserRole.supervisor))


def test_assignee_and_escalatee_can_work_incident_but_not_edit():
    assignee, escalatee = actor(), actor()
    incident = Incident(
        title="Power outage",
        created_by=uuid4(),
        assigned_to=assignee.id,
        escalated_to=escalatee.id,
    )

    assert can_work_incident(incident, assignee)
    assert can_work_incident(incident, escalatee)
    assert not can_edit_entity(incident, assignee)
    assert not can_work_incident(incident, actor())


def test_notification_access_is_recipient_or_admin():
    recipient = actor()
    notification = Notification(
        user_id=recipient.id,
        type=NotificationType.system,
        title="Maintenance",
        message="Planned downtime tonight",
    )

    assert can_access_notification(notification, recipient)
    assert can_access_notification(notification, actor(UserRole.system))
    assert not can_access_notification(notification, actor(UserRole.supervisor))
