from datetime import datetime, timedelta
from unittest.mock import call
from uuid import uuid4

import pytest

from src.app.repositories.notification_repository import NotificationQuery
from src.app.use_cases.maintenance import PurgeHistoryUseCase, PurgeNotificationsUseCase
from src.app.use_cases.notifications import (
    ArchiveNotificationUseCase,
    CountUnreadNotificationsUseCase,
    DeleteNotificationUseCase,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    UpdateNotificationPreferencesUseCase,
    UpdatePreferencesCommand,
)
from src.domain.entities import (
    EntityType,
    Notification,
    NotificationStatus,
    NotificationType,
    User,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)


def make_notification(user_id, status=NotificationStatus.unread):
    return Notification(
        user_id=user_id,
        type=NotificationType.incident,
        title="Incident Assigned",
        message="Incident has been assigned to you",
        status=status,
        created_at=NOW,
    )


# ============================================================================
# Inbox
# ============================================================================


@pytest.mark.asyncio
async def test_list_is_scoped_to_caller(mock_uow, user_actor):
    query = NotificationQuery(status=[NotificationStatus.unread], user_id=uuid4())

    result = await ListNotificationsUseCase(mock_uow).execute(user_actor, query)

    assert result.is_ok()
    scoped = mock_uow.notifications.find.call_args.args[0]
    assert scoped.user_id == user_actor.id
    assert scoped.status == [NotificationStatus.unread]


@pytest.mark.asyncio
async def test_count_unread(mock_uow, user_actor):
    mock_uow.notifications.count.return_value = 3

    result = await CountUnreadNotificationsUseCase(mock_uow).execute(user_actor)

    assert result.value.count == 3
    mock_uow.notifications.count.assert_called_once_with(
        user_actor.id, NotificationStatus.unread
    )


@pytest.mark.asyncio
async def test_mark_read_sets_read_at(mock_uow, clock, user_actor):
    notification = make_notification(user_actor.id)
    mock_uow.notifications.get_by_id.return_value = notification

    result = await MarkNotificationReadUseCase(mock_uow, clock).execute(
        user_actor, notification.id
    )

    assert result.is_ok()
    assert result.value.status == NotificationStatus.read
    assert result.value.read_at == NOW
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_archive_read_notification(mock_uow, clock, user_actor):
    notification = make_notification(user_actor.id, NotificationStatus.read)
    mock_uow.notifications.get_by_id.return_value = notification

    result = await ArchiveNotificationUseCase(mock_uow, clock).execute(
        user_actor, notification.id
    )

    assert result.is_ok()
    assert result.value.status == NotificationStatus.archived


@pytest.mark.asyncio
async def test_archived_notification_cannot_go_back(mock_uow, clock, user_actor):
    notification = make_notification(user_actor.id, NotificationStatus.archived)
    mock_uow.notifications.get_by_id.return_value = notification

    result = await MarkNotificationReadUseCase(mock_uow, clock).execute(
        user_actor, notification.id
    )

    assert result.is_err()
    assert result.error.code == "INVALID_TRANSITION"
    mock_uow.notifications.update.assert_not_called()


@pytest.mark.asyncio
async def test_someone_elses_notification_is_forbidden(mock_uow, clock, user_actor):
    mock_uow.notifications.get_by_id.return_value = make_notification(uuid4())

    result = await MarkNotificationReadUseCase(mock_uow, clock).execute(user_actor, uuid4())

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_admin_may_delete_any_notification(mock_uow, admin_actor):
    notification = make_notification(uuid4())
    mock_uow.notifications.get_by_id.return_value = notification

    result = await DeleteNotificationUseCase(mock_uow).execute(admin_actor, notification.id)

    assert result.is_ok()
    assert result.value.status == "deleted"
    mock_uow.notifications.delete.assert_called_once_with(notification)


@pytest.mark.asyncio
async def test_missing_notification(mock_uow, user_actor):
    mock_uow.notifications.get_by_id.return_value = None

    result = await DeleteNotificationUseCase(mock_uow).execute(user_actor, uuid4())

    assert result.is_err()
    assert result.error.code == "NOTIFICATION_NOT_FOUND"


# ============================================================================
# Preferences
# ============================================================================


@pytest.mark.asyncio
async def test_update_preferences_keeps_other_keys(mock_uow, clock, user_actor):
    user = User(
        id=user_actor.id,
        username="dana",
        email="dana@example.com",
        password_hash="x" * 60,
        notification_preferences={"email": False, "digest": "daily"},
    )
    mock_uow.users.get_by_id.return_value = user

    result = await UpdateNotificationPreferencesUseCase(mock_uow, clock).execute(
        user_actor, UpdatePreferencesCommand(email={"incident": True})
    )

    assert result.is_ok()
    assert result.value.email == {"incident": True}
    assert user.notification_preferences == {"email": {"incident": True}, "digest": "daily"}
    mock_uow.users.update.assert_called_once_with(user)


# ============================================================================
# Retention
# ============================================================================


@pytest.mark.asyncio
async def test_purge_history_cutoff(mock_uow, clock):
    mock_uow.history.delete_older_than.return_value = 7

    result = await PurgeHistoryUseCase(mock_uow, clock).execute(90, EntityType.incident)

    assert result.is_ok()
    assert result.value.deleted == 7
    assert result.value.cutoff == NOW - timedelta(days=90)
    mock_uow.history.delete_older_than.assert_called_once_with(
        NOW - timedelta(days=90), EntityType.incident
    )


@pytest.mark.asyncio
async def test_unscoped_history_purge_keeps_event_history_longer(mock_uow, clock):
    mock_uow.history.delete_older_than.side_effect = [2, 3]

    result = await PurgeHistoryUseCase(mock_uow, clock).execute(
        90, event_retention_days=365
    )

    assert result.is_ok()
    assert result.value.deleted == 5
    assert result.value.cutoffs == {
        "event": NOW - timedelta(days=365),
        "incident": NOW - timedelta(days=90),
    }
    assert mock_uow.history.delete_older_than.call_args_list == [
        call(NOW - timedelta(days=365), EntityType.event),
        call(NOW - timedelta(days=90), EntityType.incident),
    ]
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_purge_notifications_rejects_zero_days(mock_uow, clock):
    result = await PurgeNotificationsUseCase(mock_uow, clock).execute(0)

    assert result.is_err()
    assert result.error.code == "VALIDATION_FAILED"
    mock_uow.notifications.delete_archived_older_than.assert_not_called()
