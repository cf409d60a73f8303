from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.domain.authorization import Actor
from src.domain.entities import UserRole

NOW = datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.get_by_username = AsyncMock(return_value=None)
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.list_by_roles = AsyncMock(return_value=[])
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.events = MagicMock()
    uow.events.create = AsyncMock(side_effect=lambda event: event)
    uow.events.get_by_id = AsyncMock()
    uow.events.find = AsyncMock(return_value=([], 0))
    uow.events.apply_changes = AsyncMock(return_value=True)
    uow.events.delete = AsyncMock()

    uow.incidents = MagicMock()
    uow.incidents.create = AsyncMock(side_effect=lambda incident: incident)
    uow.incidents.get_by_id = AsyncMock()
    uow.incidents.find = AsyncMock(return_value=([], 0))
    uow.incidents.apply_changes = AsyncMock(return_value=True)
    uow.incidents.delete = AsyncMock()

    uow.notifications = MagicMock()
    uow.notifications.create = AsyncMock(side_effect=lambda n: n)
    uow.notifications.get_by_id = AsyncMock()
    uow.notifications.find = AsyncMock(return_value=([], 0))
    uow.notifications.count = AsyncMock(return_value=0)
    uow.notifications.update = AsyncMock(side_effect=lambda n: n)
    uow.notifications.delete = AsyncMock()
    uow.notifications.delete_archived_older_than = AsyncMock(return_value=0)

    uow.history = MagicMock()
    uow.history.create = AsyncMock(side_effect=lambda entry: entry)
    uow.history.find = AsyncMock(return_value=([], 0))
    uow.history.list_for_entity = AsyncMock(return_value=[])
    uow.history.delete_for_entity = AsyncMock(return_value=0)
    uow.history.delete_older_than = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def mock_bus():
    bus = MagicMock()
    bus.publish = AsyncMock()
    bus.subscribe = AsyncMock()
    bus.unsubscribe = AsyncMock()
    bus.unsubscribe_all = AsyncMock()
    return bus


@pytest.fixture
def clock():
    return lambda: NOW


def make_actor(role: UserRole = UserRole.user) -> Actor:
    return Actor(id=uuid4(), role=role)


@pytest.fixture
def user_actor():
    return make_actor(UserRole.user)


@pytest.fixture
def admin_actor():
    return make_actor(UserRole.admin)
