from abc import ABC, abstractmethod
from typing import AsyncContextManager, Callable

from src.app.repositories.event_repository import IEventRepository
from src.app.repositories.history_repository import IHistoryRepository
from src.app.repositories.incident_repository import IIncidentRepository
from src.app.repositories.notification_repository import INotificationRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    events: IEventRepository
    incidents: IIncidentRepository
    notifications: INotificationRepository
    history: IHistoryRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


# Opens a fresh session-backed UnitOfWork for work outside a request
# (bus consumers, maintenance jobs): `async with scope() as uow:`
UnitOfWorkScope = Callable[[], AsyncContextManager[UnitOfWork]]
