from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.event_repository import EventRepository
from src.adapter.repositories.history_repository import HistoryRepository
from src.adapter.repositories.incident_repository import IncidentRepository
from src.adapter.repositories.notification_repository import NotificationRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.events = EventRepository(self.session)
        self.incidents = IncidentRepository(self.session)
        self.notifications = NotificationRepository(self.session)
        self.history = HistoryRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
