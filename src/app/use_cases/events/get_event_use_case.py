from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import not_found
from src.libs.result import Result, Return

from .dtos import EventResponse


class GetEventUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, event_id: UUID) -> Result[EventResponse]:
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id)
            if event is None:
                return Return.err(not_found("event"))
            return Return.ok(EventResponse.from_entity(event))
