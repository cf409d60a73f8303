from src.app.repositories.event_repository import EventQuery
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return

from .dtos import EventListResponse, EventResponse


class ListEventsUseCase:
    """Filtered, paginated event listing open to any authenticated actor"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, query: EventQuery) -> Result[EventListResponse]:
        async with self.uow:
            events, total = await self.uow.events.find(query)
            return Return.ok(
                EventListResponse(
                    items=[EventResponse.from_entity(e) for e in events],
                    total=total,
                    skip=query.skip,
                    limit=query.limit,
                )
            )
