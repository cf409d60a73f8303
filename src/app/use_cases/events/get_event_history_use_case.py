from uuid import UUID

from src.app.repositories.history_repository import HistoryQuery
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor, can_edit_entity
from src.domain.entities import EntityType
from src.domain.errors import forbidden, not_found
from src.domain.timeline import to_history_item
from src.libs.result import Result, Return

from .dtos import EventHistoryResponse


class GetEventHistoryUseCase:
    """
    History of one event, newest first.

    Business Rules:
    - Only the creator or an admin/system actor may read it
    - Filters: user, action, created time range; paginated by skip/limit
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor: Actor, event_id: UUID, query: HistoryQuery
    ) -> Result[EventHistoryResponse]:
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id)
            if event is None:
                return Return.err(not_found("event"))
            if not can_edit_entity(event, actor):
                return Return.err(
                    forbidden("Only the creator or an admin can view this event's history")
                )

            scoped = query.model_copy(
                update={"entity_type": EntityType.event, "entity_id": event.id}
            )
            entries, total = await self.uow.history.find(scoped)
            return Return.ok(
                EventHistoryResponse(
                    items=[to_history_item(e) for e in entries],
                    total=total,
                    skip=query.skip,
                    limit=query.limit,
                )
            )
