"""
Delete Event Use Case

Removes an event together with its history rows. The DELETED entry is not
stored (it would outlive its parent) but travels in the events.removed
payload.
"""

from typing import Callable
from uuid import UUID

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import bus_payload, publish
from src.domain import topics
from src.domain.authorization import Actor, can_edit_entity
from src.domain.base import utcnow
from src.domain.entities import EntityType
from src.domain.errors import forbidden, not_found
from src.domain.state_machine import plan_event_removal
from src.libs.result import Result, Return

from .dtos import EventResponse


class DeleteEventUseCase:
    """
    Business Rules:
    - Only the creator or an admin/system actor may delete
    - Never while ACTIVE
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(self, actor: Actor, event_id: UUID) -> Result[EventResponse]:
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id)
            if event is None:
                return Return.err(not_found("event"))
            if not can_edit_entity(event, actor):
                return Return.err(forbidden("Only the creator or an admin can delete this event"))

            plan = plan_event_removal(event, actor.id, self.clock())
            if plan.is_err():
                return Return.err(plan.error)
            entry = plan.value

            response = EventResponse.from_entity(event)
            await self.uow.history.delete_for_entity(EntityType.event, event.id)
            await self.uow.events.delete(event)
            await self.uow.commit()

        await publish(self.bus, topics.EVENT_REMOVED, bus_payload(response, entry, actor.id))
        return Return.ok(response)
