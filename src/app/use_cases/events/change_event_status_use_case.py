"""
Change Event Status Use Case

Moves an event along its lifecycle (see EVENT_TRANSITIONS).
"""

from typing import Callable
from uuid import UUID

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import bus_payload, publish
from src.domain.authorization import Actor, can_edit_entity
from src.domain.base import utcnow
from src.domain.errors import conflict, forbidden, not_found
from src.domain.state_machine import plan_event_transition
from src.libs.result import Result, Return

from .dtos import ChangeEventStatusCommand, EventResponse


class ChangeEventStatusUseCase:
    """
    Business Rules:
    - Only the creator or an admin/system actor may change status
    - Target must be listed for the current status; same status is rejected
    - Exactly one STATUS_CHANGE entry per successful transition
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(
        self, actor: Actor, event_id: UUID, command: ChangeEventStatusCommand
    ) -> Result[EventResponse]:
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id)
            if event is None:
                return Return.err(not_found("event"))
            if not can_edit_entity(event, actor):
                return Return.err(
                    forbidden("Only the creator or an admin can change this event's status")
                )

            plan = plan_event_transition(event, command.status, actor.id, self.clock())
            if plan.is_err():
                return Return.err(plan.error)
            transition = plan.value

            applied = await self.uow.events.apply_changes(
                event.id, event.version, transition.changes
            )
            if not applied:
                return Return.err(conflict("event"))
            await self.uow.history.create(transition.entry)
            event = await self.uow.events.get_by_id(event_id)
            await self.uow.commit()

        response = EventResponse.from_entity(event)
        await publish(self.bus, transition.topic, bus_payload(response, transition.entry, actor.id))
        return Return.ok(response)
