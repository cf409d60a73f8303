"""
Create Event Use Case

Creates a DRAFT event owned by the caller and records its CREATED entry.
"""

from typing import Callable

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import bus_payload, publish
from src.domain import topics
from src.domain.authorization import Actor
from src.domain.base import utcnow
from src.domain.entities import EntityType, Event, EventStatus, HistoryAction
from src.domain.errors import validation_failed
from src.domain.timeline import record
from src.domain.validation import validate_event
from src.libs.result import Result, Return

from .dtos import CreateEventCommand, EventResponse


class CreateEventUseCase:
    """
    Business Rules:
    - Any authenticated actor may create; the actor becomes created_by
    - Status always starts DRAFT
    - Publishes events.created after commit
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(self, actor: Actor, command: CreateEventCommand) -> Result[EventResponse]:
        fields = command.to_fields()
        errors = validate_event(fields)
        if errors:
            return Return.err(validation_failed(errors))

        now = self.clock()
        async with self.uow:
            event = Event(
                **fields,
                status=EventStatus.DRAFT,
                created_by=actor.id,
                created_at=now,
                updated_at=now,
            )
            entry = record(
                EntityType.event,
                event.id,
                HistoryAction.CREATED,
                actor.id,
                now,
                to_status=EventStatus.DRAFT,
            )
            event = await self.uow.events.create(event)
            await self.uow.history.create(entry)
            await self.uow.commit()

        response = EventResponse.from_entity(event)
        await publish(self.bus, topics.EVENT_CREATED, bus_payload(response, entry, actor.id))
        return Return.ok(response)
