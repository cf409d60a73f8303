"""
Create Incident Use Case

Reports a NEW incident with its single CREATED timeline entry.
"""

from typing import Callable

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import bus_payload, publish
from src.domain import topics
from src.domain.authorization import Actor
from src.domain.base import utcnow
from src.domain.entities import EntityType, HistoryAction, Incident, IncidentStatus
from src.domain.errors import field_error, not_found, validation_failed
from src.domain.timeline import record, to_timeline_item
from src.domain.validation import validate_incident
from src.libs.result import Result, Return

from .dtos import CreateIncidentCommand, IncidentResponse


class CreateIncidentUseCase:
    """
    Business Rules:
    - Any authenticated actor may report; the actor becomes created_by
    - EMERGENCY incidents must carry CRITICAL priority
    - A referenced event must exist; a pre-set assignee must be an active user
    - Entity, timeline and history row are written in one transaction
    - Publishes incidents.created after commit
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(
        self, actor: Actor, command: CreateIncidentCommand
    ) -> Result[IncidentResponse]:
        fields = command.to_fields()
        errors = validate_incident(fields)
        if errors:
            return Return.err(validation_failed(errors))

        now = self.clock()
        async with self.uow:
            if command.event_id is not None:
                if await self.uow.events.get_by_id(command.event_id) is None:
                    return Return.err(not_found("event"))
            if command.assigned_to is not None:
                assignee = await self.uow.users.get_by_id(command.assigned_to)
                if assignee is None or not assignee.active:
                    return Return.err(
                        validation_failed(
                            [field_error("assignedTo", "Assignee must be an active user")]
                        )
                    )

            incident = Incident(
                **fields,
                status=IncidentStatus.NEW,
                created_by=actor.id,
                created_at=now,
                updated_at=now,
            )
            entry = record(
                EntityType.incident,
                incident.id,
                HistoryAction.CREATED,
                actor.id,
                now,
                to_status=IncidentStatus.NEW,
            )
            incident.timeline = [to_timeline_item(entry)]
            incident = await self.uow.incidents.create(incident)
            await self.uow.history.create(entry)
            await self.uow.commit()

        response = IncidentResponse.from_entity(incident)
        await publish(self.bus, topics.INCIDENT_CREATED, bus_payload(response, entry, actor.id))
        return Return.ok(response)
