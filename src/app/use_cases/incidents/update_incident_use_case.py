"""
Update Incident Use Case

Field edits and status transitions requested through PUT /incidents/{id}.
"""

from typing import Callable
from uuid import UUID

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor, can_work_incident
from src.domain.base import utcnow
from src.domain.errors import forbidden, not_found
from src.domain.state_machine import plan_incident_update
from src.libs.result import Result, Return

from ._apply import announce, apply_transition
from .dtos import IncidentResponse, UpdateIncidentCommand


class UpdateIncidentUseCase:
    """
    Business Rules:
    - Creator, assignee, escalation target or admin/system may update
    - Closed incidents are never modified
    - A status in the request must follow the incident transition table
    - Exactly one timeline entry per successful write
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(
        self, actor: Actor, incident_id: UUID, command: UpdateIncidentCommand
    ) -> Result[IncidentResponse]:
        async with self.uow:
            incident = await self.uow.incidents.get_by_id(incident_id)
            if incident is None:
                return Return.err(not_found("incident"))
            if not can_work_incident(incident, actor):
                return Return.err(forbidden("Not allowed to update this incident"))

            patch = command.to_patch()
            if patch.get("event_id") is not None:
                if await self.uow.events.get_by_id(patch["event_id"]) is None:
                    return Return.err(not_found("event"))

            plan = plan_incident_update(incident, patch, actor.id, self.clock())
            if plan.is_err():
                return Return.err(plan.error)
            transition = plan.value
            if transition.entry is None:
                return Return.ok(IncidentResponse.from_entity(incident))

            result = await apply_transition(self.uow, incident, transition)
            if result.is_err():
                return result
            await self.uow.commit()

        return Return.ok(await announce(self.bus, result.value, transition, actor))
