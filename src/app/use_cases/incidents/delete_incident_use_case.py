"""
Delete Incident Use Case

Removes a RESOLVED or CLOSED incident together with its history rows.
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
from src.domain.state_machine import plan_incident_removal
from src.libs.result import Result, Return

from .dtos import IncidentResponse


class DeleteIncidentUseCase:
    """
    Business Rules:
    - Only the creator or an admin/system actor may delete
    - Only from RESOLVED or CLOSED
    - The DELETED entry travels in the incidents.removed payload
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(self, actor: Actor, incident_id: UUID) -> Result[IncidentResponse]:
        async with self.uow:
            incident = await self.uow.incidents.get_by_id(incident_id)
            if incident is None:
                return Return.err(not_found("incident"))
            if not can_edit_entity(incident, actor):
                return Return.err(
                    forbidden("Only the creator or an admin can delete this incident")
                )

            plan = plan_incident_removal(incident, actor.id, self.clock())
            if plan.is_err():
                return Return.err(plan.error)
            entry = plan.value

            response = IncidentResponse.from_entity(incident)
            await self.uow.history.delete_for_entity(EntityType.incident, incident.id)
            await self.uow.incidents.delete(incident)
            await self.uow.commit()

        await publish(self.bus, topics.INCIDENT_REMOVED, bus_payload(response, entry, actor.id))
        return Return.ok(response)
