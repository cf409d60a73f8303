from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor, can_work_incident
from src.domain.entities import EntityType
from src.domain.errors import forbidden, not_found
from src.domain.timeline import to_timeline_item
from src.libs.result import Result, Return

from .dtos import TimelineResponse


class GetIncidentTimelineUseCase:
    """
    Timeline of one incident, oldest first.

    Read from the history log, which is the source of truth for the
    timeline embedded in the incident.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, actor: Actor, incident_id: UUID) -> Result[TimelineResponse]:
        async with self.uow:
            incident = await self.uow.incidents.get_by_id(incident_id)
            if incident is None:
                return Return.err(not_found("incident"))
            if not can_work_incident(incident, actor):
                return Return.err(forbidden("Not allowed to view this incident's timeline"))

            entries = await self.uow.history.list_for_entity(EntityType.incident, incident.id)
            return Return.ok(
                TimelineResponse(
                    incident_id=incident.id,
                    items=[to_timeline_item(e) for e in entries],
                )
            )
