from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import not_found
from src.libs.result import Result, Return

from .dtos import IncidentResponse


class GetIncidentUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, incident_id: UUID) -> Result[IncidentResponse]:
        async with self.uow:
            incident = await self.uow.incidents.get_by_id(incident_id)
            if incident is None:
                return Return.err(not_found("incident"))
            return Return.ok(IncidentResponse.from_entity(incident))
