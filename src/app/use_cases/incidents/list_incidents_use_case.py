from src.app.repositories.incident_repository import IncidentQuery
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return

from .dtos import IncidentListResponse, IncidentResponse


class ListIncidentsUseCase:
    """Filtered, paginated incident listing open to any authenticated actor"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, query: IncidentQuery) -> Result[IncidentListResponse]:
        async with self.uow:
            incidents, total = await self.uow.incidents.find(query)
            return Return.ok(
                IncidentListResponse(
                    items=[IncidentResponse.from_entity(i) for i in incidents],
                    total=total,
                    skip=query.skip,
                    limit=query.limit,
                )
            )
