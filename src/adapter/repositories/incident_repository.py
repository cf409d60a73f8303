from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories._query import (
    count_rows,
    ordered,
    priority_rank,
    where_in,
    where_range,
)
from src.app.repositories.incident_repository import IIncidentRepository, IncidentQuery
from src.domain.entities import Incident


class IncidentRepository(IIncidentRepository):
    """Incident repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, incident: Incident) -> Incident:
        self.session.add(incident)
        await self.session.flush()
        await self.session.refresh(incident)
        return incident

    async def get_by_id(self, incident_id: UUID) -> Optional[Incident]:
        # populate_existing: reads after apply_changes must see the stored row
        stmt = (
            select(Incident)
            .where(Incident.id == incident_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find(self, query: IncidentQuery) -> Tuple[List[Incident], int]:
        stmt = select(Incident)
        stmt = where_in(stmt, Incident.status, query.status)
        stmt = where_in(stmt, Incident.type, query.type)
        stmt = where_in(stmt, Incident.priority, query.priority)
        if query.event_id is not None:
            stmt = stmt.where(Incident.event_id == query.event_id)
        if query.created_by is not None:
            stmt = stmt.where(Incident.created_by == query.created_by)
        if query.assigned_to is not None:
            stmt = stmt.where(Incident.assigned_to == query.assigned_to)
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(
                or_(
                    col(Incident.title).ilike(pattern),
                    col(Incident.description).ilike(pattern),
                )
            )
        stmt = where_range(stmt, Incident.created_at, query.created_from, query.created_to)

        total = await count_rows(self.session, stmt)

        sort_column = (
            priority_rank(Incident.priority)
            if query.sort_by == "priority"
            else getattr(Incident, query.sort_by)
        )
        stmt = ordered(stmt, sort_column, query.sort_order)
        stmt = stmt.offset(query.skip).limit(query.limit)
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def apply_changes(
        self, incident_id: UUID, expected_version: int, changes: Dict[str, Any]
    ) -> bool:
        stmt = (
            update(Incident)
            .where(
                col(Incident.id) == incident_id,
                col(Incident.version) == expected_version,
            )
            .values(**changes, version=expected_version + 1)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, incident: Incident) -> None:
        await self.session.delete(incident)
        await self.session.flush()
