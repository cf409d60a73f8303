"""
Purge History Use Case

Retention job for the history log. Deletes entries older than the
retention window; scoped to one entity type when given. An unscoped purge
walks every entity type, and event history may carry its own window.
Entries of incidents that still exist are kept, since the incident
timeline is read from them.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EntityType
from src.domain.errors import field_error, validation_failed
from src.libs.result import Result, Return

from .dtos import PurgeResponse


class PurgeHistoryUseCase:
    def __init__(self, uow: UnitOfWork, clock: Callable = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self,
        retention_days: int,
        entity_type: Optional[EntityType] = None,
        event_retention_days: Optional[int] = None,
    ) -> Result[PurgeResponse]:
        errors = []
        if retention_days < 1:
            errors.append(field_error("retentionDays", "Retention must be at least one day"))
        if event_retention_days is not None and event_retention_days < 1:
            errors.append(
                field_error("eventRetentionDays", "Retention must be at least one day")
            )
        if errors:
            return Return.err(validation_failed(errors))

        now = self.clock()
        cutoff = now - timedelta(days=retention_days)
        if entity_type is not None:
            async with self.uow:
                deleted = await self.uow.history.delete_older_than(cutoff, entity_type)
                await self.uow.commit()
            return Return.ok(PurgeResponse(deleted=deleted, cutoff=cutoff))

        cutoffs: Dict[EntityType, datetime] = {kind: cutoff for kind in EntityType}
        if event_retention_days is not None:
            cutoffs[EntityType.event] = now - timedelta(days=event_retention_days)

        deleted = 0
        async with self.uow:
            for kind, kind_cutoff in cutoffs.items():
                deleted += await self.uow.history.delete_older_than(kind_cutoff, kind)
            await self.uow.commit()
        return Return.ok(
            PurgeResponse(
                deleted=deleted,
                cutoff=cutoff,
                cutoffs={kind.value: value for kind, value in cutoffs.items()},
            )
        )
