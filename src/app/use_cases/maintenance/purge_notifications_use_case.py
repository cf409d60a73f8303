from datetime import timedelta
from typing import Callable

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.errors import field_error, validation_failed
from src.libs.result import Result, Return

from .dtos import PurgeResponse


class PurgeNotificationsUseCase:
    """Deletes archived notifications older than the retention window"""

    def __init__(self, uow: UnitOfWork, clock: Callable = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, retention_days: int) -> Result[PurgeResponse]:
        if retention_days < 1:
            return Return.err(
                validation_failed(
                    [field_error("retentionDays", "Retention must be at least one day")]
                )
            )

        cutoff = self.clock() - timedelta(days=retention_days)
        async with self.uow:
            deleted = await self.uow.notifications.delete_archived_older_than(cutoff)
            await self.uow.commit()
        return Return.ok(PurgeResponse(deleted=deleted, cutoff=cutoff))
