"""
Maintenance API Routes - Retention Jobs

Called by operators and schedulers, not by end users.
Authentication is via Admin API Key, not user JWTs.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.api.error import to_http_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.maintenance import (
    PurgeHistoryUseCase,
    PurgeNotificationsUseCase,
    PurgeResponse,
)
from src.domain.entities import EntityType
from src.depends import get_config, get_unit_of_work

router = APIRouter(prefix="/admin/maintenance", tags=["Maintenance"])


@router.post(
    "/history/purge",
    status_code=status.HTTP_200_OK,
    response_model=PurgeResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def purge_history(
    retention_days: Optional[int] = Query(None, alias="retentionDays"),
    entity_type: Optional[EntityType] = Query(None, alias="entityType"),
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
):
    """
    Delete history entries older than the retention period

    Defaults: EVENT_HISTORY_RETENTION_DAYS for entityType=event,
    HISTORY_RETENTION_DAYS otherwise. Without entityType or retentionDays
    each entity type gets its own default window. History of incidents that
    still exist is never purged.

    Requires: X-Admin-API-Key header

    Raises:
        - 400 Bad Request: retentionDays below one
        - 401 Unauthorized: Missing or invalid admin API key
    """
    event_retention_days = None
    if retention_days is None:
        if entity_type is None:
            event_retention_days = config.EVENT_HISTORY_RETENTION_DAYS
        retention_days = (
            config.EVENT_HISTORY_RETENTION_DAYS
            if entity_type == EntityType.event
            else config.HISTORY_RETENTION_DAYS
        )
    result = await PurgeHistoryUseCase(uow).execute(
        retention_days, entity_type, event_retention_days
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/notifications/purge",
    status_code=status.HTTP_200_OK,
    response_model=PurgeResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def purge_notifications(
    retention_days: Optional[int] = Query(None, alias="retentionDays"),
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
):
    """Delete archived notifications older than the retention period"""
    if retention_days is None:
        retention_days = config.NOTIFICATION_RETENTION_DAYS
    result = await PurgeNotificationsUseCase(uow).execute(retention_days)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
