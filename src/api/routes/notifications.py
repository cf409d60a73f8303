from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import to_http_error
from src.app.repositories.notification_repository import NotificationQuery
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.notifications import (
    ArchiveNotificationUseCase,
    CountUnreadNotificationsUseCase,
    DeleteNotificationUseCase,
    GetNotificationUseCase,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    NotificationListResponse,
    NotificationResponse,
    PreferencesResponse,
    StatusResponse,
    UnreadCountResponse,
    UpdateNotificationPreferencesUseCase,
    UpdatePreferencesCommand,
)
from src.domain.authorization import Actor
from src.domain.entities import NotificationPriority, NotificationStatus, NotificationType
from src.depends import get_current_actor, get_unit_of_work

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", status_code=status.HTTP_200_OK, response_model=NotificationListResponse)
async def list_notifications(
    status_filter: Optional[List[NotificationStatus]] = Query(None, alias="status"),
    type_filter: Optional[List[NotificationType]] = Query(None, alias="type"),
    priority: Optional[List[NotificationPriority]] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """The caller's notifications, newest first"""
    query = NotificationQuery(
        status=status_filter,
        type=type_filter,
        priority=priority,
        skip=skip,
        limit=limit,
    )
    result = await ListNotificationsUseCase(uow).execute(actor, query)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/unread", status_code=status.HTTP_200_OK, response_model=UnreadCountResponse)
async def count_unread(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await CountUnreadNotificationsUseCase(uow).execute(actor)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put(
    "/preferences", status_code=status.HTTP_200_OK, response_model=PreferencesResponse
)
async def update_preferences(
    command: UpdatePreferencesCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Email switch for notifications: one boolean or a per-class map"""
    result = await UpdateNotificationPreferencesUseCase(uow).execute(actor, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get(
    "/{notification_id}",
    status_code=status.HTTP_200_OK,
    response_model=NotificationResponse,
)
async def get_notification(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetNotificationUseCase(uow).execute(actor, notification_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put(
    "/{notification_id}/read",
    status_code=status.HTTP_200_OK,
    response_model=NotificationResponse,
)
async def mark_read(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await MarkNotificationReadUseCase(uow).execute(actor, notification_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put(
    "/{notification_id}/archive",
    status_code=status.HTTP_200_OK,
    response_model=NotificationResponse,
)
async def archive(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ArchiveNotificationUseCase(uow).execute(actor, notification_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete(
    "/{notification_id}", status_code=status.HTTP_200_OK, response_model=StatusResponse
)
async def delete_notification(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await DeleteNotificationUseCase(uow).execute(actor, notification_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
