from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import to_http_error
from src.app.repositories.event_repository import EventQuery
from src.app.repositories.history_repository import HistoryQuery
from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.events import (
    ChangeEventStatusCommand,
    ChangeEventStatusUseCase,
    CreateEventCommand,
    CreateEventUseCase,
    DeleteEventUseCase,
    EventHistoryResponse,
    EventListResponse,
    EventResponse,
    GetEventHistoryUseCase,
    GetEventUseCase,
    ListEventsUseCase,
    UpdateEventCommand,
    UpdateEventUseCase,
)
from src.domain.authorization import Actor
from src.domain.base import naive_utc
from src.domain.entities import EventStatus, EventType, HistoryAction, Priority
from src.depends import get_current_actor, get_event_bus, get_unit_of_work

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", status_code=status.HTTP_200_OK, response_model=EventListResponse)
async def list_events(
    status_filter: Optional[List[EventStatus]] = Query(None, alias="status"),
    type_filter: Optional[List[EventType]] = Query(None, alias="type"),
    priority: Optional[List[Priority]] = Query(None),
    created_by: Optional[UUID] = Query(None, alias="createdBy"),
    search: Optional[str] = Query(None, max_length=200),
    start_from: Optional[datetime] = Query(None, alias="startFrom"),
    start_to: Optional[datetime] = Query(None, alias="startTo"),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    sort_by: Literal["created_at", "updated_at", "start_date", "name", "priority"] = Query(
        "created_at", alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List events

    Every list filter accepts repeated values (?status=ACTIVE&status=PAUSED).
    search is a case-insensitive match on name and description.
    """
    query = EventQuery(
        status=status_filter,
        type=type_filter,
        priority=priority,
        created_by=created_by,
        search=search,
        start_from=naive_utc(start_from),
        start_to=naive_utc(start_to),
        created_from=naive_utc(created_from),
        created_to=naive_utc(created_to),
        sort_by=sort_by,
        sort_order=sort_order,
        skip=skip,
        limit=limit,
    )
    result = await ListEventsUseCase(uow).execute(query)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/{event_id}", status_code=status.HTTP_200_OK, response_model=EventResponse)
async def get_event(
    event_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetEventUseCase(uow).execute(event_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=EventResponse)
async def create_event(
    command: CreateEventCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Create an event in DRAFT status

    Raises:
        - 400 Bad Request: VALIDATION_FAILED
        - 401 Unauthorized: missing or invalid token
    """
    result = await CreateEventUseCase(uow, bus).execute(actor, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put("/{event_id}", status_code=status.HTTP_200_OK, response_model=EventResponse)
async def update_event(
    event_id: UUID,
    command: UpdateEventCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Update event fields (creator or admin)

    Only DRAFT, PLANNED and PAUSED events can be edited.

    Raises:
        - 400 Bad Request: VALIDATION_FAILED
        - 403 Forbidden: not the creator or an admin
        - 404 Not Found: EVENT_NOT_FOUND
        - 409 Conflict: INVALID_TRANSITION (not editable) or CONFLICT
    """
    result = await UpdateEventUseCase(uow, bus).execute(actor, event_id, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put(
    "/{event_id}/status", status_code=status.HTTP_200_OK, response_model=EventResponse
)
async def change_event_status(
    event_id: UUID,
    command: ChangeEventStatusCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    result = await ChangeEventStatusUseCase(uow, bus).execute(actor, event_id, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete(
    "/{event_id}", status_code=status.HTTP_200_OK, response_model=EventResponse
)
async def delete_event(
    event_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """Remove an event (creator or admin); ACTIVE events cannot be removed"""
    result = await DeleteEventUseCase(uow, bus).execute(actor, event_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get(
    "/{event_id}/history",
    status_code=status.HTTP_200_OK,
    response_model=EventHistoryResponse,
)
async def get_event_history(
    event_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    action: Optional[HistoryAction] = Query(None),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """History of one event, newest first (creator or admin)"""
    query = HistoryQuery(
        user_id=user_id,
        action=action,
        created_from=naive_utc(created_from),
        created_to=naive_utc(created_to),
        skip=skip,
        limit=limit,
    )
    result = await GetEventHistoryUseCase(uow).execute(actor, event_id, query)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
