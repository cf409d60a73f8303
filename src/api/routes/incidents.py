from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import to_http_error
from src.app.repositories.incident_repository import IncidentQuery
from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.incidents import (
    AssignIncidentCommand,
    AssignIncidentUseCase,
    CreateIncidentCommand,
    CreateIncidentUseCase,
    DeleteIncidentUseCase,
    EscalateIncidentCommand,
    EscalateIncidentUseCase,
    GetIncidentTimelineUseCase,
    GetIncidentUseCase,
    IncidentListResponse,
    IncidentResponse,
    ListIncidentsUseCase,
    TimelineResponse,
    UpdateIncidentCommand,
    UpdateIncidentUseCase,
)
from src.domain.authorization import Actor
from src.domain.base import naive_utc
from src.domain.entities import IncidentStatus, IncidentType, Priority
from src.depends import get_current_actor, get_event_bus, get_unit_of_work

router = APIRouter(prefix="/incidents", tags=["Incidents"])


@router.get("", status_code=status.HTTP_200_OK, response_model=IncidentListResponse)
async def list_incidents(
    status_filter: Optional[List[IncidentStatus]] = Query(None, alias="status"),
    type_filter: Optional[List[IncidentType]] = Query(None, alias="type"),
    priority: Optional[List[Priority]] = Query(None),
    event_id: Optional[UUID] = Query(None, alias="eventId"),
    created_by: Optional[UUID] = Query(None, alias="createdBy"),
    assigned_to: Optional[UUID] = Query(None, alias="assignedTo"),
    search: Optional[str] = Query(None, max_length=200),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    sort_by: Literal["created_at", "updated_at", "priority", "status", "title"] = Query(
        "created_at", alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    query = IncidentQuery(
        status=status_filter,
        type=type_filter,
        priority=priority,
        event_id=event_id,
        created_by=created_by,
        assigned_to=assigned_to,
        search=search,
        created_from=naive_utc(created_from),
        created_to=naive_utc(created_to),
        sort_by=sort_by,
        sort_order=sort_order,
        skip=skip,
        limit=limit,
    )
    result = await ListIncidentsUseCase(uow).execute(query)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get(
    "/{incident_id}", status_code=status.HTTP_200_OK, response_model=IncidentResponse
)
async def get_incident(
    incident_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetIncidentUseCase(uow).execute(incident_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IncidentResponse)
async def create_incident(
    command: CreateIncidentCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Report an incident; the caller becomes its creator

    Raises:
        - 400 Bad Request: VALIDATION_FAILED (e.g. EMERGENCY without CRITICAL)
        - 404 Not Found: EVENT_NOT_FOUND, USER_NOT_FOUND (assignee)
    """
    result = await CreateIncidentUseCase(uow, bus).execute(actor, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put(
    "/{incident_id}", status_code=status.HTTP_200_OK, response_model=IncidentResponse
)
async def update_incident(
    incident_id: UUID,
    command: UpdateIncidentCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Update an incident (creator, assignee, escalatee or admin)

    A status in the body is a transition request.

    Raises:
        - 400 Bad Request: VALIDATION_FAILED
        - 403 Forbidden: caller cannot work this incident
        - 404 Not Found: INCIDENT_NOT_FOUND
        - 409 Conflict: INVALID_TRANSITION or CONFLICT
    """
    result = await UpdateIncidentUseCase(uow, bus).execute(actor, incident_id, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete(
    "/{incident_id}", status_code=status.HTTP_200_OK, response_model=IncidentResponse
)
async def delete_incident(
    incident_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """Remove a RESOLVED or CLOSED incident (creator or admin)"""
    result = await DeleteIncidentUseCase(uow, bus).execute(actor, incident_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/{incident_id}/assign",
    status_code=status.HTTP_200_OK,
    response_model=IncidentResponse,
)
async def assign_incident(
    incident_id: UUID,
    command: AssignIncidentCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    result = await AssignIncidentUseCase(uow, bus).execute(actor, incident_id, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/{incident_id}/escalate",
    status_code=status.HTTP_200_OK,
    response_model=IncidentResponse,
)
async def escalate_incident(
    incident_id: UUID,
    command: EscalateIncidentCommand,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    result = await EscalateIncidentUseCase(uow, bus).execute(actor, incident_id, command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get(
    "/{incident_id}/timeline",
    status_code=status.HTTP_200_OK,
    response_model=TimelineResponse,
)
async def get_incident_timeline(
    incident_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetIncidentTimelineUseCase(uow).execute(actor, incident_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
