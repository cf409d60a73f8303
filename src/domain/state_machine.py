"""
State Machine Engine

Pure transition planning for events, incidents and notifications. Nothing
here touches storage: each plan_* function checks the domain rules and
returns the field patch to apply, the single history entry to append and
the bus topic to publish. Use cases apply the patch and the entry in one
unit of work.
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain import topics
from src.domain.entities import (
    EntityType,
    Event,
    EventStatus,
    HistoryAction,
    HistoryEntry,
    Incident,
    IncidentStatus,
    Notification,
    NotificationStatus,
)
from src.domain.errors import field_error, invalid_transition, validation_failed
from src.domain.timeline import diff_changes, record, to_timeline_item
from src.domain.validation import validate_event, validate_incident
from src.libs.result import Result, Return

EVENT_TRANSITIONS: Dict[EventStatus, FrozenSet[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.PLANNED, EventStatus.CANCELLED}),
    EventStatus.PLANNED: frozenset({EventStatus.ACTIVE, EventStatus.CANCELLED}),
    EventStatus.ACTIVE: frozenset(
        {EventStatus.PAUSED, EventStatus.COMPLETED, EventStatus.CANCELLED}
    ),
    EventStatus.PAUSED: frozenset(
        {EventStatus.ACTIVE, EventStatus.COMPLETED, EventStatus.CANCELLED}
    ),
    EventStatus.COMPLETED: frozenset(),
    EventStatus.CANCELLED: frozenset(),
}

INCIDENT_TRANSITIONS: Dict[IncidentStatus, FrozenSet[IncidentStatus]] = {
    IncidentStatus.NEW: frozenset({IncidentStatus.ASSIGNED, IncidentStatus.ESCALATED}),
    IncidentStatus.ASSIGNED: frozenset(
        {IncidentStatus.IN_PROGRESS, IncidentStatus.ESCALATED}
    ),
    IncidentStatus.IN_PROGRESS: frozenset(
        {IncidentStatus.RESOLVED, IncidentStatus.ESCALATED}
    ),
    IncidentStatus.ESCALATED: frozenset(
        {IncidentStatus.IN_PROGRESS, IncidentStatus.RESOLVED}
    ),
    IncidentStatus.RESOLVED: frozenset({IncidentStatus.CLOSED}),
    IncidentStatus.CLOSED: frozenset(),
}

NOTIFICATION_TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    NotificationStatus.unread: frozenset(
        {NotificationStatus.read, NotificationStatus.archived}
    ),
    NotificationStatus.read: frozenset({NotificationStatus.archived}),
    NotificationStatus.archived: frozenset(),
}

DELETABLE_INCIDENT_STATUSES = frozenset({IncidentStatus.RESOLVED, IncidentStatus.CLOSED})

# Pseudo-status reported as the "to" side of a refused deletion
DELETED = "DELETED"


class Transition(BaseModel):
    """
    Outcome of a successful plan.

    entry is None when the request changes nothing; the caller then skips
    the write and the publish.
    """

    changes: Dict[str, Any]
    entry: Optional[HistoryEntry] = None
    topic: Optional[str] = None


def is_allowed(table: Mapping[Any, FrozenSet[Any]], current: Any, target: Any) -> bool:
    """Same-status requests are never allowed"""
    return target != current and target in table.get(current, frozenset())


def stamp(now: datetime, previous: Optional[datetime]) -> datetime:
    """Timestamp for a new entry; never earlier than the entity's last update"""
    if previous is not None and previous > now:
        return previous
    return now


def _incident_view(incident: Incident) -> Dict[str, Any]:
    return incident.model_dump()


def _event_view(event: Event) -> Dict[str, Any]:
    return event.model_dump()


# ============================================================================
# Events
# ============================================================================


def plan_event_transition(
    event: Event, target: EventStatus, actor_id: UUID, now: datetime
) -> Result[Transition]:
    current = EventStatus(event.status)
    target = EventStatus(target)
    if not is_allowed(EVENT_TRANSITIONS, current, target):
        return Return.err(invalid_transition(current, target))

    at = stamp(now, event.updated_at)
    entry = record(
        EntityType.event,
        event.id,
        HistoryAction.STATUS_CHANGE,
        actor_id,
        at,
        from_status=current,
        to_status=target,
    )
    return Return.ok(
        Transition(
            changes={"status": target, "updated_at": at},
            entry=entry,
            topic=topics.EVENT_STATUS_CHANGED,
        )
    )


def plan_event_update(
    event: Event, patch: Mapping[str, Any], actor_id: UUID, now: datetime
) -> Result[Transition]:
    """Field edits; status goes through plan_event_transition instead"""
    if not event.can_edit:
        return Return.err(
            invalid_transition(
                event.status,
                event.status,
                f"Event cannot be edited while {EventStatus(event.status).value}",
            )
        )

    fields = {k: v for k, v in patch.items() if k != "status"}
    merged = {**_event_view(event), **fields}
    errors = validate_event(merged)
    if errors:
        return Return.err(validation_failed(errors))

    changes = diff_changes(_event_view(event), fields)
    if not changes:
        return Return.ok(Transition(changes={}))

    at = stamp(now, event.updated_at)
    entry = record(
        EntityType.event,
        event.id,
        HistoryAction.UPDATED,
        actor_id,
        at,
        changes=changes,
    )
    applied = {key: fields[key] for key in changes}
    applied["updated_at"] = at
    return Return.ok(Transition(changes=applied, entry=entry, topic=topics.EVENT_UPDATED))


def plan_event_removal(event: Event, actor_id: UUID, now: datetime) -> Result[HistoryEntry]:
    if event.status == EventStatus.ACTIVE:
        return Return.err(
            invalid_transition(event.status, DELETED, "Cannot delete an active event")
        )
    return Return.ok(
        record(
            EntityType.event,
            event.id,
            HistoryAction.DELETED,
            actor_id,
            stamp(now, event.updated_at),
            from_status=event.status,
        )
    )


# ============================================================================
# Incidents
# ============================================================================


def _closed(incident: Incident) -> bool:
    return IncidentStatus(incident.status) == IncidentStatus.CLOSED


def _with_timeline(
    incident: Incident, changes: Dict[str, Any], entry: HistoryEntry
) -> Dict[str, Any]:
    changes["timeline"] = list(incident.timeline or []) + [to_timeline_item(entry)]
    changes["updated_at"] = entry.created_at
    return changes


def plan_incident_update(
    incident: Incident, patch: Mapping[str, Any], actor_id: UUID, now: datetime
) -> Result[Transition]:
    """
    Field edits and/or a status change requested through update.

    A status key in the patch is a transition request and must follow
    INCIDENT_TRANSITIONS. Moving to ASSIGNED/ESCALATED this way requires an
    existing assignee/escalatee; use plan_assignment/plan_escalation to set one.
    """
    current = IncidentStatus(incident.status)
    target = patch.get("status")
    if _closed(incident):
        return Return.err(
            invalid_transition(
                current, target or current, "Closed incidents cannot be modified"
            )
        )

    fields = {k: v for k, v in patch.items() if k != "status"}
    merged = {**_incident_view(incident), **fields}
    errors = validate_incident(merged)

    if target is not None:
        target = IncidentStatus(target)
        if not is_allowed(INCIDENT_TRANSITIONS, current, target):
            return Return.err(invalid_transition(current, target))
        if target == IncidentStatus.ASSIGNED and incident.assigned_to is None:
            errors.append(
                field_error("status", "Incident has no assignee, use the assign operation")
            )
        if target == IncidentStatus.ESCALATED and incident.escalated_to is None:
            errors.append(
                field_error("status", "Incident has no escalation target, use the escalate operation")
            )

    if errors:
        return Return.err(validation_failed(errors))

    changes = diff_changes(_incident_view(incident), fields)
    if target is None and not changes:
        return Return.ok(Transition(changes={}))

    at = stamp(now, incident.updated_at)
    applied: Dict[str, Any] = {key: fields[key] for key in changes}

    if target is not None:
        applied["status"] = target
        if target == IncidentStatus.RESOLVED:
            applied["resolved_at"] = at
        elif target == IncidentStatus.CLOSED:
            applied["closed_at"] = at
        entry = record(
            EntityType.incident,
            incident.id,
            HistoryAction.STATUS_CHANGE,
            actor_id,
            at,
            from_status=current,
            to_status=target,
            changes=changes,
        )
        topic = topics.INCIDENT_STATUS_CHANGED
    else:
        entry = record(
            EntityType.incident,
            incident.id,
            HistoryAction.UPDATED,
            actor_id,
            at,
            changes=changes,
        )
        topic = topics.INCIDENT_UPDATED

    return Return.ok(
        Transition(changes=_with_timeline(incident, applied, entry), entry=entry, topic=topic)
    )


def plan_incident_transition(
    incident: Incident, target: IncidentStatus, actor_id: UUID, now: datetime
) -> Result[Transition]:
    return plan_incident_update(incident, {"status": target}, actor_id, now)


def plan_assignment(
    incident: Incident, assignee_id: Optional[UUID], actor_id: UUID, now: datetime
) -> Result[Transition]:
    """Forces ASSIGNED from any open status; re-assignment is logged again"""
    if assignee_id is None:
        return Return.err(validation_failed([field_error("userId", "User ID is required")]))

    current = IncidentStatus(incident.status)
    if _closed(incident):
        return Return.err(
            invalid_transition(
                current, IncidentStatus.ASSIGNED, "Closed incidents cannot be assigned"
            )
        )

    at = stamp(now, incident.updated_at)
    entry = record(
        EntityType.incident,
        incident.id,
        HistoryAction.ASSIGNMENT,
        actor_id,
        at,
        from_status=current,
        to_status=IncidentStatus.ASSIGNED,
        target_user_id=assignee_id,
    )
    changes = {"assigned_to": assignee_id, "status": IncidentStatus.ASSIGNED}
    return Return.ok(
        Transition(
            changes=_with_timeline(incident, changes, entry),
            entry=entry,
            topic=topics.INCIDENT_ASSIGNED,
        )
    )


def plan_escalation(
    incident: Incident,
    target_id: Optional[UUID],
    reason: Optional[str],
    actor_id: UUID,
    now: datetime,
) -> Result[Transition]:
    """Forces ESCALATED from any open status; needs a target and a reason"""
    errors = []
    if target_id is None:
        errors.append(field_error("userId", "User ID is required"))
    if not reason or not reason.strip():
        errors.append(field_error("reason", "Escalation reason is required"))
    if errors:
        return Return.err(validation_failed(errors))

    current = IncidentStatus(incident.status)
    if _closed(incident):
        return Return.err(
            invalid_transition(
                current, IncidentStatus.ESCALATED, "Closed incidents cannot be escalated"
            )
        )

    at = stamp(now, incident.updated_at)
    entry = record(
        EntityType.incident,
        incident.id,
        HistoryAction.ESCALATION,
        actor_id,
        at,
        from_status=current,
        to_status=IncidentStatus.ESCALATED,
        target_user_id=target_id,
        reason=reason.strip(),
    )
    changes = {"escalated_to": target_id, "status": IncidentStatus.ESCALATED}
    return Return.ok(
        Transition(
            changes=_with_timeline(incident, changes, entry),
            entry=entry,
            topic=topics.INCIDENT_ESCALATED,
        )
    )


def plan_incident_removal(
    incident: Incident, actor_id: UUID, now: datetime
) -> Result[HistoryEntry]:
    if IncidentStatus(incident.status) not in DELETABLE_INCIDENT_STATUSES:
        return Return.err(
            invalid_transition(
                incident.status, DELETED, "Can only delete resolved or closed incidents"
            )
        )
    return Return.ok(
        record(
            EntityType.incident,
            incident.id,
            HistoryAction.DELETED,
            actor_id,
            stamp(now, incident.updated_at),
            from_status=incident.status,
        )
    )


# ============================================================================
# Notifications
# ============================================================================


def plan_notification_transition(
    notification: Notification, target: NotificationStatus, now: datetime
) -> Result[Dict[str, Any]]:
    current = NotificationStatus(notification.status)
    target = NotificationStatus(target)
    if not is_allowed(NOTIFICATION_TRANSITIONS, current, target):
        return Return.err(invalid_transition(current, target))

    changes: Dict[str, Any] = {"status": target}
    if target == NotificationStatus.read:
        changes["read_at"] = now
    return Return.ok(changes)
