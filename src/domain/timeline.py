"""
Timeline / Audit Recorder

Turns a mutation intent into exactly one HistoryEntry and renders entries
as timeline items ({type, timestamp, userId, ...}).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from src.domain.entities import EntityType, HistoryAction, HistoryEntry


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def diff_changes(before: Mapping[str, Any], after: Mapping[str, Any]) -> Dict[str, Any]:
    """{"field": {"from": old, "to": new}} for every key of after that differs"""
    changes = {}
    for key, new_value in after.items():
        old_value = before.get(key)
        if _plain(old_value) != _plain(new_value):
            changes[key] = {"from": _plain(old_value), "to": _plain(new_value)}
    return changes


def record(
    entity_type: EntityType,
    entity_id: UUID,
    action: HistoryAction,
    user_id: Optional[UUID],
    at: datetime,
    *,
    from_status: Any = None,
    to_status: Any = None,
    target_user_id: Optional[UUID] = None,
    reason: Optional[str] = None,
    changes: Optional[Dict[str, Any]] = None,
) -> HistoryEntry:
    return HistoryEntry(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        user_id=user_id,
        from_status=_plain(from_status),
        to_status=_plain(to_status),
        target_user_id=target_user_id,
        reason=reason,
        changes=changes or {},
        created_at=at,
    )


def to_timeline_item(entry: HistoryEntry) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "type": _plain(entry.action),
        "timestamp": entry.created_at.isoformat() + "Z",
        "userId": _plain(entry.user_id),
    }
    action = HistoryAction(entry.action)
    if action == HistoryAction.STATUS_CHANGE:
        item["from"] = entry.from_status
        item["to"] = entry.to_status
    elif action in (HistoryAction.ASSIGNMENT, HistoryAction.ESCALATION):
        item["to"] = _plain(entry.target_user_id)
    if entry.reason:
        item["reason"] = entry.reason
    if entry.changes:
        item["changes"] = entry.changes
    return item


def to_history_item(entry: HistoryEntry) -> Dict[str, Any]:
    """History row as returned by the event history query"""
    return {
        "id": str(entry.id),
        "entityType": _plain(entry.entity_type),
        "entityId": str(entry.entity_id),
        "action": _plain(entry.action),
        "userId": _plain(entry.user_id),
        "previousStatus": entry.from_status,
        "newStatus": entry.to_status,
        "targetUserId": _plain(entry.target_user_id),
        "reason": entry.reason,
        "changes": entry.changes or {},
        "createdAt": entry.created_at.isoformat() + "Z",
    }
