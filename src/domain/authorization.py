"""
Authorization Guard

Stateless predicates deciding which actor may touch which entity.
Role checks are hierarchical: "has role X" means level(actor) >= level(X).
"""

from typing import Any, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.entities import Incident, Notification, UserRole

ROLE_HIERARCHY = {
    UserRole.system: 3,
    UserRole.admin: 2,
    UserRole.supervisor: 1,
    UserRole.user: 0,
}


class Actor(BaseModel):
    """Identity of the caller, already verified upstream (JWT)"""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: UserRole


def role_level(role: Union[UserRole, str]) -> int:
    try:
        return ROLE_HIERARCHY[UserRole(role)]
    except ValueError:
        return -1


def has_role(actor: Actor, role: Union[UserRole, str]) -> bool:
    required = role_level(role)
    return required >= 0 and role_level(actor.role) >= required


def is_admin_or_system(actor: Actor) -> bool:
    return actor.role in (UserRole.admin, UserRole.system)


def can_edit_entity(entity: Any, actor: Actor) -> bool:
    """Creator of the entity, or an admin/system actor"""
    return entity.created_by == actor.id or is_admin_or_system(actor)


def can_work_incident(incident: Incident, actor: Actor) -> bool:
    """Editors plus whoever the incident is assigned or escalated to"""
    return (
        can_edit_entity(incident, actor)
        or incident.assigned_to == actor.id
        or incident.escalated_to == actor.id
    )


def can_access_notification(notification: Notification, actor: Actor) -> bool:
    return notification.user_id == actor.id or has_role(actor, UserRole.admin)
