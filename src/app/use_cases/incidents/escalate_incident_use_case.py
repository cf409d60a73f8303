"""
Escalate Incident Use Case

Hands the incident to an escalation target and forces status ESCALATED.
"""

from typing import Callable
from uuid import UUID

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor, can_edit_entity
from src.domain.base import utcnow
from src.domain.errors import forbidden, not_found
from src.domain.state_machine import plan_escalation
from src.libs.result import Result, Return

from ._apply import announce, apply_transition
from .dtos import EscalateIncidentCommand, IncidentResponse


class EscalateIncidentUseCase:
    """
    Business Rules:
    - Only the creator or an admin/system actor may escalate
    - Target user and a non-blank reason are required
    - Allowed from any status except CLOSED
    - Publishes incidents.escalated after commit
    """

    def __init__(self, uow: UnitOfWork, bus: IEventBus, clock: Callable = utcnow):
        self.uow = uow
        self.bus = bus
        self.clock = clock

    async def execute(
        self, actor: Actor, incident_id: UUID, command: EscalateIncidentCommand
    ) -> Result[IncidentResponse]:
        async with self.uow:
            incident = await self.uow.incidents.get_by_id(incident_id)
            if incident is None:
                return Return.err(not_found("incident"))
            if not can_edit_entity(incident, actor):
                return Return.err(
                    forbidden("Only the creator or an admin can escalate this incident")
                )

            plan = plan_escalation(
                incident, command.user_id, command.reason, actor.id, self.clock()
            )
            if plan.is_err():
                return Return.err(plan.error)

            target = await self.uow.users.get_by_id(command.user_id)
            if target is None or not target.active:
                return Return.err(not_found("user"))

            transition = plan.value
            result = await apply_transition(self.uow, incident, transition)
            if result.is_err():
                return result
            await self.uow.commit()

        return Return.ok(await announce(self.bus, result.value, transition, actor))
