"""Write step shared by the incident mutations"""

from src.app.services.event_bus import IEventBus
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.shared import bus_payload, publish
from src.domain.authorization import Actor
from src.domain.entities import Incident
from src.domain.errors import conflict
from src.domain.state_machine import Transition
from src.libs.result import Result, Return

from .dtos import IncidentResponse


async def apply_transition(
    uow: UnitOfWork, incident: Incident, transition: Transition
) -> Result[Incident]:
    """
    Compare-and-swap the planned changes and append the history row.

    Must run inside `async with uow`; the caller commits. A lost race
    returns CONFLICT before anything is written.
    """
    applied = await uow.incidents.apply_changes(
        incident.id, incident.version, transition.changes
    )
    if not applied:
        return Return.err(conflict("incident"))
    await uow.history.create(transition.entry)
    return Return.ok(await uow.incidents.get_by_id(incident.id))


async def announce(
    bus: IEventBus, incident: Incident, transition: Transition, actor: Actor
) -> IncidentResponse:
    response = IncidentResponse.from_entity(incident)
    await publish(bus, transition.topic, bus_payload(response, transition.entry, actor.id))
    return response
