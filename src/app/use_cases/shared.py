"""
Shared Use Case Helpers

Base DTO configuration and the post-commit publish step used by every
mutating use case.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.app.services.event_bus import IEventBus
from src.domain.entities import HistoryEntry
from src.domain.timeline import to_timeline_item

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """DTO exchanged as camelCase JSON, constructible with snake_case names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def bus_payload(
    response: BaseModel, entry: Optional[HistoryEntry], actor_id: UUID
) -> Dict[str, Any]:
    """Entity as JSON plus the timeline entry that produced it and who acted"""
    payload = response.model_dump(mode="json", by_alias=True)
    payload["entry"] = to_timeline_item(entry) if entry is not None else None
    payload["actorId"] = str(actor_id)
    return payload


async def publish(bus: IEventBus, topic: str, payload: Dict[str, Any]) -> None:
    """Publish after commit; a bus failure never fails the committed operation"""
    try:
        await bus.publish(topic, payload)
    except Exception:
        logger.exception("Failed to publish %s", topic)


def unique(values) -> list:
    """De-duplicate while keeping first-seen order"""
    return list(dict.fromkeys(values))
