from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict

# Handlers receive the concrete topic and the published payload
Handler = Callable[[str, Dict[str, Any]], Awaitable[None]]


def topic_matches(pattern: str, topic: str) -> bool:
    """Exact topic, "<prefix>.*" for a namespace, or "*" for everything"""
    if pattern == "*":
        return True
    if pattern.endswith(".*"):
        return topic.startswith(pattern[:-1])
    return pattern == topic


class IEventBus(ABC):
    """
    In-process publish/subscribe interface.

    Delivery is at-most-once: a subscriber that is not registered when a
    message is published never sees it. Each subscriber id receives its
    messages in publish order, across all of its patterns.
    """

    @abstractmethod
    async def publish(self, topic: str, data: Dict[str, Any]) -> None:
        """Enqueue for every matching subscriber; never waits on handlers"""
        pass

    @abstractmethod
    async def subscribe(self, pattern: str, subscriber_id: str, handler: Handler) -> None:
        pass

    @abstractmethod
    async def unsubscribe(self, pattern: str, subscriber_id: str) -> None:
        """Idempotent"""
        pass

    @abstractmethod
    async def unsubscribe_all(self, subscriber_id: str) -> None:
        pass

    @abstractmethod
    async def wait_idle(self) -> None:
        """Wait until every queued message has been handled"""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
