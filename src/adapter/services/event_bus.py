import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from src.app.services.event_bus import Handler, IEventBus, topic_matches

logger = logging.getLogger(__name__)


class _Subscriber:
    """One queue and one worker task per subscriber id"""

    def __init__(self, subscriber_id: str, queue_size: int):
        self.id = subscriber_id
        self.patterns: Dict[str, Handler] = {}
        self.queue: asyncio.Queue[Tuple[str, str, Dict[str, Any]]] = asyncio.Queue(
            maxsize=queue_size
        )
        self.task: Optional[asyncio.Task] = None


class InMemoryEventBus(IEventBus):
    """
    asyncio implementation of the event bus.

    publish() copies the message into every matching subscriber queue with
    put_nowait, so a slow subscriber only ever fills its own queue. When a
    queue is full the message is dropped for that subscriber and a warning
    is logged. Handler failures and timeouts are logged and skipped.

    Process-local: other service instances never see these messages.
    """

    def __init__(self, handler_timeout: float = 30.0, queue_size: int = 1000):
        self._handler_timeout = handler_timeout
        self._queue_size = queue_size
        self._subscribers: Dict[str, _Subscriber] = {}

    async def publish(self, topic: str, data: Dict[str, Any]) -> None:
        for subscriber in list(self._subscribers.values()):
            for pattern in list(subscriber.patterns):
                if not topic_matches(pattern, topic):
                    continue
                try:
                    subscriber.queue.put_nowait((pattern, topic, data))
                except asyncio.QueueFull:
                    logger.warning(
                        "Event bus queue full for %s, dropping %s", subscriber.id, topic
                    )

    async def subscribe(self, pattern: str, subscriber_id: str, handler: Handler) -> None:
        subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None:
            subscriber = _Subscriber(subscriber_id, self._queue_size)
            self._subscribers[subscriber_id] = subscriber
            subscriber.task = asyncio.create_task(
                self._run(subscriber), name=f"event-bus:{subscriber_id}"
            )
        subscriber.patterns[pattern] = handler
        logger.debug("Subscribed %s to %s", subscriber_id, pattern)

    async def unsubscribe(self, pattern: str, subscriber_id: str) -> None:
        subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None or pattern not in subscriber.patterns:
            return
        del subscriber.patterns[pattern]
        if not subscriber.patterns:
            self._release(subscriber)

    async def unsubscribe_all(self, subscriber_id: str) -> None:
        subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None:
            return
        subscriber.patterns.clear()
        self._release(subscriber)

    async def wait_idle(self) -> None:
        await asyncio.gather(
            *(s.queue.join() for s in list(self._subscribers.values()))
        )

    async def close(self) -> None:
        subscribers = list(self._subscribers.values())
        self._subscribers.clear()
        tasks = [s.task for s in subscribers if s.task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _release(self, subscriber: _Subscriber) -> None:
        """Drop the subscriber and its queued messages"""
        self._subscribers.pop(subscriber.id, None)
        # Queued messages are discarded; mark them done so wait_idle returns
        while not subscriber.queue.empty():
            subscriber.queue.get_nowait()
            subscriber.queue.task_done()
        task = subscriber.task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        logger.debug("Released subscriber %s", subscriber.id)

    async def _run(self, subscriber: _Subscriber) -> None:
        while self._subscribers.get(subscriber.id) is subscriber:
            pattern, topic, data = await subscriber.queue.get()
            try:
                handler = subscriber.patterns.get(pattern)
                if handler is None:
                    continue
                await asyncio.wait_for(handler(topic, data), self._handler_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Handler for %s timed out on %s after %ss",
                    subscriber.id,
                    topic,
                    self._handler_timeout,
                )
            except Exception:
                logger.exception("Handler for %s failed processing %s", subscriber.id, topic)
            finally:
                subscriber.queue.task_done()
