import asyncio

import pytest

from src.adapter.services.event_bus import InMemoryEventBus
from src.app.services.event_bus import topic_matches


@pytest.mark.parametrize(
    "pattern,topic,expected",
    [
        ("*", "incidents.created", True),
        ("incidents.*", "incidents.created", True),
        ("incidents.*", "events.created", False),
        ("incidents.created", "incidents.created", True),
        ("incidents.created", "incidents.updated", False),
        ("incidents.*", "incidents", False),
    ],
)
def test_topic_matches(pattern, topic, expected):
    assert topic_matches(pattern, topic) is expected


class Recorder:
    def __init__(self):
        self.received = []

    async def __call__(self, topic, data):
        self.received.append((topic, data))


@pytest.fixture
async def bus():
    bus = InMemoryEventBus(handler_timeout=0.5, queue_size=10)
    yield bus
    await bus.close()


async def test_delivers_in_publish_order_across_patterns(bus):
    recorder = Recorder()
    await bus.subscribe("incidents.*", "audit", recorder)
    await bus.subscribe("events.created", "audit", recorder)

    await bus.publish("incidents.created", {"n": 1})
    await bus.publish("events.created", {"n": 2})
    await bus.publish("events.updated", {"n": 3})
    await bus.publish("incidents.assigned", {"n": 4})
    await bus.wait_idle()

    assert [data["n"] for _, data in recorder.received] == [1, 2, 4]


async def test_failing_handler_does_not_stop_delivery(bus):
    received = []

    async def flaky(topic, data):
        if data["n"] == 1:
            raise RuntimeError("boom")
        received.append(data["n"])

    await bus.subscribe("*", "flaky", flaky)
    await bus.publish("events.created", {"n": 1})
    await bus.publish("events.created", {"n": 2})
    await bus.wait_idle()

    assert received == [2]


async def test_slow_handler_times_out_and_is_skipped(bus):
    received = []

    async def slow(topic, data):
        if data["n"] == 1:
            await asyncio.sleep(5)
        received.append(data["n"])

    await bus.subscribe("*", "slow", slow)
    await bus.publish("events.created", {"n": 1})
    await bus.publish("events.created", {"n": 2})
    await bus.wait_idle()

    assert received == [2]


async def test_slow_subscriber_does_not_block_others(bus):
    release = asyncio.Event()
    fast = Recorder()

    async def blocked(topic, data):
        await release.wait()

    await bus.subscribe("*", "blocked", blocked)
    await bus.subscribe("*", "fast", fast)

    await bus.publish("events.created", {"n": 1})
    await asyncio.sleep(0.05)

    assert len(fast.received) == 1
    release.set()
    await bus.wait_idle()


async def test_full_queue_drops_for_that_subscriber_only():
    bus = InMemoryEventBus(handler_timeout=1, queue_size=1)
    release = asyncio.Event()
    fast = Recorder()

    async def blocked(topic, data):
        await release.wait()

    try:
        await bus.subscribe("*", "blocked", blocked)
        await bus.subscribe("*", "fast", fast)
        await bus.publish("events.created", {"n": 1})
        await asyncio.sleep(0.05)  # blocked worker holds message 1
        await bus.publish("events.created", {"n": 2})  # fills the queue
        await bus.publish("events.created", {"n": 3})  # dropped for "blocked"
        await asyncio.sleep(0.05)

        assert [d["n"] for _, d in fast.received] == [1, 2, 3]
        release.set()
        await bus.wait_idle()
    finally:
        await bus.close()


async def test_unsubscribe_is_idempotent_and_stops_delivery(bus):
    recorder = Recorder()
    await bus.subscribe("events.*", "ws-1", recorder)

    await bus.unsubscribe("events.*", "ws-1")
    await bus.unsubscribe("events.*", "ws-1")
    await bus.unsubscribe("incidents.*", "unknown")
    await bus.publish("events.created", {"n": 1})
    await bus.wait_idle()

    assert recorder.received == []
    assert bus.subscriber_count() == 0


async def test_unsubscribe_all_releases_every_pattern(bus):
    recorder = Recorder()
    await bus.subscribe("events.*", "ws-1", recorder)
    await bus.subscribe("incidents.*", "ws-1", recorder)

    await bus.unsubscribe_all("ws-1")
    await bus.publish("incidents.created", {"n": 1})
    await bus.wait_idle()

    assert recorder.received == []
    assert bus.subscriber_count() == 0


async def test_no_replay_for_late_subscribers(bus):
    recorder = Recorder()
    await bus.publish("events.created", {"n": 1})
    await bus.subscribe("*", "late", recorder)
    await bus.wait_idle()

    assert recorder.received == []
