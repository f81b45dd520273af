"""Tests for the event bus, queue subscribers and the server-sent event stream."""

import json

from conftest import RecordingSubscriber
from rpg_engine.routers.events import event_stream, format_sse
from rpg_engine.services.notification_service import (
    DeferredPublisher,
    EventBus,
    QueueSubscriber,
    make_event,
    notify,
)


class _FailingSubscriber:
    def deliver(self, event):
        raise RuntimeError("listener crashed")


class _FakeRequest:
    """Reports a disconnect after a fixed number of checks."""

    def __init__(self, checks_before_disconnect: int) -> None:
        self.remaining = checks_before_disconnect

    async def is_disconnected(self) -> bool:
        self.remaining -= 1
        return self.remaining < 0


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

def test_publish_reaches_only_subscribers_of_that_game():
    bus = EventBus()
    mine, theirs = RecordingSubscriber(), RecordingSubscriber()
    bus.subscribe("g1", mine)
    bus.subscribe("g2", theirs)

    notify(bus, "combat:started", "g1", entity_id="c1", entity_type="combat")
    assert mine.types == ["combat:started"]
    assert theirs.events == []


def test_subscribe_is_idempotent_and_unsubscribe_cleans_up():
    bus = EventBus()
    subscriber = RecordingSubscriber()
    bus.subscribe("g1", subscriber)
    bus.subscribe("g1", subscriber)
    assert bus.subscriber_count("g1") == 1

    bus.unsubscribe("g1", subscriber)
    bus.unsubscribe("g1", subscriber)
    assert bus.subscriber_count() == 0


def test_reserved_event_types_are_refused():
    bus = EventBus()
    subscriber = RecordingSubscriber()
    bus.subscribe("g1", subscriber)
    bus.publish(make_event("ping", "g1"))
    bus.publish(make_event("connected", "g1"))
    assert subscriber.events == []


def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    good = RecordingSubscriber()
    bus.subscribe("g1", _FailingSubscriber())
    bus.subscribe("g1", good)
    notify(bus, "timer:triggered", "g1")
    assert good.types == ["timer:triggered"]


def test_notify_without_bus_is_a_no_op():
    assert notify(None, "combat:started", "g1") is None


def test_event_serializes_with_camel_case_keys():
    event = make_event("resource:changed", "g1", entity_id="r1", entity_type="resource", data={"delta": 2})
    payload = json.loads(event.model_dump_json(by_alias=True))
    assert payload["gameId"] == "g1"
    assert payload["entityId"] == "r1"
    assert payload["entityType"] == "resource"
    assert payload["data"] == {"delta": 2}
    assert "T" in payload["timestamp"]


def test_deferred_publisher_holds_events_until_release():
    bus = EventBus()
    subscriber = RecordingSubscriber()
    bus.subscribe("g1", subscriber)
    publisher = DeferredPublisher(bus)

    notify(publisher, "combat:started", "g1")
    notify(publisher, "combat:turn", "g1")
    assert subscriber.events == []

    publisher.release()
    assert subscriber.types == ["combat:started", "combat:turn"]
    publisher.release()
    assert len(subscriber.events) == 2


def test_deferred_publisher_discard_drops_events():
    bus = EventBus()
    subscriber = RecordingSubscriber()
    bus.subscribe("g1", subscriber)
    publisher = DeferredPublisher(bus)

    notify(publisher, "resource:changed", "g1")
    publisher.discard()
    publisher.release()
    assert subscriber.events == []


# ---------------------------------------------------------------------------
# QueueSubscriber
# ---------------------------------------------------------------------------

def test_queue_subscriber_drops_when_full():
    subscriber = QueueSubscriber(maxsize=2)
    for i in range(4):
        subscriber.deliver(make_event("combat:turn", "g1", data={"n": i}))
    assert subscriber.queue.qsize() == 2
    assert subscriber.dropped == 2
    assert subscriber.queue.get_nowait().data == {"n": 0}


def test_queue_subscriber_ignores_keepalives():
    subscriber = QueueSubscriber()
    subscriber.deliver(make_event("ping", "g1"))
    assert subscriber.queue.empty()


# ---------------------------------------------------------------------------
# SSE stream
# ---------------------------------------------------------------------------

def test_format_sse():
    frame = format_sse(make_event("combat:ended", "g1"))
    assert frame.startswith("event: combat:ended\ndata: {")
    assert frame.endswith("\n\n")


async def test_stream_sends_connected_then_events_then_unsubscribes():
    bus = EventBus()
    stream = event_stream(_FakeRequest(1), bus, "g1", keepalive_seconds=1.0, queue_size=10)

    first = await stream.__anext__()
    assert first.startswith("event: connected")
    assert bus.subscriber_count("g1") == 1

    notify(bus, "status:applied", "g1", data={"name": "Rage"})
    second = await stream.__anext__()
    assert second.startswith("event: status:applied")
    assert '"Rage"' in second

    frames = [frame async for frame in stream]
    assert frames == []
    assert bus.subscriber_count("g1") == 0


async def test_stream_pings_when_idle():
    bus = EventBus()
    stream = event_stream(_FakeRequest(1), bus, "g1", keepalive_seconds=0.01, queue_size=10)
    await stream.__anext__()
    ping = await stream.__anext__()
    assert ping.startswith("event: ping")
    await stream.aclose()
    assert bus.subscriber_count("g1") == 0
