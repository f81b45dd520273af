"""Notification bus: publishes game events to subscribers after state changes.

Delivery is best-effort. A subscriber that raises is logged and skipped so a
broken listener never fails the operation that produced the event, and there
is no replay for subscribers that were not connected when an event fired.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from rpg_engine.schemas.event import RESERVED_EVENT_TYPES, GameEvent

logger = logging.getLogger(__name__)


class EventSubscriber(Protocol):
    def deliver(self, event: GameEvent) -> None: ...


class EventBus:
    """Per-game fan-out of GameEvents.

    Constructed once by the application and handed to every operation that
    publishes; nothing reaches it through module globals.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventSubscriber]] = {}

    def subscribe(self, game_id: str, subscriber: EventSubscriber) -> None:
        subscribers = self._subscribers.setdefault(game_id, [])
        if subscriber not in subscribers:
            subscribers.append(subscriber)

    def unsubscribe(self, game_id: str, subscriber: EventSubscriber) -> None:
        subscribers = self._subscribers.get(game_id)
        if not subscribers or subscriber not in subscribers:
            return
        subscribers.remove(subscriber)
        if not subscribers:
            del self._subscribers[game_id]

    def subscriber_count(self, game_id: str | None = None) -> int:
        if game_id is not None:
            return len(self._subscribers.get(game_id, []))
        return sum(len(subs) for subs in self._subscribers.values())

    def publish(self, event: GameEvent) -> None:
        if event.type in RESERVED_EVENT_TYPES:
            logger.warning("Refusing to publish reserved event type '%s'", event.type)
            return

        for subscriber in list(self._subscribers.get(event.game_id, [])):
            try:
                subscriber.deliver(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed to handle %s for game %s",
                    subscriber,
                    event.type,
                    event.game_id,
                )


class QueueSubscriber:
    """Buffers events for one streaming client.

    When the client falls behind and the queue is full, new events are dropped.
    """

    def __init__(self, maxsize: int = 100) -> None:
        self.queue: asyncio.Queue[GameEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def deliver(self, event: GameEvent) -> None:
        if event.is_keepalive:
            return
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Event queue full; dropped %s for game %s (%d dropped so far)",
                event.type,
                event.game_id,
                self.dropped,
            )


class DeferredPublisher:
    """Holds published events until release(), so they can follow a commit.

    discard() drops everything held, for a unit of work that was rolled back.
    """

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.pending: list[GameEvent] = []

    def publish(self, event: GameEvent) -> None:
        self.pending.append(event)

    def release(self) -> None:
        pending, self.pending = self.pending, []
        for event in pending:
            self.bus.publish(event)

    def discard(self) -> None:
        self.pending.clear()


def make_event(
    event_type: str,
    game_id: str,
    entity_id: str | None = None,
    entity_type: str | None = None,
    data: Any = None,
) -> GameEvent:
    return GameEvent(
        type=event_type,
        game_id=game_id,
        entity_id=entity_id,
        entity_type=entity_type,
        timestamp=datetime.now(timezone.utc).isoformat(),
        data=data,
    )


def notify(
    bus: EventBus | DeferredPublisher | None,
    event_type: str,
    game_id: str,
    entity_id: str | None = None,
    entity_type: str | None = None,
    data: Any = None,
) -> GameEvent | None:
    """Publish an event if a bus was provided. Call only after the write is flushed.

    Events go out before the caller commits; pass a DeferredPublisher to hold
    them until the commit succeeds.
    """
    if bus is None:
        return None
    event = make_event(event_type, game_id, entity_id, entity_type, data)
    bus.publish(event)
    return event
