"""Events router: server-sent event stream of a game's notifications."""

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from rpg_engine.config import settings
from rpg_engine.dependencies import get_event_bus
from rpg_engine.schemas.event import GameEvent
from rpg_engine.services.notification_service import EventBus, QueueSubscriber, make_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["events"])


def format_sse(event: GameEvent) -> str:
    return f"event: {event.type}\ndata: {event.model_dump_json(by_alias=True)}\n\n"


async def event_stream(
    request: Request,
    bus: EventBus,
    game_id: str,
    keepalive_seconds: float,
    queue_size: int,
) -> AsyncIterator[str]:
    """Yield a connected frame, then queued events, with a ping whenever the queue is idle."""
    subscriber = QueueSubscriber(maxsize=queue_size)
    bus.subscribe(game_id, subscriber)
    logger.info("Event stream opened for game %s", game_id)
    try:
        yield format_sse(make_event("connected", game_id))
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(subscriber.queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield format_sse(make_event("ping", game_id))
                continue
            yield format_sse(event)
    finally:
        bus.unsubscribe(game_id, subscriber)
        logger.info("Event stream closed for game %s", game_id)


@router.get("/{game_id}/events")
async def game_events(
    game_id: str,
    request: Request,
    bus: EventBus = Depends(get_event_bus),
):
    return StreamingResponse(
        event_stream(
            request,
            bus,
            game_id,
            settings.sse_keepalive_seconds,
            settings.event_queue_size,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
