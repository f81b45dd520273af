"""Timers: countdowns, stopwatches and progress clocks advanced by explicit ticks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.timer import Timer, TimerDirection, TimerType
from rpg_engine.services.entity_service import validate_game_exists
from rpg_engine.services.notification_service import EventBus, notify

# Segments on a progress clock when no max_value is given
DEFAULT_CLOCK_SEGMENTS = 6

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "max_value", "trigger_at", "unit", "visible_to_players"}
)


@dataclass
class TimerTick:
    timer: Timer
    previous_value: int
    just_triggered: bool


def _reset_value(timer: Timer) -> int:
    if timer.direction == TimerDirection.down and timer.max_value is not None:
        return timer.max_value
    return 0


async def create_timer(
    db: AsyncSession,
    game_id: str,
    name: str,
    timer_type: TimerType,
    description: str = "",
    current_value: int | None = None,
    max_value: int | None = None,
    direction: TimerDirection | None = None,
    trigger_at: int | None = None,
    unit: str = "tick",
    visible_to_players: bool = True,
) -> Timer:
    """Create a timer, filling in defaults from its type.

    Stopwatches count up, everything else counts down. Clocks default to six
    segments. A countdown with a maximum starts full and triggers at 0; an
    upward timer triggers at its maximum.
    """
    await validate_game_exists(db, game_id)
    timer_type = TimerType(timer_type)

    if direction is None:
        direction = TimerDirection.up if timer_type == TimerType.stopwatch else TimerDirection.down
    if max_value is None and timer_type == TimerType.clock:
        max_value = DEFAULT_CLOCK_SEGMENTS
    if current_value is None:
        current_value = max_value if direction == TimerDirection.down and max_value else 0
    if trigger_at is None:
        trigger_at = 0 if direction == TimerDirection.down else max_value

    timer = Timer(
        game_id=game_id,
        name=name,
        description=description,
        timer_type=timer_type,
        current_value=current_value,
        max_value=max_value,
        direction=direction,
        trigger_at=trigger_at,
        triggered=False,
        unit=unit,
        visible_to_players=visible_to_players,
    )
    db.add(timer)
    await db.flush()
    return timer


async def get_timer(db: AsyncSession, timer_id: str) -> Timer | None:
    return await db.get(Timer, timer_id)


async def list_timers(
    db: AsyncSession, game_id: str, include_triggered: bool = False
) -> list[Timer]:
    query = select(Timer).where(Timer.game_id == game_id)
    if not include_triggered:
        query = query.where(Timer.triggered == False)  # noqa: E712
    result = await db.execute(query.order_by(Timer.name))
    return list(result.scalars().all())


async def update_timer(
    db: AsyncSession, timer_id: str, changes: dict[str, Any]
) -> Timer | None:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update timer field(s): {', '.join(sorted(unknown))}")

    timer = await get_timer(db, timer_id)
    if timer is None:
        return None
    for field_name, field_value in changes.items():
        setattr(timer, field_name, field_value)
    await db.flush()
    return timer


async def delete_timer(db: AsyncSession, timer_id: str) -> bool:
    timer = await get_timer(db, timer_id)
    if timer is None:
        return False
    await db.delete(timer)
    await db.flush()
    return True


async def tick_timer(
    db: AsyncSession, timer_id: str, amount: int = 1, bus: EventBus | None = None
) -> TimerTick | None:
    """Advance a timer in its direction.

    Upward timers stop at max_value, downward timers at 0. The triggered flag
    latches the first time the trigger point is reached.
    """
    timer = await get_timer(db, timer_id)
    if timer is None:
        return None

    previous_value = timer.current_value
    if timer.direction == TimerDirection.up:
        new_value = timer.current_value + amount
        if timer.max_value is not None:
            new_value = min(new_value, timer.max_value)
    else:
        new_value = max(timer.current_value - amount, 0)

    just_triggered = False
    if not timer.triggered and timer.trigger_at is not None:
        if timer.direction == TimerDirection.down:
            just_triggered = new_value <= timer.trigger_at
        else:
            just_triggered = new_value >= timer.trigger_at

    timer.current_value = new_value
    timer.triggered = timer.triggered or just_triggered
    await db.flush()

    if just_triggered:
        notify(
            bus, "timer:triggered", timer.game_id,
            entity_id=timer.id, entity_type="timer",
            data={"name": timer.name, "value": new_value},
        )
    return TimerTick(timer=timer, previous_value=previous_value, just_triggered=just_triggered)


async def reset_timer(db: AsyncSession, timer_id: str) -> Timer | None:
    timer = await get_timer(db, timer_id)
    if timer is None:
        return None
    timer.current_value = _reset_value(timer)
    timer.triggered = False
    await db.flush()
    return timer


async def modify_timer_state(
    db: AsyncSession,
    timer_id: str,
    mode: str,
    amount: int = 1,
    bus: EventBus | None = None,
) -> TimerTick | None:
    """Tick or reset in a single call; reset reports the value it replaced."""
    if mode == "reset":
        timer = await get_timer(db, timer_id)
        if timer is None:
            return None
        previous_value = timer.current_value
        await reset_timer(db, timer_id)
        return TimerTick(timer=timer, previous_value=previous_value, just_triggered=False)
    if mode == "tick":
        return await tick_timer(db, timer_id, amount, bus)
    raise ValueError(f"Unknown timer mode: '{mode}'")
