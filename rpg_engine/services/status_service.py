"""Status effect tracker: stacking, duration decay and modifier aggregation.

Effects are unique per (game_id, target_id, name). Applying a name the target
already carries adds stacks (clamped to max_stacks) and, when a duration is
given, replaces the remaining duration rather than extending it.

Nothing decays on its own: durations only drop when tick_durations is called,
typically once at the end of each round.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.status_effect import EffectType, StatusEffect, StatusEffectModifier
from rpg_engine.schemas.status import EffectiveModifiers, StatusEffectResponse, TickResult
from rpg_engine.services.entity_service import validate_game_exists
from rpg_engine.services.notification_service import EventBus, notify

logger = logging.getLogger(__name__)


def _clamp_stacks(stacks: int, max_stacks: int | None) -> int:
    return min(stacks, max_stacks) if max_stacks is not None else stacks


def _snapshot(effect: StatusEffect, **overrides) -> StatusEffectResponse:
    """Detached copy of an effect, safe to return after the row is deleted."""
    return StatusEffectResponse.model_validate(effect).model_copy(update=overrides)


async def find_status_effect(
    db: AsyncSession, game_id: str, target_id: str, name: str
) -> StatusEffect | None:
    result = await db.execute(
        select(StatusEffect).where(
            StatusEffect.game_id == game_id,
            StatusEffect.target_id == target_id,
            StatusEffect.name == name,
        )
    )
    return result.scalar_one_or_none()


async def apply_status_effect(
    db: AsyncSession,
    game_id: str,
    target_id: str,
    name: str,
    description: str | None = None,
    effect_type: EffectType | None = None,
    duration: int | None = None,
    stacks: int | None = None,
    max_stacks: int | None = None,
    effects: dict[str, float] | None = None,
    source_id: str | None = None,
    source_type: str | None = None,
    bus: EventBus | None = None,
) -> StatusEffect:
    """Create the effect, or stack onto the existing one of the same name."""
    await validate_game_exists(db, game_id)
    requested = stacks if stacks is not None else 1

    effect = await find_status_effect(db, game_id, target_id, name)
    if effect is not None:
        limit = max_stacks if max_stacks is not None else effect.max_stacks
        effect.stacks = _clamp_stacks(effect.stacks + requested, limit)
        if duration is not None:
            effect.duration = duration
        await db.flush()
        action = "stacked"
    else:
        effect = StatusEffect(
            game_id=game_id,
            target_id=target_id,
            name=name,
            description=description or "",
            effect_type=effect_type,
            duration=duration,
            stacks=requested,
            max_stacks=max_stacks,
            source_id=source_id,
            source_type=source_type,
            modifiers=[
                StatusEffectModifier(key=key, value=value)
                for key, value in (effects or {}).items()
            ],
        )
        db.add(effect)
        await db.flush()
        action = "created"

    notify(
        bus, "status:applied", game_id,
        entity_id=effect.id, entity_type="status_effect",
        data={"targetId": target_id, "name": name, "stacks": effect.stacks, "action": action},
    )
    return effect


async def get_status_effect(db: AsyncSession, effect_id: str) -> StatusEffect | None:
    return await db.get(StatusEffect, effect_id)


async def remove_status_effect(db: AsyncSession, effect_id: str) -> bool:
    effect = await get_status_effect(db, effect_id)
    if effect is None:
        return False
    await db.delete(effect)
    await db.flush()
    return True


async def list_status_effects(
    db: AsyncSession, target_id: str, effect_type: EffectType | None = None
) -> list[StatusEffect]:
    query = select(StatusEffect).where(StatusEffect.target_id == target_id)
    if effect_type is not None:
        query = query.where(StatusEffect.effect_type == effect_type)
    result = await db.execute(query.order_by(StatusEffect.created_at))
    return list(result.scalars().all())


async def tick_durations(
    db: AsyncSession, game_id: str, amount: int = 1, bus: EventBus | None = None
) -> TickResult:
    """Count down every timed effect in the game by amount.

    Effects reaching zero or below are deleted and reported as expired with
    duration 0. Permanent effects (duration None) appear in neither list.
    """
    result = await db.execute(
        select(StatusEffect)
        .where(StatusEffect.game_id == game_id, StatusEffect.duration.is_not(None))
        .order_by(StatusEffect.created_at)
    )

    tick = TickResult()
    for effect in result.scalars().all():
        new_duration = effect.duration - amount
        if new_duration <= 0:
            tick.expired.append(_snapshot(effect, duration=0))
            await db.delete(effect)
            logger.info("Status effect '%s' on %s expired", effect.name, effect.target_id)
        else:
            effect.duration = new_duration
            tick.remaining.append(_snapshot(effect))
    await db.flush()

    notify(
        bus, "status:ticked", game_id,
        entity_type="status_effect",
        data={
            "expired": [e.id for e in tick.expired],
            "remaining": len(tick.remaining),
        },
    )
    return tick


async def modify_stacks(
    db: AsyncSession, effect_id: str, delta: int
) -> StatusEffectResponse | None:
    """Add delta to an effect's stacks.

    At zero or below the effect is deleted and reported with stacks=0;
    otherwise the result is clamped to max_stacks.
    """
    effect = await get_status_effect(db, effect_id)
    if effect is None:
        return None

    new_stacks = effect.stacks + delta
    if new_stacks <= 0:
        removed = _snapshot(effect, stacks=0)
        await db.delete(effect)
        await db.flush()
        return removed

    effect.stacks = _clamp_stacks(new_stacks, effect.max_stacks)
    await db.flush()
    return _snapshot(effect)


async def clear_effects(
    db: AsyncSession,
    target_id: str,
    effect_type: EffectType | None = None,
    name: str | None = None,
) -> int:
    """Delete a target's effects, optionally only one type and/or one name."""
    query = select(StatusEffect).where(StatusEffect.target_id == target_id)
    if effect_type is not None:
        query = query.where(StatusEffect.effect_type == effect_type)
    if name is not None:
        query = query.where(StatusEffect.name == name)

    result = await db.execute(query)
    effects = list(result.scalars().all())
    for effect in effects:
        await db.delete(effect)
    await db.flush()
    return len(effects)


async def get_effective_modifiers(db: AsyncSession, target_id: str) -> EffectiveModifiers:
    """Net modifiers on a target: sum of per-stack delta * stacks for each key.

    The one place callers should read a target's current modifiers from.
    """
    effects = await list_status_effects(db, target_id)
    modifiers: dict[str, float] = {}
    for effect in effects:
        for key, per_stack in effect.effects.items():
            modifiers[key] = modifiers.get(key, 0) + per_stack * effect.stacks

    return EffectiveModifiers(
        target_id=target_id,
        modifiers=modifiers,
        effects=[_snapshot(effect) for effect in effects],
    )
