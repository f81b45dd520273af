"""Turn sequencer for combat encounters.

Lifecycle: active -> resolved. A resolved combat never becomes active again.

Turn order is fixed when combat starts:
  1. Every participant id must resolve to a character before anything is written.
  2. Initiative = 1d20 + floor((dexterity - 10) / 2) when the game has a ruleset
     and the character has dexterity, otherwise a plain 1d20.
  3. Participants are sorted by initiative, highest first. The sort is stable,
     so tied participants keep the order they were listed in.

Advancing moves current_turn to the next active participant, bumping the round
whenever the index wraps to 0. A combat needs at least two active participants;
when removals or a fruitless full cycle leave fewer, it resolves itself.
"""

from __future__ import annotations

import logging
import random

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.combat import Combat, CombatParticipant, CombatStatus
from rpg_engine.models.game import Character
from rpg_engine.services.dice_service import ability_modifier, roll
from rpg_engine.services.entity_service import (
    CharacterNotFoundError,
    get_character,
    validate_game_exists,
)
from rpg_engine.services.notification_service import EventBus, notify
from rpg_engine.services.rules_service import get_rules

logger = logging.getLogger(__name__)

INITIATIVE_DICE = "1d20"


class ParticipantNotFoundError(CharacterNotFoundError):
    def __init__(self, character_id: str):
        super().__init__(
            character_id,
            f"Character '{character_id}' not found. "
            "Cannot start combat with missing participants.",
        )


def roll_initiative(
    character: Character, use_dexterity: bool, rng: random.Random | None = None
) -> int:
    initiative = roll(INITIATIVE_DICE, rng).total
    dexterity = character.attributes.get("dexterity")
    if use_dexterity and dexterity:
        initiative += ability_modifier(dexterity)
    return initiative


def active_count(combat: Combat) -> int:
    return sum(1 for p in combat.participants if p.is_active)


async def start_combat(
    db: AsyncSession,
    game_id: str,
    location_id: str,
    participant_ids: list[str],
    bus: EventBus | None = None,
    rng: random.Random | None = None,
) -> Combat:
    """Create a combat with initiative-ordered participants.

    All-or-nothing: GameNotFoundError or ParticipantNotFoundError is raised
    before any row is added to the session.
    """
    await validate_game_exists(db, game_id)
    rules = await get_rules(db, game_id)

    characters: list[Character] = []
    for character_id in participant_ids:
        character = await get_character(db, character_id)
        if character is None:
            raise ParticipantNotFoundError(character_id)
        characters.append(character)

    rolled = [
        (character.id, roll_initiative(character, rules is not None, rng))
        for character in characters
    ]
    rolled.sort(key=lambda pair: pair[1], reverse=True)

    combat = Combat(
        game_id=game_id,
        location_id=location_id,
        current_turn=0,
        round=1,
        status=CombatStatus.active,
        log=[],
        participants=[
            CombatParticipant(
                position=position,
                character_id=character_id,
                initiative=initiative,
                is_active=True,
            )
            for position, (character_id, initiative) in enumerate(rolled)
        ],
    )
    db.add(combat)
    await db.flush()

    logger.info(
        "Combat %s started in game %s with %d participants",
        combat.id, game_id, len(rolled),
    )
    notify(
        bus, "combat:started", game_id,
        entity_id=combat.id, entity_type="combat",
        data={"participantCount": len(rolled)},
    )
    return combat


async def get_combat(db: AsyncSession, combat_id: str) -> Combat | None:
    return await db.get(Combat, combat_id)


async def get_active_combat(db: AsyncSession, game_id: str) -> Combat | None:
    result = await db.execute(
        select(Combat)
        .where(Combat.game_id == game_id, Combat.status == CombatStatus.active)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_current_combatant(db: AsyncSession, combat_id: str) -> str | None:
    combat = await get_combat(db, combat_id)
    if combat is None or combat.status != CombatStatus.active:
        return None
    if combat.current_turn >= len(combat.participants):
        return None
    return combat.participants[combat.current_turn].character_id


async def next_turn(
    db: AsyncSession, combat_id: str, bus: EventBus | None = None
) -> Combat | None:
    """Advance to the next active participant.

    Returns None for an unknown or already-resolved combat. If a full cycle of
    attempts (one per participant) finds no other active participant, the
    combat is resolved instead of advanced.
    """
    combat = await get_combat(db, combat_id)
    if combat is None or combat.status != CombatStatus.active:
        return None

    participants = combat.participants
    max_attempts = len(participants)
    if max_attempts == 0:
        return await end_combat(db, combat_id, bus)

    turn = combat.current_turn
    round_number = combat.round
    attempts = 0
    while True:
        turn = (turn + 1) % max_attempts
        if turn == 0:
            round_number += 1
        attempts += 1
        if participants[turn].is_active or attempts >= max_attempts:
            break

    if attempts >= max_attempts:
        return await end_combat(db, combat_id, bus)

    combat.current_turn = turn
    combat.round = round_number
    await db.flush()

    notify(
        bus, "combat:turn", combat.game_id,
        entity_id=combat.id, entity_type="combat",
        data={
            "currentTurn": turn,
            "round": round_number,
            "characterId": participants[turn].character_id,
        },
    )
    return combat


async def remove_participant(
    db: AsyncSession, combat_id: str, character_id: str, bus: EventBus | None = None
) -> Combat | None:
    """Mark a participant inactive without moving anyone's position.

    Resolves the combat when one or no active participants remain.
    """
    combat = await get_combat(db, combat_id)
    if combat is None:
        return None

    for participant in combat.participants:
        if participant.character_id == character_id:
            participant.is_active = False
    await db.flush()

    if active_count(combat) <= 1:
        return await end_combat(db, combat_id, bus)
    return combat


async def end_combat(
    db: AsyncSession, combat_id: str, bus: EventBus | None = None
) -> Combat | None:
    """Resolve a combat. Resolving an already-resolved combat changes nothing."""
    combat = await get_combat(db, combat_id)
    if combat is None:
        return None
    if combat.status == CombatStatus.resolved:
        return combat

    combat.status = CombatStatus.resolved
    await db.flush()

    logger.info("Combat %s resolved after %d round(s)", combat.id, combat.round)
    notify(bus, "combat:ended", combat.game_id, entity_id=combat.id, entity_type="combat")
    return combat


async def add_combat_log(db: AsyncSession, combat_id: str, entry: str) -> Combat | None:
    combat = await get_combat(db, combat_id)
    if combat is None:
        return None

    # Reassign rather than append so the JSON column is flagged dirty
    combat.log = [*combat.log, entry]
    await db.flush()
    return combat
