"""Dice resolution: expression rolls, skill/attribute checks and opposed contests.

Expressions follow NdX[+/-M]: an optional die count (default 1), the number of
sides, and an optional flat modifier, e.g. "2d6+3", "d20", "4d8-2".

A check adds a modifier built from the character's stats to the ruleset's base
dice and compares the total against a difficulty. Critical thresholds look at
the first individual die of the base roll, never the total:
  - first die <= critical_failure  -> forced failure
  - else first die >= critical_success -> forced success
Failure is tested first, so overlapping thresholds resolve to failure.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.game import Character
from rpg_engine.schemas.rules import CheckMechanics
from rpg_engine.services.entity_service import CharacterNotFoundError, get_character
from rpg_engine.services.rules_service import require_rules

DICE_PATTERN = re.compile(r"^(\d+)?d(\d+)([+-]\d+)?$", re.IGNORECASE)

# Most dice a single expression may roll
MAX_DICE = 1000


class DiceExpressionError(ValueError):
    def __init__(self, expression: str, reason: str = "Expected format: NdX+M (e.g., 2d6+3)"):
        super().__init__(f"Invalid dice expression: {expression}. {reason}")
        self.expression = expression


@dataclass
class DiceRoll:
    expression: str
    rolls: list[int]
    modifier: int
    total: int


@dataclass
class CheckResult:
    roll: DiceRoll
    modifier: int | float
    total: int | float
    difficulty: int
    success: bool
    critical_success: bool
    critical_failure: bool
    margin: int | float  # total - difficulty, reported even when a critical overrides success


@dataclass
class ContestResult:
    attacker_result: CheckResult
    defender_result: CheckResult
    winner: Literal["attacker", "defender", "tie"]


@dataclass
class ParsedExpression:
    count: int
    sides: int
    modifier: int = 0


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

def parse_expression(expression: str) -> ParsedExpression:
    """Parse a dice expression, rejecting anything outside the NdX[+/-M] grammar."""
    match = DICE_PATTERN.match(re.sub(r"\s", "", expression))
    if not match:
        raise DiceExpressionError(expression)

    count = int(match.group(1)) if match.group(1) else 1
    sides = int(match.group(2))
    modifier = int(match.group(3)) if match.group(3) else 0

    if count < 1:
        raise DiceExpressionError(expression, "At least one die must be rolled")
    if count > MAX_DICE:
        raise DiceExpressionError(expression, f"At most {MAX_DICE} dice can be rolled at once")
    if sides < 1:
        raise DiceExpressionError(expression, "Dice need at least one side")

    return ParsedExpression(count=count, sides=sides, modifier=modifier)


def roll(expression: str, rng: random.Random | None = None) -> DiceRoll:
    """Roll every die in the expression independently; total = sum + modifier."""
    _rand = rng or random
    parsed = parse_expression(expression)
    rolls = [_rand.randint(1, parsed.sides) for _ in range(parsed.count)]
    return DiceRoll(
        expression=expression,
        rolls=rolls,
        modifier=parsed.modifier,
        total=sum(rolls) + parsed.modifier,
    )


def ability_modifier(score: int | float) -> int:
    """floor((score - 10) / 2); rounds toward negative infinity for low scores."""
    return int((score - 10) // 2)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def stat_modifier(
    character: Character,
    skill: str | None = None,
    attribute: str | None = None,
    bonus_modifier: int | float = 0,
) -> int | float:
    """Sum of the bonus, the raw skill value and the attribute's ability modifier.

    Skill and attribute both contribute when both are named; a name the
    character does not have contributes nothing.
    """
    modifier = bonus_modifier
    if skill and skill in character.skills:
        modifier += character.skills[skill]
    if attribute and attribute in character.attributes:
        modifier += ability_modifier(character.attributes[attribute])
    return modifier


def resolve_check(
    mechanics: CheckMechanics,
    modifier: int | float,
    difficulty: int,
    rng: random.Random | None = None,
) -> CheckResult:
    """Roll the base dice and judge the outcome, applying critical overrides."""
    base = roll(mechanics.base_dice, rng)
    total = base.total + modifier
    first_die = base.rolls[0]

    critical_failure = (
        mechanics.critical_failure is not None and first_die <= mechanics.critical_failure
    )
    critical_success = (
        mechanics.critical_success is not None and first_die >= mechanics.critical_success
    )

    if critical_failure:
        success = False
    elif critical_success:
        success = True
    else:
        success = total >= difficulty

    return CheckResult(
        roll=base,
        modifier=modifier,
        total=total,
        difficulty=difficulty,
        success=success,
        critical_success=critical_success,
        critical_failure=critical_failure,
        margin=total - difficulty,
    )


async def check(
    db: AsyncSession,
    game_id: str,
    character_id: str,
    difficulty: int,
    skill: str | None = None,
    attribute: str | None = None,
    bonus_modifier: int | float = 0,
    rng: random.Random | None = None,
) -> CheckResult:
    """Perform a skill/attribute check using the game's ruleset.

    Raises RulesNotConfiguredError when the game has no ruleset and
    CharacterNotFoundError when the character does not exist.
    """
    rules = await require_rules(db, game_id)

    character = await get_character(db, character_id)
    if character is None:
        raise CharacterNotFoundError(character_id)

    modifier = stat_modifier(character, skill, attribute, bonus_modifier)
    return resolve_check(rules.check_mechanics, modifier, difficulty, rng)


async def contest(
    db: AsyncSession,
    game_id: str,
    attacker_id: str,
    defender_id: str,
    attacker_skill: str | None = None,
    defender_skill: str | None = None,
    attacker_attribute: str | None = None,
    defender_attribute: str | None = None,
    rng: random.Random | None = None,
) -> ContestResult:
    """Opposed check: both sides roll at difficulty 0 and the higher total wins.

    Each side keeps its own critical flags, but only totals decide the winner.
    """
    await require_rules(db, game_id)

    attacker_result = await check(
        db, game_id, attacker_id, 0,
        skill=attacker_skill, attribute=attacker_attribute, rng=rng,
    )
    defender_result = await check(
        db, game_id, defender_id, 0,
        skill=defender_skill, attribute=defender_attribute, rng=rng,
    )

    if attacker_result.total > defender_result.total:
        winner = "attacker"
    elif defender_result.total > attacker_result.total:
        winner = "defender"
    else:
        winner = "tie"

    return ContestResult(
        attacker_result=attacker_result,
        defender_result=defender_result,
        winner=winner,
    )
