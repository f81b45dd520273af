"""Random tables: storage and roll resolution.

Resolution of a roll against a table:
  1. roll = table dice total + modifier
  2. The first entry in stored order whose [min_roll, max_roll] contains the
     roll wins. Entries may overlap; later overlapping entries never match.
  3. No range matched: weighted draw among entries with a positive weight.
  4. Nothing weighted either: the first entry, so a non-empty table always
     yields a result.
  5. A chosen entry with a subtable is resolved again against that table
     (modifier reset to 0) and nested under subtable_results.

Subtable chains are followed without a depth limit.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.config import settings
from rpg_engine.models.random_table import RandomTable, RandomTableEntry
from rpg_engine.schemas.table import RandomTableResponse, TableEntryIn, TableEntryResponse
from rpg_engine.services.dice_service import DiceRoll, parse_expression, roll
from rpg_engine.services.entity_service import validate_game_exists

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "category", "entries", "roll_expression"})


@dataclass
class TableRollResult:
    table: RandomTableResponse
    roll: DiceRoll
    roll_total: int
    entry: TableEntryResponse
    result: str
    subtable_results: list["TableRollResult"] = field(default_factory=list)


@dataclass
class EntryModification:
    table: RandomTable
    added: int
    removed: int
    invalid_indices: list[int] = field(default_factory=list)


def _build_entries(entries: Sequence[TableEntryIn]) -> list[RandomTableEntry]:
    return [
        RandomTableEntry(
            position=position,
            min_roll=entry.min_roll,
            max_roll=entry.max_roll,
            result=entry.result,
            weight=entry.weight,
            subtable_id=entry.subtable_id,
        )
        for position, entry in enumerate(entries)
    ]


def _as_input(entry: RandomTableEntry) -> TableEntryIn:
    return TableEntryIn(
        min_roll=entry.min_roll,
        max_roll=entry.max_roll,
        result=entry.result,
        weight=entry.weight,
        subtable_id=entry.subtable_id,
    )


def select_entry(
    entries: Sequence[RandomTableEntry],
    roll_total: int,
    rng: random.Random | None = None,
) -> RandomTableEntry:
    """Pick the entry for a roll: range match, then weighted draw, then the first entry."""
    for entry in entries:
        if entry.min_roll <= roll_total <= entry.max_roll:
            return entry

    weighted = [e for e in entries if e.weight is not None and e.weight > 0]
    if weighted:
        _rand = rng or random
        total_weight = sum(e.weight for e in weighted)
        target = _rand.random() * total_weight
        cumulative = 0.0
        for entry in weighted:
            cumulative += entry.weight
            if target < cumulative:
                return entry
        # Floating point can leave target == total_weight
        return weighted[-1]

    logger.warning(
        "No entry matches roll %s and none are weighted; using the first entry", roll_total
    )
    return entries[0]


async def create_table(
    db: AsyncSession,
    game_id: str,
    name: str,
    description: str = "",
    category: str | None = None,
    entries: Sequence[TableEntryIn] | None = None,
    roll_expression: str | None = None,
) -> RandomTable:
    await validate_game_exists(db, game_id)
    roll_expression = roll_expression or settings.default_table_roll
    parse_expression(roll_expression)

    table = RandomTable(
        game_id=game_id,
        name=name,
        description=description,
        category=category,
        roll_expression=roll_expression,
        entries=_build_entries(entries or []),
    )
    db.add(table)
    await db.flush()
    return table


async def create_simple_table(
    db: AsyncSession,
    game_id: str,
    name: str,
    results: Sequence[str],
    category: str | None = None,
) -> RandomTable:
    """One entry per result, rolled on a die with as many sides as results."""
    if not results:
        raise ValueError("A simple table needs at least one result")
    entries = [
        TableEntryIn(min_roll=i, max_roll=i, result=result)
        for i, result in enumerate(results, start=1)
    ]
    return await create_table(
        db, game_id, name,
        category=category,
        entries=entries,
        roll_expression=f"1d{len(results)}",
    )


async def get_table(db: AsyncSession, table_id: str) -> RandomTable | None:
    return await db.get(RandomTable, table_id)


async def list_tables(
    db: AsyncSession, game_id: str, category: str | None = None
) -> list[RandomTable]:
    query = select(RandomTable).where(RandomTable.game_id == game_id)
    if category is not None:
        query = query.where(RandomTable.category == category)
    result = await db.execute(query.order_by(RandomTable.name))
    return list(result.scalars().all())


async def update_table(
    db: AsyncSession, table_id: str, changes: dict[str, Any]
) -> RandomTable | None:
    """Apply a partial update. entries, when present, replace the whole list."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update table field(s): {', '.join(sorted(unknown))}")
    if changes.get("roll_expression") is not None:
        parse_expression(changes["roll_expression"])

    table = await get_table(db, table_id)
    if table is None:
        return None

    for field_name, field_value in changes.items():
        if field_name == "entries":
            table.entries = _build_entries(field_value)
        else:
            setattr(table, field_name, field_value)
    await db.flush()
    return table


async def delete_table(db: AsyncSession, table_id: str) -> bool:
    table = await get_table(db, table_id)
    if table is None:
        return False
    await db.delete(table)
    await db.flush()
    return True


async def modify_table_entries(
    db: AsyncSession,
    table_id: str,
    add: Sequence[TableEntryIn] | None = None,
    remove: Sequence[int] | None = None,
) -> EntryModification | None:
    """Remove entries by index, then append new ones.

    Indices refer to the list before anything is removed; out-of-range indices
    are skipped and reported back.
    """
    table = await get_table(db, table_id)
    if table is None:
        return None

    entries = [_as_input(entry) for entry in table.entries]
    unique_indices = sorted(set(remove or []))
    invalid = [i for i in unique_indices if i < 0 or i >= len(entries)]
    valid = [i for i in unique_indices if 0 <= i < len(entries)]
    for index in reversed(valid):
        del entries[index]

    entries.extend(add or [])
    table.entries = _build_entries(entries)
    await db.flush()

    return EntryModification(
        table=table,
        added=len(add or []),
        removed=len(valid),
        invalid_indices=invalid,
    )


async def roll_table(
    db: AsyncSession,
    table_id: str,
    modifier: int = 0,
    rng: random.Random | None = None,
) -> TableRollResult | None:
    """Roll on a table. Returns None when the table is unknown or has no entries."""
    table = await get_table(db, table_id)
    if table is None or not table.entries:
        return None

    dice = roll(table.roll_expression, rng)
    roll_total = dice.total + modifier
    entry = select_entry(table.entries, roll_total, rng)

    result = TableRollResult(
        table=RandomTableResponse.model_validate(table),
        roll=dice,
        roll_total=roll_total,
        entry=TableEntryResponse.model_validate(entry),
        result=entry.result,
    )

    if entry.subtable_id:
        nested = await roll_table(db, entry.subtable_id, 0, rng)
        if nested is not None:
            result.subtable_results.append(nested)
    return result
