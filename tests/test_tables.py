"""Tests for random tables.

Covers:
- Range matching, first match wins on overlap, modifier applied to the roll
- Weighted fallback when no range matches
- First-entry fallback when nothing matches and nothing is weighted
- Subtable resolution
- Simple tables, default roll expression, expression validation
- Wholesale entry replacement and index-based entry edits
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import ScriptedRandom
from rpg_engine.models.random_table import RandomTableEntry
from rpg_engine.schemas.table import TableEntryIn, UpdateTableRequest
from rpg_engine.services.dice_service import DiceExpressionError
from rpg_engine.services.entity_service import GameNotFoundError
from rpg_engine.services.table_service import (
    create_simple_table,
    create_table,
    delete_table,
    get_table,
    list_tables,
    modify_table_entries,
    roll_table,
    select_entry,
    update_table,
)


def _entry(low: int, high: int, result: str, weight: float | None = None) -> TableEntryIn:
    return TableEntryIn(min_roll=low, max_roll=high, result=result, weight=weight)


def _row(low: int, high: int, result: str, weight: float | None = None) -> RandomTableEntry:
    return RandomTableEntry(min_roll=low, max_roll=high, result=result, weight=weight)


# ---------------------------------------------------------------------------
# select_entry
# ---------------------------------------------------------------------------

def test_select_entry_range_match():
    entries = [_row(1, 3, "low"), _row(4, 6, "high")]
    assert select_entry(entries, 5).result == "high"


def test_select_entry_first_overlap_wins():
    entries = [_row(1, 10, "broad"), _row(5, 5, "exact")]
    assert select_entry(entries, 5).result == "broad"


def test_select_entry_weighted_fallback():
    entries = [_row(1, 1, "a", weight=1), _row(2, 2, "b", weight=3), _row(3, 3, "c")]
    # 0.5 * 4 = 2.0: past a's cumulative weight of 1, inside b's
    assert select_entry(entries, 99, ScriptedRandom([], draws=[0.5])).result == "b"
    assert select_entry(entries, 99, ScriptedRandom([], draws=[0.1])).result == "a"


def test_select_entry_falls_back_to_first_entry():
    entries = [_row(1, 2, "first"), _row(3, 4, "second", weight=0)]
    for roll_total in (-5, 0, 50, 1000):
        assert select_entry(entries, roll_total).result == "first"


# ---------------------------------------------------------------------------
# create / list / delete
# ---------------------------------------------------------------------------

async def test_create_table_defaults_to_d100(db_session: AsyncSession, game):
    table = await create_table(db_session, game.id, "Weather", entries=[_entry(1, 100, "Rain")])
    assert table.roll_expression == "1d100"
    assert [e.result for e in table.entries] == ["Rain"]


async def test_create_table_rejects_bad_expression(db_session: AsyncSession, game):
    with pytest.raises(DiceExpressionError):
        await create_table(db_session, game.id, "Broken", roll_expression="lots")


async def test_create_table_unknown_game(db_session: AsyncSession):
    with pytest.raises(GameNotFoundError):
        await create_table(db_session, "nope", "Weather")


async def test_create_simple_table(db_session: AsyncSession, game):
    table = await create_simple_table(db_session, game.id, "Loot", ["Coin", "Gem", "Sword"])
    assert table.roll_expression == "1d3"
    assert [(e.min_roll, e.max_roll, e.result) for e in table.entries] == [
        (1, 1, "Coin"), (2, 2, "Gem"), (3, 3, "Sword"),
    ]


async def test_create_simple_table_requires_results(db_session: AsyncSession, game):
    with pytest.raises(ValueError):
        await create_simple_table(db_session, game.id, "Empty", [])


async def test_list_and_delete(db_session: AsyncSession, game):
    await create_simple_table(db_session, game.id, "Weather", ["Sun"], category="travel")
    loot = await create_simple_table(db_session, game.id, "Loot", ["Coin"], category="treasure")

    assert [t.name for t in await list_tables(db_session, game.id)] == ["Loot", "Weather"]
    assert [t.name for t in await list_tables(db_session, game.id, category="travel")] == ["Weather"]

    assert await delete_table(db_session, loot.id) is True
    assert await get_table(db_session, loot.id) is None
    assert await delete_table(db_session, loot.id) is False


# ---------------------------------------------------------------------------
# roll_table
# ---------------------------------------------------------------------------

async def test_roll_table_applies_modifier(db_session: AsyncSession, game):
    table = await create_table(
        db_session, game.id, "Reaction",
        entries=[_entry(2, 6, "Hostile"), _entry(7, 9, "Wary"), _entry(10, 14, "Friendly")],
        roll_expression="2d6",
    )
    result = await roll_table(db_session, table.id, modifier=2, rng=ScriptedRandom([4, 4]))
    assert result.roll.total == 8
    assert result.roll_total == 10
    assert result.result == "Friendly"
    assert result.subtable_results == []


async def test_roll_table_out_of_range_returns_first_entry(db_session: AsyncSession, game):
    table = await create_table(
        db_session, game.id, "Sparse",
        entries=[_entry(1, 1, "One"), _entry(2, 2, "Two")],
        roll_expression="1d20",
    )
    result = await roll_table(db_session, table.id, rng=ScriptedRandom([17]))
    assert result.result == "One"


async def test_roll_table_follows_subtable(db_session: AsyncSession, game):
    gems = await create_simple_table(db_session, game.id, "Gems", ["Ruby", "Opal"])
    treasure = await create_table(
        db_session, game.id, "Treasure",
        entries=[
            _entry(1, 3, "Coins"),
            TableEntryIn(min_roll=4, max_roll=6, result="Gem", subtable_id=gems.id),
        ],
        roll_expression="1d6",
    )
    result = await roll_table(db_session, treasure.id, modifier=1, rng=ScriptedRandom([4, 2]))
    assert result.result == "Gem"
    assert len(result.subtable_results) == 1
    nested = result.subtable_results[0]
    assert nested.table.id == gems.id
    assert nested.roll_total == 2
    assert nested.result == "Opal"


async def test_roll_table_dangling_subtable_is_ignored(db_session: AsyncSession, game):
    table = await create_table(
        db_session, game.id, "Dangling",
        entries=[TableEntryIn(min_roll=1, max_roll=1, result="Door", subtable_id="gone")],
        roll_expression="1d1",
    )
    result = await roll_table(db_session, table.id)
    assert result.result == "Door"
    assert result.subtable_results == []


async def test_roll_empty_or_unknown_table(db_session: AsyncSession, game):
    empty = await create_table(db_session, game.id, "Empty")
    assert await roll_table(db_session, empty.id) is None
    assert await roll_table(db_session, "missing") is None


# ---------------------------------------------------------------------------
# Editing entries
# ---------------------------------------------------------------------------

async def test_update_replaces_entries_wholesale(db_session: AsyncSession, game):
    table = await create_simple_table(db_session, game.id, "Loot", ["Coin", "Gem"])
    patch = UpdateTableRequest.model_validate(
        {"table_id": table.id, "entries": [{"roll": 1, "result": "Map"}], "roll_expression": "1d1"}
    )
    updated = await update_table(db_session, table.id, patch.changes())
    assert [e.result for e in updated.entries] == ["Map"]
    assert updated.roll_expression == "1d1"
    assert updated.name == "Loot"


async def test_update_category_can_be_cleared(db_session: AsyncSession, game):
    table = await create_simple_table(db_session, game.id, "Loot", ["Coin"], category="treasure")
    patch = UpdateTableRequest.model_validate({"table_id": table.id, "category": None})
    updated = await update_table(db_session, table.id, patch.changes())
    assert updated.category is None


async def test_update_rejects_bad_expression(db_session: AsyncSession, game):
    table = await create_simple_table(db_session, game.id, "Loot", ["Coin"])
    with pytest.raises(DiceExpressionError):
        await update_table(db_session, table.id, {"roll_expression": "d"})


async def test_update_unknown_table(db_session: AsyncSession):
    assert await update_table(db_session, "missing", {"name": "x"}) is None


async def test_modify_entries_removes_by_original_index_then_appends(
    db_session: AsyncSession, game
):
    table = await create_simple_table(db_session, game.id, "Loot", ["A", "B", "C", "D"])
    modification = await modify_table_entries(
        db_session, table.id, add=[_entry(9, 9, "E")], remove=[0, 2, 7, -1]
    )
    assert [e.result for e in modification.table.entries] == ["B", "D", "E"]
    assert modification.added == 1
    assert modification.removed == 2
    assert modification.invalid_indices == [-1, 7]


async def test_modify_entries_unknown_table(db_session: AsyncSession):
    assert await modify_table_entries(db_session, "missing", remove=[0]) is None
