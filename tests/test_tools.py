"""Tests for the tool surface: registration, validation and structured errors."""

from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import create_character, create_game
from rpg_engine.models.combat import Combat
from rpg_engine.tools import invoke_tool, list_tools
from rpg_engine.tools.registry import TOOLS


def test_every_operation_is_registered():
    expected = {
        "roll", "check", "contest",
        "start_combat", "get_combat", "get_active_combat", "next_turn",
        "get_current_combatant", "remove_participant", "end_combat", "add_combat_log",
        "apply_status_effect", "get_status_effect", "remove_status_effect",
        "list_status_effects", "tick_durations", "modify_stacks", "clear_effects",
        "get_effective_modifiers",
        "create_table", "create_simple_table", "get_table", "update_table", "delete_table",
        "list_tables", "roll_table", "modify_table_entries",
        "create_resource", "get_resource", "update_resource", "delete_resource",
        "list_resources", "update_resource_value", "get_resource_history",
        "create_timer", "get_timer", "update_timer", "delete_timer", "list_timers",
        "modify_timer_state",
    }
    assert expected <= set(TOOLS)


def test_list_tools_includes_input_schema():
    listed = {t["name"]: t for t in list_tools()}
    schema = listed["roll"]["input_schema"]
    assert "expression" in schema["properties"]
    assert listed["roll"]["description"]


# ---------------------------------------------------------------------------
# Error results
# ---------------------------------------------------------------------------

async def test_unknown_tool(db_session: AsyncSession):
    result = await invoke_tool("teleport", {}, db_session)
    assert result["isError"] is True
    assert result["errorCode"] == "UNKNOWN_TOOL"


async def test_invalid_payload_reports_field(db_session: AsyncSession):
    result = await invoke_tool("check", {"game_id": "g"}, db_session)
    assert result["errorCode"] == "INVALID_INPUT"
    assert "character_id" in result["message"]
    assert result["suggestions"]


async def test_bad_dice_expression(db_session: AsyncSession):
    result = await invoke_tool("roll", {"expression": "many dice"}, db_session)
    assert result["isError"] is True
    assert result["errorCode"] == "INVALID_INPUT"
    assert "Invalid dice expression" in result["message"]


async def test_not_found_is_a_result(db_session: AsyncSession):
    result = await invoke_tool("get_resource", {"resource_id": "nope"}, db_session)
    assert result == {
        "isError": True,
        "errorCode": "RESOURCE_NOT_FOUND",
        "message": "Resource 'nope' not found",
        "suggestions": result["suggestions"],
        "entityType": "resource",
        "entityId": "nope",
    }


async def test_rules_not_configured(db_session: AsyncSession):
    bare = await create_game(db_session, name="No Rules")
    hero = await create_character(db_session, bare, "Hero")
    game_id = bare.id
    result = await invoke_tool(
        "check", {"game_id": game_id, "character_id": hero.id, "difficulty": 10}, db_session
    )
    assert result["errorCode"] == "RULES_NOT_CONFIGURED"
    assert result["entityId"] == game_id


async def test_start_combat_missing_participant_rolls_back(db_session: AsyncSession, game):
    hero = await create_character(db_session, game, "Hero")
    result = await invoke_tool(
        "start_combat",
        {"game_id": game.id, "location_id": "inn", "participant_ids": [hero.id, "ghost"]},
        db_session,
    )
    assert result["errorCode"] == "CHARACTER_NOT_FOUND"
    assert result["entityId"] == "ghost"
    count = (await db_session.execute(select(func.count()).select_from(Combat))).scalar_one()
    assert count == 0


async def test_unknown_game(db_session: AsyncSession):
    result = await invoke_tool(
        "create_timer", {"game_id": "nope", "name": "Fuse", "timer_type": "countdown"}, db_session
    )
    assert result["errorCode"] == "GAME_NOT_FOUND"


async def test_roll_empty_table(db_session: AsyncSession, game):
    created = await invoke_tool("create_table", {"game_id": game.id, "name": "Empty"}, db_session)
    table_id = created["result"]["id"]
    result = await invoke_tool("roll_table", {"table_id": table_id}, db_session)
    assert result["errorCode"] == "TABLE_EMPTY"

    missing = await invoke_tool("roll_table", {"table_id": "nope"}, db_session)
    assert missing["errorCode"] == "TABLE_NOT_FOUND"


async def test_no_active_combat(db_session: AsyncSession, game):
    result = await invoke_tool("get_active_combat", {"game_id": game.id}, db_session)
    assert result["errorCode"] == "COMBAT_NOT_FOUND"


# ---------------------------------------------------------------------------
# Successful results are JSON-ready
# ---------------------------------------------------------------------------

async def test_roll_result(db_session: AsyncSession):
    with patch("random.randint", side_effect=[3, 5]):
        result = await invoke_tool("roll", {"expression": "2d6+1"}, db_session)
    assert result == {
        "isError": False,
        "result": {"expression": "2d6+1", "rolls": [3, 5], "modifier": 1, "total": 9},
    }


async def test_combat_round_trip(db_session: AsyncSession, game, bus, recorder):
    a = await create_character(db_session, game, "A")
    b = await create_character(db_session, game, "B")
    with patch("random.randint", side_effect=[7, 15]):
        started = await invoke_tool(
            "start_combat",
            {"game_id": game.id, "location_id": "bridge", "participant_ids": [a.id, b.id]},
            db_session,
            bus,
        )
    combat = started["result"]
    assert combat["status"] == "active"
    assert [p["character_id"] for p in combat["participants"]] == [b.id, a.id]

    current = await invoke_tool("get_current_combatant", {"combat_id": combat["id"]}, db_session)
    assert current["result"]["character_id"] == b.id

    advanced = await invoke_tool("next_turn", {"combat_id": combat["id"]}, db_session, bus)
    assert advanced["result"]["current_turn"] == 1

    logged = await invoke_tool(
        "add_combat_log", {"combat_id": combat["id"], "entry": "B swings"}, db_session
    )
    assert logged["result"]["log"] == ["B swings"]
    assert recorder.types == ["combat:started", "combat:turn"]


async def test_status_effect_flow(db_session: AsyncSession, game):
    applied = await invoke_tool(
        "apply_status_effect",
        {
            "game_id": game.id, "target_id": "hero", "name": "Rage",
            "effect_type": "buff", "duration": 1, "stacks": 2, "effects": {"strength": 2},
        },
        db_session,
    )
    assert applied["result"]["stacks"] == 2
    assert applied["result"]["effects"] == {"strength": 2.0}

    modifiers = await invoke_tool("get_effective_modifiers", {"target_id": "hero"}, db_session)
    assert modifiers["result"]["modifiers"] == {"strength": 4.0}

    ticked = await invoke_tool("tick_durations", {"game_id": game.id}, db_session)
    assert [e["name"] for e in ticked["result"]["expired"]] == ["Rage"]


async def test_resource_value_result(db_session: AsyncSession, game):
    created = await invoke_tool(
        "create_resource",
        {
            "game_id": game.id, "owner_type": "character", "owner_id": "hero",
            "name": "HP", "value": 90, "min_value": 0, "max_value": 100,
        },
        db_session,
    )
    resource_id = created["result"]["id"]
    updated = await invoke_tool(
        "update_resource_value",
        {"resource_id": resource_id, "mode": "delta", "value": 20},
        db_session,
    )
    assert updated["result"]["resource"]["value"] == 100
    assert updated["result"]["change"]["delta"] == 10

    history = await invoke_tool("get_resource_history", {"resource_id": resource_id}, db_session)
    assert len(history["result"]) == 1


async def test_update_resource_null_name_rejected(db_session: AsyncSession):
    result = await invoke_tool("update_resource", {"resource_id": "r", "name": None}, db_session)
    assert result["errorCode"] == "INVALID_INPUT"
    assert "cannot be set to null" in result["message"]


async def test_table_and_timer_tools(db_session: AsyncSession, game):
    table = await invoke_tool(
        "create_simple_table", {"game_id": game.id, "name": "Loot", "results": ["Coin"]}, db_session
    )
    rolled = await invoke_tool("roll_table", {"table_id": table["result"]["id"]}, db_session)
    assert rolled["result"]["result"] == "Coin"
    assert rolled["result"]["roll"]["expression"] == "1d1"

    timer = await invoke_tool(
        "create_timer",
        {"game_id": game.id, "name": "Fuse", "timer_type": "countdown", "max_value": 1},
        db_session,
    )
    ticked = await invoke_tool(
        "modify_timer_state", {"timer_id": timer["result"]["id"], "mode": "tick"}, db_session
    )
    assert ticked["result"]["just_triggered"] is True
    assert ticked["result"]["timer"]["current_value"] == 0
