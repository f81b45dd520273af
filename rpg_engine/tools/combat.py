from rpg_engine.schemas.combat import (
    ActiveCombatRequest,
    CombatIdRequest,
    CombatLogRequest,
    CombatResponse,
    CurrentCombatantResponse,
    RemoveParticipantRequest,
    StartCombatRequest,
)
from rpg_engine.services import combat_service
from rpg_engine.tools.errors import ToolError, not_found
from rpg_engine.tools.registry import ToolContext, tool


def _combat_or_missing(combat, combat_id: str) -> CombatResponse | ToolError:
    if combat is None:
        return not_found("combat", combat_id)
    return CombatResponse.model_validate(combat)


@tool("start_combat", "Start a combat encounter and roll initiative", StartCombatRequest)
async def start_combat(params: StartCombatRequest, ctx: ToolContext):
    combat = await combat_service.start_combat(
        ctx.db, params.game_id, params.location_id, params.participant_ids, bus=ctx.bus
    )
    return CombatResponse.model_validate(combat)


@tool("get_combat", "Get a combat by id", CombatIdRequest)
async def get_combat(params: CombatIdRequest, ctx: ToolContext):
    combat = await combat_service.get_combat(ctx.db, params.combat_id)
    return _combat_or_missing(combat, params.combat_id)


@tool("get_active_combat", "Get the active combat of a game, if any", ActiveCombatRequest)
async def get_active_combat(params: ActiveCombatRequest, ctx: ToolContext):
    combat = await combat_service.get_active_combat(ctx.db, params.game_id)
    if combat is None:
        return ToolError(
            "COMBAT_NOT_FOUND",
            "No active combat in this game",
            entity_type="game",
            entity_id=params.game_id,
        )
    return CombatResponse.model_validate(combat)


@tool("next_turn", "Advance combat to the next active participant", CombatIdRequest)
async def next_turn(params: CombatIdRequest, ctx: ToolContext):
    combat = await combat_service.next_turn(ctx.db, params.combat_id, bus=ctx.bus)
    return _combat_or_missing(combat, params.combat_id)


@tool("get_current_combatant", "Character whose turn it is", CombatIdRequest)
async def get_current_combatant(params: CombatIdRequest, ctx: ToolContext):
    if await combat_service.get_combat(ctx.db, params.combat_id) is None:
        return not_found("combat", params.combat_id)
    character_id = await combat_service.get_current_combatant(ctx.db, params.combat_id)
    return CurrentCombatantResponse(combat_id=params.combat_id, character_id=character_id)


@tool("remove_participant", "Take a participant out of the turn order", RemoveParticipantRequest)
async def remove_participant(params: RemoveParticipantRequest, ctx: ToolContext):
    combat = await combat_service.remove_participant(
        ctx.db, params.combat_id, params.character_id, bus=ctx.bus
    )
    return _combat_or_missing(combat, params.combat_id)


@tool("end_combat", "Resolve a combat", CombatIdRequest)
async def end_combat(params: CombatIdRequest, ctx: ToolContext):
    combat = await combat_service.end_combat(ctx.db, params.combat_id, bus=ctx.bus)
    return _combat_or_missing(combat, params.combat_id)


@tool("add_combat_log", "Append an entry to the combat log", CombatLogRequest)
async def add_combat_log(params: CombatLogRequest, ctx: ToolContext):
    combat = await combat_service.add_combat_log(ctx.db, params.combat_id, params.entry)
    return _combat_or_missing(combat, params.combat_id)
