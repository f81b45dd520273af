from rpg_engine.schemas.status import (
    ApplyStatusEffectRequest,
    ClearEffectsRequest,
    EffectiveModifiersRequest,
    ListStatusEffectsRequest,
    ModifyStacksRequest,
    StatusEffectIdRequest,
    StatusEffectResponse,
    TickDurationsRequest,
)
from rpg_engine.services import status_service
from rpg_engine.tools.errors import not_found
from rpg_engine.tools.registry import ToolContext, tool


@tool(
    "apply_status_effect",
    "Apply a status effect; reapplying the same name stacks and refreshes duration",
    ApplyStatusEffectRequest,
)
async def apply_status_effect(params: ApplyStatusEffectRequest, ctx: ToolContext):
    effect = await status_service.apply_status_effect(
        ctx.db,
        params.game_id,
        params.target_id,
        params.name,
        description=params.description,
        effect_type=params.effect_type,
        duration=params.duration,
        stacks=params.stacks,
        max_stacks=params.max_stacks,
        effects=params.effects,
        source_id=params.source_id,
        source_type=params.source_type,
        bus=ctx.bus,
    )
    return StatusEffectResponse.model_validate(effect)


@tool("get_status_effect", "Get a status effect by id", StatusEffectIdRequest)
async def get_status_effect(params: StatusEffectIdRequest, ctx: ToolContext):
    effect = await status_service.get_status_effect(ctx.db, params.effect_id)
    if effect is None:
        return not_found("status_effect", params.effect_id)
    return StatusEffectResponse.model_validate(effect)


@tool("remove_status_effect", "Remove a status effect", StatusEffectIdRequest)
async def remove_status_effect(params: StatusEffectIdRequest, ctx: ToolContext):
    if not await status_service.remove_status_effect(ctx.db, params.effect_id):
        return not_found("status_effect", params.effect_id)
    return {"removed": True, "effect_id": params.effect_id}


@tool("list_status_effects", "List a target's status effects", ListStatusEffectsRequest)
async def list_status_effects(params: ListStatusEffectsRequest, ctx: ToolContext):
    effects = await status_service.list_status_effects(
        ctx.db, params.target_id, effect_type=params.effect_type
    )
    return [StatusEffectResponse.model_validate(e) for e in effects]


@tool("tick_durations", "Count down timed status effects in a game", TickDurationsRequest)
async def tick_durations(params: TickDurationsRequest, ctx: ToolContext):
    return await status_service.tick_durations(
        ctx.db, params.game_id, amount=params.amount, bus=ctx.bus
    )


@tool("modify_stacks", "Add or remove stacks; zero stacks removes the effect", ModifyStacksRequest)
async def modify_stacks(params: ModifyStacksRequest, ctx: ToolContext):
    effect = await status_service.modify_stacks(ctx.db, params.effect_id, params.delta)
    if effect is None:
        return not_found("status_effect", params.effect_id)
    return effect


@tool("clear_effects", "Remove a target's effects, optionally by type or name", ClearEffectsRequest)
async def clear_effects(params: ClearEffectsRequest, ctx: ToolContext):
    removed = await status_service.clear_effects(
        ctx.db, params.target_id, effect_type=params.effect_type, name=params.name
    )
    return {"target_id": params.target_id, "removed": removed}


@tool(
    "get_effective_modifiers",
    "Net modifiers on a target summed across its effects and stacks",
    EffectiveModifiersRequest,
)
async def get_effective_modifiers(params: EffectiveModifiersRequest, ctx: ToolContext):
    return await status_service.get_effective_modifiers(ctx.db, params.target_id)
