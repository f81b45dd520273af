from rpg_engine.schemas.timer import (
    CreateTimerRequest,
    ListTimersRequest,
    ModifyTimerRequest,
    TimerIdRequest,
    TimerResponse,
    TimerTickResponse,
    UpdateTimerRequest,
)
from rpg_engine.services import timer_service
from rpg_engine.tools.errors import not_found
from rpg_engine.tools.registry import ToolContext, tool


@tool("create_timer", "Create a countdown, stopwatch or progress clock", CreateTimerRequest)
async def create_timer(params: CreateTimerRequest, ctx: ToolContext):
    timer = await timer_service.create_timer(
        ctx.db,
        params.game_id,
        params.name,
        params.timer_type,
        description=params.description,
        current_value=params.current_value,
        max_value=params.max_value,
        direction=params.direction,
        trigger_at=params.trigger_at,
        unit=params.unit,
        visible_to_players=params.visible_to_players,
    )
    return TimerResponse.model_validate(timer)


@tool("get_timer", "Get a timer by id", TimerIdRequest)
async def get_timer(params: TimerIdRequest, ctx: ToolContext):
    timer = await timer_service.get_timer(ctx.db, params.timer_id)
    if timer is None:
        return not_found("timer", params.timer_id)
    return TimerResponse.model_validate(timer)


@tool("update_timer", "Update a timer's settings", UpdateTimerRequest)
async def update_timer(params: UpdateTimerRequest, ctx: ToolContext):
    timer = await timer_service.update_timer(ctx.db, params.timer_id, params.changes())
    if timer is None:
        return not_found("timer", params.timer_id)
    return TimerResponse.model_validate(timer)


@tool("delete_timer", "Delete a timer", TimerIdRequest)
async def delete_timer(params: TimerIdRequest, ctx: ToolContext):
    if not await timer_service.delete_timer(ctx.db, params.timer_id):
        return not_found("timer", params.timer_id)
    return {"deleted": True, "timer_id": params.timer_id}


@tool("list_timers", "List a game's timers", ListTimersRequest)
async def list_timers(params: ListTimersRequest, ctx: ToolContext):
    timers = await timer_service.list_timers(
        ctx.db, params.game_id, include_triggered=params.include_triggered
    )
    return [TimerResponse.model_validate(t) for t in timers]


@tool("modify_timer_state", "Tick a timer forward or reset it", ModifyTimerRequest)
async def modify_timer_state(params: ModifyTimerRequest, ctx: ToolContext):
    tick = await timer_service.modify_timer_state(
        ctx.db, params.timer_id, params.mode.value, amount=params.amount, bus=ctx.bus
    )
    if tick is None:
        return not_found("timer", params.timer_id)
    return TimerTickResponse(
        timer=TimerResponse.model_validate(tick.timer),
        previous_value=tick.previous_value,
        just_triggered=tick.just_triggered,
    )
