from rpg_engine.schemas.dice import CheckRequest, ContestRequest, RollRequest
from rpg_engine.services import dice_service
from rpg_engine.tools.registry import ToolContext, tool


@tool("roll", "Roll dice using standard notation (e.g. 2d6+3, 1d20, 4d6-2)", RollRequest)
async def roll_dice(params: RollRequest, ctx: ToolContext):
    return dice_service.roll(params.expression)


@tool("check", "Perform a skill or attribute check against a difficulty", CheckRequest)
async def check(params: CheckRequest, ctx: ToolContext):
    return await dice_service.check(
        ctx.db,
        params.game_id,
        params.character_id,
        params.difficulty,
        skill=params.skill,
        attribute=params.attribute,
        bonus_modifier=params.bonus_modifier,
    )


@tool("contest", "Opposed check between two characters; higher total wins", ContestRequest)
async def contest(params: ContestRequest, ctx: ToolContext):
    return await dice_service.contest(
        ctx.db,
        params.game_id,
        params.attacker_id,
        params.defender_id,
        attacker_skill=params.attacker_skill,
        defender_skill=params.defender_skill,
        attacker_attribute=params.attacker_attribute,
        defender_attribute=params.defender_attribute,
    )
