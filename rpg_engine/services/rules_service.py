import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.schemas.rules import RuleSystem
from rpg_engine.services.entity_service import get_game

logger = logging.getLogger(__name__)


class RulesNotConfiguredError(ValueError):
    def __init__(self, game_id: str):
        super().__init__(f"No rules set for game '{game_id}'")
        self.game_id = game_id


async def get_rules(db: AsyncSession, game_id: str) -> RuleSystem | None:
    """Return the game's ruleset, or None when the game is unknown or has none.

    A stored ruleset that no longer validates is treated as absent.
    """
    game = await get_game(db, game_id)
    if game is None or not game.rules:
        return None
    try:
        return RuleSystem.model_validate(game.rules)
    except ValidationError as exc:
        logger.warning("Ignoring invalid ruleset stored on game %s: %s", game_id, exc)
        return None


async def require_rules(db: AsyncSession, game_id: str) -> RuleSystem:
    rules = await get_rules(db, game_id)
    if rules is None:
        raise RulesNotConfiguredError(game_id)
    return rules


async def set_rules(db: AsyncSession, game_id: str, rules: RuleSystem) -> bool:
    game = await get_game(db, game_id)
    if game is None:
        return False
    game.rules = rules.model_dump(mode="json")
    await db.flush()
    return True
