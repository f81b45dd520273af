"""Lookups against the entity store that owns games and characters."""

from sqlalchemy.ext.asyncio import AsyncSession

from rpg_engine.models.game import Character, Game


class GameNotFoundError(ValueError):
    def __init__(self, game_id: str):
        super().__init__(f"Game '{game_id}' not found")
        self.game_id = game_id


class CharacterNotFoundError(ValueError):
    def __init__(self, character_id: str, message: str | None = None):
        super().__init__(message or f"Character '{character_id}' not found")
        self.character_id = character_id


async def get_game(db: AsyncSession, game_id: str) -> Game | None:
    return await db.get(Game, game_id)


async def validate_game_exists(db: AsyncSession, game_id: str) -> Game:
    """Return the game or raise GameNotFoundError, so no record is orphaned."""
    game = await get_game(db, game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    return game


async def get_character(db: AsyncSession, character_id: str) -> Character | None:
    return await db.get(Character, character_id)
