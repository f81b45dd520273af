from typing import Optional

from pydantic import BaseModel, Field


class RollRequest(BaseModel):
    expression: str = Field(max_length=100)


class CheckRequest(BaseModel):
    game_id: str
    character_id: str
    skill: Optional[str] = None
    attribute: Optional[str] = None
    difficulty: int
    bonus_modifier: int | float = 0


class ContestRequest(BaseModel):
    game_id: str
    attacker_id: str
    defender_id: str
    attacker_skill: Optional[str] = None
    defender_skill: Optional[str] = None
    attacker_attribute: Optional[str] = None
    defender_attribute: Optional[str] = None
