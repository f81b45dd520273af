from typing import Optional

from pydantic import BaseModel, Field

from rpg_engine.models.combat import CombatStatus


class StartCombatRequest(BaseModel):
    game_id: str
    location_id: str
    participant_ids: list[str] = Field(max_length=100)


class CombatIdRequest(BaseModel):
    combat_id: str


class ActiveCombatRequest(BaseModel):
    game_id: str


class RemoveParticipantRequest(BaseModel):
    combat_id: str
    character_id: str


class CombatLogRequest(BaseModel):
    combat_id: str
    entry: str = Field(min_length=1)


class ParticipantResponse(BaseModel):
    character_id: str
    initiative: int
    is_active: bool

    model_config = {"from_attributes": True}


class CombatResponse(BaseModel):
    id: str
    game_id: str
    location_id: str
    participants: list[ParticipantResponse]
    current_turn: int
    round: int
    status: CombatStatus
    log: list[str]

    model_config = {"from_attributes": True}


class CurrentCombatantResponse(BaseModel):
    combat_id: str
    character_id: Optional[str]
