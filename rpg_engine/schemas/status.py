from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from rpg_engine.models.status_effect import EffectType


class ApplyStatusEffectRequest(BaseModel):
    game_id: str
    target_id: str
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    effect_type: Optional[EffectType] = None
    duration: Optional[int] = Field(default=None, ge=0)
    stacks: int = Field(default=1, ge=1)
    max_stacks: Optional[int] = Field(default=None, ge=1)
    effects: dict[str, float] = {}
    source_id: Optional[str] = None
    source_type: Optional[str] = None


class StatusEffectIdRequest(BaseModel):
    effect_id: str


class ListStatusEffectsRequest(BaseModel):
    target_id: str
    effect_type: Optional[EffectType] = None


class TickDurationsRequest(BaseModel):
    game_id: str
    amount: int = Field(default=1, ge=1)


class ModifyStacksRequest(BaseModel):
    effect_id: str
    delta: int


class ClearEffectsRequest(BaseModel):
    target_id: str
    effect_type: Optional[EffectType] = None
    name: Optional[str] = None


class EffectiveModifiersRequest(BaseModel):
    target_id: str


class StatusEffectResponse(BaseModel):
    id: str
    game_id: str
    target_id: str
    name: str
    description: str
    effect_type: Optional[EffectType]
    duration: Optional[int]
    stacks: int
    max_stacks: Optional[int]
    effects: dict[str, float]
    source_id: Optional[str]
    source_type: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class TickResult(BaseModel):
    expired: list[StatusEffectResponse] = []
    remaining: list[StatusEffectResponse] = []


class EffectiveModifiers(BaseModel):
    target_id: str
    modifiers: dict[str, float]
    effects: list[StatusEffectResponse]
