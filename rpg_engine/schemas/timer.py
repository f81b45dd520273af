import enum
from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from rpg_engine.models.timer import TimerDirection, TimerType
from rpg_engine.schemas.patch import PatchModel


class TimerMode(str, enum.Enum):
    tick = "tick"
    reset = "reset"


class CreateTimerRequest(BaseModel):
    game_id: str
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    timer_type: TimerType
    current_value: Optional[int] = None
    max_value: Optional[int] = None
    direction: Optional[TimerDirection] = None
    trigger_at: Optional[int] = None
    unit: str = "tick"
    visible_to_players: bool = True


class TimerIdRequest(BaseModel):
    timer_id: str


class ListTimersRequest(BaseModel):
    game_id: str
    include_triggered: bool = False


class UpdateTimerRequest(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "description", "unit", "visible_to_players"}
    )
    identity_fields: ClassVar[frozenset[str]] = frozenset({"timer_id"})

    timer_id: str
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    max_value: Optional[int] = None
    trigger_at: Optional[int] = None
    unit: Optional[str] = None
    visible_to_players: Optional[bool] = None


class ModifyTimerRequest(BaseModel):
    timer_id: str
    mode: TimerMode
    amount: int = Field(default=1, ge=1)


class TimerResponse(BaseModel):
    id: str
    game_id: str
    name: str
    description: str
    timer_type: TimerType
    current_value: int
    max_value: Optional[int]
    direction: TimerDirection
    trigger_at: Optional[int]
    triggered: bool
    unit: str
    visible_to_players: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TimerTickResponse(BaseModel):
    timer: TimerResponse
    previous_value: int
    just_triggered: bool
