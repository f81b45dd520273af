import enum
from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from rpg_engine.models.resource import OwnerType
from rpg_engine.schemas.patch import PatchModel


class ValueMode(str, enum.Enum):
    delta = "delta"
    set = "set"


class CreateResourceRequest(BaseModel):
    game_id: str
    owner_type: OwnerType
    owner_id: Optional[str] = None
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    category: Optional[str] = None
    value: float = 0
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class ResourceIdRequest(BaseModel):
    resource_id: str


class ListResourcesRequest(BaseModel):
    game_id: str
    owner_type: Optional[OwnerType] = None
    owner_id: Optional[str] = None
    category: Optional[str] = None


class UpdateResourceRequest(PatchModel):
    """Metadata and bounds; the value itself only moves through UpdateResourceValueRequest."""

    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "description"})
    identity_fields: ClassVar[frozenset[str]] = frozenset({"resource_id"})

    resource_id: str
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class UpdateResourceValueRequest(BaseModel):
    resource_id: str
    mode: ValueMode
    value: float
    reason: Optional[str] = None


class ResourceHistoryRequest(BaseModel):
    resource_id: str
    limit: Optional[int] = Field(default=None, ge=1)


class ResourceResponse(BaseModel):
    id: str
    game_id: str
    owner_type: OwnerType
    owner_id: Optional[str]
    name: str
    description: str
    category: Optional[str]
    value: float
    min_value: Optional[float]
    max_value: Optional[float]
    created_at: datetime

    model_config = {"from_attributes": True}


class ResourceChangeResponse(BaseModel):
    id: int
    resource_id: str
    previous_value: float
    new_value: float
    delta: float
    reason: Optional[str]
    timestamp: datetime

    model_config = {"from_attributes": True}


class ResourceValueResponse(BaseModel):
    resource: ResourceResponse
    change: ResourceChangeResponse
