from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from rpg_engine.schemas.patch import PatchModel


class TableEntryIn(BaseModel):
    min_roll: int
    max_roll: int
    result: str
    weight: Optional[float] = None
    subtable_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _single_roll(cls, data):
        # {"roll": 4, ...} is shorthand for min_roll == max_roll == 4
        if isinstance(data, dict) and "roll" in data:
            data = dict(data)
            value = data.pop("roll")
            data.setdefault("min_roll", value)
            data.setdefault("max_roll", value)
        return data


class TableEntryResponse(BaseModel):
    min_roll: int
    max_roll: int
    result: str
    weight: Optional[float]
    subtable_id: Optional[str]

    model_config = {"from_attributes": True}


class CreateTableRequest(BaseModel):
    game_id: str
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    category: Optional[str] = None
    entries: list[TableEntryIn] = []
    roll_expression: Optional[str] = Field(default=None, max_length=50)


class CreateSimpleTableRequest(BaseModel):
    game_id: str
    name: str = Field(min_length=1, max_length=255)
    results: list[str] = Field(min_length=1)
    category: Optional[str] = None


class TableIdRequest(BaseModel):
    table_id: str


class ListTablesRequest(BaseModel):
    game_id: str
    category: Optional[str] = None


class RollTableRequest(BaseModel):
    table_id: str
    modifier: int = 0


class ModifyEntriesRequest(BaseModel):
    table_id: str
    add: list[TableEntryIn] = []
    remove: list[int] = []


class RandomTableResponse(BaseModel):
    id: str
    game_id: str
    name: str
    description: str
    category: Optional[str]
    entries: list[TableEntryResponse]
    roll_expression: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UpdateTableRequest(PatchModel):
    """Entries, when present, replace the whole list."""

    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "description", "entries", "roll_expression"}
    )
    identity_fields: ClassVar[frozenset[str]] = frozenset({"table_id"})

    table_id: str
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    entries: Optional[list[TableEntryIn]] = None
    roll_expression: Optional[str] = Field(default=None, max_length=50)
