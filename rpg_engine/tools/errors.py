"""Structured error results returned by tools instead of raised exceptions."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from rpg_engine.services.combat_service import ParticipantNotFoundError
from rpg_engine.services.entity_service import CharacterNotFoundError, GameNotFoundError
from rpg_engine.services.rules_service import RulesNotConfiguredError

ERROR_SUGGESTIONS: dict[str, list[str]] = {
    "GAME_NOT_FOUND": ["Check the game id; the game must exist before its state can be tracked"],
    "CHARACTER_NOT_FOUND": ["Verify every character id belongs to an existing character"],
    "RULES_NOT_CONFIGURED": ["Configure the game's ruleset (check mechanics) before rolling checks"],
    "COMBAT_NOT_FOUND": ["Use get_active_combat to find the game's current combat", "Start one with start_combat"],
    "STATUS_EFFECT_NOT_FOUND": ["Use list_status_effects to see a target's effects"],
    "TABLE_NOT_FOUND": ["Use list_tables to see available tables", "Create one with create_table"],
    "TABLE_EMPTY": ["Add entries with modify_table_entries"],
    "RESOURCE_NOT_FOUND": ["Use list_resources to see available resources", "Create one with create_resource"],
    "TIMER_NOT_FOUND": ["Use list_timers to see available timers", "Create one with create_timer"],
    "INVALID_INPUT": ["Check the input schema for required fields", "Dice use NdX+M notation, e.g. 2d6+3"],
    "UNKNOWN_TOOL": ["Use list_tools to see available tools"],
}


@dataclass
class ToolError:
    error_code: str
    message: str
    entity_type: str | None = None
    entity_id: str | None = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "isError": True,
            "errorCode": self.error_code,
            "message": self.message,
            "suggestions": [*ERROR_SUGGESTIONS.get(self.error_code, []), *self.suggestions],
        }
        if self.entity_type is not None:
            payload["entityType"] = self.entity_type
        if self.entity_id is not None:
            payload["entityId"] = self.entity_id
        return payload


def not_found(entity_type: str, entity_id: str) -> ToolError:
    label = entity_type.replace("_", " ")
    return ToolError(
        error_code=f"{entity_type.upper()}_NOT_FOUND",
        message=f"{label.capitalize()} '{entity_id}' not found",
        entity_type=entity_type,
        entity_id=entity_id,
    )


def from_exception(exc: Exception) -> ToolError:
    """Translate a validation or precondition fault raised by a service."""
    if isinstance(exc, GameNotFoundError):
        return ToolError("GAME_NOT_FOUND", str(exc), entity_type="game", entity_id=exc.game_id)
    if isinstance(exc, (ParticipantNotFoundError, CharacterNotFoundError)):
        return ToolError(
            "CHARACTER_NOT_FOUND", str(exc), entity_type="character", entity_id=exc.character_id
        )
    if isinstance(exc, RulesNotConfiguredError):
        return ToolError("RULES_NOT_CONFIGURED", str(exc), entity_type="game", entity_id=exc.game_id)
    if isinstance(exc, ValidationError):
        return ToolError("INVALID_INPUT", _describe_validation_error(exc))
    return ToolError("INVALID_INPUT", str(exc))


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"]) or "input"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
