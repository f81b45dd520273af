from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Transport keep-alives; never domain data
RESERVED_EVENT_TYPES = frozenset({"ping", "connected"})


class GameEvent(BaseModel):
    """Notification published after a state change.

    Serialized with camelCase keys (gameId, entityId, ...) for stream consumers.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str
    game_id: str
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    timestamp: str
    data: Optional[Any] = None

    @property
    def is_keepalive(self) -> bool:
        return self.type in RESERVED_EVENT_TYPES
