"""Read model for the entity store the engine consults.

Games and characters are owned by the surrounding application; the engine only
reads attributes, skills and the ruleset from them.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from rpg_engine.models.base import Base, new_id, utcnow


class Game(Base):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Serialized RuleSystem; validated by rules_service on the way in and out
    rules: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class Character(Base):
    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    attributes: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)
    skills: Mapped[dict[str, float]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
