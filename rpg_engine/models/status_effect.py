import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rpg_engine.models.base import Base, new_id, utcnow


class EffectType(str, enum.Enum):
    buff = "buff"
    debuff = "debuff"
    neutral = "neutral"


class StatusEffect(Base):
    """A named, stackable modifier on a target.

    One row per (game_id, target_id, name); reapplying the same name stacks.
    duration is rounds remaining, None for permanent effects.
    """

    __tablename__ = "status_effects"
    __table_args__ = (UniqueConstraint("game_id", "target_id", "name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    target_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    effect_type: Mapped[EffectType | None] = mapped_column(Enum(EffectType), nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stacks: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_stacks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    source_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    modifiers: Mapped[list["StatusEffectModifier"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def effects(self) -> dict[str, float]:
        """Per-stack deltas keyed by the stat they modify."""
        return {m.key: m.value for m in self.modifiers}


class StatusEffectModifier(Base):
    __tablename__ = "status_effect_modifiers"
    __table_args__ = (UniqueConstraint("effect_id", "key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    effect_id: Mapped[str] = mapped_column(
        ForeignKey("status_effects.id"), nullable=False, index=True
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
