"""Combat encounter and its ordered participants."""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rpg_engine.models.base import Base, new_id


class CombatStatus(str, enum.Enum):
    active = "active"
    resolved = "resolved"


class Combat(Base):
    """A turn-ordered encounter.

    participants keep the initiative order fixed at creation; position is the
    index current_turn points at. log is a JSON list of plain strings.
    """

    __tablename__ = "combats"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    location_id: Mapped[str] = mapped_column(String(36), nullable=False)
    current_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    round: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[CombatStatus] = mapped_column(
        Enum(CombatStatus), nullable=False, default=CombatStatus.active, index=True
    )
    log: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    participants: Mapped[list["CombatParticipant"]] = relationship(
        order_by="CombatParticipant.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CombatParticipant(Base):
    __tablename__ = "combat_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    combat_id: Mapped[str] = mapped_column(ForeignKey("combats.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Reference only; the character row is not owned by the combat
    character_id: Mapped[str] = mapped_column(String(36), nullable=False)
    initiative: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
