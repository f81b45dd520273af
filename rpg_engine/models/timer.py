import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rpg_engine.models.base import Base, new_id, utcnow


class TimerType(str, enum.Enum):
    countdown = "countdown"
    stopwatch = "stopwatch"
    clock = "clock"


class TimerDirection(str, enum.Enum):
    up = "up"
    down = "down"


class Timer(Base):
    """A tracked counter advanced only by explicit ticks.

    triggered latches once current_value reaches trigger_at in the timer's
    direction and stays set until reset.
    """

    __tablename__ = "timers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timer_type: Mapped[TimerType] = mapped_column(Enum(TimerType), nullable=False)
    current_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    direction: Mapped[TimerDirection] = mapped_column(Enum(TimerDirection), nullable=False)
    trigger_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
    triggered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False, default="tick")
    visible_to_players: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
