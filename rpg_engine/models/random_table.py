from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rpg_engine.models.base import Base, new_id, utcnow


class RandomTable(Base):
    """A rollable table of outcomes.

    Entries are scanned in position order; they need not partition the roll
    range and may overlap, in which case the earliest entry wins.
    """

    __tablename__ = "random_tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    roll_expression: Mapped[str] = mapped_column(String(50), nullable=False, default="1d100")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    entries: Mapped[list["RandomTableEntry"]] = relationship(
        order_by="RandomTableEntry.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class RandomTableEntry(Base):
    __tablename__ = "random_table_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    table_id: Mapped[str] = mapped_column(
        ForeignKey("random_tables.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    min_roll: Mapped[int] = mapped_column(Integer, nullable=False)
    max_roll: Mapped[int] = mapped_column(Integer, nullable=False)
    result: Mapped[str] = mapped_column(Text, nullable=False)
    # Only consulted when no entry's range contains the roll
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Not a foreign key: a table may reference one that is later deleted
    subtable_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
