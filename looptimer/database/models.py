"""SQLAlchemy ORM models for LoopTimer."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SavedTimer(Base):
    """One saved timer preset.  ``position`` holds the user's ordering."""

    __tablename__ = "saved_timers"

    id = Column(String(36), primary_key=True)
    position = Column(Integer, nullable=False, default=0, index=True)
    name = Column(String(255), nullable=False)
    duration_seconds = Column(Integer, nullable=False)
    infinite_repeat = Column(Boolean, nullable=False, default=False)
    repeat_count = Column(Integer, nullable=False, default=1)
    delay_seconds = Column(Integer, nullable=False, default=0)
    tone_id = Column(String(32), nullable=False, default="beep")
    volume = Column(Float, nullable=False, default=0.7)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<SavedTimer id={self.id} name={self.name!r} "
            f"position={self.position}>"
        )
