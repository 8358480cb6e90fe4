from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Uuid, func
from uuid import uuid4

from gridlogic.core.database import Base


class GameSession(Base):
    __tablename__ = "game_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    difficulty = Column(String, nullable=False, default="easy")
    puzzle_number = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)

    # open round
    grid = Column(JSON)
    options = Column(JSON)
    correct_statement = Column(String)
    hint = Column(String)
    is_locked = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def has_open_round(self) -> bool:
        return self.correct_statement is not None and not self.is_locked
