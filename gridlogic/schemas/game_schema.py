from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional
from uuid import UUID

from gridlogic.core.config import settings


# Data sent by user
class SessionCreate(BaseModel):
    difficulty: str = settings.DEFAULT_DIFFICULTY

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        """Trim and lower-case the tier name; empty means default"""
        if value is None or value == "":
            return settings.DEFAULT_DIFFICULTY
        return str(value).strip().lower()


class DifficultyUpdate(SessionCreate):
    difficulty: str


class GuessRequest(BaseModel):
    statement: str


# Data sent back
class SessionStats(BaseModel):
    id: UUID
    difficulty: str
    puzzle_number: int
    correct_count: int
    current_streak: int
    is_locked: bool

    model_config = ConfigDict(from_attributes=True)


class CellRead(BaseModel):
    shape: str
    color: str
    color_name: str
    number: int
    row: int
    col: int


class StatementOption(BaseModel):
    text: str
    formal_statement: str


class RoundRead(BaseModel):
    session_id: UUID
    difficulty: str
    puzzle_number: int
    grid: List[CellRead]
    options: List[StatementOption]
    has_hint: bool


class GuessResult(BaseModel):
    is_correct: bool
    correct_statement: str
    stats: SessionStats


class HintRead(BaseModel):
    hint: Optional[str] = ""
