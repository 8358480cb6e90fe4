import logging
from typing import Optional, Tuple
from uuid import UUID, uuid4

from fastapi import HTTPException

from gridlogic import models
from gridlogic.engine.grid import Grid
from gridlogic.services.puzzle_services import PuzzleServices

logger = logging.getLogger(__name__)


class SessionService:
    """Game session bookkeeping: rounds, guesses, scoring and difficulty"""

    def __init__(self, db, puzzle_services: Optional[PuzzleServices] = None):
        self.db = db
        self.puzzle_services = puzzle_services or PuzzleServices()

    def create_session(self, difficulty: str) -> models.GameSession:
        """Insert a new game session with zeroed counters"""
        session = models.GameSession(
            id=uuid4(),
            difficulty=difficulty,
            puzzle_number=0,
            correct_count=0,
            current_streak=0,
            is_locked=True,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        logger.info(f"Created game session {session.id} ({difficulty})")
        return session

    def get_session(self, session_id: UUID) -> models.GameSession:
        """Fetch session by id"""
        session = self.db.query(models.GameSession).filter(models.GameSession.id == session_id).first()
        if not session:
            raise HTTPException(status_code=404, detail="Game session not found")
        return session

    async def start_round(self, session_id: UUID) -> models.GameSession:
        """
        Build the next round and store it on the session. The round is built
        before anything is written, so a failure leaves the previous round in place.
        """
        session = self.get_session(session_id)
        puzzle = await self.puzzle_services.generate_puzzle(session.difficulty)

        session.difficulty = puzzle.difficulty
        session.grid = puzzle.grid.snapshot()
        session.options = [
            {"text": option.text, "formal_statement": option.formal_statement}
            for option in puzzle.options
        ]
        session.correct_statement = puzzle.statement.text
        session.hint = puzzle.statement.hint
        session.puzzle_number += 1
        session.is_locked = False

        self.db.commit()
        self.db.refresh(session)
        return session

    def submit_guess(self, session_id: UUID, statement_text: str) -> Tuple[models.GameSession, bool]:
        """Score a guess against the open round; one guess per round"""
        session = self.get_session(session_id)
        if not session.has_open_round:
            raise HTTPException(status_code=409, detail="No open round to guess on")

        is_correct = statement_text == session.correct_statement
        if is_correct:
            session.correct_count += 1
            session.current_streak += 1
        else:
            session.current_streak = 0
        session.is_locked = True

        self.db.commit()
        self.db.refresh(session)
        logger.info(f"Session {session.id} round {session.puzzle_number}: {'correct' if is_correct else 'wrong'} guess")
        return session, is_correct

    def get_hint(self, session_id: UUID) -> str:
        session = self.get_session(session_id)
        if session.correct_statement is None:
            raise HTTPException(status_code=409, detail="No round has been played yet")
        return session.hint or ""

    def get_grid(self, session_id: UUID) -> Grid:
        session = self.get_session(session_id)
        if not session.grid:
            raise HTTPException(status_code=409, detail="No round has been played yet")
        return Grid.from_snapshot(session.grid)

    def change_difficulty(self, session_id: UUID, difficulty: str) -> models.GameSession:
        """Switch tier and reset counters; the open round is discarded"""
        session = self.get_session(session_id)
        session.difficulty = difficulty
        session.puzzle_number = 0
        session.correct_count = 0
        session.current_streak = 0
        session.grid = None
        session.options = None
        session.correct_statement = None
        session.hint = None
        session.is_locked = True

        self.db.commit()
        self.db.refresh(session)
        logger.info(f"Session {session.id} switched to '{difficulty}', stats reset")
        return session
