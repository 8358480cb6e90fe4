# import moduls/libraries
import json
import logging
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from uuid import UUID


# import form project
from gridlogic.core.database import get_db
from gridlogic.core.exceptions import (
    DistractorExhaustedError,
    EvaluationContextError,
    TemplateDefinitionError,
    TemplateLoadError,
)
from gridlogic.schemas import (
    DifficultyUpdate,
    GuessRequest,
    GuessResult,
    HintRead,
    RoundRead,
    SessionCreate,
    SessionStats,
)
from gridlogic.services import SessionService
from gridlogic.visualization.grid_visualization import generate_grid_visualization

logger = logging.getLogger(__name__)

router = APIRouter()


# Create session
@router.post("", response_model=SessionStats, status_code=201)
async def create_session(session_data: SessionCreate, db: Session = Depends(get_db)):
    """Start a new game session"""
    services = SessionService(db)
    return services.create_session(session_data.difficulty)


# Get session stats
@router.get("/{session_id}", response_model=SessionStats)
async def get_session(session_id: UUID, db: Session = Depends(get_db)):
    """Fetch session stats by id"""
    services = SessionService(db)
    return services.get_session(session_id)


# Next round
@router.post("/{session_id}/rounds", response_model=RoundRead)
async def next_round(session_id: UUID, db: Session = Depends(get_db)):
    """Generate a new puzzle round for the session"""
    services = SessionService(db)
    try:
        session = await services.start_round(session_id)
    except TemplateLoadError as exc:
        logger.error(f"Round aborted, template bank unavailable: {exc}")
        raise HTTPException(status_code=503, detail="Puzzle templates are unavailable") from exc
    except DistractorExhaustedError as exc:
        logger.error(f"Round aborted: {exc}")
        raise HTTPException(status_code=500, detail="Could not build answer options for this round") from exc
    except (TemplateDefinitionError, EvaluationContextError) as exc:
        logger.error(f"Round aborted by a template error: {exc}")
        raise HTTPException(status_code=500, detail="Puzzle template error") from exc

    return RoundRead(
        session_id=session.id,
        difficulty=session.difficulty,
        puzzle_number=session.puzzle_number,
        grid=session.grid,
        options=session.options,
        has_hint=bool(session.hint),
    )


# Guess
@router.post("/{session_id}/guess", response_model=GuessResult)
async def guess(session_id: UUID, guess_data: GuessRequest, db: Session = Depends(get_db)):
    """Submit the statement the player believes is true"""
    services = SessionService(db)
    session, is_correct = services.submit_guess(session_id, guess_data.statement)
    return GuessResult(
        is_correct=is_correct,
        correct_statement=session.correct_statement,
        stats=SessionStats.model_validate(session),
    )


@router.get("/{session_id}/hint", response_model=HintRead)
async def get_hint(session_id: UUID, db: Session = Depends(get_db)):
    """Hint for the current round"""
    services = SessionService(db)
    return HintRead(hint=services.get_hint(session_id))


# Change difficulty
@router.put("/{session_id}/difficulty", response_model=SessionStats)
async def change_difficulty(session_id: UUID, difficulty_data: DifficultyUpdate, db: Session = Depends(get_db)):
    """Switch difficulty; resets the session counters"""
    services = SessionService(db)
    return services.change_difficulty(session_id, difficulty_data.difficulty)


# Serialize the grid to plotly JSON for the renderer
@router.get("/{session_id}/grid/figure", response_class=JSONResponse)
async def get_grid_figure(session_id: UUID, db: Session = Depends(get_db)):
    """Get the current grid as a plotly figure"""
    services = SessionService(db)
    grid = services.get_grid(session_id)
    fig = generate_grid_visualization(grid)
    return JSONResponse(content=json.loads(fig.to_json()))
