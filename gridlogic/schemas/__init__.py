from gridlogic.schemas.game_schema import (
    CellRead,
    DifficultyUpdate,
    GuessRequest,
    GuessResult,
    HintRead,
    RoundRead,
    SessionCreate,
    SessionStats,
    StatementOption,
)
from gridlogic.schemas.template_schema import StatementTemplate, TemplateDefinition
