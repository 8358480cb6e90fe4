import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from gridlogic.core.config import settings
from gridlogic.core.exceptions import DifficultyNotFoundError, DistractorExhaustedError, TemplateLoadError
from gridlogic.engine.grid import Grid
from gridlogic.engine.template import LogicTemplate, Statement
from gridlogic.engine.values import random_element, shuffled
from gridlogic.services.template_services import TemplateServices, template_services

logger = logging.getLogger(__name__)


@dataclass
class PuzzleRound:
    """One playable round: a grid, the statement it satisfies and the shuffled answer options"""
    difficulty: str
    template: LogicTemplate
    statement: Statement
    grid: Grid
    options: List[Statement] = field(default_factory=list)

    @property
    def correct_index(self) -> int:
        return [option.text for option in self.options].index(self.statement.text)


class PuzzleServices:
    """Builds puzzle rounds from the template bank"""

    def __init__(
        self,
        templates: TemplateServices = template_services,
        distractor_count: int = settings.DISTRACTOR_COUNT,
        max_attempts: int = settings.MAX_DISTRACTOR_ATTEMPTS,
    ):
        self.templates = templates
        self.distractor_count = distractor_count
        self.max_attempts = max_attempts

    async def get_template_bank(self, difficulty: str) -> Tuple[str, Sequence[LogicTemplate]]:
        """Templates for a tier, falling back to the default tier when it is unknown"""
        try:
            bank = await self.templates.get_templates_by_difficulty(difficulty)
        except DifficultyNotFoundError:
            logger.warning(f"Invalid difficulty level '{difficulty}', defaulting to '{settings.DEFAULT_DIFFICULTY}'")
            difficulty = settings.DEFAULT_DIFFICULTY
            bank = await self.templates.get_templates_by_difficulty(difficulty)

        if not bank:
            raise TemplateLoadError(f"No templates found for difficulty '{difficulty}'")
        return difficulty, bank

    async def generate_puzzle(self, difficulty: str) -> PuzzleRound:
        """Pick a ground truth template, build its grid and surround it with false statements"""
        difficulty, bank = await self.get_template_bank(difficulty)
        return self.build_round(bank, difficulty)

    def build_round(self, bank: Sequence[LogicTemplate], difficulty: str) -> PuzzleRound:
        template = random_element(bank)
        statement = template.generate_statement()
        grid = template.generate_grid(True, statement.details)

        distractors = self.generate_distractors(bank, template, statement, grid)
        options = shuffled([statement, *distractors])

        logger.info(f"New '{difficulty}' round from template '{template.name}': {statement.text}")
        return PuzzleRound(
            difficulty=difficulty,
            template=template,
            statement=statement,
            grid=grid,
            options=options,
        )

    def generate_distractors(
        self,
        bank: Sequence[LogicTemplate],
        correct_template: LogicTemplate,
        correct_statement: Statement,
        grid: Grid,
    ) -> List[Statement]:
        """
        Statements that are false on the grid and textually distinct from each other
        and from the ground truth. Unused templates are drawn first; once none is left
        any template of the tier may be reused with fresh details.
        """
        distractors = []
        used = {correct_template}
        texts = {correct_statement.text}

        for _ in range(self.max_attempts):
            if len(distractors) >= self.distractor_count:
                break

            unused = [template for template in bank if template not in used]
            template = random_element(unused) if unused else random_element(bank)
            candidate = template.generate_statement()

            if candidate.text in texts:
                continue
            if template.verify(grid, candidate.details):
                logger.debug(f"Discarding distractor that holds on the grid: {candidate.text}")
                continue

            distractors.append(candidate)
            used.add(template)
            texts.add(candidate.text)

        if len(distractors) < self.distractor_count:
            raise DistractorExhaustedError(
                f"Found {len(distractors)} of {self.distractor_count} distractors for "
                f"'{correct_template.name}' after {self.max_attempts} attempts"
            )
        return distractors
