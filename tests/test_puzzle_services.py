import asyncio
import random

import pytest

from conftest import make_template
from gridlogic.core.config import settings
from gridlogic.core.exceptions import DistractorExhaustedError
from gridlogic.engine.template import LogicTemplate
from gridlogic.services.puzzle_services import PuzzleServices
from gridlogic.services.template_services import TemplateServices


@pytest.fixture
def puzzle_services():
    return PuzzleServices(TemplateServices(settings.TEMPLATES_PATH))


@pytest.mark.parametrize("difficulty", ["easy", "medium", "hard"])
def test_round_has_one_true_and_three_false_statements(puzzle_services, template_bank, difficulty):
    templates = {definition.id: LogicTemplate(definition) for definition in template_bank[difficulty]}

    for seed in range(30):
        random.seed(seed)
        puzzle = asyncio.run(puzzle_services.generate_puzzle(difficulty))

        assert puzzle.difficulty == difficulty
        assert len(puzzle.options) == 4
        assert len({option.text for option in puzzle.options}) == 4
        assert puzzle.options[puzzle.correct_index].text == puzzle.statement.text
        assert puzzle.template.verify(puzzle.grid, puzzle.statement.details)

        for option in puzzle.options:
            holds = templates[option.template_name].verify(puzzle.grid, option.details)
            assert holds is (option is puzzle.statement)


def test_unknown_difficulty_falls_back_to_default(puzzle_services):
    random.seed(0)
    difficulty, bank = asyncio.run(puzzle_services.get_template_bank("nightmare"))
    assert difficulty == settings.DEFAULT_DIFFICULTY
    assert len(bank) >= 5

    puzzle = asyncio.run(puzzle_services.generate_puzzle("nightmare"))
    assert puzzle.difficulty == settings.DEFAULT_DIFFICULTY


def test_distractors_prefer_unused_templates(puzzle_services, template_bank):
    bank = [LogicTemplate(definition) for definition in template_bank["easy"]]
    for seed in range(20):
        random.seed(seed)
        puzzle = puzzle_services.build_round(bank, "easy")
        names = [option.template_name for option in puzzle.options]
        assert len(set(names)) == 4


def test_small_bank_reuses_templates_with_new_details(template_bank):
    bank = [LogicTemplate(definition) for definition in template_bank["easy"][:2]]
    services = PuzzleServices(TemplateServices(settings.TEMPLATES_PATH))
    for seed in range(20):
        random.seed(seed)
        puzzle = services.build_round(bank, "easy")
        assert len({option.text for option in puzzle.options}) == 4


def test_distractor_generation_gives_up():
    # the antecedent never holds, so every statement is vacuously true
    always_true = make_template({
        "id": "no-hexagons",
        "placeholders": {"color": {"type": "color"}},
        "statement": {"text": "Every hexagon is {color}.", "fol": "-"},
        "rules": [{
            "type": "implication",
            "when": {
                "operator": "equals",
                "left": {"kind": "cellProperty", "property": "shape"},
                "right": {"kind": "constant", "value": "hexagon"},
            },
            "actions": [],
        }],
    })
    services = PuzzleServices(TemplateServices(settings.TEMPLATES_PATH), max_attempts=10)

    random.seed(1)
    with pytest.raises(DistractorExhaustedError):
        services.build_round([always_true], "easy")
