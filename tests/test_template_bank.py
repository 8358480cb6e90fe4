import json
import random

import pytest

from gridlogic.core.config import settings
from gridlogic.engine.template import LogicTemplate

with open(settings.TEMPLATES_PATH, encoding="utf-8") as bank_file:
    TEMPLATE_IDS = [
        (difficulty, template["id"])
        for difficulty, templates in json.load(bank_file).items()
        for template in templates
    ]


@pytest.fixture
def get_template(template_bank):
    def lookup(difficulty, template_id):
        definition = next(d for d in template_bank[difficulty] if d.id == template_id)
        return LogicTemplate(definition)
    return lookup


def test_bank_has_all_tiers(template_bank):
    assert set(template_bank) == {"easy", "medium", "hard"}
    for definitions in template_bank.values():
        assert len(definitions) >= 5


def test_template_ids_are_unique():
    ids = [template_id for _, template_id in TEMPLATE_IDS]
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize("difficulty, template_id", TEMPLATE_IDS)
def test_statements_are_fully_interpolated(get_template, difficulty, template_id):
    template = get_template(difficulty, template_id)
    for seed in range(30):
        random.seed(seed)
        statement = template.generate_statement()
        for text in (statement.text, statement.formal_statement, statement.hint):
            assert "{" not in text and "}" not in text
        assert statement.template_name == template_id


@pytest.mark.parametrize("difficulty, template_id", TEMPLATE_IDS)
def test_enforced_grid_satisfies_and_violated_grid_does_not(get_template, difficulty, template_id):
    template = get_template(difficulty, template_id)
    for seed in range(100):
        random.seed(seed)
        details = template.generate_statement().details

        grid = template.generate_grid(True, details)
        snapshot = grid.snapshot()
        assert template.verify(grid, details), f"seed {seed}: {details}"
        # verification never mutates the grid
        assert template.verify(grid, details)
        assert grid.snapshot() == snapshot

        grid = template.generate_grid(False, details)
        snapshot = grid.snapshot()
        assert not template.verify(grid, details), f"seed {seed}: {details}"
        assert not template.verify(grid, details)
        assert grid.snapshot() == snapshot
