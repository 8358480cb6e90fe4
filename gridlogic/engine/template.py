import logging
from dataclasses import dataclass, field

from gridlogic.engine.details import fill_template, generate_details
from gridlogic.engine.grid import Grid
from gridlogic.engine.rules import enforce_rules, verify_rules, violate
from gridlogic.engine.values import GRID_SIZE, random_element
from gridlogic.schemas.template_schema import TemplateDefinition

logger = logging.getLogger(__name__)


@dataclass
class Statement:
    text: str
    formal_statement: str
    hint: str = ""
    details: dict = field(default_factory=dict)
    template_name: str = ""


class LogicTemplate:
    """Binds one template definition to statement, grid and verification operations"""

    def __init__(self, definition: TemplateDefinition, grid_size: int = GRID_SIZE):
        self.definition = definition
        self.grid_size = grid_size

    @property
    def name(self) -> str:
        return self.definition.name

    def __repr__(self):
        return f"LogicTemplate({self.name!r})"

    def generate_statement(self) -> Statement:
        """Resolve placeholders and computed fields, then interpolate text, FOL and hint"""
        details = generate_details(self.definition)
        statement = self.definition.statement
        return Statement(
            text=fill_template(statement.text, details),
            formal_statement=fill_template(statement.fol, details),
            hint=fill_template(statement.hint, details) if statement.hint else "",
            details=details,
            template_name=self.name,
        )

    def generate_grid(self, satisfies: bool, details: dict) -> Grid:
        """Random grid with every rule enforced; one random rule violated when satisfies is False"""
        grid = Grid.random(self.grid_size)
        enforce_rules(self.definition.rules, grid, details)
        if not satisfies:
            rule = random_element(self.definition.rules)
            logger.debug(f"Violating a {rule.type} rule of '{self.name}'")
            violate(rule, grid, details)
        return grid

    def verify(self, grid: Grid, details: dict) -> bool:
        """True iff every rule of the definition holds on the grid"""
        return verify_rules(self.definition.rules, grid, details)
