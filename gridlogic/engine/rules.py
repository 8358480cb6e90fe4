"""
Rule engine: enforce, verify and deliberately violate template rules on a grid.

Enforcement is a single constructive pass in grid order: values are assigned
directly, never searched for. Rules run in declaration order and a later rule
may overwrite a property set by an earlier one (last write wins), so templates
order their rules accordingly.

When a consequent cannot be met for a cell (required region not reached,
neighbor missing at the grid boundary) the rule's antecedent is broken on that
cell instead, which satisfies the implication vacuously.
"""
import logging
from enum import Enum
from typing import List, Optional

from gridlogic.core.exceptions import TemplateDefinitionError, UnresolvedPlaceholderError
from gridlogic.engine.evaluator import (
    EvaluationContext,
    cell_properties,
    compare,
    evaluate,
    is_in_region,
    normalize_comparison,
    resolve,
    strict_equals,
)
from gridlogic.engine.grid import Cell, Grid
from gridlogic.engine.values import GRID_SIZE, NUMBERS, get_domain, pick_distinct, random_element, shuffled
from gridlogic.schemas.template_schema import (
    AllCondition,
    AnyCondition,
    BreakCellCondition,
    EnsureCellCondition,
    EnsureNeighborNumber,
    ImplicationRule,
    NeighborRequirementRule,
    NotCondition,
    RequireRegion,
    SetCellProperty,
    SetCellPropertyDistinct,
    SetNeighborNumberBreaking,
    SetNeighborProperty,
    SetNeighborPropertyDistinct,
)

logger = logging.getLogger(__name__)


class ActionStatus(Enum):
    APPLIED = "applied"
    NEEDS_BREAK = "needsBreak"


def _context(details: dict, grid: Grid, cell: Optional[Cell] = None, neighbor: Optional[Cell] = None):
    return EvaluationContext(details=details, cell=cell, neighbor=neighbor, grid_size=grid.size)


def _placeholder(details: dict, key: str):
    if key not in details:
        raise UnresolvedPlaceholderError(key)
    return details[key]


def negate(condition) -> NotCondition:
    return NotCondition(operator="not", condition=condition)


# --- Constructive back-fill ---

def _fill_property(property_name: str, condition, cell: Cell, details: dict, grid_size: int) -> bool:
    """Give the cell a value of property_name under which the condition holds"""
    matches = []
    for value in get_domain(property_name):
        trial = cell.model_copy(update={property_name: value})
        if evaluate(condition, EvaluationContext(details=details, cell=trial, grid_size=grid_size)):
            matches.append(value)
    if not matches:
        return False
    if getattr(cell, property_name) not in matches:
        setattr(cell, property_name, random_element(matches))
    return True


def force_condition(condition, cell: Cell, details: dict, grid_size: int = GRID_SIZE) -> bool:
    """
    Assign property values so that the condition holds on this one cell.
    Positions never move: a failing inRegion cannot be forced.
    Returns whether the condition holds afterwards.
    """
    context = EvaluationContext(details=details, cell=cell, grid_size=grid_size)
    if evaluate(condition, context):
        return True

    if isinstance(condition, AllCondition):
        for child in condition.conditions:
            force_condition(child, cell, details, grid_size)
    elif isinstance(condition, AnyCondition):
        for child in condition.conditions:
            if force_condition(child, cell, details, grid_size):
                break
    else:
        for property_name in sorted(cell_properties(condition)):
            if evaluate(condition, context):
                break
            _fill_property(property_name, condition, cell, details, grid_size)

    if evaluate(condition, context):
        return True

    # sequential assignments may conflict on one property, re-pick against the whole condition
    for property_name in sorted(cell_properties(condition)):
        _fill_property(property_name, condition, cell, details, grid_size)
        if evaluate(condition, context):
            return True
    return False


def _forced_copy(condition, cell: Cell, details: dict, grid_size: int) -> Optional[Cell]:
    """Copy of the cell with the condition forced, or None when its position rules it out"""
    trial = cell.model_copy(deep=True)
    if force_condition(condition, trial, details, grid_size):
        return trial
    return None


def _commit(cell: Cell, trial: Cell) -> None:
    for property_name, value in trial.model_dump(exclude={"position"}).items():
        setattr(cell, property_name, value)


# --- Cell actions ---

def apply_cell_action(action, cell: Cell, details: dict, grid: Grid) -> ActionStatus:
    context = _context(details, grid, cell)

    if isinstance(action, SetCellProperty):
        setattr(cell, action.property, resolve(action.value, context))
        return ActionStatus.APPLIED

    if isinstance(action, SetCellPropertyDistinct):
        exclude = _placeholder(details, action.from_placeholder)
        setattr(cell, action.property, pick_distinct(action.property, exclude))
        return ActionStatus.APPLIED

    if isinstance(action, RequireRegion):
        direction = resolve(action.direction, context)
        size = resolve(action.size, context)
        if is_in_region(cell, direction, size, grid.size):
            return ActionStatus.APPLIED
        return ActionStatus.NEEDS_BREAK

    if isinstance(action, EnsureCellCondition):
        if force_condition(action.condition, cell, details, grid.size):
            return ActionStatus.APPLIED
        return ActionStatus.NEEDS_BREAK

    if isinstance(action, BreakCellCondition):
        if force_condition(negate(action.condition), cell, details, grid.size):
            return ActionStatus.APPLIED
        return ActionStatus.NEEDS_BREAK

    raise TemplateDefinitionError(f"Unsupported cell action: {getattr(action, 'action', action)!r}")


def cell_action_holds(action, cell: Cell, details: dict, grid: Grid) -> bool:
    """Postcondition of a cell action, checked without mutating the cell"""
    context = _context(details, grid, cell)

    if isinstance(action, SetCellProperty):
        return strict_equals(getattr(cell, action.property), resolve(action.value, context))
    if isinstance(action, SetCellPropertyDistinct):
        return not strict_equals(getattr(cell, action.property), _placeholder(details, action.from_placeholder))
    if isinstance(action, RequireRegion):
        return is_in_region(cell, resolve(action.direction, context), resolve(action.size, context), grid.size)
    if isinstance(action, EnsureCellCondition):
        return evaluate(action.condition, context)
    if isinstance(action, BreakCellCondition):
        return not evaluate(action.condition, context)

    raise TemplateDefinitionError(f"Unsupported cell action: {getattr(action, 'action', action)!r}")


# --- Neighbor actions ---

def _comparison(spec, context: EvaluationContext) -> str:
    if isinstance(spec, str):
        return normalize_comparison(spec)
    return normalize_comparison(resolve(spec, context))


def number_meeting(comparison: str, threshold, current: Optional[int] = None) -> Optional[int]:
    """Keep a number that already meets the comparison, else draw one that does"""
    values = [number for number in NUMBERS if compare(comparison, number, threshold)]
    if not values:
        return None
    return current if current in values else random_element(values)


def number_breaking(comparison: str, threshold, current: Optional[int] = None) -> Optional[int]:
    values = [number for number in NUMBERS if not compare(comparison, number, threshold)]
    if not values:
        return None
    return current if current in values else random_element(values)


def apply_neighbor_action(action, cell: Cell, neighbor: Cell, details: dict, grid: Grid) -> ActionStatus:
    context = _context(details, grid, cell, neighbor)

    if isinstance(action, SetNeighborProperty):
        setattr(neighbor, action.property, resolve(action.value, context))
        return ActionStatus.APPLIED

    if isinstance(action, SetNeighborPropertyDistinct):
        exclude = _placeholder(details, action.from_placeholder)
        setattr(neighbor, action.property, pick_distinct(action.property, exclude))
        return ActionStatus.APPLIED

    if isinstance(action, (EnsureNeighborNumber, SetNeighborNumberBreaking)):
        comparison = _comparison(action.comparison, context)
        threshold = _placeholder(details, action.placeholder)
        if isinstance(action, EnsureNeighborNumber):
            number = number_meeting(comparison, threshold, neighbor.number)
        else:
            number = number_breaking(comparison, threshold, neighbor.number)
        if number is None:
            return ActionStatus.NEEDS_BREAK
        neighbor.number = number
        return ActionStatus.APPLIED

    raise TemplateDefinitionError(f"Unsupported neighbor action: {getattr(action, 'action', action)!r}")


# --- Break antecedent ---

def break_antecedent(rule, cell: Cell, details: dict, grid: Grid) -> None:
    """Make the rule's `when` false on this cell so the rule holds vacuously there"""
    if rule.break_antecedent is not None:
        apply_cell_action(rule.break_antecedent, cell, details, grid)

    if not evaluate(rule.when, _context(details, grid, cell)):
        return
    if rule.when is not None and force_condition(negate(rule.when), cell, details, grid.size):
        return
    logger.warning(f"Could not break antecedent at ({cell.row}, {cell.col}); rule stays unsatisfied there")


# --- Implication rules ---

def _implication_holds(rule: ImplicationRule, cell: Cell, details: dict, grid: Grid) -> bool:
    if not evaluate(rule.when, _context(details, grid, cell)):
        return True
    return all(cell_action_holds(action, cell, details, grid) for action in rule.actions)


def enforce_implication(rule: ImplicationRule, grid: Grid, details: dict) -> None:
    for cell in grid:
        if not evaluate(rule.when, _context(details, grid, cell)):
            continue
        for action in rule.actions:
            if apply_cell_action(action, cell, details, grid) is ActionStatus.NEEDS_BREAK:
                break_antecedent(rule, cell, details, grid)
                break


def verify_implication(rule: ImplicationRule, grid: Grid, details: dict) -> bool:
    return all(_implication_holds(rule, cell, details, grid) for cell in grid)


def _region_actions_hold(actions: List, cell: Cell, details: dict, grid: Grid) -> bool:
    return all(
        cell_action_holds(action, cell, details, grid)
        for action in actions
        if isinstance(action, RequireRegion)
    )


def break_cell_action(action, cell: Cell, details: dict, grid: Grid) -> bool:
    """Make one consequent action fail on the cell; returns whether it now fails"""
    context = _context(details, grid, cell)

    if isinstance(action, SetCellProperty):
        setattr(cell, action.property, pick_distinct(action.property, resolve(action.value, context)))
    elif isinstance(action, SetCellPropertyDistinct):
        setattr(cell, action.property, _placeholder(details, action.from_placeholder))
    elif isinstance(action, EnsureCellCondition):
        force_condition(negate(action.condition), cell, details, grid.size)
    elif isinstance(action, BreakCellCondition):
        force_condition(action.condition, cell, details, grid.size)
    # a required region is positional and cannot be broken in place

    return not cell_action_holds(action, cell, details, grid)


def _counterexample(rule: ImplicationRule, cell: Cell, details: dict, grid: Grid) -> Optional[Cell]:
    """
    Copy of a cell whose antecedent holds, changed so that the consequent fails.
    The rule's violation action is tried first, then each consequent action is broken in turn.
    """
    if rule.violation is not None:
        trial = cell.model_copy(deep=True)
        apply_cell_action(rule.violation, trial, details, grid)
        if not _implication_holds(rule, trial, details, grid):
            return trial

    for action in shuffled(rule.actions):
        trial = cell.model_copy(deep=True)
        if break_cell_action(action, trial, details, grid) and not _implication_holds(rule, trial, details, grid):
            return trial
    return None


def violate_implication(rule: ImplicationRule, grid: Grid, details: dict) -> None:
    # a cell that satisfies the whole implication: negate its consequent
    witnesses = [
        cell for cell in grid
        if evaluate(rule.when, _context(details, grid, cell))
        and all(cell_action_holds(action, cell, details, grid) for action in rule.actions)
    ]
    for cell in shuffled(witnesses):
        trial = _counterexample(rule, cell, details, grid)
        if trial is not None:
            _commit(cell, trial)
            logger.debug(f"Violated implication at ({cell.row}, {cell.col})")
            return

    # no usable witness: force the antecedent on a copy, cells outside a required region first
    outside, inside = [], []
    for cell in shuffled(grid):
        (inside if _region_actions_hold(rule.actions, cell, details, grid) else outside).append(cell)

    for cell in outside + inside:
        forced = _forced_copy(rule.when, cell, details, grid.size)
        if forced is None:
            continue
        # forcing the antecedent may already leave the consequent unmet
        trial = forced
        if _implication_holds(rule, forced, details, grid):
            trial = _counterexample(rule, forced, details, grid)
        if trial is not None:
            _commit(cell, trial)
            logger.debug(f"Violated implication at constructed witness ({cell.row}, {cell.col})")
            return

    logger.warning("No cell can carry a counterexample to the implication; violation skipped")


# --- Neighbor requirement rules ---

def _neighbor_of(rule: NeighborRequirementRule, cell: Cell, details: dict, grid: Grid) -> Optional[Cell]:
    direction = resolve(rule.neighbor.direction, _context(details, grid, cell))
    return grid.neighbor(cell, direction)


def _neighbor_conditions_hold(rule: NeighborRequirementRule, cell: Cell, neighbor: Cell, details: dict, grid: Grid) -> bool:
    context = _context(details, grid, cell, neighbor)
    return all(evaluate(condition, context) for condition in rule.neighbor.conditions)


def _requirement_holds(rule: NeighborRequirementRule, cell: Cell, details: dict, grid: Grid) -> bool:
    if not evaluate(rule.when, _context(details, grid, cell)):
        return True
    neighbor = _neighbor_of(rule, cell, details, grid)
    return neighbor is not None and _neighbor_conditions_hold(rule, cell, neighbor, details, grid)


def enforce_neighbor_requirement(rule: NeighborRequirementRule, grid: Grid, details: dict) -> None:
    for cell in grid:
        if not evaluate(rule.when, _context(details, grid, cell)):
            continue

        neighbor = _neighbor_of(rule, cell, details, grid)
        if neighbor is None:
            break_antecedent(rule, cell, details, grid)
            continue

        statuses = [
            apply_neighbor_action(action, cell, neighbor, details, grid)
            for action in rule.neighbor.satisfy
        ]
        if ActionStatus.NEEDS_BREAK in statuses or not _neighbor_conditions_hold(rule, cell, neighbor, details, grid):
            break_antecedent(rule, cell, details, grid)


def verify_neighbor_requirement(rule: NeighborRequirementRule, grid: Grid, details: dict) -> bool:
    return all(_requirement_holds(rule, cell, details, grid) for cell in grid)


def violate_neighbor_requirement(rule: NeighborRequirementRule, grid: Grid, details: dict) -> None:
    violation = rule.neighbor.violation

    witnesses = []
    for cell in grid:
        if not evaluate(rule.when, _context(details, grid, cell)):
            continue
        neighbor = _neighbor_of(rule, cell, details, grid)
        if neighbor is not None and _neighbor_conditions_hold(rule, cell, neighbor, details, grid):
            witnesses.append((cell, neighbor))

    if witnesses and violation is not None:
        cell, neighbor = random_element(witnesses)
        apply_neighbor_action(violation, cell, neighbor, details, grid)
        if not _requirement_holds(rule, cell, details, grid):
            logger.debug(f"Violated neighbor requirement at ({cell.row}, {cell.col})")
            return

    candidates = shuffled(grid)
    if violation is None:
        # without a violation action only a missing neighbor can break the requirement
        candidates = [cell for cell in candidates if _neighbor_of(rule, cell, details, grid) is None]

    for cell in candidates:
        forced = _forced_copy(rule.when, cell, details, grid.size)
        if forced is None:
            continue

        neighbor = _neighbor_of(rule, forced, details, grid)
        if neighbor is None:
            _commit(cell, forced)
            logger.debug(f"Violated neighbor requirement at boundary cell ({cell.row}, {cell.col})")
            return

        neighbor_trial = neighbor.model_copy(deep=True)
        for action in rule.neighbor.satisfy:
            apply_neighbor_action(action, forced, neighbor_trial, details, grid)
        apply_neighbor_action(violation, forced, neighbor_trial, details, grid)
        if not _neighbor_conditions_hold(rule, forced, neighbor_trial, details, grid):
            _commit(cell, forced)
            _commit(neighbor, neighbor_trial)
            logger.debug(f"Violated neighbor requirement at constructed witness ({cell.row}, {cell.col})")
            return

    logger.warning("No cell can carry a counterexample to the neighbor requirement; violation skipped")


# --- Dispatch over rule types ---

def enforce(rule, grid: Grid, details: dict) -> None:
    if isinstance(rule, ImplicationRule):
        enforce_implication(rule, grid, details)
    elif isinstance(rule, NeighborRequirementRule):
        enforce_neighbor_requirement(rule, grid, details)
    else:
        raise TemplateDefinitionError(f"Unsupported rule type: {getattr(rule, 'type', rule)!r}")


def verify(rule, grid: Grid, details: dict) -> bool:
    if isinstance(rule, ImplicationRule):
        return verify_implication(rule, grid, details)
    if isinstance(rule, NeighborRequirementRule):
        return verify_neighbor_requirement(rule, grid, details)
    raise TemplateDefinitionError(f"Unsupported rule type: {getattr(rule, 'type', rule)!r}")


def violate(rule, grid: Grid, details: dict) -> None:
    if isinstance(rule, ImplicationRule):
        violate_implication(rule, grid, details)
    elif isinstance(rule, NeighborRequirementRule):
        violate_neighbor_requirement(rule, grid, details)
    else:
        raise TemplateDefinitionError(f"Unsupported rule type: {getattr(rule, 'type', rule)!r}")


def enforce_rules(rules, grid: Grid, details: dict) -> None:
    """Rules apply in declaration order"""
    for rule in rules:
        enforce(rule, grid, details)


def verify_rules(rules, grid: Grid, details: dict) -> bool:
    return all(verify(rule, grid, details) for rule in rules)
