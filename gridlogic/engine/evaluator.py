"""
Value reference resolution and condition evaluation.

Conditions are evaluated against a context holding the resolved statement
details, the cell under test and, for neighbor requirements, the neighbor cell.
Evaluation never mutates the context.
"""
import operator
from dataclasses import dataclass
from typing import Any, Optional, Set

from gridlogic.core.exceptions import (
    ConditionTypeError,
    EvaluationContextError,
    MissingNeighborError,
    TemplateDefinitionError,
    UnknownDirectionError,
    UnresolvedPlaceholderError,
)
from gridlogic.engine.grid import Cell
from gridlogic.engine.values import GRID_SIZE, is_prime
from gridlogic.schemas.template_schema import (
    AllCondition,
    AnyCondition,
    BetweenCondition,
    CellPropertyRef,
    ComparisonCondition,
    ConstantRef,
    InRegionCondition,
    MultipleOfCondition,
    NeighborPropertyRef,
    NotCondition,
    NumberRef,
    ParityCondition,
    PlaceholderNameRef,
    PlaceholderRef,
    PrimeCondition,
)


@dataclass
class EvaluationContext:
    details: dict
    cell: Optional[Cell] = None
    neighbor: Optional[Cell] = None
    grid_size: int = GRID_SIZE


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left, right) -> bool:
    """Equality without coercion: values of different types are never equal"""
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


COMPARATORS = {
    "equals": strict_equals,
    "notEquals": lambda left, right: not strict_equals(left, right),
    "greaterThan": operator.gt,
    "lessThan": operator.lt,
    "greaterOrEqual": operator.ge,
    "lessOrEqual": operator.le,
}

# values produced by a `comparison` placeholder
COMPARISON_WORDS = {
    "greater": "greaterThan",
    "less": "lessThan",
}


def normalize_comparison(value) -> str:
    """Map greater/less or an operator name onto a comparison operator name"""
    name = COMPARISON_WORDS.get(value, value)
    if name not in COMPARATORS:
        raise TemplateDefinitionError(f"Unsupported comparison: {value!r}")
    return name


def compare(operator_name: str, left, right) -> bool:
    try:
        return COMPARATORS[operator_name](left, right)
    except TypeError as exc:
        raise ConditionTypeError(f"Cannot apply {operator_name} to {left!r} and {right!r}") from exc


def resolve(ref, context: EvaluationContext) -> Any:
    if ref is None:
        return None
    if isinstance(ref, (PlaceholderRef, PlaceholderNameRef)):
        if ref.key not in context.details:
            raise UnresolvedPlaceholderError(ref.key)
        return context.details[ref.key]
    if isinstance(ref, CellPropertyRef):
        if context.cell is None:
            raise EvaluationContextError(f"cellProperty '{ref.property}' requested without a cell in context")
        return getattr(context.cell, ref.property)
    if isinstance(ref, NeighborPropertyRef):
        if context.neighbor is None:
            raise MissingNeighborError(ref.property)
        return getattr(context.neighbor, ref.property)
    if isinstance(ref, (ConstantRef, NumberRef)):
        return ref.value
    raise TemplateDefinitionError(f"Unsupported value ref: {ref!r}")


def is_in_region(cell: Cell, direction: str, size: int, grid_size: int = GRID_SIZE) -> bool:
    """Cell lies within `size` columns (left/right) or rows (top/bottom) of that edge"""
    if direction == "left":
        return cell.col < size
    if direction == "right":
        return cell.col >= grid_size - size
    if direction == "top":
        return cell.row < size
    if direction == "bottom":
        return cell.row >= grid_size - size
    raise UnknownDirectionError(direction)


def evaluate(condition, context: EvaluationContext) -> bool:
    # absent condition is vacuously true
    if condition is None:
        return True

    if isinstance(condition, AllCondition):
        return all(evaluate(child, context) for child in condition.conditions)
    if isinstance(condition, AnyCondition):
        return any(evaluate(child, context) for child in condition.conditions)
    if isinstance(condition, NotCondition):
        return not evaluate(condition.condition, context)

    if isinstance(condition, ComparisonCondition):
        left = resolve(condition.left, context)
        right = resolve(condition.right, context)
        return compare(condition.operator, left, right)

    if isinstance(condition, InRegionCondition):
        if context.cell is None:
            return False
        direction = resolve(condition.direction, context)
        size = resolve(condition.size, context)
        return is_in_region(context.cell, direction, size, context.grid_size)

    try:
        if isinstance(condition, BetweenCondition):
            value = resolve(condition.value, context)
            return resolve(condition.low, context) <= value <= resolve(condition.high, context)
        if isinstance(condition, ParityCondition):
            value = resolve(condition.value, context)
            parity = resolve(condition.parity, context)
            return value % 2 == 0 if parity == "even" else value % 2 != 0
        if isinstance(condition, PrimeCondition):
            return is_prime(resolve(condition.value, context))
        if isinstance(condition, MultipleOfCondition):
            value = resolve(condition.value, context)
            factor = resolve(condition.factor, context)
            return value % factor == 0
    except (TypeError, ZeroDivisionError) as exc:
        raise ConditionTypeError(f"Cannot evaluate {condition.operator} on {condition!r}") from exc

    raise TemplateDefinitionError(f"Unsupported condition operator: {getattr(condition, 'operator', condition)!r}")


def cell_properties(condition) -> Set[str]:
    """Cell properties a condition reads"""
    found = set()
    if condition is None:
        return found
    if isinstance(condition, (AllCondition, AnyCondition)):
        for child in condition.conditions:
            found |= cell_properties(child)
        return found
    if isinstance(condition, NotCondition):
        return cell_properties(condition.condition)
    for name in type(condition).model_fields:
        ref = getattr(condition, name)
        if isinstance(ref, CellPropertyRef):
            found.add(ref.property)
    return found
