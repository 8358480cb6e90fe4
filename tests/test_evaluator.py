import pytest
from pydantic import TypeAdapter

from conftest import PINK, make_cell
from gridlogic.core.exceptions import (
    ConditionTypeError,
    EvaluationContextError,
    MissingNeighborError,
    UnknownDirectionError,
    UnresolvedPlaceholderError,
)
from gridlogic.engine.evaluator import EvaluationContext, evaluate, is_in_region, resolve, strict_equals
from gridlogic.schemas.template_schema import Condition, ValueRef

condition = TypeAdapter(Condition).validate_python
value_ref = TypeAdapter(ValueRef).validate_python


def cell_number_is(operator, right):
    return condition({
        "operator": operator,
        "left": {"kind": "cellProperty", "property": "number"},
        "right": right,
    })


def test_strict_equals_does_not_coerce():
    assert strict_equals(3, 3)
    assert strict_equals(3, 3.0)
    assert not strict_equals(1, "1")
    assert not strict_equals(1, True)
    assert not strict_equals("circle", "Circle")


def test_equals_placeholder_against_constant_string():
    cond = condition({
        "operator": "equals",
        "left": {"kind": "placeholder", "key": "threshold"},
        "right": {"kind": "constant", "value": "5"},
    })
    assert not evaluate(cond, EvaluationContext(details={"threshold": 5}))
    assert evaluate(cond, EvaluationContext(details={"threshold": "5"}))


def test_ordering_comparisons():
    ctx = EvaluationContext(details={"t": 5}, cell=make_cell(number=7))
    assert evaluate(cell_number_is("greaterThan", {"kind": "placeholder", "key": "t"}), ctx)
    assert not evaluate(cell_number_is("lessThan", {"kind": "placeholder", "key": "t"}), ctx)
    assert evaluate(cell_number_is("greaterOrEqual", {"kind": "number", "value": 7}), ctx)
    assert evaluate(cell_number_is("lessOrEqual", {"kind": "number", "value": 7}), ctx)
    assert evaluate(cell_number_is("notEquals", {"kind": "number", "value": 6}), ctx)


def test_ordering_incomparable_values_is_an_authoring_error():
    cond = cell_number_is("greaterThan", {"kind": "constant", "value": "five"})
    with pytest.raises(ConditionTypeError):
        evaluate(cond, EvaluationContext(details={}, cell=make_cell(number=3)))


def test_between_is_inclusive():
    cond = condition({
        "operator": "between",
        "value": {"kind": "cellProperty", "property": "number"},
        "min": {"kind": "number", "value": 3},
        "max": {"kind": "number", "value": 6},
    })
    results = {n: evaluate(cond, EvaluationContext(details={}, cell=make_cell(number=n))) for n in range(1, 11)}
    assert [n for n, holds in results.items() if holds] == [3, 4, 5, 6]


@pytest.mark.parametrize("number, parity, expected", [
    (4, "even", True),
    (4, "odd", False),
    (7, "odd", True),
    (7, "even", False),
])
def test_parity(number, parity, expected):
    cond = condition({
        "operator": "parity",
        "value": {"kind": "cellProperty", "property": "number"},
        "parity": {"kind": "placeholder", "key": "parity"},
    })
    ctx = EvaluationContext(details={"parity": parity}, cell=make_cell(number=number))
    assert evaluate(cond, ctx) is expected


def test_prime_and_multiple_of():
    prime = condition({"operator": "prime", "value": {"kind": "cellProperty", "property": "number"}})
    primes = [n for n in range(1, 11) if evaluate(prime, EvaluationContext(details={}, cell=make_cell(number=n)))]
    assert primes == [2, 3, 5, 7]

    multiple = condition({
        "operator": "multipleOf",
        "value": {"kind": "cellProperty", "property": "number"},
        "factor": {"kind": "placeholder", "key": "factor"},
    })
    ctx = EvaluationContext(details={"factor": 3}, cell=make_cell(number=9))
    assert evaluate(multiple, ctx)
    ctx = EvaluationContext(details={"factor": 3}, cell=make_cell(number=10))
    assert not evaluate(multiple, ctx)


def test_composites():
    true_cond = cell_number_is("equals", {"kind": "number", "value": 1})
    ctx = EvaluationContext(details={}, cell=make_cell(number=1))

    assert evaluate(None, ctx)
    assert evaluate(condition({"operator": "all", "conditions": []}), ctx)
    assert not evaluate(condition({"operator": "any", "conditions": []}), ctx)
    assert not evaluate(condition({"operator": "not", "condition": true_cond.model_dump(by_alias=True)}), ctx)
    assert evaluate(condition({
        "operator": "any",
        "conditions": [
            {"operator": "prime", "value": {"kind": "cellProperty", "property": "number"}},
            true_cond.model_dump(by_alias=True),
        ],
    }), ctx)


@pytest.mark.parametrize("direction, size, row, col, expected", [
    ("left", 2, 0, 1, True),
    ("left", 2, 0, 2, False),
    ("right", 1, 3, 4, True),
    ("right", 1, 3, 3, False),
    ("top", 3, 2, 0, True),
    ("bottom", 2, 2, 0, False),
    ("bottom", 2, 3, 0, True),
])
def test_is_in_region(direction, size, row, col, expected):
    assert is_in_region(make_cell(row=row, col=col), direction, size) is expected


def test_unknown_region_direction_raises():
    with pytest.raises(UnknownDirectionError):
        is_in_region(make_cell(), "diagonal", 2)


def test_in_region_condition_resolves_placeholders():
    cond = condition({
        "operator": "inRegion",
        "direction": {"kind": "placeholder", "key": "direction"},
        "size": {"kind": "placeholder", "key": "size"},
    })
    details = {"direction": "top", "size": 1}
    assert evaluate(cond, EvaluationContext(details=details, cell=make_cell(row=0, col=3)))
    assert not evaluate(cond, EvaluationContext(details=details, cell=make_cell(row=1, col=3)))


def test_resolve_errors():
    with pytest.raises(UnresolvedPlaceholderError):
        resolve(value_ref({"kind": "placeholder", "key": "color"}), EvaluationContext(details={}))
    with pytest.raises(EvaluationContextError):
        resolve(value_ref({"kind": "cellProperty", "property": "shape"}), EvaluationContext(details={}))
    with pytest.raises(MissingNeighborError):
        resolve(
            value_ref({"kind": "neighborProperty", "property": "color"}),
            EvaluationContext(details={}, cell=make_cell()),
        )


def test_resolve_neighbor_and_placeholder_name():
    ctx = EvaluationContext(details={"color": PINK}, cell=make_cell(), neighbor=make_cell(color="#b07bff"))
    assert resolve(value_ref({"kind": "neighborProperty", "property": "color"}), ctx) == "#b07bff"
    assert resolve(value_ref({"kind": "placeholderName", "key": "color"}), ctx) == PINK
