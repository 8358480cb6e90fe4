"""
Template definition language.

Every JSON tag (value ref ``kind``, condition ``operator``, action ``action``,
placeholder / computed field / rule ``type``) maps onto one model of a closed,
discriminated union, so an unknown tag is rejected while the template bank is
parsed instead of surfacing mid-round. JSON keys are camelCase, attributes are
snake_case.
"""
from typing import Annotated, Any, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from gridlogic.engine.values import COMPARISONS, FACTORS


class DSLModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


PropertyName = Literal["shape", "color", "number"]

ComparisonOperator = Literal[
    "equals", "notEquals", "greaterThan", "lessThan", "greaterOrEqual", "lessOrEqual"
]


# --- Value references ---

class PlaceholderRef(DSLModel):
    kind: Literal["placeholder"]
    key: str


class PlaceholderNameRef(DSLModel):
    kind: Literal["placeholderName"]
    key: str


class CellPropertyRef(DSLModel):
    kind: Literal["cellProperty"]
    property: PropertyName


class NeighborPropertyRef(DSLModel):
    kind: Literal["neighborProperty"]
    property: PropertyName


class ConstantRef(DSLModel):
    kind: Literal["constant"]
    value: Any


class NumberRef(DSLModel):
    kind: Literal["number"]
    value: Union[int, float]


ValueRef = Annotated[
    Union[PlaceholderRef, PlaceholderNameRef, CellPropertyRef, NeighborPropertyRef, ConstantRef, NumberRef],
    Field(discriminator="kind"),
]


# --- Conditions ---

class AllCondition(DSLModel):
    operator: Literal["all"]
    conditions: List["Condition"] = Field(default_factory=list)


class AnyCondition(DSLModel):
    operator: Literal["any"]
    conditions: List["Condition"] = Field(default_factory=list)


class NotCondition(DSLModel):
    operator: Literal["not"]
    condition: "Condition"


class ComparisonCondition(DSLModel):
    operator: ComparisonOperator
    left: ValueRef
    right: ValueRef


class BetweenCondition(DSLModel):
    """Inclusive on both ends"""
    operator: Literal["between"]
    value: ValueRef
    low: ValueRef = Field(alias="min")
    high: ValueRef = Field(alias="max")


class ParityCondition(DSLModel):
    operator: Literal["parity"]
    value: ValueRef
    parity: ValueRef


class PrimeCondition(DSLModel):
    operator: Literal["prime"]
    value: ValueRef


class MultipleOfCondition(DSLModel):
    operator: Literal["multipleOf"]
    value: ValueRef
    factor: ValueRef


class InRegionCondition(DSLModel):
    """Cell lies within `size` rows/cols from the named edge"""
    operator: Literal["inRegion"]
    direction: ValueRef
    size: ValueRef


Condition = Annotated[
    Union[
        AllCondition,
        AnyCondition,
        NotCondition,
        ComparisonCondition,
        BetweenCondition,
        ParityCondition,
        PrimeCondition,
        MultipleOfCondition,
        InRegionCondition,
    ],
    Field(discriminator="operator"),
]

AllCondition.model_rebuild()
AnyCondition.model_rebuild()
NotCondition.model_rebuild()


# --- Actions ---

class SetCellProperty(DSLModel):
    action: Literal["setCellProperty"]
    property: PropertyName
    value: ValueRef


class SetCellPropertyDistinct(DSLModel):
    action: Literal["setCellPropertyDistinct"]
    property: PropertyName
    from_placeholder: str


class RequireRegion(DSLModel):
    """Cannot move cells: reports needs-break when the cell is outside the region"""
    action: Literal["requireRegion"]
    direction: ValueRef
    size: ValueRef


class EnsureCellCondition(DSLModel):
    action: Literal["ensureCellCondition"]
    condition: Condition


class BreakCellCondition(DSLModel):
    action: Literal["breakCellCondition"]
    condition: Condition


CellAction = Annotated[
    Union[SetCellProperty, SetCellPropertyDistinct, RequireRegion, EnsureCellCondition, BreakCellCondition],
    Field(discriminator="action"),
]


# a literal operator name, or a ref resolving to greater/less or an operator name
ComparisonSpec = Union[ComparisonOperator, ValueRef]


class SetNeighborProperty(DSLModel):
    action: Literal["setNeighborProperty"]
    property: PropertyName
    value: ValueRef


class SetNeighborPropertyDistinct(DSLModel):
    action: Literal["setNeighborPropertyDistinct"]
    property: PropertyName
    from_placeholder: str


class EnsureNeighborNumber(DSLModel):
    action: Literal["ensureNeighborNumber"]
    comparison: ComparisonSpec
    placeholder: str


class SetNeighborNumberBreaking(DSLModel):
    action: Literal["setNeighborNumberBreaking"]
    comparison: ComparisonSpec
    placeholder: str


NeighborAction = Annotated[
    Union[SetNeighborProperty, SetNeighborPropertyDistinct, EnsureNeighborNumber, SetNeighborNumberBreaking],
    Field(discriminator="action"),
]


# --- Rules ---

class ImplicationRule(DSLModel):
    type: Literal["implication"]
    when: Optional[Condition] = None
    actions: List[CellAction] = Field(default_factory=list)
    break_antecedent: Optional[CellAction] = None
    violation: Optional[CellAction] = None


class NeighborSpec(DSLModel):
    direction: ValueRef
    conditions: List[Condition] = Field(default_factory=list)
    satisfy: List[NeighborAction] = Field(default_factory=list)
    violation: Optional[NeighborAction] = None


class NeighborRequirementRule(DSLModel):
    type: Literal["neighborRequirement"]
    when: Optional[Condition] = None
    neighbor: NeighborSpec
    break_antecedent: Optional[CellAction] = None


Rule = Annotated[Union[ImplicationRule, NeighborRequirementRule], Field(discriminator="type")]


# --- Placeholders ---

class ShapePlaceholder(DSLModel):
    type: Literal["shape"]
    exclude_placeholders: List[str] = Field(default_factory=list)

    def references(self) -> List[str]:
        return list(self.exclude_placeholders)


class ColorPlaceholder(DSLModel):
    type: Literal["color"]
    exclude_placeholders: List[str] = Field(default_factory=list)

    def references(self) -> List[str]:
        return list(self.exclude_placeholders)


class RangePlaceholder(DSLModel):
    low: Optional[int] = Field(default=None, alias="min")
    high: Optional[int] = Field(default=None, alias="max")
    min_ref: Optional[str] = None
    max_ref: Optional[str] = None
    min_offset: int = 0
    max_offset: int = 0

    def references(self) -> List[str]:
        return [ref for ref in (self.min_ref, self.max_ref) if ref]


class NumberPlaceholder(RangePlaceholder):
    """Clamped to the number domain"""
    type: Literal["number"]


class IntPlaceholder(RangePlaceholder):
    """Free integer, defaults to 0..grid size"""
    type: Literal["int"]


class ChoicePlaceholder(DSLModel):
    type: Literal["choice"]
    options: List[Any] = Field(min_length=1)

    def references(self) -> List[str]:
        return []


class ComparisonPlaceholder(DSLModel):
    type: Literal["comparison"]
    options: List[str] = Field(default_factory=lambda: list(COMPARISONS), min_length=1)

    def references(self) -> List[str]:
        return []


class ParityPlaceholder(DSLModel):
    type: Literal["parity"]

    def references(self) -> List[str]:
        return []


class FactorPlaceholder(DSLModel):
    type: Literal["factor"]
    options: List[int] = Field(default_factory=lambda: list(FACTORS), min_length=1)

    def references(self) -> List[str]:
        return []


Placeholder = Annotated[
    Union[
        ShapePlaceholder,
        ColorPlaceholder,
        NumberPlaceholder,
        IntPlaceholder,
        ChoicePlaceholder,
        ComparisonPlaceholder,
        ParityPlaceholder,
        FactorPlaceholder,
    ],
    Field(discriminator="type"),
]


# --- Computed fields ---

class SourcedField(DSLModel):
    key: str
    source: str

    def references(self) -> List[str]:
        return [self.source]


class ColorNameField(SourcedField):
    type: Literal["colorName"]


class ComparisonWordField(SourcedField):
    type: Literal["comparisonWord"]


class ComparisonSymbolField(SourcedField):
    type: Literal["comparisonSymbol"]


class ParityPredicateField(SourcedField):
    type: Literal["parityPredicate"]


class RegionDescriptionField(DSLModel):
    type: Literal["regionDescription"]
    key: str
    direction_key: str
    size_key: str

    def references(self) -> List[str]:
        return [self.direction_key, self.size_key]


class StringTemplateField(DSLModel):
    """Interpolated like statement text: unknown keys stay as literal tokens"""
    type: Literal["stringTemplate"]
    key: str
    template: str

    def references(self) -> List[str]:
        return []


ComputedField = Annotated[
    Union[
        ColorNameField,
        RegionDescriptionField,
        ComparisonWordField,
        ComparisonSymbolField,
        ParityPredicateField,
        StringTemplateField,
    ],
    Field(discriminator="type"),
]


# --- Template definition ---

class StatementTemplate(DSLModel):
    text: str
    fol: str
    hint: str = ""


def iter_placeholder_keys(node) -> Iterator[str]:
    """Every placeholder key a rule tree reads"""
    if isinstance(node, (PlaceholderRef, PlaceholderNameRef)):
        yield node.key
        return
    if isinstance(node, (list, tuple)):
        for item in node:
            yield from iter_placeholder_keys(item)
        return
    if not isinstance(node, BaseModel):
        return
    for name in type(node).model_fields:
        value = getattr(node, name)
        if name in ("from_placeholder", "placeholder") and isinstance(value, str):
            yield value
        else:
            yield from iter_placeholder_keys(value)


class TemplateDefinition(DSLModel):
    id: Optional[str] = None
    description: Optional[str] = None
    placeholders: dict[str, Placeholder] = Field(default_factory=dict)
    computed_fields: List[ComputedField] = Field(default_factory=list)
    statement: StatementTemplate
    rules: List[Rule] = Field(min_length=1)

    @model_validator(mode="after")
    def check_reference_order(self):
        """Placeholders resolve in declaration order, so every reference must point backwards"""
        known = set()
        for key, placeholder in self.placeholders.items():
            for ref in placeholder.references():
                if ref not in known:
                    raise ValueError(f"Placeholder '{key}' references '{ref}' before it is declared")
            known.add(key)

        for field in self.computed_fields:
            for ref in field.references():
                if ref not in known:
                    raise ValueError(f"Computed field '{field.key}' reads unknown key '{ref}'")
            known.add(field.key)

        for index, rule in enumerate(self.rules):
            for ref in iter_placeholder_keys(rule):
                if ref not in known:
                    raise ValueError(f"Rule {index} references undeclared placeholder '{ref}'")
        return self

    @property
    def name(self) -> str:
        return self.id or self.statement.text
