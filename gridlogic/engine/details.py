import logging
import re

from gridlogic.core.exceptions import TemplateDefinitionError, UnresolvedPlaceholderError
from gridlogic.engine.values import (
    COLORS,
    GRID_SIZE,
    NUMBERS,
    PARITIES,
    SHAPES,
    clamp_to_numbers,
    get_color_name,
    pick_excluding,
    random_element,
    random_int,
)
from gridlogic.schemas.template_schema import (
    ChoicePlaceholder,
    ColorNameField,
    ColorPlaceholder,
    ComparisonPlaceholder,
    ComparisonSymbolField,
    ComparisonWordField,
    FactorPlaceholder,
    IntPlaceholder,
    NumberPlaceholder,
    ParityPlaceholder,
    ParityPredicateField,
    RegionDescriptionField,
    ShapePlaceholder,
    StringTemplateField,
    TemplateDefinition,
)

logger = logging.getLogger(__name__)

TEMPLATE_KEY = re.compile(r"\{([^}]+)\}")


def fill_template(template: str, details: dict) -> str:
    """Substitute {key} tokens; unknown keys are left in place so authoring errors stay visible"""
    missing = []

    def substitute(match):
        key = match.group(1)
        if key in details and details[key] is not None:
            return str(details[key])
        missing.append(key)
        return match.group(0)

    text = TEMPLATE_KEY.sub(substitute, template)
    if missing:
        logger.warning(f"Unresolved template keys {missing} in '{template}'")
    return text


def _lookup(details: dict, key: str):
    if key not in details:
        raise UnresolvedPlaceholderError(key)
    return details[key]


def _bound(details: dict, key: str, offset: int) -> int:
    value = _lookup(details, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TemplateDefinitionError(f"Range bound '{key}' must be a number, got {value!r}")
    return value + offset


def _range_bounds(placeholder, details: dict, default_low: int, default_high: int):
    low = placeholder.low if placeholder.low is not None else default_low
    high = placeholder.high if placeholder.high is not None else default_high
    if placeholder.min_ref:
        low = _bound(details, placeholder.min_ref, placeholder.min_offset)
    if placeholder.max_ref:
        high = _bound(details, placeholder.max_ref, placeholder.max_offset)
    return low, high


def generate_placeholder(placeholder, details: dict):
    """Draw one placeholder value; earlier placeholders are already in details"""
    if isinstance(placeholder, (ShapePlaceholder, ColorPlaceholder)):
        domain = SHAPES if isinstance(placeholder, ShapePlaceholder) else COLORS
        excluded = [_lookup(details, key) for key in placeholder.exclude_placeholders]
        return pick_excluding(domain, [value for value in excluded if value])

    if isinstance(placeholder, NumberPlaceholder):
        low, high = _range_bounds(placeholder, details, min(NUMBERS), max(NUMBERS))
        return random_int(clamp_to_numbers(low), clamp_to_numbers(high))

    if isinstance(placeholder, IntPlaceholder):
        low, high = _range_bounds(placeholder, details, 0, GRID_SIZE)
        if low > high:
            low, high = high, low
        return random_int(low, high)

    if isinstance(placeholder, (ChoicePlaceholder, ComparisonPlaceholder, FactorPlaceholder)):
        return random_element(placeholder.options)

    if isinstance(placeholder, ParityPlaceholder):
        return random_element(PARITIES)

    raise TemplateDefinitionError(f"Unsupported placeholder type: {getattr(placeholder, 'type', placeholder)!r}")


def compute_field(field, details: dict):
    if isinstance(field, ColorNameField):
        return get_color_name(_lookup(details, field.source))

    if isinstance(field, RegionDescriptionField):
        direction = _lookup(details, field.direction_key)
        size = _lookup(details, field.size_key)
        dimension = "columns" if direction in ("left", "right") else "rows"
        return f"{direction} {size} {dimension}"

    if isinstance(field, ComparisonWordField):
        return "greater than" if _lookup(details, field.source) == "greater" else "less than"

    if isinstance(field, ComparisonSymbolField):
        return ">" if _lookup(details, field.source) == "greater" else "<"

    if isinstance(field, ParityPredicateField):
        return "Even" if _lookup(details, field.source) == "even" else "Odd"

    if isinstance(field, StringTemplateField):
        return fill_template(field.template, details)

    raise TemplateDefinitionError(f"Unsupported computed field: {getattr(field, 'type', field)!r}")


def generate_details(definition: TemplateDefinition) -> dict:
    """Resolve all placeholders in declaration order, then the computed fields"""
    details = {}
    for key, placeholder in definition.placeholders.items():
        details[key] = generate_placeholder(placeholder, details)

    for field in definition.computed_fields:
        details[field.key] = compute_field(field, details)

    logger.debug(f"Resolved details for '{definition.name}': {details}")
    return details
