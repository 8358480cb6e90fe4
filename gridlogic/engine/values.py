"""
Value domains of the puzzle grid and the random sampling primitives built on them.

All sampling goes through the module-level ``random`` generator so a single
``random.seed`` call makes a whole round reproducible.
"""
import logging
import random
from typing import Any, Iterable, Optional, Sequence

logger = logging.getLogger(__name__)


GRID_SIZE = 5

SHAPES = ["circle", "square", "triangle"]
COLORS = ["#ff82a9", "#7ed957", "#6ecbff", "#ffd966", "#b07bff"]
NUMBERS = list(range(1, 11))

COLOR_NAMES = {
    "#ff82a9": "Pink",
    "#7ed957": "Green",
    "#6ecbff": "Sky Blue",
    "#ffd966": "Yellow",
    "#b07bff": "Purple",
}

PARITIES = ["even", "odd"]
COMPARISONS = ["greater", "less"]
FACTORS = [2, 3]


def get_color_name(color: str) -> str:
    """English name of a color identifier, or the identifier itself if unknown"""
    return COLOR_NAMES.get(color.lower(), color)


def get_domain(property_name: str) -> list:
    if property_name == "shape":
        return SHAPES
    if property_name == "color":
        return COLORS
    if property_name == "number":
        return NUMBERS
    raise ValueError(f"Unknown property domain requested for {property_name}")


def random_element(values: Sequence[Any]) -> Any:
    if not values:
        raise ValueError("Cannot pick a random element from an empty sequence")
    return random.choice(values)


def random_int(low: int, high: int) -> int:
    """Uniform integer in [low, high]; an inverted interval yields low"""
    if low > high:
        logger.warning(f"Invalid interval [{low}, {high}]: min is greater than max, using min")
        return low
    return random.randint(low, high)


def shuffled(values: Iterable[Any]) -> list:
    items = list(values)
    random.shuffle(items)
    return items


def pick_excluding(domain: Sequence[Any], excluded: Iterable[Any]) -> Any:
    """Uniform pick from the domain minus the excluded values (whole domain if nothing is left)"""
    excluded = list(excluded)
    remaining = [value for value in domain if value not in excluded]
    return random_element(remaining or domain)


def pick_distinct(property_name: str, exclude_value: Optional[Any]) -> Any:
    return pick_excluding(get_domain(property_name), [exclude_value])


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def clamp_to_numbers(value: int) -> int:
    return clamp(value, min(NUMBERS), max(NUMBERS))


def is_prime(value) -> bool:
    """Trial division up to the square root"""
    if value < 2:
        return False
    if value == 2:
        return True
    if value % 2 == 0:
        return False
    divisor = 3
    while divisor * divisor <= value:
        if value % divisor == 0:
            return False
        divisor += 2
    return True
