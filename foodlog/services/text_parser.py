"""
Food Text Parser

Best-effort extraction of (food, quantity, unit) triples from free text such
as "2 cups rice and 120g chicken breast". Kept apart from the resolver: the
output is fed through the normal food log creation path.
"""

import re
from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional, Tuple

DEFAULT_UNIT = "serving"

QUANTITY_WORDS = {
    "a": 1.0,
    "an": 1.0,
    "one": 1.0,
    "two": 2.0,
    "three": 3.0,
    "four": 4.0,
    "five": 5.0,
    "six": 6.0,
    "half": 0.5,
    "half a": 0.5,
    "a couple of": 2.0,
    "a few": 3.0,
}

UNIT_WORDS = [
    "kg", "kilogram", "g", "gram", "gr", "mg", "milligram",
    "lb", "pound", "oz", "ounce",
    "ml", "milliliter", "millilitre", "l", "liter", "litre",
    "cup", "tbsp", "tablespoon", "tsp", "teaspoon",
    "piece", "slice", "serving", "bowl", "glass", "can", "handful",
]

SEPARATORS = re.compile(r"\s*(?:,|;|\+|\n|\band\b|\bwith\b|&)\s*", re.IGNORECASE)
NUMBER = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)"
# "120g rice", "2 cups of rice", "1 1/2 cup oats"
NUMERIC_ITEM = re.compile(
    rf"^(?P<qty>{NUMBER})\s*(?P<unit>(?:{'|'.join(sorted(UNIT_WORDS, key=len, reverse=True))})(?:e?s)?\b\.?)?\s*(?:of\s+)?(?P<food>.+)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedFood:
    food_name: str
    quantity: float
    unit: str


class FoodTextParser:
    """Interface for turning free text into food items."""

    def parse(self, text: str) -> List[ParsedFood]:
        raise NotImplementedError


def parse_number(token: str) -> Optional[float]:
    token = token.strip()
    try:
        if " " in token:
            whole, frac = token.split(None, 1)
            return float(int(whole) + Fraction(frac))
        return float(Fraction(token))
    except (ValueError, ZeroDivisionError):
        return None


def _singular(unit: str) -> str:
    unit = unit.lower().rstrip(".")
    if unit in UNIT_WORDS:
        return unit
    for suffix in ("es", "s"):
        if unit.endswith(suffix) and unit[: -len(suffix)] in UNIT_WORDS:
            return unit[: -len(suffix)]
    return unit


def _split_word_quantity(text: str) -> Tuple[float, str]:
    lowered = text.lower()
    # Longest phrase first so "half a" wins over "half"
    for phrase in sorted(QUANTITY_WORDS, key=len, reverse=True):
        if lowered.startswith(phrase + " "):
            return QUANTITY_WORDS[phrase], text[len(phrase):].strip()
    return 1.0, text


class RegexFoodParser(FoodTextParser):
    def parse(self, text: str) -> List[ParsedFood]:
        items = []
        for chunk in SEPARATORS.split(text or ""):
            parsed = self.parse_item(chunk)
            if parsed is not None:
                items.append(parsed)
        return items

    def parse_item(self, chunk: str) -> Optional[ParsedFood]:
        chunk = " ".join((chunk or "").split())
        if not chunk:
            return None

        match = NUMERIC_ITEM.match(chunk)
        if match:
            quantity = parse_number(match.group("qty"))
            food = match.group("food").strip()
            if quantity is None or quantity <= 0 or not re.search(r"\w", food):
                return None
            if not match.group("unit") and _singular(food) in UNIT_WORDS:
                # "120g" alone: the unit was read as the food
                return None
            unit = _singular(match.group("unit")) if match.group("unit") else DEFAULT_UNIT
            return ParsedFood(food_name=food, quantity=quantity, unit=unit)

        quantity, rest = _split_word_quantity(chunk)
        rest_match = re.match(r"^(?P<unit>[A-Za-z]+)\s+of\s+(?P<food>.+)$", rest)
        if rest_match and _singular(rest_match.group("unit")) in UNIT_WORDS:
            return ParsedFood(
                food_name=rest_match.group("food").strip(),
                quantity=quantity,
                unit=_singular(rest_match.group("unit")),
            )
        if _singular(rest) in UNIT_WORDS:
            return None
        return ParsedFood(food_name=rest, quantity=quantity, unit=DEFAULT_UNIT)
