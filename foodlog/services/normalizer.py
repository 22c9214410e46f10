"""
Quantity Normalizer

Turns a user-supplied (quantity, unit) pair into a scale factor relative to
the 100g reference used by food databases, and applies it to a per-100g
nutrient vector.

Volumes assume a density of 1 g/ml. Units that are neither mass nor volume
(piece, serving, cup, slice, ...) count as 100g-equivalent servings.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from foodlog.errors import ValidationError

REFERENCE_GRAMS = 100.0

GRAMS_PER_KILOGRAM = 1000.0
GRAMS_PER_POUND = 453.592
GRAMS_PER_OUNCE = 28.35
GRAMS_PER_LITER = 1000.0
GRAMS_PER_MILLILITER = 1.0
GRAMS_PER_MILLIGRAM = 0.001

GRAM_TOKENS = {"g", "gr", "gm", "gms"}


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero (``round()`` rounds half to even)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def validate_quantity(quantity) -> float:
    """Return ``quantity`` as a float or raise ``ValidationError``."""
    if isinstance(quantity, bool) or quantity is None:
        raise ValidationError("quantity must be a number", fields=["quantity"])
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        raise ValidationError("quantity must be a number", fields=["quantity"])
    if not math.isfinite(value):
        raise ValidationError("quantity must be finite", fields=["quantity"])
    if value <= 0:
        raise ValidationError("quantity must be greater than zero", fields=["quantity"])
    return value


def _is_whole_liter(token: str) -> bool:
    if token == "l":
        return True
    for word in ("liter", "litre"):
        idx = token.find(word)
        if idx != -1 and not token[:idx].endswith("milli"):
            return True
    return False


def grams_per_unit(unit: Optional[str]) -> Optional[float]:
    """
    Grams represented by one ``unit``, or None for count-style units.

    Rules are checked in order and the first match wins, so "kg" is never
    read as grams and "ml" is never read as liters.
    """
    token = (unit or "").strip().lower()
    if not token:
        return None

    if "kg" in token or "kilogram" in token:
        return GRAMS_PER_KILOGRAM
    if "lb" in token or "pound" in token:
        return GRAMS_PER_POUND
    if "oz" in token or "ounce" in token:
        return GRAMS_PER_OUNCE
    if _is_whole_liter(token):
        return GRAMS_PER_LITER
    if token == "ml" or "milliliter" in token or "millilitre" in token:
        return GRAMS_PER_MILLILITER
    if token == "mg" or "milligram" in token:
        return GRAMS_PER_MILLIGRAM
    if token in GRAM_TOKENS or "gram" in token:
        return 1.0
    return None


def scale_factor(quantity: float, unit: Optional[str]) -> float:
    grams = grams_per_unit(unit)
    if grams is None:
        # Count of 100g-equivalent servings
        return float(quantity)
    return float(quantity) * grams / REFERENCE_GRAMS


def normalize(per_100g: Dict[str, float], quantity, unit: Optional[str]) -> Dict[str, float]:
    """
    Scale a per-100g nutrient vector to the logged quantity.

    Args:
        per_100g: Nutrient name to value per 100 grams
        quantity: Positive amount in ``unit``
        unit: Free-text unit token

    Returns:
        Nutrient name to absolute value, rounded to 2 decimals

    Raises:
        ValidationError: If quantity is not a positive finite number
    """
    factor = scale_factor(validate_quantity(quantity), unit)
    return {
        name: round_half_up(float(value) * factor)
        for name, value in per_100g.items()
    }
