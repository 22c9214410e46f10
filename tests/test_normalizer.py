import math

import pytest

from foodlog.errors import ValidationError
from foodlog.services.normalizer import (
    grams_per_unit,
    normalize,
    round_half_up,
    scale_factor,
    validate_quantity,
)

PER_100G = {"calories": 89.0, "protein": 1.1, "carbs": 23.0, "fat": 0.3}


def test_hundred_grams_is_identity():
    assert normalize(PER_100G, 100, "g") == PER_100G


@pytest.mark.parametrize("unit, quantity, expected", [
    ("kg", 1, 10.0),
    ("Kilograms", 0.5, 5.0),
    ("lb", 1, 4.53592),
    ("pounds", 2, 9.07184),
    ("oz", 1, 0.2835),
    ("Ounce", 4, 1.134),
    ("l", 1, 10.0),
    ("L", 0.5, 5.0),
    ("liter", 2, 20.0),
    ("litres", 1, 10.0),
    ("ml", 250, 2.5),
    ("milliliters", 250, 2.5),
    ("g", 50, 0.5),
    ("grams", 150, 1.5),
    ("GR", 10, 0.1),
    ("mg", 500, 0.005),
    ("piece", 3, 3.0),
    ("serving", 2, 2.0),
    ("cup", 1.5, 1.5),
    ("slice", 1, 1.0),
    ("", 2, 2.0),
])
def test_scale_factor_by_unit(unit, quantity, expected):
    assert scale_factor(quantity, unit) == pytest.approx(expected)


def test_count_units_have_no_gram_weight():
    assert grams_per_unit("piece") is None
    assert grams_per_unit(None) is None
    assert grams_per_unit("milliliter") == 1.0
    assert grams_per_unit("kilogram") == 1000.0


@pytest.mark.parametrize("unit", ["g", "kg", "oz", "lb", "ml"])
def test_mass_units_are_linear(unit):
    vector = {"calories": 250.0, "protein": 12.0, "fat": 4.0}
    single = normalize(vector, 3, unit)
    double = normalize(vector, 6, unit)
    for name in vector:
        assert double[name] == pytest.approx(2 * single[name], abs=0.011)


def test_normalize_is_deterministic():
    assert normalize(PER_100G, 37.5, "oz") == normalize(PER_100G, 37.5, "oz")


def test_normalize_rounds_to_two_places():
    result = normalize(PER_100G, 120, "g")
    assert result == {"calories": 106.8, "protein": 1.32, "carbs": 27.6, "fat": 0.36}


@pytest.mark.parametrize("value, expected", [
    (0.125, 0.13),
    (2.675, 2.68),
    (-1.005, -1.01),
    (1.004, 1.0),
    (106.80000000000001, 106.8),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize("quantity", [0, -1, -0.5, "abc", None, True, float("nan"), float("inf"), [1]])
def test_validate_quantity_rejects(quantity):
    with pytest.raises(ValidationError) as exc:
        validate_quantity(quantity)
    assert exc.value.fields == ["quantity"]


def test_validate_quantity_accepts_numeric_strings():
    assert validate_quantity("2.5") == 2.5
    assert math.isclose(validate_quantity(1e-3), 0.001)


def test_normalize_validates_quantity():
    with pytest.raises(ValidationError):
        normalize(PER_100G, 0, "g")
