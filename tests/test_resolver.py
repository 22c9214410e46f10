import pytest
import requests

from foodlog.services.resolver import (
    Candidate,
    OpenFoodFactsResolver,
    ResolutionFailure,
    ResolvedFood,
    UsdaResolver,
    build_resolver,
    extract_per_100g,
    select_candidate,
    usda_nutrient_map,
)

OFF_URL = "https://off.test/cgi/search.pl"
USDA_URL = "https://usda.test/fdc/v1/foods/search"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


def off_resolver(payload=None, exc=None, status_code=200):
    session = FakeSession(FakeResponse(payload, status_code), exc)
    return OpenFoodFactsResolver(OFF_URL, timeout=3, page_size=5, session=session), session


def test_skips_candidates_without_nutrients():
    resolver, session = off_resolver({"products": [
        {"product_name": "Banana chips (no data)", "nutriments": {}},
        {"product_name": "Banana", "nutriments": {
            "energy-kcal_100g": 89, "proteins_100g": 1.1, "carbohydrates_100g": 23, "fat_100g": 0.3,
        }},
        {"product_name": "Banana bread", "nutriments": {"energy-kcal_100g": 326}},
    ]})

    result = resolver.resolve("banana")

    assert isinstance(result, ResolvedFood)
    assert result.name == "Banana"
    assert result.source == "openfoodfacts"
    assert result.nutrients == {
        "calories": 89.0, "protein": 1.1, "carbs": 23.0, "fat": 0.3,
        "fiber": 0.0, "sugar": 0.0, "sodium": 0.0,
    }
    call = session.calls[0]
    assert call["url"] == OFF_URL
    assert call["params"]["search_terms"] == "banana"
    assert call["params"]["page_size"] == 5
    assert call["timeout"] == 3


def test_missing_product_name_falls_back_to_query():
    resolver, _ = off_resolver({"products": [{"nutriments": {"energy-kcal": 50}}]})
    result = resolver.resolve("plum")
    assert result.name == "plum"
    assert result.nutrients["calories"] == 50.0


def test_kilojoules_only_are_converted():
    assert extract_per_100g({"energy-kj_100g": 200})["calories"] == pytest.approx(47.8, abs=0.01)


def test_generic_energy_is_treated_as_kilojoules():
    assert extract_per_100g({"energy_100g": 418.4})["calories"] == pytest.approx(100.0)
    assert extract_per_100g({"energy": 836.8})["calories"] == pytest.approx(200.0)


def test_kcal_field_wins_over_energy():
    nutriments = {"energy_100g": 1046, "energy-kj_100g": 1046, "energy-kcal_100g": 250, "energy-kcal": 999}
    assert extract_per_100g(nutriments)["calories"] == 250.0


def test_energy_absent_is_zero():
    assert extract_per_100g({"proteins": 3})["calories"] == 0.0


def test_alias_fallbacks_and_bad_values():
    vector = extract_per_100g({
        "energy-kcal_100g": "not a number",
        "energy-kcal": "120",
        "proteins_100g": -4,
        "proteins": "7.5",
        "carbohydrates": 12,
        "lipids": 3,
        "fiber_100g": None,
        "fiber": 2,
        "sugars_100g": 5,
    })
    assert vector["calories"] == 120.0
    assert vector["protein"] == 7.5
    assert vector["carbs"] == 12.0
    assert vector["fat"] == 3.0
    assert vector["fiber"] == 2.0
    assert vector["sugar"] == 5.0


def test_sodium_in_milligrams():
    assert extract_per_100g({"sodium_100g": 0.5})["sodium"] == pytest.approx(500.0)
    assert extract_per_100g({"salt_100g": 1.0})["sodium"] == pytest.approx(400.0)


def test_select_candidate():
    empty = Candidate("a", {})
    full = Candidate("b", {"fat": 1})
    assert select_candidate([empty, full]) is full
    assert select_candidate([empty]) is None
    assert select_candidate([]) is None


@pytest.mark.parametrize("exc", [requests.Timeout("timed out"), requests.ConnectionError("refused")])
def test_network_errors_become_failures(exc):
    resolver, _ = off_resolver(exc=exc)
    result = resolver.resolve("banana")
    assert isinstance(result, ResolutionFailure)
    assert result.reason == ResolutionFailure.LOOKUP_ERROR


def test_http_error_becomes_failure():
    resolver, _ = off_resolver({"products": []}, status_code=503)
    assert resolver.resolve("banana").reason == ResolutionFailure.LOOKUP_ERROR


def test_invalid_json_becomes_failure():
    resolver, _ = off_resolver(ValueError("Expecting value"))
    assert resolver.resolve("banana").reason == ResolutionFailure.LOOKUP_ERROR


def test_no_results():
    resolver, _ = off_resolver({"products": []})
    assert resolver.resolve("zzzz").reason == ResolutionFailure.NO_RESULTS


def test_no_candidate_with_nutrients():
    resolver, _ = off_resolver({"products": [{"product_name": "x", "nutriments": {}}, {"product_name": "y"}]})
    assert resolver.resolve("x").reason == ResolutionFailure.NO_NUTRIENT_DATA


@pytest.mark.parametrize("payload", [
    {"products": 5},
    {"products": "banana"},
    {"products": {"product_name": "Banana"}},
])
def test_non_list_products_mean_no_results(payload):
    resolver, _ = off_resolver(payload)
    assert resolver.resolve("banana").reason == ResolutionFailure.NO_RESULTS


def test_non_string_product_name_falls_back_to_query():
    resolver, _ = off_resolver({"products": [{"product_name": 42, "nutriments": {"energy-kcal_100g": 89}}]})
    result = resolver.resolve("banana")
    assert isinstance(result, ResolvedFood)
    assert result.name == "banana"
    assert result.nutrients["calories"] == 89.0


def test_unexpected_parsing_error_becomes_failure():
    class BrokenResolver(OpenFoodFactsResolver):
        def search(self, food_name):
            raise TypeError("'NoneType' object is not subscriptable")

    resolver = BrokenResolver(OFF_URL, session=FakeSession())
    result = resolver.resolve("banana")
    assert isinstance(result, ResolutionFailure)
    assert result.reason == ResolutionFailure.LOOKUP_ERROR


def test_ping():
    resolver, _ = off_resolver({"products": []}, status_code=500)
    assert resolver.ping() is True

    resolver, _ = off_resolver(exc=requests.ConnectionError("down"))
    assert resolver.ping() is False


def test_close_releases_session():
    resolver, session = off_resolver({})
    resolver.close()
    assert session.closed


def test_usda_nutrient_map():
    folded = usda_nutrient_map([
        {"nutrientName": "Energy", "unitName": "KCAL", "value": 52},
        {"nutrientName": "Energy", "unitName": "kJ", "value": 218},
        {"nutrientName": "Protein", "unitName": "G", "value": 0.26},
        {"nutrientName": "Carbohydrate, by difference", "unitName": "G", "value": 13.8},
        {"nutrientName": "Total lipid (fat)", "unitName": "G", "value": 0.17},
        {"nutrientName": "Fiber, total dietary", "unitName": "G", "value": 2.4},
        {"nutrientName": "Total Sugars", "unitName": "G", "value": 10.4},
        {"nutrientName": "Sodium, Na", "unitName": "MG", "value": 1},
        {"nutrientName": "Vitamin C", "unitName": "MG", "value": 4.6},
    ])
    vector = extract_per_100g(folded)
    assert vector == pytest.approx({
        "calories": 52.0, "protein": 0.26, "carbs": 13.8, "fat": 0.17,
        "fiber": 2.4, "sugar": 10.4, "sodium": 1.0,
    })


def test_usda_resolver():
    session = FakeSession(FakeResponse({"foods": [
        {"description": "Apples, raw", "foodNutrients": []},
        {"description": "Apples, fuji", "foodNutrients": [{"nutrientName": "Energy", "unitName": "kJ", "value": 418.4}]},
    ]}))
    resolver = UsdaResolver(USDA_URL, "KEY", page_size=3, session=session)

    result = resolver.resolve("apple")

    assert result.name == "Apples, fuji"
    assert result.nutrients["calories"] == pytest.approx(100.0)
    assert session.calls[0]["params"] == {"query": "apple", "pageSize": 3, "api_key": "KEY"}


def test_usda_malformed_payloads():
    session = FakeSession(FakeResponse({"foods": [
        {"description": 7, "foodNutrients": [
            {"nutrientName": 7, "unitName": "G", "value": 3},
            {"nutrientName": "Protein", "unitName": ["G"], "value": 2},
            {"nutrientName": "Energy", "unitName": "KCAL", "value": 52},
        ]},
    ]}))
    resolver = UsdaResolver(USDA_URL, "KEY", session=session)

    result = resolver.resolve("apple")

    assert isinstance(result, ResolvedFood)
    assert result.name == "apple"
    assert result.nutrients["calories"] == 52.0
    assert result.nutrients["protein"] == 2.0

    assert usda_nutrient_map(5) == {}
    session.response = FakeResponse({"foods": 5})
    assert resolver.resolve("apple").reason == ResolutionFailure.NO_RESULTS


def test_build_resolver():
    config = {
        "FOOD_API_PROVIDER": "USDA",
        "USDA_SEARCH_URL": USDA_URL,
        "USDA_API_KEY": "abc",
        "OFF_SEARCH_URL": OFF_URL,
        "FOOD_API_TIMEOUT": 2,
        "FOOD_API_PAGE_SIZE": 4,
    }
    resolver = build_resolver(config)
    assert isinstance(resolver, UsdaResolver)
    assert resolver.timeout == 2.0
    assert resolver.page_size == 4

    config["FOOD_API_PROVIDER"] = "openfoodfacts"
    assert isinstance(build_resolver(config), OpenFoodFactsResolver)

    config["FOOD_API_PROVIDER"] = "nope"
    with pytest.raises(ValueError):
        build_resolver(config)
