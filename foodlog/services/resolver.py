"""
Nutrient Resolver

Looks a free-text food name up in an external food database and returns a
per-100g nutrient vector for the best candidate.

Handles:
- Candidate selection (first candidate that actually carries nutrient data)
- Alternate field names for the same nutrient
- Energy reported in kJ instead of kcal
- Provider adapters (Open Food Facts, USDA FoodData Central)

Lookup problems never raise to the caller. They come back as a
``ResolutionFailure`` so a meal can still be logged without nutrition.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import requests

logger = logging.getLogger(__name__)

KJ_PER_KCAL = 4.184
SODIUM_PER_GRAM_SALT_MG = 400.0

# Aliases per nutrient, tried in order
KCAL_KEYS = ("energy-kcal_100g", "energy-kcal")
KJ_KEYS = ("energy-kj_100g", "energy-kj")
GENERIC_ENERGY_KEYS = ("energy_100g", "energy")
GRAM_NUTRIENT_KEYS = {
    "protein": ("proteins_100g", "proteins", "protein_100g", "protein"),
    "carbs": ("carbohydrates_100g", "carbohydrates", "carbs"),
    "fat": ("fat_100g", "fat", "lipids_100g", "lipids"),
    "fiber": ("fiber_100g", "fiber"),
    "sugar": ("sugars_100g", "sugars"),
}
SODIUM_KEYS = ("sodium_100g", "sodium")
SALT_KEYS = ("salt_100g", "salt")

NutrientVector = Dict[str, float]


@dataclass(frozen=True)
class ResolvedFood:
    name: str
    nutrients: NutrientVector
    source: str


@dataclass(frozen=True)
class ResolutionFailure:
    reason: str
    detail: str = ""

    LOOKUP_ERROR = "lookup_error"
    NO_RESULTS = "no_results"
    NO_NUTRIENT_DATA = "no_nutrient_data"


Resolution = Union[ResolvedFood, ResolutionFailure]


@dataclass
class Candidate:
    name: Optional[str]
    nutriments: Dict[str, Any] = field(default_factory=dict)


def _as_nutrient_value(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first_value(nutriments: Dict[str, Any], keys: Iterable[str]) -> Optional[float]:
    for key in keys:
        value = _as_nutrient_value(nutriments.get(key))
        if value is not None:
            return value
    return None


def extract_energy_kcal(nutriments: Dict[str, Any]) -> float:
    kcal = _first_value(nutriments, KCAL_KEYS)
    if kcal is not None:
        return kcal
    kj = _first_value(nutriments, KJ_KEYS)
    if kj is not None:
        return kj / KJ_PER_KCAL
    # A bare "energy" field with no kcal sibling is kJ in practice
    generic = _first_value(nutriments, GENERIC_ENERGY_KEYS)
    if generic is not None:
        return generic / KJ_PER_KCAL
    return 0.0


def extract_per_100g(nutriments: Dict[str, Any]) -> NutrientVector:
    """
    Build a canonical per-100g vector from a provider nutrient map.

    Missing nutrients default to 0 so that a resolved entry always carries a
    complete vector. Sodium is returned in mg.
    """
    vector = {"calories": extract_energy_kcal(nutriments)}
    for name, keys in GRAM_NUTRIENT_KEYS.items():
        vector[name] = _first_value(nutriments, keys) or 0.0

    sodium_g = _first_value(nutriments, SODIUM_KEYS)
    if sodium_g is not None:
        vector["sodium"] = sodium_g * 1000.0
    else:
        salt_g = _first_value(nutriments, SALT_KEYS)
        vector["sodium"] = salt_g * SODIUM_PER_GRAM_SALT_MG if salt_g is not None else 0.0
    return vector


def select_candidate(candidates: Sequence[Candidate]) -> Optional[Candidate]:
    """First candidate, in provider order, whose nutrient map is non-empty."""
    for candidate in candidates:
        if candidate.nutriments:
            return candidate
    return None


class NutrientResolver:
    """
    Base class for food database adapters.

    Subclasses implement ``search`` (one HTTP call returning candidates in
    provider order) and ``ping``.
    """

    source = "unknown"

    def __init__(self, timeout: float = 5.0, page_size: int = 5, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.page_size = page_size
        self.session = session or requests.Session()

    def search(self, food_name: str) -> List[Candidate]:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        self.session.close()

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, dict) else {}

    def resolve(self, food_name: str) -> Resolution:
        try:
            candidates = self.search(food_name)
            if not candidates:
                logger.warning("No %s results for %r", self.source, food_name)
                return ResolutionFailure(ResolutionFailure.NO_RESULTS)

            chosen = select_candidate(candidates)
            if chosen is None:
                logger.warning("None of %d %s results for %r carry nutrient data", len(candidates), self.source, food_name)
                return ResolutionFailure(ResolutionFailure.NO_NUTRIENT_DATA)

            nutrients = extract_per_100g(chosen.nutriments)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Food lookup failed for %r via %s: %s", food_name, self.source, e)
            return ResolutionFailure(ResolutionFailure.LOOKUP_ERROR, str(e))
        except (TypeError, AttributeError, KeyError) as e:
            logger.warning("Unexpected %s response for %r: %s", self.source, food_name, e)
            return ResolutionFailure(ResolutionFailure.LOOKUP_ERROR, f"malformed response: {e}")

        logger.info("Resolved %r to %r via %s", food_name, chosen.name, self.source)
        return ResolvedFood(name=chosen.name or food_name, nutrients=nutrients, source=self.source)

    def _probe(self, url: str, params: Dict[str, Any]) -> bool:
        # Any HTTP response means the service is reachable
        try:
            self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.info("%s unreachable: %s", self.source, e)
            return False
        return True


class OpenFoodFactsResolver(NutrientResolver):
    source = "openfoodfacts"

    def __init__(self, search_url: str, **kwargs):
        super().__init__(**kwargs)
        self.search_url = search_url

    def _params(self, food_name: str, page_size: int) -> Dict[str, Any]:
        return {
            "search_terms": food_name,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": page_size,
        }

    def search(self, food_name: str) -> List[Candidate]:
        data = self._get_json(self.search_url, self._params(food_name, self.page_size))
        candidates = []
        for product in _as_list(data.get("products")):
            if not isinstance(product, dict):
                continue
            nutriments = product.get("nutriments")
            candidates.append(Candidate(
                name=_text(product.get("product_name")) or None,
                nutriments=nutriments if isinstance(nutriments, dict) else {},
            ))
        return candidates

    def ping(self) -> bool:
        return self._probe(self.search_url, self._params("apple", 1))


# FoodData Central nutrient names -> (alias key, factor to grams or kcal)
USDA_NUTRIENT_MAP = {
    "protein": ("proteins_100g", 1.0),
    "carbohydrate, by difference": ("carbohydrates_100g", 1.0),
    "total lipid (fat)": ("fat_100g", 1.0),
    "fiber, total dietary": ("fiber_100g", 1.0),
    "sugars, total including nlea": ("sugars_100g", 1.0),
    "total sugars": ("sugars_100g", 1.0),
    "sodium, na": ("sodium_100g", 0.001),
}


def usda_nutrient_map(food_nutrients: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Fold FoodData Central ``foodNutrients`` into the shared alias map."""
    folded: Dict[str, Any] = {}
    for item in _as_list(food_nutrients):
        if not isinstance(item, dict):
            continue
        name = _text(item.get("nutrientName")).lower()
        unit = _text(item.get("unitName")).lower()
        value = _as_nutrient_value(item.get("value"))
        if value is None:
            continue
        if name == "energy":
            key = "energy-kcal_100g" if unit == "kcal" else "energy-kj_100g" if unit == "kj" else "energy_100g"
            folded.setdefault(key, value)
            continue
        mapped = USDA_NUTRIENT_MAP.get(name)
        if mapped:
            key, factor = mapped
            folded.setdefault(key, value * factor)
    return folded


class UsdaResolver(NutrientResolver):
    source = "usda"

    def __init__(self, search_url: str, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self.search_url = search_url
        self.api_key = api_key

    def search(self, food_name: str) -> List[Candidate]:
        params = {"query": food_name, "pageSize": self.page_size, "api_key": self.api_key}
        data = self._get_json(self.search_url, params)
        return [
            Candidate(
                name=_text(food.get("description")) or None,
                nutriments=usda_nutrient_map(food.get("foodNutrients")),
            )
            for food in _as_list(data.get("foods"))
            if isinstance(food, dict)
        ]

    def ping(self) -> bool:
        return self._probe(self.search_url, {"query": "apple", "pageSize": 1, "api_key": self.api_key})


def build_resolver(config: Dict[str, Any]) -> NutrientResolver:
    """Create the adapter named by ``FOOD_API_PROVIDER``."""
    provider = (config.get("FOOD_API_PROVIDER") or "openfoodfacts").strip().lower()
    common = {
        "timeout": float(config.get("FOOD_API_TIMEOUT", 5)),
        "page_size": int(config.get("FOOD_API_PAGE_SIZE", 5)),
    }
    if provider == "usda":
        return UsdaResolver(config["USDA_SEARCH_URL"], config.get("USDA_API_KEY") or "DEMO_KEY", **common)
    if provider == "openfoodfacts":
        return OpenFoodFactsResolver(config["OFF_SEARCH_URL"], **common)
    raise ValueError(f"Unknown FOOD_API_PROVIDER: {provider}")
