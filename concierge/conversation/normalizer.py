"""
Filter normalizer: folds every filter-like shape into the canonical Filters.

Canonical keys win. Legacy shapes (``materials``, ``gemstones``,
``priceBand``, ``minPrice``/``maxPrice``, ``inStock``) only fill gaps and
never override a canonical value. A ``stone`` also contributes a
lowercase, hyphenated tag. The function is total and idempotent:
normalizing an already-normalized payload returns an equal value.

Usage:
    filters = normalize_filters({"stone": "Pearl", "tags": ["pearl"]})
    assert filters.tags == ["pearl"]
"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Union

from concierge.schemas.filter_schema import Filters
from concierge.tools.products import CATEGORY_ALIASES, METAL_ALIASES, METAL_CODES, match_category, match_metal
from concierge.utils import parse_number, slugify_tag

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("price_min", ("priceMin", "price_min")),
    ("price_max", ("priceMax", "price_max")),
    ("carat_min", ("caratMin", "carat_min")),
    ("carat_max", ("caratMax", "carat_max")),
)

_LEGACY_PRICE_KEYS: tuple[tuple[str, str], ...] = (
    ("minPrice", "price_min"),
    ("maxPrice", "price_max"),
)

_TRUE_STRINGS = frozenset({"true", "yes", "1", "y"})
_FALSE_STRINGS = frozenset({"false", "no", "0", "n"})


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _string_list(value: Any) -> list[str]:
    """Lower-case and dedupe a list (or single string) of strings."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return _dedupe(v.strip().lower() for v in value if isinstance(v, str) and v.strip())


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def canonical_metal(value: str) -> str:
    """Map a metal name or code to its canonical code; unknowns lower-cased."""
    lowered = value.strip().lower()
    if lowered in METAL_CODES:
        return lowered
    folded = re.sub(r"[-_\s]+", " ", lowered)
    if folded in METAL_ALIASES:
        return METAL_ALIASES[folded]
    return match_metal(lowered) or lowered


def canonical_category(value: str) -> str:
    lowered = value.strip().lower()
    if lowered in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[lowered]
    return match_category(lowered) or lowered


def normalize_filters(raw: Union[Filters, Mapping[str, Any], None]) -> Filters:
    """Fold a raw filter mapping (or Filters) into the canonical shape. Never raises."""
    if isinstance(raw, Filters):
        data: Mapping[str, Any] = raw.to_payload()
    elif isinstance(raw, Mapping):
        data = raw
    else:
        return Filters()

    out: dict[str, Any] = {}

    category = _clean_str(data.get("category"))
    if category:
        out["category"] = canonical_category(category)

    metal = _clean_str(data.get("metal"))
    if metal:
        out["metal"] = canonical_metal(metal)

    stone = _clean_str(data.get("stone"))
    if stone:
        out["stone"] = stone

    for field_name, keys in _NUMERIC_FIELDS:
        value = parse_number(_first(data, *keys))
        if value is not None:
            out[field_name] = value

    ready = _parse_bool(_first(data, "readyToShip", "ready_to_ship"))
    if ready is not None:
        out["ready_to_ship"] = ready

    tags = _string_list(data.get("tags"))

    # Legacy shapes below only fill gaps left by canonical keys.
    materials = _string_list(data.get("materials"))
    if materials and "metal" not in out:
        out["metal"] = canonical_metal(materials[0])

    gemstones = _string_list(data.get("gemstones"))
    if gemstones:
        out.setdefault("stone", gemstones[0])
        tags.extend(gemstones)

    band = data.get("priceBand")
    if isinstance(band, Mapping):
        for band_key, field_name in (("min", "price_min"), ("max", "price_max")):
            value = parse_number(band.get(band_key))
            if value is not None:
                out.setdefault(field_name, value)

    for legacy_key, field_name in _LEGACY_PRICE_KEYS:
        value = parse_number(data.get(legacy_key))
        if value is not None:
            out.setdefault(field_name, value)

    in_stock = _parse_bool(data.get("inStock"))
    if in_stock is not None:
        out.setdefault("ready_to_ship", in_stock)

    if "stone" in out:
        tags.append(out["stone"])
    tags = _dedupe(slugify_tag(t) for t in tags)
    if tags:
        out["tags"] = tags

    return Filters(**out)
