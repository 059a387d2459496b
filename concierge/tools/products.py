"""
Mock product catalog and search collaborator, plus the catalog vocabulary.

In production, search would call the storefront's product API. The alias
tables here are the single source of truth for metal, category, and
stone terms used by the normalizer and the intent classifier.
"""

import logging
import re
from typing import Optional

from concierge.schemas.backend_schema import Product, ProductQuery

logger = logging.getLogger(__name__)

METAL_ALIASES: dict[str, str] = {
    "18k yellow gold": "18k_yellow", "18k gold": "18k_yellow",
    "14k yellow gold": "14k_yellow", "14k gold": "14k_yellow",
    "yellow gold": "14k_yellow", "gold": "14k_yellow",
    "white gold": "14k_white", "14k white gold": "14k_white",
    "rose gold": "14k_rose", "pink gold": "14k_rose", "14k rose gold": "14k_rose",
    "platinum": "platinum",
    "sterling silver": "sterling_silver", "sterling": "sterling_silver",
    "silver": "sterling_silver",
    "titanium": "titanium",
}

CATEGORY_ALIASES: dict[str, str] = {
    "ring": "ring", "rings": "ring", "engagement ring": "ring",
    "engagement rings": "ring", "wedding band": "ring", "wedding bands": "ring",
    "necklace": "necklace", "necklaces": "necklace", "pendant": "necklace",
    "pendants": "necklace", "chain": "necklace", "chains": "necklace",
    "earrings": "earrings", "earring": "earrings", "studs": "earrings",
    "hoops": "earrings",
    "bracelet": "bracelet", "bracelets": "bracelet", "bangle": "bracelet",
    "bangles": "bracelet",
}

STONE_ALIASES: dict[str, str] = {
    "lab-grown diamond": "lab-grown diamond", "lab grown diamond": "lab-grown diamond",
    "lab diamond": "lab-grown diamond",
    "diamond": "diamond", "diamonds": "diamond",
    "moissanite": "moissanite",
    "sapphire": "sapphire", "sapphires": "sapphire",
    "emerald": "emerald", "emeralds": "emerald",
    "ruby": "ruby", "rubies": "ruby",
    "pearl": "pearl", "pearls": "pearl",
    "morganite": "morganite",
    "opal": "opal", "opals": "opal",
}

METAL_CODES: frozenset[str] = frozenset(METAL_ALIASES.values())
CATEGORIES: frozenset[str] = frozenset(CATEGORY_ALIASES.values())


def _alias_pattern(aliases: dict[str, str]) -> re.Pattern[str]:
    terms = sorted(aliases, key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(re.escape(t) for t in terms) + r")\b")


_METAL_RE = _alias_pattern(METAL_ALIASES)
_CATEGORY_RE = _alias_pattern(CATEGORY_ALIASES)
_STONE_RE = _alias_pattern(STONE_ALIASES)


def match_metal(text: str) -> Optional[str]:
    """Find the first metal mentioned in free text and return its code."""
    normalized = text.lower().strip()
    if normalized in METAL_CODES:
        return normalized
    # "rose-gold" and "white_gold" must not fall through to bare "gold".
    m = _METAL_RE.search(re.sub(r"[-_]", " ", normalized))
    return METAL_ALIASES[m.group(1)] if m else None


def match_category(text: str) -> Optional[str]:
    """Find the first category mentioned in free text."""
    m = _CATEGORY_RE.search(text.lower())
    return CATEGORY_ALIASES[m.group(1)] if m else None


def match_stone(text: str) -> Optional[str]:
    """Find the first gemstone mentioned in free text."""
    m = _STONE_RE.search(text.lower())
    return STONE_ALIASES[m.group(1)] if m else None


_CATALOG: list[Product] = [
    Product(id="prd-aurora-solitaire", title="Aurora Solitaire Ring", slug="aurora-solitaire-ring",
            price=1890.0, base_price=1890.0, image="/images/products/aurora-solitaire.jpg",
            ready_to_ship=True, category="ring", metal="14k_rose",
            stone="lab-grown diamond", carat=1.0, featured_rank=1),
    Product(id="prd-halo-platinum", title="Celeste Halo Ring", slug="celeste-halo-ring",
            price=3450.0, base_price=3200.0, image="/images/products/celeste-halo.jpg",
            ready_to_ship=True, category="ring", metal="platinum",
            stone="lab-grown diamond", carat=1.5, featured_rank=2),
    Product(id="prd-eclipse-band", title="Eclipse Pave Band", slug="eclipse-pave-band",
            price=980.0, base_price=980.0, image="/images/products/eclipse-band.jpg",
            ready_to_ship=True, category="ring", metal="14k_yellow",
            stone="diamond", carat=0.3, featured_rank=5),
    Product(id="prd-sapphire-custom", title="Midnight Sapphire Ring", slug="midnight-sapphire-ring",
            price=2600.0, base_price=2400.0, image="/images/products/midnight-sapphire.jpg",
            ready_to_ship=False, category="ring", metal="14k_white",
            stone="sapphire", carat=1.2, featured_rank=3),
    Product(id="prd-pearl-drop", title="Lumen Pearl Drop Necklace", slug="lumen-pearl-drop",
            price=420.0, base_price=420.0, image="/images/products/lumen-pearl.jpg",
            ready_to_ship=True, category="necklace", metal="14k_yellow",
            stone="pearl", featured_rank=4),
    Product(id="prd-tennis-necklace", title="Riviera Tennis Necklace", slug="riviera-tennis-necklace",
            price=5200.0, base_price=5200.0, image="/images/products/riviera.jpg",
            ready_to_ship=False, category="necklace", metal="14k_white",
            stone="lab-grown diamond", carat=5.0, featured_rank=8),
    Product(id="prd-bar-pendant", title="Solstice Bar Pendant", slug="solstice-bar-pendant",
            price=260.0, base_price=260.0, image="/images/products/solstice-bar.jpg",
            ready_to_ship=True, category="necklace", metal="sterling_silver",
            featured_rank=9),
    Product(id="prd-halo-studs", title="Halo Stud Earrings", slug="halo-stud-earrings",
            price=1150.0, base_price=1150.0, image="/images/products/halo-studs.jpg",
            ready_to_ship=True, category="earrings", metal="14k_white",
            stone="lab-grown diamond", carat=0.5, featured_rank=6),
    Product(id="prd-emerald-hoops", title="Verdant Emerald Hoops", slug="verdant-emerald-hoops",
            price=1780.0, base_price=1700.0, image="/images/products/verdant-hoops.jpg",
            ready_to_ship=False, category="earrings", metal="14k_yellow",
            stone="emerald", carat=0.8, featured_rank=7),
    Product(id="prd-rose-bangle", title="Petal Rose Gold Bangle", slug="petal-rose-bangle",
            price=740.0, base_price=740.0, image="/images/products/petal-bangle.jpg",
            ready_to_ship=True, category="bracelet", metal="14k_rose",
            featured_rank=10),
    Product(id="prd-tennis-bracelet", title="Cascade Tennis Bracelet", slug="cascade-tennis-bracelet",
            price=2950.0, base_price=2950.0, image="/images/products/cascade.jpg",
            ready_to_ship=True, category="bracelet", metal="platinum",
            stone="lab-grown diamond", carat=3.0, featured_rank=11),
]


def get_product(product_id: str) -> Optional[Product]:
    """Retrieve a catalog item by id."""
    for product in _CATALOG:
        if product.id == product_id:
            return product
    return None


async def search_products(query: ProductQuery) -> list[Product]:
    """Return catalog items matching the query, in catalog order."""
    results = []
    for product in _CATALOG:
        if query.ready_to_ship is not None and product.ready_to_ship != query.ready_to_ship:
            continue
        if query.category and product.category != query.category:
            continue
        if query.metal and product.metal != query.metal:
            continue
        if query.price_min is not None and product.price < query.price_min:
            continue
        if query.price_max is not None and product.price > query.price_max:
            continue
        results.append(product)
    logger.debug("Product search returned %d items for %s", len(results), query.model_dump(exclude_none=True))
    return results
