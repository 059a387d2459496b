"""
Rule-based intent classifier for the concierge chat widget.

Rules are evaluated in a fixed priority order and the first match wins:

1. Slash commands        (``/stylist``, ``/track`` ...)
2. Order number          (``GG-123456``)
3. Email + postal code   (alternate order-lookup credentials)
4. Keyword families      (order, human, return, sizing, care, financing)
5. Product discovery     (structured filters, gift/budget phrasing, vocabulary)
6. Context carry-over    ("show me more" after a product turn)
7. Fallback              (``clarify``)

Confidence values are policy constants, not probabilities. They let
callers separate strong matches from inferences. The classifier is pure
and deterministic: no I/O, no clock, no randomness.

Usage:
    result = decide_intent("rose gold rings under $2,000")
    assert result.intent == Intent.FIND_PRODUCT
    assert result.filters.metal == "14k_rose"
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from concierge.config import settings
from concierge.conversation.normalizer import normalize_filters
from concierge.schemas.filter_schema import Filters
from concierge.schemas.intent_schema import ClassificationResult, Intent, IntentContext
from concierge.tools.products import match_category, match_metal, match_stone
from concierge.utils import parse_number

logger = logging.getLogger(__name__)

SLASH_CONFIDENCE = 0.95
ORDER_NUMBER_CONFIDENCE = 0.95
EMAIL_POSTAL_CONFIDENCE = 0.9
PRODUCT_NOUN_CONFIDENCE = 0.85
PRODUCT_FILTER_CONFIDENCE = 0.7
PRODUCT_KEYWORD_CONFIDENCE = 0.75
GIFT_BUDGET_CONFIDENCE = 0.65
CARRYOVER_CONFIDENCE = 0.45
FALLBACK_CONFIDENCE = 0.1

SLASH_COMMANDS: dict[str, Intent] = {
    "/stylist": Intent.STYLIST_CONTACT,
    "/human": Intent.STYLIST_CONTACT,
    "/agent": Intent.STYLIST_CONTACT,
    "/track": Intent.TRACK_ORDER,
    "/order": Intent.TRACK_ORDER,
    "/return": Intent.RETURN_EXCHANGE,
    "/exchange": Intent.RETURN_EXCHANGE,
    "/resize": Intent.SIZING_REPAIRS,
    "/repair": Intent.SIZING_REPAIRS,
    "/care": Intent.CARE_WARRANTY,
    "/warranty": Intent.CARE_WARRANTY,
    "/financing": Intent.FINANCING,
    "/shop": Intent.FIND_PRODUCT,
    "/find": Intent.FIND_PRODUCT,
    "/feedback": Intent.CSAT,
    "/csat": Intent.CSAT,
}

ORDER_NUMBER_RE = re.compile(r"\b([a-z]{2,4}-\d{5,10})\b", re.IGNORECASE)
EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
POSTAL_RE = re.compile(r"(?<![\w-])(\d{5}(?:-\d{4})?)(?![\w-])")

_AMOUNT = r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*(k\b)?"
PRICE_RANGE_RE = re.compile(
    r"(?:between|from)\s+" + _AMOUNT + r"\s*(?:and|to|-)\s*" + _AMOUNT
    + r"|\$(\d[\d,]*(?:\.\d+)?)\s*(k\b)?\s*(?:-|to)\s*\$?(\d[\d,]*(?:\.\d+)?)\s*(k\b)?"
)
PRICE_MAX_RE = re.compile(
    r"\b(?:under|below|less than|up to|no more than|at most|max(?:imum)?|budget(?: of| is)?)\s+" + _AMOUNT
)
PRICE_MIN_RE = re.compile(
    r"\b(?:over|above|more than|at least|starting at|minimum)\s+" + _AMOUNT
)
CARAT_RE = re.compile(
    r"(?:\b(under|below|less than|up to|at most|over|above|more than|at least)\s+)?"
    r"(\d+(?:\.\d+)?)\s*(\+)?\s*(?:ct|cttw|carats?)\b"
)
_CARAT_AFTER_RE = re.compile(r"\s*\+?\s*(?:ct|cttw|carats?)\b")
_CARAT_MAX_WORDS = frozenset({"under", "below", "less than", "up to", "at most"})


def _phrase_pattern(phrases: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = sorted((re.escape(p) for p in phrases), key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b")


@dataclass(frozen=True)
class KeywordFamily:
    """A vocabulary bucket that maps straight to one intent."""
    intent: Intent
    confidence: float
    reason: str
    pattern: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


KEYWORD_FAMILIES: tuple[KeywordFamily, ...] = (
    KeywordFamily(
        Intent.TRACK_ORDER, 0.85, "order_keywords",
        _phrase_pattern((
            "where is my order", "where's my order", "wheres my order", "track",
            "tracking", "order status", "status of my order", "delivery update",
            "delivery status", "shipping update", "shipping status", "order update",
            "has my order shipped", "did my order ship", "when will my order arrive",
            "when will it arrive", "package",
        )),
    ),
    KeywordFamily(
        Intent.STYLIST_CONTACT, 0.85, "human_keywords",
        _phrase_pattern((
            "customer service", "customer support", "agent", "representative",
            "stylist", "human", "real person", "live chat", "speak to", "talk to",
            "call me", "concierge team",
        )),
    ),
    KeywordFamily(
        Intent.RETURN_EXCHANGE, 0.8, "return_keywords",
        _phrase_pattern((
            "return", "returns", "returned", "returning", "refund", "refunds", "refunded",
            "exchange", "exchanges", "exchanged", "exchanging", "send it back",
            "send back", "money back", "swap it",
        )),
    ),
    KeywordFamily(
        Intent.SIZING_REPAIRS, 0.8, "sizing_keywords",
        _phrase_pattern((
            "resize", "resized", "resizes", "resizing", "ring size", "sizing", "size up",
            "size down", "too big", "too small", "too tight", "too loose", "repair", "repairs",
            "repaired", "repairing", "broken", "fix", "clasp", "prong", "loose stone",
        )),
    ),
    KeywordFamily(
        Intent.CARE_WARRANTY, 0.8, "care_keywords",
        _phrase_pattern((
            "care", "clean", "cleaning", "polish", "polishing", "tarnish",
            "warranty", "guarantee", "maintenance", "lifetime",
        )),
    ),
    KeywordFamily(
        Intent.FINANCING, 0.8, "financing_keywords",
        _phrase_pattern((
            "financing", "finance", "payment plan", "installments", "instalments",
            "pay over time", "pay later", "monthly payments", "affirm", "klarna",
            "layaway",
        )),
    ),
)

PRODUCT_VOCABULARY = _phrase_pattern((
    "looking for", "shop", "shopping", "browse", "find", "buy", "purchase",
    "recommend", "recommendation", "suggest", "ideas", "jewelry", "jewellery",
    "piece", "pieces", "collection", "something",
))
GIFT_VOCABULARY = _phrase_pattern((
    "gift", "present", "anniversary", "birthday", "for my wife", "for my husband",
    "for my girlfriend", "for my mom", "for her", "for him", "push present",
    "budget",
))
READY_TO_SHIP_VOCABULARY = _phrase_pattern((
    "ready to ship", "ready-to-ship", "in stock", "ships now", "ship today",
    "ships today", "ships fast", "available now",
))
CONTINUATION_VOCABULARY = _phrase_pattern((
    "more", "what else", "anything else", "similar", "others", "another",
    "keep going", "next",
))


def _normalize_text(text: str) -> str:
    text = text.replace("’", "'").replace("‘", "'")
    return re.sub(r"\s+", " ", text.strip().lower())


def _amount(number: Optional[str], thousands: Optional[str]) -> Optional[float]:
    value = parse_number(number)
    if value is not None and thousands:
        value *= 1000
    return value


def _is_carat_quantity(text: str, end: int) -> bool:
    return bool(_CARAT_AFTER_RE.match(text, end))


def _extract_prices(text: str) -> dict[str, float]:
    m = PRICE_RANGE_RE.search(text)
    if m and not _is_carat_quantity(text, m.end()):
        groups = m.groups()
        low, high = (groups[0:2], groups[2:4]) if groups[0] else (groups[4:6], groups[6:8])
        low_value, high_value = _amount(*low), _amount(*high)
        if low_value is not None and high_value is not None:
            return {"priceMin": min(low_value, high_value), "priceMax": max(low_value, high_value)}

    prices: dict[str, float] = {}
    for key, pattern in (("priceMax", PRICE_MAX_RE), ("priceMin", PRICE_MIN_RE)):
        for m in pattern.finditer(text):
            if _is_carat_quantity(text, m.end(1)):
                continue
            value = _amount(m.group(1), m.group(2))
            if value is not None:
                prices[key] = value
                break
    return prices


def _extract_carats(text: str) -> dict[str, float]:
    m = CARAT_RE.search(text)
    if not m:
        return {}
    qualifier, number, plus = m.group(1), m.group(2), m.group(3)
    value = float(number)
    if qualifier in _CARAT_MAX_WORDS:
        return {"caratMax": value}
    if qualifier or plus:
        return {"caratMin": value}
    return {"caratMin": value, "caratMax": value}


def extract_filters(text: str) -> Filters:
    """Pull structured product filters out of normalized free text."""
    raw: dict[str, Any] = {}
    category = match_category(text)
    if category:
        raw["category"] = category
    metal = match_metal(text)
    if metal:
        raw["metal"] = metal
    stone = match_stone(text)
    if stone:
        raw["stone"] = stone
    raw.update(_extract_prices(text))
    raw.update(_extract_carats(text))
    if READY_TO_SHIP_VOCABULARY.search(text):
        raw["readyToShip"] = True
    return normalize_filters(raw)


def _match_slash_command(text: str) -> Optional[ClassificationResult]:
    token = text.split(" ", 1)[0]
    intent = SLASH_COMMANDS.get(token)
    if intent is None:
        return None
    return ClassificationResult(intent, SLASH_CONFIDENCE, "slash_command")


def _match_order_number(text: str) -> Optional[ClassificationResult]:
    m = ORDER_NUMBER_RE.search(text)
    if not m:
        return None
    return ClassificationResult(
        Intent.TRACK_ORDER, ORDER_NUMBER_CONFIDENCE, "order_number_detected",
        payload={"orderId": m.group(1).upper()},
    )


def _match_email_postal(text: str) -> Optional[ClassificationResult]:
    email = EMAIL_RE.search(text)
    if not email:
        return None
    postal = POSTAL_RE.search(EMAIL_RE.sub(" ", text))
    if not postal:
        return None
    return ClassificationResult(
        Intent.TRACK_ORDER, EMAIL_POSTAL_CONFIDENCE, "email_postal_detected",
        payload={"email": email.group(0), "postalCode": postal.group(1)},
    )


def _is_continuation(text: str) -> bool:
    words = re.findall(r"[\w'$.-]+", text)
    return (
        0 < len(words) <= settings.concierge.continuation_max_words
        and bool(CONTINUATION_VOCABULARY.search(text))
    )


def _match_product(text: str) -> Optional[ClassificationResult]:
    filters = extract_filters(text)
    has_noun = bool(filters.category or filters.metal or filters.stone)
    is_gift = bool(GIFT_VOCABULARY.search(text))

    if not filters.is_empty():
        if has_noun:
            return ClassificationResult(
                Intent.FIND_PRODUCT, PRODUCT_NOUN_CONFIDENCE, "product_filters_detected", filters
            )
        if is_gift:
            return ClassificationResult(
                Intent.FIND_PRODUCT, GIFT_BUDGET_CONFIDENCE, "gift_budget_detected", filters
            )
        return ClassificationResult(
            Intent.FIND_PRODUCT, PRODUCT_FILTER_CONFIDENCE, "product_filters_detected", filters
        )

    if is_gift:
        return ClassificationResult(Intent.FIND_PRODUCT, GIFT_BUDGET_CONFIDENCE, "gift_budget_detected")
    if PRODUCT_VOCABULARY.search(text) and not _is_continuation(text):
        return ClassificationResult(Intent.FIND_PRODUCT, PRODUCT_KEYWORD_CONFIDENCE, "product_keywords")
    return None


def _match_carryover(text: str, context: Optional[IntentContext]) -> Optional[ClassificationResult]:
    if context is None or context.last_intent != Intent.FIND_PRODUCT:
        return None
    if not _is_continuation(text):
        return None
    last = context.last_filters
    if isinstance(last, Mapping):
        last = normalize_filters(last)
    return ClassificationResult(Intent.FIND_PRODUCT, CARRYOVER_CONFIDENCE, "context_carryover", last)


def decide_intent(text: str, context: Optional[IntentContext] = None) -> ClassificationResult:
    """Classify one guest utterance. Never raises."""
    if not isinstance(text, str) or not text.strip():
        return ClassificationResult(Intent.CLARIFY, FALLBACK_CONFIDENCE, "no_match")
    normalized = _normalize_text(text)

    result = (
        _match_slash_command(normalized)
        or _match_order_number(normalized)
        or _match_email_postal(normalized)
    )
    if result is None:
        for family in KEYWORD_FAMILIES:
            if family.matches(normalized):
                result = ClassificationResult(family.intent, family.confidence, family.reason)
                break
    if result is None:
        result = _match_product(normalized) or _match_carryover(normalized, context)
    if result is None:
        result = ClassificationResult(Intent.CLARIFY, FALLBACK_CONFIDENCE, "no_match")

    logger.debug(
        "Classified %r as %s (%.2f, %s)",
        normalized, result.intent.value, result.confidence, result.reason,
    )
    return result
