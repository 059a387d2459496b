"""Intent enumeration, classifier output, and cross-turn context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from concierge.schemas.filter_schema import Filters

if TYPE_CHECKING:
    from concierge.schemas.session_schema import SessionState


class Intent(str, Enum):
    """Closed set of things a guest can ask the concierge for."""
    FIND_PRODUCT = "find_product"
    TRACK_ORDER = "track_order"
    RETURN_EXCHANGE = "return_exchange"
    SIZING_REPAIRS = "sizing_repairs"
    CARE_WARRANTY = "care_warranty"
    FINANCING = "financing"
    STYLIST_CONTACT = "stylist_contact"
    CSAT = "csat"
    CLARIFY = "clarify"


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one utterance.

    ``reason`` is a stable diagnostic code for logs and tests; it is
    never shown to guests. ``payload`` carries credentials pulled out of
    the text (order number, email, postal code).
    """
    intent: Intent
    confidence: float
    reason: str
    filters: Optional[Filters] = None
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IntentContext:
    """What the previous turn was about, for "show me more" follow-ups."""
    last_intent: Optional[Intent] = None
    last_filters: Optional[Filters] = None

    @classmethod
    def from_session(cls, state: "SessionState") -> "IntentContext":
        return cls(last_intent=state.last_intent, last_filters=state.last_filters)
