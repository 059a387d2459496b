from concierge.conversation.intent_rules import decide_intent, extract_filters
from concierge.conversation.normalizer import normalize_filters
from concierge.conversation.session import (
    add_to_shortlist,
    clear_shortlist,
    create_session,
    mark_csat_shown,
    remove_from_shortlist,
    should_offer_csat,
)

__all__ = [
    "decide_intent",
    "extract_filters",
    "normalize_filters",
    "create_session",
    "should_offer_csat",
    "mark_csat_shown",
    "add_to_shortlist",
    "remove_from_shortlist",
    "clear_shortlist",
]
