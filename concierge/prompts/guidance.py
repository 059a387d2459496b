"""
Centralized concierge copy.

Informational intents answer with static guidance; brand values are
injected from configuration, not hardcoded in scripts. Copy is short and
plain: the widget renders it as chat bubbles.
"""

from concierge.config import settings
from concierge.schemas.intent_schema import Intent

_brand = settings.brand

CARE_WARRANTY_COPY = (
    f"Every {_brand.name} piece carries a {_brand.warranty_years}-year warranty against "
    "manufacturing defects. At home, clean with warm water, mild soap, and a soft brush, "
    "and store pieces separately so stones don't scratch each other. "
    "We also offer complimentary studio cleaning and prong checks."
)

FINANCING_COPY = (
    f"You can pay over time with {_brand.financing_partner} on orders over "
    f"${_brand.financing_min_purchase}. Choose it at checkout to see plans with "
    "monthly payments; approval takes about a minute and won't affect your credit score to check."
)

SIZING_REPAIRS_COPY = (
    f"Resizing is complimentary within {_brand.resize_free_within_days} days of delivery. "
    "Not sure of your size? We can mail a free ring sizer. For repairs like a loose stone "
    "or broken clasp, start a request and we'll send a prepaid insured label."
)

GUIDANCE_COPY: dict[Intent, str] = {
    Intent.CARE_WARRANTY: CARE_WARRANTY_COPY,
    Intent.FINANCING: FINANCING_COPY,
    Intent.SIZING_REPAIRS: SIZING_REPAIRS_COPY,
}

INTENT_LABELS: dict[Intent, str] = {
    Intent.FIND_PRODUCT: "Find a piece",
    Intent.TRACK_ORDER: "Track an order",
    Intent.RETURN_EXCHANGE: "Returns & exchanges",
    Intent.SIZING_REPAIRS: "Sizing & repairs",
    Intent.CARE_WARRANTY: "Care & warranty",
    Intent.FINANCING: "Financing",
    Intent.STYLIST_CONTACT: "Talk to a stylist",
}

CHOOSER_CONFIRMATIONS: dict[Intent, str] = {
    Intent.FIND_PRODUCT: "On it. Opening product recommendations.",
    Intent.TRACK_ORDER: "On it. Opening order lookup.",
    Intent.RETURN_EXCHANGE: "On it. Starting returns and resizing.",
    Intent.SIZING_REPAIRS: "On it. Starting sizing help.",
    Intent.CARE_WARRANTY: "On it. Sharing care and warranty info.",
    Intent.FINANCING: "On it. Pulling financing options.",
    Intent.STYLIST_CONTACT: "On it. Bringing in a stylist.",
    Intent.CSAT: "Happy to take feedback.",
}

READY_TO_SHIP_CONFIRMATION = "On it. Pulling ready-to-ship picks to get you started."

CLARIFY_COPY = "Got it. Pick what you need and I'll route you quickly."
CLARIFY_REPEAT_COPY = (
    "I want to be sure I'm helping with the right thing. "
    "Choose one below, or I can bring in a stylist."
)

APOLOGY_COPY = (
    "I ran into a snag on my side. Mind trying that again? "
    "If you'd rather, a stylist can pick this up with you."
)

PRODUCT_FILTER_PROMPT = "Happy to help you find something. Tell me a little about what you have in mind."
PRODUCT_RESULTS_COPY = "Here are {count} ready-to-ship picks that match what you asked for."
PRODUCT_SINGLE_RESULT_COPY = "Here's one ready-to-ship piece that matches what you asked for."
PRODUCT_EMPTY_COPY = (
    "Nothing ready-to-ship matches that just yet. Try widening your budget, "
    "or ask a stylist about made-to-order options."
)

ORDER_LOOKUP_PROMPT = "I can check on that. Share your order number, or the email and ZIP code on the order."
ORDER_INVALID_COPY = "I need either your order number, or both the email and ZIP code used at checkout."
ORDER_NOT_FOUND_COPY = (
    "I couldn't find an order matching those details. "
    "Double-check the order number, or try the email and ZIP code on the order."
)
ORDER_FOUND_COPY = "Here's the latest on order {reference}."
ORDER_UPDATES_NEEDS_ORDER_COPY = (
    "Let's find your order first. Tap \"Track an order\" and I can text you studio milestones."
)
ORDER_UPDATES_FAILED_COPY = "I wasn't able to subscribe you just now. We can still email updates if that helps."

RETURN_OPTIONS_PROMPT = (
    f"We accept returns within {_brand.return_window_days} days of delivery. "
    "What would you like to do?"
)
RETURN_INVALID_COPY = "Pick resize, return, or care, and make sure I have your order number first."
RETURN_NEEDS_ORDER_COPY = (
    "I need an order number first. Tap \"Track an order\" so I can file this with the studio."
)

ESCALATION_PROMPT = (
    f"A {_brand.name} stylist can take it from here. "
    "Leave your details and how you'd like to be reached."
)
ESCALATION_INVALID_COPY = (
    "I couldn't send that to a stylist. Mind checking your contact details? "
    f"You can also email us at {_brand.support_email}."
)

CSAT_THANKS_COPY = "Thank you for the feedback. It goes straight to the studio team."
CSAT_FOLLOW_UP_COPY = "I'm sorry this wasn't right. Let's get a stylist on it for you."
CSAT_ALREADY_COPY = "Thanks, you've already shared feedback in this chat. Anything else I can help with?"

SHORTLIST_SAVED_COPY = "Saved {title} to your shortlist."
SHORTLIST_REMOVED_COPY = "Removed that piece from your shortlist."
SHORTLIST_CLEARED_COPY = "Your shortlist is cleared."
SHORTLIST_COUNT_COPY = "You now have {count} saved."
