"""
Satisfaction survey script.

The CSAT bar is shown at most once per session. A submitted rating is
recorded on the session; an unhappy rating goes straight to the stylist
escalation form.
"""

from typing import Any, Optional

from concierge.analytics import track_event
from concierge.conversation.session import mark_csat_shown, should_offer_csat
from concierge.logging_context import get_session_logger
from concierge.prompts.guidance import CSAT_ALREADY_COPY, CSAT_FOLLOW_UP_COPY, CSAT_THANKS_COPY
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import WidgetMessage, csat_bar_message, text_message
from concierge.schemas.session_schema import SessionState
from concierge.scripts.base import Script, ScriptContext, ScriptResult, escalation_form
from concierge.utils import parse_number

logger = get_session_logger(__name__)

DISSATISFIED_RATINGS = frozenset({"needs_follow_up", "poor", "bad"})


def is_dissatisfied(rating: Any) -> bool:
    if isinstance(rating, str) and rating.strip().lower() in DISSATISFIED_RATINGS:
        return True
    score = parse_number(rating)
    return score is not None and score <= 2


def offer_csat(
    state: SessionState, messages: list[WidgetMessage], intent: Optional[Intent] = None
) -> ScriptResult:
    """Append the CSAT bar after a resolved task, once per session."""
    if not should_offer_csat(state):
        return messages, state
    return [*messages, csat_bar_message(intent)], mark_csat_shown(state)


class CsatScript(Script):
    intent = Intent.CSAT

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        rating = ctx.payload.get("rating")
        if rating is None or (isinstance(rating, str) and not rating.strip()):
            if should_offer_csat(ctx.state):
                return [csat_bar_message(self.intent)], mark_csat_shown(ctx.state)
            return [text_message(CSAT_ALREADY_COPY, self.intent)], ctx.state

        rating_value = str(rating).strip().lower()
        state = mark_csat_shown(ctx.state, rating_value)
        unhappy = is_dissatisfied(rating)
        track_event(
            "csat_submitted",
            sessionId=state.id,
            rating=rating_value,
            followUp=unhappy,
            comment=ctx.payload.get("comment"),
        )

        if unhappy:
            logger.info("CSAT rating %s needs follow-up", rating_value)
            return [text_message(CSAT_FOLLOW_UP_COPY, self.intent), escalation_form(state, self.intent)], state
        return [text_message(CSAT_THANKS_COPY, self.intent)], state
