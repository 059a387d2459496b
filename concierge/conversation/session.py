"""
Session state helpers.

SessionState is frozen and owned by the caller. Every helper here takes a
state and returns a new one; nothing is mutated in place and nothing is
persisted. The CSAT flag only ever moves from False to True.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from concierge.schemas.intent_schema import Intent
from concierge.schemas.session_schema import ProductRef, SessionState

logger = logging.getLogger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def create_session(session_id: Optional[str] = None, now: Optional[datetime] = None) -> SessionState:
    """Start a fresh session when the widget opens."""
    state = SessionState(
        id=session_id or f"sess-{uuid.uuid4().hex[:12]}",
        last_active=_now(now),
    )
    logger.debug("Session created: %s", state.id)
    return state


def touch(state: SessionState, now: Optional[datetime] = None) -> SessionState:
    return state.model_copy(update={"last_active": _now(now)})


def record_intent(state: SessionState, intent: Intent, now: Optional[datetime] = None) -> SessionState:
    """Stamp the intent that just ran. Clarify turns keep the prior context."""
    update: dict[str, Any] = {"last_active": _now(now)}
    if intent != Intent.CLARIFY:
        update["last_intent"] = intent
    return state.model_copy(update=update)


def should_offer_csat(state: SessionState) -> bool:
    return not state.has_shown_csat


def mark_csat_shown(state: SessionState, rating: Optional[str] = None) -> SessionState:
    update: dict[str, Any] = {"has_shown_csat": True}
    if rating is not None:
        update["csat_rating"] = rating
    return state.model_copy(update=update)


def register_miss(state: SessionState) -> SessionState:
    return state.model_copy(update={"miss_count": state.miss_count + 1})


def reset_misses(state: SessionState) -> SessionState:
    if state.miss_count == 0:
        return state
    return state.model_copy(update={"miss_count": 0})


def add_to_shortlist(
    state: SessionState, product: Union[ProductRef, Mapping[str, Any]]
) -> SessionState:
    """Save a product; a product already on the shortlist is left as is."""
    ref = product if isinstance(product, ProductRef) else ProductRef.model_validate(dict(product))
    if any(item.id == ref.id for item in state.shortlist):
        return state
    return state.model_copy(update={"shortlist": (*state.shortlist, ref)})


def remove_from_shortlist(state: SessionState, product_id: str) -> SessionState:
    remaining = tuple(item for item in state.shortlist if item.id != product_id)
    return state.model_copy(update={"shortlist": remaining})


def clear_shortlist(state: SessionState) -> SessionState:
    return state.model_copy(update={"shortlist": ()})
