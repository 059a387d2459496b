"""
Turn runner: one guest message or module action in, messages and state out.

``handle_message`` classifies free text and either runs the detected
intent or, for unclear or low-confidence messages, offers the intent
chooser. Repeated misses move the stylist option to the front.
``handle_module_action`` maps widget interactions (form submits, chooser
picks, shortlist edits, text-update opt-ins) onto intents or collaborator
calls. Unknown actions are ignored.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from concierge.analytics import track_event
from concierge.config import settings
from concierge.conversation.intent_rules import decide_intent
from concierge.conversation.session import (
    add_to_shortlist,
    clear_shortlist,
    register_miss,
    remove_from_shortlist,
    reset_misses,
)
from concierge.errors import ConciergeError
from concierge.logging_context import set_session_id
from concierge.prompts.guidance import (
    CHOOSER_CONFIRMATIONS,
    ORDER_UPDATES_FAILED_COPY,
    ORDER_UPDATES_NEEDS_ORDER_COPY,
    READY_TO_SHIP_CONFIRMATION,
    RETURN_NEEDS_ORDER_COPY,
    SHORTLIST_CLEARED_COPY,
    SHORTLIST_COUNT_COPY,
    SHORTLIST_REMOVED_COPY,
    SHORTLIST_SAVED_COPY,
)
from concierge.schemas.backend_schema import OrderUpdatesRequest, Requester
from concierge.schemas.intent_schema import ClassificationResult, Intent, IntentContext
from concierge.schemas.message_schema import (
    ModuleAction,
    ModuleType,
    WidgetMessage,
    module_message,
    text_message,
)
from concierge.schemas.session_schema import ProductRef, SessionState
from concierge.scripts.executor import ExecutionResult, execute_intent
from concierge.tools.backend import ConciergeBackend, default_backend

logger = logging.getLogger(__name__)

# Actions whose data is passed through to the intent's script as-is.
ACTION_INTENTS: dict[str, Intent] = {
    "submit-product-filters": Intent.FIND_PRODUCT,
    "submit-order-lookup": Intent.TRACK_ORDER,
    "submit-escalation": Intent.STYLIST_CONTACT,
    "submit-csat": Intent.CSAT,
}


@dataclass(frozen=True)
class TurnResult:
    messages: list[WidgetMessage]
    state: SessionState
    classification: Optional[ClassificationResult] = None
    error: Optional[str] = None


def _track_outcome(intent: Intent, execution: ExecutionResult, **properties: Any) -> None:
    if execution.error:
        track_event("intent_error", intent=intent.value, error=execution.error, **properties)
    else:
        track_event("intent_completed", intent=intent.value, **properties)


async def _run(
    intent: Intent,
    state: SessionState,
    payload: Mapping[str, Any],
    requester: Optional[Requester],
    backend: Optional[ConciergeBackend],
    classification: Optional[ClassificationResult] = None,
    lead: Optional[list[WidgetMessage]] = None,
) -> TurnResult:
    execution = await execute_intent(intent, state, payload, requester=requester, backend=backend)
    _track_outcome(intent, execution, sessionId=state.id, source=payload.get("source"))
    messages = [*(lead or []), *execution.messages]
    return TurnResult(messages, execution.state, classification, execution.error)


async def handle_message(
    text: str,
    state: SessionState,
    *,
    requester: Optional[Requester] = None,
    backend: Optional[ConciergeBackend] = None,
) -> TurnResult:
    """Classify a guest message and run the matching intent."""
    set_session_id(state.id)
    result = decide_intent(text, IntentContext.from_session(state))

    if result.intent == Intent.CLARIFY or result.confidence < settings.concierge.low_confidence_threshold:
        state = register_miss(state)
        emphasize_human = state.miss_count >= settings.concierge.human_escalation_misses
        track_event(
            "intent_miss",
            sessionId=state.id,
            intent=result.intent.value,
            confidence=result.confidence,
            reason=result.reason,
            missCount=state.miss_count,
        )
        logger.info("Message not routed (%s); offering intent chooser", result.reason)
        return await _run(
            Intent.CLARIFY, state, {"source": "text", "emphasizeHuman": emphasize_human},
            requester, backend, result,
        )

    track_event(
        "intent_detected",
        sessionId=state.id,
        intent=result.intent.value,
        confidence=result.confidence,
        reason=result.reason,
    )
    payload: dict[str, Any] = {**result.payload, "source": "text", "reason": result.reason}
    if result.filters is not None and not result.filters.is_empty():
        payload["filters"] = result.filters
    return await _run(result.intent, reset_misses(state), payload, requester, backend, result)


def _shortlist_panel(state: SessionState) -> WidgetMessage:
    return module_message(
        ModuleType.SHORTLIST_PANEL,
        title="My shortlist",
        items=[item.model_dump(by_alias=True, exclude_none=True) for item in state.shortlist],
        ctaLabel="Invite stylist to review",
    )


def _shortlist_count(state: SessionState) -> WidgetMessage:
    count = len(state.shortlist)
    noun = "item" if count == 1 else "items"
    return text_message(SHORTLIST_COUNT_COPY.format(count=f"{count} {noun}"))


def _handle_shortlist(action: ModuleAction, state: SessionState) -> TurnResult:
    if action.type == "shortlist-clear":
        state = clear_shortlist(state)
        track_event("shortlist_cleared", sessionId=state.id)
        return TurnResult([text_message(SHORTLIST_CLEARED_COPY), _shortlist_panel(state)], state)

    product = action.data.get("product")
    if action.type == "shortlist-remove":
        product_id = action.data.get("productId")
        if product_id is None and isinstance(product, Mapping):
            product_id = product.get("id")
        if not isinstance(product_id, str):
            return TurnResult([], state)
        state = remove_from_shortlist(state, product_id)
        track_event("product_unshortlisted", sessionId=state.id, productId=product_id)
        return TurnResult(
            [text_message(SHORTLIST_REMOVED_COPY), _shortlist_count(state), _shortlist_panel(state)], state
        )

    if not isinstance(product, Mapping):
        return TurnResult([], state)
    try:
        ref = ProductRef.model_validate(dict(product))
    except ValidationError:
        logger.warning("Ignoring shortlist action with malformed product")
        return TurnResult([], state)
    state = add_to_shortlist(state, ref)
    track_event(
        "product_shortlisted", sessionId=state.id, productId=ref.id, shortlistCount=len(state.shortlist)
    )
    saved = text_message(SHORTLIST_SAVED_COPY.format(title=ref.title or "that piece"))
    return TurnResult([saved, _shortlist_count(state), _shortlist_panel(state)], state)


SHORTLIST_ACTIONS = frozenset({"shortlist-product", "shortlist-remove", "shortlist-clear"})


async def _handle_chooser(
    action: ModuleAction,
    state: SessionState,
    requester: Optional[Requester],
    backend: Optional[ConciergeBackend],
) -> TurnResult:
    try:
        intent = Intent(action.data.get("intent"))
    except ValueError:
        logger.warning("Intent chooser sent unknown intent %r", action.data.get("intent"))
        return TurnResult([], state)

    state = reset_misses(state)
    source = action.data.get("source")
    source = source if isinstance(source, str) else "intent-chooser"
    track_event("intent_disambiguation_selected", sessionId=state.id, intent=intent.value, source=source)

    chosen = action.data.get("payload")
    chosen = dict(chosen) if isinstance(chosen, Mapping) else {}
    if intent == Intent.FIND_PRODUCT and not chosen:
        payload = {"source": source, "slug": "ready-to-ship", "filters": {"readyToShip": True}}
        confirmation = READY_TO_SHIP_CONFIRMATION
    else:
        payload = {"source": source, **chosen}
        confirmation = CHOOSER_CONFIRMATIONS.get(intent, "On it.")

    lead = [text_message(confirmation, intent)]
    return await _run(intent, state, payload, requester, backend, lead=lead)


async def _handle_text_updates(
    action: ModuleAction, state: SessionState, backend: Optional[ConciergeBackend]
) -> TurnResult:
    if not state.last_order_id:
        return TurnResult([text_message(ORDER_UPDATES_NEEDS_ORDER_COPY, Intent.TRACK_ORDER)], state)

    origin = action.data.get("originIntent")
    if not isinstance(origin, str):
        origin = state.last_intent.value if state.last_intent else None
    request = OrderUpdatesRequest(session_id=state.id, order_id=state.last_order_id, origin_intent=origin)
    try:
        reply = await (backend or default_backend).subscribe_order_updates(request)
    except ConciergeError as exc:
        logger.warning("Text updates failed for %s: %s", request.order_id, exc.message)
        track_event("timeline_text_updates_error", sessionId=state.id, orderId=request.order_id, error=exc.code)
        return TurnResult([text_message(ORDER_UPDATES_FAILED_COPY, Intent.TRACK_ORDER)], state, error=exc.code)
    except Exception:
        logger.exception("Unexpected failure subscribing %s to text updates", request.order_id)
        track_event(
            "timeline_text_updates_error", sessionId=state.id, orderId=request.order_id, error="UPSTREAM_FAILURE"
        )
        return TurnResult(
            [text_message(ORDER_UPDATES_FAILED_COPY, Intent.TRACK_ORDER)], state, error="UPSTREAM_FAILURE"
        )

    track_event("timeline_text_updates", sessionId=state.id, orderId=request.order_id, success=True)
    return TurnResult([text_message(reply.message, Intent.TRACK_ORDER)], state)


async def handle_module_action(
    action: Union[ModuleAction, Mapping[str, Any]],
    state: SessionState,
    *,
    requester: Optional[Requester] = None,
    backend: Optional[ConciergeBackend] = None,
) -> TurnResult:
    """Route a module interaction. Unknown action types return no messages."""
    set_session_id(state.id)
    if not isinstance(action, ModuleAction):
        try:
            action = ModuleAction.model_validate(action)
        except ValidationError:
            logger.warning("Ignoring malformed module action")
            return TurnResult([], state)
    data = action.data

    if action.type in SHORTLIST_ACTIONS:
        return _handle_shortlist(action, state)

    if action.type == "intent-chooser-select":
        return await _handle_chooser(action, state, requester, backend)

    if action.type == "submit-return-option":
        if not state.last_order_id:
            message = text_message(RETURN_NEEDS_ORDER_COPY, Intent.RETURN_EXCHANGE)
            return TurnResult([message], state)
        payload = {"action": action.type, **data}
        return await _run(Intent.RETURN_EXCHANGE, state, payload, requester, backend)

    if action.type == "text-updates":
        return await _handle_text_updates(action, state, backend)

    if action.type == "apply-filters":
        track_event("quickstart_selected", sessionId=state.id, suggestion=data.get("slug"))
        payload = {"source": "quickstart", "slug": data.get("slug"), "filters": data.get("filters")}
        return await _run(Intent.FIND_PRODUCT, state, payload, requester, backend)

    if action.type == "filter_change":
        filters = data.get("filters")
        payload = {"source": "module", "filters": filters if isinstance(filters, Mapping) else {}}
        if isinstance(data.get("sortBy"), str):
            payload["sortBy"] = data["sortBy"]
        return await _run(Intent.FIND_PRODUCT, state, payload, requester, backend)

    if action.type == "shortlist-escalate":
        track_event("shortlist_escalate", sessionId=state.id, shortlistCount=len(state.shortlist))
        return await _run(Intent.STYLIST_CONTACT, state, {"source": "shortlist"}, requester, backend)

    intent = ACTION_INTENTS.get(action.type)
    if intent is None:
        logger.debug("Ignoring module action %r", action.type)
        return TurnResult([], state)
    return await _run(intent, state, {"action": action.type, **data}, requester, backend)
