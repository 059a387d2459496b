"""Stylist hand-off: contact form, then a queued request with the shortlist."""

from typing import Any, Mapping, Optional

from concierge.analytics import track_event
from concierge.logging_context import get_session_logger
from concierge.prompts.guidance import ESCALATION_INVALID_COPY, ESCALATION_PROMPT
from concierge.schemas.backend_schema import StylistRequest, parse_request
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import WidgetMessage, text_message
from concierge.scripts.base import Script, ScriptContext, ScriptResult, escalation_form

logger = get_session_logger(__name__)

SUBMIT_ACTION = "submit-escalation"
_CONTACT_KEYS = ("name", "email", "phone", "preferredChannel")


def _contact(payload: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    contact = payload.get("contact")
    if isinstance(contact, Mapping):
        return dict(contact)
    fields = {key: payload[key] for key in _CONTACT_KEYS if payload.get(key)}
    return fields or None


class StylistScript(Script):
    intent = Intent.STYLIST_CONTACT
    invalid_copy = ESCALATION_INVALID_COPY

    def prompt_messages(self, ctx: ScriptContext) -> list[WidgetMessage]:
        return [escalation_form(ctx.state, self.intent)]

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        if ctx.action != SUBMIT_ACTION:
            return [text_message(ESCALATION_PROMPT, self.intent), *self.prompt_messages(ctx)], ctx.state

        request = parse_request(
            StylistRequest,
            {
                "sessionId": ctx.state.id,
                "contact": _contact(ctx.payload),
                "shortlistIds": [item.id for item in ctx.state.shortlist],
                "notes": ctx.payload.get("notes"),
            },
        )
        reply = await ctx.backend.request_stylist(request)
        logger.info("Stylist hand-off requested")
        track_event("stylist_requested", sessionId=ctx.state.id, shortlistCount=len(request.shortlist_ids))
        return [text_message(reply.message, self.intent)], ctx.state
