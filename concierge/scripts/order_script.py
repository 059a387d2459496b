"""Order tracking script: lookup form, then the fulfilment timeline."""

from typing import Any, Mapping, Optional

from concierge.logging_context import get_session_logger
from concierge.prompts.guidance import (
    ORDER_FOUND_COPY,
    ORDER_INVALID_COPY,
    ORDER_LOOKUP_PROMPT,
    ORDER_NOT_FOUND_COPY,
)
from concierge.schemas.backend_schema import OrderLookupRequest, parse_request
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import (
    ModuleType,
    WidgetMessage,
    module_message,
    order_status_message,
    text_message,
)
from concierge.scripts.base import Script, ScriptContext, ScriptResult
from concierge.scripts.csat_script import offer_csat

logger = get_session_logger(__name__)


def _order_reference(payload: Mapping[str, Any]) -> Optional[Any]:
    for key in ("orderId", "orderNumber", "order_id"):
        if payload.get(key):
            return payload[key]
    return None


def lookup_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Pull order credentials out of a turn payload. Blank values are dropped."""
    fields = {
        "orderId": _order_reference(payload),
        "email": payload.get("email"),
        "postalCode": payload.get("postalCode") or payload.get("postal_code"),
    }
    return {k: v for k, v in fields.items() if v not in (None, "")}


class OrderScript(Script):
    intent = Intent.TRACK_ORDER
    invalid_copy = ORDER_INVALID_COPY
    unauthorized_copy = ORDER_NOT_FOUND_COPY

    def prompt_messages(self, ctx: ScriptContext) -> list[WidgetMessage]:
        return [
            module_message(
                ModuleType.ORDER_LOOKUP,
                intent=self.intent,
                prefill=lookup_fields(ctx.payload),
            )
        ]

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        fields = lookup_fields(ctx.payload)
        if not fields:
            return [text_message(ORDER_LOOKUP_PROMPT, self.intent), *self.prompt_messages(ctx)], ctx.state

        request = parse_request(OrderLookupRequest, fields)
        status = await ctx.backend.get_order_status(request, ctx.requester)
        logger.info("Order timeline shown for %s", status.reference)

        entries = [entry.model_dump(by_alias=True, exclude_none=True) for entry in status.entries]
        messages = [
            text_message(ORDER_FOUND_COPY.format(reference=status.reference), self.intent),
            order_status_message(status.reference, entries, self.intent),
        ]
        state = ctx.state.model_copy(update={"last_order_id": status.reference})
        return offer_csat(state, messages, self.intent)
