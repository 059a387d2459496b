"""Returns, resizing, and care-service requests for an existing order.

Cases are only filed against the session's last looked-up order, which the
order collaborator has already authorized for this guest. An ``orderId``
in the payload is never trusted.
"""

from concierge.logging_context import get_session_logger
from concierge.prompts.guidance import RETURN_INVALID_COPY, RETURN_NEEDS_ORDER_COPY, RETURN_OPTIONS_PROMPT
from concierge.schemas.backend_schema import ReturnOption, ReturnRequest, parse_request
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import ModuleType, WidgetMessage, module_message, text_message
from concierge.scripts.base import Script, ScriptContext, ScriptResult
from concierge.scripts.csat_script import offer_csat

logger = get_session_logger(__name__)

RETURN_OPTION_LABELS: dict[ReturnOption, str] = {
    ReturnOption.RESIZE: "Resize my piece",
    ReturnOption.RETURN: "Start a return",
    ReturnOption.CARE: "Book a care visit",
}


class ReturnsScript(Script):
    intent = Intent.RETURN_EXCHANGE
    invalid_copy = RETURN_INVALID_COPY

    def prompt_messages(self, ctx: ScriptContext) -> list[WidgetMessage]:
        return [
            module_message(
                ModuleType.RETURN_OPTIONS,
                intent=self.intent,
                orderId=ctx.state.last_order_id,
                options=[{"value": o.value, "label": label} for o, label in RETURN_OPTION_LABELS.items()],
            )
        ]

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        option = ctx.payload.get("option")
        if not option:
            return [text_message(RETURN_OPTIONS_PROMPT, self.intent), *self.prompt_messages(ctx)], ctx.state

        order_id = ctx.state.last_order_id
        if not order_id:
            requested = ctx.payload.get("orderId")
            if requested:
                logger.warning("Ignoring unverified order id %r on return request", requested)
            return [text_message(RETURN_NEEDS_ORDER_COPY, self.intent)], ctx.state

        request = parse_request(
            ReturnRequest,
            {
                "orderId": order_id,
                "option": option,
                "reason": ctx.payload.get("reason"),
                "notes": ctx.payload.get("notes"),
            },
        )
        reply = await ctx.backend.submit_return(request)
        logger.info("%s request filed for %s", request.option.value, request.order_id)
        return offer_csat(ctx.state, [text_message(reply.message, self.intent)], self.intent)
