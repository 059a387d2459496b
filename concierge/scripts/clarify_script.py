"""Disambiguation: the intent chooser shown when a message can't be routed."""

from concierge.prompts.guidance import CLARIFY_COPY, CLARIFY_REPEAT_COPY, INTENT_LABELS
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import ModuleType, module_message, text_message
from concierge.scripts.base import Script, ScriptContext, ScriptResult


class ClarifyScript(Script):
    intent = Intent.CLARIFY

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        emphasize_human = bool(ctx.payload.get("emphasizeHuman"))
        options = [{"intent": intent.value, "label": label} for intent, label in INTENT_LABELS.items()]
        if emphasize_human:
            # stylist first
            options.sort(key=lambda option: option["intent"] != Intent.STYLIST_CONTACT.value)

        messages = [
            text_message(CLARIFY_REPEAT_COPY if emphasize_human else CLARIFY_COPY, self.intent),
            module_message(
                ModuleType.INTENT_CHOOSER,
                intent=self.intent,
                options=options,
                emphasizeHuman=emphasize_human,
            ),
        ]
        return messages, ctx.state
