"""Static guidance for care & warranty, financing, and sizing & repairs."""

from concierge.prompts.guidance import GUIDANCE_COPY
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import text_message
from concierge.scripts.base import Script, ScriptContext, ScriptResult


class InfoScript(Script):
    """Answers an informational intent with its guidance copy. No backend calls."""

    def __init__(self, intent: Intent) -> None:
        if intent not in GUIDANCE_COPY:
            raise ValueError(f"No guidance copy for intent {intent.value!r}")
        self.intent = intent

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        return [text_message(GUIDANCE_COPY[self.intent], self.intent)], ctx.state
