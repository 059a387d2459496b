"""
Base class and shared builders for per-intent scripts.

A script turns one intent (plus its payload) into widget messages and a
new session state. Scripts raise ConciergeError subclasses for expected
failures; the executor routes those to ``on_error`` so every failure
still renders as a valid message.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from concierge.errors import ConciergeError, InvalidRequestError, UnauthorizedError
from concierge.prompts.guidance import APOLOGY_COPY, ESCALATION_PROMPT
from concierge.schemas.backend_schema import Requester
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import ModuleType, WidgetMessage, module_message, text_message
from concierge.schemas.session_schema import SessionState
from concierge.tools.backend import ConciergeBackend, default_backend

ScriptResult = tuple[list[WidgetMessage], SessionState]

CONTACT_CHANNELS = ("email", "phone", "text")


@dataclass(frozen=True)
class ScriptContext:
    """Everything a script may read for one turn."""
    intent: Intent
    state: SessionState
    payload: Mapping[str, Any] = field(default_factory=dict)
    requester: Optional[Requester] = None
    backend: ConciergeBackend = default_backend

    @property
    def action(self) -> Optional[str]:
        action = self.payload.get("action")
        return action if isinstance(action, str) else None


def escalation_form(state: SessionState, intent: Optional[Intent] = None) -> WidgetMessage:
    return module_message(
        ModuleType.ESCALATION_FORM,
        intent=intent,
        title="Talk to a stylist",
        prompt=ESCALATION_PROMPT,
        channels=list(CONTACT_CHANNELS),
        shortlistIds=[item.id for item in state.shortlist],
    )


def apology_messages(state: SessionState, intent: Optional[Intent] = None) -> list[WidgetMessage]:
    return [text_message(APOLOGY_COPY, intent), escalation_form(state, intent)]


class Script:
    """Base class for intent scripts.

    Subclasses set ``intent`` and implement ``run``. ``prompt_messages``
    is the form to show again after a validation or authorization
    failure; scripts without a form leave it empty.
    """

    intent: Intent = Intent.CLARIFY
    invalid_copy: str = APOLOGY_COPY
    unauthorized_copy: str = APOLOGY_COPY

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        raise NotImplementedError

    def prompt_messages(self, ctx: ScriptContext) -> list[WidgetMessage]:
        return []

    def on_error(self, ctx: ScriptContext, exc: ConciergeError) -> ScriptResult:
        if isinstance(exc, UnauthorizedError):
            return [text_message(self.unauthorized_copy, self.intent), *self.prompt_messages(ctx)], ctx.state
        if isinstance(exc, InvalidRequestError):
            return [text_message(self.invalid_copy, self.intent), *self.prompt_messages(ctx)], ctx.state
        return apology_messages(ctx.state, self.intent), ctx.state
