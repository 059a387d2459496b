"""
Script executor: runs one intent against the session and wraps failures.

Usage:
    result = await execute_intent(Intent.TRACK_ORDER, state, {"orderId": "GG-123456"})
    render(result.messages)
    state = result.state

Expected failures (ConciergeError) become the script's friendly error
messages and set ``ExecutionResult.error`` to the error code. Anything
else is logged with its traceback and answered with an apology plus the
stylist escalation form. No exception escapes to the caller.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from concierge.conversation.session import record_intent, touch
from concierge.errors import CollaboratorError, ConciergeError
from concierge.logging_context import get_session_logger, set_session_id
from concierge.schemas.backend_schema import Requester
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import WidgetMessage
from concierge.schemas.session_schema import SessionState
from concierge.scripts.base import ScriptContext, apology_messages
from concierge.scripts.registry import get_registered_scripts, get_script
from concierge.tools.backend import ConciergeBackend, default_backend

logger = get_session_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    messages: list[WidgetMessage]
    state: SessionState
    error: Optional[str] = None


def _resolve_intent(intent: Union[Intent, str]) -> Intent:
    try:
        resolved = Intent(intent)
    except ValueError:
        logger.warning("Unknown intent %r; falling back to clarify", intent)
        return Intent.CLARIFY
    if resolved not in get_registered_scripts():
        logger.warning("No script registered for %s; falling back to clarify", resolved.value)
        return Intent.CLARIFY
    return resolved


async def execute_intent(
    intent: Union[Intent, str],
    state: SessionState,
    payload: Optional[Mapping[str, Any]] = None,
    *,
    requester: Optional[Requester] = None,
    backend: Optional[ConciergeBackend] = None,
) -> ExecutionResult:
    """Run the script for ``intent`` and return its messages and the new state."""
    set_session_id(state.id)
    resolved = _resolve_intent(intent)
    script = get_script(resolved)
    ctx = ScriptContext(
        intent=resolved,
        state=state,
        payload=dict(payload or {}),
        requester=requester,
        backend=backend or default_backend,
    )

    try:
        messages, new_state = await script.run(ctx)
    except ConciergeError as exc:
        logger.warning("%s failed: %s (%s)", resolved.value, exc.code, exc.message)
        messages, new_state = script.on_error(ctx, exc)
        return ExecutionResult(messages, touch(new_state), exc.code)
    except Exception:
        logger.exception("Script for %s crashed", resolved.value)
        return ExecutionResult(apology_messages(state, resolved), touch(state), CollaboratorError.code)

    logger.debug("%s produced %d messages", resolved.value, len(messages))
    return ExecutionResult(messages, record_intent(new_state, resolved))
