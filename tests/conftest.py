"""Shared test fixtures and helpers."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from concierge import analytics
from concierge.conversation.session import create_session
from concierge.errors import CollaboratorError
from concierge.schemas.message_schema import MessageType, ModuleType, WidgetMessage
from concierge.schemas.session_schema import SessionState
from concierge.tools import orders, returns, stylist
from concierge.tools.backend import ConciergeBackend, default_backend

FIXED_NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_stores():
    analytics.reset()
    orders.reset()
    returns.reset()
    stylist.reset()
    yield
    analytics.reset()
    orders.reset()
    returns.reset()
    stylist.reset()


@pytest.fixture
def session_state() -> SessionState:
    return create_session("sess-test", now=FIXED_NOW)


@pytest.fixture
def backend() -> ConciergeBackend:
    return default_backend


@pytest.fixture
def failing_backend() -> ConciergeBackend:
    """Backend whose product search and returns calls fail upstream."""

    async def broken_search(query):
        raise CollaboratorError("Product service returned 503.")

    async def broken_returns(request):
        raise CollaboratorError("Returns service timed out.")

    return replace(default_backend, search_products=broken_search, submit_return=broken_returns)


def modules(messages: list[WidgetMessage], module_type: Optional[ModuleType] = None) -> list[dict[str, Any]]:
    """Return module payloads, optionally only those of ``module_type``."""
    found = [m.payload for m in messages if m.type == MessageType.MODULE]
    if module_type is None:
        return found
    return [p for p in found if p["type"] == module_type.value]


def texts(messages: list[WidgetMessage]) -> list[str]:
    return [m.payload for m in messages if m.type == MessageType.ASSISTANT_TEXT]


def message_types(messages: list[WidgetMessage]) -> list[str]:
    """Message types, with module messages reported by their module type."""
    return [m.module_type or m.type.value for m in messages]
