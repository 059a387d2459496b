"""
Widget message contract.

The engine only produces values of these shapes; rendering belongs to
the widget. Consumers must ignore message and module types they do not
recognize, so new types can be added without a contract bump.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from concierge.schemas.intent_schema import Intent


class MessageRole(str, Enum):
    USER = "user"
    CONCIERGE = "concierge"


class MessageType(str, Enum):
    USER_TEXT = "user_text"
    ASSISTANT_TEXT = "assistant_text"
    PRODUCT_CARD = "product_card"
    ESCALATION_FORM = "escalation_form"
    CSAT_BAR = "csat_bar"
    ORDER_STATUS = "order_status"
    MODULE = "module"


class ModuleType(str, Enum):
    """Interactive payloads wrapped in a ``module`` message."""
    PRODUCT_FILTER = "product-filter"
    PRODUCT_CAROUSEL = "product-carousel"
    ORDER_LOOKUP = "order-lookup"
    RETURN_OPTIONS = "return-options"
    ESCALATION_FORM = "escalation-form"
    INTENT_CHOOSER = "intent-chooser"
    SHORTLIST_PANEL = "shortlist-panel"


def _message_id() -> str:
    return f"msg-{uuid.uuid4().hex[:12]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WidgetMessage(BaseModel):
    """A single message the widget renders."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_message_id)
    role: MessageRole
    type: MessageType
    payload: Any
    intent: Optional[Intent] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def module_type(self) -> Optional[str]:
        if self.type == MessageType.MODULE and isinstance(self.payload, dict):
            return self.payload.get("type")
        return None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def user_message(text: str) -> WidgetMessage:
    return WidgetMessage(role=MessageRole.USER, type=MessageType.USER_TEXT, payload=text)


def text_message(text: str, intent: Optional[Intent] = None) -> WidgetMessage:
    return WidgetMessage(
        role=MessageRole.CONCIERGE,
        type=MessageType.ASSISTANT_TEXT,
        payload=text,
        intent=intent,
    )


def module_message(
    module_type: ModuleType, intent: Optional[Intent] = None, **fields: Any
) -> WidgetMessage:
    """Wrap an interactive form or carousel payload."""
    payload = {
        "type": module_type.value,
        "id": f"{module_type.value}-{uuid.uuid4().hex[:8]}",
        **fields,
    }
    return WidgetMessage(
        role=MessageRole.CONCIERGE,
        type=MessageType.MODULE,
        payload=payload,
        intent=intent,
    )


def order_status_message(
    reference: str, entries: list[dict[str, Any]], intent: Optional[Intent] = None
) -> WidgetMessage:
    return WidgetMessage(
        role=MessageRole.CONCIERGE,
        type=MessageType.ORDER_STATUS,
        payload={"reference": reference, "entries": entries},
        intent=intent,
    )


def csat_bar_message(intent: Optional[Intent] = None) -> WidgetMessage:
    return WidgetMessage(
        role=MessageRole.CONCIERGE,
        type=MessageType.CSAT_BAR,
        payload={
            "prompt": "How did I do?",
            "ratings": ["great", "good", "needs_follow_up"],
        },
        intent=intent,
    )


class ModuleAction(BaseModel):
    """An interaction the widget reports back from a module (form submit, chooser pick)."""

    model_config = ConfigDict(frozen=True)

    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _mapping_only(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}
