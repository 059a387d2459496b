"""Per-conversation session state owned by the caller."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from concierge.schemas.filter_schema import Filters
from concierge.schemas.intent_schema import Intent


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductRef(BaseModel):
    """A product the guest saved to their shortlist."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    title: str = ""
    slug: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None


class SessionState(BaseModel):
    """
    Minimal conversational memory for one widget session.

    Frozen: every turn produces a new value via ``model_copy(update=...)``.
    The engine never persists it; the caller stores it between turns.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    last_intent: Optional[Intent] = None
    last_filters: Optional[Filters] = None
    shortlist: tuple[ProductRef, ...] = ()
    has_shown_csat: bool = False
    csat_rating: Optional[str] = None
    last_active: datetime = Field(default_factory=_utcnow)
    last_order_id: Optional[str] = None
    miss_count: int = 0

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
