"""Request and response models for backend collaborators.

Widget payloads arrive camelCase; every model accepts either the alias or
the field name. ``parse_request`` is the single validation gate in front
of collaborator calls and turns pydantic errors into INVALID_REQUEST.
"""

from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from concierge.errors import InvalidRequestError
from concierge.schemas.filter_schema import Filters
from concierge.utils import normalize_email

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)

ModelT = TypeVar("ModelT", bound=BaseModel)


class Product(BaseModel):
    """Catalog item as returned by product search."""

    model_config = _camel

    id: str
    title: str
    slug: str
    price: float
    base_price: float
    image: str
    ready_to_ship: bool
    category: str
    metal: str
    stone: Optional[str] = None
    carat: Optional[float] = None
    featured_rank: int = 0

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProductQuery(BaseModel):
    model_config = _camel

    ready_to_ship: Optional[bool] = None
    category: Optional[str] = None
    metal: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    carat_min: Optional[float] = None
    carat_max: Optional[float] = None
    sort_by: str = "featured"

    @classmethod
    def from_filters(cls, filters: Filters, sort_by: str = "featured") -> "ProductQuery":
        return cls(
            ready_to_ship=filters.ready_to_ship,
            category=filters.category,
            metal=filters.metal,
            price_min=filters.price_min,
            price_max=filters.price_max,
            carat_min=filters.carat_min,
            carat_max=filters.carat_max,
            sort_by=sort_by,
        )


class Requester(BaseModel):
    """The authenticated identity behind a request, if any."""

    email: Optional[str] = None
    is_admin: bool = False


class OrderLookupRequest(BaseModel):
    """Order number, or the email + postal code pair on the order."""

    model_config = _camel

    order_id: Optional[str] = None
    email: Optional[str] = None
    postal_code: Optional[str] = None

    @field_validator("order_id", "email", "postal_code", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @model_validator(mode="after")
    def _require_credentials(self) -> "OrderLookupRequest":
        if self.order_id:
            self.order_id = self.order_id.upper()
        if self.email:
            self.email = normalize_email(self.email)
        if not self.order_id and not (self.email and self.postal_code):
            raise ValueError("provide an order number, or both email and postal code")
        return self


class TimelineEntry(BaseModel):
    model_config = _camel

    label: str
    status: str
    timestamp: Optional[str] = None
    is_current: bool = False


class OrderStatus(BaseModel):
    model_config = _camel

    reference: str
    entries: list[TimelineEntry] = Field(default_factory=list)
    customer_email: Optional[str] = None


class ReturnOption(str, Enum):
    RESIZE = "resize"
    RETURN = "return"
    CARE = "care"


class ReturnRequest(BaseModel):
    model_config = _camel

    order_id: str = Field(min_length=1)
    option: ReturnOption
    reason: Optional[str] = None
    notes: Optional[str] = None


class StylistContact(BaseModel):
    model_config = _camel

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    preferred_channel: Optional[str] = None


class StylistRequest(BaseModel):
    model_config = _camel

    session_id: str = Field(min_length=1)
    contact: Optional[StylistContact] = None
    shortlist_ids: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class OrderUpdatesRequest(BaseModel):
    model_config = _camel

    session_id: str = Field(min_length=1)
    order_id: str = Field(min_length=1)
    origin_intent: Optional[str] = None


class CollaboratorReply(BaseModel):
    message: str


def parse_request(model: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Validate a widget payload into ``model`` or raise InvalidRequestError."""
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err["loc"]) or "request"
            problems.append(f"{location}: {err['msg']}")
        raise InvalidRequestError("; ".join(problems)) from None
