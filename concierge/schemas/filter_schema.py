"""Canonical product filter shape shared by classifier, scripts, and search."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Filters(BaseModel):
    """Structured product-search constraints.

    Attributes are snake_case; the widget wire format is camelCase and is
    produced by ``to_payload`` with absent fields omitted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    category: Optional[str] = None
    metal: Optional[str] = None
    stone: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    carat_min: Optional[float] = None
    carat_max: Optional[float] = None
    ready_to_ship: Optional[bool] = None
    tags: Optional[list[str]] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_payload()
