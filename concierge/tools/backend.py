"""
Bundle of backend collaborators the script executor calls.

Scripts never import collaborator modules directly; they go through a
ConciergeBackend so callers and tests can swap any single call.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from concierge.schemas.backend_schema import (
    CollaboratorReply,
    OrderLookupRequest,
    OrderStatus,
    OrderUpdatesRequest,
    Product,
    ProductQuery,
    Requester,
    ReturnRequest,
    StylistRequest,
)
from concierge.tools import orders, products, returns, stylist

ProductSearch = Callable[[ProductQuery], Awaitable[list[Product]]]
OrderLookup = Callable[[OrderLookupRequest, Optional[Requester]], Awaitable[OrderStatus]]
UpdatesSubscribe = Callable[[OrderUpdatesRequest], Awaitable[CollaboratorReply]]
ReturnSubmit = Callable[[ReturnRequest], Awaitable[CollaboratorReply]]
StylistHandoff = Callable[[StylistRequest], Awaitable[CollaboratorReply]]


@dataclass(frozen=True)
class ConciergeBackend:
    search_products: ProductSearch = products.search_products
    get_order_status: OrderLookup = orders.get_order_status
    subscribe_order_updates: UpdatesSubscribe = orders.subscribe_order_updates
    submit_return: ReturnSubmit = returns.submit_return
    request_stylist: StylistHandoff = stylist.request_stylist


default_backend = ConciergeBackend()
