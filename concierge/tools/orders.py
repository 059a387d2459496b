"""
Mock order status collaborator.

In production, this would query the order service. Ownership is enforced
here, at the collaborator boundary: a lookup only succeeds when the
requester is the order's owner (by authenticated email, or by the email +
postal code pair on the order) or an admin. Every failure is reported as
the same opaque UnauthorizedError so responses never confirm an order
exists.
"""

import logging
from typing import Optional, TypedDict

from concierge.errors import CollaboratorError, UnauthorizedError
from concierge.schemas.backend_schema import (
    CollaboratorReply,
    OrderLookupRequest,
    OrderStatus,
    OrderUpdatesRequest,
    Requester,
    TimelineEntry,
)
from concierge.utils import normalize_email

logger = logging.getLogger(__name__)


class OrderRecord(TypedDict):
    """Order record stored in the system."""

    reference: str
    customer_email: Optional[str]
    postal_code: str
    timeline: list[dict]


_orders: dict[str, OrderRecord] = {
    "GG-123456": {
        "reference": "GG-123456",
        "customer_email": "ada@example.com",
        "postal_code": "10001",
        "timeline": [
            {"label": "Order placed", "status": "complete", "timestamp": "2026-09-28T14:02:00Z"},
            {"label": "Crafting in studio", "status": "complete", "timestamp": "2026-10-02T09:15:00Z"},
            {"label": "Quality check", "status": "in_progress", "timestamp": "2026-10-06T11:40:00Z"},
            {"label": "Shipped", "status": "pending"},
            {"label": "Delivered", "status": "pending"},
        ],
    },
    "GG-777777": {
        "reference": "GG-777777",
        "customer_email": "ben@example.com",
        "postal_code": "94107",
        "timeline": [
            {"label": "Order placed", "status": "complete", "timestamp": "2026-09-01T18:30:00Z"},
            {"label": "Shipped", "status": "complete", "timestamp": "2026-09-04T08:00:00Z"},
            {"label": "Delivered", "status": "complete", "timestamp": "2026-09-06T16:21:00Z"},
        ],
    },
    "GG-654321": {
        "reference": "GG-654321",
        "customer_email": None,
        "postal_code": "60601",
        "timeline": [
            {"label": "Order placed", "status": "complete", "timestamp": "2026-10-10T10:00:00Z"},
        ],
    },
}


def _find_order(request: OrderLookupRequest) -> Optional[OrderRecord]:
    if request.order_id:
        return _orders.get(request.order_id)
    for order in _orders.values():
        owner = order["customer_email"]
        if owner and normalize_email(owner) == request.email and order["postal_code"] == request.postal_code:
            return order
    return None


def _authorize(
    order: OrderRecord, request: OrderLookupRequest, requester: Optional[Requester]
) -> None:
    """Raise UnauthorizedError unless the requester may see this order."""
    owner = order["customer_email"]
    if not owner:
        logger.warning("Order %s has no owner email; denying access", order["reference"])
        raise UnauthorizedError("Order not found.")
    owner = normalize_email(owner)

    if requester is not None and requester.is_admin:
        return

    if requester is not None and requester.email:
        if normalize_email(requester.email) == owner:
            return
        logger.info("Order %s requested by non-owner", order["reference"])
        raise UnauthorizedError("Order not found.")

    if request.email == owner and request.postal_code == order["postal_code"]:
        return
    raise UnauthorizedError("Order not found.")


def _timeline(order: OrderRecord) -> list[TimelineEntry]:
    entries = [TimelineEntry(**entry) for entry in order["timeline"]]
    current = next(
        (i for i, e in enumerate(entries) if e.status == "in_progress"),
        max((i for i, e in enumerate(entries) if e.status == "complete"), default=0),
    )
    return [e.model_copy(update={"is_current": i == current}) for i, e in enumerate(entries)]


async def get_order_status(
    request: OrderLookupRequest, requester: Optional[Requester] = None
) -> OrderStatus:
    """Look up an order's fulfilment timeline for an authorized requester."""
    order = _find_order(request)
    if order is None:
        logger.debug("No order matched lookup")
        raise UnauthorizedError("Order not found.")
    _authorize(order, request, requester)
    logger.info("Order status served: %s", order["reference"])
    return OrderStatus(
        reference=order["reference"],
        entries=_timeline(order),
        customer_email=order["customer_email"],
    )


def order_exists(reference: str) -> bool:
    return reference.upper() in _orders


_subscriptions: dict[str, str] = {}


async def subscribe_order_updates(request: OrderUpdatesRequest) -> CollaboratorReply:
    """Text studio milestones for an order to the guest."""
    if not order_exists(request.order_id):
        raise CollaboratorError(f"Order service has no order {request.order_id}.")
    _subscriptions[request.order_id.upper()] = request.session_id
    logger.info("Text updates enabled for %s", request.order_id)
    return CollaboratorReply(message="Perfect. I'll text studio milestones to you as they happen.")


def get_subscriptions() -> dict[str, str]:
    return dict(_subscriptions)


def reset() -> None:
    """Clear update subscriptions. Used by test fixtures for isolation."""
    _subscriptions.clear()
