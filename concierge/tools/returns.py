"""
Mock returns, resizing, and care-service collaborator.

In production, this would open a case with the studio's after-sales
system and email a prepaid label.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import TypedDict

from concierge.config import settings
from concierge.errors import CollaboratorError
from concierge.schemas.backend_schema import CollaboratorReply, ReturnOption, ReturnRequest
from concierge.tools.orders import order_exists

logger = logging.getLogger(__name__)


class ReturnCase(TypedDict):
    case_ref: str
    order_id: str
    option: str
    reason: str
    notes: str
    created_at: str


_cases: dict[str, ReturnCase] = {}


def _confirmation(case_ref: str, request: ReturnRequest) -> str:
    if request.option == ReturnOption.RESIZE:
        return (
            f"Resize request {case_ref} is open for order {request.order_id}. "
            f"Resizing is complimentary within {settings.brand.resize_free_within_days} days, "
            "and we'll email a prepaid insured label shortly."
        )
    if request.option == ReturnOption.CARE:
        return (
            f"Care appointment {case_ref} is booked for order {request.order_id}. "
            "The studio will clean, polish, and check every setting before sending it home."
        )
    return (
        f"Return {case_ref} is started for order {request.order_id}. "
        "Watch your inbox for a prepaid insured label; refunds post within 5 business days of arrival."
    )


async def submit_return(request: ReturnRequest) -> CollaboratorReply:
    """Open a return, resize, or care case for an order."""
    if not order_exists(request.order_id):
        raise CollaboratorError(f"Returns service has no order {request.order_id}.")

    case_ref = f"RT-{uuid.uuid4().hex[:6].upper()}"
    _cases[case_ref] = {
        "case_ref": case_ref,
        "order_id": request.order_id,
        "option": request.option.value,
        "reason": request.reason or "",
        "notes": request.notes or "",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    logger.info("Return case %s opened (%s) for %s", case_ref, request.option.value, request.order_id)
    return CollaboratorReply(message=_confirmation(case_ref, request))


def get_cases() -> list[ReturnCase]:
    return list(_cases.values())


def reset() -> None:
    """Clear all cases. Used by test fixtures for isolation."""
    _cases.clear()
