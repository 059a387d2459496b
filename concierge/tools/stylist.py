"""
Mock stylist hand-off collaborator.

In production, this would create a ticket in the clienteling tool and
page the on-shift stylist.
"""

import logging
from datetime import datetime, timezone
from typing import TypedDict

from concierge.config import settings
from concierge.schemas.backend_schema import CollaboratorReply, StylistRequest

logger = logging.getLogger(__name__)


class HandoffRecord(TypedDict):
    session_id: str
    contact: dict
    shortlist_ids: list[str]
    notes: str
    created_at: str


_handoffs: list[HandoffRecord] = []


async def request_stylist(request: StylistRequest) -> CollaboratorReply:
    """Queue a stylist hand-off for a session."""
    contact = request.contact.model_dump(exclude_none=True) if request.contact else {}
    _handoffs.append({
        "session_id": request.session_id,
        "contact": contact,
        "shortlist_ids": list(request.shortlist_ids),
        "notes": request.notes or "",
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    logger.info(
        "Stylist hand-off queued for session %s (%d shortlisted)",
        request.session_id, len(request.shortlist_ids),
    )

    channel = contact.get("preferred_channel") or ("email" if contact.get("email") else "chat")
    message = (
        f"A {settings.brand.name} stylist will reach out by {channel} "
        f"during studio hours ({settings.brand.stylist_hours})."
    )
    if request.shortlist_ids:
        message += " They'll have your shortlist ready to review."
    return CollaboratorReply(message=message)


def get_handoffs() -> list[HandoffRecord]:
    return list(_handoffs)


def reset() -> None:
    """Clear queued hand-offs. Used by test fixtures for isolation."""
    _handoffs.clear()
