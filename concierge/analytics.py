"""In-memory analytics events for concierge turns.

Each event is logged and kept in a bounded buffer so dashboards and tests
can inspect what happened without a tracking backend.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

MAX_EVENTS = 500


@dataclass(frozen=True)
class AnalyticsEvent:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


_events: deque[AnalyticsEvent] = deque(maxlen=MAX_EVENTS)


def track_event(name: str, **properties: Any) -> AnalyticsEvent:
    """Record an event. ``None`` properties are dropped."""
    props = {k: v for k, v in properties.items() if v is not None}
    event = AnalyticsEvent(name=name, properties=props)
    _events.append(event)
    logger.info("event=%s %s", name, props)
    return event


def get_events(name: Optional[str] = None) -> list[AnalyticsEvent]:
    if name is None:
        return list(_events)
    return [e for e in _events if e.name == name]


def reset() -> None:
    """Clear recorded events. Used by test fixtures for isolation."""
    _events.clear()
