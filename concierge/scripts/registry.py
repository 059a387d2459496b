"""
Script registry: the dispatch table from intent to script.

Scripts register a factory under their intent instead of the executor
importing each one. Adding an intent means adding a script module and a
line in ``_auto_register``.
"""

import logging
from functools import partial
from typing import Callable

from concierge.schemas.intent_schema import Intent
from concierge.scripts.base import Script

logger = logging.getLogger(__name__)

_SCRIPT_REGISTRY: dict[Intent, Callable[[], Script]] = {}


def register_script(intent: Intent, factory: Callable[[], Script]) -> None:
    """Register a script factory for an intent, replacing any previous one."""
    _SCRIPT_REGISTRY[intent] = factory
    logger.debug("Script registered: %s", intent.value)


def get_script(intent: Intent) -> Script:
    """Create the script registered for ``intent``.

    Raises:
        KeyError: If no script is registered for the intent.
    """
    if intent not in _SCRIPT_REGISTRY:
        registered = [i.value for i in _SCRIPT_REGISTRY]
        raise KeyError(f"No script registered for '{intent}'. Available: {registered}")
    return _SCRIPT_REGISTRY[intent]()


def get_registered_scripts() -> list[Intent]:
    return list(_SCRIPT_REGISTRY)


def _auto_register() -> None:
    """Register the built-in scripts. Called once at import time."""
    from concierge.scripts.clarify_script import ClarifyScript
    from concierge.scripts.csat_script import CsatScript
    from concierge.scripts.info_script import InfoScript
    from concierge.scripts.order_script import OrderScript
    from concierge.scripts.product_script import ProductScript
    from concierge.scripts.returns_script import ReturnsScript
    from concierge.scripts.stylist_script import StylistScript

    register_script(Intent.FIND_PRODUCT, ProductScript)
    register_script(Intent.TRACK_ORDER, OrderScript)
    register_script(Intent.RETURN_EXCHANGE, ReturnsScript)
    register_script(Intent.STYLIST_CONTACT, StylistScript)
    register_script(Intent.CSAT, CsatScript)
    register_script(Intent.CLARIFY, ClarifyScript)
    for intent in (Intent.CARE_WARRANTY, Intent.FINANCING, Intent.SIZING_REPAIRS):
        register_script(intent, partial(InfoScript, intent))


_auto_register()
