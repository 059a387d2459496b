"""
Product discovery script.

Without filters it opens the product filter form. With filters (or an
explicit form submit) it searches the catalog and returns a carousel.
The concierge only recommends ready-to-ship pieces: ``readyToShip`` is
forced on every search and results are re-checked locally, so a
collaborator that ignores a filter can't leak made-to-order items.
"""

from concierge.config import VALID_SORTS, settings
from concierge.conversation.normalizer import normalize_filters
from concierge.logging_context import get_session_logger
from concierge.prompts.guidance import (
    PRODUCT_EMPTY_COPY,
    PRODUCT_FILTER_PROMPT,
    PRODUCT_RESULTS_COPY,
    PRODUCT_SINGLE_RESULT_COPY,
)
from concierge.schemas.backend_schema import Product, ProductQuery
from concierge.schemas.filter_schema import Filters
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import ModuleType, WidgetMessage, module_message, text_message
from concierge.scripts.base import Script, ScriptContext, ScriptResult

logger = get_session_logger(__name__)

SUBMIT_ACTION = "submit-product-filters"


def matches_filters(product: Product, filters: Filters) -> bool:
    """Apply the structured filters to one catalog item."""
    if filters.ready_to_ship and not product.ready_to_ship:
        return False
    if filters.category and product.category != filters.category:
        return False
    if filters.metal and product.metal != filters.metal:
        return False
    if filters.price_min is not None and product.price < filters.price_min:
        return False
    if filters.price_max is not None and product.price > filters.price_max:
        return False
    if filters.carat_min is not None and (product.carat is None or product.carat < filters.carat_min):
        return False
    if filters.carat_max is not None and (product.carat is None or product.carat > filters.carat_max):
        return False
    if filters.stone and filters.stone.lower() not in (product.stone or "").lower():
        return False
    return True


def sort_products(products: list[Product], sort_by: str) -> list[Product]:
    if sort_by == "price_asc":
        return sorted(products, key=lambda p: p.price)
    if sort_by == "price_desc":
        return sorted(products, key=lambda p: p.price, reverse=True)
    return sorted(products, key=lambda p: p.featured_rank)


def _results_copy(count: int) -> str:
    if count == 0:
        return PRODUCT_EMPTY_COPY
    if count == 1:
        return PRODUCT_SINGLE_RESULT_COPY
    return PRODUCT_RESULTS_COPY.format(count=count)


class ProductScript(Script):
    """Ready-to-ship product recommendations."""

    intent = Intent.FIND_PRODUCT

    def prompt_messages(self, ctx: ScriptContext) -> list[WidgetMessage]:
        prefill = ctx.state.last_filters.to_payload() if ctx.state.last_filters else {}
        return [
            text_message(PRODUCT_FILTER_PROMPT, self.intent),
            module_message(
                ModuleType.PRODUCT_FILTER,
                intent=self.intent,
                filters=prefill,
                sortOptions=list(VALID_SORTS),
            ),
        ]

    async def run(self, ctx: ScriptContext) -> ScriptResult:
        filters = normalize_filters(ctx.payload.get("filters"))
        if ctx.action != SUBMIT_ACTION and filters.is_empty():
            logger.debug("No product filters yet; showing filter form")
            return self.prompt_messages(ctx), ctx.state

        filters = filters.model_copy(update={"ready_to_ship": True})
        sort_by = ctx.payload.get("sortBy")
        if sort_by not in VALID_SORTS:
            sort_by = settings.catalog.default_sort

        found = await ctx.backend.search_products(ProductQuery.from_filters(filters, sort_by))
        products = sort_products([p for p in found if matches_filters(p, filters)], sort_by)
        products = products[: settings.catalog.max_results]
        logger.info("Product search: %d of %d results kept", len(products), len(found))

        messages = [
            text_message(_results_copy(len(products)), self.intent),
            module_message(
                ModuleType.PRODUCT_CAROUSEL,
                intent=self.intent,
                products=[p.to_payload() for p in products],
                filters=filters.to_payload(),
                sortBy=sort_by,
            ),
        ]
        return messages, ctx.state.model_copy(update={"last_filters": filters})
