"""Tests for intent scripts through the executor."""

import pytest

from concierge.schemas.backend_schema import Requester
from concierge.schemas.filter_schema import Filters
from concierge.schemas.intent_schema import Intent
from concierge.schemas.message_schema import MessageType, ModuleType
from concierge.schemas.session_schema import ProductRef
from concierge.scripts.executor import execute_intent
from concierge.tools import returns, stylist
from tests.conftest import message_types, modules, texts


class TestFindProduct:
    @pytest.mark.asyncio
    async def test_no_filters_shows_filter_form(self, session_state):
        result = await execute_intent(Intent.FIND_PRODUCT, session_state)
        assert message_types(result.messages) == ["assistant_text", "product-filter"]
        assert result.state.last_intent == Intent.FIND_PRODUCT
        assert result.error is None

    @pytest.mark.asyncio
    async def test_filter_form_prefilled_from_last_filters(self, session_state):
        state = session_state.model_copy(update={"last_filters": Filters(category="ring")})
        result = await execute_intent(Intent.FIND_PRODUCT, state)
        form = modules(result.messages, ModuleType.PRODUCT_FILTER)[0]
        assert form["filters"] == {"category": "ring"}

    @pytest.mark.asyncio
    async def test_search_returns_carousel(self, session_state):
        result = await execute_intent(
            Intent.FIND_PRODUCT, session_state, {"filters": {"category": "ring", "metal": "rose gold"}}
        )
        carousel = modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]
        assert [p["id"] for p in carousel["products"]] == ["prd-aurora-solitaire"]
        assert result.state.last_filters.metal == "14k_rose"

    @pytest.mark.asyncio
    async def test_ready_to_ship_is_forced(self, session_state):
        payload = {"action": "submit-product-filters", "filters": {"readyToShip": False}}
        result = await execute_intent(Intent.FIND_PRODUCT, session_state, payload)
        carousel = modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]
        assert carousel["products"]
        assert all(p["readyToShip"] for p in carousel["products"])
        assert carousel["filters"]["readyToShip"] is True
        assert result.state.last_filters.ready_to_ship is True

    @pytest.mark.asyncio
    async def test_made_to_order_never_leaks(self, session_state, backend):
        async def ignores_filters(query):
            from concierge.tools.products import _CATALOG
            return list(_CATALOG)

        leaky = backend.__class__(search_products=ignores_filters)
        result = await execute_intent(
            Intent.FIND_PRODUCT, session_state, {"filters": {"category": "ring"}}, backend=leaky
        )
        ids = [p["id"] for p in modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]["products"]]
        assert "prd-sapphire-custom" not in ids
        assert ids == ["prd-aurora-solitaire", "prd-halo-platinum", "prd-eclipse-band"]

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self, session_state):
        result = await execute_intent(Intent.FIND_PRODUCT, session_state, {"filters": {"priceMax": 10}})
        carousel = modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]
        assert carousel["products"] == []
        assert result.error is None
        assert "Nothing ready-to-ship" in texts(result.messages)[0]

    @pytest.mark.asyncio
    async def test_sort_and_cap(self, session_state):
        payload = {"action": "submit-product-filters", "filters": {}, "sortBy": "price_asc"}
        result = await execute_intent(Intent.FIND_PRODUCT, session_state, payload)
        products = modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]["products"]
        prices = [p["price"] for p in products]
        assert prices == sorted(prices)
        assert len(products) == 6

    @pytest.mark.asyncio
    async def test_unknown_sort_uses_default(self, session_state):
        payload = {"filters": {"category": "ring"}, "sortBy": "random"}
        result = await execute_intent(Intent.FIND_PRODUCT, session_state, payload)
        assert modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]["sortBy"] == "featured"

    @pytest.mark.asyncio
    async def test_carat_and_stone_filters(self, session_state):
        payload = {"filters": {"stone": "diamond", "caratMin": 1}}
        result = await execute_intent(Intent.FIND_PRODUCT, session_state, payload)
        ids = [p["id"] for p in modules(result.messages, ModuleType.PRODUCT_CAROUSEL)[0]["products"]]
        assert ids == ["prd-aurora-solitaire", "prd-halo-platinum", "prd-tennis-bracelet"]

    @pytest.mark.asyncio
    async def test_upstream_failure_apologizes(self, session_state, failing_backend):
        result = await execute_intent(
            Intent.FIND_PRODUCT, session_state, {"filters": {"category": "ring"}}, backend=failing_backend
        )
        assert result.error == "UPSTREAM_FAILURE"
        assert message_types(result.messages) == ["assistant_text", "escalation-form"]
        assert result.state.last_active >= session_state.last_active


class TestTrackOrder:
    @pytest.mark.asyncio
    async def test_no_credentials_shows_lookup(self, session_state):
        result = await execute_intent(Intent.TRACK_ORDER, session_state)
        assert message_types(result.messages) == ["assistant_text", "order-lookup"]

    @pytest.mark.asyncio
    async def test_email_and_postal_lookup(self, session_state):
        payload = {"email": "Ada@Example.com", "postalCode": "10001"}
        result = await execute_intent(Intent.TRACK_ORDER, session_state, payload)
        assert result.error is None
        assert message_types(result.messages) == ["assistant_text", "order_status", "csat_bar"]
        status = next(m for m in result.messages if m.type == MessageType.ORDER_STATUS)
        assert status.payload["reference"] == "GG-123456"
        current = [e["label"] for e in status.payload["entries"] if e["isCurrent"]]
        assert current == ["Quality check"]
        assert result.state.last_order_id == "GG-123456"
        assert result.state.has_shown_csat is True

    @pytest.mark.asyncio
    async def test_owner_can_use_order_number(self, session_state):
        payload = {"orderNumber": "gg-123456"}
        requester = Requester(email="ada@example.com")
        result = await execute_intent(Intent.TRACK_ORDER, session_state, payload, requester=requester)
        assert result.error is None
        assert result.state.last_order_id == "GG-123456"

    @pytest.mark.asyncio
    async def test_admin_can_see_any_order(self, session_state):
        result = await execute_intent(
            Intent.TRACK_ORDER, session_state, {"orderId": "GG-777777"}, requester=Requester(is_admin=True)
        )
        assert result.error is None

    @pytest.mark.asyncio
    async def test_other_customer_is_unauthorized(self, session_state):
        requester = Requester(email="ben@example.com")
        result = await execute_intent(
            Intent.TRACK_ORDER, session_state, {"orderId": "GG-123456"}, requester=requester
        )
        assert result.error == "UNAUTHORIZED"
        assert not any(m.type == MessageType.ORDER_STATUS for m in result.messages)
        assert "GG-123456" not in " ".join(texts(result.messages))
        assert message_types(result.messages) == ["assistant_text", "order-lookup"]
        assert result.state.last_order_id is None

    @pytest.mark.asyncio
    async def test_anonymous_order_number_is_unauthorized(self, session_state):
        result = await execute_intent(Intent.TRACK_ORDER, session_state, {"orderId": "GG-123456"})
        assert result.error == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_order_without_owner_fails_closed(self, session_state):
        result = await execute_intent(
            Intent.TRACK_ORDER, session_state, {"orderId": "GG-654321"}, requester=Requester(is_admin=True)
        )
        assert result.error == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_email_without_postal_is_invalid(self, session_state):
        result = await execute_intent(Intent.TRACK_ORDER, session_state, {"email": "ada@example.com"})
        assert result.error == "INVALID_REQUEST"
        assert message_types(result.messages) == ["assistant_text", "order-lookup"]

    @pytest.mark.asyncio
    async def test_csat_offered_once(self, session_state):
        payload = {"email": "ada@example.com", "postalCode": "10001"}
        first = await execute_intent(Intent.TRACK_ORDER, session_state, payload)
        second = await execute_intent(Intent.TRACK_ORDER, first.state, payload)
        assert "csat_bar" not in message_types(second.messages)


class TestReturnExchange:
    @pytest.mark.asyncio
    async def test_no_option_shows_choices(self, session_state):
        result = await execute_intent(Intent.RETURN_EXCHANGE, session_state)
        form = modules(result.messages, ModuleType.RETURN_OPTIONS)[0]
        assert [o["value"] for o in form["options"]] == ["resize", "return", "care"]

    @pytest.mark.asyncio
    async def test_submit_uses_last_order(self, session_state):
        state = session_state.model_copy(update={"last_order_id": "GG-123456"})
        result = await execute_intent(Intent.RETURN_EXCHANGE, state, {"option": "resize"})
        assert result.error is None
        assert "GG-123456" in texts(result.messages)[0]
        assert returns.get_cases()[0]["option"] == "resize"

    @pytest.mark.asyncio
    async def test_missing_order_asks_for_lookup(self, session_state):
        result = await execute_intent(Intent.RETURN_EXCHANGE, session_state, {"option": "return"})
        assert result.error is None
        assert "order number first" in texts(result.messages)[0]
        assert returns.get_cases() == []

    @pytest.mark.asyncio
    async def test_payload_order_id_is_not_trusted(self, session_state):
        payload = {"orderId": "GG-777777", "option": "return"}
        requester = Requester(email="ada@example.com")
        result = await execute_intent(Intent.RETURN_EXCHANGE, session_state, payload, requester=requester)
        assert "order number first" in texts(result.messages)[0]
        assert returns.get_cases() == []

    @pytest.mark.asyncio
    async def test_payload_order_id_cannot_replace_session_order(self, session_state):
        state = session_state.model_copy(update={"last_order_id": "GG-123456"})
        payload = {"orderId": "GG-777777", "option": "return"}
        await execute_intent(Intent.RETURN_EXCHANGE, state, payload)
        assert [case["order_id"] for case in returns.get_cases()] == ["GG-123456"]

    @pytest.mark.asyncio
    async def test_return_after_lookup(self, session_state):
        lookup = {"email": "ada@example.com", "postalCode": "10001"}
        found = await execute_intent(Intent.TRACK_ORDER, session_state, lookup)
        result = await execute_intent(Intent.RETURN_EXCHANGE, found.state, {"option": "care"})
        assert result.error is None
        assert returns.get_cases()[0]["order_id"] == "GG-123456"

    @pytest.mark.asyncio
    async def test_unknown_option_is_invalid(self, session_state):
        state = session_state.model_copy(update={"last_order_id": "GG-123456"})
        result = await execute_intent(Intent.RETURN_EXCHANGE, state, {"option": "melt it down"})
        assert result.error == "INVALID_REQUEST"
        assert message_types(result.messages) == ["assistant_text", "return-options"]

    @pytest.mark.asyncio
    async def test_unknown_order_is_upstream_failure(self, session_state):
        state = session_state.model_copy(update={"last_order_id": "GG-000001"})
        result = await execute_intent(Intent.RETURN_EXCHANGE, state, {"option": "return"})
        assert result.error == "UPSTREAM_FAILURE"
        assert message_types(result.messages) == ["assistant_text", "escalation-form"]

    @pytest.mark.asyncio
    async def test_backend_failure(self, session_state, failing_backend):
        state = session_state.model_copy(update={"last_order_id": "GG-123456"})
        result = await execute_intent(Intent.RETURN_EXCHANGE, state, {"option": "care"}, backend=failing_backend)
        assert result.error == "UPSTREAM_FAILURE"


class TestStylistContact:
    @pytest.mark.asyncio
    async def test_shows_escalation_form(self, session_state):
        state = session_state.model_copy(update={"shortlist": (ProductRef(id="prd-pearl-drop"),)})
        result = await execute_intent(Intent.STYLIST_CONTACT, state)
        form = modules(result.messages, ModuleType.ESCALATION_FORM)[0]
        assert form["shortlistIds"] == ["prd-pearl-drop"]

    @pytest.mark.asyncio
    async def test_submit_queues_handoff_with_shortlist(self, session_state):
        state = session_state.model_copy(update={"shortlist": (ProductRef(id="prd-pearl-drop"),)})
        payload = {"action": "submit-escalation", "name": "Ada", "email": "ada@example.com"}
        result = await execute_intent(Intent.STYLIST_CONTACT, state, payload)
        assert result.error is None
        handoff = stylist.get_handoffs()[0]
        assert handoff["session_id"] == "sess-test"
        assert handoff["shortlist_ids"] == ["prd-pearl-drop"]
        assert "by email" in texts(result.messages)[0]


class TestInfoScripts:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("intent,needle", [
        (Intent.CARE_WARRANTY, "warranty"),
        (Intent.FINANCING, "Affirm"),
        (Intent.SIZING_REPAIRS, "Resizing"),
    ])
    async def test_static_guidance(self, session_state, intent, needle):
        result = await execute_intent(intent, session_state)
        assert message_types(result.messages) == ["assistant_text"]
        assert needle in result.messages[0].payload
        assert result.state.last_intent == intent


class TestCsat:
    @pytest.mark.asyncio
    async def test_bar_shown_once(self, session_state):
        first = await execute_intent(Intent.CSAT, session_state)
        assert message_types(first.messages) == ["csat_bar"]
        second = await execute_intent(Intent.CSAT, first.state)
        assert message_types(second.messages) == ["assistant_text"]

    @pytest.mark.asyncio
    async def test_happy_rating(self, session_state):
        result = await execute_intent(Intent.CSAT, session_state, {"rating": "great"})
        assert message_types(result.messages) == ["assistant_text"]
        assert result.state.has_shown_csat is True
        assert result.state.csat_rating == "great"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", ["needs_follow_up", "poor", "bad", 1, "2"])
    async def test_unhappy_rating_chains_escalation(self, session_state, rating):
        result = await execute_intent(Intent.CSAT, session_state, {"rating": rating})
        assert message_types(result.messages) == ["assistant_text", "escalation-form"]


class TestClarify:
    @pytest.mark.asyncio
    async def test_intent_chooser(self, session_state):
        result = await execute_intent(Intent.CLARIFY, session_state)
        chooser = modules(result.messages, ModuleType.INTENT_CHOOSER)[0]
        assert chooser["emphasizeHuman"] is False
        assert chooser["options"][0]["intent"] == "find_product"
        assert result.state.last_intent is None

    @pytest.mark.asyncio
    async def test_emphasize_human_puts_stylist_first(self, session_state):
        result = await execute_intent(Intent.CLARIFY, session_state, {"emphasizeHuman": True})
        chooser = modules(result.messages, ModuleType.INTENT_CHOOSER)[0]
        assert chooser["options"][0]["intent"] == "stylist_contact"

    @pytest.mark.asyncio
    async def test_unknown_intent_falls_back_to_clarify(self, session_state, caplog):
        result = await execute_intent("teleport", session_state)
        assert message_types(result.messages) == ["assistant_text", "intent-chooser"]
        assert "Unknown intent" in caplog.text


class TestUnexpectedErrors:
    @pytest.mark.asyncio
    async def test_crash_becomes_apology(self, session_state, backend):
        async def crash(query):
            raise RuntimeError("boom")

        result = await execute_intent(
            Intent.FIND_PRODUCT, session_state, {"filters": {"category": "ring"}},
            backend=backend.__class__(search_products=crash),
        )
        assert result.error == "UPSTREAM_FAILURE"
        assert message_types(result.messages) == ["assistant_text", "escalation-form"]
        assert result.state.last_intent is None
