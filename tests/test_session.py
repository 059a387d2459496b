"""Tests for session state helpers."""

from datetime import datetime, timezone

from concierge.conversation.session import (
    add_to_shortlist,
    clear_shortlist,
    create_session,
    mark_csat_shown,
    record_intent,
    register_miss,
    remove_from_shortlist,
    reset_misses,
    should_offer_csat,
)
from concierge.schemas.filter_schema import Filters
from concierge.schemas.intent_schema import Intent, IntentContext
from concierge.schemas.session_schema import ProductRef

NOW = datetime(2026, 10, 12, 15, 30, tzinfo=timezone.utc)


class TestCreateSession:
    def test_defaults(self):
        state = create_session("sess-1", now=NOW)
        assert state.id == "sess-1"
        assert state.last_intent is None
        assert state.shortlist == ()
        assert state.has_shown_csat is False
        assert state.miss_count == 0
        assert state.last_active == NOW

    def test_generated_ids_are_unique(self):
        assert create_session().id != create_session().id

    def test_wire_payload_is_camel_case(self):
        payload = create_session("sess-1", now=NOW).to_payload()
        assert payload["hasShownCsat"] is False
        assert "lastIntent" not in payload


class TestRecordIntent:
    def test_stamps_intent_and_activity(self, session_state):
        later = datetime(2026, 10, 12, 16, 0, tzinfo=timezone.utc)
        state = record_intent(session_state, Intent.TRACK_ORDER, now=later)
        assert state.last_intent == Intent.TRACK_ORDER
        assert state.last_active == later

    def test_clarify_keeps_previous_intent(self, session_state):
        state = record_intent(session_state, Intent.FIND_PRODUCT)
        state = record_intent(state, Intent.CLARIFY)
        assert state.last_intent == Intent.FIND_PRODUCT

    def test_inputs_are_not_mutated(self, session_state):
        record_intent(session_state, Intent.FINANCING)
        assert session_state.last_intent is None

    def test_context_from_session(self, session_state):
        state = session_state.model_copy(update={
            "last_intent": Intent.FIND_PRODUCT, "last_filters": Filters(category="ring"),
        })
        context = IntentContext.from_session(state)
        assert context.last_intent == Intent.FIND_PRODUCT
        assert context.last_filters == Filters(category="ring")


class TestCsatFlag:
    def test_offered_until_shown(self, session_state):
        assert should_offer_csat(session_state) is True
        shown = mark_csat_shown(session_state)
        assert should_offer_csat(shown) is False

    def test_rating_recorded(self, session_state):
        state = mark_csat_shown(session_state, "great")
        assert state.csat_rating == "great"

    def test_flag_never_resets(self, session_state):
        state = mark_csat_shown(mark_csat_shown(session_state))
        assert state.has_shown_csat is True


class TestMisses:
    def test_register_and_reset(self, session_state):
        state = register_miss(register_miss(session_state))
        assert state.miss_count == 2
        assert reset_misses(state).miss_count == 0

    def test_reset_without_misses_returns_same_state(self, session_state):
        assert reset_misses(session_state) is session_state


class TestShortlist:
    def test_add_from_mapping(self, session_state):
        state = add_to_shortlist(session_state, {"id": "prd-1", "title": "Ring", "price": 900})
        assert state.shortlist == (ProductRef(id="prd-1", title="Ring", price=900.0),)

    def test_add_is_deduplicated(self, session_state):
        ref = ProductRef(id="prd-1", title="Ring")
        state = add_to_shortlist(add_to_shortlist(session_state, ref), ref)
        assert len(state.shortlist) == 1

    def test_remove(self, session_state):
        state = add_to_shortlist(session_state, ProductRef(id="prd-1"))
        state = add_to_shortlist(state, ProductRef(id="prd-2"))
        state = remove_from_shortlist(state, "prd-1")
        assert [item.id for item in state.shortlist] == ["prd-2"]

    def test_clear(self, session_state):
        state = add_to_shortlist(session_state, ProductRef(id="prd-1"))
        assert clear_shortlist(state).shortlist == ()
