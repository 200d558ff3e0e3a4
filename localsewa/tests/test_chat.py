from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from localsewa.app import app
from localsewa.areas.graph import AreaGraph
from localsewa.chat.intent import (
    GREETING_REPLY,
    HELP_REPLY,
    THANKS_REPLY,
    answer,
    detect_area,
    detect_budget_ceiling,
    detect_category,
)
from localsewa.llm.config import LLMConfig
from localsewa.store.data_store import DataStore

client = TestClient(app)

NO_LLM = LLMConfig(api_key="", enabled=False)


def _login(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


@pytest.fixture(scope="module")
def graph() -> AreaGraph:
    return AreaGraph.from_catalog()


@pytest.fixture()
def store() -> DataStore:
    return DataStore.from_csv()


# ── Detection ────────────────────────────────────────────────────────────


class TestCategoryDetection:
    def test_category_name(self):
        assert detect_category("Need ELECTRICAL work") == "electrical"

    def test_synonym(self):
        assert detect_category("my toilet is clogged") == "plumbing"
        assert detect_category("security guard for my shop") == "security"
        assert detect_category("yoga session at home") == "wellness"

    def test_earlier_category_wins(self):
        # "leak" (plumbing) is checked before "fix" (handyman)
        assert detect_category("fix a leak") == "plumbing"

    def test_nothing_detected(self):
        assert detect_category("hmm not sure") is None


class TestBudgetDetection:
    def test_plain_amount(self):
        assert detect_budget_ceiling("plumber under 2000") == 2000

    def test_thousands_suffix(self):
        assert detect_budget_ceiling("cleaning below 2.5k please") == 2500

    def test_commas(self):
        assert detect_budget_ceiling("painter up to 10,000") == 10000

    def test_no_budget(self):
        assert detect_budget_ceiling("cheap plumber") is None


class TestAreaDetection:
    def test_display_name(self, graph):
        assert detect_area("electrician in New Baneshwor", graph).slug == "baneshwor"

    def test_slug(self, graph):
        assert detect_area("plumber near koteshwor", graph).slug == "koteshwor"

    def test_no_area(self, graph):
        assert detect_area("plumber please", graph) is None


# ── Answer ───────────────────────────────────────────────────────────────


class TestAnswer:
    def test_canned_replies(self, graph, store):
        assert answer("Hello", graph, store, NO_LLM).reply == GREETING_REPLY
        assert answer("what can you do", graph, store, NO_LLM).reply == HELP_REPLY
        assert answer("thanks", graph, store, NO_LLM).reply == THANKS_REPLY
        assert answer("hi", graph, store, NO_LLM).suggestions == []

    def test_plumber_in_area_under_budget(self, graph, store):
        response = answer("I need a plumber in Koteshwor under 2000", graph, store, NO_LLM)

        assert response.detected.category == "plumbing"
        assert response.detected.area_slug == "koteshwor"
        assert response.detected.budget_ceiling == 2000
        assert 0 < len(response.suggestions) <= 3
        assert all(s.price <= 2000 for s in response.suggestions)
        assert all(s.category == "plumbing" for s in response.suggestions)
        assert response.suggestions[0].provider_id == "p-ram"
        distances = [s.distance_km for s in response.suggestions if s.distance_km is not None]
        assert distances == sorted(distances)
        assert "Here are my top picks plumbing near Koteshwor" in response.reply

    def test_unqualified_providers_are_not_suggested(self, graph, store):
        response = answer("burst pipe fitting", graph, store, NO_LLM)
        assert "p-dipak" not in [s.provider_id for s in response.suggestions]

    def test_no_match_reply(self, graph, store):
        response = answer("quantum flux capacitor", graph, store, NO_LLM)
        assert response.suggestions == []
        assert "couldn't find" in response.reply

    def test_llm_reply_is_used_when_available(self, graph, store):
        with patch("localsewa.chat.intent.compose_reply", return_value="Try Ram Plumbing Works!") as mock_reply:
            response = answer("leaking tap in koteshwor", graph, store)
        assert response.reply == "Try Ram Plumbing Works!"
        message, context, suggestions, _ = mock_reply.call_args.args
        assert context["area"] == "Koteshwor"
        assert suggestions[0]["name"] == response.suggestions[0].name


# ── Endpoint ─────────────────────────────────────────────────────────────


def test_chat_requires_auth():
    c = TestClient(app)
    resp = c.post("/chat", json={"message": "plumber"})
    assert resp.status_code == 401


@patch("localsewa.chat.intent.compose_reply", return_value=None)
def test_chat_endpoint_returns_suggestions(mock_reply):
    _login(client)
    resp = client.post("/chat", json={"message": "leaking tap in Tinkune"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["detected"]["area_slug"] == "tinkune"
    assert body["suggestions"]
    assert body["reply"]


def test_chat_rejects_blank_message():
    _login(client)
    resp = client.post("/chat", json={"message": "   "})
    assert resp.status_code == 400


def test_chat_rejects_empty_message():
    _login(client)
    resp = client.post("/chat", json={"message": ""})
    assert resp.status_code == 422
