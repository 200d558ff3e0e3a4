from __future__ import annotations

from fastapi.testclient import TestClient

from localsewa.app import app
from localsewa.events.aggregator import summarize_events
from localsewa.events.store import clear_events, get_events, record_event

client = TestClient(app)


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_record_and_filter_events():
    clear_events()
    record_event("booking-created", {"provider_id": "p-ram"})
    record_event("provider-updated", {"provider_id": "p-ram"})
    assert len(get_events()) == 2
    assert [e["payload"] for e in get_events("booking-created")] == [{"provider_id": "p-ram"}]
    assert get_events("nothing") == []


def test_summary_empty():
    summary = summarize_events([])
    assert summary["total_events"] == 0
    assert summary["conflicts"]["with_alternatives_rate"] == 0.0


def test_summary_counts():
    events = [
        {"type": "booking-created", "timestamp": 1.0, "payload": {"provider_id": "p-ram"}},
        {"type": "booking-created", "timestamp": 2.0, "payload": {"provider_id": "p-ram"}},
        {"type": "booking-created", "timestamp": 3.0, "payload": {"provider_id": "p-hari"}},
        {"type": "booking-status", "timestamp": 4.0, "payload": {"from": "pending", "to": "confirmed"}},
        {"type": "booking-conflict", "timestamp": 5.0, "payload": {"conflict_kind": "slot_taken", "alternatives": 3}},
        {"type": "booking-conflict", "timestamp": 6.0, "payload": {"conflict_kind": "slot_taken", "alternatives": 0}},
    ]
    summary = summarize_events(events)
    assert summary["bookings_created"] == 3
    assert summary["top_providers"][0] == {"provider_id": "p-ram", "count": 2}
    assert summary["status_transitions"] == {"pending->confirmed": 1}
    assert summary["conflicts"]["by_kind"] == {"slot_taken": 2}
    assert summary["conflicts"]["with_alternatives_rate"] == 50.0


def test_events_endpoint_returns_empty_initially():
    clear_events()
    _login_admin(client)
    resp = client.get("/events")
    assert resp.status_code == 200
    assert resp.json() == {"events": [], "total": 0}
