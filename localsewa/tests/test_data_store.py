from __future__ import annotations

import threading
from datetime import datetime, timezone

import pandas as pd
import pytest

from localsewa.bookings.models import Booking
from localsewa.events.store import clear_events, get_events
from localsewa.matching.models import Coordinates, CvStatus
from localsewa.matching.scoring import smart_score
from localsewa.recommendations.providers import nearest_providers
from localsewa.store.data_store import DataStore, SlotUnavailable

KOTESHWOR = Coordinates(lat=27.6754, lng=85.3494)


@pytest.fixture()
def store() -> DataStore:
    return DataStore.from_csv()


def _booking(bid, user_id="u-1", provider_id="p-ram", date="2099-02-01", time="10:00") -> Booking:
    return Booking(
        id=bid, user_id=user_id, provider_id=provider_id, service_id="s-ram-tap",
        date=date, time=time, confirmation_code="SJ-TEST1234",
        created_at=datetime.now(timezone.utc),
    )


def test_seed_loads_optional_fields(store):
    core = store.get_provider("p-sys")
    assert core.coordinates is None
    assert core.primary_area_slug is None
    kiran = store.get_provider("p-kiran")
    assert kiran.cv_score is None
    assert kiran.cv_status == CvStatus.not_provided
    listing = store.get_listing("s-ram-tap")
    assert listing.tags == ["tap", "leak", "bathroom"]
    assert listing.created_at.tzinfo is not None
    assert store.get_provider("nope") is None
    assert store.get_listing("nope") is None


def test_smart_scores_computed_at_load(store):
    ram = store.get_provider("p-ram")
    assert ram.booking_load == 64 + 18
    assert ram.smart_score == smart_score(0.82, 82)
    # unevaluated providers fall back to a cv score of 0.4
    kiran = store.get_provider("p-kiran")
    assert kiran.smart_score == smart_score(0.4, 12)


def test_missing_columns_get_defaults():
    providers = pd.DataFrame([{"id": "p-1", "name": "One", "is_approved": "true"}])
    services = pd.DataFrame([{"id": "s-1", "name": "S", "category": "Plumbing", "price": 100, "provider_id": "p-1"}])
    store = DataStore(providers, services)
    provider = store.get_provider("p-1")
    assert provider.is_approved is True
    assert provider.coordinates is None
    assert provider.service_radius_km == 25.0
    listing = store.get_listing("s-1")
    assert listing.category == "plumbing"
    assert listing.rating == 4.7
    assert listing.currency == "NPR"


def test_providers_near_sorted_and_filtered(store):
    found = store.providers_near(KOTESHWOR, 3.0)
    ids = [p.id for p, _ in found]
    assert ids[0] == "p-ram"
    assert "p-anita" not in ids  # not approved
    assert "p-sys" not in ids  # no coordinates
    distances = [d for _, d in found]
    assert distances == sorted(distances)
    assert all(d <= 3.0 for d in distances)


def test_providers_near_without_origin(store):
    found = store.providers_near(None, 3.0, exclude_id="p-sys", limit=4)
    assert [p.id for p, _ in found] == ["p-ram", "p-hari", "p-sita", "p-dipak"]
    assert all(d is None for _, d in found)


def test_listings_for_provider_most_booked_first(store):
    assert [s.id for s in store.listings_for_provider("p-ram")] == ["s-ram-tap", "s-ram-pipe"]
    assert [s.id for s in store.listings_for_provider("p-bikash", "plumbing")] == []


def test_insert_booking_is_exclusive_per_slot(store):
    results: list[str] = []

    def attempt(i):
        try:
            store.insert_booking(_booking(f"b-{i}", user_id=f"u-{i}"))
            results.append("ok")
        except SlotUnavailable:
            results.append("taken")

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count("ok") == 1
    assert results.count("taken") == 9


def test_busy_providers(store):
    store.insert_booking(_booking("b-1"))
    assert store.busy_providers(["p-ram", "p-hari"], "2099-02-01", "10:00") == {"p-ram"}
    assert store.busy_providers(["p-ram"], "2099-02-01", "11:00") == set()


def test_update_location_recomputes_and_emits(store):
    clear_events()
    updated = store.update_provider_location("p-hari", KOTESHWOR, area_slug="koteshwor", service_radius_km=500)
    assert updated.coordinates == KOTESHWOR
    assert updated.primary_area_slug == "koteshwor"
    assert updated.service_radius_km == 100
    assert [e["type"] for e in get_events()] == ["provider-updated"]
    assert store.update_provider_location("nope", KOTESHWOR) is None


def test_cv_evaluation_recomputes_smart_score(store):
    before = store.get_provider("p-dipak").smart_score
    updated = store.record_cv_evaluation("p-dipak", 0.9, CvStatus.approved, 7)
    assert updated.cv_status == CvStatus.approved
    assert updated.experience_years == 7
    assert updated.smart_score > before


def test_increment_booking_count(store):
    store.increment_booking_count("s-hari-drain")
    assert store.get_listing("s-hari-drain").booking_count == 31
    assert store.get_provider("p-hari").booking_load == 31


def test_zero_cv_score_is_kept_everywhere():
    providers = pd.DataFrame([
        {"id": "p-zero", "name": "Zero", "is_approved": "true", "lat": 27.70, "lng": 85.30, "cv_score": 0.0},
        {"id": "p-none", "name": "Unscored", "is_approved": "true", "lat": 27.70, "lng": 85.30},
    ])
    services = pd.DataFrame([
        {"id": "s-zero", "name": "Tap", "category": "plumbing", "price": 500, "provider_id": "p-zero", "booking_count": 9},
        {"id": "s-none", "name": "Tap", "category": "plumbing", "price": 500, "provider_id": "p-none", "booking_count": 9},
    ])
    store = DataStore(providers, services)
    assert store.get_provider("p-zero").smart_score == smart_score(0.0, 9)
    assert store.get_provider("p-none").smart_score == smart_score(0.4, 9)

    nearest = {n.provider.id: n.smart_score for n in nearest_providers(store, 27.70, 85.30)}
    assert nearest["p-zero"] == store.get_provider("p-zero").smart_score
    assert nearest["p-none"] == store.get_provider("p-none").smart_score
