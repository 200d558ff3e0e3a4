from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

import numpy as np
import pandas as pd

from ..areas.geo import haversine_many
from ..bookings.models import ACTIVE_STATUSES, Booking
from ..events.store import record_event
from ..matching.models import (
    Coordinates,
    CvStatus,
    MatchCandidate,
    ProviderProfile,
    ServiceListing,
)
from ..matching.scoring import smart_score
from .config import DEFAULT_STORE_CONFIG, StoreConfig

logger = logging.getLogger(__name__)


class SlotUnavailable(Exception):
    """Raised by :meth:`DataStore.insert_booking` when the slot already has an active booking."""

    def __init__(self, existing: Booking) -> None:
        self.existing = existing
        super().__init__(
            f"Provider {existing.provider_id} already booked at {existing.date} {existing.time}"
        )


def _opt_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, float) and np.isnan(value):
        return None
    text = str(value).strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    return None


def _split_tags(value: Any, sep: str) -> list[str]:
    if not isinstance(value, str):
        return []
    return [t.strip().lower() for t in value.split(sep) if t.strip()]


def _opt_str(value: Any) -> str | None:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


_PROVIDER_DEFAULTS: dict[str, Any] = {
    "is_approved": False,
    "lat": np.nan,
    "lng": np.nan,
    "primary_area_slug": None,
    "service_radius_km": 25.0,
    "cv_status": CvStatus.not_provided.value,
    "cv_score": np.nan,
    "experience_years": 0,
    "skill_tags": "",
}

_SERVICE_DEFAULTS: dict[str, Any] = {
    "description": "",
    "currency": "NPR",
    "tags": "",
    "rating": 4.7,
    "booking_count": 0,
    "review_count": 0,
    "is_core": False,
    "is_approved": None,
    "created_at": None,
}


def _with_defaults(df: pd.DataFrame, defaults: dict[str, Any]) -> pd.DataFrame:
    df = df.copy()
    df["id"] = df["id"].astype(str)
    df = df.set_index("id")
    for col, default in defaults.items():
        if col not in df.columns:
            df[col] = default
    return df


def _prepare_providers(df: pd.DataFrame, config: StoreConfig) -> pd.DataFrame:
    df = _with_defaults(df, _PROVIDER_DEFAULTS)
    df["name"] = df["name"].fillna("").astype(str)
    df["is_approved"] = df["is_approved"].apply(_opt_bool).fillna(False).astype(bool)
    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(df["lng"], errors="coerce")
    df["primary_area_slug"] = df["primary_area_slug"].apply(_opt_str).astype(object)
    df["service_radius_km"] = pd.to_numeric(df["service_radius_km"], errors="coerce").fillna(25.0)
    df["cv_status"] = df["cv_status"].fillna(CvStatus.not_provided.value).astype(str)
    df["cv_score"] = pd.to_numeric(df["cv_score"], errors="coerce").clip(0.0, 1.0)
    df["experience_years"] = pd.to_numeric(df["experience_years"], errors="coerce").fillna(0).astype(int)
    df["skill_tags"] = df["skill_tags"].apply(lambda s: _split_tags(s, config.tag_separator))
    df["smart_score"] = np.nan
    df["booking_load"] = 0
    return df


def _prepare_services(df: pd.DataFrame, config: StoreConfig) -> pd.DataFrame:
    df = _with_defaults(df, _SERVICE_DEFAULTS)
    df["provider_id"] = df["provider_id"].fillna("").astype(str)
    df["name"] = df["name"].fillna("").astype(str)
    df["description"] = df["description"].fillna("").astype(str)
    df["category"] = df["category"].fillna("handyman").astype(str).str.lower()
    df["currency"] = df["currency"].fillna("NPR").astype(str)
    df["price"] = pd.to_numeric(df["price"], errors="coerce").fillna(0.0).clip(lower=0.0)
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce").fillna(4.7).clip(1.0, 5.0)
    for col in ("booking_count", "review_count"):
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).clip(lower=0).astype(int)
    df["is_core"] = df["is_core"].apply(_opt_bool).fillna(False).astype(bool)
    df["is_approved"] = df["is_approved"].apply(_opt_bool).astype(object)
    df["tags"] = df["tags"].apply(lambda s: _split_tags(s, config.tag_separator))
    df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce", utc=True)
    return df


def _provider_from_row(provider_id: str, row: pd.Series) -> ProviderProfile:
    coords = None
    if pd.notna(row["lat"]) and pd.notna(row["lng"]):
        coords = Coordinates(lat=float(row["lat"]), lng=float(row["lng"]))
    return ProviderProfile(
        id=str(provider_id),
        name=row["name"],
        is_approved=bool(row["is_approved"]),
        coordinates=coords,
        primary_area_slug=_opt_str(row["primary_area_slug"]),
        service_radius_km=float(row["service_radius_km"]),
        cv_status=row["cv_status"],
        cv_score=float(row["cv_score"]) if pd.notna(row["cv_score"]) else None,
        experience_years=int(row["experience_years"]),
        skill_tags=list(row["skill_tags"]),
        booking_load=int(row["booking_load"]),
        smart_score=float(row["smart_score"]) if pd.notna(row["smart_score"]) else None,
    )


def _listing_from_row(listing_id: str, row: pd.Series) -> ServiceListing:
    created = row["created_at"]
    return ServiceListing(
        id=str(listing_id),
        name=row["name"],
        description=row["description"],
        category=row["category"],
        price=float(row["price"]),
        currency=row["currency"],
        tags=list(row["tags"]),
        rating=float(row["rating"]),
        booking_count=int(row["booking_count"]),
        review_count=int(row["review_count"]),
        provider_id=row["provider_id"],
        is_core=bool(row["is_core"]),
        is_approved=_opt_bool(row["is_approved"]),
        created_at=created.to_pydatetime() if pd.notna(created) else None,
    )


class DataStore:
    def __init__(
        self,
        providers: pd.DataFrame,
        services: pd.DataFrame,
        config: StoreConfig = DEFAULT_STORE_CONFIG,
    ) -> None:
        self._config = config
        self._lock = threading.RLock()
        self._providers = _prepare_providers(providers, config)
        self._services = _prepare_services(services, config)
        self._bookings: dict[str, Booking] = {}
        for provider_id in self._providers.index:
            self.refresh_smart_score(provider_id)

    @classmethod
    def from_csv(cls, config: StoreConfig = DEFAULT_STORE_CONFIG) -> "DataStore":
        providers = pd.read_csv(config.providers_path)
        services = pd.read_csv(config.services_path)
        logger.info(
            "Loaded %d providers and %d listings from %s",
            len(providers), len(services), config.seed_dir,
        )
        return cls(providers, services, config)

    # ── Providers ───────────────────────────────────────────────────────

    def get_provider(self, provider_id: str) -> ProviderProfile | None:
        with self._lock:
            if provider_id not in self._providers.index:
                return None
            return _provider_from_row(provider_id, self._providers.loc[provider_id])

    def providers(self, approved_only: bool = False) -> list[ProviderProfile]:
        with self._lock:
            df = self._providers
            if approved_only:
                df = df.loc[df["is_approved"]]
            return [_provider_from_row(pid, row) for pid, row in df.iterrows()]

    def providers_near(
        self,
        origin: Coordinates | None,
        radius_km: float,
        *,
        exclude_id: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[tuple[ProviderProfile, float | None]]:
        """Approved providers within ``radius_km`` of ``origin``, nearest first.

        Without an origin no distance filter applies and distances are ``None``.
        ``category`` keeps providers with a listing in it and applies before ``limit``.
        """
        with self._lock:
            df = self._providers
            mask = df["is_approved"].copy()
            if exclude_id is not None:
                mask &= df.index != exclude_id
            if category:
                services = self._services
                offering = services.loc[services["category"] == category.lower(), "provider_id"]
                mask &= df.index.isin(offering)
            candidates = df.loc[mask]

            if origin is None:
                if limit:
                    candidates = candidates.head(limit)
                return [(_provider_from_row(pid, row), None) for pid, row in candidates.iterrows()]

            candidates = candidates.loc[candidates["lat"].notna() & candidates["lng"].notna()]
            distances = haversine_many(
                origin.lat, origin.lng,
                candidates["lat"].to_numpy(), candidates["lng"].to_numpy(),
            )
            candidates = candidates.assign(_distance=distances)
            candidates = candidates.loc[candidates["_distance"] <= radius_km]
            candidates = candidates.sort_values("_distance", kind="stable")
            if limit:
                candidates = candidates.head(limit)
            return [
                (_provider_from_row(pid, row), round(float(row["_distance"]), 2))
                for pid, row in candidates.iterrows()
            ]

    def refresh_smart_score(self, provider_id: str) -> float | None:
        """Recompute the cached smart score from cv score and total listing bookings."""
        with self._lock:
            if provider_id not in self._providers.index:
                return None
            services = self._services
            load = int(services.loc[services["provider_id"] == provider_id, "booking_count"].sum())
            cv = self._providers.at[provider_id, "cv_score"]
            cv_score = float(cv) if pd.notna(cv) else self._config.default_cv_score
            score = smart_score(cv_score, load)
            self._providers.at[provider_id, "smart_score"] = score
            self._providers.at[provider_id, "booking_load"] = load
            return score

    def update_provider_location(
        self,
        provider_id: str,
        coordinates: Coordinates,
        area_slug: str | None = None,
        service_radius_km: float | None = None,
    ) -> ProviderProfile | None:
        with self._lock:
            if provider_id not in self._providers.index:
                return None
            self._providers.at[provider_id, "lat"] = coordinates.lat
            self._providers.at[provider_id, "lng"] = coordinates.lng
            if area_slug:
                self._providers.at[provider_id, "primary_area_slug"] = area_slug
            if service_radius_km is not None:
                self._providers.at[provider_id, "service_radius_km"] = max(5.0, min(100.0, service_radius_km))
            self.refresh_smart_score(provider_id)
            provider = self.get_provider(provider_id)
        record_event("provider-updated", {
            "provider_id": provider_id,
            "field": "location",
            "smart_score": provider.smart_score,
        })
        return provider

    def record_cv_evaluation(
        self,
        provider_id: str,
        cv_score: float,
        cv_status: CvStatus | None = None,
        experience_years: int | None = None,
    ) -> ProviderProfile | None:
        with self._lock:
            if provider_id not in self._providers.index:
                return None
            self._providers.at[provider_id, "cv_score"] = max(0.0, min(1.0, cv_score))
            if cv_status is not None:
                self._providers.at[provider_id, "cv_status"] = CvStatus(cv_status).value
            if experience_years is not None:
                self._providers.at[provider_id, "experience_years"] = int(experience_years)
            self.refresh_smart_score(provider_id)
            provider = self.get_provider(provider_id)
        record_event("provider-updated", {
            "provider_id": provider_id,
            "field": "cv",
            "smart_score": provider.smart_score,
        })
        return provider

    # ── Listings ────────────────────────────────────────────────────────

    def get_listing(self, listing_id: str) -> ServiceListing | None:
        with self._lock:
            if listing_id not in self._services.index:
                return None
            return _listing_from_row(listing_id, self._services.loc[listing_id])

    def listings(self, category: str | None = None) -> list[ServiceListing]:
        with self._lock:
            df = self._services
            if category:
                df = df.loc[df["category"] == category.lower()]
            return [_listing_from_row(sid, row) for sid, row in df.iterrows()]

    def listings_for_provider(self, provider_id: str, category: str | None = None) -> list[ServiceListing]:
        """A provider's listings, most booked first."""
        with self._lock:
            df = self._services
            mask = df["provider_id"] == provider_id
            if category:
                mask &= df["category"] == category.lower()
            df = df.loc[mask].sort_values("booking_count", ascending=False, kind="stable")
            return [_listing_from_row(sid, row) for sid, row in df.iterrows()]

    def candidates(self, category: str | None = None) -> list[MatchCandidate]:
        """Listings joined with their provider; listings without a known provider are skipped."""
        with self._lock:
            joined: list[MatchCandidate] = []
            for listing in self.listings(category):
                provider = self.get_provider(listing.provider_id)
                if provider is None:
                    continue
                joined.append(MatchCandidate(listing=listing, provider=provider))
            return joined

    def increment_booking_count(self, listing_id: str) -> None:
        with self._lock:
            if listing_id not in self._services.index:
                return
            self._services.at[listing_id, "booking_count"] += 1
            self.refresh_smart_score(self._services.at[listing_id, "provider_id"])

    # ── Bookings ────────────────────────────────────────────────────────

    def get_booking(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def bookings_for_user(self, user_id: str, limit: int | None = None) -> list[Booking]:
        """A user's bookings, newest first."""
        with self._lock:
            found = [b for b in self._bookings.values() if b.user_id == user_id]
        found.sort(key=lambda b: b.created_at, reverse=True)
        return found[:limit] if limit else found

    def active_booking_between(self, user_id: str, provider_id: str) -> Booking | None:
        with self._lock:
            for booking in self._bookings.values():
                if booking.user_id == user_id and booking.provider_id == provider_id and booking.is_active:
                    return booking
        return None

    def active_booking_for_slot(self, provider_id: str, date: str, time: str) -> Booking | None:
        with self._lock:
            for booking in self._bookings.values():
                if (
                    booking.provider_id == provider_id
                    and booking.date == date
                    and booking.time == time
                    and booking.is_active
                ):
                    return booking
        return None

    def busy_providers(self, provider_ids: Iterable[str], date: str, time: str) -> set[str]:
        wanted = set(provider_ids)
        with self._lock:
            return {
                b.provider_id for b in self._bookings.values()
                if b.provider_id in wanted and b.date == date and b.time == time
                and b.status in ACTIVE_STATUSES
            }

    def active_provider_ids(self, user_id: str) -> set[str]:
        with self._lock:
            return {
                b.provider_id for b in self._bookings.values()
                if b.user_id == user_id and b.is_active
            }

    def insert_booking(self, booking: Booking) -> Booking:
        """Store ``booking`` unless its provider slot is already actively booked."""
        with self._lock:
            existing = self.active_booking_for_slot(booking.provider_id, booking.date, booking.time)
            if existing is not None:
                raise SlotUnavailable(existing)
            self._bookings[booking.id] = booking
            return booking

    def save_booking(self, booking: Booking) -> Booking:
        with self._lock:
            self._bookings[booking.id] = booking
            return booking


_store: DataStore | None = None
_store_lock = threading.Lock()


def get_data_store() -> DataStore:
    """Return the in-memory store, loading the seed tables on first call."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = DataStore.from_csv()
    return _store
