from __future__ import annotations

import logging

from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from ..matching.distance import DistanceResolver
from ..matching.models import SERVICE_CATEGORIES, Coordinates, LocationDescriptor
from ..matching.scoring import is_quality_provider, smart_score
from ..store.data_store import DataStore
from .models import NearestProvider, ProviderRecommendation

logger = logging.getLogger(__name__)

DEFAULT_NEAREST_RADIUS_KM = 10.0
MIN_NEAREST_RADIUS_KM = 5.0
MAX_NEAREST_RADIUS_KM = 120.0
NEAREST_LIMIT = 12
CATEGORY_PREFERENCE_BOOST = 0.15
DEFAULT_CV_SCORE = 0.4


def recommend_providers(
    store: DataStore,
    resolver: DistanceResolver,
    category: str | None = None,
    origin: LocationDescriptor | None = None,
    user_id: str | None = None,
    hide_booked: bool = False,
    limit: int = 10,
) -> list[ProviderRecommendation]:
    """One entry per provider offering ``category``, nearest first.

    Providers whose distance cannot be resolved sort after every known distance.
    """
    booked = store.active_provider_ids(user_id) if user_id else set()

    results: list[ProviderRecommendation] = []
    seen: set[str] = set()
    for candidate in store.candidates(category):
        provider = candidate.provider
        if provider.id in seen:
            continue
        seen.add(provider.id)

        is_booked = provider.id in booked
        if hide_booked and is_booked:
            continue

        distance = resolver.resolve(origin, provider.location()) if origin else None
        results.append(ProviderRecommendation(
            provider=provider,
            listing=candidate.listing,
            distance_km=distance,
            is_booked=is_booked,
        ))

    if origin is not None:
        results.sort(key=lambda r: (r.distance_km is None, r.distance_km or 0.0))
    return results[:limit]


def clamp_radius(radius_km: float | None) -> float:
    if radius_km is None:
        return DEFAULT_NEAREST_RADIUS_KM
    return max(MIN_NEAREST_RADIUS_KM, min(MAX_NEAREST_RADIUS_KM, radius_km))


def nearest_providers(
    store: DataStore,
    lat: float,
    lng: float,
    category: str | None = None,
    radius_km: float | None = None,
    only_reviewed: bool = False,
    cv_qualified: bool = False,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[NearestProvider]:
    """Approved providers around ``(lat, lng)`` with a category-aware smart score.

    A provider is kept only when the point lies inside both the requested
    radius and the provider's own service radius.
    """
    category = category.lower() if category and category.lower() in SERVICE_CATEGORIES else None
    radius = clamp_radius(radius_km)

    results: list[NearestProvider] = []
    for provider, distance in store.providers_near(Coordinates(lat=lat, lng=lng), radius):
        if distance is None or distance > (provider.service_radius_km or radius):
            continue
        if cv_qualified and not is_quality_provider(provider, config):
            continue

        services = store.listings_for_provider(provider.id, category)
        if only_reviewed:
            services = [s for s in services if s.review_count > 0]
        if category and not services:
            continue

        load = sum(s.booking_count for s in services)
        score = smart_score(
            provider.cv_score if provider.cv_score is not None else DEFAULT_CV_SCORE,
            load,
            preference_boost=CATEGORY_PREFERENCE_BOOST if category and services else 0.0,
            config=config,
        )
        results.append(NearestProvider(
            provider=provider,
            distance_km=distance,
            smart_score=score,
            services=services[:3],
        ))

    logger.debug("Nearest providers within %.0f km of (%.4f, %.4f): %d", radius, lat, lng, len(results))
    return results[:NEAREST_LIMIT]
