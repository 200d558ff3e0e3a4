from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Sequence

from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from ..matching.models import MatchCandidate, ServiceListing
from ..matching.scoring import is_listed
from ..store.data_store import DataStore

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class RecommendationRanker:
    """Personal listing ranking.

    Each component is normalised to [0, 1] and blended with fixed weights that
    sum to one, so the total stays in [0, 1]::

        0.30 rating + 0.25 popularity + 0.25 preference + 0.10 recency + 0.10 quality
    """

    def __init__(self, config: MatchingConfig = DEFAULT_MATCHING_CONFIG) -> None:
        self._config = config
        self._weights = config.ranker_weights

    def rank(
        self,
        candidates: Sequence[MatchCandidate],
        history_categories: Iterable[str] = (),
        now: datetime | None = None,
        limit: int | None = None,
    ) -> list[MatchCandidate]:
        cfg = self._config
        limit = limit or cfg.recommendation_limit
        now = now or datetime.now(timezone.utc)

        preference_counts = Counter(history_categories)
        max_preference = max(preference_counts.values(), default=0)
        max_bookings = max((max(0, c.listing.booking_count) for c in candidates), default=0)

        ranked: list[MatchCandidate] = []
        for candidate in candidates:
            listing = candidate.listing
            components = {
                "rating": min(1.0, listing.rating / 5.0),
                "popularity": self._popularity(listing, max_bookings),
                "preference": self._preference(listing, preference_counts, max_preference),
                "recency": self._recency(listing, now),
                "quality": self._quality(candidate),
            }
            breakdown = {
                name: round(self._weights[name] * value, 3)
                for name, value in components.items()
            }
            total = sum(self._weights[name] * value for name, value in components.items())
            ranked.append(candidate.model_copy(update={
                "score": round(_clamp01(total), 3),
                "breakdown": breakdown,
            }))

        ranked.sort(key=lambda c: c.score, reverse=True)
        return ranked[:limit]

    def _popularity(self, listing: ServiceListing, max_bookings: int) -> float:
        if max_bookings <= 0:
            return self._config.popularity_fallback
        return math.log1p(max(0, listing.booking_count)) / math.log1p(max_bookings)

    def _preference(self, listing: ServiceListing, counts: Counter, max_count: int) -> float:
        if max_count > 0:
            return counts.get(listing.category, 0) / max_count
        if listing.is_core:
            return self._config.pinned_preference_fallback
        return self._config.preference_fallback

    def _recency(self, listing: ServiceListing, now: datetime) -> float:
        if listing.created_at is None:
            return 1.0
        created = listing.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        age_days = max(0.0, (now - created).total_seconds() / 86400.0)
        return max(0.0, 1.0 - age_days / self._config.recency_window_days)

    def _quality(self, candidate: MatchCandidate) -> float:
        provider = candidate.provider
        if provider.smart_score is not None:
            return _clamp01(provider.smart_score)
        if provider.cv_score is not None:
            return _clamp01(provider.cv_score)
        return self._config.neutral_quality


def booking_history_categories(
    store: DataStore,
    user_id: str,
    size: int = DEFAULT_MATCHING_CONFIG.history_size,
) -> list[str]:
    """Categories of the user's most recent bookings."""
    categories: list[str] = []
    for booking in store.bookings_for_user(user_id, limit=size):
        listing = store.get_listing(booking.service_id)
        if listing is not None:
            categories.append(listing.category)
    return categories


def recommend_for_user(
    store: DataStore,
    ranker: RecommendationRanker,
    user_id: str | None = None,
    limit: int | None = None,
) -> tuple[list[MatchCandidate], int, int]:
    """Rank every listed candidate for ``user_id``.

    Returns ``(ranked, total_candidates, preference_signals)``.
    """
    candidates = [c for c in store.candidates() if is_listed(c.listing, c.provider)]
    history = booking_history_categories(store, user_id) if user_id else []
    ranked = ranker.rank(candidates, history, limit=limit)
    logger.debug("Ranked %d candidates for %s with %d signals", len(candidates), user_id, len(history))
    return ranked, len(candidates), len(history)
