from __future__ import annotations

from dataclasses import dataclass, field

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "to", "for", "with",
    "service", "services", "repair", "best", "top", "local",
    "near", "me", "in", "of", "at", "on", "home",
})


@dataclass(frozen=True)
class MatchingConfig:
    stop_words: frozenset[str] = STOP_WORDS
    # smart score blend
    cv_weight: float = 0.6
    booking_weight: float = 0.3
    preference_weight: float = 0.1
    booking_saturation: int = 100
    # minimum provider cv score for "quality" filtered searches
    quality_threshold: float = 0.55
    default_search_limit: int = 10
    # recommendation ranker
    ranker_weights: dict[str, float] = field(default_factory=lambda: {
        "rating": 0.30,
        "popularity": 0.25,
        "preference": 0.25,
        "recency": 0.10,
        "quality": 0.10,
    })
    popularity_fallback: float = 0.3
    preference_fallback: float = 0.4
    pinned_preference_fallback: float = 0.6
    neutral_quality: float = 0.5
    recency_window_days: int = 90
    history_size: int = 50
    recommendation_limit: int = 8


DEFAULT_MATCHING_CONFIG = MatchingConfig()
