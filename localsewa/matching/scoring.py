from __future__ import annotations

import logging
import math
from typing import Sequence

from sklearn.feature_extraction import DictVectorizer
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import CvStatus, MatchCandidate, ProviderProfile, ServiceListing
from .text import build_listing_vector, tokenize, vectorize

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def smart_score(
    cv_score: float | None,
    booking_count: int,
    preference_boost: float = 0.0,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> float:
    """Blend credential score, booking popularity and a preference boost into [0, 1].

    The booking term is ``ln(1 + n) / ln(1 + saturation)`` capped at 1, so a few
    thousand bookings cannot outweigh the credential score.
    """
    cv = _clamp01(cv_score or 0.0)
    bookings = max(0, booking_count)
    booking_signal = (
        min(1.0, math.log1p(bookings) / math.log1p(config.booking_saturation))
        if bookings > 0
        else 0.0
    )
    boost = _clamp01(preference_boost)
    score = (
        config.cv_weight * cv
        + config.booking_weight * booking_signal
        + config.preference_weight * boost
    )
    return round(score, 3)


def is_quality_provider(
    provider: ProviderProfile | None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> bool:
    if provider is None:
        return False
    return (
        provider.cv_status == CvStatus.approved
        and (provider.cv_score or 0.0) >= config.quality_threshold
    )


def is_listed(listing: ServiceListing, provider: ProviderProfile | None) -> bool:
    """Core listings are always shown; vendor listings need an approved provider."""
    return listing.is_core or bool(provider and provider.is_approved)


def search_by_text(
    query: str,
    candidates: Sequence[MatchCandidate],
    *,
    only_reviewed: bool = False,
    require_quality_threshold: bool = False,
    limit: int | None = None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[MatchCandidate]:
    """Rank candidates by cosine similarity between the query and listing text.

    Eligibility filters run first; zero-similarity candidates are dropped.
    """
    if limit is None:
        limit = config.default_search_limit
    query_vector = vectorize(tokenize(query, config))
    if not query_vector:
        return []

    eligible = [
        c for c in candidates
        if is_listed(c.listing, c.provider)
        and (not only_reviewed or c.listing.review_count > 0)
        and (not require_quality_threshold or is_quality_provider(c.provider, config))
    ]
    if not eligible:
        return []

    listing_vectors = [build_listing_vector(c.listing, c.provider, config) for c in eligible]
    vectorizer = DictVectorizer()
    matrix = vectorizer.fit_transform([query_vector, *listing_vectors])
    scores = sk_cosine_similarity(matrix[0], matrix[1:]).ravel()

    scored = [
        c.model_copy(update={"score": float(score)})
        for c, score in zip(eligible, scores)
        if score > 0
    ]
    scored.sort(key=lambda c: c.score, reverse=True)
    logger.debug("Text search %r: %d eligible, %d matched", query, len(eligible), len(scored))
    return scored[:limit]
