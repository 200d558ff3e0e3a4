from __future__ import annotations

import math
import re
from collections import Counter
from typing import Iterable, Mapping

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import ProviderProfile, ServiceListing

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")

TermVector = Counter


def tokenize(text: str | None, config: MatchingConfig = DEFAULT_MATCHING_CONFIG) -> list[str]:
    if not text:
        return []
    cleaned = _NON_ALNUM_RE.sub(" ", text.lower())
    return [tok for tok in cleaned.split() if tok not in config.stop_words]


def vectorize(tokens: Iterable[str]) -> TermVector:
    return Counter(tokens)


def cosine_similarity(vec_a: Mapping[str, float], vec_b: Mapping[str, float]) -> float:
    """Cosine of two sparse term vectors; 0.0 if either has zero magnitude."""
    if not vec_a or not vec_b:
        return 0.0
    dot = sum(value * vec_b[key] for key, value in vec_a.items() if key in vec_b)
    mag_a = math.sqrt(sum(v * v for v in vec_a.values()))
    mag_b = math.sqrt(sum(v * v for v in vec_b.values()))
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


def listing_text(listing: ServiceListing, provider: ProviderProfile | None = None) -> str:
    parts = [
        listing.name,
        listing.description,
        listing.category,
        " ".join(listing.tags),
    ]
    if provider is not None:
        parts.append(" ".join(provider.skill_tags))
    return " ".join(p for p in parts if p)


def build_listing_vector(
    listing: ServiceListing,
    provider: ProviderProfile | None = None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> TermVector:
    return vectorize(tokenize(listing_text(listing, provider), config))
