from __future__ import annotations

import logging
import re
from typing import Any

from ..areas.graph import AreaGraph, Locality
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import compose_reply
from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from ..matching.distance import DistanceResolver
from ..matching.models import SERVICE_CATEGORIES, LocationDescriptor, MatchCandidate
from ..matching.scoring import search_by_text
from ..store.data_store import DataStore
from .models import ChatResponse, ChatSuggestion, DetectedIntent

logger = logging.getLogger(__name__)

CHAT_SEARCH_LIMIT = 8
MAX_SUGGESTIONS = 3

CATEGORY_SYNONYMS: dict[str, list[str]] = {
    "plumbing": ["plumb", "pipe", "leak", "clog", "tap", "toilet"],
    "electrical": ["electric", "wiring", "light", "breaker", "inverter", "battery"],
    "cleaning": ["clean", "sweep", "sanitize", "maid"],
    "appliance": ["appliance", "fridge", "washing", "microwave", "tv"],
    "painting": ["paint", "wall", "brush", "repaint"],
    "moving": ["move", "relocate", "shift", "pack"],
    "handyman": ["fix", "repair", "install", "maintenance"],
    "gardening": ["garden", "lawn", "landscape", "plants"],
    "security": ["security", "guard", "cctv", "camera"],
    "wellness": ["spa", "massage", "therapy", "yoga"],
}

_GREETING_RE = re.compile(r"^(hi|hello|hey|good morning|good afternoon|good evening|namaste)$")
_HELP_RE = re.compile(r"^(help|what can you do|how does this work|what services)$")
_THANKS_RE = re.compile(r"^(thanks|thank you|thx|appreciate it)$")
_BUDGET_RE = re.compile(r"(under|below|less than|upto|up to)\s*(\d+(?:\.\d+)?)(k|m)?")

GREETING_REPLY = (
    "Hello! Welcome to LocalSewa. I can help you find plumbers, electricians, "
    "cleaners and other service providers around Kathmandu. Tell me what you need, "
    'for example "I need a plumber in Tinkune" or "electrician under 2000".'
)
HELP_REPLY = (
    "Tell me the service you need and, if you like, your area and budget. "
    "I will suggest verified, well-reviewed providers nearby. Try "
    '"Plumber in Tinkune under 2000" or "AC repair in Baneshwor".'
)
THANKS_REPLY = "You're very welcome! Let me know if you need anything else."


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_category(message: str) -> str | None:
    lower = message.lower()
    for category in SERVICE_CATEGORIES:
        if category in lower:
            return category
        if any(token in lower for token in CATEGORY_SYNONYMS.get(category, [])):
            return category
    return None


def detect_budget_ceiling(message: str) -> float | None:
    """Read "under 2000", "below 1.5k", "up to 2,500" style ceilings in NPR."""
    match = _BUDGET_RE.search(message.replace(",", "").lower())
    if not match:
        return None
    value = float(match.group(2))
    if match.group(3) == "k":
        value *= 1000
    elif match.group(3) == "m":
        value *= 1_000_000
    return value


def detect_area(message: str, graph: AreaGraph) -> Locality | None:
    lower = message.lower()
    for area in graph.areas():
        if area.name.lower() in lower or area.slug in lower:
            return area
    return None


# ---------------------------------------------------------------------------
# Reply
# ---------------------------------------------------------------------------


def _canned_reply(message: str) -> str | None:
    lower = message.lower().strip()
    if _GREETING_RE.match(lower):
        return GREETING_REPLY
    if _HELP_RE.match(lower):
        return HELP_REPLY
    if _THANKS_RE.match(lower):
        return THANKS_REPLY
    return None


def _to_suggestion(candidate: MatchCandidate) -> ChatSuggestion:
    listing = candidate.listing
    return ChatSuggestion(
        service_id=listing.id,
        name=listing.name,
        category=listing.category,
        price=listing.price,
        currency=listing.currency,
        rating=listing.rating,
        provider_id=candidate.provider.id,
        provider_name=candidate.provider.name,
        distance_km=candidate.distance_km,
        score=round(candidate.score, 3),
    )


def _template_reply(detected: DetectedIntent, suggestions: list[ChatSuggestion]) -> str:
    if not suggestions:
        what = f"{detected.category} services" if detected.category else "services"
        where = f" near {detected.area_name}" if detected.area_name else ""
        budget = f" within NPR {detected.budget_ceiling:,.0f}" if detected.budget_ceiling else ""
        return (
            f"I couldn't find {what}{where}{budget} right now. "
            "Would you like to try a different area or a broader search?"
        )

    context_parts: list[str] = []
    if detected.category:
        context_parts.append(detected.category)
    if detected.area_name:
        context_parts.append(f"near {detected.area_name}")
    if detected.budget_ceiling:
        context_parts.append(f"within your NPR {detected.budget_ceiling:,.0f} budget")
    lead = " ".join(context_parts) or "for you"

    lines = [f"Here are my top picks {lead}:"]
    for idx, s in enumerate(suggestions, start=1):
        distance = f", {s.distance_km} km away" if s.distance_km is not None else ""
        lines.append(
            f"{idx}. {s.name} by {s.provider_name} ({s.currency} {s.price:,.0f}, "
            f"rated {s.rating:.1f}{distance})"
        )
    return "\n".join(lines)


def answer(
    message: str,
    graph: AreaGraph,
    store: DataStore,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> ChatResponse:
    canned = _canned_reply(message)
    if canned is not None:
        return ChatResponse(reply=canned)

    category = detect_category(message)
    budget = detect_budget_ceiling(message)
    area = detect_area(message, graph)
    detected = DetectedIntent(
        category=category,
        budget_ceiling=budget,
        area_slug=area.slug if area else None,
        area_name=area.name if area else None,
    )

    query = message
    if category:
        query = f"{category} {query}"
    if area:
        query = f"{area.name} {query}"

    results = search_by_text(
        query,
        store.candidates(),
        only_reviewed=True,
        require_quality_threshold=True,
        limit=CHAT_SEARCH_LIMIT,
        config=config,
    )
    if budget:
        results = [c for c in results if c.listing.price <= budget]

    if area:
        resolver = DistanceResolver(graph)
        origin = LocationDescriptor(locality=area.slug)
        results = [
            c.model_copy(update={"distance_km": resolver.resolve(origin, c.provider.location())})
            for c in results
        ]
        results.sort(key=lambda c: (c.distance_km is None, c.distance_km or 0.0))

    suggestions = [_to_suggestion(c) for c in results[:MAX_SUGGESTIONS]]
    logger.debug("Chat %r -> %s, %d suggestions", message, detected.model_dump(), len(suggestions))

    context: dict[str, Any] = {"category": category, "area": detected.area_name, "budget": budget}
    reply = compose_reply(
        message,
        context,
        [
            {
                "name": s.name,
                "provider": s.provider_name,
                "price": s.price,
                "rating": s.rating,
                "distance_km": s.distance_km,
            }
            for s in suggestions
        ],
        llm_config,
    )
    return ChatResponse(
        reply=reply or _template_reply(detected, suggestions),
        suggestions=suggestions,
        detected=detected,
    )
