from __future__ import annotations

from collections import Counter
from typing import Any


def summarize_events(events: list[dict[str, Any]]) -> dict[str, Any]:
    by_type = Counter(e["type"] for e in events)

    bookings = [e["payload"] for e in events if e["type"] == "booking-created"]
    provider_counter: Counter[str] = Counter(b.get("provider_id", "unknown") for b in bookings)
    top_providers = [{"provider_id": p, "count": c} for p, c in provider_counter.most_common(10)]

    transitions: Counter[str] = Counter()
    for e in events:
        if e["type"] == "booking-status":
            transitions[f"{e['payload'].get('from')}->{e['payload'].get('to')}"] += 1

    conflicts = [e["payload"] for e in events if e["type"] == "booking-conflict"]
    conflict_kinds = Counter(c.get("conflict_kind", "unknown") for c in conflicts)
    with_alternatives = sum(1 for c in conflicts if c.get("alternatives", 0) > 0)

    return {
        "total_events": len(events),
        "by_type": dict(by_type),
        "bookings_created": len(bookings),
        "top_providers": top_providers,
        "status_transitions": dict(transitions),
        "conflicts": {
            "total": len(conflicts),
            "by_kind": dict(conflict_kinds),
            "with_alternatives_rate": (
                round(with_alternatives / len(conflicts) * 100, 1) if conflicts else 0.0
            ),
        },
    }
