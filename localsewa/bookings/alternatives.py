from __future__ import annotations

import logging

from ..areas.graph import AreaGraph
from ..matching.distance import DistanceResolver
from ..matching.models import LocationDescriptor
from ..store.data_store import DataStore
from .config import DEFAULT_BOOKING_CONFIG, BookingConfig
from .models import Alternative

logger = logging.getLogger(__name__)


class AlternativeFinder:
    """Substitute providers for a rejected booking, searched over growing radii.

    The first radius tier that fills ``limit`` ends the search, so results are
    near but not necessarily the nearest across every tier.
    """

    def __init__(
        self,
        graph: AreaGraph,
        store: DataStore,
        config: BookingConfig = DEFAULT_BOOKING_CONFIG,
    ) -> None:
        self._store = store
        self._resolver = DistanceResolver(graph)
        self._config = config

    def find_alternatives(
        self,
        category: str,
        exclude_provider_id: str,
        date: str,
        time: str,
        origin: LocationDescriptor | None = None,
        limit: int = 3,
    ) -> list[Alternative]:
        if limit <= 0:
            return []

        origin_coords = self._resolver.origin_coordinates(origin)
        radii = (
            self._config.radii_with_origin_km
            if origin_coords is not None
            else self._config.radii_without_origin_km
        )

        found: list[Alternative] = []
        seen: set[str] = set()
        for radius in radii:
            nearby = self._store.providers_near(
                origin_coords,
                radius,
                exclude_id=exclude_provider_id,
                category=category,
                limit=limit * self._config.fetch_factor,
            )
            fresh = [(p, d) for p, d in nearby if p.id not in seen]
            busy = self._store.busy_providers((p.id for p, _ in fresh), date, time)

            for provider, distance in fresh:
                if provider.id in busy:
                    continue
                listings = self._store.listings_for_provider(provider.id, category)
                if not listings:
                    continue
                seen.add(provider.id)
                found.append(Alternative(listing=listings[0], provider=provider, distance_km=distance))
                if len(found) >= limit:
                    break

            logger.debug(
                "Alternatives for %s within %.0f km: %d of %d", category, radius, len(found), limit,
            )
            if len(found) >= limit:
                break

        return found[:limit]
