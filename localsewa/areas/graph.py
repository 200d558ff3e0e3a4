from __future__ import annotations

import heapq
import logging
import re
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union

from .catalog import AREA_CATALOG
from .geo import haversine_km

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Locality:
    slug: str
    name: str
    district: str
    lat: float
    lng: float
    tags: tuple[str, ...] = ()
    neighbors: tuple[tuple[str, float], ...] = field(default=(), repr=False)

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.lat, self.lng)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Locality":
        lat, lng = record["coordinates"]
        return cls(
            slug=record["slug"],
            name=record["name"],
            district=record["district"],
            lat=float(lat),
            lng=float(lng),
            tags=tuple(record.get("tags", ())),
            neighbors=tuple((to, float(km)) for to, km in record.get("neighbors", ())),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.name,
            "district": self.district,
            "coordinates": {"lat": self.lat, "lng": self.lng},
            "tags": list(self.tags),
            "neighbors": [to for to, _ in self.neighbors],
        }


@dataclass(frozen=True)
class Slug:
    value: str


@dataclass(frozen=True)
class DisplayName:
    value: str


AreaIdentifier = Union[str, Slug, DisplayName, Locality]


@dataclass(frozen=True)
class Route:
    distance_km: float
    path: tuple[Locality, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_km": self.distance_km,
            "path": [area.to_dict() for area in self.path],
        }


@dataclass(frozen=True)
class NearbyArea:
    locality: Locality
    distance_km: float


def _lower(text: str) -> str:
    return text.strip().lower()


def _compact(text: str) -> str:
    return _WHITESPACE_RE.sub("", text.lower())


class AreaGraph:
    """Immutable snapshot of the locality catalog and its road graph.

    Edges are undirected: a declared edge A->B with weight w also makes A
    reachable from B with weight w, unless B declares its own edge back to A,
    in which case each direction keeps the weight it was declared with.
    """

    def __init__(self, areas: Iterable[Locality]) -> None:
        ordered: dict[str, Locality] = {}
        for area in areas:
            if area.slug in ordered:
                raise ValueError(f"Duplicate locality slug: {area.slug}")
            ordered[area.slug] = area

        by_slug: dict[str, Locality] = {}
        by_name: dict[str, Locality] = {}
        for area in ordered.values():
            by_slug[_lower(area.slug)] = area
            by_name[_lower(area.name)] = area
            by_name.setdefault(_compact(area.name), area)

        adjacency: dict[str, dict[str, float]] = {slug: {} for slug in ordered}
        for area in ordered.values():
            for to, km in area.neighbors:
                if to not in adjacency or to == area.slug:
                    logger.debug("Skipping edge %s -> %s (unknown locality)", area.slug, to)
                    continue
                adjacency[area.slug][to] = km
        for area in ordered.values():
            for to, km in area.neighbors:
                if to in adjacency and to != area.slug:
                    adjacency[to].setdefault(area.slug, km)

        self._areas = MappingProxyType(ordered)
        self._by_slug = MappingProxyType(by_slug)
        self._by_name = MappingProxyType(by_name)
        self._adjacency = MappingProxyType(
            {slug: MappingProxyType(edges) for slug, edges in adjacency.items()}
        )

    @classmethod
    def from_catalog(cls, catalog: Iterable[Mapping[str, Any]] = AREA_CATALOG) -> "AreaGraph":
        return cls(Locality.from_record(record) for record in catalog)

    def __len__(self) -> int:
        return len(self._areas)

    @property
    def adjacency(self) -> Mapping[str, Mapping[str, float]]:
        return self._adjacency

    def areas(self) -> list[Locality]:
        return list(self._areas.values())

    def list_areas(self) -> list[dict[str, Any]]:
        return [area.to_dict() for area in self._areas.values()]

    # ── Identifier resolution ───────────────────────────────────────────

    def resolve(self, identifier: AreaIdentifier | None) -> Locality | None:
        """Return the locality for a slug or display name, or ``None``.

        Plain strings are tried as slug first, then display name, then the
        same two lookups with all whitespace removed.
        """
        if identifier is None:
            return None
        if isinstance(identifier, Locality):
            return self._areas.get(identifier.slug)
        if isinstance(identifier, Slug):
            return self._lookup(identifier.value, (self._by_slug,))
        if isinstance(identifier, DisplayName):
            return self._lookup(identifier.value, (self._by_name,))
        if not isinstance(identifier, str):
            return None
        return self._lookup(identifier, (self._by_slug, self._by_name))

    @staticmethod
    def _lookup(text: str, tables: tuple[Mapping[str, Locality], ...]) -> Locality | None:
        key = _lower(text)
        if not key:
            return None
        for table in tables:
            if key in table:
                return table[key]
        compact = _compact(key)
        for table in tables:
            if compact in table:
                return table[compact]
        return None

    # ── Routing ─────────────────────────────────────────────────────────

    def shortest_path(self, source: AreaIdentifier, target: AreaIdentifier) -> Route | None:
        """Dijkstra over the road graph.

        Nodes with equal tentative distance are expanded in slug order.
        Returns ``None`` when either end is unknown or the target is unreachable.
        """
        start = self.resolve(source)
        goal = self.resolve(target)
        if start is None or goal is None:
            return None
        if start.slug == goal.slug:
            return Route(distance_km=0.0, path=(start,))

        distances: dict[str, float] = {start.slug: 0.0}
        previous: dict[str, str] = {}
        visited: set[str] = set()
        heap: list[tuple[float, str]] = [(0.0, start.slug)]

        while heap:
            dist, node = heapq.heappop(heap)
            if node in visited:
                continue
            if node == goal.slug:
                break
            visited.add(node)
            for neighbor, weight in self._adjacency[node].items():
                if neighbor in visited:
                    continue
                alt = dist + weight
                if alt < distances.get(neighbor, float("inf")):
                    distances[neighbor] = alt
                    previous[neighbor] = node
                    heapq.heappush(heap, (alt, neighbor))

        if goal.slug not in distances:
            return None

        path: list[Locality] = []
        node: str | None = goal.slug
        while node is not None:
            path.append(self._areas[node])
            node = previous.get(node)
        path.reverse()

        return Route(distance_km=round(distances[goal.slug], 2), path=tuple(path))

    def nearby(self, origin: AreaIdentifier, radius_km: float = 3.0) -> list[NearbyArea]:
        """Localities within ``radius_km`` straight-line km of ``origin``, nearest first."""
        center = self.resolve(origin)
        if center is None:
            return []
        matches: list[NearbyArea] = []
        for area in self._areas.values():
            if area.slug == center.slug:
                continue
            distance = haversine_km(center.lat, center.lng, area.lat, area.lng)
            if distance <= radius_km:
                matches.append(NearbyArea(locality=area, distance_km=round(distance, 2)))
        matches.sort(key=lambda m: (m.distance_km, m.locality.slug))
        return matches


_graph: AreaGraph | None = None
_graph_lock = threading.Lock()


def get_area_graph() -> AreaGraph:
    """Return the process-wide graph snapshot, building it on first call."""
    global _graph
    if _graph is None:
        with _graph_lock:
            if _graph is None:
                _graph = AreaGraph.from_catalog()
                logger.info("Built area graph with %d localities", len(_graph))
    return _graph
