from __future__ import annotations

from ..areas.geo import haversine_km
from ..areas.graph import AreaGraph, Locality
from .models import Coordinates, LocationDescriptor


class DistanceResolver:
    """Pick the best available distance between two location descriptors.

    Order of preference:
    1. both sides name a known locality -> road distance over the area graph;
    2. both sides carry raw coordinates -> haversine;
    3. one side has only a locality -> its centre coordinates vs the other's raw coordinates;
    4. otherwise ``None`` (distance unknown).
    """

    def __init__(self, graph: AreaGraph) -> None:
        self._graph = graph

    def _locality(self, side: LocationDescriptor) -> Locality | None:
        return self._graph.resolve(side.locality) if side.locality else None

    def resolve(
        self,
        a: LocationDescriptor | None,
        b: LocationDescriptor | None,
    ) -> float | None:
        if a is None or b is None:
            return None

        area_a = self._locality(a)
        area_b = self._locality(b)

        if area_a is not None and area_b is not None:
            route = self._graph.shortest_path(area_a, area_b)
            if route is not None:
                return route.distance_km

        if a.coordinates is not None and b.coordinates is not None:
            return _haversine(a.coordinates, b.coordinates)

        if area_a is not None and b.coordinates is not None:
            return _haversine(Coordinates(lat=area_a.lat, lng=area_a.lng), b.coordinates)

        if area_b is not None and a.coordinates is not None:
            return _haversine(a.coordinates, Coordinates(lat=area_b.lat, lng=area_b.lng))

        return None

    def origin_coordinates(self, side: LocationDescriptor | None) -> Coordinates | None:
        """Raw coordinates if given, else the centre of the named locality."""
        if side is None:
            return None
        if side.coordinates is not None:
            return side.coordinates
        area = self._locality(side)
        if area is None:
            return None
        return Coordinates(lat=area.lat, lng=area.lng)


def _haversine(a: Coordinates, b: Coordinates) -> float:
    return round(haversine_km(a.lat, a.lng, b.lat, b.lng), 2)
