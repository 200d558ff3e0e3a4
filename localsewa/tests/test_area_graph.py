from __future__ import annotations

import itertools
import threading
from unittest.mock import patch

import pytest

from localsewa.areas import graph as graph_module
from localsewa.areas.geo import haversine_km, haversine_many
from localsewa.areas.graph import AreaGraph, DisplayName, Locality, Slug, get_area_graph


def _area(slug, name, lat, lng, neighbors=()):
    return Locality(
        slug=slug, name=name, district="Test", lat=lat, lng=lng,
        tags=(), neighbors=tuple(neighbors),
    )


@pytest.fixture(scope="module")
def graph() -> AreaGraph:
    return AreaGraph.from_catalog()


# ── Shortest path ────────────────────────────────────────────────────────


def test_tinkune_to_balkumari_goes_through_koteshwor(graph):
    route = graph.shortest_path("tinkune", "balkumari")
    assert route is not None
    assert route.distance_km == 3.0
    assert [a.slug for a in route.path] == ["tinkune", "koteshwor", "balkumari"]


def test_same_source_and_target(graph):
    route = graph.shortest_path("thamel", "Thamel")
    assert route.distance_km == 0.0
    assert [a.slug for a in route.path] == ["thamel"]


def test_unknown_endpoint_returns_none(graph):
    assert graph.shortest_path("tinkune", "atlantis") is None
    assert graph.shortest_path("", "tinkune") is None


def test_symmetry(graph):
    slugs = ["tinkune", "thamel", "sundarijal", "imadol", "kalanki", "tokha"]
    for a, b in itertools.combinations(slugs, 2):
        assert graph.shortest_path(a, b).distance_km == graph.shortest_path(b, a).distance_km


def test_triangle_inequality(graph):
    slugs = ["tinkune", "balkumari", "lalitpur", "thamel", "chabahil", "kalimati"]
    for a, b, c in itertools.permutations(slugs, 3):
        ab = graph.shortest_path(a, b).distance_km
        ac = graph.shortest_path(a, c).distance_km
        cb = graph.shortest_path(c, b).distance_km
        # distances are rounded to 2 dp independently
        assert ab <= ac + cb + 0.02


def test_path_endpoints_are_ordered(graph):
    route = graph.shortest_path("sundarijal", "thamel")
    assert route.path[0].slug == "sundarijal"
    assert route.path[-1].slug == "thamel"


def test_unreachable_target_returns_none():
    g = AreaGraph([
        _area("a", "A", 27.70, 85.30, [("b", 1.0)]),
        _area("b", "B", 27.71, 85.30),
        _area("island", "Island", 27.72, 85.30),
    ])
    assert g.shortest_path("a", "island") is None


def test_ties_break_on_smallest_slug():
    g = AreaGraph([
        _area("start", "Start", 27.70, 85.30, [("left", 1.0), ("right", 1.0)]),
        _area("left", "Left", 27.71, 85.29, [("end", 1.0)]),
        _area("right", "Right", 27.71, 85.31, [("end", 1.0)]),
        _area("end", "End", 27.72, 85.30),
    ])
    route = g.shortest_path("start", "end")
    assert route.distance_km == 2.0
    assert [a.slug for a in route.path] == ["start", "left", "end"]


# ── Adjacency ────────────────────────────────────────────────────────────


def test_missing_reverse_edge_is_added(graph):
    # baluwatar declares baneshwor, baneshwor does not declare baluwatar
    assert graph.adjacency["baluwatar"]["baneshwor"] == 3.8
    assert graph.adjacency["baneshwor"]["baluwatar"] == 3.8


def test_explicit_edges_keep_their_own_weight():
    g = AreaGraph([
        _area("a", "A", 27.70, 85.30, [("b", 1.0)]),
        _area("b", "B", 27.71, 85.30, [("a", 2.5)]),
    ])
    assert g.adjacency["a"]["b"] == 1.0
    assert g.adjacency["b"]["a"] == 2.5


def test_adjacency_is_read_only(graph):
    with pytest.raises(TypeError):
        graph.adjacency["tinkune"]["koteshwor"] = 9.9


def test_duplicate_slug_rejected():
    with pytest.raises(ValueError):
        AreaGraph([_area("a", "A", 27.7, 85.3), _area("a", "Other", 27.8, 85.3)])


# ── Identifier resolution ────────────────────────────────────────────────


class TestResolve:
    def test_slug(self, graph):
        assert graph.resolve("baneshwor").slug == "baneshwor"

    def test_display_name_case_insensitive(self, graph):
        assert graph.resolve("new baneshwor").slug == "baneshwor"
        assert graph.resolve("  NEW BANESHWOR ").slug == "baneshwor"

    def test_whitespace_insensitive_name(self, graph):
        assert graph.resolve("NewBaneshwor").slug == "baneshwor"
        assert graph.resolve("durbar   marg").slug == "durbarmarg"

    def test_tagged_variants(self, graph):
        assert graph.resolve(Slug("lalitpur")).name == "Patan Durbar Square"
        assert graph.resolve(DisplayName("Patan Durbar Square")).slug == "lalitpur"
        # a slug is not looked up in the name table and vice versa
        assert graph.resolve(DisplayName("lalitpur")) is None

    def test_unknown_returns_none(self, graph):
        assert graph.resolve("atlantis") is None
        assert graph.resolve("") is None
        assert graph.resolve(None) is None


# ── Nearby ───────────────────────────────────────────────────────────────


def test_nearby_sorted_and_within_radius(graph):
    found = graph.nearby("koteshwor", 3.0)
    slugs = [n.locality.slug for n in found]
    assert "koteshwor" not in slugs
    assert "tinkune" in slugs and "balkumari" in slugs
    distances = [n.distance_km for n in found]
    assert distances == sorted(distances)
    assert all(d <= 3.0 for d in distances)


def test_nearby_ignores_graph_connectivity():
    g = AreaGraph([
        _area("a", "A", 27.7000, 85.3000),
        _area("b", "B", 27.7050, 85.3000),
    ])
    assert [n.locality.slug for n in g.nearby("a", 1.0)] == ["b"]


def test_nearby_unknown_origin(graph):
    assert graph.nearby("atlantis") == []


def test_list_areas(graph):
    areas = graph.list_areas()
    assert len(areas) == len(graph) == 31
    tinkune = next(a for a in areas if a["slug"] == "tinkune")
    assert "koteshwor" in tinkune["neighbors"]


# ── Geo helpers ──────────────────────────────────────────────────────────


def test_haversine_zero_and_known_distance():
    assert haversine_km(27.7, 85.3, 27.7, 85.3) == 0.0
    # one degree of latitude is ~111.2 km
    assert abs(haversine_km(27.0, 85.0, 28.0, 85.0) - 111.19) < 0.05


def test_haversine_many_matches_scalar():
    lats = [27.6889, 27.6675]
    lngs = [85.3495, 85.3423]
    many = haversine_many(27.6754, 85.3494, lats, lngs)
    for lat, lng, d in zip(lats, lngs, many):
        assert abs(haversine_km(27.6754, 85.3494, lat, lng) - d) < 1e-9


# ── Once-only construction ───────────────────────────────────────────────


def test_get_area_graph_builds_once():
    with patch.object(graph_module, "_graph", None):
        with patch.object(AreaGraph, "from_catalog", wraps=AreaGraph.from_catalog) as build:
            results = []
            threads = [threading.Thread(target=lambda: results.append(get_area_graph())) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
    assert build.call_count == 1
    assert all(r is results[0] for r in results)
