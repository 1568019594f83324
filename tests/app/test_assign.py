# tests/app/test_assign.py
import math

import pytest

from subcatch_pop.app.assign import assign, nearest_by_first_vertex
from subcatch_pop.app.diagnostics import Diagnostics, PairIssue
from subcatch_pop.domain.entities.geography import HouseholdPoint, Polygon
from subcatch_pop.domain.outcomes import (
    NOT_IN_ANY_SUBCATCHMENT,
    Overlapping,
    Unique,
    Unmatched,
    polygon_ids_of,
)


def _hp(x, y, w=1.0, sid="p"):
    return HouseholdPoint(x=x, y=y, weight=w, source_id=sid, wkt=f"POINT ({x} {y})")


def _square(pid, x0, y0, size=10.0):
    return Polygon(pid, ((x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)))


# --- A ring whose later vertices blow up when read, to force a containment fault
class _BadRing(tuple):
    def __getitem__(self, i):
        if i != 0:
            raise ValueError("corrupt vertex")
        return super().__getitem__(i)


def test_unique_match_gets_full_weight():
    res = assign([_hp(5, 5, 3.0)], [_square("A", 0, 0)])
    assert res.totals == {"A": 3.0}
    assert res.outcomes == [Unique(_hp(5, 5, 3.0), "A")]


def test_overlap_replicates_weight_to_every_polygon():
    a, b = _square("A", 0, 0), _square("B", 0, 0)
    res = assign([_hp(5, 5, 2.0)], [a, b])
    (o,) = res.outcomes
    assert isinstance(o, Overlapping)
    assert o.polygon_ids == ("A", "B")
    assert res.totals == {"A": 2.0, "B": 2.0}


def test_overlap_order_follows_polygon_order():
    a, b, c = _square("A", 0, 0), _square("B", 0, 0), _square("C", 0, 0)
    res = assign([_hp(5, 5)], [c, a, b])
    assert res.outcomes[0].polygon_ids == ("C", "A", "B")


def test_unmatched_reports_nearest_first_vertex():
    a = _square("A", 0, 0)  # first vertex (0, 0)
    b = _square("B", 50, 50)  # first vertex (50, 50)
    res = assign([_hp(100, 100, 4.0)], [a, b])
    (o,) = res.outcomes
    assert isinstance(o, Unmatched)
    assert o.nearest_polygon_id == "B"
    assert o.distance == pytest.approx(math.hypot(50, 50))
    assert o.reason == NOT_IN_ANY_SUBCATCHMENT
    assert res.totals == {}


def test_nearest_uses_first_vertex_not_boundary():
    # point is 1 unit from A's edge but A's first vertex is far away
    a = Polygon("A", ((0, 100), (0, 0), (10, 0), (10, 100)))
    b = Polygon("B", ((20, 20), (30, 20), (30, 30), (20, 30)))
    pid, dist = nearest_by_first_vertex(_hp(11, 20), [a, b])
    assert pid == "B"
    assert dist == pytest.approx(9.0)


def test_nearest_tie_goes_to_first_polygon():
    a = Polygon("A", ((0, 0), (1, 0), (1, 1)))
    b = Polygon("B", ((0, 0), (-1, 0), (-1, -1)))
    assert nearest_by_first_vertex(_hp(5, 0), [a, b])[0] == "A"


def test_unmatched_without_candidates():
    res = assign([_hp(1, 1)], [])
    assert res.outcomes == [Unmatched(_hp(1, 1), None, None)]


def test_totals_only_hold_polygons_with_contributions():
    polys = [_square("A", 0, 0), _square("B", 100, 100), _square("C", 0, 0)]
    res = assign([_hp(1, 1, 1.5), _hp(2, 2, 0.5)], polys)
    assert set(res.totals) == {"A", "C"}
    assert res.totals["A"] == pytest.approx(2.0)


def test_pair_fault_excludes_only_that_polygon():
    diags = Diagnostics()
    bad = Polygon("BAD", _BadRing(((0, 0), (10, 0), (10, 10))))
    res = assign([_hp(5, 5, 1.0, sid="row 2")], [bad, _square("A", 0, 0)], diagnostics=diags)
    assert res.outcomes[0] == Unique(_hp(5, 5, 1.0, sid="row 2"), "A")
    (entry,) = diags.of_type(PairIssue)
    assert entry.polygon_id == "BAD"
    assert "corrupt vertex" in entry.message
    assert entry.context == "row 2 x subcatchment BAD"


def test_weight_conservation_with_overlaps():
    polys = [_square("A", 0, 0), _square("B", 5, 5), _square("C", 40, 40)]
    pts = [_hp(1, 1, 2.0), _hp(7, 7, 3.0), _hp(12, 12, 1.25), _hp(99, 99, 8.0)]
    res = assign(pts, polys)
    assert len(res.outcomes) == len(pts)
    expected = 0.0
    for o in res.outcomes:
        if isinstance(o, Unique):
            expected += o.point.weight
        elif isinstance(o, Overlapping):
            expected += o.point.weight * len(o.polygon_ids)
    assert sum(res.totals.values()) == pytest.approx(expected)
    assert expected == pytest.approx(2.0 + 3.0 * 2 + 1.25)


def test_totals_match_outcome_references():
    polys = [_square("A", 0, 0), _square("B", 5, 0)]
    pts = [_hp(x + 0.5, 5, w) for x, w in zip(range(15), [1, 2, 3, 4, 5] * 3)]
    res = assign(pts, polys)
    for pid, total in res.totals.items():
        referenced = sum(o.point.weight for o in res.outcomes if pid in polygon_ids_of(o))
        assert total == pytest.approx(referenced)


def test_running_twice_is_identical():
    polys = [_square("A", 0, 0), _square("B", 5, 5)]
    pts = [_hp(1, 1, 2.0), _hp(7, 7, 3.0), _hp(50, 50, 1.0)]
    r1 = assign(pts, polys)
    r2 = assign(pts, polys)
    assert r1.totals == r2.totals
    assert r1.outcomes == r2.outcomes


def test_polygon_order_does_not_change_classification():
    polys = [_square("A", 0, 0), _square("B", 5, 5), _square("C", 20, 0)]
    pts = [_hp(1, 1), _hp(7, 7), _hp(25, 5), _hp(-5, -5)]
    fwd = assign(pts, polys)
    rev = assign(pts, list(reversed(polys)))
    assert [type(o) for o in fwd.outcomes] == [type(o) for o in rev.outcomes]
    assert [set(polygon_ids_of(o)) for o in fwd.outcomes] == [
        set(polygon_ids_of(o)) for o in rev.outcomes
    ]
    assert fwd.totals == pytest.approx(rev.totals)


def test_unusable_first_vertex_does_not_abort_the_pass():
    diags = Diagnostics()
    bad = Polygon("BAD", (("a", "b"), (10, 0), (10, 10)))
    empty = Polygon("EMPTY", ())
    pts = [_hp(5, 5, sid="row 2"), _hp(50, 50, sid="row 3")]
    res = assign(pts, [bad, empty, _square("A", 0, 0)], diagnostics=diags)

    assert res.totals == {"A": 1.0}
    assert res.outcomes[0] == Unique(pts[0], "A")
    # left out of the nearest lookup
    assert res.outcomes[1].nearest_polygon_id == "A"
    issues = diags.of_type(PairIssue)
    assert {e.polygon_id for e in issues} == {"BAD", "EMPTY"}
    assert any("first vertex unusable" in e.message for e in issues if e.polygon_id == "EMPTY")


def test_nearest_skips_polygons_without_usable_anchor():
    assert nearest_by_first_vertex(_hp(1, 1), [Polygon("E", ())]) == (None, None)
