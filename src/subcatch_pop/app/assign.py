# subcatch_pop/app/assign.py
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from subcatch_pop.app.diagnostics import Diagnostics, PairIssue
from subcatch_pop.app.hooks import NoopHooks, RunHooks
from subcatch_pop.domain.entities.geography import HouseholdPoint, Polygon
from subcatch_pop.domain.outcomes import AssignmentOutcome, Overlapping, Unique, Unmatched
from subcatch_pop.domain.raycast import contains


@dataclass
class AssignmentResult:
    totals: dict[str, float] = field(default_factory=dict)  # only ids with >= 1 contribution
    outcomes: list[AssignmentOutcome] = field(default_factory=list)  # one per point, input order


class FirstVertexIndex:
    """
    Nearest polygon by straight-line distance from the point to each polygon's
    FIRST vertex. A cheap proxy kept for parity with earlier reports; it is
    not the distance to the polygon boundary.
    """

    def __init__(self, polygons: Sequence[Polygon]):
        self.ids: list[str] = []
        self.skipped: list[tuple[Polygon, Exception]] = []  # unusable first vertex
        anchors: list[tuple[float, float]] = []
        for p in polygons:
            try:
                x, y = p.first_vertex
                anchors.append((float(x), float(y)))
            except (IndexError, TypeError, ValueError) as exc:
                self.skipped.append((p, exc))
                continue
            self.ids.append(p.id)
        self.anchors = np.array(anchors, dtype=float).reshape(-1, 2)

    def nearest(self, x: float, y: float) -> tuple[str | None, float | None]:
        if not self.ids:
            return None, None
        dx = x - self.anchors[:, 0]
        dy = y - self.anchors[:, 1]
        d = np.sqrt(dx**2 + dy**2)
        k = int(np.argmin(d))  # first minimum wins ties
        return self.ids[k], float(d[k])


def nearest_by_first_vertex(
    point: HouseholdPoint, polygons: Sequence[Polygon]
) -> tuple[str | None, float | None]:
    return FirstVertexIndex(polygons).nearest(point.x, point.y)


def assign(
    points: Sequence[HouseholdPoint],
    polygons: Sequence[Polygon],
    *,
    diagnostics: Diagnostics | None = None,
    hooks: RunHooks | None = None,
) -> AssignmentResult:
    """
    Test every point against every polygon (no early exit) and accumulate weights.

    0 matches  -> Unmatched, with the first-vertex nearest polygon for diagnostics
    1 match    -> Unique, full weight to that polygon
    >= 2       -> Overlapping, full weight to EACH matched polygon (never split)

    A failing containment test is recorded as a PairIssue and that polygon is
    left out of the point's match set; the pass continues. A polygon whose
    first vertex cannot be read is reported once and left out of the nearest
    lookup.
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    hooks = hooks or NoopHooks()
    index = FirstVertexIndex(polygons)
    for poly, exc in index.skipped:
        hooks.diagnostic(
            diagnostics.add(
                PairIssue(
                    context=f"subcatchment {poly.id}",
                    message=f"Subcatchment first vertex unusable (sub_id: {poly.id}): {exc}",
                    point_wkt="",
                    polygon_id=poly.id,
                )
            )
        )
    result = AssignmentResult()

    for i, pt in enumerate(points):
        matches: list[str] = []
        for poly in polygons:
            try:
                if contains(pt, poly.ring):
                    matches.append(poly.id)
            except Exception as exc:
                entry = diagnostics.add(
                    PairIssue(
                        context=f"{pt.source_id} x subcatchment {poly.id}",
                        message=f"Subcatchment ray-casting test error (sub_id: {poly.id}): {exc}",
                        point_wkt=pt.wkt,
                        polygon_id=poly.id,
                    )
                )
                hooks.diagnostic(entry)

        if not matches:
            nearest_id, dist = index.nearest(pt.x, pt.y)
            outcome: AssignmentOutcome = Unmatched(pt, nearest_id, dist)
        elif len(matches) == 1:
            outcome = Unique(pt, matches[0])
        else:
            outcome = Overlapping(pt, tuple(matches))

        for pid in matches:
            result.totals[pid] = result.totals.get(pid, 0.0) + pt.weight
        result.outcomes.append(outcome)
        hooks.outcome(i, outcome)

    return result
