# io/report.py
from subcatch_pop.app.diagnostics import (
    BoundaryIssue,
    FatalIssue,
    OutputIssue,
    PairIssue,
    RowIssue,
)
from subcatch_pop.domain.outcomes import Overlapping, Unmatched
from subcatch_pop.domain.state import RunState

BANNER = "=" * 40

NOTES = (
    "Points are tested against actual subcatchment boundaries with a ray-casting test.",
    "Points in overlapping subcatchments are assigned, at full weight, to every matching subcatchment.",
    "Check 'POINTS IN OVERLAPPING SUBCATCHMENTS' for points counted more than once.",
    "Use the closest subcatchment of unprocessed points to diagnose coordinate issues.",
)


def _error_line(e) -> str:
    if isinstance(e, PairIssue):
        return f"  Point: {e.point_wkt}, Error: {e.message}"
    if isinstance(e, RowIssue):
        return f"  Row: {e.row}, Error: {e.message}"
    if isinstance(e, OutputIssue):
        return f"  File: {e.path}, Error: {e.message}"
    return f"  {e.context}: {e.message}"


def format_report(state: RunState, *, verbose: bool = False) -> str:
    """
    Render whatever the run accumulated. Works on partial state, so it is
    safe to call after a fatal abort.
    """
    lines = ["", BANNER, "=== POPULATION ESTIMATION REPORT ===", BANNER]

    lines += ["", f"SUBCATCHMENTS UPDATED: {len(state.updated)}"]
    if not state.updated:
        lines.append("No subcatchments were updated.")
    for pid, value in state.updated:
        lines.append(f"  Subcatchment: {pid}, Estimated Population: {value}")

    invalid = state.diagnostics.of_type(BoundaryIssue)
    if invalid:
        lines += ["", f"SUBCATCHMENTS WITH INVALID GEOMETRY ({len(invalid)}):"]
        lines += [f"  Subcatchment: {e.polygon_id}, Reason: {e.message}" for e in invalid]

    unmatched = [o for o in state.outcomes if isinstance(o, Unmatched)]
    if unmatched:
        lines += ["", f"UNPROCESSED POINTS ({len(unmatched)}):"]
        groups: dict[str, list[Unmatched]] = {}
        for o in unmatched:
            groups.setdefault(o.reason, []).append(o)
        for reason, group in groups.items():
            lines.append(f"  - {len(group)} points: {reason}")
            if verbose:
                for o in group:
                    if o.nearest_polygon_id is not None:
                        lines.append(
                            f"    Point: {o.point.wkt}, Closest Subcatchment: "
                            f"{o.nearest_polygon_id}, Distance: {round(o.distance, 2)}m"
                        )

    overlaps = [o for o in state.outcomes if isinstance(o, Overlapping)]
    if overlaps:
        lines += ["", f"POINTS IN OVERLAPPING SUBCATCHMENTS ({len(overlaps)}):"]
        lines += [
            f"  Point: {o.point.wkt}, Subcatchments: [{', '.join(o.polygon_ids)}]" for o in overlaps
        ]

    errors = [
        e for e in state.diagnostics if isinstance(e, (RowIssue, PairIssue, OutputIssue))
    ]
    if errors:
        lines += ["", f"ERRORS ENCOUNTERED DURING PROCESSING ({len(errors)}):"]
        lines += [_error_line(e) for e in errors]

    if state.overlap_file:
        lines += ["", f"Overlapping subcatchments report saved to: {state.overlap_file}"]

    for e in state.diagnostics.of_type(FatalIssue):
        lines += ["", f"FATAL ERROR: {e.message}", "No population updates were committed."]

    lines += ["", "=== NOTES ==="]
    lines += [f"{i}. {n}" for i, n in enumerate(NOTES, start=1)]
    return "\n".join(lines) + "\n"
