# subcatch_pop/app/run.py
import sys
from collections.abc import Mapping, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from subcatch_pop.app.assign import assign
from subcatch_pop.app.diagnostics import (
    BoundaryIssue,
    Diagnostics,
    FatalError,
    FatalIssue,
    OutputIssue,
    RowIssue,
)
from subcatch_pop.app.hooks import NoopHooks, RunHooks
from subcatch_pop.app.protocols import PolygonSource
from subcatch_pop.config.models import RunModel
from subcatch_pop.domain.entities.geography import Polygon
from subcatch_pop.domain.outcomes import Overlapping, Unmatched
from subcatch_pop.domain.parsing import GeometryError, polygon_from_boundary
from subcatch_pop.domain.state import RunState
from subcatch_pop.io.overlap_file import write_overlap_file
from subcatch_pop.io.points_csv import read_points
from subcatch_pop.io.recorder import JsonlSink, Recorder
from subcatch_pop.io.report import format_report
from subcatch_pop.io.run_logging import RunLogging
from subcatch_pop.runtime.source_factory import make_polygon_source


@dataclass
class RunResult:
    state: RunState
    report: str

    @property
    def totals(self) -> dict[str, float]:
        return self.state.totals

    @property
    def outcomes(self):
        return self.state.outcomes


def load_polygons(
    source: PolygonSource,
    unit_ids: Sequence[str],
    diagnostics: Diagnostics,
    hooks: RunHooks | None = None,
) -> list[Polygon]:
    """Read every selected boundary up front; bad ones are dropped with a BoundaryIssue."""
    hooks = hooks or NoopHooks()
    polygons: dict[str, Polygon] = {}
    for uid in unit_ids:
        if uid in polygons:
            reason = "duplicate subcatchment id"
        else:
            try:
                raw = source.boundary(uid)
            except Exception as exc:
                reason = f"Error processing geometry: {exc}"
            else:
                try:
                    polygons[uid] = polygon_from_boundary(uid, raw)
                    continue
                except GeometryError as exc:
                    reason = f"Invalid or empty boundary: {exc}"
        hooks.diagnostic(
            diagnostics.add(
                BoundaryIssue(context=f"subcatchment {uid}", message=reason, polygon_id=uid)
            )
        )
    return list(polygons.values())


def write_populations(
    source: PolygonSource,
    unit_ids: Sequence[str],
    totals: Mapping[str, float],
    *,
    field: str = "Population",
    decimals: int = 2,
) -> list[tuple[str, float]]:
    """One write per selected polygon that received weight, in selection order."""
    written: list[tuple[str, float]] = []
    done: set[str] = set()
    for uid in unit_ids:
        if uid in totals and uid not in done:
            value = round(totals[uid], decimals)
            source.write_field(uid, field, value)
            written.append((uid, value))
            done.add(uid)
    return written


def run_population(
    cfg: RunModel | Mapping,
    source: PolygonSource | None = None,
    *,
    use_logging: bool = True,
    hooks: RunHooks | None = None,
    out: TextIO | None = None,
) -> RunResult:
    """
    One all-or-nothing population run:
    read selection and points, then inside a single transaction read every
    boundary, assign points, write totals, save the overlap listing and commit.
    Any failure in there rolls the transaction back and raises FatalError.
    The report is written to ``out`` in every case.
    """
    # 0) Validate config
    model = cfg if isinstance(cfg, RunModel) else RunModel.model_validate(cfg)
    out = out or sys.stdout

    # 1) Logging & diagnostics
    if hooks is None:
        hooks = (
            RunLogging(
                run_id=model.run_id,
                level=model.log.level,
                debug=model.log.debug,
                sample_every=model.log.sample_every,
            )
            if use_logging
            else NoopHooks()
        )

    with ExitStack() as stack:
        state = RunState()
        points_csv = Path(model.input.points_csv)
        began = False

        try:
            if model.output.diagnostics_jsonl:
                fp = stack.enter_context(open(model.output.diagnostics_jsonl, "w", encoding="utf-8"))
                state.diagnostics.recorder = Recorder(JsonlSink(fp))

            # 2) Selection and points (nothing is open yet)
            if source is None:
                if model.source is None:
                    raise FatalError("No subcatchment source configured")
                source = make_polygon_source(model.source)
            unit_ids = list(source.selected_ids())
            state.selected = len(unit_ids)
            hooks.run_start(points_csv=points_csv, selected=state.selected)
            if not unit_ids:
                raise FatalError("No subcatchments selected")

            state.points = read_points(
                points_csv,
                state.diagnostics,
                wkt_columns=model.input.wkt_columns,
                weight_columns=model.input.weight_columns,
                hooks=hooks,
            )
            hooks.points_loaded(
                count=len(state.points), rejected=len(state.diagnostics.of_type(RowIssue))
            )

            # 3) Transaction: all reads, then the pass, then all writes
            source.transaction_begin()
            began = True
            state.polygons = load_polygons(source, unit_ids, state.diagnostics, hooks)
            hooks.polygons_loaded(valid=len(state.polygons), selected=state.selected)

            result = assign(state.points, state.polygons, diagnostics=state.diagnostics, hooks=hooks)
            state.totals, state.outcomes = result.totals, result.outcomes

            state.updated = write_populations(
                source,
                unit_ids,
                state.totals,
                field=model.output.population_field,
                decimals=model.output.decimals,
            )

            overlap_path = points_csv.parent / model.output.overlap_filename
            try:
                state.overlap_file = str(write_overlap_file(overlap_path, state.outcomes))
            except OSError as exc:
                hooks.diagnostic(
                    state.diagnostics.add(
                        OutputIssue(
                            context="overlap listing",
                            message=f"Error saving overlapping subcatchments file: {exc}",
                            path=str(overlap_path),
                        )
                    )
                )

            source.transaction_commit()
            began = False
            state.committed = True
            hooks.committed(updated=len(state.updated))
        except Exception as exc:
            if began:
                try:
                    source.transaction_rollback()
                except Exception as rb_exc:
                    hooks.error(rb_exc, phase="rollback")
                hooks.rolled_back(reason=str(exc))
            fatal = exc if isinstance(exc, FatalError) else FatalError(f"{type(exc).__name__}: {exc}")
            fatal.state = state
            state.fatal = str(fatal)
            state.updated = []  # nothing written survives a rollback
            state.diagnostics.add(FatalIssue(context="run", message=state.fatal))
            hooks.error(exc)
            if fatal is exc:
                raise
            raise fatal from exc
        finally:
            # 4) Report, unconditionally
            report = format_report(state, verbose=model.output.verbose_report)
            out.write(report)
            hooks.run_end(
                total_points=len(state.points),
                assigned=state.assigned_points,
                unmatched=sum(1 for o in state.outcomes if isinstance(o, Unmatched)),
                overlapping=sum(1 for o in state.outcomes if isinstance(o, Overlapping)),
                updated=len(state.updated),
                diagnostics=len(state.diagnostics),
                committed=state.committed,
            )

    return RunResult(state=state, report=report)
