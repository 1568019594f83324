# subcatch_pop/domain/state.py
from dataclasses import dataclass, field

from subcatch_pop.app.diagnostics import Diagnostics
from subcatch_pop.domain.entities.geography import HouseholdPoint, Polygon
from subcatch_pop.domain.outcomes import AssignmentOutcome, Unmatched


@dataclass
class RunState:
    """Everything one run has accumulated so far; the report reads it even after an abort."""

    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    selected: int = 0
    points: list[HouseholdPoint] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)
    totals: dict[str, float] = field(default_factory=dict)
    outcomes: list[AssignmentOutcome] = field(default_factory=list)

    # (polygon_id, written value) in write order
    updated: list[tuple[str, float]] = field(default_factory=list)
    overlap_file: str | None = None
    committed: bool = False
    fatal: str | None = None

    @property
    def assigned_points(self) -> int:
        return sum(1 for o in self.outcomes if not isinstance(o, Unmatched))
