# domain/outcomes.py
from dataclasses import dataclass

from subcatch_pop.domain.entities.geography import HouseholdPoint

NOT_IN_ANY_SUBCATCHMENT = "Not in any selected subcatchment"


# One outcome per parsed point; never mutated after the pass creates it.
@dataclass(frozen=True)
class Unmatched:
    point: HouseholdPoint
    nearest_polygon_id: str | None  # None when there were no candidate polygons
    distance: float | None  # straight line to the nearest polygon's first vertex
    reason: str = NOT_IN_ANY_SUBCATCHMENT


@dataclass(frozen=True)
class Unique:
    point: HouseholdPoint
    polygon_id: str


@dataclass(frozen=True)
class Overlapping:
    point: HouseholdPoint
    polygon_ids: tuple[str, ...]  # in polygon iteration order


AssignmentOutcome = Unmatched | Unique | Overlapping


def polygon_ids_of(outcome: AssignmentOutcome) -> tuple[str, ...]:
    if isinstance(outcome, Unique):
        return (outcome.polygon_id,)
    if isinstance(outcome, Overlapping):
        return outcome.polygon_ids
    return ()
