# io/overlap_file.py
import csv
from collections.abc import Iterable
from pathlib import Path

from subcatch_pop.domain.outcomes import AssignmentOutcome, Overlapping

OVERLAP_HEADER = "Subcatchment_ID"


def overlap_ids(outcomes: Iterable[AssignmentOutcome]) -> list[str]:
    """Distinct polygon ids seen in any overlap, in first-seen order."""
    seen: dict[str, None] = {}
    for o in outcomes:
        if isinstance(o, Overlapping):
            for pid in o.polygon_ids:
                seen.setdefault(pid, None)
    return list(seen)


def write_overlap_file(path: str | Path, outcomes: Iterable[AssignmentOutcome]) -> Path:
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow([OVERLAP_HEADER])
        for pid in overlap_ids(outcomes):
            w.writerow([pid])
    return path


def read_overlap_file(path: str | Path) -> list[str]:
    """Read a listing written by ``write_overlap_file`` back into its ids (for checks and downstream tools)."""
    with Path(path).open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    if not rows or rows[0] != [OVERLAP_HEADER]:
        raise ValueError(f"{path} is not an overlap listing")
    return [r[0] for r in rows[1:] if r]
