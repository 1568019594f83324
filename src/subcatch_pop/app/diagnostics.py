# subcatch_pop/app/diagnostics.py
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from subcatch_pop.io.recorder import Recorder


class FatalError(RuntimeError):
    """Aborts the whole run; any open transaction is rolled back."""

    state = None  # the partial RunState, attached by run_population


# Base type for everything the pass notes without stopping
@dataclass
class DiagnosticEntry:
    context: str  # what the entry is scoped to, e.g. "row 7" or "subcatchment S12"
    message: str


@dataclass
class RowIssue(DiagnosticEntry):
    """Input row skipped (bad geometry, bad weight, no geometry column)."""

    row: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class BoundaryIssue(DiagnosticEntry):
    """Polygon dropped from the candidate set."""

    polygon_id: str


@dataclass
class PairIssue(DiagnosticEntry):
    """One point x polygon containment test failed; that pairing is excluded."""

    point_wkt: str
    polygon_id: str


@dataclass
class OutputIssue(DiagnosticEntry):
    """A side artifact could not be written; the run carries on."""

    path: str


@dataclass
class FatalIssue(DiagnosticEntry):
    """The run was aborted and rolled back."""


class Diagnostics:
    """Append-only, encounter-ordered log of diagnostic entries."""

    def __init__(self, recorder: Recorder | None = None):
        self._entries: list[DiagnosticEntry] = []
        self.recorder = recorder

    def add(self, entry: DiagnosticEntry) -> DiagnosticEntry:
        self._entries.append(entry)
        if self.recorder:
            self.recorder.emit(entry)
        return entry

    def of_type(self, kind: type[DiagnosticEntry]) -> list[DiagnosticEntry]:
        return [e for e in self._entries if isinstance(e, kind)]

    def __iter__(self) -> Iterator[DiagnosticEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
