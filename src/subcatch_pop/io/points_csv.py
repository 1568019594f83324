# io/points_csv.py
import csv
from collections.abc import Mapping, Sequence
from pathlib import Path

from subcatch_pop.app.diagnostics import Diagnostics, FatalError, RowIssue
from subcatch_pop.app.hooks import NoopHooks, RunHooks
from subcatch_pop.domain.entities.geography import HouseholdPoint
from subcatch_pop.domain.parsing import GeometryError, parse_household

WKT_COLUMNS = ("WKT", "wkt", "geometry")
WEIGHT_COLUMNS = ("oc", "OC")


def _first_present(row: Mapping[str, str | None], columns: Sequence[str]) -> str | None:
    for c in columns:
        if c in row and row[c] is not None:
            return row[c]
    return None


def read_points(
    path: str | Path,
    diagnostics: Diagnostics,
    *,
    wkt_columns: Sequence[str] = WKT_COLUMNS,
    weight_columns: Sequence[str] = WEIGHT_COLUMNS,
    hooks: RunHooks | None = None,
) -> list[HouseholdPoint]:
    """
    Read one household point per row. Geometry comes from the first present
    column of ``wkt_columns``, occupancy from the first of ``weight_columns``;
    other columns are ignored. Bad rows become RowIssue entries and are skipped.
    Only a missing, unreadable or empty file is fatal.
    """
    hooks = hooks or NoopHooks()
    path = Path(path)
    if not path.is_file():
        raise FatalError(f"Point CSV file not found at '{path}'")

    points: list[HouseholdPoint] = []
    seen_rows = 0
    try:
        with path.open(newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                line_no = reader.line_num  # physical line, header is line 1
                seen_rows += 1
                try:
                    wkt = _first_present(row, wkt_columns)
                    if wkt is None or not wkt.strip():
                        raise GeometryError(f"Missing WKT geometry for row {line_no}")
                    points.append(
                        parse_household(
                            wkt,
                            _first_present(row, weight_columns),
                            source_id=f"row {line_no}",
                        )
                    )
                except GeometryError as exc:
                    entry = diagnostics.add(
                        RowIssue(
                            context=f"row {line_no}",
                            message=f"Row processing error: {exc}",
                            row=line_no,
                            data={k: v for k, v in row.items() if k is not None},
                        )
                    )
                    hooks.diagnostic(entry)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise FatalError(f"Fatal Error reading point CSV '{path}': {exc}") from exc

    if seen_rows == 0:
        raise FatalError(f"Point CSV is empty or invalid: '{path}'")
    return points
