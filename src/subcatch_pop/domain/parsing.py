# domain/parsing.py
import math
import re
from collections.abc import Sequence

from subcatch_pop.domain.entities.geography import HouseholdPoint, Polygon, Vertex

_NUM = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)"

# MULTIPOINT ((x y), (x y)) and MULTIPOINT (x y, x y): keep the first pair only
_MULTIPOINT_RE = re.compile(rf"^\s*MULTIPOINT\s*\(\s*\(?\s*({_NUM})\s+({_NUM})", re.IGNORECASE)
_POINT_RE = re.compile(rf"^\s*POINT\s*\(\s*({_NUM})\s+({_NUM})\s*\)", re.IGNORECASE)

MIN_BOUNDARY_NUMBERS = 6  # three vertices


class GeometryError(ValueError):
    """A point or boundary record that cannot be turned into geometry."""


def parse_point_wkt(wkt: str | None) -> tuple[float, float]:
    """Return (x, y) from ``POINT (x y)`` or the first pair of a ``MULTIPOINT``."""
    if not wkt or not wkt.strip():
        raise GeometryError("malformed point")
    if wkt.lstrip().upper().startswith("MULTIPOINT"):
        m = _MULTIPOINT_RE.match(wkt)
        if not m:
            raise GeometryError("malformed point")
        wkt = f"POINT ({m.group(1)} {m.group(2)})"
    m = _POINT_RE.match(wkt)
    if not m:
        raise GeometryError("malformed point")
    return float(m.group(1)), float(m.group(2))


def parse_weight(raw) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise GeometryError("missing or non-positive weight")
    try:
        w = float(raw)
    except (TypeError, ValueError):
        raise GeometryError("missing or non-positive weight") from None
    if not math.isfinite(w) or w <= 0:
        raise GeometryError("missing or non-positive weight")
    return w


def parse_household(wkt: str | None, weight, *, source_id: str = "") -> HouseholdPoint:
    x, y = parse_point_wkt(wkt)
    w = parse_weight(weight)
    return HouseholdPoint(x=x, y=y, weight=w, source_id=source_id, wkt=f"POINT ({x} {y})")


def parse_boundary(values: Sequence[float] | None) -> tuple[Vertex, ...]:
    """Group a flat [x0, y0, x1, y1, ...] boundary into vertices."""
    if values is None or isinstance(values, (str, bytes)):
        raise GeometryError("degenerate boundary")
    values = list(values)
    if len(values) < MIN_BOUNDARY_NUMBERS or len(values) % 2:
        raise GeometryError("degenerate boundary")
    try:
        nums = [float(v) for v in values]
    except (TypeError, ValueError):
        raise GeometryError("non-numeric boundary coordinate") from None
    return tuple(zip(nums[0::2], nums[1::2]))


def polygon_from_boundary(polygon_id: str, values: Sequence[float] | None) -> Polygon:
    return Polygon(id=polygon_id, ring=parse_boundary(values))
