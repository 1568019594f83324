from dataclasses import dataclass

Vertex = tuple[float, float]


# Core geometry types used by the assignment pass
@dataclass(frozen=True)
class Point:
    x: float  # projected CRS units (metres for EPSG:27700)
    y: float


@dataclass(frozen=True)
class HouseholdPoint(Point):
    weight: float  # occupancy factor, always > 0 once parsed
    source_id: str  # e.g. "row 12" for the CSV reader
    wkt: str = ""  # normalised "POINT (x y)" text, used in reports


@dataclass(frozen=True)
class Polygon:
    """A subcatchment boundary. The ring is implicitly closed (last -> first)."""

    id: str
    ring: tuple[Vertex, ...]

    @property
    def first_vertex(self) -> Vertex:
        return self.ring[0]
