# domain/raycast.py
from collections.abc import Sequence

from subcatch_pop.domain.entities.geography import Point, Vertex

# Added to every edge's dy so horizontal edges never divide by zero.
RAY_EPS = 1e-10


def contains(point: Point, ring: Sequence[Vertex]) -> bool:
    """
    Even-odd ray casting: cast a ray from the point towards +x and toggle on
    every edge it crosses. The ring is walked as a closed loop, pairing each
    vertex with its predecessor (vertex 0 pairs with the last one).

    Points exactly on an edge or vertex get whatever the guarded formula yields.
    """
    x, y = point.x, point.y
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi + RAY_EPS) + xi):
            inside = not inside
        j = i
    return inside
