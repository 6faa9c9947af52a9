"""Bowyer-Watson Delaunay triangulation over room centers."""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Set, Tuple
import logging

from src.level.geometry import euclidean
from src.level.room_graph import RoomEdge
from src.level.room_placer import RoomRegion

logger = logging.getLogger(__name__)

Vertex = Tuple[float, float]

SUPER_TRIANGLE_MARGIN = 10
DEGENERATE_EPSILON = 1e-4


@dataclass(frozen=True)
class Triangle:
    a: int
    b: int
    c: int

    def vertices(self) -> Tuple[int, int, int]:
        return self.a, self.b, self.c

    def edges(self) -> List[Tuple[int, int]]:
        return [_edge_key(self.a, self.b), _edge_key(self.b, self.c), _edge_key(self.c, self.a)]


def _edge_key(i: int, j: int) -> Tuple[int, int]:
    return (i, j) if i < j else (j, i)


def in_circumcircle(point: Vertex, a: Vertex, b: Vertex, c: Vertex) -> bool:
    """Return True if ``point`` lies strictly inside the circumcircle of abc."""
    ax, ay = a
    bx, by = b
    cx, cy = c
    d = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < DEGENERATE_EPSILON:
        return False
    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy
    ux = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / d
    uy = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / d
    radius_sq = (ax - ux) ** 2 + (ay - uy) ** 2
    dist_sq = (point[0] - ux) ** 2 + (point[1] - uy) ** 2
    return dist_sq < radius_sq


def _super_triangle(points: Sequence[Vertex]) -> List[Vertex]:
    min_x = min(p[0] for p in points) - SUPER_TRIANGLE_MARGIN
    min_y = min(p[1] for p in points) - SUPER_TRIANGLE_MARGIN
    max_x = max(p[0] for p in points) + SUPER_TRIANGLE_MARGIN
    max_y = max(p[1] for p in points) + SUPER_TRIANGLE_MARGIN
    w = max_x - min_x
    h = max_y - min_y
    mid_x = (min_x + max_x) / 2
    return [
        (min_x - w, min_y - 1),
        (max_x + w, min_y - 1),
        (mid_x, max_y + h + 1),
    ]


def bowyer_watson(points: Sequence[Vertex]) -> List[Triangle]:
    """
    Triangulate a point set.

    Args:
        points: Input vertices

    Returns:
        Triangles as index triples into ``points``
    """
    if len(points) < 3:
        return []

    vertices: List[Vertex] = list(points) + _super_triangle(points)
    n = len(points)
    super_ids = {n, n + 1, n + 2}
    triangles: List[Triangle] = [Triangle(n, n + 1, n + 2)]

    for index in range(n):
        point = vertices[index]
        bad = [t for t in triangles
               if in_circumcircle(point, vertices[t.a], vertices[t.b], vertices[t.c])]

        # Boundary of the cavity = edges used by exactly one bad triangle
        edge_counts: Dict[Tuple[int, int], int] = {}
        for t in bad:
            for edge in t.edges():
                edge_counts[edge] = edge_counts.get(edge, 0) + 1
        polygon = [edge for edge, count in edge_counts.items() if count == 1]

        bad_set = set(bad)
        triangles = [t for t in triangles if t not in bad_set]
        for i, j in polygon:
            triangles.append(Triangle(i, j, index))

    return [t for t in triangles if not (set(t.vertices()) & super_ids)]


def triangulate(rooms: List[RoomRegion]) -> List[RoomEdge]:
    """
    Build the candidate adjacency graph over room centers.

    Args:
        rooms: Placed room regions

    Returns:
        Deduplicated edges keyed by room id with center-to-center distance
    """
    if len(rooms) < 2:
        return []
    if len(rooms) == 2:
        a, b = rooms
        return [RoomEdge.between(a.id, b.id, euclidean(a.center, b.center))]

    points = [(float(r.center[0]), float(r.center[1])) for r in rooms]
    triangles = bowyer_watson(points)

    seen: Set[Tuple[int, int]] = set()
    edges: List[RoomEdge] = []
    for t in triangles:
        for i, j in t.edges():
            key = _edge_key(rooms[i].id, rooms[j].id)
            if key in seen:
                continue
            seen.add(key)
            edges.append(RoomEdge.between(key[0], key[1], euclidean(rooms[i].center, rooms[j].center)))

    if not edges:
        # All centers collinear: chain them in order along the line
        ordered = sorted(rooms, key=lambda r: (r.center[0], r.center[1]))
        for a, b in zip(ordered, ordered[1:]):
            edges.append(RoomEdge.between(a.id, b.id, euclidean(a.center, b.center)))
        logger.debug("Collinear room centers, chained %d edges", len(edges))

    logger.debug("Triangulation: %d rooms, %d triangles, %d edges", len(rooms), len(triangles), len(edges))
    return edges
