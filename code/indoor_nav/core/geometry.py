"""
Planar geometry used by the floor plan, graph builder and planner.

All coordinates are planar and unit-agnostic; callers must use one consistent
metric (the engine assumes projected metres, see coordinates.LocalProjection).
"""

import math
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Iterator, List, NamedTuple, Sequence, Tuple

import numpy as np


EPSILON = 1e-9

# Corners sharper than this ratio (miter length / radius) are bevelled.
MITER_LIMIT = 4.0

# Distance either side of a segment sampled when classifying it against obstacles.
SIDE_OFFSET = 1e-6


class Point(NamedTuple):
    """A 2D coordinate."""
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned bounding box."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> 'BoundingBox':
        xs, ys = zip(*points)
        return cls(min(xs), max(xs), min(ys), max(ys))

    def intersects(self, other: 'BoundingBox', margin: float = EPSILON) -> bool:
        return (self.min_x <= other.max_x + margin and other.min_x <= self.max_x + margin and
                self.min_y <= other.max_y + margin and other.min_y <= self.max_y + margin)


@dataclass(frozen=True)
class Polygon:
    """
    A closed ring of at least three points.

    The first and last points are implicitly connected; a repeated closing point
    and consecutive duplicates are dropped on construction. Simplicity is assumed,
    not validated.
    """
    points: Tuple[Point, ...]

    def __post_init__(self):
        cleaned = []
        for p in self.points:
            p = Point(float(p[0]), float(p[1]))
            if not cleaned or cleaned[-1] != p:
                cleaned.append(p)
        if len(cleaned) > 1 and cleaned[0] == cleaned[-1]:
            cleaned.pop()
        if len(cleaned) < 3:
            raise ValueError(f"Polygon needs at least 3 distinct points, got {len(cleaned)}")
        object.__setattr__(self, 'points', tuple(cleaned))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def edges(self) -> Iterator[Tuple[Point, Point]]:
        """Yield the ring's edges, closing edge included."""
        n = len(self.points)
        for i in range(n):
            yield self.points[i], self.points[(i + 1) % n]

    @cached_property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.points)

    @cached_property
    def signed_area(self) -> float:
        """Shoelace area; positive for counter-clockwise rings."""
        pts = np.asarray(self.points)
        x, y = pts[:, 0], pts[:, 1]
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))

    @property
    def is_counter_clockwise(self) -> bool:
        return self.signed_area > 0

    def convex_vertices(self) -> List[Point]:
        """Vertices where the ring turns outward (reflex and collinear ones excluded)."""
        orientation = 1.0 if self.is_counter_clockwise else -1.0
        n = len(self.points)
        result = []
        for i in range(n):
            prev_p, p, next_p = self.points[i - 1], self.points[i], self.points[(i + 1) % n]
            if orientation * _cross(prev_p, p, next_p) > EPSILON:
                result.append(p)
        return result


# ---------- Predicates ----------

def bounding_box(polygon: Polygon) -> BoundingBox:
    """Axis-aligned bounds of a polygon."""
    return polygon.bounding_box


def distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """Planar Euclidean distance."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def _cross(o, a, b) -> float:
    """2D cross product (OA x OB). >0: counter-clockwise, <0: clockwise, 0: collinear."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _orientation(o, a, b) -> int:
    value = _cross(o, a, b)
    if abs(value) <= EPSILON:
        return 0
    return 1 if value > 0 else -1


def _on_segment(p, q, r) -> bool:
    """Check if q lies within the bounding box of segment p-r (assumes collinearity)."""
    return (min(p[0], r[0]) - EPSILON <= q[0] <= max(p[0], r[0]) + EPSILON and
            min(p[1], r[1]) - EPSILON <= q[1] <= max(p[1], r[1]) + EPSILON)


def segments_intersect(a1, a2, b1, b2) -> bool:
    """Check if segment a1-a2 intersects segment b1-b2, touching included."""
    d1 = _orientation(b1, b2, a1)
    d2 = _orientation(b1, b2, a2)
    d3 = _orientation(a1, a2, b1)
    d4 = _orientation(a1, a2, b2)

    if d1 * d2 < 0 and d3 * d4 < 0:
        return True

    # Collinear and touching cases
    if d1 == 0 and _on_segment(b1, a1, b2):
        return True
    if d2 == 0 and _on_segment(b1, a2, b2):
        return True
    if d3 == 0 and _on_segment(a1, b1, a2):
        return True
    if d4 == 0 and _on_segment(a1, b2, a2):
        return True
    return False


def _segments_cross(a1, a2, b1, b2) -> bool:
    """Proper crossing: each segment strictly separates the other's endpoints."""
    return (_orientation(b1, b2, a1) * _orientation(b1, b2, a2) < 0 and
            _orientation(a1, a2, b1) * _orientation(a1, a2, b2) < 0)


def point_in_polygon(point, polygon: Polygon) -> bool:
    """
    Even-odd ray casting test.

    Points exactly on the boundary may go either way; use point_on_boundary
    when that matters.
    """
    x, y = point
    pts = polygon.points
    inside = False
    j = len(pts) - 1
    for i in range(len(pts)):
        xi, yi = pts[i]
        xj, yj = pts[j]
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside
        j = i
    return inside


def point_on_boundary(point, polygon: Polygon) -> bool:
    for p1, p2 in polygon.edges():
        if _orientation(p1, p2, point) == 0 and _on_segment(p1, point, p2):
            return True
    return False


def point_strictly_inside(point, polygon: Polygon) -> bool:
    return point_in_polygon(point, polygon) and not point_on_boundary(point, polygon)


def _inside_any(point, polygons: Sequence[Polygon]) -> bool:
    return any(point_strictly_inside(point, polygon) for polygon in polygons)


def segment_blocked(a, b, polygons: Sequence[Polygon]) -> bool:
    """
    Check if segment a-b passes through the interior of the union of polygons.

    Touching a vertex or running along an outer edge is not a crossing, so routes
    may hug obstacle corners. Running along the seam between two touching polygons
    is a crossing. The segment is split at every vertex lying on it and each piece
    is sampled just left and right of its midpoint; a piece with solid on both
    sides is blocked.
    """
    length_sq = (b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2
    if length_sq <= EPSILON * EPSILON:
        return _inside_any(a, polygons)

    cuts = [0.0, 1.0]
    for polygon in polygons:
        for p1, p2 in polygon.edges():
            if _segments_cross(a, b, p1, p2):
                return True
            if _orientation(a, b, p1) == 0 and _on_segment(a, p1, b):
                cuts.append(((p1[0] - a[0]) * (b[0] - a[0]) + (p1[1] - a[1]) * (b[1] - a[1])) / length_sq)

    length = math.sqrt(length_sq)
    off_x = -(b[1] - a[1]) / length * SIDE_OFFSET
    off_y = (b[0] - a[0]) / length * SIDE_OFFSET

    cuts.sort()
    for t0, t1 in zip(cuts, cuts[1:]):
        if t1 - t0 <= EPSILON:
            continue
        t = 0.5 * (t0 + t1)
        mid_x, mid_y = a[0] + t * (b[0] - a[0]), a[1] + t * (b[1] - a[1])
        if (_inside_any((mid_x + off_x, mid_y + off_y), polygons) and
                _inside_any((mid_x - off_x, mid_y - off_y), polygons)):
            return True
    return False


def segment_crosses_polygon(a, b, polygon: Polygon) -> bool:
    """Check if segment a-b passes through the interior of a single polygon."""
    if not BoundingBox.from_points((a, b)).intersects(polygon.bounding_box):
        return False
    return segment_blocked(a, b, (polygon,))


# ---------- Inflation ----------

def inflate(polygon: Polygon, radius: float) -> Polygon:
    """
    Expand a polygon outward by radius.

    Each vertex moves to the intersection of its two edges offset by radius
    (mitre join); corners whose mitre would exceed MITER_LIMIT * radius are
    bevelled into two points instead. Convex input gives a convex result that
    contains the original. Non-convex input is best-effort: deep concavities
    narrower than 2 * radius can fold over.
    """
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    if radius == 0:
        return polygon

    pts = np.asarray(polygon.points, dtype=float)
    incoming = pts - np.roll(pts, 1, axis=0)
    outgoing = np.roll(pts, -1, axis=0) - pts
    incoming /= np.linalg.norm(incoming, axis=1)[:, None]
    outgoing /= np.linalg.norm(outgoing, axis=1)[:, None]

    # Right-hand normals point outward on a counter-clockwise ring
    sign = 1.0 if polygon.is_counter_clockwise else -1.0
    n_in = sign * np.column_stack((incoming[:, 1], -incoming[:, 0]))
    n_out = sign * np.column_stack((outgoing[:, 1], -outgoing[:, 0]))

    inflated = []
    for vertex, a, b in zip(pts, n_in, n_out):
        denom = 1.0 + float(np.dot(a, b))
        miter = (a + b) / denom if denom > EPSILON else None
        if miter is None or np.linalg.norm(miter) > MITER_LIMIT:
            inflated.append(Point(*(vertex + radius * a)))
            inflated.append(Point(*(vertex + radius * b)))
        else:
            inflated.append(Point(*(vertex + radius * miter)))
    return Polygon(tuple(inflated))
