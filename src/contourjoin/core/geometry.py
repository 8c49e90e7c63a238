"""Geometric operations for contour validation and orientation.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula, exact on integer points)
- Point-in-polygon testing (ray casting algorithm)
- Degeneracy checks for closed contours
- Collinearity tests for seam vertices

All functions are pure, stateless, and accept any sequence of points,
including the lazy views handed out by the packed store.
"""

from collections.abc import Sequence

from contourjoin.domain import Point


def doubled_signed_area(points: Sequence[Point]) -> int:
    """Twice the signed area of a closed polygon, computed exactly.

    Args:
        points: Closed polygon vertices (last vertex not repeated)

    Returns:
        Twice the signed area. Zero for fewer than 3 points.
    """
    n = len(points)
    if n < 3:
        return 0

    pts = list(points)
    area2 = 0
    for i in range(n):
        p = pts[i]
        q = pts[(i + 1) % n]
        area2 += p.x * q.y - q.x * p.y
    return area2


def signed_area(points: Sequence[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding (y axis up)
    - Negative area: clockwise winding

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> signed_area([Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)])
        1.0
        >>> signed_area([Point(0, 0), Point(0, 1), Point(1, 1), Point(1, 0)])
        -1.0
    """
    return doubled_signed_area(points) / 2.0


def point_in_polygon(x: float, y: float, polygon: Sequence[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.
    The half-open edge rule makes rays through vertices count once.

    Args:
        x: X coordinate of the point to test
        y: Y coordinate of the point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise
    """
    n = len(polygon)
    if n < 3:
        return False

    pts = list(polygon)
    inside = False
    j = n - 1

    for i in range(n):
        xi, yi = pts[i].x, pts[i].y
        xj, yj = pts[j].x, pts[j].y

        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def interior_probe(points: Sequence[Point]) -> tuple[float, float]:
    """Pick a point on a contour that is unlikely to touch another contour.

    Uses the midpoint of the first edge. For pixel-boundary contours two
    distinct boundaries never share an edge, so the midpoint is never on
    another boundary even where the contours share vertices.

    Args:
        points: Contour vertices (at least 2)

    Returns:
        (x, y) of the probe
    """
    a = points[0]
    b = points[1]
    return (a.x + b.x) / 2.0, (a.y + b.y) / 2.0


def bounding_box(points: Sequence[Point]) -> tuple[int, int, int, int]:
    """Return (min_x, min_y, max_x, max_y) of a non-empty point sequence."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def bbox_contains(
    outer: tuple[int, int, int, int], inner: tuple[int, int, int, int]
) -> bool:
    """Check whether bounding box ``outer`` encloses ``inner``."""
    return (
        outer[0] <= inner[0]
        and outer[1] <= inner[1]
        and outer[2] >= inner[2]
        and outer[3] >= inner[3]
    )


def find_duplicate_consecutive(points: Sequence[Point]) -> int | None:
    """Find a vertex equal to its cyclic successor.

    Returns:
        Index of the first such vertex, or None
    """
    n = len(points)
    pts = list(points)
    for i in range(n):
        if pts[i] == pts[(i + 1) % n]:
            return i
    return None


def is_straight_through(prev: Point, p: Point, nxt: Point) -> bool:
    """Check whether ``p`` lies on the segment from ``prev`` to ``nxt``.

    True only if the three points are collinear and ``p`` is strictly between
    the other two, i.e. dropping ``p`` leaves the outline unchanged.
    """
    cross = (p.x - prev.x) * (nxt.y - p.y) - (p.y - prev.y) * (nxt.x - p.x)
    if cross != 0:
        return False
    dot = (p.x - prev.x) * (nxt.x - p.x) + (p.y - prev.y) * (nxt.y - p.y)
    return dot > 0


def rotate_to_min(points: list[Point]) -> list[Point]:
    """Rotate a closed contour to start at its minimum (y, x) vertex.

    This is the start a raster-scan tracer would pick.
    """
    if not points:
        return points
    start = min(range(len(points)), key=lambda i: (points[i].y, points[i].x))
    return points[start:] + points[:start]
