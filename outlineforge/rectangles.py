"""Rectangle convenience predicates.

Small numeric helpers for the common special case of two rectangles, where a
full boundary walk is unnecessary.
"""

import math
from typing import List, NamedTuple, Optional, Sequence, Tuple

from shapely.geometry import MultiPoint

from .core.segment import Point


class Bounds(NamedTuple):
    """Axis-aligned bounds, in shapely's ``(minx, miny, maxx, maxy)`` order."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float


def rectangle_bounds(corners: Sequence[Sequence[float]]) -> Bounds:
    return Bounds(*MultiPoint([tuple(c[:2]) for c in corners]).bounds)


def is_axis_aligned(corners: Sequence[Sequence[float]]) -> bool:
    """True if the corners use exactly two distinct x and two distinct y values.

    Coordinates are rounded to integers first, so sub-unit jitter is ignored.
    """
    xs = {round(c[0]) for c in corners}
    ys = {round(c[1]) for c in corners}
    return len(xs) == 2 and len(ys) == 2


def rectangle_rotation(corners: Sequence[Sequence[float]]) -> float:
    """Rotation of the first edge, in degrees folded into [0, 90)."""
    dx = corners[1][0] - corners[0][0]
    dy = corners[1][1] - corners[0][1]
    angle = math.degrees(math.atan2(dy, dx))
    if angle < 0:
        angle += 360.0
    return angle % 90.0


def _ranges_overlap(a_min: float, a_max: float, b_min: float, b_max: float, tolerance: float) -> bool:
    return not (a_max < b_min - tolerance or b_max < a_min - tolerance)


def rectangles_adjacent(
    corner_sets: Sequence[Sequence[Sequence[float]]],
    tolerance: float = 5.0,
) -> bool:
    """True if exactly two rectangles touch along a vertical or horizontal side.

    Args:
        corner_sets: Corners of each rectangle; anything but two rectangles
            returns False
        tolerance: Allowed gap between the touching sides
    """
    if len(corner_sets) != 2:
        return False

    a = rectangle_bounds(corner_sets[0])
    b = rectangle_bounds(corner_sets[1])

    side_by_side = (
        abs(a.max_x - b.min_x) < tolerance or abs(b.max_x - a.min_x) < tolerance
    ) and _ranges_overlap(a.min_y, a.max_y, b.min_y, b.max_y, tolerance)

    stacked = (
        abs(a.max_y - b.min_y) < tolerance or abs(b.max_y - a.min_y) < tolerance
    ) and _ranges_overlap(a.min_x, a.max_x, b.min_x, b.max_x, tolerance)

    return side_by_side or stacked


def rectangles_form_simple_union(first: Bounds, second: Bounds, tolerance: float = 5.0) -> bool:
    """True if two bounds share their full height or their full width.

    Such a pair unions into a single rectangle when the two are adjacent.
    """
    same_height = (abs(first.min_y - second.min_y) < tolerance
                   and abs(first.max_y - second.max_y) < tolerance)
    same_width = (abs(first.min_x - second.min_x) < tolerance
                  and abs(first.max_x - second.max_x) < tolerance)
    return same_height or same_width


def find_shared_vertices(
    point_sets: Sequence[Sequence[Sequence[float]]],
    tolerance: float = 1.0,
) -> List[Tuple[Point, Point, float]]:
    """Vertex pairs from different point sets closer than ``tolerance``.

    Returns:
        ``(p, q, distance)`` triples, in set-pair then point order
    """
    shared = []
    for i, first in enumerate(point_sets):
        for second in point_sets[i + 1:]:
            for p in first:
                for q in second:
                    distance = math.hypot(p[0] - q[0], p[1] - q[1])
                    if distance < tolerance:
                        shared.append((Point(float(p[0]), float(p[1])),
                                       Point(float(q[0]), float(q[1])),
                                       distance))
    return shared


def convex_hull_points(points: Sequence[Sequence[float]]) -> List[Point]:
    """Vertices of the convex hull of ``points``, without a repeated closing point.

    Returns an empty list when the hull is not a polygon (fewer than three
    distinct points, or all of them collinear).
    """
    hull = MultiPoint([tuple(p[:2]) for p in points]).convex_hull
    if hull.geom_type != 'Polygon':
        return []
    return [Point(float(x), float(y)) for x, y in hull.exterior.coords[:-1]]


def rectangle_union_outline(
    corner_sets: Sequence[Sequence[Sequence[float]]],
    tolerance: float = 5.0,
) -> Optional[List[Point]]:
    """Outline of two adjacent axis-aligned rectangles that union into one rectangle.

    This is the shortcut for the common two-rectangle case: when both
    rectangles touch along a side and share their full height or width, the
    outline is the convex hull of their corners.

    Args:
        corner_sets: Corners of each rectangle
        tolerance: Allowed gap and misalignment between the two rectangles

    Returns:
        Outline points, or None when the shortcut does not apply

    Examples:
        >>> outline = rectangle_union_outline([
        ...     [(0, 0), (10, 0), (10, 10), (0, 10)],
        ...     [(10, 0), (20, 0), (20, 10), (10, 10)],
        ... ])
        >>> len(outline)
        4
    """
    if len(corner_sets) != 2 or any(len(corners) != 4 for corners in corner_sets):
        return None
    if not all(is_axis_aligned(corners) for corners in corner_sets):
        return None
    if not rectangles_adjacent(corner_sets, tolerance):
        return None

    first, second = (rectangle_bounds(corners) for corners in corner_sets)
    if not rectangles_form_simple_union(first, second, tolerance):
        return None
    return convex_hull_points([corner for corners in corner_sets for corner in corners])


__all__ = [
    'Bounds',
    'rectangle_bounds',
    'is_axis_aligned',
    'rectangle_rotation',
    'rectangles_adjacent',
    'rectangles_form_simple_union',
    'find_shared_vertices',
    'convex_hull_points',
    'rectangle_union_outline',
]
