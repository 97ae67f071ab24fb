"""Builders turning point lists, SVG path data and shapely polygons into segments."""

import re
from typing import List, Optional, Sequence

from shapely.geometry import Polygon

from .core.segment import Point, Segment

_COMMAND_RE = re.compile(r'[MmLlHhVvCcSsQqTtAaZz][^MmLlHhVvCcSsQqTtAaZz]*')
_NUMBER_RE = re.compile(r'[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?')

# Parameters consumed per repetition, and where the end point sits in them
_ENDPOINT_LAYOUT = {
    'c': (6, 4),
    's': (4, 2),
    'q': (4, 2),
    't': (2, 0),
    'a': (7, 5),
}


def segments_from_points(
    points: Sequence[Sequence[float]],
    path_index: int,
    closed: bool = True,
) -> List[Segment]:
    """Chain consecutive points of one path into segments.

    A closed path with more than two points gets a final segment back to its
    first point; an explicit repeat of the first point at the end is dropped
    so that closing segment is not zero-length.

    Examples:
        >>> segs = segments_from_points([(0, 0), (1, 0), (1, 1), (0, 1)], path_index=0)
        >>> [s.id for s in segs]
        ['0_0', '0_1', '0_2', '0_3']
    """
    pts = [Point(float(p[0]), float(p[1])) for p in points]
    if closed and len(pts) > 2 and pts[-1] == pts[0]:
        pts = pts[:-1]
    if len(pts) < 2:
        return []

    segments = [
        Segment(start=pts[i - 1], end=pts[i], path_index=path_index, segment_index=i - 1)
        for i in range(1, len(pts))
    ]
    if closed and len(pts) > 2:
        segments.append(Segment(
            start=pts[-1], end=pts[0], path_index=path_index, segment_index=len(segments)
        ))
    return segments


def parse_path_points(path_data: str) -> List[Point]:
    """Extract the vertices of an SVG path ``d`` attribute.

    Supports absolute and relative ``M L H V C S Q T A Z``. Curves and arcs
    contribute only their end points, which keeps sharp corners of the
    rectangular outlines this is meant for. ``Z`` adds no point but moves the
    pen back to the start of the subpath.

    Examples:
        >>> parse_path_points("M0 0 H10 V5 h-10 Z")
        [Point(x=0.0, y=0.0), Point(x=10.0, y=0.0), Point(x=10.0, y=5.0), Point(x=0.0, y=5.0)]
    """
    points: List[Point] = []
    x = y = 0.0
    subpath_start = (0.0, 0.0)

    for chunk in _COMMAND_RE.findall(path_data or ''):
        cmd = chunk[0]
        relative = cmd.islower()
        params = [float(n) for n in _NUMBER_RE.findall(chunk[1:])]
        op = cmd.lower()

        if op == 'z':
            x, y = subpath_start
            continue

        if op in ('m', 'l'):
            for i in range(0, len(params) - 1, 2):
                dx, dy = params[i], params[i + 1]
                x, y = (x + dx, y + dy) if relative else (dx, dy)
                points.append(Point(x, y))
                if op == 'm' and i == 0:
                    subpath_start = (x, y)
        elif op == 'h':
            for value in params:
                x = x + value if relative else value
                points.append(Point(x, y))
        elif op == 'v':
            for value in params:
                y = y + value if relative else value
                points.append(Point(x, y))
        elif op in _ENDPOINT_LAYOUT:
            stride, offset = _ENDPOINT_LAYOUT[op]
            for i in range(0, len(params) - stride + 1, stride):
                ex, ey = params[i + offset], params[i + offset + 1]
                x, y = (x + ex, y + ey) if relative else (ex, ey)
                points.append(Point(x, y))

    return points


def _format_number(value: float, precision: Optional[int]) -> str:
    if precision is None:
        text = repr(float(value))
    else:
        text = f"{value:.{precision}f}"
    if '.' in text and 'e' not in text:
        text = text.rstrip('0').rstrip('.')
    return '0' if text == '-0' else text


def format_path_data(points: Sequence[Sequence[float]], precision: Optional[int] = None) -> str:
    """Format a closed ring as an SVG path ``d`` string.

    Args:
        points: Ring vertices, without a repeated closing point
        precision: Decimals kept per coordinate (None keeps full precision)

    Returns:
        ``"M x y L x y ... Z"``, or an empty string for an empty ring

    Examples:
        >>> format_path_data([(0, 0), (200, 0), (200, 100), (0, 100)])
        'M 0 0 L 200 0 L 200 100 L 0 100 Z'
    """
    if not points:
        return ''
    commands = [
        f"{'M' if i == 0 else 'L'} {_format_number(p[0], precision)} {_format_number(p[1], precision)}"
        for i, p in enumerate(points)
    ]
    return ' '.join(commands) + ' Z'


def segments_from_path_data(path_data: str, path_index: int) -> List[Segment]:
    """Segments of one SVG path, closed back to its first vertex."""
    return segments_from_points(parse_path_points(path_data), path_index, closed=True)


def segments_from_polygon(polygon: Polygon, path_index: int) -> List[Segment]:
    """Segments of a shapely polygon's exterior ring (holes are ignored)."""
    if not isinstance(polygon, Polygon):
        raise TypeError(f"Expected a Polygon, got {type(polygon).__name__}")
    if polygon.is_empty:
        return []
    return segments_from_points(list(polygon.exterior.coords), path_index, closed=True)


__all__ = [
    'segments_from_points',
    'parse_path_points',
    'format_path_data',
    'segments_from_path_data',
    'segments_from_polygon',
]
