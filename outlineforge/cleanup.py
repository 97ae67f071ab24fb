"""Validation and tidying of a freshly traced boundary.

:func:`cleanup_boundary` is the default post-processing collaborator of the
tracer. It either returns a cleaned point sequence or ``None`` to say "this
ring looks wrong, keep the raw walk instead".
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from shapely.geometry import Polygon
from shapely.validation import explain_validity
from simplification.cutil import simplify_coords

from .core.segment import Point

logger = logging.getLogger(__name__)


@dataclass
class CleanupConfig:
    """Settings for :func:`cleanup_boundary`.

    Attributes:
        duplicate_tolerance: Per-axis distance under which a point duplicates
            its successor
        suspect_vertex_count: Ring size checked for poor fill (None disables)
        min_fill_ratio: Minimum polygon area / bounding box area for a ring of
            ``suspect_vertex_count`` vertices
        require_valid: Reject rings that are not valid polygons
        collapse_collinear: Drop vertices lying on a straight run
        collinear_epsilon: RDP tolerance used for the collinear collapse
    """
    duplicate_tolerance: float = 0.1
    suspect_vertex_count: Optional[int] = 6
    min_fill_ratio: float = 0.8
    require_valid: bool = True
    collapse_collinear: bool = True
    collinear_epsilon: float = 1e-9


def remove_duplicate_points(points: Sequence[Point], tolerance: float) -> List[Point]:
    """Drop every point that duplicates the next one (cyclically) on both axes."""
    n = len(points)
    kept: List[Point] = []
    for i, current in enumerate(points):
        nxt = points[(i + 1) % n]
        if abs(current[0] - nxt[0]) > tolerance or abs(current[1] - nxt[1]) > tolerance:
            kept.append(current)
    return kept


def fill_ratio(points: Sequence[Point]) -> Optional[float]:
    """Polygon area over bounding-box area; None for a flat bounding box."""
    polygon = Polygon(points)
    minx, miny, maxx, maxy = polygon.bounds
    box_area = (maxx - minx) * (maxy - miny)
    if box_area <= 0:
        return None
    return polygon.area / box_area


def collapse_collinear(points: Sequence[Point], epsilon: float) -> List[Point]:
    """Remove vertices on straight runs with Ramer-Douglas-Peucker.

    The ring's first point is always kept; a result that would drop below
    three vertices is discarded in favour of the input.
    """
    if len(points) < 4:
        return list(points)
    ring = np.array(list(points) + [points[0]], dtype=float)
    simplified = np.asarray(simplify_coords(ring, epsilon), dtype=float)[:-1]
    if len(simplified) < 3:
        return list(points)
    return [Point(float(x), float(y)) for x, y in simplified]


def cleanup_boundary(
    points: Sequence[Point],
    config: Optional[CleanupConfig] = None,
) -> Optional[List[Point]]:
    """Clean a traced boundary, or reject it.

    Steps:
        1. Remove consecutive duplicates (the ring wraps around)
        2. Reject a ``suspect_vertex_count``-vertex ring that fills less than
           ``min_fill_ratio`` of its bounding box; such rings are usually a
           walk that cut through the shape
        3. Reject rings shapely considers invalid (``require_valid``)
        4. Collapse collinear vertices (``collapse_collinear``)

    Args:
        points: Boundary points, without a repeated closing point
        config: Cleanup settings

    Returns:
        Cleaned points, the input unchanged when it has fewer than three
        points, or None when the ring is rejected

    Examples:
        >>> cleanup_boundary([(0, 0), (1, 0), (2, 0), (2, 1), (0, 1)])
        [Point(x=0.0, y=0.0), Point(x=2.0, y=0.0), Point(x=2.0, y=1.0), Point(x=0.0, y=1.0)]
    """
    if config is None:
        config = CleanupConfig()
    if len(points) < 3:
        return list(points)

    cleaned = remove_duplicate_points(points, config.duplicate_tolerance)
    logger.debug("removed %d duplicate points", len(points) - len(cleaned))
    if len(cleaned) < 3:
        return None

    if config.suspect_vertex_count is not None and len(cleaned) == config.suspect_vertex_count:
        ratio = fill_ratio(cleaned)
        if ratio is not None and ratio < config.min_fill_ratio:
            logger.debug("rejecting %d-vertex ring with fill ratio %.3f", len(cleaned), ratio)
            return None

    if config.require_valid:
        polygon = Polygon(cleaned)
        if not polygon.is_valid:
            logger.debug("rejecting invalid ring: %s", explain_validity(polygon))
            return None

    if config.collapse_collinear:
        cleaned = collapse_collinear(cleaned, config.collinear_epsilon)

    return [Point(float(p[0]), float(p[1])) for p in cleaned]


__all__ = [
    'CleanupConfig',
    'remove_duplicate_points',
    'fill_ratio',
    'collapse_collinear',
    'cleanup_boundary',
]
