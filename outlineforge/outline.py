"""End-to-end outline extraction.

Runs the stages in order: merge near-coincident endpoints, mark shared
segments, index the network, walk the outer boundary and clean it up.
"""

import logging
import math
import warnings
from collections import defaultdict
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Dict, Iterable, List, Optional, Sequence, Union

from shapely.geometry import MultiPolygon, Polygon

from .cleanup import CleanupConfig, cleanup_boundary
from .core.errors import ConfigurationError, TraceError
from .core.identity import PointIdentityPolicy
from .core.segment import Point, Segment, validate_segments
from .core.types import MergeMethod, OutlineSource, TraceStatus, coerce_enum
from .merge import DEFAULT_MERGE_TOLERANCE, MergeStats, merge_coincident_points
from .network import DEFAULT_KEY_PRECISION, build_path_network
from .parse import format_path_data, segments_from_path_data, segments_from_polygon
from .rectangles import convex_hull_points, rectangle_union_outline
from .shared import DEFAULT_SHARED_TOLERANCE, SharedSegmentStats, mark_shared_segments
from .trace import TracePolicy, TraceResult, trace_outer_boundary

logger = logging.getLogger(__name__)


@dataclass
class OutlineConfig:
    """Settings for :func:`extract_outline`.

    The three identity settings are independent: shared-edge
    matching wants a tight tolerance, vertex merging a loose one, and the
    adjacency key precision is a bucketing choice of its own.

    Attributes:
        shared_tolerance: Distance under which endpoints make segments shared
        merge_tolerance: Distance under which endpoints of different paths merge
        key_precision: Decimals kept in adjacency keys
        merge_points: Run the coincident-point merger before classification
        merge_method: Candidate discovery for the merger (enum or string)
        iteration_factor: Walk cap as a multiple of the segment count
        cleanup: Post-process the walk with :func:`cleanup_boundary`
        cleanup_config: Settings for the cleanup step
        trace_policy: Priority ladder thresholds
        rectangle_shortcut: Outline exactly two adjacent axis-aligned
            rectangles by their convex hull instead of walking them
        hull_fallback: Return the convex hull of all endpoints when the walk
            does not close
    """
    shared_tolerance: float = DEFAULT_SHARED_TOLERANCE
    merge_tolerance: float = DEFAULT_MERGE_TOLERANCE
    key_precision: int = DEFAULT_KEY_PRECISION
    merge_points: bool = True
    merge_method: Union[MergeMethod, str] = MergeMethod.PAIRWISE
    iteration_factor: float = 2.0
    cleanup: bool = True
    cleanup_config: Optional[CleanupConfig] = None
    trace_policy: TracePolicy = field(default_factory=TracePolicy)
    rectangle_shortcut: bool = False
    hull_fallback: bool = False

    def __post_init__(self):
        for name in ('shared_tolerance', 'merge_tolerance'):
            value = getattr(self, name)
            if not (value >= 0 and math.isfinite(value)):
                raise ConfigurationError(f"{name} must be a finite non-negative number, got {value}")
        if self.key_precision < 0:
            raise ConfigurationError(f"key_precision must be non-negative, got {self.key_precision}")
        if not self.iteration_factor >= 1:
            raise ConfigurationError(f"iteration_factor must be at least 1, got {self.iteration_factor}")
        try:
            self.merge_method = coerce_enum(self.merge_method, MergeMethod)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    def shared_identity(self) -> PointIdentityPolicy:
        return PointIdentityPolicy(tolerance=self.shared_tolerance, precision=self.key_precision)

    def merge_identity(self) -> PointIdentityPolicy:
        return PointIdentityPolicy(tolerance=self.merge_tolerance, precision=self.key_precision)

    def network_identity(self) -> PointIdentityPolicy:
        return PointIdentityPolicy(tolerance=self.shared_tolerance, precision=self.key_precision)

    def max_iterations(self, segment_count: int) -> int:
        return max(1, math.ceil(self.iteration_factor * segment_count))


@dataclass
class OutlineResult:
    """Everything :func:`extract_outline` learned along the way.

    Attributes:
        points: Final outline points
        trace: Result of the boundary walk (None when the rectangle shortcut
            produced the outline)
        shared_stats: Shared-segment classification diagnostics
        merge_stats: Merger diagnostics (None when merging was skipped)
        source: Which step produced ``points``
    """
    points: List[Point]
    trace: Optional[TraceResult] = None
    shared_stats: Optional[SharedSegmentStats] = None
    merge_stats: Optional[MergeStats] = None
    source: OutlineSource = OutlineSource.TRACE

    @property
    def status(self) -> TraceStatus:
        if self.trace is None:
            return TraceStatus.CLOSED
        return self.trace.status


def extract_outline(
    segments: Sequence[Segment],
    config: Optional[OutlineConfig] = None,
    raise_on_failure: bool = False,
    return_result: bool = False,
) -> Union[List[Point], OutlineResult]:
    """Compute the outer outline of the union of several paths.

    The input segments are never modified. An empty input yields an empty
    outline. A walk that stops before returning to its start is reported with
    a ``UserWarning`` (or a :class:`TraceError` when ``raise_on_failure``) and
    its partial result is returned, or the convex hull of all endpoints when
    ``config.hull_fallback`` is set. With ``config.rectangle_shortcut``, two
    adjacent axis-aligned rectangles are outlined without walking them.

    Args:
        segments: Segments of all paths; ids must be unique
        config: Pipeline settings
        raise_on_failure: Raise TraceError instead of warning on an unclosed walk
        return_result: If True, return an :class:`OutlineResult`

    Returns:
        Outline points, or an OutlineResult if return_result=True

    Raises:
        ValidationError: If any coordinate is NaN or infinite
        TraceError: If the walk does not close and raise_on_failure=True

    Examples:
        >>> outline = extract_outline(square_a + square_b, OutlineConfig(merge_tolerance=1.0))
        >>> len(outline)
        4
    """
    config = config or OutlineConfig()
    segments = [replace(segment) for segment in segments]
    validate_segments(segments)

    if config.rectangle_shortcut:
        outline = rectangle_union_outline(_path_corners(segments), config.merge_tolerance)
        if outline is not None:
            logger.debug("two adjacent rectangles, outlined by their convex hull")
            if return_result:
                return OutlineResult(points=outline, source=OutlineSource.RECTANGLES)
            return outline

    merge_stats = None
    if config.merge_points and segments:
        segments, merge_stats = merge_coincident_points(
            segments, config.merge_identity(), config.merge_method, return_stats=True
        )

    segments, shared_stats = mark_shared_segments(
        segments, config.shared_identity(), return_stats=True
    )
    network = build_path_network(segments, config.network_identity())

    cleanup = partial(cleanup_boundary, config=config.cleanup_config) if config.cleanup else False
    trace = trace_outer_boundary(
        network,
        cleanup=cleanup,
        policy=config.trace_policy,
        max_iterations=config.max_iterations(len(segments)),
        return_result=True,
    )

    points = trace.points
    source = OutlineSource.TRACE
    if trace.status in (TraceStatus.DEAD_END, TraceStatus.ITERATION_LIMIT):
        message = (
            f"Outline walk stopped ({trace.status.value}) after {trace.iterations} "
            f"iterations with {len(trace.raw_points)} points; "
            f"{len(trace.visited)} of {len(segments)} segments visited"
        )
        if raise_on_failure:
            raise TraceError(message, result=trace)
        if config.hull_fallback:
            hull = convex_hull_points([p for s in segments for p in (s.start, s.end)])
            if len(hull) >= 3:
                points = hull
                source = OutlineSource.CONVEX_HULL
                message += "; using convex hull"
        warnings.warn(message, UserWarning, stacklevel=2)

    if return_result:
        return OutlineResult(
            points=points,
            trace=trace,
            shared_stats=shared_stats,
            merge_stats=merge_stats,
            source=source,
        )
    return points


def _path_corners(segments: Sequence[Segment]) -> List[List[Point]]:
    """Start points of each path's segments, paths in order of first appearance."""
    corners: Dict[int, List[Point]] = defaultdict(list)
    for segment in segments:
        corners[segment.path_index].append(segment.start)
    return list(corners.values())


def _polygon_parts(geometry) -> Iterable[Polygon]:
    if isinstance(geometry, MultiPolygon):
        return list(geometry.geoms)
    return [geometry]


def outline_from_polygons(
    polygons: Sequence[Union[Polygon, MultiPolygon]],
    config: Optional[OutlineConfig] = None,
    raise_on_failure: bool = False,
) -> Polygon:
    """Outline of several shapely polygons as a single Polygon.

    Each polygon (each part of a MultiPolygon) is one path; holes are ignored.

    Returns:
        The outline Polygon, or an empty Polygon when no usable outline exists

    Examples:
        >>> a = Polygon([(0, 0), (100, 0), (100, 100), (0, 100)])
        >>> b = Polygon([(100, 0), (200, 0), (200, 100), (100, 100)])
        >>> outline_from_polygons([a, b]).area
        20000.0
    """
    segments: List[Segment] = []
    path_index = 0
    for geometry in polygons:
        for part in _polygon_parts(geometry):
            segments.extend(segments_from_polygon(part, path_index))
            path_index += 1

    points = extract_outline(segments, config, raise_on_failure=raise_on_failure)
    if len(points) < 3:
        return Polygon()
    return Polygon(points)


def outline_from_path_data(
    path_data: Sequence[str],
    config: Optional[OutlineConfig] = None,
    raise_on_failure: bool = False,
    as_path_data: bool = False,
) -> Union[List[Point], str]:
    """Outline of several SVG path ``d`` strings, one path per string.

    With ``as_path_data=True`` the outline is returned as a closed ``d``
    string (empty when there is no outline).
    """
    segments: List[Segment] = []
    for path_index, data in enumerate(path_data):
        segments.extend(segments_from_path_data(data, path_index))
    points = extract_outline(segments, config, raise_on_failure=raise_on_failure)
    return format_path_data(points) if as_path_data else points


__all__ = [
    'OutlineConfig',
    'OutlineResult',
    'extract_outline',
    'outline_from_polygons',
    'outline_from_path_data',
]
