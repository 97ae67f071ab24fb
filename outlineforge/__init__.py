"""Outlineforge - outer outline extraction for unions of polygonal paths.

This library merges independently authored paths (rectangles and other
straight-edged outlines that overlap, share edges or nearly touch) into the
single polygon tracing their common outer boundary.
"""


# Pipeline
from .outline import (
    OutlineConfig,
    OutlineResult,
    extract_outline,
    outline_from_polygons,
    outline_from_path_data,
)

# Stages
from .merge import merge_coincident_points, MergeStats
from .shared import mark_shared_segments, SharedSegmentStats
from .network import build_path_network, PathNetwork, Incidence
from .trace import trace_outer_boundary, TracePolicy, TraceResult

# Cleanup collaborator
from .cleanup import cleanup_boundary, CleanupConfig

# Segment builders
from .parse import (
    segments_from_points,
    segments_from_path_data,
    segments_from_polygon,
    parse_path_points,
    format_path_data,
)

# Rectangle helpers
from .rectangles import (
    Bounds,
    rectangle_bounds,
    is_axis_aligned,
    rectangle_rotation,
    rectangles_adjacent,
    rectangles_form_simple_union,
    find_shared_vertices,
    convex_hull_points,
    rectangle_union_outline,
)

# Core records, enums and exceptions
from .core import (
    Point,
    Segment,
    PointIdentityPolicy,
    DisjointSet,
    MergeMethod,
    TraceStatus,
    PriorityTier,
    OutlineSource,
    OutlineforgeError,
    ValidationError,
    ConfigurationError,
    TraceError,
)

__all__ = [

    # Pipeline
    'OutlineConfig',
    'OutlineResult',
    'extract_outline',
    'outline_from_polygons',
    'outline_from_path_data',

    # Stages
    'merge_coincident_points',
    'MergeStats',
    'mark_shared_segments',
    'SharedSegmentStats',
    'build_path_network',
    'PathNetwork',
    'Incidence',
    'trace_outer_boundary',
    'TracePolicy',
    'TraceResult',

    # Cleanup
    'cleanup_boundary',
    'CleanupConfig',

    # Segment builders
    'segments_from_points',
    'segments_from_path_data',
    'segments_from_polygon',
    'parse_path_points',
    'format_path_data',

    # Rectangle helpers
    'Bounds',
    'rectangle_bounds',
    'is_axis_aligned',
    'rectangle_rotation',
    'rectangles_adjacent',
    'rectangles_form_simple_union',
    'find_shared_vertices',
    'convex_hull_points',
    'rectangle_union_outline',

    # Core
    'Point',
    'Segment',
    'PointIdentityPolicy',
    'DisjointSet',
    'MergeMethod',
    'TraceStatus',
    'PriorityTier',
    'OutlineSource',
    'OutlineforgeError',
    'ValidationError',
    'ConfigurationError',
    'TraceError',
]

__version__ = '0.1.0'
