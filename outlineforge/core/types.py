"""Type definitions for outlineforge operations.

This module defines enums for strategy parameters and outcome reporting
throughout the library.
"""

from enum import Enum, IntEnum
from typing import Type, TypeVar, Union

E = TypeVar('E', bound=Enum)


class MergeMethod(Enum):
    """Candidate discovery method for merging coincident points.

    Attributes:
        PAIRWISE: Compare every segment pair from different paths (default).
            Candidates are deduplicated by their quantized geometric keys.
        INDEXED: Query a shapely STRtree of endpoints within the tolerance.
            Candidates are deduplicated by their endpoint keys.

    Examples:
        >>> from outlineforge import merge_coincident_points, MergeMethod
        >>> merged = merge_coincident_points(segments, 1.0, method=MergeMethod.INDEXED)
    """
    PAIRWISE = 'pairwise'
    INDEXED = 'indexed'


class TraceStatus(Enum):
    """How an outer-boundary walk ended.

    Attributes:
        EMPTY_INPUT: There were no segments to walk
        CLOSED: The walk returned to its start point
        DEAD_END: No unvisited boundary segment left at the current point
        ITERATION_LIMIT: The iteration cap was reached before closing
    """
    EMPTY_INPUT = 'empty_input'
    CLOSED = 'closed'
    DEAD_END = 'dead_end'
    ITERATION_LIMIT = 'iteration_limit'


class PriorityTier(IntEnum):
    """Ranking tiers used when choosing the next boundary segment.

    Lower values win. Within a tier the smaller normalized turn angle wins.

    Attributes:
        OUTWARD_JUNCTION: Candidate points away from the centroid while
            leaving a high-degree junction
        STRAIGHT: Candidate continues (almost) straight ahead
        COLLINEAR_INCUMBENT: Tier at which an already selected, nearly
            collinear best candidate is defended
        TURN: Ordinary candidate, ranked by its turn angle alone
    """
    OUTWARD_JUNCTION = -3
    STRAIGHT = -2
    COLLINEAR_INCUMBENT = -1
    TURN = 0


class OutlineSource(Enum):
    """Where an outline returned by the pipeline came from.

    Attributes:
        TRACE: The outer-boundary walk (default)
        RECTANGLES: The two-rectangle shortcut
        CONVEX_HULL: The convex-hull fallback after an unclosed walk
    """
    TRACE = 'trace'
    RECTANGLES = 'rectangles'
    CONVEX_HULL = 'convex_hull'


def coerce_enum(value: Union[E, str], enum_type: Type[E]) -> E:
    """Return ``value`` as a member of ``enum_type``.

    Accepts either an enum member or its string value (case-insensitive).

    Raises:
        ValueError: If the string does not name a member

    Examples:
        >>> coerce_enum('indexed', MergeMethod)
        <MergeMethod.INDEXED: 'indexed'>
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        for member in enum_type:
            if member.value == lowered or member.name.lower() == lowered:
                return member
    valid = ', '.join(repr(m.value) for m in enum_type)
    raise ValueError(f"Invalid {enum_type.__name__}: {value!r} (expected one of {valid})")


__all__ = [
    'MergeMethod',
    'TraceStatus',
    'PriorityTier',
    'OutlineSource',
    'coerce_enum',
]
