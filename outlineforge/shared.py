"""Shared-segment classification.

A segment that appears, in either orientation, in two different paths lies
inside the union of those paths and must not be walked as boundary.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from .core.identity import PointIdentityPolicy, coerce_identity
from .core.segment import Segment

logger = logging.getLogger(__name__)

DEFAULT_SHARED_TOLERANCE = 0.01


@dataclass
class SharedSegmentStats:
    """Diagnostics from :func:`mark_shared_segments`.

    Attributes:
        newly_marked: Segments switched to internal by this call
        matched_pairs: Cross-path segment pairs found to coincide
        comparisons: Cross-path segment pairs compared
    """
    newly_marked: int = 0
    matched_pairs: int = 0
    comparisons: int = 0


def segments_coincide(a: Segment, b: Segment, identity: PointIdentityPolicy) -> bool:
    """True if ``a`` and ``b`` join the same two points, in either direction."""
    same_direction = identity.same_point(a.start, b.start) and identity.same_point(a.end, b.end)
    if same_direction:
        return True
    return identity.same_point(a.start, b.end) and identity.same_point(a.end, b.start)


def mark_shared_segments(
    segments: Sequence[Segment],
    identity: Union[PointIdentityPolicy, float, None] = None,
    return_stats: bool = False,
) -> Union[List[Segment], Tuple[List[Segment], SharedSegmentStats]]:
    """Flag segments shared between different paths as internal.

    Every unordered pair of segments from different paths is compared; if
    they coincide in either orientation both are marked ``is_internal``.
    Segments of the same path are never compared with each other. The flag
    is set in place and never cleared.

    Args:
        segments: Segments to classify
        identity: Point identity policy, or a bare distance tolerance
            (default 0.01)
        return_stats: If True, also return a :class:`SharedSegmentStats`

    Returns:
        The segments as a list, or ``(segments, stats)`` if return_stats=True

    Examples:
        >>> marked = mark_shared_segments(segments, 0.01)
        >>> internal = [s.id for s in marked if s.is_internal]
    """
    policy = coerce_identity(identity, DEFAULT_SHARED_TOLERANCE)
    marked = list(segments)
    stats = SharedSegmentStats()

    for i, first in enumerate(marked):
        for second in marked[i + 1:]:
            if first.path_index == second.path_index:
                continue
            stats.comparisons += 1
            if not segments_coincide(first, second, policy):
                continue

            stats.matched_pairs += 1
            for segment, other in ((first, second), (second, first)):
                if not segment.is_internal:
                    segment.is_internal = True
                    stats.newly_marked += 1
                    logger.debug("segment %s marked internal (shared with %s)", segment.id, other.id)

    logger.debug(
        "marked %d of %d segments internal (%d comparisons)",
        stats.newly_marked, len(marked), stats.comparisons,
    )
    return (marked, stats) if return_stats else marked


__all__ = [
    'DEFAULT_SHARED_TOLERANCE',
    'SharedSegmentStats',
    'segments_coincide',
    'mark_shared_segments',
]
