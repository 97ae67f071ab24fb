"""Path network: point-to-segment adjacency used by the boundary walk."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Sequence, Union

import numpy as np

from .core.identity import PointIdentityPolicy, coerce_identity
from .core.segment import Point, Segment

logger = logging.getLogger(__name__)

DEFAULT_KEY_PRECISION = 2


class Incidence(NamedTuple):
    """A segment touching a network point, and which of its ends touches it."""
    segment: Segment
    is_start: bool

    @property
    def far_point(self) -> Point:
        return self.segment.far_end(self.is_start)


@dataclass
class PathNetwork:
    """Segments indexed by the quantized key of each endpoint.

    Attributes:
        segments: All segments, in input order
        adjacency: Key -> incidences, in segment order
        points: Key -> first endpoint seen with that key
        identity: Policy that produced the keys
    """
    segments: List[Segment]
    adjacency: Dict[str, List[Incidence]] = field(default_factory=dict)
    points: Dict[str, Point] = field(default_factory=dict)
    identity: PointIdentityPolicy = field(default_factory=PointIdentityPolicy)

    def __len__(self) -> int:
        return len(self.segments)

    def keys(self) -> List[str]:
        return list(self.adjacency)

    def key(self, point: Point) -> str:
        return self.identity.key(point)

    def incidences(self, key: str) -> List[Incidence]:
        return self.adjacency.get(key, [])

    def degree(self, key: str) -> int:
        """Number of segment ends at ``key``, internal and visited ones included."""
        return len(self.adjacency.get(key, ()))

    def point(self, key: str) -> Point:
        return self.points[key]

    def centroid(self) -> Optional[Point]:
        """Mean of the distinct network points; None for an empty network."""
        if not self.points:
            return None
        cx, cy = np.array(list(self.points.values()), dtype=float).mean(axis=0)
        return Point(float(cx), float(cy))

    def start_key(self) -> Optional[str]:
        """Key of the leftmost point, lowest first among equal x."""
        if not self.points:
            return None
        return min(self.points, key=lambda k: (self.points[k].x, self.points[k].y))


def build_path_network(
    segments: Sequence[Segment],
    identity: Union[PointIdentityPolicy, int, None] = None,
) -> PathNetwork:
    """Index segments by the quantized keys of their endpoints.

    Keys come from ``identity.key`` (two decimals by default). Points that
    are within tolerance of each other but quantize to different keys are
    NOT linked; run :func:`~outlineforge.merge.merge_coincident_points`
    first when inputs drift.

    Args:
        segments: Segments to index
        identity: Point identity policy, or a bare key precision (decimals)

    Returns:
        A new :class:`PathNetwork`

    Examples:
        >>> network = build_path_network(segments)
        >>> network.degree('1.00_0.00')
        4
    """
    if isinstance(identity, int) and not isinstance(identity, bool):
        policy = PointIdentityPolicy(precision=identity)
    else:
        policy = coerce_identity(identity, PointIdentityPolicy().tolerance, DEFAULT_KEY_PRECISION)

    network = PathNetwork(segments=list(segments), identity=policy)
    for segment in network.segments:
        for is_start in (True, False):
            point = segment.endpoint(is_start)
            key = policy.key(point)
            network.points.setdefault(key, point)
            network.adjacency.setdefault(key, []).append(Incidence(segment, is_start))

    logger.debug(
        "network built with %d nodes and %d segments",
        len(network.adjacency), len(network.segments),
    )
    return network


__all__ = [
    'DEFAULT_KEY_PRECISION',
    'Incidence',
    'PathNetwork',
    'build_path_network',
]
