"""Coincident-point merging.

Paths authored independently rarely agree to the last decimal on the corners
they share. This module collapses endpoints from different paths that lie
within a tolerance of each other into "supernodes": every member endpoint is
moved onto the centroid of its cluster, so downstream stages see one exact
coordinate where the input had several nearly equal ones.

The merge is lossy. A representative point is a centroid and need not equal
any of the original points; exactly coincident inputs pass through unchanged.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
import shapely
from shapely.strtree import STRtree

from .core.identity import PointIdentityPolicy, coerce_identity
from .core.segment import Point, Segment
from .core.types import MergeMethod, coerce_enum
from .core.union_find import DisjointSet

logger = logging.getLogger(__name__)

DEFAULT_MERGE_TOLERANCE = 5.0


@dataclass(frozen=True)
class CandidateConnection:
    """Two endpoints from different paths close enough to be merged."""
    first_key: str
    second_key: str
    distance: float


@dataclass
class Supernode:
    """Merged representative of a cluster of endpoints.

    Attributes:
        point: Centroid of the member endpoints
        members: Endpoint keys (``"{path}_{segment}_{start|end}"``)
    """
    point: Point
    members: List[str]


@dataclass
class MergeStats:
    """Diagnostics from :func:`merge_coincident_points`.

    Attributes:
        candidates: Candidate connections found between different paths
        unions_applied: Candidates that joined two previously separate clusters
        supernodes: Clusters with more than one member
        moved_endpoints: Endpoints whose coordinates changed
    """
    candidates: int = 0
    unions_applied: int = 0
    supernodes: int = 0
    moved_endpoints: int = 0


def find_candidate_connections(
    segments: Sequence[Segment],
    identity: PointIdentityPolicy,
    method: Union[MergeMethod, str] = MergeMethod.PAIRWISE,
) -> List[CandidateConnection]:
    """Find endpoint pairs from different paths within ``identity.tolerance``.

    Args:
        segments: Input segments
        identity: Policy providing the distance tolerance and geometric keys
        method: Discovery method (enum or string literal):
            - MergeMethod.PAIRWISE: all cross-path segment pairs, start/end
              combinations in order; a pair of quantized geometric keys is
              only reported once (default)
            - MergeMethod.INDEXED: STRtree query per endpoint; every
              endpoint pair is reported once

    Returns:
        Candidate connections in discovery order
    """
    method = coerce_enum(method, MergeMethod)
    if method == MergeMethod.INDEXED:
        return _indexed_candidates(segments, identity)
    return _pairwise_candidates(segments, identity)


def _pairwise_candidates(
    segments: Sequence[Segment],
    identity: PointIdentityPolicy,
) -> List[CandidateConnection]:
    connections: List[CandidateConnection] = []
    seen_pairs = set()

    for i, first in enumerate(segments):
        for second in segments[i + 1:]:
            # Never merge points from the same path
            if first.path_index == second.path_index:
                continue

            for first_at_start in (True, False):
                for second_at_start in (True, False):
                    p = first.endpoint(first_at_start)
                    q = second.endpoint(second_at_start)
                    distance = identity.distance(p, q)
                    if not distance <= identity.tolerance:
                        continue

                    pair = tuple(sorted((identity.key(p), identity.key(q))))
                    if pair in seen_pairs:
                        continue
                    seen_pairs.add(pair)
                    connections.append(CandidateConnection(
                        first.endpoint_key(first_at_start),
                        second.endpoint_key(second_at_start),
                        distance,
                    ))

    return connections


def _indexed_candidates(
    segments: Sequence[Segment],
    identity: PointIdentityPolicy,
) -> List[CandidateConnection]:
    endpoints = [(segment, at_start) for segment in segments for at_start in (True, False)]
    if not endpoints:
        return []

    coords = np.array([segment.endpoint(at_start) for segment, at_start in endpoints], dtype=float)
    geoms = shapely.points(coords)
    tree = STRtree(geoms)

    if identity.tolerance > 0:
        left, right = tree.query(geoms, predicate='dwithin', distance=identity.tolerance)
    else:
        left, right = tree.query(geoms, predicate='intersects')

    keep = left < right
    left, right = left[keep], right[keep]
    order = np.lexsort((right, left))

    connections: List[CandidateConnection] = []
    for i, j in zip(left[order], right[order]):
        first, first_at_start = endpoints[i]
        second, second_at_start = endpoints[j]
        if first.path_index == second.path_index:
            continue
        connections.append(CandidateConnection(
            first.endpoint_key(first_at_start),
            second.endpoint_key(second_at_start),
            float(np.linalg.norm(coords[i] - coords[j])),
        ))

    return connections


def cluster_endpoints(
    segments: Sequence[Segment],
    connections: Sequence[CandidateConnection],
) -> Tuple[DisjointSet, int]:
    """Cluster endpoints with a disjoint-set forest.

    Endpoints holding exactly the same coordinates (the joint between two
    consecutive segments of a path, for instance) start out in one set, so a
    connection reaching any of them moves all of them together. Each
    candidate connection is then applied as a union.

    Returns:
        Tuple of (forest, number of unions that joined separate clusters)
    """
    forest = DisjointSet()
    joints: Dict[Point, str] = {}

    for segment in segments:
        for at_start in (True, False):
            key = segment.endpoint_key(at_start)
            forest.add(key)
            anchor = joints.setdefault(segment.endpoint(at_start), key)
            if anchor != key:
                forest.union(anchor, key)

    unions_applied = 0
    for connection in connections:
        if forest.union(connection.first_key, connection.second_key):
            unions_applied += 1

    return forest, unions_applied


def build_supernodes(
    segments: Sequence[Segment],
    forest: DisjointSet,
) -> Dict[str, Supernode]:
    """Create a supernode for every cluster with more than one endpoint.

    Returns:
        Mapping from each member endpoint key to its cluster's supernode
    """
    coords: Dict[str, Point] = {}
    for segment in segments:
        coords[segment.endpoint_key(True)] = segment.start
        coords[segment.endpoint_key(False)] = segment.end

    by_member: Dict[str, Supernode] = {}
    for members in forest.groups().values():
        if len(members) < 2:
            continue

        points = np.array([coords[m] for m in members], dtype=float)
        if np.all(points == points[0]):
            representative = coords[members[0]]
        else:
            cx, cy = points.mean(axis=0)
            representative = Point(float(cx), float(cy))

        supernode = Supernode(point=representative, members=list(members))
        for member in members:
            by_member[member] = supernode

    return by_member


def merge_coincident_points(
    segments: Sequence[Segment],
    identity: Union[PointIdentityPolicy, float, None] = None,
    method: Union[MergeMethod, str] = MergeMethod.PAIRWISE,
    return_stats: bool = False,
) -> Union[List[Segment], Tuple[List[Segment], MergeStats]]:
    """Merge near-coincident endpoints from different paths into supernodes.

    Args:
        segments: Input segments (not modified)
        identity: Point identity policy, or a bare distance tolerance
            (default 5.0). Independent of the tolerance used to classify
            shared segments and of the adjacency key precision.
        method: Candidate discovery method, see :func:`find_candidate_connections`
        return_stats: If True, also return a :class:`MergeStats`

    Returns:
        New segments with merged endpoints, or ``(segments, stats)`` if
        return_stats=True. Segment ids and flags are preserved.

    Examples:
        >>> merged = merge_coincident_points(segments, 1.0)
        >>> merged, stats = merge_coincident_points(segments, 1.0, return_stats=True)
        >>> stats.moved_endpoints
        2
    """
    policy = coerce_identity(identity, DEFAULT_MERGE_TOLERANCE)
    segments = list(segments)

    connections = find_candidate_connections(segments, policy, method)
    forest, unions_applied = cluster_endpoints(segments, connections)
    supernodes = build_supernodes(segments, forest)

    stats = MergeStats(
        candidates=len(connections),
        unions_applied=unions_applied,
        supernodes=len({id(node) for node in supernodes.values()}),
    )

    merged: List[Segment] = []
    for segment in segments:
        start_node = supernodes.get(segment.endpoint_key(True))
        end_node = supernodes.get(segment.endpoint_key(False))
        start = start_node.point if start_node is not None else segment.start
        end = end_node.point if end_node is not None else segment.end
        stats.moved_endpoints += (start != segment.start) + (end != segment.end)
        merged.append(replace(segment, start=start, end=end))

    logger.debug(
        "merged endpoints: %d candidates, %d unions, %d supernodes, %d endpoints moved",
        stats.candidates, stats.unions_applied, stats.supernodes, stats.moved_endpoints,
    )
    return (merged, stats) if return_stats else merged


__all__ = [
    'DEFAULT_MERGE_TOLERANCE',
    'CandidateConnection',
    'Supernode',
    'MergeStats',
    'find_candidate_connections',
    'cluster_endpoints',
    'build_supernodes',
    'merge_coincident_points',
]
