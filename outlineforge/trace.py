"""Outer-boundary tracing.

Starting from the leftmost (then lowest) network point, the walk repeatedly
leaves the current point along the best unvisited boundary segment, where
"best" is decided by a small ladder of priority tiers followed by the
smallest turn. Internal (shared) segments are never walked. The walk stops
when it returns to its start, runs out of segments, or hits the iteration
cap; it never raises on odd geometry and instead returns what it has.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple, Union

from .cleanup import cleanup_boundary
from .core.segment import Point, Segment
from .core.types import PriorityTier, TraceStatus
from .network import Incidence, PathNetwork

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

CleanupFunc = Callable[[List[Point]], Optional[Sequence[Point]]]


@dataclass(frozen=True)
class TracePolicy:
    """Thresholds of the priority ladder.

    Attributes:
        straight_threshold: Turns closer than this to 0 (radians) count as
            straight; also the collinearity band for a defended incumbent
        junction_degree: Minimum number of segment ends at a point for the
            outward-facing preference to apply
    """
    straight_threshold: float = 0.1
    junction_degree: int = 4


@dataclass(frozen=True)
class Candidate:
    """One possible next step of the walk."""
    incidence: Incidence
    next_point: Point
    outgoing_angle: float
    turn_angle: float
    outward: bool
    tier: PriorityTier

    @property
    def segment(self) -> Segment:
        return self.incidence.segment

    @property
    def normalized_turn(self) -> float:
        """Turn folded into [0, pi]; used for ranking only."""
        return min(self.turn_angle, TWO_PI - self.turn_angle)


@dataclass
class TraceResult:
    """Outcome of :func:`trace_outer_boundary`.

    Attributes:
        points: Final boundary (cleaned when the cleanup accepted it)
        raw_points: Boundary as walked, before cleanup
        status: Why the walk stopped
        iterations: Loop iterations used
        visited: Ids of the segments walked
    """
    points: List[Point]
    raw_points: List[Point]
    status: TraceStatus
    iterations: int = 0
    visited: Set[str] = field(default_factory=set)

    @property
    def is_closed(self) -> bool:
        return self.status == TraceStatus.CLOSED

    @property
    def is_usable(self) -> bool:
        """Fewer than three points is no boundary at all."""
        return len(self.points) >= 3


def normalize_angle(angle: float) -> float:
    """Map ``angle`` into [0, 2*pi)."""
    result = angle % TWO_PI
    # -1e-17 % 2pi rounds up to exactly 2pi
    return 0.0 if result >= TWO_PI else result


def turn_angle(incoming: Optional[float], outgoing: float) -> float:
    """Turn from the incoming heading (0 before the first step) to ``outgoing``."""
    return normalize_angle(outgoing - (incoming if incoming is not None else 0.0))


def is_near_collinear(turn: float, threshold: float) -> bool:
    return abs(turn) < threshold or abs(turn - TWO_PI) < threshold


def is_outward(current: Point, next_point: Point, centroid: Point) -> bool:
    """True if stepping to ``next_point`` moves away from ``centroid``."""
    dot = ((current.x - centroid.x) * (next_point.x - current.x)
           + (current.y - centroid.y) * (next_point.y - current.y))
    return dot > 0


def candidate_tier(
    turn: float,
    outward: bool,
    degree: int,
    has_heading: bool,
    policy: TracePolicy,
) -> PriorityTier:
    """Tier of a fresh candidate.

    Examples:
        >>> candidate_tier(1.2, True, 4, True, TracePolicy())
        <PriorityTier.OUTWARD_JUNCTION: -3>
        >>> candidate_tier(0.05, False, 2, True, TracePolicy())
        <PriorityTier.STRAIGHT: -2>
        >>> candidate_tier(0.05, False, 2, False, TracePolicy())
        <PriorityTier.TURN: 0>
    """
    if outward and degree >= policy.junction_degree:
        return PriorityTier.OUTWARD_JUNCTION
    if has_heading and abs(turn) < policy.straight_threshold:
        return PriorityTier.STRAIGHT
    return PriorityTier.TURN


def candidate_rank(candidate: Candidate) -> Tuple[int, float]:
    return int(candidate.tier), candidate.normalized_turn


def incumbent_rank(candidate: Candidate, policy: TracePolicy) -> Tuple[int, float]:
    """Rank of the current best; nearly collinear bests hold at COLLINEAR_INCUMBENT."""
    tier = candidate.tier
    if tier > PriorityTier.COLLINEAR_INCUMBENT and is_near_collinear(
        candidate.turn_angle, policy.straight_threshold
    ):
        tier = PriorityTier.COLLINEAR_INCUMBENT
    return int(tier), candidate.normalized_turn


def prefer_candidate(
    challenger: Candidate,
    incumbent: Optional[Candidate],
    policy: TracePolicy,
) -> bool:
    """True if ``challenger`` should replace ``incumbent``. Ties keep the incumbent."""
    if incumbent is None:
        return True
    return candidate_rank(challenger) < incumbent_rank(incumbent, policy)


def gather_candidates(
    network: PathNetwork,
    key: str,
    current: Point,
    incoming: Optional[float],
    centroid: Point,
    visited: Set[str],
    policy: TracePolicy,
) -> List[Candidate]:
    """Unvisited boundary segments leaving ``key``, in adjacency order."""
    degree = network.degree(key)
    candidates: List[Candidate] = []

    for incidence in network.incidences(key):
        segment = incidence.segment
        if segment.is_internal or segment.id in visited:
            continue
        next_point = incidence.far_point
        outgoing = math.atan2(next_point.y - current.y, next_point.x - current.x)
        turn = turn_angle(incoming, outgoing)
        outward = is_outward(current, next_point, centroid)
        candidates.append(Candidate(
            incidence=incidence,
            next_point=next_point,
            outgoing_angle=outgoing,
            turn_angle=turn,
            outward=outward,
            tier=candidate_tier(turn, outward, degree, incoming is not None, policy),
        ))

    return candidates


def choose_next(candidates: Sequence[Candidate], policy: TracePolicy) -> Optional[Candidate]:
    """Best candidate under the priority ladder; first found wins ties."""
    best: Optional[Candidate] = None
    for candidate in candidates:
        if prefer_candidate(candidate, best, policy):
            best = candidate
    return best


def trace_outer_boundary(
    network: PathNetwork,
    cleanup: Union[CleanupFunc, None, bool] = None,
    policy: Optional[TracePolicy] = None,
    max_iterations: Optional[int] = None,
    return_result: bool = False,
) -> Union[List[Point], TraceResult]:
    """Walk the outer boundary of a path network.

    Args:
        network: Network built by :func:`~outlineforge.network.build_path_network`,
            with internal segments already marked
        cleanup: Post-processing collaborator ``points -> points | None``.
            None uses :func:`~outlineforge.cleanup.cleanup_boundary`, False
            disables cleanup. An empty or None return keeps the raw walk.
        policy: Priority ladder thresholds
        max_iterations: Iteration cap (default ``2 * len(network.segments)``)
        return_result: If True, return a :class:`TraceResult`

    Returns:
        Boundary points (no repeated closing point), or a TraceResult if
        return_result=True. Fewer than three points means no usable boundary.

    Examples:
        >>> network = build_path_network(mark_shared_segments(segments))
        >>> outline = trace_outer_boundary(network)
        >>> result = trace_outer_boundary(network, return_result=True)
        >>> result.status
        <TraceStatus.CLOSED: 'closed'>
    """
    policy = policy or TracePolicy()
    if cleanup is None or cleanup is True:
        cleanup = cleanup_boundary

    if not network.segments:
        logger.debug("no segments to trace")
        result = TraceResult(points=[], raw_points=[], status=TraceStatus.EMPTY_INPUT)
        return result if return_result else result.points

    centroid = network.centroid()
    start_key = network.start_key()
    current = network.point(start_key)
    current_key = start_key
    path = [current]
    visited: Set[str] = set()
    incoming: Optional[float] = None

    cap = max_iterations if max_iterations is not None else 2 * len(network.segments)
    status = TraceStatus.ITERATION_LIMIT
    iterations = 0

    while iterations < cap:
        iterations += 1
        candidates = gather_candidates(
            network, current_key, current, incoming, centroid, visited, policy
        )
        best = choose_next(candidates, policy)
        if best is None:
            status = TraceStatus.DEAD_END
            break

        visited.add(best.segment.id)
        incoming = best.outgoing_angle
        next_key = network.key(best.next_point)
        logger.debug(
            "step %d: %s -> %s via %s (turn %.3f, tier %s)",
            iterations, current_key, next_key, best.segment.id,
            best.turn_angle, best.tier.name,
        )

        if next_key == start_key and len(path) > 2:
            status = TraceStatus.CLOSED
            break

        path.append(best.next_point)
        current = best.next_point
        current_key = next_key

    logger.debug("walk stopped after %d iterations: %s, %d points", iterations, status.value, len(path))

    points = list(path)
    if cleanup:
        cleaned = cleanup(list(path))
        if cleaned is not None and len(cleaned) > 0:
            points = [Point(float(p[0]), float(p[1])) for p in cleaned]

    result = TraceResult(
        points=points,
        raw_points=path,
        status=status,
        iterations=iterations,
        visited=visited,
    )
    return result if return_result else result.points


__all__ = [
    'TWO_PI',
    'TracePolicy',
    'Candidate',
    'TraceResult',
    'normalize_angle',
    'turn_angle',
    'is_near_collinear',
    'is_outward',
    'candidate_tier',
    'candidate_rank',
    'incumbent_rank',
    'prefer_candidate',
    'gather_candidates',
    'choose_next',
    'trace_outer_boundary',
]
