"""Tests for outer-boundary tracing."""

import math

import pytest
from shapely.geometry import Polygon

from outlineforge.core import Point, PriorityTier, TraceStatus
from outlineforge.network import build_path_network
from outlineforge.parse import segments_from_points
from outlineforge.shared import mark_shared_segments
from outlineforge.trace import (
    TWO_PI,
    Candidate,
    TracePolicy,
    candidate_tier,
    choose_next,
    incumbent_rank,
    is_outward,
    normalize_angle,
    prefer_candidate,
    trace_outer_boundary,
    turn_angle,
)


def _square(x, y, path_index, size=1.0):
    return segments_from_points(
        [(x, y), (x + size, y), (x + size, y + size), (x, y + size)], path_index
    )


def _network(*paths):
    segments = [segment for path in paths for segment in path]
    return build_path_network(mark_shared_segments(segments))


def _candidate(turn, tier=PriorityTier.TURN):
    return Candidate(
        incidence=None,
        next_point=Point(0.0, 0.0),
        outgoing_angle=turn,
        turn_angle=turn,
        outward=False,
        tier=tier,
    )


class TestTraceOuterBoundary:
    """Tests for trace_outer_boundary."""

    def test_single_square(self):
        """Test that a lone square is walked counter-clockwise from its lower-left corner."""
        points = trace_outer_boundary(_network(_square(0, 0, 0)))
        assert points == [(0, 0), (1, 0), (1, 1), (0, 1)]

    def test_disjoint_squares_share_nothing(self):
        """Test that disjoint squares leave every segment walkable."""
        segments = mark_shared_segments(_square(0, 0, 0) + _square(5, 5, 1))
        assert not any(s.is_internal for s in segments)

    def test_edge_sharing_squares_raw_walk(self):
        """Test the raw walk around two squares sharing an edge."""
        result = trace_outer_boundary(
            _network(_square(0, 0, 0), _square(1, 0, 1)), return_result=True
        )
        assert result.status == TraceStatus.CLOSED
        assert result.raw_points == [(0, 0), (1, 0), (2, 0), (2, 1), (1, 1), (0, 1)]
        assert result.visited == {'0_0', '1_0', '1_1', '1_2', '0_2', '0_3'}

    def test_edge_sharing_squares_cleaned(self):
        """Test that cleanup reduces the two-square walk to a rectangle."""
        points = trace_outer_boundary(_network(_square(0, 0, 0), _square(1, 0, 1)))
        assert len(points) == 4
        assert set(points) == {(0, 0), (2, 0), (2, 1), (0, 1)}

    def test_l_shape_closes(self):
        """Test the walk around three squares in an L."""
        network = _network(_square(0, 0, 0), _square(1, 0, 1), _square(0, 1, 2))
        result = trace_outer_boundary(network, return_result=True)
        assert result.is_closed
        assert result.raw_points == [
            (0, 0), (1, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2), (0, 1),
        ]
        assert len(result.points) == 6
        assert Polygon(result.points).area == pytest.approx(3.0)

    def test_triangle_closes(self):
        """Test that a triangle closes in three iterations."""
        network = _network(segments_from_points([(0, 0), (4, 0), (2, 3)], 0))
        result = trace_outer_boundary(network, return_result=True)
        assert result.status == TraceStatus.CLOSED
        assert result.points == [(0, 0), (4, 0), (2, 3)]
        assert result.iterations == 3

    def test_empty_network(self):
        """Test that an empty network gives no points and EMPTY_INPUT."""
        assert trace_outer_boundary(build_path_network([])) == []

        result = trace_outer_boundary(build_path_network([]), return_result=True)
        assert result.status == TraceStatus.EMPTY_INPUT
        assert not result.is_usable

    def test_dead_end_returns_partial_walk(self):
        """Test that an open path stops at its dead end."""
        segments = segments_from_points([(0, 0), (1, 0), (1, 1)], 0, closed=False)
        result = trace_outer_boundary(build_path_network(segments), cleanup=False, return_result=True)
        assert result.status == TraceStatus.DEAD_END
        assert result.points == [(0, 0), (1, 0), (1, 1)]

    def test_iteration_limit(self):
        """Test that the walk stops at the iteration cap."""
        result = trace_outer_boundary(
            _network(_square(0, 0, 0)), max_iterations=2, return_result=True
        )
        assert result.status == TraceStatus.ITERATION_LIMIT
        assert result.iterations == 2
        assert result.raw_points == [(0, 0), (1, 0), (1, 1)]

    def test_internal_segments_never_walked(self):
        """Test that the shared edge is not visited."""
        result = trace_outer_boundary(
            _network(_square(0, 0, 0), _square(1, 0, 1)), return_result=True
        )
        assert '0_1' not in result.visited
        assert '1_3' not in result.visited

    def test_cleanup_disabled(self):
        """Test that cleanup=False keeps the raw walk."""
        points = trace_outer_boundary(
            _network(_square(0, 0, 0), _square(1, 0, 1)), cleanup=False
        )
        assert len(points) == 6

    def test_custom_cleanup(self):
        """Test that a custom cleanup callable is used."""
        points = trace_outer_boundary(_network(_square(0, 0, 0)), cleanup=lambda pts: pts[:3])
        assert points == [(0, 0), (1, 0), (1, 1)]

    @pytest.mark.parametrize("rejection", [None, []])
    def test_rejected_cleanup_keeps_raw_walk(self, rejection):
        """Test that a None or empty cleanup result keeps the raw walk."""
        result = trace_outer_boundary(
            _network(_square(0, 0, 0), _square(1, 0, 1)),
            cleanup=lambda pts: rejection,
            return_result=True,
        )
        assert result.points == result.raw_points
        assert len(result.points) == 6

    def test_no_repeated_closing_point(self):
        """Test that the start point is not repeated at the end."""
        points = trace_outer_boundary(_network(_square(0, 0, 0)))
        assert points[0] != points[-1]


class TestAngles:
    """Tests for the angle helpers."""

    def test_normalize_angle(self):
        """Test that angles are mapped into [0, 2*pi)."""
        assert normalize_angle(-math.pi / 2) == pytest.approx(1.5 * math.pi)
        assert normalize_angle(TWO_PI) == 0.0
        assert normalize_angle(-1e-17) == 0.0

    def test_turn_angle_without_heading(self):
        """Test that the first turn is measured from heading 0."""
        assert turn_angle(None, 1.0) == pytest.approx(1.0)

    def test_turn_angle(self):
        """Test turns relative to an incoming heading."""
        assert turn_angle(math.pi, math.pi / 2) == pytest.approx(1.5 * math.pi)
        assert turn_angle(0.0, math.pi / 2) == pytest.approx(math.pi / 2)

    def test_is_outward(self):
        """Test the outward-facing check against the centroid."""
        centroid = Point(0.0, 0.0)
        assert is_outward(Point(1.0, 0.0), Point(2.0, 0.0), centroid)
        assert not is_outward(Point(1.0, 0.0), Point(0.5, 0.0), centroid)
        # Perpendicular to the centroid direction is not outward
        assert not is_outward(Point(1.0, 0.0), Point(1.0, 1.0), centroid)


class TestPriorityLadder:
    """Tests for tier assignment and the candidate comparator."""

    def test_outward_junction_tier(self):
        """Test that an outward step from a junction gets the top tier."""
        assert candidate_tier(2.0, True, 4, True, TracePolicy()) == PriorityTier.OUTWARD_JUNCTION

    def test_outward_needs_junction_degree(self):
        """Test that outward steps below the junction degree are ordinary turns."""
        assert candidate_tier(2.0, True, 3, True, TracePolicy()) == PriorityTier.TURN

    def test_straight_tier(self):
        """Test that a near-zero turn is straight."""
        assert candidate_tier(0.05, False, 2, True, TracePolicy()) == PriorityTier.STRAIGHT

    def test_no_straight_tier_before_first_step(self):
        """Test that the first step is never straight."""
        assert candidate_tier(0.0, False, 2, False, TracePolicy()) == PriorityTier.TURN

    def test_policy_thresholds(self):
        """Test that policy thresholds change tier assignment."""
        policy = TracePolicy(straight_threshold=0.5, junction_degree=2)
        assert candidate_tier(0.3, False, 2, True, policy) == PriorityTier.STRAIGHT
        assert candidate_tier(2.0, True, 2, True, policy) == PriorityTier.OUTWARD_JUNCTION

    def test_outward_junction_beats_straight(self):
        """Test that an outward junction step beats a straight one."""
        challenger = _candidate(1.5, PriorityTier.OUTWARD_JUNCTION)
        incumbent = _candidate(0.0, PriorityTier.STRAIGHT)
        assert prefer_candidate(challenger, incumbent, TracePolicy())
        assert not prefer_candidate(incumbent, challenger, TracePolicy())

    def test_straight_beats_turn(self):
        """Test that a straight step beats an ordinary turn."""
        assert prefer_candidate(_candidate(0.05, PriorityTier.STRAIGHT), _candidate(1.0), TracePolicy())

    def test_smaller_turn_wins_within_tier(self):
        """Test that the smaller turn wins within one tier."""
        assert prefer_candidate(_candidate(0.5), _candidate(1.0), TracePolicy())
        assert not prefer_candidate(_candidate(1.0), _candidate(0.5), TracePolicy())

    def test_turns_rank_by_folded_angle(self):
        """Test that turns are ranked by their angle folded into [0, pi]."""
        assert prefer_candidate(_candidate(1.75 * math.pi), _candidate(math.pi), TracePolicy())

    @pytest.mark.parametrize("turn", [0.05, TWO_PI - 0.05])
    def test_collinear_incumbent_is_defended(self, turn):
        """Test that a nearly collinear incumbent only yields to a higher tier."""
        incumbent = _candidate(turn)
        assert incumbent_rank(incumbent, TracePolicy())[0] == PriorityTier.COLLINEAR_INCUMBENT
        assert not prefer_candidate(_candidate(0.01), incumbent, TracePolicy())
        assert prefer_candidate(_candidate(0.01, PriorityTier.STRAIGHT), incumbent, TracePolicy())

    def test_ties_keep_incumbent(self):
        """Test that equal ranks keep the incumbent."""
        assert not prefer_candidate(_candidate(0.5), _candidate(0.5), TracePolicy())

    def test_choose_next(self):
        """Test that choose_next returns the best ranked candidate."""
        first = _candidate(1.0)
        best = _candidate(0.5, PriorityTier.STRAIGHT)
        assert choose_next([first, best, _candidate(0.2)], TracePolicy()) is best

    def test_choose_next_first_wins_ties(self):
        """Test that the first of equal candidates is chosen."""
        first = _candidate(0.5)
        assert choose_next([first, _candidate(0.5)], TracePolicy()) is first

    def test_choose_next_empty(self):
        """Test that no candidates give None."""
        assert choose_next([], TracePolicy()) is None
