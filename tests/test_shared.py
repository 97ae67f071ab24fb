"""Tests for shared-segment classification."""

import pytest

from outlineforge.core import PointIdentityPolicy, Segment
from outlineforge.parse import segments_from_points
from outlineforge.shared import mark_shared_segments, segments_coincide


def _square(x, y, size=1.0, path_index=0):
    return segments_from_points(
        [(x, y), (x + size, y), (x + size, y + size), (x, y + size)], path_index
    )


class TestMarkSharedSegments:
    """Tests for mark_shared_segments."""

    def test_disjoint_squares_have_no_internal_segments(self):
        """Test that squares far apart share no segments."""
        segments = _square(0, 0, path_index=0) + _square(5, 5, path_index=1)
        marked = mark_shared_segments(segments, 0.01)
        assert not any(s.is_internal for s in marked)

    def test_edge_sharing_squares(self):
        """Test that the shared edge is marked on both paths."""
        a = _square(0, 0, path_index=0)
        b = segments_from_points([(1, 0), (2, 0), (2, 1), (1, 1)], path_index=1)
        marked, stats = mark_shared_segments(a + b, 0.01, return_stats=True)

        internal = sorted(s.id for s in marked if s.is_internal)
        assert internal == ['0_1', '1_3']
        assert stats.newly_marked == 2
        assert stats.matched_pairs == 1
        assert stats.comparisons == 16

    def test_same_direction_match(self):
        """Test that segments in the same direction are shared too."""
        a = Segment(start=(0, 0), end=(1, 0), path_index=0, segment_index=0)
        b = Segment(start=(0, 0), end=(1, 0), path_index=1, segment_index=0)
        mark_shared_segments([a, b])
        assert a.is_internal and b.is_internal

    def test_same_path_never_marked(self):
        """Coincident segments of one path are not compared."""
        a = Segment(start=(0, 0), end=(1, 0), path_index=3, segment_index=0)
        b = Segment(start=(1, 0), end=(0, 0), path_index=3, segment_index=1)
        marked, stats = mark_shared_segments([a, b], return_stats=True)
        assert not any(s.is_internal for s in marked)
        assert stats.comparisons == 0

    def test_marking_is_symmetric(self):
        """Test that every internal segment has an internal partner on another path."""
        a = _square(0, 0, path_index=0)
        b = segments_from_points([(0, 1), (1, 1), (1, 2), (0, 2)], path_index=1)
        c = _square(1, 0, path_index=2)
        marked = mark_shared_segments(a + b + c, 0.01)

        by_id = {s.id: s for s in marked}
        for s in marked:
            if not s.is_internal:
                continue
            partners = [
                o for o in marked
                if o.path_index != s.path_index
                and segments_coincide(s, o, PointIdentityPolicy(tolerance=0.01))
            ]
            assert partners
            assert all(by_id[o.id].is_internal for o in partners)

    def test_tolerance_applies(self):
        """Test that the endpoint tolerance decides a match."""
        a = Segment(start=(0, 0), end=(1, 0), path_index=0, segment_index=0)
        b = Segment(start=(1.005, 0), end=(0, 0.005), path_index=1, segment_index=0)
        assert mark_shared_segments([a, b], 0.01)[0].is_internal
        a.is_internal = b.is_internal = False
        assert not mark_shared_segments([a, b], 0.001)[0].is_internal

    def test_already_internal_not_counted_again(self):
        """Test that pre-marked segments are not counted as newly marked."""
        a = Segment(start=(0, 0), end=(1, 0), path_index=0, segment_index=0, is_internal=True)
        b = Segment(start=(1, 0), end=(0, 0), path_index=1, segment_index=0)
        _, stats = mark_shared_segments([a, b], return_stats=True)
        assert stats.newly_marked == 1
        assert b.is_internal

    def test_marks_in_place(self):
        """Test that the given segment objects are marked and returned."""
        segments = _square(0, 0, path_index=0) + _square(0, 0, path_index=1)
        marked = mark_shared_segments(segments)
        assert all(m is s for m, s in zip(marked, segments))
        assert all(s.is_internal for s in segments)

    def test_empty_input(self):
        """Test that empty input gives no comparisons."""
        marked, stats = mark_shared_segments([], return_stats=True)
        assert marked == []
        assert stats.comparisons == 0

    def test_accepts_identity_policy(self):
        """Test that an identity policy can replace a bare tolerance."""
        a = Segment(start=(0, 0), end=(1, 0), path_index=0, segment_index=0)
        b = Segment(start=(1.5, 0), end=(0, 0), path_index=1, segment_index=0)
        marked = mark_shared_segments([a, b], PointIdentityPolicy(tolerance=0.6))
        assert all(s.is_internal for s in marked)


@pytest.mark.parametrize('offset', [0.0, 0.004])
def test_coincide_both_orientations(offset):
    """Test that segments coincide in either orientation."""
    policy = PointIdentityPolicy(tolerance=0.01)
    a = Segment(start=(0, 0), end=(3, 4), path_index=0, segment_index=0)
    forward = Segment(start=(offset, 0), end=(3, 4 + offset), path_index=1, segment_index=0)
    backward = Segment(start=(3, 4 + offset), end=(offset, 0), path_index=1, segment_index=1)
    assert segments_coincide(a, forward, policy)
    assert segments_coincide(a, backward, policy)
