"""Point and segment records shared by every stage of the outline pipeline."""

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

import numpy as np

from .errors import ValidationError


class Point(NamedTuple):
    """Immutable 2D point. Identity is by value only."""
    x: float
    y: float


@dataclass
class Segment:
    """Directed straight segment belonging to one input path.

    Attributes:
        start: First endpoint
        end: Second endpoint
        path_index: Index of the path the segment was authored in
        segment_index: Position of the segment within its path
        id: Identifier unique across the whole input; defaults to
            ``"{path_index}_{segment_index}"`` and survives merging
        is_internal: True once the segment is known to be shared with
            another path
    """
    start: Point
    end: Point
    path_index: int
    segment_index: int
    id: Optional[str] = None
    is_internal: bool = False

    def __post_init__(self):
        if not isinstance(self.start, Point):
            self.start = Point(float(self.start[0]), float(self.start[1]))
        if not isinstance(self.end, Point):
            self.end = Point(float(self.end[0]), float(self.end[1]))
        if self.id is None:
            self.id = f"{self.path_index}_{self.segment_index}"

    def endpoint(self, at_start: bool) -> Point:
        return self.start if at_start else self.end

    def far_end(self, from_start: bool) -> Point:
        """Endpoint opposite the one a walk arrived at."""
        return self.end if from_start else self.start

    def endpoint_key(self, at_start: bool) -> str:
        return endpoint_key(self.path_index, self.segment_index, at_start)


def endpoint_key(path_index: int, segment_index: int, at_start: bool) -> str:
    """Key identifying one endpoint of one segment, e.g. ``"0_3_start"``."""
    return f"{path_index}_{segment_index}_{'start' if at_start else 'end'}"


def validate_segments(segments: Iterable[Segment]) -> None:
    """Reject segments with NaN or infinite coordinates.

    Raises:
        ValidationError: On the first segment holding a non-finite coordinate
    """
    for segment in segments:
        coords = np.array([segment.start, segment.end], dtype=float)
        if not np.all(np.isfinite(coords)):
            raise ValidationError(
                f"Segment {segment.id} has non-finite coordinates: "
                f"{tuple(segment.start)} -> {tuple(segment.end)}",
                segment_id=segment.id,
            )


__all__ = [
    'Point',
    'Segment',
    'endpoint_key',
    'validate_segments',
]
