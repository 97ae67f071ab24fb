"""Point identity policy.

Two notions of "the same point" coexist in the pipeline:

- a continuous one, Euclidean distance within a tolerance, used when deciding
  whether endpoints coincide or segments are shared;
- a discrete one, coordinates quantized to a fixed number of decimals and
  joined into a string key, used to bucket points in the adjacency map.

They are kept apart. Two points within tolerance of each other can
still fall into different buckets (``0.994`` and ``0.996`` at two decimals),
in which case the network does not link them unless the merger has already
moved them onto a shared representative.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .errors import ConfigurationError


@dataclass(frozen=True)
class PointIdentityPolicy:
    """How points are compared and keyed.

    Attributes:
        tolerance: Maximum Euclidean distance for two points to match
        precision: Decimal places kept in adjacency keys

    Examples:
        >>> policy = PointIdentityPolicy(tolerance=0.01, precision=2)
        >>> policy.same_point((1.0, 0.0), (1.004, 0.0))
        True
        >>> policy.key((1.0, 0.0))
        '1.00_0.00'
    """
    tolerance: float = 0.01
    precision: int = 2

    def __post_init__(self):
        if not self.tolerance >= 0:
            raise ConfigurationError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.precision < 0:
            raise ConfigurationError(f"precision must be non-negative, got {self.precision}")

    def distance(self, p: Sequence[float], q: Sequence[float]) -> float:
        return math.hypot(p[0] - q[0], p[1] - q[1])

    def same_point(self, p: Sequence[float], q: Sequence[float]) -> bool:
        return self.distance(p, q) <= self.tolerance

    def key(self, p: Sequence[float]) -> str:
        return f"{self._quantize(p[0])}_{self._quantize(p[1])}"

    def _quantize(self, value: float) -> str:
        text = f"{value:.{self.precision}f}"
        # -0.00 and 0.00 are the same bucket
        if text.startswith('-') and float(text) == 0:
            text = text[1:]
        return text


def coerce_identity(
    value: Union[PointIdentityPolicy, float, int, None],
    default_tolerance: float,
    precision: int = 2,
) -> PointIdentityPolicy:
    """Build a policy from a policy, a bare tolerance, or ``None``."""
    if isinstance(value, PointIdentityPolicy):
        return value
    if value is None:
        return PointIdentityPolicy(tolerance=default_tolerance, precision=precision)
    return PointIdentityPolicy(tolerance=float(value), precision=precision)


__all__ = [
    'PointIdentityPolicy',
    'coerce_identity',
]
