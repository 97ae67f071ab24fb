"""Core types and utilities for outlineforge.

This module provides the point/segment records, the point identity policy,
the disjoint-set forest, enums and exceptions used throughout the library.
"""

from .types import (
    MergeMethod,
    TraceStatus,
    PriorityTier,
    OutlineSource,
    coerce_enum,
)

from .errors import (
    OutlineforgeError,
    ValidationError,
    ConfigurationError,
    TraceError,
)

from .segment import Point, Segment, endpoint_key, validate_segments
from .identity import PointIdentityPolicy, coerce_identity
from .union_find import DisjointSet

__all__ = [
    # Enums
    'MergeMethod',
    'TraceStatus',
    'PriorityTier',
    'OutlineSource',
    'coerce_enum',

    # Exceptions
    'OutlineforgeError',
    'ValidationError',
    'ConfigurationError',
    'TraceError',

    # Records
    'Point',
    'Segment',
    'endpoint_key',
    'validate_segments',

    # Identity and clustering
    'PointIdentityPolicy',
    'coerce_identity',
    'DisjointSet',
]
