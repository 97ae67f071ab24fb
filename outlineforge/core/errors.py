"""Exception hierarchy for outlineforge.

The geometry components themselves degrade instead of raising (a dead end or
an exhausted walk simply yields fewer points). Exceptions are reserved for the
entry points: rejecting unusable input, rejecting bad configuration, and
reporting an unclosed outline when the caller asked for strict behaviour.
"""


class OutlineforgeError(Exception):
    """Base class for all outlineforge errors."""
    pass


class ValidationError(OutlineforgeError):
    """Raised when input geometry cannot be processed.

    Attributes:
        segment_id: Identifier of the offending segment, if known
    """

    def __init__(self, message: str, segment_id=None):
        super().__init__(message)
        self.segment_id = segment_id


class ConfigurationError(OutlineforgeError):
    """Raised when a configuration value is out of range."""
    pass


class TraceError(OutlineforgeError):
    """Raised when the boundary walk does not close and closure was required.

    Attributes:
        result: The partial ``TraceResult`` produced by the walk
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


__all__ = [
    'OutlineforgeError',
    'ValidationError',
    'ConfigurationError',
    'TraceError',
]
