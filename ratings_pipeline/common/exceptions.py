"""
Exceptions raised by the ratings pipeline.
"""


class RatingsPipelineError(Exception):
    """Base exception for ratings pipeline errors."""
    pass


class FetchError(RatingsPipelineError):
    """Provider response did not have the expected shape."""
    pass


class InvalidFormatError(RatingsPipelineError, ValueError):
    """Iteration name is not of the form <season>-week-<week>."""
    pass


class InvalidAttributeError(RatingsPipelineError, ValueError):
    """A numeric player attribute could not be parsed."""

    def __init__(self, attribute, value):
        self.attribute = attribute
        self.value = value
        super().__init__(f"Invalid {attribute}: {value!r}")


class DimensionNotFoundError(RatingsPipelineError, LookupError):
    """A required dimension row could not be resolved."""
    pass


class IterationNotFoundError(RatingsPipelineError, LookupError):
    """No rating iteration row exists for the requested name."""
    pass


class PoolTimeoutError(RatingsPipelineError):
    """No pooled connection became available in time."""
    pass


class StatementTimeoutError(RatingsPipelineError):
    """A statement ran longer than the configured ceiling."""
    pass
