"""Domain exceptions raised inside the aggregators.

They never cross a public service boundary: the result boundary turns them
into tagged failures.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories of aggregator operations."""

    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
    INSUFFICIENT_DATA = "InsufficientData"
    RESOLUTION_FAILURE = "ResolutionFailure"
    INTERNAL = "Internal"


class AggregationError(Exception):
    """Base class for expected aggregation failures."""

    kind = ErrorKind.INTERNAL


class NotFoundError(AggregationError):
    """A referenced activity, parcel or crop does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidInputError(AggregationError):
    """A required id or parameter is missing or malformed."""

    kind = ErrorKind.INVALID_INPUT


class InsufficientDataError(AggregationError):
    """Not enough observations to compute the requested figure."""

    kind = ErrorKind.INSUFFICIENT_DATA
