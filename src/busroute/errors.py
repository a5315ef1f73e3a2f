"""Error types raised by the route computation pipeline.

Every error derives from ``ValueError`` so that callers (the API layer in
particular) can treat them the same way they treat any other invalid input.
Insufficient data is not an error: it is reported through ``Route.status``.
"""

from __future__ import annotations


class RouteComputationError(ValueError):
    """Base class for pipeline failures caused by invalid calls."""


class InvalidParameterError(RouteComputationError):
    """A parameter is outside the range the algorithm accepts."""


class InvalidKError(InvalidParameterError):
    """Requested cluster count is not positive."""

    def __init__(self, k: int) -> None:
        super().__init__(f"K must be positive, got {k}")
        self.k = k


class KExceedsPointsError(InvalidParameterError):
    """Requested cluster count is larger than the number of distinct points."""

    def __init__(self, k: int, points: int) -> None:
        super().__init__(f"K ({k}) cannot exceed number of distinct points ({points})")
        self.k = k
        self.points = points


class ProblemTooLargeError(InvalidParameterError):
    """Exact ordering was requested for more nodes than Held-Karp can handle."""

    def __init__(self, nodes: int, limit: int) -> None:
        super().__init__(
            f"Exact route ordering supports at most {limit} nodes (stops + endpoint), got {nodes}"
        )
        self.nodes = nodes
        self.limit = limit


class EmptyInputError(RouteComputationError):
    """An operation that needs at least one point received none."""


class ZeroWeightError(RouteComputationError):
    """Weights passed to a weighted operation sum to zero."""
