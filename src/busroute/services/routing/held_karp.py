"""Exact stop ordering with Held-Karp dynamic programming.

The route has a fixed terminal (the endpoint) and a free first stop, so the
solver looks for the shortest Hamiltonian *path*, not a tour. Cost grows as
O(2^n * n^2) per start node; ``settings.held_karp_max_nodes`` caps n and a
larger stop count needs a heuristic solver instead.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Sequence

import numpy as np

from ...config import settings
from ...errors import InvalidParameterError, ProblemTooLargeError
from ...models.domain import GeoPoint
from ..geospatial import haversine_matrix
from .models import OptimalRoute, TSPResult

logger = logging.getLogger(__name__)


def build_distance_matrix(points: Sequence[GeoPoint]) -> np.ndarray:
    """Symmetric pairwise haversine matrix in meters."""
    matrix = haversine_matrix(points, points)
    upper = np.triu(matrix, k=1)
    return upper + upper.T


@lru_cache(maxsize=None)
def _masks_by_size(n: int) -> tuple[np.ndarray, ...]:
    """All bitmasks over ``n`` nodes grouped by popcount."""
    masks = np.arange(1 << n, dtype=np.int64)
    sizes = np.zeros(masks.shape, dtype=np.int64)
    for bit in range(n):
        sizes += (masks >> bit) & 1
    return tuple(masks[sizes == size] for size in range(n + 1))


def held_karp_path(distances: Sequence[Sequence[float]] | np.ndarray, start: int, end: int) -> TSPResult:
    """Shortest path from ``start`` to ``end`` visiting every node exactly once.

    ``dp[mask, v]`` holds the cheapest way to reach ``v`` having visited
    exactly ``mask``; ``parent[mask, v]`` is the node visited just before
    ``v``. Masks are filled layer by layer (by popcount) so each layer only
    reads the previous one.
    """
    matrix = np.asarray(distances, dtype=float)
    n = matrix.shape[0] if matrix.ndim == 2 else 0

    if n == 0:
        return TSPResult(path=[], distance=0.0)
    if n == 1:
        return TSPResult(path=[0], distance=0.0)
    if n > settings.held_karp_max_nodes:
        raise ProblemTooLargeError(n, settings.held_karp_max_nodes)
    if start == end:
        raise InvalidParameterError("start and end must differ when there is more than one node")

    full = (1 << n) - 1
    dp = np.full((1 << n, n), np.inf)
    parent = np.full((1 << n, n), -1, dtype=np.int16)
    dp[1 << start, start] = 0.0

    for layer in _masks_by_size(n)[2:]:
        # Every reachable mask contains start; end only ever closes the path.
        reachable = ((layer >> start) & 1 == 1) & (((layer >> end) & 1 == 0) | (layer == full))
        masks = layer[reachable]
        if masks.size == 0:
            continue
        for v in range(n):
            if v == start:
                continue
            with_v = masks[(masks >> v) & 1 == 1]
            if with_v.size == 0:
                continue
            previous = with_v ^ (1 << v)
            candidates = dp[previous] + matrix[:, v]
            best_u = np.argmin(candidates, axis=1)
            best = candidates[np.arange(with_v.size), best_u]
            dp[with_v, v] = best
            parent[with_v, v] = np.where(np.isfinite(best), best_u, -1)

    distance = float(dp[full, end])
    if not np.isfinite(distance):
        return TSPResult(path=[], distance=float("inf"))

    path: list[int] = []
    mask, node = full, end
    while node != -1:
        path.append(node)
        previous_node = int(parent[mask, node])
        mask ^= 1 << node
        node = previous_node
    path.reverse()
    return TSPResult(path=path, distance=distance)


def find_optimal_route(stops: Sequence[GeoPoint], endpoint: GeoPoint) -> OptimalRoute:
    """Order ``stops`` so that the path ending at ``endpoint`` is shortest.

    Every stop is tried as the first one; the first start reaching the
    minimum distance wins.
    """
    if not stops:
        return OptimalRoute(ordering=[], distance=0.0)

    end_index = len(stops)
    matrix = build_distance_matrix([*stops, endpoint])

    best_path: list[int] = []
    best_distance = float("inf")
    for start in range(len(stops)):
        result = held_karp_path(matrix, start, end_index)
        if result.distance < best_distance:
            best_distance = result.distance
            best_path = result.path

    ordering = [index for index in best_path if index != end_index]
    logger.debug(f"Ordered {len(stops)} stops: {ordering} ({best_distance:.0f} m)")
    return OptimalRoute(ordering=ordering, distance=best_distance)
