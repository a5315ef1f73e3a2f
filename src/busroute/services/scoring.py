"""Route quality scoring. Lower scores are better."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models.domain import GeoPoint
from ..models.params import AlgoParams
from .geospatial import haversine_m, haversine_matrix
from .routing.models import ScoreResult


def compute_walk_distances(points: Sequence[GeoPoint], stops: Sequence[GeoPoint]) -> list[float]:
    """Distance in meters from each point to its nearest stop."""

    if not stops:
        return [float("inf")] * len(points)
    if not points:
        return []
    return haversine_matrix(points, stops).min(axis=1).tolist()


def compute_route_length(ordered_stops: Sequence[GeoPoint]) -> float:
    """Sum of consecutive leg lengths along stops already in traversal order."""

    total = 0.0
    for previous, current in zip(ordered_stops, ordered_stops[1:]):
        total += haversine_m(previous.lat, previous.lng, current.lat, current.lng)
    return total


def score_route(
    k: int,
    ordered_stops: Sequence[GeoPoint],
    riders: Sequence[GeoPoint],
    outliers: Sequence[GeoPoint],
    params: AlgoParams,
) -> ScoreResult:
    """Score a candidate configuration of ``k`` stops.

    Outliers are excluded from clustering but still count here as riders
    the route fails to serve. ``ordered_stops`` should already include the
    endpoint as its last element so the route length covers the final leg.

    Score = avg_walk_weight * avg_walk
          + coverage_weight * (1 - coverage) * 1000
          + route_length_weight * route_km
          + k_penalty_weight * k
    """

    all_points = [*riders, *outliers]
    if not all_points:
        return ScoreResult(score=0.0, avg_walk=0.0, coverage_pct=1.0, route_length_m=0.0)

    walk = np.asarray(compute_walk_distances(all_points, ordered_stops), dtype=float)
    avg_walk = float(walk.mean())
    coverage_pct = float(np.count_nonzero(walk <= params.coverage_threshold_m) / walk.size)
    route_length_m = compute_route_length(ordered_stops)

    score = (
        params.avg_walk_weight * avg_walk
        + params.coverage_weight * (1 - coverage_pct) * 1000
        + params.route_length_weight * (route_length_m / 1000)
        + params.k_penalty_weight * k
    )
    return ScoreResult(score=score, avg_walk=avg_walk, coverage_pct=coverage_pct, route_length_m=route_length_m)
