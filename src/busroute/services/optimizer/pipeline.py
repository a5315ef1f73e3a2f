"""Stop-count search: preprocess, then cluster, order and score every K."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from ...config import ROUTE_ENDPOINT, SERVICE_AREA_BOUNDS
from ...models.domain import GeoBounds, GeoPoint, OutlierPoint, Route, Stop, Submission, WeightedPoint
from ...models.params import AlgoParams
from ..clustering.kmeans import weighted_kmeans
from ..preprocessing import CoordinateKey, coordinate_key, group_submission_ids, preprocess
from ..routing.held_karp import find_optimal_route
from ..routing.models import RouteCandidate
from ..scoring import score_route

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _as_geo_points(points: Sequence[WeightedPoint | OutlierPoint]) -> list[GeoPoint]:
    return [GeoPoint(lat=point.lat, lng=point.lng) for point in points]


def evaluate_candidate(
    valid: Sequence[WeightedPoint],
    outliers: Sequence[OutlierPoint],
    k: int,
    params: AlgoParams,
    endpoint: GeoPoint = ROUTE_ENDPOINT,
) -> RouteCandidate:
    """Cluster into ``k`` stops, order them exactly and score the result."""
    clustering = weighted_kmeans(valid, k, params)
    stops = [GeoPoint(lat=cluster.center_lat, lng=cluster.center_lng) for cluster in clustering.clusters]
    route = find_optimal_route(stops, endpoint)

    ordered_stops = [stops[index] for index in route.ordering] + [endpoint]
    metrics = score_route(k, ordered_stops, _as_geo_points(valid), _as_geo_points(outliers), params)

    return RouteCandidate(
        k=k,
        ordering=route.ordering,
        distance=route.distance,
        stops=stops,
        clusters=clustering.clusters,
        score=metrics.score,
        metrics=metrics,
        labels=clustering.labels,
    )


def select_best_candidate(
    valid: Sequence[WeightedPoint],
    outliers: Sequence[OutlierPoint],
    params: AlgoParams,
    endpoint: GeoPoint = ROUTE_ENDPOINT,
) -> RouteCandidate | None:
    """Evaluate K from ``k_min`` to ``min(k_max, len(valid))``; lowest score wins.

    Ties keep the smaller K. Returns ``None`` when the range is empty.
    """
    best: RouteCandidate | None = None
    k_upper = min(params.k_max, len(valid))

    for k in range(params.k_min, k_upper + 1):
        candidate = evaluate_candidate(valid, outliers, k, params, endpoint)
        logger.debug(
            f"K={k}: score={candidate.score:.1f} avg_walk={candidate.metrics.avg_walk:.0f}m "
            f"coverage={candidate.metrics.coverage_pct:.2%} route={candidate.distance:.0f}m"
        )
        if best is None or candidate.score < best.score:
            best = candidate
    return best


def attribute_member_ids(
    candidate: RouteCandidate,
    valid: Sequence[WeightedPoint],
    ids_by_key: dict[CoordinateKey, list[str]],
) -> None:
    """Fill ``member_ids`` of the candidate's clusters from its point labels."""
    for cluster in candidate.clusters:
        cluster.member_ids = []
    for point, label in zip(valid, candidate.labels):
        candidate.clusters[label].member_ids.extend(ids_by_key.get(coordinate_key(point.lat, point.lng), []))


def build_route(
    candidate: RouteCandidate,
    endpoint: GeoPoint,
    *,
    total_submissions: int,
    valid_submissions: int,
    outlier_count: int,
    rejected_count: int,
) -> Route:
    stops = [
        Stop(
            lat=candidate.stops[stop_index].lat,
            lng=candidate.stops[stop_index].lng,
            label=f"Stop {position}",
            cluster_size=candidate.clusters[stop_index].member_count,
            member_ids=list(candidate.clusters[stop_index].member_ids),
        )
        for position, stop_index in enumerate(candidate.ordering, start=1)
    ]
    return Route(
        stops=stops,
        endpoint=endpoint,
        avg_walk_distance_m=candidate.metrics.avg_walk,
        coverage_400m_pct=candidate.metrics.coverage_pct,
        total_submissions=total_submissions,
        valid_submissions=valid_submissions,
        outlier_count=outlier_count,
        rejected_count=rejected_count,
        k=candidate.k,
        score=candidate.score,
        route_distance_m=candidate.distance,
        computed_at=_timestamp(),
        status="ok",
    )


def compute_optimal_route(
    submissions: Sequence[Submission],
    params: AlgoParams | None = None,
    *,
    endpoint: GeoPoint = ROUTE_ENDPOINT,
    bounds: GeoBounds = SERVICE_AREA_BOUNDS,
) -> Route:
    """Compute the best stop set and visiting order for ``submissions``.

    Pure function of its inputs apart from ``computed_at``. Too little valid
    data is reported as ``status="insufficient_data"``, never raised.
    """
    params = params or AlgoParams()
    prepared = preprocess(submissions, params, bounds)
    total_submissions = len(submissions)
    valid_submissions = len(prepared.valid)
    outlier_count = len(prepared.outliers)
    rejected_count = len(prepared.rejected)

    if valid_submissions < params.k_min:
        message = f"Need at least {params.k_min} valid points, have {valid_submissions}"
        logger.warning(f"Skipping route computation: {message}")
        return Route(
            stops=[],
            endpoint=endpoint,
            avg_walk_distance_m=0.0,
            coverage_400m_pct=0.0,
            total_submissions=total_submissions,
            valid_submissions=valid_submissions,
            outlier_count=outlier_count,
            rejected_count=rejected_count,
            k=0,
            score=0.0,
            route_distance_m=0.0,
            computed_at=_timestamp(),
            status="insufficient_data",
            message=message,
        )

    best = select_best_candidate(prepared.valid, prepared.outliers, params, endpoint)
    in_bounds = [submission for submission in submissions if bounds.contains(submission.lat, submission.lng)]
    attribute_member_ids(best, prepared.valid, group_submission_ids(in_bounds))

    logger.info(
        f"Selected K={best.k} (score {best.score:.1f}, avg walk {best.metrics.avg_walk:.0f} m, "
        f"coverage {best.metrics.coverage_pct:.1%}, route {best.distance / 1000:.1f} km)"
    )
    return build_route(
        best,
        endpoint,
        total_submissions=total_submissions,
        valid_submissions=valid_submissions,
        outlier_count=outlier_count,
        rejected_count=rejected_count,
    )
