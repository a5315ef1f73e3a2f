import math

import pytest

from busroute.models.domain import GeoPoint
from busroute.models.params import AlgoParams
from busroute.services.geospatial import haversine_m
from busroute.services.scoring import compute_route_length, compute_walk_distances, score_route

ENDPOINT = GeoPoint(32.063, 34.790)
STOPS = [GeoPoint(32.08, 34.78), GeoPoint(32.07, 34.785), ENDPOINT]


def test_walk_distance_to_nearest_stop():
    riders = [GeoPoint(32.08, 34.78), GeoPoint(32.0705, 34.785)]
    distances = compute_walk_distances(riders, STOPS)

    assert distances[0] == 0.0
    assert distances[1] == pytest.approx(haversine_m(32.0705, 34.785, 32.07, 34.785))


def test_walk_distance_without_stops_is_infinite():
    distances = compute_walk_distances([GeoPoint(32.08, 34.78)], [])
    assert distances == [math.inf]
    assert compute_walk_distances([], STOPS) == []


def test_route_length_is_open_path():
    length = compute_route_length(STOPS)
    expected = haversine_m(32.08, 34.78, 32.07, 34.785) + haversine_m(32.07, 34.785, ENDPOINT.lat, ENDPOINT.lng)

    assert length == pytest.approx(expected)
    assert compute_route_length([ENDPOINT]) == 0.0
    assert compute_route_length([]) == 0.0


def test_zero_riders_scores_zero_with_full_coverage():
    result = score_route(5, STOPS, [], [], AlgoParams())

    assert result.score == 0.0
    assert result.avg_walk == 0.0
    assert result.coverage_pct == 1.0


def test_k_penalty_is_linear():
    params = AlgoParams()
    riders = [GeoPoint(32.081, 34.781), GeoPoint(32.069, 34.786), GeoPoint(32.09, 34.8)]
    base = score_route(5, STOPS, riders, [], params)
    higher = score_route(8, STOPS, riders, [], params)

    assert higher.score - base.score == pytest.approx(params.k_penalty_weight * 3)
    assert higher.avg_walk == base.avg_walk


def test_coverage_counts_riders_within_threshold():
    riders = [
        GeoPoint(32.08, 34.78),
        GeoPoint(32.0702, 34.785),
        GeoPoint(32.2, 34.78),
        GeoPoint(31.9, 34.79),
    ]
    result = score_route(2, STOPS, riders, [], AlgoParams())

    assert result.coverage_pct == 0.5
    assert 0.0 <= result.coverage_pct <= 1.0


def test_outliers_count_as_unserved_riders():
    params = AlgoParams()
    riders = [GeoPoint(32.08, 34.78), GeoPoint(32.07, 34.785)]
    outlier = GeoPoint(32.5, 34.95)

    without = score_route(2, STOPS, riders, [], params)
    with_outlier = score_route(2, STOPS, riders, [outlier], params)

    assert without.coverage_pct == 1.0
    assert with_outlier.coverage_pct == pytest.approx(2 / 3)
    assert with_outlier.avg_walk > without.avg_walk
    assert with_outlier.score > without.score


def test_score_formula():
    params = AlgoParams()
    riders = [GeoPoint(32.081, 34.781), GeoPoint(32.2, 34.78)]
    result = score_route(2, STOPS, riders, [], params)

    expected = (
        params.avg_walk_weight * result.avg_walk
        + params.coverage_weight * (1 - result.coverage_pct) * 1000
        + params.route_length_weight * (result.route_length_m / 1000)
        + params.k_penalty_weight * 2
    )
    assert result.score == pytest.approx(expected)
    assert result.route_length_m == pytest.approx(compute_route_length(STOPS))
    assert result.coverage_pct == 0.5
