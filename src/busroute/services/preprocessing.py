"""Submission cleanup: bounds validation, deduplication and outlier rejection.

The three stages always run in that order. Deduplication has to happen
before outlier detection, otherwise repeated submissions from one address
drag the median center toward themselves.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from ..config import SERVICE_AREA_BOUNDS
from ..models.domain import (
    GeoBounds,
    OutlierPoint,
    PreprocessResult,
    RejectedPoint,
    Submission,
    WeightedPoint,
)
from ..models.params import AlgoParams
from .geospatial import haversine_m

logger = logging.getLogger(__name__)

DEDUP_PRECISION = 5  # decimal places, roughly a 1.1 m grid
_DEDUP_SCALE = 10**DEDUP_PRECISION

CoordinateKey = tuple[int, int]


def validate_bounds(
    submissions: Sequence[Submission],
    bounds: GeoBounds = SERVICE_AREA_BOUNDS,
) -> tuple[list[Submission], list[RejectedPoint]]:
    """Split submissions into those inside ``bounds`` and rejected ones."""

    valid: list[Submission] = []
    rejected: list[RejectedPoint] = []
    reason = f"Outside bounds: {bounds.describe()}"

    for submission in submissions:
        if bounds.contains(submission.lat, submission.lng):
            valid.append(submission)
        else:
            rejected.append(RejectedPoint(lat=submission.lat, lng=submission.lng, id=submission.id, reason=reason))
    return valid, rejected


def coordinate_key(lat: float, lng: float) -> CoordinateKey:
    """Integer grid key for a coordinate, rounding half up at 5 decimals."""

    return (math.floor(lat * _DEDUP_SCALE + 0.5), math.floor(lng * _DEDUP_SCALE + 0.5))


def deduplicate_points(submissions: Sequence[Submission]) -> list[WeightedPoint]:
    """Collapse submissions sharing a grid key into one weighted point.

    Submission ids are dropped; use :func:`group_submission_ids` to keep them.
    """

    groups: dict[CoordinateKey, WeightedPoint] = {}
    for submission in submissions:
        key = coordinate_key(submission.lat, submission.lng)
        existing = groups.get(key)
        if existing is None:
            groups[key] = WeightedPoint(lat=key[0] / _DEDUP_SCALE, lng=key[1] / _DEDUP_SCALE, weight=1)
        else:
            existing.weight += 1
    return list(groups.values())


def group_submission_ids(submissions: Sequence[Submission]) -> dict[CoordinateKey, list[str]]:
    """Map each grid key to the ids of the submissions that fall on it."""

    groups: dict[CoordinateKey, list[str]] = {}
    for submission in submissions:
        groups.setdefault(coordinate_key(submission.lat, submission.lng), []).append(submission.id)
    return groups


def _median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


def detect_outliers(
    points: Sequence[WeightedPoint],
    threshold: float,
) -> tuple[list[WeightedPoint], list[OutlierPoint]]:
    """Flag points unusually far from the robust (median) center.

    A point is an outlier when its distance to the coordinate-wise median
    exceeds ``median_distance + threshold * MAD``.
    """

    if not points:
        return [], []

    center_lat = _median([p.lat for p in points])
    center_lng = _median([p.lng for p in points])
    distances = [haversine_m(p.lat, p.lng, center_lat, center_lng) for p in points]

    median_distance = _median(distances)
    mad = _median([abs(d - median_distance) for d in distances])
    cutoff = median_distance + threshold * mad

    valid: list[WeightedPoint] = []
    outliers: list[OutlierPoint] = []
    for index, (point, distance) in enumerate(zip(points, distances)):
        if distance > cutoff:
            outliers.append(OutlierPoint(lat=point.lat, lng=point.lng, id=f"dedup_{index}", weight=point.weight))
        else:
            valid.append(point)
    return valid, outliers


def preprocess(
    submissions: Sequence[Submission],
    params: AlgoParams,
    bounds: GeoBounds = SERVICE_AREA_BOUNDS,
) -> PreprocessResult:
    in_bounds, rejected = validate_bounds(submissions, bounds)
    deduplicated = deduplicate_points(in_bounds)
    valid, outliers = detect_outliers(deduplicated, params.outlier_mad_threshold)

    logger.info(
        f"Preprocessed {len(submissions)} submissions: {len(rejected)} out of bounds, "
        f"{len(deduplicated)} distinct locations, {len(outliers)} outliers, {len(valid)} valid"
    )
    return PreprocessResult(valid=valid, outliers=outliers, rejected=rejected)
