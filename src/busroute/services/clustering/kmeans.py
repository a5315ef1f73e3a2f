"""Weighted k-means over locally projected coordinates."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sklearn.cluster import kmeans_plusplus

from ...errors import InvalidKError, KExceedsPointsError
from ...models.domain import Cluster, ClusteringResult, LocalPoint, WeightedPoint
from ...models.params import AlgoParams
from ..geospatial import project_many, unproject_many, weighted_centroid

logger = logging.getLogger(__name__)


def _squared_distances(coordinates: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Squared Euclidean distances, shape ``(n_points, n_centers)``."""
    delta = coordinates[:, None, :] - centers[None, :, :]
    return np.einsum("ijk,ijk->ij", delta, delta)


def _weighted_means(
    coordinates: np.ndarray,
    weights: np.ndarray,
    labels: np.ndarray,
    previous: np.ndarray,
) -> np.ndarray:
    k = previous.shape[0]
    totals = np.bincount(labels, weights=weights, minlength=k)
    sum_x = np.bincount(labels, weights=weights * coordinates[:, 0], minlength=k)
    sum_y = np.bincount(labels, weights=weights * coordinates[:, 1], minlength=k)

    centers = previous.copy()
    occupied = totals > 0
    # Empty clusters stay where they were.
    centers[occupied, 0] = sum_x[occupied] / totals[occupied]
    centers[occupied, 1] = sum_y[occupied] / totals[occupied]
    return centers


def _lloyd(
    coordinates: np.ndarray,
    weights: np.ndarray,
    initial_centers: np.ndarray,
    max_iter: int,
) -> tuple[np.ndarray, np.ndarray, float]:
    centers = initial_centers.copy()
    labels = np.full(coordinates.shape[0], -1, dtype=np.intp)

    for _ in range(max_iter):
        new_labels = np.argmin(_squared_distances(coordinates, centers), axis=1)
        changed = not np.array_equal(new_labels, labels)
        labels = new_labels
        centers = _weighted_means(coordinates, weights, labels, centers)
        if not changed:
            break

    assigned = _squared_distances(coordinates, centers)[np.arange(coordinates.shape[0]), labels]
    inertia = float(np.sum(weights * assigned))
    return centers, labels, inertia


def weighted_kmeans(
    points: Sequence[WeightedPoint],
    k: int,
    params: AlgoParams,
    seed: int | None = None,
) -> ClusteringResult:
    """Cluster weighted points into ``k`` groups.

    Points are projected to meters around their weighted centroid, seeded
    with weighted k-means++ and refined with Lloyd's algorithm. All
    ``params.n_init`` restarts draw from one generator seeded with ``seed``
    (``params.seed`` when omitted); the restart with the lowest weighted
    inertia wins, earlier restarts winning ties.

    ``Cluster.member_ids`` is left empty: weighted points carry no
    submission ids. Callers map ``labels`` back to submissions themselves.
    """
    if not points:
        return ClusteringResult(clusters=[], labels=[], inertia=0.0)
    if k <= 0:
        raise InvalidKError(k)
    distinct = len({(p.lat, p.lng) for p in points})
    if k > distinct:
        raise KExceedsPointsError(k, distinct)

    reference = weighted_centroid(points)
    projected = project_many(points, reference.lat, reference.lng)
    coordinates = np.array([[p.x, p.y] for p in projected], dtype=float)
    weights = np.array([p.weight for p in points], dtype=float)

    random_state = np.random.RandomState(params.seed if seed is None else seed)
    best: tuple[np.ndarray, np.ndarray, float] | None = None

    for trial in range(params.n_init):
        initial_centers, _ = kmeans_plusplus(
            coordinates,
            n_clusters=k,
            sample_weight=weights,
            random_state=random_state,
            n_local_trials=1,
        )
        centers, labels, inertia = _lloyd(coordinates, weights, initial_centers, params.max_iter)
        logger.debug(f"k={k} trial {trial + 1}/{params.n_init}: inertia={inertia:.1f}")
        if best is None or inertia < best[2]:
            best = (centers, labels, inertia)

    centers, labels, inertia = best
    member_counts = np.bincount(labels, weights=weights, minlength=k)

    geo_centers = unproject_many(
        [LocalPoint(x=float(x), y=float(y)) for x, y in centers], reference.lat, reference.lng
    )
    clusters = [
        Cluster(center_lat=center.lat, center_lng=center.lng, member_count=int(round(member_counts[index])))
        for index, center in enumerate(geo_centers)
    ]

    return ClusteringResult(clusters=clusters, labels=[int(label) for label in labels], inertia=inertia)
