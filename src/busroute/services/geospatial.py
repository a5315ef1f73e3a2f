"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..errors import EmptyInputError, ZeroWeightError
from ..models.domain import GeoPoint, LocalPoint, WeightedPoint

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two coordinates."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a just past 1 for near-antipodal pairs.
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def haversine_matrix(origins: Sequence[GeoPoint], targets: Sequence[GeoPoint]) -> np.ndarray:
    """Pairwise haversine distances, shape ``(len(origins), len(targets))``."""

    if not origins or not targets:
        return np.zeros((len(origins), len(targets)))

    lat1 = np.radians(np.array([p.lat for p in origins], dtype=float))[:, None]
    lng1 = np.radians(np.array([p.lng for p in origins], dtype=float))[:, None]
    lat2 = np.radians(np.array([p.lat for p in targets], dtype=float))[None, :]
    lng2 = np.radians(np.array([p.lng for p in targets], dtype=float))[None, :]

    a = np.sin((lat2 - lat1) / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(a))


def to_local_xy(lat: float, lng: float, ref_lat: float, ref_lng: float) -> LocalPoint:
    """Project a coordinate to meters east/north of a reference point.

    Each axis is measured independently with haversine while the other
    coordinate is held at the reference. Good to roughly 0.01% at city
    scale (~20 km); this is not a general map projection.
    """

    x = haversine_m(ref_lat, ref_lng, ref_lat, lng)
    if lng < ref_lng:
        x = -x

    y = haversine_m(ref_lat, ref_lng, lat, ref_lng)
    if lat < ref_lat:
        y = -y

    return LocalPoint(x=x, y=y)


def from_local_xy(x: float, y: float, ref_lat: float, ref_lng: float) -> GeoPoint:
    """Inverse of :func:`to_local_xy` using small-angle relations."""

    d_lat = y / EARTH_RADIUS_M
    d_lng = x / (EARTH_RADIUS_M * math.cos(math.radians(ref_lat)))
    return GeoPoint(lat=ref_lat + math.degrees(d_lat), lng=ref_lng + math.degrees(d_lng))


def project_many(points: Sequence[GeoPoint | WeightedPoint], ref_lat: float, ref_lng: float) -> list[LocalPoint]:
    return [to_local_xy(point.lat, point.lng, ref_lat, ref_lng) for point in points]


def unproject_many(points: Sequence[LocalPoint], ref_lat: float, ref_lng: float) -> list[GeoPoint]:
    return [from_local_xy(point.x, point.y, ref_lat, ref_lng) for point in points]


def centroid(points: Sequence[GeoPoint | WeightedPoint]) -> GeoPoint:
    """Arithmetic (not spherical) mean of the coordinates."""

    if not points:
        raise EmptyInputError("Cannot compute the centroid of zero points.")
    lat = sum(p.lat for p in points) / len(points)
    lng = sum(p.lng for p in points) / len(points)
    return GeoPoint(lat=lat, lng=lng)


def weighted_centroid(points: Sequence[WeightedPoint]) -> GeoPoint:
    """Weight-weighted arithmetic mean of the coordinates."""

    if not points:
        raise EmptyInputError("Cannot compute the weighted centroid of zero points.")
    total_weight = sum(p.weight for p in points)
    if total_weight == 0:
        raise ZeroWeightError("Point weights sum to zero; weighted centroid is undefined.")
    lat = sum(p.lat * p.weight for p in points) / total_weight
    lng = sum(p.lng * p.weight for p in points) / total_weight
    return GeoPoint(lat=lat, lng=lng)
