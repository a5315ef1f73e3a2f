"""Domain models for rider submissions, clusters and computed routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

RouteStatus = Literal["ok", "insufficient_data"]


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class LocalPoint:
    """Offset in meters east (x) and north (y) of a reference point.

    Only meaningful together with the reference point it was projected from.
    """

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class GeoBounds:
    """Axis-aligned lat/lng box, inclusive on every edge."""

    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lng_min <= lng <= self.lng_max

    def describe(self) -> str:
        return f"lat [{self.lat_min}, {self.lat_max}], lng [{self.lng_min}, {self.lng_max}]"


@dataclass(frozen=True, slots=True)
class Submission:
    """One rider's geocoded address."""

    id: str
    lat: float
    lng: float


@dataclass(slots=True)
class WeightedPoint:
    """Deduplicated demand location; weight is the number of merged submissions."""

    lat: float
    lng: float
    weight: int = 1


@dataclass(slots=True)
class OutlierPoint:
    lat: float
    lng: float
    id: str
    weight: int = 1


@dataclass(slots=True)
class RejectedPoint:
    lat: float
    lng: float
    id: str
    reason: str


@dataclass(slots=True)
class PreprocessResult:
    valid: List[WeightedPoint]
    outliers: List[OutlierPoint]
    rejected: List[RejectedPoint]


@dataclass(slots=True)
class Cluster:
    center_lat: float
    center_lng: float
    member_count: int
    member_ids: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ClusteringResult:
    clusters: List[Cluster]
    labels: List[int]
    inertia: float = 0.0


@dataclass(slots=True)
class Stop:
    """A bus stop in the final route, in traversal order."""

    lat: float
    lng: float
    label: str
    cluster_size: int
    member_ids: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Route:
    """The externally visible result of one optimization run."""

    stops: List[Stop]
    endpoint: GeoPoint
    avg_walk_distance_m: float
    coverage_400m_pct: float
    total_submissions: int
    valid_submissions: int
    outlier_count: int
    rejected_count: int
    k: int
    score: float
    route_distance_m: float
    computed_at: str
    status: RouteStatus
    message: Optional[str] = None
