"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ...models.domain import Cluster, GeoPoint


@dataclass(slots=True)
class TSPResult:
    path: List[int]
    distance: float


@dataclass(slots=True)
class OptimalRoute:
    """Stop indices in traversal order (endpoint excluded) and total meters."""

    ordering: List[int]
    distance: float


@dataclass(slots=True)
class ScoreResult:
    score: float
    avg_walk: float
    coverage_pct: float
    route_length_m: float


@dataclass(slots=True)
class RouteCandidate:
    """Evaluation of one stop count."""

    k: int
    ordering: List[int]
    distance: float
    stops: List[GeoPoint]
    clusters: List[Cluster]
    score: float
    metrics: ScoreResult
    labels: List[int] = field(default_factory=list)
