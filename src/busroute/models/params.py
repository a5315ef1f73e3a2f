"""Tunable algorithm parameters."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import settings
from ..errors import InvalidParameterError


@dataclass(frozen=True, slots=True)
class AlgoParams:
    """Every knob the pipeline reads. Never mutated after construction.

    The scoring weights are tuned together with the fixed unit factors in
    ``score_route`` (x1000 on the coverage gap, /1000 on route length), so
    retuning should keep their ratios.
    """

    k_min: int = settings.k_min
    k_max: int = settings.k_max
    n_init: int = settings.n_init
    max_iter: int = settings.max_iter
    seed: int = settings.kmeans_seed
    outlier_mad_threshold: float = settings.outlier_mad_threshold
    avg_walk_weight: float = settings.avg_walk_weight
    coverage_weight: float = settings.coverage_weight
    route_length_weight: float = settings.route_length_weight
    k_penalty_weight: float = settings.k_penalty_weight
    coverage_threshold_m: float = settings.coverage_threshold_m
    snap_radius_m: float = settings.snap_radius_m
    major_road_bias: float = settings.major_road_bias
    min_stop_distance_m: float = settings.min_stop_distance_m
    debounce_seconds: int = settings.debounce_seconds
    min_recalc_interval_seconds: int = settings.min_recalc_interval_seconds

    def __post_init__(self) -> None:
        if self.k_min < 1:
            raise InvalidParameterError(f"k_min must be >= 1, got {self.k_min}")
        if self.k_max < self.k_min:
            raise InvalidParameterError(f"k_max ({self.k_max}) must be >= k_min ({self.k_min})")
        # The endpoint occupies one Held-Karp node on top of the stops.
        if self.k_max + 1 > settings.held_karp_max_nodes:
            raise InvalidParameterError(
                f"k_max ({self.k_max}) exceeds the exact ordering limit of "
                f"{settings.held_karp_max_nodes - 1} stops"
            )
        if self.n_init < 1:
            raise InvalidParameterError(f"n_init must be >= 1, got {self.n_init}")
        if self.max_iter < 1:
            raise InvalidParameterError(f"max_iter must be >= 1, got {self.max_iter}")
        if self.outlier_mad_threshold < 0:
            raise InvalidParameterError("outlier_mad_threshold must be >= 0")
        if self.coverage_threshold_m < 0:
            raise InvalidParameterError("coverage_threshold_m must be >= 0")
