"""Application configuration and settings management."""

from pathlib import Path
from typing import Any

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.domain import GeoBounds, GeoPoint

# Fixed terminal of the route (La Guardia / Kibbutz Galuyot junction).
ROUTE_ENDPOINT = GeoPoint(lat=32.063, lng=34.790)

# Sanity box for geocoded submissions.
SERVICE_AREA_BOUNDS = GeoBounds(lat_min=31.0, lat_max=33.5, lng_min=34.0, lng_max=35.5)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BUSROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Bus Route Optimizer API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted run outputs.")

    # Stop-count search
    k_min: int = Field(default=5, ge=1, description="Smallest number of stops to evaluate.")
    k_max: int = Field(default=15, ge=1, description="Largest number of stops to evaluate.")

    # Clustering
    n_init: int = Field(default=10, ge=1, description="k-means restarts per stop count.")
    max_iter: int = Field(default=300, ge=1, description="Lloyd iterations per restart.")
    kmeans_seed: int = Field(default=42, description="Seed for the k-means generator.")

    # Preprocessing
    outlier_mad_threshold: float = Field(default=5.0, ge=0.0)

    # Scoring
    avg_walk_weight: float = Field(default=1.0, ge=0.0)
    coverage_weight: float = Field(default=2.0, ge=0.0)
    route_length_weight: float = Field(default=0.1, ge=0.0)
    k_penalty_weight: float = Field(default=10.0, ge=0.0)
    coverage_threshold_m: float = Field(default=400.0, ge=0.0)

    # Consumed by snapping and recalculation collaborators, not by the core.
    snap_radius_m: float = Field(default=300.0, ge=0.0)
    major_road_bias: float = Field(default=0.3, ge=0.0, le=1.0)
    min_stop_distance_m: float = Field(default=200.0, ge=0.0)
    debounce_seconds: int = Field(default=30, ge=0)
    min_recalc_interval_seconds: int = Field(default=60, ge=0)

    held_karp_max_nodes: int = Field(
        default=18,
        ge=2,
        description="Upper bound on stops + endpoint for exact ordering (memory and time grow as 2^n).",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
