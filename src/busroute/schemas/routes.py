"""Route optimization request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SubmissionModel(BaseModel):
    id: str = Field(..., description="Submission identifier assigned by the ingestion layer.")
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class AlgoParamsOverrides(BaseModel):
    """Per-request overrides; unset fields fall back to configured defaults."""

    k_min: Optional[int] = Field(None, ge=1)
    k_max: Optional[int] = Field(None, ge=1)
    n_init: Optional[int] = Field(None, ge=1)
    max_iter: Optional[int] = Field(None, ge=1)
    seed: Optional[int] = None
    outlier_mad_threshold: Optional[float] = Field(None, ge=0)
    avg_walk_weight: Optional[float] = Field(None, ge=0)
    coverage_weight: Optional[float] = Field(None, ge=0)
    route_length_weight: Optional[float] = Field(None, ge=0)
    k_penalty_weight: Optional[float] = Field(None, ge=0)
    coverage_threshold_m: Optional[float] = Field(None, ge=0)


class RouteRequest(BaseModel):
    submissions: List[SubmissionModel]
    params: Optional[AlgoParamsOverrides] = None
    persist: bool = Field(default=False, description="Write summary.json/assignments.csv for this run.")
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")


class LatLngModel(BaseModel):
    lat: float
    lng: float


class StopModel(BaseModel):
    lat: float
    lng: float
    label: str
    cluster_size: int


class RouteResponse(BaseModel):
    stops: List[StopModel]
    endpoint: LatLngModel
    avg_walk_distance_m: float
    coverage_400m_pct: float
    total_submissions: int
    valid_submissions: int
    outlier_count: int
    rejected_count: int
    K: int
    score: float
    route_distance_m: float
    computed_at: str
    status: Literal["ok", "insufficient_data"]
    message: Optional[str] = None
