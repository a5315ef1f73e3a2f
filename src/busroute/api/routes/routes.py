"""Route optimization endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from ...models.params import AlgoParams
from ...schemas.routes import RouteRequest, RouteResponse
from ...services.optimizer.service import optimize_route_request

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: RouteRequest) -> RouteResponse:
    try:
        return optimize_route_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.get("/defaults", status_code=status.HTTP_200_OK)
def defaults() -> dict:
    """Algorithm parameters applied when a request does not override them."""
    return asdict(AlgoParams())
