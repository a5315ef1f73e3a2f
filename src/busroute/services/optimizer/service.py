"""Route optimization service used by the API layer."""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from ...models.domain import Route, Submission
from ...models.params import AlgoParams
from ...persistence.filesystem import FileStorage
from ...schemas.routes import RouteRequest, RouteResponse
from ..outputs.route_formatter import route_to_csv, route_to_json
from .pipeline import compute_optimal_route

logger = logging.getLogger(__name__)


def _build_params(payload: RouteRequest) -> AlgoParams:
    base = AlgoParams()
    if payload.params is None:
        return base
    overrides = payload.params.model_dump(exclude_none=True)
    return replace(base, **overrides) if overrides else base


def _run_prefix(route: Route, run_label: str | None) -> str:
    if run_label:
        slug = re.sub(r"[^A-Za-z0-9_-]+", "-", run_label).strip("-")
        if slug:
            return f"route_{slug}"
    return f"route_K{route.k}"


def _persist_route(route: Route, run_label: str | None) -> None:
    storage = FileStorage()
    summary = {**route_to_json(route), "run_label": run_label}
    run_dir = storage.save_run(_run_prefix(route, run_label), summary, route_to_csv(route))
    logger.info(f"Saved route outputs to {run_dir}")


def optimize_route_request(payload: RouteRequest) -> RouteResponse:
    params = _build_params(payload)
    submissions = [Submission(id=item.id, lat=item.lat, lng=item.lng) for item in payload.submissions]

    route = compute_optimal_route(submissions, params)

    if payload.persist:
        try:
            _persist_route(route, payload.run_label)
        except OSError as exc:
            # The computed route is still returned to the caller.
            logger.error(f"Failed to persist route outputs: {exc}")

    return RouteResponse(**route_to_json(route))
