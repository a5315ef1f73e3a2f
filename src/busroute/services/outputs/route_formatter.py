"""Serializers for computed routes."""

from __future__ import annotations

import csv
import io

from ...models.domain import Route


def route_to_json(route: Route) -> dict:
    """Route as a JSON-ready dict using the field names the map UI expects."""
    return {
        "stops": [
            {
                "lat": stop.lat,
                "lng": stop.lng,
                "label": stop.label,
                "cluster_size": stop.cluster_size,
            }
            for stop in route.stops
        ],
        "endpoint": {"lat": route.endpoint.lat, "lng": route.endpoint.lng},
        "avg_walk_distance_m": route.avg_walk_distance_m,
        "coverage_400m_pct": route.coverage_400m_pct,
        "total_submissions": route.total_submissions,
        "valid_submissions": route.valid_submissions,
        "outlier_count": route.outlier_count,
        "rejected_count": route.rejected_count,
        "K": route.k,
        "score": route.score,
        "route_distance_m": route.route_distance_m,
        "computed_at": route.computed_at,
        "status": route.status,
        "message": route.message,
    }


def route_to_csv(route: Route) -> str:
    """One row per (stop, submission) pair; stops without known members get one blank row."""
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "label",
        "lat",
        "lng",
        "cluster_size",
        "submission_id",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for sequence, stop in enumerate(route.stops, start=1):
        base = {
            "sequence": sequence,
            "label": stop.label,
            "lat": stop.lat,
            "lng": stop.lng,
            "cluster_size": stop.cluster_size,
        }
        for submission_id in stop.member_ids or [""]:
            writer.writerow({**base, "submission_id": submission_id})
    return buffer.getvalue()
