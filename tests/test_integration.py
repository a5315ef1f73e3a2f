import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from busroute.main import create_app
from busroute.schemas.routes import RouteRequest


def _payload(mock_submissions, **overrides) -> dict:
    submissions = [{"id": s.id, "lat": s.lat, "lng": s.lng} for s in mock_submissions()]
    body = {"submissions": submissions, "params": {"k_min": 5, "k_max": 6}}
    body.update(overrides)
    return body


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    app = create_app()
    client = TestClient(app)

    # ensure filesystem writes go to tmpdir
    from busroute.services.optimizer import service as optimizer_service
    from busroute.persistence.filesystem import FileStorage

    monkeypatch.setattr(optimizer_service, "FileStorage", lambda: FileStorage(root=tmp_path))

    return client


def test_root_and_health(api_client: TestClient):
    root = api_client.get("/")
    assert root.status_code == 200
    assert root.json()["endpoint"] == {"lat": 32.063, "lng": 34.790}

    health = api_client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"


def test_defaults_endpoint(api_client: TestClient):
    response = api_client.get("/api/routes/defaults")

    assert response.status_code == 200
    payload = response.json()
    assert payload["k_min"] == 5
    assert payload["k_max"] == 15
    assert payload["coverage_threshold_m"] == 400.0


def test_optimize_endpoint(api_client: TestClient, mock_submissions, tmp_path: Path):
    response = api_client.post("/api/routes/optimize", json=_payload(mock_submissions))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["K"] in (5, 6)
    assert len(payload["stops"]) == payload["K"]
    assert payload["stops"][0]["label"] == "Stop 1"
    assert payload["rejected_count"] == 3
    assert payload["total_submissions"] == 100
    assert not (tmp_path / "outputs").exists() or not any((tmp_path / "outputs").iterdir())


def test_optimize_endpoint_insufficient_data(api_client: TestClient):
    request = RouteRequest(submissions=[{"id": "a", "lat": 32.07, "lng": 34.78}])
    response = api_client.post("/api/routes/optimize", json=request.model_dump())

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "insufficient_data"
    assert payload["K"] == 0
    assert payload["stops"] == []
    assert payload["message"] == "Need at least 5 valid points, have 1"


def test_optimize_endpoint_rejects_inconsistent_params(api_client: TestClient, mock_submissions):
    response = api_client.post("/api/routes/optimize", json=_payload(mock_submissions, params={"k_min": 8, "k_max": 6}))

    assert response.status_code == 400
    assert "k_max" in response.json()["detail"]


def test_optimize_endpoint_validates_coordinates(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={"submissions": [{"id": "bad", "lat": 100.0, "lng": 34.78}]},
    )
    assert response.status_code == 422


def test_optimize_endpoint_persists_outputs(api_client: TestClient, mock_submissions, tmp_path: Path):
    response = api_client.post("/api/routes/optimize", json=_payload(mock_submissions, persist=True, run_label="Demo run"))

    assert response.status_code == 200
    output_dirs = list((tmp_path / "outputs").glob("route_Demo-run_*"))
    assert output_dirs
    run_dir = output_dirs[0]
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["K"] == response.json()["K"]
    assert summary["run_label"] == "Demo run"
    assert (run_dir / "assignments.csv").exists()
