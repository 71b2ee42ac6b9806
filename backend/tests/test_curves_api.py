"""
Tests for curve upload, inspection, sampling and export endpoints.

These tests use FastAPI's TestClient to simulate requests against the
application without running a real server.  The client is entered as a
context manager so the startup hook creates the database tables.
"""

import io
import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add the backend directory to sys.path so we can import the app
sys.path.append(str(Path(__file__).resolve().parents[1]))

from scrollpath.main import app  # type: ignore


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


def _upload(client: TestClient, document, name: str = "curve.json"):
    body = document if isinstance(document, bytes) else json.dumps(document).encode()
    return client.post(
        "/api/curves",
        files={"file": (name, io.BytesIO(body), "application/json")},
    )


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_upload_list_and_get(client: TestClient) -> None:
    """Uploading a valid document stores it and exposes its control points."""
    doc = {"points": [[0, 0, 0], [0, 0, 10], [3, 2, 14]]}
    resp = _upload(client, doc, name="flythrough.json")
    assert resp.status_code == 201
    info = resp.json()
    assert info["name"] == "flythrough"
    assert info["pointCount"] == 3
    assert info["length"] > 14.0
    curve_id = info["curveId"]

    listed = client.get("/api/curves").json()
    assert curve_id in [c["curveId"] for c in listed]

    detail = client.get(f"/api/curves/{curve_id}").json()
    assert [(p["x"], p["y"], p["z"]) for p in detail["controlPoints"]] == [
        (0.0, 0.0, 0.0),
        (0.0, 0.0, 10.0),
        (3.0, 2.0, 14.0),
    ]


def test_samples_include_both_ends(client: TestClient) -> None:
    curve_id = _upload(client, [[0, 0, 0], [0, 0, 10]]).json()["curveId"]
    resp = client.get(f"/api/curves/{curve_id}/samples", params={"count": 11})
    assert resp.status_code == 200
    data = resp.json()
    assert data["length"] == pytest.approx(10.0)
    zs = [p["z"] for p in data["points"]]
    assert len(zs) == 11
    assert zs[0] == pytest.approx(0.0)
    assert zs[-1] == pytest.approx(10.0)
    assert zs[5] == pytest.approx(5.0, abs=1e-6)


def test_sample_count_is_validated(client: TestClient) -> None:
    curve_id = _upload(client, [[0, 0, 0], [1, 0, 0]]).json()["curveId"]
    assert client.get(f"/api/curves/{curve_id}/samples", params={"count": 1}).status_code == 422


def test_export_csv(client: TestClient) -> None:
    curve_id = _upload(client, [[0, 0, 0], [0, 0, 10]]).json()["curveId"]
    resp = client.get(f"/api/curves/{curve_id}/export", params={"count": 3})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0] == "x,y,z"
    assert len(lines) == 4
    assert lines[-1] == "0.000000,0.000000,10.000000"


@pytest.mark.parametrize(
    "body",
    [
        b"not json at all",
        json.dumps([{"x": 0, "y": 0}, {"x": 1, "y": 1, "z": 1}]).encode(),
        json.dumps({"name": "no points"}).encode(),
        b"[[0, 0, 0], [1" + b"0" * 400 + b", 0, 0]]",
    ],
)
def test_malformed_documents_are_rejected(client: TestClient, body: bytes) -> None:
    before = len(client.get("/api/curves").json())
    resp = _upload(client, body)
    assert resp.status_code == 422
    assert len(client.get("/api/curves").json()) == before


def test_single_point_document_is_rejected(client: TestClient) -> None:
    resp = _upload(client, [{"x": 0, "y": 0, "z": 0}])
    assert resp.status_code == 422
    assert "point" in resp.json()["detail"]


def test_delete_curve(client: TestClient) -> None:
    curve_id = _upload(client, [[5, 5, 5], [6, 6, 6]]).json()["curveId"]
    assert client.delete(f"/api/curves/{curve_id}").status_code == 204
    assert client.get(f"/api/curves/{curve_id}").status_code == 404
    assert client.delete(f"/api/curves/{curve_id}").status_code == 404


def test_shared_document_survives_deleting_one_copy(client: TestClient) -> None:
    doc = [[7, 0, 0], [7, 0, 3], [7, 1, 4]]
    first = _upload(client, doc, name="a.json").json()["curveId"]
    second = _upload(client, doc, name="b.json").json()["curveId"]
    assert client.delete(f"/api/curves/{first}").status_code == 204
    resp = client.get(f"/api/curves/{second}/samples", params={"count": 4})
    assert resp.status_code == 200


def test_unknown_curve_is_404(client: TestClient) -> None:
    assert client.get("/api/curves/does-not-exist").status_code == 404
    assert client.get("/api/curves/does-not-exist/samples").status_code == 404
