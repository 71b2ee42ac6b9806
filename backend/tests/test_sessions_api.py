"""
Tests for the navigation session endpoints.

A straight curve along +Z is uploaded and driven with wheel and touch
events.  Frames are advanced with an explicit ``dt`` so the results do
not depend on wall-clock timing.
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


@pytest.fixture
def curve_id(client: TestClient) -> str:
    doc = json.dumps({"points": [[0, 0, 0], [0, 0, 10]]}).encode()
    resp = client.post(
        "/api/curves",
        files={"file": ("straight.json", io.BytesIO(doc), "application/json")},
    )
    assert resp.status_code == 201
    return resp.json()["curveId"]


def _create(client: TestClient, curve_id: str, **overrides) -> dict:
    resp = client.post(f"/api/curves/{curve_id}/sessions", json=overrides or None)
    assert resp.status_code == 201
    return resp.json()


def test_new_session_starts_at_beginning(client: TestClient, curve_id: str) -> None:
    data = _create(client, curve_id)
    assert data["curveId"] == curve_id
    assert data["state"]["progress"] == 0.0
    assert data["state"]["phase"] == "AT_START"
    pose = data["pose"]
    assert (pose["position"]["x"], pose["position"]["y"], pose["position"]["z"]) == pytest.approx(
        (0.0, 0.0, 0.0)
    )
    assert pose["forward"]["z"] == pytest.approx(1.0)
    assert data["settings"]["smoothing"] is True


def test_wheel_input_moves_camera_immediately(client: TestClient, curve_id: str) -> None:
    session_id = _create(client, curve_id, smoothing=False)["sessionId"]
    state = client.post(
        f"/api/sessions/{session_id}/input",
        json={"kind": "wheel", "payload": {"deltaY": 100}},
    ).json()
    assert state["progress"] == pytest.approx(0.02)
    assert state["phase"] == "IN_TRANSIT"

    pose = client.post(f"/api/sessions/{session_id}/frame", json={"dt": 0.016}).json()
    assert pose["position"]["z"] == pytest.approx(0.2, abs=1e-6)
    assert pose["frame"] == 1


def test_damped_session_saturates_at_end(client: TestClient, curve_id: str) -> None:
    session_id = _create(client, curve_id, dampingRate=20.0)["sessionId"]
    client.post(
        f"/api/sessions/{session_id}/input",
        json={"kind": "touch", "payload": {"previousY": 100000, "currentY": 0}},
    )
    for _ in range(120):
        pose = client.post(f"/api/sessions/{session_id}/frame", json={"dt": 0.05}).json()
    assert pose["progress"] == 1.0
    assert pose["phase"] == "AT_END"
    assert pose["position"]["z"] == pytest.approx(10.0)
    assert pose["forward"]["z"] == pytest.approx(1.0)


def test_unknown_input_kind_is_ignored(client: TestClient, curve_id: str) -> None:
    session_id = _create(client, curve_id, smoothing=False)["sessionId"]
    resp = client.post(
        f"/api/sessions/{session_id}/input",
        json={"kind": "gamepad", "payload": {"axis": 0.5}},
    )
    assert resp.status_code == 200
    assert resp.json()["progress"] == 0.0


def test_reset_and_delete(client: TestClient, curve_id: str) -> None:
    session_id = _create(client, curve_id, smoothing=False)["sessionId"]
    client.post(
        f"/api/sessions/{session_id}/input",
        json={"kind": "scalar", "payload": {"delta": 2500}},
    )
    client.post(f"/api/sessions/{session_id}/frame", json={"dt": 0.016})
    pose = client.post(f"/api/sessions/{session_id}/reset").json()
    assert pose["progress"] == 0.0
    assert pose["position"]["z"] == pytest.approx(0.0)

    assert client.get(f"/api/sessions/{session_id}").status_code == 200
    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_frame_without_body_uses_server_clock(client: TestClient, curve_id: str) -> None:
    session_id = _create(client, curve_id)["sessionId"]
    resp = client.post(f"/api/sessions/{session_id}/frame")
    assert resp.status_code == 200
    assert resp.json()["frame"] == 1


def test_invalid_overrides_are_rejected(client: TestClient, curve_id: str) -> None:
    resp = client.post(f"/api/curves/{curve_id}/sessions", json={"lookAhead": 0})
    assert resp.status_code == 422
    resp = client.post(f"/api/curves/{curve_id}/sessions", json={"sensitivity": -1})
    assert resp.status_code == 422


def test_unknown_ids_are_404(client: TestClient) -> None:
    assert client.post("/api/curves/missing/sessions").status_code == 404
    assert client.get("/api/sessions/missing").status_code == 404
    assert client.post("/api/sessions/missing/frame", json={"dt": 0.016}).status_code == 404
    assert (
        client.post("/api/sessions/missing/input", json={"kind": "wheel", "payload": {}}).status_code
        == 404
    )
    assert client.delete("/api/sessions/missing").status_code == 404
