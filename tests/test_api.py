"""
Integration tests for the REST routes and the WebSocket protocol.
"""

import pytest
from fastapi.testclient import TestClient

from paramsurf.main import app

SMALL_GRID = {"u_steps": 8, "v_steps": 4}


@pytest.fixture
def client():
    return TestClient(app)


# =============================================================================
# REST
# =============================================================================

class TestRestBasics:
    """Test health and catalog endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_examples(self, client):
        examples = client.get("/api/examples").json()["examples"]
        assert {"id": "mobius", "name": "Möbius strip"} in examples
        assert len(examples) == 6

    def test_example_detail(self, client):
        data = client.get("/api/examples/cylinder").json()
        assert data["z"] == "v"
        assert data["uSteps"] == 50

    def test_unknown_example(self, client):
        assert client.get("/api/examples/klein").status_code == 404


class TestRestExpressions:
    """Test expression and bound evaluation endpoints."""

    def test_compile(self, client):
        response = client.post("/api/expression/compile", json={"expression": "cos(u) * cos(v)"})
        assert response.status_code == 200
        data = response.json()
        assert data["value"] == 1.0
        assert data["free_variables"] == ["u", "v"]

    def test_compile_non_finite_value(self, client):
        response = client.post("/api/expression/compile", json={"expression": "1/u"})
        assert response.status_code == 200
        assert response.json()["value"] is None
        assert response.json()["finite"] is False

    def test_compile_error(self, client):
        response = client.post("/api/expression/compile", json={"expression": "bogus(u)"})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "COMPILE_ERROR"
        assert detail["severity"] == "error"

    def test_bound(self, client):
        response = client.post("/api/bounds/evaluate", json={"expression": "2 * pi"})
        assert response.json()["value"] == pytest.approx(6.283185307)

    def test_empty_bound(self, client):
        response = client.post("/api/bounds/evaluate", json={"expression": ""})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "EMPTY_BOUND"


class TestRestSurface:
    """Test surface building and export endpoints."""

    def test_surface(self, client):
        response = client.post("/api/surface", json=SMALL_GRID)
        assert response.status_code == 200
        data = response.json()
        assert data["vertex_count"] == 45
        assert data["index_count"] == 192
        assert data["bounding_sphere"]["radius"] == pytest.approx(1.0)

    def test_huge_coordinates(self, client):
        response = client.post("/api/surface", json={
            "x": "exp(700*u)", "y": "v", "z": "exp(700*v)",
            "u_min": "0", "u_max": "1", "v_min": "0", "v_max": "1", "u_steps": 4, "v_steps": 4,
        })
        assert response.status_code == 200
        assert None not in response.json()["normals"]

    def test_dense_grid(self, client):
        response = client.post("/api/surface", json={"u_steps": 300, "v_steps": 300})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_GRID_SPEC"

    def test_equal_bounds(self, client):
        response = client.post("/api/surface", json={"u_min": "1", "u_max": "1"})
        assert response.json()["detail"]["code"] == "INVALID_GRID_SPEC"

    def test_stl(self, client):
        response = client.post("/api/export/stl", json={**SMALL_GRID, "name": "Unit Sphere"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"
        assert 'filename="unit-sphere.stl"' in response.headers["content-disposition"]
        assert len(response.content) == 84 + 50 * 2 * 8 * 4

    def test_stl_rejects_bad_surface(self, client):
        response = client.post("/api/export/stl", json={"z": "1/v", "v_min": "0", "v_max": "1"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "NON_FINITE_VERTEX"


class TestRestFourierAndPresets:
    """Test Fourier fitting and preset endpoints."""

    def test_fit(self, client, circle_points):
        response = client.post("/api/fourier/fit", json={
            "points": circle_points, "order": 2, "canvas_width": 400, "canvas_height": 300,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["order"] == 2
        assert data["expressions"]["x"] == "0.6667*cos(1*u)"
        assert len(data["preview"]) == 401

    def test_fit_too_few_points(self, client, circle_points):
        response = client.post("/api/fourier/fit", json={
            "points": circle_points[:5], "canvas_width": 400, "canvas_height": 300,
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INSUFFICIENT_SAMPLES"

    def test_fit_needs_canvas_size(self, client, circle_points):
        response = client.post("/api/fourier/fit", json={
            "points": circle_points, "canvas_width": 0, "canvas_height": 300,
        })
        assert response.status_code == 422

    def test_parse_preset(self, client):
        response = client.post("/api/presets/parse", json={"presets": [{"name": "Flat", "x": "u"}]})
        definition = response.json()["definition"]
        assert definition["name"] == "Flat"
        assert definition["x"] == "u"
        assert definition["y"] == ""

    def test_parse_preset_bad_steps(self, client):
        response = client.post("/api/presets/parse", json={"x": "u", "uSteps": "²"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PRESET"

    def test_export_preset(self, client):
        response = client.post("/api/presets/export", json={"name": "My Torus"})
        assert response.status_code == 200
        assert 'filename="my-torus.json"' in response.headers["content-disposition"]
        document = response.json()
        assert document["type"] == "paramSurfacePreset"
        assert document["uSteps"] == 60


# =============================================================================
# WebSocket
# =============================================================================

class TestWebSocket:
    """Test the /ws message protocol."""

    def test_build_surface(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "build_surface", "payload": SMALL_GRID})
            mesh = ws.receive_json()
            status = ws.receive_json()
        assert mesh["type"] == "mesh_update"
        assert mesh["payload"]["vertex_count"] == 45
        assert mesh["payload"]["definition"]["u_steps"] == 8
        assert status == {"type": "status", "payload": {"message": "Surface updated ✔", "severity": "ok"}}

    def test_failed_build_reports_status(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "build_surface", "payload": {**SMALL_GRID, "x": "u +"}})
            reply = ws.receive_json()
        assert reply["type"] == "status"
        assert reply["payload"]["severity"] == "error"
        assert reply["payload"]["code"] == "COMPILE_ERROR"

    def test_request_mesh_before_build(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "request_mesh"})
            reply = ws.receive_json()
        assert reply["type"] == "error"
        assert reply["payload"]["code"] == "NO_MESH"

    def test_non_object_message(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json([1, 2])
            reply = ws.receive_json()
        assert reply["payload"]["code"] == "INVALID_PAYLOAD"

    def test_unknown_message(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "explode"})
            reply = ws.receive_json()
        assert reply["payload"]["code"] == "UNKNOWN_MESSAGE"

    def test_invalid_payload(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "stroke_start", "payload": {"x": 1}})
            reply = ws.receive_json()
        assert reply["payload"]["code"] == "INVALID_PAYLOAD"

    def test_custom_example(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "load_example", "payload": {"key": "custom"}})
            reply = ws.receive_json()
        assert reply["type"] == "status"
        assert reply["payload"]["severity"] == "ok"

    def test_load_preset(self, client):
        preset = {"name": "Flat", "x": "u", "y": "v", "z": "0",
                  "uMin": "0", "uMax": "1", "vMin": "0", "vMax": "1", "uSteps": 4, "vSteps": 4}
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "load_preset", "payload": {"preset": preset}})
            mesh = ws.receive_json()
            status = ws.receive_json()
        assert mesh["payload"]["vertex_count"] == 25
        assert status["payload"]["message"] == 'Loaded preset "Flat".'

    def test_draw_fit_and_send_to_surface(self, client, circle_points):
        with client.websocket_connect("/ws") as ws:
            x, y = circle_points[0]
            ws.send_json({"type": "stroke_start", "payload": {"x": x, "y": y}})
            for x, y in circle_points[1:]:
                ws.send_json({"type": "stroke_move", "payload": {"x": x, "y": y}})
            ws.send_json({"type": "stroke_end"})

            ws.send_json({"type": "fourier_compute",
                          "payload": {"order": 4, "canvas_width": 400, "canvas_height": 300}})
            result = ws.receive_json()
            status = ws.receive_json()

            ws.send_json({"type": "fourier_to_surface"})
            mesh = ws.receive_json()
            sent = ws.receive_json()

            ws.send_json({"type": "fourier_clear"})
            cleared = ws.receive_json()

        assert result["type"] == "fourier_result"
        assert result["payload"]["order"] == 4
        assert result["payload"]["expressions"]["y"] == "-0.6667*sin(1*u)"
        assert status["payload"]["message"] == "Fourier approximation computed with K=4 terms."
        assert mesh["type"] == "mesh_update"
        assert mesh["payload"]["definition"]["z"] == "0.1 * v"
        assert sent["payload"]["severity"] == "ok"
        assert cleared["payload"]["message"] == "Drawing cleared."
