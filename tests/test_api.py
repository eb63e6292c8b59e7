"""
Tests for the HTTP API.
"""

import pytest

from conftest import make_face, talking_frames
from speakercam.config import InvalidConfigurationError, get_settings


def to_points(landmarks):
    return [{"x": p.x, "y": p.y} for p in landmarks]


def frame_body(*faces):
    return {"faces": [to_points(face) for face in faces]}


def create_session(client, **body):
    response = client.post("/sessions", json=body)
    assert response.status_code == 201, response.text
    return response.json()["session_id"]


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["ready"] is True
        assert data["active_sessions"] == 0

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "speakercam"


class TestSessions:
    """Tests for the session lifecycle."""

    def test_create_with_defaults(self, client):
        response = client.post("/sessions", json={})

        assert response.status_code == 201
        data = response.json()
        assert data["frames_processed"] == 0
        assert data["zoom_enabled"] is True
        assert data["active_slot"] is None
        assert data["config"]["speak_on_frames"] == 3
        assert data["created_at"] > 0
        assert data["last_frame_at"] is None

    def test_create_with_overrides(self, client):
        response = client.post(
            "/sessions",
            json={"signal_mode": "absolute", "speak_off_frames": 8, "zoom_enabled": False},
        )

        data = response.json()
        assert data["config"]["signal_mode"] == "absolute"
        assert data["config"]["speak_off_frames"] == 8
        assert data["zoom_enabled"] is False

    def test_invalid_tunables_rejected(self, client):
        response = client.post("/sessions", json={"zoom_step": 0})
        assert response.status_code == 422

    def test_unknown_mode_rejected(self, client):
        response = client.post("/sessions", json={"signal_mode": "spectral"})
        assert response.status_code == 422

    def test_get_unknown_session(self, client):
        assert client.get("/sessions/missing").status_code == 404

    def test_end_session(self, client):
        session_id = create_session(client)

        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert client.delete(f"/sessions/{session_id}").status_code == 404

    def test_session_limit(self, client):
        client.app.state.session_store.max_sessions = 1
        create_session(client)

        response = client.post("/sessions", json={})

        assert response.status_code == 429
        assert client.get("/health/ready").json()["ready"] is False


class TestFrames:
    """Tests for frame processing endpoints."""

    def test_empty_frame(self, client):
        session_id = create_session(client)

        response = client.post(f"/sessions/{session_id}/frames", json={"faces": []})

        assert response.status_code == 200
        data = response.json()
        assert data["faces"] == []
        assert data["camera_pose"] == {"center_x": 0.5, "center_y": 0.5, "scale": 1.0}

    def test_speaker_detected(self, client):
        session_id = create_session(client)

        for face in talking_frames(6, center_x=0.3):
            response = client.post(f"/sessions/{session_id}/frames", json=frame_body(face))
            assert response.status_code == 200

        data = response.json()
        assert data["frame_index"] == 5
        assert data["faces"][0]["slot"] == 0
        assert data["faces"][0]["is_speaking"] is True
        assert data["faces"][0]["bbox"]["width"] > 0
        assert data["active_slot"] == 0
        assert data["camera_pose"]["scale"] > 1.0

        session = client.get(f"/sessions/{session_id}").json()
        assert session["frames_processed"] == 6
        assert session["active_slot"] == 0
        assert session["last_frame_at"] is not None

    def test_batch(self, client):
        session_id = create_session(client)
        frames = [frame_body(face) for face in talking_frames(5)]

        response = client.post(f"/sessions/{session_id}/frames/batch", json={"frames": frames})

        assert response.status_code == 200
        results = response.json()["frames"]
        assert [r["frame_index"] for r in results] == [0, 1, 2, 3, 4]
        assert [r["faces"][0]["is_speaking"] for r in results] == [False, False, False, True, True]

    def test_malformed_landmarks(self, client):
        session_id = create_session(client)

        response = client.post(f"/sessions/{session_id}/frames", json={"faces": [[{"x": 0.5}]]})

        assert response.status_code == 422

    def test_frames_for_unknown_session(self, client):
        response = client.post("/sessions/missing/frames", json=frame_body(make_face()))
        assert response.status_code == 404

    def test_zoom_toggle(self, client):
        session_id = create_session(client)
        for face in talking_frames(6):
            client.post(f"/sessions/{session_id}/frames", json=frame_body(face))

        response = client.post(f"/sessions/{session_id}/zoom", json={"enabled": False})
        assert response.json()["zoom_enabled"] is False

        face = make_face(mouth_open=0.03)
        data = client.post(f"/sessions/{session_id}/frames", json=frame_body(face)).json()
        assert data["camera_pose"] == {"center_x": 0.5, "center_y": 0.5, "scale": 1.0}
        assert data["faces"][0]["is_speaking"] is True

    def test_reset(self, client):
        session_id = create_session(client)
        for face in talking_frames(6):
            client.post(f"/sessions/{session_id}/frames", json=frame_body(face))

        response = client.post(f"/sessions/{session_id}/reset")

        data = response.json()
        assert data["frames_processed"] == 0
        assert data["tracked_faces"] == 0
        assert data["active_slot"] is None


class TestApiKey:
    """Tests for API key enforcement."""

    def test_key_required_when_configured(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret")
        get_settings.cache_clear()

        assert client.post("/sessions", json={}).status_code == 401
        assert client.post(
            "/sessions", json={}, headers={"X-SpeakerCam-API-Key": "wrong"}
        ).status_code == 401

        response = client.post("/sessions", json={}, headers={"X-SpeakerCam-API-Key": "secret"})
        assert response.status_code == 201

    def test_health_is_open(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret")
        get_settings.cache_clear()

        assert client.get("/health").status_code == 200


class TestStartup:
    """Tests for startup validation of environment defaults."""

    def test_invalid_environment_default_fails_startup(self, clean_settings, monkeypatch):
        monkeypatch.setenv("ZOOM_STEP", "0")
        get_settings.cache_clear()

        from fastapi.testclient import TestClient

        from speakercam.main import app

        with pytest.raises(InvalidConfigurationError):
            with TestClient(app):
                pass
