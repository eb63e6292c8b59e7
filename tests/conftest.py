"""
Pytest configuration and fixtures.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from speakercam.services.landmark_signal import (  # noqa: E402
    FACE_OUTLINE_INDICES,
    LOWER_LIP_INDICES,
    MOUTH_CORNER_INDICES,
    UPPER_LIP_INDICES,
    Landmark,
)

NUM_LANDMARKS = 478


def make_face(
    center_x: float = 0.5,
    center_y: float = 0.5,
    size: float = 0.2,
    mouth_open: float = 0.0,
    corner_shift: float = 0.0,
) -> list[Landmark]:
    """
    Build a synthetic face mesh.

    The outline points span a size x size square around the center, the lips
    sit below the center separated by mouth_open, and the mouth corners are
    moved outward by corner_shift.
    """
    landmarks = [Landmark(x=center_x, y=center_y)] * NUM_LANDMARKS

    half = size / 2
    for n, index in enumerate(FACE_OUTLINE_INDICES):
        # Alternate between the four corners of the square
        dx = half if n % 2 else -half
        dy = half if (n // 2) % 2 else -half
        landmarks[index] = Landmark(x=center_x + dx, y=center_y + dy)

    mouth_y = center_y + size * 0.25
    for index in UPPER_LIP_INDICES:
        landmarks[index] = Landmark(x=center_x, y=mouth_y - mouth_open / 2)
    for index in LOWER_LIP_INDICES:
        landmarks[index] = Landmark(x=center_x, y=mouth_y + mouth_open / 2)

    left, right = MOUTH_CORNER_INDICES
    landmarks[left] = Landmark(x=center_x - size * 0.15 - corner_shift, y=mouth_y)
    landmarks[right] = Landmark(x=center_x + size * 0.15 + corner_shift, y=mouth_y)

    return landmarks


def talking_frames(count: int, **face_kwargs) -> list[list[Landmark]]:
    """Landmark lists for one face whose mouth alternates open and closed."""
    return [
        make_face(mouth_open=0.03 if i % 2 else 0.0, **face_kwargs)
        for i in range(count)
    ]


@pytest.fixture
def face_factory():
    """Factory for synthetic face meshes."""
    return make_face


@pytest.fixture
def clean_settings(monkeypatch):
    """Settings cache cleared before and after, with no API key configured."""
    from speakercam.config import get_settings

    monkeypatch.delenv("API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client(clean_settings):
    """TestClient running the app lifespan."""
    from fastapi.testclient import TestClient

    from speakercam.main import app

    with TestClient(app) as test_client:
        yield test_client
