"""
FastAPI routers for the camera service.
"""

from speakercam.routers import health, sessions

__all__ = ["health", "sessions"]
