"""
Pydantic schemas for request/response models.
"""

from speakercam.schemas.requests import (
    FrameBatchRequest,
    FrameRequest,
    LandmarkPoint,
    SessionCreateRequest,
    ZoomToggleRequest,
)
from speakercam.schemas.responses import (
    BoundingBox,
    CameraPoseModel,
    FaceStatus,
    FrameBatchResponse,
    FrameResponse,
    SessionResponse,
)

__all__ = [
    "SessionCreateRequest",
    "FrameRequest",
    "FrameBatchRequest",
    "LandmarkPoint",
    "ZoomToggleRequest",
    "FrameResponse",
    "FrameBatchResponse",
    "FaceStatus",
    "BoundingBox",
    "CameraPoseModel",
    "SessionResponse",
]
