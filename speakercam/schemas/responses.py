"""
Response schemas for the session API.

These schemas define the JSON consumed by the renderer that draws face
outlines and applies the camera transform.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from speakercam.services.frame_processor import FrameResult


class BoundingBox(BaseModel):
    """Face box in normalized frame coordinates."""

    x: float = Field(..., description="Left edge")
    y: float = Field(..., description="Top edge")
    width: float = Field(..., description="Box width")
    height: float = Field(..., description="Box height")


class CameraPoseModel(BaseModel):
    """Virtual camera pose to render this frame with."""

    center_x: float = Field(..., description="Normalized horizontal center")
    center_y: float = Field(..., description="Normalized vertical center")
    scale: float = Field(..., ge=1.0, description="Zoom factor, 1.0 = unzoomed")


class FaceStatus(BaseModel):
    """Classification of one face in a frame."""

    slot: int = Field(..., description="Face slot (detector position or stable track id)")
    is_speaking: bool = Field(..., description="Debounced speaking state")
    bbox: Optional[BoundingBox] = Field(default=None, description="Face box, if computable")


class FrameResponse(BaseModel):
    """Render parameters for one processed frame."""

    frame_index: int = Field(..., description="Index of this frame within the session")
    faces: List[FaceStatus] = Field(default_factory=list, description="Per-face status, by slot")
    active_slot: Optional[int] = Field(default=None, description="Slot the camera is framing")
    camera_pose: CameraPoseModel = Field(..., description="Current animated camera pose")

    @classmethod
    def from_result(cls, result: FrameResult) -> "FrameResponse":
        faces = []
        for slot in sorted(result.per_face_speaking):
            geometry = result.geometries.get(slot)
            bbox = None
            if geometry is not None:
                bbox = BoundingBox(
                    x=geometry.x, y=geometry.y, width=geometry.width, height=geometry.height
                )
            faces.append(FaceStatus(slot=slot, is_speaking=result.per_face_speaking[slot], bbox=bbox))

        pose = result.camera_pose
        return cls(
            frame_index=result.frame_index,
            faces=faces,
            active_slot=result.active_slot,
            camera_pose=CameraPoseModel(
                center_x=pose.center_x, center_y=pose.center_y, scale=pose.scale
            ),
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "frame_index": 42,
                "faces": [
                    {
                        "slot": 0,
                        "is_speaking": True,
                        "bbox": {"x": 0.31, "y": 0.22, "width": 0.18, "height": 0.26},
                    },
                    {"slot": 1, "is_speaking": False, "bbox": None},
                ],
                "active_slot": 0,
                "camera_pose": {"center_x": 0.41, "center_y": 0.36, "scale": 1.42},
            }
        }
    )


class FrameBatchResponse(BaseModel):
    """Render parameters for a batch of frames."""

    frames: List[FrameResponse] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """State of a camera session."""

    session_id: str = Field(..., description="Session identifier")
    frames_processed: int = Field(..., description="Frames processed since start or last reset")
    zoom_enabled: bool = Field(..., description="Whether the virtual camera follows speakers")
    active_slot: Optional[int] = Field(default=None, description="Slot the camera is framing")
    tracked_faces: int = Field(..., description="Face slots with classification state")
    config: dict = Field(..., description="Tunables in effect for this session")
    created_at: float = Field(..., description="Unix time the session started")
    last_frame_at: Optional[float] = Field(default=None, description="Unix time of the last processed frame")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(..., description="Whether the service is ready to accept requests")
    active_sessions: int = Field(..., description="Number of running camera sessions")
    max_sessions: int = Field(..., description="Session capacity")
