"""
Request schemas for the session API.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LandmarkPoint(BaseModel):
    """One face mesh landmark in normalized frame coordinates."""

    x: float = Field(..., description="Horizontal position, 0.0 (left) to 1.0 (right)")
    y: float = Field(..., description="Vertical position, 0.0 (top) to 1.0 (bottom)")


class SessionCreateRequest(BaseModel):
    """
    Request body for POST /sessions.

    Every tunable is optional; omitted values use the service defaults.
    """

    zoom_enabled: bool = Field(default=True, description="Whether the virtual camera follows speakers")
    signal_mode: Optional[Literal["delta", "absolute"]] = Field(
        default=None, description="Mouth activity signal: frame-to-frame change or absolute opening"
    )
    movement_threshold: Optional[float] = Field(
        default=None, description="Activity threshold in delta mode (fraction of frame height)"
    )
    opening_threshold: Optional[float] = Field(
        default=None, description="Activity threshold in absolute mode (fraction of frame height)"
    )
    speak_on_frames: Optional[int] = Field(
        default=None, description="Consecutive active frames before a face counts as speaking"
    )
    speak_off_frames: Optional[int] = Field(
        default=None, description="Consecutive quiet frames before a face stops speaking"
    )
    selection_policy: Optional[Literal["keep_current", "lowest_slot"]] = Field(
        default=None, description="How to choose between simultaneous speakers"
    )
    zoom_step: Optional[float] = Field(
        default=None, description="Transition progress per frame, in (0, 1]"
    )
    max_zoom_scale: Optional[float] = Field(default=None, description="Upper bound on zoom")
    target_fill_ratio: Optional[float] = Field(
        default=None, description="Fraction of the frame the framed face should fill"
    )
    fixed_zoom_scale: Optional[float] = Field(
        default=None, description="Constant zoom for every speaker instead of adaptive zoom"
    )
    face_padding_ratio: Optional[float] = Field(
        default=None, description="Padding around the face box, as a fraction of its larger side"
    )
    identity_tracking: Optional[bool] = Field(
        default=None, description="Match faces across frames by position instead of detector order"
    )
    tracker_max_distance: Optional[float] = Field(
        default=None, description="Max centroid distance for identity matching"
    )
    tracker_max_disappeared: Optional[int] = Field(
        default=None, description="Frames an unmatched face id is kept alive"
    )

    def overrides(self) -> dict:
        """Tunables explicitly set in this request."""
        return self.model_dump(exclude={"zoom_enabled"}, exclude_none=True)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "zoom_enabled": True,
                "signal_mode": "delta",
                "speak_on_frames": 3,
                "speak_off_frames": 5,
            }
        }
    )


class FrameRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/frames."""

    faces: List[List[LandmarkPoint]] = Field(
        default_factory=list,
        description="Landmark list per detected face, in detector order. Empty when no faces.",
    )


class FrameBatchRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/frames/batch."""

    frames: List[FrameRequest] = Field(
        default_factory=list, description="Consecutive frames, oldest first"
    )


class ZoomToggleRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/zoom."""

    enabled: bool = Field(..., description="Whether the virtual camera follows speakers")
