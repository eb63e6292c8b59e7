"""
Zoom Transition Service - Eased virtual camera pan and zoom.

Owns the animated camera pose (center + scale) and moves it toward the
active speaker's framing pose with ease-in-out interpolation, no matter how
abruptly the target changes. A retarget always starts from the pose that is
currently on screen, so a mid-transition switch never jumps.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from speakercam.config import MAX_ZOOM_SCALE, TARGET_FILL_RATIO, ZOOM_STEP
from speakercam.services.landmark_signal import FaceGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraPose:
    """Virtual camera pose. Center in normalized coordinates, scale >= 1."""
    center_x: float
    center_y: float
    scale: float


NEUTRAL_POSE = CameraPose(center_x=0.5, center_y=0.5, scale=1.0)


@dataclass(frozen=True)
class TransitionState:
    """
    Animation state between two poses.

    target_slot is the face the target pose frames (None for neutral); it is
    what decides whether a new target is actually new.
    """
    progress: float = 1.0
    start_pose: CameraPose = NEUTRAL_POSE
    target_pose: CameraPose = NEUTRAL_POSE
    target_slot: Optional[int] = None


def ease_in_out(progress: float) -> float:
    """Quadratic ease-in-out over [0, 1]."""
    if progress < 0.5:
        return 2 * progress * progress
    return 1 - 2 * (1 - progress) ** 2


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


class ZoomTransitionController:
    """Animates the camera pose toward the active speaker."""

    def __init__(
        self,
        step: float = ZOOM_STEP,
        max_zoom_scale: float = MAX_ZOOM_SCALE,
        target_fill_ratio: float = TARGET_FILL_RATIO,
        fixed_zoom_scale: Optional[float] = None,
    ):
        self.step = step
        self.max_zoom_scale = max_zoom_scale
        self.target_fill_ratio = target_fill_ratio
        self.fixed_zoom_scale = fixed_zoom_scale

    def target_pose_for(self, geometry: FaceGeometry) -> CameraPose:
        """
        Framing pose for a face box.

        Smaller faces get zoomed in more: scale = fill ratio / larger box side,
        clamped to [1, max_zoom_scale].
        """
        if self.fixed_zoom_scale is not None:
            scale = self.fixed_zoom_scale
        elif geometry.max_side <= 0:
            scale = self.max_zoom_scale
        else:
            scale = self.target_fill_ratio / geometry.max_side

        scale = max(1.0, min(self.max_zoom_scale, scale))

        return CameraPose(
            center_x=geometry.center_x,
            center_y=geometry.center_y,
            scale=scale,
        )

    def current_pose(self, state: TransitionState) -> CameraPose:
        """Pose at the current progress, without advancing the animation."""
        if state.progress >= 1.0:
            return state.target_pose

        eased = ease_in_out(state.progress)
        start, target = state.start_pose, state.target_pose
        return CameraPose(
            center_x=_lerp(start.center_x, target.center_x, eased),
            center_y=_lerp(start.center_y, target.center_y, eased),
            # Rounding must not drop below unzoomed
            scale=max(1.0, _lerp(start.scale, target.scale, eased)),
        )

    def retarget(
        self,
        state: TransitionState,
        new_target: Optional[CameraPose],
        target_slot: Optional[int],
    ) -> TransitionState:
        """
        Point the camera at a new face, or back to neutral.

        Args:
            state: Current transition state
            new_target: Framing pose of the new face; None means neutral
            target_slot: Slot of the new face; None means neutral

        Returns:
            The unchanged state if the slot is already targeted, otherwise a
            new transition starting from the pose currently on screen
        """
        if target_slot == state.target_slot:
            return state

        start_pose = self.current_pose(state)
        target_pose = new_target if new_target is not None else NEUTRAL_POSE

        logger.debug(
            f"Retarget camera: slot {state.target_slot} -> {target_slot}, "
            f"pose=({target_pose.center_x:.3f}, {target_pose.center_y:.3f}, {target_pose.scale:.2f})"
        )

        return TransitionState(
            progress=0.0,
            start_pose=start_pose,
            target_pose=target_pose,
            target_slot=target_slot,
        )

    def tick(self, state: TransitionState) -> tuple[CameraPose, TransitionState]:
        """
        Advance the animation by one step.

        Returns:
            Tuple of (pose to render, new state)
        """
        new_state = replace(state, progress=min(1.0, state.progress + self.step))
        return self.current_pose(new_state), new_state
