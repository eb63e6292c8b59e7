"""
Tests for the eased virtual camera.
"""

import pytest

from speakercam.services.landmark_signal import FaceGeometry
from speakercam.services.zoom_controller import (
    NEUTRAL_POSE,
    CameraPose,
    TransitionState,
    ZoomTransitionController,
    ease_in_out,
)


class TestEasing:
    """Tests for the ease-in-out curve."""

    def test_endpoints(self):
        assert ease_in_out(0.0) == 0.0
        assert ease_in_out(1.0) == 1.0

    def test_midpoint(self):
        assert ease_in_out(0.5) == pytest.approx(0.5)

    def test_slow_start(self):
        assert ease_in_out(0.25) == pytest.approx(0.125)

    def test_monotonic(self):
        values = [ease_in_out(i / 20) for i in range(21)]
        assert values == sorted(values)


class TestTargetPose:
    """Tests for framing a face box."""

    def test_centered_on_face(self):
        controller = ZoomTransitionController()
        pose = controller.target_pose_for(FaceGeometry(x=0.1, y=0.2, width=0.2, height=0.2))

        assert pose.center_x == pytest.approx(0.2)
        assert pose.center_y == pytest.approx(0.3)
        assert pose.scale == pytest.approx(2.0)

    def test_small_face_capped(self):
        controller = ZoomTransitionController()
        pose = controller.target_pose_for(FaceGeometry(x=0.5, y=0.5, width=0.05, height=0.05))
        assert pose.scale == 2.5

    def test_large_face_not_zoomed_out(self):
        controller = ZoomTransitionController()
        pose = controller.target_pose_for(FaceGeometry(x=0.0, y=0.0, width=0.8, height=0.9))
        assert pose.scale == 1.0

    def test_degenerate_box(self):
        controller = ZoomTransitionController()
        pose = controller.target_pose_for(FaceGeometry(x=0.5, y=0.5, width=0.0, height=0.0))
        assert pose.scale == 2.5

    def test_fixed_scale(self):
        controller = ZoomTransitionController(fixed_zoom_scale=1.5)
        pose = controller.target_pose_for(FaceGeometry(x=0.5, y=0.5, width=0.05, height=0.05))
        assert pose.scale == 1.5


class TestTransitions:
    """Tests for retargeting and ticking."""

    def test_idle_tick_stays_neutral(self):
        controller = ZoomTransitionController()
        pose, state = controller.tick(TransitionState())

        assert pose == NEUTRAL_POSE
        assert state.progress == 1.0

    def test_tick_is_idempotent_when_complete(self):
        controller = ZoomTransitionController()
        target = CameraPose(center_x=0.3, center_y=0.4, scale=2.0)
        state = TransitionState(progress=1.0, target_pose=target, target_slot=0)

        first_pose, state = controller.tick(state)
        second_pose, state = controller.tick(state)

        assert first_pose == second_pose
        assert second_pose.scale == pytest.approx(2.0)

    def test_reaches_target_in_twenty_ticks(self):
        controller = ZoomTransitionController(step=0.05)
        target = CameraPose(center_x=0.3, center_y=0.4, scale=2.0)
        state = controller.retarget(TransitionState(), target, target_slot=0)

        poses = []
        for _ in range(20):
            pose, state = controller.tick(state)
            poses.append(pose)

        assert state.progress == pytest.approx(1.0)
        assert poses[-1].center_x == pytest.approx(0.3)
        assert poses[-1].scale == pytest.approx(2.0)
        assert [p.scale for p in poses] == sorted(p.scale for p in poses)

    def test_retarget_same_slot_is_noop(self):
        controller = ZoomTransitionController()
        target = CameraPose(center_x=0.3, center_y=0.4, scale=2.0)
        state = controller.retarget(TransitionState(), target, target_slot=1)
        _, state = controller.tick(state)

        moved = CameraPose(center_x=0.35, center_y=0.4, scale=1.8)
        assert controller.retarget(state, moved, target_slot=1) is state

    def test_retarget_starts_from_current_pose(self):
        """Switching mid-transition never jumps."""
        controller = ZoomTransitionController(step=0.05)
        first = CameraPose(center_x=0.2, center_y=0.5, scale=2.0)
        second = CameraPose(center_x=0.8, center_y=0.5, scale=2.0)

        state = controller.retarget(TransitionState(), first, target_slot=0)
        for _ in range(8):
            on_screen, state = controller.tick(state)

        state = controller.retarget(state, second, target_slot=1)

        assert state.progress == 0.0
        assert controller.current_pose(state) == on_screen

        next_pose, state = controller.tick(state)
        assert abs(next_pose.center_x - on_screen.center_x) < 0.01

    def test_retarget_to_neutral(self):
        controller = ZoomTransitionController(step=0.5)
        target = CameraPose(center_x=0.3, center_y=0.4, scale=2.0)
        state = controller.retarget(TransitionState(), target, target_slot=0)
        _, state = controller.tick(state)
        _, state = controller.tick(state)

        state = controller.retarget(state, None, target_slot=None)
        assert state.target_pose == NEUTRAL_POSE

        _, state = controller.tick(state)
        pose, state = controller.tick(state)
        assert pose.center_x == pytest.approx(0.5)
        assert pose.center_y == pytest.approx(0.5)
        assert pose.scale == pytest.approx(1.0)

    def test_scale_stays_in_bounds(self):
        controller = ZoomTransitionController(step=0.1)
        state = TransitionState()
        targets = [
            (CameraPose(0.2, 0.2, 2.5), 0),
            (CameraPose(0.8, 0.8, 1.0), 1),
            (None, None),
        ]

        for target, slot in targets:
            state = controller.retarget(state, target, slot)
            for _ in range(4):
                pose, state = controller.tick(state)
                assert 1.0 <= pose.scale <= 2.5
