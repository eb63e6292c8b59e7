"""
Frame Processor - Orchestrates speaking classification and camera control.

Invoked once per detector callback with the frame's face landmark lists:
1. Assign a slot to each face (detector position, or stable tracker id)
2. Score mouth activity against the slot's previous landmarks
3. Update the debounced speaking state per slot
4. Compute face boxes and pick the active speaker
5. Retarget and tick the eased camera transition

All state lives in a SessionContext owned by the caller, so any number of
sessions can share one processor.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Sequence

from speakercam.config import ProcessorConfig
from speakercam.services.face_tracker import CentroidTracker
from speakercam.services.landmark_signal import (
    FaceGeometry,
    FaceObservation,
    Landmark,
    LandmarkSignalExtractor,
)
from speakercam.services.speaker_selector import ActiveSpeakerSelector
from speakercam.services.speaking_classifier import FaceTrackState, SpeakingClassifier
from speakercam.services.zoom_controller import (
    NEUTRAL_POSE,
    CameraPose,
    TransitionState,
    ZoomTransitionController,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """
    Per-session mutable state.

    Only the FrameProcessor call sequence mutates it; calls for one session
    must not overlap.
    """

    track_states: dict[int, FaceTrackState] = field(default_factory=dict)
    transition: TransitionState = field(default_factory=TransitionState)
    zoom_enabled: bool = True
    frame_index: int = 0
    active_slot: Optional[int] = None
    tracker: Optional[CentroidTracker] = None

    def reset(self) -> None:
        """Discard all face and camera state, as on a camera restart."""
        self.track_states.clear()
        self.transition = TransitionState()
        self.active_slot = None
        self.frame_index = 0
        if self.tracker is not None:
            self.tracker.reset()


@dataclass
class FrameResult:
    """Render parameters for one frame."""

    frame_index: int
    per_face_speaking: dict[int, bool]
    geometries: dict[int, FaceGeometry]
    active_slot: Optional[int]
    camera_pose: CameraPose


class FrameProcessor:
    """
    Wires signal extraction, classification, selection and zoom together.

    The processor itself is stateless apart from its configuration.
    """

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self.config = config or ProcessorConfig()

        self.extractor = LandmarkSignalExtractor(
            mode=self.config.signal_mode,
            vertical_weight=self.config.vertical_weight,
            horizontal_weight=self.config.horizontal_weight,
        )
        self.classifier = SpeakingClassifier(
            speak_on_frames=self.config.speak_on_frames,
            speak_off_frames=self.config.speak_off_frames,
        )
        self.selector = ActiveSpeakerSelector(policy=self.config.selection_policy)
        self.zoom = ZoomTransitionController(
            step=self.config.zoom_step,
            max_zoom_scale=self.config.max_zoom_scale,
            target_fill_ratio=self.config.target_fill_ratio,
            fixed_zoom_scale=self.config.fixed_zoom_scale,
        )

    def new_context(self) -> SessionContext:
        """Create an empty session context matching this configuration."""
        tracker = None
        if self.config.identity_tracking:
            tracker = CentroidTracker(
                max_distance=self.config.tracker_max_distance,
                max_disappeared=self.config.tracker_max_disappeared,
            )
        return SessionContext(tracker=tracker)

    def set_zoom_enabled(self, context: SessionContext, enabled: bool) -> None:
        """Toggle the virtual camera. Disabling returns it to the neutral pose."""
        context.zoom_enabled = enabled
        if not enabled:
            context.transition = TransitionState()

    def process(
        self,
        context: SessionContext,
        faces: Sequence[Sequence[Landmark]],
    ) -> FrameResult:
        """
        Process one detector callback.

        Args:
            context: Session state, updated in place
            faces: Landmark list per detected face, in detector order

        Returns:
            FrameResult with per-face speaking flags and the camera pose
        """
        threshold = self.config.speaking_threshold
        observations = self._assign_slots(context, faces)

        track_states: dict[int, FaceTrackState] = {}
        per_face_speaking: dict[int, bool] = {}
        geometries: dict[int, FaceGeometry] = {}

        for observation, geometry in observations:
            slot = observation.slot
            previous_state = context.track_states.get(slot, FaceTrackState())

            try:
                state = self._update_face(previous_state, observation, threshold)
            except Exception:
                logger.exception(f"Failed to process face slot {slot}, keeping previous state")
                state = previous_state

            if state.is_speaking != previous_state.is_speaking:
                logger.debug(
                    f"Frame {context.frame_index}: slot {slot} "
                    f"{'started' if state.is_speaking else 'stopped'} speaking"
                )

            track_states[slot] = state
            per_face_speaking[slot] = state.is_speaking
            if geometry is not None:
                geometries[slot] = geometry

        if context.tracker is not None:
            # Tracks bridging a missed detection keep their state
            live_ids = {track.track_id for track in context.tracker.tracks}
            for slot, state in context.track_states.items():
                if slot in live_ids and slot not in track_states:
                    track_states[slot] = state

        # Without tracking, slots absent this frame lose their history
        context.track_states = track_states

        active_slot = self.selector.select(
            per_face_speaking,
            geometries,
            current_slot=context.active_slot,
        )
        context.active_slot = active_slot

        if context.zoom_enabled:
            target_pose = None
            if active_slot is not None:
                target_pose = self.zoom.target_pose_for(geometries[active_slot])
            context.transition = self.zoom.retarget(context.transition, target_pose, active_slot)
            camera_pose, context.transition = self.zoom.tick(context.transition)
        else:
            camera_pose = NEUTRAL_POSE

        result = FrameResult(
            frame_index=context.frame_index,
            per_face_speaking=per_face_speaking,
            geometries=geometries,
            active_slot=active_slot,
            camera_pose=camera_pose,
        )
        context.frame_index += 1
        return result

    def stream(
        self,
        context: SessionContext,
        frames: Iterable[Sequence[Sequence[Landmark]]],
    ) -> Iterator[FrameResult]:
        """
        Lazily process a sequence of detector frames.

        The returned iterator shares the context, so it cannot be restarted
        mid-stream; use context.reset() to start over.
        """
        for faces in frames:
            yield self.process(context, faces)

    def _assign_slots(
        self,
        context: SessionContext,
        faces: Sequence[Sequence[Landmark]],
    ) -> list[tuple[FaceObservation, Optional[FaceGeometry]]]:
        """Pair each face with its slot and framing box."""
        geometries = [self._face_geometry(position, landmarks) for position, landmarks in enumerate(faces)]

        if context.tracker is None:
            return [
                (FaceObservation(slot=position, landmarks=list(landmarks)), geometry)
                for position, (landmarks, geometry) in enumerate(zip(faces, geometries))
            ]

        trackable = [i for i, geometry in enumerate(geometries) if geometry is not None]
        if len(trackable) < len(faces):
            logger.debug(f"Skipping {len(faces) - len(trackable)} faces without landmarks")

        track_ids = context.tracker.update([geometries[i] for i in trackable])
        return [
            (FaceObservation(slot=track_id, landmarks=list(faces[i])), geometries[i])
            for i, track_id in zip(trackable, track_ids)
        ]

    def _face_geometry(self, position: int, landmarks: Sequence[Landmark]) -> Optional[FaceGeometry]:
        try:
            return FaceGeometry.from_landmarks(landmarks, self.config.face_padding_ratio)
        except Exception:
            logger.exception(f"Failed to compute box for face at position {position}")
            return None

    def _update_face(
        self,
        state: FaceTrackState,
        observation: FaceObservation,
        threshold: float,
    ) -> FaceTrackState:
        previous = None
        if state.previous_landmarks is not None:
            previous = FaceObservation(slot=observation.slot, landmarks=state.previous_landmarks)

        score = self.extractor.score(observation, previous)
        updated = self.classifier.update(state, score, threshold)
        return replace(updated, previous_landmarks=list(observation.landmarks))
