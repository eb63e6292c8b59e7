"""
Speaking Classifier Service - Debounced speaking/silent state per face.

A noisy per-frame activity score becomes a stable boolean through two streak
counters. Speaking starts only after SPEAK_ON_FRAMES consecutive active
frames and ends only after SPEAK_OFF_FRAMES consecutive quiet frames, so brief
mouth closures inside a phrase (consonants, pauses) do not flicker the state.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from speakercam.config import SPEAK_OFF_FRAMES, SPEAK_ON_FRAMES
from speakercam.services.landmark_signal import Landmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceTrackState:
    """Classification state for one face slot."""

    previous_landmarks: Optional[list[Landmark]] = None
    is_speaking: bool = False
    speaking_streak: int = 0
    silent_streak: int = 0


class SpeakingClassifier:
    """
    Hysteresis state machine over mouth activity scores.

    update() is pure: it returns a new FaceTrackState and the caller persists
    it. previous_landmarks is carried through untouched.
    """

    def __init__(
        self,
        speak_on_frames: int = SPEAK_ON_FRAMES,
        speak_off_frames: int = SPEAK_OFF_FRAMES,
    ):
        self.speak_on_frames = speak_on_frames
        self.speak_off_frames = speak_off_frames

    def update(self, state: FaceTrackState, score: float, threshold: float) -> FaceTrackState:
        """
        Advance the state machine by one frame.

        Args:
            state: State after the previous frame
            score: Mouth activity score for this frame
            threshold: Scores strictly above this count as active

        Returns:
            The new state
        """
        if score > threshold:
            speaking_streak = state.speaking_streak + 1
            silent_streak = 0
            is_speaking = state.is_speaking or speaking_streak >= self.speak_on_frames
        else:
            speaking_streak = 0
            silent_streak = state.silent_streak + 1
            is_speaking = state.is_speaking and silent_streak < self.speak_off_frames

        return replace(
            state,
            is_speaking=is_speaking,
            speaking_streak=speaking_streak,
            silent_streak=silent_streak,
        )
