"""
Services for the camera service.

Includes:
- Signal services (mouth movement scoring, speaking classification)
- Camera services (speaker selection, zoom transitions, identity tracking)
- Session services (per-session frame processing and storage)
"""

from speakercam.services.face_tracker import CentroidTracker
from speakercam.services.frame_processor import FrameProcessor, FrameResult, SessionContext
from speakercam.services.landmark_signal import (
    FaceGeometry,
    FaceObservation,
    Landmark,
    LandmarkSignalExtractor,
)
from speakercam.services.session_store import CameraSession, SessionStore
from speakercam.services.speaker_selector import ActiveSpeakerSelector
from speakercam.services.speaking_classifier import FaceTrackState, SpeakingClassifier
from speakercam.services.zoom_controller import (
    NEUTRAL_POSE,
    CameraPose,
    TransitionState,
    ZoomTransitionController,
)

__all__ = [
    # Signal
    "Landmark",
    "FaceObservation",
    "FaceGeometry",
    "LandmarkSignalExtractor",
    "FaceTrackState",
    "SpeakingClassifier",
    # Camera
    "ActiveSpeakerSelector",
    "CameraPose",
    "NEUTRAL_POSE",
    "TransitionState",
    "ZoomTransitionController",
    "CentroidTracker",
    # Sessions
    "FrameProcessor",
    "FrameResult",
    "SessionContext",
    "CameraSession",
    "SessionStore",
]
