"""
Landmark Signal Service - Mouth activity scores from face mesh landmarks.

Turns one face's landmark list (and optionally the previous frame's list for
the same face) into a scalar mouth activity score, and derives the face's
bounding box for framing.

Landmark indices follow the face mesh topology (468/478 points), where each
index is a fixed semantic point, e.g. 61 is always the left mouth corner.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from speakercam.config import FACE_PADDING_RATIO, HORIZONTAL_WEIGHT, VERTICAL_WEIGHT, SignalMode

logger = logging.getLogger(__name__)


# ============================================================================
# FACE MESH TOPOLOGY
# ============================================================================

UPPER_LIP_INDICES = (13, 14, 312)
LOWER_LIP_INDICES = (17, 15, 16)
MOUTH_CORNER_INDICES = (61, 291)

# Points around the face perimeter, used for the framing box
FACE_OUTLINE_INDICES = (
    10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
    397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
    172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109,
)


@dataclass(frozen=True)
class Landmark:
    """A face mesh point in normalized [0, 1] frame coordinates."""
    x: float
    y: float


@dataclass
class FaceObservation:
    """Landmarks of one detected face in one frame, keyed by its slot."""
    slot: int
    landmarks: list[Landmark] = field(default_factory=list)


@dataclass(frozen=True)
class FaceGeometry:
    """Axis-aligned face box in normalized coordinates. Recomputed every frame."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def max_side(self) -> float:
        return max(self.width, self.height)

    @classmethod
    def from_landmarks(
        cls,
        landmarks: Sequence[Landmark],
        padding_ratio: float = FACE_PADDING_RATIO,
    ) -> Optional["FaceGeometry"]:
        """
        Build the framing box for a face.

        Uses the face outline points when the topology provides them, otherwise
        every landmark. The box is padded by padding_ratio of its larger side
        and clamped to the frame.

        Returns:
            FaceGeometry, or None when there are no landmarks
        """
        points = _points_at(landmarks, FACE_OUTLINE_INDICES)
        if not points:
            points = list(landmarks)
        if not points:
            return None

        xs = np.array([p.x for p in points], dtype=float)
        ys = np.array([p.y for p in points], dtype=float)
        min_x, max_x = float(xs.min()), float(xs.max())
        min_y, max_y = float(ys.min()), float(ys.max())

        padding = max(max_x - min_x, max_y - min_y) * padding_ratio

        left = max(0.0, min_x - padding)
        top = max(0.0, min_y - padding)
        right = min(1.0, max_x + padding)
        bottom = min(1.0, max_y + padding)

        return cls(
            x=left,
            y=top,
            width=max(0.0, right - left),
            height=max(0.0, bottom - top),
        )


def _points_at(landmarks: Sequence[Landmark], indices: Sequence[int]) -> list[Landmark]:
    """Landmarks at the given indices, skipping any the list does not contain."""
    return [landmarks[i] for i in indices if i < len(landmarks) and landmarks[i] is not None]


def _mean_y(landmarks: Sequence[Landmark], indices: Sequence[int]) -> Optional[float]:
    points = _points_at(landmarks, indices)
    if not points:
        return None
    return float(np.mean([p.y for p in points]))


def mouth_opening(landmarks: Sequence[Landmark]) -> Optional[float]:
    """
    Vertical gap between the mean upper lip and mean lower lip.

    Returns:
        The opening in normalized frame height, or None if either lip group is
        entirely missing from the landmark list
    """
    upper = _mean_y(landmarks, UPPER_LIP_INDICES)
    lower = _mean_y(landmarks, LOWER_LIP_INDICES)
    if upper is None or lower is None:
        return None
    return abs(lower - upper)


class LandmarkSignalExtractor:
    """
    Scores mouth activity for one face.

    Delta mode: change of mouth opening plus mouth corner drift between
    consecutive frames. Vertical change is weighted 3x because opening and
    closing is the dominant speaking cue; corner drift catches visemes that
    barely change the opening.

    Absolute mode: the current mouth opening alone.
    """

    def __init__(
        self,
        mode: str = SignalMode.DELTA,
        vertical_weight: float = VERTICAL_WEIGHT,
        horizontal_weight: float = HORIZONTAL_WEIGHT,
    ):
        self.mode = mode
        self.vertical_weight = vertical_weight
        self.horizontal_weight = horizontal_weight

    def score(
        self,
        current: FaceObservation,
        previous: Optional[FaceObservation] = None,
    ) -> float:
        """
        Compute the mouth activity score for a face.

        Args:
            current: The face in this frame
            previous: The same slot in the previous frame, if seen

        Returns:
            Non-negative activity score; 0 when there is no signal
        """
        if self.mode == SignalMode.ABSOLUTE:
            opening = mouth_opening(current.landmarks)
            if opening is None:
                logger.debug(f"Slot {current.slot}: lip landmarks missing, score 0")
                return 0.0
            return opening

        if previous is None or not previous.landmarks:
            return 0.0

        current_opening = mouth_opening(current.landmarks)
        previous_opening = mouth_opening(previous.landmarks)
        if current_opening is None or previous_opening is None:
            logger.debug(f"Slot {current.slot}: lip landmarks missing, score 0")
            return 0.0

        vertical_movement = abs(current_opening - previous_opening)

        horizontal_movement = 0.0
        for index in MOUTH_CORNER_INDICES:
            cur = _points_at(current.landmarks, (index,))
            prev = _points_at(previous.landmarks, (index,))
            if cur and prev:
                horizontal_movement += abs(cur[0].x - prev[0].x)

        return self.vertical_weight * vertical_movement + self.horizontal_weight * horizontal_movement
