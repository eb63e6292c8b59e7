"""
Active speaker arbitration across simultaneously tracked faces.
"""

from typing import Mapping, Optional

from speakercam.config import SelectionPolicy
from speakercam.services.landmark_signal import FaceGeometry


class ActiveSpeakerSelector:
    """
    Picks at most one speaking face as the camera target.

    With the keep_current policy the framed speaker keeps the camera as long
    as they are still speaking; otherwise the lowest-numbered speaking slot
    wins, which keeps ties reproducible.
    """

    def __init__(self, policy: str = SelectionPolicy.KEEP_CURRENT):
        self.policy = policy

    def select(
        self,
        classifications: Mapping[int, bool],
        geometries: Mapping[int, FaceGeometry],
        current_slot: Optional[int] = None,
    ) -> Optional[int]:
        """
        Choose the active speaker slot.

        Args:
            classifications: slot -> is speaking, for faces seen this frame
            geometries: slot -> face box; slots without a box cannot be framed
            current_slot: Slot the camera currently targets, if any

        Returns:
            The selected slot, or None if nobody is speaking
        """
        candidates = sorted(
            slot for slot, speaking in classifications.items()
            if speaking and slot in geometries
        )
        if not candidates:
            return None

        if self.policy == SelectionPolicy.KEEP_CURRENT and current_slot in candidates:
            return current_slot

        return candidates[0]
