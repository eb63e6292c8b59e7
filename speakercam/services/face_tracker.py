"""
Face Tracker Service - Stable face ids across frames by centroid matching.

The landmark detector only reports faces by their position in each frame's
result list, and that position can change when faces enter, leave or reorder.
This tracker maps each frame's faces to stable synthetic ids:
- Matches faces to existing tracks by minimum centroid distance (greedy)
- Keeps unmatched tracks alive for a few frames to bridge missed detections
- Starts new ids for faces that match nothing

No appearance features are used; identity is positional only.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from speakercam.config import MAX_FRAMES_DISAPPEARED, MAX_MATCH_DISTANCE
from speakercam.services.landmark_signal import FaceGeometry

logger = logging.getLogger(__name__)


@dataclass
class CentroidTrack:
    """A face followed across frames."""
    track_id: int
    center_x: float
    center_y: float
    frames_visible: int = 1
    frames_disappeared: int = 0


class CentroidTracker:
    """
    Nearest-centroid tracker over face geometries.

    update() takes the frame's face boxes in detector order and returns the
    stable id for each of them, in the same order.
    """

    def __init__(
        self,
        max_distance: float = MAX_MATCH_DISTANCE,
        max_disappeared: int = MAX_FRAMES_DISAPPEARED,
    ):
        self.max_distance = max_distance
        self.max_disappeared = max_disappeared

        self._tracks: OrderedDict[int, CentroidTrack] = OrderedDict()
        self._next_track_id = 0

    @property
    def tracks(self) -> list[CentroidTrack]:
        return list(self._tracks.values())

    def reset(self) -> None:
        """Reset tracker state for a new session."""
        self._tracks.clear()
        self._next_track_id = 0

    def update(self, geometries: Sequence[FaceGeometry]) -> list[int]:
        """
        Assign stable ids to this frame's faces.

        Args:
            geometries: Face boxes in detector order

        Returns:
            Track id per face, in the same order
        """
        assigned: list[int] = [-1] * len(geometries)
        track_ids = list(self._tracks.keys())
        matched_tracks: set[int] = set()

        if geometries and track_ids:
            track_centers = np.array(
                [[self._tracks[tid].center_x, self._tracks[tid].center_y] for tid in track_ids]
            )
            face_centers = np.array([[g.center_x, g.center_y] for g in geometries])

            # Distance matrix (tracks x faces)
            distances = np.linalg.norm(
                track_centers[:, None, :] - face_centers[None, :, :], axis=2
            )

            # Greedy matching by smallest distance
            while distances.size:
                track_idx, face_idx = np.unravel_index(np.argmin(distances), distances.shape)
                if distances[track_idx, face_idx] > self.max_distance:
                    break

                track_id = track_ids[track_idx]
                self._update_track(track_id, geometries[face_idx])
                assigned[face_idx] = track_id
                matched_tracks.add(track_id)

                distances[track_idx, :] = np.inf
                distances[:, face_idx] = np.inf

        for track_id in track_ids:
            if track_id not in matched_tracks:
                self._tracks[track_id].frames_disappeared += 1

        for face_idx, geometry in enumerate(geometries):
            if assigned[face_idx] == -1:
                assigned[face_idx] = self._create_track(geometry)

        self._remove_stale_tracks()

        return assigned

    def _create_track(self, geometry: FaceGeometry) -> int:
        """Create a new track from a face box."""
        track = CentroidTrack(
            track_id=self._next_track_id,
            center_x=geometry.center_x,
            center_y=geometry.center_y,
        )
        self._tracks[track.track_id] = track
        self._next_track_id += 1

        logger.debug(f"New face track {track.track_id} at ({track.center_x:.2f}, {track.center_y:.2f})")
        return track.track_id

    def _update_track(self, track_id: int, geometry: FaceGeometry) -> None:
        track = self._tracks[track_id]
        track.center_x = geometry.center_x
        track.center_y = geometry.center_y
        track.frames_visible += 1
        track.frames_disappeared = 0

    def _remove_stale_tracks(self) -> None:
        """Remove tracks that have been missing too long."""
        to_remove = [
            track_id for track_id, track in self._tracks.items()
            if track.frames_disappeared > self.max_disappeared
        ]
        for track_id in to_remove:
            del self._tracks[track_id]
            logger.debug(f"Dropped face track {track_id}")
