"""
In-memory registry of camera sessions.

Each session pairs a FrameProcessor (its tunables) with the SessionContext
carrying per-face and camera state for one video stream.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from speakercam.config import ProcessorConfig
from speakercam.services.frame_processor import FrameProcessor, SessionContext

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown or already ended."""


class SessionLimitError(RuntimeError):
    """Raised when creating a session would exceed the configured maximum."""


@dataclass
class CameraSession:
    """A running camera session."""

    session_id: str
    processor: FrameProcessor
    context: SessionContext
    created_at: float = field(default_factory=time.time)
    last_frame_at: Optional[float] = None


class SessionStore:
    """Creates, looks up and ends camera sessions."""

    def __init__(self, max_sessions: int = 32):
        self.max_sessions = max_sessions
        self._sessions: dict[str, CameraSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, config: ProcessorConfig, zoom_enabled: bool = True) -> CameraSession:
        """
        Start a new session.

        Raises:
            SessionLimitError: If max_sessions sessions are already running
        """
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitError(
                f"Session limit reached ({self.max_sessions}). End a session before starting another."
            )

        processor = FrameProcessor(config)
        context = processor.new_context()
        processor.set_zoom_enabled(context, zoom_enabled)

        session = CameraSession(
            session_id=str(uuid.uuid4()),
            processor=processor,
            context=context,
        )
        self._sessions[session.session_id] = session

        logger.info(
            f"[{session.session_id}] Session started "
            f"(mode={config.signal_mode}, policy={config.selection_policy}, "
            f"tracking={config.identity_tracking}). Active sessions: {len(self._sessions)}"
        )
        return session

    def get(self, session_id: str) -> CameraSession:
        """
        Look up a session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end(self, session_id: str) -> None:
        """End a session and discard its state."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)

        logger.info(
            f"[{session_id}] Session ended after {session.context.frame_index} frames. "
            f"Active sessions: {len(self._sessions)}"
        )

    def clear(self) -> None:
        """End all sessions."""
        count = len(self._sessions)
        self._sessions.clear()
        if count:
            logger.info(f"Cleared {count} sessions")
