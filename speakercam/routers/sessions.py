"""
Camera session API endpoints.

A client (the page running the face mesh detector) opens a session, posts the
detector's landmarks for every frame, and renders each frame with the
returned speaking flags and camera pose.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request, status

from speakercam.auth import verify_api_key
from speakercam.config import InvalidConfigurationError, get_settings
from speakercam.schemas.requests import (
    FrameBatchRequest,
    FrameRequest,
    SessionCreateRequest,
    ZoomToggleRequest,
)
from speakercam.schemas.responses import FrameBatchResponse, FrameResponse, SessionResponse
from speakercam.services.landmark_signal import Landmark
from speakercam.services.session_store import (
    CameraSession,
    SessionLimitError,
    SessionNotFoundError,
    SessionStore,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


def get_session_store(request: Request) -> SessionStore:
    """Get the session store from app state."""
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store not initialized. Service not ready.",
        )
    return store


def _get_session(store: SessionStore, session_id: str) -> CameraSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )


def _to_landmarks(frame: FrameRequest) -> list[list[Landmark]]:
    return [[Landmark(x=p.x, y=p.y) for p in face] for face in frame.faces]


def _session_response(session: CameraSession) -> SessionResponse:
    context = session.context
    return SessionResponse(
        session_id=session.session_id,
        frames_processed=context.frame_index,
        zoom_enabled=context.zoom_enabled,
        active_slot=context.active_slot,
        tracked_faces=len(context.track_states),
        config=session.processor.config.to_dict(),
        created_at=session.created_at,
        last_frame_at=session.last_frame_at,
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(body: SessionCreateRequest, request: Request) -> SessionResponse:
    """
    Start a camera session.

    Tunables omitted from the body use the service defaults.
    """
    store = get_session_store(request)
    settings = get_settings()

    try:
        config = settings.get_processor_config(**body.overrides())
    except InvalidConfigurationError as e:
        logger.warning(f"Rejected session configuration: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    try:
        session = store.create(config, zoom_enabled=body.zoom_enabled)
    except SessionLimitError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))

    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, request: Request) -> SessionResponse:
    """Get the state of a camera session."""
    session = _get_session(get_session_store(request), session_id)
    return _session_response(session)


@router.post("/{session_id}/frames", response_model=FrameResponse)
async def process_frame(session_id: str, frame: FrameRequest, request: Request) -> FrameResponse:
    """
    Process one detector frame.

    Returns the per-face speaking flags and the camera pose to render with.
    """
    session = _get_session(get_session_store(request), session_id)

    result = session.processor.process(session.context, _to_landmarks(frame))
    session.last_frame_at = time.time()

    return FrameResponse.from_result(result)


@router.post("/{session_id}/frames/batch", response_model=FrameBatchResponse)
async def process_frame_batch(
    session_id: str,
    batch: FrameBatchRequest,
    request: Request,
) -> FrameBatchResponse:
    """Process consecutive detector frames in order."""
    session = _get_session(get_session_store(request), session_id)

    frames = (_to_landmarks(frame) for frame in batch.frames)
    results = [
        FrameResponse.from_result(result)
        for result in session.processor.stream(session.context, frames)
    ]

    session.last_frame_at = time.time()

    logger.debug(f"[{session_id}] Processed batch of {len(results)} frames")
    return FrameBatchResponse(frames=results)


@router.post("/{session_id}/zoom", response_model=SessionResponse)
async def toggle_zoom(session_id: str, body: ZoomToggleRequest, request: Request) -> SessionResponse:
    """Turn the virtual camera on or off. Off returns it to the full frame."""
    session = _get_session(get_session_store(request), session_id)

    session.processor.set_zoom_enabled(session.context, body.enabled)
    logger.info(f"[{session_id}] Zoom {'enabled' if body.enabled else 'disabled'}")

    return _session_response(session)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, request: Request) -> SessionResponse:
    """Discard all face and camera state, e.g. after the camera restarts."""
    session = _get_session(get_session_store(request), session_id)

    session.context.reset()
    logger.info(f"[{session_id}] Session state reset")

    return _session_response(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session_id: str, request: Request) -> None:
    """End a camera session."""
    store = get_session_store(request)
    try:
        store.end(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )
