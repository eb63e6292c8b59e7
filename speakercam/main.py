"""
FastAPI application entry point for SpeakerCam.

SpeakerCam turns per-frame face mesh landmarks into speaking flags and an
animated virtual camera that follows whoever is talking:
1. Mouth movement scoring per face
2. Debounced speaking classification
3. Active speaker selection and eased zoom
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from speakercam.config import SERVICE_VERSION, InvalidConfigurationError, get_settings
from speakercam.routers import health, sessions
from speakercam.services.session_store import SessionStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup and shutdown events.
    Creates the session store on startup and drops all sessions on shutdown.
    """
    settings = get_settings()
    logger.info("Starting SpeakerCam...")

    # Bad environment defaults stop startup instead of failing every session
    try:
        settings.get_processor_config()
    except InvalidConfigurationError as e:
        logger.error(f"Invalid processor defaults in environment: {e}")
        raise

    app.state.session_store = SessionStore(max_sessions=settings.max_sessions)
    logger.info(f"Max concurrent sessions: {settings.max_sessions}")
    logger.info(
        f"Defaults: mode={settings.signal_mode}, policy={settings.selection_policy}, "
        f"zoom_step={settings.zoom_step}"
    )

    if not settings.api_key:
        logger.warning("API_KEY not set, session endpoints are unauthenticated")

    logger.info("SpeakerCam ready to accept requests.")

    yield

    logger.info("Shutting down SpeakerCam...")
    app.state.session_store.clear()
    app.state.session_store = None
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="SpeakerCam",
    description="""
SpeakerCam - active speaker detection and virtual camera service.

## Features

### Sessions API (`/sessions`)
- Mouth movement scoring from face mesh landmarks
- Debounced per-face speaking detection
- Active speaker selection
- Eased zoom transitions toward the active speaker

## Usage

1. Open a session: `POST /sessions`
2. Post landmarks for every frame: `POST /sessions/{session_id}/frames`
3. Render with the returned face boxes and camera pose
4. Close it: `DELETE /sessions/{session_id}`
    """,
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "service": get_settings().app_name,
        "version": SERVICE_VERSION,
        "status": "running",
        "features": {
            "speaking_detection": "Landmark mouth movement + hysteresis",
            "virtual_camera": "Active speaker selection + eased zoom",
        },
        "docs": "/docs",
    }
