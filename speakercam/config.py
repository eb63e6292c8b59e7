"""
Configuration module using Pydantic Settings for environment variable management.

Service settings and the default tunables of the speaking classifier and
virtual camera are loaded from the environment. Each session builds a
ProcessorConfig from these defaults plus any per-session overrides.
"""

from dataclasses import asdict, dataclass, fields
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


SERVICE_VERSION = "1.0.0"


# ============================================================================
# DEFAULT TUNABLES
# ============================================================================

MOVEMENT_THRESHOLD = 0.005  # Delta mode, fraction of frame height
OPENING_THRESHOLD = 0.02  # Absolute mode, fraction of frame height
VERTICAL_WEIGHT = 3.0
HORIZONTAL_WEIGHT = 1.0
SPEAK_ON_FRAMES = 3  # Consecutive active frames to start speaking
SPEAK_OFF_FRAMES = 5  # Consecutive quiet frames to stop speaking
ZOOM_STEP = 0.05  # Progress per tick (~20 ticks per transition)
MAX_ZOOM_SCALE = 2.5  # Bounds zoom on small/distant faces
TARGET_FILL_RATIO = 0.4  # Fraction of the frame the framed face should fill
FACE_PADDING_RATIO = 0.15
MAX_MATCH_DISTANCE = 0.15  # Max centroid distance (normalized) to match a track
MAX_FRAMES_DISAPPEARED = 5  # Frames a track survives without a match


class InvalidConfigurationError(ValueError):
    """Raised when processor tunables would produce nonsensical behavior."""


class SignalMode:
    """
    Available mouth activity signal modes.

    DELTA compares mouth shape against the previous frame of the same face.
    ABSOLUTE measures the current mouth gap alone and needs no history.
    """
    DELTA = "delta"
    ABSOLUTE = "absolute"


class SelectionPolicy:
    """Available active speaker arbitration policies."""
    KEEP_CURRENT = "keep_current"  # Stay on the framed speaker while they keep talking
    LOWEST_SLOT = "lowest_slot"    # Always the lowest-numbered speaking face


@dataclass
class ProcessorConfig:
    """Tunables for one frame processing session."""

    # Signal extraction
    signal_mode: str = SignalMode.DELTA
    movement_threshold: float = MOVEMENT_THRESHOLD
    opening_threshold: float = OPENING_THRESHOLD
    vertical_weight: float = VERTICAL_WEIGHT
    horizontal_weight: float = HORIZONTAL_WEIGHT

    # Debounce
    speak_on_frames: int = SPEAK_ON_FRAMES
    speak_off_frames: int = SPEAK_OFF_FRAMES

    # Selection
    selection_policy: str = SelectionPolicy.KEEP_CURRENT

    # Virtual camera
    zoom_step: float = ZOOM_STEP
    max_zoom_scale: float = MAX_ZOOM_SCALE
    target_fill_ratio: float = TARGET_FILL_RATIO
    fixed_zoom_scale: Optional[float] = None
    face_padding_ratio: float = FACE_PADDING_RATIO

    # Identity tracking
    identity_tracking: bool = False
    tracker_max_distance: float = MAX_MATCH_DISTANCE
    tracker_max_disappeared: int = MAX_FRAMES_DISAPPEARED

    def __post_init__(self) -> None:
        self.validate()

    @property
    def speaking_threshold(self) -> float:
        """Threshold matching the configured signal mode."""
        if self.signal_mode == SignalMode.ABSOLUTE:
            return self.opening_threshold
        return self.movement_threshold

    def validate(self) -> None:
        """
        Reject tunables that would break classification or animation.

        Raises:
            InvalidConfigurationError: With a description of the first bad value
        """
        if self.signal_mode not in (SignalMode.DELTA, SignalMode.ABSOLUTE):
            raise InvalidConfigurationError(
                f"Unknown signal mode: {self.signal_mode}. "
                f"Valid modes: {[SignalMode.DELTA, SignalMode.ABSOLUTE]}"
            )
        if self.selection_policy not in (SelectionPolicy.KEEP_CURRENT, SelectionPolicy.LOWEST_SLOT):
            raise InvalidConfigurationError(
                f"Unknown selection policy: {self.selection_policy}. "
                f"Valid policies: {[SelectionPolicy.KEEP_CURRENT, SelectionPolicy.LOWEST_SLOT]}"
            )
        if self.movement_threshold < 0 or self.opening_threshold < 0:
            raise InvalidConfigurationError("Speaking thresholds must be non-negative")
        if self.vertical_weight < 0 or self.horizontal_weight < 0:
            raise InvalidConfigurationError("Signal weights must be non-negative")
        if self.speak_on_frames <= 0:
            raise InvalidConfigurationError(
                f"speak_on_frames must be positive, got {self.speak_on_frames}"
            )
        if self.speak_off_frames <= 0:
            raise InvalidConfigurationError(
                f"speak_off_frames must be positive, got {self.speak_off_frames}"
            )
        if not 0 < self.zoom_step <= 1:
            raise InvalidConfigurationError(
                f"zoom_step must be in (0, 1], got {self.zoom_step}"
            )
        if self.max_zoom_scale < 1:
            raise InvalidConfigurationError(
                f"max_zoom_scale must be at least 1, got {self.max_zoom_scale}"
            )
        if self.target_fill_ratio <= 0:
            raise InvalidConfigurationError(
                f"target_fill_ratio must be positive, got {self.target_fill_ratio}"
            )
        if self.fixed_zoom_scale is not None and not 1 <= self.fixed_zoom_scale <= self.max_zoom_scale:
            raise InvalidConfigurationError(
                f"fixed_zoom_scale must be between 1 and {self.max_zoom_scale}, "
                f"got {self.fixed_zoom_scale}"
            )
        if self.face_padding_ratio < 0:
            raise InvalidConfigurationError("face_padding_ratio must be non-negative")
        if self.tracker_max_distance <= 0:
            raise InvalidConfigurationError("tracker_max_distance must be positive")
        if self.tracker_max_disappeared < 0:
            raise InvalidConfigurationError("tracker_max_disappeared must be non-negative")

    def to_dict(self) -> dict:
        return asdict(self)


class Settings(BaseSettings):
    """
    Application settings.

    Service options plus the default processor tunables. Every tunable can be
    overridden through the environment (e.g. SPEAK_ON_FRAMES=4) or per session.
    """

    # ============================================================
    # SERVICE
    # ============================================================

    app_name: str = "speakercam"
    debug: bool = False
    log_level: str = "INFO"

    # Security - API authentication
    api_key: Optional[str] = None  # Required X-SpeakerCam-API-Key header when set

    max_sessions: int = 32  # Concurrent camera sessions kept in memory

    # ============================================================
    # PROCESSOR DEFAULTS
    # ============================================================

    signal_mode: Literal["delta", "absolute"] = SignalMode.DELTA
    movement_threshold: float = MOVEMENT_THRESHOLD
    opening_threshold: float = OPENING_THRESHOLD
    vertical_weight: float = VERTICAL_WEIGHT
    horizontal_weight: float = HORIZONTAL_WEIGHT
    speak_on_frames: int = SPEAK_ON_FRAMES
    speak_off_frames: int = SPEAK_OFF_FRAMES
    selection_policy: Literal["keep_current", "lowest_slot"] = SelectionPolicy.KEEP_CURRENT
    zoom_step: float = ZOOM_STEP
    max_zoom_scale: float = MAX_ZOOM_SCALE
    target_fill_ratio: float = TARGET_FILL_RATIO
    fixed_zoom_scale: Optional[float] = None
    face_padding_ratio: float = FACE_PADDING_RATIO
    identity_tracking: bool = False
    tracker_max_distance: float = MAX_MATCH_DISTANCE
    tracker_max_disappeared: int = MAX_FRAMES_DISAPPEARED

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def get_processor_config(self, **overrides) -> ProcessorConfig:
        """
        Build a validated ProcessorConfig from settings.

        Args:
            **overrides: Tunables replacing the environment defaults (None values are ignored)

        Raises:
            InvalidConfigurationError: If the resulting tunables are invalid
        """
        # Every ProcessorConfig field has a matching setting
        values = {f.name: getattr(self, f.name) for f in fields(ProcessorConfig)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ProcessorConfig(**values)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
