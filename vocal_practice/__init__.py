"""Vocal Practice - pitch detection and note matching for singing practice.

Architecture Layers:
    1. core/       - Notes, the note catalog, constants and errors
    2. analysis/   - Pitch estimation and reference tone synthesis
    3. inference/  - Nearest-note matching and tolerance feedback
    4. processing/ - Bounded pitch history
    5. audio/      - Capture sources, playback sinks, recording
    6. session/    - Practice session controller and live monitor
"""

__version__ = "0.1.0"

# Core types
from .core import (
    Note,
    NoteCatalog,
    default_catalog,
    VocalPracticeError,
    InvalidArgument,
    NoteNotFound,
    EstimatorFailure,
    AudioDeviceFailure,
)
from .config import PracticeConfig

# Analysis layer
from .analysis import PitchEstimator, LibrosaPitchEstimator

# Inference layer
from .inference import PitchClassifier, Classification, FeedbackCategory

# Processing layer
from .processing import PitchHistory, PitchSample

# Session layer
from .session import (
    PracticeSession,
    SessionSnapshot,
    PitchMonitor,
    RecordedPractice,
    NoteSelection,
    VirtualScheduler,
)

__all__ = [
    # Core
    "Note",
    "NoteCatalog",
    "default_catalog",
    "PracticeConfig",
    "VocalPracticeError",
    "InvalidArgument",
    "NoteNotFound",
    "EstimatorFailure",
    "AudioDeviceFailure",
    # Analysis
    "PitchEstimator",
    "LibrosaPitchEstimator",
    # Inference
    "PitchClassifier",
    "Classification",
    "FeedbackCategory",
    # Processing
    "PitchHistory",
    "PitchSample",
    # Session
    "PracticeSession",
    "SessionSnapshot",
    "PitchMonitor",
    "RecordedPractice",
    "NoteSelection",
    "VirtualScheduler",
]
