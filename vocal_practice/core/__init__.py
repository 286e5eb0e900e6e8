"""Core types and constants for Vocal Practice."""

from .note import Note
from .catalog import NoteCatalog, default_catalog, DEFAULT_NOTES
from .errors import (
    VocalPracticeError,
    InvalidArgument,
    NoteNotFound,
    EstimatorFailure,
    AudioDeviceFailure,
)
from .constants import (
    PITCH_NAMES,
    DEFAULT_SR,
    DETECTION_INTERVAL,
    FREQUENCY_TOLERANCE,
    VOCAL_MIN_HZ,
    VOCAL_MAX_HZ,
)

__all__ = [
    "Note",
    "NoteCatalog",
    "default_catalog",
    "DEFAULT_NOTES",
    "VocalPracticeError",
    "InvalidArgument",
    "NoteNotFound",
    "EstimatorFailure",
    "AudioDeviceFailure",
    "PITCH_NAMES",
    "DEFAULT_SR",
    "DETECTION_INTERVAL",
    "FREQUENCY_TOLERANCE",
    "VOCAL_MIN_HZ",
    "VOCAL_MAX_HZ",
]
