"""Exception types for Vocal Practice.

A missing pitch is not an error: estimators return ``None`` for it.
"""


class VocalPracticeError(Exception):
    """Base class for all package errors."""


class InvalidArgument(VocalPracticeError, ValueError):
    """Raised when an operation is called with unusable input."""


class NoteNotFound(VocalPracticeError, KeyError):
    """Raised when a note name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown note: {self.name!r}"


class EstimatorFailure(VocalPracticeError, RuntimeError):
    """Internal fault inside a pitch estimator."""


class AudioDeviceFailure(VocalPracticeError, RuntimeError):
    """Capture, playback or recording setup/teardown failure."""
