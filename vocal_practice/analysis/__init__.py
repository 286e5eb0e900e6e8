"""Analysis layer - pitch estimation and reference tone synthesis."""

from .pitch import (
    PitchEstimator,
    LibrosaPitchEstimator,
    validate_frequency,
    safe_estimate,
)
from .tones import generate_sine_wave, generate_reference_tone, write_reference_tones

__all__ = [
    "PitchEstimator",
    "LibrosaPitchEstimator",
    "validate_frequency",
    "safe_estimate",
    "generate_sine_wave",
    "generate_reference_tone",
    "write_reference_tones",
]
