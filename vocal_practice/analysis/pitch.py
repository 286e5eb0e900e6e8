"""Pitch estimation from fixed-size audio buffers."""

import logging
import math
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
import librosa

from ..core.constants import VOCAL_MIN_HZ, VOCAL_MAX_HZ
from ..core.errors import EstimatorFailure

logger = logging.getLogger(__name__)


class PitchEstimator(ABC):
    """Converts an audio buffer into a fundamental frequency estimate."""

    @abstractmethod
    def estimate(self, buffer: np.ndarray, sample_rate: int) -> Optional[float]:
        """
        Estimate the fundamental frequency of a buffer.

        Args:
            buffer: Mono audio samples
            sample_rate: Sample rate of the buffer

        Returns:
            Frequency in Hz, or None if no pitch was found

        Raises:
            EstimatorFailure: If analysis fails internally
        """
        pass


class LibrosaPitchEstimator(PitchEstimator):
    """YIN / pYIN pitch estimation over a single buffer using librosa."""

    def __init__(
        self,
        fmin: float = 65.0,  # C2
        fmax: float = 2093.0,  # C7
        method: str = "yin",
        frame_length: int = 2048,
        silence_rms: float = 0.01,
    ):
        """
        Initialize LibrosaPitchEstimator.

        Args:
            fmin: Lowest frequency to search (Hz)
            fmax: Highest frequency to search (Hz)
            method: Detection method ('yin', 'pyin')
            frame_length: Analysis frame length in samples
            silence_rms: Buffers with RMS below this are treated as silence
        """
        if method not in ("yin", "pyin"):
            raise ValueError(f"Unknown pitch method: {method}")
        self.fmin = fmin
        self.fmax = fmax
        self.method = method
        self.frame_length = frame_length
        self.silence_rms = silence_rms

    def estimate(self, buffer: np.ndarray, sample_rate: int) -> Optional[float]:
        audio = np.asarray(buffer, dtype=np.float32)
        if audio.size == 0:
            return None
        if audio.ndim > 1:
            audio = librosa.to_mono(audio)

        rms = float(np.sqrt(np.mean(np.square(audio))))
        if rms < self.silence_rms:
            return None

        fmax = min(self.fmax, sample_rate / 2.0)
        frame_length = self._frame_length_for(sample_rate)

        try:
            if self.method == "pyin":
                f0, voiced_flag, _ = librosa.pyin(
                    audio,
                    fmin=self.fmin,
                    fmax=fmax,
                    sr=sample_rate,
                    frame_length=frame_length,
                )
                f0 = f0[voiced_flag]
            else:
                f0 = librosa.yin(
                    audio,
                    fmin=self.fmin,
                    fmax=fmax,
                    sr=sample_rate,
                    frame_length=frame_length,
                )
        except Exception as e:
            raise EstimatorFailure(f"{self.method} analysis failed: {e}") from e

        f0 = f0[np.isfinite(f0)]
        if f0.size == 0:
            return None
        return float(np.median(f0))

    def _frame_length_for(self, sample_rate: int) -> int:
        """Grow the frame until the longest period (sr / fmin) fits."""
        frame_length = self.frame_length
        while frame_length // 2 - 1 <= sample_rate / self.fmin:
            frame_length *= 2
        return frame_length


def validate_frequency(
    frequency: Optional[float],
    fmin: float = VOCAL_MIN_HZ,
    fmax: float = VOCAL_MAX_HZ,
) -> Optional[float]:
    """Return the frequency if it is finite and within [fmin, fmax], else None."""
    if frequency is None:
        return None
    try:
        frequency = float(frequency)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(frequency):
        return None
    if frequency < fmin or frequency > fmax:
        return None
    return frequency


def safe_estimate(
    estimator: PitchEstimator,
    buffer: Optional[np.ndarray],
    sample_rate: int,
    fmin: float = VOCAL_MIN_HZ,
    fmax: float = VOCAL_MAX_HZ,
) -> Optional[float]:
    """
    Run an estimator under the no-crash contract.

    Empty buffers, estimator faults and implausible results all come back
    as None. Faults are logged and never propagated.
    """
    if buffer is None or len(buffer) == 0:
        return None

    try:
        frequency = estimator.estimate(buffer, sample_rate)
    except Exception as e:
        logger.warning("Pitch estimation failed, skipping buffer: %s", e)
        return None

    valid = validate_frequency(frequency, fmin, fmax)
    if valid is None and frequency is not None:
        logger.debug("Discarding implausible pitch estimate: %r", frequency)
    return valid
