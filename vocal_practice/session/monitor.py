"""Free-running pitch monitor (tuner view) outside of a practice session."""

import time
from typing import Callable, Collection, Optional

import numpy as np

from ..analysis.pitch import PitchEstimator, safe_estimate
from ..config import PracticeConfig
from ..core import NoteCatalog
from ..inference.matching import Classification, FeedbackCategory, PitchClassifier
from ..processing.history import PitchHistory, PitchSample


class PitchMonitor:
    """Classifies buffers as they arrive and keeps a short raw history.

    Samples are tagged with the note name only when the pitch is within
    tolerance of a selected note.
    """

    def __init__(
        self,
        catalog: NoteCatalog,
        estimator: PitchEstimator,
        selection: Collection[str],
        config: Optional[PracticeConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or PracticeConfig()
        self.estimator = estimator
        self.selection = selection
        self.classifier = PitchClassifier(catalog, self.config.tolerance_hz)
        self.history = PitchHistory(self.config.monitor_history_capacity)
        self._clock = clock

        self.current_pitch: Optional[float] = None
        self.feedback = ""
        self.category: Optional[FeedbackCategory] = None

    def process(
        self, buffer: np.ndarray, sample_rate: Optional[int] = None
    ) -> Optional[Classification]:
        """Analyze one buffer; returns None (and changes nothing) if no pitch."""
        frequency = safe_estimate(
            self.estimator,
            buffer,
            sample_rate or self.config.sample_rate,
            self.config.min_frequency,
            self.config.max_frequency,
        )
        if frequency is None:
            return None

        result = self.classifier.classify(frequency, frozenset(self.selection))
        matched = result.nearest_note.name if result.within_tolerance else ""
        self.history.append(PitchSample(self._clock(), frequency, matched))

        self.current_pitch = frequency
        self.feedback = result.feedback
        self.category = result.category
        return result

    def reset(self) -> None:
        self.history.clear()
        self.current_pitch = None
        self.feedback = ""
        self.category = None
