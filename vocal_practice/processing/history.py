"""Bounded, time-ordered pitch history."""

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class PitchSample:
    """One detected pitch."""

    timestamp: float  # Seconds since session start (or monotonic time)
    frequency: float  # Hz
    matched_note: str = ""  # Note name, or "" if none

    def to_dict(self) -> Dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "frequency": self.frequency,
            "note": self.matched_note,
        }


@dataclass
class HistorySummary:
    """Aggregate view of a history, for post-session review."""

    count: int
    duration: float
    mean_frequency: float
    note_counts: Dict[str, int]

    def share(self, note_name: str) -> float:
        """Fraction of samples attributed to a note."""
        if self.count == 0:
            return 0.0
        return self.note_counts.get(note_name, 0) / self.count


class PitchHistory:
    """FIFO buffer of pitch samples; the oldest sample is evicted on overflow."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self._samples: deque = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def append(self, sample: PitchSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def samples(self) -> Tuple[PitchSample, ...]:
        """Snapshot of all samples, oldest first."""
        return tuple(self._samples)

    def tail(self, n: int) -> Tuple[PitchSample, ...]:
        """The most recent ``n`` samples, oldest first (chart window)."""
        if n <= 0:
            return ()
        return tuple(self._samples)[-n:]

    def latest(self) -> Optional[PitchSample]:
        return self._samples[-1] if self._samples else None

    def frequencies(self) -> np.ndarray:
        return np.array([s.frequency for s in self._samples], dtype=float)

    def timestamps(self) -> np.ndarray:
        return np.array([s.timestamp for s in self._samples], dtype=float)

    def summary(self) -> HistorySummary:
        counts: Dict[str, int] = {}
        for s in self._samples:
            if s.matched_note:
                counts[s.matched_note] = counts.get(s.matched_note, 0) + 1

        if not self._samples:
            return HistorySummary(0, 0.0, 0.0, counts)

        times = self.timestamps()
        return HistorySummary(
            count=len(self._samples),
            duration=float(times[-1] - times[0]),
            mean_frequency=float(np.mean(self.frequencies())),
            note_counts=counts,
        )

    def to_list(self) -> List[Dict[str, object]]:
        return [s.to_dict() for s in self._samples]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PitchSample]:
        return iter(tuple(self._samples))
