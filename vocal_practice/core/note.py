"""Note data class - a practice target with its reference frequency."""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .constants import PITCH_NAMES


@dataclass(frozen=True)
class Note:
    """A named target note."""

    name: str  # e.g. 'A4'
    frequency: float  # Hz
    asset: Optional[str] = None  # Playback asset reference

    @property
    def midi(self) -> int:
        """Nearest MIDI pitch for this note's frequency."""
        return Note.freq_to_midi(self.frequency)

    def cents_from(self, freq: float) -> float:
        """Signed deviation of ``freq`` from this note, in cents."""
        if freq <= 0:
            return float("nan")
        return float(1200.0 * np.log2(freq / self.frequency))

    @classmethod
    def from_midi(cls, midi: int, asset: Optional[str] = None) -> "Note":
        """Build a note from a MIDI pitch (e.g. 69 -> A4 at 440 Hz)."""
        octave = (midi // 12) - 1
        name = f"{PITCH_NAMES[midi % 12]}{octave}"
        return cls(name=name, frequency=round(cls.midi_to_freq(midi), 2), asset=asset)

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return int(round(69 + 12 * np.log2(freq / 440.0)))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return 440.0 * (2 ** ((midi - 69) / 12.0))
