"""Reference tone synthesis."""

from pathlib import Path
from typing import Iterable, List, Union

import numpy as np
import soundfile as sf

from ..core import Note
from ..core.constants import DEFAULT_SR


def generate_sine_wave(
    freq: float,
    duration: float,
    sr: int = DEFAULT_SR,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.linspace(0, duration, int(sr * duration), endpoint=False)
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def generate_reference_tone(
    note: Note,
    duration: float = 2.0,
    sr: int = DEFAULT_SR,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Sine tone for a note with a short attack/release envelope to avoid clicks."""
    tone = generate_sine_wave(note.frequency, duration, sr, amplitude)
    envelope = np.ones_like(tone)
    ramp = min(int(0.01 * sr), len(tone) // 2)
    if ramp > 0:
        envelope[:ramp] = np.linspace(0, 1, ramp)
        envelope[-ramp:] = np.linspace(1, 0, ramp)
    return tone * envelope


def write_reference_tones(
    notes: Iterable[Note],
    output_dir: Union[str, Path],
    duration: float = 2.0,
    sr: int = DEFAULT_SR,
) -> List[Path]:
    """
    Write one WAV file per note, named after the note.

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for note in notes:
        path = output_dir / f"{note.name}.wav"
        sf.write(str(path), generate_reference_tone(note, duration, sr), sr)
        paths.append(path)
    return paths
