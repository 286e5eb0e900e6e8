"""Capture-to-file recording of practice sessions."""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import soundfile as sf

from ..core.errors import AudioDeviceFailure

logger = logging.getLogger(__name__)


class Recorder(ABC):
    """Start/stop lifecycle for recording raw input."""

    @property
    @abstractmethod
    def is_recording(self) -> bool:
        pass

    @abstractmethod
    def start(self) -> None:
        """Begin capturing. Raises AudioDeviceFailure on setup failure."""
        pass

    @abstractmethod
    def write(self, samples: np.ndarray) -> None:
        """Append captured samples."""
        pass

    @abstractmethod
    def stop(self) -> Optional[str]:
        """Finish capturing and return a locator for the saved asset."""
        pass


class WavRecorder(Recorder):
    """Buffers written samples in memory and saves a WAV file on stop."""

    def __init__(
        self,
        directory: Union[str, Path],
        sample_rate: int = 44100,
        prefix: str = "practice",
    ):
        self.directory = Path(directory)
        self.sample_rate = sample_rate
        self.prefix = prefix
        self._chunks: List[np.ndarray] = []
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self) -> None:
        if self._recording:
            return
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AudioDeviceFailure(f"Cannot create recording directory: {e}") from e
        self._chunks = []
        self._recording = True
        logger.info("Recording started")

    def write(self, samples: np.ndarray) -> None:
        if not self._recording:
            return
        self._chunks.append(np.asarray(samples, dtype=np.float32).reshape(-1).copy())

    def stop(self) -> Optional[str]:
        if not self._recording:
            return None
        self._recording = False

        audio = np.concatenate(self._chunks) if self._chunks else np.zeros(0, dtype=np.float32)
        self._chunks = []
        path = self._next_path()
        try:
            sf.write(str(path), audio, self.sample_rate)
        except Exception as e:
            raise AudioDeviceFailure(f"Failed to save recording: {e}") from e

        logger.info("Recording saved to %s (%.1fs)", path, len(audio) / self.sample_rate)
        return str(path)

    def _next_path(self) -> Path:
        stem = f"{self.prefix}_{time.strftime('%Y%m%d_%H%M%S')}"
        path = self.directory / f"{stem}.wav"
        n = 1
        while path.exists():
            path = self.directory / f"{stem}_{n}.wav"
            n += 1
        return path
