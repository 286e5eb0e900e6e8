"""Audio sources that hand the session the latest sample buffer."""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from .loader import AudioLoader


class AudioSource(ABC):
    """Supplies fixed-length mono buffers on demand."""

    sample_rate: int

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """
        Get the most recent buffer.

        Returns:
            Audio samples, or None if nothing has been captured yet
        """
        pass


class RingBufferSource(AudioSource):
    """Keeps the last ``buffer_size`` samples pushed by a capture callback.

    ``feed`` may be called from an audio driver thread; ``read`` from the
    session loop.
    """

    def __init__(self, sample_rate: int, buffer_size: int):
        if buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self._buffer = np.zeros(buffer_size, dtype=np.float32)
        self._filled = 0
        self._lock = threading.Lock()

    def feed(self, samples: np.ndarray) -> None:
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        n = samples.size
        if n == 0:
            return
        with self._lock:
            if n >= self.buffer_size:
                self._buffer[:] = samples[-self.buffer_size:]
            else:
                self._buffer[:-n] = self._buffer[n:]
                self._buffer[-n:] = samples
            self._filled = min(self.buffer_size, self._filled + n)

    def read(self) -> Optional[np.ndarray]:
        with self._lock:
            if self._filled == 0:
                return None
            return self._buffer[-self._filled:].copy()

    def reset(self) -> None:
        with self._lock:
            self._buffer[:] = 0.0
            self._filled = 0


class FileAudioSource(AudioSource):
    """Plays back a recording as if it were live input.

    ``read`` returns the window of ``buffer_duration`` seconds that ends at
    the current clock position (relative to ``rewind``).
    """

    def __init__(
        self,
        audio: Union[str, Path, np.ndarray],
        clock: Callable[[], float],
        sample_rate: int = 44100,
        buffer_duration: float = 0.1,
    ):
        if isinstance(audio, (str, Path)):
            audio, sample_rate = AudioLoader(target_sr=sample_rate).load(str(audio))

        self.audio = np.asarray(audio, dtype=np.float32)
        self.sample_rate = sample_rate
        self.buffer_size = max(1, int(round(sample_rate * buffer_duration)))
        self._clock = clock
        self._origin = clock()

    @property
    def duration(self) -> float:
        return len(self.audio) / self.sample_rate

    def rewind(self) -> None:
        """Restart playback from the beginning at the current clock time."""
        self._origin = self._clock()

    def read(self) -> Optional[np.ndarray]:
        position = int(round((self._clock() - self._origin) * self.sample_rate))
        end = min(position, len(self.audio))
        start = max(0, end - self.buffer_size)
        if end <= start:
            return None
        return self.audio[start:end]
