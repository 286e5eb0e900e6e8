"""Shared fixtures and fakes for Vocal Practice tests."""

from typing import Callable, List, Optional

import numpy as np
import pytest

from vocal_practice.analysis import PitchEstimator
from vocal_practice.audio import AudioSource, PlaybackHandle, PlaybackSink
from vocal_practice.config import PracticeConfig
from vocal_practice.core import AudioDeviceFailure, Note, default_catalog
from vocal_practice.session import PracticeSession, VirtualScheduler


class ScriptedEstimator(PitchEstimator):
    """Returns queued results in order; exceptions in the queue are raised."""

    def __init__(self, results=None, default=None):
        self.results = list(results or [])
        self.default = default
        self.calls = 0

    def estimate(self, buffer, sample_rate):
        self.calls += 1
        if self.results:
            result = self.results.pop(0)
        else:
            result = self.default
        if isinstance(result, Exception):
            raise result
        return result


class StaticSource(AudioSource):
    """Always returns the same buffer."""

    def __init__(self, buffer: Optional[np.ndarray] = None, sample_rate: int = 44100):
        self.sample_rate = sample_rate
        self.buffer = np.ones(4410, dtype=np.float32) if buffer is None else buffer
        self.reads = 0

    def read(self):
        self.reads += 1
        return self.buffer


class RecordingPlayer(PlaybackSink):
    """Playback sink that records play/stop events and finishes on demand."""

    def __init__(
        self,
        fail_on: Optional[str] = None,
        error: Optional[Exception] = None,
        finish_immediately: bool = False,
    ):
        self.events: List[str] = []
        self.handles: List[PlaybackHandle] = []
        self.callbacks: List[Callable[[], None]] = []
        self.fail_on = fail_on
        self.error = error
        self.finish_immediately = finish_immediately

    def play(self, note: Note, on_finished):
        if note.name == self.fail_on:
            raise AudioDeviceFailure("speaker unavailable")
        if self.error is not None:
            raise self.error
        handle = PlaybackHandle(note, on_finished)
        self.handles.append(handle)
        self.callbacks.append(on_finished)
        self.events.append(f"play {note.name}")
        if self.finish_immediately:
            handle.finish()
        return handle

    def stop(self, handle: PlaybackHandle):
        self.events.append(f"stop {handle.note.name}")
        handle.release()

    @property
    def in_flight(self) -> List[PlaybackHandle]:
        return [h for h in self.handles if not h.released]

    def finish_current(self) -> None:
        self.in_flight[-1].finish()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def config():
    return PracticeConfig()


@pytest.fixture
def estimator():
    return ScriptedEstimator(default=442.0)


@pytest.fixture
def source():
    return StaticSource()


@pytest.fixture
def player():
    return RecordingPlayer()


@pytest.fixture
def session(catalog, estimator, source, player, scheduler, config):
    return PracticeSession(
        catalog, estimator, source, player, scheduler=scheduler, config=config
    )


def sine(freq: float, duration: float, sr: int = 44100, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(sr * duration)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def make_sine():
    return sine
