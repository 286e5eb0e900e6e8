"""Reference-note playback sinks."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..core import Note
from ..core.errors import InvalidArgument

logger = logging.getLogger(__name__)


class PlaybackHandle:
    """One in-flight playback. Released handles ignore further events."""

    def __init__(self, note: Note, on_finished: Optional[Callable[[], None]] = None):
        self.note = note
        self._on_finished = on_finished
        self.released = False
        self.timer = None  # Set by sinks that finish on a scheduler

    def finish(self) -> None:
        """Signal natural completion of playback."""
        if self.released:
            return
        callback = self._on_finished
        self.release()
        if callback is not None:
            callback()

    def release(self) -> None:
        self.released = True
        self._on_finished = None


class PlaybackSink(ABC):
    """Plays a note to completion and reports back through a callback."""

    @abstractmethod
    def play(self, note: Note, on_finished: Callable[[], None]) -> PlaybackHandle:
        """
        Start playing a note.

        Args:
            note: Note to play
            on_finished: Called once when playback completes naturally

        Returns:
            Handle for the running playback

        Raises:
            AudioDeviceFailure: If playback cannot start
        """
        pass

    @abstractmethod
    def stop(self, handle: PlaybackHandle) -> None:
        """Stop and release a playback. Safe to call on a finished handle."""
        pass


class TimedPlayback(PlaybackSink):
    """Treats each note as playing for a fixed duration on a scheduler.

    Used when no speaker is attached (offline analysis) and in tests.
    """

    def __init__(self, scheduler: Any, duration: float = 2.0):
        if duration <= 0:
            raise InvalidArgument(f"Playback duration must be positive, got {duration}")
        self.scheduler = scheduler
        self.duration = duration
        self.played = []

    def play(self, note: Note, on_finished: Callable[[], None]) -> PlaybackHandle:
        handle = PlaybackHandle(note, on_finished)
        handle.timer = self.scheduler.call_later(self.duration, handle.finish)
        self.played.append(note.name)
        logger.debug("Playing reference note %s for %.2fs", note.name, self.duration)
        return handle

    def stop(self, handle: PlaybackHandle) -> None:
        if handle.timer is not None:
            handle.timer.cancel()
        handle.release()
