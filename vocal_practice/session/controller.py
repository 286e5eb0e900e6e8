"""Practice session controller.

Two independently timed activities share one loop: the detection tick,
which runs every ``detection_interval`` seconds, and reference-note
playback, which moves on to the next selected note whenever playback
finishes. Every scheduled callback carries the generation of the session
that created it and does nothing once that session has ended.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..analysis.pitch import PitchEstimator, safe_estimate
from ..audio.playback import PlaybackHandle, PlaybackSink
from ..audio.sources import AudioSource
from ..config import PracticeConfig
from ..core import Note, NoteCatalog
from ..core.errors import AudioDeviceFailure, InvalidArgument
from ..inference.matching import Classification, FeedbackCategory, PitchClassifier
from ..processing.history import PitchHistory, PitchSample
from .scheduling import Scheduler, TimerHandle
from .selection import NoteSelection

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for the presentation layer."""

    is_active: bool
    current_note: Optional[Note]
    current_note_index: int
    feedback: str
    category: Optional[FeedbackCategory]
    current_pitch: Optional[float]
    elapsed: float
    history: Tuple[PitchSample, ...]
    alert: Optional[str] = None


Listener = Callable[[SessionSnapshot], None]
NotesArg = Union[NoteSelection, Iterable[Union[Note, str]]]


class PracticeSession:
    """Idle/Active state machine driving detection and reference playback."""

    def __init__(
        self,
        catalog: NoteCatalog,
        estimator: PitchEstimator,
        source: AudioSource,
        player: PlaybackSink,
        scheduler: Optional[Scheduler] = None,
        config: Optional[PracticeConfig] = None,
        classifier: Optional[PitchClassifier] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize PracticeSession.

        Args:
            catalog: Notes available for practice
            estimator: Pitch estimator applied to each buffer
            source: Provides the latest captured buffer
            player: Plays reference notes
            scheduler: Timer provider; defaults to the running asyncio loop
            config: Practice parameters
            classifier: Defaults to a PitchClassifier over ``catalog``
            clock: Time source; defaults to ``scheduler.time``
        """
        self.catalog = catalog
        self.estimator = estimator
        self.source = source
        self.player = player
        self.config = config or PracticeConfig()
        self.classifier = classifier or PitchClassifier(catalog, self.config.tolerance_hz)
        self.history = PitchHistory(self.config.history_capacity)

        self._scheduler = scheduler
        self._clock = clock
        self._listeners: List[Listener] = []

        self._state = SessionState.IDLE
        self._generation = 0
        self._active_scheduler: Optional[Scheduler] = None
        self._timer: Optional[TimerHandle] = None
        self._playback: Optional[PlaybackHandle] = None
        self._playback_seq = 0
        self._starting_playback = False
        self._finished_early = False
        self._preview: Optional[PlaybackHandle] = None
        self._preview_seq = 0
        self._ticking = False

        self._notes: Tuple[Note, ...] = ()
        self._selected_names: frozenset = frozenset()
        self._index = 0
        self._start_time = 0.0
        self._feedback = ""
        self._category: Optional[FeedbackCategory] = None
        self._current_pitch: Optional[float] = None
        self._alert: Optional[str] = None

    # --- Observable state ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self._notes

    @property
    def current_note_index(self) -> int:
        return self._index

    @property
    def current_note(self) -> Optional[Note]:
        if not self.is_active:
            return None
        return self._notes[self._index]

    @property
    def feedback(self) -> str:
        return self._feedback

    @property
    def category(self) -> Optional[FeedbackCategory]:
        return self._category

    @property
    def current_pitch(self) -> Optional[float]:
        return self._current_pitch

    @property
    def alert(self) -> Optional[str]:
        return self._alert

    def elapsed(self) -> float:
        """Seconds since start, or 0.0 when idle."""
        if not self.is_active:
            return 0.0
        return self._now() - self._start_time

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            is_active=self.is_active,
            current_note=self.current_note,
            current_note_index=self._index,
            feedback=self._feedback,
            category=self._category,
            current_pitch=self._current_pitch,
            elapsed=self.elapsed(),
            history=self.history.samples(),
            alert=self._alert,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with a snapshot after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Commands ---

    def start(self, notes: NotesArg) -> None:
        """
        Start practicing the given notes, in order.

        Args:
            notes: A NoteSelection, or Notes / note names

        Raises:
            InvalidArgument: If no notes are given
            NoteNotFound: If a name is not in the catalog
            RuntimeError: If no scheduler was given and no event loop is running

        Any other error from the player while starting the first note leaves
        the session Idle and is re-raised.
        """
        resolved = self._resolve_notes(notes)
        if not resolved:
            raise InvalidArgument("Select at least one note to practice")
        scheduler = self._resolve_scheduler()

        if self.is_active:
            self.stop()
        self._release_preview()

        self._generation += 1
        generation = self._generation
        self._active_scheduler = scheduler
        self._notes = tuple(resolved)
        self._selected_names = frozenset(n.name for n in resolved)
        self._index = 0
        self._feedback = ""
        self._category = None
        self._current_pitch = None
        self._alert = None
        self.history.clear()
        self._state = SessionState.ACTIVE
        self._start_time = self._now()

        logger.info(
            "Practice started: %s (tick every %.0fms)",
            ", ".join(n.name for n in self._notes),
            self.config.detection_interval * 1000,
        )

        self._schedule_tick(generation)
        try:
            self._play_current(generation)
        except Exception:
            self.stop()
            raise
        self._notify()

    def stop(self) -> None:
        """Return to Idle. Does nothing if already idle."""
        if not self.is_active:
            return

        self._generation += 1
        self._state = SessionState.IDLE

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._release_playback()

        self._notes = ()
        self._selected_names = frozenset()
        self._index = 0
        self._feedback = ""
        self._category = None
        self._current_pitch = None
        self.history.clear()
        self._active_scheduler = None

        logger.info("Practice stopped")
        self._notify()

    def tick(self) -> Optional[Classification]:
        """
        Run one detection cycle.

        Reads the latest buffer, estimates its pitch and classifies it
        against the session's notes. Buffers without a usable pitch leave
        the session unchanged.

        Returns:
            The classification, or None if nothing was detected
        """
        if not self.is_active or self._ticking:
            return None

        self._ticking = True
        try:
            elapsed = self._now() - self._start_time
            try:
                buffer = self.source.read()
            except Exception as e:
                logger.warning("Audio source read failed: %s", e)
                return None

            frequency = safe_estimate(
                self.estimator,
                buffer,
                self.source.sample_rate,
                self.config.min_frequency,
                self.config.max_frequency,
            )
            if frequency is None:
                return None

            result = self.classifier.classify(frequency, self._selected_names)
            self.history.append(
                PitchSample(elapsed, frequency, result.nearest_note.name)
            )
            self._current_pitch = frequency
            self._feedback = result.feedback
            self._category = result.category
        finally:
            self._ticking = False

        logger.debug(
            "t=%.2fs %.1f Hz -> %s (%+.1f Hz)",
            elapsed,
            frequency,
            result.nearest_note.name,
            frequency - result.nearest_note.frequency,
        )
        self._notify()
        return result

    def advance(self) -> Optional[Note]:
        """Skip to the next selected note and play it.

        Returns:
            The new current note, or None when idle
        """
        if not self.is_active:
            return None
        self._index = (self._index + 1) % len(self._notes)
        self._play_current(self._generation)
        self._notify()
        return self.current_note

    def preview(self, note: Union[Note, str]) -> Optional[PlaybackHandle]:
        """Play a single reference note while no session is running.

        A new preview replaces the previous one, and starting a session
        stops it. Device failures are logged and surfaced as ``alert``.

        Returns:
            The playback handle, or None when Active or playback failed
        """
        if self.is_active:
            return None
        if isinstance(note, str):
            note = self.catalog.lookup(note)

        self._release_preview()
        self._preview_seq += 1
        on_finished = functools.partial(self._on_preview_finished, self._preview_seq)
        try:
            handle = self.player.play(note, on_finished)
        except AudioDeviceFailure as e:
            self._raise_alert(f"Failed to play reference note {note.name}: {e}")
            return None

        self._alert = None
        if handle.released:
            # Finished while starting; unload it now
            self.player.stop(handle)
        else:
            self._preview = handle
        return handle

    # --- Scheduled callbacks ---

    def _schedule_tick(self, generation: int) -> None:
        self._timer = self._active_scheduler.call_later(
            self.config.detection_interval, self._on_timer, generation
        )

    def _on_timer(self, generation: int) -> None:
        if generation != self._generation or not self.is_active:
            return
        self._timer = None
        self.tick()
        # Re-arm only after the tick completes, so ticks never overlap
        if generation == self._generation and self.is_active:
            self._schedule_tick(generation)

    def _on_playback_finished(self, generation: int, seq: int) -> None:
        if generation != self._generation or seq != self._playback_seq:
            return
        if not self.is_active:
            return
        if self._starting_playback:
            # Completed inside play(); _play_current handles it
            self._finished_early = True
            return
        self._index = (self._index + 1) % len(self._notes)
        self._play_current(generation)
        self._notify()

    def _on_preview_finished(self, seq: int) -> None:
        if seq != self._preview_seq:
            return
        self._release_preview()

    def _play_current(self, generation: int) -> None:
        # Only one playback in flight: release the previous one first
        self._release_playback()

        note = self._notes[self._index]
        self._playback_seq += 1
        on_finished = functools.partial(
            self._on_playback_finished, generation, self._playback_seq
        )
        self._starting_playback = True
        self._finished_early = False
        try:
            self._playback = self.player.play(note, on_finished)
        except AudioDeviceFailure as e:
            self._playback = None
            self._raise_alert(f"Failed to play reference note {note.name}: {e}")
            return
        finally:
            self._starting_playback = False

        if self._finished_early:
            # Nothing was heard; hold this note instead of cycling through
            # the selection without end.
            self._finished_early = False
            self._release_playback()
            self._raise_alert(f"Reference note {note.name} finished before it started")

    def _release_playback(self) -> None:
        handle = self._playback
        if handle is None:
            return
        self._playback = None
        try:
            self.player.stop(handle)
        except AudioDeviceFailure as e:
            self._raise_alert(f"Failed to stop reference note {handle.note.name}: {e}")

    def _release_preview(self) -> None:
        handle = self._preview
        if handle is None:
            return
        self._preview = None
        try:
            self.player.stop(handle)
        except AudioDeviceFailure as e:
            logger.error("Failed to stop preview of %s: %s", handle.note.name, e)

    # --- Helpers ---

    def _raise_alert(self, message: str) -> None:
        logger.error(message)
        self._alert = message

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")

    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        scheduler = self._active_scheduler or self._scheduler
        if scheduler is None:
            return asyncio.get_running_loop().time()
        return scheduler.time()

    def _resolve_scheduler(self) -> Scheduler:
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "PracticeSession needs a scheduler or a running asyncio event loop"
            ) from None

    def _resolve_notes(self, notes: NotesArg) -> List[Note]:
        if isinstance(notes, NoteSelection):
            return notes.ordered_notes()
        resolved = []
        for item in notes:
            resolved.append(self.catalog.lookup(item) if isinstance(item, str) else item)
        return resolved
