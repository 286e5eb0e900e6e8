"""Tests for the practice session controller."""

import asyncio

import numpy as np
import pytest

from vocal_practice.audio import TimedPlayback
from vocal_practice.config import PracticeConfig
from vocal_practice.core import EstimatorFailure, InvalidArgument, NoteNotFound
from vocal_practice.inference import FeedbackCategory
from vocal_practice.session import NoteSelection, PracticeSession, SessionState, VirtualScheduler

from conftest import RecordingPlayer, ScriptedEstimator, StaticSource


class TestStartStop:
    """Idle/Active transitions."""

    def test_start_with_empty_selection_fails(self, session, catalog, player):
        with pytest.raises(InvalidArgument):
            session.start([])
        with pytest.raises(InvalidArgument):
            session.start(NoteSelection(catalog))
        assert session.state is SessionState.IDLE
        assert not session.is_active
        assert player.events == []

    def test_start_with_unknown_note_fails(self, session):
        with pytest.raises(NoteNotFound):
            session.start(["A4", "Q7"])
        assert not session.is_active

    def test_start_activates_first_note(self, session, player):
        session.start(["E4", "C4"])
        assert session.is_active
        assert session.current_note_index == 0
        assert session.current_note.name == "E4"
        assert player.events == ["play E4"]

    def test_start_accepts_selection_in_selection_order(self, session, catalog):
        selection = NoteSelection(catalog, ["G4", "C4"])
        session.start(selection)
        assert [n.name for n in session.notes] == ["G4", "C4"]

    def test_start_then_stop_resets_everything(self, session, player):
        session.start(["A4"])
        session.stop()
        assert session.state is SessionState.IDLE
        assert len(session.history) == 0
        assert session.feedback == ""
        assert session.current_note is None
        assert session.current_note_index == 0
        assert player.in_flight == []

    def test_stop_after_ticks_clears_history(self, session, scheduler):
        session.start(["A4"])
        scheduler.advance(0.5)
        assert len(session.history) > 0
        session.stop()
        assert len(session.history) == 0
        assert session.feedback == ""

    def test_double_stop_is_silent(self, session):
        snapshots = []
        session.subscribe(snapshots.append)
        session.start(["A4"])
        session.stop()
        count = len(snapshots)
        before = session.snapshot()

        session.stop()
        assert len(snapshots) == count
        assert session.snapshot() == before

    def test_stop_when_never_started(self, session):
        session.stop()
        assert session.state is SessionState.IDLE

    def test_restart_while_active(self, session, player, scheduler):
        session.start(["A4"])
        scheduler.advance(0.3)
        session.start(["C4", "D4"])
        assert session.is_active
        assert len(session.history) == 0
        assert session.current_note.name == "C4"
        assert player.events == ["play A4", "stop A4", "play C4"]

    def test_start_without_scheduler_or_loop(self, catalog, estimator, source, player):
        session = PracticeSession(catalog, estimator, source, player)
        with pytest.raises(RuntimeError, match="scheduler"):
            session.start(["A4"])
        assert not session.is_active


class TestDetectionTick:
    """The fixed-interval detection cycle."""

    def test_tick_records_sample_and_feedback(self, session, scheduler):
        session.start(["A4"])
        scheduler.advance(0.1)

        assert len(session.history) == 1
        sample = session.history.latest()
        assert sample.timestamp == pytest.approx(0.1)
        assert sample.frequency == 442.0
        assert sample.matched_note == "A4"
        assert session.category is FeedbackCategory.MATCH
        assert session.current_pitch == 442.0
        assert "A4" in session.feedback

    def test_ticks_follow_interval(self, session, scheduler, estimator):
        session.start(["A4"])
        scheduler.advance(0.35)
        assert estimator.calls == 3
        assert [s.timestamp for s in session.history] == pytest.approx([0.1, 0.2, 0.3])

    def test_configurable_interval(self, catalog, estimator, source, player, scheduler):
        config = PracticeConfig(detection_interval=0.25)
        session = PracticeSession(
            catalog, estimator, source, player, scheduler=scheduler, config=config
        )
        session.start(["A4"])
        scheduler.advance(1.0)
        assert estimator.calls == 4

    def test_classifies_against_session_notes(self, session, scheduler, estimator):
        estimator.default = 440.0
        session.start(["C4"])
        scheduler.advance(0.1)
        assert session.history.latest().matched_note == "A4"
        assert session.category is FeedbackCategory.NO_MATCH

    def test_no_pitch_leaves_state_unchanged(self, session, scheduler, estimator):
        estimator.results = [442.0, None, float("nan"), 5000.0]
        estimator.default = None
        session.start(["A4"])
        scheduler.advance(0.1)
        feedback = session.feedback
        history = session.history.samples()

        scheduler.advance(0.4)
        assert estimator.calls == 5
        assert session.feedback == feedback
        assert session.history.samples() == history

    def test_estimator_failure_is_contained(self, session, scheduler, estimator):
        estimator.results = [EstimatorFailure("boom"), RuntimeError("worse"), 442.0]
        session.start(["A4"])
        scheduler.advance(0.35)
        assert session.is_active
        assert len(session.history) == 1
        assert estimator.calls == 3

    def test_empty_buffer_is_skipped(self, catalog, estimator, player, scheduler):
        source = StaticSource(buffer=np.array([], dtype=np.float32))
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        session.start(["A4"])
        scheduler.advance(0.5)
        assert estimator.calls == 0
        assert len(session.history) == 0

    def test_history_is_bounded(self, catalog, estimator, source, player, scheduler):
        config = PracticeConfig(history_capacity=5)
        estimator.default = None
        estimator.results = [400.0 + i for i in range(8)]
        session = PracticeSession(
            catalog, estimator, source, player, scheduler=scheduler, config=config
        )
        session.start(["A4"])
        scheduler.advance(0.85)
        assert len(session.history) == 5
        assert [s.frequency for s in session.history] == [403.0, 404.0, 405.0, 406.0, 407.0]

    def test_tick_when_idle_is_noop(self, session, estimator):
        assert session.tick() is None
        assert estimator.calls == 0

    def test_tick_does_not_reenter(self, session, scheduler):
        inner = []

        class Reentrant(ScriptedEstimator):
            def estimate(self, buffer, sample_rate):
                inner.append(session.tick())
                return super().estimate(buffer, sample_rate)

        session.estimator = Reentrant(default=442.0)
        session.start(["A4"])
        scheduler.advance(0.1)
        assert inner == [None]
        assert len(session.history) == 1

    def test_no_ticks_after_stop(self, session, scheduler, estimator):
        session.start(["A4"])
        scheduler.advance(0.2)
        session.stop()
        calls = estimator.calls
        scheduler.advance(1.0)
        assert estimator.calls == calls
        assert scheduler.pending == 0


class TestReferencePlayback:
    """Playback-driven note advance."""

    def test_advance_wraps_modulo_note_count(self, session, player):
        session.start(["C4", "E4", "G4"])
        indices = []
        for _ in range(4):
            player.finish_current()
            indices.append(session.current_note_index)
        assert indices == [1, 2, 0, 1]
        assert player.events == [
            "play C4", "stop C4",
            "play E4", "stop E4",
            "play G4", "stop G4",
            "play C4", "stop C4",
            "play E4",
        ]

    def test_single_note_repeats(self, session, player):
        session.start(["A4"])
        player.finish_current()
        assert session.current_note_index == 0
        assert player.events == ["play A4", "stop A4", "play A4"]

    def test_finished_note_is_unloaded_before_next(self, session, player):
        session.start(["C4", "D4"])
        player.finish_current()
        assert player.events.index("stop C4") < player.events.index("play D4")
        assert [h.note.name for h in player.in_flight] == ["D4"]

    def test_playback_finishing_inside_play_holds_note(
        self, catalog, estimator, source, scheduler
    ):
        player = RecordingPlayer(finish_immediately=True)
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        session.start(["C4", "D4"])

        assert session.is_active
        assert session.current_note.name == "C4"
        assert player.events == ["play C4", "stop C4"]
        assert "C4" in session.alert

        scheduler.advance(0.25)
        assert len(session.history) == 2

    def test_start_rolls_back_when_player_raises(
        self, catalog, estimator, source, scheduler
    ):
        player = RecordingPlayer(error=OSError("asset missing"))
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        with pytest.raises(OSError):
            session.start(["C4", "D4"])

        assert session.state is SessionState.IDLE
        assert scheduler.pending == 0
        scheduler.advance(1.0)
        assert estimator.calls == 0

    def test_only_one_playback_in_flight(self, session, player):
        session.start(["C4", "D4"])
        session.advance()
        session.advance()
        assert player.events == ["play C4", "stop C4", "play D4", "stop D4", "play C4"]
        assert len(player.in_flight) == 1

    def test_late_playback_callback_after_stop_is_ignored(self, session, player):
        session.start(["C4", "D4"])
        stale = player.callbacks[0]
        session.stop()
        stale()
        assert not session.is_active
        assert session.current_note_index == 0
        assert player.events == ["play C4", "stop C4"]

    def test_superseded_playback_callback_is_ignored(self, session, player):
        session.start(["C4", "D4", "E4"])
        first = player.callbacks[0]
        session.advance()
        first()
        assert session.current_note.name == "D4"

    def test_playback_does_not_gate_detection(self, session, scheduler, estimator):
        session.start(["A4", "C4"])
        scheduler.advance(1.05)
        assert session.current_note_index == 0
        assert estimator.calls == 10

    def test_playback_failure_raises_alert(self, catalog, estimator, source, scheduler):
        player = RecordingPlayer(fail_on="D4")
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        session.start(["C4", "D4"])
        assert session.alert is None

        player.finish_current()
        assert session.is_active
        assert session.current_note.name == "D4"
        assert "D4" in session.alert
        assert session.snapshot().alert == session.alert

        scheduler.advance(0.2)
        assert len(session.history) == 2

    def test_timed_playback_advances_on_schedule(self, catalog, estimator, source, scheduler):
        player = TimedPlayback(scheduler, duration=2.0)
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        session.start(["C4", "E4"])
        scheduler.advance(2.05)
        assert session.current_note.name == "E4"
        scheduler.advance(2.0)
        assert session.current_note.name == "C4"
        assert player.played == ["C4", "E4", "C4"]

    def test_advance_when_idle(self, session):
        assert session.advance() is None


class TestPreview:
    """Single-note playback outside a session."""

    def test_preview_plays_one_note(self, session, player):
        handle = session.preview("E4")
        assert handle.note.name == "E4"
        assert player.events == ["play E4"]
        assert not session.is_active

    def test_finished_preview_is_unloaded_and_not_repeated(self, session, player):
        session.preview("E4")
        player.finish_current()
        assert player.events == ["play E4", "stop E4"]
        assert player.in_flight == []

    def test_new_preview_replaces_previous(self, session, player):
        session.preview("C4")
        session.preview("G4")
        assert player.events == ["play C4", "stop C4", "play G4"]
        assert len(player.in_flight) == 1

    def test_start_stops_preview(self, session, player):
        session.preview("G4")
        session.start(["C4"])
        assert player.events == ["play G4", "stop G4", "play C4"]
        assert [h.note.name for h in player.in_flight] == ["C4"]

    def test_preview_ignored_while_active(self, session, player):
        session.start(["C4"])
        assert session.preview("G4") is None
        assert player.events == ["play C4"]

    def test_preview_unknown_note(self, session):
        with pytest.raises(NoteNotFound):
            session.preview("Z0")

    def test_preview_device_failure_sets_alert(
        self, catalog, estimator, source, scheduler
    ):
        player = RecordingPlayer(fail_on="A4")
        session = PracticeSession(catalog, estimator, source, player, scheduler=scheduler)
        assert session.preview("A4") is None
        assert "A4" in session.alert


class TestObservers:

    def test_listeners_receive_snapshots(self, session, scheduler):
        snapshots = []
        session.subscribe(snapshots.append)
        session.start(["A4"])
        scheduler.advance(0.1)

        assert snapshots[0].is_active
        assert snapshots[0].history == ()
        assert snapshots[-1].history[-1].frequency == 442.0
        assert snapshots[-1].current_note.name == "A4"

    def test_unsubscribe(self, session, scheduler):
        snapshots = []
        unsubscribe = session.subscribe(snapshots.append)
        unsubscribe()
        session.start(["A4"])
        scheduler.advance(0.2)
        assert snapshots == []

    def test_listener_errors_do_not_break_session(self, session, scheduler):
        def broken(snapshot):
            raise ValueError("render failed")

        session.subscribe(broken)
        session.start(["A4"])
        scheduler.advance(0.35)
        assert len(session.history) == 3


class TestAsyncioLoop:
    """The controller runs directly on an asyncio event loop."""

    def test_runs_on_running_loop(self, catalog, source):
        estimator = ScriptedEstimator(default=440.0)
        config = PracticeConfig(detection_interval=0.02)

        async def practice():
            loop = asyncio.get_running_loop()
            player = TimedPlayback(loop, duration=0.05)
            session = PracticeSession(catalog, estimator, source, player, config=config)
            session.start(["A4", "C5"])
            await asyncio.sleep(0.3)
            history = len(session.history)
            session.stop()
            calls = estimator.calls
            await asyncio.sleep(0.1)
            return session, history, calls, player

        session, history, calls, player = asyncio.run(practice())
        assert history >= 3
        assert estimator.calls == calls
        assert not session.is_active
        assert len(player.played) >= 2
