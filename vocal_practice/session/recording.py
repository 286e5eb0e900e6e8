"""Recording a practice session alongside live feedback."""

import logging
from typing import Optional

import numpy as np

from ..audio.recorder import Recorder
from ..audio.sources import RingBufferSource
from .controller import NotesArg, PracticeSession

logger = logging.getLogger(__name__)


class RecordedPractice:
    """Runs a practice session while capturing the input to a recorder.

    ``capture`` is the single entry point for captured audio: it feeds the
    session's ring buffer (if any) and the recorder.
    """

    def __init__(
        self,
        session: PracticeSession,
        recorder: Recorder,
        source: Optional[RingBufferSource] = None,
    ):
        self.session = session
        self.recorder = recorder
        self.source = source

    @property
    def is_recording(self) -> bool:
        return self.recorder.is_recording

    def start(self, notes: NotesArg) -> None:
        """
        Start the session and the recorder.

        Raises:
            InvalidArgument: If no notes are given (nothing is recorded)
            AudioDeviceFailure: If the recorder cannot start (session is stopped)
        """
        self.session.start(notes)
        try:
            self.recorder.start()
        except Exception:
            self.session.stop()
            raise

    def capture(self, samples: np.ndarray) -> None:
        if self.source is not None:
            self.source.feed(samples)
        self.recorder.write(samples)

    def stop(self) -> Optional[str]:
        """Stop both and return the saved recording's locator."""
        self.session.stop()
        if not self.recorder.is_recording:
            return None
        locator = self.recorder.stop()
        logger.info("Practice recording saved%s", f" at {locator}" if locator else "")
        return locator
