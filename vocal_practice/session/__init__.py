"""Session layer - practice session control and live monitoring."""

from .controller import PracticeSession, SessionSnapshot, SessionState
from .monitor import PitchMonitor
from .recording import RecordedPractice
from .scheduling import Scheduler, VirtualScheduler
from .selection import NoteSelection

__all__ = [
    "PracticeSession",
    "SessionSnapshot",
    "SessionState",
    "PitchMonitor",
    "RecordedPractice",
    "Scheduler",
    "VirtualScheduler",
    "NoteSelection",
]
