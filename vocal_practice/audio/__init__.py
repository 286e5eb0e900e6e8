"""Audio layer - capture sources, playback sinks and recording.

These are the seams to the outside world: the session only ever reads
buffers from a source, asks a sink to play notes, and starts/stops a
recorder.
"""

from .loader import AudioLoader
from .sources import AudioSource, RingBufferSource, FileAudioSource
from .playback import PlaybackSink, PlaybackHandle, TimedPlayback
from .recorder import Recorder, WavRecorder

__all__ = [
    "AudioLoader",
    "AudioSource",
    "RingBufferSource",
    "FileAudioSource",
    "PlaybackSink",
    "PlaybackHandle",
    "TimedPlayback",
    "Recorder",
    "WavRecorder",
]
