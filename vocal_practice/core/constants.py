"""Global constants for Vocal Practice."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio defaults
DEFAULT_SR = 44100
DEFAULT_BUFFER_DURATION = 0.1  # 100ms analysis window

# Practice defaults
DETECTION_INTERVAL = 0.1  # seconds between detection ticks
FREQUENCY_TOLERANCE = 5.0  # Hz
REFERENCE_DURATION = 2.0  # seconds a reference note plays

# Plausible human vocal range (Hz)
VOCAL_MIN_HZ = 50.0
VOCAL_MAX_HZ = 2000.0

# History bounds
SESSION_HISTORY_CAPACITY = 100
MONITOR_HISTORY_CAPACITY = 50
