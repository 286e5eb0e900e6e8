"""Practice configuration."""

from dataclasses import dataclass, asdict, fields, replace as dc_replace
from pathlib import Path
from typing import Any, Dict, Union

import toml

from .core import constants
from .core.errors import InvalidArgument


@dataclass(frozen=True)
class PracticeConfig:
    """Tunable parameters for practice sessions and the live monitor."""

    sample_rate: int = constants.DEFAULT_SR
    detection_interval: float = constants.DETECTION_INTERVAL  # seconds
    tolerance_hz: float = constants.FREQUENCY_TOLERANCE
    min_frequency: float = constants.VOCAL_MIN_HZ
    max_frequency: float = constants.VOCAL_MAX_HZ
    history_capacity: int = constants.SESSION_HISTORY_CAPACITY
    monitor_history_capacity: int = constants.MONITOR_HISTORY_CAPACITY
    buffer_duration: float = constants.DEFAULT_BUFFER_DURATION  # seconds
    reference_duration: float = constants.REFERENCE_DURATION  # seconds

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise InvalidArgument if any parameter is out of range."""
        if self.sample_rate <= 0:
            raise InvalidArgument(f"sample_rate must be positive, got {self.sample_rate}")
        if self.detection_interval <= 0:
            raise InvalidArgument("detection_interval must be positive")
        if self.tolerance_hz < 0:
            raise InvalidArgument("tolerance_hz must be >= 0")
        if not 0 < self.min_frequency < self.max_frequency:
            raise InvalidArgument(
                f"Invalid frequency range: {self.min_frequency}-{self.max_frequency} Hz"
            )
        if self.history_capacity < 1 or self.monitor_history_capacity < 1:
            raise InvalidArgument("History capacities must be at least 1")
        if self.buffer_duration <= 0 or self.reference_duration <= 0:
            raise InvalidArgument("Durations must be positive")

    @property
    def buffer_size(self) -> int:
        """Samples per analysis buffer."""
        return max(1, int(round(self.sample_rate * self.buffer_duration)))

    def replace(self, **overrides: Any) -> "PracticeConfig":
        """Copy with some fields overridden. ``None`` values are ignored."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return dc_replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PracticeConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidArgument(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "PracticeConfig":
        """
        Load configuration from a TOML file.

        Settings are read from a ``[vocal_practice]`` table; a file without
        one is treated as a flat table of settings.

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidArgument: If keys or values are invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = toml.load(path)
        section = data.get("vocal_practice", data)
        return cls.from_dict(section)
