"""Processing layer - pitch history buffering."""

from .history import PitchHistory, PitchSample, HistorySummary

__all__ = ["PitchHistory", "PitchSample", "HistorySummary"]
