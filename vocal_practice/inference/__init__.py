"""Inference layer - turning pitch estimates into practice feedback."""

from .matching import (
    PitchClassifier,
    Classification,
    FeedbackCategory,
    feedback_text,
    nearest_note,
)

__all__ = [
    "PitchClassifier",
    "Classification",
    "FeedbackCategory",
    "feedback_text",
    "nearest_note",
]
