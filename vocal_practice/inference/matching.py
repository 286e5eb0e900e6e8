"""Nearest-note matching and tolerance feedback."""

from dataclasses import dataclass
from enum import Enum
from typing import Collection, Optional

from ..core import Note, NoteCatalog
from ..core.constants import FREQUENCY_TOLERANCE
from ..core.errors import InvalidArgument


class FeedbackCategory(Enum):
    """Whether a sung pitch counts as hitting a selected note."""

    MATCH = "match"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class Classification:
    """Result of matching one frequency against the catalog."""

    frequency: float
    nearest_note: Note
    distance_hz: float
    within_tolerance: bool

    @property
    def category(self) -> FeedbackCategory:
        return FeedbackCategory.MATCH if self.within_tolerance else FeedbackCategory.NO_MATCH

    @property
    def cents(self) -> float:
        """Signed deviation from the nearest note in cents."""
        return self.nearest_note.cents_from(self.frequency)

    @property
    def feedback(self) -> str:
        return feedback_text(self.category, self.nearest_note)


def feedback_text(category: FeedbackCategory, note: Note) -> str:
    """User-facing message for a classification outcome."""
    if category is FeedbackCategory.MATCH:
        return f"Perfect! You're hitting {note.name}"
    return f"Try to match {note.name}"


def nearest_note(catalog: NoteCatalog, frequency: float) -> Note:
    """Closest catalog note by absolute Hz distance; ties go to the earlier note."""
    best = None
    best_distance = 0.0
    for note in catalog:
        distance = abs(note.frequency - frequency)
        if best is None or distance < best_distance:
            best = note
            best_distance = distance
    return best


class PitchClassifier:
    """Matches detected frequencies to catalog notes with a Hz tolerance."""

    def __init__(self, catalog: NoteCatalog, tolerance: float = FREQUENCY_TOLERANCE):
        """
        Initialize PitchClassifier.

        Args:
            catalog: Notes to search (always the full catalog)
            tolerance: Maximum |detected - target| in Hz that counts as a match
        """
        if len(catalog) == 0:
            raise InvalidArgument("Cannot classify against an empty catalog")
        if tolerance < 0:
            raise InvalidArgument(f"Tolerance must be >= 0, got {tolerance}")
        self.catalog = catalog
        self.tolerance = tolerance

    def classify(
        self,
        frequency: float,
        selected_notes: Collection[str],
        tolerance: Optional[float] = None,
    ) -> Classification:
        """
        Classify a frequency against the selected notes.

        Args:
            frequency: Detected frequency in Hz
            selected_notes: Names of the notes being practiced
            tolerance: Override the classifier's tolerance (Hz)

        Returns:
            Classification with the nearest catalog note and match verdict
        """
        if tolerance is None:
            tolerance = self.tolerance
        elif tolerance < 0:
            raise InvalidArgument(f"Tolerance must be >= 0, got {tolerance}")

        note = nearest_note(self.catalog, frequency)
        distance = abs(note.frequency - frequency)
        within = note.name in selected_notes and distance <= tolerance

        return Classification(
            frequency=frequency,
            nearest_note=note,
            distance_hz=distance,
            within_tolerance=within,
        )
