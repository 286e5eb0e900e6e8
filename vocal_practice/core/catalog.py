"""Static table of practice target notes."""

from typing import Iterable, Iterator, Optional, Tuple

from .note import Note
from .errors import NoteNotFound


# Reference notes offered for practice (C4 through C5, natural notes)
DEFAULT_NOTES = (
    Note("C4", 261.63),
    Note("D4", 293.66),
    Note("E4", 329.63),
    Note("F4", 349.23),
    Note("G4", 392.00),
    Note("A4", 440.00),
    Note("B4", 493.88),
    Note("C5", 523.25),
)


class NoteCatalog:
    """Ordered, read-only collection of notes keyed by name.

    Notes must have unique names and be given in ascending frequency order.
    """

    def __init__(self, notes: Iterable[Note]):
        notes = tuple(notes)
        if not notes:
            raise ValueError("Note catalog must not be empty")

        by_name = {}
        previous = None
        for note in notes:
            if note.frequency <= 0:
                raise ValueError(f"Note {note.name} has non-positive frequency")
            if note.name in by_name:
                raise ValueError(f"Duplicate note name in catalog: {note.name}")
            if previous is not None and note.frequency < previous.frequency:
                raise ValueError(
                    f"Catalog must be ordered by ascending frequency "
                    f"({note.name} follows {previous.name})"
                )
            by_name[note.name] = note
            previous = note

        self._notes: Tuple[Note, ...] = notes
        self._by_name = by_name

    def lookup(self, name: str) -> Note:
        """Get a note by name, raising NoteNotFound if absent."""
        try:
            return self._by_name[name]
        except KeyError:
            raise NoteNotFound(name) from None

    def get(self, name: str) -> Optional[Note]:
        return self._by_name.get(name)

    def all(self) -> Tuple[Note, ...]:
        """All notes in ascending frequency order."""
        return self._notes

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(n.name for n in self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"NoteCatalog({', '.join(self.names)})"


def default_catalog() -> NoteCatalog:
    """Catalog of the eight reference notes C4..C5."""
    return NoteCatalog(DEFAULT_NOTES)
