"""The set of notes a user has chosen to practice."""

from typing import Iterable, Iterator, List, Optional

from ..core import Note, NoteCatalog


class NoteSelection:
    """Ordered set of selected note names, in the order they were chosen."""

    def __init__(self, catalog: NoteCatalog, names: Optional[Iterable[str]] = None):
        self.catalog = catalog
        self._names = {}
        for name in names or ():
            self.select(name)

    def select(self, name: str) -> None:
        """Add a note. Raises NoteNotFound for names not in the catalog."""
        self.catalog.lookup(name)
        self._names.setdefault(name, None)

    def deselect(self, name: str) -> None:
        self.catalog.lookup(name)
        self._names.pop(name, None)

    def toggle(self, name: str) -> bool:
        """Flip a note's selection; returns True if it is now selected."""
        if name in self._names:
            self.deselect(name)
            return False
        self.select(name)
        return True

    def clear(self) -> None:
        self._names.clear()

    @property
    def names(self) -> frozenset:
        return frozenset(self._names)

    def ordered_notes(self) -> List[Note]:
        return [self.catalog.lookup(name) for name in self._names]

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __bool__(self) -> bool:
        return bool(self._names)
