"""Tests for notes, the note catalog and note selection."""

import pytest

from vocal_practice.core import Note, NoteCatalog, NoteNotFound, default_catalog
from vocal_practice.session import NoteSelection


class TestNote:
    """Tests for Note dataclass."""

    def test_note_creation(self):
        note = Note("A4", 440.0)
        assert note.name == "A4"
        assert note.frequency == 440.0
        assert note.asset is None

    def test_note_is_immutable(self):
        note = Note("A4", 440.0)
        with pytest.raises(AttributeError):
            note.frequency = 441.0

    def test_midi(self):
        assert Note("A4", 440.0).midi == 69
        assert Note("C4", 261.63).midi == 60

    def test_from_midi(self):
        note = Note.from_midi(60)
        assert note.name == "C4"
        assert abs(note.frequency - 261.63) < 0.01

    def test_cents_from(self):
        a4 = Note("A4", 440.0)
        assert a4.cents_from(440.0) == 0.0
        assert abs(a4.cents_from(880.0) - 1200.0) < 1e-9
        assert a4.cents_from(442.0) > 0
        assert a4.cents_from(438.0) < 0


class TestNoteCatalog:
    """Tests for NoteCatalog."""

    def test_default_catalog_contents(self):
        catalog = default_catalog()
        assert catalog.names == ("C4", "D4", "E4", "F4", "G4", "A4", "B4", "C5")
        assert catalog.lookup("A4").frequency == 440.0

    def test_default_catalog_ascending(self):
        freqs = [n.frequency for n in default_catalog()]
        assert freqs == sorted(freqs)

    def test_lookup_unknown_raises(self):
        catalog = default_catalog()
        with pytest.raises(NoteNotFound):
            catalog.lookup("H9")
        # Also usable as a KeyError
        with pytest.raises(KeyError):
            catalog.lookup("H9")

    def test_get_unknown_returns_none(self):
        assert default_catalog().get("H9") is None

    def test_contains_and_len(self):
        catalog = default_catalog()
        assert "C5" in catalog
        assert "C6" not in catalog
        assert len(catalog) == 8

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            NoteCatalog([])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            NoteCatalog([Note("A4", 440.0), Note("A4", 441.0)])

    def test_unordered_catalog_rejected(self):
        with pytest.raises(ValueError, match="ascending"):
            NoteCatalog([Note("A4", 440.0), Note("C4", 261.63)])

    def test_non_positive_frequency_rejected(self):
        with pytest.raises(ValueError):
            NoteCatalog([Note("X", 0.0)])


class TestNoteSelection:
    """Tests for NoteSelection."""

    def test_keeps_selection_order(self, catalog):
        selection = NoteSelection(catalog)
        selection.select("G4")
        selection.select("C4")
        selection.select("E4")
        assert [n.name for n in selection.ordered_notes()] == ["G4", "C4", "E4"]

    def test_select_twice_is_noop(self, catalog):
        selection = NoteSelection(catalog, ["A4", "A4"])
        assert len(selection) == 1

    def test_toggle(self, catalog):
        selection = NoteSelection(catalog)
        assert selection.toggle("A4") is True
        assert "A4" in selection
        assert selection.toggle("A4") is False
        assert "A4" not in selection
        assert not selection

    def test_deselect_unselected_is_noop(self, catalog):
        selection = NoteSelection(catalog, ["C4"])
        selection.deselect("D4")
        assert selection.names == frozenset({"C4"})

    def test_unknown_note_rejected(self, catalog):
        selection = NoteSelection(catalog)
        with pytest.raises(NoteNotFound):
            selection.select("Z1")

    def test_clear(self, catalog):
        selection = NoteSelection(catalog, ["C4", "D4"])
        selection.clear()
        assert len(selection) == 0
