"""Tests for fret-to-pitch mapping and the fretboard grid."""
import pytest

from core.constants import CHROMATIC_SCALE
from core.fretboard import Fretboard, note_at_offset
from core.models import Note, STANDARD_TUNING

ALL_NOTES = [Note(pc, octave) for octave in range(0, 9) for pc in CHROMATIC_SCALE]


@pytest.mark.parametrize("open_note", STANDARD_TUNING, ids=str)
def test_offset_matches_chromatic_arithmetic(open_note):
    base = CHROMATIC_SCALE.index(open_note.pitch_class)
    for offset in range(25):
        result = note_at_offset(open_note, offset)
        assert result.pitch_class == CHROMATIC_SCALE[(base + offset) % 12]
        assert result.octave == open_note.octave + (base + offset) // 12


def test_zero_offset_is_identity():
    for note in ALL_NOTES:
        assert note_at_offset(note, 0) == note


def test_twelve_frets_is_one_octave_up():
    for note in ALL_NOTES:
        result = note_at_offset(note, 12)
        assert result.pitch_class == note.pitch_class
        assert result.octave == note.octave + 1


@pytest.mark.parametrize("open_note, offset, expected", [
    (Note("E", 4), 1, Note("F", 4)),
    (Note("B", 3), 1, Note("C", 4)),
    (Note("E", 2), 5, Note("A", 2)),
    (Note("E", 2), 24, Note("E", 4)),
    (Note("A", 2), 3, Note("C", 3)),
    (Note("G", 3), 16, Note("B", 4)),
])
def test_concrete_positions(open_note, offset, expected):
    assert note_at_offset(open_note, offset) == expected


def test_large_offset_rolls_over_once_per_octave():
    # B3 + 13 crosses B->C twice: C4 at +1, C5 at +13
    assert note_at_offset(Note("B", 3), 13) == Note("C", 5)
    assert note_at_offset(Note("C", 0), 120) == Note("C", 10)


def test_accepts_note_text():
    assert note_at_offset("B3", 1) == Note("C", 4)


def test_input_is_not_mutated():
    open_note = Note("E", 2)
    note_at_offset(open_note, 7)
    assert open_note == Note("E", 2)


def test_negative_offset_rejected():
    with pytest.raises(ValueError):
        note_at_offset(Note("E", 2), -1)


class TestFretboard:

    def test_standard_layout(self):
        board = Fretboard()
        assert board.string_count == 6
        assert list(board.frets) == list(range(17))
        assert [str(n) for n in board.tuning] == ["E4", "B3", "G3", "D3", "A2", "E2"]

    def test_note_at(self):
        board = Fretboard()
        assert board.note_at(0, 0) == Note("E", 4)
        assert board.note_at(5, 5) == Note("A", 2)
        assert board.note_at(1, 1) == Note("C", 4)
        assert board.note_at(5, 16) == Note("G#", 3)

    def test_string_notes_are_labels_for_every_fret(self):
        board = Fretboard()
        labels = [str(n) for n in board.string_notes(4)]
        assert len(labels) == 17
        assert labels[:6] == ["A2", "A#2", "B2", "C3", "C#3", "D3"]
        assert labels[12] == "A3"

    @pytest.mark.parametrize("string_index, fret", [(-1, 0), (6, 0), (0, -1), (0, 17)])
    def test_off_board_positions_rejected(self, string_index, fret):
        with pytest.raises(ValueError):
            Fretboard().note_at(string_index, fret)

    def test_custom_tuning_and_length(self):
        board = Fretboard(["D3", "A2", "D2"], total_frets=24)
        assert board.string_count == 3
        assert board.note_at(2, 24) == Note("D", 4)

    def test_empty_tuning_rejected(self):
        with pytest.raises(ValueError):
            Fretboard([])

    def test_fret_markers(self):
        markers = {fret: Fretboard.fret_marker(fret) for fret in range(17)}
        assert [f for f, dots in markers.items() if dots == 1] == [3, 5, 7, 9, 15]
        assert markers[12] == 2
        assert markers[0] == 0

    def test_string_thickness(self):
        assert [Fretboard.string_thickness(n) for n in range(1, 7)] == [1, 1, 2, 2, 3, 3]
