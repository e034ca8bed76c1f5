"""
Fret-to-pitch mapping.

Each fret raises the open string by one semitone; wrapping past B rolls
over to C in the next octave.
"""
from typing import List, Sequence

from core.constants import (
    CHROMATIC_SCALE,
    DOUBLE_DOT_FRET,
    SEMITONES_PER_OCTAVE,
    SINGLE_DOT_FRETS,
    STRING_THICKNESS,
    TOTAL_FRETS,
)
from core.models import Note, NoteLike, STANDARD_TUNING, as_note


def note_at_offset(open_note: NoteLike, fret_offset: int) -> Note:
    """
    Get the note sounding at a fret offset above an open string.

    Args:
        open_note: Open-string note (Note or text such as "E2")
        fret_offset: Semitones above the open string (>= 0)

    Returns:
        New Note for the fretted position

    Raises:
        ValueError: If fret_offset is negative

    Example:
        >>> str(note_at_offset("B3", 1))
        'C4'
        >>> str(note_at_offset("E2", 24))
        'E4'
    """
    if fret_offset < 0:
        raise ValueError(f"Fret offset must be non-negative, got {fret_offset}")

    open_note = as_note(open_note)
    raw = open_note.index + fret_offset
    return Note(
        pitch_class=CHROMATIC_SCALE[raw % SEMITONES_PER_OCTAVE],
        octave=open_note.octave + raw // SEMITONES_PER_OCTAVE,
    )


class Fretboard:
    """
    Grid of strings and frets.

    Strings are indexed from 0 (highest pitch) in tuning order; frets run
    from 0 (open string) to total_frets inclusive.
    """

    def __init__(self, tuning: Sequence[NoteLike] = STANDARD_TUNING,
                 total_frets: int = TOTAL_FRETS):
        """
        Initialize fretboard.

        Args:
            tuning: Open-string notes, highest string first
            total_frets: Highest playable fret
        """
        if not tuning:
            raise ValueError("Tuning must contain at least one string")
        if total_frets < 0:
            raise ValueError(f"total_frets must be non-negative, got {total_frets}")

        self.tuning = tuple(as_note(n) for n in tuning)
        self.total_frets = total_frets

    @property
    def string_count(self) -> int:
        return len(self.tuning)

    @property
    def frets(self) -> range:
        return range(self.total_frets + 1)

    def note_at(self, string_index: int, fret: int) -> Note:
        """
        Get the note at a (string, fret) position.

        Args:
            string_index: 0-based string index (0 = highest string)
            fret: Fret number (0 = open)

        Returns:
            Note at that position

        Raises:
            ValueError: If position is off the board
        """
        if not 0 <= string_index < self.string_count:
            raise ValueError(
                f"String index must be 0-{self.string_count - 1}, got {string_index}")
        if fret not in self.frets:
            raise ValueError(f"Fret must be 0-{self.total_frets}, got {fret}")
        return note_at_offset(self.tuning[string_index], fret)

    def string_notes(self, string_index: int) -> List[Note]:
        """Notes for every fret of one string, open string first."""
        return [self.note_at(string_index, fret) for fret in self.frets]

    @staticmethod
    def fret_marker(fret: int) -> int:
        """
        Number of inlay dots drawn at a fret.

        Returns:
            2 at the octave fret, 1 at single-dot frets, else 0
        """
        if fret == DOUBLE_DOT_FRET:
            return 2
        if fret in SINGLE_DOT_FRETS:
            return 1
        return 0

    @staticmethod
    def string_thickness(string_number: int) -> int:
        """Drawn thickness in pixels for a 1-based string number."""
        return STRING_THICKNESS.get(string_number, max(STRING_THICKNESS.values()))
