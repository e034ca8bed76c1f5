"""
Immutable data models for the fretboard.

Notes are frozen dataclasses so they can be created freely, compared by
value and shared with the audio thread without copying.
"""
import numbers
import re
from dataclasses import dataclass
from typing import Tuple, Union

from core.constants import (
    CHROMATIC_SCALE,
    STANDARD_TUNING_NAMES,
    pitch_class_index,
    semitone_frequency,
)


class InvalidNoteError(ValueError):
    """Raised for an unknown pitch class or malformed note text."""


_NOTE_PATTERN = re.compile(r"^([A-Ga-g]#?)(-?\d+)$")


@dataclass(frozen=True)
class Note:
    """
    A pitch class paired with an octave number.

    Attributes:
        pitch_class: One of the 12 chromatic symbols ("C", "C#", ..., "B")
        octave: Octave number (E4 is the high E string)
    """
    pitch_class: str
    octave: int

    def __post_init__(self):
        """Validate note."""
        if self.pitch_class not in CHROMATIC_SCALE:
            raise InvalidNoteError(f"Invalid pitch class: {self.pitch_class!r}")
        if isinstance(self.octave, bool) or not isinstance(self.octave, numbers.Integral):
            raise InvalidNoteError(f"Octave must be an integer, got {self.octave!r}")
        object.__setattr__(self, "octave", int(self.octave))

    @property
    def index(self) -> int:
        """Semitone index of the pitch class (0 = C)."""
        return pitch_class_index(self.pitch_class)

    @property
    def frequency(self) -> float:
        """Equal-temperament frequency in Hz (A4 = 440 Hz)."""
        return semitone_frequency(self.index, self.octave)

    @classmethod
    def parse(cls, text: str) -> "Note":
        """
        Create Note from its text form.

        Args:
            text: Note name with octave (e.g., "E4", "a#3")

        Returns:
            Parsed note

        Raises:
            InvalidNoteError: If text is not a valid note name
        """
        if not isinstance(text, str):
            raise InvalidNoteError(f"Note text must be a string, got {text!r}")

        match = _NOTE_PATTERN.match(text.strip())
        if not match:
            raise InvalidNoteError(f"Invalid note name format: {text!r}")

        name, octave = match.groups()
        return cls(pitch_class=name.upper(), octave=int(octave))

    def __str__(self) -> str:
        return f"{self.pitch_class}{self.octave}"


NoteLike = Union[Note, str]


def as_note(value: NoteLike) -> Note:
    """Coerce a Note or its text form into a Note."""
    if isinstance(value, Note):
        return value
    return Note.parse(value)


def note_frequency(note: NoteLike) -> float:
    """
    Convert a note to its frequency in Hz.

    Example:
        >>> note_frequency("A4")
        440.0
    """
    return as_note(note).frequency


STANDARD_TUNING: Tuple[Note, ...] = tuple(Note.parse(n) for n in STANDARD_TUNING_NAMES)
