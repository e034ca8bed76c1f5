"""
Musical and fretboard constants.

Chromatic scale, standard tuning, fret layout, etc.
"""
import math

# Chromatic scale (index = semitones above C)
CHROMATIC_SCALE = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"
)

SEMITONES_PER_OCTAVE = len(CHROMATIC_SCALE)

# Concert pitch
REFERENCE_PITCH_CLASS = "A"
REFERENCE_OCTAVE = 4
REFERENCE_FREQUENCY = 440.0

# Standard tuning, highest string first (E4 B3 G3 D3 A2 E2)
STANDARD_TUNING_NAMES = ("E4", "B3", "G3", "D3", "A2", "E2")

# Frets 0..TOTAL_FRETS are playable
TOTAL_FRETS = 16

# Fret marker positions (decorative dots)
SINGLE_DOT_FRETS = (3, 5, 7, 9, 15)
DOUBLE_DOT_FRET = 12

# String thickness in pixels (1-based string number, thinner = higher)
STRING_THICKNESS = {
    1: 1, 2: 1,  # E, B
    3: 2, 4: 2,  # G, D
    5: 3, 6: 3,  # A, E
}


def pitch_class_index(pitch_class: str) -> int:
    """
    Get semitone index of a pitch class within the octave.

    Args:
        pitch_class: Pitch class symbol (e.g., "C", "F#")

    Returns:
        Index 0-11 (0 = C, 11 = B)

    Raises:
        ValueError: If pitch class is not in the chromatic scale

    Example:
        >>> pitch_class_index("C")
        0
        >>> pitch_class_index("A")
        9
    """
    try:
        return CHROMATIC_SCALE.index(pitch_class)
    except ValueError:
        raise ValueError(
            f"Unknown pitch class: {pitch_class!r}. Expected one of {list(CHROMATIC_SCALE)}"
        ) from None


def semitone_frequency(index: int, octave: int) -> float:
    """
    Equal-temperament frequency for a pitch class index and octave.

    The octave-4 frequency is computed relative to A4 and then scaled by
    an exact power of two, so moving up one octave always doubles the result.

    Args:
        index: Pitch class index (0-11)
        octave: Octave number

    Returns:
        Frequency in Hz

    Example:
        >>> semitone_frequency(9, 4)  # A4
        440.0
        >>> round(semitone_frequency(0, 4), 2)  # C4
        261.63
    """
    reference_index = CHROMATIC_SCALE.index(REFERENCE_PITCH_CLASS)
    base = REFERENCE_FREQUENCY * math.pow(2.0, (index - reference_index) / SEMITONES_PER_OCTAVE)
    return base * math.pow(2.0, octave - REFERENCE_OCTAVE)
