"""
Core data structures for the fretboard.

Modules:
- constants: Musical constants (chromatic scale, tuning, fret layout)
- models: Immutable Note value and frequency derivation
- fretboard: Fret-to-pitch mapping and the fretboard grid
- settings: Settings file I/O (~/.fretboard/settings.json)
"""
