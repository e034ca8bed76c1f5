"""
Audio layer for the fretboard.

Modules:
- dsp: Waveforms, automation curves, filters
- synth: Plucked-string tone synthesizer
- engine: Audio output stream (sounddevice)
- voice_manager: Registry of sounding voices and playback policies
"""
