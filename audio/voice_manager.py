"""
Voice management for fretboard playback.

Each triggered note becomes a Voice: a pre-rendered pluck handed to the
audio engine plus the oscillator handles that make up its harmonic stack.
The VoiceManager owns the registry of sounding voices and implements the
two playback policies:

1. Monophonic (stop_previous=True): every registered voice is stopped
   before the new one starts
2. Polyphonic (stop_previous=False): voices overlap until they end

Finished voices are pruned at the start of every play() and stop_all()
call rather than by a timer.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from audio.engine import AudioBackendError, AudioEngine
from audio.synth import Oscillator, PluckPreset, PluckSynth
from core.models import Note, NoteLike, as_note

logger = logging.getLogger(__name__)


class Voice:
    """One in-flight note."""

    def __init__(self, note: Note, frequency: float, start_time: float,
                 stop_time: float, oscillators: Tuple[Oscillator, ...],
                 playback_id: Optional[int] = None):
        """
        Initialize a voice.

        Args:
            note: Note being played
            frequency: Fundamental frequency in Hz
            start_time: Trigger timestamp (manager clock, seconds)
            stop_time: Scheduled end (start_time + duration)
            oscillators: Harmonic stack handles
            playback_id: Engine playback id
        """
        self.note = note
        self.frequency = frequency
        self.start_time = start_time
        self.stop_time = stop_time
        self.oscillators = oscillators
        self.playback_id = playback_id
        self.stopped = False

    @property
    def duration(self) -> float:
        return self.stop_time - self.start_time

    def is_expired(self, now: float) -> bool:
        """Check if the scheduled end has passed."""
        return now >= self.stop_time

    def __repr__(self) -> str:
        return (f"Voice(note={self.note}, frequency={self.frequency:.2f}, "
                f"start={self.start_time:.3f}, stop={self.stop_time:.3f}, stopped={self.stopped})")


class VoiceManager:
    """Manages the registry of sounding voices."""

    def __init__(self, synth: Optional[PluckSynth] = None,
                 engine_factory: Optional[Callable[[], AudioEngine]] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the voice manager.

        The engine is opened lazily on the first play(). If it fails to open,
        the failure is logged once and every later play() is a silent no-op.

        Args:
            synth: Tone synthesizer (default PluckSynth at 44.1 kHz)
            engine_factory: Callable returning an unopened engine
            clock: Monotonic time source in seconds
        """
        self.synth = synth or PluckSynth()
        if engine_factory is None:
            engine_factory = lambda: AudioEngine(sample_rate=self.synth.sample_rate)
        self._engine_factory = engine_factory
        self._engine: Optional[AudioEngine] = None
        self._silent = False
        self._clock = clock

        # Active voices, oldest first
        self._voices: List[Voice] = []

    @classmethod
    def from_settings(cls, settings: Dict[str, Dict[str, Any]]) -> "VoiceManager":
        """Build a manager from the "audio" and "synth" settings categories."""
        audio = settings.get("audio", {})
        sample_rate = audio.get("sample_rate", 44100)
        synth = PluckSynth(
            sample_rate=sample_rate,
            preset=PluckPreset.from_settings(settings.get("synth", {}))
        )
        return cls(
            synth=synth,
            engine_factory=lambda: AudioEngine(
                sample_rate=sample_rate,
                buffer_size=audio.get("buffer_size", 512),
                device=audio.get("output_device")
            )
        )

    @property
    def is_silent(self) -> bool:
        """True once the audio engine has failed to open."""
        return self._silent

    @property
    def active_voices(self) -> Tuple[Voice, ...]:
        return tuple(self._voices)

    def __len__(self) -> int:
        return len(self._voices)

    def _get_engine(self) -> Optional[AudioEngine]:
        if self._silent:
            return None
        if self._engine is None:
            engine = self._engine_factory()
            try:
                engine.open()
            except AudioBackendError as e:
                logger.warning("[AUDIO] %s; continuing without sound", e)
                self._silent = True
                return None
            self._engine = engine
        return self._engine

    def play(self, note: NoteLike, duration: float,
             stop_previous: bool = False) -> Optional[Voice]:
        """
        Trigger a note.

        Args:
            note: Note (or text such as "E4") to play
            duration: Note length in seconds (> 0)
            stop_previous: Stop every sounding voice first (monophonic)

        Returns:
            The new voice, or None when running without audio

        Raises:
            InvalidNoteError: If note is not a valid note
            ValueError: If duration is not positive
        """
        note = as_note(note)
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")

        self.prune()

        engine = self._get_engine()
        if engine is None:
            return None

        if stop_previous:
            self._stop_registered()

        frequency = note.frequency
        oscillators = self.synth.create_oscillators(frequency)
        buffer = self.synth.render(oscillators, duration)

        start_time = self._clock()
        voice = Voice(
            note=note,
            frequency=frequency,
            start_time=start_time,
            stop_time=start_time + duration,
            oscillators=oscillators,
            playback_id=engine.schedule(buffer)
        )
        self._voices.append(voice)
        logger.debug("[VOICE] %s %.2f Hz for %.2fs (%d active)",
                     note, frequency, duration, len(self._voices))
        return voice

    def _stop_voice(self, voice: Voice, now: float) -> bool:
        """Stop one voice; returns True if it was cut short."""
        if voice.stopped:
            return False
        voice.stopped = True
        for osc in voice.oscillators:
            osc.stop()

        if voice.is_expired(now) or self._engine is None:
            return False
        self._engine.cancel(voice.playback_id)
        return True

    def _stop_registered(self) -> int:
        now = self._clock()
        cut = 0
        for voice in self._voices:
            if self._stop_voice(voice, now):
                cut += 1
        self._voices.clear()
        return cut

    def stop(self, voice: Voice) -> bool:
        """
        Stop a voice immediately.

        Safe to call on a voice that is already stopped or past its end.

        Returns:
            True if the voice was still sounding
        """
        cut = self._stop_voice(voice, self._clock())
        if voice in self._voices:
            self._voices.remove(voice)
        return cut

    def stop_all(self) -> int:
        """
        Prune finished voices, then stop every remaining one.

        Returns:
            Number of voices cut short
        """
        self.prune()
        return self._stop_registered()

    def prune(self) -> int:
        """
        Remove voices whose scheduled end has passed.

        Returns:
            Number of voices removed
        """
        now = self._clock()
        expired = [v for v in self._voices if v.is_expired(now)]
        for voice in expired:
            self._stop_voice(voice, now)
        self._voices = [v for v in self._voices if not v.is_expired(now)]
        return len(expired)

    def close(self):
        """Stop all voices and release the audio device."""
        self.stop_all()
        if self._engine is not None:
            self._engine.close()
            self._engine = None
