"""
Plucked-string tone synthesizer.

A voice is three harmonic oscillators (1x, 2x, 3x the fundamental) mixed
through a lowpass whose cutoff sweeps down over the note, shaped by a
pluck envelope. Envelope and filter movement are described as a list of
AutomationEvent directives built when the voice is created.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from audio.dsp import (
    WAVEFORMS,
    AutomationEvent,
    generate_waveform,
    render_automation,
    time_varying_lowpass,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluckPreset:
    """
    Tuning constants for the pluck timbre.

    These are empirical "sounds right" values, not an acoustic model.

    Attributes:
        partials: (harmonic number, weight) pairs; fundamental loudest
        waveform: Oscillator waveform for every partial
        peak_gain: Envelope peak
        attack_time: Rise time to peak (s)
        decay_time: Time by which the level reaches decay_level (s)
        decay_level: Level after the initial decay, relative to peak
        sustain_level: Level at the sustain point, relative to peak
        sustain_point: Fraction of the duration where sustain_level is reached
        floor_level: Absolute gain at the end of the note (near silence)
        cutoff_start: Lowpass cutoff at the pluck (Hz)
        cutoff_end: Lowpass cutoff at the end of the note (Hz)
    """
    partials: Tuple[Tuple[int, float], ...] = ((1, 1.0), (2, 0.3), (3, 0.15))
    waveform: str = "SINE"
    peak_gain: float = 0.3
    attack_time: float = 0.005
    decay_time: float = 0.1
    decay_level: float = 1.0 / 3.0
    sustain_level: float = 0.1
    sustain_point: float = 0.5
    floor_level: float = 0.001
    cutoff_start: float = 2000.0
    cutoff_end: float = 800.0

    def __post_init__(self):
        """Validate preset."""
        if not self.partials:
            raise ValueError("Preset needs at least one partial")
        for harmonic, weight in self.partials:
            if harmonic < 1:
                raise ValueError(f"Harmonic number must be >= 1, got {harmonic}")
            if weight < 0:
                raise ValueError(f"Partial weight must be non-negative, got {weight}")
        if self.waveform not in WAVEFORMS:
            raise ValueError(f"Unknown waveform: {self.waveform}")
        for name in ("peak_gain", "attack_time", "decay_time", "decay_level",
                     "sustain_level", "floor_level", "cutoff_start", "cutoff_end"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0.0 < self.sustain_point <= 1.0:
            raise ValueError(f"sustain_point must be in (0, 1], got {self.sustain_point}")

    @classmethod
    def from_settings(cls, overrides: Dict[str, Any]) -> "PluckPreset":
        """
        Create preset from the "synth" settings category.

        Unknown keys are logged and ignored.
        """
        names = {f.name for f in dataclasses.fields(cls)}
        known = {}
        for key, value in overrides.items():
            if key not in names:
                logger.warning("[SYNTH] Ignoring unknown preset setting %r", key)
                continue
            if key == "partials":
                value = tuple((int(h), float(w)) for h, w in value)
            known[key] = value
        return cls(**known)


DEFAULT_PRESET = PluckPreset()


class Oscillator:
    """
    Handle for one partial of a voice.

    Voices are rendered up front, so these handles are bookkeeping: the
    sound itself ends when the engine cancels the voice's buffer.
    Stopping is idempotent; stop() reports whether this call did the work.
    """

    def __init__(self, frequency: float, gain: float, harmonic: int = 1,
                 waveform: str = "SINE"):
        self.frequency = frequency
        self.gain = gain
        self.harmonic = harmonic
        self.waveform = waveform
        self.started = False
        self.stopped = False

    def start(self):
        self.started = True

    def stop(self) -> bool:
        if self.stopped:
            return False
        self.stopped = True
        return True

    def render(self, num_samples: int, sample_rate: int) -> np.ndarray:
        """Weighted waveform samples for this partial."""
        wave = generate_waveform(self.waveform, self.frequency, num_samples, sample_rate)
        return wave * np.float32(self.gain)

    def __repr__(self) -> str:
        return f"Oscillator(frequency={self.frequency:.2f}, gain={self.gain}, harmonic={self.harmonic})"


def pluck_automation(preset: PluckPreset, duration: float) -> List[AutomationEvent]:
    """
    Build envelope and filter directives for one pluck.

    Gain: 0 -> peak (linear, attack_time), exponential to peak*decay_level
    by decay_time, exponential to peak*sustain_level at sustain_point of the
    duration, exponential release to floor_level at the end. Breakpoints are
    clamped to stay in time order for short notes.

    Cutoff: cutoff_start at the pluck, exponential to cutoff_end at the end.

    Args:
        preset: Timbre constants
        duration: Note length in seconds (> 0)

    Returns:
        Automation events for the "gain" and "cutoff" parameters
    """
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")

    peak = preset.peak_gain
    attack_end = min(preset.attack_time, duration * 0.25)
    decay_end = max(attack_end, min(preset.decay_time, duration * 0.4))
    sustain_end = max(decay_end, duration * preset.sustain_point)

    return [
        AutomationEvent("gain", "set", 0.0, 0.0),
        AutomationEvent("gain", "linear", peak, attack_end),
        AutomationEvent("gain", "exponential", peak * preset.decay_level, decay_end),
        AutomationEvent("gain", "exponential", peak * preset.sustain_level, sustain_end),
        AutomationEvent("gain", "exponential", preset.floor_level, duration),
        AutomationEvent("cutoff", "set", preset.cutoff_start, 0.0),
        AutomationEvent("cutoff", "exponential", preset.cutoff_end, duration),
    ]


class PluckSynth:
    """Renders plucked-string voices to mono buffers."""

    def __init__(self, sample_rate: int = 44100, preset: PluckPreset = DEFAULT_PRESET):
        """
        Initialize synth.

        Args:
            sample_rate: Audio sample rate in Hz
            preset: Timbre constants
        """
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self.preset = preset

    def create_oscillators(self, frequency: float) -> Tuple[Oscillator, ...]:
        """
        Build the harmonic stack for a fundamental frequency.

        Args:
            frequency: Fundamental in Hz

        Returns:
            One oscillator per preset partial
        """
        return tuple(
            Oscillator(frequency * harmonic, weight, harmonic, self.preset.waveform)
            for harmonic, weight in self.preset.partials
        )

    def num_samples(self, duration: float) -> int:
        return max(1, int(round(duration * self.sample_rate)))

    def render(self, oscillators: Tuple[Oscillator, ...], duration: float) -> np.ndarray:
        """
        Render a voice.

        All oscillators start at sample 0 and end exactly at duration.

        Args:
            oscillators: Harmonic stack from create_oscillators()
            duration: Note length in seconds

        Returns:
            Mono float32 buffer of duration * sample_rate samples
        """
        automation = pluck_automation(self.preset, duration)
        n = self.num_samples(duration)

        mix = np.zeros(n, dtype=np.float32)
        for osc in oscillators:
            osc.start()
            mix += osc.render(n, self.sample_rate)

        cutoff = render_automation(automation, n, self.sample_rate, param="cutoff")
        filtered = time_varying_lowpass(mix, cutoff, self.sample_rate)

        gain = render_automation(automation, n, self.sample_rate, param="gain")
        return (filtered * gain).astype(np.float32)
