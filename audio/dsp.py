"""
DSP utilities and building blocks.

Waveforms, parameter automation, filters and level helpers.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional

import numpy as np
from scipy.signal import butter, sosfilt, sosfilt_zi

WAVEFORMS = ("SINE", "SQUARE", "SAW", "TRIANGLE")

AUTOMATION_KINDS = ("set", "linear", "exponential")

# Cutoff grid for cached lowpass designs
CUTOFF_STEPS_PER_OCTAVE = 48


@dataclass(frozen=True)
class AutomationEvent:
    """
    One scheduled parameter change.

    Mirrors the "set value now, ramp to value at a future time" model:
    a ramp runs from the previous event's value and time to this event's.

    Attributes:
        param: Parameter name (e.g., "gain", "cutoff")
        kind: "set", "linear" or "exponential"
        value: Target value
        time: Time offset from voice start in seconds
    """
    param: str
    kind: str
    value: float
    time: float

    def __post_init__(self):
        """Validate automation event."""
        if self.kind not in AUTOMATION_KINDS:
            raise ValueError(f"Invalid automation kind: {self.kind}")
        if self.time < 0:
            raise ValueError(f"Automation time must be non-negative, got {self.time}")
        if self.kind == "exponential" and self.value <= 0:
            raise ValueError(f"Exponential ramp target must be positive, got {self.value}")


def generate_waveform(waveform_type: str, frequency: float,
                      num_samples: int, sample_rate: int) -> np.ndarray:
    """
    Generate waveform samples.

    Args:
        waveform_type: Type of waveform (SINE, SQUARE, SAW, TRIANGLE)
        frequency: Frequency in Hz
        num_samples: Number of samples to generate
        sample_rate: Sample rate in Hz

    Returns:
        Waveform samples in [-1, 1]
    """
    t = np.arange(num_samples) / sample_rate
    phase = 2 * np.pi * frequency * t

    if waveform_type == "SINE":
        return np.sin(phase).astype(np.float32)
    elif waveform_type == "SQUARE":
        return np.sign(np.sin(phase)).astype(np.float32)
    elif waveform_type == "SAW":
        return (2.0 * ((frequency * t) % 1.0) - 1.0).astype(np.float32)
    elif waveform_type == "TRIANGLE":
        return (2.0 * np.abs(2.0 * ((frequency * t) % 1.0) - 1.0) - 1.0).astype(np.float32)
    else:
        raise ValueError(f"Unknown waveform type: {waveform_type}")


def render_automation(events: Iterable[AutomationEvent], num_samples: int,
                      sample_rate: int, param: Optional[str] = None) -> np.ndarray:
    """
    Render a list of automation events into a per-sample curve.

    The value before the first event is the first event's value and the
    value after the last event holds.

    Args:
        events: Automation events (any order; sorted by time, stable)
        num_samples: Length of the curve
        sample_rate: Sample rate in Hz
        param: Only render events for this parameter (all events if None)

    Returns:
        Curve as float64 array

    Raises:
        ValueError: If there are no events, or an exponential ramp starts
            from a non-positive value
    """
    selected: List[AutomationEvent] = [
        e for e in events if param is None or e.param == param
    ]
    if not selected:
        raise ValueError(f"No automation events for parameter {param!r}")
    selected.sort(key=lambda e: e.time)

    t = np.arange(num_samples) / sample_rate
    curve = np.full(num_samples, selected[0].value, dtype=np.float64)

    prev_time = 0.0
    prev_value = selected[0].value

    for event in selected:
        span = event.time - prev_time
        if event.kind != "set" and span > 0:
            mask = (t >= prev_time) & (t < event.time)
            progress = (t[mask] - prev_time) / span
            if event.kind == "linear":
                curve[mask] = prev_value + (event.value - prev_value) * progress
            else:
                if prev_value <= 0:
                    raise ValueError(
                        f"Exponential ramp on {event.param!r} must start from a positive value")
                curve[mask] = prev_value * (event.value / prev_value) ** progress

        curve[t >= event.time] = event.value
        prev_time = event.time
        prev_value = event.value

    return curve


@lru_cache(maxsize=1024)
def _lowpass_sos(step: int, sample_rate: int) -> np.ndarray:
    """2nd-order Butterworth lowpass at 2 ** (step / CUTOFF_STEPS_PER_OCTAVE) Hz."""
    freq = min(2.0 ** (step / CUTOFF_STEPS_PER_OCTAVE), 0.5 * sample_rate * 0.99)
    sos = butter(2, freq, btype="low", fs=sample_rate, output="sos")
    sos.setflags(write=False)
    return sos


def time_varying_lowpass(buffer: np.ndarray, cutoff: np.ndarray, sample_rate: int,
                         block_size: int = 256) -> np.ndarray:
    """
    Lowpass filter whose cutoff follows a per-sample curve.

    The buffer is filtered in blocks with a 2nd-order Butterworth section
    for each block's starting cutoff; filter state carries across blocks.
    Cutoffs snap to a 1/48-octave grid whose designs are cached, so a
    sweep costs a handful of butter() calls the first time and none after.

    Args:
        buffer: Mono input audio
        cutoff: Cutoff frequency in Hz per sample (same length as buffer)
        sample_rate: Sample rate in Hz
        block_size: Samples per coefficient update

    Returns:
        Filtered audio (float32)
    """
    if len(cutoff) != len(buffer):
        raise ValueError("Cutoff curve must match buffer length")
    if len(buffer) == 0:
        return np.zeros(0, dtype=np.float32)

    nyquist = 0.5 * sample_rate
    output = np.empty(len(buffer), dtype=np.float64)
    zi = None

    for start in range(0, len(buffer), block_size):
        end = min(start + block_size, len(buffer))
        freq = float(np.clip(cutoff[start], 20.0, nyquist * 0.99))
        sos = _lowpass_sos(int(round(np.log2(freq) * CUTOFF_STEPS_PER_OCTAVE)), sample_rate)
        if zi is None:
            zi = sosfilt_zi(sos) * buffer[0]
        output[start:end], zi = sosfilt(sos, buffer[start:end], zi=zi)

    return output.astype(np.float32)


def fade_out(buffer: np.ndarray, num_samples: int) -> np.ndarray:
    """
    Apply a linear fade to the first num_samples and truncate after it.

    Args:
        buffer: Audio buffer
        num_samples: Fade length in samples

    Returns:
        Faded (and shortened) copy
    """
    num_samples = max(0, min(num_samples, len(buffer)))
    faded = np.array(buffer[:num_samples], dtype=np.float32, copy=True)
    if num_samples > 0:
        faded *= np.linspace(1.0, 0.0, num_samples, dtype=np.float32)
    return faded


def peak_level(buffer: np.ndarray) -> float:
    """
    Calculate peak level of audio buffer.

    Args:
        buffer: Audio buffer

    Returns:
        Peak level (0.0-1.0+)
    """
    if len(buffer) == 0:
        return 0.0
    return float(np.max(np.abs(buffer)))


def stereo_from_mono(buffer_mono: np.ndarray) -> np.ndarray:
    """
    Convert mono buffer to stereo by duplicating channels.

    Args:
        buffer_mono: Mono audio buffer (1D array)

    Returns:
        Stereo audio buffer (frames x 2)
    """
    return np.stack([buffer_mono, buffer_mono], axis=-1)
