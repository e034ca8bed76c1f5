"""
Audio output engine.

Architecture:
- UI thread: renders voice buffers and schedules them
- PortAudio thread: sounddevice callback mixes every scheduled buffer
- Communication: playback table guarded by a lock
"""
import logging
import threading
from typing import Dict, Optional, Any

import numpy as np

from audio.dsp import fade_out, peak_level, stereo_from_mono

logger = logging.getLogger(__name__)


class AudioBackendError(RuntimeError):
    """Raised when the audio output device cannot be opened."""


class AudioEngine:
    """
    Output stream that plays scheduled mono buffers.

    Manages:
    - Audio device I/O via a sounddevice OutputStream
    - Mixing of overlapping playbacks
    - Early cancellation with a short fade
    """

    FADE_TIME = 0.005  # seconds
    HEADROOM = 0.8

    def __init__(self, sample_rate: int = 44100, buffer_size: int = 512,
                 device: Optional[Any] = None):
        """
        Initialize audio engine.

        Args:
            sample_rate: Audio sample rate (Hz)
            buffer_size: Audio buffer size (frames)
            device: sounddevice output device (None or "Default" for the system default)
        """
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.device = None if device in (None, "Default") else device

        self._stream = None
        self._lock = threading.Lock()
        self._playbacks: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def active_count(self) -> int:
        """Number of playbacks still producing audio."""
        with self._lock:
            return len(self._playbacks)

    def open(self):
        """
        Open and start the output stream.

        Raises:
            AudioBackendError: If sounddevice/PortAudio is unavailable or the
                device cannot be opened
        """
        if self._stream is not None:
            return

        try:
            import sounddevice as sd

            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                blocksize=self.buffer_size,
                channels=2,
                dtype='float32',
                latency='low',
                device=self.device,
                callback=self._callback
            )
            stream.start()
        except Exception as e:
            raise AudioBackendError(f"Failed to open audio output: {e}") from e

        self._stream = stream
        logger.info("[AUDIO] Output stream opened (%d Hz, %d frames)",
                    self.sample_rate, self.buffer_size)

    def close(self):
        """Stop the stream and drop all playbacks."""
        stream, self._stream = self._stream, None
        with self._lock:
            self._playbacks.clear()

        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as e:
            logger.warning("[AUDIO] Error closing output stream: %s", e)

    def schedule(self, buffer: np.ndarray) -> int:
        """
        Queue a mono buffer to start on the next audio callback.

        Args:
            buffer: Mono float32 audio

        Returns:
            Playback id for cancel()
        """
        audio = np.asarray(buffer, dtype=np.float32)
        with self._lock:
            playback_id = self._next_id
            self._next_id += 1
            self._playbacks[playback_id] = {
                'audio': audio,
                'position': 0,
                'cancelled': False,
            }
        return playback_id

    def cancel(self, playback_id: int) -> bool:
        """
        Stop a playback now with a short fade.

        Args:
            playback_id: Id returned by schedule()

        Returns:
            True if the playback was still sounding, False otherwise
        """
        fade_samples = int(self.FADE_TIME * self.sample_rate)
        with self._lock:
            playback = self._playbacks.get(playback_id)
            if playback is None or playback['cancelled']:
                return False

            remaining = playback['audio'][playback['position']:]
            playback['audio'] = fade_out(remaining, fade_samples)
            playback['position'] = 0
            playback['cancelled'] = True
            if len(playback['audio']) == 0:
                del self._playbacks[playback_id]
        return True

    def _callback(self, outdata, frames, time_info, status):
        """Sounddevice callback for audio output."""
        if status:
            logger.debug("[AUDIO] Stream status: %s", status)

        mixed = np.zeros(frames, dtype=np.float32)

        with self._lock:
            finished = []
            for playback_id, playback in self._playbacks.items():
                audio = playback['audio']
                position = playback['position']
                to_copy = min(frames, len(audio) - position)
                if to_copy > 0:
                    mixed[:to_copy] += audio[position:position + to_copy]
                    playback['position'] = position + to_copy
                if playback['position'] >= len(audio):
                    finished.append(playback_id)

            for playback_id in finished:
                del self._playbacks[playback_id]

        # Normalize to prevent clipping
        peak = peak_level(mixed)
        if peak > self.HEADROOM:
            mixed = mixed / peak * self.HEADROOM

        outdata[:] = stereo_from_mono(mixed)
