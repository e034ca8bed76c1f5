"""Tests for voice registry and playback policies."""
import logging

import pytest

from audio.engine import AudioBackendError
from audio.synth import PluckSynth
from audio.voice_manager import VoiceManager
from core.models import InvalidNoteError, Note

NOTE_A = Note("A", 2)
NOTE_B = Note("B", 3)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeEngine:
    def __init__(self, fail=False):
        self.fail = fail
        self.opened = False
        self.closed = False
        self.scheduled = []
        self.cancelled = []

    def open(self):
        if self.fail:
            raise AudioBackendError("no output device")
        self.opened = True

    def schedule(self, buffer):
        self.scheduled.append(buffer)
        return len(self.scheduled)

    def cancel(self, playback_id):
        self.cancelled.append(playback_id)
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def manager(engine, clock):
    return VoiceManager(synth=PluckSynth(sample_rate=8000),
                        engine_factory=lambda: engine, clock=clock)


def test_engine_opened_lazily(manager, engine):
    assert not engine.opened
    manager.play(NOTE_A, 0.3)
    assert engine.opened


def test_voice_fields(manager, engine, clock):
    voice = manager.play(NOTE_A, 0.8)

    assert voice.note == NOTE_A
    assert voice.frequency == pytest.approx(110.0)
    assert voice.start_time == clock.now
    assert voice.stop_time == pytest.approx(clock.now + 0.8)
    assert voice.duration == pytest.approx(0.8)
    assert [o.frequency for o in voice.oscillators] == pytest.approx([110.0, 220.0, 330.0])
    assert len(engine.scheduled[0]) == int(0.8 * 8000)


def test_accepts_note_text(manager):
    voice = manager.play("E4", 0.2)
    assert voice.note == Note("E", 4)


def test_monophonic_retrigger(manager, engine):
    first = manager.play(NOTE_A, 0.8, stop_previous=True)
    second = manager.play(NOTE_B, 0.8, stop_previous=True)

    assert manager.active_voices == (second,)
    assert len(manager) == 1
    assert first.stopped
    assert all(o.stopped for o in first.oscillators)
    assert not second.stopped
    assert engine.cancelled == [first.playback_id]


def test_polyphonic_overlap(manager, engine, clock):
    first = manager.play(NOTE_A, 0.8, stop_previous=False)
    second = manager.play(NOTE_B, 0.8, stop_previous=False)

    assert manager.active_voices == (first, second)
    clock.advance(0.5)
    assert manager.prune() == 0
    assert len(manager) == 2

    clock.advance(0.4)
    assert manager.prune() == 2
    assert len(manager) == 0
    assert engine.cancelled == []


def test_independent_durations(manager, clock):
    manager.play(NOTE_A, 0.8)
    long_voice = manager.play(NOTE_B, 2.0)

    clock.advance(1.0)
    manager.prune()
    assert manager.active_voices == (long_voice,)


def test_play_prunes_expired_voices(manager, clock):
    old = manager.play(NOTE_A, 0.2)
    clock.advance(0.3)
    new = manager.play(NOTE_B, 0.2)

    assert manager.active_voices == (new,)
    assert old.stopped


def test_monophonic_skips_expired_voices(manager, engine, clock):
    manager.play(NOTE_A, 0.2)
    clock.advance(0.5)
    manager.play(NOTE_B, 0.8, stop_previous=True)

    # Expired voice was reaped, not cancelled
    assert engine.cancelled == []
    assert len(manager) == 1


def test_stop_is_idempotent(manager, engine):
    voice = manager.play(NOTE_A, 0.8)

    assert manager.stop(voice) is True
    assert manager.stop(voice) is False
    assert len(manager) == 0
    assert engine.cancelled == [voice.playback_id]


def test_stop_after_natural_end(manager, engine, clock):
    voice = manager.play(NOTE_A, 0.8)
    clock.advance(1.0)

    assert manager.stop(voice) is False
    assert voice.stopped
    assert engine.cancelled == []
    assert len(manager) == 0

    # Pruning afterwards stays consistent
    assert manager.prune() == 0


def test_stop_all(manager, engine, clock):
    expired = manager.play(NOTE_A, 0.1)
    clock.advance(0.2)
    a = manager.play(NOTE_A, 0.8)
    b = manager.play(NOTE_B, 0.8)

    assert manager.stop_all() == 2
    assert len(manager) == 0
    assert sorted(engine.cancelled) == sorted([a.playback_id, b.playback_id])
    assert expired.playback_id not in engine.cancelled
    assert manager.stop_all() == 0


def test_invalid_input(manager):
    with pytest.raises(InvalidNoteError):
        manager.play("H2", 0.5)
    with pytest.raises(ValueError):
        manager.play(NOTE_A, 0)
    assert len(manager) == 0


def test_backend_failure_degrades_to_silence_once(clock, caplog):
    created = []

    def factory():
        engine = FakeEngine(fail=True)
        created.append(engine)
        return engine

    manager = VoiceManager(synth=PluckSynth(sample_rate=8000),
                           engine_factory=factory, clock=clock)

    with caplog.at_level(logging.WARNING):
        assert manager.play(NOTE_A, 0.5) is None
        assert manager.play(NOTE_B, 0.5, stop_previous=True) is None
        assert manager.play(NOTE_A, 0.5) is None

    assert manager.is_silent
    assert len(created) == 1
    assert len(manager) == 0
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "no output device" in warnings[0].getMessage()

    # Still fails fast on caller bugs
    with pytest.raises(InvalidNoteError):
        manager.play("Z9", 0.5)
    manager.stop_all()
    manager.close()


def test_close(manager, engine):
    voice = manager.play(NOTE_A, 0.8)
    manager.close()

    assert voice.stopped
    assert engine.closed
    assert len(manager) == 0


def test_from_settings():
    settings = {
        "audio": {"sample_rate": 22050, "buffer_size": 256, "output_device": "Default"},
        "synth": {"peak_gain": 0.5},
    }
    manager = VoiceManager.from_settings(settings)

    assert manager.synth.sample_rate == 22050
    assert manager.synth.preset.peak_gain == 0.5
    engine = manager._engine_factory()
    assert engine.sample_rate == 22050
    assert engine.buffer_size == 256
    assert engine.device is None
