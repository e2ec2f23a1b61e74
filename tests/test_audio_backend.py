import sys
import types

import numpy as np
import pytest
from image_to_sound.audio_backend import MixerBackend, NullBackend, SoundDeviceBackend
from image_to_sound.exceptions import AudioBackendError
from image_to_sound.models import AudioParameters, SynthParams


@pytest.fixture
def mixer():
    backend = MixerBackend(SynthParams(sample_rate=8000, reverb_wet=0.0), master_gain=1.0)
    backend.start()
    return backend


@pytest.fixture
def tone():
    return AudioParameters(frequency=440.0, volume=0.5, attack=0.01, release=0.05)


def test_null_backend_lifecycle():
    backend = NullBackend()
    backend.start()
    assert backend.is_running
    backend.start_voice(1, None)
    backend.release_voice(1)
    backend.close()
    backend.close()
    assert not backend.is_running


def test_mixer_renders_silence_without_voices(mixer):
    block = mixer.render(128)
    assert block.shape == (2, 128)
    assert block.dtype == np.float32
    assert not block.any()


def test_mixer_drops_released_voices(mixer, tone):
    mixer.start_voice(1, tone)
    mixer.start_voice(2, tone)
    assert np.abs(mixer.render(256)).max() > 0.0
    mixer.release_voice(1)
    mixer.release_voice(99)
    for _ in range(4):
        mixer.render(256)
    assert mixer.voice_count == 1


def test_mixer_voice_with_duration_ends(mixer, tone):
    mixer.start_voice(1, tone, duration=0.05)
    for _ in range(10):
        mixer.render(256)
    assert mixer.voice_count == 0


def test_mixer_master_gain(mixer, tone):
    mixer.set_master_gain(0.0)
    mixer.start_voice(1, tone)
    assert not mixer.render(128).any()


def test_mixer_close_silences(mixer, tone):
    mixer.start_voice(1, tone)
    mixer.close()
    assert mixer.voice_count == 0
    assert not mixer.is_running


def test_sound_device_start_failure_is_wrapped(monkeypatch):
    fake = types.ModuleType("sounddevice")

    def failing_stream(**kwargs):
        raise RuntimeError("no default output device")

    fake.OutputStream = failing_stream
    monkeypatch.setitem(sys.modules, "sounddevice", fake)

    backend = SoundDeviceBackend()
    with pytest.raises(AudioBackendError):
        backend.start()
    assert not backend.is_running


def test_sound_device_stream_pulls_from_mixer(monkeypatch, tone):
    class FakeStream:
        def __init__(self, **kwargs):
            self.kwargs = kwargs
            self.active = False

        def start(self):
            self.active = True

        def stop(self):
            self.active = False

        def close(self):
            pass

    fake = types.ModuleType("sounddevice")
    fake.OutputStream = FakeStream
    monkeypatch.setitem(sys.modules, "sounddevice", fake)

    backend = SoundDeviceBackend(SynthParams(sample_rate=8000, block_size=64), master_gain=1.0)
    backend.start()
    stream = backend._stream
    assert stream.active
    assert stream.kwargs["channels"] == 2
    assert stream.kwargs["samplerate"] == 8000

    backend.start_voice(1, tone)
    out = np.zeros((64, 2), dtype=np.float32)
    stream.kwargs["callback"](out, 64, None, None)
    assert np.abs(out).max() > 0.0

    backend.close()
    assert not stream.active
    assert not backend.is_running
