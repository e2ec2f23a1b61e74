import pytest
from pydantic import ValidationError
from image_to_sound.models import HSV, RGB, AudioParameters, ColorInfo, Waveform


def test_rgb_as_tuple(valid_rgb):
    assert valid_rgb.as_tuple() == (255, 128, 0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"r": -1, "g": 0, "b": 0},
        {"r": 0, "g": 256, "b": 0},
        {"r": 0, "g": 0, "b": 300},
    ],
)
def test_rgb_validation_raises(kwargs):
    with pytest.raises(ValidationError):
        RGB(**kwargs)


def test_rgb_is_frozen(valid_rgb):
    with pytest.raises(ValidationError):
        valid_rgb.r = 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"h": 360.0, "s": 0.0, "v": 0.0},
        {"h": -0.1, "s": 0.0, "v": 0.0},
        {"h": 0.0, "s": 100.1, "v": 0.0},
        {"h": 0.0, "s": 0.0, "v": -1.0},
    ],
)
def test_hsv_validation_raises(kwargs):
    with pytest.raises(ValidationError):
        HSV(**kwargs)


def test_hsv_rounded_wraps_hue():
    assert HSV(h=359.7, s=49.6, v=10.2).rounded() == (0, 50, 10)
    assert HSV(h=30.0, s=100.0, v=100.0).rounded() == (30, 100, 100)


def test_waveform_rank_order():
    assert [w.rank for w in Waveform] == [0, 1, 2, 3]
    assert Waveform.SINE.value == "sine"
    assert Waveform.SQUARE.rank == 3


def test_audio_parameters_defaults():
    audio = AudioParameters(frequency=220.0, volume=0.3, attack=0.01, release=0.1)
    assert audio.waveform == Waveform.SINE
    assert audio.pan == 0.0
    assert audio.timbre is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frequency": 0.0, "volume": 0.5, "attack": 0.1, "release": 0.1},
        {"frequency": 440.0, "volume": 1.5, "attack": 0.1, "release": 0.1},
        {"frequency": 440.0, "volume": 0.5, "attack": 0.0, "release": 0.1},
        {"frequency": 440.0, "volume": 0.5, "attack": 0.1, "release": 0.1, "pan": 2.0},
    ],
)
def test_audio_parameters_validation_raises(kwargs):
    with pytest.raises(ValidationError):
        AudioParameters(**kwargs)


def test_color_info_holds_parts(valid_hsv, valid_rgb, valid_audio):
    info = ColorInfo(hsv=valid_hsv, rgb=valid_rgb, audio=valid_audio)
    assert info.description == ""
    assert info.note_name == ""
    assert info.audio.timbre.harmonic_count == 4
