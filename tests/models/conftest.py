import pytest
from image_to_sound.models import HSV, RGB, AudioParameters, Timbre


@pytest.fixture
def valid_rgb():
    return RGB(r=255, g=128, b=0)


@pytest.fixture
def valid_hsv():
    return HSV(h=30.0, s=100.0, v=100.0)


@pytest.fixture
def valid_audio():
    return AudioParameters(
        frequency=440.0,
        volume=0.5,
        attack=0.05,
        release=0.5,
        timbre=Timbre(harmonic_count=4, filter_cutoff=1000.0, resonance=0.2),
    )
