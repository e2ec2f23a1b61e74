import numpy as np
import pytest

from image_to_sound.audio_backend import AudioBackend
from image_to_sound.exceptions import AudioBackendError
from image_to_sound.models import GridParams, VoicePoolParams
from image_to_sound.pixel_grid import PixelGrid
from image_to_sound.scheduler import Scheduler
from image_to_sound.sound_mapper import SoundMapper
from image_to_sound.voice_pool import VoicePool


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0):
        self.time = start

    def __call__(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds


class RecordingBackend(AudioBackend):
    """Backend that records every command instead of making sound."""

    def __init__(self, fail_on_start: bool = False):
        self.fail_on_start = fail_on_start
        self.started: list[tuple[int, object, float | None]] = []
        self.released: list[int] = []
        self.gains: list[float] = []
        self.close_calls = 0
        self._running = False

    def start(self) -> None:
        if self.fail_on_start:
            raise AudioBackendError("no audio device")
        self._running = True

    def start_voice(self, voice_id, params, duration=None) -> None:
        self.started.append((voice_id, params, duration))

    def release_voice(self, voice_id) -> None:
        self.released.append(voice_id)

    def set_master_gain(self, gain) -> None:
        self.gains.append(gain)

    def close(self) -> None:
        self.close_calls += 1
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running


@pytest.fixture
def small_rgb_image():
    # 2×2 RGB image: red, green, blue, black
    img = np.array(
        [[[255, 0, 0], [0, 255, 0]], [[0, 0, 255], [0, 0, 0]]], dtype=np.uint8
    )
    return img


@pytest.fixture
def checkerboard_image():
    # 100×100 image with four 50×50 quadrants: red, green / blue, white
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:50, :50] = (255, 0, 0)
    img[:50, 50:] = (0, 255, 0)
    img[50:, :50] = (0, 0, 255)
    img[50:, 50:] = (255, 255, 255)
    return img


@pytest.fixture
def rainbow_image():
    # 400×500 image of eight vertical stripes with distinct hues
    img = np.zeros((500, 400, 3), dtype=np.uint8)
    colors = [
        (255, 0, 0),
        (255, 128, 0),
        (255, 255, 0),
        (0, 255, 0),
        (0, 255, 255),
        (0, 0, 255),
        (128, 0, 255),
        (255, 0, 255),
    ]
    for i, color in enumerate(colors):
        img[:, i * 50 : (i + 1) * 50] = color
    return img


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def failing_backend():
    return RecordingBackend(fail_on_start=True)


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def mapper():
    return SoundMapper()


@pytest.fixture
def pool(mapper, backend, scheduler):
    p = VoicePool(
        mapper=mapper, backend=backend, params=VoicePoolParams(), scheduler=scheduler
    )
    p.initialize()
    return p


@pytest.fixture
def grid():
    return PixelGrid(GridParams())
