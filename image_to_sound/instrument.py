"""Session facade wiring the grid, the mapper, the voice pool and the controller.

A presentation layer (a canvas widget, a notebook, a test) drives one
``Instrument``: it feeds images and pointer events in, calls ``tick`` from its
event loop, and reads ``state()`` and ``color_info_at`` back for display.
"""

import logging
from typing import Callable

import numpy as np

from image_to_sound.audio_backend import AudioBackend, SoundDeviceBackend
from image_to_sound.interaction import InteractionController
from image_to_sound.models import ColorInfo, Grid, InstrumentSettings, InstrumentState
from image_to_sound.pixel_grid import PixelGrid
from image_to_sound.scheduler import Scheduler
from image_to_sound.sound_mapper import SoundMapper
from image_to_sound.voice_pool import VoicePool

logger = logging.getLogger(__name__)


class Instrument:
    """An image turned into a playable instrument.

    Audio is initialized lazily the first time playing is switched on, so
    creating an instrument never touches the sound device.

    Args:
        settings: Configuration for every component. Defaults apply when omitted.
        backend: Audio output. Defaults to the default sound device.
        clock: Time source for scheduled onsets and releases.

    Attributes:
        settings: The active configuration.
        grid: Pixel grid over the loaded image.
        mapper: HSV to audio mapping.
        pool: Voice pool playing the mapped colors.
        controller: Pointer interaction handler.
    """

    def __init__(
        self,
        settings: InstrumentSettings | None = None,
        backend: AudioBackend | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.settings = settings or InstrumentSettings()
        self.grid = PixelGrid(self.settings.grid)
        self.mapper = SoundMapper(self.settings.mapper)
        if backend is None:
            backend = SoundDeviceBackend(
                synth=self.settings.synth,
                master_gain=self.settings.voices.master_volume,
            )
        scheduler = Scheduler(clock) if clock is not None else Scheduler()
        self.pool = VoicePool(
            mapper=self.mapper,
            backend=backend,
            params=self.settings.voices,
            scheduler=scheduler,
        )
        self.controller = InteractionController(self.grid, self.pool)

    # ------------------------------------------------------------------
    # Image
    # ------------------------------------------------------------------

    def load_image_bytes(self, data: bytes) -> Grid:
        """Decode and grid an encoded image (PNG, JPEG, ...).

        Raises:
            ImageLoadError: If the data cannot be decoded.
        """
        self.controller.reset()
        return self.grid.load_image_bytes(data)

    def load_image(self, image: np.ndarray) -> Grid:
        """Grid an already decoded image array.

        Raises:
            ImageLoadError: If the array has an unsupported shape.
        """
        self.controller.reset()
        return self.grid.load_image(image)

    def set_cell_size(self, size: int) -> None:
        """Change the cell size; the grid is rebuilt and scan state reset."""
        self.controller.reset()
        self.grid.set_cell_size(size)

    def color_info_at(self, x: float, y: float) -> ColorInfo | None:
        """Describe the cell under a canvas position, or None off the image."""
        image_x, image_y = self.grid.canvas_to_image(x, y)
        cell = self.grid.cell_at(image_x, image_y)
        if cell is None:
            return None
        return self.mapper.color_info(cell.hsv)

    # ------------------------------------------------------------------
    # Sound settings
    # ------------------------------------------------------------------

    def set_scale(self, scale_name: str) -> None:
        self.mapper.set_scale(scale_name)

    def set_base_frequency(self, frequency: float) -> None:
        self.mapper.set_base_frequency(frequency)

    def set_master_volume(self, volume: float) -> None:
        self.pool.set_master_volume(volume)

    def set_mode(self, mode: str) -> None:
        self.controller.set_mode(mode)

    def toggle_mode(self) -> str:
        return self.controller.toggle_mode()

    def toggle_playing(self) -> bool:
        """Start or stop playing; the first start initializes audio.

        Returns:
            Whether the instrument is playing afterwards.
        """
        playing = not self.controller.playing
        if playing and not self.pool.ready:
            self.pool.initialize()
        self.controller.set_playing(playing)
        logger.info(f"Playing {'started' if playing else 'stopped'}")
        return playing

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def pointer_press(self, x: float, y: float) -> str | None:
        return self.controller.pointer_press(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        self.controller.pointer_move(x, y)

    def pointer_release(self) -> None:
        self.controller.pointer_release()

    def pointer_exit(self) -> None:
        self.controller.pointer_exit()

    def tick(self) -> int:
        """Run due scheduled onsets and releases. Call from the event loop."""
        return self.pool.tick()

    # ------------------------------------------------------------------
    # Reporting and teardown
    # ------------------------------------------------------------------

    def state(self) -> InstrumentState:
        return InstrumentState(
            ready=self.pool.ready,
            playing=self.controller.playing,
            mode=self.controller.mode,
            cell_size=self.grid.cell_size,
            has_image=self.grid.has_image(),
            live_voices=self.pool.live_count,
            scan_column=self.controller.scan_column,
        )

    def dispose(self) -> None:
        """Stop all sound and release the audio output. Safe to call twice."""
        self.controller.set_playing(False)
        self.pool.dispose()
