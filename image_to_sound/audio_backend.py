"""
Audio output backends.

The voice pool talks to sound hardware only through the small
``AudioBackend`` interface defined here:

- ``MixerBackend`` renders and mixes voices block by block and can be pulled
  directly (offline rendering, tests).
- ``SoundDeviceBackend`` streams the mixer to the default output device with
  ``sounddevice``; mixing runs on the stream's callback thread.
- ``NullBackend`` produces no sound.
"""

import logging
import threading
from abc import ABC, abstractmethod

import numpy as np

from image_to_sound.exceptions import AudioBackendError
from image_to_sound.models import AudioParameters, SynthParams
from image_to_sound.synthesis import MasterBus, SynthVoice

logger = logging.getLogger(__name__)


class AudioBackend(ABC):
    """Interface between the voice pool and an audio output."""

    @abstractmethod
    def start(self) -> None:
        """Open the output. Raises AudioBackendError on failure."""

    @abstractmethod
    def start_voice(
        self, voice_id: int, params: AudioParameters, duration: float | None = None
    ) -> None:
        """Begin sounding a voice; ``duration`` schedules its release."""

    @abstractmethod
    def release_voice(self, voice_id: int) -> None:
        """Trigger the release envelope of a voice. Unknown ids are ignored."""

    @abstractmethod
    def set_master_gain(self, gain: float) -> None:
        """Set the gain of the shared output stage."""

    @abstractmethod
    def close(self) -> None:
        """Silence every voice and release the output. Safe to call twice."""

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the output is open."""


class NullBackend(AudioBackend):
    """Backend that accepts every command and produces no sound."""

    def __init__(self):
        self._running = False

    def start(self) -> None:
        self._running = True

    def start_voice(
        self, voice_id: int, params: AudioParameters, duration: float | None = None
    ) -> None:
        pass

    def release_voice(self, voice_id: int) -> None:
        pass

    def set_master_gain(self, gain: float) -> None:
        pass

    def close(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running


class MixerBackend(AudioBackend):
    """Software mixer that renders voices through the shared master bus.

    Voices keep rendering through their release tail after
    ``release_voice`` and are dropped once silent.

    Args:
        synth: Synthesis settings (sample rate, block size, envelope, reverb).
        master_gain: Initial gain of the output stage.
    """

    def __init__(self, synth: SynthParams | None = None, master_gain: float = 0.3):
        self.synth = synth or SynthParams()
        self.bus = MasterBus(self.synth, gain=master_gain)
        self._lock = threading.RLock()
        self._voices: dict[int, SynthVoice] = {}
        self._running = False

    def start(self) -> None:
        self._running = True

    def start_voice(
        self, voice_id: int, params: AudioParameters, duration: float | None = None
    ) -> None:
        voice = SynthVoice(params, self.synth, duration=duration)
        with self._lock:
            self._voices[voice_id] = voice

    def release_voice(self, voice_id: int) -> None:
        with self._lock:
            voice = self._voices.get(voice_id)
            if voice is not None:
                voice.release()

    def set_master_gain(self, gain: float) -> None:
        with self._lock:
            self.bus.gain = gain

    def render(self, frames: int) -> np.ndarray:
        """Mix the next ``frames`` samples of every voice.

        Returns:
            A (2, frames) float32 block after reverb and master gain.
        """
        block = np.zeros((2, frames))
        with self._lock:
            for voice_id, voice in list(self._voices.items()):
                block += voice.render(frames)
                if voice.finished:
                    del self._voices[voice_id]
            out = self.bus.process(block)
        return out.astype(np.float32)

    @property
    def voice_count(self) -> int:
        """Voices still rendering, including release tails."""
        with self._lock:
            return len(self._voices)

    def close(self) -> None:
        with self._lock:
            self._voices.clear()
            self.bus.reset()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running


class SoundDeviceBackend(MixerBackend):
    """Real-time output through a ``sounddevice`` stereo stream.

    The stream pulls blocks from the mixer on its own callback thread; the
    mixer lock is the only state shared with the caller's thread.
    """

    def __init__(
        self,
        synth: SynthParams | None = None,
        master_gain: float = 0.3,
        device: int | str | None = None,
    ):
        super().__init__(synth, master_gain)
        self.device = device
        self._stream = None

    def start(self) -> None:
        if self._stream is not None:
            return
        try:
            # PortAudio is loaded on import, so a missing library surfaces here
            import sounddevice as sd

            def _callback(outdata, frames, time, status):
                if status:
                    logger.debug(f"Audio stream status: {status}")
                outdata[:] = self.render(frames).T

            self._stream = sd.OutputStream(
                samplerate=self.synth.sample_rate,
                channels=2,
                dtype="float32",
                blocksize=self.synth.block_size,
                device=self.device,
                callback=_callback,
            )
            self._stream.start()
        except Exception as e:
            self._stream = None
            raise AudioBackendError(f"Failed to start audio output: {e}") from e

        super().start()
        logger.info(
            f"Audio output started at {self.synth.sample_rate} Hz, "
            f"block size {self.synth.block_size}"
        )

    def close(self) -> None:
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.error(f"Error while closing audio stream: {e}")
            self._stream = None
        super().close()
