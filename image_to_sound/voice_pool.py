"""Bounded pool of sounding voices.

The pool turns colors into sound under three rules:

- at most one voice per key; restarting a key stops the old voice first
- never more than ``max_voices`` voices sounding at once
- every voice it starts is released, either explicitly or by a scheduled
  task (play-once notes)

Scan-mode chords are down-sampled to the cap and their onsets staggered
through the scheduler. Every stop path cancels the matching pending onsets,
so a chord that was abandoned can never start late.
"""

import logging
import math
from dataclasses import dataclass
from functools import partial
from typing import Hashable, Sequence
from uuid import uuid4

from image_to_sound.audio_backend import AudioBackend, SoundDeviceBackend
from image_to_sound.models import HSV, AudioParameters, VoicePoolParams
from image_to_sound.scheduler import Scheduler
from image_to_sound.sound_mapper import SoundMapper

logger = logging.getLogger(__name__)

MODES = ("single", "scan")


def evenly_spaced_indices(count: int, cap: int) -> list[int]:
    """Pick at most ``cap`` evenly spaced indices out of ``count``.

    Uses a stride of ceil(count / cap) starting at index 0, so the result
    never exceeds the cap. When ``count`` is not a multiple of the cap this
    can return fewer than ``cap`` indices (11 items, cap 5 -> 0, 3, 6, 9).

    Args:
        count: Number of requested items.
        cap: Maximum number of items to keep.

    Returns:
        Selected indices in ascending order.
    """
    if count <= 0 or cap <= 0:
        return []
    stride = max(1, math.ceil(count / cap))
    return list(range(0, count, stride))


@dataclass
class Voice:
    """Bookkeeping for one sounding voice.

    Attributes:
        key: Caller-visible identifier.
        voice_id: Backend handle, unique for the lifetime of the pool.
        hsv: Color the voice was started from.
        params: Audio parameters the color mapped to.
        sustained: True for held voices, False for play-once notes.
        started_at: Scheduler time of the onset.
        duration: Length of a play-once note in seconds.
        group: Chord group the voice belongs to, if any.
    """

    key: Hashable
    voice_id: int
    hsv: HSV
    params: AudioParameters
    sustained: bool
    started_at: float
    duration: float | None = None
    group: str | None = None


class VoicePool:
    """Owns every live voice and the audio backend they play through.

    Args:
        mapper: Maps colors to audio parameters.
        backend: Audio output. Defaults to the default sound device.
        params: Voice cap, stagger spacing, note durations, master volume.
        scheduler: Queue for deferred onsets and automatic releases.
    """

    def __init__(
        self,
        mapper: SoundMapper | None = None,
        backend: AudioBackend | None = None,
        params: VoicePoolParams | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.mapper = mapper if mapper is not None else SoundMapper()
        self.params = params if params is not None else VoicePoolParams()
        self.backend = (
            backend
            if backend is not None
            else SoundDeviceBackend(master_gain=self.params.master_volume)
        )
        self.scheduler = scheduler if scheduler is not None else Scheduler()

        self._voices: dict[Hashable, Voice] = {}
        self._group_keys: dict[str, list[Hashable]] = {}
        self._next_id = 0
        self._mode = "single"
        self._master_volume = self.params.master_volume
        self._ready = False
        self._audio_available = False
        self._disposed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Start the audio backend once.

        A failing backend is logged and left alone: the pool still reports
        itself ready so callers are not blocked, and every later play call
        becomes a no-op.
        """
        if self._ready or self._disposed:
            return
        try:
            self.backend.start()
            self.backend.set_master_gain(self._master_volume)
            self._audio_available = True
            logger.info("Voice pool initialized")
        except Exception as e:
            logger.error(f"Failed to initialize audio backend: {e}")
            self._audio_available = False
        self._ready = True

    def dispose(self) -> None:
        """Stop every voice and close the backend. Safe to call repeatedly."""
        if self._disposed:
            return
        self.stop_all()
        try:
            self.backend.close()
        except Exception as e:
            logger.error(f"Error while closing audio backend: {e}")
        self._disposed = True
        self._audio_available = False
        logger.info("Voice pool disposed")

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def audio_available(self) -> bool:
        return self._audio_available

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> None:
        """Switch between "single" and "scan".

        Switching to "single" stops every voice, including pending chord
        onsets. Unknown modes are ignored.
        """
        if mode not in MODES:
            logger.debug(f"Ignoring unknown mode {mode!r}")
            return
        self._mode = mode
        if mode == "single":
            self.stop_all()

    @property
    def master_volume(self) -> float:
        return self._master_volume

    def set_master_volume(self, volume: float) -> None:
        """Set the master gain, clamped to [0, 1]. Non-numbers are ignored."""
        try:
            value = float(volume)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric master volume {volume!r}")
            return
        if math.isnan(value):
            return
        self._master_volume = max(0.0, min(1.0, value))
        if self._audio_available:
            self.backend.set_master_gain(self._master_volume)

    def note_duration(self, value: float) -> float:
        """Play-once duration for a brightness; brighter notes are shorter."""
        t = max(0.0, min(100.0, value)) / 100.0
        low, high = self.params.min_note_duration, self.params.max_note_duration
        return low + (1.0 - t) * (high - low)

    # ------------------------------------------------------------------
    # Playing
    # ------------------------------------------------------------------

    def play_once(self, hsv: HSV, duration: float | None = None) -> str | None:
        """Play a transient note that releases itself.

        Args:
            hsv: Color to sound.
            duration: Note length in seconds. Defaults to a length derived
                from brightness; non-positive values also use the default.

        Returns:
            The generated voice key, or None if nothing was played.
        """
        if not self._can_play():
            return None

        if duration is None or not math.isfinite(duration) or duration <= 0:
            duration = self.note_duration(hsv.v)

        if not self._make_room(sustained=False):
            return None

        key = f"note_{uuid4().hex}"
        voice = self._start_voice(key, hsv, sustained=False, duration=duration)
        self.scheduler.call_later(
            duration, key, partial(self._expire, key, voice.voice_id)
        )
        return key

    def start_sustained(
        self, hsv: HSV, key: Hashable, group: str | None = None
    ) -> Hashable | None:
        """Start a voice that sounds until stopped.

        A live voice or pending onset on the same key is stopped first.

        Args:
            hsv: Color to sound.
            key: Identifier of the voice.
            group: Optional chord group for ``stop_group``.

        Returns:
            The key, or None if the voice could not be started.
        """
        if not self._can_play():
            return None

        self._release(key)
        if not self._make_room(sustained=True):
            return None

        self._start_voice(key, hsv, sustained=True, group=group)
        return key

    def start_chord(self, colors: Sequence[HSV], group: str) -> list[str]:
        """Start a sustained chord, down-sampled to the voice cap.

        Selected colors are chosen with ``evenly_spaced_indices``. The first
        voice starts immediately and each further one ``stagger_seconds``
        after the previous. A deferred onset only fires while its group is
        still active.

        Args:
            colors: Colors of the chord, e.g. a grid column top to bottom.
            group: Group name; keys are ``f"{group}:{index}"``.

        Returns:
            Keys of the voices started or scheduled.
        """
        if not self._can_play() or not colors:
            return []

        self.stop_group(group)
        selected = evenly_spaced_indices(len(colors), self.params.max_voices)
        keys: list[str] = []
        self._group_keys[group] = keys

        for order, index in enumerate(selected):
            key = f"{group}:{index}"
            delay = order * self.params.stagger_seconds
            if delay <= 0:
                if self.start_sustained(colors[index], key, group=group) is None:
                    continue
            else:
                self.scheduler.call_later(
                    delay,
                    key,
                    partial(self._deferred_onset, group, key, colors[index]),
                )
            keys.append(key)

        if not keys:
            del self._group_keys[group]

        logger.debug(
            f"Chord {group!r}: {len(keys)} of {len(colors)} voices, "
            f"stagger {self.params.stagger_seconds}s"
        )
        return list(keys)

    # ------------------------------------------------------------------
    # Stopping
    # ------------------------------------------------------------------

    def stop(self, key: Hashable) -> None:
        """Release the voice on ``key`` and cancel its pending tasks.

        Stopping an absent or already released key is a no-op.
        """
        voice = self._voices.get(key)
        self._release(key)
        group = voice.group if voice is not None else None
        for group_name, keys in list(self._group_keys.items()):
            if group is not None and group_name != group:
                continue
            if key in keys:
                keys.remove(key)
                if not keys:
                    del self._group_keys[group_name]

    def stop_group(self, group: str) -> int:
        """Stop every live and pending voice of a chord group.

        Returns:
            Number of keys the group held.
        """
        keys = self._group_keys.pop(group, [])
        for key in keys:
            self._release(key)
        return len(keys)

    def stop_all(self) -> None:
        """Cancel every pending task and release every voice."""
        cancelled = self.scheduler.cancel_all()
        released = len(self._voices)
        for key in list(self._voices):
            self._release(key)
        self._group_keys.clear()
        if cancelled or released:
            logger.debug(
                f"Stopped all voices: {released} released, {cancelled} tasks cancelled"
            )

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def tick(self) -> int:
        """Run due onsets and releases; call this from the host event loop."""
        return self.scheduler.run_pending()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def live_count(self) -> int:
        return len(self._voices)

    def live_keys(self) -> list[Hashable]:
        """Keys of sounding voices, oldest first."""
        return list(self._voices)

    def is_live(self, key: Hashable) -> bool:
        return key in self._voices

    def voice(self, key: Hashable) -> Voice | None:
        return self._voices.get(key)

    def pending_keys(self) -> list[Hashable]:
        return self.scheduler.pending_keys()

    def group_keys(self, group: str) -> list[Hashable]:
        return list(self._group_keys.get(group, []))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _can_play(self) -> bool:
        if self._disposed:
            return False
        if not self._ready:
            logger.debug("Voice pool not initialized; ignoring play request")
            return False
        return self._audio_available

    def _make_room(self, sustained: bool) -> bool:
        if len(self._voices) < self.params.max_voices:
            return True
        if not sustained:
            oldest = next((v for v in self._voices.values() if not v.sustained), None)
            if oldest is not None:
                logger.debug(f"Voice cap reached; stealing oldest note {oldest.key!r}")
                self._release(oldest.key)
                return True
        logger.warning(
            f"Voice cap of {self.params.max_voices} reached; dropping request"
        )
        return False

    def _start_voice(
        self,
        key: Hashable,
        hsv: HSV,
        sustained: bool,
        duration: float | None = None,
        group: str | None = None,
    ) -> Voice:
        self._next_id += 1
        params = self.mapper.map_hsv_to_audio(hsv)
        voice = Voice(
            key=key,
            voice_id=self._next_id,
            hsv=hsv,
            params=params,
            sustained=sustained,
            started_at=self.scheduler.now(),
            duration=duration,
            group=group,
        )
        self.backend.start_voice(voice.voice_id, params, duration=duration)
        self._voices[key] = voice
        logger.debug(
            f"Voice {key!r} started: {params.frequency:.1f}Hz at volume "
            f"{params.volume:.2f}" + (f" for {duration:.2f}s" if duration else "")
        )
        return voice

    def _release(self, key: Hashable) -> None:
        self.scheduler.cancel(key)
        voice = self._voices.pop(key, None)
        if voice is None:
            return
        self.backend.release_voice(voice.voice_id)
        logger.debug(f"Voice {key!r} released")

    def _expire(self, key: Hashable, voice_id: int) -> None:
        voice = self._voices.get(key)
        if voice is None or voice.voice_id != voice_id:
            return
        self._release(key)

    def _deferred_onset(self, group: str, key: str, hsv: HSV) -> None:
        if key not in self._group_keys.get(group, ()):
            return
        if self.start_sustained(hsv, key, group=group) is None:
            # Dropped at the cap; the group no longer owns this key
            keys = self._group_keys[group]
            keys.remove(key)
            if not keys:
                del self._group_keys[group]
