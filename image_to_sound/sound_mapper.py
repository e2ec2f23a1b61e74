"""
HSV to sound mapping.

This module maps the three HSV components of a color onto synthesis
parameters, quantizing pitch to a musical scale so that every color in the
image sounds in the same key:

- Hue -> pitch (scale degree and octave) and stereo position
- Saturation -> attack time, waveform and timbre
- Value -> volume and release time
"""

import logging
import math
from typing import Iterable

from music21 import pitch

from image_to_sound.color_model import describe_color, hsv_to_rgb
from image_to_sound.models import (
    HSV,
    AudioParameters,
    ColorInfo,
    MapperParams,
    Timbre,
    Waveform,
)

logger = logging.getLogger(__name__)


# Semitone offsets within one octave
MUSICAL_SCALES: dict[str, list[int]] = {
    "chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
    "major": [0, 2, 4, 5, 7, 9, 11],
    "minor": [0, 2, 3, 5, 7, 8, 10],
    "pentatonic": [0, 2, 4, 7, 9],
    "blues": [0, 3, 5, 6, 7, 10],
}

WAVEFORMS = list(Waveform)


def _normalize_percent(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value)) / 100.0


def _lerp(low: float, high: float, t: float) -> float:
    return low + (high - low) * t


def frequency_to_note_name(frequency: float) -> str:
    """Name the equal-tempered pitch nearest to a frequency (e.g., "A3").

    Args:
        frequency: Frequency in Hz (positive).

    Returns:
        The pitch name with octave, or an empty string for non-positive input.
    """
    if not frequency > 0 or not math.isfinite(frequency):
        return ""
    midi_number = int(round(69 + 12 * math.log2(frequency / 440.0)))
    p = pitch.Pitch()
    p.midi = max(0, min(127, midi_number))
    return p.nameWithOctave


class SoundMapper:
    """Maps HSV colors to audio parameters.

    The mapper is stateless apart from two knobs, the active scale and the
    base frequency. Invalid values for either are ignored and the previous
    configuration is kept.

    Attributes:
        params: Mapping ranges and defaults.
    """

    def __init__(self, params: MapperParams | None = None):
        self.params = params or MapperParams()
        self._scale = (
            self.params.scale if self.params.scale in MUSICAL_SCALES else "pentatonic"
        )
        self._base_frequency = self.params.base_frequency

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def current_scale(self) -> str:
        return self._scale

    @property
    def base_frequency(self) -> float:
        return self._base_frequency

    def available_scales(self) -> list[str]:
        return list(MUSICAL_SCALES)

    def set_scale(self, scale_name: str) -> None:
        """Select the musical scale used for pitch quantization.

        Unknown names are ignored.
        """
        name = scale_name.lower() if isinstance(scale_name, str) else None
        if name not in MUSICAL_SCALES:
            logger.debug(f"Ignoring unknown scale {scale_name!r}")
            return
        self._scale = name

    def set_base_frequency(self, frequency: float) -> None:
        """Set the frequency of scale degree 0 in the lowest octave.

        Values outside the configured base-frequency bounds are ignored.
        """
        try:
            value = float(frequency)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric base frequency {frequency!r}")
            return
        low, high = self.params.min_base_frequency, self.params.max_base_frequency
        if not math.isfinite(value) or not low <= value <= high:
            logger.debug(f"Ignoring base frequency {frequency!r} outside [{low}, {high}]")
            return
        self._base_frequency = value

    # ------------------------------------------------------------------
    # Individual mappings
    # ------------------------------------------------------------------

    def map_hue_to_frequency(self, hue: float) -> float:
        """Map hue (0-360 degrees) to a frequency on the active scale.

        The normalized hue picks a scale degree and, independently, one of
        ``octave_span`` octaves. Results outside the frequency window are
        moved by whole octaves so they stay on the scale; a final clamp only
        matters for windows narrower than an octave.

        Args:
            hue: Hue in degrees; values outside [0, 360) wrap around.

        Returns:
            Frequency in Hz inside [min_frequency, max_frequency].
        """
        normalized = (hue % 360.0) / 360.0 if math.isfinite(hue) else 0.0

        scale = MUSICAL_SCALES[self._scale]
        degree = int(math.floor(normalized * len(scale))) % len(scale)
        semitone = scale[degree]
        octave = min(
            int(math.floor(normalized * self.params.octave_span)),
            self.params.octave_span - 1,
        )

        frequency = self._base_frequency * 2 ** ((octave * 12 + semitone) / 12)
        return self._fold_into_window(frequency)

    def map_saturation_to_attack(self, saturation: float) -> float:
        """Higher saturation gives a shorter, more percussive attack."""
        t = _normalize_percent(saturation)
        return _lerp(self.params.min_attack, self.params.max_attack, 1.0 - t)

    def map_value_to_volume(self, value: float) -> float:
        """Brighter pixels sound louder."""
        t = _normalize_percent(value)
        return _lerp(self.params.min_volume, self.params.max_volume, t)

    def map_value_to_release(self, value: float) -> float:
        """Brighter pixels ring out longer."""
        t = _normalize_percent(value)
        return _lerp(self.params.min_release, self.params.max_release, t)

    def map_saturation_to_waveform(self, saturation: float) -> Waveform:
        """Quantize saturation into four timbre classes, sine to square."""
        t = _normalize_percent(saturation)
        index = int(math.floor(t * len(WAVEFORMS)))
        return WAVEFORMS[min(index, len(WAVEFORMS) - 1)]

    def map_saturation_to_timbre(self, saturation: float) -> Timbre:
        """Harmonic content, filter cutoff and resonance grow with saturation."""
        t = _normalize_percent(saturation)
        return Timbre(
            harmonic_count=int(math.floor(2 + t * 8)),
            filter_cutoff=200.0 + t * 1800.0,
            resonance=t * 0.8,
        )

    def map_hue_to_pan(self, hue: float) -> float:
        """Stereo position as sin(hue); complementary hues land on opposite sides."""
        if not math.isfinite(hue):
            return 0.0
        return max(-1.0, min(1.0, math.sin(math.radians(hue))))

    # ------------------------------------------------------------------
    # Composite mappings
    # ------------------------------------------------------------------

    def map_hsv_to_audio(self, hsv: HSV) -> AudioParameters:
        """Map an HSV color to a complete set of audio parameters.

        Args:
            hsv: Color to map.

        Returns:
            AudioParameters combining every individual mapping.
        """
        return AudioParameters(
            frequency=self.map_hue_to_frequency(hsv.h),
            volume=self.map_value_to_volume(hsv.v),
            attack=self.map_saturation_to_attack(hsv.s),
            release=self.map_value_to_release(hsv.v),
            waveform=self.map_saturation_to_waveform(hsv.s),
            pan=self.map_hue_to_pan(hsv.h),
            timbre=self.map_saturation_to_timbre(hsv.s),
        )

    def map_chord(self, colors: Iterable[HSV]) -> list[AudioParameters]:
        """Map several colors at once, e.g. every cell of a scanned column."""
        return [self.map_hsv_to_audio(hsv) for hsv in colors]

    def color_info(self, hsv: HSV) -> ColorInfo:
        """Collect display information for a color.

        Args:
            hsv: Color to describe.

        Returns:
            ColorInfo with the RGB form, audio parameters, a readable
            description and the nearest note name.
        """
        audio = self.map_hsv_to_audio(hsv)
        return ColorInfo(
            hsv=hsv,
            rgb=hsv_to_rgb(hsv.h, hsv.s, hsv.v),
            audio=audio,
            description=describe_color(hsv),
            note_name=frequency_to_note_name(audio.frequency),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fold_into_window(self, frequency: float) -> float:
        low, high = self.params.min_frequency, self.params.max_frequency
        while frequency > high and frequency / 2 >= low:
            frequency /= 2
        while frequency < low and frequency * 2 <= high:
            frequency *= 2
        return max(low, min(high, frequency))
