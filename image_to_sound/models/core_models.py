"""Core domain models for image-to-sound conversion."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RGB(BaseModel):
    """An 8-bit RGB color.

    Attributes:
        r: Red channel (0-255).
        g: Green channel (0-255).
        b: Blue channel (0-255).
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(..., ge=0, le=255, description="Red channel")
    g: int = Field(..., ge=0, le=255, description="Green channel")
    b: int = Field(..., ge=0, le=255, description="Blue channel")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


class HSV(BaseModel):
    """A color in hue/saturation/value form.

    Components are kept as floats so that converting RGB to HSV and back
    reproduces the original channels to within integer rounding.

    Attributes:
        h: Hue in degrees, 0 inclusive to 360 exclusive.
        s: Saturation in percent (0-100).
        v: Value (brightness) in percent (0-100).
    """

    model_config = ConfigDict(frozen=True)

    h: float = Field(..., ge=0.0, lt=360.0, description="Hue in degrees")
    s: float = Field(..., ge=0.0, le=100.0, description="Saturation in percent")
    v: float = Field(..., ge=0.0, le=100.0, description="Value in percent")

    def rounded(self) -> tuple[int, int, int]:
        """Integer display form, with hue 360 wrapped back to 0."""
        return (int(round(self.h)) % 360, int(round(self.s)), int(round(self.v)))


class Waveform(str, Enum):
    """Oscillator shapes ordered from simplest to richest harmonic content."""

    SINE = "sine"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"
    SQUARE = "square"

    @property
    def rank(self) -> int:
        return list(Waveform).index(self)


class Timbre(BaseModel):
    """Secondary tone-color settings derived from saturation.

    Attributes:
        harmonic_count: Number of audible harmonics (2-10).
        filter_cutoff: Low-pass cutoff frequency in Hz.
        resonance: Filter emphasis around the cutoff (0-0.8).
    """

    model_config = ConfigDict(frozen=True)

    harmonic_count: int = Field(..., ge=1, description="Number of harmonics")
    filter_cutoff: float = Field(..., gt=0.0, description="Low-pass cutoff in Hz")
    resonance: float = Field(..., ge=0.0, le=1.0, description="Filter resonance")


class AudioParameters(BaseModel):
    """Complete synthesis settings for one voice.

    Pure derived data: a new instance is computed for every lookup and never
    mutated.

    Attributes:
        frequency: Pitch in Hz, inside the configured frequency window.
        volume: Linear gain (0-1).
        attack: Attack time in seconds.
        release: Release time in seconds.
        waveform: Oscillator shape.
        pan: Stereo position from -1 (left) to 1 (right).
        timbre: Optional filter and harmonic settings.
    """

    model_config = ConfigDict(frozen=True)

    frequency: float = Field(..., gt=0.0, description="Pitch in Hz")
    volume: float = Field(..., ge=0.0, le=1.0, description="Linear gain")
    attack: float = Field(..., gt=0.0, description="Attack time in seconds")
    release: float = Field(..., gt=0.0, description="Release time in seconds")
    waveform: Waveform = Field(Waveform.SINE, description="Oscillator shape")
    pan: float = Field(0.0, ge=-1.0, le=1.0, description="Stereo position")
    timbre: Timbre | None = Field(None, description="Filter and harmonic settings")


class ColorInfo(BaseModel):
    """Everything a presentation layer needs to describe one color.

    Attributes:
        hsv: The color in HSV form.
        rgb: The same color in RGB form.
        audio: Audio parameters the color maps to.
        description: Human-readable name such as "bright vivid Red".
        note_name: Nearest pitch name with octave, such as "A3".
    """

    model_config = ConfigDict(frozen=True)

    hsv: HSV
    rgb: RGB
    audio: AudioParameters
    description: str = Field("", description="Human-readable color name")
    note_name: str = Field("", description="Nearest pitch name with octave")
