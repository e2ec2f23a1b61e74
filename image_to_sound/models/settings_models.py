"""Parameter models for instrument configuration.

This module defines Pydantic models that encapsulate all configurable
parameters for each component of the image-to-sound instrument. These models
provide validation, default values, and clear interfaces for customizing the
behavior of each component.

Constraints here reject impossible settings when the models are built.
Runtime setters on the components clamp or ignore bad values instead, so an
interactive session never fails on a slider value.
"""

from pydantic import BaseModel, Field, model_validator


class GridParams(BaseModel):
    """Configuration parameters for image fitting and pixelation.

    The image is fitted into a fixed canvas footprint while preserving its
    aspect ratio, then averaged into square cells.

    Attributes:
        cell_size: Edge length of a grid cell in pixels (default 50).
        min_cell_size: Smallest accepted cell size (default 10).
        max_cell_size: Largest accepted cell size (default 100).
        canvas_width: Width of the canvas footprint in pixels (default 600).
        canvas_height: Height of the canvas footprint in pixels (default 500).
        upscale: Whether images smaller than the canvas are enlarged to fill it.
    """

    cell_size: int = Field(50, ge=1, description="Cell edge length in pixels")
    min_cell_size: int = Field(10, ge=1, description="Smallest cell size")
    max_cell_size: int = Field(100, ge=1, description="Largest cell size")
    canvas_width: int = Field(600, ge=1, description="Canvas width in pixels")
    canvas_height: int = Field(500, ge=1, description="Canvas height in pixels")
    upscale: bool = Field(False, description="Enlarge small images to the canvas")

    @model_validator(mode="after")
    def _check_cell_bounds(self) -> "GridParams":
        if self.min_cell_size > self.max_cell_size:
            raise ValueError("min_cell_size must not exceed max_cell_size")
        return self


class MapperParams(BaseModel):
    """Configuration parameters for the HSV to audio mapping.

    Each range is a (min, max) pair of the corresponding audio quantity.
    Saturation drives attack (inverted) and waveform, brightness drives
    volume and release, hue drives pitch and stereo position.

    Attributes:
        min_frequency: Lowest frequency the mapper returns, in Hz.
        max_frequency: Highest frequency the mapper returns, in Hz.
        min_volume: Volume of a black pixel.
        max_volume: Volume of a fully bright pixel.
        min_attack: Attack time of a fully saturated pixel, in seconds.
        max_attack: Attack time of a gray pixel, in seconds.
        min_release: Release time of a black pixel, in seconds.
        max_release: Release time of a fully bright pixel, in seconds.
        scale: Name of the active musical scale.
        base_frequency: Frequency of scale degree 0 in the lowest octave.
        min_base_frequency: Lowest accepted base frequency.
        max_base_frequency: Highest accepted base frequency.
        octave_span: Number of octaves the hue circle spreads over.
    """

    min_frequency: float = Field(200.0, gt=0.0, description="Lowest frequency in Hz")
    max_frequency: float = Field(2000.0, gt=0.0, description="Highest frequency in Hz")
    min_volume: float = Field(0.1, ge=0.0, le=1.0)
    max_volume: float = Field(0.8, ge=0.0, le=1.0)
    min_attack: float = Field(0.01, gt=0.0, description="Shortest attack in seconds")
    max_attack: float = Field(0.1, gt=0.0, description="Longest attack in seconds")
    min_release: float = Field(0.1, gt=0.0, description="Shortest release in seconds")
    max_release: float = Field(1.0, gt=0.0, description="Longest release in seconds")
    scale: str = Field("pentatonic", description="Active musical scale")
    base_frequency: float = Field(220.0, gt=0.0, description="Base frequency in Hz")
    min_base_frequency: float = Field(100.0, gt=0.0)
    max_base_frequency: float = Field(1000.0, gt=0.0)
    octave_span: int = Field(3, ge=1, le=8, description="Octaves across the hue range")

    @model_validator(mode="after")
    def _check_ranges(self) -> "MapperParams":
        pairs = [
            ("frequency", self.min_frequency, self.max_frequency),
            ("volume", self.min_volume, self.max_volume),
            ("attack", self.min_attack, self.max_attack),
            ("release", self.min_release, self.max_release),
            ("base_frequency", self.min_base_frequency, self.max_base_frequency),
        ]
        for name, low, high in pairs:
            if low > high:
                raise ValueError(f"min_{name} must not exceed max_{name}")
        return self


class VoicePoolParams(BaseModel):
    """Configuration parameters for the voice pool.

    Attributes:
        max_voices: Maximum number of simultaneously sounding voices (default 5).
        stagger_seconds: Onset spacing between chord voices (default 0.05).
        min_note_duration: Play-once duration of a fully bright pixel.
        max_note_duration: Play-once duration of a black pixel.
        master_volume: Gain of the shared output stage (0-1, default 0.3).
    """

    max_voices: int = Field(5, ge=1, le=64, description="Voice cap")
    stagger_seconds: float = Field(0.05, ge=0.0, description="Chord onset spacing")
    min_note_duration: float = Field(0.1, gt=0.0, description="Shortest note in seconds")
    max_note_duration: float = Field(0.4, gt=0.0, description="Longest note in seconds")
    master_volume: float = Field(0.3, ge=0.0, le=1.0, description="Master gain")


class SynthParams(BaseModel):
    """Configuration parameters for sound synthesis and the output stage.

    Attributes:
        sample_rate: Output sample rate in Hz (default 44100).
        block_size: Frames rendered per audio callback (default 512).
        decay: Envelope decay time in seconds (default 0.2).
        sustain: Envelope sustain level as a fraction of peak (default 0.3).
        reverb_decay: Reverb tail length in seconds (default 2.0).
        reverb_wet: Reverb mix amount (0-1, default 0.3).
    """

    sample_rate: int = Field(44100, ge=8000, le=192000, description="Sample rate in Hz")
    block_size: int = Field(512, ge=16, le=8192, description="Frames per block")
    decay: float = Field(0.2, ge=0.0, description="Envelope decay in seconds")
    sustain: float = Field(0.3, ge=0.0, le=1.0, description="Envelope sustain level")
    reverb_decay: float = Field(2.0, gt=0.0, description="Reverb decay in seconds")
    reverb_wet: float = Field(0.3, ge=0.0, le=1.0, description="Reverb mix amount")


class InstrumentSettings(BaseModel):
    """Complete configuration for the image-to-sound instrument.

    Aggregates all parameter sets, providing a single object that can be
    passed to the Instrument facade. Each component uses sensible defaults
    but can be customized as needed.

    Attributes:
        grid: Parameters for image fitting and pixelation.
        mapper: Parameters for the HSV to audio mapping.
        voices: Parameters for the voice pool.
        synth: Parameters for synthesis and audio output.
    """

    grid: GridParams = Field(default_factory=GridParams, description="Grid parameters")
    mapper: MapperParams = Field(
        default_factory=MapperParams, description="Sound mapping parameters"
    )
    voices: VoicePoolParams = Field(
        default_factory=VoicePoolParams, description="Voice pool parameters"
    )
    synth: SynthParams = Field(
        default_factory=SynthParams, description="Synthesis parameters"
    )
