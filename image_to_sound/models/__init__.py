"""Domain models for the image-to-sound instrument.

This module provides a centralized location for all data models used throughout
the image-to-sound pipeline. It includes:

- Core color and audio models (RGB, HSV, AudioParameters, ...)
- The pixel grid produced by image processing (Cell, Grid)
- Configuration parameters for each component
- Read-only state snapshots handed to presentation layers

All models are built using Pydantic for data validation and serialization,
ensuring type safety and clear interfaces between components.
"""

# Re-export core models
from image_to_sound.models.core_models import (
    RGB,
    HSV,
    Waveform,
    Timbre,
    AudioParameters,
    ColorInfo,
)

# Re-export grid models
from image_to_sound.models.grid_models import Cell, Grid, GridDimensions

# Re-export setting models
from image_to_sound.models.settings_models import (
    GridParams,
    MapperParams,
    VoicePoolParams,
    SynthParams,
    InstrumentSettings,
)

# Re-export state models
from image_to_sound.models.state_models import InstrumentState
