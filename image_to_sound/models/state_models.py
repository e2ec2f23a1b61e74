"""Snapshot of the instrument state for presentation layers."""

from pydantic import BaseModel, Field


class InstrumentState(BaseModel):
    """Read-only view of the instrument at one moment.

    Attributes:
        ready: Whether the audio side has been initialized.
        playing: Whether pointer events currently produce sound.
        mode: Active interaction mode, "single" or "scan".
        cell_size: Current grid cell size in pixels.
        has_image: Whether an image is loaded and gridded.
        live_voices: Number of currently sounding voices.
        scan_column: Column being scanned, or None when idle.
    """

    ready: bool = Field(False, description="Audio initialized")
    playing: bool = Field(False, description="Pointer events produce sound")
    mode: str = Field("single", description="Interaction mode")
    cell_size: int = Field(50, ge=1, description="Cell size in pixels")
    has_image: bool = Field(False, description="Image loaded")
    live_voices: int = Field(0, ge=0, description="Sounding voices")
    scan_column: int | None = Field(None, description="Active scan column")
