"""Models for the pixelated grid produced by image processing.

A Grid is built in one pass from a display-sized image and is never updated
in place: any change of image or cell size produces a new Grid.
"""

from pydantic import BaseModel, ConfigDict, Field

from image_to_sound.models.core_models import RGB, HSV


class Cell(BaseModel):
    """One element of the pixelated image.

    Coordinates follow standard image conventions with (0, 0) at the top-left
    of the displayed image, not of the canvas.

    Attributes:
        column: Grid column index.
        row: Grid row index.
        pixel_x: Left edge of the cell in image pixels.
        pixel_y: Top edge of the cell in image pixels.
        width: Cell width in pixels (smaller than the cell size at the right edge).
        height: Cell height in pixels (smaller than the cell size at the bottom edge).
        rgb: Average color of every pixel inside the cell.
        hsv: HSV form of the average color.
    """

    model_config = ConfigDict(frozen=True)

    column: int = Field(..., ge=0, description="Grid column index")
    row: int = Field(..., ge=0, description="Grid row index")
    pixel_x: int = Field(..., ge=0, description="Left edge in image pixels")
    pixel_y: int = Field(..., ge=0, description="Top edge in image pixels")
    width: int = Field(..., ge=1, description="Width in pixels")
    height: int = Field(..., ge=1, description="Height in pixels")
    rgb: RGB
    hsv: HSV

    @property
    def cx(self) -> float:
        """Horizontal center of the cell in image pixels."""
        return self.pixel_x + self.width / 2

    @property
    def cy(self) -> float:
        """Vertical center of the cell in image pixels."""
        return self.pixel_y + self.height / 2


class GridDimensions(BaseModel):
    """Placement of the displayed image inside the canvas.

    Attributes:
        width: Displayed image width in pixels.
        height: Displayed image height in pixels.
        offset_x: Horizontal offset of the image inside the canvas.
        offset_y: Vertical offset of the image inside the canvas.
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(0, ge=0)
    height: int = Field(0, ge=0)
    offset_x: int = Field(0, ge=0)
    offset_y: int = Field(0, ge=0)
    canvas_width: int = Field(0, ge=0)
    canvas_height: int = Field(0, ge=0)


class Grid(BaseModel):
    """Row-major collection of cells covering the displayed image.

    Attributes:
        cell_size: Edge length of a full cell in pixels.
        rows: Number of cell rows, ceil(height / cell_size).
        columns: Number of cell columns, ceil(width / cell_size).
        cells: Cells indexed as cells[row][column].
        dimensions: Placement of the image inside the canvas.
    """

    model_config = ConfigDict(frozen=True)

    cell_size: int = Field(..., ge=1, description="Cell edge length in pixels")
    rows: int = Field(0, ge=0, description="Number of cell rows")
    columns: int = Field(0, ge=0, description="Number of cell columns")
    cells: list[list[Cell]] = Field(default_factory=list, description="Row-major cells")
    dimensions: GridDimensions = Field(default_factory=GridDimensions)

    @property
    def is_empty(self) -> bool:
        return self.rows == 0 or self.columns == 0
