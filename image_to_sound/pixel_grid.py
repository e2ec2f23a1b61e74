"""Pixel grid: reduces an image to a lookup-able grid of averaged colors.

The grid is the only owner of the loaded image. It is rebuilt wholesale
whenever the image or the cell size changes, so a lookup never sees a
partially updated grid.
"""

import logging
import math
from typing import Iterator

import numpy as np

from image_to_sound.color_model import rgb_to_hsv
from image_to_sound.image_processing import (
    as_rgb_array,
    average_cells,
    decode_image,
    fit_to_canvas,
    resize_image,
)
from image_to_sound.models import RGB, Cell, Grid, GridDimensions, GridParams

logger = logging.getLogger(__name__)


class PixelGrid:
    """Grid of averaged cells over an image fitted into the canvas.

    Attributes:
        params: Grid configuration (canvas footprint, cell size bounds).
    """

    def __init__(self, params: GridParams | None = None):
        self.params = params or GridParams()
        self._cell_size = self._clamp_cell_size(self.params.cell_size)
        self._source: np.ndarray | None = None
        self._display: np.ndarray | None = None
        self._grid = Grid(cell_size=self._cell_size)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def cell_size(self) -> int:
        return self._cell_size

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def display_image(self) -> np.ndarray | None:
        """The fitted image the grid was averaged from, for renderers."""
        return self._display

    def has_image(self) -> bool:
        return self._source is not None and not self._grid.is_empty

    def dimensions(self) -> GridDimensions:
        return self._grid.dimensions

    # ------------------------------------------------------------------
    # Loading and building
    # ------------------------------------------------------------------

    def load_image(self, image: np.ndarray) -> Grid:
        """Load a decoded image array and build its grid.

        Args:
            image: Grayscale, RGB or RGBA image array.

        Returns:
            The newly built grid.

        Raises:
            ImageLoadError: If the array has an unsupported shape.
        """
        self._source = as_rgb_array(image)
        return self.build()

    def load_image_bytes(self, data: bytes) -> Grid:
        """Decode encoded image bytes and build their grid.

        Raises:
            ImageLoadError: If the bytes cannot be decoded.
        """
        self._source = decode_image(data)
        return self.build()

    def clear(self) -> None:
        """Forget the loaded image; lookups return empty results afterwards."""
        self._source = None
        self._display = None
        self._grid = Grid(cell_size=self._cell_size)

    def build(
        self, image: np.ndarray | None = None, cell_size: int | None = None
    ) -> Grid:
        """Fit an image into the canvas and average it into cells.

        The image keeps its aspect ratio and is centered in the canvas. The
        displayed area is partitioned into ``cell_size`` squares; cells on
        the right and bottom edges are clamped to the image extent. Each
        cell's color is the mean of every pixel inside it.

        Args:
            image: Image to build from. Defaults to the loaded image; when
                given, it replaces the loaded image.
            cell_size: Cell edge length. Defaults to the current cell size;
                clamped into the configured bounds.

        Returns:
            The new grid, or an empty grid when no image is available.
        """
        if image is not None:
            self._source = as_rgb_array(image)
        if cell_size is not None:
            self._cell_size = self._clamp_cell_size(cell_size)

        if self._source is None:
            logger.warning("No image loaded; grid left empty")
            self._grid = Grid(cell_size=self._cell_size)
            return self._grid

        source_height, source_width = self._source.shape[:2]
        display_width, display_height, offset_x, offset_y = fit_to_canvas(
            source_width,
            source_height,
            self.params.canvas_width,
            self.params.canvas_height,
            upscale=self.params.upscale,
        )
        self._display = resize_image(self._source, display_width, display_height)

        averages = average_cells(self._display, self._cell_size)
        rows, columns = averages.shape[:2]

        cells: list[list[Cell]] = []
        for row in range(rows):
            row_cells: list[Cell] = []
            pixel_y = row * self._cell_size
            cell_height = min(self._cell_size, display_height - pixel_y)
            for column in range(columns):
                pixel_x = column * self._cell_size
                cell_width = min(self._cell_size, display_width - pixel_x)
                r, g, b = (int(channel) for channel in averages[row, column])
                row_cells.append(
                    Cell(
                        column=column,
                        row=row,
                        pixel_x=pixel_x,
                        pixel_y=pixel_y,
                        width=cell_width,
                        height=cell_height,
                        rgb=RGB(r=r, g=g, b=b),
                        hsv=rgb_to_hsv(r, g, b),
                    )
                )
            cells.append(row_cells)

        self._grid = Grid(
            cell_size=self._cell_size,
            rows=rows,
            columns=columns,
            cells=cells,
            dimensions=GridDimensions(
                width=display_width,
                height=display_height,
                offset_x=offset_x,
                offset_y=offset_y,
                canvas_width=self.params.canvas_width,
                canvas_height=self.params.canvas_height,
            ),
        )

        logger.info(
            f"Image processed: {display_width}x{display_height}, "
            f"offset: ({offset_x}, {offset_y}), grid: {columns}x{rows} "
            f"cells of {self._cell_size}px"
        )
        return self._grid

    def set_cell_size(self, size: int) -> None:
        """Change the cell size and rebuild the grid if an image is loaded.

        Values outside the configured bounds are clamped. Non-numeric values
        are ignored.
        """
        try:
            value = float(size)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric cell size {size!r}")
            return
        if not math.isfinite(value):
            logger.debug(f"Ignoring non-finite cell size {size!r}")
            return

        clamped = self._clamp_cell_size(value)
        if clamped != size:
            logger.debug(f"Cell size {size} clamped to {clamped}")
        self._cell_size = clamped
        if self._source is not None:
            self.build()
        else:
            self._grid = Grid(cell_size=self._cell_size)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def canvas_to_image(self, x: float, y: float) -> tuple[float, float]:
        """Translate canvas coordinates into displayed-image coordinates."""
        dims = self._grid.dimensions
        return x - dims.offset_x, y - dims.offset_y

    def cell_at(self, x: float, y: float) -> Cell | None:
        """Return the cell under an image-space point.

        Args:
            x: Horizontal position relative to the image's left edge.
            y: Vertical position relative to the image's top edge.

        Returns:
            The cell containing the point, or None outside the image.
        """
        column = self._column_index(x)
        row = self._row_index(y)
        if column is None or row is None:
            return None
        return self._grid.cells[row][column]

    def column_at(self, x: float) -> list[Cell]:
        """Return every cell of the column under ``x``, top to bottom.

        Returns:
            The cells of the column, or an empty list outside the image.
        """
        column = self._column_index(x)
        if column is None:
            return []
        return [row_cells[column] for row_cells in self._grid.cells]

    def column_index_at(self, x: float) -> int | None:
        """Column index under an image-space ``x``, or None outside the image."""
        return self._column_index(x)

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell in row-major order."""
        for row_cells in self._grid.cells:
            yield from row_cells

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clamp_cell_size(self, size: int) -> int:
        return int(max(self.params.min_cell_size, min(self.params.max_cell_size, size)))

    def _column_index(self, x: float) -> int | None:
        if self._grid.is_empty or not 0 <= x < self._grid.dimensions.width:
            return None
        column = int(math.floor(x / self._cell_size))
        return column if column < self._grid.columns else None

    def _row_index(self, y: float) -> int | None:
        if self._grid.is_empty or not 0 <= y < self._grid.dimensions.height:
            return None
        row = int(math.floor(y / self._cell_size))
        return row if row < self._grid.rows else None
