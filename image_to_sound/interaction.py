"""Pointer interaction on top of the pixel grid and the voice pool.

Two modes are supported:

- ``single``: a press plays one short note for the cell under the pointer.
- ``scan``: moving across the image sustains a chord built from the column
  under the pointer; entering a new column swaps the chord.

Pointer positions are canvas coordinates. The grid's display offset is
removed before every lookup, in both modes.
"""

import logging

from image_to_sound.models import Cell
from image_to_sound.pixel_grid import PixelGrid
from image_to_sound.voice_pool import MODES, VoicePool

logger = logging.getLogger(__name__)


def column_group(column: int) -> str:
    """Voice-pool group name for a scanned column."""
    return f"column_{column}"


class InteractionController:
    """Translates pointer events into grid lookups and voice commands.

    While not playing, pointer events only update the hovered cell so a
    renderer can still show feedback.

    Args:
        grid: Grid used for lookups.
        pool: Voice pool that plays the looked-up colors.
    """

    def __init__(self, grid: PixelGrid, pool: VoicePool):
        self.grid = grid
        self.pool = pool
        self._mode = pool.mode
        self._playing = False
        self._hovered: Cell | None = None
        self._scan_column: int | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def hovered_cell(self) -> Cell | None:
        """Cell under the last pointer position, for feedback display."""
        return self._hovered

    @property
    def scan_column(self) -> int | None:
        return self._scan_column

    @property
    def state(self) -> str:
        """Either "idle" or "scanning"."""
        return "idle" if self._scan_column is None else "scanning"

    def set_mode(self, mode: str) -> None:
        """Switch interaction mode. Unknown modes are ignored."""
        if mode not in MODES:
            logger.debug(f"Ignoring unknown mode {mode!r}")
            return
        if mode == "single":
            self._release_scan()
        self._mode = mode
        self.pool.set_mode(mode)
        logger.debug(f"Interaction mode set to {mode}")

    def toggle_mode(self) -> str:
        """Flip between single and scan mode and return the new mode."""
        self.set_mode("scan" if self._mode == "single" else "single")
        return self._mode

    def set_playing(self, playing: bool) -> None:
        """Enable or disable sound; disabling stops every voice."""
        was_playing = self._playing
        self._playing = bool(playing)
        if was_playing and not self._playing:
            self._release_scan()
            self.pool.stop_all()

    def reset(self) -> None:
        """Forget pointer state after the grid was rebuilt."""
        self._release_scan()
        self._hovered = None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_press(self, x: float, y: float) -> str | None:
        """Handle a press at canvas coordinates.

        In single mode this plays the cell under the pointer once.

        Returns:
            Key of the started note, or None if nothing was played.
        """
        cell = self._lookup(x, y)
        if not self._playing or self._mode != "single" or cell is None:
            return None
        logger.debug(f"Playing cell ({cell.column}, {cell.row})")
        return self.pool.play_once(cell.hsv)

    def pointer_move(self, x: float, y: float) -> None:
        """Handle pointer motion at canvas coordinates.

        In scan mode a column change stops the previous column's chord
        before starting the new one. Leaving the image stops the chord.
        """
        self._lookup(x, y)
        if not self._playing or self._mode != "scan":
            return

        image_x, _ = self.grid.canvas_to_image(x, y)
        column = self.grid.column_index_at(image_x)
        if column == self._scan_column:
            return

        self._release_scan()
        if column is None:
            return

        cells = self.grid.column_at(image_x)
        self._scan_column = column
        self.pool.start_chord([cell.hsv for cell in cells], column_group(column))

    def pointer_release(self) -> None:
        self._release_scan()

    def pointer_exit(self) -> None:
        self._hovered = None
        self._release_scan()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup(self, x: float, y: float) -> Cell | None:
        image_x, image_y = self.grid.canvas_to_image(x, y)
        self._hovered = self.grid.cell_at(image_x, image_y)
        return self._hovered

    def _release_scan(self) -> None:
        if self._scan_column is None:
            return
        self.pool.stop_group(column_group(self._scan_column))
        self._scan_column = None
