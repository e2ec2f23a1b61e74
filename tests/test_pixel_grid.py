import math

import cv2
import numpy as np
import pytest
from image_to_sound.exceptions import ImageLoadError
from image_to_sound.models import GridParams
from image_to_sound.pixel_grid import PixelGrid


def test_empty_grid_lookups(grid):
    assert not grid.has_image()
    assert grid.grid.is_empty
    assert grid.cell_at(10, 10) is None
    assert grid.column_at(10) == []
    assert grid.build().is_empty


def test_checkerboard_grid(grid, checkerboard_image):
    g = grid.load_image(checkerboard_image)
    assert (g.columns, g.rows) == (2, 2)
    dims = grid.dimensions()
    assert (dims.width, dims.height) == (100, 100)
    assert (dims.offset_x, dims.offset_y) == (250, 200)

    assert grid.cell_at(10, 10).rgb.as_tuple() == (255, 0, 0)
    assert grid.cell_at(75, 10).rgb.as_tuple() == (0, 255, 0)
    assert grid.cell_at(10, 75).rgb.as_tuple() == (0, 0, 255)
    white = grid.cell_at(75, 75)
    assert white.rgb.as_tuple() == (255, 255, 255)
    assert white.hsv.s == 0.0


def test_canvas_coordinates_remove_offset(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    x, y = grid.canvas_to_image(260, 210)
    assert (x, y) == (10, 10)
    assert grid.cell_at(x, y).rgb.as_tuple() == (255, 0, 0)


@pytest.mark.parametrize("point", [(-1, 10), (10, -1), (100, 10), (10, 100)])
def test_out_of_bounds_lookup(grid, checkerboard_image, point):
    grid.load_image(checkerboard_image)
    assert grid.cell_at(*point) is None


@pytest.mark.parametrize("size, width, height", [(30, 70, 45), (10, 95, 33), (100, 120, 80)])
def test_grid_dimensions_follow_ceiling(size, width, height):
    grid = PixelGrid(GridParams(cell_size=size))
    g = grid.load_image(np.zeros((height, width, 3), dtype=np.uint8))
    assert g.columns == math.ceil(width / size)
    assert g.rows == math.ceil(height / size)
    assert len(g.cells) == g.rows
    assert all(len(row) == g.columns for row in g.cells)


def test_edge_cells_clamped_to_image():
    grid = PixelGrid(GridParams(cell_size=30))
    grid.load_image(np.zeros((45, 70, 3), dtype=np.uint8))
    corner = grid.grid.cells[1][2]
    assert (corner.pixel_x, corner.pixel_y) == (60, 30)
    assert (corner.width, corner.height) == (10, 15)
    # Inside the nominal square but beyond the image extent
    assert grid.cell_at(75, 10) is None
    assert grid.cell_at(65, 40) == corner


def test_column_at_returns_column_top_to_bottom(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    column = grid.column_at(60)
    assert [c.rgb.as_tuple() for c in column] == [(0, 255, 0), (255, 255, 255)]
    assert grid.column_index_at(60) == 1
    assert grid.column_index_at(100) is None


def test_large_image_fitted_into_canvas():
    grid = PixelGrid()
    g = grid.load_image(np.full((1000, 1200, 3), 80, dtype=np.uint8))
    dims = grid.dimensions()
    assert (dims.width, dims.height) == (600, 500)
    assert (dims.offset_x, dims.offset_y) == (0, 0)
    assert (g.columns, g.rows) == (12, 10)
    assert grid.display_image.shape == (500, 600, 3)


def test_set_cell_size_rebuilds(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    grid.set_cell_size(25)
    assert grid.cell_size == 25
    assert (grid.grid.columns, grid.grid.rows) == (4, 4)
    assert grid.cell_at(30, 10).rgb.as_tuple() == (255, 0, 0)


@pytest.mark.parametrize("requested, expected", [(5, 10), (500, 100), (42, 42)])
def test_set_cell_size_clamps(grid, checkerboard_image, requested, expected):
    grid.load_image(checkerboard_image)
    grid.set_cell_size(requested)
    assert grid.cell_size == expected
    assert grid.grid.cell_size == expected


def test_set_cell_size_without_image(grid):
    grid.set_cell_size(20)
    assert grid.cell_size == 20
    assert grid.grid.is_empty


def test_load_image_bytes(grid, checkerboard_image):
    ok, buf = cv2.imencode(".png", cv2.cvtColor(checkerboard_image, cv2.COLOR_RGB2BGR))
    assert ok
    grid.load_image_bytes(buf.tobytes())
    assert grid.has_image()
    assert grid.cell_at(0, 0).rgb.as_tuple() == (255, 0, 0)


def test_load_image_bytes_failure_keeps_grid(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    with pytest.raises(ImageLoadError):
        grid.load_image_bytes(b"garbage")
    assert grid.has_image()


def test_clear(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    grid.clear()
    assert not grid.has_image()
    assert grid.cell_at(10, 10) is None


def test_cells_iterates_row_major(grid, checkerboard_image):
    grid.load_image(checkerboard_image)
    positions = [(c.row, c.column) for c in grid.cells()]
    assert positions == [(0, 0), (0, 1), (1, 0), (1, 1)]


@pytest.mark.parametrize("value", ["abc", None, float("nan")])
def test_set_cell_size_ignores_non_numeric(grid, checkerboard_image, value):
    grid.load_image(checkerboard_image)
    grid.set_cell_size(value)
    assert grid.cell_size == 50
    assert (grid.grid.columns, grid.grid.rows) == (2, 2)
