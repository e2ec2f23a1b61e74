import pytest
from pydantic import ValidationError
from image_to_sound.models import Cell, Grid, GridDimensions


def test_cell_centers(valid_rgb, valid_hsv):
    cell = Cell(
        column=1, row=2, pixel_x=50, pixel_y=100, width=30, height=50,
        rgb=valid_rgb, hsv=valid_hsv,
    )
    assert cell.cx == pytest.approx(65.0)
    assert cell.cy == pytest.approx(125.0)


def test_cell_rejects_zero_width(valid_rgb, valid_hsv):
    with pytest.raises(ValidationError):
        Cell(
            column=0, row=0, pixel_x=0, pixel_y=0, width=0, height=10,
            rgb=valid_rgb, hsv=valid_hsv,
        )


def test_empty_grid():
    grid = Grid(cell_size=50)
    assert grid.is_empty
    assert grid.cells == []
    assert grid.dimensions == GridDimensions()


def test_grid_rejects_zero_cell_size():
    with pytest.raises(ValidationError):
        Grid(cell_size=0)
