"""
Tests for pixel and grid coordinate conversion.
"""

import pytest

from widget_grid_mcp.config import GRID_DEFAULTS
from widget_grid_mcp.utils.coordinate_converter import CoordinateConverter

# 969px wide: (969 - 2*8 - 11*7) / 12 = 73px per column, 80px per cell pitch
CONTAINER_WIDTH = 969


class TestCoordinateConverter:
    """Test CoordinateConverter class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.converter = CoordinateConverter(
            cols=12, row_height=25, margin=(7, 7), container_padding=(8, 8)
        )

    def test_defaults_come_from_config(self):
        converter = CoordinateConverter()
        assert converter.cols == GRID_DEFAULTS["cols"]
        assert converter.row_height == GRID_DEFAULTS["row_height"]
        assert converter.margin == GRID_DEFAULTS["margin"]

    def test_column_width(self):
        assert self.converter.column_width(CONTAINER_WIDTH) == pytest.approx(73.0)

    def test_pixel_to_grid_origin(self):
        assert self.converter.pixel_to_grid(8, 8, CONTAINER_WIDTH, 10) == (0, 0)

    def test_pixel_to_grid_inside_cell(self):
        assert self.converter.pixel_to_grid(253, 73, CONTAINER_WIDTH, 10) == (3, 2)

    def test_pixel_in_padding_is_outside(self):
        assert self.converter.pixel_to_grid(7, 50, CONTAINER_WIDTH, 10) is None
        assert self.converter.pixel_to_grid(50, 3, CONTAINER_WIDTH, 10) is None

    def test_pixel_past_last_cell_is_outside(self):
        assert self.converter.pixel_to_grid(968, 8, CONTAINER_WIDTH, 10) is None
        assert self.converter.pixel_to_grid(8, 328, CONTAINER_WIDTH, 10) is None

    def test_rows_for_height(self):
        # (400 - 4*8 - 7) / (25 + 7) = 11.28, rounded up
        assert self.converter.rows_for_height(400) == 12

    def test_rows_for_tiny_height(self):
        assert self.converter.rows_for_height(10) == 1

    def test_grid_to_pixel(self):
        assert self.converter.grid_to_pixel(1, 2, 3, 2, CONTAINER_WIDTH) == pytest.approx(
            (88.0, 72.0, 233.0, 57.0)
        )
