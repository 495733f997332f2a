"""
Coordinate conversion utilities for the widget grid.

This module converts between the pixel space of the rendered dashboard and
the cell coordinates the packing engine works in. It also derives how many
rows fit in a viewport of a given height.
"""

import math

from widget_grid_mcp.config import GRID_DEFAULTS


class CoordinateConverter:
    """Converts between container pixels and grid cells."""

    def __init__(
        self,
        cols: int | None = None,
        row_height: int | None = None,
        margin: tuple[int, int] | None = None,
        container_padding: tuple[int, int] | None = None,
    ):
        """Initialize the coordinate converter.

        Args:
            cols: Number of grid columns (defaults to GRID_DEFAULTS)
            row_height: Row height in pixels
            margin: Gap between cells in pixels (x, y)
            container_padding: Padding around the grid in pixels (x, y)
        """
        self.cols = cols if cols is not None else GRID_DEFAULTS["cols"]
        self.row_height = row_height if row_height is not None else GRID_DEFAULTS["row_height"]
        self.margin = margin if margin is not None else GRID_DEFAULTS["margin"]
        self.container_padding = (
            container_padding if container_padding is not None else GRID_DEFAULTS["container_padding"]
        )

    def column_width(self, container_width: float) -> float:
        """Width of one column in pixels for a container of the given width."""
        pad_x = self.container_padding[0]
        margin_x = self.margin[0]
        return (container_width - pad_x * 2 - margin_x * (self.cols - 1)) / self.cols

    def rows_for_height(self, container_height: float) -> int:
        """Number of rows that fit in a viewport of the given height.

        Rounds up so rects can be resized to fill the viewport to the bottom.
        Always at least 1.
        """
        pad_y = self.container_padding[1]
        margin_y = self.margin[1]
        available = container_height - pad_y * 4 - margin_y
        return max(1, math.ceil(available / (self.row_height + margin_y)))

    def pixel_to_grid(
        self,
        rel_x: float,
        rel_y: float,
        container_width: float,
        max_rows: int,
    ) -> tuple[int, int] | None:
        """Convert a pointer position to grid cell coordinates.

        Args:
            rel_x: Pointer X relative to the container's left edge, in pixels
            rel_y: Pointer Y relative to the container's top edge, in pixels
            container_width: Container width in pixels
            max_rows: Current number of rows

        Returns:
            Tuple of (x, y) cell coordinates, or None if outside the grid
        """
        x = rel_x - self.container_padding[0]
        y = rel_y - self.container_padding[1]
        if x < 0 or y < 0:
            return None

        cell_width = self.column_width(container_width) + self.margin[0]
        cell_height = self.row_height + self.margin[1]
        if cell_width <= 0:
            return None

        grid_x = math.floor(x / cell_width)
        grid_y = math.floor(y / cell_height)
        if grid_x >= self.cols or grid_y >= max_rows:
            return None
        return grid_x, grid_y

    def grid_to_pixel(
        self, x: int, y: int, w: int, h: int, container_width: float
    ) -> tuple[float, float, float, float]:
        """Convert a cell rectangle to its pixel box.

        Returns:
            Tuple of (left, top, width, height) in pixels relative to the container
        """
        col_width = self.column_width(container_width)
        margin_x, margin_y = self.margin
        left = self.container_padding[0] + x * (col_width + margin_x)
        top = self.container_padding[1] + y * (self.row_height + margin_y)
        width = w * col_width + (w - 1) * margin_x
        height = h * self.row_height + (h - 1) * margin_y
        return (left, top, width, height)
