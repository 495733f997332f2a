"""
Cell occupancy index for the widget grid.

An OccupancyGrid is a `max_rows x cols` boolean matrix marking which cells
are covered by a rect. It is derived fresh from a layout for every query and
is never kept between calls; operations that need to stage several
placements work on a `copy()`.
"""

from collections.abc import Iterable

from widget_grid_mcp.utils.grid_types import GridBounds, GridRect, GridZone


class OccupancyGrid:
    """Boolean cell matrix for one grid.

    Attributes:
        cols (int): Number of columns.
        rows (int): Number of rows.
        cells (list[list[bool]]): Row-major occupancy; `cells[y][x]` is True
            when the cell is covered.
    """

    def __init__(self, cols: int, rows: int):
        self.cols = cols
        self.rows = rows
        self.cells: list[list[bool]] = [[False] * cols for _ in range(rows)]

    @property
    def bounds(self) -> GridBounds:
        return GridBounds(self.cols, self.rows)

    def _fill(self, x: int, y: int, w: int, h: int, value: bool) -> None:
        # Clip to the grid; cells outside are silently ignored
        for row in range(max(y, 0), min(y + h, self.rows)):
            line = self.cells[row]
            for col in range(max(x, 0), min(x + w, self.cols)):
                line[col] = value

    def mark(self, x: int, y: int, w: int, h: int) -> None:
        """Marks a rectangle of cells as occupied."""
        self._fill(x, y, w, h, True)

    def clear(self, x: int, y: int, w: int, h: int) -> None:
        """Marks a rectangle of cells as free."""
        self._fill(x, y, w, h, False)

    def mark_zone(self, zone: GridZone | GridRect) -> None:
        self.mark(zone.x, zone.y, zone.w, zone.h)

    def clear_zone(self, zone: GridZone | GridRect) -> None:
        self.clear(zone.x, zone.y, zone.w, zone.h)

    def is_occupied(self, x: int, y: int) -> bool:
        """Returns True for covered cells. Cells outside the grid count as free."""
        if 0 <= y < self.rows and 0 <= x < self.cols:
            return self.cells[y][x]
        return False

    def copy(self) -> "OccupancyGrid":
        clone = OccupancyGrid.__new__(OccupancyGrid)
        clone.cols = self.cols
        clone.rows = self.rows
        clone.cells = [line[:] for line in self.cells]
        return clone

    def free_cells(self, row_limit: int | None = None) -> int:
        """Counts free cells, optionally only in the rows above `row_limit`."""
        limit = self.rows if row_limit is None else min(max(row_limit, 0), self.rows)
        return sum(line.count(False) for line in self.cells[:limit])

    def to_ascii(self) -> str:
        """Renders the grid as text, `#` for occupied and `.` for free cells."""
        return "\n".join("".join("#" if cell else "." for cell in line) for line in self.cells)


def create_occupancy_grid(
    layout: Iterable[GridRect],
    bounds: GridBounds,
    exclude_id: str | None = None,
) -> OccupancyGrid:
    """Builds an occupancy grid from a layout.

    Args:
        layout (Iterable[GridRect]): Rects to mark as occupied.
        bounds (GridBounds): Grid dimensions.
        exclude_id (str | None): Rect id to leave out, so a rect can be tested
            against everyone else.

    Returns:
        OccupancyGrid: Grid with every covered cell marked True.

    Examples:
        >>> grid = create_occupancy_grid([GridRect("A", 0, 0, 2, 1)], GridBounds(3, 2))
        >>> print(grid.to_ascii())
        ##.
        ...
    """
    grid = OccupancyGrid(bounds.cols, bounds.max_rows)
    for rect in layout:
        if rect.id == exclude_id:
            continue
        grid.mark_zone(rect)
    return grid
