"""
Placement queries over an occupancy grid.

Answers "does a rect of this size fit here?" and searches the grid for
valid positions. All scans are row-major: top to bottom, then left to right,
so ties always favor the smaller `y`, then the smaller `x`.
"""

from widget_grid_mcp.utils.grid_types import GridRect, GridZone
from widget_grid_mcp.utils.occupancy import OccupancyGrid


def can_fit_at(grid: OccupancyGrid, x: int, y: int, w: int, h: int) -> bool:
    """Checks whether a rect fits at a position.

    Args:
        grid (OccupancyGrid): Current occupancy.
        x (int): Left column.
        y (int): Top row.
        w (int): Width in cells.
        h (int): Height in cells.

    Returns:
        bool: True if the rect lies inside the grid and covers no occupied cell.
    """
    if x < 0 or y < 0 or x + w > grid.cols or y + h > grid.rows:
        return False

    return not any(any(grid.cells[row][x : x + w]) for row in range(y, y + h))


def find_first_fit(grid: OccupancyGrid, w: int, h: int) -> tuple[int, int] | None:
    """Finds the first position where a rect of the given size fits.

    Returns:
        tuple[int, int] | None: `(x, y)` of the first fit in row-major order,
        or None when the rect fits nowhere.
    """
    for y in range(grid.rows - h + 1):
        for x in range(grid.cols - w + 1):
            if can_fit_at(grid, x, y, w, h):
                return x, y
    return None


def find_all_fits(grid: OccupancyGrid, w: int, h: int) -> list[GridZone]:
    """Collects every position where a rect of the given size fits.

    Used for drop-zone highlighting.
    """
    positions = []
    for y in range(grid.rows - h + 1):
        for x in range(grid.cols - w + 1):
            if can_fit_at(grid, x, y, w, h):
                positions.append(GridZone(x, y, w, h))
    return positions


def find_best_near(
    grid: OccupancyGrid, target_x: int, target_y: int, w: int, h: int
) -> tuple[int, int] | None:
    """Finds the fitting position closest to a target cell.

    The exact target is tried first. Then square rings of increasing
    Chebyshev radius are searched around it; within a ring, positions are
    visited row by row from the top, left to right. The first fit at the
    smallest radius wins. If no ring yields a fit within
    `max(cols, rows)` rings, falls back to `find_first_fit`.

    Complexity:
        O(R^2 * w * h) in the worst case, where R is `max(cols, rows)`.

    Args:
        grid (OccupancyGrid): Current occupancy.
        target_x (int): Preferred left column.
        target_y (int): Preferred top row.
        w (int): Width in cells.
        h (int): Height in cells.

    Returns:
        tuple[int, int] | None: `(x, y)` of the chosen position, or None if
        the rect fits nowhere on the grid.
    """
    if can_fit_at(grid, target_x, target_y, w, h):
        return target_x, target_y

    max_distance = max(grid.cols, grid.rows)
    for distance in range(1, max_distance):
        for dy in range(-distance, distance + 1):
            for dx in range(-distance, distance + 1):
                # Only the perimeter of the ring
                if abs(dx) != distance and abs(dy) != distance:
                    continue
                x = target_x + dx
                y = target_y + dy
                if can_fit_at(grid, x, y, w, h):
                    return x, y

    return find_first_fit(grid, w, h)


def find_empty_regions(grid: OccupancyGrid) -> list[GridZone]:
    """Splits the free cells into rectangular regions.

    Scans row-major; at each unvisited free cell takes the longest free run
    to the right, then extends it downward while the whole run stays free.
    Regions do not overlap and together cover every free cell.
    """
    visited = [[False] * grid.cols for _ in range(grid.rows)]
    regions = []

    for y in range(grid.rows):
        for x in range(grid.cols):
            if grid.cells[y][x] or visited[y][x]:
                continue

            width = 0
            while x + width < grid.cols and not grid.cells[y][x + width] and not visited[y][x + width]:
                width += 1

            height = 0
            for row in range(y, grid.rows):
                span = range(x, x + width)
                if any(grid.cells[row][col] or visited[row][col] for col in span):
                    break
                height += 1

            for row in range(y, y + height):
                for col in range(x, x + width):
                    visited[row][col] = True

            regions.append(GridZone(x, y, width, height))

    return regions


def get_rect_at(
    layout: list[GridRect], x: int, y: int, exclude_id: str | None = None
) -> GridRect | None:
    """Returns the rect covering a cell, if any."""
    for rect in layout:
        if rect.id == exclude_id:
            continue
        if rect.x <= x < rect.right and rect.y <= y < rect.bottom:
            return rect
    return None
