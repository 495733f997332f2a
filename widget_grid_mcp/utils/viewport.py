"""
Viewport reconciliation and layout validation.

Helpers that keep a layout inside the grid bounds: clamping single
positions, re-seating a whole layout after a batch move, and checking the
no-overlap and in-bounds invariants every operation must preserve.
"""

from dataclasses import replace
import logging

from widget_grid_mcp.utils.grid_types import GridBounds, GridRect
from widget_grid_mcp.utils.occupancy import OccupancyGrid
from widget_grid_mcp.utils.placement import can_fit_at, find_best_near, find_first_fit

logger = logging.getLogger(__name__)


def clamp_to_viewport(x: int, y: int, w: int, h: int, bounds: GridBounds) -> tuple[int, int]:
    """Clamps a position so a rect of size (w, h) stays inside the grid.

    Rects larger than the grid are pinned to the top-left edge.

    Examples:
        >>> clamp_to_viewport(10, -2, 4, 4, GridBounds(12, 10))
        (8, 0)
    """
    clamped_x = max(x, 0)
    clamped_y = max(y, 0)
    if clamped_x + w > bounds.cols:
        clamped_x = max(0, bounds.cols - w)
    if clamped_y + h > bounds.max_rows:
        clamped_y = max(0, bounds.max_rows - h)
    return clamped_x, clamped_y


def adjust_layout_to_viewport(layout: list[GridRect], bounds: GridBounds) -> list[GridRect] | None:
    """Re-seats every rect inside the grid without overlap.

    Rects are visited in reading order (top-left first). Each is clamped into
    bounds and kept there if free; otherwise the nearest free position is
    used, then any free position. A layout that is already valid comes back
    unchanged.

    Args:
        layout (list[GridRect]): Rects to reconcile.
        bounds (GridBounds): Grid dimensions.

    Returns:
        list[GridRect] | None: The adjusted layout in the input order, or None
        when some rect cannot be placed anywhere.
    """
    grid = OccupancyGrid(bounds.cols, bounds.max_rows)
    placed: dict[str, GridRect] = {}

    for rect in sorted(layout, key=lambda r: (r.y, r.x)):
        x, y = clamp_to_viewport(rect.x, rect.y, rect.w, rect.h, bounds)

        if not can_fit_at(grid, x, y, rect.w, rect.h):
            position = find_best_near(grid, x, y, rect.w, rect.h)
            if position is None:
                logger.info(f"Viewport adjustment failed: no room for {rect.id}")
                return None
            x, y = position

        grid.mark(x, y, rect.w, rect.h)
        placed[rect.id] = rect if (x, y) == (rect.x, rect.y) else replace(rect, x=x, y=y)

    return [placed[rect.id] for rect in layout]


def validate_layout(layout: list[GridRect], bounds: GridBounds) -> list[str]:
    """Lists every invariant violation in a layout.

    Checks duplicate ids, non-positive extents, cells outside the grid, and
    pairwise overlaps.

    Complexity:
        O(N^2) in the number of rects.

    Returns:
        list[str]: Human-readable issues; empty when the layout is valid.
    """
    issues = []
    seen = set()

    for rect in layout:
        if rect.id in seen:
            issues.append(f"Duplicate id: {rect.id}")
        seen.add(rect.id)

        if rect.w < 1 or rect.h < 1:
            issues.append(f"{rect.id} has a non-positive size {rect.w}x{rect.h}")
        elif not bounds.contains(rect.x, rect.y, rect.w, rect.h):
            issues.append(
                f"{rect.id} at ({rect.x}, {rect.y}, {rect.w}, {rect.h}) lies outside "
                f"the {bounds.cols}x{bounds.max_rows} grid"
            )

    for index, first in enumerate(layout):
        for second in layout[index + 1 :]:
            if first.overlaps_with(second):
                issues.append(f"{first.id} overlaps {second.id}")

    return issues


def is_valid_layout(layout: list[GridRect], bounds: GridBounds) -> bool:
    return not validate_layout(layout, bounds)


def layout_extent(layout: list[GridRect]) -> int:
    """Total vertical extent, `max(y + h)`, of a layout (0 when empty)."""
    return max((rect.bottom for rect in layout), default=0)


def calculate_max_dimensions(
    layout: list[GridRect], bounds: GridBounds
) -> dict[str, tuple[int, int]]:
    """Computes how far each rect could grow without touching its neighbours.

    For every rect, looks for the nearest blocking rect on each side (one
    that shares rows for left/right, or columns for above/below) and adds the
    free gaps to the current size. The interactive layer uses the result as
    resize-handle limits.

    Returns:
        dict[str, tuple[int, int]]: `{id: (max_w, max_h)}`, never smaller than
        the current size.
    """
    limits = {}

    for rect in layout:
        left_boundary = 0
        right_boundary = bounds.cols
        top_boundary = 0
        bottom_boundary = bounds.max_rows

        for other in layout:
            if other.id == rect.id:
                continue
            shares_rows = not (other.y >= rect.bottom or other.bottom <= rect.y)
            shares_cols = not (other.x >= rect.right or other.right <= rect.x)

            if shares_rows and other.right <= rect.x:
                left_boundary = max(left_boundary, other.right)
            if shares_rows and other.x >= rect.right:
                right_boundary = min(right_boundary, other.x)
            if shares_cols and other.bottom <= rect.y:
                top_boundary = max(top_boundary, other.bottom)
            if shares_cols and other.y >= rect.bottom:
                bottom_boundary = min(bottom_boundary, other.y)

        max_w = rect.w + (rect.x - left_boundary) + (right_boundary - rect.right)
        max_h = rect.h + (rect.y - top_boundary) + (bottom_boundary - rect.bottom)
        limits[rect.id] = (max(rect.w, max_w), max(rect.h, max_h))

    return limits
