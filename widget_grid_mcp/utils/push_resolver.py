"""
Push resolution for dropping a rect onto occupied cells.

When a desired zone overlaps existing rects, each overlapping rect is
translated rigidly out of the way. The work happens on a working copy of the
layout and is only returned if every overlapping rect finds a new spot.
"""

from dataclasses import replace
import logging

from widget_grid_mcp.utils.grid_types import (
    FailureReason,
    GridBounds,
    GridRect,
    GridZone,
    PushResult,
)
from widget_grid_mcp.utils.occupancy import create_occupancy_grid
from widget_grid_mcp.utils.placement import can_fit_at

logger = logging.getLogger(__name__)


def _push_directions(zone: GridZone, rect: GridRect) -> list[tuple[str, int, int]]:
    # Trial order: right, down, left, up
    return [
        ("right", zone.w, 0),
        ("down", 0, zone.h),
        ("left", -rect.w, 0),
        ("up", 0, -rect.h),
    ]


def try_push_in_direction(
    layout: list[GridRect],
    rect_id: str,
    dx: int,
    dy: int,
    avoid_zone: GridZone,
    bounds: GridBounds,
    exclude_id: str | None = None,
) -> list[GridRect] | None:
    """Translates one rect by (dx, dy) if the destination is free.

    The destination must lie in bounds, stay clear of `avoid_zone`, and not
    cover any other rect in `layout` (apart from `exclude_id`).

    Returns:
        list[GridRect] | None: New layout with the rect moved, or None.
    """
    rect = next((r for r in layout if r.id == rect_id), None)
    if rect is None:
        return None

    new_x = rect.x + dx
    new_y = rect.y + dy
    if not bounds.contains(new_x, new_y, rect.w, rect.h):
        return None

    if GridZone(new_x, new_y, rect.w, rect.h).overlaps_with(avoid_zone):
        return None

    others = [r for r in layout if r.id != rect_id and r.id != exclude_id]
    grid = create_occupancy_grid(others, bounds)
    grid.mark_zone(avoid_zone)

    if not can_fit_at(grid, new_x, new_y, rect.w, rect.h):
        return None

    return [replace(r, x=new_x, y=new_y) if r.id == rect_id else r for r in layout]


def calculate_push(
    layout: list[GridRect],
    x: int,
    y: int,
    w: int,
    h: int,
    bounds: GridBounds,
    exclude_id: str | None = None,
) -> PushResult:
    """Clears a zone by pushing the rects that overlap it.

    Each overlapping rect, in layout order, tries the directions right (by the
    zone's width), down (by the zone's height), left (by its own width) and
    up (by its own height). Rects already pushed in this call are considered
    at their new positions. If any rect cannot move, nothing is applied.

    Args:
        layout (list[GridRect]): Current layout.
        x (int): Left column of the desired zone.
        y (int): Top row of the desired zone.
        w (int): Width of the desired zone.
        h (int): Height of the desired zone.
        bounds (GridBounds): Grid dimensions.
        exclude_id (str | None): Rect to ignore, typically the one being
            dragged into the zone.

    Returns:
        PushResult: `can_push` with the new layout and pushed ids, or the
        untouched input on failure.
    """
    if w < 1 or h < 1 or not bounds.contains(x, y, w, h):
        return PushResult(False, layout, [], FailureReason.OUT_OF_BOUNDS)

    zone = GridZone(x, y, w, h)
    overlapping = [r for r in layout if r.id != exclude_id and r.overlaps_with(zone)]

    if not overlapping:
        return PushResult(True, layout, [])

    working = list(layout)
    pushed_ids = []

    for rect in overlapping:
        for name, dx, dy in _push_directions(zone, rect):
            result = try_push_in_direction(working, rect.id, dx, dy, zone, bounds, exclude_id)
            if result is not None:
                logger.debug(f"Pushed {rect.id} {name} by ({dx}, {dy})")
                working = result
                pushed_ids.append(rect.id)
                break
        else:
            logger.info(f"Push into ({x}, {y}, {w}, {h}) failed: {rect.id} cannot move")
            return PushResult(False, layout, [], FailureReason.INFEASIBLE)

    return PushResult(True, working, pushed_ids)
